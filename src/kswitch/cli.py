"""
kswitch CLI - Pick an installed kernel and kexec into it.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click
import structlog
from rich.console import Console
from rich.table import Table

from kswitch import __version__
from kswitch.boot import InitrdResolver, KernelCatalog, current_kernel_release
from kswitch.config import SwitchConfig
from kswitch.errors import DiscoveryError, InitrdNotFound
from kswitch.kexec import KexecClient
from kswitch.observability import configure_logging

console = Console()
logger = structlog.get_logger()


def _load_config(ctx: click.Context, boot_dir: Path | None) -> SwitchConfig:
    config = SwitchConfig.load(ctx.obj["config_path"]).override(boot_dir=boot_dir)
    configure_logging(config.log_file, "debug" if ctx.obj["verbose"] else config.log_level)
    return config


def _discover(config: SwitchConfig) -> tuple[str, ...]:
    try:
        return KernelCatalog(config.boot_dir, config.image_prefix).discover()
    except DiscoveryError as exc:
        logger.error("discovery_failed", error=str(exc))
        console.print(f"[red]Error:[/red] {exc}")
        sys.exit(1)


@click.group(invoke_without_command=True)
@click.version_option(version=__version__)
@click.option("--config", "-c", type=Path, help="Path to config file")
@click.option("--verbose", "-v", is_flag=True, help="Debug-level logging")
@click.pass_context
def main(ctx: click.Context, config: Path | None, verbose: bool) -> None:
    """kswitch - Select, stage and kexec into an installed kernel."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config
    ctx.obj["verbose"] = verbose
    if ctx.invoked_subcommand is None:
        ctx.invoke(run)


@main.command()
@click.option("--boot-dir", type=Path, help="Directory holding kernel images")
@click.pass_context
def run(ctx: click.Context, boot_dir: Path | None) -> None:
    """Interactive kernel selector."""
    from kswitch.session.app import SelectorApp
    from kswitch.session.machine import SelectionStateMachine
    from kswitch.session.terminal import TerminalSession

    config = _load_config(ctx, boot_dir)
    catalog = _discover(config)
    kexec = KexecClient.from_config(config)
    machine = SelectionStateMachine(catalog, stager=kexec, switcher=kexec)

    app = SelectorApp(
        machine,
        TerminalSession(),
        current=current_kernel_release(),
        console=console,
    )
    try:
        app.run()
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted[/yellow]")
        sys.exit(130)


@main.command(name="list")
@click.option("--boot-dir", type=Path, help="Directory holding kernel images")
@click.option("--json", "as_json", is_flag=True, help="JSON output")
@click.pass_context
def list_kernels(ctx: click.Context, boot_dir: Path | None, as_json: bool) -> None:
    """List installed kernels and their initrds."""
    config = _load_config(ctx, boot_dir)
    catalog = _discover(config)
    current = current_kernel_release()
    resolver = InitrdResolver(config.boot_dir, config.initrd_prefixes)
    images = KernelCatalog(config.boot_dir, config.image_prefix)

    rows = []
    for version in catalog:
        try:
            initrd: str | None = str(resolver.resolve(version))
        except InitrdNotFound:
            initrd = None
        rows.append(
            {
                "version": version,
                "image": str(images.image_path(version)),
                "initrd": initrd,
                "current": version == current,
            }
        )

    if as_json:
        click.echo(json.dumps(rows, indent=2))
        return

    table = Table(title="Installed Kernels")
    table.add_column("Version", style="cyan")
    table.add_column("Image")
    table.add_column("Initrd")
    table.add_column("Current", justify="center")
    for row in rows:
        table.add_row(
            row["version"],
            row["image"],
            row["initrd"] or "[dim]-[/dim]",
            "[green]✓[/green]" if row["current"] else "",
        )
    console.print(table)


if __name__ == "__main__":
    main()
