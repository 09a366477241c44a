"""
kexec Client - Privileged stage ("load") and commit ("execute") calls.

Both verbs run `kexec` through the configured privilege helper and block
until it exits. There is no timeout: a running kexec cannot be aborted.
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path

import structlog

from kswitch.boot import InitrdResolver, KernelCatalog, read_cmdline
from kswitch.config import SwitchConfig
from kswitch.errors import (
    CmdlineUnreadable,
    InitrdNotFound,
    StagingCmdlineUnreadable,
    StagingCommandFailed,
    StagingInitrdNotFound,
    SwitchCommandFailed,
)

logger = structlog.get_logger()


@dataclass(frozen=True)
class StagingRequest:
    """Kernel image, initrd and command line for one `kexec -l`."""

    image: Path
    initrd: Path
    cmdline: str

    def argv(self) -> list[str]:
        return [
            "-l",
            str(self.image),
            f"--initrd={self.initrd}",
            f"--command-line={self.cmdline}",
        ]


class KexecClient:
    """
    Stages and executes kernels with kexec.

    The staged target lives in the running kernel, not in this object:
    `load()` and `execute()` keep no local state.
    """

    def __init__(
        self,
        catalog: KernelCatalog,
        resolver: InitrdResolver,
        cmdline_path: Path = Path("/proc/cmdline"),
        command_prefix: list[str] | None = None,
    ) -> None:
        self.catalog = catalog
        self.resolver = resolver
        self.cmdline_path = Path(cmdline_path)
        self.command_prefix = list(command_prefix or ["sudo", "kexec"])

    @classmethod
    def from_config(cls, config: SwitchConfig) -> KexecClient:
        return cls(
            catalog=KernelCatalog(config.boot_dir, config.image_prefix),
            resolver=InitrdResolver(config.boot_dir, config.initrd_prefixes),
            cmdline_path=config.cmdline_path,
            command_prefix=config.privileged_prefix,
        )

    def build_request(self, version: str) -> StagingRequest:
        """Resolve the files and command line for staging `version`."""
        try:
            initrd = self.resolver.resolve(version)
        except InitrdNotFound as exc:
            raise StagingInitrdNotFound(str(exc)) from exc

        try:
            cmdline = read_cmdline(self.cmdline_path)
        except CmdlineUnreadable as exc:
            raise StagingCmdlineUnreadable(str(exc)) from exc

        return StagingRequest(
            image=self.catalog.image_path(version),
            initrd=initrd,
            cmdline=cmdline,
        )

    def load(self, version: str) -> StagingRequest:
        """Register `version` as the pending kexec target."""
        request = self.build_request(version)
        logger.info(
            "kexec_load",
            version=version,
            image=str(request.image),
            initrd=str(request.initrd),
        )

        result = self._run(request.argv(), StagingCommandFailed)
        if result.returncode != 0:
            logger.error("kexec_load_failed", version=version, returncode=result.returncode)
            raise StagingCommandFailed(result.stderr, result.returncode)

        logger.info("kexec_loaded", version=version)
        return request

    def execute(self) -> None:
        """Jump into the staged kernel. Does not return on success."""
        logger.info("kexec_execute")

        result = self._run(["-e"], SwitchCommandFailed)
        if result.returncode != 0:
            logger.error("kexec_execute_failed", returncode=result.returncode)
            raise SwitchCommandFailed(result.stderr, result.returncode)

        logger.warning("kexec_execute_returned")

    def _run(
        self,
        args: list[str],
        error: type[StagingCommandFailed] | type[SwitchCommandFailed],
    ) -> subprocess.CompletedProcess[str]:
        cmd = [*self.command_prefix, *args]
        try:
            # kexec diagnostics may not be valid UTF-8
            return subprocess.run(cmd, capture_output=True, text=True, errors="replace")
        except OSError as exc:
            logger.error("kexec_spawn_failed", command=cmd[0], error=str(exc))
            raise error(str(exc)) from exc
