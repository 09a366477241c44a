"""
Boot artifacts - Kernel discovery and companion file lookup.

Kernel images are `<boot_dir>/<image_prefix><version>`; their initial
ramdisks are any file starting with one of the initrd prefixes whose name
contains the version.
"""

from __future__ import annotations

import os
import subprocess
from pathlib import Path
from typing import Sequence

import structlog

from kswitch.errors import (
    BootDirectoryMissing,
    BootDirectoryUnreadable,
    CmdlineUnreadable,
    InitrdNotFound,
    NoKernelsFound,
)

logger = structlog.get_logger()


class KernelCatalog:
    """Installed kernel versions found in the boot directory."""

    def __init__(self, boot_dir: Path, image_prefix: str = "vmlinuz-") -> None:
        self.boot_dir = Path(boot_dir)
        self.image_prefix = image_prefix

    def discover(self) -> tuple[str, ...]:
        """
        Return the distinct kernel versions in raw string order.

        Raises BootDirectoryMissing, BootDirectoryUnreadable or NoKernelsFound.
        """
        if not self.boot_dir.exists():
            raise BootDirectoryMissing(self.boot_dir)

        try:
            names = os.listdir(self.boot_dir)
        except OSError as exc:
            raise BootDirectoryUnreadable(self.boot_dir, exc.strerror or str(exc)) from exc

        versions = {
            name[len(self.image_prefix):]
            for name in names
            if name.startswith(self.image_prefix)
        }
        # Plain string sort: "5.10.0" < "5.9.0"
        catalog = tuple(sorted(versions))
        if not catalog:
            raise NoKernelsFound(self.boot_dir)

        logger.debug("kernels_discovered", boot_dir=str(self.boot_dir), versions=list(catalog))
        return catalog

    def image_path(self, version: str) -> Path:
        return self.boot_dir / f"{self.image_prefix}{version}"


class InitrdResolver:
    """Finds the initrd/initramfs paired with a kernel version."""

    def __init__(
        self,
        boot_dir: Path,
        prefixes: Sequence[str] = ("initrd.img-", "initramfs-"),
    ) -> None:
        self.boot_dir = Path(boot_dir)
        self.prefixes = tuple(prefixes)

    def resolve(self, version: str) -> Path:
        """
        Return the first directory entry matching `version`.

        The version is matched as a substring, so "5.1.0" also matches
        "initrd.img-5.1.0-rc1". Entries are visited in directory order.
        """
        try:
            with os.scandir(self.boot_dir) as entries:
                for entry in entries:
                    if entry.name.startswith(self.prefixes) and version in entry.name:
                        return self.boot_dir / entry.name
        except OSError as exc:
            raise InitrdNotFound(version) from exc
        raise InitrdNotFound(version)


def read_cmdline(path: Path = Path("/proc/cmdline")) -> str:
    """Read the running kernel's boot parameters."""
    try:
        return Path(path).read_text().strip()
    except (OSError, UnicodeDecodeError) as exc:
        raise CmdlineUnreadable(Path(path), str(exc)) from exc


def current_kernel_release() -> str | None:
    """Release of the running kernel (`uname -r`), or None if unavailable."""
    try:
        result = subprocess.run(
            ["uname", "-r"],
            capture_output=True,
            text=True,
        )
    except (OSError, UnicodeDecodeError) as exc:
        logger.debug("current_kernel_lookup_failed", error=str(exc))
        return None

    if result.returncode != 0:
        logger.debug("current_kernel_lookup_failed", returncode=result.returncode)
        return None
    return result.stdout.strip() or None
