"""
Error hierarchy for kswitch.

Discovery errors are fatal at startup. Staging and switch errors are surfaced
to the operator and the selector returns to browsing.
"""

from __future__ import annotations

from pathlib import Path


class KswitchError(Exception):
    """Base exception for kswitch errors."""

    pass


class DiscoveryError(KswitchError):
    """No usable kernel catalog could be built."""

    pass


class BootDirectoryMissing(DiscoveryError):
    """The boot directory does not exist."""

    def __init__(self, boot_dir: Path) -> None:
        self.boot_dir = boot_dir
        super().__init__(f"Boot directory {boot_dir} does not exist")


class BootDirectoryUnreadable(DiscoveryError):
    """The boot directory exists but cannot be listed."""

    def __init__(self, boot_dir: Path, reason: str) -> None:
        self.boot_dir = boot_dir
        self.reason = reason
        super().__init__(f"Cannot read boot directory {boot_dir}: {reason}")


class NoKernelsFound(DiscoveryError):
    """The boot directory holds no kernel images."""

    def __init__(self, boot_dir: Path | None = None) -> None:
        self.boot_dir = boot_dir
        where = f" in {boot_dir} directory" if boot_dir is not None else ""
        super().__init__(f"No kernel versions found{where}")


class InitrdNotFound(KswitchError):
    """No initrd/initramfs file matches a kernel version."""

    def __init__(self, version: str) -> None:
        self.version = version
        super().__init__(f"No initrd file found for version {version}")


class CmdlineUnreadable(KswitchError):
    """The active boot command line could not be read."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        super().__init__(f"Cannot read boot command line from {path}: {reason}")


class CommandFailed(KswitchError):
    """A privileged kexec invocation exited non-zero or could not start."""

    verb = "kexec"

    def __init__(self, stderr: str, returncode: int | None = None) -> None:
        self.stderr = stderr
        self.returncode = returncode
        super().__init__(f"{self.verb} failed: {stderr.strip()}")


class StagingError(KswitchError):
    """Loading a kernel as the pending kexec target failed."""

    pass


class StagingInitrdNotFound(StagingError):
    pass


class StagingCmdlineUnreadable(StagingError):
    pass


class StagingCommandFailed(StagingError, CommandFailed):
    verb = "kexec load"


class SwitchError(KswitchError):
    """Executing the staged kernel failed."""

    pass


class SwitchCommandFailed(SwitchError, CommandFailed):
    verb = "kexec execute"
