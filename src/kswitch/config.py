"""
kswitch Configuration - Boot layout and kexec invocation settings.

Loaded from YAML config file with environment variable override support.
The file is only ever read; kswitch never writes it.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Mapping

import yaml

DEFAULT_CONFIG_PATH = Path("~/.config/kswitch/config.yaml")

ENV_OVERRIDES = {
    "KSWITCH_BOOT_DIR": "boot_dir",
    "KSWITCH_PRIVILEGE_HELPER": "privilege_helper",
    "KSWITCH_KEXEC": "kexec_path",
    "KSWITCH_LOG_FILE": "log_file",
}

_PATH_FIELDS = {"boot_dir", "cmdline_path", "log_file"}


def _load_yaml(path: Path) -> dict[str, Any]:
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    return dict(data) if isinstance(data, dict) else {}


@dataclass
class SwitchConfig:
    """Main kswitch configuration."""

    # Boot artifact layout
    boot_dir: Path = field(default_factory=lambda: Path("/boot"))
    cmdline_path: Path = field(default_factory=lambda: Path("/proc/cmdline"))
    image_prefix: str = "vmlinuz-"
    initrd_prefixes: list[str] = field(
        default_factory=lambda: ["initrd.img-", "initramfs-"]
    )

    # Privileged invocation; an empty helper runs kexec directly
    kexec_path: str = "kexec"
    privilege_helper: str = "sudo"

    # Logging
    log_file: Path = field(default_factory=lambda: Path("~/.cache/kswitch/kswitch.log"))
    log_level: str = "info"

    def __post_init__(self) -> None:
        for name in _PATH_FIELDS:
            value = getattr(self, name)
            setattr(self, name, Path(value).expanduser())
        if isinstance(self.initrd_prefixes, str):
            self.initrd_prefixes = [self.initrd_prefixes]
        self.initrd_prefixes = [str(p) for p in self.initrd_prefixes]

    @property
    def privileged_prefix(self) -> list[str]:
        """Argument vector prefix for a privileged kexec call."""
        helper = self.privilege_helper.split() if self.privilege_helper else []
        return [*helper, self.kexec_path]

    @classmethod
    def load(cls, config_path: Path | None = None, env: Mapping[str, str] | None = None) -> SwitchConfig:
        """Load configuration from YAML file, then apply environment overrides."""
        config_path = Path(config_path or DEFAULT_CONFIG_PATH).expanduser()
        data = _load_yaml(config_path) if config_path.exists() else {}
        config = cls.from_dict(data)
        return config.with_env(os.environ if env is None else env)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SwitchConfig:
        """Create config from dictionary, ignoring unknown keys."""
        allowed = {f.name for f in fields(cls)}
        kwargs = {k: v for k, v in (data or {}).items() if k in allowed and v is not None}
        return cls(**kwargs)

    def with_env(self, env: Mapping[str, str]) -> SwitchConfig:
        overrides = {
            attr: env[var] for var, attr in ENV_OVERRIDES.items() if var in env
        }
        return self.override(**overrides)

    def override(self, **changes: Any) -> SwitchConfig:
        """Return a copy with the non-None `changes` applied."""
        changes = {k: v for k, v in changes.items() if v is not None}
        if not changes:
            return self
        return replace(self, **changes)
