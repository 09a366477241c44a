"""Pytest configuration for kswitch (src layout)."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest
import structlog


def pytest_configure() -> None:
    project_root = Path(__file__).resolve().parents[1]
    src_root = project_root / "src"
    sys.path.insert(0, str(src_root))


@pytest.fixture(autouse=True)
def _reset_structlog():
    yield
    structlog.reset_defaults()


@pytest.fixture
def boot_dir(tmp_path: Path):
    """Create a boot directory holding the given file names."""

    def make(*names: str) -> Path:
        path = tmp_path / "boot"
        path.mkdir(exist_ok=True)
        for name in names:
            (path / name).write_text("")
        return path

    return make
