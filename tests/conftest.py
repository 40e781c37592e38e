"""Pytest configuration and shared fixtures for ccbuild tests."""

import os
from pathlib import Path
from typing import Callable

import pytest


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep the developer's CCBUILD_* and toolchain settings out of tests."""
    for name in ("CCBUILD_PROJECT_DIR", "CCBUILD_PROFILE", "CCBUILD_BUILD_ROOT", "CC", "CXX", "NVCC", "AR"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def touch() -> Callable[..., Path]:
    """Return a helper that writes a file and pins its mtime.

    Usage:
        touch(path, "int x;", mtime=1_600_000_000)
    """

    def _touch(path: Path, content: str = "", mtime: float = 1_600_000_000.0) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        os.utime(path, (mtime, mtime))
        return path

    return _touch


@pytest.fixture
def project(tmp_path):
    """Create a project layout with sources, include dirs and a build root."""
    root = tmp_path / "proj"
    src = root / "src"
    include = root / "include"
    build_root = root / "target" / "release" / "build"
    for d in (src, include, build_root):
        d.mkdir(parents=True)

    return {
        "root": root,
        "src": src,
        "include": include,
        "build_root": build_root,
    }
