"""Test configuration for mathparse."""

from pathlib import Path

import pytest

from mathparse.expr import FunctionTable, default_environment


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    """Run every test from an empty directory so no stray mathparse.toml is found."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def functions():
    return FunctionTable.builtin()


@pytest.fixture
def env():
    return default_environment()


@pytest.fixture
def write_config(tmp_path):
    """Write a mathparse.toml into ``tmp_path`` and return its path."""

    def _write(*lines: str) -> Path:
        path = tmp_path / "mathparse.toml"
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path

    return _write
