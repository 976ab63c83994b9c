"""Pytest configuration and fixtures for mdx tests."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

import pytest

from mdx.launchers import LauncherRegistry
from mdx.logging_utils import StructuredTextFormatter
from mdx.models import LauncherEntry

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES_DIR


@pytest.fixture
def sh_launchers() -> LauncherRegistry:
    sh_path = shutil.which("sh")
    if sh_path is None:
        pytest.skip("sh is not available on PATH")
    entry = LauncherEntry(interpreter="sh", interpreter_path=sh_path, file_extension="sh")
    return LauncherRegistry({"sh": entry, "bash": entry})


@pytest.fixture
def write_markdown(tmp_path: Path):
    """Write a markdown document into tmp_path and return its path."""

    def _write(text: str, name: str = "runbook.md") -> Path:
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Drop the handlers setup_logging() installed during the test."""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in root.handlers[:]:
        if isinstance(handler.formatter, StructuredTextFormatter):
            root.removeHandler(handler)
    root.setLevel(level)
