"""User-facing text rendering."""

from __future__ import annotations

from collections.abc import Iterable

from .constants import ERROR_PREFIX
from .models import CommandBlock


def render_error(message: str) -> str:
    return f"{ERROR_PREFIX} {message}"


def render_usage() -> str:
    return "Usage: mdx [--file <markdown-file>] <command> [args ...]"


def render_command_rows(commands: Iterable[CommandBlock]) -> list[str]:
    rows: list[str] = []
    for command in sorted(commands, key=lambda c: c.name):
        dependencies = " ".join(command.dependencies) if command.dependencies else "-"
        rows.append(
            f"{command.name}\t{dependencies}\t{len(command.code_blocks)} block(s)\t{command.source_file}"
        )
    return rows
