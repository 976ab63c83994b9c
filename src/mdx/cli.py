"""CLI entry and startup wiring."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from .constants import APP_NAME, ENV_LOG_LEVEL
from .discovery import resolve_markdown_files
from .errors import MdxError
from .executor import ExecutionEngine
from .launchers import LauncherRegistry
from .logging_utils import setup_logging
from .parser import CommandTable
from .presenters import render_command_rows, render_error, render_usage

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    setup_logging(os.environ.get(ENV_LOG_LEVEL))
    logger.debug("%s started with parameters: %s", APP_NAME, argv if argv is not None else sys.argv[1:])

    if args.command is None and not args.list:
        print(render_error(render_usage()), file=sys.stderr)
        return 1

    try:
        launchers = LauncherRegistry.build()
        markdown_files = resolve_markdown_files(
            file_flag=args.file,
            environ=os.environ,
            cwd=Path.cwd(),
        )
        commands = CommandTable()
        commands.load_files(markdown_files)

        if args.list:
            for row in render_command_rows(commands.values()):
                print(row)
            return 0

        ExecutionEngine(commands, launchers).run(args.command, args.args)
    except (MdxError, OSError) as exc:
        print(render_error(str(exc)), file=sys.stderr)
        return 1

    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Run the code blocks of a markdown runbook as commands.",
    )
    parser.add_argument(
        "--file",
        "-f",
        required=False,
        help="Markdown file to load (default: $MDX_FILE_DIR, $MDX_FILE_PATH, or *.md here).",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="List the commands found in the markdown files and exit.",
    )
    parser.add_argument("command", nargs="?", help="Name of the command to run.")
    parser.add_argument(
        "args",
        nargs=argparse.REMAINDER,
        help="Positional arguments bound to {{.arg1}}, {{.arg2}}, ... in the first code block.",
    )
    return parser
