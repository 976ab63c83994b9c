"""Selection of the markdown files to load."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path

from .constants import ENV_FILE_DIR, ENV_FILE_PATH, MARKDOWN_GLOB
from .errors import NoMarkdownFilesError

logger = logging.getLogger(__name__)


def scan_markdown_files(directory: Path) -> list[str]:
    return sorted(str(path) for path in directory.glob(MARKDOWN_GLOB) if path.is_file())


def resolve_markdown_files(
    *,
    file_flag: str | None,
    environ: Mapping[str, str],
    cwd: Path,
) -> list[str]:
    """Pick the markdown files to load.

    Precedence: explicit --file, then every markdown file in $MDX_FILE_DIR,
    then the single file $MDX_FILE_PATH, then every markdown file in the
    current directory.
    """
    if file_flag:
        return [file_flag]

    file_dir = environ.get(ENV_FILE_DIR)
    if file_dir:
        files = scan_markdown_files(Path(file_dir))
        if not files:
            raise NoMarkdownFilesError(f"No markdown files found in {ENV_FILE_DIR}: {file_dir}")
        logger.debug("Using markdown files from %s: %s", ENV_FILE_DIR, files)
        return files

    file_path = environ.get(ENV_FILE_PATH)
    if file_path:
        return [file_path]

    files = [str(Path(path).relative_to(cwd)) for path in scan_markdown_files(cwd)]
    if not files:
        raise NoMarkdownFilesError("No markdown files found in the current directory.")
    return files
