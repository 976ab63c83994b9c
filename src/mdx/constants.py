"""Literal constants used by mdx."""

APP_NAME = "mdx"

ENV_LOG_LEVEL = "MDX_LOG_LEVEL"
ENV_FILE_DIR = "MDX_FILE_DIR"
ENV_FILE_PATH = "MDX_FILE_PATH"

MARKDOWN_GLOB = "*.md"

TEMP_FILE_PREFIX = "mdx-"
SCRIPT_FILE_MODE = 0o755
SHEBANG_PREFIX = "#!"
ENV_SHEBANG_TEMPLATE = "#!/usr/bin/env {interpreter}\n"

ERROR_PREFIX = "ERROR:"
