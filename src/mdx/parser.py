"""Markdown command parsing.

A command is declared by an ATX heading that contains a link-shaped fragment:

    ## Build the docs [docs](clean deps)

declares the command ``docs`` depending on ``clean`` and ``deps``. The fenced
code blocks that follow the heading, up to the next heading, are the body of
the command.

markdown-it does not parse links inside headings into anything we can use, so
a dedicated block rule runs before the stock ``heading`` rule and turns such
lines into ``command_heading`` tokens. Headings without the fragment are left
to the stock rule and never declare a command.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path

from markdown_it import MarkdownIt
from markdown_it.rules_block import StateBlock
from markdown_it.token import Token

from .errors import DuplicateCommandError, NoInfostringOrShebangError
from .logging_utils import log_event
from .models import CodeBlock, CommandBlock

logger = logging.getLogger(__name__)

COMMAND_HEADING_TOKEN = "command_heading"

_ATX_HEADING_RE = re.compile(r"^(#{1,6})(?:[ \t]|$)")
_COMMAND_FRAGMENT_RE = re.compile(r"\[([^\]]+)\]\(([^)]*)\)")


def extract_command_and_deps(heading: str) -> tuple[str, list[str]] | None:
    """Extract the command name and dependencies from heading text.

    ``[name](dep1 dep2 dep3)`` yields ``("name", ["dep1", "dep2", "dep3"])``;
    ``[name]()`` yields ``("name", [])``. Returns None when the heading holds
    no fragment or the name is blank.
    """
    match = _COMMAND_FRAGMENT_RE.search(heading)
    if match is None:
        return None

    name = match.group(1).strip()
    if not name:
        return None
    return name, match.group(2).split()


def _command_heading_rule(state: StateBlock, startLine: int, endLine: int, silent: bool) -> bool:
    # Indented by 4+ spaces means an indented code block, not a heading.
    if state.sCount[startLine] - state.blkIndent >= 4:
        return False

    pos = state.bMarks[startLine] + state.tShift[startLine]
    maximum = state.eMarks[startLine]
    line = state.src[pos:maximum]

    heading_match = _ATX_HEADING_RE.match(line)
    if heading_match is None:
        return False

    parsed = extract_command_and_deps(line)
    if parsed is None:
        return False

    if silent:
        return True

    name, dependencies = parsed
    state.line = startLine + 1

    token = state.push(COMMAND_HEADING_TOKEN, "", 0)
    token.markup = heading_match.group(1)
    token.map = [startLine, state.line]
    token.content = line.strip()
    token.meta = {"name": name, "dependencies": dependencies}
    return True


def command_heading_plugin(md: MarkdownIt) -> None:
    """Register the command heading rule ahead of the stock heading rule."""
    md.block.ruler.before(
        "heading",
        COMMAND_HEADING_TOKEN,
        _command_heading_rule,
        {"alt": ["paragraph", "reference", "blockquote"]},
    )


def fence_language(info: str) -> str:
    """The language of a fence is the first word of its infostring."""
    words = info.split(maxsplit=1)
    return words[0] if words else ""


@dataclass
class _OpenCommand:
    name: str
    dependencies: list[str]
    level: int
    code_blocks: list[CodeBlock] = field(default_factory=list)

    def close(self, source_file: str) -> CommandBlock:
        return CommandBlock(
            name=self.name,
            dependencies=tuple(self.dependencies),
            code_blocks=tuple(self.code_blocks),
            source_file=source_file,
        )


class MarkdownCommandParser:
    """Turns markdown text into command blocks."""

    def __init__(self) -> None:
        self._md = MarkdownIt("commonmark").use(command_heading_plugin)

    def tokens(self, source_text: str) -> list[Token]:
        return self._md.parse(source_text)

    def parse(
        self,
        source_text: str,
        source_file: str,
        existing: Mapping[str, CommandBlock] | None = None,
    ) -> dict[str, CommandBlock]:
        """Parse one markdown document.

        `existing` holds the commands loaded from earlier files; defining one
        of them again is a DuplicateCommandError naming the earlier file.
        """
        existing = existing or {}
        parsed: dict[str, CommandBlock] = {}
        current: _OpenCommand | None = None

        def close_current() -> None:
            nonlocal current
            if current is not None:
                parsed[current.name] = current.close(source_file)
                logger.debug(
                    "Closed command '%s' with %d code block(s)",
                    current.name,
                    len(current.code_blocks),
                )
            current = None

        for token in self.tokens(source_text):
            if token.type == COMMAND_HEADING_TOKEN:
                close_current()
                name = token.meta["name"]
                if name in existing:
                    raise DuplicateCommandError(name, existing[name].source_file)
                if name in parsed:
                    raise DuplicateCommandError(name, source_file)
                logger.debug(
                    "Found heading '%s' with command '%s' and dependencies %s",
                    token.content,
                    name,
                    token.meta["dependencies"],
                )
                current = _OpenCommand(
                    name=name,
                    dependencies=list(token.meta["dependencies"]),
                    level=token.level,
                )
                continue

            if current is None:
                continue

            if token.type == "heading_open":
                close_current()
            elif token.nesting == -1 and token.level < current.level:
                # The container holding the command heading was closed.
                close_current()
            elif token.type == "fence" and token.level == current.level:
                code_block = self._code_block(token, current.name, source_file)
                if code_block is not None:
                    current.code_blocks.append(code_block)

        close_current()
        return parsed

    def _code_block(self, token: Token, command_name: str, source_file: str) -> CodeBlock | None:
        lang = fence_language(token.info)
        code = token.content

        if code == "":
            log_event(
                "empty_code_block",
                level=logging.WARNING,
                command=command_name,
                source_file=source_file,
            )
            return None

        code_block = CodeBlock.from_fence(lang, code)

        if not lang and not code_block.has_shebang:
            raise NoInfostringOrShebangError(command_name, source_file)

        if lang and code_block.has_shebang:
            log_event(
                "shebang_overrides_infostring",
                level=logging.WARNING,
                command=command_name,
                source_file=source_file,
                infostring=lang,
            )

        logger.debug("Collected code block. Infostring: '%s', Command: '%s'", lang, command_name)
        return code_block


class CommandTable(Mapping[str, CommandBlock]):
    """All commands loaded for one run, keyed by name.

    A name is registered at most once. Files are merged only after they parsed
    completely, so a failing file leaves the table as it was.
    """

    def __init__(
        self,
        commands: Mapping[str, CommandBlock] | None = None,
        parser: MarkdownCommandParser | None = None,
    ) -> None:
        self._commands: dict[str, CommandBlock] = dict(commands or {})
        self._parser = parser or MarkdownCommandParser()

    def load_text(self, source_text: str, source_file: str) -> list[str]:
        update = self._parser.parse(source_text, source_file, existing=self._commands)
        self._commands.update(update)
        return list(update)

    def load_file(self, path: str | Path) -> list[str]:
        source_file = str(path)
        logger.debug("Loading file %s", source_file)
        source_text = Path(path).read_text(encoding="utf-8")
        return self.load_text(source_text, source_file)

    def load_files(self, paths: Iterable[str | Path]) -> list[str]:
        loaded: list[str] = []
        for path in paths:
            loaded.extend(self.load_file(path))
        return loaded

    def __getitem__(self, name: str) -> CommandBlock:
        return self._commands[name]

    def __contains__(self, name: object) -> bool:
        return name in self._commands

    def __iter__(self) -> Iterator[str]:
        return iter(self._commands)

    def __len__(self) -> int:
        return len(self._commands)
