"""Positional argument binding for code blocks."""

from __future__ import annotations

import re
from collections.abc import Sequence

from .errors import (
    ArgProvidedButNotUsedError,
    ArgUsedInTemplateNotProvidedError,
    TemplateParseError,
)

_PLACEHOLDER_RE = re.compile(r"\{\{\s*\.?arg(\d+)\s*\}\}")
_ACTION_OPEN = "{{"


def referenced_indices(code: str) -> set[int]:
    """Distinct 1-based argument indices referenced by `{{.argN}}` placeholders."""
    return {int(match.group(1)) for match in _PLACEHOLDER_RE.finditer(code)}


def _check_actions(code: str) -> None:
    """Every `{{` must open a well-formed placeholder."""
    pos = code.find(_ACTION_OPEN)
    while pos != -1:
        match = _PLACEHOLDER_RE.match(code, pos)
        if match is None:
            line_number = code.count("\n", 0, pos) + 1
            closing = code.find("}}", pos)
            if closing == -1:
                raise TemplateParseError(line_number, "unclosed action")
            action = code[pos : closing + 2]
            raise TemplateParseError(line_number, f"unsupported action {action!r}")
        pos = code.find(_ACTION_OPEN, match.end())


def bind(code: str, args: Sequence[str] = ()) -> str:
    """Substitute `{{.argN}}` placeholders with the N-th argument.

    Both directions are validated: every supplied argument has to be used and
    every placeholder needs an argument. Values are inserted verbatim, without
    any quoting for the target interpreter.
    """
    indices = referenced_indices(code)

    for position, value in enumerate(args, start=1):
        if position not in indices:
            raise ArgProvidedButNotUsedError(position, value)

    for index in sorted(indices):
        if not 1 <= index <= len(args):
            raise ArgUsedInTemplateNotProvidedError(index)

    _check_actions(code)

    return _PLACEHOLDER_RE.sub(lambda match: args[int(match.group(1)) - 1], code)
