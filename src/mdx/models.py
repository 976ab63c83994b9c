"""Dataclasses shared across mdx layers."""

from __future__ import annotations

from dataclasses import dataclass

from .constants import SHEBANG_PREFIX


@dataclass(frozen=True)
class CodeBlock:
    lang: str
    code: str
    has_shebang: bool

    @classmethod
    def from_fence(cls, lang: str, code: str) -> CodeBlock:
        return cls(lang=lang, code=code, has_shebang=code.startswith(SHEBANG_PREFIX))


@dataclass(frozen=True)
class CommandBlock:
    name: str
    dependencies: tuple[str, ...] = ()
    code_blocks: tuple[CodeBlock, ...] = ()
    source_file: str = ""


@dataclass(frozen=True)
class LauncherEntry:
    interpreter: str
    interpreter_path: str
    file_extension: str
