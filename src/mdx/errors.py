"""Typed exceptions for mdx."""

from __future__ import annotations

from collections.abc import Sequence


class MdxError(Exception):
    """Base exception for mdx failures."""


class LoadError(MdxError):
    """Raised when markdown files cannot be turned into commands."""


class NoMarkdownFilesError(LoadError):
    """Raised when no markdown file could be selected."""


class DuplicateCommandError(LoadError):
    def __init__(self, name: str, first_defined_in: str) -> None:
        self.name = name
        self.first_defined_in = first_defined_in
        super().__init__(
            f"Duplicate command '{name}': already defined in '{first_defined_in}'."
        )


class NoInfostringOrShebangError(LoadError):
    def __init__(self, command_name: str, source_file: str) -> None:
        self.command_name = command_name
        self.source_file = source_file
        super().__init__(
            f"Code block of command '{command_name}' in '{source_file}' "
            "has neither an infostring nor a shebang."
        )


class TemplateError(MdxError):
    """Raised when arguments cannot be bound into a code block."""


class ArgProvidedButNotUsedError(TemplateError):
    def __init__(self, position: int, value: str) -> None:
        self.position = position
        self.value = value
        super().__init__(
            f'Argument {position} ("{value}") is provided but not used in the template.'
        )


class ArgUsedInTemplateNotProvidedError(TemplateError):
    def __init__(self, index: int) -> None:
        self.index = index
        super().__init__(
            f"{{{{.arg{index}}}}} is used in the template but not provided in args."
        )


class TemplateParseError(TemplateError):
    def __init__(self, line_number: int, message: str) -> None:
        self.line_number = line_number
        super().__init__(f"Failed to parse template at line {line_number}: {message}")


class ExecutionError(MdxError):
    """Raised for failures while running a command."""


class CommandNotFoundError(ExecutionError):
    def __init__(self, name: str, message: str | None = None) -> None:
        self.name = name
        super().__init__(message or f"Command not found: {name}")


class DependencyNotFoundError(CommandNotFoundError):
    def __init__(self, name: str, required_by: str) -> None:
        self.required_by = required_by
        super().__init__(
            name, f"Dependency '{name}' of command '{required_by}' not found."
        )


class DependencyCycleError(ExecutionError):
    def __init__(self, chain: Sequence[str]) -> None:
        self.chain = tuple(chain)
        self.name = self.chain[-1]
        super().__init__(
            f"Command '{self.name}' depends on itself: " + " -> ".join(self.chain)
        )


class NoLauncherDefinedError(ExecutionError):
    def __init__(self, lang: str) -> None:
        self.lang = lang
        super().__init__(f"No launcher defined for infostring: '{lang}'")


class ProcessExecutionError(ExecutionError):
    """Raised when a code block's script cannot be spawned or exits non-zero."""

    def __init__(
        self,
        *,
        command_name: str,
        script_path: str,
        script: str,
        returncode: int | None = None,
        reason: str | None = None,
    ) -> None:
        self.command_name = command_name
        self.script_path = script_path
        self.script = script
        self.returncode = returncode
        if reason is None:
            reason = f"exited with status {returncode}"
        super().__init__(
            f"Command '{command_name}' failed: {reason}\n"
            f"Content of {script_path}:\n{script}"
        )
