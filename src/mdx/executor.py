"""Dependency-aware execution of commands."""

from __future__ import annotations

import logging
import os
import subprocess
import sys
import tempfile
from collections.abc import Mapping, Sequence
from pathlib import Path

from .binder import bind
from .constants import ENV_SHEBANG_TEMPLATE, SCRIPT_FILE_MODE, TEMP_FILE_PREFIX
from .errors import (
    CommandNotFoundError,
    DependencyCycleError,
    DependencyNotFoundError,
    ProcessExecutionError,
)
from .launchers import LauncherRegistry
from .logging_utils import log_event
from .models import CodeBlock, CommandBlock

logger = logging.getLogger(__name__)


def render_script(code_block: CodeBlock, code: str, interpreter: str | None) -> str:
    """Script text written to disk: the code, behind a generated shebang if needed."""
    if code_block.has_shebang:
        return code
    return ENV_SHEBANG_TEMPLATE.format(interpreter=interpreter) + code


class ExecutionEngine:
    """Runs commands and their dependencies, depth first, one block at a time.

    Every code block is written to its own executable temporary file, run as a
    child process that shares our stdout/stderr, and removed afterwards. The
    first failure anywhere aborts the whole run.
    """

    def __init__(
        self,
        commands: Mapping[str, CommandBlock],
        launchers: LauncherRegistry,
        *,
        cwd: str | Path | None = None,
        temp_dir: str | Path | None = None,
    ) -> None:
        self._commands = commands
        self._launchers = launchers
        self._cwd = cwd
        self._temp_dir = temp_dir

    def run(self, name: str, args: Sequence[str] = ()) -> None:
        if name not in self._commands:
            raise CommandNotFoundError(name)

        logger.debug("Executing command %s with args %s", name, list(args))
        self._check_cycles(name, [], set())
        self._run_command(self._commands[name], list(args))

    def _check_cycles(self, name: str, chain: list[str], acyclic: set[str]) -> None:
        """Walk the dependency graph below `name` without running anything.

        `chain` holds the commands currently being expanded. A dependency that
        is already on it closes a cycle. Unknown names are left to the run
        itself, which reports them in declaration order.
        """
        if name in acyclic:
            return
        chain.append(name)
        for dependency_name in self._commands[name].dependencies:
            if dependency_name in chain:
                raise DependencyCycleError(chain + [dependency_name])
            if dependency_name in self._commands:
                self._check_cycles(dependency_name, chain, acyclic)
        chain.pop()
        acyclic.add(name)

    def _run_command(self, command: CommandBlock, args: list[str]) -> None:
        for dependency_name in command.dependencies:
            if dependency_name not in self._commands:
                raise DependencyNotFoundError(dependency_name, command.name)
            logger.debug("Executing dependency %s of %s", dependency_name, command.name)
            self._run_command(self._commands[dependency_name], args)

        for index, code_block in enumerate(command.code_blocks):
            logger.debug("Executing code block #%d of %s", index, command.name)
            block_args = args if index == 0 else []
            self.run_code_block(command.name, code_block, block_args)

    def run_code_block(self, command_name: str, code_block: CodeBlock, args: Sequence[str] = ()) -> None:
        code = bind(code_block.code, args)

        if code_block.has_shebang:
            # The shebang picks the interpreter; a launcher only lends its extension.
            launcher = self._launchers.get(code_block.lang)
        else:
            launcher = self._launchers.resolve(code_block.lang)

        suffix = f".{launcher.file_extension}" if launcher is not None else ""
        interpreter = launcher.interpreter if launcher is not None else None
        script = render_script(code_block, code, interpreter)

        fd, script_path = tempfile.mkstemp(prefix=TEMP_FILE_PREFIX, suffix=suffix, dir=self._temp_dir)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                os.fchmod(handle.fileno(), SCRIPT_FILE_MODE)
                handle.write(script)
            self._spawn(command_name, script_path)
        finally:
            os.remove(script_path)

    def _spawn(self, command_name: str, script_path: str) -> None:
        logger.debug("Running %s in %s", script_path, self._cwd or os.getcwd())
        # Keep our own buffered output ahead of the child's.
        sys.stdout.flush()
        try:
            completed = subprocess.run([script_path], cwd=self._cwd, check=False)
        except OSError as exc:
            raise ProcessExecutionError(
                command_name=command_name,
                script_path=script_path,
                script=_read_script(script_path),
                reason=str(exc),
            ) from exc

        if completed.returncode != 0:
            log_event(
                "code_block_failed",
                level=logging.DEBUG,
                command=command_name,
                script=script_path,
                returncode=completed.returncode,
            )
            raise ProcessExecutionError(
                command_name=command_name,
                script_path=script_path,
                script=_read_script(script_path),
                returncode=completed.returncode,
            )


def _read_script(script_path: str) -> str:
    try:
        return Path(script_path).read_text(encoding="utf-8")
    except OSError as exc:
        return f"<failed to read script: {exc}>"
