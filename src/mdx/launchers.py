"""Interpreter discovery for code-block languages."""

from __future__ import annotations

import logging
import shutil
from collections.abc import Callable, Iterable, Mapping
from .errors import NoLauncherDefinedError
from .models import LauncherEntry

logger = logging.getLogger(__name__)

Which = Callable[[str], str | None]

_PYTHON_CANDIDATES = ("python", "python3")


def find_executable(candidates: Iterable[str], which: Which = shutil.which) -> tuple[str, str] | None:
    """Return (name, path) of the first candidate found on PATH."""
    for candidate in candidates:
        path = which(candidate)
        if path:
            return candidate, path
    return None


class LauncherRegistry:
    """Maps infostrings (`sh`, `bash`, `python`) to interpreters."""

    def __init__(self, launchers: Mapping[str, LauncherEntry] | None = None) -> None:
        self._launchers: dict[str, LauncherEntry] = dict(launchers or {})

    @classmethod
    def build(cls, which: Which = shutil.which) -> LauncherRegistry:
        """Probe PATH once and register every interpreter that was found."""
        launchers: dict[str, LauncherEntry] = {}

        found = find_executable(["sh"], which)
        if found is not None:
            name, path = found
            # sh doubles as the bash launcher until a real bash shows up.
            launchers["sh"] = LauncherEntry(name, path, "sh")
            launchers["bash"] = LauncherEntry(name, path, "sh")

        found = find_executable(["bash"], which)
        if found is not None:
            name, path = found
            launchers["bash"] = LauncherEntry(name, path, "bash")

        found = find_executable(_PYTHON_CANDIDATES, which)
        if found is not None:
            name, path = found
            launchers["python"] = LauncherEntry(name, path, "py")

        logger.debug(
            "Added launchers: %s",
            {tag: entry.interpreter_path for tag, entry in launchers.items()},
        )
        return cls(launchers)

    def resolve(self, lang: str) -> LauncherEntry:
        try:
            return self._launchers[lang]
        except KeyError:
            raise NoLauncherDefinedError(lang) from None

    def get(self, lang: str) -> LauncherEntry | None:
        return self._launchers.get(lang)
