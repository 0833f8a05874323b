"""
Package provisioning for the interpreter.

Remembers what was installed during the session and only asks the
interpreter for the missing packages.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from labrunner.errors import InstallError

if TYPE_CHECKING:
    from labrunner._types import ConsoleSink
    from labrunner.lifecycle import InterpreterLifecycle

logger = logging.getLogger(__name__)


class PackageInstaller:
    """
    Installs the delta between requested and already-installed packages.

    The installed set only grows. A failed batch adds nothing, even if the
    underlying installer managed part of it before failing.
    """

    def __init__(self, lifecycle: InterpreterLifecycle, console: ConsoleSink) -> None:
        self._lifecycle = lifecycle
        self._console = console
        self._installed: set[str] = set()
        self._installing = False

    @property
    def installed(self) -> frozenset[str]:
        return frozenset(self._installed)

    @property
    def is_installing(self) -> bool:
        return self._installing

    def missing(self, requested: Iterable[str]) -> list[str]:
        """Requested packages not installed yet, in first-seen order."""
        if isinstance(requested, str):
            requested = [requested]
        return [p for p in dict.fromkeys(requested) if p not in self._installed]

    async def install(self, requested: Iterable[str]) -> None:
        """
        Install whatever part of ``requested`` is missing. Never raises.

        Does nothing (and prints nothing) when the interpreter is not ready
        or every package is already installed.
        """
        if not self._lifecycle.is_ready():
            return

        delta = self.missing(requested)
        if not delta:
            return

        self._installing = True
        self._console.append(f"> Installing packages: {', '.join(delta)}...\n")
        try:
            await self._lifecycle.interpreter.install(delta)
        except Exception as e:
            reason = e.reason if isinstance(e, InstallError) else str(e)
            logger.error(f"Failed to install packages {delta}: {reason}", exc_info=True)
            self._console.append(f"\n> Error installing packages: {reason}\n")
        else:
            self._installed.update(delta)
            logger.info(f"Installed packages: {', '.join(delta)}")
            self._console.append("\n> Installation complete.\n")
        finally:
            self._installing = False
