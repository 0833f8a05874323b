"""
Interpreter lifecycle management.

Owns the single interpreter handle of a session. Initialization is
single-flight: concurrent initialize() calls share one bootstrap attempt.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from typing import TYPE_CHECKING, Callable

from labrunner._types import LifecycleState
from labrunner.errors import InterpreterNotReady

if TYPE_CHECKING:
    from labrunner._types import ConsoleSink, StreamCallback
    from labrunner.interpreter._base import Interpreter

logger = logging.getLogger(__name__)

InterpreterFactory = Callable[[], Awaitable["Interpreter"]]


class InterpreterLifecycle:
    """
    Lazily creates and owns the interpreter handle.

    State machine: UNINITIALIZED -> INITIALIZING -> READY | FAILED, with
    FAILED -> INITIALIZING allowed on the next initialize() call.
    """

    def __init__(
        self,
        factory: InterpreterFactory,
        console: ConsoleSink,
        *,
        on_stdout: StreamCallback,
        on_stderr: StreamCallback,
        prerequisite: str | None = None,
    ) -> None:
        """
        Args:
            factory: Async bootstrap returning a started interpreter.
            console: Sink for bootstrap diagnostics.
            on_stdout: Callback wired to the interpreter's stdout.
            on_stderr: Callback wired to the interpreter's stderr.
            prerequisite: Package loaded before the handle is marked ready.
        """
        self._factory = factory
        self._console = console
        self._on_stdout = on_stdout
        self._on_stderr = on_stderr
        self._prerequisite = prerequisite

        self._state = LifecycleState.UNINITIALIZED
        self._interpreter: Interpreter | None = None
        self._inflight: asyncio.Task[None] | None = None

    @property
    def state(self) -> LifecycleState:
        return self._state

    def is_ready(self) -> bool:
        return self._state is LifecycleState.READY

    @property
    def interpreter(self) -> Interpreter:
        """
        The ready interpreter handle.

        Raises:
            InterpreterNotReady: If initialization has not succeeded.
        """
        if self._interpreter is None or not self.is_ready():
            raise InterpreterNotReady(f"Interpreter is {self._state.value}")
        return self._interpreter

    async def initialize(self) -> None:
        """
        Bring the interpreter to READY. Never raises.

        A no-op when already ready; joins the in-flight attempt when one is
        running; otherwise starts a new attempt (including after a failure).
        """
        if self._state is LifecycleState.READY:
            return

        if self._inflight is None:
            # State and marker are set before the first suspension point
            self._state = LifecycleState.INITIALIZING
            self._inflight = asyncio.ensure_future(self._bootstrap())

        await asyncio.shield(self._inflight)

    async def _bootstrap(self) -> None:
        interpreter: Interpreter | None = None
        try:
            interpreter = await self._factory()
            interpreter.set_stdout(self._on_stdout)
            interpreter.set_stderr(self._on_stderr)
            if self._prerequisite:
                await interpreter.load_package(self._prerequisite)
        except Exception as e:
            logger.error(f"Failed to initialize interpreter: {e}", exc_info=True)
            self._state = LifecycleState.FAILED
            self._console.append(f"Failed to initialize interpreter: {e}\n")
            if interpreter is not None:
                try:
                    await interpreter.close()
                except Exception:
                    logger.warning("Failed to close interpreter after bootstrap failure", exc_info=True)
        else:
            self._interpreter = interpreter
            self._state = LifecycleState.READY
            logger.info("Interpreter initialized")
        finally:
            self._inflight = None

    async def shutdown(self) -> None:
        """Close the handle and return to UNINITIALIZED. Safe to call multiple times."""
        if self._inflight is not None:
            await asyncio.shield(self._inflight)

        interpreter, self._interpreter = self._interpreter, None
        self._state = LifecycleState.UNINITIALIZED
        if interpreter is not None:
            await interpreter.close()
