"""
PydanticAI integration for labrunner.

Provides helpers to create PydanticAI-compatible tools.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

try:
    from pydantic_ai import RunContext
except ImportError:
    raise ImportError(
        "PydanticAI integration requires 'pydantic-ai'. "
        "Install with `pip install labrunner[pydantic-ai]`"
    )

from labrunner.integrations import run_and_report

if TYPE_CHECKING:
    from labrunner.api import LabSession


def create_runner_tool(session: LabSession) -> Callable:
    """
    Create a PydanticAI tool function that runs projects in ``session``.

    Example:
        >>> from pydantic_ai import Agent
        >>> session = await create_session()
        >>> agent = Agent("openai:gpt-4o", tools=[create_runner_tool(session)])
    """

    async def run_project(
        ctx: RunContext,
        files: dict[str, str],
    ) -> str:
        """
        Run a Python project given as a mapping of file name to source.
        main.py is executed; a test_*.py file is run with pytest instead.
        """
        return await run_and_report(session, files)

    return run_project
