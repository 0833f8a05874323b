"""
Framework integrations for labrunner.

Each adapter lives in its own module so the optional dependency is only
imported when that module is:

    from labrunner.integrations.langchain import create_langchain_tools
    from labrunner.integrations.pydantic_ai import create_runner_tool
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from labrunner.api import LabSession


async def run_and_report(session: LabSession, files: dict[str, str]) -> str:
    """Run ``files`` and return the console text the run produced plus a verdict."""
    await session.initialize()
    passed = await session.run(files)
    return f"{session.console.text}\n{'PASSED' if passed else 'FAILED'}"
