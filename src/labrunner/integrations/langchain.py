"""LangChain integration for labrunner."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from labrunner.integrations import run_and_report

if TYPE_CHECKING:
    from labrunner.api import LabSession

HAS_LANGCHAIN = False
_StructuredTool: Any = None

try:
    import langchain_core.tools

    _StructuredTool = langchain_core.tools.StructuredTool
    HAS_LANGCHAIN = True
except ImportError:
    pass


def create_langchain_tools(session: LabSession) -> dict[str, Any]:
    """
    Create LangChain tools from a LabSession.

    Args:
        session: The session to run projects in.

    Returns:
        Dictionary of LangChain StructuredTool instances.

    Raises:
        ImportError: If langchain-core is not installed.

    Example:
        >>> session = await create_session()
        >>> tools = create_langchain_tools(session)
        >>> agent = create_react_agent(llm, list(tools.values()))
    """
    if not HAS_LANGCHAIN:
        raise ImportError(
            "LangChain integration requires langchain-core. "
            "Install with: pip install labrunner[langchain]"
        )

    async def run_project(files: dict[str, str]) -> str:
        """Run a Python project given as a mapping of file name to source.

        main.py is executed directly; a test_*.py file is run with pytest instead.
        Returns the console output followed by PASSED or FAILED.
        """
        return await run_and_report(session, files)

    async def install_packages(packages: list[str]) -> str:
        """Install Python packages into the project interpreter."""
        await session.initialize()
        await session.install_packages(packages)
        missing = sorted(set(packages) - session.installed_packages)
        if missing:
            return f"Failed to install: {', '.join(missing)}"
        return f"Installed: {', '.join(packages) or 'nothing'}"

    run_tool = _StructuredTool.from_function(
        coroutine=run_project,
        name="run_project",
        description=(
            "Run a Python project. Pass files as a mapping of file name to source. "
            "main.py is executed; a test_*.py file is run with pytest instead."
        ),
    )

    install_tool = _StructuredTool.from_function(
        coroutine=install_packages,
        name="install_packages",
        description="Install Python packages for the project before running it.",
    )

    return {
        "run_project": run_tool,
        "install_packages": install_tool,
    }
