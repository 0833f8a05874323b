"""Tests for the LabSession facade and create_session."""

from __future__ import annotations

import asyncio

import pytest

from labrunner import Console, GraphStore, LabSession, LifecycleState, RunnerConfig, SourceFile, create_session
from labrunner.errors import ConfigurationError

# pytest is always importable where these tests run; pip may not be
LOCAL_CONFIG = RunnerConfig(prerequisite="pytest")


class TestLabSession:
    """Tests for the session facade on a fake interpreter."""

    async def test_run_accepts_mapping(self, fake_session: LabSession, fake) -> None:
        assert await fake_session.run({"main.py": "print('hi')"}) is True
        assert fake.files == {"main.py": "print('hi')"}

    async def test_run_before_initialize_fails(self, fake_factory) -> None:
        session = LabSession(fake_factory)
        assert await session.run([SourceFile("main.py", "")]) is False
        assert session.state is LifecycleState.UNINITIALIZED

    async def test_run_while_busy_is_rejected(self, fake_session: LabSession, fake) -> None:
        gate = asyncio.Event()
        original = fake.run_python

        async def slow_run(source: str) -> None:
            await gate.wait()
            await original(source)

        fake.run_python = slow_run
        first = asyncio.ensure_future(fake_session.run({"main.py": "1"}))
        await asyncio.sleep(0.01)
        assert fake_session.is_executing
        assert fake_session.is_busy

        assert await fake_session.run({"main.py": "2"}) is False

        gate.set()
        assert await first is True
        assert fake.called("run_python") == ["1"]

    async def test_layout_of_emitted_graph(self, fake_session: LabSession, fake) -> None:
        fake.stdout_on_run = [
            '__GRAPH_DATA__:{"nodes":[{"id":"Svc"},{"id":"Db"}],"edges":[{"from":"Svc","to":"Db"}]}'
        ]
        assert fake_session.layout() is None

        await fake_session.run({"main.py": ""})
        result = fake_session.layout()

        assert result is not None
        assert [(n.id, n.layer) for n in result.nodes] == [("Db", 0), ("Svc", 1)]
        assert [e.id for e in result.edges] == ["e-Svc-Db-0"]

    async def test_clear_output(self, fake_session: LabSession, fake) -> None:
        fake.stdout_on_run = ['x\n__GRAPH_DATA__:{"nodes":[],"edges":[]}']
        await fake_session.run({"main.py": ""})

        fake_session.clear_output()

        assert fake_session.console.text == ""
        assert fake_session.graph.current is None

    async def test_prepare_clears_and_installs(self, fake_session: LabSession, fake) -> None:
        fake_session.console.append("old output")
        await fake_session.prepare(["attrs"])

        assert fake.called("install") == [["attrs"]]
        assert "old output" not in fake_session.console.text
        assert fake_session.installed_packages == {"attrs"}

    async def test_supplied_empty_console_is_used(self, fake_factory, fake) -> None:
        mine, store = Console(), GraphStore()
        session = LabSession(fake_factory, console=mine, graph=store)
        await session.initialize()
        fake.stdout_on_run = ["hi"]

        await session.run({"main.py": "print('hi')"})

        assert session.console is mine
        assert session.graph is store
        assert "hi\n" in mine.text

    async def test_each_run_starts_from_clean_output(self, fake_session: LabSession, fake) -> None:
        fake.stdout_on_run = ['first\n__GRAPH_DATA__:{"nodes":[{"id":"A"}],"edges":[]}']
        await fake_session.run({"main.py": "1"})

        fake.stdout_on_run = ["second"]
        await fake_session.run({"main.py": "2"})

        assert "first" not in fake_session.console.text
        assert "second\n" in fake_session.console.text
        assert fake_session.console.text.startswith("> Executing code...")
        assert fake_session.graph.current is None

    async def test_close_releases_interpreter(self, fake_factory, fake) -> None:
        async with LabSession(fake_factory) as session:
            await session.initialize()
            assert session.is_ready
        assert fake.closed
        assert session.state is LifecycleState.UNINITIALIZED

    def test_config_rejects_empty_values(self) -> None:
        with pytest.raises(ConfigurationError, match="main_entry"):
            RunnerConfig(main_entry="")


class TestCreateSession:
    """End-to-end tests on a LocalInterpreter."""

    async def test_runs_main_and_captures_output(self) -> None:
        session = await create_session(config=LOCAL_CONFIG, timeout=60.0)
        try:
            assert session.is_ready
            assert await session.run([SourceFile("main.py", "print('hi')")]) is True
            assert "hi\n" in session.console.text
        finally:
            await session.close()

    async def test_runs_tests_instead_of_main(self) -> None:
        session = await create_session(config=LOCAL_CONFIG, timeout=60.0)
        files = {
            "calc.py": "def add(a, b):\n    return a + b\n",
            "test_calc.py": "from calc import add\n\ndef test_add():\n    assert add(2, 3) == 5\n",
            "main.py": "raise SystemExit('main must not run')\n",
        }
        try:
            assert await session.run(files) is True
            assert "test_add PASSED" in session.console.text
            assert "main must not run" not in session.console.text
        finally:
            await session.close()

    async def test_emitted_graph_reaches_layout(self) -> None:
        session = await create_session(config=LOCAL_CONFIG, timeout=60.0)
        program = (
            "import json\n"
            "graph = {'nodes': [{'id': 'A', 'scope': 's', 'is_protocol': False},"
            " {'id': 'B', 'scope': 's', 'is_protocol': True}],"
            " 'edges': [{'from': 'A', 'to': 'B'}]}\n"
            "print('building')\n"
            "print('__GRAPH_DATA__:' + json.dumps(graph))\n"
        )
        try:
            assert await session.run({"main.py": program}) is True
            assert "__GRAPH_DATA__" not in session.console.text
            result = session.layout()
            assert result is not None
            assert {n.id: n.layer for n in result.nodes} == {"B": 0, "A": 1}
        finally:
            await session.close()

    async def test_python_error_fails_run(self) -> None:
        session = await create_session(config=LOCAL_CONFIG, timeout=60.0)
        try:
            assert await session.run({"main.py": "raise ValueError('boom')"}) is False
            assert "--- PYTHON ERROR ---\nValueError: boom" in session.console.text
        finally:
            await session.close()

    async def test_bootstrap_failure_is_soft(self) -> None:
        session = await create_session(python="/nonexistent/python3")
        assert session.state is LifecycleState.FAILED
        assert "Failed to initialize interpreter" in session.console.text
        assert await session.run({"main.py": "print(1)"}) is False
