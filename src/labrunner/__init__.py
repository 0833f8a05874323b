"""
Top-level facade for labrunner.
"""

from labrunner._types import GRAPH_SENTINEL, LifecycleState, RunnerConfig, SourceFile
from labrunner.api import LabSession, create_session
from labrunner.console import Console, GraphStore
from labrunner.demux import OutputDemultiplexer, split_batch
from labrunner.engine import ExecutionEngine, select_entrypoint
from labrunner.errors import (
    ConfigurationError,
    DependencyError,
    ExecutionError,
    GraphDecodeError,
    InstallError,
    InterpreterNotReady,
    LabRunnerError,
)
from labrunner.graph import GraphData, GraphEdge, GraphNode, LayoutNode, layout, layout_graph
from labrunner.interpreter import Interpreter, LocalInterpreter, load_interpreter
from labrunner.lifecycle import InterpreterLifecycle
from labrunner.packages import PackageInstaller

__version__ = "0.1.0"

# Exports
__all__ = [
    "GRAPH_SENTINEL",
    "LabSession",
    "create_session",
    "Console",
    "GraphStore",
    "RunnerConfig",
    "SourceFile",
    "LifecycleState",
    "Interpreter",
    "LocalInterpreter",
    "load_interpreter",
    "InterpreterLifecycle",
    "PackageInstaller",
    "OutputDemultiplexer",
    "split_batch",
    "ExecutionEngine",
    "select_entrypoint",
    "GraphData",
    "GraphEdge",
    "GraphNode",
    "LayoutNode",
    "layout",
    "layout_graph",
    "LabRunnerError",
    "ConfigurationError",
    "DependencyError",
    "ExecutionError",
    "GraphDecodeError",
    "InstallError",
    "InterpreterNotReady",
]
