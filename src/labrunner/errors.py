"""
Exception hierarchy for labrunner.

Backends raise these; the orchestration layer catches them at its boundaries
and reports them on the console instead of propagating.
"""

from __future__ import annotations


class LabRunnerError(Exception):
    """Base class for all labrunner errors."""


class ConfigurationError(LabRunnerError):
    """Raised for invalid runner or backend configuration."""


class DependencyError(LabRunnerError):
    """Raised when an executable or prerequisite package is unavailable."""


class InterpreterNotReady(LabRunnerError):
    """Raised when the interpreter handle is requested before initialization."""


class ExecutionError(LabRunnerError):
    """Raised when source code fails inside the interpreter."""


class InstallError(LabRunnerError):
    """
    Raised when the package install facility rejects a request.

    Attributes:
        packages: The packages that were requested.
        reason: Why the install failed.
    """

    def __init__(self, reason: str, packages: list[str] | None = None) -> None:
        self.packages = list(packages or [])
        self.reason = reason
        super().__init__(reason)


class GraphDecodeError(LabRunnerError, ValueError):
    """Raised when a graph side-channel payload cannot be decoded."""
