"""
Interpreter backends.
"""

from labrunner.interpreter._base import Interpreter
from labrunner.interpreter.local import LocalInterpreter, load_interpreter

__all__ = [
    "Interpreter",
    "LocalInterpreter",
    "load_interpreter",
]
