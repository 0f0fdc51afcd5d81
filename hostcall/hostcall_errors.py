"""
Script-level errors raised while dispatching host functions.

Every error a script can observe derives from EvalAltResult. Programming
errors made by the embedding host (bad registrations, wrong argument counts)
use the ordinary Python exceptions instead.
"""

from typing import Any, Optional


class Position:
    """A location in script source. Position.NONE means 'not known yet'."""
    __slots__ = ("line", "col")

    def __init__(self, line: Optional[int] = None, col: Optional[int] = None):
        self.line = line
        self.col = col

    def is_none(self) -> bool:
        return self.line is None

    def __eq__(self, other):
        if not isinstance(other, Position):
            return NotImplemented
        return self.line == other.line and self.col == other.col

    def __hash__(self):
        return hash((self.line, self.col))

    def __repr__(self) -> str:
        if self.is_none():
            return "Position<none>"
        return f"Position<{self.line}:{self.col}>"

    def __str__(self) -> str:
        if self.is_none():
            return "none"
        if self.col is None:
            return f"line {self.line}"
        return f"line {self.line}, col {self.col}"


Position.NONE = Position()


class EvalAltResult(Exception):
    """Base class for errors surfaced to scripts."""

    def __init__(self, message: str, position: Position = Position.NONE):
        super().__init__(message)
        self.message = message
        self.position = position

    def fill_position(self, position: Position) -> 'EvalAltResult':
        """Sets the position only if none was recorded yet."""
        if self.position.is_none() and position is not None:
            self.position = position
        return self

    def __str__(self) -> str:
        if self.position.is_none():
            return self.message
        return f"{self.message} ({self.position})"


class ErrorNonPureMethodCallOnConstant(EvalAltResult):
    def __init__(self, fn_name: str, position: Position = Position.NONE):
        super().__init__(f"Non-pure method '{fn_name}' cannot be called on constant", position)
        self.fn_name = fn_name


class ErrorMismatchDataType(EvalAltResult):
    def __init__(self, expected: str, actual: str, position: Position = Position.NONE):
        super().__init__(f"Data type incorrect: {actual} (expecting {expected})", position)
        self.expected = expected
        self.actual = actual


class ErrorDataRace(EvalAltResult):
    """A value was accessed while another holder had it locked for writing."""
    def __init__(self, what: str, position: Position = Position.NONE):
        super().__init__(f"Data race detected when accessing {what}", position)
        self.what = what


class ErrorFunctionNotFound(EvalAltResult):
    def __init__(self, signature: str, position: Position = Position.NONE):
        super().__init__(f"Function not found: {signature}", position)
        self.signature = signature


class ErrorInNativeFunction(EvalAltResult):
    """Wraps a non-script exception that escaped a plain host function."""
    def __init__(self, fn_name: str, cause: BaseException, position: Position = Position.NONE):
        super().__init__(f"Error in host function '{fn_name}': {type(cause).__name__}: {cause}", position)
        self.fn_name = fn_name
        self.cause = cause


class ErrorRuntime(EvalAltResult):
    """A script-level error raised on purpose by a fallible host function."""
    def __init__(self, value: Any, position: Position = Position.NONE):
        super().__init__(f"Runtime error: {value}", position)
        self.value = value
