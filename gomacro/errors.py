# gomacro/errors.py
"""
gomacro Error Types

Every failure in the pipeline is fatal: the run aborts and the CLI prints a
single GCC-style diagnostic line.  Errors carry a structured code so tests
and callers can tell the failure classes apart without matching on text.

Error Hierarchy:
────────────────
  MacroError (base)
  ├── GoSyntaxError         - parser rejected the input text
  ├── UnsupportedNodeError  - statement/expression kind outside the
  │                           substitutable subset
  ├── MacroArityError       - call argument count differs from the
  │                           macro's parameter count
  └── OutputError           - destination could not be written

Error Codes:
────────────
Codes follow the pattern GOMACRO-NNNN:
  - 1000-1999: Syntax errors
  - 2000-2999: Expansion errors
  - 5000-5999: Output errors
"""

from __future__ import annotations

from enum import Enum, auto
from typing import Optional, Sequence

from gomacro.ast_nodes import Loc, NO_LOC


class ErrorPhase(Enum):
    """Pipeline phase in which an error occurred."""
    PARSE = auto()
    EXPANSION = auto()
    OUTPUT = auto()


class ErrorCode:
    """Structured error code ``PREFIX-NNNN``."""

    __slots__ = ("prefix", "number", "phase")

    def __init__(self, prefix: str, number: int, phase: ErrorPhase) -> None:
        self.prefix = prefix
        self.number = number
        self.phase = phase

    @property
    def code(self) -> str:
        return f"{self.prefix}-{self.number:04d}"

    def __str__(self) -> str:
        return self.code

    def __repr__(self) -> str:
        return f"ErrorCode({self.code!r}, {self.phase.name})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ErrorCode):
            return self.prefix == other.prefix and self.number == other.number
        if isinstance(other, str):
            return self.code == other
        return False


class ErrorCodes:
    """Predefined error codes."""

    SYNTAX = ErrorCode("GOMACRO", 1001, ErrorPhase.PARSE)
    UNSUPPORTED_NODE = ErrorCode("GOMACRO", 2001, ErrorPhase.EXPANSION)
    ARITY_MISMATCH = ErrorCode("GOMACRO", 2002, ErrorPhase.EXPANSION)
    OUTPUT_FAILED = ErrorCode("GOMACRO", 5001, ErrorPhase.OUTPUT)
    INTERNAL = ErrorCode("GOMACRO", 9001, ErrorPhase.EXPANSION)


# ═══════════════════════════════════════════════════════════════════════════════
# EXCEPTION CLASSES
# ═══════════════════════════════════════════════════════════════════════════════

class MacroError(Exception):
    """Base exception for all gomacro errors."""

    def __init__(
        self,
        message: str,
        code: Optional[ErrorCode] = None,
        loc: Optional[Loc] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or ErrorCodes.INTERNAL
        self.loc = loc or NO_LOC
        self.cause = cause

    def to_gcc_format(self) -> str:
        """Format as ``file:line:col: error[CODE]: message``."""
        if self.loc.valid:
            return f"{self.loc}: error[{self.code}]: {self.message}"
        return f"error[{self.code}]: {self.message}"

    def __str__(self) -> str:
        return self.to_gcc_format()


class GoSyntaxError(MacroError):
    """The parser rejected the input."""

    def __init__(
        self,
        message: str,
        loc: Optional[Loc] = None,
        expected: Optional[Sequence[str]] = None,
        **kwargs,
    ) -> None:
        super().__init__(message, code=ErrorCodes.SYNTAX, loc=loc, **kwargs)
        self.expected = list(expected) if expected else []


class UnsupportedNodeError(MacroError):
    """A node kind outside the substitutable subset was found in a macro body."""

    def __init__(self, category: str, kind: str, loc: Optional[Loc] = None) -> None:
        super().__init__(
            f"unsupported {category} kind: {kind}",
            code=ErrorCodes.UNSUPPORTED_NODE,
            loc=loc,
        )
        self.category = category
        self.kind = kind


class MacroArityError(MacroError):
    """Wrong number of arguments in a macro call."""

    def __init__(
        self,
        name: str,
        expected: int,
        actual: int,
        loc: Optional[Loc] = None,
    ) -> None:
        super().__init__(
            f"macro '{name}' expects {expected} argument(s), got {actual}",
            code=ErrorCodes.ARITY_MISMATCH,
            loc=loc,
        )
        self.name = name
        self.expected_arity = expected
        self.actual_arity = actual


class OutputError(MacroError):
    """The expanded source could not be written."""

    def __init__(self, path: str, cause: Optional[BaseException] = None) -> None:
        detail = f": {cause}" if cause is not None else ""
        super().__init__(
            f"cannot write {path}{detail}",
            code=ErrorCodes.OUTPUT_FAILED,
            cause=cause,
        )
        self.path = path
