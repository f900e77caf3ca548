# gomacro/config.py
"""Expansion settings, passed explicitly to the driver."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

DEFAULT_PREFIX = "MACRO_"


@dataclass(frozen=True)
class ExpanderConfig:
    """Tuning knobs for one expansion run.

    recursive
        Pre-expand each macro body against the macros defined before it.
    prefix
        Name prefix that marks a function declaration as a macro.
    strict_arity
        Reject calls whose argument count differs from the parameter count.
        When off, missing arguments leave the parameter unsubstituted and
        extra arguments are ignored.
    """
    recursive: bool = False
    prefix: str = DEFAULT_PREFIX
    strict_arity: bool = True

    def validate(self) -> List[str]:
        """Return a list of validation problems (empty if valid)."""
        problems: List[str] = []
        if not self.prefix:
            problems.append("prefix must not be empty")
        elif not (self.prefix[0].isalpha() or self.prefix[0] == "_"):
            problems.append(f"prefix {self.prefix!r} cannot start an identifier")
        return problems
