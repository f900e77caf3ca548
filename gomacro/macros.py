# gomacro/macros.py
"""
Macro table.

A macro is an ordinary function declaration whose name carries the marker
prefix (``MACRO_`` by default).  Its body is the expansion template and its
parameter names are the placeholders substituted at each call site.

The table is filled in declaration order, so a macro is visible only to the
code that follows it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from gomacro.ast_nodes import Block, FuncDecl, Loc
from gomacro.config import DEFAULT_PREFIX

__all__ = ["MacroDefinition", "MacroTable"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MacroDefinition:
    """A recorded macro: unprefixed name, ordered parameters, template body."""
    name: str
    params: List[str]
    body: Block
    loc: Loc = Loc()

    @property
    def arity(self) -> int:
        return len(self.params)


class MacroTable:
    """Name → :class:`MacroDefinition`, built once in declaration order."""

    def __init__(self, prefix: str = DEFAULT_PREFIX) -> None:
        self.prefix = prefix
        self._macros: Dict[str, MacroDefinition] = {}

    def is_macro_decl(self, decl: FuncDecl) -> bool:
        return decl.name.startswith(self.prefix)

    def define(
        self,
        decl: FuncDecl,
        expand_body: Optional[Callable[[Block], Block]] = None,
    ) -> bool:
        """Record *decl* if it is a macro declaration.

        Returns False for ordinary declarations, which the caller should
        process normally.  When *expand_body* is given the body is run through
        it before being stored; at that point the table does not yet contain
        this macro, so a macro never expands itself.
        """
        if not self.is_macro_decl(decl):
            return False

        name = decl.name[len(self.prefix):]
        body = expand_body(decl.body) if expand_body is not None else decl.body
        if name in self._macros:
            previous = self._macros[name]
            logger.warning(
                "%s: macro %r redefined (previous definition at %s); "
                "the new definition wins", decl.loc, name, previous.loc,
            )
        self._macros[name] = MacroDefinition(
            name=name,
            params=decl.param_names,
            body=body,
            loc=decl.loc,
        )
        logger.debug("defined macro %r with %d parameter(s)", name, len(decl.param_names))
        return True

    def lookup(self, name: str) -> Optional[MacroDefinition]:
        return self._macros.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._macros
