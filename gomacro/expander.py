# gomacro/expander.py
"""
Macro expansion driver.

``expand_program`` walks the top-level declarations in order.  Macro
declarations are recorded in a :class:`~gomacro.macros.MacroTable` and
dropped from the output; every other function body goes through a
:class:`BlockExpander`.

Expansion rules for one block:

1. Blocks nested inside a statement (bodies of control statements, ``case``
   clauses and function literals) are expanded first, on their own.
2. The statement is searched for calls to known macros, without entering
   nested blocks or the arguments of a matched call.  If several calls
   match, the last one found decides.
3. A matched statement is replaced as a whole by the substituted macro
   body.  The replacement is not searched again.

Nothing is modified in place: expanded blocks and functions are new nodes.
"""

from __future__ import annotations

import dataclasses
import logging
import os
import sys
from typing import List, Optional

from gomacro import ast_nodes as A
from gomacro.config import ExpanderConfig
from gomacro.errors import OutputError
from gomacro.formatter import format_program
from gomacro.macros import MacroTable
from gomacro.parser import parse
from gomacro.substitute import SubstitutionContext, substitute_block
from gomacro.visitor import DepthFirstVisitor

__all__ = [
    "MacroCallFinder",
    "BlockExpander",
    "ExpansionStats",
    "expand_program",
    "expand_source",
    "expand_file",
]

logger = logging.getLogger(__name__)


class MacroCallFinder(DepthFirstVisitor):
    """Finds the last call to a known macro within one statement."""

    def __init__(self, table: MacroTable) -> None:
        self.table = table
        self.found: Optional[A.CallExpr] = None

    def visit_block(self, node: A.Block) -> None:
        return None

    def visit_call_expr(self, node: A.CallExpr) -> None:
        callee = node.callee
        if isinstance(callee, A.Identifier) and callee.name in self.table:
            self.found = node
            return None
        return self.generic_visit(node)

    def search(self, stmt: A.Node) -> Optional[A.CallExpr]:
        self.found = None
        self.visit(stmt)
        return self.found


@dataclasses.dataclass
class ExpansionStats:
    macros_defined: int = 0
    calls_expanded: int = 0
    functions_processed: int = 0


class BlockExpander:
    """Expands macro calls in a block against a :class:`MacroTable`."""

    def __init__(
        self,
        table: MacroTable,
        strict_arity: bool = True,
        stats: Optional[ExpansionStats] = None,
    ) -> None:
        self.table = table
        self.strict_arity = strict_arity
        self.stats = stats if stats is not None else ExpansionStats()
        self._finder = MacroCallFinder(table)

    def expand(self, block: A.Block) -> A.Block:
        """Return a new block with every macro call expanded."""
        stmts: List[A.Node] = []
        replaced = False
        for stmt in block.stmts:
            if isinstance(stmt, A.Comment):
                if stmt.trailing and replaced:
                    # The line it trailed no longer exists.
                    stmt = dataclasses.replace(stmt, trailing=False)
                stmts.append(stmt)
                replaced = False
                continue

            stmt = self._expand_nested(stmt)
            call = self._finder.search(stmt)
            if call is None:
                stmts.append(stmt)
                replaced = False
                continue

            macro = self.table.lookup(call.callee.name)
            ctx = SubstitutionContext.for_call(macro, call, strict=self.strict_arity)
            expansion = substitute_block(macro.body, ctx)
            logger.debug(
                "%s: expanded %s() into %d statement(s)",
                stmt.loc, macro.name, len(expansion),
            )
            self.stats.calls_expanded += 1
            stmts.extend(expansion)
            replaced = True
        return dataclasses.replace(block, stmts=stmts)

    def _expand_nested(self, node: A.Node) -> A.Node:
        """Expand every block below *node*: statement bodies, ``case``
        bodies and function literals.

        Subtrees without blocks are returned as they are, so call arguments
        keep their identity.
        """
        changes = {}
        for f in dataclasses.fields(node):
            if f.name == "loc":
                continue
            value = getattr(node, f.name)
            new = self._expand_value(value)
            if new is not value:
                changes[f.name] = new
        return dataclasses.replace(node, **changes) if changes else node

    def _expand_value(self, value):
        if isinstance(value, A.Block):
            return self.expand(value)
        if isinstance(value, A.Node):
            return self._expand_nested(value)
        if isinstance(value, list):
            items = [self._expand_value(item) for item in value]
            if any(new is not old for new, old in zip(items, value)):
                return items
        return value


# ═══════════════════════════════════════════════════════════════════
#  Driver
# ═══════════════════════════════════════════════════════════════════

def expand_program(program: A.Program, config: Optional[ExpanderConfig] = None) -> A.Program:
    """Expand every macro call in *program*.

    Returns a new program without the macro declarations; *program* itself
    is left untouched.
    """
    config = config or ExpanderConfig()
    table = MacroTable(prefix=config.prefix)
    stats = ExpansionStats()
    expander = BlockExpander(table, strict_arity=config.strict_arity, stats=stats)
    expand_body = expander.expand if config.recursive else None

    items: List[A.Node] = []
    dropped = False
    for item in program.items:
        if isinstance(item, A.FuncDecl):
            if table.define(item, expand_body=expand_body):
                stats.macros_defined += 1
                dropped = True
                continue
            item = dataclasses.replace(item, body=expander.expand(item.body))
            stats.functions_processed += 1
        elif isinstance(item, A.Comment) and item.trailing and dropped:
            # Trailing comment of a removed macro declaration.
            continue
        dropped = False
        items.append(item)

    logger.info(
        "%s: %d macro(s) defined, %d call(s) expanded in %d function(s)",
        program.filename, stats.macros_defined, stats.calls_expanded,
        stats.functions_processed,
    )
    return dataclasses.replace(program, items=items)


def expand_source(
    text: str,
    config: Optional[ExpanderConfig] = None,
    filename: str = "<input>",
) -> str:
    """Parse, expand and format Go source text."""
    program = parse(text, filename)
    return format_program(expand_program(program, config))


def _write_output(dst: str, text: str) -> None:
    """Write *text* to *dst*; ``"-"`` is standard output."""
    try:
        if dst == "-":
            sys.stdout.write(text)
            return
        with open(os.path.expanduser(dst), "w", encoding="utf-8") as f:
            f.write(text)
    except OSError as exc:
        raise OutputError(dst, cause=exc) from exc


def expand_file(src: str, dst: str, config: Optional[ExpanderConfig] = None) -> str:
    """Expand the template *src* and write the result to *dst*.

    *dst* may be ``"-"`` for standard output.  The destination is only
    opened once expansion has succeeded.  Returns the expanded text.
    """
    with open(os.path.expanduser(src), "r", encoding="utf-8") as f:
        text = f.read()
    result = expand_source(text, config, filename=src)
    _write_output(dst, result)
    return result
