# gomacro/substitute.py
"""
Substitution of macro parameters with call-site arguments.

Only a small, explicit subset of the tree can be substituted:

    statements   AssignStmt, ExprStmt
    expressions  Identifier, BasicLit, BinaryExpr, UnaryExpr,
                 IndexExpr, CallExpr, ParenExpr

Everything else raises :class:`~gomacro.errors.UnsupportedNodeError`.
Rebuilt nodes carry no position.  A parameter identifier is replaced by the
argument object itself, so every occurrence in the expansion shares it with
the call site.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Sequence

from gomacro import ast_nodes as A
from gomacro.errors import MacroArityError, UnsupportedNodeError
from gomacro.macros import MacroDefinition
from gomacro.visitor import ASTVisitor

__all__ = [
    "SubstitutionContext",
    "Substituter",
    "substitute_expr",
    "substitute_stmt",
    "substitute_block",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubstitutionContext:
    """The macro being expanded and the arguments of one call to it."""
    macro: str
    params: Sequence[str]
    args: Sequence[A.Node]

    @classmethod
    def for_call(
        cls,
        macro: MacroDefinition,
        call: A.CallExpr,
        strict: bool = True,
    ) -> "SubstitutionContext":
        """Bind *call*'s arguments to *macro*'s parameters.

        In strict mode an argument count that differs from the parameter
        count raises :class:`MacroArityError`.
        """
        if len(call.args) != macro.arity:
            if strict:
                raise MacroArityError(macro.name, macro.arity, len(call.args), loc=call.loc)
            logger.warning(
                "%s: macro %r expects %d argument(s), got %d",
                call.loc, macro.name, macro.arity, len(call.args),
            )
        return cls(macro=macro.name, params=tuple(macro.params), args=tuple(call.args))

    def argument_for(self, name: str):
        """Argument bound to parameter *name*, or None."""
        for index, param in enumerate(self.params):
            if param == name:
                return self.args[index] if index < len(self.args) else None
        return None


class Substituter(ASTVisitor):
    """Rebuilds a macro body node with parameters replaced."""

    def __init__(self, ctx: SubstitutionContext) -> None:
        self.ctx = ctx

    # -- statements -------------------------------------------------------

    def visit_assign_stmt(self, node: A.AssignStmt) -> A.AssignStmt:
        return A.AssignStmt(
            lhs=[self.visit(e) for e in node.lhs],
            op=node.op,
            rhs=[self.visit(e) for e in node.rhs],
        )

    def visit_expr_stmt(self, node: A.ExprStmt) -> A.ExprStmt:
        return A.ExprStmt(expr=self.visit(node.expr))

    # -- expressions ------------------------------------------------------

    def visit_identifier(self, node: A.Identifier) -> A.Node:
        arg = self.ctx.argument_for(node.name)
        if arg is not None:
            return arg
        return A.Identifier(name=node.name)

    def visit_basic_lit(self, node: A.BasicLit) -> A.BasicLit:
        return A.BasicLit(kind=node.kind, value=node.value)

    def visit_binary_expr(self, node: A.BinaryExpr) -> A.BinaryExpr:
        return A.BinaryExpr(left=self.visit(node.left), op=node.op, right=self.visit(node.right))

    def visit_unary_expr(self, node: A.UnaryExpr) -> A.UnaryExpr:
        return A.UnaryExpr(op=node.op, operand=self.visit(node.operand))

    def visit_index_expr(self, node: A.IndexExpr) -> A.IndexExpr:
        return A.IndexExpr(base=self.visit(node.base), index=self.visit(node.index))

    def visit_call_expr(self, node: A.CallExpr) -> A.CallExpr:
        return A.CallExpr(
            callee=self.visit(node.callee),
            args=[self.visit(a) for a in node.args],
            ellipsis=node.ellipsis,
        )

    def visit_paren_expr(self, node: A.ParenExpr) -> A.ParenExpr:
        return A.ParenExpr(inner=self.visit(node.inner))

    def generic_visit(self, node: A.Node):
        category = "expression" if isinstance(node, A.EXPR_TYPES) else "statement"
        raise UnsupportedNodeError(category, type(node).__name__, loc=node.loc)


def substitute_expr(expr: A.Node, ctx: SubstitutionContext) -> A.Node:
    """Substitute parameters inside one expression."""
    if not isinstance(expr, A.EXPR_TYPES):
        raise UnsupportedNodeError("expression", type(expr).__name__, loc=expr.loc)
    return Substituter(ctx).visit(expr)


def substitute_stmt(stmt: A.Node, ctx: SubstitutionContext) -> A.Node:
    """Substitute parameters inside one statement."""
    if not isinstance(stmt, (A.AssignStmt, A.ExprStmt)):
        raise UnsupportedNodeError("statement", type(stmt).__name__, loc=stmt.loc)
    return Substituter(ctx).visit(stmt)


def substitute_block(block: A.Block, ctx: SubstitutionContext) -> List[A.Node]:
    """Replacement statements for one expansion of a macro body.

    Comments in the body are not carried into the expansion.
    """
    sub = Substituter(ctx)
    stmts = []
    for stmt in block.stmts:
        if isinstance(stmt, A.Comment):
            continue
        if not isinstance(stmt, (A.AssignStmt, A.ExprStmt)):
            raise UnsupportedNodeError("statement", type(stmt).__name__, loc=stmt.loc)
        stmts.append(sub.visit(stmt))
    return stmts
