"""gomacro/parser.py – Go source text → gomacro AST.

Runs :data:`gomacro.grammar.GO_GRAMMAR` over the input and converts the
parsimonious parse tree into the nodes of :mod:`gomacro.ast_nodes`.

Design principles
-----------------
* **Rule-name dispatch** – every grammar rule that produces an AST value
  has a ``visit_<rule>`` method; anonymous groups fall through to
  ``generic_visit``, which returns the list of visited children.  The
  ``hdr_*`` header rules share the visitors of the rules they repeat.
* **Type-directed extraction** – builders pick the values they need out of
  the (flattened) children by type, which keeps them independent of the
  exact whitespace layout of each rule.
* **Fail-fast with location** – grammar failures are raised as
  :class:`gomacro.errors.GoSyntaxError` carrying the ``file:line:col`` of
  the token the grammar could not get past.

Public API
----------
``parse(text, filename) -> Program``
    Parse a complete source file.

``parse_expression(text) -> Expr``
    Parse a standalone expression (useful for tests).
"""

from __future__ import annotations

import bisect
import dataclasses
import logging
import re
from typing import Any, List, NamedTuple, Optional

from parsimonious.exceptions import IncompleteParseError, ParseError
from parsimonious.nodes import Node as ParseNode, NodeVisitor

from gomacro.ast_nodes import (
    EXPR_TYPES, STMT_TYPES,
    AssignOp, AssignStmt, BasicLit, BinaryExpr, BinOp, Block, BlockStmt,
    BranchStmt, CallExpr, CaseClause, CommClause, Comment, CompositeLit,
    DeclStmt, DeferStmt, ExprStmt, Field, ForStmt, FuncDecl, FuncLit, GoStmt,
    Identifier, IfStmt, IncDecStmt, IndexExpr, KeyValueExpr, LabeledStmt,
    LitKind, Loc, PackageClause, ParenExpr, Program, RangeStmt, RawDecl,
    ReturnStmt, SelectorExpr, SelectStmt, SendStmt, SliceExpr, SwitchStmt,
    TypeAssertExpr, TypeExpr, TypeSwitchStmt, UnaryExpr, UnaryOp, VarDeclStmt,
)
from gomacro.errors import GoSyntaxError, MacroError
from gomacro.grammar import GO_GRAMMAR

__all__ = ["parse", "parse_expression", "GoASTBuilder"]

logger = logging.getLogger(__name__)

_DECL_TYPES = (PackageClause, FuncDecl, RawDecl, Comment)

# Comments and quoted text, ignored when counting brackets.
_BRACKET_NOISE = re.compile(
    r'//[^\n]*|/\*.*?\*/|"(?:[^"\\\n]|\\.)*"|\'(?:[^\'\\\n]|\\.)*\'', re.S
)


def _reindent(text: str) -> str:
    """Indent each line of *text* by one tab per enclosing bracket."""
    lines = []
    depth = 0
    for raw in text.strip().split("\n"):
        line = raw.strip()
        if not line:
            lines.append("")
            continue
        code = _BRACKET_NOISE.sub("", line)
        closers = len(code) - len(code.lstrip(")]}"))
        lines.append("\t" * max(depth - closers, 0) + line)
        depth += sum(code.count(c) for c in "([{") - sum(code.count(c) for c in ")]}")
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Intermediate values passed between visit methods
# ---------------------------------------------------------------------------

class _Names(NamedTuple):
    names: List[str]


class _Exprs(NamedTuple):
    exprs: list


class _Args(NamedTuple):
    exprs: list
    ellipsis: bool


class _TypeText(NamedTuple):
    text: str


class _Params(NamedTuple):
    fields: List[Field]


class _Signature(NamedTuple):
    params: List[Field]
    results: Optional[str]


class _IfHeader(NamedTuple):
    init: Any
    cond: Any


class _ForClause(NamedTuple):
    init: Any
    cond: Any
    post: Any


class _RangeHeader(NamedTuple):
    key: Any
    value: Any
    tok: Optional[AssignOp]
    iterable: Any


class _SwitchHeader(NamedTuple):
    init: Any
    guard: Any


class _CaseHead(NamedTuple):
    exprs: list


class _CommHead(NamedTuple):
    stmt: Any


class _CallSuffix(NamedTuple):
    args: list
    ellipsis: bool
    end_line: int


class _IndexSuffix(NamedTuple):
    index: Any
    end_line: int


class _SliceRange(NamedTuple):
    low: Any
    high: Any
    max: Any
    slice3: bool


class _TypeAssertSuffix(NamedTuple):
    type: Optional[str]
    end_line: int


class _SelectorSuffix(NamedTuple):
    name: str
    end_line: int


# ═══════════════════════════════════════════════════════════════════
#  Parse tree → AST
# ═══════════════════════════════════════════════════════════════════

class GoASTBuilder(NodeVisitor):
    """Transforms a parsimonious parse tree into a gomacro AST."""

    grammar = GO_GRAMMAR
    unwrapped_exceptions = (MacroError,)

    def __init__(self, text: str, filename: str = "<input>") -> None:
        self._filename = filename
        self._line_starts = [0] + [m.end() for m in re.finditer("\n", text)]

    # ─────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────

    def generic_visit(self, node, visited_children):
        """Default: return the visited children, or None for leaves."""
        return visited_children or None

    def _line_of(self, offset: int) -> int:
        return bisect.bisect_right(self._line_starts, offset)

    def _loc(self, node: ParseNode) -> Loc:
        line = self._line_of(node.start)
        col = node.start - self._line_starts[line - 1] + 1
        end_line = self._line_of(max(node.start, node.end - 1))
        return Loc(self._filename, line, col, end_line)

    def _flatten(self, items: Any) -> list:
        """Flatten nested lists, dropping ``None`` and raw parse nodes."""
        result = []
        if not isinstance(items, list):
            items = [items]
        for item in items:
            if isinstance(item, list):
                result.extend(self._flatten(item))
            elif item is not None and not isinstance(item, ParseNode):
                result.append(item)
        return result

    def _first(self, items: Any, kind) -> Any:
        for item in self._flatten(items):
            if isinstance(item, kind):
                return item
        return None

    def _all(self, items: Any, kind) -> list:
        return [item for item in self._flatten(items) if isinstance(item, kind)]

    @staticmethod
    def _type_text(text: str) -> str:
        text = text.strip()
        if "\n" in text:
            return _reindent(text)
        return " ".join(text.split())

    # ─────────────────────────────────────────────────────────────
    # File level
    # ─────────────────────────────────────────────────────────────

    def visit_source_file(self, node, visited_children):
        items = self._all(visited_children, _DECL_TYPES)
        return Program(items=items, filename=self._filename, loc=self._loc(node))

    def visit_package_clause(self, node, visited_children):
        _, _, name, end = visited_children
        return [PackageClause(name=name.name, loc=self._loc(node))] + end

    def visit_raw_decl(self, node, visited_children):
        keyword_node, body_node, _ = node.children
        text = (keyword_node.text + body_node.text).rstrip()
        decl = RawDecl(keyword=keyword_node.text, text=text, loc=self._loc(node))
        return [decl] + visited_children[2]

    def visit_decl_end(self, node, visited_children):
        return self._all(visited_children, Comment)

    def visit_comment(self, node, visited_children):
        return visited_children[0]

    def visit_trailing_comment(self, node, visited_children):
        comment = visited_children[0]
        return Comment(text=comment.text, trailing=True, loc=comment.loc)

    def visit_line_comment(self, node, visited_children):
        return Comment(text=node.text.rstrip(), loc=self._loc(node))

    def visit_block_comment(self, node, visited_children):
        return Comment(text=node.text, loc=self._loc(node))

    # ─────────────────────────────────────────────────────────────
    # Functions
    # ─────────────────────────────────────────────────────────────

    def visit_func_decl(self, node, visited_children):
        _, _, receiver, name, type_params, _, signature, _, body, end = visited_children
        type_params = self._first(type_params, _TypeText)
        decl = FuncDecl(
            name=name.name,
            params=signature.params,
            body=body,
            results=signature.results,
            receiver=self._first(receiver, Field),
            type_params=type_params.text if type_params else None,
            loc=self._loc(node),
        )
        return [decl] + end

    def visit_func_lit(self, node, visited_children):
        _, _, signature, _, body = visited_children
        return FuncLit(
            params=signature.params,
            body=body,
            results=signature.results,
            loc=self._loc(node),
        )

    def visit_receiver(self, node, visited_children):
        return self._first(visited_children, Field)

    def visit_type_params(self, node, visited_children):
        return _TypeText(self._type_text(node.text))

    def visit_signature(self, node, visited_children):
        params, _, results = visited_children
        result_type = self._first(results, _TypeText)
        return _Signature(params.fields, result_type.text if result_type else None)

    def visit_params(self, node, visited_children):
        return _Params(self._all(visited_children, Field))

    def visit_param_decl(self, node, visited_children):
        names = self._first(visited_children, _Names)
        type_text = self._first(visited_children, _TypeText)
        return Field(
            names=names.names if names else [],
            type=type_text.text,
            loc=self._loc(node),
        )

    def visit_ident_list(self, node, visited_children):
        return _Names([ident.name for ident in self._all(visited_children, Identifier)])

    def visit_results(self, node, visited_children):
        return _TypeText(self._type_text(node.text))

    def visit_type(self, node, visited_children):
        return _TypeText(self._type_text(node.text))

    # ─────────────────────────────────────────────────────────────
    # Blocks & statements
    # ─────────────────────────────────────────────────────────────

    def visit_block(self, node, visited_children):
        return Block(stmts=self._all(visited_children, STMT_TYPES), loc=self._loc(node))

    def visit_statement_line(self, node, visited_children):
        stmt, end = visited_children
        return [stmt] + end

    def visit_statement(self, node, visited_children):
        return visited_children[0]

    def visit_simple_stmt(self, node, visited_children):
        return visited_children[0]

    def visit_send_stmt(self, node, visited_children):
        chan, _, _, _, value = visited_children
        return SendStmt(chan=chan, value=value, loc=self._loc(node))

    def visit_assign_stmt(self, node, visited_children):
        lhs, _, op, _, rhs = visited_children
        return AssignStmt(lhs=lhs.exprs, op=op, rhs=rhs.exprs, loc=self._loc(node))

    def visit_assign_op(self, node, visited_children):
        return AssignOp(node.text)

    def visit_range_tok(self, node, visited_children):
        return AssignOp(node.text)

    def visit_incdec_stmt(self, node, visited_children):
        expr, _, op = visited_children
        return IncDecStmt(expr=expr, op=op, loc=self._loc(node))

    def visit_incdec_op(self, node, visited_children):
        return node.text

    def visit_expr_stmt(self, node, visited_children):
        return ExprStmt(expr=visited_children[0], loc=self._loc(node))

    def visit_expr_list(self, node, visited_children):
        return _Exprs(self._all(visited_children, EXPR_TYPES))

    def visit_labeled_stmt(self, node, visited_children):
        label = visited_children[0]
        return LabeledStmt(label=label.name, stmt=visited_children[-1], loc=self._loc(node))

    def visit_if_stmt(self, node, visited_children):
        _, _, header, body, else_clause = visited_children
        return IfStmt(
            init=header.init,
            cond=header.cond,
            body=body,
            else_=self._first(else_clause, (IfStmt, Block)),
            loc=self._loc(node),
        )

    def visit_if_header(self, node, visited_children):
        init_part, cond, _ = visited_children
        return _IfHeader(self._first(init_part, STMT_TYPES), cond)

    def visit_else_clause(self, node, visited_children):
        return self._first(visited_children, (IfStmt, Block))

    def visit_for_stmt(self, node, visited_children):
        _, _, header_part, body = visited_children
        header = self._first(header_part, (_ForClause, _RangeHeader) + EXPR_TYPES)
        loc = self._loc(node)
        if isinstance(header, _RangeHeader):
            return RangeStmt(
                key=header.key, value=header.value, tok=header.tok,
                iterable=header.iterable, body=body, loc=loc,
            )
        if isinstance(header, _ForClause):
            return ForStmt(init=header.init, cond=header.cond, post=header.post,
                           body=body, loc=loc)
        return ForStmt(init=None, cond=header, post=None, body=body, loc=loc)

    def visit_for_header(self, node, visited_children):
        return self._first(visited_children, (_ForClause, _RangeHeader) + EXPR_TYPES)

    def visit_for_clause(self, node, visited_children):
        init, _, _, _, cond, _, _, _, post = visited_children
        return _ForClause(
            self._first(init, STMT_TYPES),
            self._first(cond, EXPR_TYPES),
            self._first(post, STMT_TYPES),
        )

    def visit_range_clause(self, node, visited_children):
        lhs_part, _, _, iterable = visited_children
        exprs = self._first(lhs_part, _Exprs)
        targets = exprs.exprs if exprs else []
        return _RangeHeader(
            key=targets[0] if targets else None,
            value=targets[1] if len(targets) > 1 else None,
            tok=self._first(lhs_part, AssignOp),
            iterable=iterable,
        )

    # -- switch / select --------------------------------------------------

    def visit_switch_stmt(self, node, visited_children):
        header, items = visited_children[2], visited_children[4]
        loc = self._loc(node)
        clauses = self._clause_list(items)
        guard = header.guard
        if self._is_type_guard(guard):
            return TypeSwitchStmt(init=header.init, assign=guard, clauses=clauses, loc=loc)
        if guard is not None and not isinstance(guard, ExprStmt):
            raise GoSyntaxError("switch tag must be an expression", loc=guard.loc)
        return SwitchStmt(
            init=header.init,
            tag=guard.expr if guard is not None else None,
            clauses=clauses,
            loc=loc,
        )

    @staticmethod
    def _is_type_guard(guard) -> bool:
        if isinstance(guard, AssignStmt) and guard.op is AssignOp.DEFINE and len(guard.rhs) == 1:
            expr = guard.rhs[0]
        elif isinstance(guard, ExprStmt):
            expr = guard.expr
        else:
            return False
        return isinstance(expr, TypeAssertExpr) and expr.type is None

    def visit_switch_header(self, node, visited_children):
        init_part, guard_part, _ = visited_children
        return _SwitchHeader(self._first(init_part, STMT_TYPES), self._first(guard_part, STMT_TYPES))

    def visit_case_clause(self, node, visited_children):
        head, _, _, end, items = visited_children
        loc = self._loc(node)
        body = Block(stmts=self._all(end, Comment) + self._all(items, STMT_TYPES), loc=loc)
        return CaseClause(exprs=head.exprs, body=body, loc=loc)

    def visit_case_head(self, node, visited_children):
        exprs = self._first(visited_children, _Exprs)
        return _CaseHead(exprs.exprs if exprs else [])

    def visit_select_stmt(self, node, visited_children):
        return SelectStmt(clauses=self._clause_list(visited_children[3]), loc=self._loc(node))

    def visit_comm_clause(self, node, visited_children):
        head, _, _, end, items = visited_children
        loc = self._loc(node)
        body = Block(stmts=self._all(end, Comment) + self._all(items, STMT_TYPES), loc=loc)
        return CommClause(comm=head.stmt, body=body, loc=loc)

    def visit_comm_head(self, node, visited_children):
        return _CommHead(self._first(visited_children, STMT_TYPES))

    def _clause_list(self, items) -> list:
        """Clauses and comments in order.

        Comments at the end of a clause body that sit at or left of the
        ``case`` keyword belong to the switch, not to that clause.
        """
        clauses = []
        for item in self._flatten(items):
            if isinstance(item, (CaseClause, CommClause)):
                stmts = item.body.stmts
                moved = []
                while (stmts and isinstance(stmts[-1], Comment) and not stmts[-1].trailing
                       and stmts[-1].loc.col <= item.loc.col):
                    moved.insert(0, stmts.pop())
                if moved:
                    end_line = stmts[-1].loc.end_line if stmts else item.loc.line
                    item.loc = dataclasses.replace(item.loc, end_line=end_line)
                clauses.append(item)
                clauses.extend(moved)
            elif isinstance(item, Comment):
                clauses.append(item)
        return clauses

    # -- other statements -------------------------------------------------

    def visit_return_stmt(self, node, visited_children):
        results = self._first(visited_children, _Exprs)
        return ReturnStmt(results=results.exprs if results else [], loc=self._loc(node))

    def visit_branch_stmt(self, node, visited_children):
        label = self._first(visited_children[1], Identifier)
        return BranchStmt(
            keyword=node.children[0].text,
            label=label.name if label else None,
            loc=self._loc(node),
        )

    def visit_go_stmt(self, node, visited_children):
        return GoStmt(call=visited_children[2], loc=self._loc(node))

    def visit_defer_stmt(self, node, visited_children):
        return DeferStmt(call=visited_children[2], loc=self._loc(node))

    def visit_var_stmt(self, node, visited_children):
        names = self._first(visited_children, _Names)
        type_text = self._first(visited_children, _TypeText)
        values = self._first(visited_children, _Exprs)
        return VarDeclStmt(
            keyword=node.children[0].text,
            names=names.names,
            type=type_text.text if type_text else None,
            values=values.exprs if values else [],
            loc=self._loc(node),
        )

    def visit_decl_stmt(self, node, visited_children):
        return DeclStmt(keyword=node.children[0].text, text=_reindent(node.text), loc=self._loc(node))

    def visit_block_stmt(self, node, visited_children):
        return BlockStmt(block=visited_children[1], loc=self._loc(node))

    # ─────────────────────────────────────────────────────────────
    # Expressions
    # ─────────────────────────────────────────────────────────────

    def visit_expression(self, node, visited_children):
        first, rest = visited_children
        flat = [first] + self._flatten(rest)
        if len(flat) == 1:
            return first
        return self._fold_binary(flat)

    def _fold_binary(self, flat: list):
        """Operator-precedence fold of ``operand (op operand)*``."""
        operands = [flat[0]]
        pending: List[BinOp] = []
        for op, operand in zip(flat[1::2], flat[2::2]):
            while pending and pending[-1].precedence >= op.precedence:
                self._reduce(operands, pending)
            pending.append(op)
            operands.append(operand)
        while pending:
            self._reduce(operands, pending)
        return operands[0]

    def _reduce(self, operands: list, pending: List[BinOp]) -> None:
        op = pending.pop()
        right = operands.pop()
        left = operands.pop()
        loc = Loc(left.loc.file, left.loc.line, left.loc.col, right.loc.end_line)
        operands.append(BinaryExpr(left=left, op=op, right=right, loc=loc))

    def visit_binary_op(self, node, visited_children):
        return BinOp(node.text)

    def visit_unary_expr(self, node, visited_children):
        child = visited_children[0]
        if isinstance(child, list):
            op, _, operand = child
            return UnaryExpr(op=op, operand=operand, loc=self._loc(node))
        return child

    def visit_unary_op(self, node, visited_children):
        return UnaryOp(node.text)

    def visit_primary_expr(self, node, visited_children):
        expr, postfixes = visited_children
        start = expr.loc
        for suffix in self._flatten(postfixes):
            loc = Loc(start.file, start.line, start.col, suffix.end_line)
            if isinstance(suffix, _CallSuffix):
                expr = CallExpr(callee=expr, args=suffix.args, ellipsis=suffix.ellipsis, loc=loc)
            elif isinstance(suffix, _IndexSuffix) and isinstance(suffix.index, _SliceRange):
                rng = suffix.index
                expr = SliceExpr(base=expr, low=rng.low, high=rng.high, max=rng.max,
                                 slice3=rng.slice3, loc=loc)
            elif isinstance(suffix, _IndexSuffix):
                expr = IndexExpr(base=expr, index=suffix.index, loc=loc)
            elif isinstance(suffix, _TypeAssertSuffix):
                expr = TypeAssertExpr(base=expr, type=suffix.type, loc=loc)
            else:
                expr = SelectorExpr(base=expr, name=suffix.name, loc=loc)
        return expr

    def visit_postfix(self, node, visited_children):
        return visited_children[0]

    def visit_call_suffix(self, node, visited_children):
        args = self._first(visited_children, _Args)
        if args is None:
            return _CallSuffix([], False, self._loc(node).end_line)
        return _CallSuffix(args.exprs, args.ellipsis, self._loc(node).end_line)

    def visit_arg_list(self, node, visited_children):
        return _Args(self._all(visited_children, EXPR_TYPES), "..." in node.children[2].text)

    def visit_index_suffix(self, node, visited_children):
        index = self._first(visited_children, (_SliceRange,) + EXPR_TYPES)
        return _IndexSuffix(index, self._loc(node).end_line)

    def visit_slice_range(self, node, visited_children):
        low, _, _, _, high, max_part = visited_children
        return _SliceRange(
            self._first(low, EXPR_TYPES),
            self._first(high, EXPR_TYPES),
            self._first(max_part, EXPR_TYPES),
            bool(node.children[5].text),
        )

    def visit_type_assert_suffix(self, node, visited_children):
        type_text = self._first(visited_children, _TypeText)
        return _TypeAssertSuffix(type_text.text if type_text else None, self._loc(node).end_line)

    def visit_selector_suffix(self, node, visited_children):
        return _SelectorSuffix(visited_children[1].name, self._loc(node).end_line)

    def visit_operand(self, node, visited_children):
        return visited_children[0]

    def visit_paren_expr(self, node, visited_children):
        return ParenExpr(inner=self._first(visited_children, EXPR_TYPES), loc=self._loc(node))

    def visit_type_expr(self, node, visited_children):
        return TypeExpr(text=self._type_text(node.text), loc=self._loc(node))

    def visit_identifier(self, node, visited_children):
        return Identifier(name=node.text, loc=self._loc(node))

    # -- composite literals -----------------------------------------------

    def visit_composite_lit(self, node, visited_children):
        type_text, _, value = visited_children
        return CompositeLit(type=type_text.text, elts=value.elts, loc=self._loc(node))

    def visit_literal_type(self, node, visited_children):
        return _TypeText(self._type_text(node.text))

    def visit_literal_value(self, node, visited_children):
        elts = self._first(visited_children, _Exprs)
        return CompositeLit(type=None, elts=elts.exprs if elts else [], loc=self._loc(node))

    def visit_element_list(self, node, visited_children):
        return _Exprs(self._all(visited_children, EXPR_TYPES))

    def visit_element(self, node, visited_children):
        return visited_children[0]

    def visit_element_value(self, node, visited_children):
        return visited_children[0]

    def visit_keyed_element(self, node, visited_children):
        key, _, _, _, value = visited_children
        return KeyValueExpr(key=key, value=value, loc=self._loc(node))

    # ─────────────────────────────────────────────────────────────
    # Literals
    # ─────────────────────────────────────────────────────────────

    def visit_literal(self, node, visited_children):
        return visited_children[0]

    def _basic_lit(self, kind: LitKind, node) -> BasicLit:
        return BasicLit(kind=kind, value=node.text, loc=self._loc(node))

    def visit_imaginary_lit(self, node, visited_children):
        return self._basic_lit(LitKind.IMAG, node)

    def visit_float_lit(self, node, visited_children):
        return self._basic_lit(LitKind.FLOAT, node)

    def visit_int_lit(self, node, visited_children):
        return self._basic_lit(LitKind.INT, node)

    def visit_rune_lit(self, node, visited_children):
        return self._basic_lit(LitKind.CHAR, node)

    def visit_string_lit(self, node, visited_children):
        return self._basic_lit(LitKind.STRING, node)

    # ─────────────────────────────────────────────────────────────
    # Header variants
    # ─────────────────────────────────────────────────────────────

    visit_hdr_simple_stmt = visit_simple_stmt
    visit_hdr_send_stmt = visit_send_stmt
    visit_hdr_assign_stmt = visit_assign_stmt
    visit_hdr_incdec_stmt = visit_incdec_stmt
    visit_hdr_expr_stmt = visit_expr_stmt
    visit_hdr_expr_list = visit_expr_list
    visit_hdr_expression = visit_expression
    visit_hdr_unary_expr = visit_unary_expr
    visit_hdr_primary_expr = visit_primary_expr
    visit_hdr_operand = visit_operand
    visit_hdr_composite_lit = visit_composite_lit
    visit_hdr_literal_type = visit_literal_type


# ═══════════════════════════════════════════════════════════════════
#  Public API
# ═══════════════════════════════════════════════════════════════════

def _furthest_failure(exc: IncompleteParseError) -> ParseError:
    """Re-match the declaration the parse stopped at.

    ``parse`` only reports where the top-level repetition ended; matching
    the failed item on its own reports the token it could not get past.
    """
    try:
        GO_GRAMMAR["top_item"].match(exc.text, pos=exc.pos)
    except ParseError as inner:
        if inner.pos >= exc.pos:
            return inner
    return exc


def _syntax_error(exc: ParseError, filename: str) -> GoSyntaxError:
    if exc.pos >= len(exc.text):
        message = "unexpected end of input"
    else:
        snippet = exc.text[exc.pos:exc.pos + 20].split("\n", 1)[0]
        message = f"unexpected {snippet!r}" if snippet else "unexpected newline"
    rule = getattr(exc.expr, "name", "") or ""
    # The top-level rule only tells us where matching stopped.
    if rule and not isinstance(exc, IncompleteParseError):
        message += f" while parsing {rule}"
    loc = Loc(filename, exc.line(), exc.column())
    return GoSyntaxError(message, loc=loc, expected=[rule] if rule else None, cause=exc)


def parse(text: str, filename: str = "<input>") -> Program:
    """Parse Go *text* into a :class:`~gomacro.ast_nodes.Program`."""
    try:
        tree = GO_GRAMMAR.parse(text)
    except IncompleteParseError as exc:
        failure = _furthest_failure(exc)
        raise _syntax_error(failure, filename) from exc
    except ParseError as exc:
        raise _syntax_error(exc, filename) from exc
    program = GoASTBuilder(text, filename).visit(tree)
    logger.debug("parsed %s: %d top-level items", filename, len(program.items))
    return program


def parse_expression(text: str, filename: str = "<expr>"):
    """Parse a single expression."""
    try:
        tree = GO_GRAMMAR["expression"].parse(text)
    except ParseError as exc:
        raise _syntax_error(exc, filename) from exc
    return GoASTBuilder(text, filename).visit(tree)
