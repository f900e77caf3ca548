#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
gomacro/formatter.py
====================

gofmt-style printer for the gomacro AST.

Statements are laid out one per line with tab indentation.  Expressions
follow go/printer's rules:

* parentheses are inserted wherever an operand binds looser than its
  position requires (substituted arguments rely on this: ``a * b`` with
  ``a := x + y`` prints as ``(x + y) * b``);
* blanks around binary operators depend on the expression's nesting depth
  and on the mix of precedence levels (``a + b*c``, ``f(a+b, c)``);
* conditions of ``if``/``for``/``switch`` headers lose redundant outer
  parentheses;
* argument and element lists keep the line breaks of the source, with a
  trailing comma when the closing bracket sits on its own line, and keys of
  consecutive one-per-line ``key: value`` elements are aligned;
* function bodies written on one line stay on one line when they are short.

Blank lines are kept where the source had them.  Nodes without a position
(substituted code) never get blank lines between them.
"""

from __future__ import annotations

import re
from typing import Any, List, Optional, Tuple

from gomacro import ast_nodes as A
from gomacro.ast_nodes import HIGHEST_PREC, LOWEST_PREC, UNARY_PREC
from gomacro.visitor import ASTVisitor

__all__ = [
    "format_program",
    "format_block",
    "format_expr",
    "CodeEmitter",
    "GoPrinter",
]

# Newlines outside comments and string literals.
_CODE_TOKEN = re.compile(
    r'//[^\n]*|/\*.*?\*/|"(?:[^"\\\n]|\\.)*"|\'(?:[^\'\\\n]|\\.)*\'|`[^`]*`|\n',
    re.S,
)

# go/printer: key sizes up to this never break key alignment.
_SMALL_KEY = 40

# go/printer: longest one-line function body, header included.
_MAX_ONE_LINE_FUNC = 100
_MAX_ONE_LINE_STMTS = 5


def _code_lines(code: str) -> List[str]:
    """Split *code* at newlines that are not inside a raw string or comment."""
    lines = []
    start = 0
    for m in _CODE_TOKEN.finditer(code):
        if m.group() == "\n":
            lines.append(code[start:m.start()])
            start = m.end()
    lines.append(code[start:])
    return lines


def _indent_text(text: str) -> str:
    return "\n".join("\t" + line if line.strip() else "" for line in _code_lines(text))


# ═══════════════════════════════════════════════════════════════════════════
# CODE EMITTER
# ═══════════════════════════════════════════════════════════════════════════

class CodeEmitter:
    """Line buffer with indentation tracking."""

    def __init__(self, indent_str: str = "\t") -> None:
        self._lines: List[str] = []
        self._indent_str = indent_str
        self._indent_level = 0

    def emit(self, code: str) -> None:
        """Emit code at the current indentation, one line per source line."""
        for line in _code_lines(code):
            if line.strip():
                self._lines.append(self._indent_str * self._indent_level + line)
            else:
                self._lines.append("")

    def emit_outdented(self, code: str) -> None:
        """Emit code one level left of the current indentation (labels)."""
        level = self._indent_level
        self.dedent()
        self.emit(code)
        self._indent_level = level

    def emit_raw(self, code: str) -> None:
        """Emit code without indentation (verbatim declarations)."""
        self._lines.extend(code.split("\n"))

    def emit_blank(self) -> None:
        if self._lines and self._lines[-1] != "":
            self._lines.append("")

    def append(self, text: str) -> bool:
        """Append *text* to the last line; False when nothing was emitted yet."""
        if not self._lines or not self._lines[-1]:
            return False
        self._lines[-1] += text
        return True

    def indent(self) -> None:
        self._indent_level += 1

    def dedent(self) -> None:
        self._indent_level = max(0, self._indent_level - 1)

    def get_code(self) -> str:
        """Get the generated code, newline-terminated."""
        return "\n".join(self._lines) + "\n" if self._lines else ""


# ═══════════════════════════════════════════════════════════════════════════
# EXPRESSIONS
# ═══════════════════════════════════════════════════════════════════════════

def _may_combine(prev: str, nxt: str) -> bool:
    """Would ``prev`` followed directly by ``nxt`` lex as a different token?"""
    if not nxt:
        return False
    first = nxt[0]
    last = prev[-1]
    return (
        (last == "+" and first == "+")
        or (last == "-" and first == "-")
        or (last == "/" and first == "*")
        or (last == "<" and first in "-<")
        or (last == "&" and first in "&^")
    )


def _walk_binary(e: A.BinaryExpr) -> Tuple[bool, bool, int]:
    prec = e.op.precedence
    has4 = prec == 4
    has5 = prec == 5
    max_problem = 0

    left = e.left
    if isinstance(left, A.BinaryExpr) and left.op.precedence >= prec:
        h4, h5, mp = _walk_binary(left)
        has4 = has4 or h4
        has5 = has5 or h5
        max_problem = max(max_problem, mp)

    right = e.right
    if isinstance(right, A.BinaryExpr):
        if right.op.precedence > prec:
            h4, h5, mp = _walk_binary(right)
            has4 = has4 or h4
            has5 = has5 or h5
            max_problem = max(max_problem, mp)
    elif isinstance(right, A.UnaryExpr):
        pair = e.op.value + right.op.value
        if pair in ("/*", "&&", "&^"):
            max_problem = 5
        elif pair in ("++", "--"):
            max_problem = max(max_problem, 4)
    return has4, has5, max_problem


def _cutoff(e: A.BinaryExpr, depth: int) -> int:
    has4, has5, max_problem = _walk_binary(e)
    if max_problem > 0:
        return max_problem + 1
    if has4 and has5:
        return 5 if depth == 1 else 4
    return 6 if depth == 1 else 4


def _diff_prec(expr: A.Node, prec: int) -> int:
    if not isinstance(expr, A.BinaryExpr) or prec != expr.op.precedence:
        return 1
    return 0


def _reduce_depth(depth: int) -> int:
    return max(1, depth - 1)


def _strip_parens(expr: A.Node) -> A.Node:
    while isinstance(expr, A.ParenExpr):
        expr = expr.inner
    return expr


def _expr1(x: A.Node, prec1: int, depth: int) -> str:
    if isinstance(x, A.Identifier):
        return x.name
    if isinstance(x, A.BasicLit):
        return x.value
    if isinstance(x, A.TypeExpr):
        return x.text
    if isinstance(x, A.BinaryExpr):
        return _binary_expr(x, prec1, _cutoff(x, max(depth, 1)), max(depth, 1))
    if isinstance(x, A.UnaryExpr):
        if UNARY_PREC < prec1:
            return "(" + _expr1(x, LOWEST_PREC, 1) + ")"
        operand = _expr1(x.operand, UNARY_PREC, depth)
        sep = " " if _may_combine(x.op.value, operand) else ""
        return x.op.value + sep + operand
    if isinstance(x, A.ParenExpr):
        if isinstance(x.inner, A.ParenExpr):
            return _expr1(x.inner, LOWEST_PREC, depth)
        return "(" + _expr1(x.inner, LOWEST_PREC, _reduce_depth(depth)) + ")"
    if isinstance(x, A.SelectorExpr):
        return _expr1(x.base, HIGHEST_PREC, depth) + "." + x.name
    if isinstance(x, A.TypeAssertExpr):
        return f"{_expr1(x.base, HIGHEST_PREC, depth)}.({x.type or 'type'})"
    if isinstance(x, A.IndexExpr):
        base = _expr1(x.base, HIGHEST_PREC, 1)
        return f"{base}[{_expr1(x.index, LOWEST_PREC, depth + 1)}]"
    if isinstance(x, A.SliceExpr):
        return _slice_expr(x, depth)
    if isinstance(x, A.CallExpr):
        if len(x.args) > 1:
            depth += 1
        callee = _expr1(x.callee, HIGHEST_PREC, depth)
        if isinstance(x.callee, A.TypeExpr) and callee.startswith("func"):
            callee = f"({callee})"
        open_line = x.callee.loc.end_line if x.callee.loc.valid else 0
        return callee + _list_text("(", x.args, ")", depth, x, open_line, x.ellipsis)
    if isinstance(x, A.KeyValueExpr):
        return f"{_expr1(x.key, LOWEST_PREC, 1)}: {_expr1(x.value, LOWEST_PREC, 1)}"
    if isinstance(x, A.CompositeLit):
        type_text = x.type or ""
        open_line = x.loc.line + type_text.count("\n") if x.loc.valid else 0
        return type_text + _list_text("{", x.elts, "}", 1, x, open_line)
    if isinstance(x, A.FuncLit):
        header = f"func({', '.join(_field(f) for f in x.params)})"
        if x.results:
            header += " " + x.results
        return _func_text(header, x.body)
    raise TypeError(f"cannot format expression {type(x).__name__}")


def _binary_expr(x: A.BinaryExpr, prec1: int, cutoff: int, depth: int) -> str:
    prec = x.op.precedence
    if prec < prec1:
        return "(" + _expr1(x, LOWEST_PREC, _reduce_depth(depth)) + ")"
    blank = prec < cutoff
    left = _expr1(x.left, prec, depth + _diff_prec(x.left, prec))
    right = _expr1(x.right, prec + 1, depth + 1)
    if blank:
        return f"{left} {x.op.value} {right}"
    sep = " " if _may_combine(x.op.value, right) else ""
    return f"{left}{x.op.value}{sep}{right}"


def _slice_expr(x: A.SliceExpr, depth: int) -> str:
    indices = [x.low, x.high]
    if x.slice3:
        indices.append(x.max)
    present = [i for i in indices if i is not None]
    # s[a:b] but s[i+1 : j]
    blanks = (depth <= 1 and len(present) > 1
              and any(isinstance(i, A.BinaryExpr) for i in present))
    text = _expr1(x.base, HIGHEST_PREC, 1) + "["
    for n, index in enumerate(indices):
        if n:
            if blanks and indices[n - 1] is not None:
                text += " "
            text += ":"
            if blanks and index is not None:
                text += " "
        if index is not None:
            text += _expr1(index, LOWEST_PREC, depth + 1)
    return text + "]"


def _expr_list(exprs: List[A.Node], depth: int) -> str:
    return ", ".join(_expr1(e, LOWEST_PREC, depth) for e in exprs)


def _element_rows(elems: List[A.Node]) -> List[Optional[List[int]]]:
    """Group element indices by source line; None marks a blank line."""
    rows: List[Optional[List[int]]] = []
    for i, e in enumerate(elems):
        prev = elems[i - 1] if i else None
        if prev is not None and e.loc.valid and prev.loc.valid and e.loc.line > prev.loc.end_line:
            if e.loc.line - prev.loc.end_line > 1:
                rows.append(None)
            rows.append([i])
        elif rows:
            rows[-1].append(i)
        else:
            rows.append([i])
    return rows


def _align_pairs(elems: List[A.Node], rows: List[Optional[List[int]]], texts: List[str]) -> None:
    """Pad the keys of consecutive one-pair rows to a common column."""
    run: List[Tuple[int, str]] = []
    for row in rows + [None]:
        if row is not None and len(row) == 1:
            e = elems[row[0]]
            if isinstance(e, A.KeyValueExpr) and "\n" not in texts[row[0]]:
                key = _expr1(e.key, LOWEST_PREC, 1)
                if len(key) <= _SMALL_KEY:
                    run.append((row[0], key))
                    continue
        if run:
            width = max(len(key) for _, key in run) + 1
            for i, key in run:
                value = _expr1(elems[i].value, LOWEST_PREC, 1)
                texts[i] = (key + ":").ljust(width) + " " + value
            run = []


def _list_text(open_: str, elems: List[A.Node], close: str, depth: int,
               container: A.Node, open_line: int, ellipsis: bool = False) -> str:
    """Bracketed element list, keeping the source's line breaks."""
    texts = [_expr1(e, LOWEST_PREC, depth) for e in elems]
    if ellipsis and texts:
        texts[-1] += "..."
    if not elems or not container.loc.valid:
        return open_ + ", ".join(texts) + close

    rows = _element_rows(elems)
    first, last = elems[0], elems[-1]
    leading = first.loc.valid and open_line > 0 and first.loc.line > open_line
    trailing = last.loc.valid and container.loc.end_line > last.loc.end_line
    if not (leading or trailing or len(rows) > 1):
        return open_ + ", ".join(texts) + close

    head = open_
    if not leading:
        head += ", ".join(texts[i] for i in rows.pop(0))
        if rows or trailing:
            head += ","
    _align_pairs(elems, rows, texts)

    lines = [head]
    for n, row in enumerate(rows):
        if row is None:
            lines.append("")
            continue
        text = ", ".join(texts[i] for i in row)
        if n < len(rows) - 1 or trailing:
            text += ","
        lines.append(_indent_text(text))
    if trailing:
        lines.append(close)
        return "\n".join(lines)
    return "\n".join(lines) + close


def format_expr(expr: A.Node) -> str:
    """Format a single expression at statement level."""
    return _expr1(expr, LOWEST_PREC, 1)


# ═══════════════════════════════════════════════════════════════════════════
# STATEMENTS & DECLARATIONS
# ═══════════════════════════════════════════════════════════════════════════

_ONE_LINE_STMTS = (
    A.AssignStmt, A.ExprStmt, A.IncDecStmt, A.ReturnStmt, A.BranchStmt,
    A.GoStmt, A.DeferStmt, A.VarDeclStmt, A.SendStmt,
)


def _gap(prev: A.Node, cur: A.Node) -> int:
    """Source lines between the end of *prev* and the start of *cur*."""
    if not (prev.loc.valid and cur.loc.valid):
        return 0
    return cur.loc.line - max(prev.loc.end_line, prev.loc.line)


def _decl_kind(item: A.Node) -> str:
    if isinstance(item, A.RawDecl):
        return item.keyword
    return type(item).__name__


def _field(f: A.Field) -> str:
    if f.names:
        return f"{', '.join(f.names)} {f.type}"
    return f.type


def _one_line_body(header: str, body: A.Block) -> Optional[str]:
    """``header { s1; s2 }`` when gofmt keeps the body on one line."""
    if body.loc.valid and body.loc.line != body.loc.end_line:
        return None
    if len(body.stmts) > _MAX_ONE_LINE_STMTS:
        return None
    if not all(isinstance(s, _ONE_LINE_STMTS) for s in body.stmts):
        return None
    if not body.stmts:
        return header + " {}"
    printer = GoPrinter()
    texts = [printer.simple_stmt(s) for s in body.stmts]
    if any("\n" in t for t in texts):
        return None
    size = len(header) + sum(len(t) for t in texts) + 2 * (len(texts) - 1)
    if size > _MAX_ONE_LINE_FUNC:
        return None
    return f"{header} {{ {'; '.join(texts)} }}"


def _func_text(header: str, body: A.Block) -> str:
    """A function declaration or literal with its body."""
    text = _one_line_body(header, body)
    if text is not None:
        return text
    printer = GoPrinter()
    printer.out.indent()
    printer.print_stmts(body.stmts)
    return f"{header} {{\n{printer.out.get_code()}}}"


class GoPrinter(ASTVisitor):
    """Prints declarations and statements into a :class:`CodeEmitter`."""

    def __init__(self, emitter: Optional[CodeEmitter] = None) -> None:
        self.out = emitter or CodeEmitter()

    # -- file level -------------------------------------------------------

    def print_program(self, program: A.Program) -> str:
        prev = None
        for item in program.items:
            if prev is not None:
                if isinstance(item, A.Comment) and item.trailing and self.out.append(" " + item.text):
                    prev = item
                    continue
                if self._top_blank(prev, item):
                    self.out.emit_blank()
            self.visit(item)
            prev = item
        return self.out.get_code()

    @staticmethod
    def _top_blank(prev: A.Node, cur: A.Node) -> bool:
        # A comment directly above a declaration stays attached to it.
        if isinstance(prev, A.Comment) or isinstance(cur, A.Comment):
            return _gap(prev, cur) > 1
        return _decl_kind(prev) != _decl_kind(cur) or _gap(prev, cur) > 1

    def visit_package_clause(self, node: A.PackageClause) -> None:
        self.out.emit(f"package {node.name}")

    def visit_raw_decl(self, node: A.RawDecl) -> None:
        self.out.emit_raw(node.text)

    def visit_func_decl(self, node: A.FuncDecl) -> None:
        header = "func "
        if node.receiver is not None:
            header += f"({_field(node.receiver)}) "
        header += node.name + (node.type_params or "")
        header += f"({', '.join(_field(f) for f in node.params)})"
        if node.results:
            header += " " + node.results
        self.out.emit(_func_text(header, node.body))

    # -- blocks -----------------------------------------------------------

    def _block_body(self, block: A.Block) -> None:
        self.out.indent()
        self.print_stmts(block.stmts)
        self.out.dedent()

    def print_stmts(self, stmts: List[A.Node]) -> None:
        prev = None
        for stmt in stmts:
            if isinstance(stmt, A.Comment) and stmt.trailing and prev is not None:
                if self.out.append(" " + stmt.text):
                    prev = stmt
                    continue
            if prev is not None and _gap(prev, stmt) > 1:
                self.out.emit_blank()
            self.visit(stmt)
            prev = stmt

    def visit_comment(self, node: A.Comment) -> None:
        first, *rest = node.text.split("\n")
        self.out.emit(first)
        if rest:
            self.out.emit_raw("\n".join(rest))

    def visit_block_stmt(self, node: A.BlockStmt) -> None:
        self.out.emit("{")
        self._block_body(node.block)
        self.out.emit("}")

    def visit_labeled_stmt(self, node: A.LabeledStmt) -> None:
        self.out.emit_outdented(node.label + ":")
        self.visit(node.stmt)

    # -- simple statements ------------------------------------------------

    def simple_stmt(self, node: A.Node) -> str:
        """Render a statement that fits on one line (headers, init/post)."""
        if isinstance(node, A.AssignStmt):
            depth = 2 if len(node.lhs) > 1 and len(node.rhs) > 1 else 1
            return f"{_expr_list(node.lhs, depth)} {node.op.value} {_expr_list(node.rhs, depth)}"
        if isinstance(node, A.ExprStmt):
            return _expr1(node.expr, LOWEST_PREC, 1)
        if isinstance(node, A.SendStmt):
            return f"{format_expr(node.chan)} <- {format_expr(node.value)}"
        if isinstance(node, A.IncDecStmt):
            return _expr1(node.expr, LOWEST_PREC, 2) + node.op
        if isinstance(node, A.ReturnStmt):
            if node.results:
                return "return " + _expr_list(node.results, 1)
            return "return"
        if isinstance(node, A.BranchStmt):
            return f"{node.keyword} {node.label}" if node.label else node.keyword
        if isinstance(node, A.GoStmt):
            return "go " + format_expr(node.call)
        if isinstance(node, A.DeferStmt):
            return "defer " + format_expr(node.call)
        if isinstance(node, A.VarDeclStmt):
            text = f"{node.keyword} {', '.join(node.names)}"
            if node.type:
                text += " " + node.type
            if node.values:
                text += " = " + _expr_list(node.values, 1)
            return text
        if isinstance(node, A.DeclStmt):
            return node.text
        raise TypeError(f"cannot format {type(node).__name__} on one line")

    def generic_visit(self, node: A.Node) -> Any:
        self.out.emit(self.simple_stmt(node))

    # -- control flow -----------------------------------------------------

    def _control_clause(self, init: Optional[A.Node], cond: Optional[A.Node]) -> str:
        text = ""
        if init is not None:
            text = self.simple_stmt(init) + "; "
        if cond is not None:
            text += format_expr(_strip_parens(cond))
        return text

    def visit_if_stmt(self, node: A.IfStmt) -> None:
        opener = "if "
        while True:
            self.out.emit(f"{opener}{self._control_clause(node.init, node.cond)} {{")
            self._block_body(node.body)
            if isinstance(node.else_, A.IfStmt):
                opener = "} else if "
                node = node.else_
                continue
            if isinstance(node.else_, A.Block):
                self.out.emit("} else {")
                self._block_body(node.else_)
            break
        self.out.emit("}")

    def visit_for_stmt(self, node: A.ForStmt) -> None:
        if node.init is None and node.post is None:
            header = "for "
            if node.cond is not None:
                header += format_expr(_strip_parens(node.cond)) + " "
        else:
            init = self.simple_stmt(node.init) if node.init is not None else ""
            cond = format_expr(_strip_parens(node.cond)) if node.cond is not None else ""
            post = self.simple_stmt(node.post) if node.post is not None else ""
            header = f"for {init}; {cond}; {post}".rstrip() + " "
        self.out.emit(header + "{")
        self._block_body(node.body)
        self.out.emit("}")

    def visit_range_stmt(self, node: A.RangeStmt) -> None:
        header = "for "
        if node.key is not None:
            header += format_expr(node.key)
            if node.value is not None:
                header += ", " + format_expr(node.value)
            header += f" {node.tok.value} "
        header += "range " + format_expr(_strip_parens(node.iterable))
        self.out.emit(header + " {")
        self._block_body(node.body)
        self.out.emit("}")

    # -- switch / select --------------------------------------------------

    def visit_switch_stmt(self, node: A.SwitchStmt) -> None:
        header = "switch " + self._control_clause(node.init, node.tag)
        self.out.emit(header.rstrip() + " {")
        self._clauses(node.clauses)
        self.out.emit("}")

    def visit_type_switch_stmt(self, node: A.TypeSwitchStmt) -> None:
        header = "switch "
        if node.init is not None:
            header += self.simple_stmt(node.init) + "; "
        self.out.emit(header + self.simple_stmt(node.assign) + " {")
        self._clauses(node.clauses)
        self.out.emit("}")

    def visit_select_stmt(self, node: A.SelectStmt) -> None:
        self.out.emit("select {")
        self._clauses(node.clauses)
        self.out.emit("}")

    def _clauses(self, clauses: List[A.Node]) -> None:
        prev = None
        for clause in clauses:
            if prev is not None and _gap(prev, clause) > 1:
                self.out.emit_blank()
            self.visit(clause)
            prev = clause

    def visit_case_clause(self, node: A.CaseClause) -> None:
        if node.exprs:
            self._clause_body(f"case {_expr_list(node.exprs, 1)}:", node.body)
        else:
            self._clause_body("default:", node.body)

    def visit_comm_clause(self, node: A.CommClause) -> None:
        if node.comm is not None:
            self._clause_body(f"case {self.simple_stmt(node.comm)}:", node.body)
        else:
            self._clause_body("default:", node.body)

    def _clause_body(self, head: str, body: A.Block) -> None:
        stmts = body.stmts
        if stmts and isinstance(stmts[0], A.Comment) and stmts[0].trailing:
            head += " " + stmts[0].text
            stmts = stmts[1:]
        self.out.emit(head)
        self.out.indent()
        self.print_stmts(stmts)
        self.out.dedent()


# ═══════════════════════════════════════════════════════════════════════════
# PUBLIC API
# ═══════════════════════════════════════════════════════════════════════════

def format_program(program: A.Program) -> str:
    """Format a whole file."""
    return GoPrinter().print_program(program)


def format_block(block: A.Block) -> str:
    """Format the statements of *block* at indentation level zero."""
    printer = GoPrinter()
    printer.print_stmts(block.stmts)
    return printer.out.get_code()
