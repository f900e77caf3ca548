# gomacro/ast_nodes.py
"""
Abstract syntax tree for the Go subset understood by gomacro.

Every node carries a ``Loc`` for diagnostics.  ``Loc()`` (line 0) is the
"no position" value; nodes produced by macro substitution carry it because
expanded code has no single source origin.

Dataclass fields are declared in traversal order, so ``Node.children()``
yields sub-nodes in the same order the expander searches them.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Iterator, Optional, Union


# ── Source Location ──────────────────────────────────────────────

@dataclass(frozen=True)
class Loc:
    """Source location for diagnostics."""
    file: str = "<unknown>"
    line: int = 0
    col: int = 0
    end_line: int = 0

    @property
    def valid(self) -> bool:
        return self.line > 0

    def __str__(self):
        return f"{self.file}:{self.line}:{self.col}"


NO_LOC = Loc()


# ── Enums ────────────────────────────────────────────────────────

class LitKind(Enum):
    INT = "INT"
    FLOAT = "FLOAT"
    IMAG = "IMAG"
    CHAR = "CHAR"
    STRING = "STRING"


class AssignOp(Enum):
    ASSIGN = "="
    DEFINE = ":="
    ADD = "+="
    SUB = "-="
    MUL = "*="
    QUO = "/="
    REM = "%="
    AND = "&="
    OR = "|="
    XOR = "^="
    SHL = "<<="
    SHR = ">>="
    AND_NOT = "&^="


class UnaryOp(Enum):
    NEG = "-"
    POS = "+"
    NOT = "!"
    XOR = "^"
    DEREF = "*"
    ADDR = "&"
    RECV = "<-"


class BinOp(Enum):
    LOR = "||"
    LAND = "&&"
    EQL = "=="
    NEQ = "!="
    LSS = "<"
    LEQ = "<="
    GTR = ">"
    GEQ = ">="
    ADD = "+"
    SUB = "-"
    OR = "|"
    XOR = "^"
    MUL = "*"
    QUO = "/"
    REM = "%"
    SHL = "<<"
    SHR = ">>"
    AND = "&"
    AND_NOT = "&^"

    @property
    def precedence(self) -> int:
        return _BINARY_PRECEDENCE[self]


_BINARY_PRECEDENCE = {
    BinOp.LOR: 1,
    BinOp.LAND: 2,
    BinOp.EQL: 3, BinOp.NEQ: 3, BinOp.LSS: 3,
    BinOp.LEQ: 3, BinOp.GTR: 3, BinOp.GEQ: 3,
    BinOp.ADD: 4, BinOp.SUB: 4, BinOp.OR: 4, BinOp.XOR: 4,
    BinOp.MUL: 5, BinOp.QUO: 5, BinOp.REM: 5, BinOp.SHL: 5,
    BinOp.SHR: 5, BinOp.AND: 5, BinOp.AND_NOT: 5,
}

LOWEST_PREC = 0
UNARY_PREC = 6
HIGHEST_PREC = 7


# ── Base ─────────────────────────────────────────────────────────

class Node:
    """Common base: generic child iteration over dataclass fields."""

    def children(self) -> Iterator["Node"]:
        for f in fields(self):
            if f.name == "loc":
                continue
            value = getattr(self, f.name)
            if isinstance(value, Node):
                yield value
            elif isinstance(value, list):
                for item in value:
                    if isinstance(item, Node):
                        yield item


# ── Expressions ──────────────────────────────────────────────────

@dataclass
class Identifier(Node):
    name: str
    loc: Loc = field(default_factory=Loc)


@dataclass
class BasicLit(Node):
    kind: LitKind
    value: str
    loc: Loc = field(default_factory=Loc)


@dataclass
class BinaryExpr(Node):
    left: Expr
    op: BinOp
    right: Expr
    loc: Loc = field(default_factory=Loc)


@dataclass
class UnaryExpr(Node):
    op: UnaryOp
    operand: Expr
    loc: Loc = field(default_factory=Loc)


@dataclass
class IndexExpr(Node):
    base: Expr
    index: Expr
    loc: Loc = field(default_factory=Loc)


@dataclass
class SliceExpr(Node):
    base: Expr
    low: Optional[Expr] = None
    high: Optional[Expr] = None
    max: Optional[Expr] = None
    slice3: bool = False
    loc: Loc = field(default_factory=Loc)


@dataclass
class CallExpr(Node):
    callee: Expr
    args: list[Expr]
    ellipsis: bool = False
    loc: Loc = field(default_factory=Loc)


@dataclass
class ParenExpr(Node):
    inner: Expr
    loc: Loc = field(default_factory=Loc)


@dataclass
class SelectorExpr(Node):
    base: Expr
    name: str
    loc: Loc = field(default_factory=Loc)


@dataclass
class TypeAssertExpr(Node):
    """``x.(T)``; ``type`` is None for the ``x.(type)`` switch guard."""
    base: Expr
    type: Optional[str] = None
    loc: Loc = field(default_factory=Loc)


@dataclass
class TypeExpr(Node):
    """A type in operand position (conversions, ``make``/``new`` arguments)."""
    text: str
    loc: Loc = field(default_factory=Loc)


@dataclass
class KeyValueExpr(Node):
    key: Expr
    value: Expr
    loc: Loc = field(default_factory=Loc)


@dataclass
class CompositeLit(Node):
    """``T{...}``.  ``type`` is None for elided inner literals."""
    type: Optional[str]
    elts: list[Expr] = field(default_factory=list)
    loc: Loc = field(default_factory=Loc)


@dataclass
class FuncLit(Node):
    params: list[Field]
    body: Block
    results: Optional[str] = None
    loc: Loc = field(default_factory=Loc)


Expr = Union[
    Identifier, BasicLit, BinaryExpr, UnaryExpr, IndexExpr, SliceExpr,
    CallExpr, ParenExpr, SelectorExpr, TypeAssertExpr, TypeExpr,
    KeyValueExpr, CompositeLit, FuncLit,
]

EXPR_TYPES = (
    Identifier, BasicLit, BinaryExpr, UnaryExpr, IndexExpr, SliceExpr,
    CallExpr, ParenExpr, SelectorExpr, TypeAssertExpr, TypeExpr,
    KeyValueExpr, CompositeLit, FuncLit,
)


# ── Statements ───────────────────────────────────────────────────

@dataclass
class Comment(Node):
    """A comment, kept verbatim.  ``trailing`` ones follow a statement
    on the same line."""
    text: str
    trailing: bool = False
    loc: Loc = field(default_factory=Loc)


@dataclass
class AssignStmt(Node):
    lhs: list[Expr]
    op: AssignOp
    rhs: list[Expr]
    loc: Loc = field(default_factory=Loc)


@dataclass
class ExprStmt(Node):
    expr: Expr
    loc: Loc = field(default_factory=Loc)


@dataclass
class IncDecStmt(Node):
    expr: Expr
    op: str
    loc: Loc = field(default_factory=Loc)


@dataclass
class ReturnStmt(Node):
    results: list[Expr] = field(default_factory=list)
    loc: Loc = field(default_factory=Loc)


@dataclass
class BranchStmt(Node):
    keyword: str
    label: Optional[str] = None
    loc: Loc = field(default_factory=Loc)


@dataclass
class GoStmt(Node):
    call: Expr
    loc: Loc = field(default_factory=Loc)


@dataclass
class DeferStmt(Node):
    call: Expr
    loc: Loc = field(default_factory=Loc)


@dataclass
class VarDeclStmt(Node):
    keyword: str
    names: list[str]
    type: Optional[str] = None
    values: list[Expr] = field(default_factory=list)
    loc: Loc = field(default_factory=Loc)


@dataclass
class SendStmt(Node):
    chan: Expr
    value: Expr
    loc: Loc = field(default_factory=Loc)


@dataclass
class DeclStmt(Node):
    """Grouped ``var``/``const`` or local ``type`` declaration, kept as text."""
    keyword: str
    text: str
    loc: Loc = field(default_factory=Loc)


@dataclass
class LabeledStmt(Node):
    label: str
    stmt: Stmt
    loc: Loc = field(default_factory=Loc)


@dataclass
class Block(Node):
    stmts: list[Stmt] = field(default_factory=list)
    loc: Loc = field(default_factory=Loc)


@dataclass
class BlockStmt(Node):
    block: Block
    loc: Loc = field(default_factory=Loc)


@dataclass
class IfStmt(Node):
    init: Optional[Stmt]
    cond: Expr
    body: Block
    else_: Optional[Union[IfStmt, Block]] = None
    loc: Loc = field(default_factory=Loc)


@dataclass
class ForStmt(Node):
    init: Optional[Stmt]
    cond: Optional[Expr]
    post: Optional[Stmt]
    body: Block
    loc: Loc = field(default_factory=Loc)


@dataclass
class RangeStmt(Node):
    key: Optional[Expr]
    value: Optional[Expr]
    tok: Optional[AssignOp]
    iterable: Expr
    body: Block
    loc: Loc = field(default_factory=Loc)


@dataclass
class CaseClause(Node):
    """``case a, b:`` or, with no expressions, ``default:``."""
    exprs: list[Expr]
    body: Block
    loc: Loc = field(default_factory=Loc)


@dataclass
class CommClause(Node):
    """A ``select`` case; ``comm`` is None for ``default:``."""
    comm: Optional[Stmt]
    body: Block
    loc: Loc = field(default_factory=Loc)


@dataclass
class SwitchStmt(Node):
    init: Optional[Stmt]
    tag: Optional[Expr]
    clauses: list[Union[CaseClause, Comment]] = field(default_factory=list)
    loc: Loc = field(default_factory=Loc)


@dataclass
class TypeSwitchStmt(Node):
    init: Optional[Stmt]
    assign: Stmt
    clauses: list[Union[CaseClause, Comment]] = field(default_factory=list)
    loc: Loc = field(default_factory=Loc)


@dataclass
class SelectStmt(Node):
    clauses: list[Union[CommClause, Comment]] = field(default_factory=list)
    loc: Loc = field(default_factory=Loc)


Stmt = Union[
    AssignStmt, ExprStmt, IncDecStmt, SendStmt, ReturnStmt, BranchStmt,
    GoStmt, DeferStmt, VarDeclStmt, DeclStmt, LabeledStmt, BlockStmt,
    IfStmt, ForStmt, RangeStmt, SwitchStmt, TypeSwitchStmt, SelectStmt,
    Comment,
]

STMT_TYPES = (
    AssignStmt, ExprStmt, IncDecStmt, SendStmt, ReturnStmt, BranchStmt,
    GoStmt, DeferStmt, VarDeclStmt, DeclStmt, LabeledStmt, BlockStmt,
    IfStmt, ForStmt, RangeStmt, SwitchStmt, TypeSwitchStmt, SelectStmt,
    Comment,
)


# ── Declarations ─────────────────────────────────────────────────

@dataclass
class Field(Node):
    """One parameter group: ``a, b int`` or an unnamed ``int``."""
    names: list[str]
    type: str
    loc: Loc = field(default_factory=Loc)


@dataclass
class FuncDecl(Node):
    name: str
    params: list[Field]
    body: Block
    results: Optional[str] = None
    receiver: Optional[Field] = None
    type_params: Optional[str] = None
    loc: Loc = field(default_factory=Loc)

    @property
    def param_names(self) -> list[str]:
        """Parameter names in order, grouped names flattened."""
        return [name for group in self.params for name in group.names]


@dataclass
class PackageClause(Node):
    name: str
    loc: Loc = field(default_factory=Loc)


@dataclass
class RawDecl(Node):
    """``import``/``var``/``const``/``type`` declaration kept verbatim."""
    keyword: str
    text: str
    loc: Loc = field(default_factory=Loc)


Decl = Union[PackageClause, FuncDecl, RawDecl, Comment]


@dataclass
class Program(Node):
    items: list[Decl] = field(default_factory=list)
    filename: str = "<input>"
    loc: Loc = field(default_factory=Loc)

    @property
    def package(self) -> Optional[str]:
        for item in self.items:
            if isinstance(item, PackageClause):
                return item.name
        return None

    @property
    def funcs(self) -> list[FuncDecl]:
        return [item for item in self.items if isinstance(item, FuncDecl)]
