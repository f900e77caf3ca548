# tests/test_substitute.py
"""
Tests for parameter substitution inside macro bodies.
"""

import pytest

from gomacro import ast_nodes as A
from gomacro.errors import ErrorCodes, MacroArityError, UnsupportedNodeError
from gomacro.macros import MacroDefinition
from gomacro.parser import parse, parse_expression
from gomacro.substitute import (
    SubstitutionContext,
    substitute_block,
    substitute_expr,
    substitute_stmt,
)


def _ctx(*pairs):
    params = tuple(name for name, _ in pairs)
    args = tuple(arg for _, arg in pairs)
    return SubstitutionContext(macro="m", params=params, args=args)


def _body(src: str) -> A.Block:
    return parse("func MACRO_m(a, b int) {\n" + src + "\n}\n").funcs[0].body


class TestSubstituteExpr:

    def test_parameter_replaced_by_argument_object(self):
        arg = parse_expression("x + y")
        result = substitute_expr(parse_expression("a"), _ctx(("a", arg)))
        assert result is arg

    def test_other_identifier_copied(self):
        original = parse_expression("z")
        result = substitute_expr(original, _ctx(("a", parse_expression("1"))))
        assert result == A.Identifier("z")
        assert result is not original
        assert not result.loc.valid

    def test_compound_rebuilt_without_positions(self):
        arg = parse_expression("q")
        original = parse_expression("f(a[0], -a) * (a + 1)")
        result = substitute_expr(original, _ctx(("a", arg)))
        assert isinstance(result, A.BinaryExpr)
        assert result.op is A.BinOp.MUL
        assert not result.loc.valid
        call = result.left
        assert call.callee == A.Identifier("f")
        assert call.args[0].base is arg
        assert call.args[0].index == A.BasicLit(A.LitKind.INT, "0")
        assert call.args[1].op is A.UnaryOp.NEG
        assert call.args[1].operand is arg
        assert isinstance(result.right, A.ParenExpr)
        assert result.right.inner.left is arg

    def test_every_occurrence_shares_the_argument(self):
        arg = parse_expression("v")
        result = substitute_expr(parse_expression("a * a"), _ctx(("a", arg)))
        assert result.left is arg
        assert result.right is arg

    def test_positional_binding(self):
        first, second = parse_expression("1"), parse_expression("2")
        result = substitute_expr(
            parse_expression("b - a"), _ctx(("a", first), ("b", second)),
        )
        assert result.left is second
        assert result.right is first

    def test_selector_rejected(self):
        with pytest.raises(UnsupportedNodeError) as exc_info:
            substitute_expr(parse_expression("fmt.Println(a)"), _ctx())
        err = exc_info.value
        assert err.kind == "SelectorExpr"
        assert err.category == "expression"
        assert err.code == ErrorCodes.UNSUPPORTED_NODE
        assert "unsupported expression kind: SelectorExpr" in str(err)


class TestSubstituteStmt:

    def test_assign(self):
        arg = parse_expression("r")
        stmt = _body("a = a + 1").stmts[0]
        result = substitute_stmt(stmt, _ctx(("a", arg)))
        assert isinstance(result, A.AssignStmt)
        assert result.op is A.AssignOp.ASSIGN
        assert result.lhs[0] is arg
        assert result.rhs[0].left is arg
        assert result is not stmt

    def test_expr_stmt(self):
        arg = parse_expression("n")
        result = substitute_stmt(_body("g(a)").stmts[0], _ctx(("a", arg)))
        assert isinstance(result, A.ExprStmt)
        assert result.expr.args[0] is arg

    @pytest.mark.parametrize("src,kind", [
        ("return a", "ReturnStmt"),
        ("a++", "IncDecStmt"),
        ("if a {\n}", "IfStmt"),
        ("var c int", "VarDeclStmt"),
    ])
    def test_other_statements_rejected(self, src, kind):
        with pytest.raises(UnsupportedNodeError) as exc_info:
            substitute_stmt(_body(src).stmts[0], _ctx())
        assert exc_info.value.kind == kind
        assert exc_info.value.category == "statement"


class TestSubstituteBlock:

    def test_comments_dropped(self):
        body = _body("// note\na = 1\nb = 2 // trailing")
        stmts = substitute_block(body, _ctx())
        assert [type(s).__name__ for s in stmts] == ["AssignStmt", "AssignStmt"]

    def test_empty_body(self):
        assert substitute_block(A.Block(), _ctx()) == []

    def test_unsupported_statement_in_body(self):
        with pytest.raises(UnsupportedNodeError):
            substitute_block(_body("a = 1\nreturn"), _ctx())


class TestSubstitutionContext:

    def _macro(self):
        return MacroDefinition(name="add", params=["dst", "a", "b"], body=A.Block())

    def test_for_call_binds_arguments(self):
        call = parse_expression("add(r, 1, 2)")
        ctx = SubstitutionContext.for_call(self._macro(), call)
        assert ctx.macro == "add"
        assert list(ctx.params) == ["dst", "a", "b"]
        assert ctx.argument_for("a") is call.args[1]

    def test_strict_arity(self):
        call = parse_expression("add(r, 1)")
        with pytest.raises(MacroArityError) as exc_info:
            SubstitutionContext.for_call(self._macro(), call, strict=True)
        err = exc_info.value
        assert err.expected_arity == 3
        assert err.actual_arity == 2
        assert err.code == ErrorCodes.ARITY_MISMATCH
        assert "macro 'add' expects 3 argument(s), got 2" in str(err)

    def test_lenient_arity_leaves_missing_parameter(self, caplog):
        call = parse_expression("add(r, 1)")
        ctx = SubstitutionContext.for_call(self._macro(), call, strict=False)
        assert ctx.argument_for("b") is None
        result = substitute_expr(parse_expression("a + b"), ctx)
        assert result.left is call.args[1]
        assert result.right == A.Identifier("b")
        assert "expects 3 argument(s), got 2" in caplog.text

    def test_lenient_arity_ignores_extra_arguments(self):
        call = parse_expression("add(r, 1, 2, 3)")
        ctx = SubstitutionContext.for_call(self._macro(), call, strict=False)
        assert ctx.argument_for("b") is call.args[2]
