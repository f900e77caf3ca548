# tests/test_grammar.py
"""
Tests that the Go-subset PEG grammar is well-formed and parses fundamental
constructs at the grammar level (before AST construction).
"""

import pytest
from parsimonious.exceptions import IncompleteParseError, ParseError

from gomacro.grammar import GO_GRAMMAR
from tests.conftest import CONTROL_FLOW_GO, LITERALS_GO, PLAIN_GO, RECURSIVE_GO, SWITCH_GO


@pytest.fixture(scope="module")
def grammar():
    return GO_GRAMMAR


class TestGrammarWellFormed:

    def test_grammar_compiles(self, grammar):
        assert grammar is not None
        assert "source_file" in grammar

    def test_key_rules_exist(self, grammar):
        for rule in ("source_file", "func_decl", "block", "statement",
                     "assign_stmt", "expr_stmt", "expression", "literal",
                     "identifier", "raw_decl", "comment"):
            assert rule in grammar, f"Rule {rule!r} missing"


class TestGrammarAtoms:

    def test_empty_input(self, grammar):
        assert grammar.parse("") is not None

    def test_int_literals(self, grammar):
        for lit in ("0", "42", "0xFF", "0b1010", "0o77", "1_000"):
            assert grammar["int_lit"].parse(lit).text == lit

    def test_float_literals(self, grammar):
        for lit in ("3.14", "1.", ".5", "1e10", "2.5E-3"):
            assert grammar["float_lit"].parse(lit).text == lit

    def test_imaginary_literal(self, grammar):
        assert grammar["imaginary_lit"].parse("2i").text == "2i"

    def test_rune_literals(self, grammar):
        for lit in ("'a'", r"'\n'", r"'\''", r"'\x41'"):
            assert grammar["rune_lit"].parse(lit).text == lit

    def test_string_literals(self, grammar):
        for lit in ('"hello"', r'"esc\"aped"', "`raw\nstring`"):
            assert grammar["string_lit"].parse(lit).text == lit

    def test_identifiers(self, grammar):
        for name in ("x", "_", "foo_bar", "camelCase", "MACRO_add", "goto2"):
            assert grammar["identifier"].parse(name).text == name

    def test_identifier_rejects_keywords(self, grammar):
        for kw in ("if", "else", "for", "func", "return", "range", "go", "var"):
            with pytest.raises(ParseError):
                grammar["identifier"].parse(kw)


class TestGrammarExpressions:

    @pytest.mark.parametrize("src", [
        "a + b*c",
        "f(x, y)",
        "a[i+1]",
        "-x",
        "!ok",
        "*p",
        "<-ch",
        "(a || b) && c",
        "fmt.Println(x)",
        "m[k](v)",
        "s[1:]",
        "s[a:b:c]",
        "s[:]",
        "x.(int)",
        "[]byte(s)",
        "append(a, b...)",
        "point{x: 1, y: 2}",
        "[]int{1, 2, 3}",
        "map[string]int{\"a\": 1}",
        "func(a int) int { return a }",
        "make(chan int, 1)",
    ])
    def test_expression_parses(self, grammar, src):
        assert grammar["expression"].parse(src).text == src

    def test_expression_may_continue_after_operator_newline(self, grammar):
        grammar["expression"].parse("a +\n\tb")


class TestGrammarStatements:

    @pytest.mark.parametrize("src", [
        "x := 1",
        "a, b = b, a",
        "x += 2",
        "i++",
        "f()",
        "return",
        "return a, b",
        "break",
        "var n int = 3",
        "go run()",
        "defer close(ch)",
        "if x {\n}",
        "for {\n}",
        "for k, v := range m {\n}",
        "for i := 0; i < n; i++ {\n}",
        "goto end",
        "ch <- v",
        "loop:\n\tfor {\n\t}",
        "switch x {\ncase 1, 2:\n\ty++\ndefault:\n}",
        "switch {\n}",
        "switch v := x.(type) {\ncase int:\n}",
        "select {\ncase v := <-ch:\n\t_ = v\ncase out <- 1:\n}",
        "var (\n\ta = 1\n)",
        "type pair struct {\n\ta, b int\n}",
    ])
    def test_statement_parses(self, grammar, src):
        assert grammar["statement"].parse(src).text == src

    def test_block_with_semicolons(self, grammar):
        grammar["block"].parse("{ a := 1; b := 2 }")

    def test_statement_needs_separator(self, grammar):
        with pytest.raises(ParseError):
            grammar["block"].parse("{ a := 1 b := 2 }")

    def test_header_brace_opens_block(self, grammar):
        for src in ("if ok {\n}", "switch x {\n}", "for _, v := range vs {\n}",
                    "if p == (T{}) {\n}", "for _, v := range []int{1} {\n}"):
            assert grammar["statement"].parse(src).text == src

    def test_send_is_not_less_than(self, grammar):
        grammar["statement"].parse("ch <- -1")
        with pytest.raises(ParseError):
            grammar["expression"].parse("ch <- 1")


class TestGrammarFiles:

    @pytest.mark.parametrize(
        "src", [PLAIN_GO, CONTROL_FLOW_GO, RECURSIVE_GO, SWITCH_GO, LITERALS_GO],
        ids=["plain", "control_flow", "recursive", "switch", "literals"])
    def test_source_file_parses(self, grammar, src):
        assert grammar.parse(src).text == src

    def test_incomplete_function_rejected(self, grammar):
        with pytest.raises(IncompleteParseError):
            grammar.parse("package main\n\nfunc main() {\n\tx :=\n}\n")
