# tests/conftest.py
"""
Shared Go source fixtures for the gomacro test-suite.
"""

import textwrap

import pytest

from gomacro.config import ExpanderConfig


def go(src: str) -> str:
    """Dedent a triple-quoted Go snippet and strip the leading newline."""
    return textwrap.dedent(src).lstrip("\n")


# ---------------------------------------------------------------------------
# Ordinary Go code (no macros) in canonical gofmt layout
# ---------------------------------------------------------------------------

PLAIN_GO = go("""
    package main

    import (
    \t"fmt"
    \t"os"
    )

    // Version is printed on startup.
    const Version = "1.0"

    func run(args []string) (int, error) {
    \t// count the arguments
    \tn := len(args) // total

    \tvar total int
    \tfor _, a := range args {
    \t\ttotal += len(a)
    \t}
    \tif n == 0 {
    \t\treturn 0, nil
    \t}
    \tfmt.Println(total, os.Args[0])
    \tdefer cleanup()
    \tgo worker(n)
    \treturn n, nil
    }

    func (s *Server) Start() {
    }
""")

CONTROL_FLOW_GO = go("""
    package main

    func main() {
    \tx := 1
    \ty := x + 2*3
    \tif x > 0 {
    \t\tfmt.Println(x)
    \t} else if y < 2 {
    \t\ty++
    \t} else {
    \t\ty--
    \t}
    \tfor i := 0; i < 10; i++ {
    \t\tx += i
    \t}
    \tfor x < 100 {
    \t\tx *= 2
    \t}
    \tfor {
    \t\tbreak
    \t}
    \t{
    \t\tz := x
    \t\t_ = z
    \t}
    }
""")


SWITCH_GO = go("""
    package main

    func classify(v interface{}) string {
    \tswitch t := v.(type) {
    \tcase int, int64:
    \t\treturn "int"
    \tcase []byte:
    \t\treturn "bytes " + string(t)
    \tcase nil:
    \t\treturn "nil"
    \tdefault:
    \t\treturn "other"
    \t}
    }

    func grade(n int) string {
    \tswitch {
    \tcase n >= 90: // top
    \t\treturn "A"
    \tcase n >= 80:
    \t\treturn "B"
    \t}
    \tswitch x := n % 3; x {
    \tcase 0:
    \t\tfallthrough
    \t// one and two share a branch
    \tcase 1, 2:
    \t\tn++

    \tdefault:
    \t}
    \treturn "C"
    }

    func pump(in <-chan int, out chan<- int, done chan struct{}) {
    \tfor {
    \t\tselect {
    \t\tcase v, ok := <-in:
    \t\t\tif !ok {
    \t\t\t\treturn
    \t\t\t}
    \t\t\tout <- v * 2
    \t\tcase <-done:
    \t\t\treturn
    \t\tdefault:
    \t\t}
    \t}
    }

    func search(grid [][]int, want int) (int, int) {
    outer:
    \tfor i, row := range grid {
    \t\tfor j, v := range row {
    \t\t\tif v == want {
    \t\t\t\treturn i, j
    \t\t\t}
    \t\t\tif v < 0 {
    \t\t\t\tcontinue outer
    \t\t\t}
    \t\t}
    \t}
    \tgoto fail
    fail:
    \treturn -1, -1
    }
""")

LITERALS_GO = go("""
    package main

    type point struct {
    \tx, y int
    }

    var handlers = map[string]func(int) int{
    \t"double": func(n int) int { return n * 2 },
    }

    func inc(n int) int { return n + 1 }

    func build(s string, xs []int, i, j int) []byte {
    \tp := point{x: 1, y: 2}
    \tcfg := config{
    \t\tname:    "demo",
    \t\tretries: 3,

    \t\ttimeout: 10,
    \t}
    \tpts := []point{
    \t\t{1, 2},
    \t\t{x: 3, y: 4},
    \t}
    \tb := []byte(s)
    \tb = append(b, s[1:]...)
    \ttail := xs[len(xs)-1:]
    \tmid := xs[i+1 : j]
    \tn, ok := cfg.extra.(int)
    \tadd := func(a, b int) int { return a + b }
    \tgo func() {
    \t\tdone <- true
    \t}()
    \tdefer func() { recover() }()
    \tsort.Slice(xs, func(i, j int) bool {
    \t\treturn xs[i] < xs[j]
    \t})
    \tfmt.Println(p, pts, tail, mid, n, ok, add(1, 2),
    \t\tlen(b))
    \treturn b
    }

    func Map[T, U any](xs []T, f func(T) U) []U {
    \tout := make([]U, 0, len(xs))
    \tfor _, x := range xs {
    \t\tout = append(out, f(x))
    \t}
    \treturn out
    }

    func local() {
    \ttype pair struct {
    \t\ta, b int
    \t}
    \tvar (
    \t\tx = 1
    \t\ty = 2
    \t)
    \tconst limit = 10
    \t_ = pair{x, y}
    \tif (pair{}) == (pair{x, limit}) {
    \t\treturn
    \t}
    }
""")

# ---------------------------------------------------------------------------
# Macro templates
# ---------------------------------------------------------------------------

ADD_MACRO_GO = go("""
    package main

    func MACRO_add(dst, a, b int) {
    \tdst = a + b
    }

    func main() {
    \tadd(r, 1, 2)
    }
""")

MUL_MACRO_GO = go("""
    package main

    func MACRO_mul(dst, a, b int) {
    \tdst = a * b
    }

    func main() {
    \tmul(r, x+y, 2)
    }
""")

SWAP_MACRO_GO = go("""
    package main

    func MACRO_swap(a, b int) {
    \t// exchange through a temporary
    \ttmp := a
    \ta = b
    \tb = tmp
    }

    func main() {
    \tx, y := 1, 2
    \tswap(x, y)
    \tprint(x, y)
    }
""")

NESTED_CALL_GO = go("""
    package main

    func MACRO_sq(v int) {
    \tout = v * v
    }

    func main() {
    \ty := 1 + sq(3)
    }
""")

RECURSIVE_GO = go("""
    package main

    func MACRO_inc(x int) {
    \tx = x + 1
    }

    func MACRO_incTwice(y int) {
    \tinc(y)
    \ty = y * 2
    }

    func main() {
    \tincTwice(n)
    }
""")

NESTED_BLOCK_GO = go("""
    package main

    func MACRO_inc(x int) {
    \tx = x + 1
    }

    func main() {
    \tx := 1
    \tif x > 0 {
    \t\tinc(x)
    \t} else {
    \t\tfor i := 0; i < 3; i++ {
    \t\t\tinc(i)
    \t\t}
    \t}
    \ty := 2
    }
""")

UNSUPPORTED_STMT_GO = go("""
    package main

    func MACRO_bad(x int) {
    \treturn x
    }

    func main() {
    \tbad(1)
    }
""")

UNSUPPORTED_EXPR_GO = go("""
    package main

    func MACRO_show(x int) {
    \tfmt.Println(x)
    }

    func main() {
    \tshow(1)
    }
""")


@pytest.fixture
def default_config():
    return ExpanderConfig()


@pytest.fixture
def recursive_config():
    return ExpanderConfig(recursive=True)
