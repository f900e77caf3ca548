"""
gomacro/grammar.py — Parsimonious PEG grammar for Go source.

The grammar covers the statement and expression forms of ordinary Go
function bodies: control flow (``if``/``for``/``switch``/``select``,
labels and ``goto``), function literals, composite literals, slice
expressions, conversions and type assertions.  ``import``/``var``/
``const``/``type`` declarations at file level, and grouped or type
declarations inside functions, are matched as balanced raw text and passed
through untouched.

Go's automatic semicolon insertion is modelled by ``eos``: a statement ends
at ``;``, at a newline, before a closing ``}`` or at end of input.  Three
whitespace rules keep newlines significant:

    hs       horizontal space (and inline ``/* */`` comments), never a newline
    ws       any whitespace and comments; used inside brackets and after
             binary operators, where Go never inserts a semicolon
    spacing  whitespace between items; comments there become ``Comment`` nodes

The ``hdr_*`` rules repeat the expression rules for ``if``/``for``/``switch``
headers, where a composite literal may not start with a bare type name:
in ``if ok {`` the brace opens the block.
"""

from __future__ import annotations

from parsimonious.grammar import Grammar

__all__ = ["GO_GRAMMAR"]


GO_GRAMMAR = Grammar(r'''
    # ─────────────────────────────────────────────────────────────
    # Top-Level Structure
    # ─────────────────────────────────────────────────────────────

    source_file     = top_item* spacing
    top_item        = spacing (comment / package_clause / func_decl / raw_decl)

    package_clause  = ~r"package\b" hs identifier decl_end

    raw_decl        = raw_keyword raw_body decl_end
    raw_keyword     = ~r"(import|var|const|type)\b"
    raw_body        = (raw_group / raw_string / raw_text / raw_slash)*
    raw_group       = ("(" raw_inner ")") / ("{" raw_inner "}")
    raw_inner       = (raw_group / raw_string / ~r"//[^\n]*" / ~r"/\*.*?\*/"s
                      / ~r"[^(){}\"`'/]+" / raw_slash)*
    raw_text        = ~r"[^\n(){}\"`'/]+"
    raw_slash       = ~r"/(?![/*])"
    raw_string      = string_lit / rune_lit

    # ─────────────────────────────────────────────────────────────
    # Function Declarations
    # ─────────────────────────────────────────────────────────────

    func_decl       = ~r"func\b" hs receiver? identifier type_params? hs signature hs block decl_end
    receiver        = "(" ws param_decl ws ")" hs
    type_params     = "[" bracket_body "]"
    bracket_body    = (("[" bracket_body "]") / ~r"[^\[\]]+")*
    signature       = params hs results?
    params          = "(" ws param_list? ws ")"
    param_list      = param_decl (ws "," ws param_decl)* (ws ",")?
    param_decl      = (ident_list hs type) / type
    ident_list      = identifier (hs "," ws identifier)*
    results         = params / type

    # ─────────────────────────────────────────────────────────────
    # Types (kept as normalised text)
    # ─────────────────────────────────────────────────────────────

    type            = pointer_type / slice_type / map_type / chan_type / func_type
                    / variadic_type / paren_type / struct_type / type_name
    pointer_type    = "*" hs type
    slice_type      = "[" ws ("..." / expression)? ws "]" hs type
    map_type        = ~r"map\b" hs "[" ws type ws "]" hs type
    chan_type       = (~r"chan\b" hs "<-" hs type) / ("<-" hs ~r"chan\b" hs type)
                    / (~r"chan\b" hs type)
    func_type       = ~r"func\b" hs signature
    variadic_type   = "..." hs type
    paren_type      = "(" ws type ws ")"
    struct_type     = ~r"(struct|interface)\b" hs "{" brace_body "}"
    brace_body      = (("{" brace_body "}") / ~r"[^{}]+")*
    type_name       = identifier ("." identifier)? ("[" ws type_list ws "]")?
    type_list       = type (ws "," ws type)*

    # ─────────────────────────────────────────────────────────────
    # Blocks & Statements
    # ─────────────────────────────────────────────────────────────

    block           = "{" block_item* spacing "}"
    block_item      = spacing (comment / statement_line)
    statement_line  = statement decl_end
    decl_end        = hs trailing_comment? eos
    trailing_comment = line_comment / block_comment
    eos             = hs (";" / "\n" / &"}" / !~r"."s)

    statement       = labeled_stmt / if_stmt / for_stmt / switch_stmt / select_stmt
                    / return_stmt / branch_stmt / go_stmt / defer_stmt / var_stmt
                    / decl_stmt / block_stmt / simple_stmt
    simple_stmt     = send_stmt / assign_stmt / incdec_stmt / expr_stmt
    send_stmt       = expression hs "<-" ws expression
    assign_stmt     = expr_list hs assign_op ws expr_list
    assign_op       = ":=" / "<<=" / ">>=" / "&^=" / "+=" / "-=" / "*=" / "/="
                    / "%=" / "&=" / "|=" / "^=" / "="
    incdec_stmt     = expression hs incdec_op
    incdec_op       = "++" / "--"
    expr_stmt       = expression hs
    expr_list       = expression (hs "," ws expression)*

    labeled_stmt    = identifier hs ":" !"=" spacing statement

    if_stmt         = ~r"if\b" hs if_header block else_clause?
    if_header       = (hdr_simple_stmt hs ";" hs)? hdr_expression hs
    else_clause     = hs ~r"else\b" hs (if_stmt / block)

    for_stmt        = ~r"for\b" hs for_header? block
    for_header      = (range_clause / for_clause / hdr_expression) hs
    for_clause      = hdr_simple_stmt? hs ";" hs hdr_expression? hs ";" hs hdr_simple_stmt?
    range_clause    = (hdr_expr_list hs range_tok hs)? ~r"range\b" hs hdr_expression
    range_tok       = ":=" / "="

    switch_stmt     = ~r"switch\b" hs switch_header "{" switch_item* spacing "}"
    switch_header   = (hdr_simple_stmt? hs ";" hs)? hdr_simple_stmt? hs
    switch_item     = spacing (comment / case_clause)
    case_clause     = case_head hs ":" decl_end? block_item*
    case_head       = (~r"case\b" hs expr_list) / ~r"default\b"

    select_stmt     = ~r"select\b" hs "{" select_item* spacing "}"
    select_item     = spacing (comment / comm_clause)
    comm_clause     = comm_head hs ":" decl_end? block_item*
    comm_head       = (~r"case\b" hs simple_stmt) / ~r"default\b"

    return_stmt     = ~r"return\b" (hs expr_list)?
    branch_stmt     = ~r"(break|continue|fallthrough|goto)\b" (hs identifier)?
    go_stmt         = ~r"go\b" hs expression
    defer_stmt      = ~r"defer\b" hs expression
    var_stmt        = ~r"(var|const)\b" hs ident_list (hs type)? (hs "=" ws expr_list)?
    decl_stmt       = ~r"(var|const|type)\b" raw_body
    block_stmt      = &"{" block

    # ─────────────────────────────────────────────────────────────
    # Expressions
    # ─────────────────────────────────────────────────────────────

    expression      = unary_expr (hs binary_op ws unary_expr)*
    binary_op       = "||" / "&&" / "==" / "!=" / "<=" / ">=" / "<<" / ">>" / "&^"
                    / ("<" !"-") / ">" / "+" / "-" / "|" / "^" / "*" / "/" / "%" / "&"
    unary_expr      = (unary_op hs unary_expr) / primary_expr
    unary_op        = "<-" / "-" / "+" / "!" / "^" / "*" / "&"

    primary_expr    = operand postfix*
    postfix         = call_suffix / index_suffix / type_assert_suffix / selector_suffix
    call_suffix     = "(" ws arg_list? ws ")"
    arg_list        = expression (ws "," ws expression)* (ws "...")? (ws ",")?
    index_suffix    = "[" ws (slice_range / expression) ws "]"
    slice_range     = expression? ws ":" ws expression? (ws ":" ws expression)?
    type_assert_suffix = "." "(" ws (~r"type\b" / type) ws ")"
    selector_suffix = "." identifier

    operand         = literal / composite_lit / func_lit / paren_expr / type_expr / identifier
    paren_expr      = "(" ws expression ws ")"
    func_lit        = ~r"func\b" hs signature hs block
    type_expr       = slice_type / map_type / chan_type / func_type / struct_type

    composite_lit   = literal_type hs literal_value
    literal_type    = hdr_literal_type / type_name
    literal_value   = "{" ws element_list? ws "}"
    element_list    = element (ws "," ws element)* (ws ",")?
    element         = keyed_element / element_value
    keyed_element   = element_value hs ":" ws element_value
    element_value   = literal_value / expression

    # Header variants: no composite literal with a bare type name.
    hdr_simple_stmt = hdr_send_stmt / hdr_assign_stmt / hdr_incdec_stmt / hdr_expr_stmt
    hdr_send_stmt   = hdr_expression hs "<-" ws hdr_expression
    hdr_assign_stmt = hdr_expr_list hs assign_op ws hdr_expr_list
    hdr_incdec_stmt = hdr_expression hs incdec_op
    hdr_expr_stmt   = hdr_expression hs
    hdr_expr_list   = hdr_expression (hs "," ws hdr_expression)*
    hdr_expression  = hdr_unary_expr (hs binary_op ws hdr_unary_expr)*
    hdr_unary_expr  = (unary_op hs hdr_unary_expr) / hdr_primary_expr
    hdr_primary_expr = hdr_operand postfix*
    hdr_operand     = literal / hdr_composite_lit / func_lit / paren_expr / type_expr
                    / identifier
    hdr_composite_lit = hdr_literal_type hs literal_value
    hdr_literal_type = slice_type / map_type / struct_type

    # ─────────────────────────────────────────────────────────────
    # Literals
    # ─────────────────────────────────────────────────────────────

    literal         = imaginary_lit / float_lit / int_lit / rune_lit / string_lit
    imaginary_lit   = ~r"(?:\d[\d_]*(?:\.\d*)?(?:[eE][+-]?\d+)?|\.\d+(?:[eE][+-]?\d+)?)i\b"
    float_lit       = ~r"\d[\d_]*\.\d*(?:[eE][+-]?\d+)?|\d[\d_]*[eE][+-]?\d+|\.\d+(?:[eE][+-]?\d+)?"
    int_lit         = ~r"0[xX][0-9a-fA-F_]+|0[bB][01_]+|0[oO][0-7_]+|\d[\d_]*"
    rune_lit        = ~r"'(?:\\(?:'|[^'\n]+)|[^'\\\n])'"
    string_lit      = ~r'"(?:[^"\\\n]|\\.)*"' / ~r"`[^`]*`"

    # ─────────────────────────────────────────────────────────────
    # Comments, Identifiers & Whitespace
    # ─────────────────────────────────────────────────────────────

    comment         = line_comment / block_comment
    line_comment    = ~r"//[^\n]*"
    block_comment   = ~r"/\*.*?\*/"s

    identifier      = !keyword ~r"[^\W\d]\w*"
    keyword         = ~r"(break|case|chan|const|continue|default|defer|else|fallthrough|for|func|go|goto|if|import|interface|map|package|range|return|select|struct|switch|type|var)\b"

    hs              = ~r"[ \t\r]*(?:/\*[^\n]*?\*/[ \t\r]*)*"
    ws              = ~r"(?:\s|//[^\n]*|/\*.*?\*/)*"s
    spacing         = ~r"\s*"
''')
