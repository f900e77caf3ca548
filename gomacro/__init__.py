"""gomacro — inline macro expansion for Go source.

Function declarations whose name starts with ``MACRO_`` are templates: they
are removed from the output, and every statement that calls them by their
unprefixed name is replaced with the template body, parameters substituted
by the call's arguments.

Submodules
----------
grammar / parser
    parsimonious PEG grammar for a Go subset and the parse tree → AST
    builder.

formatter
    gofmt-style printer.

macros / substitute / expander
    Macro table, parameter substitution and the block expander + driver.

main
    CLI entry-point (``gomacro [-r] INPUT OUTPUT``).

Usage
-----
Command-line::

    gomacro -r template.go.tmpl output.go

Library::

    from gomacro import ExpanderConfig, expand_source
    print(expand_source(text, ExpanderConfig(recursive=True)))
"""

__version__ = "0.1.0"

from gomacro.config import ExpanderConfig
from gomacro.errors import (
    GoSyntaxError,
    MacroArityError,
    MacroError,
    OutputError,
    UnsupportedNodeError,
)
from gomacro.expander import expand_file, expand_program, expand_source
from gomacro.formatter import format_program
from gomacro.parser import parse

__all__ = [
    "__version__",
    "ExpanderConfig",
    "MacroError",
    "GoSyntaxError",
    "UnsupportedNodeError",
    "MacroArityError",
    "OutputError",
    "expand_source",
    "expand_file",
    "expand_program",
    "format_program",
    "parse",
]
