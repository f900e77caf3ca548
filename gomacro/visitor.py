#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
gomacro/visitor.py
==================

Visitor pattern infrastructure for gomacro AST traversal.

Provides:
- ``ASTVisitor`` — dispatches ``visit(node)`` to ``visit_<snake_case>``
- ``DepthFirstVisitor`` — generic traversal that visits all children
"""

from __future__ import annotations

import re
from typing import Any, Dict

from gomacro import ast_nodes as A

__all__ = [
    "ASTVisitor",
    "DepthFirstVisitor",
    "method_name",
]

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")
_METHOD_NAMES: Dict[type, str] = {}


def method_name(node_type: type) -> str:
    """``BinaryExpr`` → ``visit_binary_expr`` (cached per class)."""
    name = _METHOD_NAMES.get(node_type)
    if name is None:
        name = "visit_" + _CAMEL_BOUNDARY.sub("_", node_type.__name__).lower()
        _METHOD_NAMES[node_type] = name
    return name


class ASTVisitor:
    """Base class for gomacro AST visitors.

    ``visit`` looks up a ``visit_X`` method named after the node class and
    falls back to ``generic_visit``.  Subclasses override the methods they
    care about.
    """

    def visit(self, node: A.Node) -> Any:
        """Dispatch to the appropriate visit method."""
        method = getattr(self, method_name(type(node)), None)
        if method is None:
            return self.generic_visit(node)
        return method(node)

    def generic_visit(self, node: A.Node) -> Any:
        """Called when no specific visitor method exists.

        Default: return None.  Override for catch-all behavior.
        """
        return None


class DepthFirstVisitor(ASTVisitor):
    """Visitor that traverses all children in depth-first order.

    Override a ``visit_X`` method and return without calling
    ``generic_visit`` to prune the walk below that node.
    """

    def generic_visit(self, node: A.Node) -> Any:
        """Visit all children."""
        for child in node.children():
            self.visit(child)
        return None
