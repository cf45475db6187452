#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
scriptcost/visitor.py
=====================

Visitor pattern infrastructure for script AST traversal.

Provides:
- ``ASTVisitor`` — base with ``visit`` dispatch and a no-op fallback
- ``DepthFirstVisitor`` — generic traversal with ``enter`` / ``leave`` hooks
- ``iter_nodes`` / ``walk`` — pre-order iteration helpers
- ``find_first`` — first node in source order matching a predicate
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, Iterator, Optional, Type, Union

from scriptcost import ast as A

__all__ = [
    "ASTVisitor",
    "DepthFirstVisitor",
    "iter_nodes",
    "walk",
    "find_first",
]


class ASTVisitor:
    """Base class for script AST visitors.

    Dispatch goes through :meth:`scriptcost.ast.Node.accept`, which looks
    up ``visit_<snake_case_type>`` (``visit_while_statement``,
    ``visit_await_expression``, …) and falls back to ``generic_visit``.
    """

    def visit(self, node: A.Node) -> Any:
        """Dispatch to the appropriate visit method."""
        return node.accept(self)

    def generic_visit(self, node: A.Node) -> Any:
        """Called when no specific visitor method exists.

        Default: return None.  Override for catch-all behavior.
        """
        return None


class DepthFirstVisitor(ASTVisitor):
    """Visitor that traverses all children in depth-first source order.

    Override ``enter`` / ``leave`` for pre/post-order processing, or a
    specific ``visit_X`` method to take over traversal of that node type
    (call ``self.generic_visit(node)`` from it to keep descending).
    """

    def generic_visit(self, node: A.Node) -> Any:
        self.enter(node)
        for child in node.children():
            self.visit(child)
        self.leave(node)
        return None

    def enter(self, node: A.Node) -> None:
        """Called before visiting children."""
        pass

    def leave(self, node: A.Node) -> None:
        """Called after visiting children."""
        pass


def iter_nodes(
    root: A.Node,
    children: Optional[Callable[[A.Node], Iterable[A.Node]]] = None,
) -> Iterator[A.Node]:
    """Yield *root* and all its descendants in pre-order (source order).

    *children* overrides which children of a node are descended into
    (default: :meth:`Node.children`); returning nothing prunes the
    subtree.  Iterative, so deeply nested scripts do not hit the
    recursion limit.
    """
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        kids = node.children() if children is None else children(node)
        stack.extend(reversed(list(kids)))


def walk(
    root: A.Node,
    node_type: Union[Type[A.Node], tuple] = A.Node,
) -> Iterator[A.Node]:
    """Like :func:`iter_nodes` but only yields instances of *node_type*."""
    for node in iter_nodes(root):
        if isinstance(node, node_type):
            yield node


def find_first(
    root: A.Node,
    predicate: Callable[[A.Node], bool],
) -> Optional[A.Node]:
    for node in iter_nodes(root):
        if predicate(node):
            return node
    return None
