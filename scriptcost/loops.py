"""scriptcost/loops.py — unyielding infinite loop detection.

The game scheduler only regains control from a script at an ``await``.
A ``while (true)`` loop with no ``await`` anywhere inside it can
therefore never yield and freezes the game; such scripts are rejected
before they run.

The check is purely syntactic:

* only ``while`` loops are considered;
* the test must be the literal token ``true`` (``while (1)`` and
  ``while (!false)`` are not flagged);
* any ``AwaitExpression`` in the loop subtree, nested functions
  included, makes the loop safe.

A flagged loop is not descended into.  A safe loop's body is still
searched, so an unsafe loop nested inside a yielding one is reported.
Only the first unsafe loop in source order is returned.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from scriptcost import ast as A
from scriptcost.parser import parse
from scriptcost.visitor import find_first, iter_nodes

__all__ = [
    "LoopFinding",
    "contains_await",
    "find_unsafe_loop",
    "check_infinite_loop",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoopFinding:
    """Location of an unsafe loop (1-based line and column)."""

    line: int
    column: int = 0
    filename: str = "<script>"


def contains_await(node: A.Node) -> bool:
    """True if an ``AwaitExpression`` occurs anywhere in *node*'s subtree."""
    return find_first(node, lambda n: isinstance(n, A.AwaitExpression)) is not None


def _search_children(node: A.Node) -> Iterable[A.Node]:
    # A while loop that is not condemned is searched through its body only.
    if isinstance(node, A.WhileStatement):
        return (node.body,)
    return node.children()


def _is_condemned(node: A.Node) -> bool:
    return (isinstance(node, A.WhileStatement)
            and A.is_true_literal(node.test)
            and not contains_await(node))


def find_unsafe_loop(program: A.Program) -> Optional[LoopFinding]:
    """Return the first ``while (true)`` loop that never awaits, or None."""
    loop = next((n for n in iter_nodes(program, _search_children) if _is_condemned(n)),
                None)
    if loop is None:
        return None
    finding = LoopFinding(
        line=program.line_of(loop.start),
        column=program.column_of(loop.start),
        filename=program.filename,
    )
    logger.info("%s:%d: while(true) loop without await", finding.filename, finding.line)
    return finding


def check_infinite_loop(source: str, filename: str = "<script>") -> Optional[LoopFinding]:
    """Parse *source* and run :func:`find_unsafe_loop` on it.

    Raises :class:`~scriptcost.errors.ScriptParseError` if the source
    does not parse.
    """
    return find_unsafe_loop(parse(source, filename))
