"""scriptcost/ast.py – AST definitions for the game-script language.

The parser (:mod:`scriptcost.parser`) turns script source into a tree of
the frozen dataclasses defined here; the analyses (symbol extraction,
loop safety) consume it.  Node names follow the ESTree vocabulary so the
shapes are familiar to anyone who has read a JavaScript AST.

Design invariants
-----------------
* Every AST node is a frozen dataclass (immutable after construction).
* Nodes that carry children use tuples, never lists.
* Every node records ``start`` / ``end`` character offsets into the
  source; ``Program`` keeps the source text so lines can be derived.
* Dataclass field order is source order, so :meth:`Node.children`
  yields children in document order.

Module layout
-------------
§1  Base node
§2  Statements & declarations
§3  Expressions
§4  Patterns
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, fields
from functools import lru_cache
from typing import Any, Iterator, Optional, Tuple

import sexpdata

# ════════════════════════════════════════════════════════════════════════
# §1  Base node
# ════════════════════════════════════════════════════════════════════════

_CAMEL_RE = re.compile(r"(?<!^)(?=[A-Z])")


@lru_cache(maxsize=None)
def _visit_method_name(cls: type) -> str:
    return "visit_" + _CAMEL_RE.sub("_", cls.__name__).lower()


class Node:
    """Base class for all script AST nodes."""

    __slots__ = ()

    start: int
    end: int

    @property
    def type(self) -> str:
        """ESTree-style node type name."""
        return type(self).__name__

    def children(self) -> Iterator["Node"]:
        """Yield direct child nodes in source order."""
        for f in fields(self):  # type: ignore[arg-type]
            value = getattr(self, f.name)
            if isinstance(value, Node):
                yield value
            elif isinstance(value, tuple):
                for item in value:
                    if isinstance(item, Node):
                        yield item

    def accept(self, visitor: Any) -> Any:
        method = getattr(visitor, _visit_method_name(type(self)), None)
        if method is None:
            return visitor.generic_visit(self)
        return method(self)

    def to_sexp(self) -> str:
        """Dump this subtree as an S-expression string (debugging aid)."""
        return sexpdata.dumps(_sexp_form(self))


def _sexp_form(value: Any) -> Any:
    if isinstance(value, Node):
        form: list[Any] = [sexpdata.Symbol(value.type)]
        for f in fields(value):  # type: ignore[arg-type]
            if f.name in ("start", "end") or not f.compare:
                continue
            item = getattr(value, f.name)
            if item is None or item == ():
                continue
            form.append([sexpdata.Symbol(f.name), _sexp_form(item)])
        return form
    if isinstance(value, tuple):
        return [_sexp_form(v) for v in value]
    if isinstance(value, bool):
        return sexpdata.Symbol("true" if value else "false")
    return value


# ════════════════════════════════════════════════════════════════════════
# §2  Statements & declarations
# ════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True, slots=True)
class Program(Node):
    """Root node: a whole script."""

    body: Tuple[Node, ...]
    start: int = 0
    end: int = 0
    source: str = field(default="", repr=False, compare=False)
    filename: str = field(default="<script>", repr=False, compare=False)

    def line_of(self, offset: int) -> int:
        """1-based line number of a character offset in the source."""
        return self.source.count("\n", 0, offset) + 1

    def column_of(self, offset: int) -> int:
        """1-based column number of a character offset in the source."""
        return offset - (self.source.rfind("\n", 0, offset) + 1) + 1


@dataclass(frozen=True, slots=True)
class BlockStatement(Node):
    body: Tuple[Node, ...]
    start: int = 0
    end: int = 0


@dataclass(frozen=True, slots=True)
class EmptyStatement(Node):
    start: int = 0
    end: int = 0


@dataclass(frozen=True, slots=True)
class ExpressionStatement(Node):
    expression: Node
    start: int = 0
    end: int = 0


@dataclass(frozen=True, slots=True)
class VariableDeclarator(Node):
    id: Node
    init: Optional[Node] = None
    start: int = 0
    end: int = 0


@dataclass(frozen=True, slots=True)
class VariableDeclaration(Node):
    kind: str                                   # "const" | "let" | "var"
    declarations: Tuple[VariableDeclarator, ...]
    start: int = 0
    end: int = 0


@dataclass(frozen=True, slots=True)
class FunctionDeclaration(Node):
    id: "Identifier"
    params: Tuple[Node, ...]
    body: BlockStatement
    is_async: bool = False
    generator: bool = False
    start: int = 0
    end: int = 0


@dataclass(frozen=True, slots=True)
class ReturnStatement(Node):
    argument: Optional[Node] = None
    start: int = 0
    end: int = 0


@dataclass(frozen=True, slots=True)
class IfStatement(Node):
    test: Node
    consequent: Node
    alternate: Optional[Node] = None
    start: int = 0
    end: int = 0


@dataclass(frozen=True, slots=True)
class WhileStatement(Node):
    """``while (test) body`` – the test-then-body repeating loop."""

    test: Node
    body: Node
    start: int = 0
    end: int = 0


@dataclass(frozen=True, slots=True)
class DoWhileStatement(Node):
    body: Node
    test: Node
    start: int = 0
    end: int = 0


@dataclass(frozen=True, slots=True)
class ForStatement(Node):
    init: Optional[Node]
    test: Optional[Node]
    update: Optional[Node]
    body: Node
    start: int = 0
    end: int = 0


@dataclass(frozen=True, slots=True)
class ForOfStatement(Node):
    left: Node
    right: Node
    body: Node
    start: int = 0
    end: int = 0


@dataclass(frozen=True, slots=True)
class ForInStatement(Node):
    left: Node
    right: Node
    body: Node
    start: int = 0
    end: int = 0


@dataclass(frozen=True, slots=True)
class BreakStatement(Node):
    start: int = 0
    end: int = 0


@dataclass(frozen=True, slots=True)
class ContinueStatement(Node):
    start: int = 0
    end: int = 0


@dataclass(frozen=True, slots=True)
class ThrowStatement(Node):
    argument: Node
    start: int = 0
    end: int = 0


@dataclass(frozen=True, slots=True)
class CatchClause(Node):
    param: Optional[Node]
    body: BlockStatement
    start: int = 0
    end: int = 0


@dataclass(frozen=True, slots=True)
class TryStatement(Node):
    block: BlockStatement
    handler: Optional[CatchClause] = None
    finalizer: Optional[BlockStatement] = None
    start: int = 0
    end: int = 0


@dataclass(frozen=True, slots=True)
class ImportSpecifier(Node):
    """One imported binding.

    ``kind`` is ``"named"`` (``{a as b}``), ``"default"`` (``a``) or
    ``"namespace"`` (``* as a``).
    """

    imported: str
    local: str
    kind: str = "named"
    start: int = 0
    end: int = 0


@dataclass(frozen=True, slots=True)
class ImportDeclaration(Node):
    specifiers: Tuple[ImportSpecifier, ...]
    source: str
    start: int = 0
    end: int = 0


@dataclass(frozen=True, slots=True)
class ExportDeclaration(Node):
    declaration: Node
    default: bool = False
    start: int = 0
    end: int = 0


# ════════════════════════════════════════════════════════════════════════
# §3  Expressions
# ════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True, slots=True)
class Identifier(Node):
    name: str
    start: int = 0
    end: int = 0


@dataclass(frozen=True, slots=True)
class Literal(Node):
    """Number, string, boolean or null literal.

    ``raw`` is the exact source text, so ``true`` and ``!0`` stay
    distinguishable.
    """

    value: Any
    raw: str
    start: int = 0
    end: int = 0


@dataclass(frozen=True, slots=True)
class ThisExpression(Node):
    start: int = 0
    end: int = 0


@dataclass(frozen=True, slots=True)
class TemplateLiteral(Node):
    quasis: Tuple[str, ...]
    expressions: Tuple[Node, ...]
    start: int = 0
    end: int = 0


@dataclass(frozen=True, slots=True)
class ArrayExpression(Node):
    elements: Tuple[Node, ...]
    start: int = 0
    end: int = 0


@dataclass(frozen=True, slots=True)
class Property(Node):
    key: Node
    value: Node
    computed: bool = False
    shorthand: bool = False
    method: bool = False
    start: int = 0
    end: int = 0


@dataclass(frozen=True, slots=True)
class ObjectExpression(Node):
    properties: Tuple[Node, ...]
    start: int = 0
    end: int = 0


@dataclass(frozen=True, slots=True)
class SpreadElement(Node):
    argument: Node
    start: int = 0
    end: int = 0


@dataclass(frozen=True, slots=True)
class FunctionExpression(Node):
    id: Optional[Identifier]
    params: Tuple[Node, ...]
    body: BlockStatement
    is_async: bool = False
    generator: bool = False
    start: int = 0
    end: int = 0


@dataclass(frozen=True, slots=True)
class ArrowFunctionExpression(Node):
    params: Tuple[Node, ...]
    body: Node
    is_async: bool = False
    start: int = 0
    end: int = 0


@dataclass(frozen=True, slots=True)
class UnaryExpression(Node):
    operator: str
    argument: Node
    start: int = 0
    end: int = 0


@dataclass(frozen=True, slots=True)
class UpdateExpression(Node):
    operator: str
    argument: Node
    prefix: bool
    start: int = 0
    end: int = 0


@dataclass(frozen=True, slots=True)
class BinaryExpression(Node):
    left: Node
    operator: str
    right: Node
    start: int = 0
    end: int = 0


@dataclass(frozen=True, slots=True)
class LogicalExpression(Node):
    left: Node
    operator: str
    right: Node
    start: int = 0
    end: int = 0


@dataclass(frozen=True, slots=True)
class AssignmentExpression(Node):
    left: Node
    operator: str
    right: Node
    start: int = 0
    end: int = 0


@dataclass(frozen=True, slots=True)
class ConditionalExpression(Node):
    test: Node
    consequent: Node
    alternate: Node
    start: int = 0
    end: int = 0


@dataclass(frozen=True, slots=True)
class CallExpression(Node):
    callee: Node
    arguments: Tuple[Node, ...]
    optional: bool = False
    start: int = 0
    end: int = 0


@dataclass(frozen=True, slots=True)
class NewExpression(Node):
    callee: Node
    arguments: Tuple[Node, ...]
    start: int = 0
    end: int = 0


@dataclass(frozen=True, slots=True)
class MemberExpression(Node):
    object: Node
    property: Node
    computed: bool = False
    optional: bool = False
    start: int = 0
    end: int = 0


@dataclass(frozen=True, slots=True)
class SequenceExpression(Node):
    expressions: Tuple[Node, ...]
    start: int = 0
    end: int = 0


@dataclass(frozen=True, slots=True)
class AwaitExpression(Node):
    """``await argument`` – the only suspension point of a script."""

    argument: Node
    start: int = 0
    end: int = 0


# ════════════════════════════════════════════════════════════════════════
# §4  Patterns
# ════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True, slots=True)
class ArrayPattern(Node):
    elements: Tuple[Node, ...]
    start: int = 0
    end: int = 0


@dataclass(frozen=True, slots=True)
class ObjectPattern(Node):
    properties: Tuple[Property, ...]
    start: int = 0
    end: int = 0


@dataclass(frozen=True, slots=True)
class RestElement(Node):
    argument: Node
    start: int = 0
    end: int = 0


@dataclass(frozen=True, slots=True)
class AssignmentPattern(Node):
    left: Node
    right: Node
    start: int = 0
    end: int = 0


def is_true_literal(node: Optional[Node]) -> bool:
    """True only for the literal token ``true`` (no constant folding)."""
    return isinstance(node, Literal) and node.raw == "true"
