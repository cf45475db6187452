"""scriptcost/parser.py – script source → AST.

Runs the parsimonious grammar from :mod:`scriptcost.grammar` and folds
the resulting parse tree into the frozen dataclasses of
:mod:`scriptcost.ast`.

Public API
----------
``parse(source: str, filename: str = "<script>") -> ast.Program``
    Parse a complete script.  Raises :class:`ScriptParseError` on
    malformed input.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, replace
from typing import Any, Iterator, List, Optional

from parsimonious.exceptions import ParseError, VisitationError
from parsimonious.nodes import Node as ParseNode
from parsimonious.nodes import NodeVisitor

from scriptcost import ast as A
from scriptcost.errors import ScriptParseError, SourceSpan
from scriptcost.grammar import SCRIPT_GRAMMAR

__all__ = ["parse", "ScriptASTBuilder"]

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Intermediate values passed between visit methods
# ---------------------------------------------------------------------------

class _Token(str):
    """Operator or raw text fragment produced by a leaf rule."""


@dataclass(frozen=True)
class _Tail:
    """One link of a call/member chain: ``(args)``, ``.name`` or ``[expr]``."""

    kind: str           # "call" | "member" | "index"
    payload: Any
    end: int
    optional: bool = False


@dataclass(frozen=True)
class _Computed:
    """A ``[expr]`` object-literal key."""

    expr: A.Node


def _flatten(items: Any) -> Iterator[Any]:
    """Flatten nested visit results, dropping raw parse-tree leaves."""
    if isinstance(items, list):
        for item in items:
            yield from _flatten(item)
    elif items is not None and not isinstance(items, ParseNode):
        yield items


def _nodes(items: Any) -> List[A.Node]:
    return [item for item in _flatten(items) if isinstance(item, A.Node)]


def _first(items: Any) -> Optional[A.Node]:
    for item in _flatten(items):
        if isinstance(item, A.Node):
            return item
    return None


_ESCAPE_RE = re.compile(
    r"\\(?:x([0-9a-fA-F]{2})|u\{([0-9a-fA-F]+)\}|u([0-9a-fA-F]{4})|(\r\n|[\s\S]))"
)
_SIMPLE_ESCAPES = {
    "n": "\n", "t": "\t", "r": "\r", "b": "\b",
    "f": "\f", "v": "\v", "0": "\0",
    "\n": "", "\r\n": "", "\r": "",
}


def _unescape(body: str) -> str:
    def _sub(m: "re.Match[str]") -> str:
        hex2, brace, hex4, other = m.groups()
        if hex2 or brace or hex4:
            return chr(int(hex2 or brace or hex4, 16))
        return _SIMPLE_ESCAPES.get(other, other)

    return _ESCAPE_RE.sub(_sub, body)


def _number_value(raw: str) -> Any:
    text = raw.replace("_", "")
    if text.endswith("n"):
        return int(text[:-1], 0)
    if text[:2].lower() in ("0x", "0b", "0o"):
        return int(text, 0)
    if any(c in text for c in ".eE"):
        return float(text)
    return int(text)


# ═══════════════════════════════════════════════════════════════════
#  Parse tree → AST
# ═══════════════════════════════════════════════════════════════════

class ScriptASTBuilder(NodeVisitor):
    """Transforms a parsimonious parse tree into a script AST."""

    def __init__(self, source: str, filename: str = "<script>") -> None:
        self.source = source
        self.filename = filename

    def generic_visit(self, node, visited_children):
        return visited_children or node

    # ─────────────────────────────────────────────────────────────
    # Program & statements
    # ─────────────────────────────────────────────────────────────

    def visit_program(self, node, visited_children):
        _, statements = visited_children
        return A.Program(
            body=tuple(_nodes(statements)),
            start=0,
            end=len(self.source),
            source=self.source,
            filename=self.filename,
        )

    def visit_statement(self, node, visited_children):
        return _first(visited_children)

    def visit_block(self, node, visited_children):
        return A.BlockStatement(tuple(_nodes(visited_children[2])),
                                start=node.start, end=node.end)

    def visit_empty_stmt(self, node, visited_children):
        return A.EmptyStatement(start=node.start, end=node.end)

    def visit_expr_stmt(self, node, visited_children):
        return A.ExpressionStatement(visited_children[0],
                                     start=node.start, end=node.end)

    def visit_var_statement(self, node, visited_children):
        return visited_children[0]

    def visit_var_decl(self, node, visited_children):
        declarations = [d for d in _nodes(visited_children[2:])
                        if isinstance(d, A.VariableDeclarator)]
        return A.VariableDeclaration(
            kind=node.children[0].text,
            declarations=tuple(declarations),
            start=node.start, end=node.end,
        )

    def visit_declarator(self, node, visited_children):
        binding, init = visited_children
        return A.VariableDeclarator(_first(binding), _first(init),
                                    start=node.start, end=node.end)

    def visit_if_stmt(self, node, visited_children):
        test = visited_children[4]
        consequent = _first(visited_children[8])
        alternate = _first(visited_children[9])
        return A.IfStatement(test, consequent, alternate,
                             start=node.start, end=node.end)

    def visit_while_stmt(self, node, visited_children):
        return A.WhileStatement(visited_children[4], _first(visited_children[8]),
                                start=node.start, end=node.end)

    def visit_do_while_stmt(self, node, visited_children):
        return A.DoWhileStatement(_first(visited_children[2]), visited_children[7],
                                  start=node.start, end=node.end)

    def visit_for_stmt(self, node, visited_children):
        return A.ForStatement(
            init=_first(visited_children[4]),
            test=_first(visited_children[8]),
            update=_first(visited_children[12]),
            body=_first(visited_children[16]),
            start=node.start, end=node.end,
        )

    def visit_for_init(self, node, visited_children):
        return _first(visited_children)

    def visit_for_in_of_stmt(self, node, visited_children):
        left = _first(visited_children[4])
        right = visited_children[8]
        body = _first(visited_children[12])
        cls = A.ForOfStatement if node.children[6].text == "of" else A.ForInStatement
        return cls(left, right, body, start=node.start, end=node.end)

    def visit_for_left(self, node, visited_children):
        return _first(visited_children)

    def visit_var_head(self, node, visited_children):
        binding = _first(visited_children[2])
        declarator = A.VariableDeclarator(binding, None,
                                          start=binding.start, end=binding.end)
        return A.VariableDeclaration(node.children[0].text, (declarator,),
                                     start=node.start, end=node.end)

    def visit_try_stmt(self, node, visited_children):
        return A.TryStatement(
            block=visited_children[2],
            handler=_first(visited_children[3]),
            finalizer=_first(visited_children[4]),
            start=node.start, end=node.end,
        )

    def visit_catch_clause(self, node, visited_children):
        return A.CatchClause(_first(visited_children[2]), visited_children[3],
                             start=node.start, end=node.end)

    def visit_finally_clause(self, node, visited_children):
        return visited_children[2]

    def visit_return_stmt(self, node, visited_children):
        return A.ReturnStatement(_first(visited_children[1]),
                                 start=node.start, end=node.end)

    def visit_break_stmt(self, node, visited_children):
        return A.BreakStatement(start=node.start, end=node.end)

    def visit_continue_stmt(self, node, visited_children):
        return A.ContinueStatement(start=node.start, end=node.end)

    def visit_throw_stmt(self, node, visited_children):
        return A.ThrowStatement(visited_children[2], start=node.start, end=node.end)

    # ─────────────────────────────────────────────────────────────
    # Modules
    # ─────────────────────────────────────────────────────────────

    def visit_import_decl(self, node, visited_children):
        return _first(visited_children)

    def visit_import_from(self, node, visited_children):
        specifiers = [s for s in _flatten(visited_children[2])
                      if isinstance(s, A.ImportSpecifier)]
        source = visited_children[6]
        return A.ImportDeclaration(tuple(specifiers), source.value,
                                   start=node.start, end=node.end)

    def visit_import_bare(self, node, visited_children):
        return A.ImportDeclaration((), visited_children[2].value,
                                   start=node.start, end=node.end)

    def visit_import_clause(self, node, visited_children):
        specifiers = []
        for item in _flatten(visited_children):
            if isinstance(item, A.Identifier):
                item = A.ImportSpecifier("default", item.name, "default",
                                         start=item.start, end=item.end)
            if isinstance(item, A.ImportSpecifier):
                specifiers.append(item)
        return specifiers

    def visit_import_default_named(self, node, visited_children):
        default = visited_children[0]
        rest = [s for s in _flatten(visited_children[4])
                if isinstance(s, A.ImportSpecifier)]
        return [A.ImportSpecifier("default", default.name, "default",
                                  start=default.start, end=default.end)] + rest

    def visit_import_named(self, node, visited_children):
        return [s for s in _flatten(visited_children)
                if isinstance(s, A.ImportSpecifier)]

    def visit_import_spec(self, node, visited_children):
        names = _nodes(visited_children)
        return A.ImportSpecifier(names[0].name, names[-1].name, "named",
                                 start=node.start, end=node.end)

    def visit_import_namespace(self, node, visited_children):
        return A.ImportSpecifier("*", visited_children[4].name, "namespace",
                                 start=node.start, end=node.end)

    def visit_export_decl(self, node, visited_children):
        is_default = bool(node.children[2].text.strip())
        return A.ExportDeclaration(_first(visited_children[3]), is_default,
                                   start=node.start, end=node.end)

    # ─────────────────────────────────────────────────────────────
    # Functions & bindings
    # ─────────────────────────────────────────────────────────────

    def visit_function_decl(self, node, visited_children):
        return A.FunctionDeclaration(
            id=visited_children[4],
            params=visited_children[6],
            body=visited_children[8],
            is_async=bool(node.children[0].text),
            generator=bool(node.children[3].text),
            start=node.start, end=node.end,
        )

    def visit_function_expr(self, node, visited_children):
        return A.FunctionExpression(
            id=_first(visited_children[4]),
            params=visited_children[6],
            body=visited_children[8],
            is_async=bool(node.children[0].text),
            generator=bool(node.children[3].text),
            start=node.start, end=node.end,
        )

    def visit_params(self, node, visited_children):
        return tuple(_nodes(visited_children[2]))

    def visit_param(self, node, visited_children):
        return _first(visited_children)

    def visit_param_default(self, node, visited_children):
        return A.AssignmentPattern(_first(visited_children[0]), visited_children[4],
                                   start=node.start, end=node.end)

    def visit_rest_element(self, node, visited_children):
        return A.RestElement(_first(visited_children[2]),
                             start=node.start, end=node.end)

    def visit_binding(self, node, visited_children):
        return _first(visited_children)

    def visit_array_pattern(self, node, visited_children):
        return A.ArrayPattern(tuple(_nodes(visited_children[2])),
                              start=node.start, end=node.end)

    def visit_object_pattern(self, node, visited_children):
        return A.ObjectPattern(tuple(_nodes(visited_children[2])),
                               start=node.start, end=node.end)

    def visit_pattern_prop(self, node, visited_children):
        item = _first(visited_children)
        if isinstance(item, A.Identifier):
            return A.Property(item, item, shorthand=True,
                              start=item.start, end=item.end)
        return item

    def visit_pattern_keyed(self, node, visited_children):
        return A.Property(visited_children[0], _first(visited_children[4]),
                          start=node.start, end=node.end)

    def visit_pattern_default(self, node, visited_children):
        name = visited_children[0]
        value = A.AssignmentPattern(name, visited_children[4],
                                    start=node.start, end=node.end)
        return A.Property(name, value, shorthand=True,
                          start=node.start, end=node.end)

    def visit_arrow_function(self, node, visited_children):
        params = visited_children[1]
        return A.ArrowFunctionExpression(
            params=params,
            body=_first(visited_children[5]),
            is_async=bool(node.children[0].text),
            start=node.start, end=node.end,
        )

    def visit_arrow_params(self, node, visited_children):
        params = visited_children[0]
        if isinstance(params, tuple):
            return params
        return (params,)

    # ─────────────────────────────────────────────────────────────
    # Expressions
    # ─────────────────────────────────────────────────────────────

    def visit_expr(self, node, visited_children):
        first, rest = visited_children
        items = [first] + _nodes(rest)
        if len(items) == 1:
            return first
        return A.SequenceExpression(tuple(items), start=node.start, end=node.end)

    def visit_assign_expr(self, node, visited_children):
        return _first(visited_children)

    def visit_assignment(self, node, visited_children):
        left, _, op, _, right = visited_children
        return A.AssignmentExpression(left, str(op), right,
                                      start=node.start, end=node.end)

    def visit_conditional(self, node, visited_children):
        test, tail = visited_children
        branches = _nodes(tail)
        if not branches:
            return test
        return A.ConditionalExpression(test, branches[0], branches[1],
                                       start=node.start, end=node.end)

    def _chain(self, visited_children, cls):
        left, rest = visited_children
        items = list(_flatten(rest))
        for op, right in zip(items[0::2], items[1::2]):
            left = cls(left, str(op), right, start=left.start, end=right.end)
        return left

    def visit_logical_or(self, node, visited_children):
        return self._chain(visited_children, A.LogicalExpression)

    def visit_logical_and(self, node, visited_children):
        return self._chain(visited_children, A.LogicalExpression)

    def visit_bit_or(self, node, visited_children):
        return self._chain(visited_children, A.BinaryExpression)

    visit_bit_xor = visit_bit_and = visit_equality = visit_bit_or
    visit_relational = visit_shift = visit_additive = visit_bit_or
    visit_multiplicative = visit_bit_or

    def visit_exponent(self, node, visited_children):
        base, tail = visited_children
        items = list(_flatten(tail))
        if not items:
            return base
        op, power = items
        return A.BinaryExpression(base, str(op), power,
                                  start=node.start, end=node.end)

    def _op(self, node, visited_children):
        return _Token(node.text)

    visit_assign_op = visit_or_op = visit_and_op = _op
    visit_bit_or_op = visit_bit_xor_op = visit_bit_and_op = _op
    visit_equality_op = visit_relational_op = visit_shift_op = _op
    visit_additive_op = visit_mul_op = visit_exp_op = _op
    visit_update_op = visit_unary_op = _op

    def visit_unary(self, node, visited_children):
        return _first(visited_children)

    def visit_await_expr(self, node, visited_children):
        return A.AwaitExpression(visited_children[2],
                                 start=node.start, end=node.end)

    def visit_prefix_update(self, node, visited_children):
        return A.UpdateExpression(str(visited_children[0]), visited_children[2],
                                  prefix=True, start=node.start, end=node.end)

    def visit_prefix_unary(self, node, visited_children):
        return A.UnaryExpression(str(visited_children[0]), visited_children[2],
                                 start=node.start, end=node.end)

    def visit_postfix_expr(self, node, visited_children):
        operand, tail = visited_children
        ops = [t for t in _flatten(tail) if isinstance(t, _Token)]
        if not ops:
            return operand
        return A.UpdateExpression(str(ops[0]), operand, prefix=False,
                                  start=node.start, end=node.end)

    # ─────────────────────────────────────────────────────────────
    # Calls & member access
    # ─────────────────────────────────────────────────────────────

    @staticmethod
    def _fold_tails(expr: A.Node, tails) -> A.Node:
        for tail in tails:
            if not isinstance(tail, _Tail):
                continue
            if tail.kind == "call":
                expr = A.CallExpression(expr, tail.payload, tail.optional,
                                        start=expr.start, end=tail.end)
            else:
                expr = A.MemberExpression(expr, tail.payload,
                                          computed=tail.kind == "index",
                                          optional=tail.optional,
                                          start=expr.start, end=tail.end)
        return expr

    def visit_call_member(self, node, visited_children):
        head, tails = visited_children
        return self._fold_tails(_first(head), _flatten(tails))

    def visit_call_tail(self, node, visited_children):
        for item in _flatten(visited_children):
            if isinstance(item, _Tail):
                return item
        return None

    def visit_arguments(self, node, visited_children):
        return _Tail("call", tuple(_nodes(visited_children[2])), node.end)

    def visit_argument(self, node, visited_children):
        return _first(visited_children)

    def visit_spread_element(self, node, visited_children):
        return A.SpreadElement(_first(visited_children[2]),
                               start=node.start, end=node.end)

    def visit_member_dot(self, node, visited_children):
        return _Tail("member", visited_children[3], node.end)

    def visit_member_index(self, node, visited_children):
        return _Tail("index", visited_children[2], node.end)

    def visit_optional_chain(self, node, visited_children):
        inner = list(_flatten(visited_children[3]))[0]
        if isinstance(inner, _Tail):
            return replace(inner, optional=True, end=node.end)
        return _Tail("member", inner, node.end, optional=True)

    def visit_new_expr(self, node, visited_children):
        callee = visited_children[2]
        tails = [t for t in _flatten(visited_children[3]) if isinstance(t, _Tail)]
        args = tails[0].payload if tails else ()
        return A.NewExpression(callee, args, start=node.start, end=node.end)

    def visit_new_callee(self, node, visited_children):
        head, tails = visited_children
        return self._fold_tails(_first(head), _flatten(tails))

    # ─────────────────────────────────────────────────────────────
    # Primary expressions
    # ─────────────────────────────────────────────────────────────

    def visit_primary(self, node, visited_children):
        return _first(visited_children)

    def visit_paren_expr(self, node, visited_children):
        return visited_children[2]

    def visit_this_expr(self, node, visited_children):
        return A.ThisExpression(start=node.start, end=node.end)

    def visit_array_literal(self, node, visited_children):
        return A.ArrayExpression(tuple(_nodes(visited_children[2])),
                                 start=node.start, end=node.end)

    def visit_object_literal(self, node, visited_children):
        return A.ObjectExpression(tuple(_nodes(visited_children[2])),
                                  start=node.start, end=node.end)

    def visit_object_member(self, node, visited_children):
        item = _first(visited_children)
        if isinstance(item, A.Identifier):
            return A.Property(item, item, shorthand=True,
                              start=item.start, end=item.end)
        return item

    def visit_method_member(self, node, visited_children):
        key = visited_children[2]
        function = A.FunctionExpression(
            id=None,
            params=visited_children[4],
            body=visited_children[6],
            is_async=bool(node.children[0].text),
            generator=bool(node.children[1].text),
            start=node.start, end=node.end,
        )
        computed = isinstance(key, _Computed)
        return A.Property(key.expr if computed else key, function,
                          computed=computed, method=True,
                          start=node.start, end=node.end)

    def visit_keyed_member(self, node, visited_children):
        key = visited_children[0]
        computed = isinstance(key, _Computed)
        return A.Property(key.expr if computed else key, visited_children[4],
                          computed=computed, start=node.start, end=node.end)

    def visit_prop_key(self, node, visited_children):
        return next(_flatten(visited_children))

    def visit_computed_key(self, node, visited_children):
        return _Computed(visited_children[2])

    def visit_template(self, node, visited_children):
        quasis: List[str] = [""]
        expressions: List[A.Node] = []
        for part in _flatten(visited_children[1]):
            if isinstance(part, A.Node):
                expressions.append(part)
                quasis.append("")
            else:
                quasis[-1] += _unescape(str(part))
        return A.TemplateLiteral(tuple(quasis), tuple(expressions),
                                 start=node.start, end=node.end)

    def visit_template_part(self, node, visited_children):
        return next(_flatten(visited_children))

    def visit_template_subst(self, node, visited_children):
        return visited_children[2]

    def visit_template_chars(self, node, visited_children):
        return _Token(node.text)

    # ─────────────────────────────────────────────────────────────
    # Literals & identifiers
    # ─────────────────────────────────────────────────────────────

    def visit_literal(self, node, visited_children):
        return _first(visited_children)

    def visit_number(self, node, visited_children):
        return A.Literal(_number_value(node.text), node.text,
                         start=node.start, end=node.end)

    def visit_string(self, node, visited_children):
        return A.Literal(_unescape(node.text[1:-1]), node.text,
                         start=node.start, end=node.end)

    def visit_boolean(self, node, visited_children):
        return A.Literal(node.text == "true", node.text,
                         start=node.start, end=node.end)

    def visit_null(self, node, visited_children):
        return A.Literal(None, node.text, start=node.start, end=node.end)

    def visit_identifier(self, node, visited_children):
        return A.Identifier(node.text, start=node.start, end=node.end)

    def visit_property_name(self, node, visited_children):
        return A.Identifier(node.text, start=node.start, end=node.end)


# ═══════════════════════════════════════════════════════════════════
#  Public entry point
# ═══════════════════════════════════════════════════════════════════

def parse(source: str, filename: str = "<script>") -> A.Program:
    """Parse *source* into a :class:`~scriptcost.ast.Program`.

    Raises
    ------
    ScriptParseError
        The source is not valid in the supported script subset.
    """
    try:
        tree = SCRIPT_GRAMMAR.parse(source)
    except ParseError as exc:
        span = SourceSpan.from_offset(source, exc.pos, filename)
        snippet = source[exc.pos:exc.pos + 20].split("\n", 1)[0]
        expected = getattr(exc.expr, "name", "") or ""
        raise ScriptParseError(
            f"Unexpected input {snippet!r}" if snippet else "Unexpected end of input",
            span=span,
            expected=expected,
            cause=exc,
        ) from exc
    except RecursionError as exc:
        raise ScriptParseError(
            "Script nests too deeply to parse",
            span=SourceSpan(file=filename),
            cause=exc,
        ) from exc

    try:
        program = ScriptASTBuilder(source, filename).visit(tree)
    except VisitationError as exc:
        raise ScriptParseError(
            f"Malformed construct: {exc.original_class.__name__}",
            span=SourceSpan(file=filename),
            cause=exc,
        ) from exc

    logger.debug("parsed %s: %d top-level statement(s)", filename, len(program.body))
    return program
