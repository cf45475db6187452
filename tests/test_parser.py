# tests/test_parser.py
"""
Tests for the script parser: source text → AST nodes.
"""

import pytest

from scriptcost import ast as A
from scriptcost.errors import ScriptParseError
from scriptcost.parser import parse
from tests.conftest import (
    EMPTY_LOOP_JS, HACK_JS, IMPORTING_JS, KITCHEN_SINK_JS,
)


def first_expr(src):
    stmt = parse(src).body[0]
    assert isinstance(stmt, A.ExpressionStatement)
    return stmt.expression


class TestParseEmpty:

    def test_empty_string(self):
        prog = parse("")
        assert isinstance(prog, A.Program)
        assert prog.body == ()

    def test_whitespace_only(self):
        assert parse("   \n\n\t  ").body == ()

    def test_comment_only(self):
        assert parse("// just a comment\n/* block */").body == ()

    def test_program_keeps_source_and_filename(self):
        prog = parse("x;", filename="a.js")
        assert prog.source == "x;"
        assert prog.filename == "a.js"


class TestParseLoops:

    def test_while_true(self):
        loop = parse(EMPTY_LOOP_JS).body[0]
        assert isinstance(loop, A.WhileStatement)
        assert isinstance(loop.test, A.Literal)
        assert loop.test.value is True
        assert loop.test.raw == "true"
        assert isinstance(loop.body, A.BlockStatement)
        assert loop.body.body == ()

    def test_while_offsets(self):
        prog = parse("x;\n  while (true) {}")
        loop = prog.body[1]
        assert loop.start == 5
        assert prog.line_of(loop.start) == 2
        assert prog.column_of(loop.start) == 3

    def test_while_with_statement_body(self):
        loop = parse("while (x) x--;").body[0]
        assert isinstance(loop.body, A.ExpressionStatement)
        assert isinstance(loop.body.expression, A.UpdateExpression)

    def test_do_while(self):
        loop = parse("do { n--; } while (n > 0);").body[0]
        assert isinstance(loop, A.DoWhileStatement)
        assert isinstance(loop.test, A.BinaryExpression)
        assert loop.test.operator == ">"

    def test_for_statement(self):
        loop = parse("for (let i = 0; i < 10; i++) {}").body[0]
        assert isinstance(loop, A.ForStatement)
        assert isinstance(loop.init, A.VariableDeclaration)
        assert loop.init.kind == "let"
        assert loop.test.operator == "<"
        assert isinstance(loop.update, A.UpdateExpression)
        assert loop.update.prefix is False

    def test_for_empty_header(self):
        loop = parse("for (;;) {}").body[0]
        assert loop.init is None and loop.test is None and loop.update is None

    def test_for_of(self):
        loop = parse("for (const x of xs) {}").body[0]
        assert isinstance(loop, A.ForOfStatement)
        assert loop.left.kind == "const"
        assert loop.left.declarations[0].id.name == "x"
        assert loop.right.name == "xs"

    def test_for_in(self):
        loop = parse("for (k in obj) {}").body[0]
        assert isinstance(loop, A.ForInStatement)
        assert loop.left.name == "k"


class TestParseExpressions:

    def test_precedence(self):
        expr = first_expr("a + b * c;")
        assert isinstance(expr, A.BinaryExpression)
        assert expr.operator == "+"
        assert expr.left.name == "a"
        assert expr.right.operator == "*"

    def test_left_associative(self):
        expr = first_expr("a - b - c;")
        assert expr.left.operator == "-"
        assert expr.right.name == "c"

    def test_exponent_right_associative(self):
        expr = first_expr("a ** b ** c;")
        assert expr.left.name == "a"
        assert expr.right.operator == "**"

    def test_logical(self):
        expr = first_expr("a && b || c;")
        assert isinstance(expr, A.LogicalExpression)
        assert expr.operator == "||"
        assert expr.left.operator == "&&"

    def test_chained_assignment(self):
        expr = first_expr("x = y += 1;")
        assert isinstance(expr, A.AssignmentExpression)
        assert expr.right.operator == "+="

    def test_conditional(self):
        expr = first_expr("a ? b : c;")
        assert isinstance(expr, A.ConditionalExpression)
        assert expr.alternate.name == "c"

    def test_sequence(self):
        expr = first_expr("a, b;")
        assert isinstance(expr, A.SequenceExpression)
        assert len(expr.expressions) == 2

    def test_member_call(self):
        expr = first_expr('ns.hack("n00dles");')
        assert isinstance(expr, A.CallExpression)
        assert isinstance(expr.callee, A.MemberExpression)
        assert expr.callee.object.name == "ns"
        assert expr.callee.property.name == "hack"
        assert expr.callee.computed is False
        assert expr.arguments[0].value == "n00dles"

    def test_computed_member(self):
        expr = first_expr("ns.args[0];")
        assert expr.computed is True
        assert expr.property.value == 0

    def test_optional_chain(self):
        expr = first_expr("a?.b;")
        assert isinstance(expr, A.MemberExpression)
        assert expr.optional is True

    def test_optional_call(self):
        expr = first_expr("f?.(1);")
        assert isinstance(expr, A.CallExpression)
        assert expr.optional is True

    def test_new_expression(self):
        expr = first_expr("new Error('x');")
        assert isinstance(expr, A.NewExpression)
        assert expr.callee.name == "Error"
        assert len(expr.arguments) == 1

    def test_await(self):
        expr = first_expr("await ns.sleep(1000);")
        assert isinstance(expr, A.AwaitExpression)
        assert isinstance(expr.argument, A.CallExpression)

    def test_unary_and_update(self):
        assert first_expr("!x;").operator == "!"
        assert first_expr("typeof x;").operator == "typeof"
        update = first_expr("++i;")
        assert isinstance(update, A.UpdateExpression)
        assert update.prefix is True

    def test_arrow_function(self):
        expr = first_expr("v => v;")
        assert isinstance(expr, A.ArrowFunctionExpression)
        assert expr.params[0].name == "v"
        assert expr.body.name == "v"

    def test_async_arrow_with_block(self):
        expr = first_expr("async (a, b) => { await a; };")
        assert expr.is_async is True
        assert len(expr.params) == 2
        assert isinstance(expr.body, A.BlockStatement)

    def test_object_literal(self):
        expr = first_expr("({ a: 1, b, [c]: 2 });")
        assert isinstance(expr, A.ObjectExpression)
        a, b, c = expr.properties
        assert a.key.name == "a" and a.computed is False
        assert b.shorthand is True
        assert c.computed is True and c.key.name == "c"

    def test_template_literal(self):
        expr = first_expr("`a ${b} c`;")
        assert isinstance(expr, A.TemplateLiteral)
        assert expr.quasis == ("a ", " c")
        assert expr.expressions[0].name == "b"


class TestParseLiterals:

    @pytest.mark.parametrize("src,value", [
        ("42", 42),
        ("1.5", 1.5),
        ("0x1F", 31),
        ("0b101", 5),
        ("1_000", 1000),
        ("'hi'", "hi"),
        ('"a\\nb"', "a\nb"),
        ("true", True),
        ("false", False),
        ("null", None),
    ])
    def test_literal_values(self, src, value):
        lit = first_expr(src + ";")
        assert isinstance(lit, A.Literal)
        assert lit.value == value
        assert lit.raw == src


class TestParseModules:

    def test_named_import(self):
        decl = parse(IMPORTING_JS).body[0]
        assert isinstance(decl, A.ImportDeclaration)
        assert decl.source == "./lib.js"
        assert decl.specifiers[0].imported == "buy"
        assert decl.specifiers[0].kind == "named"

    def test_namespace_import(self):
        decl = parse('import * as u from "u.js";').body[0]
        spec = decl.specifiers[0]
        assert (spec.imported, spec.local, spec.kind) == ("*", "u", "namespace")

    def test_default_and_renamed_import(self):
        decl = parse('import d, { a as b } from "x";').body[0]
        kinds = [(s.kind, s.imported, s.local) for s in decl.specifiers]
        assert kinds == [("default", "default", "d"), ("named", "a", "b")]

    def test_bare_import(self):
        decl = parse('import "side.js";').body[0]
        assert decl.specifiers == ()
        assert decl.source == "side.js"

    def test_export_async_function(self):
        decl = parse(HACK_JS).body[0]
        assert isinstance(decl, A.ExportDeclaration)
        fn = decl.declaration
        assert isinstance(fn, A.FunctionDeclaration)
        assert fn.id.name == "main"
        assert fn.is_async is True
        assert fn.params[0].name == "ns"


class TestParseDeclarations:

    def test_multiple_declarators(self):
        decl = parse("var a = 1, b;").body[0]
        assert [d.id.name for d in decl.declarations] == ["a", "b"]
        assert decl.declarations[1].init is None

    def test_destructuring(self):
        decl = parse("const { p, q: r = 4, ...rest } = obj;").body[0]
        pattern = decl.declarations[0].id
        assert isinstance(pattern, A.ObjectPattern)
        assert isinstance(pattern.properties[1].value, A.AssignmentPattern)
        assert isinstance(pattern.properties[2], A.RestElement)

    def test_generator_with_defaults(self):
        fn = parse("function* g(a, b = 2, ...c) {}").body[0]
        assert fn.generator is True
        assert isinstance(fn.params[1], A.AssignmentPattern)
        assert isinstance(fn.params[2], A.RestElement)

    def test_try_catch_finally(self):
        stmt = parse("try { f(); } catch (e) { g(); } finally { h(); }").body[0]
        assert isinstance(stmt, A.TryStatement)
        assert stmt.handler.param.name == "e"
        assert isinstance(stmt.finalizer, A.BlockStatement)

    def test_if_else(self):
        stmt = parse("if (a) b(); else c();").body[0]
        assert isinstance(stmt, A.IfStatement)
        assert stmt.alternate is not None

    def test_kitchen_sink(self):
        prog = parse(KITCHEN_SINK_JS)
        assert len(prog.body) == 9


class TestParseErrors:

    def test_unclosed_block(self):
        with pytest.raises(ScriptParseError):
            parse("while (true) {")

    def test_error_location(self):
        with pytest.raises(ScriptParseError) as info:
            parse("x = 1;\nwhile (true) {", filename="bad.js")
        assert info.value.span.file == "bad.js"
        assert info.value.span.line == 2
        assert info.value.span.column == 1

    def test_unsupported_class(self):
        with pytest.raises(ScriptParseError):
            parse("class Foo {}")

    def test_error_renders_gcc_style(self):
        with pytest.raises(ScriptParseError) as info:
            parse("let = ;", filename="x.js")
        assert info.value.to_gcc_format().startswith("x.js:1:")
        assert "[syntaxError]" in str(info.value)


class TestSexpDump:

    def test_to_sexp(self):
        sexp = parse(EMPTY_LOOP_JS).to_sexp()
        assert sexp.startswith("(Program")
        assert "WhileStatement" in sexp
        assert "Literal" in sexp
