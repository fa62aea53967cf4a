"""Tests for the Swift parser."""

from __future__ import annotations

import textwrap

import pytest

from architask.core.position import LineIndex
from architask.syntax import SyntaxParseError, parse, walk
from architask.syntax import nodes as n


def _parse(source: str) -> n.SourceFile:
    return parse(textwrap.dedent(source))


def _first(tree: n.Node, cls: type) -> n.Node:
    return next(node for node in walk(tree) if isinstance(node, cls))


class TestDeclarations:
    def test_struct_with_inheritance_and_members(self):
        tree = _parse("""\
            struct ContentView: View {
                @StateObject var model: ViewModel
                var body: some View { Text("hi") }
            }
        """)
        decl = tree.statements[0]
        assert isinstance(decl, n.TypeDecl)
        assert decl.kind == "struct"
        assert decl.name == "ContentView"
        assert decl.inherits_from("View")
        first, second = decl.members
        assert isinstance(first, n.VariableDecl)
        assert first.has_attribute("StateObject")
        assert first.bindings[0].name == "model"
        assert first.bindings[0].type.text == "ViewModel"
        assert second.bindings[0].type.text == "some View"
        assert second.bindings[0].accessors[0].kind == "get"

    def test_function_signature(self):
        tree = _parse("""\
            private static func load(_ id: Int, named name: String = "x", rest: Int...) async throws -> [String] {
                return []
            }
        """)
        func = tree.statements[0]
        assert isinstance(func, n.FunctionDecl)
        assert func.name == "load"
        assert func.is_private and func.is_static
        assert func.is_async and func.throws
        assert [p.label for p in func.parameters] == [None, "named", "rest"]
        assert [p.name for p in func.parameters] == ["id", "name", "rest"]
        assert func.parameters[1].default is not None
        assert func.parameters[2].variadic
        assert func.return_type.text == "[String]"
        assert not func.returns_void

    def test_operator_function(self):
        func = _parse("static func == (lhs: A, rhs: A) -> Bool { true }").statements[0]
        assert func.is_operator
        assert func.name == "=="

    def test_enum_cases(self):
        decl = _parse("""\
            enum Direction: String {
                case north = "n", south
                case custom(String)
            }
        """).statements[0]
        cases = [m for m in decl.members if isinstance(m, n.EnumCaseDecl)]
        names = [e.name for c in cases for e in c.elements]
        assert names == ["north", "south", "custom"]

    def test_imports(self):
        tree = _parse("""\
            import SwiftUI
            @testable import MyApp
            import struct Foundation.URL
        """)
        imports = [s for s in tree.statements if isinstance(s, n.ImportDecl)]
        assert [i.path for i in imports] == ["SwiftUI", "MyApp", "Foundation.URL"]
        assert imports[1].has_attribute("testable")
        assert imports[2].kind == "struct"
        assert imports[2].module == "Foundation"

    def test_computed_property_with_accessors(self):
        decl = _parse("""\
            var count: Int {
                get { storage }
                set { storage = newValue }
            }
        """).statements[0]
        assert [a.kind for a in decl.bindings[0].accessors] == ["get", "set"]

    def test_implicitly_unwrapped_type(self):
        decl = _parse("var label: UILabel!").statements[0]
        type_ref = decl.bindings[0].type
        assert type_ref.implicitly_unwrapped
        assert type_ref.base_text == "UILabel"

    def test_init_and_deinit(self):
        decl = _parse("""\
            class Box {
                init?(value: Int) { }
                deinit { }
            }
        """).statements[0]
        init, deinit = decl.members
        assert isinstance(init, n.InitializerDecl)
        assert init.kind == "init" and init.failable
        assert deinit.kind == "deinit"


class TestStatements:
    def test_if_else_chain(self):
        tree = _parse("""\
            if let value = optional, value > 1 {
                print(value)
            } else if flag {
                print("flag")
            } else {
                print("none")
            }
        """)
        stmt = tree.statements[0]
        assert isinstance(stmt, n.IfStmt)
        assert isinstance(stmt.conditions[0], n.OptionalBinding)
        assert isinstance(stmt.conditions[1], n.BinaryExpr)
        assert isinstance(stmt.else_body, n.IfStmt)
        assert isinstance(stmt.else_body.else_body, n.CodeBlock)

    def test_guard_and_loops(self):
        tree = _parse("""\
            func run(items: [Int]) {
                guard !items.isEmpty else { return }
                for item in items where item > 0 {
                    continue
                }
                while true { break }
                repeat { } while false
            }
        """)
        body = tree.statements[0].body.statements
        assert [type(s) for s in body] == [n.GuardStmt, n.ForStmt, n.WhileStmt, n.RepeatStmt]
        assert body[1].where_clause is not None

    def test_switch_cases(self):
        stmt = _parse("""\
            switch value {
            case .a, .b:
                print("ab")
            case let .c(x) where x > 0:
                print(x)
            default:
                break
            }
        """).statements[0]
        assert isinstance(stmt, n.SwitchStmt)
        assert len(stmt.cases) == 3
        assert len(stmt.cases[0].patterns) == 2
        assert stmt.cases[1].where_clause is not None
        assert stmt.cases[2].is_default

    def test_do_catch(self):
        stmt = _parse("""\
            do {
                try work()
            } catch let error as MyError {
                print(error)
            } catch {
                print(error)
            }
        """).statements[0]
        assert isinstance(stmt, n.DoStmt)
        assert len(stmt.catches) == 2
        assert stmt.catches[1].pattern is None

    def test_statements_on_one_line_need_semicolons(self):
        with pytest.raises(SyntaxParseError):
            _parse("let a = 1 let b = 2")
        tree = _parse("let a = 1; let b = 2")
        assert len(tree.statements) == 2

    def test_for_case_with_cast_pattern(self):
        loop = _parse("""\
            for case let view as UIView in subviews where view.isHidden {
                view.removeFromSuperview()
            }
        """).statements[0]
        assert isinstance(loop, n.ForStmt)
        assert isinstance(loop.pattern, n.CastExpr)
        assert isinstance(loop.pattern.expr, n.BindingPattern)
        assert loop.pattern.type.text == "UIView"
        assert loop.where_clause is not None

    def test_async_let(self):
        body = _parse("""\
            func load() async {
                async let feed = fetchFeed()
                async let count = fetchCount()
                print(await feed, await count)
            }
        """).statements[0].body.statements
        assert [type(s) for s in body] == [n.VariableDecl, n.VariableDecl, n.Call]
        assert body[0].modifiers == ["async"]
        assert body[0].binding_kind == "let"
        assert body[1].bindings[0].name == "count"

    def test_async_is_still_an_identifier(self):
        tree = _parse("""\
            let async = 1
            print(async)
        """)
        assert len(tree.statements) == 2


class TestExpressions:
    def test_force_unwrap_vs_not(self):
        tree = _parse("""\
            let a = value!
            let b = !flag
            let c = x != y
        """)
        a, b, c = (s.bindings[0].initializer for s in tree.statements)
        assert isinstance(a, n.ForceUnwrap)
        assert isinstance(b, n.PrefixExpr) and b.operator == "!"
        assert isinstance(c, n.BinaryExpr) and c.operator == "!="

    def test_try_variants(self):
        tree = _parse("""\
            let a = try! load()
            let b = try? load()
            let c = try load()
        """)
        kinds = [s.bindings[0].initializer.kind for s in tree.statements]
        assert kinds == ["try!", "try?", "try"]
        assert tree.statements[0].bindings[0].initializer.is_forced

    def test_precedence(self):
        expr = _parse("let x = a + b * c").statements[0].bindings[0].initializer
        assert expr.operator == "+"
        assert isinstance(expr.right, n.BinaryExpr) and expr.right.operator == "*"

    def test_call_with_trailing_closure(self):
        expr = _parse("items.map { $0 * 2 }").statements[0]
        assert isinstance(expr, n.Call)
        assert expr.callee_name == "map"
        assert len(expr.trailing_closures) == 1

    def test_closure_signature(self):
        expr = _parse("let f = { (a: Int, b: Int) -> Int in a + b }").statements[0].bindings[0].initializer
        assert isinstance(expr, n.Closure)
        assert expr.parameters == ["a", "b"]

    def test_trailing_closure_not_taken_in_condition(self):
        """The brace after an if condition is the body, not a closure."""
        stmt = _parse("if value == other { print(value) }").statements[0]
        assert isinstance(stmt, n.IfStmt)
        assert isinstance(stmt.conditions[0], n.BinaryExpr)

    def test_generic_call(self):
        expr = _parse("let s = Set<Int>()").statements[0].bindings[0].initializer
        assert isinstance(expr, n.Call)
        assert expr.callee_name == "Set"

    def test_string_interpolation_is_parsed(self):
        literal = _parse('let s = "count: \\(items.count)"').statements[0].bindings[0].initializer
        assert isinstance(literal, n.StringLiteral)
        assert isinstance(literal.interpolations[0], n.MemberAccess)

    def test_key_path_and_pound(self):
        tree = _parse("""\
            let k = \\Person.name
            let s = #selector(tapped)
        """)
        key_path = tree.statements[0].bindings[0].initializer
        pound = tree.statements[1].bindings[0].initializer
        assert isinstance(key_path, n.KeyPathExpr) and key_path.text == "\\Person.name"
        assert isinstance(pound, n.PoundExpr)
        assert pound.name == "selector" and pound.arguments == "tapped"


class TestPositions:
    def test_offsets_map_to_lines(self):
        source = textwrap.dedent("""\
            struct A {
                func f() {
                    return
                }
            }
        """)
        tree = parse(source)
        index = LineIndex(source)
        ret = _first(tree, n.ReturnStmt)
        func = _first(tree, n.FunctionDecl)
        assert index.line_for(func.offset) == 2
        assert index.line_for(ret.offset) == 3
        assert index.line_for(func.end - 1) == 4

    def test_offsets_are_utf8_bytes(self):
        source = 'let s = "héllo"\nlet t = 1\n'
        tree = parse(source)
        second = tree.statements[1]
        assert second.offset == len('let s = "héllo"\n'.encode("utf-8"))

    def test_walk_is_preorder(self):
        tree = _parse("func f() { if a { b() } }")
        kinds = [type(node).__name__ for node in walk(tree)]
        assert kinds.index("FunctionDecl") < kinds.index("IfStmt") < kinds.index("Call")


class TestErrors:
    def test_unbalanced_brace(self):
        with pytest.raises(SyntaxParseError) as exc_info:
            _parse("""\
                struct A {
                    func f() {
            """)
        assert exc_info.value.line >= 1

    def test_stray_closing_brace(self):
        with pytest.raises(SyntaxParseError):
            parse("}")
