"""Tests for the egg unparser."""

from __future__ import annotations

from egg.unparser import Unparser, unparse
from tests.helpers import check, parse


def plain(source: str) -> str:
    return Unparser(annotate=False).unparse(parse(source))


def annotated(source: str) -> str:
    return Unparser(annotate=True).unparse(check(source))


class TestLayout:
    def test_empty_program(self):
        assert plain("") == ""

    def test_global_variables(self):
        assert plain("int x; bool y;") == "int x;\nbool y;\n"

    def test_struct_followed_by_blank_line(self):
        assert plain("struct P { int x; bool y; }; int z;") == (
            "struct P {\n"
            "    int x;\n"
            "    bool y;\n"
            "};\n"
            "\n"
            "int z;\n"
        )

    def test_function(self):
        assert plain("int f(int a, bool b) { int c; c = a; return c; }") == (
            "int f(int a, bool b) {\n"
            "    int c;\n"
            "    c = a;\n"
            "    return c;\n"
            "}\n"
            "\n"
        )

    def test_custom_indent(self):
        text = Unparser(annotate=False, indent=2).unparse(parse("void f() { x++; }"))
        assert text == "void f() {\n  x++;\n}\n\n"

    def test_nested_blocks(self):
        assert plain("void f() { if (a) { int b; while (b) { b--; } } else { return; } }") == (
            "void f() {\n"
            "    if (a) {\n"
            "        int b;\n"
            "        while (b) {\n"
            "            b--;\n"
            "        }\n"
            "    }\n"
            "    else {\n"
            "        return;\n"
            "    }\n"
            "}\n"
            "\n"
        )

    def test_statements(self):
        text = plain('void f() { cin >> p.x; cout << "hi\\n"; g(1, 2); repeat (n) { } return 1; }')
        assert text == (
            "void f() {\n"
            "    cin >> p.x;\n"
            '    cout << "hi\\n";\n'
            "    g(1, 2);\n"
            "    repeat (n) {\n"
            "    }\n"
            "    return 1;\n"
            "}\n"
            "\n"
        )


class TestExpressions:
    def expr(self, source: str) -> str:
        text = plain(f"void f() {{ cout << {source}; }}")
        return text.splitlines()[1].strip()[len("cout << "):-1]

    def test_binary_fully_parenthesized(self):
        assert self.expr("a + b * c") == "(a + (b * c))"

    def test_grouping_preserved(self):
        assert self.expr("(a + b) * c") == "((a + b) * c)"

    def test_unary(self):
        assert self.expr("-a == !b") == "((-a) == (!b))"

    def test_nested_assignment(self):
        assert self.expr("a = b = 3") == "(a = (b = 3))"

    def test_assignment_statement_not_parenthesized(self):
        assert plain("void f() { a = b = 3; }").splitlines()[1] == "    a = (b = 3);"

    def test_literals(self):
        assert self.expr('true && false || "s" != 42') == '((true && false) || ("s" != 42))'


class TestAnnotation:
    def test_variable_uses(self):
        text = annotated("int x; void f() { x = x + 1; }")
        assert "    x(int) = (x(int) + 1);" in text
        assert text.startswith("int x;\n")

    def test_function_call(self):
        text = annotated("int add(int a, bool b) { return a; } void f() { add(1, true); }")
        assert "    add(int, bool -> int)(1, true);" in text
        assert "int add(int a, bool b) {" in text

    def test_function_without_params(self):
        text = annotated("void g() { } void f() { g(); }")
        assert "    g(void -> void)();" in text

    def test_struct_type_reference_and_fields(self):
        source = (
            "struct In { int x; };\n"
            "struct Out { struct In f; };\n"
            "void main() { struct Out o; o.f.x = 1; }\n"
        )
        text = annotated(source)
        assert "    struct In(struct) f;" in text
        assert "    struct Out(struct) o;" in text
        assert "    o(Out).f.x = 1;" in text

    def test_unresolved_names_printed_bare(self):
        program = parse("void f() { y = 1; }")
        assert "    y = 1;" in unparse(program)

    def test_annotate_false_ignores_symbols(self):
        program = check("int x; void f() { x = 1; }")
        assert "x(int)" not in Unparser(annotate=False).unparse(program)


class TestReparse:
    SOURCE = (
        "struct P { int x; };\n"
        "struct P p;\n"
        "int add(int a, int b) { return a + b * 2; }\n"
        "void main() {\n"
        "    int n;\n"
        "    p.x = add(n, -2);\n"
        "    if (n < 1 && !(n == 0)) { n++; } else { n = p.x = 3; }\n"
        "    while (n > 0) { n--; }\n"
        '    cout << "bye";\n'
        "}\n"
    )

    def test_output_reparses_to_same_text(self):
        first = plain(self.SOURCE)
        assert plain(first) == first

    def test_reparsed_output_analyzes_cleanly(self):
        check(plain(self.SOURCE))
