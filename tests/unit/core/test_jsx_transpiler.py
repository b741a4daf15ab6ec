"""
Tests for the JSX transpiler.
"""

import pytest

from jsx_pdf.core.jsx_transpiler import JSXTranspiler, clean_jsx_text, transpile
from jsx_pdf.errors import CompilationError


class TestElementRewriting:
    """Markup is rewritten into factory calls."""

    def test_element_with_attribute_and_expression_child(self):
        code = transpile('<div className="x">{props.title}</div>')

        assert code == '__jsx("div", {"className": "x"}, props.title)'

    def test_fragment(self):
        assert transpile("<>a</>") == '__jsx(null, null, "a")'

    def test_component_tag_stays_an_identifier(self):
        assert transpile("<Row item={x} />") == '__jsx(Row, {"item": (x)})'

    def test_hyphenated_tag_is_a_string(self):
        assert transpile("<my-tag />") == '__jsx("my-tag", null)'

    def test_bare_attribute_is_true(self):
        assert transpile("<input disabled />") == '__jsx("input", {"disabled": true})'

    def test_spread_attributes(self):
        transpiler = JSXTranspiler('<div {...rest} id="a" />')

        assert transpiler.transpile() == '__jsx("div", {...(rest), "id": "a"})'
        assert "rest" in transpiler.free_identifiers

    def test_entities_are_decoded(self):
        code = transpile('<p title="a &amp; b">x &lt; y</p>')

        assert code == '__jsx("p", {"title": "a & b"}, "x < y")'

    def test_nested_elements(self):
        code = transpile("<ul><li>a</li><li>b</li></ul>")

        assert code == '__jsx("ul", null, __jsx("li", null, "a"), __jsx("li", null, "b"))'

    def test_object_literal_attribute(self):
        code = transpile("<div style={{width: '50%'}} />")

        assert code == "__jsx(\"div\", {\"style\": ({width: '50%'})})"

    def test_element_inside_arrow_function(self):
        code = transpile("items.map(i => <li>{i}</li>)")

        assert code == 'items.map(i => __jsx("li", null, i))'

    def test_comment_only_child_is_dropped(self):
        assert transpile("<div>{/* note */}</div>") == '__jsx("div", null)'

    def test_line_comment_inside_child_expression_is_terminated(self):
        code = transpile("<div>{x // trailing\n}</div>")

        assert code.startswith('__jsx("div", null, x // trailing\n)')

    def test_line_numbers_are_preserved(self):
        source = "const a = <p>\n  Hello\n</p>;\nconst b = 1;"

        code = transpile(source)

        assert code.count("\n") == source.count("\n")
        assert code.splitlines()[-1] == "const b = 1;"


class TestHostCode:
    """Plain JavaScript passes through unchanged."""

    @pytest.mark.parametrize("source", [
        "const c = a < b;",
        'const s = "<div>";',
        "const r = /<div>/g;",
        "// <div>\nconst x = 1;",
        "const s = `<b>${name}</b>`;",
        "if (a<b) { x = 1 }",
    ])
    def test_unchanged(self, source):
        assert transpile(source) == source

    def test_template_literal_hole_may_contain_markup(self):
        assert transpile("`${<b/>}`") == '`${__jsx("b", null)}`'

    def test_export_keywords_are_stripped(self):
        transpiler = JSXTranspiler("export default function Template(props) { return <div/>; }")
        code = transpiler.transpile()

        assert "export" not in code
        assert "default" not in code
        assert len(transpiler.template_declarations) == 1


class TestTextCleanup:
    """JSX text whitespace rules."""

    def test_multiline_text_is_collapsed(self):
        assert clean_jsx_text("\n  Hello\n  world\n") == "Hello world"

    def test_inline_spaces_are_kept(self):
        assert clean_jsx_text(" a  b ") == " a  b "

    def test_whitespace_only_is_empty(self):
        assert clean_jsx_text("\n    \n") == ""


class TestScannerFacts:
    """Declarations and identifiers recorded while scanning."""

    def test_single_template_declaration(self):
        transpiler = JSXTranspiler("function Template(props) { return null; }")
        transpiler.transpile()

        assert transpiler.template_declarations == [0]

    def test_duplicate_declarations(self):
        transpiler = JSXTranspiler("const Template = () => null;\nfunction Template() {}")
        transpiler.transpile()

        assert len(transpiler.template_declarations) == 2

    def test_nested_declaration_is_not_top_level(self):
        transpiler = JSXTranspiler("function outer() { function Template() {} }")
        transpiler.transpile()

        assert transpiler.template_declarations == []

    def test_free_identifiers_skip_properties_and_strings(self):
        transpiler = JSXTranspiler('props.require; "process"; fetch(url)')
        transpiler.transpile()

        assert "require" not in transpiler.free_identifiers
        assert "process" not in transpiler.free_identifiers
        assert {"props", "fetch", "url"} <= transpiler.free_identifiers


class TestSyntaxErrors:
    """Malformed markup raises CompilationError with a position."""

    def test_mismatched_closing_tag(self):
        with pytest.raises(CompilationError) as exc_info:
            transpile("<div><span></div>")

        assert exc_info.value.line == 1
        assert exc_info.value.column == 12
        assert "</div>" in exc_info.value.details

    def test_unclosed_element(self):
        with pytest.raises(CompilationError) as exc_info:
            transpile("function Template() {\n  return <div>;")

        assert exc_info.value.line == 2
        assert "closing tag" in exc_info.value.details

    def test_unterminated_string(self):
        with pytest.raises(CompilationError):
            transpile('const s = "abc')

    def test_empty_attribute_expression(self):
        with pytest.raises(CompilationError):
            transpile("<div id={} />")

    def test_unbalanced_brace(self):
        with pytest.raises(CompilationError):
            transpile("function Template() {")


class TestNestingLimit:
    """Deep markup is rejected before it can exhaust the interpreter stack."""

    def test_within_limit(self):
        code = transpile("<a><b><c /></b></a>", max_nesting=3)

        assert code.count("__jsx(") == 3

    def test_element_nesting_exceeded(self):
        with pytest.raises(CompilationError) as exc_info:
            transpile("<a><a><a>x</a></a></a>", max_nesting=2)

        assert "nesting exceeds 2 levels" in exc_info.value.details
        assert exc_info.value.column == 7

    def test_nesting_through_expression_containers(self):
        with pytest.raises(CompilationError):
            transpile("<a>{<b>{<c />}</b>}</a>", max_nesting=2)

    def test_template_literal_nesting(self):
        with pytest.raises(CompilationError):
            transpile("const s = `${`${`x`}`}`;", max_nesting=1)

    def test_depth_counter_resets_between_siblings(self):
        code = transpile("<a><b /><b /><b /></a>", max_nesting=2)

        assert code.count("__jsx(") == 4
