"""
Tests for static HTML serialization.
"""

import pytest

from jsx_pdf.core.elements import Fragment, Node, Text, h
from jsx_pdf.core.view_renderer import (
    css_property_name,
    error_fragment,
    render_element,
    render_view,
    style_to_css,
)
from jsx_pdf.errors import CompilationError, RenderError


class TestEscaping:
    """Text and attribute values are escaped."""

    def test_text_is_escaped(self):
        html = render_element(h("p", None, "<b>\"Tom\" & 'Jerry'</b>"))

        assert "<b>" not in html
        assert "&lt;b&gt;" in html
        assert "&amp;" in html

    def test_attribute_is_escaped(self):
        html = render_element(h("a", {"title": '"><script>'}))

        assert html == '<a title="&#34;&gt;&lt;script&gt;"></a>'

    def test_raw_html_is_inserted_verbatim(self):
        html = render_element(h("div", {"dangerouslySetInnerHTML": {"__html": "<b>x</b>"}}))

        assert html == "<div><b>x</b></div>"

    def test_raw_html_with_children_rejected(self):
        with pytest.raises(RenderError):
            render_element(h("div", {"dangerouslySetInnerHTML": {"__html": "x"}}, "child"))

    def test_raw_html_must_be_object(self):
        with pytest.raises(RenderError):
            render_element(h("div", {"dangerouslySetInnerHTML": "<b>x</b>"}))


class TestAttributes:
    """Attribute mapping rules."""

    def test_class_name_and_html_for(self):
        html = render_element(h("label", {"className": "a", "htmlFor": "b"}))

        assert html == '<label class="a" for="b"></label>'

    def test_boolean_and_empty_values(self):
        html = render_element(h("input", {"disabled": True, "checked": False, "value": None}))

        assert html == '<input disabled=""/>'

    def test_reserved_and_callable_attributes_are_dropped(self):
        html = render_element(h("li", {"key": 1, "onClick": lambda: None}, "x"))

        assert html == "<li>x</li>"

    def test_numeric_attribute(self):
        assert render_element(h("td", {"colSpan": 2})) == '<td colSpan="2"></td>'

    def test_invalid_attribute_value(self):
        with pytest.raises(RenderError):
            render_element(h("div", {"data-x": ["a"]}))

    def test_style_object(self):
        html = render_element(h("div", {"style": {"width": "50%", "marginTop": 10, "opacity": 0.5}}))

        assert html == '<div style="width:50%;margin-top:10px;opacity:0.5"></div>'


class TestStyles:
    """Inline style conversion."""

    @pytest.mark.parametrize("name,expected", [
        ("backgroundColor", "background-color"),
        ("WebkitTransform", "-webkit-transform"),
        ("msTransform", "-ms-transform"),
        ("--brand-color", "--brand-color"),
    ])
    def test_property_names(self, name, expected):
        assert css_property_name(name) == expected

    def test_zero_and_empty_values(self):
        assert style_to_css({"margin": 0, "padding": "", "border": None}) == "margin:0"


class TestStructure:
    """Element kinds and nesting."""

    def test_void_element(self):
        assert render_element(h("br")) == "<br/>"

    def test_void_element_with_children_rejected(self):
        with pytest.raises(RenderError):
            render_element(Node("img", {}, (Text("x"),)))

    def test_fragment_has_no_wrapper(self):
        assert render_element(h(None, None, h("b", None, "a"), "c")) == "<b>a</b>c"

    def test_sub_view_receives_props_and_children(self):
        def Card(props):
            return h("section", {"className": props["tone"]}, props["children"])

        html = render_element(h("div", None, h(Card, {"tone": "muted"}, "body")))

        assert html == '<div><section class="muted">body</section></div>'

    def test_sub_view_returning_none(self):
        assert render_element(h("div", None, h(lambda props: None, None))) == "<div></div>"

    def test_sub_view_exception_becomes_render_error(self):
        def Broken(props):
            raise KeyError("missing")

        with pytest.raises(RenderError):
            render_element(h(Broken, None))

    def test_depth_limit(self):
        element = Text("x")
        for _ in range(50):
            element = Node("div", {}, (element,))

        with pytest.raises(RenderError) as exc_info:
            render_element(element, max_depth=10)

        assert exc_info.value.message == "Element tree too deep"


class TestRenderView:
    """Invoking views."""

    def test_deterministic(self):
        def view(props):
            return h("ul", None, [h("li", None, value) for value in props["items"]])

        props = {"items": ["a", "b", "c"]}

        assert render_view(view, props) == render_view(view, props)
        assert render_view(view, props) == "<ul><li>a</li><li>b</li><li>c</li></ul>"

    def test_view_exception_becomes_render_error(self):
        def view(props):
            return h("p", None, props["missing"])

        with pytest.raises(RenderError) as exc_info:
            render_view(view, {})

        assert "KeyError" in exc_info.value.details

    def test_pipeline_errors_pass_through(self):
        def view(props):
            raise CompilationError("Template not found")

        with pytest.raises(CompilationError):
            render_view(view, {})


class TestErrorFragment:
    """Diagnostic page for failed templates."""

    def test_contains_message_and_details(self):
        error = CompilationError("Template syntax error", "Unexpected token (3:5) <tag>")

        html = render_element(error_fragment(error))

        assert "Template syntax error" in html
        assert "Unexpected token (3:5) &lt;tag&gt;" in html
        assert 'class="page template-error"' in html
