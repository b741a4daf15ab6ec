"""
Tests for dynamic template compilation in the script sandbox.
"""

import pytest

from jsx_pdf.core.elements import Node, Text, TreeLimits
from jsx_pdf.core.template_compiler import CompiledView, ScriptSandbox, TemplateCompiler, compile_template
from jsx_pdf.core.view_renderer import render_view
from jsx_pdf.errors import CompilationError, RenderError
from tests.utils.helpers import GREETING_TEMPLATE


class TestCompile:
    """Compiling template source into views."""

    def test_simple_template(self, compiler):
        view = compiler.compile(GREETING_TEMPLATE)

        assert isinstance(view, CompiledView)
        assert view({"title": "Hi"}) == Node("div", {}, (Text("Hi"),))

    def test_render_simple_template(self, compiler):
        view = compiler.compile(GREETING_TEMPLATE)

        assert render_view(view, {"title": "Hi"}) == "<div>Hi</div>"

    def test_props_are_escaped(self, compiler):
        view = compiler.compile(GREETING_TEMPLATE)

        assert render_view(view, {"title": "<script>"}) == "<div>&lt;script&gt;</div>"

    def test_raw_html(self, compiler):
        source = """
        function Template(props) {
          return <div dangerouslySetInnerHTML={{__html: props.html}} />;
        }
        """
        view = compiler.compile(source)

        assert render_view(view, {"html": "<b>x</b>"}) == "<div><b>x</b></div>"

    def test_sub_components_and_lists(self, compiler):
        source = """
        function Row(p) {
          return <li className="row">{p.children}</li>;
        }
        function Template(props) {
          return <ul>{props.items.map(i => <Row key={i}>{i}</Row>)}</ul>;
        }
        """
        view = compiler.compile(source)

        html = render_view(view, {"items": ["a", "b"]})

        assert html == '<ul><li class="row">a</li><li class="row">b</li></ul>'

    def test_arrow_function_template_with_export(self, compiler):
        source = "export const Template = ({name}) => <>Hello, {name}!</>;"
        view = compiler.compile(source)

        assert render_view(view, {"name": "Ada"}) == "Hello, Ada!"

    def test_missing_props_default_to_empty_object(self, compiler):
        source = "function Template(props) { return <p>{Object.keys(props).length}</p>; }"
        view = compiler.compile(source)

        assert render_view(view) == "<p>0</p>"

    def test_module_level_compile_template(self):
        view = compile_template(GREETING_TEMPLATE)

        assert render_view(view, {"title": "Hi"}) == "<div>Hi</div>"


class TestCompilationErrors:
    """Rejected sources."""

    def test_missing_template(self, compiler):
        with pytest.raises(CompilationError) as exc_info:
            compiler.compile("function Other() { return <div/>; }")

        assert exc_info.value.message == "Template not found"

    def test_duplicate_template(self, compiler):
        source = "function Template() { return null; }\nconst Template = 1;"

        with pytest.raises(CompilationError) as exc_info:
            compiler.compile(source)

        assert exc_info.value.message == "Ambiguous template"

    def test_template_not_a_function(self, compiler):
        with pytest.raises(CompilationError) as exc_info:
            compiler.compile("const Template = 5;")

        assert exc_info.value.message == "Template is not a function"
        assert "number" in exc_info.value.details

    def test_unbalanced_tag(self, compiler):
        with pytest.raises(CompilationError) as exc_info:
            compiler.compile("function Template() { return <div><p></div>; }")

        assert exc_info.value.line == 1

    def test_javascript_syntax_error(self, compiler):
        with pytest.raises(CompilationError) as exc_info:
            compiler.compile("function Template() { return (; }")

        assert exc_info.value.message == "Template failed to compile"

    def test_deeply_nested_markup(self, compiler):
        source = "function Template(props) { return " + "<a>" * 1500 + "x" + "</a>" * 1500 + "; }"

        with pytest.raises(CompilationError) as exc_info:
            compiler.compile(source)

        assert exc_info.value.message == "Template syntax error"
        assert "nesting exceeds" in exc_info.value.details

    def test_nesting_follows_tree_depth_limit(self):
        compiler = TemplateCompiler(limits=TreeLimits(max_depth=3))
        source = "function Template() { return <a><b><c><d /></c></b></a>; }"

        with pytest.raises(CompilationError) as exc_info:
            compiler.compile(source)

        assert "nesting exceeds 3 levels" in exc_info.value.details

    def test_empty_source(self, compiler):
        with pytest.raises(CompilationError):
            compiler.compile("   ")

    def test_oversized_source(self):
        compiler = TemplateCompiler(max_source_size=64)

        with pytest.raises(CompilationError) as exc_info:
            compiler.compile("function Template() { return <div>" + "x" * 100 + "</div>; }")

        assert "too large" in exc_info.value.details

    @pytest.mark.parametrize("source", [
        "const fs = require('fs'); function Template() { return null; }",
        "import fs from 'fs'; function Template() { return null; }",
        "function Template() { return <p>{process.env.HOME}</p>; }",
        "function Template() { fetch('http://example.com'); return null; }",
    ])
    def test_host_capabilities_are_rejected(self, compiler, source):
        with pytest.raises(CompilationError) as exc_info:
            compiler.compile(source)

        assert exc_info.value.message == "Template uses unavailable APIs"

    def test_top_level_infinite_loop_times_out(self):
        compiler = TemplateCompiler(timeout_ms=200)

        with pytest.raises(CompilationError) as exc_info:
            compiler.compile("while (true) {}\nfunction Template() { return null; }")

        assert exc_info.value.message == "Template evaluation timed out"


class TestSandboxContainment:
    """Evaluation is isolated and bounded."""

    def test_render_infinite_loop_times_out(self):
        compiler = TemplateCompiler(timeout_ms=200)
        view = compiler.compile("function Template() { while (true) {} }")

        with pytest.raises(RenderError) as exc_info:
            view({})

        assert exc_info.value.message == "Template evaluation timed out"

    def test_template_exception_becomes_render_error(self, compiler):
        view = compiler.compile("function Template() { throw new Error('boom'); }")

        with pytest.raises(RenderError) as exc_info:
            view({})

        assert "boom" in exc_info.value.details

    def test_no_state_shared_between_calls(self, compiler):
        source = "var counter = 0;\nfunction Template() { counter++; return <p>{counter}</p>; }"
        view = compiler.compile(source)

        assert render_view(view) == "<p>1</p>"
        assert render_view(view) == "<p>1</p>"

    def test_host_objects_are_absent(self, compiler):
        source = "function Template() { return <p>{typeof globalThis.process}</p>; }"
        view = compiler.compile(source)

        assert render_view(view) == "<p>undefined</p>"

    def test_tree_size_limit(self):
        compiler = TemplateCompiler(limits=TreeLimits(max_nodes=10))
        source = "function Template() { return <ul>{Array.from({length: 50}, (_, i) => <li>{i}</li>)}</ul>; }"
        view = compiler.compile(source)

        with pytest.raises(RenderError) as exc_info:
            view({})

        assert exc_info.value.message == "Element tree too large"

    def test_non_element_object_child(self, compiler):
        view = compiler.compile("function Template(props) { return <p>{props.user}</p>; }")

        with pytest.raises(RenderError):
            view({"user": {"name": "Ada"}})

    def test_sandbox_requires_context_manager(self):
        sandbox = ScriptSandbox()

        with pytest.raises(RuntimeError):
            sandbox.eval("1 + 1")

    def test_sandbox_evaluates_plain_javascript(self):
        with ScriptSandbox(timeout_ms=1000) as sandbox:
            assert sandbox.eval("[1, 2, 3].length") == 3
