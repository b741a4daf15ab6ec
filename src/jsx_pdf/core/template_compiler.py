"""
Template compiler for dynamic JSX templates.

Turns untrusted JSX source into a callable view:

1. transpile JSX into ``__jsx(tag, props, ...children)`` calls
2. wrap the result in a unit whose only inputs are the element factory and
   the props value
3. evaluate the unit in a fresh, isolated V8 context (py_mini_racer) that
   has no file system, network, process or environment access

Each evaluation owns its context and closes it afterwards, so views never
share interpreter state across requests.
"""

import json
import logging
from typing import Any, Dict, Mapping, Optional

from py_mini_racer import JSTimeoutException, MiniRacer

from ..errors import CompilationError, RenderError
from ..security import TemplateSourceValidator
from .elements import ELEMENT_MARKER, Element, TreeLimits, element_from_json
from .jsx_transpiler import DEFAULT_FACTORY, DEFAULT_MAX_NESTING, JSXTranspiler

logger = logging.getLogger(__name__)

TEMPLATE_NAME = "Template"

# Element primitive available inside the sandbox. Function tags are
# sub-views and are expanded in place.
_PRELUDE = """
function %(factory)s(tag, attributes) {
  var children = Array.prototype.slice.call(arguments, 2);
  if (typeof tag === "function") {
    var props = Object.assign({}, attributes);
    if (children.length === 1) { props.children = children[0]; }
    else if (children.length > 1) { props.children = children; }
    return tag(props);
  }
  var element = {tag: tag, attributes: attributes || {}, children: children};
  element[%(marker)s] = true;
  return element;
}
""" % {"factory": DEFAULT_FACTORY, "marker": json.dumps(ELEMENT_MARKER)}

_UNIT = """
var __unit = function (%(factory)s, __props, __probe) {
"use strict";
%(code)s
;
if (__probe) { return typeof %(name)s; }
if (typeof %(name)s !== "function") { throw new TypeError("%(name)s is not a function"); }
return %(name)s(__props);
};
function __render(propsJson) {
  var tree = __unit(%(factory)s, JSON.parse(propsJson), false);
  return JSON.stringify(tree === undefined ? null : tree);
}
function __probe() {
  return __unit(%(factory)s, {}, true);
}
"""


class ScriptSandbox:
    """
    Scoped V8 context with bounded run time and heap.

    Usage:
        with ScriptSandbox(timeout_ms=1000) as sandbox:
            sandbox.eval("1 + 1")
    """

    def __init__(self, timeout_ms: int = 2000, max_memory: int = 64 * 1024 * 1024):
        self.timeout_ms = timeout_ms
        self.max_memory = max_memory
        self._context: Optional[MiniRacer] = None

    def __enter__(self) -> "ScriptSandbox":
        self._context = MiniRacer()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        context, self._context = self._context, None
        if context is not None:
            context.close()

    def eval(self, code: str) -> Any:
        """Evaluate code in the sandbox and return the converted result."""
        if self._context is None:
            raise RuntimeError("Sandbox not started. Use it as a context manager")
        return self._context.eval(
            code,
            timeout_sec=self.timeout_ms / 1000,
            max_memory=self.max_memory,
        )


class CompiledView:
    """
    A view compiled from dynamic JSX source.

    Calling the view evaluates the unit in a fresh sandbox with the given
    props and decodes the resulting element tree.
    """

    def __init__(self, source: str, code: str, compiler: "TemplateCompiler"):
        self.source = source
        self.code = code
        self._compiler = compiler

    def __call__(self, props: Optional[Mapping[str, Any]] = None) -> Element:
        try:
            props_json = json.dumps(dict(props or {}), default=str)
        except (TypeError, ValueError) as e:
            raise RenderError("Template props are not JSON serializable", str(e)) from e

        with self._compiler.sandbox() as sandbox:
            sandbox.eval(_PRELUDE)
            sandbox.eval(self.code)
            try:
                raw = sandbox.eval(f"__render({json.dumps(props_json)})")
            except JSTimeoutException as e:
                raise RenderError(
                    "Template evaluation timed out",
                    f"exceeded {self._compiler.timeout_ms}ms",
                ) from e
            except Exception as e:
                raise RenderError("Template raised during rendering", str(e)) from e

        return element_from_json(json.loads(raw), self._compiler.limits)

    def __repr__(self) -> str:
        return f"CompiledView({len(self.source)} chars)"


class TemplateCompiler:
    """
    Compiles JSX template source into CompiledView instances.

    Features:
    - Syntax desugaring with precise line/column diagnostics
    - Static rejection of host-escape identifiers
    - Single ``Template`` declaration enforcement
    - Isolated V8 evaluation with timeout and memory caps
    """

    def __init__(
        self,
        timeout_ms: int = 2000,
        max_memory: int = 64 * 1024 * 1024,
        max_source_size: Optional[int] = None,
        limits: Optional[TreeLimits] = None,
    ):
        """
        Initialize the TemplateCompiler.

        Args:
            timeout_ms: Wall-clock budget for each sandbox evaluation
            max_memory: Heap cap for each sandbox in bytes
            max_source_size: Maximum template size in bytes
            limits: Depth and size bounds for rendered trees
        """
        self.timeout_ms = timeout_ms
        self.max_memory = max_memory
        self.max_source_size = max_source_size or TemplateSourceValidator.MAX_SOURCE_SIZE
        self.limits = limits or TreeLimits()

    def sandbox(self) -> ScriptSandbox:
        """Create a new, unstarted sandbox with this compiler's limits."""
        return ScriptSandbox(timeout_ms=self.timeout_ms, max_memory=self.max_memory)

    def compile(self, source: str) -> CompiledView:
        """
        Compile template source into a view.

        Args:
            source: JSX source defining ``function Template(props)``

        Returns:
            CompiledView ready to be called with props

        Raises:
            CompilationError: If the source is empty, malformed, uses blocked
                identifiers, does not declare exactly one Template, or fails
                to evaluate
        """
        is_valid, issues = TemplateSourceValidator.validate_source(source, self.max_source_size)
        if not is_valid:
            raise CompilationError("Invalid template source", "; ".join(issues))

        transpiler = JSXTranspiler(source, max_nesting=min(self.limits.max_depth, DEFAULT_MAX_NESTING))
        try:
            code = transpiler.transpile()
        except RecursionError as e:
            raise CompilationError("Template syntax error", "markup is nested too deeply") from e

        is_valid, issues = TemplateSourceValidator.validate_identifiers(transpiler.free_identifiers)
        if not is_valid:
            raise CompilationError("Template uses unavailable APIs", "; ".join(issues))

        declarations = len(transpiler.template_declarations)
        if declarations == 0:
            raise CompilationError(
                "Template not found",
                f"source must declare a top-level function named {TEMPLATE_NAME}",
            )
        if declarations > 1:
            raise CompilationError(
                "Ambiguous template",
                f"{TEMPLATE_NAME} is declared {declarations} times at top level",
            )

        unit = _UNIT % {"factory": DEFAULT_FACTORY, "code": code, "name": TEMPLATE_NAME}
        self._probe(unit)

        logger.info(f"Compiled dynamic template ({len(source)} chars)")
        return CompiledView(source, unit, self)

    def _probe(self, unit: str) -> None:
        """Evaluate the unit once to surface syntax and top-level errors."""
        with self.sandbox() as sandbox:
            sandbox.eval(_PRELUDE)
            try:
                sandbox.eval(unit)
                kind = sandbox.eval("__probe()")
            except JSTimeoutException as e:
                raise CompilationError(
                    "Template evaluation timed out",
                    f"exceeded {self.timeout_ms}ms",
                ) from e
            except Exception as e:
                logger.warning(f"Template failed to evaluate: {e}")
                raise CompilationError("Template failed to compile", str(e)) from e

        if kind != "function":
            raise CompilationError(
                "Template is not a function",
                f"{TEMPLATE_NAME} evaluates to {kind}",
            )


_default_compiler: Optional[TemplateCompiler] = None


def compile_template(source: str, compiler: Optional[TemplateCompiler] = None) -> CompiledView:
    """Compile JSX source with the given compiler, or a shared default one."""
    global _default_compiler
    if compiler is None:
        if _default_compiler is None:
            _default_compiler = TemplateCompiler()
        compiler = _default_compiler
    return compiler.compile(source)
