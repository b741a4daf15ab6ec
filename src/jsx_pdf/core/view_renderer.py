"""
Static HTML serialization of element trees.

Rendering is a pure function of (view, props): the view is invoked once and
the resulting tree is walked depth-first into markup. Text and attribute
values are escaped; ``dangerouslySetInnerHTML`` is the single opt-in path for
unescaped markup.
"""

import logging
import re
from typing import Any, Callable, List, Mapping, Optional

from markupsafe import escape

from ..errors import JsxPdfError, RenderError
from .elements import DEFAULT_MAX_DEPTH, Element, Fragment, Node, Text, format_number, h

logger = logging.getLogger(__name__)

View = Callable[[Mapping[str, Any]], Element]

VOID_ELEMENTS = frozenset({
    "area", "base", "br", "col", "embed", "hr", "img", "input",
    "link", "meta", "param", "source", "track", "wbr",
})

ATTRIBUTE_ALIASES = {
    "className": "class",
    "htmlFor": "for",
}

RAW_HTML_ATTRIBUTE = "dangerouslySetInnerHTML"

# Attributes consumed by the renderer rather than emitted.
_RESERVED_ATTRIBUTES = frozenset({"key", "ref", "children", RAW_HTML_ATTRIBUTE})

# CSS properties that take plain numbers; all others get a px suffix.
UNITLESS_PROPERTIES = frozenset({
    "animationIterationCount", "aspectRatio", "columnCount", "columns",
    "flex", "flexGrow", "flexShrink", "fontWeight", "gridColumn",
    "gridRow", "lineHeight", "opacity", "order", "orphans", "tabSize",
    "widows", "zIndex", "zoom", "fillOpacity", "strokeOpacity",
    "strokeWidth",
})

_UPPERCASE = re.compile(r"([A-Z])")


def css_property_name(name: str) -> str:
    """Convert a camelCase style key to its CSS property name."""
    if name.startswith("--"):
        return name
    if name.startswith("ms") and name[2:3].isupper():
        name = "-" + name
    kebab = _UPPERCASE.sub(r"-\1", name).lower()
    return kebab


def style_to_css(style: Mapping[str, Any]) -> str:
    """
    Serialize a style mapping into an inline declaration list.

    Args:
        style: Mapping of camelCase property names to values

    Returns:
        ``prop:value;prop:value`` string
    """
    declarations = []
    for name, value in style.items():
        if value is None or isinstance(value, bool) or value == "":
            continue
        if isinstance(value, (int, float)):
            if value != 0 and name not in UNITLESS_PROPERTIES and not name.startswith("--"):
                text = f"{format_number(value)}px"
            else:
                text = format_number(value)
        else:
            text = str(value).strip()
        declarations.append(f"{css_property_name(name)}:{text}")
    return ";".join(declarations)


def _render_attributes(tag: str, attributes: Mapping[str, Any]) -> str:
    parts = []
    for name, value in attributes.items():
        if name in _RESERVED_ATTRIBUTES:
            continue
        if value is None or value is False or callable(value):
            continue
        html_name = ATTRIBUTE_ALIASES.get(name, name)
        if name == "style" and isinstance(value, Mapping):
            css = style_to_css(value)
            if css:
                parts.append(f' style="{escape(css)}"')
            continue
        if value is True:
            parts.append(f' {html_name}=""')
        elif isinstance(value, (int, float)):
            parts.append(f' {html_name}="{format_number(value)}"')
        elif isinstance(value, str):
            parts.append(f' {html_name}="{escape(value)}"')
        else:
            raise RenderError(
                "Invalid attribute value",
                f"<{tag} {name}> expects a string, number or boolean, got {type(value).__name__}",
            )
    return "".join(parts)


def _raw_html(tag: str, attributes: Mapping[str, Any]) -> Optional[str]:
    raw = attributes.get(RAW_HTML_ATTRIBUTE)
    if raw is None:
        return None
    if not isinstance(raw, Mapping) or "__html" not in raw:
        raise RenderError(
            "Invalid dangerouslySetInnerHTML",
            f"<{tag}> expects an object of the form {{__html: string}}",
        )
    value = raw["__html"]
    return "" if value is None else str(value)


class _Serializer:
    """Depth-first walker producing markup into a list of chunks."""

    def __init__(self, max_depth: int):
        self.max_depth = max_depth
        self.chunks: List[str] = []

    def write(self, element: Element, depth: int = 0) -> None:
        if depth > self.max_depth:
            raise RenderError("Element tree too deep", f"nesting exceeds {self.max_depth} levels")

        if isinstance(element, Text):
            self.chunks.append(str(escape(element.value)))
        elif isinstance(element, Fragment):
            for child in element.children:
                self.write(child, depth + 1)
        elif isinstance(element, Node):
            if callable(element.tag):
                self.write(self._expand(element), depth + 1)
            else:
                self._write_node(element, depth)
        else:
            raise RenderError("Invalid element", f"cannot render {type(element).__name__}")

    def _expand(self, node: Node) -> Element:
        props = dict(node.attributes)
        if node.children:
            props["children"] = node.children[0] if len(node.children) == 1 else Fragment(node.children)
        result = node.tag(props)
        if result is None:
            return Fragment()
        return result if isinstance(result, (Node, Fragment, Text)) else h(None, None, result)

    def _write_node(self, node: Node, depth: int) -> None:
        tag = node.tag
        raw = _raw_html(tag, node.attributes)
        self.chunks.append(f"<{tag}{_render_attributes(tag, node.attributes)}")

        if tag.lower() in VOID_ELEMENTS:
            if node.children or raw:
                raise RenderError("Invalid void element", f"<{tag}> must not have children")
            self.chunks.append("/>")
            return

        self.chunks.append(">")
        if raw is not None:
            if node.children:
                raise RenderError(
                    "Invalid element",
                    f"<{tag}> can only set one of children or {RAW_HTML_ATTRIBUTE}",
                )
            self.chunks.append(raw)
        else:
            for child in node.children:
                self.write(child, depth + 1)
        self.chunks.append(f"</{tag}>")


def render_element(element: Element, max_depth: int = DEFAULT_MAX_DEPTH) -> str:
    """
    Serialize an element tree to static HTML.

    Args:
        element: Root element
        max_depth: Maximum nesting, sub-view expansion included

    Returns:
        HTML fragment

    Raises:
        RenderError: If the tree is invalid or a sub-view raises
    """
    serializer = _Serializer(max_depth)
    try:
        serializer.write(element)
    except JsxPdfError:
        raise
    except RecursionError as e:
        raise RenderError("Element tree too deep", "maximum recursion depth exceeded") from e
    except Exception as e:
        raise RenderError("View raised while rendering", f"{type(e).__name__}: {e}") from e
    return "".join(serializer.chunks)


def render_view(view: View, props: Optional[Mapping[str, Any]] = None, max_depth: int = DEFAULT_MAX_DEPTH) -> str:
    """
    Invoke a view with props and serialize its tree.

    Args:
        view: Static view function or CompiledView
        props: Data payload bound to the view
        max_depth: Maximum nesting of the produced tree

    Returns:
        HTML fragment

    Raises:
        RenderError: If the view raises or produces an invalid tree
    """
    try:
        tree = view(dict(props or {}))
    except JsxPdfError:
        raise
    except Exception as e:
        name = getattr(view, "__name__", type(view).__name__)
        logger.error(f"View {name} raised: {e}")
        raise RenderError("View raised while rendering", f"{type(e).__name__}: {e}") from e

    html = render_element(tree, max_depth=max_depth)
    logger.debug(f"Rendered fragment of {len(html)} chars")
    return html


def error_fragment(error: Exception) -> Node:
    """
    Diagnostic placeholder used instead of a failed dynamic template.

    Args:
        error: The compilation or render failure

    Returns:
        Element tree describing the failure
    """
    message = getattr(error, "message", None) or type(error).__name__
    details = getattr(error, "details", None) or str(error)
    return h(
        "div",
        {"className": "page template-error"},
        h("h1", {"className": "text-xl font-bold text-red-600"}, "Template error"),
        h("p", {"className": "my-2 font-semibold"}, message),
        h("pre", {"className": "my-2 p-4 border border-red-200 rounded text-sm"}, details),
    )
