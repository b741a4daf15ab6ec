"""
Element descriptor model for view output.

A view returns a tree made of three variants:

- Node: a primitive tag (``"div"``) or a sub-view callable, with attributes
  and children
- Fragment: a list of children without a wrapping tag
- Text: a leaf string, escaped when serialized

Static views build trees with ``h()``. Dynamic views build them inside the
script sandbox and hand them over as JSON, which ``element_from_json()``
decodes with depth and size limits.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Tuple, Union

from ..errors import RenderError

# Wire marker set by the sandbox element primitive on every element object.
ELEMENT_MARKER = "$$element"

DEFAULT_MAX_DEPTH = 256
DEFAULT_MAX_NODES = 50_000


@dataclass(frozen=True)
class Text:
    """Leaf text content."""

    value: str


@dataclass(frozen=True)
class Node:
    """Tagged element with attributes and children."""

    tag: Union[str, Callable[..., Any]]
    attributes: Mapping[str, Any] = field(default_factory=dict)
    children: Tuple["Element", ...] = ()


@dataclass(frozen=True)
class Fragment:
    """Children rendered in sequence without a wrapping tag."""

    children: Tuple["Element", ...] = ()


Element = Union[Node, Fragment, Text]


@dataclass(frozen=True)
class TreeLimits:
    """Bounds applied while decoding untrusted trees."""

    max_depth: int = DEFAULT_MAX_DEPTH
    max_nodes: int = DEFAULT_MAX_NODES


def format_number(value: Union[int, float]) -> str:
    """Format a number the way it appears as text content (``10.0`` -> ``10``)."""
    if isinstance(value, float):
        if value != value:
            return "NaN"
        if value in (float("inf"), float("-inf")):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            return str(int(value))
    return str(value)


def _normalize_children(children: Iterable[Any]) -> Tuple[Element, ...]:
    """Flatten nested iterables and coerce primitives into Text nodes."""
    result = []
    for child in children:
        if child is None or isinstance(child, bool):
            continue
        if isinstance(child, (Node, Fragment, Text)):
            result.append(child)
        elif isinstance(child, str):
            result.append(Text(child))
        elif isinstance(child, (int, float)):
            result.append(Text(format_number(child)))
        elif isinstance(child, (list, tuple)) or hasattr(child, "__next__"):
            result.extend(_normalize_children(child))
        else:
            raise RenderError(
                "Invalid child",
                f"objects of type {type(child).__name__} are not valid as a child",
            )
    return tuple(result)


def h(tag: Union[str, Callable[..., Any], None], attributes: Optional[Mapping[str, Any]] = None, *children: Any) -> Element:
    """
    Build an element descriptor.

    Args:
        tag: Primitive tag name, sub-view callable, or None for a fragment
        attributes: Attribute mapping (``className``, ``style``, ...)
        *children: Elements, strings, numbers or iterables of those;
            None and booleans are skipped

    Returns:
        Node, or Fragment when tag is None
    """
    normalized = _normalize_children(children)
    if tag is None:
        return Fragment(normalized)
    return Node(tag, dict(attributes or {}), normalized)


class _Decoder:
    """Converts sandbox JSON output into element descriptors."""

    def __init__(self, limits: TreeLimits):
        self.limits = limits
        self.count = 0

    def decode(self, value: Any, depth: int) -> Tuple[Element, ...]:
        if depth > self.limits.max_depth:
            raise RenderError(
                "Element tree too deep",
                f"nesting exceeds {self.limits.max_depth} levels",
            )
        if value is None or isinstance(value, bool):
            return ()
        if isinstance(value, list):
            decoded = []
            for item in value:
                decoded.extend(self.decode(item, depth))
            return tuple(decoded)

        self.count += 1
        if self.count > self.limits.max_nodes:
            raise RenderError(
                "Element tree too large",
                f"more than {self.limits.max_nodes} nodes",
            )

        if isinstance(value, str):
            return (Text(value),)
        if isinstance(value, (int, float)):
            return (Text(format_number(value)),)
        if isinstance(value, dict) and value.get(ELEMENT_MARKER):
            children = self.decode(value.get("children") or [], depth + 1)
            tag = value.get("tag")
            if tag is None:
                return (Fragment(children),)
            if not isinstance(tag, str):
                raise RenderError("Invalid element", f"tag must be a string, got {tag!r}")
            attributes = value.get("attributes") or {}
            if not isinstance(attributes, dict):
                raise RenderError("Invalid element", f"attributes of <{tag}> must be an object")
            return (Node(tag, attributes, children),)

        raise RenderError(
            "Invalid child",
            "objects are not valid as a child; render a property of the object instead",
        )


def element_from_json(data: Any, limits: Optional[TreeLimits] = None) -> Element:
    """
    Decode a JSON tree produced by the sandbox element primitive.

    Args:
        data: Parsed JSON value returned by the compiled view
        limits: Depth and node-count bounds

    Returns:
        Root element; several top-level values are wrapped in a Fragment

    Raises:
        RenderError: If the value is not a valid tree or exceeds the limits
    """
    decoded = _Decoder(limits or TreeLimits()).decode(data, 0)
    if len(decoded) == 1:
        return decoded[0]
    return Fragment(decoded)
