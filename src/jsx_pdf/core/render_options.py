"""
Render options for PDF output.

Options are typed dataclasses where every field is optional. Defaults are
applied with an explicit field-by-field merge so that partial nested values
(a margin with only ``top`` set) combine predictably with the defaults.
"""

import dataclasses
import hashlib
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, TypeVar

from ..errors import ValidationError

logger = logging.getLogger(__name__)

PAPER_FORMATS = ("A4", "Letter", "Legal")

T = TypeVar("T")


@dataclass(frozen=True)
class Margin:
    """Page margins as CSS length strings."""

    top: Optional[str] = None
    right: Optional[str] = None
    bottom: Optional[str] = None
    left: Optional[str] = None


@dataclass(frozen=True)
class RenderOptions:
    """Caller-facing PDF options; unset fields fall back to defaults."""

    format: Optional[str] = None
    landscape: Optional[bool] = None
    margin: Optional[Margin] = None
    filename: Optional[str] = None

    def __post_init__(self):
        if self.format is not None and self.format not in PAPER_FORMATS:
            raise ValidationError(
                "Invalid render options",
                f"format must be one of {', '.join(PAPER_FORMATS)}, got {self.format!r}",
            )

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "RenderOptions":
        """
        Build options from the JSON request shape.

        Args:
            data: ``{format?, landscape?, margin?: {top?, right?, bottom?, left?}, filename?}``

        Returns:
            RenderOptions with unspecified fields left unset

        Raises:
            ValidationError: If the shape or a value is invalid
        """
        if not data:
            return cls()
        if not isinstance(data, Mapping):
            raise ValidationError("Invalid render options", "options must be an object")

        margin_data = data.get("margin")
        margin = None
        if margin_data is not None:
            if not isinstance(margin_data, Mapping):
                raise ValidationError("Invalid render options", "margin must be an object")
            # Blank sides fall back to the default like missing ones
            margin = Margin(**{
                side: str(margin_data[side]).strip()
                for side in ("top", "right", "bottom", "left")
                if margin_data.get(side) is not None and str(margin_data[side]).strip()
            })

        landscape = data.get("landscape")
        if landscape is not None and not isinstance(landscape, bool):
            raise ValidationError("Invalid render options", "landscape must be a boolean")

        return cls(
            format=data.get("format"),
            landscape=landscape,
            margin=margin,
            filename=data.get("filename"),
        )


DEFAULT_RENDER_OPTIONS = RenderOptions(
    format="Letter",
    landscape=False,
    margin=Margin(top="0.5in", right="0.5in", bottom="0.5in", left="0.5in"),
    filename="document.pdf",
)


def merge_options(base: T, override: Optional[T]) -> T:
    """
    Merge two option dataclasses field by field.

    A field set on ``override`` replaces the one on ``base``; nested
    dataclasses are merged recursively, so each margin side is independent.

    Args:
        base: Defaults
        override: Caller values (None fields are ignored)

    Returns:
        New instance of the same type
    """
    if override is None:
        return base
    if base is None:
        return override

    merged: Dict[str, Any] = {}
    for field in dataclasses.fields(base):
        base_value = getattr(base, field.name)
        override_value = getattr(override, field.name)
        if override_value is None:
            merged[field.name] = base_value
        elif dataclasses.is_dataclass(base_value) and dataclasses.is_dataclass(override_value):
            merged[field.name] = merge_options(base_value, override_value)
        else:
            merged[field.name] = override_value
    return type(base)(**merged)


def resolve_render_options(
    options: Optional[RenderOptions] = None,
    defaults: RenderOptions = DEFAULT_RENDER_OPTIONS,
) -> RenderOptions:
    """Apply defaults to caller options."""
    resolved = merge_options(defaults, options)
    logger.debug(f"Resolved render options: {resolved}")
    return resolved


def options_to_dict(options: RenderOptions) -> Dict[str, Any]:
    """Plain dict form of options, with unset fields omitted."""
    return {
        key: value
        for key, value in dataclasses.asdict(options).items()
        if value is not None
    }


def fingerprint(view_key: str, props: Optional[Mapping[str, Any]], options: Optional[RenderOptions]) -> str:
    """
    Stable content fingerprint of a render request.

    Keys are sorted at every level, so the digest does not depend on the
    order of the props mapping.

    Args:
        view_key: Fixed template type or dynamic template source
        props: Data payload
        options: Resolved render options

    Returns:
        Hex SHA-256 digest
    """
    payload = {
        "view": view_key,
        "props": props or {},
        "options": options_to_dict(options) if options else {},
    }
    encoded = json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(encoded.encode("utf-8")).hexdigest()
