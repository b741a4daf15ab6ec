"""
Registry of the fixed templates.

Each entry binds a template type to its view, its props model and its
filename rule. Props are validated against the model before the view runs.
"""

import logging
import typing
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Type

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ..core.view_renderer import View
from ..errors import ValidationError
from .invoice import InvoiceProps, invoice_filename, invoice_view
from .report import ReportProps, report_filename, report_view

logger = logging.getLogger(__name__)

_JSON_TYPES = {str: "string", int: "number", float: "number", bool: "boolean"}


@dataclass(frozen=True)
class FixedTemplate:
    """A built-in view selectable by template type."""

    name: str
    component: str
    description: str
    view: View
    props_model: Type[BaseModel]
    filename: Callable[[Mapping[str, Any]], str]

    def validate(self, data: Any) -> Dict[str, Any]:
        """
        Check a payload against the props model.

        Args:
            data: Raw JSON payload

        Returns:
            Props with unset optional fields removed

        Raises:
            ValidationError: If required fields are missing or mistyped
        """
        try:
            props = self.props_model.model_validate(data)
        except PydanticValidationError as e:
            details = describe_validation_errors(e.errors())
            logger.info(f"Rejected {self.name} payload: {details}")
            raise ValidationError("Missing required fields", details) from e
        return props.model_dump(exclude_none=True)

    def describe(self) -> Dict[str, Any]:
        """Prop documentation in the /components response shape."""
        return {
            "name": self.component,
            "description": self.description,
            "props": describe_model(self.props_model),
        }


def describe_validation_errors(errors: List[Mapping[str, Any]]) -> str:
    """Flatten pydantic error entries into ``loc: msg`` pairs."""
    parts = []
    for error in errors:
        location = ".".join(str(part) for part in error.get("loc", ())) or "body"
        parts.append(f"{location}: {error.get('msg')}")
    return "; ".join(parts)


def _strip_optional(annotation: Any) -> Any:
    if typing.get_origin(annotation) is typing.Union:
        args = [arg for arg in typing.get_args(annotation) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation


def describe_model(model: Type[BaseModel]) -> Dict[str, Any]:
    """Describe each field as ``{type, required, description[, items]}``."""
    props: Dict[str, Any] = {}
    for name, field in model.model_fields.items():
        annotation = _strip_optional(field.annotation)
        entry: Dict[str, Any] = {}
        if typing.get_origin(annotation) in (list, List):
            entry["type"] = "array"
        else:
            entry["type"] = _JSON_TYPES.get(annotation, "object")
        entry["required"] = field.is_required()
        entry["description"] = field.description
        if entry["type"] == "array":
            (item_type,) = typing.get_args(annotation)
            if isinstance(item_type, type) and issubclass(item_type, BaseModel):
                entry["items"] = describe_model(item_type)
        props[name] = entry
    return props


FIXED_TEMPLATES: Dict[str, FixedTemplate] = {
    "invoice": FixedTemplate(
        name="invoice",
        component="InvoiceTemplate",
        description="Template for generating invoice PDFs",
        view=invoice_view,
        props_model=InvoiceProps,
        filename=invoice_filename,
    ),
    "report": FixedTemplate(
        name="report",
        component="ReportTemplate",
        description="Template for generating report PDFs",
        view=report_view,
        props_model=ReportProps,
        filename=report_filename,
    ),
}


def get_fixed_template(template_type: str) -> FixedTemplate:
    """
    Look up a fixed template by type.

    Raises:
        ValidationError: If the type is unknown
    """
    try:
        return FIXED_TEMPLATES[template_type]
    except (KeyError, TypeError):
        raise ValidationError(
            "Invalid template type",
            f"expected one of {', '.join(FIXED_TEMPLATES)}, got {template_type!r}",
        )


def component_docs() -> List[Dict[str, Any]]:
    """Documentation of every fixed template's props."""
    return [template.describe() for template in FIXED_TEMPLATES.values()]
