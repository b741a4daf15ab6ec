"""Request schemas for the PDF routes."""

from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field

from ..core.render_options import RenderOptions


class MarginBody(BaseModel):
    """Page margins as CSS lengths."""

    top: Optional[str] = Field(default=None, description="Top margin, e.g. 0.5in")
    right: Optional[str] = Field(default=None, description="Right margin")
    bottom: Optional[str] = Field(default=None, description="Bottom margin")
    left: Optional[str] = Field(default=None, description="Left margin")


class RenderOptionsBody(BaseModel):
    """PDF options; unset fields use the service defaults."""

    format: Optional[Literal["A4", "Letter", "Legal"]] = Field(
        default=None, description="Paper format: A4, Letter or Legal"
    )
    landscape: Optional[bool] = Field(default=None, description="Landscape orientation")
    margin: Optional[MarginBody] = Field(default=None, description="Per-side page margins")
    filename: Optional[str] = Field(default=None, description="Download filename")

    def to_options(self) -> RenderOptions:
        return RenderOptions.from_dict(self.model_dump(exclude_none=True))


class GenerateRequest(BaseModel):
    """Render a built-in template chosen by type."""

    templateType: Optional[str] = Field(default=None, description="Template type: invoice or report")
    data: Optional[Dict[str, Any]] = Field(default=None, description="Template props")
    options: Optional[RenderOptionsBody] = None


class RenderRequest(BaseModel):
    """Render caller-supplied JSX source."""

    jsxTemplate: Optional[str] = Field(default=None, description="JSX source declaring function Template(props)")
    data: Optional[Dict[str, Any]] = Field(default=None, description="Props passed to Template")
    options: Optional[RenderOptionsBody] = None
