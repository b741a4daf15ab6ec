"""
Content type definitions for the JSX to PDF pipeline.

This module provides the data structures passed between pipeline stages
without dependencies on the browser engine or the HTTP layer.
"""

from dataclasses import dataclass, field
from typing import Any, Dict

PDF_CONTENT_TYPE = "application/pdf"


@dataclass(frozen=True)
class RenderedDocument:
    """Represents the final PDF output of one request."""

    pdf_bytes: bytes
    filename: str = "document.pdf"
    content_type: str = PDF_CONTENT_TYPE
    generation_time: float = 0.0
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def file_size(self) -> int:
        return len(self.pdf_bytes)
