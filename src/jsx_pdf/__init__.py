"""
JSX PDF

Renders JSX templates to PDF documents: built-in invoice and report views,
plus caller-supplied templates compiled in an isolated script sandbox.

Main exports:
- DocumentService: Request pipeline (validate, compile, render, print)
- TemplateCompiler: Dynamic JSX template compilation
- AsyncPDFGenerator: HTML to PDF printing with Chromium
- RenderOptions: Paper format, orientation, margins and filename
- build_app: FastAPI application factory
"""

__version__ = "1.0.0"

from .core import AsyncPDFGenerator, RenderedDocument, RenderOptions, TemplateCompiler
from .errors import (
    CompilationError,
    JsxPdfError,
    RenderEngineError,
    RenderEngineTimeoutError,
    RenderError,
    ValidationError,
)
from .services import DocumentService
from .api import build_app


__all__ = [
    "AsyncPDFGenerator",
    "CompilationError",
    "DocumentService",
    "JsxPdfError",
    "RenderEngineError",
    "RenderEngineTimeoutError",
    "RenderError",
    "RenderOptions",
    "RenderedDocument",
    "TemplateCompiler",
    "ValidationError",
    "build_app",
]
