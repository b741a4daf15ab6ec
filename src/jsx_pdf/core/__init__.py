"""
Core rendering modules.

Contains the pipeline stages:
- JSX transpiling and sandboxed template compilation
- Element trees and static HTML rendering
- Document assembly with the inlined stylesheet
- PDF printing and browser lifecycle
"""

from .browser_pool import BrowserPool, BrowserSession, EngineTimeouts
from .content_types import RenderedDocument
from .document_assembler import DocumentAssembler
from .elements import Fragment, Node, Text, h
from .pdf_generator import AsyncPDFGenerator
from .render_options import DEFAULT_RENDER_OPTIONS, Margin, RenderOptions
from .style_provider import StyleProvider
from .template_compiler import CompiledView, TemplateCompiler, compile_template
from .view_renderer import render_element, render_view

__all__ = [
    "AsyncPDFGenerator",
    "BrowserPool",
    "BrowserSession",
    "CompiledView",
    "DEFAULT_RENDER_OPTIONS",
    "DocumentAssembler",
    "EngineTimeouts",
    "Fragment",
    "Margin",
    "Node",
    "RenderOptions",
    "RenderedDocument",
    "StyleProvider",
    "TemplateCompiler",
    "Text",
    "compile_template",
    "h",
    "render_element",
    "render_view",
]
