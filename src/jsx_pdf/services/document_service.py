"""
Document service.

Runs one request through the pipeline:

    validate props -> compile (dynamic only) -> render view -> assemble
    document -> print PDF

Stages run strictly in sequence. Script evaluation and tree serialization
are CPU bound and run in a worker thread so the event loop stays free for
other requests.
"""

import asyncio
import dataclasses
import logging
from typing import Any, Mapping, Optional

from ..core.content_types import RenderedDocument
from ..core.document_assembler import DocumentAssembler
from ..core.elements import DEFAULT_MAX_DEPTH
from ..core.pdf_generator import AsyncPDFGenerator
from ..core.render_options import RenderOptions, fingerprint, merge_options, resolve_render_options
from ..core.style_provider import StyleProvider
from ..core.template_compiler import TemplateCompiler
from ..core.view_renderer import View, error_fragment, render_element, render_view
from ..errors import CompilationError, RenderError
from ..logging import timed_operation
from ..security import sanitize_filename
from ..views import get_fixed_template

logger = logging.getLogger(__name__)


class DocumentService:
    """
    Renders fixed and dynamic templates to PDF.

    The service holds no per-request state; one instance is shared by all
    requests.
    """

    def __init__(
        self,
        generator: AsyncPDFGenerator,
        styles: StyleProvider,
        compiler: Optional[TemplateCompiler] = None,
        assembler: Optional[DocumentAssembler] = None,
        dynamic_error_fallback: bool = False,
        max_tree_depth: int = DEFAULT_MAX_DEPTH,
    ):
        """
        Initialize the DocumentService.

        Args:
            generator: PDF engine adapter
            styles: Stylesheet inlined into every document
            compiler: Compiler for dynamic templates
            assembler: HTML document assembler
            dynamic_error_fallback: Render dynamic compile and render failures
                as a diagnostic page instead of raising
            max_tree_depth: Maximum element nesting when serializing
        """
        self.generator = generator
        self.styles = styles
        self.compiler = compiler or TemplateCompiler()
        self.assembler = assembler or DocumentAssembler()
        self.dynamic_error_fallback = dynamic_error_fallback
        self.max_tree_depth = max_tree_depth

    @timed_operation("render_fixed")
    async def render_fixed(
        self,
        template_type: str,
        data: Any,
        options: Optional[RenderOptions] = None,
    ) -> RenderedDocument:
        """
        Render a built-in template.

        Args:
            template_type: ``invoice`` or ``report``
            data: Props payload, validated against the template's model
            options: Render options; the filename is always derived from data

        Returns:
            RenderedDocument

        Raises:
            ValidationError: If the type is unknown or data is invalid
            RenderError: If the view raises
            RenderEngineError: If PDF printing fails
        """
        template = get_fixed_template(template_type)
        props = template.validate(data)
        options = merge_options(options or RenderOptions(), RenderOptions(filename=template.filename(props)))

        html = await asyncio.to_thread(render_view, template.view, props, self.max_tree_depth)
        return await self._print(html, props, options, view_key=template.name)

    @timed_operation("render_dynamic")
    async def render_dynamic(
        self,
        source: str,
        data: Optional[Mapping[str, Any]] = None,
        options: Optional[RenderOptions] = None,
    ) -> RenderedDocument:
        """
        Compile and render caller-supplied JSX source.

        Args:
            source: JSX source declaring ``Template``
            data: Props passed to ``Template``
            options: Render options

        Returns:
            RenderedDocument; a diagnostic page when the template fails and
            the fallback is enabled

        Raises:
            CompilationError: If the source does not compile
            RenderError: If the template raises or produces an invalid tree
            RenderEngineError: If PDF printing fails
        """
        props = dict(data or {})
        try:
            html = await asyncio.to_thread(self._compile_and_render, source, props)
        except (CompilationError, RenderError) as e:
            if not self.dynamic_error_fallback:
                raise
            logger.warning(f"Dynamic template failed, rendering diagnostic page: {e}")
            html = render_element(error_fragment(e), self.max_tree_depth)

        return await self._print(html, props, options, view_key=source)

    def _compile_and_render(self, source: str, props: Mapping[str, Any]) -> str:
        view: View = self.compiler.compile(source)
        return render_view(view, props, self.max_tree_depth)

    async def _print(
        self,
        html_fragment: str,
        props: Mapping[str, Any],
        options: Optional[RenderOptions],
        view_key: str,
    ) -> RenderedDocument:
        resolved = resolve_render_options(options)
        key = fingerprint(view_key, props, resolved)
        logger.info(f"Rendering document {resolved.filename} (fingerprint {key[:16]})")

        document = self.assembler.assemble(html_fragment, self.styles.css, title=resolved.filename)
        rendered = await self.generator.render_to_pdf(document, resolved)

        return dataclasses.replace(
            rendered,
            filename=sanitize_filename(resolved.filename),
            metadata={**rendered.metadata, "fingerprint": key},
        )
