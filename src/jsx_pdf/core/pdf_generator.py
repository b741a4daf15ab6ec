"""
Async PDF generation module.

Loads a complete HTML document into headless Chromium through Playwright and
prints it to PDF bytes. Each call runs in its own browser context, so
concurrent requests never share page state.
"""

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional

from playwright.async_api import BrowserContext, Page
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from ..errors import RenderEngineError, RenderEngineTimeoutError
from .browser_pool import BrowserPool, BrowserSession, EngineTimeouts
from .content_types import RenderedDocument
from .render_options import RenderOptions, resolve_render_options

logger = logging.getLogger(__name__)


class AsyncPDFGenerator:
    """
    HTML to PDF conversion with Chromium.

    Features:
    - Per-request browser when ``pool_size`` is 0, bounded warm pool otherwise
    - Waits for network idle before printing
    - Launch, navigation and print each bounded by a timeout
    - Browser and page resources released exactly once on every path
    """

    def __init__(
        self,
        headless: bool = True,
        browser_args: Optional[List[str]] = None,
        timeouts: Optional[EngineTimeouts] = None,
        pool_size: int = 0,
    ):
        """
        Initialize the AsyncPDFGenerator.

        Args:
            headless: Whether to run browser in headless mode
            browser_args: Additional browser launch arguments
            timeouts: Launch, navigation and print timeouts
            pool_size: Number of pooled browsers; 0 launches one per request
        """
        self.headless = headless
        self.browser_args = browser_args or []
        self.timeouts = timeouts or EngineTimeouts()
        self.pool: Optional[BrowserPool] = (
            BrowserPool(pool_size, self._new_session) if pool_size > 0 else None
        )

    async def __aenter__(self) -> "AsyncPDFGenerator":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Release pooled browsers."""
        if self.pool is not None:
            await self.pool.close()

    def _new_session(self) -> BrowserSession:
        return BrowserSession(
            headless=self.headless,
            browser_args=self.browser_args,
            launch_timeout_ms=self.timeouts.launch_ms,
        )

    @asynccontextmanager
    async def _browser(self) -> AsyncIterator[BrowserSession]:
        if self.pool is not None:
            async with self.pool.checkout() as session:
                yield session
            return

        async with self._new_session() as session:
            yield session

    async def render_to_pdf(
        self,
        html: str,
        options: Optional[RenderOptions] = None,
    ) -> RenderedDocument:
        """
        Print an HTML document to PDF.

        Args:
            html: Complete HTML document
            options: Caller render options, merged over the defaults

        Returns:
            RenderedDocument with the PDF bytes and resolved filename

        Raises:
            RenderEngineTimeoutError: If launch, navigation or print times out
            RenderEngineError: If the browser fails for any other reason
        """
        resolved = resolve_render_options(options)
        pdf_options = self._build_pdf_options(resolved)
        start_time = time.time()

        async with self._browser() as session:
            pdf_bytes = await self._print(session, html, pdf_options)

        generation_time = time.time() - start_time
        logger.info(f"PDF generated successfully: {len(pdf_bytes)} bytes in {generation_time:.2f}s")

        return RenderedDocument(
            pdf_bytes=pdf_bytes,
            filename=resolved.filename,
            generation_time=generation_time,
            metadata={
                "format": resolved.format,
                "landscape": resolved.landscape,
            },
        )

    async def _print(self, session: BrowserSession, html: str, pdf_options: Dict[str, Any]) -> bytes:
        context: Optional[BrowserContext] = None
        try:
            context = await session.browser.new_context()
            page = await context.new_page()
            await self._configure_page_for_pdf(page)

            logger.debug("Loading HTML content into browser")
            try:
                await page.set_content(
                    html, wait_until="networkidle", timeout=self.timeouts.navigation_ms
                )
            except PlaywrightTimeoutError as e:
                raise RenderEngineTimeoutError(
                    "Page load timed out", f"exceeded {self.timeouts.navigation_ms}ms"
                ) from e

            try:
                return await asyncio.wait_for(
                    page.pdf(**pdf_options), timeout=self.timeouts.pdf_ms / 1000
                )
            except (asyncio.TimeoutError, PlaywrightTimeoutError) as e:
                raise RenderEngineTimeoutError(
                    "PDF generation timed out", f"exceeded {self.timeouts.pdf_ms}ms"
                ) from e

        except RenderEngineError as e:
            logger.error(f"PDF generation failed: {e}")
            raise
        except PlaywrightError as e:
            logger.error(f"PDF generation failed: {e}")
            raise RenderEngineError("PDF generation failed", str(e)) from e
        finally:
            if context is not None:
                try:
                    await context.close()
                except Exception as e:
                    logger.warning(f"Error closing browser context: {e}")

    async def _configure_page_for_pdf(self, page: Page) -> None:
        # Honour @media print rules in the stylesheet
        await page.emulate_media(media="print")

    def _build_pdf_options(self, options: RenderOptions) -> Dict[str, Any]:
        """
        Build PDF options dictionary for Playwright.

        Args:
            options: Fully resolved render options

        Returns:
            Keyword arguments for ``page.pdf``
        """
        margin = options.margin
        pdf_options = {
            "format": options.format,
            "landscape": bool(options.landscape),
            "print_background": True,
            "margin": {
                "top": margin.top,
                "right": margin.right,
                "bottom": margin.bottom,
                "left": margin.left,
            },
        }
        logger.debug(f"PDF options: {pdf_options}")
        return pdf_options
