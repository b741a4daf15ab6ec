"""
Test helper utilities for jsx-pdf.
"""

import asyncio
from typing import Any, Dict, Optional
from unittest.mock import AsyncMock, MagicMock

from jsx_pdf.core.content_types import RenderedDocument
from jsx_pdf.core.elements import Element
from jsx_pdf.core.view_renderer import render_element

FAKE_PDF = b"%PDF-1.4\n%fake\n%%EOF\n"

GREETING_TEMPLATE = """
function Template(props) {
  return <div>{props.title}</div>;
}
"""


def make_rendered_document(filename: str = "document.pdf", metadata: Optional[Dict[str, Any]] = None) -> RenderedDocument:
    """RenderedDocument carrying a minimal PDF payload."""
    return RenderedDocument(pdf_bytes=FAKE_PDF, filename=filename, metadata=metadata or {})


def html_of(element: Element) -> str:
    """Serialize an element tree for assertions."""
    return render_element(element)


def assert_pdf_valid(pdf_bytes: bytes):
    """Assert that PDF bytes are non-empty and carry the PDF header."""
    assert pdf_bytes, "PDF is empty"
    assert pdf_bytes[:4] == b"%PDF", f"Invalid PDF header: {pdf_bytes[:8]!r}"


class PlaywrightMocks:
    """
    Mocked async Playwright object graph.

    ``factory`` replaces ``async_playwright``; the other attributes are the
    objects it hands out, so tests can assert on calls and inject failures.
    """

    def __init__(self, pdf_bytes: bytes = FAKE_PDF):
        self.page = MagicMock()
        self.page.emulate_media = AsyncMock()
        self.page.set_content = AsyncMock()
        self.page.pdf = AsyncMock(return_value=pdf_bytes)

        self.context = MagicMock()
        self.context.new_page = AsyncMock(return_value=self.page)
        self.context.close = AsyncMock()

        self.browser = MagicMock()
        self.browser.new_context = AsyncMock(return_value=self.context)
        self.browser.close = AsyncMock()
        self.browser.is_connected = MagicMock(return_value=True)

        self.playwright = MagicMock()
        self.playwright.chromium.launch = AsyncMock(return_value=self.browser)
        self.playwright.stop = AsyncMock()

        self.factory = MagicMock()
        self.factory.return_value.start = AsyncMock(return_value=self.playwright)


async def slow(*args, **kwargs):
    """Side effect that outlasts short test timeouts."""
    await asyncio.sleep(5)
