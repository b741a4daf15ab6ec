"""
Shared test configuration and fixtures for jsx-pdf.
"""

import shutil
import tempfile
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from jsx_pdf.api.app import build_app
from jsx_pdf.config import ServiceConfig
from jsx_pdf.core.content_types import RenderedDocument
from jsx_pdf.core.style_provider import StyleProvider
from jsx_pdf.core.template_compiler import TemplateCompiler
from jsx_pdf.services import DocumentService
from tests.utils.helpers import FAKE_PDF, make_rendered_document


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    temp_path = Path(tempfile.mkdtemp())
    yield temp_path
    shutil.rmtree(temp_path)


@pytest.fixture
def compiler():
    """TemplateCompiler with a short script timeout."""
    return TemplateCompiler(timeout_ms=1000)


@pytest.fixture
def styles():
    """StyleProvider with the bundled stylesheet."""
    return StyleProvider()


@pytest.fixture
def mock_generator():
    """AsyncPDFGenerator stand-in that echoes the resolved filename."""
    generator = MagicMock()

    async def render_to_pdf(html, options=None):
        return RenderedDocument(
            pdf_bytes=FAKE_PDF,
            filename=options.filename if options else "document.pdf",
            metadata={"format": options.format if options else None},
        )

    generator.render_to_pdf = AsyncMock(side_effect=render_to_pdf)
    generator.close = AsyncMock()
    return generator


@pytest.fixture
def document_service(mock_generator, styles, compiler):
    """DocumentService wired to the mock generator."""
    return DocumentService(generator=mock_generator, styles=styles, compiler=compiler)


@pytest.fixture
def service_config():
    """Configuration used by API tests."""
    return ServiceConfig(log_level="WARNING", script_timeout_ms=1000)


@pytest.fixture
def mock_service():
    """DocumentService stand-in returning a fixed document."""
    service = MagicMock(spec=DocumentService)
    service.render_fixed = AsyncMock(return_value=make_rendered_document("Invoice-INV-1.pdf"))
    service.render_dynamic = AsyncMock(return_value=make_rendered_document("document.pdf"))
    return service


@pytest.fixture
def client(service_config, document_service):
    """Test client running the full pipeline with a mocked PDF engine."""
    app = build_app(service_config, service=document_service)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def sample_invoice_data():
    """Invoice payload with two lines."""
    return {
        "invoiceNumber": "INV-001",
        "date": "2024-01-15",
        "dueDate": "2024-02-15",
        "customerName": "Acme Corp",
        "customerAddress": "1 Main St, Springfield",
        "items": [
            {"description": "Widget", "quantity": 2, "unitPrice": 10},
            {"description": "Gadget", "quantity": 1, "unitPrice": 5},
        ],
    }


@pytest.fixture
def sample_report_data():
    """Report payload with three data points."""
    return {
        "title": "Quarterly Sales Report",
        "date": "2024-03-31",
        "author": "Jane Analyst",
        "summary": "Sales grew steadily.",
        "data": [
            {"label": "Q1", "value": 1000},
            {"label": "Q2", "value": 1500},
            {"label": "Q3", "value": 2000},
        ],
    }
