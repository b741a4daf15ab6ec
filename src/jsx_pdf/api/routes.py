"""PDF routes."""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, Request, Response

from ..core.content_types import RenderedDocument
from ..errors import ValidationError
from ..services import DocumentService
from ..views import component_docs
from .schemas import GenerateRequest, RenderRequest

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/pdf", tags=["pdf"])


def get_service(request: Request) -> DocumentService:
    return request.app.state.service


def pdf_response(document: RenderedDocument) -> Response:
    """Binary PDF response offered as a download."""
    return Response(
        content=document.pdf_bytes,
        media_type=document.content_type,
        headers={"Content-Disposition": f"attachment; filename={document.filename}"},
    )


@router.post("/invoice")
async def generate_invoice(
    data: Dict[str, Any] = Body(...),
    service: DocumentService = Depends(get_service),
) -> Response:
    """Render the invoice template."""
    document = await service.render_fixed("invoice", data)
    return pdf_response(document)


@router.post("/report")
async def generate_report(
    data: Dict[str, Any] = Body(...),
    service: DocumentService = Depends(get_service),
) -> Response:
    """Render the report template."""
    document = await service.render_fixed("report", data)
    return pdf_response(document)


@router.post("/generate")
async def generate(
    request: GenerateRequest,
    service: DocumentService = Depends(get_service),
) -> Response:
    """Render a built-in template selected by ``templateType``."""
    if not request.templateType or request.data is None:
        raise ValidationError("Missing required fields", "templateType and data are required")

    options = request.options.to_options() if request.options else None
    document = await service.render_fixed(request.templateType, request.data, options)
    return pdf_response(document)


@router.post("/render")
async def render(
    request: RenderRequest,
    service: DocumentService = Depends(get_service),
) -> Response:
    """
    Compile and render a JSX template.

    The template must declare ``function Template(props)``; ``data`` is
    passed as props.
    """
    if not request.jsxTemplate:
        raise ValidationError("Missing JSX template")

    options = request.options.to_options() if request.options else None
    document = await service.render_dynamic(request.jsxTemplate, request.data or {}, options)
    return pdf_response(document)


@router.get("/components")
async def components() -> Dict[str, Any]:
    """Prop documentation of the built-in templates."""
    return {"components": component_docs()}
