"""
Application factory - builds the FastAPI app with error handlers and routes.
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .. import __version__
from ..config import ServiceConfig, get_config
from ..core.browser_pool import EngineTimeouts
from ..core.elements import TreeLimits
from ..core.pdf_generator import AsyncPDFGenerator
from ..core.style_provider import StyleProvider
from ..core.template_compiler import TemplateCompiler
from ..errors import JsxPdfError, LengthRequiredError, PayloadTooLargeError, ValidationError
from ..logging import setup_logging
from ..services import DocumentService
from ..views.registry import describe_validation_errors
from .routes import router as pdf_router

logger = logging.getLogger(__name__)

SERVICE_NAME = "jsx-pdf"
GENERIC_FAILURE = "Failed to generate PDF"


def build_service(config: ServiceConfig) -> DocumentService:
    """Wire the pipeline from configuration."""
    generator = AsyncPDFGenerator(
        headless=config.headless,
        browser_args=config.browser_args,
        timeouts=EngineTimeouts(
            launch_ms=config.launch_timeout_ms,
            navigation_ms=config.navigation_timeout_ms,
            pdf_ms=config.pdf_timeout_ms,
        ),
        pool_size=config.pool_size,
    )
    limits = TreeLimits(max_depth=config.max_tree_depth, max_nodes=config.max_tree_nodes)
    compiler = TemplateCompiler(
        timeout_ms=config.script_timeout_ms,
        max_memory=config.script_max_memory,
        max_source_size=config.max_template_size,
        limits=limits,
    )
    return DocumentService(
        generator=generator,
        styles=StyleProvider(config.css_path),
        compiler=compiler,
        dynamic_error_fallback=config.dynamic_error_fallback,
        max_tree_depth=config.max_tree_depth,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan - startup and shutdown."""
    config: ServiceConfig = app.state.config

    setup_logging(
        config.log_level,
        log_file=Path(config.log_file) if config.log_file else None,
        json_format=config.log_json,
    )
    logger.info(f"Starting {SERVICE_NAME} {__version__}...")

    owned = app.state.service is None
    if owned:
        app.state.service = build_service(config)
        mode = f"pool of {config.pool_size}" if config.pool_size else "browser per request"
        logger.info(f"PDF engine ready ({mode})")

    yield

    logger.info(f"Shutting down {SERVICE_NAME}...")
    if owned:
        await app.state.service.generator.close()
        app.state.service = None
    logger.info(f"{SERVICE_NAME} stopped")


def error_payload(exc: JsxPdfError) -> Dict[str, Any]:
    """Client errors keep their message; server errors use a generic one with details."""
    if exc.http_status < 500:
        return exc.to_dict()
    return {"error": GENERIC_FAILURE, "details": str(exc)}


def build_app(config: Optional[ServiceConfig] = None, service: Optional[DocumentService] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        config: Optional configuration override (useful for testing)
        service: Optional pre-built service; when omitted the lifespan builds
            one from the configuration and closes it on shutdown

    Returns:
        Configured FastAPI application
    """
    if config is None:
        config = get_config()

    app = FastAPI(
        title="JSX PDF",
        description="Render JSX templates to PDF documents",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.service = service

    @app.middleware("http")
    async def limit_body_size(request: Request, call_next: Any) -> Response:
        """Reject bodies larger than the configured limit, or of unknown length."""
        length = request.headers.get("content-length")
        exc: Optional[JsxPdfError] = None
        if length is None and "chunked" in request.headers.get("transfer-encoding", "").lower():
            exc = LengthRequiredError("Content-Length required", "chunked request bodies are not accepted")
        elif length and length.isdigit() and int(length) > config.max_body_size:
            exc = PayloadTooLargeError("Request body too large", f"limit is {config.max_body_size} bytes")
        if exc is not None:
            logger.info(f"{request.method} {request.url.path} rejected: {exc}")
            return JSONResponse(status_code=exc.http_status, content=exc.to_dict())
        return await call_next(request)

    @app.exception_handler(JsxPdfError)
    async def jsx_pdf_error_handler(request: Request, exc: JsxPdfError) -> JSONResponse:
        """Handle pipeline errors with a consistent JSON envelope."""
        if exc.http_status >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc}")
        else:
            logger.info(f"{request.method} {request.url.path} rejected: {exc}")
        return JSONResponse(status_code=exc.http_status, content=error_payload(exc))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """Malformed request bodies are client errors."""
        error = ValidationError("Invalid request body", describe_validation_errors(exc.errors()))
        logger.info(f"{request.method} {request.url.path} rejected: {error}")
        return JSONResponse(status_code=error.http_status, content=error.to_dict())

    app.include_router(pdf_router)

    @app.get("/health", tags=["health"])
    async def health() -> Dict[str, str]:
        return {"status": "ok"}

    @app.get("/")
    async def root() -> Dict[str, Any]:
        return {
            "service": SERVICE_NAME,
            "version": __version__,
            "endpoints": [
                "POST /api/pdf/invoice",
                "POST /api/pdf/report",
                "POST /api/pdf/generate",
                "POST /api/pdf/render",
                "GET /api/pdf/components",
                "GET /health",
            ],
        }

    return app
