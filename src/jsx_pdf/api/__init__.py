"""
HTTP interface.

FastAPI application factory and the /api/pdf routes.
"""

from .app import build_app

__all__ = ["build_app"]
