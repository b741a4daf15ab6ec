"""
Service layer.

Contains the request pipeline shared by the HTTP routes.
"""

from .document_service import DocumentService

__all__ = ["DocumentService"]
