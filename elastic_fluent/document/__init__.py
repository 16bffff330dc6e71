"""Single document and bulk operations."""

from .document_manager import DocumentManager

__all__ = ["DocumentManager"]
