"""Index lifecycle management."""

from .index_manager import IndexManager

__all__ = ["IndexManager"]
