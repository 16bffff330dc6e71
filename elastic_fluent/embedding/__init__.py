"""Embedding generation and embedding-aware indexing and search."""

from .providers import HttpEmbeddingTransport, mean_pooling
from .service import EmbeddingService
from .manager import EmbeddingManager

__all__ = [
    "HttpEmbeddingTransport",
    "EmbeddingService",
    "EmbeddingManager",
    "mean_pooling"
]
