"""Query builders and search dispatch."""

from .executor import SearchExecutor
from .query_builder import SearchBuilder
from .vector_builder import VectorSearchBuilder, similarity_script

__all__ = [
    "SearchExecutor",
    "SearchBuilder",
    "VectorSearchBuilder",
    "similarity_script"
]
