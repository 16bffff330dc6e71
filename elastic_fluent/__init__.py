"""
elastic-fluent: fluent Elasticsearch client.
Query builders, vector and hybrid search, embedding-aware indexing and thin
index/document facades over the official elasticsearch client.
"""

from typing import Optional

from elastic_fluent.config.model_registry import get_registered_models
from elastic_fluent.config.settings import settings
from elastic_fluent.models.schemas import ElasticConfig, ModelEntry, ProviderType, SimilarityMetric, SortOrder
from elastic_fluent.transport.base import (
    ElasticFluentError,
    InvalidQueryError,
    MissingQuerySpecError,
    InvalidArgumentError,
    MappingConflictError,
    BulkValidationError,
    UnknownModelError,
    UnsupportedProviderError,
    DocumentNotFoundError,
    TransportFailure,
    EmbeddingGenerationError
)
from elastic_fluent.transport.elastic_client import (
    ElasticClient,
    ElasticClientFactory,
    get_elastic_client,
    close_elastic_client
)
from elastic_fluent.embedding import EmbeddingManager, EmbeddingService, HttpEmbeddingTransport
from elastic_fluent.search import SearchBuilder, SearchExecutor, VectorSearchBuilder
from elastic_fluent.index import IndexManager
from elastic_fluent.document import DocumentManager
from elastic_fluent.utils.logger import log_function_call


@log_function_call
def create_embedding_manager(
    client: Optional[ElasticClient] = None,
    embedding_service: Optional[EmbeddingService] = None
) -> EmbeddingManager:
    """
    Factory function to create an embedding manager wired from settings.

    Args:
        client: Elasticsearch transport, defaults to the global client
        embedding_service: Embedding service, defaults to an HTTP transport
            with the models of the configured registry

    Returns:
        Configured EmbeddingManager instance
    """
    client = client or get_elastic_client()
    if embedding_service is None:
        embedding_service = EmbeddingService(HttpEmbeddingTransport(), get_registered_models())
    return EmbeddingManager(client, embedding_service, settings.index_defaults())


__version__ = settings.VERSION

# Main entry points
__all__ = [
    "SearchBuilder",
    "SearchExecutor",
    "VectorSearchBuilder",
    "EmbeddingService",
    "EmbeddingManager",
    "HttpEmbeddingTransport",
    "IndexManager",
    "DocumentManager",
    "ElasticClient",
    "ElasticClientFactory",
    "ElasticConfig",
    "ModelEntry",
    "ProviderType",
    "SimilarityMetric",
    "SortOrder",
    "create_embedding_manager",
    "get_elastic_client",
    "close_elastic_client",
    "ElasticFluentError",
    "InvalidQueryError",
    "MissingQuerySpecError",
    "InvalidArgumentError",
    "MappingConflictError",
    "BulkValidationError",
    "UnknownModelError",
    "UnsupportedProviderError",
    "DocumentNotFoundError",
    "TransportFailure",
    "EmbeddingGenerationError"
]
