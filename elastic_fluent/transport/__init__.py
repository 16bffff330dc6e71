"""
Transport contracts and errors for elastic-fluent.
The Elasticsearch adapter lives in `elastic_fluent.transport.elastic_client`.
"""

from .base import (
    ISearchTransport,
    IIndexAdmin,
    IEmbeddingTransport,
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

__all__ = [
    "ISearchTransport",
    "IIndexAdmin",
    "IEmbeddingTransport",
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
