"""
Abstract base classes and interfaces for the transport layer.
This module defines the contracts the builders and the embedding layer depend on,
together with the library's exception hierarchy.
"""

from abc import ABC, abstractmethod
from typing import List, Dict, Optional, Any, Union

from elastic_fluent.models.schemas import ProviderType


class ISearchTransport(ABC):
    """
    Abstract interface for search and document operations.
    Implementations return the engine's native response untouched.
    """

    @abstractmethod
    def search(self, index: str, body: Dict[str, Any]) -> Dict[str, Any]:
        """Run a search request against an index pattern."""
        pass

    @abstractmethod
    def bulk(self, operations: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Send alternating header/body pairs as one bulk request."""
        pass

    @abstractmethod
    def index(
        self,
        index: str,
        document: Dict[str, Any],
        id: Optional[str] = None
    ) -> Dict[str, Any]:
        """Index a single document."""
        pass

    @abstractmethod
    def get(self, index: str, id: str) -> Dict[str, Any]:
        """Get a document by id. Raises DocumentNotFoundError when absent."""
        pass

    @abstractmethod
    def update(self, index: str, id: str, document: Dict[str, Any]) -> Dict[str, Any]:
        """Apply a partial update to a document."""
        pass

    @abstractmethod
    def delete(self, index: str, id: str) -> Dict[str, Any]:
        """Delete a document by id. Raises DocumentNotFoundError when absent."""
        pass


class IIndexAdmin(ABC):
    """Abstract interface for index lifecycle operations."""

    @abstractmethod
    def create_index(
        self,
        index: str,
        settings: Optional[Dict[str, Any]] = None,
        mappings: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """Create an index with optional settings and mappings."""
        pass

    @abstractmethod
    def delete_index(self, index: str) -> Dict[str, Any]:
        """Delete an index."""
        pass

    @abstractmethod
    def index_exists(self, index: str) -> bool:
        """Check if an index exists."""
        pass

    @abstractmethod
    def get_settings(self, index: str) -> Dict[str, Any]:
        """Get index settings."""
        pass

    @abstractmethod
    def get_mappings(self, index: str) -> Dict[str, Any]:
        """Get index mappings."""
        pass

    @abstractmethod
    def refresh(self, index: str) -> Dict[str, Any]:
        """Make recent writes visible to search."""
        pass


class IEmbeddingTransport(ABC):
    """Abstract interface for provider specific embedding calls."""

    @abstractmethod
    def supports(self, provider_type: Union[ProviderType, str]) -> bool:
        """Whether a handler exists for the provider."""
        pass

    @abstractmethod
    def generate(
        self,
        text: str,
        model_name: str,
        provider_type: ProviderType
    ) -> List[float]:
        """Generate a single embedding vector."""
        pass


class ElasticFluentError(Exception):
    """Base exception for elastic-fluent."""
    pass


class InvalidQueryError(ElasticFluentError):
    """Raised when a builder receives a malformed argument."""
    pass


class MissingQuerySpecError(ElasticFluentError):
    """Raised when a vector search is compiled without a vector or text query."""
    pass


class InvalidArgumentError(ElasticFluentError):
    """Raised on invalid enum values and invalid orchestration input."""
    pass


class MappingConflictError(InvalidArgumentError):
    """Raised when additional mapping fields collide with the vector field."""
    pass


class BulkValidationError(InvalidArgumentError):
    """Raised when a bulk batch fails validation before any embedding call."""

    def __init__(self, message: str, position: Optional[int] = None):
        super().__init__(message)
        self.position = position


class UnknownModelError(ElasticFluentError):
    """Raised when a model id is not in the registry."""
    pass


class UnsupportedProviderError(ElasticFluentError):
    """Raised when no handler exists for a model's provider type."""
    pass


class DocumentNotFoundError(ElasticFluentError):
    """Raised when a document does not exist."""

    def __init__(self, index: str, id: str):
        super().__init__(f"Document not found in index '{index}' with ID '{id}'")
        self.index = index
        self.id = id


class TransportFailure(ElasticFluentError):
    """Raised when the search engine or an embedding provider call fails."""
    pass


class EmbeddingGenerationError(TransportFailure):
    """Raised when embedding generation fails; `index` is the failed batch position."""

    def __init__(self, message: str, index: Optional[int] = None):
        super().__init__(message)
        self.index = index
