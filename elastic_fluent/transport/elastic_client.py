"""
Elasticsearch transport built on the official elasticsearch-py client.
Implements the search and index admin contracts and translates client errors
into the library's exception hierarchy.
"""

from typing import List, Dict, Optional, Any

from elasticsearch import ApiError, Elasticsearch, NotFoundError, TransportError

from elastic_fluent.config.settings import settings
from elastic_fluent.models.schemas import ElasticConfig
from elastic_fluent.utils.logger import LoggerMixin
from .base import ISearchTransport, IIndexAdmin, DocumentNotFoundError, TransportFailure


def _body(response: Any) -> Any:
    """Unwrap an ObjectApiResponse into plain Python data."""
    return getattr(response, "body", response)


class ElasticClient(ISearchTransport, IIndexAdmin, LoggerMixin):
    """
    Elasticsearch connection wrapper.
    Connection pooling, retries and TLS are left to the elasticsearch client.
    """

    def __init__(
        self,
        config: Optional[ElasticConfig] = None,
        client: Optional[Elasticsearch] = None
    ):
        """
        Initialize the transport.

        Args:
            config: Connection options, resolved from settings when omitted
            client: Pre-built Elasticsearch client (mainly for tests)
        """
        self.config = config or settings.elastic_config()
        self._client = client

    def _get_client_params(self) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "hosts": list(self.config.hosts),
            "verify_certs": self.config.ssl_verification,
            "max_retries": self.config.retries,
            "retry_on_timeout": self.config.retries > 0,
        }
        if self.config.basic_auth is not None:
            params["basic_auth"] = tuple(self.config.basic_auth)
        if self.config.api_key is not None:
            params["api_key"] = self.config.api_key
        if self.config.request_timeout is not None:
            params["request_timeout"] = self.config.request_timeout
        return params

    @property
    def client(self) -> Elasticsearch:
        """Get the underlying Elasticsearch client, creating it on first use."""
        if self._client is None:
            self.logger.info(f"Creating Elasticsearch client for {self.config.hosts}")
            self._client = Elasticsearch(**self._get_client_params())
        return self._client

    def _fail(self, message: str, error: Exception) -> TransportFailure:
        self.logger.error(f"{message}: {str(error)}")
        return TransportFailure(f"{message}: {str(error)}")

    def info(self) -> Dict[str, Any]:
        """Get cluster information."""
        try:
            return _body(self.client.info())
        except (ApiError, TransportError) as e:
            raise self._fail("Failed to get Elasticsearch info", e) from e

    def ping(self) -> bool:
        """Check if Elasticsearch is reachable."""
        try:
            return bool(self.client.ping())
        except (ApiError, TransportError) as e:
            self.logger.warning(f"Elasticsearch ping failed: {str(e)}")
            return False

    # Index admin

    def index_exists(self, index: str) -> bool:
        try:
            return bool(self.client.indices.exists(index=index))
        except (ApiError, TransportError) as e:
            raise self._fail(f"Failed to check if index '{index}' exists", e) from e

    def create_index(
        self,
        index: str,
        settings: Optional[Dict[str, Any]] = None,
        mappings: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        params: Dict[str, Any] = {"index": index}
        if settings:
            params["settings"] = settings
        if mappings:
            params["mappings"] = mappings

        try:
            response = _body(self.client.indices.create(**params))
            self.logger.info(f"Created index '{index}'")
            return response
        except (ApiError, TransportError) as e:
            raise self._fail(f"Failed to create index '{index}'", e) from e

    def delete_index(self, index: str) -> Dict[str, Any]:
        try:
            response = _body(self.client.indices.delete(index=index))
            self.logger.info(f"Deleted index '{index}'")
            return response
        except (ApiError, TransportError) as e:
            raise self._fail(f"Failed to delete index '{index}'", e) from e

    def get_settings(self, index: str) -> Dict[str, Any]:
        try:
            return _body(self.client.indices.get_settings(index=index))
        except (ApiError, TransportError) as e:
            raise self._fail(f"Failed to get settings of index '{index}'", e) from e

    def get_mappings(self, index: str) -> Dict[str, Any]:
        try:
            return _body(self.client.indices.get_mapping(index=index))
        except (ApiError, TransportError) as e:
            raise self._fail(f"Failed to get mappings of index '{index}'", e) from e

    def refresh(self, index: str) -> Dict[str, Any]:
        try:
            return _body(self.client.indices.refresh(index=index))
        except (ApiError, TransportError) as e:
            raise self._fail(f"Failed to refresh index '{index}'", e) from e

    # Documents and search

    def index(
        self,
        index: str,
        document: Dict[str, Any],
        id: Optional[str] = None
    ) -> Dict[str, Any]:
        params: Dict[str, Any] = {"index": index, "document": document}
        if id is not None:
            params["id"] = id

        try:
            return _body(self.client.index(**params))
        except (ApiError, TransportError) as e:
            raise self._fail("Failed to index document", e) from e

    def get(self, index: str, id: str) -> Dict[str, Any]:
        try:
            return _body(self.client.get(index=index, id=id))
        except NotFoundError as e:
            raise DocumentNotFoundError(index, id) from e
        except (ApiError, TransportError) as e:
            raise self._fail("Failed to get document", e) from e

    def update(self, index: str, id: str, document: Dict[str, Any]) -> Dict[str, Any]:
        try:
            return _body(self.client.update(index=index, id=id, doc=document))
        except NotFoundError as e:
            raise DocumentNotFoundError(index, id) from e
        except (ApiError, TransportError) as e:
            raise self._fail("Failed to update document", e) from e

    def delete(self, index: str, id: str) -> Dict[str, Any]:
        try:
            return _body(self.client.delete(index=index, id=id))
        except NotFoundError as e:
            raise DocumentNotFoundError(index, id) from e
        except (ApiError, TransportError) as e:
            raise self._fail("Failed to delete document", e) from e

    def search(self, index: str, body: Dict[str, Any]) -> Dict[str, Any]:
        try:
            return _body(self.client.search(index=index, body=body))
        except (ApiError, TransportError) as e:
            raise self._fail("Search failed", e) from e

    def bulk(self, operations: List[Dict[str, Any]]) -> Dict[str, Any]:
        try:
            response = _body(self.client.bulk(operations=operations))
        except (ApiError, TransportError) as e:
            raise self._fail("Bulk operation failed", e) from e

        if response.get("errors"):
            self.logger.warning("Bulk request completed with item errors")
        return response

    def close(self) -> None:
        """Close the underlying client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


class ElasticClientFactory:
    """
    Factory class for creating Elasticsearch transports.
    Implements Factory pattern for dependency injection and testing.
    """

    @staticmethod
    def create_client(config: Optional[ElasticConfig] = None, **overrides) -> ElasticClient:
        """
        Create a new transport instance.

        Args:
            config: Connection options, defaults to settings
            **overrides: Individual ElasticConfig fields to override

        Returns:
            ElasticClient instance
        """
        config = config or settings.elastic_config()
        if overrides:
            config = config.model_copy(update=overrides)
        return ElasticClient(config=config)


# Global client instance for dependency injection
_global_client: Optional[ElasticClient] = None


def get_elastic_client() -> ElasticClient:
    """Get the global ElasticClient built from settings."""
    global _global_client

    if _global_client is None:
        _global_client = ElasticClientFactory.create_client()

    return _global_client


def close_elastic_client() -> None:
    """Close the global ElasticClient."""
    global _global_client

    if _global_client is not None:
        _global_client.close()
        _global_client = None
