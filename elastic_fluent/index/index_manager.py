"""
Index management facade.
Handles creation, deletion and inspection of indices.
Follows Single Responsibility Principle - only manages indices.
"""

from typing import Dict, Optional, Any

from elastic_fluent.transport.base import IIndexAdmin, InvalidArgumentError
from elastic_fluent.utils.logger import LoggerMixin


def _require_index(index: str) -> str:
    if not isinstance(index, str) or not index.strip():
        raise InvalidArgumentError("Index name must be a non-empty string")
    return index


class IndexManager(LoggerMixin):
    """Index lifecycle operations over an index admin transport."""

    def __init__(self, admin: IIndexAdmin):
        """
        Initialize index manager.

        Args:
            admin: Index admin transport, typically an ElasticClient
        """
        self.admin = admin

    def exists(self, index: str) -> bool:
        return self.admin.index_exists(_require_index(index))

    def create(
        self,
        index: str,
        settings: Optional[Dict[str, Any]] = None,
        mappings: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Create an index.

        Args:
            index: Index name
            settings: Index settings, e.g. number_of_shards
            mappings: Index mappings with a `properties` section

        Returns:
            Engine acknowledgement

        Raises:
            TransportFailure: If the engine rejects the request
        """
        self.logger.info(f"Creating index '{index}'")
        return self.admin.create_index(_require_index(index), settings, mappings)

    def delete(self, index: str) -> Dict[str, Any]:
        self.logger.info(f"Deleting index '{index}'")
        return self.admin.delete_index(_require_index(index))

    def get_settings(self, index: str) -> Dict[str, Any]:
        return self.admin.get_settings(_require_index(index))

    def get_mappings(self, index: str) -> Dict[str, Any]:
        return self.admin.get_mappings(_require_index(index))

    def refresh(self, index: str) -> Dict[str, Any]:
        return self.admin.refresh(_require_index(index))
