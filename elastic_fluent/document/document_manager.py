"""
Document management facade.
Handles CRUD and bulk operations for single documents.
"""

from typing import List, Dict, Optional, Any

from elastic_fluent.transport.base import ISearchTransport, InvalidArgumentError
from elastic_fluent.utils.logger import LoggerMixin


class DocumentManager(LoggerMixin):
    """
    Document operations over a search transport.
    Missing documents surface as DocumentNotFoundError from get and delete.
    """

    def __init__(self, transport: ISearchTransport):
        self.transport = transport

    def index(
        self,
        index: str,
        document: Dict[str, Any],
        id: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Index a document, replacing any document with the same id.

        Args:
            index: Target index
            document: Document body
            id: Optional document id; the engine assigns one when omitted

        Returns:
            Engine response with `_id` and `result`
        """
        if not isinstance(document, dict):
            raise InvalidArgumentError("Document must be a mapping")
        return self.transport.index(index, document, id)

    def get(self, index: str, id: str) -> Dict[str, Any]:
        return self.transport.get(index, id)

    def update(self, index: str, id: str, document: Dict[str, Any]) -> Dict[str, Any]:
        """Partially update a document with the given fields."""
        if not isinstance(document, dict) or not document:
            raise InvalidArgumentError("Update requires a non-empty mapping of fields")
        return self.transport.update(index, id, document)

    def delete(self, index: str, id: str) -> Dict[str, Any]:
        return self.transport.delete(index, id)

    def bulk(self, operations: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Send prebuilt bulk operations (alternating action and body entries)."""
        if not operations:
            raise InvalidArgumentError("No bulk operations given")
        self.logger.info(f"Sending bulk request with {len(operations)} entries")
        return self.transport.bulk(operations)
