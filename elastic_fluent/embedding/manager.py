"""
Embedding manager: fuses embedding generation with index mappings, document
indexing and vector / hybrid search.
Implements Facade pattern over the embedding service, the search transport
and the vector search builder.
"""

from copy import deepcopy
from typing import List, Dict, Optional, Any, Tuple, Union

from elastic_fluent.models.schemas import BulkDocument, IndexDefaults
from elastic_fluent.search.vector_builder import VectorSearchBuilder
from elastic_fluent.transport.base import (
    ISearchTransport,
    IIndexAdmin,
    BulkValidationError,
    InvalidArgumentError,
    MappingConflictError
)
from elastic_fluent.utils.logger import LoggerMixin
from .service import EmbeddingService


DocumentInput = Union[BulkDocument, Dict[str, Any]]


class EmbeddingManager(LoggerMixin):
    """
    Orchestrates embedding generation for indexing and search.
    Any embedding failure aborts the whole operation; nothing is retried.
    """

    def __init__(
        self,
        client: ISearchTransport,
        embedding_service: EmbeddingService,
        index_defaults: Optional[IndexDefaults] = None,
        index_admin: Optional[IIndexAdmin] = None
    ):
        """
        Initialize the manager.

        Args:
            client: Search transport used for indexing, bulk and search
            embedding_service: Model registry and embedding generation
            index_defaults: Settings merged under caller settings on index creation
            index_admin: Index admin, defaults to `client` when it implements it
        """
        self.client = client
        self.embedding_service = embedding_service
        self.index_defaults = index_defaults or IndexDefaults()
        if index_admin is None and isinstance(client, IIndexAdmin):
            index_admin = client
        self.index_admin = index_admin

    def create_vector_index_mapping(
        self,
        model_id: str,
        vector_field: str = "embedding",
        additional_fields: Optional[Dict[str, Any]] = None,
        content_field: str = "content"
    ) -> Dict[str, Any]:
        """
        Build an index mapping with a dense_vector field sized for the model.

        Args:
            model_id: Registry key; its dimensions size the vector field
            vector_field: Name of the dense_vector field
            additional_fields: Extra property mappings; may replace the content mapping
            content_field: Text field holding the embedded content

        Returns:
            Mapping document with a `properties` section

        Raises:
            MappingConflictError: If additional_fields also defines vector_field
        """
        additional_fields = additional_fields or {}
        if vector_field in additional_fields:
            raise MappingConflictError(
                f"Additional field '{vector_field}' conflicts with the vector field mapping"
            )

        dimensions = self.embedding_service.get_model_dimensions(model_id)
        properties: Dict[str, Any] = {
            vector_field: {
                "type": "dense_vector",
                "dims": dimensions,
                "index": True,
                "similarity": "cosine"
            },
            content_field: {"type": "text"},
        }
        properties.update(deepcopy(additional_fields))
        return {"properties": properties}

    def create_vector_index(
        self,
        index_name: str,
        model_id: str,
        additional_fields: Optional[Dict[str, Any]] = None,
        settings: Optional[Dict[str, Any]] = None,
        vector_field: str = "embedding"
    ) -> Dict[str, Any]:
        """Create an index whose mapping holds a dense_vector field for the model."""
        if self.index_admin is None:
            raise InvalidArgumentError("No index admin available to create indices")

        mapping = self.create_vector_index_mapping(model_id, vector_field, additional_fields)
        final_settings = {**self.index_defaults.model_dump(), **(settings or {})}

        self.logger.info(f"Creating vector index '{index_name}' for model '{model_id}'")
        return self.index_admin.create_index(index_name, final_settings, mapping)

    def index_with_embedding(
        self,
        index_name: str,
        model_id: str,
        content: str,
        additional_fields: Optional[Dict[str, Any]] = None,
        document_id: Optional[str] = None,
        vector_field: str = "embedding",
        content_field: str = "content"
    ) -> Dict[str, Any]:
        """Embed `content` and index it together with any additional fields."""
        embedding = self.embedding_service.generate_embedding(content, model_id)

        document = {content_field: content, vector_field: embedding}
        document.update(additional_fields or {})
        return self.client.index(index_name, document, document_id)

    def _split_document(self, document: DocumentInput, position: int) -> Tuple[Optional[str], Dict[str, Any]]:
        if isinstance(document, BulkDocument):
            return document.id, deepcopy(document.fields)
        if isinstance(document, dict):
            fields = deepcopy(document)
            document_id = fields.pop("id", None)
            return (str(document_id) if document_id is not None else None), fields
        raise BulkValidationError(
            f"Document at position {position} must be a mapping or BulkDocument",
            position=position
        )

    def bulk_assemble_with_embeddings(
        self,
        documents: List[DocumentInput],
        model_id: str,
        vector_field: str = "embedding",
        content_field: str = "content",
        index_name: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        """
        Build bulk index operations with one embedding per document.

        Every document is validated before any embedding is generated. An `id`
        key (or BulkDocument.id) becomes the `_id` of the index action and is
        removed from the body.

        Returns:
            Alternating action header / document body list

        Raises:
            InvalidArgumentError: If the batch is empty
            BulkValidationError: If a document lacks string content
        """
        if not documents:
            raise InvalidArgumentError("No documents given for bulk indexing")

        prepared: List[Tuple[Optional[str], Dict[str, Any]]] = []
        for position, document in enumerate(documents):
            document_id, fields = self._split_document(document, position)
            if fields.get(content_field) is None:
                raise BulkValidationError(
                    f"Document at position {position} is missing required field '{content_field}'",
                    position=position
                )
            if not isinstance(fields[content_field], str):
                raise BulkValidationError(
                    f"Field '{content_field}' of document at position {position} must be a string, "
                    f"got {type(fields[content_field]).__name__}",
                    position=position
                )
            prepared.append((document_id, fields))

        texts = [fields[content_field] for _, fields in prepared]
        embeddings = self.embedding_service.generate_batch_embeddings(texts, model_id)

        operations: List[Dict[str, Any]] = []
        for (document_id, fields), embedding in zip(prepared, embeddings):
            action: Dict[str, Any] = {}
            if index_name is not None:
                action["_index"] = index_name
            if document_id is not None:
                action["_id"] = document_id

            fields[vector_field] = embedding
            operations.append({"index": action})
            operations.append(fields)

        self.logger.info(f"Assembled {len(prepared)} bulk index operations")
        return operations

    def bulk_index_with_embeddings(
        self,
        index_name: str,
        model_id: str,
        documents: List[DocumentInput],
        vector_field: str = "embedding",
        content_field: str = "content"
    ) -> Dict[str, Any]:
        """Embed and bulk index documents into `index_name`."""
        operations = self.bulk_assemble_with_embeddings(
            documents, model_id, vector_field, content_field, index_name=index_name
        )
        return self.client.bulk(operations)

    def search_with_embedding(
        self,
        index_name: str,
        model_id: str,
        query: str,
        size: int = 10,
        filters: Optional[List[Dict[str, Any]]] = None,
        vector_field: str = "embedding"
    ) -> Dict[str, Any]:
        """Vector search with the embedding of a natural language query."""
        embedding = self.embedding_service.generate_embedding(query, model_id)

        vector_search = VectorSearchBuilder(self.client)
        vector_search.index(index_name).vector_query(vector_field, embedding).size(size)
        for filter_clause in filters or []:
            vector_search.filter(filter_clause)

        return vector_search.execute()

    def search_hybrid(
        self,
        index_name: str,
        model_id: str,
        query: str,
        size: int = 10,
        filters: Optional[List[Dict[str, Any]]] = None,
        vector_field: str = "embedding",
        text_field: str = "content",
        vector_boost: float = 1.0,
        text_boost: float = 1.0
    ) -> Dict[str, Any]:
        """Hybrid search: vector similarity on `vector_field` plus a match on `text_field`."""
        embedding = self.embedding_service.generate_embedding(query, model_id)

        vector_search = VectorSearchBuilder(self.client)
        (
            vector_search.index(index_name)
            .vector_query(vector_field, embedding, vector_boost)
            .text_query({"match": {text_field: query}}, text_boost)
            .size(size)
        )
        for filter_clause in filters or []:
            vector_search.filter(filter_clause)

        return vector_search.execute()

    def get_embedding_service(self) -> EmbeddingService:
        return self.embedding_service
