"""
Data models and schemas for elastic-fluent.
This module defines the Pydantic models shared by the builders, the embedding
layer and the transport adapters.
"""

from typing import Dict, List, Optional, Any, Tuple, Union
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, field_validator


class SimilarityMetric(str, Enum):
    """Similarity functions supported by the script score query."""
    COSINE = "cosine"
    DOT_PRODUCT = "dot_product"
    L2_NORM = "l2_norm"


class ProviderType(str, Enum):
    """Embedding providers a model can be served by."""
    OLLAMA = "ollama"
    OPENAI = "openai"
    HUGGINGFACE = "huggingface"


class SortOrder(str, Enum):
    """Sort directions."""
    ASC = "asc"
    DESC = "desc"


class ModelEntry(BaseModel):
    """A registered embedding model."""
    model_config = ConfigDict(frozen=True, protected_namespaces=())

    model_id: str = Field(..., min_length=1, description="Registry key")
    model_name: str = Field(..., min_length=1, description="Provider-facing model name")
    dimensions: int = Field(..., gt=0, description="Length of generated vectors")
    provider_type: ProviderType = Field(default=ProviderType.OLLAMA)


class VectorQuerySpec(BaseModel):
    """Vector side of a vector search query."""
    field: str = Field(..., min_length=1)
    vector: List[float] = Field(..., description="Query embedding vector")
    boost: float = Field(default=1.0)
    similarity_metric: SimilarityMetric = Field(default=SimilarityMetric.COSINE)


class TextQuerySpec(BaseModel):
    """Lexical side of a hybrid query; the clause is passed through untouched."""
    clause: Dict[str, Any] = Field(..., description="Query DSL clause, e.g. a match query")
    boost: float = Field(default=1.0)

    @field_validator('clause')
    @classmethod
    def clause_not_empty(cls, v):
        if not v:
            raise ValueError('Text query clause must not be empty')
        return v


class SortField(BaseModel):
    """A single sort criterion."""
    model_config = ConfigDict(frozen=True)

    field: str = Field(..., min_length=1)
    order: SortOrder = Field(default=SortOrder.ASC)

    def to_query(self) -> Dict[str, Any]:
        return {self.field: {"order": self.order.value}}


class HighlightSpec(BaseModel):
    """Highlighting options for a search request."""
    fields: List[str] = Field(..., min_length=1)
    pre_tags: Optional[List[str]] = None
    post_tags: Optional[List[str]] = None
    fragment_size: Optional[int] = Field(None, ge=0)
    number_of_fragments: Optional[int] = Field(None, ge=0)

    def to_query(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"fields": {field: {} for field in self.fields}}
        if self.pre_tags is not None:
            body["pre_tags"] = list(self.pre_tags)
        if self.post_tags is not None:
            body["post_tags"] = list(self.post_tags)
        if self.fragment_size is not None:
            body["fragment_size"] = self.fragment_size
        if self.number_of_fragments is not None:
            body["number_of_fragments"] = self.number_of_fragments
        return body


class BulkDocument(BaseModel):
    """A document queued for bulk indexing with embeddings."""
    id: Optional[str] = Field(None, description="Target document id, generated by the engine when absent")
    fields: Dict[str, Any] = Field(default_factory=dict)


class ElasticConfig(BaseModel):
    """Connection options passed through to the search engine client."""
    hosts: List[str] = Field(default_factory=lambda: ["http://localhost:9200"], min_length=1)
    basic_auth: Optional[Tuple[str, str]] = None
    api_key: Optional[Union[str, Tuple[str, str]]] = None
    ssl_verification: bool = True
    retries: int = Field(default=3, ge=0)
    request_timeout: Optional[float] = Field(None, gt=0)


class IndexDefaults(BaseModel):
    """Index settings merged under caller settings when creating vector indices."""
    number_of_shards: int = Field(default=1, ge=1)
    number_of_replicas: int = Field(default=1, ge=0)
