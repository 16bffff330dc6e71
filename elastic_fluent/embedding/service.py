"""
Embedding service: model registry plus single and batch embedding generation.
"""

from typing import Dict, Iterable, List, Optional, Union

from pydantic import ValidationError

from elastic_fluent.models.schemas import ModelEntry, ProviderType
from elastic_fluent.transport.base import (
    IEmbeddingTransport,
    EmbeddingGenerationError,
    InvalidArgumentError,
    UnknownModelError,
    UnsupportedProviderError
)
from elastic_fluent.utils.logger import LoggerMixin


class EmbeddingService(LoggerMixin):
    """Generates embeddings for registered models through an embedding transport."""

    def __init__(
        self,
        transport: IEmbeddingTransport,
        models: Optional[Iterable[ModelEntry]] = None
    ):
        """
        Initialize the service.

        Args:
            transport: Provider transport used for every generation call
            models: Initial model registry entries
        """
        self.transport = transport
        self._models: Dict[str, ModelEntry] = {}
        for entry in models or []:
            self._models[entry.model_id] = entry

    def add_model(
        self,
        model_id: str,
        model_name: str,
        dimensions: int,
        provider_type: Union[ProviderType, str] = ProviderType.OLLAMA
    ) -> "EmbeddingService":
        """Register (or replace) a model. Returns self for chaining."""
        try:
            entry = ModelEntry(
                model_id=model_id,
                model_name=model_name,
                dimensions=dimensions,
                provider_type=provider_type
            )
        except ValidationError as e:
            raise InvalidArgumentError(f"Invalid model '{model_id}': {e.errors()[0]['msg']}") from e
        self._models[model_id] = entry
        self.logger.info(f"Registered model '{model_id}' ({entry.provider_type.value}, {dimensions} dims)")
        return self

    def get_model(self, model_id: str) -> ModelEntry:
        if model_id not in self._models:
            raise UnknownModelError(f"Model '{model_id}' is not configured")
        return self._models[model_id]

    def get_model_dimensions(self, model_id: str) -> int:
        return self.get_model(model_id).dimensions

    def get_models(self) -> Dict[str, ModelEntry]:
        return dict(self._models)

    def _resolve(self, model_id: str) -> ModelEntry:
        entry = self.get_model(model_id)
        if not self.transport.supports(entry.provider_type):
            raise UnsupportedProviderError(
                f"API type '{entry.provider_type.value}' is not supported"
            )
        return entry

    def _embed(self, text: str, entry: ModelEntry) -> List[float]:
        vector = self.transport.generate(text, entry.model_name, entry.provider_type)
        if len(vector) != entry.dimensions:
            raise EmbeddingGenerationError(
                f"Model '{entry.model_id}' returned {len(vector)} dimensions, "
                f"expected {entry.dimensions}"
            )
        return list(vector)

    def generate_embedding(self, text: str, model_id: str) -> List[float]:
        """
        Generate an embedding for a text.

        Args:
            text: Text to embed
            model_id: Registry key of the model

        Returns:
            The embedding vector

        Raises:
            UnknownModelError: If the model is not registered
            UnsupportedProviderError: If the transport has no handler for the provider
            TransportFailure: If the provider call fails
        """
        entry = self._resolve(model_id)
        return self._embed(text, entry)

    def generate_batch_embeddings(self, texts: List[str], model_id: str) -> List[List[float]]:
        """
        Generate embeddings for several texts, one provider call per text.

        Output position i holds the embedding of input i. The first failure
        aborts the batch; no partial result is returned.

        Raises:
            EmbeddingGenerationError: With `index` set to the failed input position
        """
        entry = self._resolve(model_id)
        embeddings: List[List[float]] = []

        for i, text in enumerate(texts):
            try:
                embeddings.append(self._embed(text, entry))
            except Exception as e:
                self.logger.error(f"Batch embedding failed at input {i}: {str(e)}")
                raise EmbeddingGenerationError(
                    f"Embedding generation failed for input {i} of {len(texts)}: {str(e)}",
                    index=i
                ) from e

        self.logger.info(f"Generated {len(embeddings)} embeddings with model '{model_id}'")
        return embeddings
