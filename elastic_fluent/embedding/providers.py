"""
HTTP embedding transport.
Implements Strategy pattern with one strategy per embedding provider
(Ollama, OpenAI, HuggingFace inference API).
"""

from abc import ABC, abstractmethod
from typing import Any, List, Dict, Optional, Union

import openai
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from elastic_fluent.config.settings import settings
from elastic_fluent.models.schemas import ProviderType
from elastic_fluent.transport.base import (
    IEmbeddingTransport,
    EmbeddingGenerationError,
    UnsupportedProviderError
)
from elastic_fluent.utils.logger import LoggerMixin


def is_vector(values: Any) -> bool:
    """True for a non-empty list of plain numbers."""
    return isinstance(values, list) and bool(values) and all(
        isinstance(value, (int, float)) and not isinstance(value, bool) for value in values
    )


def mean_pooling(token_embeddings: List[List[float]]) -> List[float]:
    """Average token level embeddings into a single vector."""
    count = len(token_embeddings)
    width = len(token_embeddings[0])
    sums = [0.0] * width
    for embedding in token_embeddings:
        for i, value in enumerate(embedding):
            sums[i] += value
    return [value / count for value in sums]


class EmbeddingStrategy(ABC):
    """Abstract strategy for a single embedding provider."""

    @abstractmethod
    def embed(self, text: str, model_name: str) -> List[float]:
        """Return the embedding of `text` produced by `model_name`."""
        pass


class OllamaEmbeddingStrategy(EmbeddingStrategy):
    """Ollama `/api/embeddings` endpoint."""

    def __init__(self, session: requests.Session, api_url: str, timeout: float):
        self.session = session
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout

    def embed(self, text: str, model_name: str) -> List[float]:
        url = f"{self.api_url}/api/embeddings"
        response = self.session.post(
            url,
            json={"model": model_name, "prompt": text},
            timeout=self.timeout
        )
        response.raise_for_status()
        data = response.json()

        if "embedding" not in data:
            raise EmbeddingGenerationError(f"No embedding received from Ollama API. Response: {data}")
        return data["embedding"]


class OpenAIEmbeddingStrategy(EmbeddingStrategy):
    """OpenAI embeddings through the official SDK."""

    def __init__(self, client: Optional[openai.OpenAI] = None, api_key: Optional[str] = None):
        self._client = client
        self.api_key = api_key

    @property
    def client(self) -> openai.OpenAI:
        if self._client is None:
            self._client = openai.OpenAI(api_key=self.api_key)
        return self._client

    def embed(self, text: str, model_name: str) -> List[float]:
        response = self.client.embeddings.create(model=model_name, input=text)
        if not response.data:
            raise EmbeddingGenerationError("No embedding received from OpenAI API")
        return list(response.data[0].embedding)


class HuggingFaceEmbeddingStrategy(EmbeddingStrategy):
    """HuggingFace feature-extraction pipeline; token embeddings are mean pooled."""

    def __init__(
        self,
        session: requests.Session,
        api_url: str,
        api_token: Optional[str],
        timeout: float
    ):
        self.session = session
        self.api_url = api_url.rstrip("/")
        self.api_token = api_token
        self.timeout = timeout

    def embed(self, text: str, model_name: str) -> List[float]:
        headers = {"Content-Type": "application/json"}
        if self.api_token:
            headers["Authorization"] = f"Bearer {self.api_token}"

        response = self.session.post(
            f"{self.api_url}/{model_name}",
            json={"inputs": text},
            headers=headers,
            timeout=self.timeout
        )
        response.raise_for_status()
        data = response.json()

        if not isinstance(data, list) or not data:
            raise EmbeddingGenerationError("No embedding received from HuggingFace API")

        # A single input comes back as one vector per token
        if isinstance(data[0], list):
            width = len(data[0])
            if not all(is_vector(row) and len(row) == width for row in data):
                raise EmbeddingGenerationError(
                    "HuggingFace API returned token embeddings that are not a 2-D list of numbers"
                )
            return mean_pooling(data)
        if not is_vector(data):
            raise EmbeddingGenerationError("HuggingFace API returned a non-numeric embedding")
        return data


class HttpEmbeddingTransport(IEmbeddingTransport, LoggerMixin):
    """
    Embedding transport dispatching to provider strategies.
    Every call goes to the provider; nothing is cached.
    """

    def __init__(
        self,
        api_url: Optional[str] = None,
        openai_api_key: Optional[str] = None,
        huggingface_token: Optional[str] = None,
        timeout: Optional[float] = None,
        strategies: Optional[Dict[ProviderType, EmbeddingStrategy]] = None
    ):
        """
        Initialize the transport.

        Args:
            api_url: Base URL of the Ollama server
            openai_api_key: API key for OpenAI
            huggingface_token: Token for the HuggingFace inference API
            timeout: Per request timeout in seconds
            strategies: Explicit strategy table, replaces the defaults
        """
        if strategies is not None:
            self.strategies = dict(strategies)
            return

        timeout = timeout or settings.EMBEDDING_REQUEST_TIMEOUT

        # Setup session with retry strategy
        self.session = requests.Session()
        retry_strategy = Retry(
            total=3,
            backoff_factor=1,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["POST"],
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

        self.strategies = {
            ProviderType.OLLAMA: OllamaEmbeddingStrategy(
                self.session, api_url or settings.EMBEDDING_API_URL, timeout
            ),
            ProviderType.OPENAI: OpenAIEmbeddingStrategy(
                api_key=openai_api_key or settings.OPENAI_API_KEY
            ),
            ProviderType.HUGGINGFACE: HuggingFaceEmbeddingStrategy(
                self.session,
                settings.HUGGINGFACE_API_URL,
                huggingface_token or settings.HUGGINGFACE_API_TOKEN,
                timeout
            ),
        }

    def supports(self, provider_type: Union[ProviderType, str]) -> bool:
        try:
            return ProviderType(provider_type) in self.strategies
        except ValueError:
            return False

    def generate(
        self,
        text: str,
        model_name: str,
        provider_type: ProviderType
    ) -> List[float]:
        if not self.supports(provider_type):
            raise UnsupportedProviderError(f"API type '{provider_type}' is not supported")

        strategy = self.strategies[ProviderType(provider_type)]
        try:
            vector = strategy.embed(text, model_name)
        except EmbeddingGenerationError:
            raise
        except (requests.exceptions.RequestException, openai.OpenAIError, ValueError) as e:
            self.logger.error(f"Embedding request to {ProviderType(provider_type).value} failed: {str(e)}")
            raise EmbeddingGenerationError(
                f"Embedding request for model '{model_name}' failed: {str(e)}"
            ) from e

        self.logger.debug(f"Generated {len(vector)}-dim embedding with '{model_name}'")
        return vector
