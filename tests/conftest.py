"""
Shared fixtures for the test suite.
"""

import pytest

from elastic_fluent.embedding.service import EmbeddingService
from stubs import CountingEmbeddingTransport, RecordingTransport


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def embedding_transport():
    return CountingEmbeddingTransport(dimensions={"all-minilm": 4, "text-embedding-3-small": 8})


@pytest.fixture
def embedding_service(embedding_transport):
    service = EmbeddingService(embedding_transport)
    service.add_model("minilm", "all-minilm", 4)
    service.add_model("openai-small", "text-embedding-3-small", 8, "openai")
    return service
