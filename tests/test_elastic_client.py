"""
Tests for the Elasticsearch transport adapter.
"""

import pytest
from unittest.mock import patch, MagicMock

from elasticsearch import ConnectionError as ESConnectionError, NotFoundError, BadRequestError

from elastic_fluent.models.schemas import ElasticConfig
from elastic_fluent.transport.base import DocumentNotFoundError, TransportFailure
from elastic_fluent.transport.elastic_client import ElasticClient, ElasticClientFactory


def api_error(error_class, status):
    """Build an elasticsearch ApiError without a live node."""
    return error_class(message="error", meta=MagicMock(status=status), body={})


@pytest.fixture
def es():
    return MagicMock()


@pytest.fixture
def client(es):
    return ElasticClient(config=ElasticConfig(), client=es)


class TestClientConstruction:
    """Test connection option pass-through."""

    @patch('elastic_fluent.transport.elastic_client.Elasticsearch')
    def test_client_params(self, mock_elasticsearch):
        """Test ElasticConfig is translated into client keyword arguments."""
        config = ElasticConfig(
            hosts=["https://es1:9200", "https://es2:9200"],
            basic_auth=("elastic", "secret"),
            ssl_verification=False,
            retries=5,
            request_timeout=12.5
        )

        ElasticClient(config=config).client

        mock_elasticsearch.assert_called_once_with(
            hosts=["https://es1:9200", "https://es2:9200"],
            verify_certs=False,
            max_retries=5,
            retry_on_timeout=True,
            basic_auth=("elastic", "secret"),
            request_timeout=12.5
        )

    @patch('elastic_fluent.transport.elastic_client.Elasticsearch')
    def test_client_is_lazy_and_reused(self, mock_elasticsearch):
        """Test the underlying client is created once, on first use."""
        transport = ElasticClient(config=ElasticConfig(api_key="key"))
        mock_elasticsearch.assert_not_called()

        assert transport.client is transport.client
        assert mock_elasticsearch.call_count == 1
        assert mock_elasticsearch.call_args.kwargs["api_key"] == "key"

    def test_factory_overrides(self):
        """Test factory overrides replace individual config fields."""
        transport = ElasticClientFactory.create_client(ElasticConfig(), hosts=["http://other:9200"])

        assert transport.config.hosts == ["http://other:9200"]
        assert transport.config.retries == 3

    def test_context_manager_closes(self, es):
        """Test leaving the context closes the client."""
        with ElasticClient(config=ElasticConfig(), client=es):
            pass

        es.close.assert_called_once()


class TestSearchAndDocuments:
    """Test search and document calls."""

    def test_search_passes_body(self, client, es):
        """Test search forwards index and body and unwraps the response."""
        es.search.return_value = MagicMock(body={"hits": {"hits": []}})

        response = client.search("articles,posts", {"query": {"match_all": {}}})

        es.search.assert_called_once_with(index="articles,posts", body={"query": {"match_all": {}}})
        assert response == {"hits": {"hits": []}}

    def test_index_with_and_without_id(self, client, es):
        """Test the id is only sent when given."""
        client.index("articles", {"title": "x"}, "1")
        client.index("articles", {"title": "y"})

        first, second = es.index.call_args_list
        assert first.kwargs == {"index": "articles", "document": {"title": "x"}, "id": "1"}
        assert second.kwargs == {"index": "articles", "document": {"title": "y"}}

    def test_update_sends_partial_doc(self, client, es):
        """Test updates use a partial doc."""
        client.update("articles", "1", {"views": 3})

        es.update.assert_called_once_with(index="articles", id="1", doc={"views": 3})

    @pytest.mark.parametrize("method", ["get", "delete"])
    def test_missing_document(self, client, es, method):
        """Test 404s become DocumentNotFoundError."""
        getattr(es, method).side_effect = api_error(NotFoundError, 404)

        with pytest.raises(DocumentNotFoundError) as exc_info:
            getattr(client, method)("articles", "missing")

        assert str(exc_info.value) == "Document not found in index 'articles' with ID 'missing'"
        assert isinstance(exc_info.value.__cause__, NotFoundError)

    def test_update_missing_document(self, client, es):
        """Test updating a missing document."""
        es.update.side_effect = api_error(NotFoundError, 404)

        with pytest.raises(DocumentNotFoundError):
            client.update("articles", "missing", {"a": 1})

    def test_engine_error_becomes_transport_failure(self, client, es):
        """Test other API errors are wrapped with their cause."""
        es.search.side_effect = api_error(BadRequestError, 400)

        with pytest.raises(TransportFailure) as exc_info:
            client.search("articles", {"query": {"bad": {}}})

        assert isinstance(exc_info.value.__cause__, BadRequestError)

    def test_connection_error_becomes_transport_failure(self, client, es):
        """Test connection errors are wrapped."""
        es.get.side_effect = ESConnectionError("connection refused")

        with pytest.raises(TransportFailure):
            client.get("articles", "1")

    def test_bulk(self, client, es):
        """Test bulk sends operations as given."""
        operations = [{"index": {"_index": "articles"}}, {"title": "x"}]
        es.bulk.return_value = {"errors": False, "items": []}

        response = client.bulk(operations)

        es.bulk.assert_called_once_with(operations=operations)
        assert response == {"errors": False, "items": []}


class TestIndexAdmin:
    """Test index lifecycle calls."""

    def test_create_index(self, client, es):
        """Test settings and mappings are forwarded."""
        client.create_index("articles", {"number_of_shards": 1}, {"properties": {}})

        es.indices.create.assert_called_once_with(
            index="articles", settings={"number_of_shards": 1}, mappings={"properties": {}}
        )

    def test_create_index_without_body(self, client, es):
        """Test empty settings and mappings are omitted."""
        client.create_index("articles")

        es.indices.create.assert_called_once_with(index="articles")

    def test_index_exists(self, client, es):
        es.indices.exists.return_value = True
        assert client.index_exists("articles") is True

    def test_get_mappings(self, client, es):
        es.indices.get_mapping.return_value = {"articles": {"mappings": {}}}
        assert client.get_mappings("articles") == {"articles": {"mappings": {}}}

    def test_delete_failure(self, client, es):
        """Test a failed delete is wrapped."""
        es.indices.delete.side_effect = api_error(NotFoundError, 404)

        with pytest.raises(TransportFailure):
            client.delete_index("missing")

    def test_ping_failure_returns_false(self, client, es):
        es.ping.side_effect = ESConnectionError("down")
        assert client.ping() is False
