"""
Tests for the fluent search builder and the search executor.
"""

import json

import pytest

from elastic_fluent.models.clauses import DateHistogramAgg, MatchClause, MetricAgg, TermsAgg
from elastic_fluent.search.executor import SearchExecutor, resolve_index
from elastic_fluent.search.query_builder import SearchBuilder
from elastic_fluent.transport.base import InvalidQueryError, TransportFailure


class TestSearchBuilderCompile:
    """Test compiling accumulated clauses into a request body."""

    def test_match_and_term(self):
        """Test the canonical match + term request."""
        body = SearchBuilder().match("title", "elasticsearch").term("tags", "php").compile()

        assert body == {
            "query": {
                "bool": {
                    "must": [{"match": {"title": {"query": "elasticsearch", "boost": 1.0}}}],
                    "filter": [{"term": {"tags": "php"}}]
                }
            }
        }

    def test_empty_builder_has_no_query(self):
        """Test that a builder without clauses matches everything."""
        assert SearchBuilder().compile() == {}
        assert "query" not in SearchBuilder().size(5).compile()

    def test_filter_only(self):
        """Test that exact filters alone compile to bool.filter."""
        body = (
            SearchBuilder()
            .term("status", "published")
            .terms("tags", ["php", "python"])
            .range("rating", {"gte": 4})
            .compile()
        )

        assert body == {
            "query": {
                "bool": {
                    "filter": [
                        {"term": {"status": "published"}},
                        {"terms": {"tags": ["php", "python"]}},
                        {"range": {"rating": {"gte": 4}}}
                    ]
                }
            }
        }

    def test_insertion_order_preserved(self):
        """Test that clause order within must follows call order."""
        body = (
            SearchBuilder()
            .match("title", "a")
            .match_phrase("body", "b c")
            .match("summary", "d", boost=2.0)
            .compile()
        )

        assert body["query"]["bool"]["must"] == [
            {"match": {"title": {"query": "a", "boost": 1.0}}},
            {"match_phrase": {"body": "b c"}},
            {"match": {"summary": {"query": "d", "boost": 2.0}}}
        ]

    def test_should_only_defaults_minimum_should_match(self):
        """Test should-only builders require one matching clause."""
        body = (
            SearchBuilder()
            .should({"match": {"title": "x"}})
            .should(MatchClause(field="body", value="y"))
            .compile()
        )

        assert body["query"]["bool"]["minimum_should_match"] == 1
        assert len(body["query"]["bool"]["should"]) == 2

    def test_should_with_must_has_no_default_minimum(self):
        """Test should clauses only boost when must is present."""
        body = SearchBuilder().match("title", "x").should({"term": {"featured": True}}).compile()

        assert "minimum_should_match" not in body["query"]["bool"]

    def test_explicit_minimum_should_match(self):
        """Test an explicit minimum_should_match is kept."""
        body = (
            SearchBuilder()
            .filter({"term": {"lang": "en"}})
            .should({"match": {"a": 1}})
            .should({"match": {"b": 2}}, minimum_should_match=2)
            .compile()
        )

        assert body["query"]["bool"]["minimum_should_match"] == 2

    def test_request_options_key_order(self):
        """Test options are emitted after the query in a fixed order."""
        body = (
            SearchBuilder()
            .aggregation("by_tag", TermsAgg(field="tags", size=5))
            .highlight("content", pre_tags=["<em>"], post_tags=["</em>"])
            .source(["title", "content"])
            .sort("date", "desc")
            .sort("_score")
            .size(10)
            .from_(20)
            .match("content", "search")
            .compile()
        )

        assert list(body) == ["query", "from", "size", "sort", "_source", "highlight", "aggs"]
        assert body["from"] == 20
        assert body["size"] == 10
        assert body["sort"] == [{"date": {"order": "desc"}}, {"_score": {"order": "asc"}}]
        assert body["_source"] == ["title", "content"]
        assert body["highlight"] == {
            "fields": {"content": {}},
            "pre_tags": ["<em>"],
            "post_tags": ["</em>"]
        }
        assert body["aggs"] == {"by_tag": {"terms": {"field": "tags", "size": 5}}}

    def test_aggregation_models_and_raw(self):
        """Test aggregation models and raw bodies side by side."""
        body = (
            SearchBuilder()
            .aggregation("avg_rating", MetricAgg(field="rating", metric="avg"))
            .aggregation("per_day", DateHistogramAgg(field="date"))
            .aggregation("raw", {"max": {"field": "views"}})
            .compile()
        )

        assert body["aggs"] == {
            "avg_rating": {"avg": {"field": "rating"}},
            "per_day": {"date_histogram": {"field": "date", "calendar_interval": "day"}},
            "raw": {"max": {"field": "views"}}
        }

    def test_source_disabled(self):
        """Test disabling _source."""
        assert SearchBuilder().source(False).compile() == {"_source": False}

    def test_compile_is_idempotent(self):
        """Test compile returns equal, independent structures."""
        builder = SearchBuilder().match("title", "x").term("tags", "y").sort("date")

        first = builder.compile()
        first["query"]["bool"]["must"].append({"match_all": {}})
        second = builder.compile()

        assert second == builder.compile()
        assert len(second["query"]["bool"]["must"]) == 1

    def test_compiled_raw_clause_is_a_copy(self):
        """Test mutating compiled output does not leak into the builder."""
        builder = SearchBuilder().filter({"term": {"lang": "en"}})

        body = builder.compile()
        body["query"]["bool"]["filter"][0]["term"]["lang"] = "de"

        assert builder.compile()["query"]["bool"]["filter"] == [{"term": {"lang": "en"}}]

    def test_copy_is_independent(self):
        """Test cloned builders do not share clause lists."""
        builder = SearchBuilder().match("title", "x")
        clone = builder.copy().term("tags", "y")

        assert "filter" not in builder.compile()["query"]["bool"]
        assert clone.compile()["query"]["bool"]["filter"] == [{"term": {"tags": "y"}}]

    def test_build_query_alias(self):
        """Test build_query matches compile."""
        builder = SearchBuilder().match("title", "x")
        assert builder.build_query() == builder.compile()

    def test_same_calls_serialize_identically(self):
        """Test two builders fed the same calls produce byte-identical JSON."""
        def build_search():
            return (
                SearchBuilder()
                .match("title", "elasticsearch", boost=2.0)
                .term("tags", "python")
                .range("published", {"gte": "2024-01-01", "lt": "2025-01-01"})
                .sort("published", "desc")
                .highlight(["title", "content"], fragment_size=150)
                .aggregation("by_tag", TermsAgg(field="tags", size=10))
                .size(20)
            )

        first = json.dumps(build_search().compile())
        second = json.dumps(build_search().compile())

        assert first == second
        assert json.loads(first) == build_search().compile()

    def test_source_accepts_field_set(self):
        """Test a set of fields is emitted in sorted order."""
        body = SearchBuilder().source({"title", "content", "author"}).compile()

        assert body["_source"] == ["author", "content", "title"]


class TestSearchBuilderValidation:
    """Test that malformed input fails at the offending call."""

    @pytest.mark.parametrize("field", ["", "   ", None, 42])
    def test_invalid_field(self, field):
        """Test empty or non-string field names."""
        with pytest.raises(InvalidQueryError):
            SearchBuilder().match(field, "x")

    def test_negative_size_and_from(self):
        """Test pagination must be non-negative."""
        with pytest.raises(InvalidQueryError):
            SearchBuilder().size(-1)
        with pytest.raises(InvalidQueryError):
            SearchBuilder().from_(-5)

    def test_non_integer_size(self):
        """Test size rejects non-integers."""
        with pytest.raises(InvalidQueryError):
            SearchBuilder().size("10")

    def test_invalid_sort_order(self):
        """Test sort order must be asc or desc."""
        with pytest.raises(InvalidQueryError):
            SearchBuilder().sort("date", "sideways")

    def test_terms_requires_list(self):
        """Test terms rejects a bare string and an empty list."""
        with pytest.raises(InvalidQueryError):
            SearchBuilder().terms("tags", "php")
        with pytest.raises(InvalidQueryError):
            SearchBuilder().terms("tags", [])

    def test_range_requires_comparator(self):
        """Test range needs at least one known comparator."""
        with pytest.raises(InvalidQueryError):
            SearchBuilder().range("rating", {})
        with pytest.raises(InvalidQueryError):
            SearchBuilder().range("rating", {"above": 3})
        with pytest.raises(InvalidQueryError):
            SearchBuilder().range("rating", {"format": "yyyy"})

    def test_empty_raw_clause(self):
        """Test raw clauses must not be empty."""
        with pytest.raises(InvalidQueryError):
            SearchBuilder().must({})

    def test_unsupported_clause_type(self):
        """Test non-clause objects are rejected."""
        with pytest.raises(InvalidQueryError):
            SearchBuilder().filter("status:published")

    def test_aggregation_model_is_not_a_clause(self):
        """Test models outside the clause variants are rejected as clauses and vice versa."""
        with pytest.raises(InvalidQueryError, match="Unsupported clause type"):
            SearchBuilder().filter(TermsAgg(field="tags"))
        with pytest.raises(InvalidQueryError, match="Unsupported aggregation type"):
            SearchBuilder().aggregation("by_title", MatchClause(field="title", value="x"))

    def test_highlight_requires_fields(self):
        """Test highlight needs at least one field."""
        with pytest.raises(InvalidQueryError):
            SearchBuilder().highlight([])

    def test_invalid_source(self):
        """Test _source accepts bools or non-empty field lists only."""
        with pytest.raises(InvalidQueryError):
            SearchBuilder().source([])
        with pytest.raises(InvalidQueryError):
            SearchBuilder().source("title")

    def test_invalid_aggregation_name(self):
        """Test aggregation names must be non-empty strings."""
        with pytest.raises(InvalidQueryError):
            SearchBuilder().aggregation("", {"avg": {"field": "x"}})

    def test_failed_call_leaves_builder_unchanged(self):
        """Test a rejected call does not modify the builder."""
        builder = SearchBuilder().match("title", "x")
        before = builder.compile()

        with pytest.raises(InvalidQueryError):
            builder.terms("tags", [])

        assert builder.compile() == before


class TestSearchExecution:
    """Test dispatching compiled queries."""

    def test_execute_dispatches_compiled_body(self, transport):
        """Test execute sends the compiled body to the index target."""
        builder = SearchBuilder(transport).indices(["articles", "posts"]).match("title", "x")

        response = builder.execute()

        assert response is transport.search_response
        assert transport.calls == [("search", "articles,posts", builder.compile())]

    def test_execute_without_indices(self, transport):
        """Test execute requires an index target."""
        with pytest.raises(InvalidQueryError):
            SearchBuilder(transport).match("title", "x").execute()

    def test_execute_without_transport(self):
        """Test execute requires a transport."""
        with pytest.raises(InvalidQueryError):
            SearchBuilder().indices("articles").execute()

    def test_executor_returns_response_unmodified(self, transport):
        """Test the executor passes the native response through."""
        transport.search_response = {"hits": {"hits": [{"_id": "1", "_score": 2.5}]}, "took": 3}

        response = SearchExecutor(transport).execute("articles", {"size": 1})

        assert response == {"hits": {"hits": [{"_id": "1", "_score": 2.5}]}, "took": 3}

    def test_executor_propagates_transport_failure(self, transport):
        """Test transport failures are not swallowed."""
        transport.fail_with = TransportFailure("cluster unavailable")

        with pytest.raises(TransportFailure):
            SearchExecutor(transport).execute("articles", {})

    @pytest.mark.parametrize("target", ["", [], [""], None, 7])
    def test_invalid_index_target(self, target):
        """Test invalid index targets are rejected."""
        with pytest.raises(InvalidQueryError):
            resolve_index(target)
