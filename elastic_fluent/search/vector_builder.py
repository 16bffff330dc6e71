"""
Vector search builder.
Compiles vector similarity, text, or hybrid queries into a script_score based
request body. The query mode is picked at compile time from which of the
vector and text queries are set.
"""

from copy import deepcopy
from typing import List, Dict, Optional, Any, Set, Union

from pydantic import BaseModel

from elastic_fluent.models.clauses import (
    AggSpec,
    Clause,
    RangeClause,
    TermClause,
    TermsClause,
    as_aggregation,
    as_clause
)
from elastic_fluent.models.schemas import SimilarityMetric, TextQuerySpec, VectorQuerySpec
from elastic_fluent.transport.base import (
    ISearchTransport,
    InvalidArgumentError,
    InvalidQueryError,
    MissingQuerySpecError
)
from elastic_fluent.utils.logger import LoggerMixin
from .executor import SearchExecutor, resolve_index
from .query_builder import build, require_non_negative, source_filter


SIMILARITY_SCRIPTS = {
    SimilarityMetric.COSINE: "cosineSimilarity(params.query_vector, '{field}') + 1.0",
    SimilarityMetric.DOT_PRODUCT: "dotProduct(params.query_vector, '{field}')",
    SimilarityMetric.L2_NORM: "1 / (1 + l2norm(params.query_vector, '{field}'))",
}


def similarity_script(metric: SimilarityMetric, field: str) -> str:
    """Painless source computing the similarity between params.query_vector and `field`."""
    return SIMILARITY_SCRIPTS[metric].format(field=field)


class VectorSearchBuilder(LoggerMixin):
    """
    Builder for vector, text and hybrid search requests.

    | vector | text | compiled query                                             |
    |--------|------|------------------------------------------------------------|
    | yes    | no   | script_score over the filters (or match_all)               |
    | no     | yes  | the text clause, in bool.must next to bool.filter if any   |
    | yes    | yes  | bool.should [script_score, text], minimum_should_match 1   |
    | no     | no   | MissingQuerySpecError                                      |

    Hybrid scores are the plain sum of the two boosted sub-scores; the cosine
    score range is [0, 2] and is not normalized against the text score.
    """

    def __init__(self, transport: Optional[ISearchTransport] = None):
        self.transport = transport
        self._indices: Optional[str] = None
        self._vector_query: Optional[VectorQuerySpec] = None
        self._text_query: Optional[TextQuerySpec] = None
        self._similarity_metric = SimilarityMetric.COSINE
        self._filters: List[Clause] = []
        self._from: Optional[int] = None
        self._size: Optional[int] = None
        self._source: Optional[Union[bool, List[str]]] = None
        self._aggregations: Dict[str, AggSpec] = {}

    def index(self, index: str) -> "VectorSearchBuilder":
        self._indices = resolve_index(index)
        return self

    def indices(self, indices: List[str]) -> "VectorSearchBuilder":
        self._indices = resolve_index(indices)
        return self

    def vector_query(self, field: str, vector: List[float], boost: float = 1.0) -> "VectorSearchBuilder":
        """
        Set the vector query.

        Args:
            field: Dense vector field to compare against
            vector: Query embedding; its length is not checked here
            boost: Weight of the vector score
        """
        if not vector:
            raise InvalidQueryError("Query vector must not be empty")
        self._vector_query = build(
            VectorQuerySpec,
            field=field,
            vector=list(vector),
            boost=boost,
            similarity_metric=self._similarity_metric
        )
        return self

    def text_query(self, clause: Dict[str, Any], boost: float = 1.0) -> "VectorSearchBuilder":
        """
        Set a text query (e.g. match, multi_match) for text-only or hybrid search.

        Args:
            clause: Query DSL clause, used as given
            boost: Weight of the text score in hybrid mode
        """
        if not isinstance(clause, dict):
            raise InvalidQueryError("Text query must be a query DSL mapping")
        self._text_query = build(TextQuerySpec, clause=deepcopy(clause), boost=boost)
        return self

    def similarity_metric(self, metric: Union[SimilarityMetric, str]) -> "VectorSearchBuilder":
        """Select the similarity for the current vector query and any set later."""
        try:
            self._similarity_metric = SimilarityMetric(metric)
        except ValueError as e:
            valid = ", ".join(m.value for m in SimilarityMetric)
            raise InvalidArgumentError(
                f"Invalid similarity metric: '{metric}'. Valid options are: {valid}"
            ) from e
        if self._vector_query is not None:
            self._vector_query = self._vector_query.model_copy(
                update={"similarity_metric": self._similarity_metric}
            )
        return self

    def filter(self, clause: Union[BaseModel, Dict[str, Any]]) -> "VectorSearchBuilder":
        self._filters.append(as_clause(clause))
        return self

    def term(self, field: str, value: Any) -> "VectorSearchBuilder":
        self._filters.append(build(TermClause, field=field, value=value))
        return self

    def terms(self, field: str, values: List[Any]) -> "VectorSearchBuilder":
        if isinstance(values, (str, bytes)) or not isinstance(values, (list, tuple, set)):
            raise InvalidQueryError(f"Terms values must be a list, got {type(values).__name__}")
        self._filters.append(build(TermsClause, field=field, values=list(values)))
        return self

    def range(self, field: str, conditions: Dict[str, Any]) -> "VectorSearchBuilder":
        if not isinstance(conditions, dict):
            raise InvalidQueryError("Range conditions must be a mapping of comparator to value")
        self._filters.append(build(RangeClause, field=field, conditions=conditions))
        return self

    def size(self, size: int) -> "VectorSearchBuilder":
        self._size = require_non_negative("size", size)
        return self

    def from_(self, offset: int) -> "VectorSearchBuilder":
        self._from = require_non_negative("from", offset)
        return self

    def source(self, source: Union[bool, List[str], Set[str]]) -> "VectorSearchBuilder":
        self._source = source_filter(source)
        return self

    def aggregation(self, name: str, aggregation: Union[BaseModel, Dict[str, Any]]) -> "VectorSearchBuilder":
        if not isinstance(name, str) or not name.strip():
            raise InvalidQueryError("Aggregation name must be a non-empty string")
        self._aggregations[name] = as_aggregation(aggregation)
        return self

    def _script_score(self, base_query: Dict[str, Any], boost: float) -> Dict[str, Any]:
        spec = self._vector_query
        return {
            "script_score": {
                "query": base_query,
                "script": {
                    "source": similarity_script(spec.similarity_metric, spec.field),
                    "params": {"query_vector": list(spec.vector)}
                },
                "boost": boost
            }
        }

    def _compile_filters(self) -> List[Dict[str, Any]]:
        return [clause.to_query() for clause in self._filters]

    def _vector_only_query(self) -> Dict[str, Any]:
        filters = self._compile_filters()
        base_query = {"bool": {"filter": filters}} if filters else {"match_all": {}}
        return self._script_score(base_query, self._vector_query.boost)

    def _text_only_query(self) -> Dict[str, Any]:
        filters = self._compile_filters()
        clause = deepcopy(self._text_query.clause)
        if filters:
            return {"bool": {"must": clause, "filter": filters}}
        return clause

    def _hybrid_query(self) -> Dict[str, Any]:
        text_part = deepcopy(self._text_query.clause)
        if self._text_query.boost != 1.0:
            text_part = {"bool": {"must": text_part, "boost": self._text_query.boost}}

        bool_query: Dict[str, Any] = {
            "should": [
                self._script_score({"match_all": {}}, self._vector_query.boost),
                text_part
            ],
            "minimum_should_match": 1
        }
        filters = self._compile_filters()
        if filters:
            bool_query["filter"] = filters
        return {"bool": bool_query}

    def compile(self) -> Dict[str, Any]:
        """
        Compile the request body.

        Raises:
            MissingQuerySpecError: If neither a vector nor a text query is set
        """
        if self._vector_query is None and self._text_query is None:
            raise MissingQuerySpecError("A vector query or a text query is required")

        if self._text_query is None:
            mode, query = "vector", self._vector_only_query()
        elif self._vector_query is None:
            mode, query = "text", self._text_only_query()
        else:
            mode, query = "hybrid", self._hybrid_query()

        body: Dict[str, Any] = {"query": query}
        if self._from is not None:
            body["from"] = self._from
        if self._size is not None:
            body["size"] = self._size
        if self._source is not None:
            body["_source"] = deepcopy(self._source)
        if self._aggregations:
            body["aggs"] = {name: agg.to_query() for name, agg in self._aggregations.items()}

        self.logger.debug(f"Compiled {mode} query ({self._similarity_metric.value})")
        return body

    def get_query(self) -> Dict[str, Any]:
        """Alias of compile()."""
        return self.compile()

    def execute(self) -> Dict[str, Any]:
        """Compile and run the search, returning the raw engine response."""
        if self.transport is None:
            raise InvalidQueryError("VectorSearchBuilder has no transport to execute against")
        if self._indices is None:
            raise InvalidQueryError("Call index() or indices() before execute()")
        return SearchExecutor(self.transport).execute(self._indices, self.compile())
