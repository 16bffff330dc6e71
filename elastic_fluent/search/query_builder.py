"""
Fluent search request builder.
Accumulates query clauses and request options and compiles them into a single
Elasticsearch request body.
"""

from copy import deepcopy
from typing import List, Dict, Optional, Any, Set, Union

from pydantic import BaseModel, ValidationError

from elastic_fluent.models.clauses import (
    AggSpec,
    Clause,
    MatchClause,
    MatchPhraseClause,
    TermClause,
    TermsClause,
    RangeClause,
    as_aggregation,
    as_clause,
    require_field
)
from elastic_fluent.models.schemas import HighlightSpec, SortField, SortOrder
from elastic_fluent.transport.base import ISearchTransport, InvalidQueryError
from elastic_fluent.utils.logger import LoggerMixin
from .executor import SearchExecutor, resolve_index


def build(model, **kwargs):
    """Construct a clause or option model, reporting bad shapes as InvalidQueryError."""
    try:
        return model(**kwargs)
    except ValidationError as e:
        raise InvalidQueryError(f"Invalid {model.__name__}: {e.errors()[0]['msg']}") from e


def require_non_negative(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidQueryError(f"'{name}' must be a non-negative integer, got {value!r}")
    return value


def source_filter(source: Any) -> Union[bool, List[str]]:
    """Validate a `_source` option: a bool, or a list or set of field names."""
    if isinstance(source, bool):
        return source
    if isinstance(source, (set, frozenset)) and source:
        return sorted(require_field(field) for field in source)
    if isinstance(source, (list, tuple)) and source:
        return [require_field(field) for field in source]
    raise InvalidQueryError("Source filter must be a bool or a non-empty list or set of fields")


class SearchBuilder(LoggerMixin):
    """
    Mutable, single-owner search request builder.

    Text queries go to `bool.must`, exact filters (term, terms, range) go to
    `bool.filter`. Clause order within each section is insertion order.
    Every mutator validates its arguments immediately and returns the builder.
    """

    def __init__(self, transport: Optional[ISearchTransport] = None):
        self.transport = transport
        self._indices: Optional[str] = None
        self._must: List[Clause] = []
        self._filter: List[Clause] = []
        self._should: List[Clause] = []
        self._minimum_should_match: Optional[int] = None
        self._from: Optional[int] = None
        self._size: Optional[int] = None
        self._sort: List[SortField] = []
        self._source: Optional[Union[bool, List[str]]] = None
        self._highlight: Optional[HighlightSpec] = None
        self._aggregations: Dict[str, AggSpec] = {}

    def indices(self, indices: Union[str, List[str]]) -> "SearchBuilder":
        """Set the index (or indices) to search."""
        self._indices = resolve_index(indices)
        return self

    def match(self, field: str, value: Any, boost: float = 1.0) -> "SearchBuilder":
        self._must.append(build(MatchClause, field=field, value=value, boost=boost))
        return self

    def match_phrase(self, field: str, value: str) -> "SearchBuilder":
        self._must.append(build(MatchPhraseClause, field=field, value=value))
        return self

    def term(self, field: str, value: Any) -> "SearchBuilder":
        self._filter.append(build(TermClause, field=field, value=value))
        return self

    def terms(self, field: str, values: List[Any]) -> "SearchBuilder":
        if isinstance(values, (str, bytes)) or not isinstance(values, (list, tuple, set)):
            raise InvalidQueryError(f"Terms values must be a list, got {type(values).__name__}")
        self._filter.append(build(TermsClause, field=field, values=list(values)))
        return self

    def range(self, field: str, conditions: Dict[str, Any]) -> "SearchBuilder":
        if not isinstance(conditions, dict):
            raise InvalidQueryError("Range conditions must be a mapping of comparator to value")
        self._filter.append(build(RangeClause, field=field, conditions=conditions))
        return self

    def must(self, clause: Union[BaseModel, Dict[str, Any]]) -> "SearchBuilder":
        """Add any clause, model or raw dict, to `bool.must`."""
        self._must.append(as_clause(clause))
        return self

    def filter(self, clause: Union[BaseModel, Dict[str, Any]]) -> "SearchBuilder":
        """Add any clause, model or raw dict, to `bool.filter`."""
        self._filter.append(as_clause(clause))
        return self

    def should(
        self,
        clause: Union[BaseModel, Dict[str, Any]],
        minimum_should_match: Optional[int] = None
    ) -> "SearchBuilder":
        self._should.append(as_clause(clause))
        if minimum_should_match is not None:
            self._minimum_should_match = require_non_negative(
                "minimum_should_match", minimum_should_match
            )
        return self

    def from_(self, offset: int) -> "SearchBuilder":
        self._from = require_non_negative("from", offset)
        return self

    def size(self, size: int) -> "SearchBuilder":
        self._size = require_non_negative("size", size)
        return self

    def sort(self, field: str, order: Union[SortOrder, str] = SortOrder.ASC) -> "SearchBuilder":
        """Append a sort criterion; call repeatedly for secondary sorts."""
        require_field(field)
        try:
            order = SortOrder(order)
        except ValueError as e:
            raise InvalidQueryError(f"Invalid sort order: {order!r}") from e
        self._sort.append(SortField(field=field, order=order))
        return self

    def source(self, source: Union[bool, List[str], Set[str]]) -> "SearchBuilder":
        """Enable/disable `_source` or restrict it to some fields; sets are sorted."""
        self._source = source_filter(source)
        return self

    def highlight(
        self,
        fields: Union[str, List[str]],
        pre_tags: Optional[List[str]] = None,
        post_tags: Optional[List[str]] = None,
        fragment_size: Optional[int] = None,
        number_of_fragments: Optional[int] = None
    ) -> "SearchBuilder":
        fields = [fields] if isinstance(fields, str) else list(fields)
        if not fields:
            raise InvalidQueryError("Highlight requires at least one field")
        self._highlight = build(
            HighlightSpec,
            fields=[require_field(field) for field in fields],
            pre_tags=pre_tags,
            post_tags=post_tags,
            fragment_size=fragment_size,
            number_of_fragments=number_of_fragments
        )
        return self

    def aggregation(self, name: str, aggregation: Union[BaseModel, Dict[str, Any]]) -> "SearchBuilder":
        if not isinstance(name, str) or not name.strip():
            raise InvalidQueryError("Aggregation name must be a non-empty string")
        self._aggregations[name] = as_aggregation(aggregation)
        return self

    def _compile_query(self) -> Optional[Dict[str, Any]]:
        if not (self._must or self._filter or self._should):
            return None

        bool_query: Dict[str, Any] = {}
        if self._must:
            bool_query["must"] = [clause.to_query() for clause in self._must]
        if self._filter:
            bool_query["filter"] = [clause.to_query() for clause in self._filter]
        if self._should:
            bool_query["should"] = [clause.to_query() for clause in self._should]
            minimum = self._minimum_should_match
            # Without must/filter, should clauses are what selects documents
            if minimum is None and not (self._must or self._filter):
                minimum = 1
            if minimum is not None:
                bool_query["minimum_should_match"] = minimum
        return {"bool": bool_query}

    def compile(self) -> Dict[str, Any]:
        """
        Compile the accumulated state into a request body.

        Returns a fresh structure on every call; the builder is not modified.
        A builder without clauses produces no `query` key (match all).
        """
        body: Dict[str, Any] = {}

        query = self._compile_query()
        if query is not None:
            body["query"] = query
        if self._from is not None:
            body["from"] = self._from
        if self._size is not None:
            body["size"] = self._size
        if self._sort:
            body["sort"] = [sort_field.to_query() for sort_field in self._sort]
        if self._source is not None:
            body["_source"] = deepcopy(self._source)
        if self._highlight is not None:
            body["highlight"] = self._highlight.to_query()
        if self._aggregations:
            body["aggs"] = {name: agg.to_query() for name, agg in self._aggregations.items()}

        self.logger.debug(f"Compiled search body: {body}")
        return body

    def build_query(self) -> Dict[str, Any]:
        """Alias of compile()."""
        return self.compile()

    def copy(self) -> "SearchBuilder":
        """Independent clone sharing only the transport."""
        clone = SearchBuilder(self.transport)
        clone._indices = self._indices
        clone._must = list(self._must)
        clone._filter = list(self._filter)
        clone._should = list(self._should)
        clone._minimum_should_match = self._minimum_should_match
        clone._from = self._from
        clone._size = self._size
        clone._sort = list(self._sort)
        clone._source = deepcopy(self._source)
        clone._highlight = self._highlight
        clone._aggregations = dict(self._aggregations)
        return clone

    def execute(self) -> Dict[str, Any]:
        """Compile and run the search, returning the raw engine response."""
        if self.transport is None:
            raise InvalidQueryError("SearchBuilder has no transport to execute against")
        if self._indices is None:
            raise InvalidQueryError("Call indices() before execute()")
        return SearchExecutor(self.transport).execute(self._indices, self.compile())
