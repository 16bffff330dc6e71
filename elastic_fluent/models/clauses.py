"""
Query clause and aggregation models.
Each clause kind is its own frozen model so malformed shapes are rejected when
the clause is built, not when the request reaches the engine.
"""

from copy import deepcopy
from typing import Annotated, Any, Dict, List, Literal, Optional, Union, get_args
from pydantic import BaseModel, ConfigDict, Field, field_validator

from elastic_fluent.transport.base import InvalidQueryError


RANGE_COMPARATORS = {"gt", "gte", "lt", "lte"}
RANGE_OPTIONS = {"format", "time_zone", "boost", "relation"}


def require_field(field: Any) -> str:
    """Validate a field name argument."""
    if not isinstance(field, str) or not field.strip():
        raise InvalidQueryError(f"Field name must be a non-empty string, got {field!r}")
    return field


class _Clause(BaseModel):
    model_config = ConfigDict(frozen=True)

    field: str

    @field_validator('field', mode='before')
    @classmethod
    def field_not_empty(cls, v):
        return require_field(v)


class MatchClause(_Clause):
    """Full text match on a single field."""
    kind: Literal["match"] = "match"
    value: Any
    boost: float = 1.0

    def to_query(self) -> Dict[str, Any]:
        return {"match": {self.field: {"query": deepcopy(self.value), "boost": self.boost}}}


class MatchPhraseClause(_Clause):
    """Exact phrase match."""
    kind: Literal["match_phrase"] = "match_phrase"
    value: str

    def to_query(self) -> Dict[str, Any]:
        return {"match_phrase": {self.field: self.value}}


class TermClause(_Clause):
    """Exact value filter."""
    kind: Literal["term"] = "term"
    value: Any

    def to_query(self) -> Dict[str, Any]:
        return {"term": {self.field: deepcopy(self.value)}}


class TermsClause(_Clause):
    """Filter on any of several exact values."""
    kind: Literal["terms"] = "terms"
    values: List[Any]

    @field_validator('values')
    @classmethod
    def values_not_empty(cls, v):
        if not v:
            raise InvalidQueryError("Terms clause requires at least one value")
        return v

    def to_query(self) -> Dict[str, Any]:
        return {"terms": {self.field: deepcopy(list(self.values))}}


class RangeClause(_Clause):
    """Range filter, e.g. {"gte": 4, "lt": 10}."""
    kind: Literal["range"] = "range"
    conditions: Dict[str, Any]

    @field_validator('conditions')
    @classmethod
    def known_comparators(cls, v):
        unknown = set(v) - RANGE_COMPARATORS - RANGE_OPTIONS
        if unknown:
            raise InvalidQueryError(f"Unknown range comparator(s): {sorted(unknown)}")
        if not RANGE_COMPARATORS & set(v):
            raise InvalidQueryError(
                f"Range clause needs at least one of {sorted(RANGE_COMPARATORS)}"
            )
        return v

    def to_query(self) -> Dict[str, Any]:
        return {"range": {self.field: deepcopy(dict(self.conditions))}}


class RawClause(BaseModel):
    """A caller supplied query DSL clause, passed through as-is."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["raw"] = "raw"
    body: Dict[str, Any]

    @field_validator('body')
    @classmethod
    def body_not_empty(cls, v):
        if not v:
            raise InvalidQueryError("Raw clause must not be empty")
        return v

    def to_query(self) -> Dict[str, Any]:
        return deepcopy(dict(self.body))


Clause = Annotated[
    Union[MatchClause, MatchPhraseClause, TermClause, TermsClause, RangeClause, RawClause],
    Field(discriminator="kind")
]
CLAUSE_TYPES = get_args(get_args(Clause)[0])


def as_clause(clause: Union[BaseModel, Dict[str, Any]]) -> Clause:
    """Accept either a clause model or a raw DSL dict."""
    if isinstance(clause, dict):
        return RawClause(body=clause)
    if not isinstance(clause, CLAUSE_TYPES):
        raise InvalidQueryError(f"Unsupported clause type: {type(clause).__name__}")
    return clause


# Aggregations

class TermsAgg(_Clause):
    """Bucket documents by the values of a field."""
    kind: Literal["terms"] = "terms"
    size: Optional[int] = Field(None, gt=0)

    def to_query(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"field": self.field}
        if self.size is not None:
            body["size"] = self.size
        return {"terms": body}


class MetricAgg(_Clause):
    """Single value metric aggregation."""
    kind: Literal["metric"] = "metric"
    metric: Literal["avg", "sum", "min", "max", "cardinality", "value_count"]

    def to_query(self) -> Dict[str, Any]:
        return {self.metric: {"field": self.field}}


class DateHistogramAgg(_Clause):
    """Bucket documents by calendar interval."""
    kind: Literal["date_histogram"] = "date_histogram"
    calendar_interval: str = "day"

    def to_query(self) -> Dict[str, Any]:
        return {"date_histogram": {"field": self.field, "calendar_interval": self.calendar_interval}}


class RawAgg(BaseModel):
    """A caller supplied aggregation body."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["raw"] = "raw"
    body: Dict[str, Any]

    @field_validator('body')
    @classmethod
    def body_not_empty(cls, v):
        if not v:
            raise InvalidQueryError("Aggregation body must not be empty")
        return v

    def to_query(self) -> Dict[str, Any]:
        return deepcopy(dict(self.body))


AggSpec = Annotated[
    Union[TermsAgg, MetricAgg, DateHistogramAgg, RawAgg],
    Field(discriminator="kind")
]
AGG_TYPES = get_args(get_args(AggSpec)[0])


def as_aggregation(aggregation: Union[BaseModel, Dict[str, Any]]) -> AggSpec:
    """Accept either an aggregation model or a raw aggregation dict."""
    if isinstance(aggregation, dict):
        return RawAgg(body=aggregation)
    if not isinstance(aggregation, AGG_TYPES):
        raise InvalidQueryError(f"Unsupported aggregation type: {type(aggregation).__name__}")
    return aggregation
