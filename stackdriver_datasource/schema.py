"""Pydantic schemas for the Stackdriver data source.

This module defines Pydantic schemas for:
- Panel queries in both the current and the legacy (flat) shape
- The request envelopes handed to the data source by the dashboard
- The series, annotation and selectable values handed back

Every model accepts and emits the camelCase wire shape used by the dashboard
and the backend proxy, and also accepts snake_case field names.
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag
from pydantic.alias_generators import to_camel

_WIRE_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class QueryType(str, Enum):
    """Kind of panel query."""

    METRICS = "metrics"
    SLO = "slo"


class MetricView(str, Enum):
    """Time series view requested from the API."""

    FULL = "FULL"
    HEADERS = "HEADERS"


class AuthenticationType(str, Enum):
    """How the backend proxy authenticates against Google Cloud."""

    JWT = "jwt"
    GCE = "gce"


# =============================================================================
# Queries
# =============================================================================


class MetricQuery(BaseModel):
    """Metric part of a panel query.

    Unknown fields are kept so that editor-only attributes survive a round
    trip through the data source.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="allow"
    )

    project_name: str = ""
    metric_type: str = ""
    filters: list[str | None] = Field(
        default_factory=list,
        description="Flat list read in chunks of key, operator, value, condition",
    )
    group_bys: list[str] = Field(default_factory=list)
    view: MetricView | None = None
    cross_series_reducer: str | None = None
    per_series_aligner: str | None = None
    alignment_period: str | None = None
    alias_by: str | None = None
    unit: str | None = None
    value_type: str | None = None
    metric_kind: str | None = None
    service: str | None = None


class SloQuery(BaseModel):
    """Service level objective part of a panel query."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="allow"
    )

    project_name: str = ""
    service_id: str = ""
    slo_id: str = ""
    selector_name: str = ""
    alignment_period: str | None = None
    per_series_aligner: str | None = None
    alias_by: str | None = None


class Query(BaseModel):
    """A panel query in the current schema."""

    model_config = _WIRE_CONFIG

    ref_id: str
    query_type: QueryType = QueryType.METRICS
    metric_query: MetricQuery
    slo_query: SloQuery | None = None
    hide: bool = False


class LegacyQuery(BaseModel):
    """A panel query saved before metric fields moved under ``metricQuery``.

    Metric attributes live at the top level and are collected in
    ``model_extra``. The declared fields other than ``ref_id`` and ``hide``
    are discarded on migration.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="allow"
    )

    ref_id: str
    hide: bool = False
    datasource: Any = None
    key: Any = None
    query_type: Any = None
    max_lines: Any = None
    metric: Any = None


def _query_schema_version(value: Any) -> str:
    if isinstance(value, dict):
        return "current" if "metricQuery" in value or "metric_query" in value else "legacy"
    return "current" if isinstance(value, Query) else "legacy"


AnyQuery = Annotated[
    Union[Annotated[Query, Tag("current")], Annotated[LegacyQuery, Tag("legacy")]],
    Discriminator(_query_schema_version),
]


# =============================================================================
# Requests
# =============================================================================


class TimeRange(BaseModel):
    """Absolute time range of a dashboard request."""

    model_config = ConfigDict(populate_by_name=True)

    from_: datetime = Field(alias="from")
    to: datetime

    def from_ms(self) -> str:
        """Start of the range as epoch milliseconds, stringified."""
        return str(int(self.from_.timestamp() * 1000))

    def to_ms(self) -> str:
        """End of the range as epoch milliseconds, stringified."""
        return str(int(self.to.timestamp() * 1000))


class DataQueryRequest(BaseModel):
    """A batch of panel queries issued for one panel refresh."""

    model_config = _WIRE_CONFIG

    targets: list[AnyQuery] = Field(default_factory=list)
    range: TimeRange | None = None
    scoped_vars: dict[str, Any] = Field(default_factory=dict)
    interval_ms: int | None = None


class AnnotationTarget(BaseModel):
    """Editor settings of a Stackdriver annotation query."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="allow"
    )

    project_name: str = ""
    metric_type: str = ""
    title: str = ""
    text: str = ""
    tags: str = ""
    filters: list[str | None] = Field(default_factory=list)


class AnnotationSpec(BaseModel):
    """Annotation definition as stored on the dashboard."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="allow"
    )

    name: str | None = None
    target: AnnotationTarget = Field(default_factory=AnnotationTarget)


class AnnotationQueryRequest(BaseModel):
    """Options passed to ``annotation_query``."""

    model_config = _WIRE_CONFIG

    annotation: AnnotationSpec
    range: TimeRange
    scoped_vars: dict[str, Any] = Field(default_factory=dict)


class MetricFindQueryType(str, Enum):
    """Template variable query types."""

    PROJECTS = "projects"
    SERVICES = "services"
    DEFAULT_PROJECT = "defaultProject"
    METRIC_TYPES = "metricTypes"
    LABEL_KEYS = "labelKeys"
    LABEL_VALUES = "labelValues"
    RESOURCE_TYPES = "resourceTypes"
    AGGREGATIONS = "aggregations"
    ALIGNERS = "aligners"
    ALIGNMENT_PERIODS = "alignmentPeriods"
    SELECTORS = "selectors"
    SLO_SERVICES = "sloServices"
    SLO = "slo"


class VariableQueryData(BaseModel):
    """Template variable query as saved by the variable editor."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="allow"
    )

    selected_query_type: str = MetricFindQueryType.PROJECTS.value
    project_name: str = ""
    selected_service: str = ""
    selected_metric_type: str = ""
    label_key: str = ""
    selected_slo_service: str = Field(default="", alias="selectedSLOService")
    ref_id: str = "StackdriverVariableQueryEditor"


# =============================================================================
# Results
# =============================================================================


class TimeSeries(BaseModel):
    """One series as consumed by the dashboard."""

    model_config = _WIRE_CONFIG

    target: str
    datapoints: list[list[Any]] = Field(default_factory=list)
    ref_id: str | None = None
    meta: dict[str, Any] | None = None
    unit: str | None = None


class DataQueryResponse(BaseModel):
    """Result of ``query``."""

    data: list[TimeSeries] = Field(default_factory=list)


class Annotation(BaseModel):
    """One annotation event."""

    time: int | None
    title: Any = None
    text: Any = None
    tags: list[str] = Field(default_factory=list)
    annotation: AnnotationSpec | None = None


class SelectableValue(BaseModel):
    """A ``{value, label}`` pair used to populate selection lists."""

    value: str
    label: str


class MetricDescriptor(BaseModel):
    """A Cloud Monitoring metric descriptor, augmented with service names."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="allow"
    )

    type: str
    display_name: str = ""
    service: str = ""
    service_short_name: str = ""
    value_type: str | None = None
    metric_kind: str | None = None
    unit: str | None = None
    description: str | None = None


class MetricFindValue(BaseModel):
    """An option of a template variable."""

    text: str
    value: Any = None


class TestResult(BaseModel):
    """Outcome of a connectivity test."""

    status: Literal["success", "error"]
    message: str
