"""Static lookup tables for Cloud Monitoring queries.

Contains the unit mapping used to label panel series, the aligner and
reducer catalogues (with the value types and metric kinds each supports),
alignment periods and SLO selectors.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .templating import TemplateInterpolator


class MetricKind(str, Enum):
    METRIC_KIND_UNSPECIFIED = "METRIC_KIND_UNSPECIFIED"
    GAUGE = "GAUGE"
    DELTA = "DELTA"
    CUMULATIVE = "CUMULATIVE"


class ValueType(str, Enum):
    VALUE_TYPE_UNSPECIFIED = "VALUE_TYPE_UNSPECIFIED"
    BOOL = "BOOL"
    INT64 = "INT64"
    DOUBLE = "DOUBLE"
    STRING = "STRING"
    DISTRIBUTION = "DISTRIBUTION"
    MONEY = "MONEY"


# Cloud Monitoring unit -> dashboard unit
STACKDRIVER_UNIT_MAPPINGS: dict[str, str] = {
    "bit": "bits",
    "By": "bytes",
    "s": "s",
    "min": "m",
    "h": "h",
    "d": "d",
    "us": "µs",
    "ms": "ms",
    "ns": "ns",
    "percent": "percent",
    "MiBy": "mbytes",
    "By/s": "Bps",
    "GBy": "decgbytes",
}


@dataclass(frozen=True)
class MetricOption:
    """An aligner or reducer and the metrics it applies to."""

    text: str
    value: str
    value_types: tuple[ValueType, ...] = field(default_factory=tuple)
    metric_kinds: tuple[MetricKind, ...] = field(default_factory=tuple)

    def supports(self, value_type: str | None, metric_kind: str | None) -> bool:
        return value_type in {v.value for v in self.value_types} and metric_kind in {
            k.value for k in self.metric_kinds
        }

    def to_dict(self) -> dict[str, Any]:
        return {"text": self.text, "value": self.value, "label": self.text}


_NUMERIC = (ValueType.INT64, ValueType.DOUBLE, ValueType.MONEY)
_NUMERIC_DISTRIBUTION = (*_NUMERIC, ValueType.DISTRIBUTION)
_GAUGE_DELTA = (MetricKind.GAUGE, MetricKind.DELTA)

AGGREGATION_OPTIONS: tuple[MetricOption, ...] = (
    MetricOption(
        "none",
        "REDUCE_NONE",
        (*_NUMERIC_DISTRIBUTION, ValueType.BOOL, ValueType.STRING),
        (
            MetricKind.GAUGE,
            MetricKind.DELTA,
            MetricKind.CUMULATIVE,
            MetricKind.METRIC_KIND_UNSPECIFIED,
        ),
    ),
    MetricOption("mean", "REDUCE_MEAN", _NUMERIC_DISTRIBUTION, _GAUGE_DELTA),
    MetricOption("min", "REDUCE_MIN", _NUMERIC, _GAUGE_DELTA),
    MetricOption("max", "REDUCE_MAX", _NUMERIC, _GAUGE_DELTA),
    MetricOption("sum", "REDUCE_SUM", _NUMERIC_DISTRIBUTION, _GAUGE_DELTA),
    MetricOption("std. dev.", "REDUCE_STDDEV", _NUMERIC_DISTRIBUTION, _GAUGE_DELTA),
    MetricOption(
        "count",
        "REDUCE_COUNT",
        (*_NUMERIC, ValueType.BOOL, ValueType.STRING, ValueType.DISTRIBUTION),
        _GAUGE_DELTA,
    ),
    MetricOption("count true", "REDUCE_COUNT_TRUE", (ValueType.BOOL,), _GAUGE_DELTA),
    MetricOption("count false", "REDUCE_COUNT_FALSE", (ValueType.BOOL,), _GAUGE_DELTA),
    MetricOption(
        "99th percentile", "REDUCE_PERCENTILE_99", _NUMERIC_DISTRIBUTION, _GAUGE_DELTA
    ),
    MetricOption(
        "95th percentile", "REDUCE_PERCENTILE_95", _NUMERIC_DISTRIBUTION, _GAUGE_DELTA
    ),
    MetricOption(
        "50th percentile", "REDUCE_PERCENTILE_50", _NUMERIC_DISTRIBUTION, _GAUGE_DELTA
    ),
    MetricOption(
        "5th percentile", "REDUCE_PERCENTILE_05", _NUMERIC_DISTRIBUTION, _GAUGE_DELTA
    ),
)

ALIGN_OPTIONS: tuple[MetricOption, ...] = (
    MetricOption(
        "delta",
        "ALIGN_DELTA",
        _NUMERIC_DISTRIBUTION,
        (MetricKind.CUMULATIVE, MetricKind.DELTA),
    ),
    MetricOption(
        "rate", "ALIGN_RATE", _NUMERIC, (MetricKind.CUMULATIVE, MetricKind.DELTA)
    ),
    MetricOption("interpolate", "ALIGN_INTERPOLATE", _NUMERIC, (MetricKind.GAUGE,)),
    MetricOption(
        "next older",
        "ALIGN_NEXT_OLDER",
        (
            *_NUMERIC_DISTRIBUTION,
            ValueType.STRING,
            ValueType.VALUE_TYPE_UNSPECIFIED,
            ValueType.BOOL,
        ),
        (MetricKind.GAUGE,),
    ),
    MetricOption("min", "ALIGN_MIN", _NUMERIC, _GAUGE_DELTA),
    MetricOption("max", "ALIGN_MAX", _NUMERIC, _GAUGE_DELTA),
    MetricOption("mean", "ALIGN_MEAN", _NUMERIC, _GAUGE_DELTA),
    MetricOption("count", "ALIGN_COUNT", (*_NUMERIC, ValueType.BOOL), _GAUGE_DELTA),
    MetricOption("sum", "ALIGN_SUM", _NUMERIC_DISTRIBUTION, _GAUGE_DELTA),
    MetricOption("stddev", "ALIGN_STDDEV", _NUMERIC, _GAUGE_DELTA),
    MetricOption("count true", "ALIGN_COUNT_TRUE", (ValueType.BOOL,), _GAUGE_DELTA),
    MetricOption("count false", "ALIGN_COUNT_FALSE", (ValueType.BOOL,), _GAUGE_DELTA),
    MetricOption(
        "fraction true", "ALIGN_FRACTION_TRUE", (ValueType.BOOL,), _GAUGE_DELTA
    ),
    MetricOption(
        "percentile 99", "ALIGN_PERCENTILE_99", (ValueType.DISTRIBUTION,), _GAUGE_DELTA
    ),
    MetricOption(
        "percentile 95", "ALIGN_PERCENTILE_95", (ValueType.DISTRIBUTION,), _GAUGE_DELTA
    ),
    MetricOption(
        "percentile 50", "ALIGN_PERCENTILE_50", (ValueType.DISTRIBUTION,), _GAUGE_DELTA
    ),
    MetricOption(
        "percentile 05", "ALIGN_PERCENTILE_05", (ValueType.DISTRIBUTION,), _GAUGE_DELTA
    ),
    MetricOption("percent change", "ALIGN_PERCENT_CHANGE", _NUMERIC, _GAUGE_DELTA),
)

ALIGNMENT_PERIODS: tuple[dict[str, str], ...] = (
    {"text": "grafana auto", "value": "grafana-auto"},
    {"text": "stackdriver auto", "value": "stackdriver-auto"},
    {"text": "1m", "value": "+60s"},
    {"text": "2m", "value": "+120s"},
    {"text": "5m", "value": "+300s"},
    {"text": "10m", "value": "+600s"},
    {"text": "30m", "value": "+1800s"},
    {"text": "1h", "value": "+3600s"},
    {"text": "3h", "value": "+10800s"},
    {"text": "6h", "value": "+21600s"},
    {"text": "1d", "value": "+86400s"},
    {"text": "3d", "value": "+259200s"},
    {"text": "1w", "value": "+604800s"},
)

SLO_SELECTORS: tuple[dict[str, str], ...] = (
    {"label": "SLI Value", "value": "select_slo_health"},
    {"label": "SLO Compliance", "value": "select_slo_compliance"},
    {"label": "SLO Error Budget Remaining", "value": "select_slo_budget_fraction"},
)


def get_alignment_options_by_metric(
    value_type: str | None, metric_kind: str | None
) -> list[MetricOption]:
    """Aligners applicable to a metric's value type and kind."""
    if not value_type:
        return []
    return [o for o in ALIGN_OPTIONS if o.supports(value_type, metric_kind)]


def get_aggregation_options_by_metric(
    value_type: str | None, metric_kind: str | None
) -> list[MetricOption]:
    """Cross-series reducers applicable to a metric's value type and kind."""
    if not metric_kind:
        return []
    return [o for o in AGGREGATION_OPTIONS if o.supports(value_type, metric_kind)]


def get_alignment_picker_data(
    value_type: str | None,
    metric_kind: str | None,
    per_series_aligner: str | None,
    template_srv: TemplateInterpolator,
) -> dict[str, Any]:
    """Options for the aligner picker plus the aligner that should be selected.

    A selected aligner that no longer applies to the metric is replaced with
    the first applicable one (or ``""`` when none applies).
    """
    options = [o.to_dict() for o in get_alignment_options_by_metric(value_type, metric_kind)]
    variable_options = [{"label": v, "value": v} for v in template_srv.variable_names()]
    selected = per_series_aligner or ""
    if not any(o["value"] == template_srv.replace(selected) for o in options):
        selected = options[0]["value"] if options else ""
    return {
        "align_options": [
            {"label": "Template Variables", "options": variable_options},
            {"label": "Aligner Options", "expanded": True, "options": options},
        ],
        "per_series_aligner": selected,
    }
