"""Reshaping of backend results into dashboard series and annotations."""

import logging
from datetime import datetime
from typing import Any

from ..constants import STACKDRIVER_UNIT_MAPPINGS
from ..exceptions import MalformedResponseError
from ..schema import (
    Annotation,
    AnnotationSpec,
    LegacyQuery,
    Query,
    TimeSeries,
)
from .query_builder import ANNOTATION_QUERY_TYPE

logger = logging.getLogger(__name__)


def _target_unit(target: Query | LegacyQuery) -> str | None:
    if isinstance(target, Query):
        return target.metric_query.unit
    return (target.model_extra or {}).get("unit")


def resolve_panel_unit(targets: list[Query | LegacyQuery]) -> str | None:
    """Dashboard unit shared by all targets, if there is exactly one known unit."""
    if not targets:
        return None
    units = [_target_unit(t) for t in targets]
    if any(unit != units[0] for unit in units):
        return None
    return STACKDRIVER_UNIT_MAPPINGS.get(units[0]) if units[0] else None


def to_series(
    response: dict[str, Any], targets: list[Query | LegacyQuery]
) -> list[TimeSeries]:
    """Flatten every result's series into dashboard time series."""
    results = response.get("results") if isinstance(response, dict) else None
    if not results or not isinstance(results, dict):
        return []

    unit = resolve_panel_unit(targets)
    series_list: list[TimeSeries] = []
    for query_result in results.values():
        if not query_result.get("series"):
            continue
        for series in query_result["series"]:
            series_list.append(
                TimeSeries(
                    target=series.get("name", ""),
                    datapoints=series.get("points") or [],
                    ref_id=query_result.get("refId"),
                    meta=query_result.get("meta"),
                    unit=unit,
                )
            )
    logger.debug(f"Mapped {len(series_list)} series from {len(results)} result(s)")
    return series_list


def _parse_epoch_ms(value: Any) -> int | None:
    if isinstance(value, (int, float)):
        return int(value)
    if not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.warning(f"Unparseable annotation time: {value!r}")
        return None
    return int(parsed.timestamp() * 1000)


def to_annotations(
    response: dict[str, Any], annotation: AnnotationSpec
) -> list[Annotation]:
    """Map the rows of the annotation table to annotation events.

    Rows are ``[time, title, tags, text]``; tags are not propagated.

    Raises:
        MalformedResponseError: The response has no annotation table.
    """
    try:
        rows = response["results"][ANNOTATION_QUERY_TYPE]["tables"][0]["rows"]
    except (KeyError, IndexError, TypeError) as e:
        raise MalformedResponseError(
            f"Missing annotation table in response: {e!r}", data=response
        ) from e

    return [
        Annotation(
            annotation=annotation,
            time=_parse_epoch_ms(row[0]),
            title=row[1] if len(row) > 1 else None,
            text=row[3] if len(row) > 3 else None,
            tags=[],
        )
        for row in rows or []
    ]
