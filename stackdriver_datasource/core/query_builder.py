"""Outbound request payloads for the backend ``/api/tsdb/query`` endpoint."""

import logging
from typing import Any

from ..schema import AnnotationTarget, DataQueryRequest, MetricView, Query
from ..templating import TemplateInterpolator

logger = logging.getLogger(__name__)

TIME_SERIES_QUERY_TYPE = "timeSeriesQuery"
ANNOTATION_QUERY_TYPE = "annotationQuery"
FILTER_CHUNK_SIZE = 4


class TimeSeriesQueryBuilder:
    """Interpolates normalized queries and serializes them for the backend."""

    def __init__(self, template_srv: TemplateInterpolator, datasource_id: int) -> None:
        self.template_srv = template_srv
        self.datasource_id = datasource_id

    def interpolate_props(
        self, obj: dict[str, Any] | None, scoped_vars: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        """Interpolate every non-empty string value of ``obj``."""
        return {
            key: (
                self.template_srv.replace(value, scoped_vars or {})
                if value and isinstance(value, str)
                else value
            )
            for key, value in (obj or {}).items()
        }

    def interpolate_filters(
        self, filters: list[str | None], scoped_vars: dict[str, Any] | None
    ) -> list[str]:
        """Interpolate a flat filter list read in chunks of four.

        Each chunk is ``key, operator, value[, condition]``. Chunks whose value
        is empty, before or after interpolation, are dropped. Values are
        interpolated with regex escaping; operators are passed through.
        """
        scoped_vars = scoped_vars or {}
        interpolated: list[str] = []
        for start in range(0, len(filters), FILTER_CHUNK_SIZE):
            chunk = list(filters[start : start + FILTER_CHUNK_SIZE])
            key, operator, value, condition = (chunk + [None] * FILTER_CHUNK_SIZE)[
                :FILTER_CHUNK_SIZE
            ]
            if not value:
                continue
            interpolated_value = self.template_srv.replace(value, scoped_vars, "regex")
            if not interpolated_value:
                continue
            interpolated.extend(
                [
                    self.template_srv.replace(key, scoped_vars),
                    operator,
                    interpolated_value,
                ]
            )
            if condition:
                interpolated.append(condition)
        return interpolated

    def interpolate_group_bys(
        self, group_bys: list[str] | None, scoped_vars: dict[str, Any] | None
    ) -> list[str]:
        """Expand multi-value variables into separate group-by entries."""
        interpolated: list[str] = []
        for group_by in group_bys or []:
            interpolated.extend(
                self.template_srv.replace(group_by, scoped_vars or {}, "csv").split(",")
            )
        return interpolated

    def build(self, query: Query, request: DataQueryRequest) -> dict[str, Any]:
        """Serialize one normalized query of ``request``."""
        scoped_vars = request.scoped_vars
        metric_query = query.metric_query
        metric_props = metric_query.model_dump(
            mode="json", by_alias=True, exclude_none=True
        )
        slo_props = (
            query.slo_query.model_dump(mode="json", by_alias=True, exclude_none=True)
            if query.slo_query is not None
            else {}
        )

        return {
            "datasourceId": self.datasource_id,
            "refId": query.ref_id,
            "queryType": query.query_type.value,
            "intervalMs": request.interval_ms,
            "type": TIME_SERIES_QUERY_TYPE,
            "metricQuery": {
                **self.interpolate_props(metric_props, scoped_vars),
                "filters": self.interpolate_filters(metric_query.filters, scoped_vars),
                "groupBys": self.interpolate_group_bys(
                    metric_query.group_bys, scoped_vars
                ),
                "view": (metric_query.view or MetricView.FULL).value,
            },
            "sloQuery": self.interpolate_props(slo_props, scoped_vars),
        }

    def build_annotation(
        self,
        target: AnnotationTarget,
        scoped_vars: dict[str, Any] | None,
        default_project: str,
    ) -> dict[str, Any]:
        """Serialize an annotation query."""
        scoped_vars = scoped_vars or {}
        replace = self.template_srv.replace
        return {
            "refId": ANNOTATION_QUERY_TYPE,
            "datasourceId": self.datasource_id,
            "metricType": replace(target.metric_type, scoped_vars),
            "crossSeriesReducer": "REDUCE_NONE",
            "perSeriesAligner": "ALIGN_NONE",
            "title": replace(target.title, scoped_vars),
            "text": replace(target.text, scoped_vars),
            "tags": replace(target.tags, scoped_vars),
            "view": MetricView.FULL.value,
            "filters": self.interpolate_filters(target.filters, scoped_vars),
            "type": ANNOTATION_QUERY_TYPE,
            "projectName": replace(
                target.project_name if target.project_name else default_project,
                scoped_vars,
            ),
        }
