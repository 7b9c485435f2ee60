"""Migration of saved panel queries to the current schema.

Queries saved before metric attributes moved under ``metricQuery`` are
parsed as ``LegacyQuery`` and rebuilt as ``Query``. Every legacy attribute
that is not a top-level query attribute is carried into ``metricQuery``.
"""

import logging
from collections.abc import Callable
from typing import Any

from pydantic import TypeAdapter

from ..schema import AnyQuery, LegacyQuery, MetricQuery, MetricView, Query, QueryType
from ..templating import TemplateInterpolator

logger = logging.getLogger(__name__)

_query_adapter: TypeAdapter[Query | LegacyQuery] = TypeAdapter(AnyQuery)


def parse_query(raw: Query | LegacyQuery | dict[str, Any]) -> Query | LegacyQuery:
    """Validate a raw target into whichever schema version it was saved with."""
    if isinstance(raw, (Query, LegacyQuery)):
        return raw
    return _query_adapter.validate_python(raw)


class QueryNormalizer:
    """Migrates legacy queries and decides which queries should run."""

    def __init__(
        self,
        template_srv: TemplateInterpolator,
        default_project: Callable[[], str],
    ) -> None:
        self.template_srv = template_srv
        self.default_project = default_project

    def normalize(self, query: Query | LegacyQuery | dict[str, Any]) -> Query:
        parsed = parse_query(query)
        if isinstance(parsed, Query):
            return parsed
        if isinstance(parsed, LegacyQuery):
            return self._migrate_legacy(parsed)
        raise TypeError(f"Unsupported query type: {type(parsed).__name__}")

    def _migrate_legacy(self, query: LegacyQuery) -> Query:
        rest = dict(query.model_extra or {})
        project_name = rest.get("projectName") or rest.get("project_name")
        rest.pop("project_name", None)
        rest["projectName"] = self.template_srv.replace(
            project_name if project_name else self.default_project()
        )
        rest["view"] = rest.get("view") or MetricView.FULL.value
        logger.debug(f"Migrating legacy query {query.ref_id} to metricQuery schema")
        return Query(
            ref_id=query.ref_id,
            hide=query.hide,
            query_type=QueryType.METRICS,
            metric_query=MetricQuery.model_validate(rest),
        )

    @staticmethod
    def should_run(query: Query) -> bool:
        """Whether a normalized query has everything it needs to run."""
        if query.hide:
            return False

        if query.query_type == QueryType.SLO:
            slo = query.slo_query
            if slo is None:
                return False
            return bool(
                slo.selector_name and slo.service_id and slo.slo_id and slo.project_name
            )

        metric = query.metric_query
        return bool(metric.metric_type and metric.project_name)
