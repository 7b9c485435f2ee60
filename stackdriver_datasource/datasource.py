"""Stackdriver (Cloud Monitoring) data source.

``StackdriverDatasource`` implements the data source contract used by the
dashboard: ``query``, ``annotation_query``, ``metric_find_query`` and
``test_datasource``. Panel targets are migrated to the current query schema,
filtered, interpolated and sent to the backend in one batched request; the
results are reshaped into dashboard series.

Resource listings (metric descriptors, SLO services, SLOs) are fetched
directly through the data source proxy and cached for the lifetime of the
instance.
"""

import logging
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any

from .clients.backend import TSDB_QUERY_URL, BackendResponse, BackendSrv
from .clients.resource import ResourceClient
from .config import DataSourceInstanceSettings
from .core.default_project import DefaultProjectResolver
from .core.errors import format_connection_test_error, format_stackdriver_error
from .core.normalizer import QueryNormalizer
from .core.query_builder import TimeSeriesQueryBuilder
from .core.resource_cache import ResourceCache, last_path_segment
from .core.response_mapper import to_annotations, to_series
from .events import AppEvents
from .exceptions import DataSourceError, MalformedResponseError
from .metric_find_query import StackdriverMetricFindQuery
from .schema import (
    Annotation,
    AnnotationQueryRequest,
    DataQueryRequest,
    DataQueryResponse,
    LegacyQuery,
    MetricDescriptor,
    MetricFindValue,
    MetricQuery,
    MetricView,
    Query,
    QueryType,
    SelectableValue,
    TestResult,
    TimeRange,
    VariableQueryData,
)
from .templating import TemplateInterpolator, TemplateSrv

logger = logging.getLogger(__name__)

PROJECTS_LIST_QUERY = "getProjectsListQuery"
DEFAULT_TIME_RANGE = timedelta(hours=6)


def _default_time_range() -> TimeRange:
    now = datetime.now(timezone.utc)
    return TimeRange(from_=now - DEFAULT_TIME_RANGE, to=now)


def _to_metric_descriptor(raw: dict[str, Any]) -> MetricDescriptor:
    service = raw["type"].split("/")[0]
    return MetricDescriptor.model_validate(
        {
            **raw,
            "service": service,
            "serviceShortName": service.split(".")[0],
            "displayName": raw.get("displayName") or raw["type"],
        }
    )


def _to_selectable_value(raw: dict[str, Any]) -> SelectableValue:
    name = last_path_segment(raw["name"])
    return SelectableValue(value=name, label=name)


class StackdriverDatasource:
    """Data source adapter between dashboard panels and Cloud Monitoring."""

    def __init__(
        self,
        instance_settings: DataSourceInstanceSettings,
        template_srv: TemplateInterpolator | None = None,
        backend: BackendSrv | None = None,
        app_events: AppEvents | None = None,
        time_range: Callable[[], TimeRange] | None = None,
    ) -> None:
        self.instance_settings = instance_settings
        self.id = instance_settings.id
        self.template_srv: TemplateInterpolator = template_srv or TemplateSrv()
        self.backend = backend or BackendSrv(
            instance_settings.server_url,
            timeout=instance_settings.http_timeout_seconds,
        )
        self.app_events = app_events or AppEvents()
        self.time_range = time_range or _default_time_range

        self.base_url = f"{instance_settings.url}/stackdriver/v3/projects/"

        self.resource_client = ResourceClient(self.backend, self.base_url)
        self.resource_cache = ResourceCache(self.resource_client, self.app_events)
        self.default_project = DefaultProjectResolver(instance_settings, self.backend)
        self.normalizer = QueryNormalizer(self.template_srv, self.get_default_project)
        self.query_builder = TimeSeriesQueryBuilder(self.template_srv, self.id)

    async def aclose(self) -> None:
        await self.backend.aclose()

    async def __aenter__(self) -> "StackdriverDatasource":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    @property
    def variables(self) -> list[str]:
        return self.template_srv.variable_names()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def migrate_query(self, query: Query | LegacyQuery | dict[str, Any]) -> Query:
        return self.normalizer.normalize(query)

    def should_run_query(self, query: Query) -> bool:
        return self.normalizer.should_run(query)

    def prepare_time_series_query(
        self, query: Query, request: DataQueryRequest
    ) -> dict[str, Any]:
        return self.query_builder.build(query, request)

    async def _post_tsdb_query(
        self, queries: list[dict[str, Any]], time_range: TimeRange | None = None
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {"queries": queries}
        if time_range is not None:
            payload = {
                "from": time_range.from_ms(),
                "to": time_range.to_ms(),
                **payload,
            }
        response = await self.backend.datasource_request(
            TSDB_QUERY_URL, method="POST", data=payload
        )
        if not isinstance(response.data, dict):
            raise MalformedResponseError(
                "Expected a JSON object from the query endpoint", data=response.data
            )
        return response.data

    async def get_time_series(self, request: DataQueryRequest) -> dict[str, Any]:
        """Run all runnable targets of ``request`` as one backend request."""
        await self.ensure_gce_default_project()
        normalized = [self.migrate_query(target) for target in request.targets]
        queries = [
            self.prepare_time_series_query(query, request)
            for query in normalized
            if self.should_run_query(query)
        ]
        if not queries:
            logger.debug("No runnable targets in request")
            return {"results": []}

        logger.info(f"Running {len(queries)} Stackdriver time series query(ies)")
        return await self._post_tsdb_query(queries, request.range)

    async def query(self, request: DataQueryRequest) -> DataQueryResponse:
        data = await self.get_time_series(request)
        return DataQueryResponse(data=to_series(data, list(request.targets)))

    async def annotation_query(self, options: AnnotationQueryRequest) -> list[Annotation]:
        await self.ensure_gce_default_project()
        query = self.query_builder.build_annotation(
            options.annotation.target,
            options.scoped_vars,
            self.get_default_project(),
        )
        data = await self._post_tsdb_query([query], options.range)
        return to_annotations(data, options.annotation)

    async def metric_find_query(
        self, query: VariableQueryData | dict[str, Any]
    ) -> list[MetricFindValue]:
        await self.ensure_gce_default_project()
        if isinstance(query, dict):
            query = VariableQueryData.model_validate(query)
        return await StackdriverMetricFindQuery(self).execute(query)

    async def test_datasource(self) -> TestResult:
        """Check that the Stackdriver API is reachable. Never raises."""
        try:
            response = await self.resource(f"{self.get_default_project()}/metricDescriptors")
            if response.status == 200:
                return TestResult(
                    status="success",
                    message="Successfully queried the Stackdriver API.",
                )
            return TestResult(
                status="error",
                message=response.status_text or "Cannot connect to Stackdriver API",
            )
        except Exception as e:
            logger.warning(f"Stackdriver connectivity test failed: {e}", exc_info=True)
            return TestResult(status="error", message=format_connection_test_error(e))

    async def get_labels(
        self,
        metric_type: str,
        ref_id: str,
        project_name: str,
        group_bys: list[str] | None = None,
    ) -> dict[str, Any]:
        """Label keys and values of a metric, from a headers-only query."""
        request = DataQueryRequest(
            targets=[
                Query(
                    ref_id=ref_id,
                    query_type=QueryType.METRICS,
                    metric_query=MetricQuery(
                        project_name=self.template_srv.replace(project_name),
                        metric_type=self.template_srv.replace(metric_type),
                        group_bys=self.query_builder.interpolate_group_bys(
                            group_bys or [], {}
                        ),
                        cross_series_reducer="REDUCE_NONE",
                        view=MetricView.HEADERS,
                    ),
                )
            ],
            range=self.time_range(),
        )
        response = await self.get_time_series(request)
        results = response.get("results")
        result = results.get(ref_id) if isinstance(results, dict) else None
        if result and result.get("meta"):
            return result["meta"].get("labels") or {}
        return {}

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    def get_default_project(self) -> str:
        return self.default_project.get_default_project()

    async def get_gce_default_project(self) -> str:
        return await self.default_project.fetch_gce_default_project()

    async def ensure_gce_default_project(self) -> None:
        await self.default_project.ensure()

    async def get_projects(self) -> list[SelectableValue]:
        """Projects visible to the data source credentials, or ``[]`` on error."""
        try:
            data = await self._post_tsdb_query(
                [
                    {
                        "refId": PROJECTS_LIST_QUERY,
                        "type": PROJECTS_LIST_QUERY,
                        "datasourceId": self.id,
                    }
                ]
            )
            projects = data["results"][PROJECTS_LIST_QUERY]["meta"]["projectsList"]
        except DataSourceError as e:
            logger.error(f"Failed to list projects: {format_stackdriver_error(e)}")
            return []
        except (KeyError, TypeError) as e:
            logger.error(f"Unexpected projects list response: {e!r}")
            return []
        return [SelectableValue.model_validate(p) for p in projects or []]

    # ------------------------------------------------------------------
    # Cached resources
    # ------------------------------------------------------------------

    async def resource(self, path: str, max_retries: int = 1) -> BackendResponse:
        return await self.resource_client.fetch(path, max_retries=max_retries)

    async def resource_cached(
        self, path: str, map_fn: Callable[[Any], Any]
    ) -> list[Any]:
        return await self.resource_cache.cached_list(path, map_fn)

    async def get_metric_types(self, project_name: str) -> list[MetricDescriptor]:
        if not project_name:
            return []
        return await self.resource_cached(
            f"{self.template_srv.replace(project_name)}/metricDescriptors",
            _to_metric_descriptor,
        )

    async def get_slo_services(self, project_name: str) -> list[SelectableValue]:
        interpolated_project = self.template_srv.replace(project_name)
        return await self.resource_cached(
            f"{interpolated_project}/services", _to_selectable_value
        )

    async def get_service_level_objectives(
        self, project_name: str, service_id: str
    ) -> list[SelectableValue]:
        props = self.query_builder.interpolate_props(
            {"projectName": project_name, "serviceId": service_id}
        )
        return await self.resource_cached(
            f"{props['projectName']}/services/{props['serviceId']}/serviceLevelObjectives",
            _to_selectable_value,
        )
