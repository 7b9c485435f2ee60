"""Template variable queries for the Stackdriver data source."""

import logging
from typing import TYPE_CHECKING, Any

from .constants import (
    ALIGNMENT_PERIODS,
    SLO_SELECTORS,
    MetricOption,
    get_aggregation_options_by_metric,
    get_alignment_options_by_metric,
)
from .schema import (
    MetricDescriptor,
    MetricFindQueryType,
    MetricFindValue,
    SelectableValue,
    VariableQueryData,
)

if TYPE_CHECKING:
    from .datasource import StackdriverDatasource

logger = logging.getLogger(__name__)


def to_find_query_result(item: Any) -> MetricFindValue:
    """Convert a label, option or selectable value into a variable option."""
    if isinstance(item, str):
        return MetricFindValue(text=item)
    if isinstance(item, MetricOption):
        return MetricFindValue(text=item.text, value=item.value)
    if isinstance(item, SelectableValue):
        return MetricFindValue(text=item.label, value=item.value)
    if isinstance(item, dict):
        return MetricFindValue(
            text=item.get("label") or item.get("text") or "", value=item.get("value")
        )
    return MetricFindValue(text=str(item))


class StackdriverMetricFindQuery:
    """Executes one template variable query against a data source."""

    def __init__(self, datasource: "StackdriverDatasource") -> None:
        self.datasource = datasource

    async def execute(self, query: VariableQueryData) -> list[MetricFindValue]:
        if not query.project_name:
            query = query.model_copy(
                update={"project_name": self.datasource.get_default_project()}
            )

        handlers = {
            MetricFindQueryType.PROJECTS.value: self.handle_projects_query,
            MetricFindQueryType.SERVICES.value: self.handle_service_query,
            MetricFindQueryType.DEFAULT_PROJECT.value: self.handle_default_project_query,
            MetricFindQueryType.METRIC_TYPES.value: self.handle_metric_types_query,
            MetricFindQueryType.LABEL_KEYS.value: self.handle_label_keys_query,
            MetricFindQueryType.LABEL_VALUES.value: self.handle_label_values_query,
            MetricFindQueryType.RESOURCE_TYPES.value: self.handle_resource_type_query,
            MetricFindQueryType.AGGREGATIONS.value: self.handle_aggregation_query,
            MetricFindQueryType.ALIGNERS.value: self.handle_aligners_query,
            MetricFindQueryType.ALIGNMENT_PERIODS.value: self.handle_alignment_period_query,
            MetricFindQueryType.SELECTORS.value: self.handle_selector_query,
            MetricFindQueryType.SLO_SERVICES.value: self.handle_slo_services_query,
            MetricFindQueryType.SLO.value: self.handle_slo_query,
        }
        handler = handlers.get(query.selected_query_type)
        if handler is None:
            logger.warning(f"Unknown variable query type '{query.selected_query_type}'")
            return []
        try:
            return await handler(query)
        except Exception as e:
            logger.error(
                f"Could not run Stackdriver variable query "
                f"'{query.selected_query_type}': {e}",
                exc_info=True,
            )
            return []

    async def handle_projects_query(self, query: VariableQueryData) -> list[MetricFindValue]:
        projects = await self.datasource.get_projects()
        return [to_find_query_result(p) for p in projects]

    async def handle_default_project_query(
        self, query: VariableQueryData
    ) -> list[MetricFindValue]:
        project = self.datasource.get_default_project()
        return [MetricFindValue(text=project, value=project)] if project else []

    async def handle_service_query(self, query: VariableQueryData) -> list[MetricFindValue]:
        descriptors = await self.datasource.get_metric_types(query.project_name)
        seen: dict[str, MetricDescriptor] = {}
        for descriptor in descriptors:
            seen.setdefault(descriptor.service, descriptor)
        return [
            MetricFindValue(text=d.service_short_name, value=d.service)
            for d in seen.values()
        ]

    async def handle_metric_types_query(
        self, query: VariableQueryData
    ) -> list[MetricFindValue]:
        if not query.selected_service:
            return []
        service = self.datasource.template_srv.replace(query.selected_service)
        descriptors = await self.datasource.get_metric_types(query.project_name)
        return [
            MetricFindValue(text=d.display_name, value=d.type)
            for d in descriptors
            if d.service == service
        ]

    async def handle_label_keys_query(
        self, query: VariableQueryData
    ) -> list[MetricFindValue]:
        if not query.selected_metric_type:
            return []
        labels = await self.datasource.get_labels(
            query.selected_metric_type, "handleLabelKeysQuery", query.project_name
        )
        return [to_find_query_result(key) for key in labels]

    async def handle_label_values_query(
        self, query: VariableQueryData
    ) -> list[MetricFindValue]:
        if not query.selected_metric_type:
            return []
        labels = await self.datasource.get_labels(
            query.selected_metric_type,
            "handleLabelValuesQuery",
            query.project_name,
            [query.label_key],
        )
        label_key = self.datasource.template_srv.replace(query.label_key)
        return [to_find_query_result(v) for v in labels.get(label_key, [])]

    async def handle_resource_type_query(
        self, query: VariableQueryData
    ) -> list[MetricFindValue]:
        if not query.selected_metric_type:
            return []
        labels = await self.datasource.get_labels(
            query.selected_metric_type,
            "handleResourceTypeQueryQueryType",
            query.project_name,
        )
        return [to_find_query_result(v) for v in labels.get("resource.type", [])]

    async def _find_descriptor(self, query: VariableQueryData) -> MetricDescriptor | None:
        if not query.selected_metric_type:
            return None
        metric_type = self.datasource.template_srv.replace(query.selected_metric_type)
        descriptors = await self.datasource.get_metric_types(query.project_name)
        return next((d for d in descriptors if d.type == metric_type), None)

    async def handle_aligners_query(self, query: VariableQueryData) -> list[MetricFindValue]:
        descriptor = await self._find_descriptor(query)
        if descriptor is None:
            return []
        return [
            to_find_query_result(o)
            for o in get_alignment_options_by_metric(
                descriptor.value_type, descriptor.metric_kind
            )
        ]

    async def handle_aggregation_query(
        self, query: VariableQueryData
    ) -> list[MetricFindValue]:
        descriptor = await self._find_descriptor(query)
        if descriptor is None:
            return []
        return [
            to_find_query_result(o)
            for o in get_aggregation_options_by_metric(
                descriptor.value_type, descriptor.metric_kind
            )
        ]

    async def handle_alignment_period_query(
        self, query: VariableQueryData
    ) -> list[MetricFindValue]:
        return [to_find_query_result(p) for p in ALIGNMENT_PERIODS]

    async def handle_selector_query(self, query: VariableQueryData) -> list[MetricFindValue]:
        return [to_find_query_result(s) for s in SLO_SELECTORS]

    async def handle_slo_services_query(
        self, query: VariableQueryData
    ) -> list[MetricFindValue]:
        services = await self.datasource.get_slo_services(query.project_name)
        return [to_find_query_result(s) for s in services]

    async def handle_slo_query(self, query: VariableQueryData) -> list[MetricFindValue]:
        slos = await self.datasource.get_service_level_objectives(
            query.project_name, query.selected_slo_service
        )
        return [to_find_query_result(s) for s in slos]
