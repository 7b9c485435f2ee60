"""Tests for template variable queries."""

from unittest.mock import AsyncMock, patch

import pytest

from stackdriver_datasource.metric_find_query import to_find_query_result
from stackdriver_datasource.schema import (
    MetricDescriptor,
    MetricFindValue,
    SelectableValue,
)

DESCRIPTORS = [
    MetricDescriptor(
        type="compute.googleapis.com/instance/cpu/utilization",
        display_name="CPU utilization",
        service="compute.googleapis.com",
        service_short_name="compute",
        value_type="DOUBLE",
        metric_kind="GAUGE",
    ),
    MetricDescriptor(
        type="compute.googleapis.com/instance/uptime",
        display_name="Uptime",
        service="compute.googleapis.com",
        service_short_name="compute",
        value_type="DOUBLE",
        metric_kind="DELTA",
    ),
    MetricDescriptor(
        type="pubsub.googleapis.com/topic/send_message_operation_count",
        display_name="Publish requests",
        service="pubsub.googleapis.com",
        service_short_name="pubsub",
        value_type="BOOL",
        metric_kind="DELTA",
    ),
]


@pytest.fixture
def metric_types(datasource):
    with patch.object(
        datasource, "get_metric_types", AsyncMock(return_value=DESCRIPTORS)
    ) as mock:
        yield mock


@pytest.mark.asyncio
async def test_projects(datasource):
    projects = [SelectableValue(value="p1", label="Project One")]
    with patch.object(datasource, "get_projects", AsyncMock(return_value=projects)):
        result = await datasource.metric_find_query({"selectedQueryType": "projects"})
    assert result == [MetricFindValue(text="Project One", value="p1")]


@pytest.mark.asyncio
async def test_services_unique(datasource, metric_types):
    result = await datasource.metric_find_query({"selectedQueryType": "services"})
    assert result == [
        MetricFindValue(text="compute", value="compute.googleapis.com"),
        MetricFindValue(text="pubsub", value="pubsub.googleapis.com"),
    ]
    metric_types.assert_awaited_once_with("default-project")


@pytest.mark.asyncio
async def test_metric_types_filtered_by_service(datasource, metric_types):
    result = await datasource.metric_find_query(
        {
            "selectedQueryType": "metricTypes",
            "selectedService": "compute.googleapis.com",
            "projectName": "p",
        }
    )
    assert [r.value for r in result] == [
        "compute.googleapis.com/instance/cpu/utilization",
        "compute.googleapis.com/instance/uptime",
    ]
    assert result[0].text == "CPU utilization"


@pytest.mark.asyncio
async def test_metric_types_without_service(datasource, metric_types):
    result = await datasource.metric_find_query({"selectedQueryType": "metricTypes"})
    assert result == []


@pytest.mark.asyncio
async def test_label_keys_and_values(datasource):
    labels = {"metric.label.instance_name": ["a", "b"], "resource.type": ["gce_instance"]}
    with patch.object(datasource, "get_labels", AsyncMock(return_value=labels)) as mock:
        keys = await datasource.metric_find_query(
            {"selectedQueryType": "labelKeys", "selectedMetricType": "m"}
        )
        values = await datasource.metric_find_query(
            {
                "selectedQueryType": "labelValues",
                "selectedMetricType": "m",
                "labelKey": "metric.label.instance_name",
            }
        )
        resource_types = await datasource.metric_find_query(
            {"selectedQueryType": "resourceTypes", "selectedMetricType": "m"}
        )

    assert [k.text for k in keys] == ["metric.label.instance_name", "resource.type"]
    assert [v.text for v in values] == ["a", "b"]
    assert [r.text for r in resource_types] == ["gce_instance"]
    mock.assert_any_await(
        "m", "handleLabelValuesQuery", "default-project", ["metric.label.instance_name"]
    )


@pytest.mark.asyncio
async def test_aligners_for_gauge_double(datasource, metric_types):
    result = await datasource.metric_find_query(
        {
            "selectedQueryType": "aligners",
            "selectedMetricType": "compute.googleapis.com/instance/cpu/utilization",
        }
    )
    values = [r.value for r in result]
    assert "ALIGN_INTERPOLATE" in values
    assert "ALIGN_MEAN" in values
    assert "ALIGN_RATE" not in values


@pytest.mark.asyncio
async def test_aggregations_for_bool_delta(datasource, metric_types):
    result = await datasource.metric_find_query(
        {
            "selectedQueryType": "aggregations",
            "selectedMetricType": (
                "pubsub.googleapis.com/topic/send_message_operation_count"
            ),
        }
    )
    values = [r.value for r in result]
    assert values == ["REDUCE_NONE", "REDUCE_COUNT", "REDUCE_COUNT_TRUE", "REDUCE_COUNT_FALSE"]


@pytest.mark.asyncio
async def test_aligners_unknown_metric(datasource, metric_types):
    result = await datasource.metric_find_query(
        {"selectedQueryType": "aligners", "selectedMetricType": "unknown/metric"}
    )
    assert result == []


@pytest.mark.asyncio
async def test_static_lists(datasource):
    periods = await datasource.metric_find_query({"selectedQueryType": "alignmentPeriods"})
    selectors = await datasource.metric_find_query({"selectedQueryType": "selectors"})

    assert periods[0] == MetricFindValue(text="grafana auto", value="grafana-auto")
    assert [s.value for s in selectors] == [
        "select_slo_health",
        "select_slo_compliance",
        "select_slo_budget_fraction",
    ]


@pytest.mark.asyncio
async def test_slo_services_and_slos(datasource):
    services = [SelectableValue(value="checkout", label="checkout")]
    slos = [SelectableValue(value="avail", label="avail")]
    with (
        patch.object(datasource, "get_slo_services", AsyncMock(return_value=services)),
        patch.object(
            datasource, "get_service_level_objectives", AsyncMock(return_value=slos)
        ) as slo_mock,
    ):
        service_result = await datasource.metric_find_query(
            {"selectedQueryType": "sloServices", "projectName": "p"}
        )
        slo_result = await datasource.metric_find_query(
            {
                "selectedQueryType": "slo",
                "projectName": "p",
                "selectedSLOService": "checkout",
            }
        )

    assert service_result == [MetricFindValue(text="checkout", value="checkout")]
    assert slo_result == [MetricFindValue(text="avail", value="avail")]
    slo_mock.assert_awaited_once_with("p", "checkout")


@pytest.mark.asyncio
async def test_default_project(datasource):
    result = await datasource.metric_find_query({"selectedQueryType": "defaultProject"})
    assert result == [MetricFindValue(text="default-project", value="default-project")]


@pytest.mark.asyncio
async def test_unknown_query_type(datasource):
    assert await datasource.metric_find_query({"selectedQueryType": "nope"}) == []


@pytest.mark.asyncio
async def test_handler_failure_returns_empty(datasource):
    with patch.object(
        datasource, "get_labels", AsyncMock(side_effect=RuntimeError("boom"))
    ):
        result = await datasource.metric_find_query(
            {"selectedQueryType": "labelKeys", "selectedMetricType": "m"}
        )
    assert result == []


def test_to_find_query_result_shapes():
    assert to_find_query_result("x") == MetricFindValue(text="x")
    assert to_find_query_result({"label": "L", "value": "v"}) == MetricFindValue(
        text="L", value="v"
    )
    assert to_find_query_result({"text": "T", "value": "v"}) == MetricFindValue(
        text="T", value="v"
    )
