"""Tests for the data source HTTP API."""

import pytest
from fastapi.testclient import TestClient

from stackdriver_datasource.api.app import create_app

TSDB = "/api/tsdb/query"
RESOURCES = "/api/datasources/proxy/7/stackdriver/v3/projects/"


@pytest.fixture
def client(datasource):
    app = create_app(datasource=datasource)
    with TestClient(app) as test_client:
        yield test_client


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_query(client, proxy):
    proxy.json_route(
        TSDB,
        {
            "results": {
                "A": {
                    "refId": "A",
                    "series": [{"name": "cpu", "points": [[1.0, 1704067200000]]}],
                }
            }
        },
    )

    response = client.post(
        "/api/datasource/query",
        json={
            "targets": [
                {
                    "refId": "A",
                    "metricQuery": {"projectName": "p", "metricType": "m"},
                }
            ],
            "range": {"from": "2024-01-01T00:00:00Z", "to": "2024-01-01T06:00:00Z"},
        },
    )

    assert response.status_code == 200
    series = response.json()["data"]
    assert series[0]["target"] == "cpu"
    assert series[0]["refId"] == "A"


def _unit_query(client, proxy, units):
    proxy.json_route(
        TSDB,
        {"results": {"A": {"refId": "A", "series": [{"name": "s", "points": [[1, 2]]}]}}},
    )
    return client.post(
        "/api/datasource/query",
        json={
            "targets": [
                {
                    "refId": ref_id,
                    "metricQuery": {"projectName": "p", "metricType": "m", "unit": unit},
                }
                for ref_id, unit in zip("AB", units)
            ],
            "range": {"from": "2024-01-01T00:00:00Z", "to": "2024-01-01T06:00:00Z"},
        },
    )


def test_query_mixed_units_omit_unit_key(client, proxy):
    series = _unit_query(client, proxy, ["By", "s"]).json()["data"][0]

    assert "unit" not in series
    assert "meta" not in series
    assert series == {"target": "s", "datapoints": [[1, 2]], "refId": "A"}


def test_query_shared_unit_is_emitted(client, proxy):
    series = _unit_query(client, proxy, ["By", "By"]).json()["data"][0]
    assert series["unit"] == "bytes"


def test_annotations_omit_empty_fields(client, proxy):
    proxy.json_route(
        TSDB,
        {"results": {"annotationQuery": {"tables": [{"rows": [[1704067200000, "Deploy"]]}]}}},
    )

    response = client.post(
        "/api/datasource/annotations",
        json={
            "annotation": {"name": "deploys", "target": {"metricType": "m"}},
            "range": {"from": "2024-01-01T00:00:00Z", "to": "2024-01-01T06:00:00Z"},
        },
    )

    event = response.json()[0]
    assert event["time"] == 1704067200000
    assert event["title"] == "Deploy"
    assert "text" not in event


def test_query_backend_failure_returns_bad_gateway(client, proxy):
    proxy.json_route(TSDB, {"error": "boom"}, status_code=500)

    response = client.post(
        "/api/datasource/query",
        json={
            "targets": [
                {
                    "refId": "A",
                    "metricQuery": {"projectName": "p", "metricType": "m"},
                }
            ],
            "range": {"from": "2024-01-01T00:00:00Z", "to": "2024-01-01T06:00:00Z"},
        },
    )

    assert response.status_code == 502


def test_variable(client):
    response = client.post(
        "/api/datasource/variable", json={"selectedQueryType": "defaultProject"}
    )

    assert response.status_code == 200
    assert response.json() == [{"text": "default-project", "value": "default-project"}]


def test_connection_test(client, proxy):
    proxy.json_route(RESOURCES + "default-project/metricDescriptors", {})

    response = client.get("/api/datasource/test")

    assert response.json() == {
        "status": "success",
        "message": "Successfully queried the Stackdriver API.",
    }


def test_slo_services(client, proxy):
    proxy.json_route(
        RESOURCES + "p/services", {"services": [{"name": "projects/1/services/web"}]}
    )

    response = client.get("/api/datasource/slo-services", params={"project": "p"})

    assert response.json() == [{"value": "web", "label": "web"}]


def test_metric_descriptors_requires_project(client):
    response = client.get("/api/datasource/metric-descriptors")
    assert response.status_code == 422
