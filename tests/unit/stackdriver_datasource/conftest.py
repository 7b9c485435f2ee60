"""Shared fixtures for Stackdriver data source tests."""

import json
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

import httpx
import pytest

from stackdriver_datasource.clients.backend import BackendSrv
from stackdriver_datasource.config import DataSourceInstanceSettings, StackdriverOptions
from stackdriver_datasource.datasource import StackdriverDatasource
from stackdriver_datasource.events import AppEvents
from stackdriver_datasource.schema import TimeRange
from stackdriver_datasource.templating import TemplateSrv, TemplateVariable

SERVER_URL = "http://grafana.test"
PROXY_URL = "/api/datasources/proxy/7"

Handler = Callable[[httpx.Request], httpx.Response]


class FakeProxy:
    """Records requests and answers them from per-path handlers."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.routes: dict[str, Handler] = {}

    def route(self, path: str, handler: Handler) -> None:
        self.routes[path] = handler

    def json_route(self, path: str, payload: Any, status_code: int = 200) -> None:
        self.route(path, lambda request: httpx.Response(status_code, json=payload))

    def calls(self, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]

    def bodies(self, path: str) -> list[dict[str, Any]]:
        return [json.loads(r.content) for r in self.calls(path)]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get(request.url.path)
        if handler is None:
            return httpx.Response(404, json={"message": "not found"})
        return handler(request)


@pytest.fixture
def proxy() -> FakeProxy:
    return FakeProxy()


@pytest.fixture
def backend(proxy: FakeProxy) -> BackendSrv:
    return BackendSrv(SERVER_URL, transport=httpx.MockTransport(proxy))


@pytest.fixture
def settings() -> DataSourceInstanceSettings:
    return DataSourceInstanceSettings(
        id=7,
        url=PROXY_URL,
        server_url=SERVER_URL,
        json_data=StackdriverOptions(default_project="default-project"),
    )


@pytest.fixture
def template_srv() -> TemplateSrv:
    return TemplateSrv(
        variables=[
            TemplateVariable(name="project", value="my-project"),
            TemplateVariable(name="zone", value=["us-east1-b", "us-west1-a"]),
            TemplateVariable(name="labels", value="a,b,c"),
        ]
    )


@pytest.fixture
def app_events() -> AppEvents:
    return AppEvents()


@pytest.fixture
def time_range() -> TimeRange:
    return TimeRange(
        from_=datetime(2024, 1, 1, 0, 0, tzinfo=timezone.utc),
        to=datetime(2024, 1, 1, 6, 0, tzinfo=timezone.utc),
    )


@pytest.fixture
def datasource(
    settings: DataSourceInstanceSettings,
    template_srv: TemplateSrv,
    backend: BackendSrv,
    app_events: AppEvents,
    time_range: TimeRange,
) -> StackdriverDatasource:
    return StackdriverDatasource(
        settings,
        template_srv=template_srv,
        backend=backend,
        app_events=app_events,
        time_range=lambda: time_range,
    )
