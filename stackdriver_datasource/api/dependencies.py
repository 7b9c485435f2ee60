"""Shared dependencies for API endpoints."""

from fastapi import Request

from stackdriver_datasource.datasource import StackdriverDatasource


def get_datasource(request: Request) -> StackdriverDatasource:
    """The data source instance owned by the application."""
    datasource: StackdriverDatasource = request.app.state.datasource
    return datasource
