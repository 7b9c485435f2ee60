"""Stackdriver (Cloud Monitoring) data source adapter."""

from .config import DataSourceInstanceSettings, StackdriverOptions
from .datasource import StackdriverDatasource
from .events import DS_REQUEST_ERROR, AppEvents
from .templating import TemplateSrv, TemplateVariable

__all__ = [
    "DS_REQUEST_ERROR",
    "AppEvents",
    "DataSourceInstanceSettings",
    "StackdriverDatasource",
    "StackdriverOptions",
    "TemplateSrv",
    "TemplateVariable",
]
