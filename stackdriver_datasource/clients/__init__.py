"""Clients for the dashboard server's data source proxy."""

from .backend import TSDB_QUERY_URL, BackendResponse, BackendSrv
from .resource import ResourceClient

__all__ = [
    "TSDB_QUERY_URL",
    "BackendResponse",
    "BackendSrv",
    "ResourceClient",
]
