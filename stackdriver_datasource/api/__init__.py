"""HTTP API exposing the Stackdriver data source."""

from .app import create_app

__all__ = ["create_app"]
