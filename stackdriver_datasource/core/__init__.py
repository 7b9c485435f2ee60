"""Query normalization, building, response mapping and caching."""

from .default_project import DefaultProjectResolver, ProjectState
from .errors import format_connection_test_error, format_stackdriver_error
from .normalizer import QueryNormalizer, parse_query
from .query_builder import TimeSeriesQueryBuilder
from .resource_cache import ResourceCache, last_path_segment
from .response_mapper import resolve_panel_unit, to_annotations, to_series

__all__ = [
    "DefaultProjectResolver",
    "ProjectState",
    "QueryNormalizer",
    "ResourceCache",
    "TimeSeriesQueryBuilder",
    "format_connection_test_error",
    "format_stackdriver_error",
    "last_path_segment",
    "parse_query",
    "resolve_panel_unit",
    "to_annotations",
    "to_series",
]
