"""Default project of an instance, discovered once for GCE authentication.

States:
    UNRESOLVED: GCE authentication and no ``gceDefaultProject`` yet
    RESOLVED: the project is stored on the instance settings and reused

The discovered value is written onto the shared settings object and is never
refreshed for the lifetime of those settings. A failed discovery propagates
to the caller and leaves the state UNRESOLVED.
"""

import logging
from enum import Enum

from ..clients.backend import TSDB_QUERY_URL, BackendSrv
from ..config import DataSourceInstanceSettings
from ..schema import AuthenticationType

logger = logging.getLogger(__name__)

GCE_DEFAULT_PROJECT_QUERY = "getGCEDefaultProject"


class ProjectState(str, Enum):
    UNRESOLVED = "unresolved"
    RESOLVED = "resolved"


class DefaultProjectResolver:
    """Resolves and caches the instance's default project."""

    def __init__(self, settings: DataSourceInstanceSettings, backend: BackendSrv) -> None:
        self.settings = settings
        self.backend = backend

    @property
    def state(self) -> ProjectState:
        options = self.settings.json_data
        if (
            options.authentication_type == AuthenticationType.GCE
            and not options.gce_default_project
        ):
            return ProjectState.UNRESOLVED
        return ProjectState.RESOLVED

    def get_default_project(self) -> str:
        """The configured (or already discovered) default project, or ``""``."""
        options = self.settings.json_data
        if options.authentication_type == AuthenticationType.GCE:
            return options.gce_default_project or ""
        return options.default_project or ""

    async def fetch_gce_default_project(self) -> str:
        """Ask the backend for the project of the GCE service account."""
        response = await self.backend.datasource_request(
            TSDB_QUERY_URL,
            method="POST",
            data={
                "queries": [
                    {
                        "refId": GCE_DEFAULT_PROJECT_QUERY,
                        "type": GCE_DEFAULT_PROJECT_QUERY,
                        "datasourceId": self.settings.id,
                    }
                ]
            },
        )
        data = response.data if isinstance(response.data, dict) else {}
        result = (data.get("results") or {}).get(GCE_DEFAULT_PROJECT_QUERY) or {}
        return (result.get("meta") or {}).get("defaultProject") or ""

    async def ensure(self) -> None:
        """Discover the GCE default project if it is still unresolved."""
        if self.state == ProjectState.RESOLVED:
            return
        logger.info("Resolving GCE default project")
        project = await self.fetch_gce_default_project()
        self.settings.json_data.gce_default_project = project
        logger.info(f"GCE default project resolved to '{project}'")
