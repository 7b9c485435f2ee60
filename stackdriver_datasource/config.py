"""Data source instance settings.

Settings mirror the JSON stored for a data source instance by the dashboard
(``url``, ``jsonData.authenticationType`` ...). ``load_settings_from_env``
builds them from environment variables for the standalone API server.
"""

import logging
import os

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .schema import AuthenticationType

logger = logging.getLogger(__name__)

DEFAULT_SERVER_URL = "http://localhost:3000"
DEFAULT_URL = "/api/datasources/proxy/1"
DEFAULT_HTTP_TIMEOUT_SECONDS = 30.0


class StackdriverOptions(BaseModel):
    """``jsonData`` of a Stackdriver data source instance.

    ``gce_default_project`` is written back by the data source once the
    default project of a GCE-authenticated instance has been discovered.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="allow"
    )

    authentication_type: AuthenticationType = AuthenticationType.JWT
    default_project: str | None = None
    gce_default_project: str | None = None


class DataSourceInstanceSettings(BaseModel):
    """Settings of one data source instance."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: int = 1
    name: str = "Stackdriver"
    url: str = DEFAULT_URL
    server_url: str = DEFAULT_SERVER_URL
    json_data: StackdriverOptions = Field(default_factory=StackdriverOptions)
    http_timeout_seconds: float = DEFAULT_HTTP_TIMEOUT_SECONDS


def load_settings_from_env() -> DataSourceInstanceSettings:
    """Build instance settings from ``STACKDRIVER_*`` environment variables."""
    auth_type = os.environ.get("STACKDRIVER_AUTH_TYPE", "jwt").lower()
    try:
        authentication_type = AuthenticationType(auth_type)
    except ValueError:
        logger.warning(
            f"Unknown STACKDRIVER_AUTH_TYPE '{auth_type}', falling back to jwt"
        )
        authentication_type = AuthenticationType.JWT

    settings = DataSourceInstanceSettings(
        id=int(os.environ.get("STACKDRIVER_DATASOURCE_ID", "1")),
        name=os.environ.get("STACKDRIVER_DATASOURCE_NAME", "Stackdriver"),
        url=os.environ.get("STACKDRIVER_URL", DEFAULT_URL).rstrip("/"),
        server_url=os.environ.get(
            "STACKDRIVER_SERVER_URL", DEFAULT_SERVER_URL
        ).rstrip("/"),
        json_data=StackdriverOptions(
            authentication_type=authentication_type,
            default_project=os.environ.get("STACKDRIVER_DEFAULT_PROJECT") or None,
            gce_default_project=os.environ.get("STACKDRIVER_GCE_DEFAULT_PROJECT")
            or None,
        ),
        http_timeout_seconds=float(
            os.environ.get(
                "STACKDRIVER_HTTP_TIMEOUT", str(DEFAULT_HTTP_TIMEOUT_SECONDS)
            )
        ),
    )
    logger.info(
        f"Loaded Stackdriver settings: url={settings.url} "
        f"auth={settings.json_data.authentication_type.value}"
    )
    return settings
