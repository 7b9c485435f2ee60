"""GET access to Cloud Monitoring resources through the data source proxy."""

import logging

from ..exceptions import DataSourceRequestError
from .backend import BackendResponse, BackendSrv

logger = logging.getLogger(__name__)


class ResourceClient:
    """Fetches ``base_url + path`` with a bounded number of retries.

    Retries are immediate: no backoff and no jitter. Any transport or status
    failure is retried; once retries are exhausted the last error propagates.
    """

    def __init__(self, backend: BackendSrv, base_url: str) -> None:
        self.backend = backend
        self.base_url = base_url

    async def fetch(self, path: str, max_retries: int = 1) -> BackendResponse:
        attempt = 0
        while True:
            attempt += 1
            try:
                return await self.backend.datasource_request(
                    self.base_url + path, method="GET"
                )
            except DataSourceRequestError as e:
                if max_retries <= 0:
                    logger.error(
                        f"Fetching resource '{path}' failed after {attempt} attempt(s): {e}"
                    )
                    raise
                logger.info(
                    f"Fetching resource '{path}' failed ({e}), retrying "
                    f"({max_retries} retries left)"
                )
                max_retries -= 1
