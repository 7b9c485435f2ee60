import logging
import os

import uvicorn

from stackdriver_datasource.api import create_app
from stackdriver_datasource.telemetry import setup_logging

# 1. CONFIGURE LOGGING EARLY
setup_logging()

logger = logging.getLogger(__name__)

# 2. BUILD APPLICATION
app = create_app()


if __name__ == "__main__":
    host = os.environ.get("HOST", "0.0.0.0")
    port = int(os.environ.get("PORT", "8001"))
    logger.info(f"Starting Stackdriver data source API on {host}:{port}")
    uvicorn.run(app, host=host, port=port, log_config=None)
