"""Middleware configuration for the data source API."""

import logging
import os
import time
from typing import Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Global handler for unhandled exceptions."""
    logger.error(f"Unhandled exception for {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"message": "Internal Server Error", "detail": str(exc)},
    )


async def timing_middleware(request: Request, call_next: Any) -> Any:
    """Log method, path, status and duration of every request."""
    start = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - start) * 1000
    logger.info(
        f"{request.method} {request.url.path} -> {response.status_code} "
        f"({elapsed_ms:.1f}ms)"
    )
    return response


def configure_cors(app: FastAPI) -> None:
    """Configure CORS middleware for the application."""
    cors_origins = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]
    # Allow all origins only if explicitly set (e.g., for containerized deployments)
    if os.getenv("CORS_ALLOW_ALL", "").lower() == "true":
        cors_origins = ["*"]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )


def configure_middleware(app: FastAPI) -> None:
    """Configure all middleware for the application."""
    app.add_exception_handler(Exception, global_exception_handler)
    configure_cors(app)
    app.middleware("http")(timing_middleware)
