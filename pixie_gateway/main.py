#!/usr/bin/env python3
"""
Pixie Gateway - Main Entry Point

This is the thin orchestration layer that:
1. Loads configuration
2. Initializes the query service
3. Serves the HTTP API

All business logic is in the modules, following black box principles.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from pixie_gateway import __version__
from pixie_gateway.config.provider import build_config_provider
from pixie_gateway.logging_config import configure_logging, get_logging_config
from pixie_gateway.modules.api import HealthResponse, QueryResponse, ScriptRequest

# Import modules through their black box interfaces
from pixie_gateway.modules.config import get_config
from pixie_gateway.modules.query import (
    GatewayError,
    QueryService,
    load_named_script,
    pixie_client_factory,
)

# Get configuration
config = get_config()

configure_logging(config.get("log_level"))
logger = logging.getLogger(__name__)

# Module instances (initialized at startup)
query_service: Optional[QueryService] = None


def build_query_service() -> QueryService:
    """Wire the query service from process settings."""
    return QueryService(
        config_provider=build_config_provider(
            config.get("pixie_config_source"), config.get("pixie_config_file")
        ),
        client_factory=pixie_client_factory(use_encryption=config.get("use_encryption")),
        session_timeout=config.get("session_timeout"),
        execution_timeout=config.get("execution_timeout"),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifecycle - initialize and cleanup resources.
    """
    global query_service

    logger.info("Starting Pixie Gateway...")
    query_service = build_query_service()
    logger.info(
        f"Timeouts: session {config.get('session_timeout')}s, "
        f"execution {config.get('execution_timeout')}s"
    )
    logger.info("Pixie Gateway started successfully")

    yield

    logger.info("Pixie Gateway shutdown complete")


# Create FastAPI application; Swagger UI is served at the root
app = FastAPI(
    title="Pixie Gateway",
    description="Run Pixie PxL scripts over HTTP and get the results as JSON",
    version=__version__,
    lifespan=lifespan,
    openapi_url="/openapi.json",
    docs_url="/",
    redoc_url=None,
)


# Dependency injection helpers
def get_query_service() -> QueryService:
    """Return the initialized query service."""
    if not query_service:
        raise HTTPException(503, "Service not initialized")
    return query_service


# Query Endpoints


@app.post(
    "/pixie",
    response_model=QueryResponse,
    responses={
        400: {"description": "Invalid request body, script file or PxL compilation error"},
        401: {"description": "Authentication with Pixie failed"},
        404: {"description": "Cluster not found"},
        500: {"description": "Configuration or execution failure"},
        504: {"description": "Timeout connecting to the cluster or executing the script"},
    },
)
async def run_script(
    request: ScriptRequest,
    service: QueryService = Depends(get_query_service),
):
    """
    Execute a PxL script on the configured cluster.

    Returns:
        200: Columns, rows and execution stats
        4xx/5xx: Plain-text error message
    """
    if request.script_file:
        script = load_named_script(config.get("scripts_dir"), request.script_file)
        logger.info(f"Loaded PxL script from {request.script_file}")
    else:
        script = request.script

    result = await service.run(script)
    return result.to_dict()


# Health/Monitoring Endpoints


@app.get("/healthz", response_model=HealthResponse)
async def healthz():
    """
    Minimal health check endpoint for container liveness/readiness probes.

    Returns:
        200: Service is running
    """
    return HealthResponse()


# Error handlers


@app.exception_handler(GatewayError)
async def gateway_error_handler(request: Request, exc: GatewayError):
    """Map gateway errors to their HTTP status with a plain-text body."""
    logger.error(f"{type(exc).__name__}: {exc.message}")
    return PlainTextResponse(exc.message, status_code=exc.status_code)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    """Return framework HTTP errors (503, 404, 405) as plain text too."""
    return PlainTextResponse(str(exc.detail), status_code=exc.status_code, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Handle request body validation errors."""
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        message = error.get("msg", "invalid value")
        messages.append(f"{location}: {message}" if location else message)
    detail = "; ".join(messages) or "Invalid request body"
    logger.error(f"Validation error: {detail}")
    return PlainTextResponse(f"Invalid request: {detail}", status_code=400)


def run() -> None:
    """Console entry point."""
    logger.info(f"Server running on {config.get('host')}:{config.get('port')}")
    logger.info(f"OpenAPI specification available at http://localhost:{config.get('port')}/openapi.json")
    logger.info(f"Swagger UI available at http://localhost:{config.get('port')}/")
    uvicorn.run(
        "pixie_gateway.main:app",
        host=config.get("host"),
        port=config.get("port"),
        log_level=config.get("log_level").lower(),
        reload=config.get("debug"),
        log_config=get_logging_config(config.get("log_level")),
    )


if __name__ == "__main__":
    run()
