"""
Query Module - Black Box Interface

Purpose: Run a PxL script on a Pixie cluster and collect its tables
Interface: QueryService.run(), client protocols, error taxonomy
Hidden: Session handling, timeouts, vendor error classification

The Pixie binding can be swapped for any QueryServiceClient.
"""

from .client import ExecutionStats, QueryServiceClient, QuerySession, ResultHandle
from .errors import (
    AuthError,
    CompilationError,
    ConfigError,
    ExecutionError,
    GatewayError,
    NotFoundError,
    QueryTimeoutError,
    RequestError,
    classify_error,
)
from .pixie import pixie_client_factory
from .scripts import load_named_script, read_script_file
from .service import QueryResult, QueryService

__all__ = [
    "AuthError",
    "CompilationError",
    "ConfigError",
    "ExecutionError",
    "ExecutionStats",
    "GatewayError",
    "NotFoundError",
    "QueryResult",
    "QueryService",
    "QueryServiceClient",
    "QuerySession",
    "QueryTimeoutError",
    "RequestError",
    "ResultHandle",
    "classify_error",
    "load_named_script",
    "pixie_client_factory",
    "read_script_file",
]
