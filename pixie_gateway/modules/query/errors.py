"""
Gateway error taxonomy.

Every failure of a query request ends as one GatewayError subclass that
carries the HTTP status it maps to. Bindings raise the typed errors
directly when the remote client tells them the category; anything else
goes through classify_error().
"""

import logging
from typing import Literal, Optional

logger = logging.getLogger(__name__)

Phase = Literal["client", "session", "submit", "stream"]


class GatewayError(Exception):
    """Base error for a failed query request."""

    status_code = 500

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


class RequestError(GatewayError):
    """Malformed inbound payload."""

    status_code = 400


class ConfigError(GatewayError):
    """Pixie configuration is missing or invalid."""

    status_code = 500


class AuthError(GatewayError):
    """Remote service rejected the credentials."""

    status_code = 401


class NotFoundError(GatewayError):
    """Cluster id unknown to the remote service."""

    status_code = 404


class QueryTimeoutError(GatewayError):
    """Session or execution deadline exceeded."""

    status_code = 504


class CompilationError(GatewayError):
    """Script failed remote compilation."""

    status_code = 400


class ExecutionError(GatewayError):
    """Any other remote failure."""

    status_code = 500


# Substrings matched case-insensitively against untyped client errors.
SESSION_AUTH_MARKERS = ("unauthenticated", "invalid api key")
EXECUTION_AUTH_MARKERS = ("unauthenticated", "invalid token")
NOT_FOUND_MARKERS = ("not found", "does not exist")
TIMEOUT_MARKERS = ("deadline exceeded", "deadline_exceeded")


def _contains(text: str, markers) -> bool:
    return any(m in text for m in markers)


def classify_error(exc: BaseException, phase: Phase, cluster_id: str = "") -> GatewayError:
    """
    Map an untyped client error to the gateway taxonomy.

    The vendor client does not expose a typed error category for most
    failures, so this falls back to matching on the error text. Typed
    GatewayErrors pass through unchanged.

    Args:
        exc: Error raised by the client binding
        phase: Step that failed: client construction, session open,
            script submission or result streaming
        cluster_id: Target cluster, used in messages

    Returns:
        The GatewayError to report
    """
    if isinstance(exc, GatewayError):
        return exc

    text = str(exc)
    lowered = text.lower()

    if phase == "client":
        if _contains(lowered, SESSION_AUTH_MARKERS):
            return AuthError("Authentication failed: Invalid API key", exc)
        return ExecutionError(f"Failed to create Pixie API client: {text}", exc)

    if phase == "session":
        if _contains(lowered, SESSION_AUTH_MARKERS):
            logger.error("Possible causes: invalid API key, invalid cluster ID, or expired credentials")
            return AuthError("Authentication failed: Invalid API key or cluster ID", exc)
        if _contains(lowered, NOT_FOUND_MARKERS):
            return NotFoundError(f"Cluster not found: {cluster_id}", exc)
        if _contains(lowered, TIMEOUT_MARKERS):
            return QueryTimeoutError("Timeout connecting to cluster", exc)
        return ExecutionError(f"Failed to connect to cluster: {text}", exc)

    if _contains(lowered, EXECUTION_AUTH_MARKERS):
        return AuthError(
            "Authentication failed during script execution: Invalid or expired token", exc
        )
    return ExecutionError(text or type(exc).__name__, exc)
