"""
API Module - Black Box Interface

Purpose: HTTP request and response shapes
Interface: ScriptRequest, QueryResponse, HealthResponse
Hidden: Payload validation rules

The API module only orchestrates - it contains no business logic.
All logic is delegated to the query module.
"""

from .models import HealthResponse, QueryResponse, ScriptRequest

__all__ = [
    "HealthResponse",
    "QueryResponse",
    "ScriptRequest",
]
