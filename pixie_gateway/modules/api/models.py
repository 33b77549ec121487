"""
Pixie Gateway API models.

These models define the request and response bodies of the HTTP API.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

MAX_SCRIPT_LENGTH = 1_000_000


# Request Models (API Input)


class ScriptRequest(BaseModel):
    """Request to run a PxL script."""

    script: Optional[str] = Field(
        None, description="PxL script source", max_length=MAX_SCRIPT_LENGTH
    )
    script_file: Optional[str] = Field(
        None,
        description="Name of a .pxl file in the gateway's scripts directory",
        min_length=1,
        max_length=255,
        pattern=r"^[A-Za-z0-9_][A-Za-z0-9_.-]*$",
    )

    @field_validator("script")
    @classmethod
    def validate_script(cls, v):
        """Reject scripts with no content."""
        if v is not None and not v.strip():
            raise ValueError("script must not be empty")
        return v

    @model_validator(mode="after")
    def require_one_source(self):
        """Exactly one of script and script_file must be given."""
        if self.script is None and self.script_file is None:
            raise ValueError("one of script or script_file is required")
        if self.script is not None and self.script_file is not None:
            raise ValueError("script and script_file are mutually exclusive")
        return self


# Response Models (API Output)


class QueryResponse(BaseModel):
    """Flattened result of a script run."""

    columns: List[str] = Field(default_factory=list)
    rows: List[List[str]] = Field(default_factory=list)
    stats: Any = None


class HealthResponse(BaseModel):
    status: str = "ok"
