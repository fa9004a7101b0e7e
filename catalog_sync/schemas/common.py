"""Common schemas for API requests and responses."""

from typing import Any

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Standard error response."""

    success: bool = Field(default=False)
    error: str = Field(description="Error message")
    error_type: str = Field(description="Error type/class name")
    detail: dict[str, Any] | None = Field(default=None, description="Additional error details")

    model_config = {"extra": "forbid"}


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(description="Health status (healthy, degraded)")
    version: str = Field(description="Service version")
    environment: str = Field(description="Environment name")
    checks: dict[str, bool] = Field(default_factory=dict, description="Individual health checks")

    model_config = {"extra": "forbid"}


class SelectCategoryRequest(BaseModel):
    """Body for the select-category intent. ``null`` returns to All."""

    slug: str | None = Field(default=None, description="Category slug or null for All")

    model_config = {"extra": "forbid"}


class SearchTextRequest(BaseModel):
    """Body for the search-text intent."""

    text: str = Field(default="", max_length=200, description="Raw search field text")

    model_config = {"extra": "forbid"}
