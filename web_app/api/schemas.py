"""Pydantic schemas for API requests and responses."""

from pydantic import BaseModel, Field
from typing import Any, Dict, Optional
from datetime import datetime


class ShortenRequest(BaseModel):
    """Request to shorten a URL."""

    # Validated by the service so every bad URL gets the same 400 response
    url: str = Field(..., description="The URL to shorten (http or https), stored verbatim")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"url": "https://example.com/very/long/path/to/resource"},
            ]
        }
    }


class ShortenResponse(BaseModel):
    """Response after shortening a URL."""

    short_code: str = Field(..., description="The generated short code")
    short_url: str = Field(..., description="The complete short URL")
    original_url: str = Field(..., description="The original long URL")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "short_code": "AbC123",
                    "short_url": "https://short.link/AbC123",
                    "original_url": "https://example.com/very/long/path",
                }
            ]
        }
    }


class URLInfoResponse(BaseModel):
    """Response with URL information."""

    short_code: str
    short_url: str
    original_url: str


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Overall status")
    database: str = Field(..., description="Database status")
    cache: str = Field(..., description="Cache status")
    timestamp: datetime = Field(..., description="Check timestamp")


class ErrorResponse(BaseModel):
    """Error response."""

    error: str = Field(..., description="Error message")
    detail: Optional[Dict[str, Any]] = Field(None, description="Detailed error information")


class StatisticsResponse(BaseModel):
    """Statistics response."""

    total_urls: int
    database: str
    cache_enabled: bool
