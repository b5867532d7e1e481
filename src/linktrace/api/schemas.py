"""API Schemas - Request/Response models for the tracking gateway.

Wire names follow the camelCase keys the landing page and existing
clients use (``trackingUrl``, ``pageID``, ``activeTracking``).
"""

from typing import List, Optional
from urllib.parse import urlsplit
from pydantic import BaseModel, Field, field_validator

from linktrace.tracking.schemas import DeviceTelemetry, TrackingEvent


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================

class GenerateRequest(BaseModel):
    """Request body for POST /generate."""
    target_url: str = Field(
        ..., min_length=1, description="Absolute http(s) URL to redirect to"
    )

    @field_validator("target_url")
    @classmethod
    def _require_http_url(cls, value: str) -> str:
        value = value.strip()
        parts = urlsplit(value)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise ValueError("target_url must be an absolute http or https URL")
        return value

    model_config = {
        "json_schema_extra": {"example": {"target_url": "https://example.com"}}
    }


class LocationRequest(BaseModel):
    """Request body for POST /location, sent by the landing page."""
    page_id: str = Field(..., alias="pageID", description="Tracking id")
    device_info: DeviceTelemetry = Field(..., alias="deviceInfo")

    model_config = {"populate_by_name": True}


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class GenerateResponse(BaseModel):
    """Response for POST /generate."""
    tracking_url: str = Field(..., alias="trackingUrl")

    model_config = {"populate_by_name": True}


class LocationResponse(BaseModel):
    """Response for POST /location. Always reports success."""
    success: bool = True


class TrackingDataResponse(BaseModel):
    """Response for GET /get-tracking/{pageID}."""
    clicks: List[TrackingEvent] = Field(default_factory=list)


class MessageResponse(BaseModel):
    """Plain message body used by delete and lookup failures."""
    message: str


class StatusResponse(BaseModel):
    """Response for GET /status."""
    status: str = "running"
    active_tracking: int = Field(..., ge=0, alias="activeTracking")
    uptime: float = Field(..., ge=0, description="Process uptime in seconds")

    model_config = {"populate_by_name": True}


class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Human-readable error message")
    request_id: Optional[str] = Field(
        default=None, description="Request ID for debugging"
    )
