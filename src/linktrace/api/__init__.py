"""API - tracking gateway and service.

Endpoints:
    POST   /generate
    GET    /track/{id}
    POST   /location
    GET    /get-tracking/{pageID}
    GET    /stats/{id}
    DELETE /delete/{id}
    GET    /status
"""

from linktrace.api.gateway import app
from linktrace.api.schemas import (
    GenerateRequest,
    GenerateResponse,
    LocationRequest,
    LocationResponse,
    StatusResponse,
    ErrorResponse,
)
from linktrace.api.service import TrackingService

__all__ = [
    "app",
    "GenerateRequest",
    "GenerateResponse",
    "LocationRequest",
    "LocationResponse",
    "StatusResponse",
    "ErrorResponse",
    "TrackingService",
]
