"""LinkTrace - tracking links with device and location telemetry."""

__version__ = "0.1.0"
__author__ = "LinkTrace Team"

from linktrace.tracking.schemas import Session, TrackingEvent, DeviceTelemetry
from linktrace.tracking.store import SessionStore

__all__ = [
    "Session",
    "TrackingEvent",
    "DeviceTelemetry",
    "SessionStore",
]
