"""Tracking core - session lifecycle, telemetry correlation and redirects.

Components:
    SessionStore: concurrency-safe table of tracking sessions
    ExpirySweeper: background eviction of stale sessions
    EventCorrelator: validates and enriches telemetry, appends events
    RedirectDispatcher: resolves ids to target URLs
"""

from linktrace.tracking.identifiers import generate_tracking_id
from linktrace.tracking.schemas import DeviceTelemetry, Session, TrackingEvent
from linktrace.tracking.store import SessionStore, utc_now
from linktrace.tracking.sweeper import ExpirySweeper
from linktrace.tracking.correlator import EventCorrelator
from linktrace.tracking.dispatcher import RedirectDispatcher

__all__ = [
    "generate_tracking_id",
    "DeviceTelemetry",
    "Session",
    "TrackingEvent",
    "SessionStore",
    "utc_now",
    "ExpirySweeper",
    "EventCorrelator",
    "RedirectDispatcher",
]
