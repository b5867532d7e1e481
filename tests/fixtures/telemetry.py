"""Test doubles and payload factories for LinkTrace."""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Tuple

from linktrace.common.exceptions import EnrichmentError
from linktrace.tracking.schemas import DeviceTelemetry, TrackingEvent


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: Optional[datetime] = None):
        self.now = start or datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


class StubGeocoder:
    """Returns a fixed address and records every lookup."""

    def __init__(self, address: Optional[str] = "Somewhere"):
        self.address = address
        self.calls: List[Tuple[float, float]] = []
        self.closed = False

    async def reverse(self, latitude: float, longitude: float) -> Optional[str]:
        self.calls.append((latitude, longitude))
        return self.address

    async def aclose(self) -> None:
        self.closed = True


class FailingGeocoder(StubGeocoder):
    """Always raises EnrichmentError."""

    async def reverse(self, latitude: float, longitude: float) -> Optional[str]:
        self.calls.append((latitude, longitude))
        raise EnrichmentError("service unavailable", provider="stub")


class SlowGeocoder(StubGeocoder):
    """Sleeps past any reasonable enrichment timeout."""

    def __init__(self, delay: float = 5.0):
        super().__init__()
        self.delay = delay

    async def reverse(self, latitude: float, longitude: float) -> Optional[str]:
        self.calls.append((latitude, longitude))
        await asyncio.sleep(self.delay)
        return "too late"


def device_info(
    latitude: Optional[float] = 10.0,
    longitude: Optional[float] = 20.0,
    battery_level: Optional[float] = 87,
) -> dict:
    """Landing page ``deviceInfo`` payload in wire format."""
    return {
        "userAgent": "Mozilla/5.0 (X11; Linux x86_64) Firefox/131.0",
        "screenWidth": 1920,
        "screenHeight": 1080,
        "batteryLevel": battery_level,
        "latitude": latitude,
        "longitude": longitude,
        "timestamp": "2026-10-18T12:00:00.000Z",
    }


def make_telemetry(**kwargs) -> DeviceTelemetry:
    return DeviceTelemetry.model_validate(device_info(**kwargs))


def make_event(user_agent: str = "agent", received_at: Optional[datetime] = None) -> TrackingEvent:
    return TrackingEvent(
        user_agent=user_agent,
        ip="203.0.113.7",
        timestamp=received_at or datetime.now(timezone.utc),
    )
