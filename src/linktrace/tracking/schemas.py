"""Tracking schemas - sessions, events and raw client telemetry."""

from datetime import datetime
from typing import Optional, Tuple
from pydantic import BaseModel, Field, model_serializer


class DeviceTelemetry(BaseModel):
    """Raw telemetry reported by the landing page (``deviceInfo``).

    Field names follow the camelCase keys the browser script sends.
    Unknown keys are ignored.
    """
    user_agent: Optional[str] = Field(default=None, alias="userAgent")
    screen_width: Optional[int] = Field(default=None, ge=0, alias="screenWidth")
    screen_height: Optional[int] = Field(default=None, ge=0, alias="screenHeight")
    battery_level: Optional[float] = Field(
        default=None, ge=0, le=100, alias="batteryLevel",
        description="Battery charge in percent",
    )
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    timestamp: Optional[str] = Field(
        default=None, description="Client clock at collection time"
    )

    model_config = {
        "populate_by_name": True,
        "extra": "ignore",
        "json_schema_extra": {
            "example": {
                "userAgent": "Mozilla/5.0 (X11; Linux x86_64)",
                "screenWidth": 1920,
                "screenHeight": 1080,
                "batteryLevel": 87,
                "latitude": 40.7128,
                "longitude": -74.006,
                "timestamp": "2026-10-18T09:15:00.000Z",
            }
        },
    }

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None


class TrackingEvent(BaseModel):
    """One telemetry report attached to a tracking session.

    Immutable once built; serialised with camelCase aliases.
    """
    user_agent: Optional[str] = Field(default=None, alias="userAgent")
    screen_width: Optional[int] = Field(default=None, alias="screenWidth")
    screen_height: Optional[int] = Field(default=None, alias="screenHeight")
    battery_level: Optional[float] = Field(default=None, alias="batteryLevel")
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    client_timestamp: Optional[str] = Field(default=None, alias="clientTimestamp")
    ip: Optional[str] = Field(default=None, description="Source network address")
    timestamp: datetime = Field(..., description="Server receive time")
    address: Optional[str] = Field(
        default=None, description="Reverse-geocoded display name"
    )

    model_config = {"frozen": True, "populate_by_name": True}

    @model_serializer(mode="wrap")
    def _omit_missing_address(self, handler):
        # Events without a resolved address carry no address key at all
        data = handler(self)
        if self.address is None:
            data.pop("address", None)
        return data

    @classmethod
    def from_telemetry(
        cls,
        telemetry: DeviceTelemetry,
        ip: Optional[str],
        received_at: datetime,
    ) -> "TrackingEvent":
        return cls(
            user_agent=telemetry.user_agent,
            screen_width=telemetry.screen_width,
            screen_height=telemetry.screen_height,
            battery_level=telemetry.battery_level,
            latitude=telemetry.latitude,
            longitude=telemetry.longitude,
            client_timestamp=telemetry.timestamp,
            ip=ip,
            timestamp=received_at,
        )


class Session(BaseModel):
    """Point-in-time view of a tracking session.

    The store owns the live record; this snapshot never changes after
    it is handed out.
    """
    session_id: str = Field(..., description="Opaque tracking identifier")
    target_url: str = Field(..., description="Where the visitor is sent")
    created_at: datetime = Field(..., description="Creation time, drives expiry")
    events: Tuple[TrackingEvent, ...] = Field(default=())

    model_config = {"frozen": True}
