"""Tracking Service - owns the tracking core and exposes it to the API layer.

This service wires the session store, sweeper, correlator, dispatcher and
geocoder together, providing a clean interface for the gateway.

Design principles:
- Every component is injectable so tests run isolated instances
- Telemetry for unknown ids is logged, never reported to the visitor
- Enrichment failures are handled inside the correlator
"""

import logging
import os
import time
from typing import Optional, Tuple

import psutil

from linktrace.common.config import Config, get_config
from linktrace.common.exceptions import SessionNotFoundError
from linktrace.geocoding.client import NominatimGeocoder, ReverseGeocoder
from linktrace.tracking.correlator import EventCorrelator
from linktrace.tracking.dispatcher import RedirectDispatcher
from linktrace.tracking.schemas import DeviceTelemetry, TrackingEvent
from linktrace.tracking.store import SessionStore
from linktrace.tracking.sweeper import ExpirySweeper


logger = logging.getLogger(__name__)


def process_uptime() -> float:
    """Seconds since this process started."""
    started = psutil.Process(os.getpid()).create_time()
    return max(0.0, time.time() - started)


class TrackingService:
    """Service for issuing tracking links and recording visits.

    Orchestrates:
    1. Link creation and redirect resolution
    2. Telemetry correlation and enrichment
    3. Background expiry of stale sessions
    4. Operator views (events, deletion, status)
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        store: Optional[SessionStore] = None,
        geocoder: Optional[ReverseGeocoder] = None,
        sweeper: Optional[ExpirySweeper] = None,
    ):
        """Initialize the service.

        Args:
            config: Settings. Global config if not provided.
            store: Session store. Created if not provided.
            geocoder: Reverse geocoder. A Nominatim client is created when
                not provided and geocoding is enabled.
            sweeper: Expiry sweeper. Created from config if not provided.
        """
        self.config = config or get_config()
        self.store = store or SessionStore()

        if geocoder is None and self.config.geocoding_enabled:
            geocoder = NominatimGeocoder(
                base_url=self.config.geocoder_url,
                user_agent=self.config.geocoder_user_agent,
                timeout=self.config.geocoder_timeout_seconds,
            )
        self.geocoder = geocoder

        self.correlator = EventCorrelator(
            self.store,
            geocoder=self.geocoder,
            enrichment_timeout=self.config.geocoder_timeout_seconds,
        )
        self.dispatcher = RedirectDispatcher(self.store)
        self.sweeper = sweeper or ExpirySweeper(
            self.store,
            interval=self.config.sweep_interval,
            retention=self.config.retention,
        )

    def start(self) -> None:
        """Start background housekeeping."""
        self.sweeper.start()

    async def shutdown(self) -> None:
        """Stop the sweeper and release the geocoder's HTTP client."""
        self.sweeper.shutdown()
        if self.geocoder is not None:
            await self.geocoder.aclose()
        logger.info("TrackingService shutdown complete")

    def create_link(self, target_url: str) -> str:
        """Create a tracking session and return its id."""
        return self.store.create(target_url)

    def resolve(self, session_id: str) -> str:
        """Target URL for a live session. Raises SessionNotFoundError."""
        return self.dispatcher.resolve(session_id)

    async def record_telemetry(
        self,
        session_id: str,
        telemetry: DeviceTelemetry,
        client_ip: Optional[str] = None,
    ) -> Optional[TrackingEvent]:
        """Record a telemetry report.

        Returns:
            The stored event, or None when the session is unknown. Callers
            answer the visitor identically in both cases.
        """
        try:
            return await self.correlator.submit(session_id, telemetry, client_ip)
        except SessionNotFoundError:
            logger.warning(
                f"Telemetry for unknown or expired tracking session {session_id}",
                extra={"client_ip": client_ip},
            )
            return None

    def get_events(self, session_id: str) -> Tuple[TrackingEvent, ...]:
        """Events recorded for a session. Raises SessionNotFoundError."""
        return self.store.get(session_id).events

    def delete(self, session_id: str) -> None:
        """Delete a session. Raises SessionNotFoundError."""
        self.store.delete(session_id)

    def active_sessions(self) -> int:
        return self.store.size()
