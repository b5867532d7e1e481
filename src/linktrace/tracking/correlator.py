"""Event Correlator - ties client telemetry back to its tracking session."""

import asyncio
import logging
from typing import Optional

from linktrace.common.constants import GeocodingConstants
from linktrace.common.exceptions import EnrichmentError, SessionNotFoundError
from linktrace.geocoding.client import ReverseGeocoder
from linktrace.tracking.schemas import DeviceTelemetry, TrackingEvent
from linktrace.tracking.store import SessionStore

logger = logging.getLogger(__name__)


class EventCorrelator:
    """Validates, enriches and records telemetry reports.

    Enrichment is best-effort: a geocoder error, a timeout or an empty
    result leaves the event without an address but never fails the
    submission.
    """

    def __init__(
        self,
        store: SessionStore,
        geocoder: Optional[ReverseGeocoder] = None,
        enrichment_timeout: float = GeocodingConstants.TIMEOUT_SECONDS,
    ):
        """Initialize the correlator.

        Args:
            store: Session store that owns the events.
            geocoder: Reverse geocoder. Enrichment is skipped when None.
            enrichment_timeout: Upper bound in seconds for one lookup.
        """
        self.store = store
        self.geocoder = geocoder
        self.enrichment_timeout = enrichment_timeout

    async def submit(
        self,
        session_id: str,
        telemetry: DeviceTelemetry,
        client_ip: Optional[str] = None,
    ) -> TrackingEvent:
        """Record one telemetry report against a session.

        Args:
            session_id: Tracking id the landing page reported.
            telemetry: Raw device telemetry.
            client_ip: Network address observed for the caller.

        Returns:
            The event as appended, including the address if one resolved.

        Raises:
            SessionNotFoundError: If the session does not exist, or was
                removed while the lookup was in flight.
        """
        if session_id not in self.store:
            raise SessionNotFoundError(session_id)

        event = TrackingEvent.from_telemetry(
            telemetry, ip=client_ip, received_at=self.store.clock()
        )

        if telemetry.has_coordinates and self.geocoder is not None:
            address = await self._resolve_address(telemetry.latitude, telemetry.longitude)
            if address is not None:
                event = event.model_copy(update={"address": address})
                logger.debug(f"Address for {session_id}: {address}")

        self.store.append_event(session_id, event)
        logger.info(f"Recorded telemetry for tracking session {session_id}")
        return event

    async def _resolve_address(self, latitude: float, longitude: float) -> Optional[str]:
        try:
            return await asyncio.wait_for(
                self.geocoder.reverse(latitude, longitude),
                timeout=self.enrichment_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(
                f"Reverse geocoding timed out after {self.enrichment_timeout}s"
            )
        except EnrichmentError as e:
            logger.warning(f"Reverse geocoding failed: {e.message}")
        except Exception as e:
            # Enrichment failure should not fail the submission
            logger.error(f"Unexpected reverse geocoding error: {e}")
        return None
