"""Example: a tracking session from creation to expiry, in process."""

import asyncio
from datetime import timedelta

from linktrace.common.logging import get_logger
from linktrace.tracking import (
    DeviceTelemetry,
    EventCorrelator,
    ExpirySweeper,
    RedirectDispatcher,
    SessionStore,
)

logger = get_logger(__name__)


async def example_lifecycle():
    """
    1. Create a tracking session
    2. Resolve its redirect target
    3. Record a visit (no geocoder, so no address)
    4. Sweep with zero retention to expire it
    """
    store = SessionStore()
    dispatcher = RedirectDispatcher(store)
    correlator = EventCorrelator(store)
    sweeper = ExpirySweeper(store, retention=timedelta(0))

    session_id = store.create("https://example.com")
    logger.info(f"Redirect target: {dispatcher.resolve(session_id)}")

    telemetry = DeviceTelemetry(userAgent="example", screenWidth=1280, screenHeight=720)
    event = await correlator.submit(session_id, telemetry, client_ip="192.0.2.10")
    logger.info(f"Recorded event at {event.timestamp.isoformat()} from {event.ip}")

    evicted = sweeper.run_once()
    logger.info(f"Evicted: {evicted}; live sessions: {store.size()}")


if __name__ == "__main__":
    asyncio.run(example_lifecycle())
