"""API Gateway - FastAPI application serving tracking links and telemetry."""

import logging, threading
from contextlib import asynccontextmanager
from typing import AsyncGenerator, List, Optional
from uuid import uuid4

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse

from linktrace.api.landing import render_landing_page
from linktrace.api.schemas import (
    ErrorResponse,
    GenerateRequest,
    GenerateResponse,
    LocationRequest,
    LocationResponse,
    MessageResponse,
    StatusResponse,
    TrackingDataResponse,
)
from linktrace.api.service import TrackingService, process_uptime
from linktrace.common.config import get_config
from linktrace.common.constants import MessageConstants
from linktrace.common.exceptions import SessionNotFoundError
from linktrace.common.logging.logger import LOG_FORMAT
from linktrace.tracking.schemas import TrackingEvent

config = get_config()

logging.basicConfig(level=config.log_level.value, format=LOG_FORMAT)
logger = logging.getLogger("linktrace_api")


class ServiceManager:
    """Thread-safe service singleton manager."""

    _instance: Optional[TrackingService] = None
    _lock = threading.Lock()
    _initialized = False

    @classmethod
    def get_service(cls) -> TrackingService:
        """Get or create the tracking service instance (thread-safe)."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = TrackingService()
                    cls._initialized = True
                    logger.info("TrackingService initialized")
        return cls._instance

    @classmethod
    def install(cls, service: TrackingService) -> None:
        """Use a pre-built service instance (tests, embedding)."""
        with cls._lock:
            cls._instance = service
            cls._initialized = True

    @classmethod
    async def shutdown(cls) -> None:
        """Shutdown the service and release resources."""
        with cls._lock:
            service = cls._instance
            cls._instance = None
            cls._initialized = False
        if service is not None:
            await service.shutdown()
            logger.info("TrackingService shutdown complete")


def get_service() -> TrackingService:
    """Get the tracking service instance."""
    return ServiceManager.get_service()


# =============================================================================
# CORS CONFIGURATION
# =============================================================================

def get_cors_origins() -> List[str]:
    """Get allowed CORS origins from configuration.

    In production, set LINKTRACE_CORS_ORIGINS to a comma-separated list
    of allowed origins.
    """
    origins = config.cors_origin_list
    if origins:
        return origins

    # Default: restrictive in production, permissive in development
    if config.is_production:
        logger.warning(
            "LINKTRACE_CORS_ORIGINS not set in production. "
            "CORS will be disabled. Set LINKTRACE_CORS_ORIGINS for cross-origin access."
        )
        return []

    logger.warning("Running in development mode with permissive CORS (allow_origins=['*'])")
    return ["*"]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    # Startup
    logger.info("LinkTrace gateway starting up...")
    get_service().start()
    logger.info("Using in-memory storage - data will be lost on server restart")

    yield

    # Shutdown
    logger.info("LinkTrace gateway shutting down...")
    await ServiceManager.shutdown()
    logger.info("LinkTrace gateway shutdown complete")


# Create FastAPI application
app = FastAPI(
    title="LinkTrace Gateway",
    description="Tracking links with device, location and network telemetry.",
    version="0.1.0",
    lifespan=lifespan,
    docs_url=None if config.is_production else "/docs",
    redoc_url=None if config.is_production else "/redoc",
)


# CORS middleware (configured from environment)
cors_origins = get_cors_origins()
if cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=cors_origins != ["*"],
        allow_methods=["GET", "POST", "DELETE"],
        allow_headers=["Content-Type", "X-Request-ID"],
    )


# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================

@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
    """Handle validation errors."""
    request_id = getattr(request.state, "request_id", None)
    logger.warning(
        "Validation error",
        extra={"request_id": request_id, "error": str(exc)}
    )
    return JSONResponse(
        status_code=400,
        content=ErrorResponse(
            error="validation_error",
            message=str(exc),
            request_id=request_id,
        ).model_dump(),
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected errors.

    Logs full exception for debugging but returns sanitized message to client.
    """
    request_id = getattr(request.state, "request_id", None)
    logger.exception(
        "Unexpected error",
        extra={"request_id": request_id, "error_type": type(exc).__name__}
    )
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error="internal_error",
            message="An unexpected error occurred",
            request_id=request_id,
        ).model_dump(),
    )


# =============================================================================
# MIDDLEWARE
# =============================================================================

@app.middleware("http")
async def add_request_id(request: Request, call_next):
    """Add request ID to each request for tracing."""
    request_id = f"req_{uuid4().hex[:12]}"
    request.state.request_id = request_id

    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


def client_ip(request: Request, trust_forwarded_for: bool) -> Optional[str]:
    """Best guess at the visitor's address.

    Uses the first X-Forwarded-For hop when forwarded headers are trusted.
    """
    if trust_forwarded_for:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            first_hop = forwarded.split(",")[0].strip()
            if first_hop:
                return first_hop
    return request.client.host if request.client else None


# =============================================================================
# ENDPOINTS
# =============================================================================

@app.post("/generate", response_model=GenerateResponse)
async def generate(
    request: Request,
    body: GenerateRequest,
    service: TrackingService = Depends(get_service),
) -> GenerateResponse:
    """Create a tracking link for ``target_url``."""
    session_id = service.create_link(body.target_url)
    tracking_url = str(request.url_for("track", session_id=session_id))
    return GenerateResponse(tracking_url=tracking_url)


@app.get("/track/{session_id}", name="track", response_class=HTMLResponse)
async def track(
    request: Request,
    session_id: str,
    service: TrackingService = Depends(get_service),
):
    """Serve the landing page that reports telemetry and redirects."""
    try:
        target_url = service.resolve(session_id)
    except SessionNotFoundError:
        return PlainTextResponse(MessageConstants.TRACK_NOT_FOUND, status_code=404)

    location_url = request.url_for("record_location").path
    return HTMLResponse(render_landing_page(session_id, target_url, location_url))


@app.post("/location", name="record_location", response_model=LocationResponse)
async def record_location(
    request: Request,
    body: LocationRequest,
    service: TrackingService = Depends(get_service),
) -> LocationResponse:
    """Accept a telemetry report. Answers success even for unknown ids."""
    address = client_ip(request, service.config.trust_forwarded_for)
    await service.record_telemetry(body.page_id, body.device_info, address)
    return LocationResponse(success=True)


@app.get(
    "/get-tracking/{page_id}",
    response_model=TrackingDataResponse,
    responses={404: {"model": MessageResponse}},
)
async def get_tracking(
    page_id: str,
    service: TrackingService = Depends(get_service),
):
    """Events recorded for a tracking link, wrapped as ``clicks``."""
    try:
        events = service.get_events(page_id)
    except SessionNotFoundError:
        return JSONResponse(
            status_code=404,
            content={"message": MessageConstants.TRACKING_DATA_NOT_FOUND},
        )
    return TrackingDataResponse(clicks=list(events))


@app.get("/stats/{session_id}", response_model=List[TrackingEvent])
async def stats(
    session_id: str,
    service: TrackingService = Depends(get_service),
):
    """Raw event array for a tracking link."""
    try:
        events = service.get_events(session_id)
    except SessionNotFoundError:
        return PlainTextResponse(MessageConstants.STATS_NOT_FOUND, status_code=404)
    return list(events)


@app.delete(
    "/delete/{session_id}",
    response_model=MessageResponse,
    responses={404: {"model": MessageResponse}},
)
async def delete_tracking(
    session_id: str,
    service: TrackingService = Depends(get_service),
):
    """Delete a tracking link and its events."""
    try:
        service.delete(session_id)
    except SessionNotFoundError:
        return JSONResponse(
            status_code=404,
            content={"message": MessageConstants.DELETE_NOT_FOUND},
        )
    return MessageResponse(message=MessageConstants.DELETE_SUCCESS)


@app.get("/status", response_model=StatusResponse)
async def status(service: TrackingService = Depends(get_service)) -> StatusResponse:
    """Server status and number of live tracking links."""
    return StatusResponse(
        status="running",
        active_tracking=service.active_sessions(),
        uptime=process_uptime(),
    )


@app.get("/health")
async def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "healthy", "service": "linktrace-gateway"}


@app.get("/ready")
async def readiness_check() -> dict:
    """Readiness check endpoint.

    Returns 503 until the service singleton is initialized.
    """
    if not ServiceManager._initialized:
        raise HTTPException(status_code=503, detail="not_ready")
    return {"status": "ready", "service": "linktrace-gateway"}


# =============================================================================
# DEVELOPMENT SERVER
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "linktrace.api.gateway:app",
        host=config.api_host,
        port=config.api_port,
        reload=config.debug,
        log_level=config.log_level.value.lower(),
    )
