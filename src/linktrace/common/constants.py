"""Centralized constants for LinkTrace."""


# ===== SESSION LIFECYCLE =====
class LifecycleConstants:
    RETENTION_HOURS = 24.0
    SWEEP_INTERVAL_HOURS = 24.0
    SHUTDOWN_TIMEOUT_SECONDS = 5.0


# ===== GEOCODING =====
class GeocodingConstants:
    NOMINATIM_REVERSE_URL = "https://nominatim.openstreetmap.org/reverse"
    DEFAULT_USER_AGENT = "LinkTrace/0.1"
    TIMEOUT_SECONDS = 5.0
    RESPONSE_FORMAT = "json"


# ===== HTTP SURFACE =====
class MessageConstants:
    TRACK_NOT_FOUND = "Invalid tracking URL or link has expired"
    STATS_NOT_FOUND = "Invalid tracking ID or data expired"
    TRACKING_DATA_NOT_FOUND = "Tracking data not found or expired"
    DELETE_NOT_FOUND = "Tracking ID not found"
    DELETE_SUCCESS = "Tracking data deleted successfully"
