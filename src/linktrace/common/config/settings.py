"""Configuration management - Centralized configuration for LinkTrace.

Provides environment-aware configuration with sensible defaults.
All configuration is loaded from environment variables with fallbacks.
"""

import os
from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from typing import List, Optional

from linktrace.common.constants import GeocodingConstants, LifecycleConstants
from linktrace.common.exceptions import ConfigurationError


class Environment(str, Enum):
    """Application environment."""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class LogLevel(str, Enum):
    """Logging levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass
class Config:
    """Central configuration object for LinkTrace.

    All settings can be overridden via environment variables prefixed with
    LINKTRACE_.

    Example:
        LINKTRACE_ENVIRONMENT=production
        LINKTRACE_RETENTION_HOURS=48
        LINKTRACE_GEOCODER_USER_AGENT="MyTracker/1.0 (ops@example.com)"
    """

    # Core settings
    environment: Environment = field(
        default_factory=lambda: Environment(
            os.getenv("LINKTRACE_ENVIRONMENT", "development")
        )
    )
    debug: bool = field(
        default_factory=lambda: _env_flag("LINKTRACE_DEBUG", "false")
    )
    log_level: LogLevel = field(
        default_factory=lambda: LogLevel(os.getenv("LINKTRACE_LOG_LEVEL", "INFO"))
    )

    # API settings
    api_host: str = field(
        default_factory=lambda: os.getenv("LINKTRACE_API_HOST", "0.0.0.0")
    )
    api_port: int = field(
        default_factory=lambda: int(os.getenv("LINKTRACE_API_PORT", "3000"))
    )
    cors_origins: Optional[str] = field(
        default_factory=lambda: os.getenv("LINKTRACE_CORS_ORIGINS")
    )
    trust_forwarded_for: bool = field(
        default_factory=lambda: _env_flag("LINKTRACE_TRUST_FORWARDED_FOR", "true")
    )

    # Session lifecycle
    retention_hours: float = field(
        default_factory=lambda: float(
            os.getenv(
                "LINKTRACE_RETENTION_HOURS",
                str(LifecycleConstants.RETENTION_HOURS),
            )
        )
    )
    sweep_interval_hours: float = field(
        default_factory=lambda: float(
            os.getenv(
                "LINKTRACE_SWEEP_INTERVAL_HOURS",
                str(LifecycleConstants.SWEEP_INTERVAL_HOURS),
            )
        )
    )

    # Geocoding
    geocoding_enabled: bool = field(
        default_factory=lambda: _env_flag("LINKTRACE_GEOCODING_ENABLED", "true")
    )
    geocoder_url: str = field(
        default_factory=lambda: os.getenv(
            "LINKTRACE_GEOCODER_URL", GeocodingConstants.NOMINATIM_REVERSE_URL
        )
    )
    geocoder_user_agent: str = field(
        default_factory=lambda: os.getenv(
            "LINKTRACE_GEOCODER_USER_AGENT", GeocodingConstants.DEFAULT_USER_AGENT
        )
    )
    geocoder_timeout_seconds: float = field(
        default_factory=lambda: float(
            os.getenv(
                "LINKTRACE_GEOCODER_TIMEOUT_SECONDS",
                str(GeocodingConstants.TIMEOUT_SECONDS),
            )
        )
    )

    def __post_init__(self):
        """Validate configuration after initialization."""
        if self.retention_hours <= 0:
            raise ConfigurationError(
                "LINKTRACE_RETENTION_HOURS must be positive",
                details={"retention_hours": self.retention_hours},
            )
        if self.sweep_interval_hours <= 0:
            raise ConfigurationError(
                "LINKTRACE_SWEEP_INTERVAL_HOURS must be positive",
                details={"sweep_interval_hours": self.sweep_interval_hours},
            )
        if self.geocoder_timeout_seconds <= 0:
            raise ConfigurationError(
                "LINKTRACE_GEOCODER_TIMEOUT_SECONDS must be positive",
                details={"geocoder_timeout_seconds": self.geocoder_timeout_seconds},
            )
        if self.geocoding_enabled and not self.geocoder_user_agent.strip():
            raise ConfigurationError(
                "LINKTRACE_GEOCODER_USER_AGENT must identify the application"
            )

        # Warn about debug in production
        if self.environment == Environment.PRODUCTION and self.debug:
            import warnings
            warnings.warn(
                "Debug mode is enabled in production environment",
                RuntimeWarning,
                stacklevel=2
            )

    @property
    def retention(self) -> timedelta:
        """How long a tracking session is kept after creation."""
        return timedelta(hours=self.retention_hours)

    @property
    def sweep_interval(self) -> timedelta:
        """Period between two expiry sweeps."""
        return timedelta(hours=self.sweep_interval_hours)

    @property
    def cors_origin_list(self) -> List[str]:
        """Parse the comma-separated CORS origins."""
        if not self.cors_origins:
            return []
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == Environment.PRODUCTION

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == Environment.DEVELOPMENT


# Singleton instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global configuration instance.

    Returns:
        Config: The global configuration singleton.
    """
    global _config
    if _config is None:
        _config = Config()
    return _config


def reset_config() -> None:
    """Reset the global configuration (for testing)."""
    global _config
    _config = None
