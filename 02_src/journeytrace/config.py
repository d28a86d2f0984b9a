"""Project-level configuration and path helpers."""

import os
from dataclasses import dataclass
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
LOGS_DIR = PROJECT_ROOT / "04_logs"
DEFAULT_LOG_PATH = LOGS_DIR / "app.log"

DEFAULT_TELEMETRY_ENDPOINT = "http://localhost:8000/telemetry/browser"
DEFAULT_SERVICE_NAME = "stock-portfolio-dashboard"
DEFAULT_CORS_ORIGINS = ("http://localhost:5173", "http://localhost:3000")
BEACON_MAX_BYTES = 64 * 1024  # sendBeacon payload ceiling in browsers


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


@dataclass(frozen=True)
class TransportSettings:
    """Client-side delivery settings."""

    endpoint: str = DEFAULT_TELEMETRY_ENDPOINT
    batch_size: int = 50
    flush_interval: float = 10.0  # seconds
    beacon_max_bytes: int = BEACON_MAX_BYTES
    request_timeout: float = 5.0

    def __post_init__(self) -> None:
        if self.batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        if self.flush_interval <= 0:
            raise ValueError("flush_interval must be > 0")
        if self.beacon_max_bytes < 1:
            raise ValueError("beacon_max_bytes must be >= 1")

    @classmethod
    def from_env(cls) -> "TransportSettings":
        """Build settings from TELEMETRY_* environment variables."""
        return cls(
            endpoint=os.getenv("TELEMETRY_ENDPOINT", DEFAULT_TELEMETRY_ENDPOINT),
            batch_size=_env_int("TELEMETRY_BATCH_SIZE", 50),
            flush_interval=_env_float("TELEMETRY_FLUSH_INTERVAL", 10.0),
            beacon_max_bytes=_env_int("TELEMETRY_BEACON_MAX_BYTES", BEACON_MAX_BYTES),
            request_timeout=_env_float("TELEMETRY_REQUEST_TIMEOUT", 5.0),
        )


@dataclass(frozen=True)
class ServerSettings:
    """Ingestion service settings."""

    service_name: str = DEFAULT_SERVICE_NAME
    api_host: str = "localhost"
    api_port: int = 8000
    cors_origins: tuple[str, ...] = DEFAULT_CORS_ORIGINS
    batch_isolation: str = "event"  # "event" or "batch"
    dedup_window_seconds: float = 600.0
    dedup_max_entries: int = 10_000
    traces_exporter: str = "console"  # "console" or "none"

    def __post_init__(self) -> None:
        if self.batch_isolation not in ("event", "batch"):
            raise ValueError(
                f"batch_isolation must be 'event' or 'batch', got {self.batch_isolation!r}"
            )
        if self.traces_exporter not in ("console", "none"):
            raise ValueError(
                f"traces_exporter must be 'console' or 'none', got {self.traces_exporter!r}"
            )

    @classmethod
    def from_env(cls) -> "ServerSettings":
        """Build settings from environment variables."""
        origins = os.getenv("CORS_ORIGINS")
        return cls(
            service_name=os.getenv("OTEL_SERVICE_NAME", DEFAULT_SERVICE_NAME),
            api_host=os.getenv("API_HOST", "localhost"),
            api_port=_env_int("API_PORT", 8000),
            cors_origins=(
                tuple(o.strip() for o in origins.split(",") if o.strip())
                if origins
                else DEFAULT_CORS_ORIGINS
            ),
            batch_isolation=os.getenv("TELEMETRY_BATCH_ISOLATION", "event"),
            dedup_window_seconds=_env_float("TELEMETRY_DEDUP_WINDOW", 600.0),
            dedup_max_entries=_env_int("TELEMETRY_DEDUP_MAX_ENTRIES", 10_000),
            traces_exporter=os.getenv("OTEL_TRACES_EXPORTER", "console"),
        )
