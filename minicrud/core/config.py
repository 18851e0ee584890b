"""
Configuration helpers for the minicrud backend.

Settings are read once from environment variables so that routers/services
do not fetch os.environ directly. Tests call ``get_settings.cache_clear()``
after patching the environment.
"""

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
import os


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    data_dir: Path
    users_file: Path
    records_file: Path
    lock_timeout_seconds: float
    session_ttl_seconds: int
    min_password_length: int
    auth_rate_limit: int
    auth_rate_window_seconds: int
    public_base_url: str
    log_level: str


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _int(value: str, default: int = 0) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    def _float(value: str, default: float = 0.0) -> float:
        try:
            return float(value)
        except (TypeError, ValueError):
            return default

    data_dir = Path(os.getenv("DATA_DIR") or "data")
    users_file = os.getenv("USERS_FILE")
    records_file = os.getenv("RECORDS_FILE")

    return Settings(
        app_env=(os.getenv("APP_ENV") or "dev").lower(),
        data_dir=data_dir,
        users_file=Path(users_file) if users_file else data_dir / "users.json",
        records_file=Path(records_file) if records_file else data_dir / "data.json",
        lock_timeout_seconds=max(0.0, _float(os.getenv("LOCK_TIMEOUT_SECONDS", "5"), 5.0)),
        session_ttl_seconds=_int(os.getenv("SESSION_TTL_SECONDS", "86400"), 86400),
        min_password_length=max(1, _int(os.getenv("MIN_PASSWORD_LENGTH", "1"), 1)),
        auth_rate_limit=_int(os.getenv("AUTH_RATE_LIMIT", "10"), 10),
        auth_rate_window_seconds=_int(os.getenv("AUTH_RATE_WINDOW_SECONDS", "60"), 60),
        public_base_url=os.getenv("PUBLIC_BASE_URL", "http://localhost:8000").rstrip("/"),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
    )
