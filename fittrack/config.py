from __future__ import annotations

import os
from pathlib import Path
from typing import List, Optional

_TRUTHY = {"1", "true", "yes", "on"}


def _env(name: str) -> Optional[str]:
    value = os.environ.get(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def _env_int(name: str, default: int) -> int:
    raw = _env(name)
    return int(raw) if raw is not None else default


def _env_list(name: str, default: str) -> List[str]:
    raw = _env(name) or default
    if raw == "*":
        return ["*"]
    return [item.strip() for item in raw.split(",") if item.strip()]


class Settings:
    """Process-wide configuration, read from FITTRACK_* environment variables once."""

    def __init__(self) -> None:
        repo_root = Path(__file__).resolve().parent.parent

        self.data_root: Path = Path(_env("FITTRACK_DATA_ROOT") or repo_root / "data").expanduser()
        self.app_db_path: Path = Path(_env("FITTRACK_DB_PATH") or self.data_root / "fittrack.db").expanduser()

        # Set FITTRACK_JWT_SECRET outside local development.
        self.jwt_secret: str = _env("FITTRACK_JWT_SECRET") or "dev-secret-change-me"
        self.token_ttl_days: int = _env_int("FITTRACK_TOKEN_TTL_DAYS", 7)
        self.cookie_secure: bool = (_env("FITTRACK_COOKIE_SECURE") or "").lower() in _TRUTHY

        self.cors_origins: List[str] = _env_list("FITTRACK_CORS_ORIGINS", "*")
        self.log_level: str = (_env("FITTRACK_LOG_LEVEL") or "INFO").upper()
        self.host: str = _env("FITTRACK_HOST") or "127.0.0.1"
        self.port: int = _env_int("FITTRACK_PORT", 8000)

        # Applied by the HTTP layer; the aggregator never rounds.
        self.summary_decimals: int = _env_int("FITTRACK_SUMMARY_DECIMALS", 2)


settings = Settings()
