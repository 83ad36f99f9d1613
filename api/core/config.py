"""
Environment-backed settings.

Settings are read once at startup (`load_settings()`) and never mutated
afterwards. Every knob has a development default so the service boots with
only `DATABASE_URL` set.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field


def _env_str(name: str, default: str) -> str:
    return os.environ.get(name, default).strip() or default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_list(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    return tuple(item.strip() for item in raw.split(",") if item.strip())


@dataclass(frozen=True)
class Settings:
    database_url: str = ""
    db_pool_size: int = 4
    db_acquire_timeout_s: float = 30.0
    db_command_timeout_s: float = 30.0

    auth_timeout_s: float = 5.0
    # Local default keeps development simple.
    # In production, set JWT_SECRET in environment.
    jwt_secret: str = "dev-change-this-secret"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60

    gist_api_url: str = "https://api.github.com"
    gist_token: str = ""
    backup_timeout_s: float = 30.0

    log_level: str = "INFO"
    cors_origins: tuple[str, ...] = field(
        default=("http://localhost:5173", "http://127.0.0.1:5173"),
    )


def load_settings() -> Settings:
    defaults = Settings()
    pool_size = _env_int("DB_POOL_SIZE", defaults.db_pool_size)
    if pool_size <= 0:
        pool_size = defaults.db_pool_size

    return Settings(
        database_url=os.environ.get("DATABASE_URL", "").strip(),
        db_pool_size=pool_size,
        db_acquire_timeout_s=_env_float("DB_ACQUIRE_TIMEOUT_S", defaults.db_acquire_timeout_s),
        db_command_timeout_s=_env_float("DB_COMMAND_TIMEOUT_S", defaults.db_command_timeout_s),
        auth_timeout_s=_env_float("AUTH_TIMEOUT_S", defaults.auth_timeout_s),
        jwt_secret=_env_str("JWT_SECRET", defaults.jwt_secret),
        jwt_algorithm=_env_str("JWT_ALG", defaults.jwt_algorithm),
        access_token_expire_minutes=_env_int(
            "ACCESS_TOKEN_EXPIRE_MIN", defaults.access_token_expire_minutes
        ),
        gist_api_url=_env_str("GIST_API_URL", defaults.gist_api_url),
        gist_token=os.environ.get("GIST_TOKEN", "").strip(),
        backup_timeout_s=_env_float("BACKUP_TIMEOUT_S", defaults.backup_timeout_s),
        log_level=_env_str("LOG_LEVEL", defaults.log_level).upper(),
        cors_origins=_env_list("CORS_ORIGINS", defaults.cors_origins),
    )
