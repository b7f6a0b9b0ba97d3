"""
Process settings read from environment variables.

Handlers receive settings through `Depends(get_settings)` so tests can
override them with `app.dependency_overrides`.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache

logger = logging.getLogger(__name__)

DEFAULT_JWT_SECRET = "dev-change-this-secret"


def _env_str(name: str, default: str) -> str:
    return os.environ.get(name, "").strip() or default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    database_url: str
    db_pool_min_size: int
    db_pool_max_size: int
    jwt_secret: str
    jwt_algorithm: str
    access_token_expire_minutes: int
    bcrypt_rounds: int
    log_level: str
    allowed_origins: tuple[str, ...]


def _parse_origins(raw: str) -> tuple[str, ...]:
    raw = raw.strip()
    if raw == "*":
        return ("*",)
    return tuple(o.strip() for o in raw.split(",") if o.strip())


def load_settings() -> Settings:
    return Settings(
        database_url=os.environ.get("DATABASE_URL", "").strip(),
        db_pool_min_size=_env_int("DB_POOL_MIN_SIZE", 1),
        db_pool_max_size=_env_int("DB_POOL_MAX_SIZE", 5),
        jwt_secret=_env_str("JWT_SECRET", DEFAULT_JWT_SECRET),
        jwt_algorithm=_env_str("JWT_ALG", "HS256"),
        access_token_expire_minutes=_env_int("ACCESS_TOKEN_EXPIRE_MIN", 60),
        bcrypt_rounds=_env_int("BCRYPT_ROUNDS", 10),
        log_level=_env_str("LOG_LEVEL", "INFO"),
        allowed_origins=_parse_origins(_env_str("ALLOWED_ORIGINS", "*")),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()


def warn_insecure_settings(settings: Settings) -> None:
    """Log settings that are unsafe outside development. Call after logging is set up."""
    if settings.jwt_secret == DEFAULT_JWT_SECRET:
        logger.warning("JWT_SECRET is not set; using the development placeholder secret")
