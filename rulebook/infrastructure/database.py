"""Database engine used by the uniqueness oracle."""

from __future__ import annotations

import logging
from functools import lru_cache

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from rulebook.config import get_settings

logger = logging.getLogger(__name__)


@lru_cache
def get_engine() -> Engine | None:
    """Return the engine for ``DATABASE_URL`` or ``None`` when it is not configured."""

    database_url = get_settings().database_url
    if not database_url:
        logger.info("DATABASE_URL is not set; the unique check is unavailable")
        return None
    return create_engine(database_url, pool_pre_ping=True)


def reset_engine_cache() -> None:
    """Dispose the cached engine so the next call rebuilds it from settings."""

    if get_engine.cache_info().currsize:
        engine = get_engine()
        if engine is not None:
            engine.dispose()
    get_engine.cache_clear()


__all__ = ["get_engine", "reset_engine_cache"]
