# app/core/dependencies.py

import logging
from functools import lru_cache

from app.core.config import settings
from app.services.execution_store import MemoryExecutionStore, RedisExecutionStore

logger = logging.getLogger(__name__)


@lru_cache()
def get_execution_store():
    """FastAPI dependency: the configured live-execution store (one per process)."""
    if settings.EXECUTION_STORE == "redis":
        from app.core.redis import redis_client

        logger.info("Using Redis execution store")
        return RedisExecutionStore(redis_client, settings.EXECUTION_TTL_SECONDS)

    logger.info("Using in-memory execution store")
    return MemoryExecutionStore()
