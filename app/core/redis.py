# app/core/redis.py

import logging

import redis.asyncio as redis

from app.core.config import settings

logger = logging.getLogger(__name__)

# Shared async client. Connections are opened lazily on first command,
# so importing this module never requires a running Redis server.
redis_client = redis.from_url(settings.REDIS_URL, decode_responses=True)
