"""
Redis connection helpers for the tournament status cache.

Redis is optional at runtime: when no URL is configured, the URL is
rejected, or the server does not answer, callers get None and keep their
state in process.
"""

from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from bracket_bot.config import Config
from bracket_bot.utils.logger import setup_logger

logger = setup_logger(__name__)


class RedisUtils:
    """Redis URL validation and client creation"""

    @staticmethod
    def get_redis_url() -> Optional[str]:
        """Configured Redis URL if it passes validation, else None."""
        redis_url = Config.REDIS_URL
        if not redis_url:
            logger.info("REDIS_URL not set; status cache stays in process")
            return None
        if not RedisUtils.validate_redis_url(redis_url):
            return None
        return redis_url

    @staticmethod
    def validate_redis_url(redis_url: str) -> bool:
        if not redis_url.startswith(('redis://', 'rediss://', 'unix://')):
            logger.error(f"Unsupported Redis URL scheme: {redis_url.split('://')[0]}")
            return False

        if not Config.DEBUG:
            # Production: TLS and credentials unless the server is local
            local = redis_url.startswith(('redis://localhost', 'redis://127.0.0.1', 'unix://'))
            if not local and not redis_url.startswith('rediss://'):
                logger.error("Remote Redis must use the rediss:// (TLS) protocol")
                return False
            if not local and '@' not in redis_url:
                logger.error("Remote Redis must include authentication credentials")
                return False
        return True

    @staticmethod
    async def create_redis_client() -> Optional[redis.Redis]:
        """Connect and ping; None when Redis cannot be used."""
        redis_url = RedisUtils.get_redis_url()
        if not redis_url:
            return None

        client = redis.from_url(redis_url, decode_responses=True)
        try:
            await client.ping()
        except (RedisError, OSError) as e:
            logger.error(f"Failed to connect to Redis: {e}")
            await client.aclose()
            return None
        logger.info("Connected to Redis")
        return client
