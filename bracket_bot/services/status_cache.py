"""
Tournament status cache.

Keeps the last known lowercase status per tournament id so the dashboard can
route a tournament (start prompt or bracket) without asking the data source.
Entries live in Redis when a client is available and in a TTL dict otherwise.
"""

import time
from typing import Dict, Optional, Tuple

from redis.exceptions import RedisError

from bracket_bot.config import Config
from bracket_bot.utils.logger import setup_logger
from bracket_bot.utils.redis_utils import RedisUtils

logger = setup_logger(__name__)


class TournamentStatusCache:
    """Status strings keyed by tournament id with TTL-based expiry."""

    def __init__(self, redis_client=None, ttl: int = None, prefix: str = None):
        self.redis = redis_client
        self.ttl = ttl if ttl is not None else Config.STATUS_CACHE_TTL
        self.prefix = prefix or Config.STATUS_CACHE_PREFIX
        self._cache: Dict[str, Tuple[float, str]] = {}  # tournament_id -> (timestamp, status)

    @classmethod
    async def create(cls) -> 'TournamentStatusCache':
        """Build a cache backed by Redis if one is reachable."""
        client = await RedisUtils.create_redis_client()
        backend = "Redis" if client else "in-process"
        logger.info(f"Tournament status cache using {backend} storage")
        return cls(redis_client=client)

    @property
    def uses_redis(self) -> bool:
        return self.redis is not None

    def _key(self, tournament_id: str) -> str:
        return f"{self.prefix}{tournament_id}"

    async def get(self, tournament_id: str) -> Optional[str]:
        if self.redis is not None:
            try:
                value = await self.redis.get(self._key(tournament_id))
            except RedisError as e:
                logger.warning(f"Redis read failed for {tournament_id}, using local cache: {e}")
            else:
                if isinstance(value, bytes):
                    value = value.decode()
                return value

        entry = self._cache.get(tournament_id)
        if entry is None:
            return None
        timestamp, status = entry
        if time.time() - timestamp >= self.ttl:
            logger.debug(f"Status cache entry for {tournament_id} expired")
            self._cache.pop(tournament_id, None)
            return None
        return status

    async def set(self, tournament_id: str, status: str):
        status = (status or "").strip().lower()
        if not status:
            return
        self._cache[tournament_id] = (time.time(), status)
        if self.redis is not None:
            try:
                await self.redis.set(self._key(tournament_id), status, ex=self.ttl)
            except RedisError as e:
                logger.warning(f"Redis write failed for {tournament_id}: {e}")
        logger.debug(f"Cached status '{status}' for tournament {tournament_id}")

    async def invalidate(self, tournament_id: str):
        self._cache.pop(tournament_id, None)
        if self.redis is not None:
            try:
                await self.redis.delete(self._key(tournament_id))
            except RedisError as e:
                logger.warning(f"Redis delete failed for {tournament_id}: {e}")

    async def close(self):
        if self.redis is not None:
            await self.redis.aclose()
            self.redis = None
