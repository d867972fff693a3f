"""
Base service class for the bracket bot.

Gives services access to the Database collaborator and retries transient
database failures when talking to the tournament data source.
"""

import asyncio
from typing import Any, Callable

from sqlalchemy.exc import OperationalError

from bracket_bot.utils.logger import setup_logger

logger = setup_logger(__name__)


class BaseService:
    """Base class for services that talk to the tournament data source."""

    def __init__(self, database):
        """
        Initialize base service with the database collaborator.

        Args:
            database: Initialized Database instance
        """
        self.database = database

    async def execute_with_retry(self, func: Callable, max_retries: int = 3) -> Any:
        """Execute a coroutine function, retrying operational database errors."""
        for attempt in range(max_retries):
            try:
                return await func()
            except OperationalError as e:
                if attempt == max_retries - 1:
                    raise
                logger.warning(f"Retry attempt {attempt + 1} for {getattr(func, '__name__', func)}: {e}")
                await asyncio.sleep(0.1 * (2 ** attempt))  # Exponential backoff
