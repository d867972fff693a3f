"""
Services package for the bracket bot.
"""

from .base import BaseService
from .status_cache import TournamentStatusCache
from .tournament_service import TournamentService

__all__ = ['BaseService', 'TournamentStatusCache', 'TournamentService']
