"""
Tournament service - glue between the data source, the status cache and the
bracket engine.

Routing: a tournament whose status is started/running/ongoing/completed
opens the bracket dashboard directly; registration_open/scheduled/upcoming/
draft show the start prompt first. The cached status wins over the status
reported by the server.

Round structure changes run through the engine first. Only accepted changes
are written to the database.
"""

import random
from typing import Any, Dict, Optional

from bracket_bot.constants import RoundConstants, TournamentStatusConstants
from bracket_bot.data_models.bracket import Round
from bracket_bot.operations.bracket_engine import BracketEngine
from bracket_bot.operations.commands import (
    CommandResult, CreateRound, DeleteLastRound, FreezeRound, RenameRound
)
from bracket_bot.services.base import BaseService
from bracket_bot.services.status_cache import TournamentStatusCache
from bracket_bot.utils.bracket_exceptions import TournamentNotFoundError, TournamentNotStartedError
from bracket_bot.utils.logger import setup_logger

logger = setup_logger(__name__)


class TournamentService(BaseService):
    """Opens brackets for tournaments and persists round structure changes."""

    def __init__(self, database, status_cache: TournamentStatusCache):
        super().__init__(database)
        self.status_cache = status_cache

    # Status routing

    async def resolve_status(self, tournament_id: str, server_status: Optional[str] = None) -> str:
        """Last known lowercase status: cache first, then the server, then the default."""
        cached = await self.status_cache.get(tournament_id)
        if cached:
            logger.debug(f"Status for {tournament_id} from cache: {cached}")
            return cached

        if server_status is None:
            tournament = await self.database.get_tournament(tournament_id)
            if tournament is None:
                raise TournamentNotFoundError(tournament_id)
            server_status = tournament.status

        status = (server_status or TournamentStatusConstants.DEFAULT_STATUS).lower()
        await self.status_cache.set(tournament_id, status)
        return status

    @staticmethod
    def should_open_dashboard(status: str) -> bool:
        return (status or "").lower() in TournamentStatusConstants.DASHBOARD_STATUSES

    @staticmethod
    def should_show_start_prompt(status: str) -> bool:
        return (status or "").lower() in TournamentStatusConstants.PROMPT_STATUSES

    async def start_tournament(self, tournament_id: str) -> str:
        """Start the tournament at the data source and cache the fresh status."""
        status = await self.database.start_tournament(tournament_id)
        if status is None:
            raise TournamentNotFoundError(tournament_id)
        status = status.lower()
        await self.status_cache.set(tournament_id, status)
        logger.info(f"Tournament {tournament_id} is now '{status}'")
        return status

    # Bracket

    @staticmethod
    def round_meta(round_: Round) -> Dict[str, Any]:
        return {
            'round_number': RoundConstants.slot_number(round_.id),
            'round_name': round_.name,
            'display_name': round_.display_name,
            'status': round_.status.value,
            'is_frozen': round_.is_frozen,
        }

    async def open_dashboard(self, tournament_id: str, populate_first_round: bool = False,
                             rng: Optional[random.Random] = None) -> BracketEngine:
        """Load the registered players and build a bracket with its first round."""
        status = await self.resolve_status(tournament_id)
        if not self.should_open_dashboard(status):
            raise TournamentNotStartedError(tournament_id, status)

        players = await self.execute_with_retry(
            lambda: self.database.get_tournament_players(tournament_id)
        )
        engine = BracketEngine.start(
            players, populate_first_round=populate_first_round, rng=rng, tournament_id=tournament_id
        )
        first_round = engine.snapshot().registry.rounds[0]
        await self.database.create_round(tournament_id, self.round_meta(first_round))
        logger.info(f"Opened bracket for {tournament_id} with {len(players)} players")
        return engine

    async def create_round(self, engine: BracketEngine, display_name: str) -> CommandResult:
        result = engine.execute(CreateRound(display_name))
        if result.ok:
            await self.database.create_round(engine.tournament_id, self.round_meta(result.value))
        return result

    async def rename_round(self, engine: BracketEngine, round_id: str, display_name: str) -> CommandResult:
        result = engine.execute(RenameRound(round_id, display_name))
        if result.ok:
            await self.database.create_round(engine.tournament_id, self.round_meta(result.value))
        return result

    async def delete_last_round(self, engine: BracketEngine) -> CommandResult:
        result = engine.execute(DeleteLastRound())
        if result.ok:
            await self.database.delete_round(
                engine.tournament_id, RoundConstants.slot_number(result.value.id)
            )
        return result

    async def freeze_round(self, engine: BracketEngine, round_id: str) -> CommandResult:
        result = engine.execute(FreezeRound(round_id))
        if result.ok:
            frozen = result.value
            await self.database.update_round_status(
                engine.tournament_id, RoundConstants.slot_number(frozen.id), frozen.status.value, is_frozen=True
            )
        return result
