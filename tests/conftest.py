"""
Shared fixtures for the bracket bot test suite.
"""

import os
import random
import tempfile

# Keep test log files out of the working tree
os.environ.setdefault('LOG_DIR', os.path.join(tempfile.gettempdir(), 'bracket_bot_test_logs'))

import pytest
import pytest_asyncio

from bracket_bot.data_models.bracket import Match, MatchStatus, Player, PlayerStatus
from bracket_bot.database.database import Database
from bracket_bot.operations.bracket_engine import BracketEngine
from bracket_bot.operations.commands import PairRound, RecordWinner
from bracket_bot.operations.player_pool import PlayerPool
from bracket_bot.operations.round_registry import RoundRegistry
from bracket_bot.services.status_cache import TournamentStatusCache


@pytest.fixture
def make_players():
    def _make(count, start=1):
        return [Player(id=f"p{i}", name=f"Player {i}") for i in range(start, start + count)]
    return _make


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def engine(make_players, rng):
    """8 players on the dashboard, empty First Round"""
    return BracketEngine.start(make_players(8), rng=rng, tournament_id="t-1")


@pytest.fixture
def populated_engine(make_players, rng):
    """8 players already in the First Round roster"""
    return BracketEngine.start(make_players(8), populate_first_round=True, rng=rng, tournament_id="t-1")


@pytest.fixture
def bracket(make_players):
    """Component-level setup: pool plus a registry with the given round names.

    Returns (pool, registry). Every player starts on the dashboard.
    """
    def _build(player_count=8, round_names=("First Round",)):
        pool = PlayerPool(make_players(player_count))
        registry = RoundRegistry()
        for name in round_names:
            registry.create_round(name)
        return pool, registry
    return _build


@pytest.fixture
def seat():
    """Put players into a round's roster the way a move would."""
    def _seat(pool, round_, player_ids, status=PlayerStatus.IN_ROUND):
        round_.players = round_.players + list(player_ids)
        pool.assign(player_ids, status, round_.id)
    return _seat


@pytest.fixture
def completed_match():
    """A finished match between two pool players, won by the first."""
    def _match(pool, match_id, winner_id, loser_id):
        winner, loser = pool.get(winner_id), pool.get(loser_id)
        return Match(
            id=match_id,
            player1=winner.snapshot(),
            player2=loser.snapshot(),
            status=MatchStatus.COMPLETED,
            winner=winner.snapshot(),
        )
    return _match


@pytest.fixture
def play_round():
    """Pair a round through the engine and let player1 win every match."""
    def _play(engine, round_id):
        paired = engine.execute(PairRound(round_id))
        assert paired.ok, paired.error
        for match in paired.value:
            result = engine.execute(RecordWinner(match.id, match.player1.id))
            assert result.ok, result.error
        return paired.value
    return _play


@pytest_asyncio.fixture
async def database():
    db = Database('sqlite+aiosqlite:///:memory:')
    await db.initialize()
    yield db
    await db.close()


@pytest.fixture
def status_cache():
    return TournamentStatusCache(redis_client=None, ttl=3600)
