"""
Bracket Engine - owner of the tournament bracket state.

The engine holds the player pool, the round registry and the winner ledger
for one tournament and is the only writer to them. Commands run against a
deep copy of the state; the copy replaces the live state only when the
command succeeds and the bracket invariants still hold:

- Conservation: every player is either on the dashboard (available or in
  the lobby) or in exactly one round list (players, winners or losers).
- Exclusivity: no player id appears twice across all round lists.
- Champions display: no duplicate players, at most MAX_DISPLAY_WINNERS rows.

A BracketError leaves the live state untouched and is returned inside the
CommandResult so the caller can show its alert.
"""

import copy
import random
from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable, Optional

from bracket_bot.config import Config
from bracket_bot.constants import RoundConstants
from bracket_bot.data_models.bracket import Player, PlayerStatus
from bracket_bot.operations.commands import BracketCommand, CommandResult
from bracket_bot.operations.match_outcome import MatchOutcomeResolver
from bracket_bot.operations.match_pairing import MatchPairingEngine
from bracket_bot.operations.player_movement import PlayerMovementController
from bracket_bot.operations.player_pool import PlayerPool
from bracket_bot.operations.round_registry import RoundRegistry
from bracket_bot.operations.winner_ledger import WinnerLedger
from bracket_bot.utils.bracket_exceptions import BracketError, BracketInvariantError
from bracket_bot.utils.logger import setup_logger

logger = setup_logger(__name__)


@dataclass
class BracketState:
    """Everything the engine owns for one tournament"""
    pool: PlayerPool
    registry: RoundRegistry
    ledger: WinnerLedger = field(default_factory=WinnerLedger)

    def pairing(self, rng: random.Random) -> MatchPairingEngine:
        return MatchPairingEngine(self.pool, self.registry, rng)

    def outcomes(self) -> MatchOutcomeResolver:
        return MatchOutcomeResolver(self.pool, self.registry, self.ledger)

    def movement(self) -> PlayerMovementController:
        return PlayerMovementController(self.pool, self.registry)

    @property
    def rounds(self):
        return self.registry.rounds


class BracketEngine:
    """Runs bracket commands atomically against the owned state."""

    def __init__(self, state: BracketState, rng: Optional[random.Random] = None,
                 tournament_id: Optional[str] = None):
        self._state = state
        self.rng = rng or random.Random()
        self.tournament_id = tournament_id
        self.check_invariants(self._state)

    @classmethod
    def start(cls, players: Iterable[Player], populate_first_round: bool = False,
              rng: Optional[random.Random] = None, tournament_id: Optional[str] = None) -> 'BracketEngine':
        """Build a fresh bracket with the automatic first round.

        With populate_first_round every registered player starts in that
        round's roster; otherwise everyone waits on the dashboard.
        """
        unique = {}
        for player in players:
            unique.setdefault(player.id, player)
        pool = PlayerPool(p.snapshot() for p in unique.values())
        registry = RoundRegistry()
        first_round = registry.create_round(RoundConstants.FIRST_ROUND_DISPLAY_NAME)

        if populate_first_round:
            ids = [p.id for p in pool.players]
            first_round.players = ids
            pool.assign(ids, PlayerStatus.IN_ROUND, first_round.id)

        logger.info(
            f"Started bracket for tournament {tournament_id} with {len(pool)} players"
            + (f", all in '{first_round.label}'" if populate_first_round else "")
        )
        return cls(BracketState(pool=pool, registry=registry), rng=rng, tournament_id=tournament_id)

    def snapshot(self) -> BracketState:
        """Independent copy of the current state for display."""
        return copy.deepcopy(self._state)

    @property
    def player_count(self) -> int:
        return len(self._state.pool)

    def execute(self, command: BracketCommand) -> CommandResult:
        working = copy.deepcopy(self._state)
        try:
            value = command.apply(working, self.rng)
        except BracketError as e:
            logger.warning(f"{command.name} rejected: {e}")
            return CommandResult(ok=False, command=command, error=e)

        self.check_invariants(working)
        self._state = working
        logger.info(f"{command.name} applied")

        # Hand out copies so callers cannot reach the live state
        value, state = copy.deepcopy((value, working))
        return CommandResult(ok=True, command=command, value=value, state=state)

    @staticmethod
    def check_invariants(state: BracketState):
        """Raise BracketInvariantError if the state lost, duplicated or leaked a player."""
        placed = Counter()
        for round_ in state.registry.rounds:
            placed.update(round_.players)
            placed.update(round_.winners)
            placed.update(round_.losers)

        duplicated = sorted(pid for pid, count in placed.items() if count > 1)
        if duplicated:
            raise BracketInvariantError(f"Players in more than one round list: {duplicated}")

        unknown = sorted(pid for pid in placed if pid not in state.pool)
        if unknown:
            raise BracketInvariantError(f"Round lists reference unknown players: {unknown}")

        on_dashboard = {p.id for p in state.pool.players if p.status.on_dashboard}
        leaked = sorted(on_dashboard & set(placed))
        if leaked:
            raise BracketInvariantError(f"Dashboard players also placed in rounds: {leaked}")

        accounted = len(placed) + len(on_dashboard)
        if accounted != len(state.pool):
            missing = sorted(p.id for p in state.pool.players if p.id not in placed and p.id not in on_dashboard)
            raise BracketInvariantError(
                f"Conservation broken: {accounted} of {len(state.pool)} players accounted for, missing {missing}"
            )

        shown = [e.player.id for e in state.ledger.display]
        if len(shown) != len(set(shown)) or len(shown) > Config.MAX_DISPLAY_WINNERS:
            raise BracketInvariantError(f"Champions display is invalid: {shown}")
