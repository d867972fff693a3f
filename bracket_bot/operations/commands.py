"""
Bracket commands

Every organizer action on the bracket is a small named command. A command
only knows how to apply itself to a working copy of the bracket state; the
BracketEngine decides whether the result is kept.
"""

import random
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional, Sequence

from bracket_bot.data_models.bracket import Alert
from bracket_bot.utils.bracket_exceptions import BracketError

if TYPE_CHECKING:
    from bracket_bot.operations.bracket_engine import BracketState


class BracketCommand(ABC):
    """Base class for all bracket commands"""

    @abstractmethod
    def apply(self, state: 'BracketState', rng: random.Random) -> Any:
        """Mutate the given working state and return the command's value."""
        pass

    @property
    def name(self) -> str:
        return type(self).__name__


@dataclass
class CommandResult:
    """Outcome of BracketEngine.execute"""
    ok: bool
    command: BracketCommand
    value: Any = None
    state: Optional['BracketState'] = None
    error: Optional[BracketError] = None

    @property
    def alert(self) -> Optional[Alert]:
        return self.error.alert if self.error else None


# Rounds

@dataclass(frozen=True)
class CreateRound(BracketCommand):
    display_name: str

    def apply(self, state, rng):
        return state.registry.create_round(self.display_name)


@dataclass(frozen=True)
class RenameRound(BracketCommand):
    round_id: str
    display_name: str

    def apply(self, state, rng):
        return state.registry.rename_round(self.round_id, self.display_name)


@dataclass(frozen=True)
class DeleteLastRound(BracketCommand):

    def apply(self, state, rng):
        return state.registry.delete_last_round()


@dataclass(frozen=True)
class CloseRound(BracketCommand):
    round_id: str

    def apply(self, state, rng):
        return state.registry.close_round(self.round_id)


@dataclass(frozen=True)
class FreezeRound(BracketCommand):
    round_id: str

    def apply(self, state, rng):
        return state.registry.freeze_round(self.round_id)


# Matches

@dataclass(frozen=True)
class PairRound(BracketCommand):
    """Additive pairing of the round's unmatched players"""
    round_id: str

    def apply(self, state, rng):
        return state.pairing(rng).pair(self.round_id)


@dataclass(frozen=True)
class ReshuffleRound(BracketCommand):
    """Dissolve pending matches and pair again"""
    round_id: str

    def apply(self, state, rng):
        return state.pairing(rng).reshuffle(self.round_id)


@dataclass(frozen=True)
class StartMatch(BracketCommand):
    match_id: str

    def apply(self, state, rng):
        return state.pairing(rng).start_match(self.match_id)


@dataclass(frozen=True)
class CancelMatch(BracketCommand):
    match_id: str

    def apply(self, state, rng):
        return state.pairing(rng).cancel_match(self.match_id)


@dataclass(frozen=True)
class RecordWinner(BracketCommand):
    match_id: str
    winner_id: str

    def apply(self, state, rng):
        return state.outcomes().record_winner(self.match_id, self.winner_id)


# Movement

@dataclass(frozen=True)
class MoveToRound(BracketCommand):
    """Move players into a round's roster. No source means the dashboard."""
    player_ids: Sequence[str]
    target_round_id: str
    source_round_id: Optional[str] = None

    def apply(self, state, rng):
        return state.movement().move_to_round(self.player_ids, self.target_round_id, self.source_round_id)


@dataclass(frozen=True)
class MoveToDashboard(BracketCommand):
    player_ids: Sequence[str]
    source_round_id: str

    def apply(self, state, rng):
        return state.movement().move_to_dashboard(self.player_ids, self.source_round_id)


@dataclass(frozen=True)
class MoveWinners(BracketCommand):
    source_round_id: str
    target_round_id: str
    winner_ids: Sequence[str] = field(default_factory=tuple)

    def apply(self, state, rng):
        return state.movement().move_winners_between_rounds(
            self.source_round_id, self.target_round_id, self.winner_ids
        )


@dataclass(frozen=True)
class MoveLosers(BracketCommand):
    """Move losers to another round, or to the dashboard when no target is given."""
    source_round_id: str
    loser_ids: Sequence[str]
    target_round_id: Optional[str] = None

    def apply(self, state, rng):
        return state.movement().move_losers_to_destination(
            self.source_round_id, self.loser_ids, self.target_round_id
        )


@dataclass(frozen=True)
class MoveToLobby(BracketCommand):
    player_ids: Sequence[str]

    def apply(self, state, rng):
        state.pool.move_to_lobby(self.player_ids)
        return list(self.player_ids)


# Selection and champions overlay

@dataclass(frozen=True)
class SetSelected(BracketCommand):
    player_ids: Sequence[str]
    selected: bool = True

    def apply(self, state, rng):
        state.pool.set_selected(self.player_ids, self.selected)
        return set(state.pool.selected_ids)


@dataclass(frozen=True)
class ToggleSelected(BracketCommand):
    player_id: str

    def apply(self, state, rng):
        return state.pool.toggle_selected(self.player_id)


@dataclass(frozen=True)
class UpdateWinnerTitle(BracketCommand):
    player_id: str
    title: str

    def apply(self, state, rng):
        return state.ledger.update_title(self.player_id, self.title)


@dataclass(frozen=True)
class UpdateWinnerRank(BracketCommand):
    player_id: str
    rank: int

    def apply(self, state, rng):
        return state.ledger.update_rank(self.player_id, self.rank)


@dataclass(frozen=True)
class ToggleWinnerSelection(BracketCommand):
    player_id: str

    def apply(self, state, rng):
        return state.ledger.toggle_selected(self.player_id)
