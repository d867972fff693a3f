"""
Round Registry - ordered rounds of the bracket.

Creates rounds in sequential slots, keeps display names unique, freezes
resolved rounds and removes the trailing round once it is empty. Names of
removed rounds go back into the pool of reusable labels.
"""

from typing import List, Optional

from bracket_bot.config import Config
from bracket_bot.constants import RoundConstants
from bracket_bot.data_models.bracket import MatchStatus, Round, RoundStatus
from bracket_bot.utils.bracket_exceptions import (
    BracketError, DuplicateNameError, FrozenRoundError, IncompleteRoundError, InvalidRoundNameError,
    NotEmptyError, NotLastRoundError, RoundRemovalError, UnknownMatchError, UnknownRoundError
)
from bracket_bot.utils.logger import setup_logger

logger = setup_logger(__name__)


class RoundRegistry:
    """Ordered list of rounds with creation, naming, freezing and removal rules."""

    def __init__(self, rounds: Optional[List[Round]] = None):
        self.rounds: List[Round] = list(rounds or [])
        self.released_names: List[str] = []

    def __len__(self):
        return len(self.rounds)

    def __iter__(self):
        return iter(self.rounds)

    # Lookup

    def get(self, round_id: str) -> Round:
        for round_ in self.rounds:
            if round_.id == round_id:
                return round_
        raise UnknownRoundError(round_id)

    def find(self, round_id: Optional[str]) -> Optional[Round]:
        return next((r for r in self.rounds if r.id == round_id), None)

    def index_of(self, round_id: str) -> int:
        for index, round_ in enumerate(self.rounds):
            if round_.id == round_id:
                return index
        raise UnknownRoundError(round_id)

    def round_for_match(self, match_id: str) -> Round:
        for round_ in self.rounds:
            if round_.find_match(match_id):
                return round_
        raise UnknownMatchError(match_id)

    @property
    def last(self) -> Optional[Round]:
        return self.rounds[-1] if self.rounds else None

    @staticmethod
    def is_active(round_: Round) -> bool:
        """A round counts as started once it holds players, matches or winners."""
        return bool(round_.players or round_.matches or round_.winners)

    def ensure_mutable(self, round_: Round, action: str = "change"):
        if round_.is_frozen:
            raise FrozenRoundError(round_.label, action)

    # Naming

    def names_in_use(self) -> List[str]:
        return [r.label for r in self.rounds]

    def _name_taken(self, display_name: str, exclude_id: Optional[str] = None) -> bool:
        key = display_name.casefold()
        return any(r.label.casefold() == key for r in self.rounds if r.id != exclude_id)

    def available_names(self) -> List[str]:
        """Standard labels plus released ones that no round is using."""
        in_use = {name.casefold() for name in self.names_in_use()}
        candidates = list(RoundConstants.STANDARD_DISPLAY_NAMES.values())
        candidates += [n for n in self.released_names if n not in candidates]
        return [name for name in candidates if name.casefold() not in in_use]

    # Lifecycle

    def create_round(self, display_name: str) -> Round:
        """Append a pending round in the next slot."""
        display_name = (display_name or "").strip()
        if not display_name:
            raise InvalidRoundNameError()
        if self._name_taken(display_name):
            raise DuplicateNameError(display_name)
        if len(self.rounds) >= Config.MAX_ROUNDS:
            raise BracketError(
                f"Round limit {Config.MAX_ROUNDS} reached",
                f"A tournament can have at most {Config.MAX_ROUNDS} rounds.",
                title="Cannot Create Round"
            )

        number = len(self.rounds) + 1
        round_ = Round(
            id=RoundConstants.slot_id(number),
            name=RoundConstants.slot_label(number),
            display_name=display_name,
        )
        self.rounds = self.rounds + [round_]
        self.released_names = [n for n in self.released_names if n.casefold() != display_name.casefold()]
        logger.info(f"Created round {round_.id} ('{display_name}')")
        return round_

    def rename_round(self, round_id: str, new_display_name: str) -> Round:
        """Change a round's display name; blank input leaves it unchanged."""
        round_ = self.get(round_id)
        new_display_name = (new_display_name or "").strip()
        if not new_display_name:
            logger.debug(f"Ignored blank rename for {round_id}")
            return round_
        if self._name_taken(new_display_name, exclude_id=round_id):
            raise DuplicateNameError(new_display_name)

        old_name = round_.display_name
        round_.display_name = new_display_name
        logger.info(f"Renamed round {round_id}: '{old_name}' -> '{new_display_name}'")
        return round_

    def _remove(self, round_: Round) -> Round:
        if len(self.rounds) <= 1:
            raise RoundRemovalError(
                "Cannot remove the only round",
                "Cannot delete the first round. At least one round must exist for the tournament."
            )
        if round_ is not self.rounds[-1]:
            raise NotLastRoundError(round_.label)
        if not round_.is_empty:
            raise NotEmptyError(round_.label)

        self.rounds = self.rounds[:-1]
        canonical = RoundConstants.canonical_display_name(round_.name)
        if canonical not in self.released_names:
            self.released_names = self.released_names + [canonical]
        logger.info(f"Removed round {round_.id} ('{round_.label}'); '{canonical}' available again")
        return round_

    def delete_last_round(self) -> Round:
        if not self.rounds:
            raise UnknownRoundError("last")
        return self._remove(self.rounds[-1])

    def close_round(self, round_id: str) -> Round:
        return self._remove(self.get(round_id))

    def freeze_round(self, round_id: str) -> Round:
        """Lock a fully resolved round against further changes."""
        round_ = self.get(round_id)
        self.ensure_mutable(round_, "freeze")

        if not round_.matches or any(m.status != MatchStatus.COMPLETED for m in round_.matches):
            raise IncompleteRoundError(
                round_.label, "All matches must be completed before freezing the round."
            )
        unmatched = round_.unmatched_player_ids
        if unmatched:
            raise IncompleteRoundError(
                round_.label,
                f"There are {len(unmatched)} unmatched players remaining.\n\n"
                "Please move them out or complete matches with them before freezing."
            )

        round_.is_frozen = True
        round_.status = RoundStatus.COMPLETED
        logger.info(f"Froze round {round_.id} ('{round_.label}')")
        return round_

    def mark_active(self, round_: Round):
        if round_.status == RoundStatus.PENDING:
            round_.status = RoundStatus.ACTIVE
