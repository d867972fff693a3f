"""
Match Pairing Engine

Turns the unmatched players of a round into head-to-head matches and drives
the pending -> active part of the match lifecycle.

Two pairing modes are offered:
- pair(): additive. Existing matches stay, only unmatched players are shuffled.
- reshuffle(): full. Pending matches are dissolved and their players are
  re-paired together with the unmatched, non-waiting players.

Both modes reject an odd number of players without creating any match.
"""

import random
from datetime import datetime, timezone
from typing import List, Optional

from bracket_bot.data_models.bracket import Match, MatchStatus, PlayerStatus, Round
from bracket_bot.operations.player_pool import PlayerPool
from bracket_bot.operations.round_registry import RoundRegistry
from bracket_bot.utils.bracket_exceptions import (
    ActiveMatchError, MatchStateError, OddPlayerCountError
)
from bracket_bot.utils.logger import setup_logger

logger = setup_logger(__name__)


class MatchPairingEngine:
    """Random pairing and match start/cancel for a single round at a time."""

    def __init__(self, pool: PlayerPool, registry: RoundRegistry, rng: Optional[random.Random] = None):
        self.pool = pool
        self.registry = registry
        self.rng = rng or random.Random()

    def _create_matches(self, round_: Round, player_ids: List[str]) -> List[Match]:
        order = list(player_ids)
        self.rng.shuffle(order)  # Fisher-Yates

        new_matches = []
        for i in range(0, len(order), 2):
            round_.match_serial += 1
            match_id = f"match_{round_.id}_{round_.match_serial}"
            pair = order[i:i + 2]
            self.pool.assign(pair, PlayerStatus.IN_MATCH, round_.id, match_id)
            player1, player2 = self.pool.get_many(pair)
            new_matches.append(Match(id=match_id, player1=player1.snapshot(), player2=player2.snapshot()))

        round_.matches = round_.matches + new_matches
        self.registry.mark_active(round_)
        return new_matches

    def pair(self, round_id: str) -> List[Match]:
        """Pair every unmatched player of the round, keeping existing matches."""
        round_ = self.registry.get(round_id)
        self.registry.ensure_mutable(round_, "shuffle")

        unmatched = round_.unmatched_player_ids
        if not unmatched:
            logger.info(f"No unmatched players to pair in {round_.id}")
            return []
        if len(unmatched) % 2 != 0:
            logger.warning(f"Refused to pair {len(unmatched)} players in {round_.id} (odd count)")
            raise OddPlayerCountError(len(unmatched), round_.label)

        new_matches = self._create_matches(round_, unmatched)
        logger.info(
            f"Paired {len(unmatched)} players into {len(new_matches)} matches in {round_.id}; "
            f"kept {len(round_.matches) - len(new_matches)} existing"
        )
        return new_matches

    def reshuffle(self, round_id: str) -> List[Match]:
        """Dissolve pending matches and pair everyone not waiting or already playing."""
        round_ = self.registry.get(round_id)
        self.registry.ensure_mutable(round_, "reshuffle")

        pending = [m for m in round_.matches if m.status == MatchStatus.PENDING]
        dissolved = [pid for match in pending for pid in match.player_ids]
        unmatched = [
            pid for pid in round_.unmatched_player_ids
            if self.pool.get(pid).status != PlayerStatus.WAITING
        ]
        candidates = dissolved + unmatched

        if not candidates:
            logger.info(f"Nothing to reshuffle in {round_.id}")
            return []
        if len(candidates) % 2 != 0:
            logger.warning(f"Refused to reshuffle {len(candidates)} players in {round_.id} (odd count)")
            raise OddPlayerCountError(len(candidates), round_.label)

        round_.matches = [m for m in round_.matches if m.status != MatchStatus.PENDING]
        new_matches = self._create_matches(round_, candidates)
        logger.info(
            f"Reshuffled {round_.id}: dissolved {len(pending)} pending matches, "
            f"created {len(new_matches)}"
        )
        return new_matches

    def start_match(self, match_id: str) -> Match:
        round_ = self.registry.round_for_match(match_id)
        self.registry.ensure_mutable(round_, "start a match in")
        match = round_.find_match(match_id)

        if match.status != MatchStatus.PENDING:
            raise MatchStateError(
                f"Match {match_id} is {match.status.value}, not pending",
                "Only pending matches can be started."
            )
        active = next((m for m in round_.matches if m.status == MatchStatus.ACTIVE), None)
        if active:
            raise ActiveMatchError(round_.label, active.id)

        match.status = MatchStatus.ACTIVE
        match.started_at = datetime.now(timezone.utc)
        logger.info(f"Started match {match_id} in {round_.id}")
        return match

    def cancel_match(self, match_id: str) -> Match:
        """Delete an unfinished match; its players wait inside the round."""
        round_ = self.registry.round_for_match(match_id)
        self.registry.ensure_mutable(round_, "cancel a match in")
        match = round_.find_match(match_id)

        if match.status == MatchStatus.COMPLETED:
            raise MatchStateError(
                f"Match {match_id} is already completed",
                "A completed match cannot be cancelled. Change its winner instead."
            )

        round_.matches = [m for m in round_.matches if m.id != match_id]
        self.pool.assign(match.player_ids, PlayerStatus.WAITING, round_.id)
        logger.info(f"Cancelled match {match_id}; {match.player1.name} and {match.player2.name} are waiting")
        return match
