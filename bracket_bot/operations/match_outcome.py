"""
Match Outcome Resolver

Records match winners and keeps the round's winners/losers partition in step
with the match results. A completed match can have its winner changed: the
previous winner is demoted to the losers and loses the round from their
winning lineage, then the new result is applied as for a first resolution.
"""

from datetime import datetime, timezone

from bracket_bot.data_models.bracket import Match, MatchStatus, Player, PlayerStatus, Round
from bracket_bot.operations.player_pool import PlayerPool
from bracket_bot.operations.round_registry import RoundRegistry
from bracket_bot.operations.winner_ledger import WinnerLedger
from bracket_bot.utils.bracket_exceptions import InvalidWinnerError, MatchStateError
from bracket_bot.utils.logger import setup_logger

logger = setup_logger(__name__)


class MatchOutcomeResolver:
    """Winner recording and reconciliation for matches."""

    def __init__(self, pool: PlayerPool, registry: RoundRegistry, ledger: WinnerLedger):
        self.pool = pool
        self.registry = registry
        self.ledger = ledger

    @staticmethod
    def _recompute_lineage(player: Player):
        """Rebuild winner lineage from the rounds the player still holds a win in."""
        if not player.rounds_won:
            player.is_previous_round_winner = False
            player.original_winner_round_id = None
            player.previous_winning_round_id = None
            player.last_winning_round = None
            return
        player.is_previous_round_winner = True
        player.original_winner_round_id = player.rounds_won[0]
        player.previous_winning_round_id = player.rounds_won[-1]
        player.last_winning_round = player.rounds_won[-1]

    def _demote(self, round_: Round, match: Match):
        old_winner_id = match.winner.id
        old_loser_id = match.opponent_of(old_winner_id).id

        if old_winner_id not in round_.winners or old_loser_id not in round_.losers:
            moved = self.pool.get(old_winner_id if old_winner_id not in round_.winners else old_loser_id)
            raise MatchStateError(
                f"{moved.name} has left '{round_.label}' since match {match.id} was decided",
                f"Cannot change the winner of this match.\n\n"
                f"{moved.name} has already been moved out of \"{round_.label}\". "
                "Move them back before changing the result."
            )

        round_.winners = [pid for pid in round_.winners if pid != old_winner_id]
        round_.losers = [pid for pid in round_.losers if pid != old_loser_id] + [old_winner_id]

        old_winner = self.pool.get(old_winner_id)
        old_winner.status = PlayerStatus.ELIMINATED
        old_winner.rounds_won = [rid for rid in old_winner.rounds_won if rid != round_.id]
        self._recompute_lineage(old_winner)
        self.ledger.drop_display(old_winner_id, round_.id)
        logger.info(f"Demoted {old_winner.name} in '{round_.label}' (match {match.id})")

    def record_winner(self, match_id: str, winner_id: str) -> Match:
        """Complete a match with the given winner, or change its existing winner."""
        round_ = self.registry.round_for_match(match_id)
        self.registry.ensure_mutable(round_, "record a winner in")
        match = round_.find_match(match_id)

        if not match.involves(winner_id):
            raise InvalidWinnerError(match_id, winner_id)

        if match.winner and match.winner.id == winner_id:
            logger.debug(f"Match {match_id} already won by {winner_id}; nothing to do")
            return match

        first_resolution = match.winner is None
        if not first_resolution:
            self._demote(round_, match)

        loser_id = match.opponent_of(winner_id).id
        pair = (winner_id, loser_id)
        round_.players = [pid for pid in round_.players if pid not in pair]
        round_.winners = [pid for pid in round_.winners if pid not in pair] + [winner_id]
        round_.losers = [pid for pid in round_.losers if pid not in pair] + [loser_id]

        winner = self.pool.get(winner_id)
        loser = self.pool.get(loser_id)
        self.pool.assign([winner_id], PlayerStatus.WINNER, round_.id)
        self.pool.assign([loser_id], PlayerStatus.ELIMINATED, round_.id)

        if round_.id not in winner.rounds_won:
            winner.rounds_won = winner.rounds_won + [round_.id]
        winner.is_previous_round_winner = True
        if winner.original_winner_round_id is None:
            winner.original_winner_round_id = round_.id
        winner.previous_winning_round_id = round_.id
        winner.last_winning_round = round_.id

        now = datetime.now(timezone.utc)
        if first_resolution:
            winner.matches_played += 1
            loser.matches_played += 1
            match.ended_at = now

        match.status = MatchStatus.COMPLETED
        match.winner = winner.snapshot()
        self.ledger.record(winner, round_, match_id, now)

        logger.info(
            f"Match {match_id} in '{round_.label}': {winner.name} beat {loser.name}"
            + ("" if first_resolution else " (winner changed)")
        )
        return match
