"""
Player Movement Controller

Legality gate for every move between the dashboard pool and a round's
players, winners and losers lists. Each move validates first and only then
touches the pool and the rounds, so a rejected move changes nothing.

Rules:
- Frozen rounds accept no players and release no players.
- A round's roster must stay even after a move into it, except when every
  moved player is a previous winner going back to the round they last won;
  those land in the round's winners list. Any other selection goes to the
  roster in full.
- Losers cannot be moved back into the round they lost in.
- Winners moving backward cannot go past the last round they won.
- Winners moving forward need a played source round and cannot skip over a
  round that has not started.
"""

from typing import Iterable, List, Optional

from bracket_bot.constants import UIConstants
from bracket_bot.data_models.bracket import MatchStatus, Player, PlayerStatus, Round
from bracket_bot.operations.player_pool import PlayerPool
from bracket_bot.operations.round_registry import RoundRegistry
from bracket_bot.utils.bracket_exceptions import (
    FrozenRoundError, InvalidBackwardMoveError, InvalidForwardMoveError, InvalidMoveError,
    OddResultError, PlayerInMatchError, PlayerUnavailableError, TargetFrozenError, UnknownPlayerError
)
from bracket_bot.utils.logger import setup_logger

logger = setup_logger(__name__)


class PlayerMovementController:
    """Validated moves of players between the dashboard and rounds."""

    def __init__(self, pool: PlayerPool, registry: RoundRegistry):
        self.pool = pool
        self.registry = registry

    # Validation helpers

    def _target(self, round_id: str) -> Round:
        target = self.registry.get(round_id)
        if target.is_frozen:
            raise TargetFrozenError(target.label)
        return target

    def _source(self, round_id: str) -> Round:
        source = self.registry.get(round_id)
        self.registry.ensure_mutable(source, "move players out of")
        return source

    def _members(self, player_ids: Iterable[str], roster: List[str], where: str) -> List[Player]:
        ids = list(dict.fromkeys(player_ids))
        for pid in ids:
            if pid not in roster:
                raise UnknownPlayerError(pid, where)
        return self.pool.get_many(ids)

    @staticmethod
    def _check_not_in_match(source: Round, players: List[Player]):
        busy = {
            pid for match in source.matches
            if match.status != MatchStatus.COMPLETED
            for pid in match.player_ids
        }
        blocked = [p.name for p in players if p.id in busy]
        if blocked:
            raise PlayerInMatchError(blocked)

    def _take_round_players(self, source: Round, player_ids: List[str], action: str) -> List[Player]:
        players = self._members(player_ids, source.players, f'"{source.label}"')
        self._check_not_in_match(source, players)
        if not players:
            raise InvalidMoveError("No players selected", f"Select at least one player to {action}.")
        return players

    # Moves

    def move_to_round(self, player_ids: Iterable[str], target_round_id: str,
                      source_round_id: Optional[str] = None) -> Round:
        """Move players from the dashboard (no source) or from another round's roster."""
        player_ids = list(dict.fromkeys(player_ids))
        if source_round_id is None:
            players = self.pool.get_many(player_ids)
            unavailable = [p.name for p in players if not p.status.on_dashboard]
            if unavailable:
                raise PlayerUnavailableError(unavailable)
            if not players:
                raise InvalidMoveError("No players selected", "Select at least one player to move.")
            source = None
        else:
            source = self._source(source_round_id)
            if source_round_id == target_round_id:
                raise InvalidMoveError(
                    f"Source and target are both {source_round_id}",
                    f"Players are already in \"{source.label}\"."
                )
            players = self._take_round_players(source, player_ids, "move")

        target = self._target(target_round_id)
        source_name = source.label if source else UIConstants.DASHBOARD_NAME
        resulting_count = len(target.players) + len(players)

        returning = [
            p for p in players
            if p.is_previous_round_winner and p.previous_winning_round_id == target.id
        ]
        reentry = len(returning) == len(players)
        if resulting_count % 2 != 0 and not reentry:
            logger.warning(
                f"Rejected move of {len(players)} from {source_name} to '{target.label}': "
                f"{resulting_count} players"
            )
            raise OddResultError(len(players), resulting_count, source_name, target.label)

        # A mixed selection joins the roster as a whole
        moved_ids = [p.id for p in players]
        returning_ids = [p.id for p in returning] if reentry else []
        fresh_ids = [pid for pid in moved_ids if pid not in returning_ids]

        if source:
            source.players = [pid for pid in source.players if pid not in moved_ids]
        target.players = target.players + fresh_ids
        target.winners = target.winners + returning_ids
        self.pool.assign(fresh_ids, PlayerStatus.IN_ROUND, target.id)
        self.pool.assign(returning_ids, PlayerStatus.WINNER, target.id)

        logger.info(
            f"Moved {len(moved_ids)} player(s) from {source_name} to '{target.label}' "
            f"({len(returning_ids)} back to winners)"
        )
        return target

    def move_to_dashboard(self, player_ids: Iterable[str], source_round_id: str) -> List[str]:
        """Send round players back; previous winners return to the winners of their original round.

        Returns the ids released to the dashboard.
        """
        source = self._source(source_round_id)
        players = self._take_round_players(source, player_ids, "move")

        redirects = {}
        released = []
        for player in players:
            home = self.registry.find(player.original_winner_round_id) if player.is_previous_round_winner else None
            if home is None or home.id == source.id:
                released.append(player.id)
                continue
            if home.is_frozen:
                raise FrozenRoundError(home.label, f"return {player.name} to the winners of")
            redirects.setdefault(home.id, []).append(player.id)

        moved_ids = [p.id for p in players]
        source.players = [pid for pid in source.players if pid not in moved_ids]
        for round_id, ids in redirects.items():
            home = self.registry.get(round_id)
            home.winners = home.winners + ids
            self.pool.assign(ids, PlayerStatus.WINNER, home.id)
        self.pool.release(released)

        logger.info(
            f"Moved {len(released)} player(s) from '{source.label}' to the dashboard, "
            f"{len(moved_ids) - len(released)} back to their original winners"
        )
        return released

    def move_winners_between_rounds(self, source_round_id: str, target_round_id: str,
                                    winner_ids: Iterable[str]) -> Round:
        """Move winners backward (to winners) or forward (to the roster) between rounds."""
        source = self._source(source_round_id)
        if source_round_id == target_round_id:
            raise InvalidMoveError(
                f"Source and target are both {source_round_id}",
                f"Winners are already in \"{source.label}\". Choose a different round."
            )
        target = self._target(target_round_id)
        winners = self._members(winner_ids, source.winners, f'"{source.label}" winners')
        if not winners:
            raise InvalidMoveError("No winners selected", "Select at least one winner to move.")

        source_index = self.registry.index_of(source.id)
        target_index = self.registry.index_of(target.id)
        moved_ids = [w.id for w in winners]

        if target_index < source_index:
            too_far = [
                w.name for w in winners
                if w.last_winning_round and self.registry.find(w.last_winning_round)
                and target_index < self.registry.index_of(w.last_winning_round)
            ]
            if too_far:
                logger.warning(f"Rejected backward move to '{target.label}' for {too_far}")
                raise InvalidBackwardMoveError(source.label, target.label, too_far)

            source.winners = [pid for pid in source.winners if pid not in moved_ids]
            target.winners = target.winners + moved_ids
            self.pool.assign(moved_ids, PlayerStatus.WINNER, target.id)
            logger.info(f"Moved {len(moved_ids)} winner(s) back from '{source.label}' to '{target.label}' winners")
            return target

        if not any(m.status == MatchStatus.COMPLETED for m in source.matches):
            raise InvalidForwardMoveError(
                f"'{source.label}' has no completed match",
                f"Cannot advance winners from \"{source.label}\".\n\n"
                "At least one match in this round must be completed first."
            )
        for skipped in self.registry.rounds[source_index + 1:target_index]:
            if not self.registry.is_active(skipped):
                raise InvalidForwardMoveError(
                    f"Forward move to '{target.label}' skips unstarted '{skipped.label}'",
                    f"Cannot move winners from \"{source.label}\" to \"{target.label}\".\n\n"
                    f"\"{skipped.label}\" has not started yet. Winners cannot skip over an empty round."
                )

        source.winners = [pid for pid in source.winners if pid not in moved_ids]
        target.players = target.players + moved_ids
        self.pool.assign(moved_ids, PlayerStatus.IN_ROUND, target.id)
        for winner in winners:
            winner.previous_winning_round_id = source.id
        logger.info(f"Advanced {len(moved_ids)} winner(s) from '{source.label}' to '{target.label}'")
        return target

    def move_losers_to_destination(self, source_round_id: str, loser_ids: Iterable[str],
                                   target_round_id: Optional[str] = None) -> Optional[Round]:
        """Release losers to the dashboard, or give them a fresh start in another round."""
        source = self._source(source_round_id)
        if target_round_id == source_round_id:
            raise InvalidMoveError(
                f"Source and target are both {source_round_id}",
                f"Losers are already in \"{source.label}\". Choose a different round or the dashboard."
            )
        losers = self._members(loser_ids, source.losers, f'"{source.label}" losers')
        if not losers:
            raise InvalidMoveError("No losers selected", "Select at least one loser to move.")
        moved_ids = [p.id for p in losers]

        target = self._target(target_round_id) if target_round_id else None
        source.losers = [pid for pid in source.losers if pid not in moved_ids]

        if target is None:
            self.pool.release(moved_ids)
            logger.info(f"Released {len(moved_ids)} loser(s) from '{source.label}' to the dashboard")
            return None

        target.players = target.players + moved_ids
        self.pool.assign(moved_ids, PlayerStatus.IN_ROUND, target.id)
        logger.info(f"Moved {len(moved_ids)} loser(s) from '{source.label}' to '{target.label}'")
        return target
