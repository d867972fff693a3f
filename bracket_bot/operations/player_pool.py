"""
Player pool for the Tournament Dashboard.

Holds the canonical record of every registered player plus the organizer's
current selection. Selection is kept apart from the player records so that
ticking a checkbox never changes where a player is.
"""

from typing import Dict, Iterable, List, Optional, Set

from bracket_bot.data_models.bracket import Player, PlayerStatus
from bracket_bot.utils.bracket_exceptions import PlayerUnavailableError, UnknownPlayerError
from bracket_bot.utils.logger import setup_logger

logger = setup_logger(__name__)


class PlayerPool:
    """Canonical player registry and selection set."""

    def __init__(self, players: Iterable[Player] = ()):
        self._players: Dict[str, Player] = {p.id: p for p in players}
        self.selected_ids: Set[str] = set()

    def __len__(self):
        return len(self._players)

    def __contains__(self, player_id: str) -> bool:
        return player_id in self._players

    @property
    def players(self) -> List[Player]:
        return list(self._players.values())

    def get(self, player_id: str) -> Player:
        try:
            return self._players[player_id]
        except KeyError:
            raise UnknownPlayerError(player_id)

    def get_many(self, player_ids: Iterable[str]) -> List[Player]:
        return [self.get(pid) for pid in player_ids]

    def names(self, player_ids: Iterable[str]) -> List[str]:
        return [self.get(pid).name for pid in player_ids]

    # Filters

    def list_available(self) -> List[Player]:
        return [p for p in self._players.values() if p.status == PlayerStatus.AVAILABLE]

    def list_dashboard(self) -> List[Player]:
        """Players on the dashboard, including the lobby."""
        return [p for p in self._players.values() if p.status.on_dashboard]

    def list_selected(self) -> List[Player]:
        return [p for p in self._players.values() if p.id in self.selected_ids]

    # Selection

    def set_selected(self, player_ids: Iterable[str], selected: bool):
        ids = set(player_ids)
        for pid in ids:
            self.get(pid)
        self.selected_ids = (self.selected_ids | ids) if selected else (self.selected_ids - ids)

    def toggle_selected(self, player_id: str) -> bool:
        self.get(player_id)
        if player_id in self.selected_ids:
            self.selected_ids = self.selected_ids - {player_id}
            return False
        self.selected_ids = self.selected_ids | {player_id}
        return True

    def select_all_available(self):
        self.selected_ids = {p.id for p in self.list_available()}

    def clear_selection(self):
        self.selected_ids = set()

    # Status changes

    def _replace(self, player_ids: Iterable[str], **changes):
        ids = set(player_ids)
        for pid in ids:
            self.get(pid)
        updated = {}
        for pid, player in self._players.items():
            if pid in ids:
                for attr, value in changes.items():
                    setattr(player, attr, value)
            updated[pid] = player
        self._players = updated
        self.selected_ids = self.selected_ids - ids

    def release(self, player_ids: Iterable[str]):
        """Return players to the dashboard as available."""
        ids = list(player_ids)
        self._replace(
            ids,
            status=PlayerStatus.AVAILABLE,
            current_round_id=None,
            current_match_id=None,
        )
        logger.debug(f"Released {len(ids)} player(s) to the dashboard")

    def move_to_lobby(self, player_ids: Iterable[str]):
        """Park dashboard players in the lobby."""
        ids = list(player_ids)
        unavailable = [p.name for p in self.get_many(ids) if not p.status.on_dashboard]
        if unavailable:
            raise PlayerUnavailableError(unavailable)
        self._replace(ids, status=PlayerStatus.IN_LOBBY, current_round_id=None, current_match_id=None)
        logger.debug(f"Moved {len(ids)} player(s) to the lobby")

    def assign(self, player_ids: Iterable[str], status: PlayerStatus,
               round_id: Optional[str], match_id: Optional[str] = None):
        """Place players inside a round with the given status."""
        self._replace(player_ids, status=status, current_round_id=round_id, current_match_id=match_id)
