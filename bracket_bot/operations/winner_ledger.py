"""
Winner Ledger - champions history and display list.

The history is append-only and keeps every match win. The display list keeps
at most one entry per player (their most recent win), newest first, capped at
Config.MAX_DISPLAY_WINNERS. Titles, ranks and the "show" checkbox are an
overlay that the organizer edits before publishing the champions.
"""

from datetime import datetime, timezone
from typing import List, Optional

from bracket_bot.config import Config
from bracket_bot.data_models.bracket import Player, Round, WinnerDisplayEntry, WinnerHistoryEntry
from bracket_bot.utils.bracket_exceptions import BracketError, UnknownPlayerError
from bracket_bot.utils.logger import setup_logger

logger = setup_logger(__name__)


class WinnerLedger:
    """Append-only win history plus the capped, deduplicated display list"""

    def __init__(self, history: Optional[List[WinnerHistoryEntry]] = None,
                 display: Optional[List[WinnerDisplayEntry]] = None):
        self.history: List[WinnerHistoryEntry] = list(history or [])
        self.display: List[WinnerDisplayEntry] = list(display or [])

    def _renumber(self):
        for position, entry in enumerate(self.display, start=1):
            entry.rank = position

    def _entry(self, player_id: str) -> WinnerDisplayEntry:
        for entry in self.display:
            if entry.player.id == player_id:
                return entry
        raise UnknownPlayerError(player_id, "the champions list")

    def record(self, player: Player, round_: Round, match_id: str,
               won_at: Optional[datetime] = None) -> WinnerHistoryEntry:
        """Log a win and make it the player's display entry."""
        won_at = won_at or datetime.now(timezone.utc)
        entry = WinnerHistoryEntry(
            player=player.snapshot(),
            round_won=round_.label,
            round_won_id=round_.id,
            won_at=won_at,
            match_id=match_id,
        )
        self.history = self.history + [entry]

        shown = WinnerDisplayEntry(
            player=player.snapshot(),
            rank=1,
            title="",
            round_won=round_.label,
            round_won_id=round_.id,
        )
        others = [e for e in self.display if e.player.id != player.id]
        self.display = ([shown] + others)[:Config.MAX_DISPLAY_WINNERS]
        self._renumber()

        logger.info(f"Recorded win for {player.name} in '{round_.label}' (match {match_id})")
        return entry

    def drop_display(self, player_id: str, round_id: str) -> bool:
        """Remove a revoked win from the display list. History is left alone."""
        remaining = [
            e for e in self.display
            if not (e.player.id == player_id and e.round_won_id == round_id)
        ]
        dropped = len(remaining) != len(self.display)
        if dropped:
            self.display = remaining
            self._renumber()
            logger.info(f"Dropped display entry for player {player_id} in {round_id}")
        return dropped

    def update_title(self, player_id: str, title: str) -> WinnerDisplayEntry:
        entry = self._entry(player_id)
        entry.title = (title or "").strip()
        return entry

    def update_rank(self, player_id: str, rank: int) -> WinnerDisplayEntry:
        """Give a player a rank, swapping with whoever held it.

        The list order (most recent win first) is not changed.
        """
        if not 1 <= rank <= len(self.display):
            raise BracketError(
                f"Rank {rank} out of range 1..{len(self.display)}",
                f"Rank must be between 1 and {len(self.display)}.",
                title="Invalid Rank"
            )
        entry = self._entry(player_id)
        holder = next(e for e in self.display if e.rank == rank)
        holder.rank, entry.rank = entry.rank, rank
        logger.debug(f"Rank {rank} -> {entry.player.name}, rank {holder.rank} -> {holder.player.name}")
        return entry

    def toggle_selected(self, player_id: str) -> bool:
        entry = self._entry(player_id)
        entry.selected = not entry.selected
        return entry.selected

    def selected_entries(self) -> List[WinnerDisplayEntry]:
        return sorted((e for e in self.display if e.selected), key=lambda e: e.rank)
