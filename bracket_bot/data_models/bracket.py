"""
Bracket data models for the Tournament Dashboard.

Plain dataclasses describing players, rounds, matches and the champions
ledger. The engine owns and mutates these under single-writer discipline;
everything handed outside the engine is a copy.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import List, Optional


class PlayerStatus(Enum):
    """Where a player currently sits in the tournament"""
    AVAILABLE = "available"    # On the dashboard, free to be moved
    IN_ROUND = "in_round"      # In a round roster, not yet paired
    WAITING = "waiting"        # Back in the roster after a cancelled match
    IN_MATCH = "in_match"      # Paired into a pending or active match
    IN_LOBBY = "in_lobby"      # Parked on the dashboard lobby
    ELIMINATED = "eliminated"  # In a round's losers
    WINNER = "winner"          # In a round's winners

    @property
    def on_dashboard(self) -> bool:
        return self in (PlayerStatus.AVAILABLE, PlayerStatus.IN_LOBBY)


class RoundStatus(Enum):
    """Lifecycle of a round"""
    PENDING = "pending"
    ACTIVE = "active"
    COMPLETED = "completed"


class MatchStatus(Enum):
    """Lifecycle of a match"""
    PENDING = "pending"
    ACTIVE = "active"
    COMPLETED = "completed"


@dataclass
class Player:
    """A registered tournament player and their bracket lineage."""
    id: str
    name: str
    email: str = ""
    skill: str = "Beginner"
    profile_pic: Optional[str] = None
    status: PlayerStatus = PlayerStatus.AVAILABLE
    current_round_id: Optional[str] = None
    current_match_id: Optional[str] = None
    matches_played: int = 0
    rounds_won: List[str] = field(default_factory=list)

    # Winner lineage
    is_previous_round_winner: bool = False
    original_winner_round_id: Optional[str] = None
    previous_winning_round_id: Optional[str] = None
    last_winning_round: Optional[str] = None

    def snapshot(self) -> 'Player':
        """Value copy used by matches and ledger entries."""
        return replace(self, rounds_won=list(self.rounds_won))

    def __repr__(self):
        return f"<Player(id='{self.id}', name='{self.name}', status={self.status.value})>"


@dataclass
class Match:
    """A pairing of two round players."""
    id: str
    player1: Player
    player2: Player
    status: MatchStatus = MatchStatus.PENDING
    winner: Optional[Player] = None
    started_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None
    score: Optional[str] = None

    @property
    def player_ids(self) -> tuple:
        return (self.player1.id, self.player2.id)

    def involves(self, player_id: str) -> bool:
        return player_id in self.player_ids

    def opponent_of(self, player_id: str) -> Player:
        return self.player2 if self.player1.id == player_id else self.player1

    @property
    def duration(self) -> Optional[str]:
        if not self.started_at or not self.ended_at:
            return None
        minutes = int((self.ended_at - self.started_at).total_seconds() // 60)
        return f"{minutes} min"


@dataclass
class Round:
    """One elimination stage of the bracket."""
    id: str
    name: str
    display_name: str
    players: List[str] = field(default_factory=list)
    matches: List[Match] = field(default_factory=list)
    winners: List[str] = field(default_factory=list)
    losers: List[str] = field(default_factory=list)
    status: RoundStatus = RoundStatus.PENDING
    is_frozen: bool = False
    match_serial: int = 0

    @property
    def label(self) -> str:
        return self.display_name or self.name

    @property
    def is_empty(self) -> bool:
        return not (self.players or self.matches or self.winners or self.losers)

    @property
    def matched_player_ids(self) -> set:
        """Players tied up in a match that is still open; completed matches free them."""
        return {
            pid for match in self.matches
            if match.status != MatchStatus.COMPLETED
            for pid in match.player_ids
        }

    @property
    def unmatched_player_ids(self) -> List[str]:
        matched = self.matched_player_ids
        return [pid for pid in self.players if pid not in matched]

    def find_match(self, match_id: str) -> Optional[Match]:
        return next((m for m in self.matches if m.id == match_id), None)

    def __repr__(self):
        return (f"<Round(id='{self.id}', display_name='{self.display_name}', "
                f"players={len(self.players)}, matches={len(self.matches)}, "
                f"frozen={self.is_frozen})>")


@dataclass(frozen=True)
class WinnerHistoryEntry:
    """Permanent record of a single match win."""
    player: Player
    round_won: str
    round_won_id: str
    won_at: datetime
    match_id: str


@dataclass
class WinnerDisplayEntry:
    """Champions ledger row: the most recent win of one player."""
    player: Player
    rank: int
    title: str
    round_won: str
    round_won_id: str
    selected: bool = True


@dataclass(frozen=True)
class Alert:
    """Title/message pair surfaced to the host UI."""
    title: str
    message: str
