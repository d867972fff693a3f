"""
Custom exceptions for the bracket engine with user-friendly alert messages.

Every rejection carries a title and a human readable message so the host UI
can show it as an alert without knowing which operation failed.
"""

from bracket_bot.data_models.bracket import Alert


class BracketError(Exception):
    """Base exception for bracket validation rejections."""
    title = "Action Not Allowed"

    def __init__(self, message: str, user_message: str = None, title: str = None):
        super().__init__(message)
        self.user_message = user_message or message
        if title:
            self.title = title

    @property
    def alert(self) -> Alert:
        return Alert(title=self.title, message=self.user_message)


class OddPlayerCountError(BracketError):
    """Raised when pairing would leave one player without an opponent."""
    title = "Odd Number of Players"

    def __init__(self, count: int, round_name: str, message: str = None):
        self.count = count
        self.round_name = round_name
        super().__init__(
            f"Odd player count {count} in '{round_name}'",
            message or (
                f"Cannot create matches in \"{round_name}\".\n\n"
                f"There are {count} unmatched players (odd number).\n\n"
                "Rounds must have an even number of players for proper match pairings.\n\n"
                "Please add or remove 1 player to create matches."
            )
        )


class OddResultError(OddPlayerCountError):
    """Raised when a move would leave the target round with an odd roster."""

    def __init__(self, moved: int, resulting_count: int, source_name: str, target_name: str):
        self.moved = moved
        self.resulting_count = resulting_count
        super().__init__(
            resulting_count,
            target_name,
            f"Cannot move {moved} player(s) from \"{source_name}\" to \"{target_name}\".\n\n"
            f"Target round will have {resulting_count} players (odd number).\n\n"
            "Rounds must have an even number of players for proper match pairings.\n\n"
            "Please select a different number of players or choose a different target round."
        )


class FrozenRoundError(BracketError):
    """Raised when a frozen round is asked to change."""
    title = "Round Frozen"

    def __init__(self, round_name: str, action: str = "change"):
        self.round_name = round_name
        super().__init__(
            f"Round '{round_name}' is frozen ({action})",
            f"Cannot {action} \"{round_name}\".\n\nThis round is frozen and no more changes are allowed."
        )


class TargetFrozenError(FrozenRoundError):
    """Raised when players are moved into a frozen round."""
    title = "Cannot Move Players"

    def __init__(self, round_name: str):
        super().__init__(round_name, "move players to")


class RoundRemovalError(BracketError):
    """Base for rejected round deletions."""
    title = "Cannot Delete Round"


class NotEmptyError(RoundRemovalError):
    """Raised when a round that still holds players or results is removed."""

    def __init__(self, round_name: str):
        self.round_name = round_name
        super().__init__(
            f"Round '{round_name}' is not empty",
            f"Cannot delete \"{round_name}\".\n\n"
            "The round must be completely empty (no players, matches, winners, or losers) to be deleted."
        )


class NotLastRoundError(RoundRemovalError):
    """Raised when a round other than the last one is removed."""

    def __init__(self, round_name: str):
        self.round_name = round_name
        super().__init__(
            f"Round '{round_name}' is not the last round",
            f"Cannot delete \"{round_name}\".\n\nOnly the last round of the tournament can be deleted."
        )


class DuplicateNameError(BracketError):
    """Raised when a round display name is already taken."""
    title = "Duplicate Round Name"

    def __init__(self, display_name: str):
        self.display_name = display_name
        super().__init__(
            f"Round name '{display_name}' already in use",
            f"A round named \"{display_name}\" already exists.\n\nPlease choose a different name."
        )


class InvalidRoundNameError(BracketError):
    """Raised when a round is created without a usable name."""
    title = "Invalid Round Name"

    def __init__(self):
        super().__init__("Empty round name", "Please enter a round name.")


class IncompleteRoundError(BracketError):
    """Raised when a round is frozen before it is fully resolved."""
    title = "Cannot Freeze Round"

    def __init__(self, round_name: str, reason: str):
        self.round_name = round_name
        super().__init__(
            f"Round '{round_name}' is incomplete: {reason}",
            f"Cannot freeze \"{round_name}\".\n\n{reason}"
        )


class InvalidMoveError(BracketError):
    """Raised when a winner move breaks the round ordering rules."""
    title = "Invalid Move"


class InvalidBackwardMoveError(InvalidMoveError):
    """Raised when winners would retreat past their last winning round."""

    def __init__(self, source_name: str, target_name: str, player_names):
        self.player_names = list(player_names)
        names = ", ".join(self.player_names)
        super().__init__(
            f"Backward move from '{source_name}' to '{target_name}' rejected for {names}",
            f"Cannot move winners from \"{source_name}\" to \"{target_name}\".\n\n"
            f"Winners ({names}) can only move back to their last winning round or further.\n\n"
            "Please select a valid target round."
        )


class InvalidForwardMoveError(InvalidMoveError):
    """Raised when winners would advance from an unplayed round or leapfrog one."""


class ActiveMatchError(BracketError):
    """Raised when a second match is started while one is in progress."""
    title = "Match In Progress"

    def __init__(self, round_name: str, active_match_id: str):
        self.active_match_id = active_match_id
        super().__init__(
            f"Round '{round_name}' already has active match {active_match_id}",
            f"Another match is already in progress in \"{round_name}\".\n\n"
            "Finish or cancel it before starting a new one."
        )


class MatchStateError(BracketError):
    """Raised when a match is in the wrong state for an operation."""
    title = "Invalid Match State"


class InvalidWinnerError(BracketError):
    """Raised when the chosen winner did not play the match."""
    title = "Invalid Winner"

    def __init__(self, match_id: str, player_id: str):
        super().__init__(
            f"Player {player_id} is not part of match {match_id}",
            "The selected winner is not one of the two players in this match."
        )


class PlayerInMatchError(BracketError):
    """Raised when a player inside an unfinished match is moved."""
    title = "Player In Match"

    def __init__(self, player_names):
        self.player_names = list(player_names)
        names = ", ".join(self.player_names)
        super().__init__(
            f"Players still in a match: {names}",
            f"{names} still have an unfinished match.\n\nCancel or complete the match first."
        )


class PlayerUnavailableError(BracketError):
    """Raised when a dashboard move selects players that are not on the dashboard."""
    title = "Player Unavailable"

    def __init__(self, player_names):
        self.player_names = list(player_names)
        names = ", ".join(self.player_names)
        super().__init__(
            f"Players not on the dashboard: {names}",
            f"{names} are not available on the Tournament Dashboard."
        )


class UnknownRoundError(BracketError):
    """Raised when a round id does not exist."""
    title = "Round Not Found"

    def __init__(self, round_id: str):
        super().__init__(f"Round {round_id} not found", "The selected round could not be found.")


class UnknownMatchError(BracketError):
    """Raised when a match id does not exist."""
    title = "Match Not Found"

    def __init__(self, match_id: str):
        super().__init__(f"Match {match_id} not found", "The specified match could not be found.")


class UnknownPlayerError(BracketError):
    """Raised when a player id is not registered in the tournament."""
    title = "Player Not Found"

    def __init__(self, player_id: str, where: str = "the tournament"):
        super().__init__(
            f"Player {player_id} not found in {where}",
            f"The selected player could not be found in {where}."
        )


class BracketInvariantError(Exception):
    """Raised when an applied command would break conservation or exclusivity.

    This signals a programming error, not a user mistake.
    """
    pass


class TournamentServiceError(Exception):
    """Base exception for tournament data source and routing failures."""

    def __init__(self, message: str, user_message: str = None):
        super().__init__(message)
        self.user_message = user_message or message


class TournamentNotFoundError(TournamentServiceError):
    """Raised when a tournament id is unknown to the data source."""

    def __init__(self, tournament_id: str):
        self.tournament_id = tournament_id
        super().__init__(
            f"Tournament {tournament_id} not found",
            f"❌ Tournament `{tournament_id}` was not found."
        )


class TournamentNotStartedError(TournamentServiceError):
    """Raised when the bracket is opened for a tournament that has not started."""

    def __init__(self, tournament_id: str, status: str):
        self.status = status
        super().__init__(
            f"Tournament {tournament_id} is '{status}', not started",
            f"❌ Tournament `{tournament_id}` is **{status}**. Start it before opening the bracket."
        )
