"""
Bracket-wide constants for the Tournament Dashboard bot.

Round labels, tournament status routing and UI values used across the
engine, services and cogs.
"""

class RoundConstants:
    """Constants related to round naming."""
    
    # Canonical display label per slot label ("Round 3" -> "Third Round")
    STANDARD_DISPLAY_NAMES = {
        'Round 1': 'First Round',
        'Round 2': 'Second Round',
        'Round 3': 'Third Round',
        'Round 4': 'Fourth Round',
        'Round 5': 'Fifth Round',
        'Round 6': 'Sixth Round',
        'Round 7': 'Seventh Round',
        'Round 8': 'Eighth Round',
        'Round 9': 'Ninth Round',
        'Round 10': 'Tenth Round',
    }
    
    FIRST_ROUND_DISPLAY_NAME = 'First Round'
    
    @staticmethod
    def slot_id(number: int) -> str:
        return f"round_{number}"
    
    @staticmethod
    def slot_label(number: int) -> str:
        return f"Round {number}"

    @staticmethod
    def slot_number(round_id: str) -> int:
        """Inverse of slot_id ("round_3" -> 3)."""
        return int(round_id.rsplit('_', 1)[1])

    @classmethod
    def canonical_display_name(cls, slot_label: str) -> str:
        """Map a slot label back to its standard display name."""
        return cls.STANDARD_DISPLAY_NAMES.get(slot_label, slot_label)

class TournamentStatusConstants:
    """Tournament status values reported by the data source."""
    
    DEFAULT_STATUS = 'scheduled'
    STARTED = 'started'
    
    # Statuses that open the bracket dashboard directly
    DASHBOARD_STATUSES = frozenset({'started', 'running', 'ongoing', 'completed'})
    
    # Statuses that show the start-tournament prompt first
    PROMPT_STATUSES = frozenset({'registration_open', 'scheduled', 'upcoming', 'draft'})

class UIConstants:
    """Constants for Discord UI elements."""
    
    # Embed colors
    DEFAULT_EMBED_COLOR = 0x3498db  # Blue
    GOLD_RANK_COLOR = 0xffd700     # Gold for champions
    ERROR_COLOR = 0xe74c3c         # Red for errors
    SUCCESS_COLOR = 0x2ecc71       # Green for success
    FROZEN_COLOR = 0x95a5a6        # Grey for frozen rounds
    
    # Emoji for UI elements
    TROPHY_EMOJI = "🏆"
    FROZEN_EMOJI = "🧊"
    SWORDS_EMOJI = "⚔️"
    
    # Discord embed limits
    MAX_FIELD_LINES = 15

    # Name shown for the unassigned player pool
    DASHBOARD_NAME = "Tournament Dashboard"
