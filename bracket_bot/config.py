import os
from dotenv import load_dotenv

load_dotenv()


def _int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    return int(value) if value not in (None, '') else default


class Config:
    """Tournament Dashboard bot settings, read from the environment (.env supported)"""

    # Discord
    DISCORD_TOKEN = os.getenv('DISCORD_TOKEN')
    DISCORD_GUILD_ID = _int_env('DISCORD_GUILD_ID', 0)
    DISCORD_GUILD_IDS = os.getenv('DISCORD_GUILD_IDS', '')  # "123,456" to sync several guilds
    OWNER_DISCORD_ID = _int_env('OWNER_DISCORD_ID', 0)      # The organizer; only they run bracket commands
    COMMAND_PREFIX = os.getenv('COMMAND_PREFIX', '!')

    # Tournament data source
    DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///tournament_dashboard.db')

    # Tournament status cache
    REDIS_URL = os.getenv('REDIS_URL')
    STATUS_CACHE_TTL = _int_env('STATUS_CACHE_TTL', 86400)  # seconds
    STATUS_CACHE_PREFIX = 'tournament_status:'

    # Diagnostics
    DEBUG = os.getenv('DEBUG', 'False').lower() == 'true'
    LOG_DIR = os.getenv('LOG_DIR', 'logs')

    # Bracket rules
    MAX_DISPLAY_WINNERS = 5
    MAX_ROUNDS = _int_env('MAX_ROUNDS', 20)
    DEFAULT_SKILL_LEVEL = 'Beginner'
    DEFAULT_PROFILE_PIC = '/default-avatar.png'

    @classmethod
    def get_guild_ids(cls):
        """Guilds to sync slash commands to; empty means a global sync."""
        if cls.DISCORD_GUILD_IDS:
            parts = [part.strip() for part in cls.DISCORD_GUILD_IDS.split(',') if part.strip()]
            if not all(part.isdigit() for part in parts):
                raise ValueError("DISCORD_GUILD_IDS must be comma-separated integers")
            return [int(part) for part in parts]
        return [cls.DISCORD_GUILD_ID] if cls.DISCORD_GUILD_ID else []

    @classmethod
    def validate(cls):
        """Fail fast on settings the bot cannot start without"""
        missing = []
        if not cls.DISCORD_TOKEN:
            missing.append("DISCORD_TOKEN")
        if not cls.OWNER_DISCORD_ID:
            missing.append("OWNER_DISCORD_ID")
        if not (cls.DISCORD_GUILD_ID or cls.DISCORD_GUILD_IDS):
            missing.append("DISCORD_GUILD_ID or DISCORD_GUILD_IDS")
        if missing:
            raise ValueError(f"Missing required settings: {', '.join(missing)}")
        if cls.MAX_ROUNDS < 1:
            raise ValueError("MAX_ROUNDS must be at least 1")
