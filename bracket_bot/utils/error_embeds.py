"""
Centralized error embeds for the bracket bot.

Bracket rejections arrive as Alert(title, message) pairs; everything else
that can go wrong in a command gets a fixed embed from here.
"""

import discord

from bracket_bot.data_models.bracket import Alert


class ErrorEmbeds:
    """Centralized error embed factory for consistent error handling."""

    @staticmethod
    def from_alert(alert: Alert) -> discord.Embed:
        """Render a bracket rejection."""
        return discord.Embed(
            title=f"⚠️ {alert.title}",
            description=alert.message,
            color=discord.Color.orange()
        )

    @staticmethod
    def no_bracket() -> discord.Embed:
        """Create embed for commands issued before a bracket is open."""
        return discord.Embed(
            title="No Bracket Open",
            description="There is no open bracket in this server.\n\nUse `/bracket-open` with a tournament id first.",
            color=discord.Color.red()
        )

    @staticmethod
    def service_error(user_message: str) -> discord.Embed:
        """Create embed for tournament data source failures."""
        return discord.Embed(
            title="Tournament Error",
            description=user_message,
            color=discord.Color.red()
        )

    @staticmethod
    def invalid_input(message: str) -> discord.Embed:
        """Create embed for invalid user input."""
        return discord.Embed(
            title="Invalid Input",
            description=message,
            color=discord.Color.red()
        )

    @staticmethod
    def command_error(error: str) -> discord.Embed:
        """Create embed for general command errors."""
        return discord.Embed(
            title="Command Error",
            description=f"An error occurred: {error}\n\nPlease try again or contact an administrator.",
            color=discord.Color.red()
        )

    @staticmethod
    def permission_denied() -> discord.Embed:
        """Create embed for permission errors."""
        return discord.Embed(
            title="Permission Denied",
            description="Only the tournament organizer can manage the bracket.",
            color=discord.Color.red()
        )
