import asyncio
import logging
import traceback
from typing import Optional

import discord
from discord.ext import commands
from discord import app_commands

from bracket_bot.config import Config
from bracket_bot.database.database import Database
from bracket_bot.services.status_cache import TournamentStatusCache
from bracket_bot.services.tournament_service import TournamentService
from bracket_bot.utils.error_embeds import ErrorEmbeds
from bracket_bot.utils.logger import setup_logger

EXTENSIONS = (
    'bracket_bot.cogs.bracket',
)


class DashboardBot(commands.Bot):
    """Discord front end for the tournament bracket"""

    def __init__(self):
        intents = discord.Intents.default()
        intents.message_content = True  # Prefix commands
        intents.guilds = True

        super().__init__(command_prefix=Config.COMMAND_PREFIX, intents=intents, help_command=None)
        self.tree.on_error = self.on_app_command_error

        self.logger = setup_logger(__name__)
        self.db: Optional[Database] = None
        self.status_cache: Optional[TournamentStatusCache] = None
        self.tournament_service: Optional[TournamentService] = None

    async def setup_hook(self):
        """Connect storage, build services, then load and sync commands"""
        self.logger.info("Starting Tournament Dashboard bot")

        self.db = Database()
        await self.db.initialize()
        self.status_cache = await TournamentStatusCache.create()
        self.tournament_service = TournamentService(self.db, self.status_cache)

        await self.load_cogs()
        await self._sync_commands()
        self.logger.info("Tournament Dashboard bot ready to connect")

    async def load_cogs(self):
        for extension in EXTENSIONS:
            try:
                await self.load_extension(extension)
            except commands.ExtensionError as e:
                self.logger.error(f"Could not load {extension}: {e}", exc_info=True)
            else:
                self.logger.info(f"Loaded {extension}")

    async def _sync_commands(self):
        """Copy slash commands to the configured guilds, or sync globally without any"""
        if not self.tree.get_commands():
            self.logger.warning("No slash commands registered; skipping sync")
            return

        guild_ids = Config.get_guild_ids()
        targets = [discord.Object(id=guild_id) for guild_id in guild_ids] or [None]
        for guild in targets:
            where = f"guild {guild.id}" if guild else "all guilds (global, slow to propagate)"
            try:
                if guild:
                    self.tree.copy_global_to(guild=guild)
                synced = await self.tree.sync(guild=guild)
            except discord.Forbidden:
                self.logger.error(f"Missing applications.commands scope for {where}", exc_info=True)
            except discord.HTTPException as e:
                self.logger.error(f"Slash command sync failed for {where}: {e.status} {e.text}", exc_info=True)
            else:
                self.logger.info(f"Synced {len(synced)} slash command(s) to {where}")

    async def on_ready(self):
        self.logger.info(f"Logged in as {self.user} in {len(self.guilds)} guild(s)")
        await self.change_presence(activity=discord.Game(name="Tournament Dashboard | /bracket-show"))

    @staticmethod
    def _error_embed(error: Exception) -> discord.Embed:
        if isinstance(error, (commands.CheckFailure, app_commands.CheckFailure)):
            return ErrorEmbeds.permission_denied()
        if isinstance(error, (commands.MissingRequiredArgument, commands.BadArgument)):
            return ErrorEmbeds.invalid_input(str(error))
        return ErrorEmbeds.command_error("the bracket could not process this command")

    async def on_app_command_error(self, interaction: discord.Interaction, error: app_commands.AppCommandError):
        name = interaction.command.name if interaction.command else 'unknown'
        if isinstance(error, app_commands.CheckFailure):
            self.logger.info(f"{interaction.user} is not allowed to run /{name}")
        else:
            self.logger.error(f"/{name} failed: {error}", exc_info=error)

        embed = self._error_embed(error)
        try:
            if interaction.response.is_done():
                await interaction.followup.send(embed=embed, ephemeral=True)
            else:
                await interaction.response.send_message(embed=embed, ephemeral=True)
        except discord.HTTPException as e:
            self.logger.error(f"Could not report /{name} failure: {e}")

    async def on_command_error(self, ctx: commands.Context, error: Exception):
        if isinstance(error, commands.CommandNotFound):
            return

        name = ctx.command.name if ctx.command else 'unknown'
        if isinstance(error, commands.CheckFailure):
            self.logger.info(f"{ctx.author} is not allowed to run {name}")
        elif not isinstance(error, (commands.MissingRequiredArgument, commands.BadArgument)):
            self.logger.error(
                f"{name} failed:\n" + ''.join(traceback.format_exception(type(error), error, error.__traceback__))
            )
        await ctx.send(embed=self._error_embed(error))

    async def close(self):
        self.logger.info("Shutting down Tournament Dashboard bot")
        if self.status_cache:
            await self.status_cache.close()
        if self.db:
            await self.db.close()
        await super().close()


async def main():
    Config.validate()
    bot = DashboardBot()
    try:
        await bot.start(Config.DISCORD_TOKEN)
    except discord.LoginFailure as e:
        logging.error(f"Discord login failed: {e}")
    finally:
        await bot.close()


if __name__ == "__main__":
    asyncio.run(main())
