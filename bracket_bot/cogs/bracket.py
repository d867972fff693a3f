import asyncio
import re
from typing import Dict, List, Optional

import discord
from discord.ext import commands

from bracket_bot.config import Config
from bracket_bot.operations.bracket_engine import BracketEngine
from bracket_bot.operations.commands import (
    BracketCommand, CancelMatch, CommandResult, MoveLosers, MoveToDashboard, MoveToLobby,
    MoveToRound, MoveWinners, PairRound, RecordWinner, ReshuffleRound, StartMatch,
    ToggleWinnerSelection, UpdateWinnerRank, UpdateWinnerTitle
)
from bracket_bot.utils.bracket_exceptions import TournamentServiceError
from bracket_bot.utils.embeds import build_champions_embed, build_dashboard_embed, build_round_embed
from bracket_bot.utils.error_embeds import ErrorEmbeds
from bracket_bot.utils.logger import setup_logger

logger = setup_logger(__name__)


def parse_ids(raw: str) -> List[str]:
    """Split "p1, p2 p3" into ["p1", "p2", "p3"], keeping order and dropping repeats."""
    return list(dict.fromkeys(part for part in re.split(r'[\s,]+', raw or '') if part))


class BracketCog(commands.Cog):
    """Organizer commands for running the tournament bracket"""

    def __init__(self, bot):
        self.bot = bot
        self.engines: Dict[int, BracketEngine] = {}
        self._locks: Dict[int, asyncio.Lock] = {}

    def cog_check(self, ctx):
        """Only the organizer manages the bracket"""
        return ctx.author.id == Config.OWNER_DISCORD_ID

    @property
    def service(self):
        return self.bot.tournament_service

    def _lock(self, guild_id: int) -> asyncio.Lock:
        return self._locks.setdefault(guild_id, asyncio.Lock())

    @staticmethod
    def _guild_id(ctx) -> int:
        return ctx.guild.id if ctx.guild else 0

    async def _engine(self, ctx) -> Optional[BracketEngine]:
        engine = self.engines.get(self._guild_id(ctx))
        if engine is None:
            await ctx.send(embed=ErrorEmbeds.no_bracket())
        return engine

    async def _reply(self, ctx, result: CommandResult, message: str = None,
                     round_id: Optional[str] = None) -> bool:
        if not result.ok:
            await ctx.send(embed=ErrorEmbeds.from_alert(result.alert))
            return False
        embed = None
        if round_id:
            embed = build_round_embed(result.state, result.state.registry.get(round_id))
        await ctx.send(content=f"✅ {message}" if message else None, embed=embed)
        return True

    async def _execute(self, ctx, command: BracketCommand) -> Optional[CommandResult]:
        """Run one engine command with the guild's bracket lock held."""
        async with self._lock(self._guild_id(ctx)):
            engine = await self._engine(ctx)
            if engine is None:
                return None
            return engine.execute(command)

    # Dashboard

    @commands.hybrid_command(name='bracket-open', description="Open the bracket dashboard for a tournament")
    async def bracket_open(self, ctx, tournament_id: str, start: bool = False, populate: bool = False):
        """Open the bracket, starting the tournament first when asked"""
        async with self._lock(self._guild_id(ctx)):
            try:
                status = await self.service.resolve_status(tournament_id)
                if self.service.should_show_start_prompt(status):
                    if not start:
                        embed = discord.Embed(
                            title="Start Tournament?",
                            description=(
                                f"Tournament `{tournament_id}` is **{status}**.\n\n"
                                f"Run `/bracket-open {tournament_id} start:True` to start it and open the bracket."
                            ),
                            color=discord.Color.orange()
                        )
                        await ctx.send(embed=embed)
                        return
                    await self.service.start_tournament(tournament_id)
                engine = await self.service.open_dashboard(tournament_id, populate_first_round=populate)
            except TournamentServiceError as e:
                logger.warning(f"bracket-open failed for {tournament_id}: {e}")
                await ctx.send(embed=ErrorEmbeds.service_error(e.user_message))
                return

            self.engines[self._guild_id(ctx)] = engine
        await ctx.send(embed=build_dashboard_embed(engine.snapshot(), tournament_id))

    @commands.hybrid_command(name='bracket-show', description="Show the dashboard or one round")
    async def bracket_show(self, ctx, round_id: Optional[str] = None):
        engine = await self._engine(ctx)
        if engine is None:
            return
        state = engine.snapshot()
        if round_id is None:
            await ctx.send(embed=build_dashboard_embed(state, engine.tournament_id))
            return
        round_ = state.registry.find(round_id)
        if round_ is None:
            await ctx.send(embed=ErrorEmbeds.invalid_input(f"No round with id `{round_id}`."))
            return
        await ctx.send(embed=build_round_embed(state, round_))

    # Rounds

    @commands.hybrid_command(name='bracket-round-create', description="Create the next round")
    async def bracket_round_create(self, ctx, *, display_name: str):
        async with self._lock(self._guild_id(ctx)):
            engine = await self._engine(ctx)
            if engine is None:
                return
            result = await self.service.create_round(engine, display_name)
        if result.ok:
            await self._reply(ctx, result, f"Created **{result.value.label}** (`{result.value.id}`)")
        else:
            await self._reply(ctx, result)

    @commands.hybrid_command(name='bracket-round-rename', description="Rename a round")
    async def bracket_round_rename(self, ctx, round_id: str, *, display_name: str):
        async with self._lock(self._guild_id(ctx)):
            engine = await self._engine(ctx)
            if engine is None:
                return
            result = await self.service.rename_round(engine, round_id, display_name)
        await self._reply(ctx, result, f"Round `{round_id}` is now **{result.value.label}**" if result.ok else None)

    @commands.hybrid_command(name='bracket-round-delete', description="Delete the last round if it is empty")
    async def bracket_round_delete(self, ctx):
        async with self._lock(self._guild_id(ctx)):
            engine = await self._engine(ctx)
            if engine is None:
                return
            result = await self.service.delete_last_round(engine)
        await self._reply(ctx, result, f"Deleted **{result.value.label}**" if result.ok else None)

    @commands.hybrid_command(name='bracket-freeze', description="Freeze a fully played round")
    async def bracket_freeze(self, ctx, round_id: str):
        async with self._lock(self._guild_id(ctx)):
            engine = await self._engine(ctx)
            if engine is None:
                return
            result = await self.service.freeze_round(engine, round_id)
        await self._reply(ctx, result, "Round frozen", round_id=round_id)

    # Movement

    @commands.hybrid_command(name='bracket-move', description="Move players into a round")
    async def bracket_move(self, ctx, target_round_id: str, players: str, source_round_id: Optional[str] = None):
        """Move players from the dashboard, or from source_round_id's roster"""
        result = await self._execute(ctx, MoveToRound(parse_ids(players), target_round_id, source_round_id))
        if result:
            await self._reply(ctx, result, "Players moved", round_id=target_round_id)

    @commands.hybrid_command(name='bracket-move-dashboard', description="Send round players back to the dashboard")
    async def bracket_move_dashboard(self, ctx, source_round_id: str, players: str):
        result = await self._execute(ctx, MoveToDashboard(parse_ids(players), source_round_id))
        if result:
            released = len(result.value) if result.ok else 0
            await self._reply(ctx, result, f"{released} player(s) back on the dashboard", round_id=source_round_id)

    @commands.hybrid_command(name='bracket-lobby', description="Park dashboard players in the lobby")
    async def bracket_lobby(self, ctx, players: str):
        result = await self._execute(ctx, MoveToLobby(parse_ids(players)))
        if result:
            await self._reply(ctx, result, "Moved to the lobby")

    @commands.hybrid_command(name='bracket-advance', description="Move winners between rounds")
    async def bracket_advance(self, ctx, source_round_id: str, target_round_id: str, winners: str):
        result = await self._execute(ctx, MoveWinners(source_round_id, target_round_id, parse_ids(winners)))
        if result:
            await self._reply(ctx, result, "Winners moved", round_id=target_round_id)

    @commands.hybrid_command(name='bracket-losers', description="Move losers to another round or the dashboard")
    async def bracket_losers(self, ctx, source_round_id: str, losers: str, target_round_id: Optional[str] = None):
        result = await self._execute(ctx, MoveLosers(source_round_id, parse_ids(losers), target_round_id))
        if result:
            destination = f"`{target_round_id}`" if target_round_id else "the dashboard"
            await self._reply(ctx, result, f"Losers moved to {destination}", round_id=source_round_id)

    # Matches

    @commands.hybrid_command(name='bracket-pair', description="Pair the unmatched players of a round")
    async def bracket_pair(self, ctx, round_id: str):
        result = await self._execute(ctx, PairRound(round_id))
        if result:
            created = len(result.value) if result.ok else 0
            await self._reply(ctx, result, f"Created {created} match(es)", round_id=round_id)

    @commands.hybrid_command(name='bracket-reshuffle', description="Dissolve pending matches and pair again")
    async def bracket_reshuffle(self, ctx, round_id: str):
        result = await self._execute(ctx, ReshuffleRound(round_id))
        if result:
            created = len(result.value) if result.ok else 0
            await self._reply(ctx, result, f"Reshuffled into {created} match(es)", round_id=round_id)

    @commands.hybrid_command(name='bracket-match-start', description="Start a pending match")
    async def bracket_match_start(self, ctx, match_id: str):
        result = await self._execute(ctx, StartMatch(match_id))
        if result:
            await self._reply(ctx, result, f"Match `{match_id}` started")

    @commands.hybrid_command(name='bracket-match-cancel', description="Cancel an unfinished match")
    async def bracket_match_cancel(self, ctx, match_id: str):
        result = await self._execute(ctx, CancelMatch(match_id))
        if result:
            await self._reply(ctx, result, f"Match `{match_id}` cancelled; both players are waiting")

    @commands.hybrid_command(name='bracket-winner', description="Record or change the winner of a match")
    async def bracket_winner(self, ctx, match_id: str, player_id: str):
        result = await self._execute(ctx, RecordWinner(match_id, player_id))
        if result:
            winner = result.value.winner.name if result.ok else None
            await self._reply(ctx, result, f"**{winner}** wins `{match_id}`" if winner else None)

    # Champions

    @commands.hybrid_command(name='bracket-champions', description="Show the champions list")
    async def bracket_champions(self, ctx):
        engine = await self._engine(ctx)
        if engine is None:
            return
        await ctx.send(embed=build_champions_embed(engine.snapshot().ledger.display))

    @commands.hybrid_command(name='bracket-champion-title', description="Set a champion's title")
    async def bracket_champion_title(self, ctx, player_id: str, *, title: str):
        result = await self._execute(ctx, UpdateWinnerTitle(player_id, title))
        if result:
            await self._reply(ctx, result, "Title saved")

    @commands.hybrid_command(name='bracket-champion-rank', description="Set a champion's rank")
    async def bracket_champion_rank(self, ctx, player_id: str, rank: int):
        result = await self._execute(ctx, UpdateWinnerRank(player_id, rank))
        if result:
            await self._reply(ctx, result, f"Rank set to #{rank}")

    @commands.hybrid_command(name='bracket-champion-toggle', description="Show or hide a champion")
    async def bracket_champion_toggle(self, ctx, player_id: str):
        result = await self._execute(ctx, ToggleWinnerSelection(player_id))
        if result:
            await self._reply(ctx, result, "Champion shown" if result.value else "Champion hidden")


async def setup(bot):
    await bot.add_cog(BracketCog(bot))
