"""
Shared embed utilities for the bracket bot.

Builds the dashboard overview, the per-round view and the champions list
from a BracketState snapshot.
"""

import discord
from typing import Iterable, List

from bracket_bot.constants import UIConstants
from bracket_bot.data_models.bracket import MatchStatus, PlayerStatus, Round, WinnerDisplayEntry
from bracket_bot.operations.bracket_engine import BracketState

MATCH_STATUS_ICONS = {
    MatchStatus.PENDING: "⏳",
    MatchStatus.ACTIVE: "🔴",
    MatchStatus.COMPLETED: "✅",
}


def _field_value(lines: List[str], empty: str = "*none*") -> str:
    """Join lines, cutting off past Discord's comfortable field size."""
    if not lines:
        return empty
    shown = lines[:UIConstants.MAX_FIELD_LINES]
    if len(lines) > len(shown):
        shown.append(f"*…and {len(lines) - len(shown)} more*")
    return "\n".join(shown)[:1024]


def _names(state: BracketState, player_ids: Iterable[str]) -> List[str]:
    return [f"`{pid}` {state.pool.get(pid).name}" for pid in player_ids]


def build_dashboard_embed(state: BracketState, tournament_id: str) -> discord.Embed:
    """Overview: every round's counts plus who is still on the dashboard."""
    embed = discord.Embed(
        title=f"{UIConstants.TROPHY_EMOJI} {UIConstants.DASHBOARD_NAME}: {tournament_id}",
        color=UIConstants.DEFAULT_EMBED_COLOR
    )

    round_lines = []
    for round_ in state.registry.rounds:
        frozen = f" {UIConstants.FROZEN_EMOJI}" if round_.is_frozen else ""
        round_lines.append(
            f"**{round_.label}**{frozen} `{round_.id}` · {round_.status.value} · "
            f"{len(round_.players)} players · {len(round_.matches)} matches · "
            f"{len(round_.winners)} W / {len(round_.losers)} L"
        )
    embed.add_field(name="Rounds", value=_field_value(round_lines), inline=False)

    available = [p for p in state.pool.players if p.status == PlayerStatus.AVAILABLE]
    lobby = [p for p in state.pool.players if p.status == PlayerStatus.IN_LOBBY]
    embed.add_field(
        name=f"Available ({len(available)})",
        value=_field_value([f"`{p.id}` {p.name} · {p.skill}" for p in available]),
        inline=True
    )
    embed.add_field(
        name=f"Lobby ({len(lobby)})",
        value=_field_value([f"`{p.id}` {p.name}" for p in lobby]),
        inline=True
    )
    embed.set_footer(text=f"{len(state.pool)} registered players")
    return embed


def build_round_embed(state: BracketState, round_: Round) -> discord.Embed:
    """Roster, matches, winners and losers of one round."""
    color = UIConstants.FROZEN_COLOR if round_.is_frozen else UIConstants.DEFAULT_EMBED_COLOR
    frozen = f" {UIConstants.FROZEN_EMOJI} Frozen" if round_.is_frozen else ""
    embed = discord.Embed(
        title=f"{UIConstants.SWORDS_EMOJI} {round_.label}{frozen}",
        description=f"`{round_.id}` · {round_.name} · {round_.status.value}",
        color=color
    )

    unmatched = set(round_.unmatched_player_ids)
    roster = [
        f"`{pid}` {state.pool.get(pid).name}" + (" *(waiting)*" if state.pool.get(pid).status == PlayerStatus.WAITING else "")
        for pid in round_.players if pid in unmatched
    ]
    embed.add_field(name=f"Unmatched ({len(roster)})", value=_field_value(roster), inline=False)

    match_lines = []
    for match in round_.matches:
        line = f"{MATCH_STATUS_ICONS[match.status]} `{match.id}` {match.player1.name} vs {match.player2.name}"
        if match.winner:
            line += f" → **{match.winner.name}**"
        match_lines.append(line)
    embed.add_field(name=f"Matches ({len(match_lines)})", value=_field_value(match_lines), inline=False)

    embed.add_field(name=f"Winners ({len(round_.winners)})", value=_field_value(_names(state, round_.winners)), inline=True)
    embed.add_field(name=f"Losers ({len(round_.losers)})", value=_field_value(_names(state, round_.losers)), inline=True)
    return embed


def build_champions_embed(entries: List[WinnerDisplayEntry]) -> discord.Embed:
    """Champions list ordered by rank."""
    embed = discord.Embed(
        title=f"{UIConstants.TROPHY_EMOJI} Tournament Champions",
        color=UIConstants.GOLD_RANK_COLOR
    )
    if not entries:
        embed.description = "No champions yet. Record match winners to fill this list."
        return embed

    lines = []
    for entry in sorted(entries, key=lambda e: e.rank):
        title = f" · *{entry.title}*" if entry.title else ""
        shown = "" if entry.selected else " (hidden)"
        lines.append(f"**#{entry.rank}** {entry.player.name}{title} · {entry.round_won}{shown}")
    embed.description = "\n".join(lines)
    return embed
