"""
Tests for the Discord embeds and the organizer command helpers.
"""

import discord

from bracket_bot.cogs.bracket import parse_ids
from bracket_bot.data_models.bracket import Alert
from bracket_bot.operations.commands import MoveToLobby, UpdateWinnerTitle
from bracket_bot.utils.embeds import build_champions_embed, build_dashboard_embed, build_round_embed
from bracket_bot.utils.error_embeds import ErrorEmbeds
from bracket_bot.utils.bracket_exceptions import FrozenRoundError


class TestErrorEmbeds:

    def test_alert_embed(self):
        alert = FrozenRoundError("First Round", "shuffle").alert
        embed = ErrorEmbeds.from_alert(alert)

        assert embed.title == "⚠️ Round Frozen"
        assert "Cannot shuffle \"First Round\"" in embed.description
        assert embed.color == discord.Color.orange()

    def test_plain_alert(self):
        embed = ErrorEmbeds.from_alert(Alert(title="Odd Number of Players", message="Add one more."))
        assert embed.description == "Add one more."

    def test_fixed_embeds(self):
        assert ErrorEmbeds.no_bracket().title == "No Bracket Open"
        assert ErrorEmbeds.service_error("boom").description == "boom"
        assert ErrorEmbeds.permission_denied().color == discord.Color.red()


class TestBracketEmbeds:

    def test_dashboard(self, engine):
        state = engine.execute(MoveToLobby(["p8"])).state

        embed = build_dashboard_embed(state, "t-1")

        fields = {f.name: f.value for f in embed.fields}
        assert "First Round" in fields["Rounds"]
        assert "Available (7)" in fields
        assert "Player 8" in fields["Lobby (1)"]
        assert embed.footer.text == "8 registered players"

    def test_round_view(self, populated_engine, play_round):
        play_round(populated_engine, "round_1")
        state = populated_engine.snapshot()

        embed = build_round_embed(state, state.rounds[0])

        fields = {f.name: f.value for f in embed.fields}
        assert fields["Unmatched (0)"] == "*none*"
        assert fields["Matches (4)"].count("✅") == 4
        assert "Winners (4)" in fields
        assert "Losers (4)" in fields

    def test_champions(self, populated_engine, play_round):
        matches = play_round(populated_engine, "round_1")
        champion = matches[0].player1
        state = populated_engine.execute(UpdateWinnerTitle(champion.id, "Champion")).state

        embed = build_champions_embed(state.ledger.display)

        assert f"{champion.name} · *Champion*" in embed.description
        assert embed.description.startswith("**#1**")

    def test_no_champions(self):
        assert "No champions yet" in build_champions_embed([]).description


class TestParseIds:

    def test_separators_and_repeats(self):
        assert parse_ids("p1, p2  p3,p1") == ["p1", "p2", "p3"]

    def test_empty(self):
        assert parse_ids("") == []
        assert parse_ids(None) == []
