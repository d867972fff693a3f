"""
Tests for the bracket engine: atomic commands, invariants and full bracket flows.
"""

import pytest

from bracket_bot.data_models.bracket import PlayerStatus
from bracket_bot.operations.bracket_engine import BracketEngine
from bracket_bot.operations.commands import (
    BracketCommand, CreateRound, FreezeRound, MoveLosers, MoveToDashboard, MoveToLobby, MoveToRound,
    MoveWinners, PairRound, RecordWinner, RenameRound, SetSelected, ToggleSelected,
    ToggleWinnerSelection, UpdateWinnerRank, UpdateWinnerTitle
)
from bracket_bot.utils.bracket_exceptions import (
    BracketInvariantError, FrozenRoundError, IncompleteRoundError, InvalidMoveError, MatchStateError,
    OddPlayerCountError, OddResultError
)


def summary(state):
    """Comparable view of everything a command could change."""
    rounds = tuple(
        (r.id, r.display_name, tuple(r.players), tuple(r.winners), tuple(r.losers),
         tuple((m.id, m.status) for m in r.matches), r.is_frozen)
        for r in state.rounds
    )
    players = tuple((p.id, p.status, p.current_round_id) for p in state.pool.players)
    return rounds, players, len(state.ledger.history)


def accounted_for(state):
    placed = [pid for r in state.rounds for pid in r.players + r.winners + r.losers]
    dashboard = [p.id for p in state.pool.players if p.status.on_dashboard]
    return len(placed) + len(dashboard)


class DropFirstRosterPlayer(BracketCommand):
    """Buggy command that loses a player from the bracket."""

    def apply(self, state, rng):
        round_ = state.registry.get("round_1")
        round_.players = round_.players[1:]


class TestStart:

    def test_players_wait_on_dashboard(self, engine):
        state = engine.snapshot()
        assert engine.tournament_id == "t-1"
        assert [r.label for r in state.rounds] == ["First Round"]
        assert state.rounds[0].is_empty
        assert all(p.status == PlayerStatus.AVAILABLE for p in state.pool.players)

    def test_populate_first_round(self, populated_engine):
        state = populated_engine.snapshot()
        assert state.rounds[0].players == [f"p{i}" for i in range(1, 9)]
        assert all(p.status == PlayerStatus.IN_ROUND for p in state.pool.players)

    def test_duplicate_registrations_collapse(self, make_players):
        players = make_players(4) + make_players(2)
        assert BracketEngine.start(players).player_count == 4


class TestBracketFlow:

    def test_freeze_blocks_winner_change(self, populated_engine, play_round):
        matches = play_round(populated_engine, "round_1")
        assert populated_engine.execute(FreezeRound("round_1")).ok

        result = populated_engine.execute(RecordWinner(matches[0].id, matches[0].player2.id))

        assert not result.ok
        assert isinstance(result.error, FrozenRoundError)
        assert result.alert.title == "Round Frozen"
        first = populated_engine.snapshot().rounds[0]
        assert len(first.winners) == 4
        assert len(first.losers) == 4

    def test_parity_when_topping_up_a_round(self, engine):
        assert engine.execute(MoveToRound(["p1", "p2"], "round_1")).ok
        assert engine.execute(MoveToDashboard(["p2"], "round_1")).ok
        assert engine.snapshot().rounds[0].players == ["p1"]

        rejected = engine.execute(MoveToRound(["p3", "p4"], "round_1"))
        assert isinstance(rejected.error, OddResultError)
        assert engine.snapshot().rounds[0].players == ["p1"]

        accepted = engine.execute(MoveToRound(["p3", "p4", "p5"], "round_1"))
        assert accepted.ok
        assert len(accepted.value.players) == 4

    def test_two_round_bracket_keeps_every_player(self, populated_engine, play_round):
        results = []
        play_round(populated_engine, "round_1")
        state = populated_engine.snapshot()
        winners, losers = list(state.rounds[0].winners), list(state.rounds[0].losers)

        results.append(populated_engine.execute(CreateRound("Final Four")))
        results.append(populated_engine.execute(MoveWinners("round_1", "round_2", winners)))
        results.append(populated_engine.execute(MoveLosers("round_1", losers)))
        results.append(populated_engine.execute(FreezeRound("round_1")))
        results.append(populated_engine.execute(PairRound("round_2")))

        for result in results:
            assert result.ok, result.error
            assert accounted_for(result.state) == 8
            BracketEngine.check_invariants(result.state)

        final = results[-1].state
        assert final.rounds[1].players == winners
        assert len(final.rounds[1].matches) == 2
        assert {p.id for p in final.pool.players if p.status == PlayerStatus.AVAILABLE} == set(losers)
        for pid in winners:
            assert final.pool.get(pid).previous_winning_round_id == "round_1"

    def test_winner_change_after_advancing(self, populated_engine, play_round):
        matches = play_round(populated_engine, "round_1")
        populated_engine.execute(CreateRound("Second Round"))
        advanced = populated_engine.execute(MoveWinners("round_1", "round_2", [matches[0].player1.id]))
        assert advanced.ok

        result = populated_engine.execute(RecordWinner(matches[0].id, matches[0].player2.id))

        assert isinstance(result.error, MatchStateError)
        assert populated_engine.snapshot().rounds[1].players == [matches[0].player1.id]

    def test_losers_cannot_go_back_into_their_round(self, populated_engine, play_round):
        play_round(populated_engine, "round_1")
        losers = list(populated_engine.snapshot().rounds[0].losers)
        before = summary(populated_engine.snapshot())

        result = populated_engine.execute(MoveLosers("round_1", losers[:2], "round_1"))

        assert isinstance(result.error, InvalidMoveError)
        assert summary(populated_engine.snapshot()) == before

    def test_rematch_after_losers_return_through_dashboard(self, populated_engine, play_round):
        play_round(populated_engine, "round_1")
        losers = list(populated_engine.snapshot().rounds[0].losers)[:2]
        assert populated_engine.execute(MoveLosers("round_1", losers)).ok
        assert populated_engine.execute(MoveToRound(losers, "round_1")).ok

        blocked = populated_engine.execute(FreezeRound("round_1"))
        assert isinstance(blocked.error, IncompleteRoundError)

        paired = populated_engine.execute(PairRound("round_1"))
        assert paired.ok, paired.error
        assert [m.id for m in paired.value] == ["match_round_1_5"]
        assert set(paired.value[0].player_ids) == set(losers)

        rematch = paired.value[0]
        assert populated_engine.execute(RecordWinner(rematch.id, rematch.player1.id)).ok
        frozen = populated_engine.execute(FreezeRound("round_1"))
        assert frozen.ok, frozen.error
        assert frozen.value.players == []
        assert accounted_for(frozen.state) == 8


class TestAtomicity:

    def test_rejected_command_changes_nothing(self, populated_engine):
        populated_engine.execute(MoveToDashboard(["p8"], "round_1"))
        before = summary(populated_engine.snapshot())

        result = populated_engine.execute(PairRound("round_1"))

        assert not result.ok
        assert isinstance(result.error, OddPlayerCountError)
        assert result.state is None
        assert summary(populated_engine.snapshot()) == before

    def test_result_state_is_a_copy(self, engine):
        result = engine.execute(MoveToRound(["p1", "p2"], "round_1"))
        result.state.rounds[0].players.append("p3")
        result.value.players.append("p4")

        assert engine.snapshot().rounds[0].players == ["p1", "p2"]

    def test_invariant_violation_is_not_committed(self, populated_engine):
        before = summary(populated_engine.snapshot())

        with pytest.raises(BracketInvariantError):
            populated_engine.execute(DropFirstRosterPlayer())

        assert summary(populated_engine.snapshot()) == before

    def test_round_commands(self, engine):
        assert engine.execute(CreateRound("Semis")).value.id == "round_2"
        assert not engine.execute(CreateRound("semis")).ok
        renamed = engine.execute(RenameRound("round_2", "Semifinal"))
        assert renamed.value.label == "Semifinal"


class TestChampions:

    def test_display_is_capped_and_unique(self, make_players, rng, play_round):
        engine = BracketEngine.start(make_players(16), populate_first_round=True, rng=rng)
        matches = play_round(engine, "round_1")

        changed = engine.execute(RecordWinner(matches[-1].id, matches[-1].player2.id))
        assert changed.ok

        display = [e.player.id for e in changed.state.ledger.display]
        assert len(display) == 5
        assert len(set(display)) == 5
        assert display[0] == matches[-1].player2.id
        assert len(changed.state.ledger.history) == 9

    def test_overlay_commands(self, populated_engine, play_round):
        matches = play_round(populated_engine, "round_1")
        champion = matches[0].player1.id

        titled = populated_engine.execute(UpdateWinnerTitle(champion, "Champion"))
        assert titled.value.title == "Champion"
        assert populated_engine.execute(UpdateWinnerRank(champion, 1)).value.rank == 1
        assert populated_engine.execute(ToggleWinnerSelection(champion)).value is False

        entry = next(e for e in populated_engine.snapshot().ledger.display if e.player.id == champion)
        assert (entry.title, entry.rank, entry.selected) == ("Champion", 1, False)

    def test_unknown_champion(self, populated_engine):
        result = populated_engine.execute(UpdateWinnerTitle("p1", "Champion"))
        assert not result.ok
        assert result.alert.title == "Player Not Found"


class TestDashboardCommands:

    def test_selection_and_lobby(self, engine):
        assert engine.execute(SetSelected(["p1", "p2"])).value == {"p1", "p2"}
        assert engine.execute(ToggleSelected("p2")).value is False

        lobby = engine.execute(MoveToLobby(["p1"]))
        assert lobby.value == ["p1"]
        state = lobby.state
        assert state.pool.get("p1").status == PlayerStatus.IN_LOBBY
        assert state.pool.selected_ids == set()

    def test_lobby_players_can_enter_a_round(self, engine):
        engine.execute(MoveToLobby(["p1", "p2"]))
        result = engine.execute(MoveToRound(["p1", "p2"], "round_1"))
        assert result.ok
        assert result.state.pool.get("p1").status == PlayerStatus.IN_ROUND
