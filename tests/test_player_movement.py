"""
Tests for the movement legality gate between the dashboard and rounds.
"""

import random

import pytest

from bracket_bot.data_models.bracket import PlayerStatus
from bracket_bot.operations.match_pairing import MatchPairingEngine
from bracket_bot.operations.player_movement import PlayerMovementController
from bracket_bot.utils.bracket_exceptions import (
    FrozenRoundError, InvalidBackwardMoveError, InvalidForwardMoveError, InvalidMoveError,
    OddResultError, PlayerInMatchError, PlayerUnavailableError, TargetFrozenError, UnknownPlayerError
)

ROUND_NAMES = ("First Round", "Second Round", "Third Round")


@pytest.fixture
def rounds(bracket):
    pool, registry = bracket(8, ROUND_NAMES)
    return pool, registry, PlayerMovementController(pool, registry)


def make_winner(pool, round_, player_id, won_in):
    """Place a player in a round's winners with a win recorded in won_in."""
    round_.winners = round_.winners + [player_id]
    pool.assign([player_id], PlayerStatus.WINNER, round_.id)
    player = pool.get(player_id)
    player.rounds_won = [won_in]
    player.is_previous_round_winner = True
    player.original_winner_round_id = won_in
    player.previous_winning_round_id = won_in
    player.last_winning_round = won_in
    return player


class TestMoveToRound:

    def test_parity(self, rounds, seat):
        pool, registry, movement = rounds
        first = registry.get("round_1")
        seat(pool, first, ["p1"])

        with pytest.raises(OddResultError) as exc_info:
            movement.move_to_round(["p2", "p3"], "round_1")
        assert exc_info.value.resulting_count == 3
        assert "Tournament Dashboard" in exc_info.value.user_message
        assert first.players == ["p1"]
        assert pool.get("p2").status == PlayerStatus.AVAILABLE

        movement.move_to_round(["p2", "p3", "p4"], "round_1")
        assert first.players == ["p1", "p2", "p3", "p4"]
        assert all(pool.get(pid).status == PlayerStatus.IN_ROUND for pid in first.players)

    def test_frozen_target(self, rounds):
        _, registry, movement = rounds
        registry.get("round_2").is_frozen = True
        with pytest.raises(TargetFrozenError):
            movement.move_to_round(["p1", "p2"], "round_2")

    def test_player_not_on_dashboard(self, rounds, seat):
        pool, registry, movement = rounds
        seat(pool, registry.get("round_1"), ["p1", "p2"])
        with pytest.raises(PlayerUnavailableError) as exc_info:
            movement.move_to_round(["p1", "p3"], "round_2")
        assert exc_info.value.player_names == ["Player 1"]

    def test_player_in_match(self, rounds, seat):
        pool, registry, movement = rounds
        seat(pool, registry.get("round_1"), ["p1", "p2", "p3", "p4"])
        MatchPairingEngine(pool, registry, random.Random(1)).pair("round_1")

        with pytest.raises(PlayerInMatchError):
            movement.move_to_round(["p1", "p2"], "round_2", source_round_id="round_1")
        assert registry.get("round_2").players == []

    def test_between_rosters(self, rounds, seat):
        pool, registry, movement = rounds
        seat(pool, registry.get("round_1"), ["p1", "p2", "p3", "p4"])

        movement.move_to_round(["p3", "p4"], "round_2", source_round_id="round_1")

        assert registry.get("round_1").players == ["p1", "p2"]
        assert registry.get("round_2").players == ["p3", "p4"]
        assert pool.get("p3").current_round_id == "round_2"

    def test_same_round(self, rounds, seat):
        pool, registry, movement = rounds
        seat(pool, registry.get("round_1"), ["p1", "p2"])
        with pytest.raises(InvalidMoveError):
            movement.move_to_round(["p1", "p2"], "round_1", source_round_id="round_1")

    def test_returning_winner_lands_in_winners(self, rounds, seat):
        pool, registry, movement = rounds
        first = registry.get("round_1")
        seat(pool, first, ["p2", "p3"])
        returning = pool.get("p1")
        returning.is_previous_round_winner = True
        returning.previous_winning_round_id = "round_1"

        movement.move_to_round(["p1"], "round_1")

        assert first.winners == ["p1"]
        assert first.players == ["p2", "p3"]
        assert pool.get("p1").status == PlayerStatus.WINNER

    def test_mixed_move_keeps_parity_rule(self, rounds, seat):
        pool, registry, movement = rounds
        seat(pool, registry.get("round_1"), ["p2", "p3"])
        returning = pool.get("p1")
        returning.is_previous_round_winner = True
        returning.previous_winning_round_id = "round_1"

        with pytest.raises(OddResultError):
            movement.move_to_round(["p1", "p4", "p5"], "round_1")

    def test_mixed_move_joins_the_roster(self, rounds, seat):
        pool, registry, movement = rounds
        first = registry.get("round_1")
        seat(pool, first, ["p2"])
        returning = pool.get("p1")
        returning.is_previous_round_winner = True
        returning.previous_winning_round_id = "round_1"

        movement.move_to_round(["p1", "p4", "p5"], "round_1")

        assert first.players == ["p2", "p1", "p4", "p5"]
        assert len(first.players) % 2 == 0
        assert first.winners == []
        assert all(pool.get(pid).status == PlayerStatus.IN_ROUND for pid in first.players)


class TestMoveToDashboard:

    def test_previous_winner_returns_to_original_round(self, rounds, seat):
        pool, registry, movement = rounds
        second = registry.get("round_2")
        seat(pool, second, ["p1", "p2"])
        champion = pool.get("p1")
        champion.is_previous_round_winner = True
        champion.original_winner_round_id = "round_1"

        released = movement.move_to_dashboard(["p1", "p2"], "round_2")

        assert released == ["p2"]
        assert second.players == []
        assert registry.get("round_1").winners == ["p1"]
        assert pool.get("p1").status == PlayerStatus.WINNER
        assert pool.get("p2").status == PlayerStatus.AVAILABLE

    def test_frozen_original_round(self, rounds, seat):
        pool, registry, movement = rounds
        second = registry.get("round_2")
        seat(pool, second, ["p1", "p2"])
        champion = pool.get("p1")
        champion.is_previous_round_winner = True
        champion.original_winner_round_id = "round_1"
        registry.get("round_1").is_frozen = True

        with pytest.raises(FrozenRoundError):
            movement.move_to_dashboard(["p1", "p2"], "round_2")
        assert second.players == ["p1", "p2"]
        assert pool.get("p2").status == PlayerStatus.IN_ROUND

    def test_frozen_source(self, rounds, seat):
        pool, registry, movement = rounds
        seat(pool, registry.get("round_1"), ["p1", "p2"])
        registry.get("round_1").is_frozen = True
        with pytest.raises(FrozenRoundError):
            movement.move_to_dashboard(["p1"], "round_1")

    def test_player_not_in_source(self, rounds, seat):
        pool, registry, movement = rounds
        seat(pool, registry.get("round_1"), ["p1", "p2"])
        with pytest.raises(UnknownPlayerError):
            movement.move_to_dashboard(["p3"], "round_1")


class TestMoveWinners:

    def test_backward_to_last_winning_round(self, rounds):
        pool, registry, movement = rounds
        make_winner(pool, registry.get("round_3"), "p1", won_in="round_2")

        movement.move_winners_between_rounds("round_3", "round_2", ["p1"])

        assert registry.get("round_3").winners == []
        assert registry.get("round_2").winners == ["p1"]
        assert pool.get("p1").current_round_id == "round_2"

    def test_backward_past_last_winning_round(self, rounds):
        pool, registry, movement = rounds
        make_winner(pool, registry.get("round_3"), "p1", won_in="round_2")

        with pytest.raises(InvalidBackwardMoveError) as exc_info:
            movement.move_winners_between_rounds("round_3", "round_1", ["p1"])
        assert exc_info.value.player_names == ["Player 1"]
        assert registry.get("round_3").winners == ["p1"]

    def test_forward_needs_completed_match(self, rounds):
        pool, registry, movement = rounds
        make_winner(pool, registry.get("round_1"), "p1", won_in="round_1")
        with pytest.raises(InvalidForwardMoveError):
            movement.move_winners_between_rounds("round_1", "round_2", ["p1"])

    def test_forward_cannot_skip_empty_round(self, rounds, completed_match):
        pool, registry, movement = rounds
        first = registry.get("round_1")
        first.matches = [completed_match(pool, "m1", "p1", "p2")]
        make_winner(pool, first, "p1", won_in="round_1")

        with pytest.raises(InvalidForwardMoveError) as exc_info:
            movement.move_winners_between_rounds("round_1", "round_3", ["p1"])
        assert "Second Round" in exc_info.value.user_message

    def test_forward_over_started_round(self, rounds, seat, completed_match):
        pool, registry, movement = rounds
        first = registry.get("round_1")
        first.matches = [completed_match(pool, "m1", "p1", "p2")]
        make_winner(pool, first, "p1", won_in="round_1")
        seat(pool, registry.get("round_2"), ["p3", "p4"])

        movement.move_winners_between_rounds("round_1", "round_3", ["p1"])

        assert first.winners == []
        assert registry.get("round_3").players == ["p1"]
        advanced = pool.get("p1")
        assert advanced.status == PlayerStatus.IN_ROUND
        assert advanced.previous_winning_round_id == "round_1"
        assert advanced.original_winner_round_id == "round_1"

    def test_same_round(self, rounds):
        pool, registry, movement = rounds
        make_winner(pool, registry.get("round_1"), "p1", won_in="round_1")
        with pytest.raises(InvalidMoveError):
            movement.move_winners_between_rounds("round_1", "round_1", ["p1"])


class TestMoveLosers:

    @pytest.fixture
    def with_loser(self, rounds):
        pool, registry, movement = rounds
        first = registry.get("round_1")
        first.losers = ["p2"]
        pool.assign(["p2"], PlayerStatus.ELIMINATED, "round_1")
        return pool, registry, movement

    def test_to_dashboard(self, with_loser):
        pool, registry, movement = with_loser
        assert movement.move_losers_to_destination("round_1", ["p2"]) is None
        assert registry.get("round_1").losers == []
        assert pool.get("p2").status == PlayerStatus.AVAILABLE

    def test_to_round_skips_parity(self, with_loser):
        pool, registry, movement = with_loser
        target = movement.move_losers_to_destination("round_1", ["p2"], "round_2")
        assert target.players == ["p2"]
        assert pool.get("p2").status == PlayerStatus.IN_ROUND

    def test_nothing_selected(self, with_loser):
        _, _, movement = with_loser
        with pytest.raises(InvalidMoveError):
            movement.move_losers_to_destination("round_1", [])

    def test_same_round_rejected(self, with_loser):
        pool, registry, movement = with_loser
        with pytest.raises(InvalidMoveError):
            movement.move_losers_to_destination("round_1", ["p2"], "round_1")
        assert registry.get("round_1").losers == ["p2"]
        assert registry.get("round_1").players == []
        assert pool.get("p2").status == PlayerStatus.ELIMINATED
