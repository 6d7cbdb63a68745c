"""Tests for the game snapshot and lobby helpers."""
import random

import pytest

from racko.game.errors import RoomFull
from racko.game.snapshot import (
    GameSnapshot,
    create_game,
    generate_player_id,
    generate_room_code,
    seat_player,
    status_message,
)
from tests.conftest import assert_partitioned, make_game


class TestCreateGame:
    """Test creating a room."""

    @pytest.mark.parametrize("players", [2, 3, 4])
    def test_human_game(self, players):
        """Test the creator is seated and other racks wait for joiners."""
        snapshot = create_game("Ann", players, player_id="p0", rng=random.Random(2))

        assert [p.id for p in snapshot.players] == ["p0"]
        assert len(snapshot.pending_racks) == players - 1
        assert len(snapshot.discard_pile) == 1
        assert snapshot.current_turn == 0
        assert snapshot.winner is None
        assert not snapshot.is_playable
        assert_partitioned(snapshot)

    def test_ai_game(self):
        """Test computer players fill every other seat."""
        snapshot = create_game("Ann", 3, use_ai=True)

        assert [p.id for p in snapshot.players[1:]] == ["ai_1", "ai_2"]
        assert all(p.is_ai for p in snapshot.players[1:])
        assert not snapshot.players[0].is_ai
        assert snapshot.pending_racks == []
        assert snapshot.is_playable
        assert_partitioned(snapshot)

    def test_room_code(self):
        """Test generated room codes are six upper-case characters."""
        code = generate_room_code()

        assert len(code) == 6
        assert code == code.upper()
        assert create_game("Ann", 2, room_code="ABC123").room_code == "ABC123"

    def test_player_id(self):
        """Test generated player IDs are unique."""
        assert generate_player_id() != generate_player_id()

    def test_bad_player_count(self):
        """Test unsupported seat counts are rejected."""
        with pytest.raises(ValueError):
            create_game("Ann", 5)


class TestSeatPlayer:
    """Test late joiners."""

    def test_join_takes_first_pending_rack(self):
        """Test a joiner gets the next pending rack."""
        snapshot = create_game("Ann", 3, player_id="p0")
        expected = list(snapshot.pending_racks[0])

        player = seat_player(snapshot, "p1", "Bob")

        assert player.rack == expected
        assert snapshot.players[1] is player
        assert len(snapshot.pending_racks) == 1
        assert_partitioned(snapshot)

    def test_room_full(self):
        """Test joining a full room fails."""
        snapshot = make_game(2)

        with pytest.raises(RoomFull):
            seat_player(snapshot, "p9", "Zed")

        assert len(snapshot.players) == 2

    def test_ai_room_is_full(self):
        """Test an AI room has no open seats."""
        snapshot = create_game("Ann", 2, use_ai=True)

        with pytest.raises(RoomFull):
            seat_player(snapshot, "p9", "Zed")


class TestSnapshotValue:
    """Test cloning and serialization."""

    def test_clone_shares_nothing(self):
        """Test mutating a clone leaves the original alone."""
        snapshot = make_game(2)
        clone = snapshot.clone()

        clone.players[0].rack[0] = 999
        clone.draw_pile.pop()
        clone.discard_pile.append(998)

        assert clone != snapshot
        assert 999 not in snapshot.players[0].rack
        assert 998 not in snapshot.discard_pile
        assert_partitioned(snapshot)

    def test_dict_round_trip(self):
        """Test a snapshot survives serialization."""
        snapshot = make_game(3)
        snapshot.winner = "p1"
        snapshot.move_number = 7

        assert GameSnapshot.from_dict(snapshot.to_dict()) == snapshot

    def test_view_hides_opponent_racks(self):
        """Test other players' racks and the draw pile order are hidden."""
        view = make_game(2).to_view("p0")

        assert "rack" in view["players"][0]
        assert "rack" not in view["players"][1]
        assert isinstance(view["draw_pile"], int)
        assert "pending_racks" not in view

    def test_practice_mode_reveals_racks(self):
        """Test practice mode shows every rack."""
        snapshot = make_game(2)
        snapshot.practice_mode = True

        view = snapshot.to_view("p0")

        assert all("rack" in p for p in view["players"])


class TestStatusMessage:
    """Test participant status lines."""

    def test_waiting(self):
        """Test open seats are counted."""
        snapshot = create_game("Ann", 4, player_id="p0")

        assert status_message(snapshot, "p0") == "Waiting for 3 more..."

    def test_turns(self):
        """Test the mover and the others see different lines."""
        snapshot = make_game(2)

        assert status_message(snapshot, "p0") == "Your turn!"
        assert status_message(snapshot, "p1") == "Player 0's turn..."

    def test_winner(self):
        """Test the winner and the others see different lines."""
        snapshot = make_game(2)
        snapshot.winner = "p1"

        assert status_message(snapshot, "p1") == "You win!"
        assert status_message(snapshot, "p0") == "Player 1 wins!"
