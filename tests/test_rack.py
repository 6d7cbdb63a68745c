"""Tests for rack scoring and win detection."""
import pytest

from racko.game.rack import fits_at, ideal_value, is_winning, max_score, score
from racko.game.player import Player


ORDERED = [1, 2, 3, 4, 5, 6, 7, 8, 9, 10]
REVERSED = [10, 9, 8, 7, 6, 5, 4, 3, 2, 1]


class TestScore:
    """Test rack scoring."""

    def test_ordered_rack(self):
        """Test a fully ordered rack scores the maximum."""
        assert score(ORDERED) == 45
        assert max_score() == 45

    def test_reversed_rack(self):
        """Test a reversed rack scores nothing."""
        assert score(REVERSED) == 0

    def test_partial_order(self):
        """Test each increasing pair is worth five."""
        assert score([1, 3, 2, 4]) == 10

    def test_equal_neighbours_do_not_score(self):
        """Test pairs must be strictly increasing."""
        assert score([5, 5, 5]) == 0


class TestIsWinning:
    """Test win detection."""

    @pytest.mark.parametrize("rack", [
        ORDERED,
        REVERSED,
        [3, 9, 12, 15, 21, 22, 30, 31, 38, 40],
        [3, 9, 12, 15, 21, 22, 30, 39, 38, 40],
        [1, 2, 3, 4, 5, 6, 7, 8, 10, 9],
    ])
    def test_matches_max_score(self, rack):
        """Test winning is exactly scoring the maximum."""
        assert is_winning(rack) == (score(rack) == max_score(len(rack)))

    def test_ordered_wins(self):
        """Test an ordered rack wins."""
        assert is_winning(ORDERED)

    def test_reversed_does_not_win(self):
        """Test a reversed rack does not win."""
        assert not is_winning(REVERSED)

    def test_player_has_won(self):
        """Test the player property delegates to the rack."""
        assert Player(id="p1", name="Ann", rack=list(ORDERED)).has_won
        assert Player(id="p1", name="Ann", rack=list(ORDERED)).rack_score == 45


class TestIdealValue:
    """Test evenly spaced ideal values."""

    def test_two_players(self):
        """Test ideal values for a 40 card deck."""
        assert ideal_value(0, 40) == 4
        assert ideal_value(9, 40) == 40

    def test_three_players(self):
        """Test ideal values for a 50 card deck."""
        assert ideal_value(4, 50) == 25


class TestFitsAt:
    """Test the neighbour fit check."""

    RACK = [2, 4, 6, 8, 10, 12, 14, 1, 16, 18]

    def test_between_neighbours(self):
        """Test a card strictly between its neighbours fits."""
        assert fits_at(self.RACK, 7, 15)

    def test_not_between_neighbours(self):
        """Test a card outside its neighbours does not fit."""
        assert not fits_at(self.RACK, 7, 17)
        assert not fits_at(self.RACK, 7, 14)

    def test_first_slot(self):
        """Test the first slot only checks its right neighbour."""
        assert fits_at(self.RACK, 0, 3)
        assert not fits_at(self.RACK, 0, 5)

    def test_last_slot(self):
        """Test the last slot only checks its left neighbour."""
        assert fits_at(self.RACK, 9, 40)
        assert not fits_at(self.RACK, 9, 15)
