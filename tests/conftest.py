"""Shared fixtures and builders for game tests."""
import random
from typing import Optional

import pytest

from racko.game.engine import MoveEngine
from racko.game.player import Player
from racko.game.snapshot import GameSnapshot, create_game, seat_player


def make_snapshot(
    racks: list[list[int]],
    draw_pile: list[int],
    discard_pile: list[int],
    current_turn: int = 0,
    ai_seats: tuple = (),
    max_players: Optional[int] = None,
) -> GameSnapshot:
    """Build a snapshot with hand-picked racks and piles."""
    players = [
        Player(id=f"p{seat}", name=f"Player {seat}", rack=list(rack), is_ai=seat in ai_seats)
        for seat, rack in enumerate(racks)
    ]
    return GameSnapshot(
        room_code="ROOM01",
        max_players=max_players or len(racks),
        use_ai=bool(ai_seats),
        players=players,
        draw_pile=list(draw_pile),
        discard_pile=list(discard_pile),
        current_turn=current_turn,
    )


def make_game(player_count: int = 2, seed: int = 1) -> GameSnapshot:
    """Build a dealt, fully seated human game with players p0..pN."""
    snapshot = create_game("Player 0", player_count, player_id="p0", room_code="ROOM01",
                           rng=random.Random(seed))
    for seat in range(1, player_count):
        seat_player(snapshot, f"p{seat}", f"Player {seat}")
    return snapshot


def assert_partitioned(snapshot: GameSnapshot, held: tuple = ()) -> None:
    """Check every card of the deck is in exactly one place."""
    cards = snapshot.all_cards() + list(held)
    assert sorted(cards) == list(range(1, snapshot.deck_size + 1))


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 100.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class LocalRelay:
    """Connects engines in-process: every publish is delivered to the others."""

    def __init__(self, snapshot: GameSnapshot, player_ids: list[str], clock=None):
        self.published: list[GameSnapshot] = []
        self.engines = {
            player_id: MoveEngine(
                snapshot.clone(),
                player_id,
                publish=self._deliver_from(player_id),
                clock=clock or FakeClock(),
                rng=random.Random(5),
            )
            for player_id in player_ids
        }

    def _deliver_from(self, sender: str):
        def deliver(snapshot: GameSnapshot) -> None:
            self.published.append(snapshot)
            for player_id, engine in self.engines.items():
                if player_id != sender:
                    engine.receive(snapshot)
        return deliver

    def __getitem__(self, player_id: str) -> MoveEngine:
        return self.engines[player_id]


@pytest.fixture
def clock():
    """A manually advanced clock."""
    return FakeClock()


@pytest.fixture
def published():
    """List collecting published snapshots."""
    return []


@pytest.fixture
def game():
    """A dealt two player game."""
    return make_game(2)
