#!/usr/bin/env python3
"""CLI tool for Racko room administration and offline AI matches."""
import asyncio
import random
import sys
from typing import Optional

from racko.game.ai import take_ai_turn
from racko.game.engine import MoveEngine
from racko.game.snapshot import GameSnapshot, create_game
from racko.state.game_store import game_store
from racko.state.redis_client import redis_client

MAX_MOVES_PER_ROUND = 2000


def run_simulation(
    player_count: int,
    rounds: int,
    seed: Optional[int] = None,
) -> GameSnapshot:
    """Play computer-only rounds locally.

    Args:
        player_count: Seats (2-4).
        rounds: Rounds to play.
        seed: Optional seed for reproducible shuffles.

    Returns:
        Final snapshot (scores accumulated over all rounds).
    """
    rng = random.Random(seed)
    snapshot = create_game("AI 0", player_count, use_ai=True, rng=rng)
    snapshot.players[0].is_ai = True
    engine = MoveEngine(snapshot, snapshot.players[0].id, rng=rng)

    for round_index in range(rounds):
        if round_index:
            engine.new_round()

        moves = 0
        while not engine.snapshot.winner and moves < MAX_MOVES_PER_ROUND:
            if take_ai_turn(engine, rng) is None:
                break
            moves += 1

        winner = engine.snapshot.get_player(engine.snapshot.winner) if engine.snapshot.winner else None
        result = f"{winner.name} wins" if winner else "no winner"
        print(f"Round {engine.snapshot.round_number}: {result} after {moves} moves")

    return engine.snapshot


def simulate(player_count: int, rounds: int, seed: Optional[int] = None) -> None:
    """Run a simulation and print the standings."""
    final = run_simulation(player_count, rounds, seed)

    print(f"\n{'Player':<10} {'Wins':>5}")
    print("-" * 16)
    for player in sorted(final.players, key=lambda p: -p.score):
        print(f"{player.name:<10} {player.score:>5}")


async def list_rooms():
    """List all stored rooms."""
    await redis_client.connect()
    try:
        rooms = await game_store.list_rooms()

        if not rooms:
            print("No rooms found.")
            return

        print(f"\n{'Room':<8} {'Players':<8} {'Mode':<6} {'Round':<6} {'Winner'}")
        print("-" * 50)
        for code in rooms:
            snapshot = await game_store.get_game(code)
            if snapshot is None:
                continue
            mode = "AI" if snapshot.use_ai else "human"
            seats = f"{len(snapshot.players)}/{snapshot.max_players}"
            print(f"{code:<8} {seats:<8} {mode:<6} {snapshot.round_number:<6} {snapshot.winner or '-'}")
        print(f"\nTotal: {len(rooms)} rooms")
    finally:
        await redis_client.disconnect()


async def get_room(room_code: str):
    """Show a room's snapshot."""
    await redis_client.connect()
    try:
        snapshot = await game_store.get_game(room_code)

        if snapshot is None:
            print(f"Error: Room '{room_code}' not found.")
            sys.exit(1)

        print(f"\nRoom: {snapshot.room_code}  (round {snapshot.round_number}, move {snapshot.move_number})")
        print(f"  Draw pile:    {len(snapshot.draw_pile)} cards")
        print(f"  Discard top:  {snapshot.discard_top}")
        for seat, player in enumerate(snapshot.players):
            marker = "*" if seat == snapshot.current_turn else " "
            print(f" {marker}{player.name:<12} score={player.score} rack={player.rack}")
        if snapshot.pending_racks:
            print(f"  Open seats:   {len(snapshot.pending_racks)}")
    finally:
        await redis_client.disconnect()


async def delete_room(room_code: str):
    """Delete a room."""
    await redis_client.connect()
    try:
        if not await game_store.room_exists(room_code):
            print(f"Error: Room '{room_code}' not found.")
            sys.exit(1)

        await game_store.delete_game(room_code)
        print(f"Success: Room '{room_code}' deleted.")
    finally:
        await redis_client.disconnect()


def print_usage():
    """Print usage information."""
    print("""
Racko CLI

Usage:
  python -m racko.cli <command> [args]

Commands:
  simulate [players] [rounds] [seed]   Play AI-only rounds locally
  rooms                                List stored rooms
  room <code>                          Show a room's snapshot
  delete <code>                        Delete a room

Examples:
  python -m racko.cli simulate 3 10
  python -m racko.cli room K7QX2B
""")


def main():
    """Main CLI entry point."""
    if len(sys.argv) < 2:
        print_usage()
        sys.exit(1)

    command = sys.argv[1].lower()

    if command == "simulate":
        try:
            player_count = int(sys.argv[2]) if len(sys.argv) > 2 else 2
            rounds = int(sys.argv[3]) if len(sys.argv) > 3 else 1
            seed = int(sys.argv[4]) if len(sys.argv) > 4 else None
        except ValueError:
            print("Error: players, rounds and seed must be integers.")
            sys.exit(1)
        if player_count not in (2, 3, 4):
            print("Error: players must be 2, 3 or 4.")
            sys.exit(1)
        simulate(player_count, rounds, seed)

    elif command == "rooms":
        asyncio.run(list_rooms())

    elif command in ("room", "delete"):
        if len(sys.argv) < 3:
            print("Error: Room code required.")
            print(f"Usage: python -m racko.cli {command} <code>")
            sys.exit(1)
        action = get_room if command == "room" else delete_room
        asyncio.run(action(sys.argv[2].upper()))

    elif command in ("help", "-h", "--help"):
        print_usage()

    else:
        print(f"Unknown command: {command}")
        print_usage()
        sys.exit(1)


if __name__ == "__main__":
    main()
