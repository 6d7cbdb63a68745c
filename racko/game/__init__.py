"""Game engine module."""
from .deck import RACK_SIZE, deck_size, build_deck, shuffle_cards, deal_racks
from .rack import score, is_winning, ideal_value, fits_at
from .player import Player
from .snapshot import GameSnapshot, create_game, seat_player, status_message
from .engine import MoveEngine, PendingMove, TurnPhase, recycle_draw_pile
from .ai import AIMove, take_ai_turn
from .errors import RackoError, IllegalMove, PileExhausted, RoomFull, ConnectivityFailure

__all__ = [
    "RACK_SIZE",
    "deck_size",
    "build_deck",
    "shuffle_cards",
    "deal_racks",
    "score",
    "is_winning",
    "ideal_value",
    "fits_at",
    "Player",
    "GameSnapshot",
    "create_game",
    "seat_player",
    "status_message",
    "MoveEngine",
    "PendingMove",
    "TurnPhase",
    "recycle_draw_pile",
    "AIMove",
    "take_ai_turn",
    "RackoError",
    "IllegalMove",
    "PileExhausted",
    "RoomFull",
    "ConnectivityFailure",
]
