"""Computer opponent.

A greedy, single-move heuristic: take the visible discard if it fits and
improves the rack, otherwise draw and place the card wherever it scores
best, falling back to the slot furthest from its ideal value. A freely
drawn card is never discarded.
"""
import random
from dataclasses import dataclass
from typing import Optional

from racko.game.engine import MoveEngine, apply_placement, take_card
from racko.game.errors import PileExhausted
from racko.game.rack import fits_at, ideal_value, score
from racko.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class AIMove:
    """A move made by a computer player."""
    player_id: str
    card: int
    position: int
    from_discard: bool
    displaced: int


def _best_replacement(rack: list[int], card: int, require_fit: bool) -> Optional[int]:
    """Position whose replacement strictly beats the current score the most.

    Earlier positions win ties.
    """
    best_position = None
    best_score = score(rack)

    for position in range(len(rack)):
        if require_fit and not fits_at(rack, position, card):
            continue
        trial = list(rack)
        trial[position] = card
        trial_score = score(trial)
        if trial_score > best_score:
            best_score = trial_score
            best_position = position

    return best_position


def choose_discard_position(rack: list[int], top: Optional[int]) -> Optional[int]:
    """Where to put the visible discard, if anywhere.

    Only positions where the card fits between its neighbours are
    considered, and the placement must raise the score.

    Args:
        rack: AI's rack.
        top: Discard pile top, None if the pile is empty.

    Returns:
        Rack position, or None to draw instead.
    """
    if top is None:
        return None
    return _best_replacement(rack, top, require_fit=True)


def choose_drawn_position(rack: list[int], card: int) -> Optional[int]:
    """Best improving position for a card drawn from the draw pile."""
    return _best_replacement(rack, card, require_fit=False)


def fallback_position(rack: list[int], deck_size: int) -> int:
    """Slot whose card deviates most from its ideal value.

    Args:
        rack: AI's rack.
        deck_size: Cards in the deck.

    Returns:
        Rack position (0 if nothing deviates).
    """
    worst_position = 0
    worst_deviation = 0.0

    for position, card in enumerate(rack):
        deviation = abs(card - ideal_value(position, deck_size, len(rack)))
        if deviation > worst_deviation:
            worst_deviation = deviation
            worst_position = position

    return worst_position


def take_ai_turn(engine: MoveEngine, rng: Optional[random.Random] = None) -> Optional[AIMove]:
    """Play one turn for the computer player whose turn it is.

    The move is committed through ``engine`` exactly like a human place, so
    it is published the same way.

    Args:
        engine: Engine holding the current snapshot.
        rng: Random source used if the draw pile needs recycling.

    Returns:
        The move made, or None if the seat to move is not an AI, the round
        is over, or no card could be drawn.
    """
    current = engine.snapshot
    ai = current.current_player
    if ai is None or not ai.is_ai or current.winner or not current.is_playable:
        return None

    snapshot = current.clone()
    ai = snapshot.current_player

    position = choose_discard_position(ai.rack, snapshot.discard_top)
    from_discard = position is not None

    try:
        card = take_card(snapshot, from_discard, rng or engine.rng)
    except PileExhausted:
        logger.warning(f"{ai.name} cannot draw in room {snapshot.room_code}, skipping")
        return None

    if not from_discard:
        position = choose_drawn_position(ai.rack, card)
        if position is None:
            position = fallback_position(ai.rack, snapshot.deck_size)

    displaced = apply_placement(snapshot, ai, position, card)
    logger.info(
        f"{ai.name} took {card} from the {'discard' if from_discard else 'draw'} pile, "
        f"placed at #{position + 1}, discarding {displaced}"
    )

    engine.commit(snapshot)
    return AIMove(
        player_id=ai.id,
        card=card,
        position=position,
        from_discard=from_discard,
        displaced=displaced,
    )
