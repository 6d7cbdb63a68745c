"""Rack scoring and win detection."""
from racko.game.deck import RACK_SIZE

PAIR_POINTS = 5


def score(rack: list[int]) -> int:
    """Score a rack: 5 points per strictly increasing adjacent pair."""
    return sum(
        PAIR_POINTS
        for left, right in zip(rack, rack[1:])
        if left < right
    )


def max_score(rack_len: int = RACK_SIZE) -> int:
    """Score of a fully ordered rack of the given length."""
    return PAIR_POINTS * max(rack_len - 1, 0)


def is_winning(rack: list[int]) -> bool:
    """Check whether every adjacent pair is strictly increasing."""
    return all(left < right for left, right in zip(rack, rack[1:]))


def ideal_value(position: int, deck_size: int, rack_len: int = RACK_SIZE) -> float:
    """Value an evenly spaced winning rack would hold at ``position``.
    
    Only used as an AI tie-break, not a rule.
    """
    return (position + 1) * (deck_size / rack_len)


def fits_at(rack: list[int], position: int, card: int) -> bool:
    """Check whether ``card`` sits strictly between its would-be neighbours.
    
    The first slot only needs to be below its right neighbour and the last
    slot above its left neighbour.
    
    Args:
        rack: Current rack.
        position: Slot the card would replace.
        card: Candidate card.
        
    Returns:
        True if the card is a legal fit.
    """
    last = len(rack) - 1
    if position == 0:
        return last > 0 and card < rack[1]
    if position == last:
        return card > rack[position - 1]
    return rack[position - 1] < card < rack[position + 1]
