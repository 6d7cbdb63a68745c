"""Numbered deck construction and dealing."""
import random
from typing import Optional

RACK_SIZE = 10

# Player count -> number of cards in the deck
DECK_SIZES = {2: 40, 3: 50, 4: 60}


def deck_size(player_count: int) -> int:
    """Get the deck size for a player count.
    
    Args:
        player_count: Number of seats (2, 3 or 4).
        
    Returns:
        40, 50 or 60.
        
    Raises:
        ValueError: If the player count is not supported.
    """
    try:
        return DECK_SIZES[player_count]
    except KeyError:
        raise ValueError(f"Unsupported player count: {player_count} (expected 2-4)") from None


def shuffle_cards(cards: list[int], rng: Optional[random.Random] = None) -> None:
    """Shuffle cards in place (Fisher-Yates).
    
    Args:
        cards: Cards to shuffle.
        rng: Random source, module-level ``random`` if not given.
    """
    rng = rng or random
    for i in range(len(cards) - 1, 0, -1):
        j = rng.randint(0, i)
        cards[i], cards[j] = cards[j], cards[i]


def build_deck(player_count: int, rng: Optional[random.Random] = None) -> list[int]:
    """Build a shuffled deck of cards ``1..deck_size``.
    
    Args:
        player_count: Number of seats.
        rng: Optional random source.
        
    Returns:
        Shuffled cards.
    """
    cards = list(range(1, deck_size(player_count) + 1))
    shuffle_cards(cards, rng)
    return cards


def deal_racks(
    deck: list[int],
    player_count: int,
) -> tuple[list[list[int]], list[int], list[int]]:
    """Deal one rack per seat, then seed the discard pile.
    
    Racks come off the front of the deck; the discard seed is popped from
    the end only after every rack is dealt. The deck argument is not
    modified.
    
    Args:
        deck: Shuffled deck.
        player_count: Number of racks to deal.
        
    Returns:
        Tuple of (racks, draw pile, discard pile).
        
    Raises:
        ValueError: If the deck is too small.
    """
    needed = player_count * RACK_SIZE + 1
    if len(deck) < needed:
        raise ValueError(f"Cannot deal {player_count} racks from {len(deck)} cards")
    
    remaining = list(deck)
    racks = []
    for _ in range(player_count):
        racks.append(remaining[:RACK_SIZE])
        remaining = remaining[RACK_SIZE:]
    
    discard_pile = [remaining.pop()]
    return racks, remaining, discard_pile
