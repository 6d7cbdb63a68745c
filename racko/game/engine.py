"""Move engine: draw, place, discard, undo and new-round transitions.

Every operation works on a clone of the current snapshot and only commits
(and publishes) the clone once the move has fully succeeded, so a rejected
move never leaves a half-mutated snapshot behind.
"""
import random
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from racko.config import config
from racko.game.deck import shuffle_cards
from racko.game.errors import IllegalMove, PileExhausted
from racko.game.player import Player
from racko.game.snapshot import GameSnapshot
from racko.utils.logger import get_logger

logger = get_logger(__name__)

Publisher = Callable[[GameSnapshot], None]


class TurnPhase(str, Enum):
    """Where the local seat is within its turn."""
    AWAITING_DRAW = "awaiting_draw"
    HOLDING_FREE_CARD = "holding_free_card"      # From the draw pile: place or discard
    HOLDING_FORCED_CARD = "holding_forced_card"  # From the discard pile: place only
    ROUND_OVER = "round_over"


@dataclass(frozen=True)
class PendingMove:
    """Undo buffer: the snapshot from before a place/discard."""
    snapshot: GameSnapshot
    held_card: int
    from_discard: bool
    position: Optional[int]  # None for a discard
    created_at: float

    def is_expired(self, now: float, window: float) -> bool:
        """Check if the undo window has passed."""
        return now - self.created_at >= window


# Mutation primitives (shared with the AI)

def recycle_draw_pile(snapshot: GameSnapshot, rng: Optional[random.Random] = None) -> None:
    """Refill an empty draw pile from the discard pile.

    The discard top stays where it is; everything under it is shuffled into
    the draw pile.

    Args:
        snapshot: Snapshot to modify in place.
        rng: Optional random source.

    Raises:
        PileExhausted: If the discard pile has one card or fewer.
    """
    if snapshot.draw_pile:
        return
    if len(snapshot.discard_pile) <= 1:
        raise PileExhausted("No cards left to draw!")

    top = snapshot.discard_pile.pop()
    snapshot.draw_pile = snapshot.discard_pile
    snapshot.discard_pile = [top]
    shuffle_cards(snapshot.draw_pile, rng)
    logger.info(
        f"Recycled {len(snapshot.draw_pile)} discards into the draw pile "
        f"in room {snapshot.room_code}"
    )


def take_card(
    snapshot: GameSnapshot,
    from_discard: bool,
    rng: Optional[random.Random] = None,
) -> int:
    """Remove the top card of a pile.

    Args:
        snapshot: Snapshot to modify in place.
        from_discard: Take the visible discard instead of the draw pile.
        rng: Random source used if the draw pile needs recycling.

    Returns:
        The card taken.

    Raises:
        IllegalMove: If the discard pile is empty.
        PileExhausted: If the draw pile is empty and cannot be recycled.
    """
    if from_discard:
        if not snapshot.discard_pile:
            raise IllegalMove("Discard pile is empty")
        return snapshot.discard_pile.pop()

    recycle_draw_pile(snapshot, rng)
    return snapshot.draw_pile.pop()


def apply_placement(snapshot: GameSnapshot, player: Player, position: int, card: int) -> int:
    """Place a card into a rack and finish the turn.

    The displaced card goes on the discard pile. A winning rack sets the
    winner and scores once; the turn pointer advances either way.

    Args:
        snapshot: Snapshot to modify in place.
        player: The mover (a player of ``snapshot``).
        position: Rack index.
        card: Incoming card.

    Returns:
        The displaced card.
    """
    displaced = player.replace_card(position, card)
    snapshot.discard_pile.append(displaced)

    if player.has_won:
        snapshot.winner = player.id
        player.score += 1
        logger.info(f"{player.name} wins round {snapshot.round_number} in room {snapshot.room_code}")

    snapshot.advance_turn()
    snapshot.move_number += 1
    return displaced


class MoveEngine:
    """One participant's view of a game and the moves it can make.

    The engine is the explicit session context: it owns the current
    snapshot, the card held between draw and place/discard, and the
    single-level undo buffer.
    """

    def __init__(
        self,
        snapshot: GameSnapshot,
        player_id: str,
        publish: Optional[Publisher] = None,
        undo_window: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
        rng: Optional[random.Random] = None,
    ):
        """Initialize the engine.

        Args:
            snapshot: Starting snapshot.
            player_id: The local player's ID.
            publish: Called with every committed snapshot.
            undo_window: Seconds an undo stays available.
            clock: Monotonic time source.
            rng: Random source for shuffles.
        """
        self.player_id = player_id
        self.undo_window = config.undo_window_seconds if undo_window is None else undo_window
        self.rng = rng
        self._snapshot = snapshot
        self._publish = publish
        self._clock = clock
        self._held_card: Optional[int] = None
        self._from_discard = False
        self._pending: Optional[PendingMove] = None

    def set_publisher(self, publish: Optional[Publisher]) -> None:
        """Set the callback receiving committed snapshots."""
        self._publish = publish

    # State

    @property
    def snapshot(self) -> GameSnapshot:
        """Current snapshot. Treat as read-only."""
        return self._snapshot

    @property
    def held_card(self) -> Optional[int]:
        """Card drawn this turn and not yet placed or discarded."""
        return self._held_card

    @property
    def from_discard(self) -> bool:
        """Whether the held card came from the discard pile."""
        return self._from_discard

    @property
    def is_my_turn(self) -> bool:
        """Check if the local player is the one to move."""
        return self._snapshot.is_turn_of(self.player_id)

    @property
    def phase(self) -> TurnPhase:
        """Local seat's position in the turn state machine."""
        if self._snapshot.winner:
            return TurnPhase.ROUND_OVER
        if self._held_card is None:
            return TurnPhase.AWAITING_DRAW
        if self._from_discard:
            return TurnPhase.HOLDING_FORCED_CARD
        return TurnPhase.HOLDING_FREE_CARD

    @property
    def pending_move(self) -> Optional[PendingMove]:
        """Undo buffer, dropped once expired."""
        if self._pending and self._pending.is_expired(self._clock(), self.undo_window):
            logger.debug("Undo window expired")
            self._pending = None
        return self._pending

    @property
    def can_undo(self) -> bool:
        """Check if the last place/discard can still be taken back."""
        return self.pending_move is not None and not self._snapshot.winner

    # Moves

    def draw(self, from_discard: bool = False) -> int:
        """Draw a card from the draw pile or the discard pile.

        Args:
            from_discard: Take the visible discard (which then must be placed).

        Returns:
            The drawn card.

        Raises:
            IllegalMove: Not our turn, already holding, round over, empty discard.
            PileExhausted: Nothing left to draw.
        """
        self._require_turn()
        if self._held_card is not None:
            raise IllegalMove("Already holding a card")

        snapshot = self._snapshot.clone()
        card = take_card(snapshot, from_discard, self.rng)

        self._held_card = card
        self._from_discard = from_discard
        logger.debug(
            f"{self.player_id} drew {card} from the {'discard' if from_discard else 'draw'} pile"
        )
        self.commit(snapshot, keep_pending=True)
        return card

    def place(self, position: int) -> int:
        """Place the held card into the rack.

        Args:
            position: Rack index to replace.

        Returns:
            The displaced card.

        Raises:
            IllegalMove: Nothing held, not our turn, or bad index.
        """
        card = self._require_held()
        me = self._snapshot.get_player(self.player_id)
        if me is None:
            raise IllegalMove(f"{self.player_id} is not seated")
        if not isinstance(position, int) or isinstance(position, bool):
            raise IllegalMove(f"Invalid rack position: {position!r}")
        if not 0 <= position < len(me.rack):
            raise IllegalMove(f"Invalid rack position: {position}")

        pending = self._capture(position)
        snapshot = self._snapshot.clone()
        displaced = apply_placement(snapshot, snapshot.get_player(self.player_id), position, card)

        logger.info(f"{me.name} placed {card} at #{position + 1}, discarding {displaced}")
        self._finish_move(snapshot, pending)
        return displaced

    def discard(self) -> int:
        """Discard the held card.

        Returns:
            The discarded card.

        Raises:
            IllegalMove: Nothing held, not our turn, or the card is forced.
        """
        card = self._require_held()
        if self._from_discard:
            raise IllegalMove("A card taken from the discard pile must be placed")

        pending = self._capture(None)
        snapshot = self._snapshot.clone()
        snapshot.discard_pile.append(card)
        snapshot.advance_turn()
        snapshot.move_number += 1

        logger.info(f"{self.player_id} discarded {card}")
        self._finish_move(snapshot, pending)
        return card

    def undo(self) -> GameSnapshot:
        """Take back the last place/discard.

        Returns:
            The restored snapshot.

        Raises:
            IllegalMove: Nothing to undo, window expired or round won.
        """
        if not self.can_undo:
            raise IllegalMove("Nothing to undo")

        pending = self._pending
        self._pending = None
        self._held_card = pending.held_card
        self._from_discard = pending.from_discard

        logger.info(f"{self.player_id} undid their last move")
        self.commit(pending.snapshot.clone(), keep_pending=True)
        return self._snapshot

    def new_round(self) -> GameSnapshot:
        """Reshuffle and redeal, keeping players and scores.

        Returns:
            The new snapshot.
        """
        snapshot = self._snapshot.clone()
        snapshot.redeal(self.rng)

        self._clear_hand()
        logger.info(f"Started round {snapshot.round_number} in room {snapshot.room_code}")
        self.commit(snapshot)
        return snapshot

    # Synchronization

    def receive(self, snapshot: GameSnapshot) -> None:
        """Replace local state with a snapshot from another participant.

        Last writer wins: nothing is merged. A held card is dropped once it
        is no longer our turn or a new round was dealt, and the undo buffer
        is dropped when someone else's move superseded ours.

        Args:
            snapshot: Received snapshot.
        """
        superseded = snapshot != self._snapshot
        new_round = snapshot.round_number != self._snapshot.round_number
        self._snapshot = snapshot

        if new_round:
            self._clear_hand()
        elif not snapshot.is_turn_of(self.player_id) or snapshot.winner:
            self._held_card = None
            self._from_discard = False
        if superseded:
            self._pending = None

    def commit(self, snapshot: GameSnapshot, keep_pending: bool = False) -> None:
        """Install a new snapshot and publish it.

        Args:
            snapshot: Snapshot to install (not mutated afterwards).
            keep_pending: Keep the undo buffer; any other commit supersedes it.
        """
        self._snapshot = snapshot
        if not keep_pending:
            self._pending = None
        if self._publish:
            self._publish(snapshot)

    # Helpers

    def _require_turn(self) -> None:
        """Reject moves out of turn or after the round ended."""
        if self._snapshot.winner:
            raise IllegalMove("Round is over")
        if not self.is_my_turn:
            raise IllegalMove("Not your turn")

    def _require_held(self) -> int:
        """Reject place/discard without a held card."""
        if self._held_card is None:
            raise IllegalMove("No card drawn")
        self._require_turn()
        return self._held_card

    def _capture(self, position: Optional[int]) -> PendingMove:
        """Snapshot the pre-move state for undo."""
        return PendingMove(
            snapshot=self._snapshot.clone(),
            held_card=self._held_card,
            from_discard=self._from_discard,
            position=position,
            created_at=self._clock(),
        )

    def _finish_move(self, snapshot: GameSnapshot, pending: PendingMove) -> None:
        """Clear the hand, arm undo and commit."""
        self._clear_hand()
        self._pending = pending
        self.commit(snapshot, keep_pending=True)

    def _clear_hand(self) -> None:
        self._held_card = None
        self._from_discard = False
        self._pending = None
