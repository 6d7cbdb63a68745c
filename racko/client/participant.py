"""Participant runtime: one player's side of a shared game.

Wraps a :class:`MoveEngine` with the synchronization boundary: every
committed snapshot is published through the transport, received snapshots
replace local state wholesale, the room is re-fetched on a fixed interval,
and computer seats are played by a delayed, cancellable task.

Moves are not serialized across participants. Two participants that both
believe it is their turn can each publish a snapshot; the relay keeps the
last one.
"""
import asyncio
import random
import time
from typing import Any, Callable, Optional, Union

from racko.config import config
from racko.game.ai import take_ai_turn
from racko.game.engine import MoveEngine
from racko.game.errors import ConnectivityFailure, IllegalMove, PileExhausted
from racko.game.snapshot import (
    GameSnapshot,
    create_game,
    generate_player_id,
    status_message,
)
from racko.protocol.messages import ErrorMessage, GameCreatedMessage, GameUpdateMessage
from racko.utils.logger import get_logger

logger = get_logger(__name__)

CONNECTION_ERROR = "Connection error - check server URL"

AITurnKey = tuple[str, int, int, int]


class Participant:
    """A player's local session in one room."""

    def __init__(
        self,
        transport: Any,
        ai_delay: Optional[float] = None,
        poll_interval: Optional[float] = None,
        undo_window: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
        rng: Optional[random.Random] = None,
    ):
        """Initialize participant.

        Args:
            transport: Object with async ``create_game``, ``join_game``,
                ``request_snapshot`` and ``publish`` methods.
            ai_delay: Seconds before a computer seat moves.
            poll_interval: Seconds between snapshot re-fetches.
            undo_window: Seconds an undo stays available.
            clock: Monotonic time source for the undo window.
            rng: Random source for shuffles.
        """
        self.transport = transport
        self.ai_delay = config.ai_delay_seconds if ai_delay is None else ai_delay
        self.poll_interval = config.poll_interval_seconds if poll_interval is None else poll_interval
        self.undo_window = config.undo_window_seconds if undo_window is None else undo_window
        self.clock = clock
        self.rng = rng

        self.engine: Optional[MoveEngine] = None
        self.room_code: Optional[str] = None
        self.player_id: Optional[str] = None
        self.message = ""

        self._poll_task: Optional[asyncio.Task] = None
        self._ai_task: Optional[asyncio.Task] = None
        self._ai_key: Optional[AITurnKey] = None
        self._background: set[asyncio.Task] = set()

    # State

    @property
    def snapshot(self) -> Optional[GameSnapshot]:
        """Current snapshot, None before entering a room."""
        return self.engine.snapshot if self.engine else None

    @property
    def is_my_turn(self) -> bool:
        """Check if the local player is to move."""
        return self.engine is not None and self.engine.is_my_turn

    @property
    def my_rack(self) -> list[int]:
        """Local player's rack."""
        snapshot = self.snapshot
        me = snapshot.get_player(self.player_id) if snapshot else None
        return list(me.rack) if me else []

    # Lobby

    async def create_game(
        self,
        name: str,
        player_count: int = 2,
        use_ai: bool = False,
        practice_mode: bool = False,
    ) -> GameSnapshot:
        """Create a room, take seat 0 and register it with the relay.

        Args:
            name: Display name.
            player_count: Seats (2-4).
            use_ai: Fill other seats with computer players.
            practice_mode: Reveal opponent racks.

        Returns:
            The initial snapshot.
        """
        snapshot = create_game(name, player_count, use_ai, practice_mode, rng=self.rng)
        self.room_code = snapshot.room_code
        self.player_id = snapshot.players[0].id
        self._attach(snapshot)
        self._refresh_message()

        try:
            await self.transport.create_game(snapshot.room_code, snapshot.to_dict())
        except ConnectivityFailure as e:
            self._connection_failed(e)

        self.start_polling()
        return snapshot

    async def join_game(self, room_code: str, name: str) -> None:
        """Ask the relay for a seat; state arrives with the next update.

        Args:
            room_code: Room to join.
            name: Display name.
        """
        self.room_code = room_code.strip().upper()
        self.player_id = generate_player_id()
        self.message = "Joining..."

        try:
            await self.transport.join_game(self.room_code, self.player_id, name)
        except ConnectivityFailure as e:
            self._connection_failed(e)
            return

        self.start_polling()

    def leave(self) -> None:
        """Forget the room without touching the relay."""
        self.stop_polling()
        self._cancel_ai_turn()
        self.engine = None
        self.room_code = None
        self.player_id = None

    # Moves (illegal ones are ignored)

    def draw(self, from_discard: bool = False) -> Optional[int]:
        """Draw from the draw pile or take the discard."""
        card = self._attempt(lambda: self.engine.draw(from_discard))
        if card is not None:
            self.message = "Must use card" if from_discard else "Place or discard"
        return card

    def place(self, position: int) -> Optional[int]:
        """Place the held card at a rack position."""
        return self._attempt(lambda: self.engine.place(position))

    def discard(self) -> Optional[int]:
        """Discard the held card."""
        return self._attempt(self.engine.discard if self.engine else None)

    def undo(self) -> Optional[GameSnapshot]:
        """Undo the last place/discard inside the undo window."""
        return self._attempt(self.engine.undo if self.engine else None)

    def new_round(self) -> Optional[GameSnapshot]:
        """Start a new round with the same players."""
        return self._attempt(self.engine.new_round if self.engine else None)

    def _attempt(self, action: Optional[Callable[[], Any]]) -> Any:
        """Run an engine action at the boundary.

        Illegal moves are no-ops; an exhausted pile becomes the status
        message. Either way the snapshot is left as it was.
        """
        if self.engine is None or action is None:
            return None

        try:
            result = action()
        except IllegalMove as e:
            logger.debug(f"Ignored illegal move by {self.player_id}: {e}")
            return None
        except PileExhausted as e:
            logger.warning(f"{self.player_id} cannot draw in room {self.room_code}: {e}")
            self.message = str(e)
            return None

        self._refresh_message()
        self._schedule_ai_turn()
        return result

    # Synchronization

    def handle_server_message(self, message: Any) -> None:
        """Dispatch a message received from the relay.

        Args:
            message: Parsed relay message.
        """
        if isinstance(message, ErrorMessage):
            self.message = message.message
            logger.warning(f"Relay error ({message.code}): {message.message}")
            if message.code in ("ROOM_FULL", "ROOM_NOT_FOUND") and self.engine is None:
                self.leave()
            return

        if isinstance(message, (GameCreatedMessage, GameUpdateMessage)):
            if self.room_code and message.room_code.upper() != self.room_code:
                logger.debug(f"Ignoring update for room {message.room_code}")
                return
            self.on_snapshot_received(message.game_data)

    def on_snapshot_received(self, snapshot: Union[GameSnapshot, dict]) -> None:
        """Replace local state with a received snapshot.

        Args:
            snapshot: Snapshot or its serialized form.
        """
        if isinstance(snapshot, dict):
            snapshot = GameSnapshot.from_dict(snapshot)

        if self.engine is None:
            if self.player_id is None or snapshot.get_player(self.player_id) is None:
                logger.debug(f"Not seated in room {snapshot.room_code}, ignoring snapshot")
                return
            self._attach(snapshot)
        else:
            self.engine.receive(snapshot)

        self._refresh_message()
        self._schedule_ai_turn()

    def start_polling(self) -> None:
        """Re-fetch the room's snapshot every ``poll_interval`` seconds."""
        self.stop_polling()
        self._poll_task = asyncio.create_task(self._poll_loop())

    def stop_polling(self) -> None:
        """Stop re-fetching."""
        if self._poll_task:
            self._poll_task.cancel()
            self._poll_task = None

    async def _poll_loop(self) -> None:
        while self.room_code:
            await asyncio.sleep(self.poll_interval)
            if not self.room_code:
                break
            try:
                await self.transport.request_snapshot(self.room_code)
            except ConnectivityFailure as e:
                self._connection_failed(e)

    def _attach(self, snapshot: GameSnapshot) -> None:
        """Create the engine for a snapshot we are seated in."""
        self.engine = MoveEngine(
            snapshot,
            self.player_id,
            publish=self._publish,
            undo_window=self.undo_window,
            clock=self.clock,
            rng=self.rng,
        )

    def _publish(self, snapshot: GameSnapshot) -> None:
        """Engine callback: send the snapshot without waiting for it."""
        self._spawn(self._send_update(snapshot.room_code, snapshot.to_dict()))

    async def _send_update(self, room_code: str, game_data: dict) -> None:
        try:
            await self.transport.publish(room_code, game_data)
        except ConnectivityFailure as e:
            self._connection_failed(e)

    def _spawn(self, coro) -> asyncio.Task:
        """Run a coroutine in the background, keeping a reference to it."""
        task = asyncio.create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    def _connection_failed(self, error: Exception) -> None:
        logger.warning(f"Connectivity failure in room {self.room_code}: {error}")
        self.message = CONNECTION_ERROR

    def _refresh_message(self) -> None:
        if self.snapshot is not None:
            self.message = status_message(self.snapshot, self.player_id)

    # Computer seats

    @staticmethod
    def ai_turn_key(snapshot: Optional[GameSnapshot]) -> Optional[AITurnKey]:
        """Identity of a pending computer turn, None if a human is to move."""
        if snapshot is None or snapshot.winner or not snapshot.is_playable:
            return None
        current = snapshot.current_player
        if current is None or not current.is_ai:
            return None
        return (snapshot.room_code, snapshot.round_number, snapshot.move_number, snapshot.current_turn)

    def _schedule_ai_turn(self) -> None:
        """Schedule the computer seat to move after ``ai_delay``.

        A pending task for an older turn is cancelled. A key that was
        already scheduled (or already attempted) is not scheduled again.
        """
        key = self.ai_turn_key(self.snapshot)
        if key is not None and key == self._ai_key:
            return

        self._cancel_ai_turn()
        if key is None:
            return

        self._ai_key = key
        self._ai_task = asyncio.create_task(self._run_ai_turn(key))

    def _cancel_ai_turn(self) -> None:
        if self._ai_task and not self._ai_task.done():
            self._ai_task.cancel()
        self._ai_task = None
        self._ai_key = None

    async def _run_ai_turn(self, key: AITurnKey) -> None:
        await asyncio.sleep(self.ai_delay)

        if self.engine is None or self.ai_turn_key(self.engine.snapshot) != key:
            logger.debug(f"Skipping stale computer turn {key}")
            return

        self._ai_task = None
        move = take_ai_turn(self.engine, self.rng)
        if move is None:
            self.message = "No cards left to draw!"
            return

        self._refresh_message()
        self._schedule_ai_turn()

    async def close(self) -> None:
        """Stop timers and close the transport."""
        self.leave()
        for task in list(self._background):
            task.cancel()
        close = getattr(self.transport, "close", None)
        if close is not None:
            await close()
