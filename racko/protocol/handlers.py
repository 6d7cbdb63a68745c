"""Message handlers for the snapshot relay.

The relay does not validate moves. It stores whatever full snapshot a
participant publishes and forwards it to the rest of the room; the last
write wins.
"""
import json
from typing import Optional, Any, TYPE_CHECKING

from racko.game.errors import RoomFull
from racko.game.snapshot import GameSnapshot, seat_player
from racko.protocol.messages import (
    parse_client_message,
    CreateGameMessage,
    JoinGameMessage,
    GetGameMessage,
    UpdateGameMessage,
    PingMessage,
    ErrorMessage,
    GameCreatedMessage,
    GameUpdateMessage,
    PongMessage,
)
from racko.state.game_store import game_store
from racko.utils.logger import get_logger

if TYPE_CHECKING:
    from racko.main import RelayServer

logger = get_logger(__name__)


class MessageHandler:
    """Handles incoming WebSocket messages."""

    def __init__(self, server: "RelayServer"):
        """Initialize handler.

        Args:
            server: The relay server instance.
        """
        self.server = server

    async def handle_message(self, websocket: Any, raw_message: str) -> Optional[dict]:
        """Handle an incoming message.

        Args:
            websocket: The WebSocket connection.
            raw_message: Raw JSON message string.

        Returns:
            Response dict for the sender, or None.
        """
        try:
            data = json.loads(raw_message)
            message = parse_client_message(data)
        except json.JSONDecodeError as e:
            return ErrorMessage(message=f"Invalid JSON: {e}").model_dump()
        except ValueError as e:
            return ErrorMessage(message=str(e)).model_dump()

        if isinstance(message, PingMessage):
            return PongMessage().model_dump()

        if isinstance(message, CreateGameMessage):
            return await self._handle_create_game(message, websocket)

        if isinstance(message, JoinGameMessage):
            return await self._handle_join_game(message, websocket)

        if isinstance(message, GetGameMessage):
            return await self._handle_get_game(message, websocket)

        if isinstance(message, UpdateGameMessage):
            return await self._handle_update_game(message, websocket)

        return ErrorMessage(message="Unhandled message type").model_dump()

    def _load_snapshot(self, room_code: str, game_data: dict) -> GameSnapshot:
        """Validate a published snapshot.

        Raises:
            ValueError: If the payload is malformed or for another room.
        """
        try:
            snapshot = GameSnapshot.from_dict(game_data)
            same_room = snapshot.room_code.upper() == room_code.upper()
        except (KeyError, TypeError, AttributeError) as e:
            raise ValueError(f"Malformed game data: {e}") from e

        if not same_room:
            raise ValueError(f"Game data is for room {snapshot.room_code}, not {room_code}")
        return snapshot

    async def _handle_create_game(self, message: CreateGameMessage, websocket: Any) -> dict:
        """Handle room creation."""
        try:
            snapshot = self._load_snapshot(message.room_code, message.game_data)
        except ValueError as e:
            return ErrorMessage(message=str(e), code="INVALID_GAME").model_dump()

        if await game_store.room_exists(snapshot.room_code):
            return ErrorMessage(
                message=f"Room '{snapshot.room_code}' already exists",
                code="ROOM_EXISTS"
            ).model_dump()

        await game_store.save_game(snapshot)
        self.server.register_connection(snapshot.room_code, websocket)

        logger.info(f"Room {snapshot.room_code} created")
        return GameCreatedMessage(
            room_code=snapshot.room_code,
            game_data=snapshot.to_dict(),
        ).model_dump()

    async def _handle_join_game(self, message: JoinGameMessage, websocket: Any) -> dict:
        """Handle a late joiner taking a pending rack."""
        snapshot = await game_store.get_game(message.room_code)
        if snapshot is None:
            return ErrorMessage(
                message=f"Room '{message.room_code}' does not exist",
                code="ROOM_NOT_FOUND"
            ).model_dump()

        if snapshot.get_player(message.player_id) is None:
            try:
                seat_player(snapshot, message.player_id, message.name)
            except RoomFull:
                return ErrorMessage(message="Game full", code="ROOM_FULL").model_dump()
            await game_store.save_game(snapshot)

        self.server.register_connection(snapshot.room_code, websocket)
        update = GameUpdateMessage(
            room_code=snapshot.room_code,
            game_data=snapshot.to_dict(),
        ).model_dump()

        await self.server.broadcast_to_room(snapshot.room_code, update, exclude=websocket)
        return update

    async def _handle_get_game(self, message: GetGameMessage, websocket: Any) -> dict:
        """Handle a polling request."""
        snapshot = await game_store.get_game(message.room_code)
        if snapshot is None:
            return ErrorMessage(
                message=f"Room '{message.room_code}' does not exist",
                code="ROOM_NOT_FOUND"
            ).model_dump()

        self.server.register_connection(snapshot.room_code, websocket)
        return GameUpdateMessage(
            room_code=snapshot.room_code,
            game_data=snapshot.to_dict(),
        ).model_dump()

    async def _handle_update_game(
        self,
        message: UpdateGameMessage,
        websocket: Any
    ) -> Optional[dict]:
        """Store a published snapshot and forward it to the room."""
        try:
            snapshot = self._load_snapshot(message.room_code, message.game_data)
        except ValueError as e:
            return ErrorMessage(message=str(e), code="INVALID_GAME").model_dump()

        await game_store.save_game(snapshot)
        self.server.register_connection(snapshot.room_code, websocket)

        await self.server.broadcast_to_room(
            snapshot.room_code,
            GameUpdateMessage(
                room_code=snapshot.room_code,
                game_data=snapshot.to_dict(),
            ).model_dump(),
            exclude=websocket,
        )
        return None
