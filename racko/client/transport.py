"""WebSocket transport between a participant and the relay."""
import json
from typing import Callable, Optional

import websockets
from pydantic import BaseModel
from websockets.exceptions import WebSocketException

from racko.config import config
from racko.game.errors import ConnectivityFailure
from racko.protocol.messages import (
    CreateGameMessage,
    JoinGameMessage,
    GetGameMessage,
    UpdateGameMessage,
    ServerMessage,
    parse_server_message,
)
from racko.utils.logger import get_logger

logger = get_logger(__name__)


class WebSocketTransport:
    """Sends relay messages and hands incoming ones to a callback."""
    
    def __init__(self, url: Optional[str] = None):
        """Initialize transport.
        
        Args:
            url: Relay WebSocket URL, ``config.server_url`` if not given.
        """
        self.url = url or config.server_url
        self._ws = None
    
    @property
    def connected(self) -> bool:
        """Check if a connection is open."""
        return self._ws is not None
    
    async def connect(self) -> None:
        """Open the WebSocket connection.
        
        Raises:
            ConnectivityFailure: If the relay is unreachable.
        """
        try:
            self._ws = await websockets.connect(self.url)
        except (OSError, WebSocketException) as e:
            raise ConnectivityFailure(f"Cannot connect to {self.url}: {e}") from e
        logger.info(f"Connected to relay at {self.url}")
    
    async def close(self) -> None:
        """Close the connection."""
        if self._ws is not None:
            await self._ws.close()
            self._ws = None
            logger.info("Disconnected from relay")
    
    async def send(self, message: BaseModel) -> None:
        """Send a protocol message.
        
        Raises:
            ConnectivityFailure: If not connected or the send fails.
        """
        if self._ws is None:
            raise ConnectivityFailure("Not connected")
        try:
            await self._ws.send(message.model_dump_json())
        except (OSError, WebSocketException) as e:
            raise ConnectivityFailure(f"Send failed: {e}") from e
    
    async def create_game(self, room_code: str, game_data: dict) -> None:
        """Register a new room."""
        await self.send(CreateGameMessage(room_code=room_code, game_data=game_data))
    
    async def join_game(self, room_code: str, player_id: str, name: str) -> None:
        """Ask for a seat in a room."""
        await self.send(JoinGameMessage(room_code=room_code, player_id=player_id, name=name))
    
    async def request_snapshot(self, room_code: str) -> None:
        """Ask the relay for the latest snapshot."""
        await self.send(GetGameMessage(room_code=room_code))
    
    async def publish(self, room_code: str, game_data: dict) -> None:
        """Publish a full snapshot (fire-and-forget)."""
        await self.send(UpdateGameMessage(room_code=room_code, game_data=game_data))
    
    async def listen(self, callback: Callable[[ServerMessage], None]) -> None:
        """Feed incoming messages to ``callback`` until the connection closes.
        
        Unparseable messages are logged and skipped.
        
        Raises:
            ConnectivityFailure: If the connection drops.
        """
        if self._ws is None:
            raise ConnectivityFailure("Not connected")
        try:
            async for raw in self._ws:
                try:
                    message = parse_server_message(json.loads(raw))
                except ValueError as e:
                    logger.warning(f"Ignoring bad relay message: {e}")
                    continue
                callback(message)
        except WebSocketException as e:
            raise ConnectivityFailure(f"Connection lost: {e}") from e
