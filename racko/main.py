"""FastAPI snapshot relay with WebSocket support."""
from typing import Optional, Any
from contextlib import asynccontextmanager

from fastapi import FastAPI, WebSocket, WebSocketDisconnect, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from racko import __version__
from racko.config import config
from racko.state.redis_client import redis_client
from racko.state.game_store import game_store
from racko.protocol.handlers import MessageHandler
from racko.protocol.messages import ErrorMessage
from racko.utils.logger import get_logger

logger = get_logger(__name__)


class RelayServer:
    """Tracks which connections belong to which room and fans snapshots out."""

    def __init__(self):
        self.rooms: dict[str, set[Any]] = {}  # room_code -> websockets
        self.handler = MessageHandler(self)

    async def initialize(self):
        """Initialize server resources."""
        await redis_client.connect()
        logger.info("Relay server initialized")

    async def cleanup(self):
        """Clean up server resources."""
        self.rooms.clear()
        await redis_client.disconnect()
        logger.info("Relay server shutdown complete")

    def register_connection(self, room_code: str, websocket: Any) -> None:
        """Subscribe a connection to a room's updates."""
        self.rooms.setdefault(room_code.upper(), set()).add(websocket)

    def unregister_connection(self, websocket: Any) -> None:
        """Drop a connection from every room."""
        for room_code in list(self.rooms):
            members = self.rooms[room_code]
            members.discard(websocket)
            if not members:
                del self.rooms[room_code]

    def get_connections(self, room_code: str) -> set[Any]:
        """Get connections subscribed to a room."""
        return self.rooms.get(room_code.upper(), set())

    async def send(self, websocket: Any, message: dict) -> bool:
        """Send a message to one connection."""
        try:
            await websocket.send_json(message)
            return True
        except Exception as e:
            logger.error(f"Failed to send to connection: {e}")
            self.unregister_connection(websocket)
        return False

    async def broadcast_to_room(
        self,
        room_code: str,
        message: dict,
        exclude: Optional[Any] = None
    ) -> int:
        """Broadcast a message to every connection in a room.

        Returns:
            Number of connections reached.
        """
        sent = 0
        for websocket in list(self.get_connections(room_code)):
            if websocket is exclude:
                continue
            if await self.send(websocket, message):
                sent += 1
        return sent


# Global server instance
server = RelayServer()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    await server.initialize()
    yield
    await server.cleanup()


# Create FastAPI app
app = FastAPI(
    title="Racko Relay",
    description="Stores and forwards Racko game snapshots between participants",
    version=__version__,
    lifespan=lifespan,
)

# CORS middleware - allow local development
app.add_middleware(
    CORSMiddleware,
    allow_origin_regex=r"http://(localhost|127\.0\.0\.1)(:\d+)?",
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Health check
@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/api/rooms/{room_code}")
async def get_room(room_code: str, player_id: Optional[str] = None):
    """Get the latest snapshot of a room.

    With ``player_id`` the snapshot is returned as that player sees it.
    """
    snapshot = await game_store.get_game(room_code)
    if snapshot is None:
        raise HTTPException(status_code=404, detail=f"Room '{room_code}' not found")

    return {
        "game_data": snapshot.to_view(player_id) if player_id else snapshot.to_dict(),
        "connections": len(server.get_connections(room_code)),
    }


# WebSocket endpoint
@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    """WebSocket endpoint for snapshot relay."""
    await websocket.accept()

    try:
        while True:
            data = await websocket.receive_text()

            response = await server.handler.handle_message(websocket, data)

            if response:
                await websocket.send_json(response)

    except WebSocketDisconnect:
        logger.debug("WebSocket disconnected")
    except Exception as e:
        logger.error(f"WebSocket error: {e}")
        try:
            await websocket.send_json(
                ErrorMessage(message=str(e), code="SERVER_ERROR").model_dump()
            )
        except Exception:
            pass
    finally:
        server.unregister_connection(websocket)


# Entry point
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "racko.main:app",
        host=config.host,
        port=config.port,
        reload=True,
    )
