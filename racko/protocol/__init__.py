"""Protocol module for WebSocket message handling."""
from .messages import (
    ClientMessage,
    ServerMessage,
    CreateGameMessage,
    JoinGameMessage,
    GetGameMessage,
    UpdateGameMessage,
    GameUpdateMessage,
    parse_client_message,
    parse_server_message,
)
from .handlers import MessageHandler

__all__ = [
    "ClientMessage",
    "ServerMessage",
    "CreateGameMessage",
    "JoinGameMessage",
    "GetGameMessage",
    "UpdateGameMessage",
    "GameUpdateMessage",
    "parse_client_message",
    "parse_server_message",
    "MessageHandler",
]
