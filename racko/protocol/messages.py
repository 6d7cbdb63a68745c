"""Pydantic message schemas for the snapshot relay protocol."""
from typing import Optional, Literal, Union
from pydantic import BaseModel, Field


# ============= Client -> Relay Messages =============

class CreateGameMessage(BaseModel):
    """Register a new room with its initial snapshot."""
    type: Literal["create_game"] = "create_game"
    room_code: str
    game_data: dict


class JoinGameMessage(BaseModel):
    """Take the next open seat in a room."""
    type: Literal["join_game"] = "join_game"
    room_code: str
    player_id: str
    name: str = Field(min_length=1)


class GetGameMessage(BaseModel):
    """Ask for the latest snapshot (polling)."""
    type: Literal["get_game"] = "get_game"
    room_code: str


class UpdateGameMessage(BaseModel):
    """Publish a full snapshot after a move."""
    type: Literal["update_game"] = "update_game"
    room_code: str
    game_data: dict


class PingMessage(BaseModel):
    """Keep-alive ping from client."""
    type: Literal["ping"] = "ping"


# Union of all client messages
ClientMessage = Union[
    CreateGameMessage,
    JoinGameMessage,
    GetGameMessage,
    UpdateGameMessage,
    PingMessage,
]


# ============= Relay -> Client Messages =============

class ErrorMessage(BaseModel):
    """Error response."""
    type: Literal["error"] = "error"
    message: str
    code: Optional[str] = None


class GameCreatedMessage(BaseModel):
    """Room registered."""
    type: Literal["game_created"] = "game_created"
    room_code: str
    game_data: dict


class GameUpdateMessage(BaseModel):
    """Full snapshot for a room."""
    type: Literal["game_update"] = "game_update"
    room_code: str
    game_data: dict


class PongMessage(BaseModel):
    """Keep-alive pong response."""
    type: Literal["pong"] = "pong"


# Union of all server messages
ServerMessage = Union[
    ErrorMessage,
    GameCreatedMessage,
    GameUpdateMessage,
    PongMessage,
]


CLIENT_TYPES = {
    "create_game": CreateGameMessage,
    "join_game": JoinGameMessage,
    "get_game": GetGameMessage,
    "update_game": UpdateGameMessage,
    "ping": PingMessage,
}

SERVER_TYPES = {
    "error": ErrorMessage,
    "game_created": GameCreatedMessage,
    "game_update": GameUpdateMessage,
    "pong": PongMessage,
}


def _parse(data: dict, type_map: dict) -> BaseModel:
    """Dispatch on the ``type`` field."""
    msg_type = data.get("type")

    if msg_type not in type_map:
        raise ValueError(f"Unknown message type: {msg_type}")

    return type_map[msg_type](**data)


def parse_client_message(data: dict) -> ClientMessage:
    """Parse a client message from JSON dict.

    Args:
        data: Message data dictionary.

    Returns:
        Parsed client message.

    Raises:
        ValueError: If message type is unknown or invalid.
    """
    return _parse(data, CLIENT_TYPES)


def parse_server_message(data: dict) -> ServerMessage:
    """Parse a relay message from JSON dict.

    Args:
        data: Message data dictionary.

    Returns:
        Parsed server message.

    Raises:
        ValueError: If message type is unknown or invalid.
    """
    return _parse(data, SERVER_TYPES)
