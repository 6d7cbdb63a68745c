"""State management module."""
from .redis_client import RedisClient
from .game_store import GameStore

__all__ = ["RedisClient", "GameStore"]
