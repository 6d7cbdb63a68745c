"""Room snapshot persistence."""
from typing import Optional
from datetime import datetime, timezone

from racko.config import config
from racko.game.snapshot import GameSnapshot
from racko.state.redis_client import redis_client
from racko.utils.logger import get_logger

logger = get_logger(__name__)


class GameStore:
    """Keeps the latest snapshot of each room in Redis.
    
    Writes are blind overwrites: whichever participant published last wins.
    """
    
    def _room_key(self, room_code: str) -> str:
        """Get Redis key for a room's snapshot."""
        return f"room:{room_code.upper()}"
    
    async def save_game(self, snapshot: GameSnapshot) -> None:
        """Save a complete snapshot, refreshing the room's expiry.
        
        Args:
            snapshot: Snapshot to store.
        """
        data = snapshot.to_dict()
        data["_saved_at"] = datetime.now(timezone.utc).isoformat()
        await redis_client.set_json(
            self._room_key(snapshot.room_code),
            data,
            ex=config.room_ttl_seconds,
        )
        logger.debug(f"Saved snapshot for room {snapshot.room_code} (move {snapshot.move_number})")
    
    async def get_game(self, room_code: str) -> Optional[GameSnapshot]:
        """Get a room's snapshot.
        
        Args:
            room_code: Room code.
            
        Returns:
            Snapshot if the room exists, None otherwise.
        """
        data = await redis_client.get_json(self._room_key(room_code))
        if data is None:
            return None
        data.pop("_saved_at", None)
        return GameSnapshot.from_dict(data)
    
    async def room_exists(self, room_code: str) -> bool:
        """Check if a room is stored."""
        return await redis_client.exists(self._room_key(room_code))
    
    async def delete_game(self, room_code: str) -> None:
        """Delete a room.
        
        Args:
            room_code: Room code.
        """
        await redis_client.delete(self._room_key(room_code))
        logger.info(f"Deleted room {room_code}")
    
    async def list_rooms(self) -> list[str]:
        """List all stored rooms.
        
        Returns:
            List of room codes.
        """
        keys = await redis_client.scan_keys("room:*")
        return sorted(key.split(":", 1)[1] for key in keys)


game_store = GameStore()
