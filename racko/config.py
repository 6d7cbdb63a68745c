"""Application configuration."""
import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()


@dataclass
class Config:
    """Application configuration loaded from environment variables."""
    
    # Redis (room snapshots)
    redis_url: str = os.getenv("REDIS_URL", "redis://localhost:6379")
    room_ttl_seconds: int = int(os.getenv("ROOM_TTL_SECONDS", "86400"))
    
    # Relay server
    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "8765"))
    
    # Participant client
    server_url: str = os.getenv("RACKO_SERVER_URL", "ws://localhost:8765/ws")
    poll_interval_seconds: float = float(os.getenv("POLL_INTERVAL_SECONDS", "2.0"))
    
    # Game settings
    ai_delay_seconds: float = float(os.getenv("AI_DELAY_SECONDS", "1.0"))
    undo_window_seconds: float = float(os.getenv("UNDO_WINDOW_SECONDS", "3.0"))
    
    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


config = Config()
