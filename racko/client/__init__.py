"""Participant-side synchronization boundary."""
from .participant import Participant
from .transport import WebSocketTransport

__all__ = ["Participant", "WebSocketTransport"]
