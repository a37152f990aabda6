"""Services layer for Earwig session handling."""

from .session_manager import RecordingSessionManager

__all__ = [
    "RecordingSessionManager",
]
