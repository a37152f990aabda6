"""Data models for the Earwig daemon."""

from .events import BoundaryKind, BoundaryEvent
from .audio import AudioFrame, SAMPLE_RATE, CHANNELS, SAMPLE_WIDTH
from .session import SessionState, RecordingSession
from .delivery import (
    AudioArtifact,
    CaptureFailureNotice,
    DeliveryItem,
    OutcomeStatus,
    DeliveryOutcome,
)

__all__ = [
    "BoundaryKind",
    "BoundaryEvent",
    "AudioFrame",
    "SAMPLE_RATE",
    "CHANNELS",
    "SAMPLE_WIDTH",
    "SessionState",
    "RecordingSession",
    # Delivery pipeline models
    "AudioArtifact",
    "CaptureFailureNotice",
    "DeliveryItem",
    "OutcomeStatus",
    "DeliveryOutcome",
]
