"""Models handed to and produced by the delivery pipeline."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional, Union


@dataclass(frozen=True)
class AudioArtifact:
    """A saved WAV file produced by a finalized (or aborted) session."""
    path: Path
    started_at: datetime
    frame_count: int
    duration_seconds: float
    peak_level: float = 0.0
    capture_error: Optional[str] = None  # Set when capture failed mid-session

    @property
    def filename(self) -> str:
        return self.path.name


@dataclass(frozen=True)
class CaptureFailureNotice:
    """Sent instead of an artifact when no usable audio file exists."""
    reason: str
    occurred_at: datetime = field(default_factory=datetime.now)


DeliveryItem = Union[AudioArtifact, CaptureFailureNotice]


class OutcomeStatus(Enum):
    """Result of running one item through the delivery pipeline."""
    TRANSCRIBED = "transcribed"
    TRANSCRIPTION_FAILED = "transcription_failed"
    CAPTURE_FAILED = "capture_failed"


@dataclass
class DeliveryOutcome:
    """Transcription result for one item plus whether the notification went out."""
    item: DeliveryItem
    status: OutcomeStatus
    text: Optional[str] = None
    reason: Optional[str] = None
    notified: bool = False
    completed_at: datetime = field(default_factory=datetime.now)

    @classmethod
    def transcribed(cls, artifact: AudioArtifact, text: str) -> 'DeliveryOutcome':
        return cls(item=artifact, status=OutcomeStatus.TRANSCRIBED, text=text)

    @classmethod
    def transcription_failed(cls, artifact: AudioArtifact, reason: str) -> 'DeliveryOutcome':
        return cls(item=artifact, status=OutcomeStatus.TRANSCRIPTION_FAILED, reason=reason)

    @classmethod
    def capture_failed(cls, notice: CaptureFailureNotice) -> 'DeliveryOutcome':
        return cls(item=notice, status=OutcomeStatus.CAPTURE_FAILED, reason=notice.reason)
