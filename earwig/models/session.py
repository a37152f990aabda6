"""Recording session model."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

import numpy as np

from .audio import AudioFrame, SAMPLE_RATE, SAMPLE_WIDTH, CHANNELS


class SessionState(Enum):
    """Completion state of a recording session."""
    ACTIVE = "active"
    FINALIZED = "finalized"
    ABORTED = "aborted"


@dataclass
class RecordingSession:
    """One held-button interval and the audio captured during it."""
    started_at: datetime
    started_monotonic: float
    frames: List[AudioFrame] = field(default_factory=list)
    state: SessionState = SessionState.ACTIVE
    capture_error: Optional[str] = None

    def append(self, frame: AudioFrame) -> None:
        self.frames.append(frame)

    def audio_bytes(self) -> bytes:
        return b''.join(frame.data for frame in self.frames)

    @property
    def frame_count(self) -> int:
        return len(self.frames)

    @property
    def duration_seconds(self) -> float:
        """Audio duration derived from the buffered sample count."""
        total_bytes = sum(len(frame.data) for frame in self.frames)
        return total_bytes / (SAMPLE_RATE * SAMPLE_WIDTH * CHANNELS)

    def peak_level(self) -> float:
        """Peak absolute amplitude in the range 0.0 to 1.0."""
        audio = self.audio_bytes()
        usable = len(audio) - len(audio) % SAMPLE_WIDTH
        if usable == 0:
            return 0.0
        samples = np.frombuffer(audio[:usable], dtype=np.int16)
        return float(np.abs(samples.astype(np.int32)).max()) / 32768.0
