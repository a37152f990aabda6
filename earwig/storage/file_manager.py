"""Artifact storage: deterministic naming and WAV writing for finished sessions."""

import re
import wave
import logging
from pathlib import Path
from datetime import datetime
from typing import List

from ..models.audio import SAMPLE_RATE, SAMPLE_WIDTH, CHANNELS
from ..models.delivery import AudioArtifact
from ..models.session import RecordingSession

logger = logging.getLogger(__name__)

FILENAME_PREFIX = "memo_"
TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"
_FILENAME_RE = re.compile(r"^memo_(\d{8}_\d{6})(?:_(\d+))?\.wav$")


def artifact_filename(started_at: datetime, collision_index: int = 0) -> str:
    """Build the artifact filename for a session start time (one-second resolution)."""
    stem = f"{FILENAME_PREFIX}{started_at.strftime(TIMESTAMP_FORMAT)}"
    if collision_index:
        stem += f"_{collision_index}"
    return f"{stem}.wav"


def parse_artifact_filename(filename: str) -> datetime:
    """Recover the session start time from an artifact filename.

    Raises:
        ValueError: If the name does not follow the memo_YYYYMMDD_HHMMSS.wav pattern
    """
    match = _FILENAME_RE.match(Path(filename).name)
    if not match:
        raise ValueError(f"Not an artifact filename: {filename}")
    return datetime.strptime(match.group(1), TIMESTAMP_FORMAT)


class ArtifactStore:
    """Writes recording sessions as WAV files under one output directory."""

    def __init__(self, output_dir: str):
        """Initialize the store, creating the output directory if needed.

        Args:
            output_dir: Directory recordings are written to
        """
        self.output_dir = Path(output_dir).expanduser().absolute()
        self.output_dir.mkdir(parents=True, exist_ok=True)
        logger.info(f"ArtifactStore initialized with output_dir: {self.output_dir}")

    def write_session(self, session: RecordingSession) -> AudioArtifact:
        """Write the session's buffered audio to a new WAV file.

        The file is opened exclusively, so an existing recording is never
        overwritten; a second session in the same second gets a numeric suffix.

        Returns:
            AudioArtifact referencing the written file
        """
        audio_data = session.audio_bytes()
        if not audio_data:
            logger.warning("No audio data recorded, writing empty WAV")

        path = self._create_exclusive(session.started_at)
        try:
            with wave.open(str(path), 'wb') as wf:
                wf.setnchannels(CHANNELS)
                wf.setsampwidth(SAMPLE_WIDTH)
                wf.setframerate(SAMPLE_RATE)
                wf.writeframes(audio_data)
        except Exception:
            logger.error(f"Error writing audio file {path}")
            raise

        logger.info(f"Wrote {len(audio_data)} bytes ({session.frame_count} frames) to {path}")
        return AudioArtifact(
            path=path,
            started_at=session.started_at,
            frame_count=session.frame_count,
            duration_seconds=session.duration_seconds,
            peak_level=session.peak_level(),
            capture_error=session.capture_error,
        )

    def _create_exclusive(self, started_at: datetime) -> Path:
        collision_index = 0
        while True:
            path = self.output_dir / artifact_filename(started_at, collision_index)
            try:
                with open(path, 'xb'):
                    pass
                return path
            except FileExistsError:
                logger.warning(f"Artifact {path.name} already exists, trying next suffix")
                collision_index += 1

    def list_artifacts(self) -> List[Path]:
        """List saved artifacts sorted by session start time."""
        artifacts = []
        for path in self.output_dir.iterdir():
            if path.is_file() and _FILENAME_RE.match(path.name):
                artifacts.append(path)

        def sort_key(path: Path):
            match = _FILENAME_RE.match(path.name)
            return match.group(1), int(match.group(2) or 0)

        artifacts.sort(key=sort_key)
        return artifacts
