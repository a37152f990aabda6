"""Unit tests for artifact naming and the ArtifactStore."""

import pytest
import wave
from pathlib import Path
from datetime import datetime, timedelta

from earwig.models.audio import AudioFrame
from earwig.models.session import RecordingSession, SessionState
from earwig.storage.file_manager import ArtifactStore, artifact_filename, parse_artifact_filename


def make_session(started_at, chunks=(), capture_error=None):
    session = RecordingSession(started_at=started_at, started_monotonic=0.0)
    for number, chunk in enumerate(chunks):
        session.append(AudioFrame(data=chunk, timestamp=0.0, frame_number=number))
    session.capture_error = capture_error
    return session


@pytest.mark.unit
class TestArtifactNaming:
    """Test cases for artifact filenames."""

    def test_filename_pattern(self):
        started_at = datetime(2024, 3, 9, 7, 5, 2, 987654)
        assert artifact_filename(started_at) == "memo_20240309_070502.wav"

    def test_filename_round_trip(self):
        started_at = datetime(2023, 12, 31, 23, 59, 59)
        assert parse_artifact_filename(artifact_filename(started_at)) == started_at

    def test_round_trip_truncates_to_seconds(self):
        started_at = datetime(2025, 6, 1, 12, 0, 0, 500000)
        assert parse_artifact_filename(artifact_filename(started_at)) == started_at.replace(microsecond=0)

    def test_filenames_unique_one_second_apart(self):
        base = datetime(2025, 1, 1, 8, 0, 0)
        names = {artifact_filename(base + timedelta(seconds=offset)) for offset in range(120)}
        assert len(names) == 120

    def test_parse_accepts_collision_suffix(self):
        assert parse_artifact_filename("memo_20240309_070502_2.wav") == datetime(2024, 3, 9, 7, 5, 2)

    def test_parse_full_path(self):
        assert parse_artifact_filename("/home/me/memos/memo_20240309_070502.wav") == datetime(2024, 3, 9, 7, 5, 2)

    @pytest.mark.parametrize("name", ["recording.wav", "memo_2024_0705.wav", "memo_20240309_070502.mp3"])
    def test_parse_rejects_other_names(self, name):
        with pytest.raises(ValueError):
            parse_artifact_filename(name)


@pytest.mark.unit
class TestArtifactStore:
    """Test cases for ArtifactStore."""

    def test_initialization_creates_directory(self, temp_data_dir):
        output_dir = Path(temp_data_dir) / "nested" / "memos"
        store = ArtifactStore(str(output_dir))

        assert store.output_dir == output_dir
        assert output_dir.is_dir()

    def test_write_session(self, temp_data_dir, sample_audio_chunk):
        store = ArtifactStore(temp_data_dir)
        started_at = datetime(2024, 5, 17, 9, 30, 15)
        session = make_session(started_at, [sample_audio_chunk, sample_audio_chunk])

        artifact = store.write_session(session)

        assert artifact.path == Path(temp_data_dir) / "memo_20240517_093015.wav"
        assert artifact.path.is_absolute()
        assert artifact.frame_count == 2
        assert artifact.capture_error is None
        assert artifact.peak_level > 0.9

        with wave.open(str(artifact.path), 'rb') as wf:
            assert wf.getnchannels() == 1
            assert wf.getsampwidth() == 2
            assert wf.getframerate() == 16000
            assert wf.readframes(wf.getnframes()) == sample_audio_chunk * 2

    def test_write_zero_frame_session(self, temp_data_dir):
        store = ArtifactStore(temp_data_dir)
        artifact = store.write_session(make_session(datetime(2024, 5, 17, 9, 30, 15)))

        assert artifact.frame_count == 0
        assert artifact.duration_seconds == 0.0
        with wave.open(str(artifact.path), 'rb') as wf:
            assert wf.getnframes() == 0
            assert wf.getframerate() == 16000

    def test_write_keeps_capture_error(self, temp_data_dir, sample_audio_chunk):
        store = ArtifactStore(temp_data_dir)
        session = make_session(datetime.now(), [sample_audio_chunk], capture_error="Audio device error: -9981")
        session.state = SessionState.ABORTED

        artifact = store.write_session(session)

        assert artifact.capture_error == "Audio device error: -9981"

    def test_never_overwrites_existing_artifact(self, temp_data_dir, sample_audio_chunk):
        store = ArtifactStore(temp_data_dir)
        started_at = datetime(2024, 5, 17, 9, 30, 15)

        first = store.write_session(make_session(started_at, [sample_audio_chunk]))
        original_bytes = first.path.read_bytes()
        second = store.write_session(make_session(started_at))

        assert second.path != first.path
        assert second.path.name == "memo_20240517_093015_1.wav"
        assert first.path.read_bytes() == original_bytes
        assert parse_artifact_filename(second.path.name) == started_at

    def test_list_artifacts_chronological(self, temp_data_dir):
        store = ArtifactStore(temp_data_dir)
        base = datetime(2024, 5, 17, 9, 30, 15)
        for offset in (5, 0, 60):
            store.write_session(make_session(base + timedelta(seconds=offset)))
        (Path(temp_data_dir) / "notes.txt").write_text("not audio")

        names = [path.name for path in store.list_artifacts()]

        assert names == [
            "memo_20240517_093015.wav",
            "memo_20240517_093020.wav",
            "memo_20240517_093115.wav",
        ]
