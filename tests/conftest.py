"""Pytest configuration and fixtures for Earwig tests."""

import pytest
import queue
import tempfile
import time
import logging
from datetime import datetime
from unittest.mock import Mock, patch
import numpy as np

from earwig.errors import CaptureInterrupted, DeviceUnavailable
from earwig.models.audio import AudioFrame
from earwig.models.events import BoundaryEvent, BoundaryKind


# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests of a single component")
    config.addinivalue_line("markers", "integration: tests spanning several components")


@pytest.fixture
def temp_data_dir():
    """Create temporary directory for test data."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield temp_dir


@pytest.fixture
def sample_audio_chunk():
    """Generate a sample audio chunk for testing."""
    # Generate 1024 samples of 16-bit audio (sine wave)
    sample_rate = 16000
    duration = 1024 / sample_rate  # ~0.064 seconds
    freq = 440  # A4 note

    t = np.linspace(0, duration, 1024, False)
    wave_data = np.sin(2 * np.pi * freq * t)

    # Convert to 16-bit integers
    audio_data = (wave_data * 32767).astype(np.int16)
    return audio_data.tobytes()


@pytest.fixture
def mock_pyaudio(sample_audio_chunk):
    """Mock PyAudio for testing without actual audio hardware."""
    with patch('pyaudio.PyAudio') as mock_pyaudio_class:
        mock_pyaudio_instance = Mock()
        mock_stream = Mock()

        def read(num_frames, exception_on_overflow=True):
            time.sleep(0.005)  # Pace the capture thread like a real device
            return sample_audio_chunk

        mock_stream.read.side_effect = read
        mock_stream.stop_stream.return_value = None
        mock_stream.close.return_value = None

        mock_pyaudio_instance.open.return_value = mock_stream
        mock_pyaudio_instance.terminate.return_value = None
        mock_pyaudio_instance.get_device_count.return_value = 2
        devices = [
            {'name': 'HDA Intel PCH: ALC257 Analog (hw:0,0)', 'maxInputChannels': 2},
            {'name': 'USB PnP Sound Device: Audio (hw:1,0)', 'maxInputChannels': 1},
        ]
        mock_pyaudio_instance.get_device_info_by_index.side_effect = lambda index: devices[index]

        mock_pyaudio_class.return_value = mock_pyaudio_instance

        yield {
            'class': mock_pyaudio_class,
            'instance': mock_pyaudio_instance,
            'stream': mock_stream
        }


class FakeCapture:
    """Capture source that delivers a fixed list of chunks as soon as it starts."""

    def __init__(self, chunks=(), error=None, fail_on_start=False):
        self.frames = queue.Queue()
        self.chunks = list(chunks)
        self.error = error
        self.fail_on_start = fail_on_start
        self.started = False
        self.stopped = False

    def start_recording(self):
        if self.fail_on_start:
            raise DeviceUnavailable("Could not find audio device: hw:9,0")
        self.started = True
        for number, chunk in enumerate(self.chunks):
            self.frames.put(AudioFrame(data=chunk, timestamp=time.time(), frame_number=number))
        if self.error:
            self.frames.put(CaptureInterrupted(self.error))

    def stop_recording(self):
        self.stopped = True


@pytest.fixture
def fake_capture_class():
    return FakeCapture


@pytest.fixture
def boundary():
    """Build boundary events; wall_time defaults to now."""
    def make(kind, wall_time=None):
        kind = BoundaryKind.BEGIN if kind == "begin" else BoundaryKind.END if kind == "end" else kind
        return BoundaryEvent(kind=kind, monotonic=time.monotonic(), wall_time=wall_time or datetime.now())
    return make
