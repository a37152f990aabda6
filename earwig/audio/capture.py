"""Audio capture source for a single recording session."""

import pyaudio
import queue
import time
import logging
from threading import Thread, Event
from typing import Optional, Union

from ..errors import CaptureInterrupted, DeviceUnavailable
from ..models.audio import AudioFrame, SAMPLE_RATE, CHANNELS

logger = logging.getLogger(__name__)


class AudioCapture:
    """Records mono 16 kHz 16-bit audio from one PyAudio input device.

    Frames are put on ``frames`` in arrival order by a background thread. If
    the device fails while reading, a ``CaptureInterrupted`` marker is put on
    the same queue and the thread ends.
    """

    def __init__(
        self,
        device: Union[str, int] = "default",
        chunk_size: int = 1024,
        format: int = pyaudio.paInt16,
    ):
        """Initialize audio capture.

        Args:
            device: "default", a PyAudio device index, or part of a device name
            chunk_size: Size of each audio chunk in samples
            format: Audio format (16-bit signed int)
        """
        self.device = device
        self.sample_rate = SAMPLE_RATE
        self.channels = CHANNELS
        self.chunk_size = chunk_size
        self.format = format

        self.frames: "queue.Queue[Union[AudioFrame, CaptureInterrupted]]" = queue.Queue()

        # Recording thread management
        self.recording_thread: Optional[Thread] = None
        self.stop_event = Event()
        self.is_recording = False
        self.total_chunks = 0

        self.pyaudio_instance: Optional[pyaudio.PyAudio] = None
        self.stream = None

    def start_recording(self) -> None:
        """Open the input stream and start reading in a background thread.

        Raises:
            DeviceUnavailable: If the device cannot be found or opened
        """
        if self.is_recording:
            logger.warning("Recording already in progress")
            return

        self.stream = self._open_audio_stream()
        self.stop_event.clear()
        self.total_chunks = 0

        self.recording_thread = Thread(target=self._record_continuously, daemon=True)
        self.recording_thread.name = "AudioCaptureThread"
        self.recording_thread.start()
        self.is_recording = True

    def stop_recording(self) -> None:
        """Stop recording and clean up resources."""
        if not self.is_recording:
            return

        logger.debug("Stopping audio capture")
        self.stop_event.set()

        if self.recording_thread and self.recording_thread.is_alive():
            self.recording_thread.join(timeout=2.0)
            if self.recording_thread.is_alive():
                logger.warning("Recording thread did not stop cleanly")

        self.is_recording = False
        logger.debug(f"Audio capture stopped. Total chunks: {self.total_chunks}")

    def _find_device_index(self, pa: pyaudio.PyAudio) -> Optional[int]:
        if self.device in (None, "", "default"):
            return None
        if isinstance(self.device, int) or str(self.device).isdigit():
            return int(self.device)

        wanted = str(self.device).lower()
        for index in range(pa.get_device_count()):
            info = pa.get_device_info_by_index(index)
            if info.get('maxInputChannels', 0) > 0 and wanted in str(info.get('name', '')).lower():
                return index
        raise DeviceUnavailable(f"Could not find audio device: {self.device}")

    def _open_audio_stream(self):
        self.pyaudio_instance = pyaudio.PyAudio()
        try:
            device_index = self._find_device_index(self.pyaudio_instance)
            stream = self.pyaudio_instance.open(
                format=self.format,
                channels=self.channels,
                rate=self.sample_rate,
                input=True,
                input_device_index=device_index,
                frames_per_buffer=self.chunk_size,
            )
        except DeviceUnavailable:
            self._terminate()
            raise
        except (OSError, ValueError) as e:
            self._terminate()
            raise DeviceUnavailable(f"Failed to open audio device {self.device}: {e}") from e

        logger.info(f"Audio stream opened on {self.device}: {self.sample_rate}Hz, "
                    f"{self.chunk_size} samples/chunk")
        return stream

    def _record_continuously(self) -> None:
        """Internal method: continuous recording loop in background thread."""
        stream = self.stream
        try:
            while not self.stop_event.is_set():
                try:
                    audio_chunk = stream.read(self.chunk_size, exception_on_overflow=False)
                except OSError as e:
                    logger.error(f"Audio device failed during capture: {e}")
                    self.frames.put(CaptureInterrupted(f"Audio device error: {e}"))
                    return

                self.frames.put(AudioFrame(
                    data=audio_chunk,
                    timestamp=time.time(),
                    frame_number=self.total_chunks,
                ))
                self.total_chunks += 1
        finally:
            try:
                stream.stop_stream()
                stream.close()
            except OSError as e:
                logger.debug(f"Error closing audio stream: {e}")
            self.stream = None
            self._terminate()

    def _terminate(self) -> None:
        if self.pyaudio_instance:
            self.pyaudio_instance.terminate()
            self.pyaudio_instance = None
