"""Recording session manager: turns boundary events into saved audio artifacts."""

import queue
import wave
import logging
from threading import Thread, Event
from typing import Callable, Optional

from ..audio.capture import AudioCapture
from ..errors import CaptureInterrupted, DeviceUnavailable
from ..models.delivery import CaptureFailureNotice
from ..models.events import BoundaryEvent, BoundaryKind
from ..models.session import RecordingSession, SessionState
from ..storage.file_manager import ArtifactStore

logger = logging.getLogger(__name__)


class RecordingSessionManager:
    """Owns the single active recording session.

    Boundary events are processed one at a time, in arrival order, by one
    thread; between events the manager moves frames from the active capture
    into the session buffer. Nothing else touches the buffer, so at most one
    session can be active and no locking is needed.
    """

    def __init__(self,
                 events: queue.Queue,
                 deliveries: queue.Queue,
                 store: ArtifactStore,
                 capture_factory: Callable[[], AudioCapture],
                 poll_interval: float = 0.05):
        """Initialize session manager.

        Args:
            events: Boundary events from the input monitor
            deliveries: Channel to the delivery pipeline
            store: Where finished sessions are written
            capture_factory: Builds a fresh capture source for each session
            poll_interval: How often frames are collected while waiting for events
        """
        self.events = events
        self.deliveries = deliveries
        self.store = store
        self.capture_factory = capture_factory
        self.poll_interval = poll_interval

        self._session: Optional[RecordingSession] = None
        self._capture: Optional[AudioCapture] = None

        self.sessions_finalized = 0
        self.sessions_aborted = 0

        self.stop_event = Event()
        self.thread: Optional[Thread] = None

    @property
    def is_active(self) -> bool:
        return self._session is not None

    def start(self) -> None:
        if self.thread and self.thread.is_alive():
            return
        self.stop_event.clear()
        self.thread = Thread(target=self._run, daemon=True)
        self.thread.name = "SessionManagerThread"
        self.thread.start()
        logger.info("Recording session manager started")

    def stop(self, timeout: float = 5.0) -> None:
        self.stop_event.set()
        if self.thread:
            self.thread.join(timeout)
            if self.thread.is_alive():
                logger.warning("Session manager thread did not stop cleanly")
        logger.info("Recording session manager stopped")

    def _run(self) -> None:
        while not self.stop_event.is_set():
            try:
                event = self.events.get(timeout=self.poll_interval)
            except queue.Empty:
                event = None

            self.poll_capture()
            if event is not None:
                self.handle_event(event)

        if self._session is not None:
            logger.warning("Shutting down with an active session, saving what was captured")
            self._finalize()

    def handle_event(self, event: BoundaryEvent) -> None:
        """Apply one boundary event to the session state."""
        if event.kind is BoundaryKind.BEGIN:
            self._begin(event)
        else:
            self._end()

    def poll_capture(self) -> None:
        """Move frames delivered so far into the active session's buffer."""
        if self._session is None:
            return
        error = self._drain_frames()
        if error is not None:
            self._abort(error)

    def _begin(self, event: BoundaryEvent) -> None:
        if self._session is not None:
            logger.warning("Begin received while a session is active, ignoring")
            return

        capture = self.capture_factory()
        try:
            capture.start_recording()
        except DeviceUnavailable as e:
            logger.error(f"Could not start recording: {e.reason}")
            self.deliveries.put(CaptureFailureNotice(reason=e.reason, occurred_at=event.wall_time))
            return

        self._capture = capture
        self._session = RecordingSession(started_at=event.wall_time, started_monotonic=event.monotonic)
        logger.info(f"Session started at {event.wall_time.isoformat(timespec='seconds')}")

    def _end(self) -> None:
        if self._session is None:
            logger.debug("End received with no active session, ignoring")
            return
        self._finalize()

    def _finalize(self) -> None:
        self._capture.stop_recording()
        error = self._drain_frames()
        if error is not None:
            self._abort(error)
            return

        session = self._session
        session.state = SessionState.FINALIZED
        self.sessions_finalized += 1
        logger.info(f"Session finalized: {session.frame_count} frames, {session.duration_seconds:.1f}s")
        self._persist(session)

    def _abort(self, error: CaptureInterrupted) -> None:
        self._capture.stop_recording()

        session = self._session
        session.state = SessionState.ABORTED
        session.capture_error = error.reason
        self.sessions_aborted += 1
        logger.warning(f"Session aborted after {session.frame_count} frames: {error.reason}")
        self._persist(session)

    def _drain_frames(self) -> Optional[CaptureInterrupted]:
        frames = self._capture.frames
        while True:
            try:
                item = frames.get_nowait()
            except queue.Empty:
                return None
            if isinstance(item, CaptureInterrupted):
                return item
            self._session.append(item)

    def _persist(self, session: RecordingSession) -> None:
        """Write the session to disk, then hand the artifact to the delivery pipeline."""
        self._session = None
        self._capture = None

        try:
            artifact = self.store.write_session(session)
        except (OSError, wave.Error) as e:
            logger.error(f"Failed to save recording: {e}")
            self.deliveries.put(CaptureFailureNotice(reason=f"Could not save recording: {e}"))
            return

        self.deliveries.put(artifact)
