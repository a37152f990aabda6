"""Delivery pipeline: transcription then exactly one notification per artifact."""

import asyncio
import logging
import queue
import threading
from typing import Callable, Optional

from ..errors import DeliveryFailure, NotificationFailure
from ..models.delivery import AudioArtifact, CaptureFailureNotice, DeliveryItem, DeliveryOutcome
from .clients import NotificationClient, TranscriptionClient

logger = logging.getLogger(__name__)

TRANSCRIPTION_FAILED_TITLE = "Transcription Failed"
RECORDING_FAILED_TITLE = "Recording Failed"
FAILURE_PRIORITY = 3


def transcript_message(artifact: AudioArtifact, text: str) -> str:
    message = text or "(empty transcript)"
    if artifact.capture_error:
        message += f"\n\n[Recording interrupted, saved partial audio: {artifact.filename}]"
    return message


def transcription_failure_message(artifact: AudioArtifact, reason: str) -> str:
    message = f"Recording saved: {artifact.filename}\nError: {reason}"
    if artifact.capture_error:
        message += f"\nRecording interrupted: {artifact.capture_error}"
    return message


def capture_failure_message(notice: CaptureFailureNotice) -> str:
    return f"Recording failed, no audio file was saved.\nError: {notice.reason}"


class DeliveryPipeline:
    """Runs each artifact through transcription and notification on its own thread.

    The worker thread owns an asyncio event loop and handles items strictly in
    arrival order. Nothing is retried and nothing is persisted: the saved WAV
    is the durable record.
    """

    def __init__(self,
                 deliveries: queue.Queue,
                 transcriber: TranscriptionClient,
                 notifier: NotificationClient,
                 result_callback: Optional[Callable[[DeliveryOutcome], None]] = None):
        self.deliveries = deliveries
        self.transcriber = transcriber
        self.notifier = notifier
        self.result_callback = result_callback
        self.worker_thread: Optional[threading.Thread] = None

    def start(self) -> None:
        if self.worker_thread and self.worker_thread.is_alive():
            return
        self.worker_thread = threading.Thread(target=self._worker_loop, daemon=True)
        self.worker_thread.name = "DeliveryWorker"
        self.worker_thread.start()
        logger.info("Delivery pipeline started")

    def stop(self, timeout: float = 5.0) -> None:
        """Ask the worker to exit once the items ahead of it are handled."""
        self.deliveries.put(None)
        if self.worker_thread:
            self.worker_thread.join(timeout)
            if self.worker_thread.is_alive():
                logger.warning("Delivery worker did not finish in time, pending items are dropped")
        logger.info("Delivery pipeline stopped")

    def _worker_loop(self) -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)

        try:
            while True:
                item = self.deliveries.get()

                if item is None:
                    self.deliveries.task_done()
                    break

                try:
                    loop.run_until_complete(self.deliver(item))
                except Exception as e:
                    logger.error(f"Unhandled exception while delivering {item}: {e}", exc_info=True)
                finally:
                    self.deliveries.task_done()
        finally:
            loop.close()
            logger.debug("Delivery worker exiting and closing its event loop")

    async def deliver(self, item: DeliveryItem) -> DeliveryOutcome:
        """Transcribe (when there is a file) and send exactly one notification."""
        if isinstance(item, CaptureFailureNotice):
            logger.info(f"Delivering capture failure notice: {item.reason}")
            outcome = DeliveryOutcome.capture_failed(item)
            message = capture_failure_message(item)
            title, priority = RECORDING_FAILED_TITLE, FAILURE_PRIORITY
        else:
            logger.info(f"Processing recording: {item.path}")
            try:
                text = await self.transcriber.transcribe(item.path)
            except DeliveryFailure as e:
                logger.error(f"Transcription failed for {item.filename}: {e.reason}")
                outcome = DeliveryOutcome.transcription_failed(item, e.reason)
                message = transcription_failure_message(item, e.reason)
                title, priority = TRANSCRIPTION_FAILED_TITLE, FAILURE_PRIORITY
            else:
                logger.info(f"Transcription successful for {item.filename}: {text}")
                outcome = DeliveryOutcome.transcribed(item, text)
                message = transcript_message(item, text)
                title, priority = None, None

        outcome.notified = await self._notify(message, title, priority)

        if self.result_callback:
            self.result_callback(outcome)
        return outcome

    async def _notify(self, message: str, title: Optional[str], priority: Optional[int]) -> bool:
        try:
            await self.notifier.send(message, title=title, priority=priority)
        except NotificationFailure as e:
            logger.error(f"Failed to send notification: {e.reason}")
            return False
        logger.info("Notification sent successfully")
        return True
