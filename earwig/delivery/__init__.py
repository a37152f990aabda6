"""Delivery pipeline: transcription and notification of saved recordings."""

from .clients import TranscriptionClient, NotificationClient
from .pipeline import DeliveryPipeline
from .publisher import OutcomePublisher, OUTCOME_TOPIC, log_outcome

__all__ = [
    "TranscriptionClient",
    "NotificationClient",
    "DeliveryPipeline",
    "OutcomePublisher",
    "OUTCOME_TOPIC",
    "log_outcome",
]
