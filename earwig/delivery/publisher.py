"""Delivery outcome publisher for pub/sub observers."""

import logging
from typing import Callable
from pubsub import pub
from ..models.delivery import DeliveryOutcome

logger = logging.getLogger(__name__)

OUTCOME_TOPIC = "delivery.outcome"


class OutcomePublisher:
    """Publishes delivery outcomes using pubsub.pub; listeners must not block."""

    def __init__(self, topic: str = OUTCOME_TOPIC):
        """Initialize outcome publisher.

        Args:
            topic: Pub/sub topic name for delivery outcomes
        """
        self.topic = topic
        logger.info(f"OutcomePublisher initialized with topic: {topic}")

    def publish_outcome(self, outcome: DeliveryOutcome) -> None:
        """Publish a delivery outcome to the pub/sub topic.

        Args:
            outcome: DeliveryOutcome to publish
        """
        pub.sendMessage(self.topic, outcome=outcome)
        logger.debug(f"Published delivery outcome: {outcome.status.value}")

    def get_callback(self) -> Callable[[DeliveryOutcome], None]:
        return self.publish_outcome


def log_outcome(outcome: DeliveryOutcome) -> None:
    """Pub/sub listener that records each outcome in the log."""
    name = getattr(outcome.item, 'filename', 'no file')
    logger.info(f"Delivery outcome for {name}: {outcome.status.value}, notified={outcome.notified}")
