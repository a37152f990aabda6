"""Main entry point for the Earwig voice memo daemon."""

import sys
import queue
import signal
import argparse
import logging
from pathlib import Path

from pubsub import pub

from earwig import __version__
from earwig.audio.capture import AudioCapture
from earwig.delivery import (
    DeliveryPipeline,
    NotificationClient,
    OutcomePublisher,
    TranscriptionClient,
    log_outcome,
)
from earwig.input.monitor import InputMonitor
from earwig.services.session_manager import RecordingSessionManager
from earwig.storage.file_manager import ArtifactStore

from .config import EarwigConfig

logger = logging.getLogger(__name__)


class Daemon:

    def __init__(self, config_path: str = None, log_level: str = None):
        # Load configuration
        self.config = EarwigConfig(config_path)
        # Set up logging (command line overrides config)
        level = log_level or self.config.get('logging.level', 'INFO')
        setup_logging(self.config, level)
        self.should_exit = False

    def init(self):
        logger.info("Initializing components...")

        device_path = self.config.get_input_device_path()
        audio_device = self.config.get_audio_device()
        chunk_size = self.config.get_chunk_size()

        logger.info(f"  Input device: {device_path} (button {self.config.get_button()})")
        logger.info(f"  Audio device: {audio_device}")
        logger.info(f"  Output directory: {self.config.get_output_directory()}")
        logger.info(f"  Transcription URL: {self.config.get('transcription.url')}")
        logger.info(f"  Notification URL: {self.config.get('notification.url')}")

        # Input -> session manager, session manager -> delivery
        self.boundary_events = queue.Queue()
        self.deliveries = queue.Queue()

        self.store = ArtifactStore(self.config.get_output_directory())

        self.input_monitor = InputMonitor(
            device_path=device_path,
            events=self.boundary_events,
            button=self.config.get_button(),
            reconnect_delay=self.config.get_reconnect_delay(),
        )
        self.session_manager = RecordingSessionManager(
            events=self.boundary_events,
            deliveries=self.deliveries,
            store=self.store,
            capture_factory=lambda: AudioCapture(device=audio_device, chunk_size=chunk_size),
        )

        self.outcome_publisher = OutcomePublisher()
        pub.subscribe(log_outcome, self.outcome_publisher.topic)

        self.delivery_pipeline = DeliveryPipeline(
            deliveries=self.deliveries,
            transcriber=TranscriptionClient(
                url=self.config.get('transcription.url'),
                content_type=self.config.get('transcription.content_type', 'audio/wav'),
                headers=self.config.get('transcription.headers', {}),
                response_field=self.config.get('transcription.response_field', 'text'),
                timeout_seconds=float(self.config.get('transcription.timeout_seconds', 120)),
            ),
            notifier=NotificationClient(
                url=self.config.get('notification.url'),
                headers=self.config.get('notification.headers', {}),
                timeout_seconds=float(self.config.get('notification.timeout_seconds', 10)),
            ),
            result_callback=self.outcome_publisher.get_callback(),
        )

    def run(self):
        signal.signal(signal.SIGTERM, self._request_exit)
        signal.signal(signal.SIGINT, self._request_exit)

        self.delivery_pipeline.start()
        self.session_manager.start()
        self.input_monitor.start()
        logger.info("All components started, daemon is running")

        try:
            while not self.should_exit:
                signal.pause()
        finally:
            self.cleanup()

    def _request_exit(self, signum, frame):
        logger.info(f"Received signal {signum}, shutting down")
        self.should_exit = True

    def cleanup(self):
        self.input_monitor.stop()
        self.session_manager.stop()
        self.delivery_pipeline.stop()
        logger.info("Daemon shut down")


def setup_logging(config, level: str = "INFO") -> None:
    """Set up logging configuration from YAML config."""
    log_file_path = config.get('logging.file_path')
    console_output = config.get('logging.console_output', True)

    handlers = []

    # File handler - only when a log file is configured
    if log_file_path:
        Path(log_file_path).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file_path)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
        ))
        handlers.append(file_handler)

    # Console handler - the journal picks this up when run as a service
    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
        handlers.append(console_handler)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in handlers:
        root_logger.addHandler(handler)

    logger = logging.getLogger(__name__)
    logger.info("=" * 50)
    logger.info(f"Earwig voice memo daemon v{__version__} starting up")
    if log_file_path:
        logger.info(f"Log file: {log_file_path}")
    logger.info(f"Log level set to: {level}")
    logger.info("=" * 50)


def main() -> None:
    """Main entry point for the Earwig daemon."""
    parser = argparse.ArgumentParser(
        description="Earwig - push-to-talk voice memos with transcription and phone notifications",
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration YAML file (default: $EARWIG_CONFIG or ~/.config/earwig/earwig.yaml)"
    )

    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level (default: from config, else INFO)"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"Earwig v{__version__}"
    )

    args = parser.parse_args()

    try:
        daemon = Daemon(args.config, args.log_level)
        daemon.init()
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        logging.error(f"Startup error: {e}")
        sys.exit(1)

    daemon.run()


if __name__ == "__main__":
    main()
