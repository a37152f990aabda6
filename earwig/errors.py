"""Error taxonomy for the recording pipeline."""


class EarwigError(Exception):
    """Base class for recoverable pipeline errors."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class DeviceUnavailable(EarwigError):
    """Input or audio device could not be opened or read."""


class CaptureInterrupted(EarwigError):
    """Audio source failed while a session was active."""


class DeliveryFailure(EarwigError):
    """Transcription call failed."""


class NotificationFailure(EarwigError):
    """Notification call failed."""
