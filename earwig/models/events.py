"""Session boundary events produced by the input monitor."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class BoundaryKind(Enum):
    """Press starts a session, release ends it."""
    BEGIN = "begin"
    END = "end"


@dataclass(frozen=True)
class BoundaryEvent:
    """A Begin/End signal derived from the hardware button state."""
    kind: BoundaryKind
    monotonic: float  # time.monotonic() when the device event was read
    wall_time: datetime  # Local time, used to name the artifact
