"""Input monitor: turns button presses on an evdev device into session boundary events."""

import queue
import time
import logging
from datetime import datetime
from enum import Enum
from threading import Thread, Event
from typing import Any, Callable, Optional, Union

from evdev import InputDevice, ecodes

from ..errors import DeviceUnavailable
from ..models.events import BoundaryEvent, BoundaryKind

logger = logging.getLogger(__name__)

KEY_UP = 0
KEY_DOWN = 1


class MonitorState(Enum):
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"


def resolve_button_code(button: Union[str, int]) -> int:
    """Resolve a key name such as 'BTN_LEFT' (or a numeric code) to an evdev key code."""
    if isinstance(button, int):
        return button
    if str(button).isdigit():
        return int(button)
    code = ecodes.ecodes.get(str(button).upper())
    if not isinstance(code, int):
        raise ValueError(f"Unknown input button: {button}")
    return code


class InputMonitor:
    """Watches one input device and emits Begin/End events for one button.

    The monitor is a two-state machine. While DISCONNECTED each step tries to
    open the device and waits ``reconnect_delay`` seconds on failure. While
    CONNECTED a step reads events until the device errors, then goes back to
    DISCONNECTED and waits ``reconnect_delay`` seconds before the next open.
    Presses made while disconnected are lost.
    """

    def __init__(self,
                 device_path: str,
                 events: queue.Queue,
                 button: Union[str, int] = 'BTN_LEFT',
                 reconnect_delay: float = 5.0,
                 device_factory: Callable[[str], Any] = InputDevice):
        self.device_path = device_path
        self.events = events
        self.button_code = resolve_button_code(button)
        self.reconnect_delay = reconnect_delay
        self.device_factory = device_factory

        self.state = MonitorState.DISCONNECTED
        self.device = None
        self.last_error: Optional[DeviceUnavailable] = None
        self.disconnects = 0

        self.stop_event = Event()
        self.thread: Optional[Thread] = None

    def start(self) -> None:
        """Run the monitor loop in a background thread."""
        if self.thread and self.thread.is_alive():
            return
        self.stop_event.clear()
        self.thread = Thread(target=self.run, daemon=True)
        self.thread.name = "InputMonitorThread"
        self.thread.start()
        logger.info(f"Input monitor started for {self.device_path}")

    def stop(self) -> None:
        self.stop_event.set()
        self._close_device()
        if self.thread:
            self.thread.join(timeout=2.0)
            if self.thread.is_alive():
                logger.warning("Input monitor thread did not stop cleanly")
        logger.info("Input monitor stopped")

    def run(self) -> None:
        while not self.stop_event.is_set():
            self.step()

    def step(self) -> MonitorState:
        """Perform one state transition and return the new state."""
        if self.state is MonitorState.DISCONNECTED:
            self._try_connect()
        else:
            self._read_until_error()
        return self.state

    def _try_connect(self) -> None:
        try:
            self.device = self.device_factory(self.device_path)
        except OSError as e:
            self.last_error = DeviceUnavailable(f"Failed to open input device {self.device_path}: {e}")
            logger.warning(f"{self.last_error.reason}; retrying in {self.reconnect_delay}s")
            self.stop_event.wait(self.reconnect_delay)
            return

        self.state = MonitorState.CONNECTED
        name = getattr(self.device, 'name', None) or 'Unknown'
        logger.info(f"Input device connected: {self.device_path} ({name})")

    def _read_until_error(self) -> None:
        device = self.device
        if device is None:
            self.state = MonitorState.DISCONNECTED
            return
        try:
            for event in device.read_loop():
                if self.stop_event.is_set():
                    break
                self._handle_event(event)
        except (OSError, ValueError) as e:
            if not self.stop_event.is_set():
                self.last_error = DeviceUnavailable(f"Input device {self.device_path} lost: {e}")
                self.disconnects += 1
                logger.error(f"{self.last_error.reason}; reconnecting in {self.reconnect_delay}s")

        self._close_device()
        self.state = MonitorState.DISCONNECTED
        self.stop_event.wait(self.reconnect_delay)

    def _handle_event(self, event) -> None:
        if event.type != ecodes.EV_KEY or event.code != self.button_code:
            return

        if event.value == KEY_DOWN:
            kind = BoundaryKind.BEGIN
        elif event.value == KEY_UP:
            kind = BoundaryKind.END
        else:
            return  # autorepeat

        logger.debug(f"Button {'pressed' if kind is BoundaryKind.BEGIN else 'released'}")
        self.events.put(BoundaryEvent(kind=kind, monotonic=time.monotonic(), wall_time=datetime.now()))

    def _close_device(self) -> None:
        device, self.device = self.device, None
        if device is None:
            return
        try:
            device.close()
        except OSError as e:
            logger.debug(f"Error closing input device: {e}")
