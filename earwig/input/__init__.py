"""Hardware button input."""

from .monitor import InputMonitor, MonitorState, resolve_button_code

__all__ = [
    'InputMonitor',
    'MonitorState',
    'resolve_button_code',
]
