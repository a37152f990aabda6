"""Earwig - push-to-talk voice memo daemon."""

__version__ = "0.1.0"
