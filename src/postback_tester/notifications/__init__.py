"""Notification exports."""

from .notifier import (
    ConsoleNotifier,
    Notification,
    Notifier,
    RecordingNotifier,
    Variant,
)

__all__ = [
    "ConsoleNotifier",
    "Notification",
    "Notifier",
    "RecordingNotifier",
    "Variant",
]
