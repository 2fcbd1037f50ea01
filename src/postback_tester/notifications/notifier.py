"""User-facing notifications for test and export outcomes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol

import click


class Variant(str, Enum):
    """Notification severity."""

    DEFAULT = "default"
    DESTRUCTIVE = "destructive"


@dataclass(frozen=True)
class Notification:
    """Short message summarising an outcome."""

    title: str
    description: str
    variant: Variant = Variant.DEFAULT


class Notifier(Protocol):  # pylint: disable=too-few-public-methods
    """Protocol for notification sinks."""

    def notify(self, notification: Notification) -> None: ...


class ConsoleNotifier:  # pylint: disable=too-few-public-methods
    """Print notifications to the terminal, destructive ones to stderr in red."""

    def notify(self, notification: Notification) -> None:
        destructive = notification.variant is Variant.DESTRUCTIVE
        click.secho(
            f"{notification.title}: {notification.description}",
            fg="red" if destructive else "green",
            err=destructive,
        )


class RecordingNotifier:  # pylint: disable=too-few-public-methods
    """Keep notifications in memory."""

    def __init__(self) -> None:
        self.notifications: list[Notification] = []

    def notify(self, notification: Notification) -> None:
        self.notifications.append(notification)
