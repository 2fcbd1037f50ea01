"""Notification sink tests."""

from __future__ import annotations

from postback_tester.notifications import (
    ConsoleNotifier,
    Notification,
    RecordingNotifier,
    Variant,
)


def test_console_notifier_prints_default_notifications_to_stdout(capsys) -> None:
    ConsoleNotifier().notify(Notification(title="Logs exported", description="2 entries"))
    captured = capsys.readouterr()

    assert "Logs exported: 2 entries" in captured.out
    assert captured.err == ""


def test_console_notifier_prints_destructive_notifications_to_stderr(capsys) -> None:
    ConsoleNotifier().notify(
        Notification(
            title="Nothing to export",
            description="Run some tests first",
            variant=Variant.DESTRUCTIVE,
        )
    )
    captured = capsys.readouterr()

    assert "Nothing to export: Run some tests first" in captured.err
    assert captured.out == ""


def test_recording_notifier_keeps_order() -> None:
    notifier = RecordingNotifier()
    first = Notification(title="one", description="a")
    second = Notification(title="two", description="b", variant=Variant.DESTRUCTIVE)

    notifier.notify(first)
    notifier.notify(second)

    assert notifier.notifications == [first, second]
