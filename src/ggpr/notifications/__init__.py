"""Progress notification sinks."""

from ggpr.notifications.base import (
    CompositeNotifier,
    ConsoleNotifier,
    LoggingNotifier,
    NotificationLevel,
    Notifier,
    NullNotifier,
)

__all__ = [
    "CompositeNotifier",
    "ConsoleNotifier",
    "LoggingNotifier",
    "NotificationLevel",
    "Notifier",
    "NullNotifier",
]
