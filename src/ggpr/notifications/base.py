"""Progress notification interface.

The workflow core reports progress as (stage, message, level) triples and
never writes to the console itself; the notifier decides how to render them.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Literal

from rich.markup import escape

if TYPE_CHECKING:
    from rich.console import Console

logger = logging.getLogger(__name__)

NotificationLevel = Literal["debug", "info", "success", "warning", "error"]

LOG_LEVELS: dict[NotificationLevel, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "success": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


class Notifier(ABC):
    """Abstract base class for progress notification sinks."""

    @abstractmethod
    def notify(
        self,
        stage: str,
        message: str,
        level: NotificationLevel = "info",
    ) -> None:
        """Emit a progress notification.

        Args:
            stage: Workflow stage name, e.g. "BRANCH" or "PR-CREATE"
            message: Notification body
            level: Severity level
        """

    def debug(self, stage: str, message: str) -> None:
        self.notify(stage, message, "debug")

    def info(self, stage: str, message: str) -> None:
        """Send an info notification."""
        self.notify(stage, message, "info")

    def success(self, stage: str, message: str) -> None:
        """Send a success notification."""
        self.notify(stage, message, "success")

    def warning(self, stage: str, message: str) -> None:
        """Send a warning notification."""
        self.notify(stage, message, "warning")

    def error(self, stage: str, message: str) -> None:
        """Send an error notification."""
        self.notify(stage, message, "error")


class ConsoleNotifier(Notifier):
    """Console notifier using Rich."""

    def __init__(self, console: Console | None = None, show_debug: bool = False) -> None:
        from rich.console import Console

        self.console = console or Console()
        self.show_debug = show_debug

    def notify(
        self,
        stage: str,
        message: str,
        level: NotificationLevel = "info",
    ) -> None:
        """Print notification to console with appropriate styling."""
        if level == "debug" and not self.show_debug:
            return

        styles = {
            "debug": "dim",
            "info": "blue",
            "success": "green",
            "warning": "yellow",
            "error": "red",
        }
        icons = {
            "debug": ".",
            "info": "i",
            "success": "+",
            "warning": "!",
            "error": "x",
        }

        style = styles.get(level, "blue")
        icon = icons.get(level, "i")

        # Multi-line bodies (diff summaries, PR descriptions) go below the header
        first, _, rest = message.partition("\n")
        header = escape(f"[{icon}] [{stage}]")
        self.console.print(f"[{style}]{header}[/{style}] {escape(first)}", highlight=False)
        if rest:
            self.console.print(rest, highlight=False, markup=False)


class LoggingNotifier(Notifier):
    """Forwards notifications to the standard logging system."""

    def __init__(self, logger_name: str = "ggpr.progress") -> None:
        self._logger = logging.getLogger(logger_name)

    def notify(
        self,
        stage: str,
        message: str,
        level: NotificationLevel = "info",
    ) -> None:
        self._logger.log(LOG_LEVELS.get(level, logging.INFO), f"[{stage}] {message}")


class NullNotifier(Notifier):
    """No-op notifier for testing or when notifications are disabled."""

    def notify(
        self,
        stage: str,
        message: str,
        level: NotificationLevel = "info",
    ) -> None:
        """Do nothing."""


class CompositeNotifier(Notifier):
    """Sends notifications to multiple sinks.

    A failing sink is logged and skipped so the others still receive the
    notification.
    """

    def __init__(self, notifiers: list[Notifier]) -> None:
        self.notifiers = notifiers

    def notify(
        self,
        stage: str,
        message: str,
        level: NotificationLevel = "info",
    ) -> None:
        for notifier in self.notifiers:
            try:
                notifier.notify(stage, message, level)
            except Exception as e:
                logger.warning(f"Notifier {type(notifier).__name__} failed: {e}")
