"""Yes/no and selection prompts used between workflow steps."""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod

from rich.console import Console
from rich.markup import escape


class ConfirmationGate(ABC):
    """Asks the user to approve a step or pick from a list."""

    @abstractmethod
    async def confirm(self, message: str) -> bool:
        """Ask a yes/no question.

        Args:
            message: Question shown to the user

        Returns:
            True if confirmed, False otherwise
        """

    @abstractmethod
    async def select(self, message: str, options: list[str]) -> str | None:
        """Ask the user to pick one of ``options``.

        Returns:
            The chosen option, or None if nothing valid was chosen
        """


class InteractiveGate(ConfirmationGate):
    """Prompts on the terminal.

    Input is read on a worker thread so every prompt is an awaited
    suspension point of the event loop.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    async def confirm(self, message: str) -> bool:
        return await asyncio.to_thread(self._ask_yes_no, message)

    async def select(self, message: str, options: list[str]) -> str | None:
        if not options:
            return None
        return await asyncio.to_thread(self._ask_choice, message, options)

    def _ask_yes_no(self, message: str) -> bool:
        self.console.print(f"\n[green]{escape(message)}[/green]")
        response = self.console.input("[bold](y/n): [/bold]").strip().lower()
        return response in ("y", "yes")

    def _ask_choice(self, message: str, options: list[str]) -> str | None:
        self.console.print(f"\n[yellow]{escape(message)}[/yellow]")
        for index, option in enumerate(options, 1):
            self.console.print(f"  [cyan]{index}[/cyan]) {escape(option)}")
        response = self.console.input("[bold]Enter number: [/bold]").strip()

        if response in options:
            return response
        if not response.isdigit():
            return None
        index = int(response)
        if 1 <= index <= len(options):
            return options[index - 1]
        return None


class AutoConfirmGate(ConfirmationGate):
    """Answers yes to every question (``--yes``).

    Selections cannot be answered automatically, so they are delegated to
    an interactive gate.
    """

    def __init__(self, console: Console | None = None, selector: ConfirmationGate | None = None) -> None:
        self.console = console or Console()
        self.selector = selector or InteractiveGate(self.console)

    async def confirm(self, message: str) -> bool:
        """Confirm action (auto-yes)."""
        self.console.print(f"[yellow]\\[Auto-confirmed] {escape(message)}[/yellow]")
        return True

    async def select(self, message: str, options: list[str]) -> str | None:
        return await self.selector.select(message, options)


def create_gate(auto_confirm: bool, console: Console | None = None) -> ConfirmationGate:
    """Build the gate matching the ``--yes`` flag."""
    if auto_confirm:
        return AutoConfirmGate(console)
    return InteractiveGate(console)
