"""Interactive prompts."""

from ggpr.ui.gates import AutoConfirmGate, ConfirmationGate, InteractiveGate, create_gate

__all__ = [
    "AutoConfirmGate",
    "ConfirmationGate",
    "InteractiveGate",
    "create_gate",
]
