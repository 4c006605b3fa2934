"""Board module - the controller that owns one task forest and its selection."""

from .controller import ConfirmationRequired, TodoBoard

__all__ = ["ConfirmationRequired", "TodoBoard"]
