"""Exceptions raised by the kitchen tracker."""

from __future__ import annotations


class ValidationError(ValueError):
    """A request was rejected locally, before anything was sent to the backend."""


class TransportError(RuntimeError):
    """A backend call failed: non-2xx status, network failure or bad payload."""

    def __init__(self, action: str, message: str) -> None:
        super().__init__(f"{action}: {message}")
        self.action = action
