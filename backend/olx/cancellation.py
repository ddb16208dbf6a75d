"""Cooperative cancellation for scraping operations."""

from typing import Optional

from .errors import CancellationError


class CancellationToken:
    """
    Shared flag passed down the call chain.

    Operations check it at fixed points (before starting, and once the page
    has settled); it never interrupts an in-flight navigation.
    """

    def __init__(self):
        self._cancelled = False
        self.reason: Optional[str] = None

    def cancel(self, reason: Optional[str] = None):
        self._cancelled = True
        self.reason = reason

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def raise_if_cancelled(self, operation: Optional[str] = None):
        if self._cancelled:
            raise CancellationError(operation)


def is_cancelled(token: Optional[CancellationToken]) -> bool:
    """True if a token was given and has been signaled."""
    return token is not None and token.cancelled


def check_cancelled(token: Optional[CancellationToken], operation: Optional[str] = None):
    """Raise CancellationError if the (optional) token has been signaled."""
    if token is not None:
        token.raise_if_cancelled(operation)
