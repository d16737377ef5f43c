"""
Checkout domain exceptions.

Raised by the order workflow and the persistence helpers. The API layer in
main.py translates them into HTTP responses.
"""

from typing import List


class CheckoutError(Exception):
    """Base class for all expected checkout failures."""


class ValidationError(CheckoutError):
    """Malformed or missing input. Carries every field-level message."""

    def __init__(self, errors: List[str]):
        super().__init__("; ".join(errors))
        self.errors = list(errors)


class NotFoundError(CheckoutError):
    """A referenced product or order does not exist."""


class InsufficientInventoryError(CheckoutError):
    """Requested quantity exceeds available stock."""


class NotificationError(CheckoutError):
    """Email dispatch failed. Logged only, never surfaced to the client."""


class DatabaseUnavailableError(CheckoutError):
    """No database configured (DATABASE_URL / DATABASE_NAME unset)."""
