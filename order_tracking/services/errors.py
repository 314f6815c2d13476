# order_tracking/services/errors.py
from __future__ import annotations


class OrderNotFound(Exception):
    def __init__(self, order_number: str) -> None:
        super().__init__(f"order not found: {order_number!r}")
        self.order_number = order_number


class BadRequest(Exception):
    """Request rejected by a business rule; `message` is safe to show the customer."""

    def __init__(self, message: str, *, reason: str = "bad_request") -> None:
        super().__init__(message)
        self.message = message
        self.reason = reason
