"""Domain errors raised by the calculator and the order workflow."""

from __future__ import annotations


class OrderFlowError(Exception):
    """Base class for every error raised by the order pipeline core."""


class InvalidInput(OrderFlowError, ValueError):
    """Malformed or out-of-range input. Not retryable; the caller re-prompts."""


class BelowMinimumDownPayment(OrderFlowError):
    def __init__(self, minimum: int, supplied: int | float | None = None):
        self.minimum = minimum
        self.supplied = supplied
        super().__init__(f"TDP minimum untuk program ini adalah {minimum}")


class IllegalTransition(OrderFlowError):
    """The requested action is not allowed for this status and role.

    Nothing is mutated when this is raised.
    """

    def __init__(self, from_status, actor_role, action, reason: str | None = None):
        self.from_status = from_status
        self.actor_role = actor_role
        self.action = action
        self.reason = reason
        message = f"Aksi {_label(action)!r} tidak diizinkan untuk role {_label(actor_role)!r} pada status {_label(from_status)!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class OrderNotFound(OrderFlowError, LookupError):
    def __init__(self, order_id: int):
        self.order_id = order_id
        super().__init__(f"Order {order_id} tidak ditemukan")


def _label(value) -> str:
    return getattr(value, "value", value)


class ActionNotAllowed(OrderFlowError, PermissionError):
    """The acting user's role may not perform this operation at all."""
