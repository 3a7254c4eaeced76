"""Typed exceptions for order engine failures."""


class OrderError(Exception):
    """Base class for service order engine errors."""


class ValidationError(OrderError):
    """
    Caller-supplied data violates a field constraint.

    Recoverable by the caller. `fields` lists every offending field path
    (e.g. "customer_phone", "line_items.1.unit_price").
    """

    def __init__(self, field: str | list[str], message: str):
        self.fields = [field] if isinstance(field, str) else list(field)
        self.message = message
        super().__init__(f"Invalid {', '.join(self.fields)}: {message}")

    @property
    def field(self) -> str:
        """First offending field."""
        return self.fields[0]


class NotFound(OrderError):
    """Referenced order does not exist. Caller should treat as nothing to edit."""

    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__(f"Service order {order_id} not found")


class StoreError(OrderError):
    """
    Underlying persistence failed.

    Propagated unchanged; never retried or swallowed by the engine. Partial
    writes may have happened, so callers must re-fetch to see actual state.
    """

    def __init__(self, operation: str, message: str):
        self.operation = operation
        super().__init__(f"Store operation '{operation}' failed: {message}")
