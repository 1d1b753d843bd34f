"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI layer can catch them uniformly and display user-friendly messages.
Each error carries the structured context needed to render an actionable
message without re-querying state, plus a short ``kind`` string.
"""


class DomainException(Exception):
    """Base class for all domain errors."""

    kind = "domain_error"


class ValidationError(DomainException):
    """A business rule or invariant was violated."""

    kind = "validation"


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""

    kind = "not_found"


class ProductNotFoundError(EntityNotFoundError):

    kind = "product_not_found"

    def __init__(self, product_id: str) -> None:
        self.product_id = product_id
        super().__init__(f"Product not found: '{product_id}'")


class OrderNotFoundError(EntityNotFoundError):

    kind = "order_not_found"

    def __init__(self, order_number: str) -> None:
        self.order_number = order_number
        super().__init__(f"Order {order_number} not found")


class CustomerNotFoundError(EntityNotFoundError):

    kind = "customer_not_found"

    def __init__(self, customer_id: str) -> None:
        self.customer_id = customer_id
        super().__init__(f"Customer not found: '{customer_id}'")


# ---------------------------------------------------------------------------
# Capacity errors: rejected with full rollback of any partial reservation
# ---------------------------------------------------------------------------


class CapacityError(DomainException):
    """The request cannot be served with current stock or capacity."""

    kind = "capacity"


class ProductInactiveError(CapacityError):

    kind = "product_inactive"

    def __init__(self, product_id: str, product_name: str) -> None:
        self.product_id = product_id
        self.product_name = product_name
        super().__init__(f"Product is not available: {product_name}")


class InsufficientStockError(CapacityError):

    kind = "insufficient_stock"

    def __init__(
        self,
        product_id: str,
        requested: int,
        available: int,
        product_name: str | None = None,
    ) -> None:
        self.product_id = product_id
        self.requested = requested
        self.available = available
        self.product_name = product_name
        super().__init__(
            f"Insufficient stock for {product_name or product_id}. "
            f"Available: {available}, Requested: {requested}"
        )


class DailyCapReachedError(CapacityError):

    kind = "daily_cap_reached"

    def __init__(self, limit: int, count: int) -> None:
        self.limit = limit
        self.count = count
        super().__init__(
            f"Delivery slots full for today ({count}/{limit}). "
            f"Please schedule for the next business day."
        )


class OutsideBusinessHoursError(CapacityError):

    kind = "outside_business_hours"

    def __init__(self, open_hour: int, close_hour: int) -> None:
        self.open_hour = open_hour
        self.close_hour = close_hour
        super().__init__(
            f"Orders can only be placed during business hours: "
            f"{open_hour}:00-{close_hour}:00"
        )


# ---------------------------------------------------------------------------
# State errors: rejected, order untouched
# ---------------------------------------------------------------------------


class InvalidTransitionError(DomainException):

    kind = "invalid_transition"

    def __init__(self, order_number: str | None, current: str, target: str) -> None:
        self.order_number = order_number
        self.current = current
        self.target = target
        super().__init__(
            f"Cannot change status of order {order_number or '(new)'} "
            f"from {current} to {target}"
        )


# ---------------------------------------------------------------------------
# Contention errors: caller should retry the whole operation
# ---------------------------------------------------------------------------


class StockBusyError(DomainException):

    kind = "busy"

    def __init__(self, product_id: str, attempts: int) -> None:
        self.product_id = product_id
        self.attempts = attempts
        super().__init__(
            f"Stock record for product '{product_id}' is busy "
            f"(gave up after {attempts} attempts); retry the request"
        )


class OrderConflictError(DomainException):

    kind = "conflict"

    def __init__(self, order_number: str | None, expected: int, actual: int) -> None:
        self.order_number = order_number
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Order {order_number or '(new)'} was changed by another request "
            f"(version {actual}, expected {expected}); reload it and retry"
        )
