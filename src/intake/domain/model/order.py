"""Order aggregate — the core of the domain.

The Order is an aggregate root that owns its line items, its monetary
summary and its status history. Status changes are NOT made directly on
the aggregate by callers: ``OrderStateMachine`` is the only component that
calls ``record_status`` because every status change is coupled to stock
and customer side effects.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from intake.domain.exceptions import ValidationError
from intake.domain.model.value_objects import Money, Quantity


class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    READY_FOR_PICKUP = "ready_for_pickup"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"
    RETURNED = "returned"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset(
    {OrderStatus.COMPLETED, OrderStatus.CANCELLED, OrderStatus.RETURNED}
)


class DeliveryMode(Enum):
    PICKUP = "pickup"
    DELIVERY = "delivery"


class PaymentMethod(Enum):
    GCASH = "gcash"
    COD = "cod"  # deferred cash, collected by the driver


class PaymentStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


class ApprovalReason(Enum):
    LOW_STOCK = "low_stock"
    SENSITIVE_PRODUCT = "sensitive_product"
    FIRST_TIME_COD = "first_time_cod"
    HIGH_VALUE = "high_value"
    MANUAL_REVIEW = "manual_review"


class StockState(Enum):
    """What the order currently holds in the stock ledger."""

    NONE = "none"
    RESERVED = "reserved"
    COMMITTED = "committed"
    RELEASED = "released"
    RETURNED = "returned"


class CancellationReason(Enum):
    CUSTOMER_REQUEST = "customer_request"
    PAYMENT_FAILED = "payment_failed"
    OUT_OF_STOCK = "out_of_stock"
    DELIVERY_FAILED = "delivery_failed"
    DUPLICATE_ORDER = "duplicate_order"
    FRAUD_SUSPECTED = "fraud_suspected"
    OTHER = "other"


class AttemptOutcome(Enum):
    SUCCESSFUL = "successful"
    FAILED_NOT_HOME = "failed_not_home"
    FAILED_REFUSED = "failed_refused"
    FAILED_OTHER = "failed_other"


# ---------------------------------------------------------------------------
# Constants for business rules
# ---------------------------------------------------------------------------
MAX_LINE_ITEMS = 50
VALUE_TIERS = (
    (Money(Decimal("500")), "low"),
    (Money(Decimal("1500")), "medium"),
    (Money(Decimal("3000")), "high"),
)


@dataclass(frozen=True)
class OrderItem:
    """Snapshot of a product taken at order-creation time.

    Immutable: catalog price changes never alter a placed order.
    """

    product_id: str
    product_name: str
    unit_price: Money  # locked at order-creation time
    quantity: Quantity
    flavor: str = ""
    special_instructions: str = ""

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity.value


@dataclass(frozen=True)
class OrderSummary:

    subtotal: Money
    delivery_fee: Money
    cod_surcharge: Money
    total_items: int

    @property
    def total_amount(self) -> Money:
        return self.subtotal + self.delivery_fee + self.cod_surcharge


@dataclass(frozen=True)
class DeliveryInfo:

    mode: DeliveryMode
    address: str | None = None
    preferred_date: date | None = None
    time_slot: str = "any"  # morning | afternoon | any


@dataclass
class PaymentInfo:

    method: PaymentMethod
    status: PaymentStatus = PaymentStatus.PENDING
    reference_number: str | None = None
    amount_collected: Money | None = None
    collected_by: str | None = None
    paid_at: datetime | None = None


@dataclass(frozen=True)
class StatusHistoryEntry:

    status: OrderStatus
    timestamp: datetime
    actor: str | None = None
    note: str | None = None

    @property
    def automatic_update(self) -> bool:
        return self.actor is None


@dataclass
class ProcessingInfo:

    requires_manual_approval: bool = False
    approval_reasons: frozenset[ApprovalReason] = frozenset()
    auto_confirm_at: datetime | None = None
    approved_by: str | None = None
    approved_at: datetime | None = None
    is_auto_processed: bool = False


@dataclass(frozen=True)
class DeliveryAttempt:

    attempt_number: int
    timestamp: datetime
    outcome: AttemptOutcome
    note: str | None = None


@dataclass
class DriverAssignment:

    driver_id: str
    assigned_at: datetime
    attempts: list[DeliveryAttempt] = field(default_factory=list)


@dataclass(frozen=True)
class CancellationRecord:

    reason: CancellationReason
    cancelled_at: datetime
    cancelled_by: str | None = None
    note: str | None = None


@dataclass
class Order:
    """Aggregate root for customer orders.

    Use the ``Order.create()`` factory for new orders — it enforces all
    business rules.  The ``__init__`` is intentionally simple so the
    repository can reconstitute persisted orders without re-validating.
    """

    order_number: str | None
    customer_id: str
    items: list[OrderItem]
    summary: OrderSummary
    delivery: DeliveryInfo
    payment: PaymentInfo
    created_at: datetime
    status: OrderStatus = OrderStatus.PENDING
    status_history: list[StatusHistoryEntry] = field(default_factory=list)
    processing: ProcessingInfo = field(default_factory=ProcessingInfo)
    stock_state: StockState = StockState.NONE
    driver: DriverAssignment | None = None
    cancellation: CancellationRecord | None = None
    has_fragile_items: bool = False
    has_frozen_items: bool = False
    # Bumped by every successful save; a stale copy cannot be saved over a newer one.
    version: int = 0

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def create(
        customer_id: str,
        items: list[OrderItem],
        delivery: DeliveryInfo,
        payment_method: PaymentMethod,
        delivery_fee: Money,
        cod_surcharge: Money,
        created_at: datetime,
        reference_number: str | None = None,
    ) -> Order:
        """Create a new order, enforcing all invariants.

        The order starts without a status history; ``OrderStateMachine.
        initialize`` records the first entry.
        """
        if not customer_id or not customer_id.strip():
            raise ValidationError("Customer is required")
        if not items:
            raise ValidationError("Order must contain at least one item")
        if len(items) > MAX_LINE_ITEMS:
            raise ValidationError(f"Maximum {MAX_LINE_ITEMS} items per order")
        if delivery.mode is DeliveryMode.DELIVERY and not (delivery.address or "").strip():
            raise ValidationError("Delivery address is required for delivery orders")

        summary = OrderSummary(
            subtotal=Money.total(item.line_total for item in items),
            delivery_fee=delivery_fee if delivery.mode is DeliveryMode.DELIVERY else Money.zero(),
            cod_surcharge=cod_surcharge if payment_method is PaymentMethod.COD else Money.zero(),
            total_items=sum(item.quantity.value for item in items),
        )
        return Order(
            order_number=None,
            customer_id=customer_id.strip(),
            items=list(items),
            summary=summary,
            delivery=delivery,
            payment=PaymentInfo(method=payment_method, reference_number=reference_number),
            created_at=created_at,
        )

    # --- Status bookkeeping (OrderStateMachine only) --------------------------

    def record_status(
        self,
        status: OrderStatus,
        at: datetime,
        actor: str | None = None,
        note: str | None = None,
    ) -> StatusHistoryEntry:
        """Set the status and append one history entry.

        Timestamps never go backwards: an *at* earlier than the last entry
        is recorded as the last entry's timestamp.
        """
        if self.status_history and at < self.status_history[-1].timestamp:
            at = self.status_history[-1].timestamp
        entry = StatusHistoryEntry(status=status, timestamp=at, actor=actor, note=note)
        self.status_history.append(entry)
        self.status = status
        return entry

    # --- Driver & delivery attempts -------------------------------------------

    def assign_driver(self, driver_id: str, at: datetime) -> None:
        if self.delivery.mode is not DeliveryMode.DELIVERY:
            raise ValidationError("Only delivery orders can be assigned a driver")
        if self.status.is_terminal:
            raise ValidationError(
                f"Cannot assign a driver to an order in {self.status.value} status"
            )
        attempts = self.driver.attempts if self.driver else []
        self.driver = DriverAssignment(driver_id=driver_id, assigned_at=at, attempts=attempts)

    def record_delivery_attempt(
        self,
        outcome: AttemptOutcome,
        at: datetime,
        note: str | None = None,
    ) -> DeliveryAttempt:
        if self.driver is None:
            # Unassigned deliveries still count attempts
            self.driver = DriverAssignment(driver_id="", assigned_at=at)
        attempt = DeliveryAttempt(
            attempt_number=len(self.driver.attempts) + 1,
            timestamp=at,
            outcome=outcome,
            note=note,
        )
        self.driver.attempts.append(attempt)
        return attempt

    @property
    def failed_attempt_count(self) -> int:
        if self.driver is None:
            return 0
        return sum(
            1 for a in self.driver.attempts if a.outcome is not AttemptOutcome.SUCCESSFUL
        )

    # --- Manual hold ----------------------------------------------------------

    def hold_for_review(self, reasons: frozenset[ApprovalReason]) -> None:
        """Keep a pending order away from auto-confirmation."""
        if self.status is not OrderStatus.PENDING:
            raise ValidationError(
                f"Only pending orders can be held, order is {self.status.value}"
            )
        self.processing.approval_reasons = self.processing.approval_reasons | reasons
        self.processing.requires_manual_approval = True
        self.processing.auto_confirm_at = None

    # --- Computed properties --------------------------------------------------

    @property
    def total(self) -> Money:
        return self.summary.total_amount

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @property
    def value_tier(self) -> str:
        for ceiling, tier in VALUE_TIERS:
            if self.total < ceiling:
                return tier
        return "premium"

