"""Data Transfer Objects — plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime

from intake.domain.model.order import Order

_TS_FORMAT = "%Y-%m-%d %H:%M"


# --- Input ------------------------------------------------------------------


@dataclass(frozen=True)
class OrderItemSpec:
    """What the customer asked for: product ID, quantity, free-text modifiers."""

    product_id: str
    quantity: int
    flavor: str = ""
    special_instructions: str = ""


@dataclass(frozen=True)
class CheckoutRequest:

    customer_id: str
    items: list[OrderItemSpec]
    delivery_mode: str  # "pickup" | "delivery"
    payment_method: str  # "gcash" | "cod"
    address: str | None = None
    preferred_date: date | None = None
    time_slot: str = "any"
    reference_number: str | None = None


# --- Output -----------------------------------------------------------------


@dataclass(frozen=True)
class OrderLineItemDTO:

    product_id: str
    product_name: str
    quantity: int
    unit_price: str  # formatted, e.g. "₱15.00"
    line_total: str


@dataclass(frozen=True)
class StatusHistoryDTO:

    status: str
    timestamp: str
    actor: str | None
    note: str | None
    automatic_update: bool


@dataclass(frozen=True)
class OrderDTO:
    """A complete order as displayed to the user."""

    order_number: str
    customer_id: str
    status: str
    items: list[OrderLineItemDTO]
    subtotal: str
    delivery_fee: str
    cod_surcharge: str
    total: str
    total_items: int
    delivery_mode: str
    payment_method: str
    payment_status: str
    requires_manual_approval: bool
    approval_reasons: list[str]
    auto_confirm_at: str | None
    value_tier: str
    created_at: str
    history: list[StatusHistoryDTO] = field(default_factory=list)
    driver_id: str | None = None
    delivery_attempts: int = 0
    cancellation_reason: str | None = None


@dataclass(frozen=True)
class AvailabilityDTO:

    product_id: str
    available: int
    status: str


def _fmt(ts: datetime | None) -> str | None:
    return ts.strftime(_TS_FORMAT) if ts is not None else None


def order_to_dto(order: Order) -> OrderDTO:
    return OrderDTO(
        order_number=order.order_number,  # type: ignore[arg-type]
        customer_id=order.customer_id,
        status=order.status.value,
        items=[
            OrderLineItemDTO(
                product_id=item.product_id,
                product_name=item.product_name,
                quantity=item.quantity.value,
                unit_price=str(item.unit_price),
                line_total=str(item.line_total),
            )
            for item in order.items
        ],
        subtotal=str(order.summary.subtotal),
        delivery_fee=str(order.summary.delivery_fee),
        cod_surcharge=str(order.summary.cod_surcharge),
        total=str(order.total),
        total_items=order.summary.total_items,
        delivery_mode=order.delivery.mode.value,
        payment_method=order.payment.method.value,
        payment_status=order.payment.status.value,
        requires_manual_approval=order.processing.requires_manual_approval,
        approval_reasons=sorted(r.value for r in order.processing.approval_reasons),
        auto_confirm_at=_fmt(order.processing.auto_confirm_at),
        value_tier=order.value_tier,
        created_at=order.created_at.strftime(_TS_FORMAT),
        history=[
            StatusHistoryDTO(
                status=entry.status.value,
                timestamp=entry.timestamp.strftime(_TS_FORMAT),
                actor=entry.actor,
                note=entry.note,
                automatic_update=entry.automatic_update,
            )
            for entry in order.status_history
        ],
        driver_id=(order.driver.driver_id or None) if order.driver else None,
        delivery_attempts=len(order.driver.attempts) if order.driver else 0,
        cancellation_reason=order.cancellation.reason.value if order.cancellation else None,
    )
