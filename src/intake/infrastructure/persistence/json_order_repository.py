"""JSON-file-backed implementation of OrderRepository."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from pathlib import Path

from intake.domain.exceptions import DailyCapReachedError, OrderConflictError
from intake.domain.model.order import (
    ApprovalReason,
    AttemptOutcome,
    CancellationReason,
    CancellationRecord,
    DeliveryAttempt,
    DeliveryInfo,
    DeliveryMode,
    DriverAssignment,
    Order,
    OrderItem,
    OrderStatus,
    OrderSummary,
    PaymentInfo,
    PaymentMethod,
    PaymentStatus,
    ProcessingInfo,
    StatusHistoryEntry,
    StockState,
)
from intake.domain.model.value_objects import Money, Quantity
from intake.domain.repository.order_repository import OrderRepository
from intake.infrastructure.persistence.json_file import JsonFile

ORDER_NUMBER_PREFIX = "CV"


class JsonOrderRepository(OrderRepository):

    def __init__(self, file_path: Path, daily_delivery_cap: int | None = None) -> None:
        self._file = JsonFile(file_path)
        self._daily_delivery_cap = daily_delivery_cap

    # --- OrderRepository interface --------------------------------------------

    def next_order_number(self, on: date) -> str:
        return _next_number(self._file.load(), on)

    def get_by_number(self, order_number: str) -> Order | None:
        for raw in self._file.load():
            if raw["order_number"] == order_number:
                return self._to_domain(raw)
        return None

    def list_by_status(self, status: OrderStatus) -> list[Order]:
        orders = [
            self._to_domain(raw)
            for raw in self._file.load()
            if raw["status"] == status.value
        ]
        return sorted(orders, key=lambda o: o.created_at)

    def count_delivery_orders_on(self, day: date) -> int:
        return _count_deliveries(self._file.load(), day)

    def save(self, order: Order) -> None:
        with self._file.locked():
            orders = self._file.load()
            index = None
            stored_version = 0
            if order.order_number is not None:
                for i, raw in enumerate(orders):
                    if raw["order_number"] == order.order_number:
                        index, stored_version = i, raw.get("version", 0)
                        break
            if stored_version != order.version:
                raise OrderConflictError(order.order_number, order.version, stored_version)

            if index is None:
                self._check_delivery_cap(order, orders)
            if order.order_number is None:
                order.order_number = _next_number(orders, order.created_at.date())

            raw = self._to_raw(order)
            raw["version"] = order.version + 1
            if index is None:
                orders.append(raw)
            else:
                orders[index] = raw
            self._file.persist(orders)
            order.version += 1

    def _check_delivery_cap(self, order: Order, rows: list[dict]) -> None:
        if self._daily_delivery_cap is None or order.delivery.mode is not DeliveryMode.DELIVERY:
            return
        count = _count_deliveries(rows, order.created_at.date())
        if count >= self._daily_delivery_cap:
            raise DailyCapReachedError(self._daily_delivery_cap, count)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(order: Order) -> dict:
        payment = order.payment
        processing = order.processing
        return {
            "order_number": order.order_number,
            "customer_id": order.customer_id,
            "status": order.status.value,
            "created_at": order.created_at.isoformat(),
            "items": [
                {
                    "product_id": item.product_id,
                    "product_name": item.product_name,
                    "quantity": item.quantity.value,
                    "unit_price": str(item.unit_price.amount),
                    "flavor": item.flavor,
                    "special_instructions": item.special_instructions,
                }
                for item in order.items
            ],
            "summary": {
                "subtotal": str(order.summary.subtotal.amount),
                "delivery_fee": str(order.summary.delivery_fee.amount),
                "cod_surcharge": str(order.summary.cod_surcharge.amount),
                "total_items": order.summary.total_items,
            },
            "delivery": {
                "mode": order.delivery.mode.value,
                "address": order.delivery.address,
                "preferred_date": _iso(order.delivery.preferred_date),
                "time_slot": order.delivery.time_slot,
            },
            "payment": {
                "method": payment.method.value,
                "status": payment.status.value,
                "reference_number": payment.reference_number,
                "amount_collected": (
                    str(payment.amount_collected.amount) if payment.amount_collected else None
                ),
                "collected_by": payment.collected_by,
                "paid_at": _iso(payment.paid_at),
            },
            "status_history": [
                {
                    "status": entry.status.value,
                    "timestamp": entry.timestamp.isoformat(),
                    "actor": entry.actor,
                    "note": entry.note,
                }
                for entry in order.status_history
            ],
            "processing": {
                "requires_manual_approval": processing.requires_manual_approval,
                "approval_reasons": sorted(r.value for r in processing.approval_reasons),
                "auto_confirm_at": _iso(processing.auto_confirm_at),
                "approved_by": processing.approved_by,
                "approved_at": _iso(processing.approved_at),
                "is_auto_processed": processing.is_auto_processed,
            },
            "stock_state": order.stock_state.value,
            "driver": (
                {
                    "driver_id": order.driver.driver_id,
                    "assigned_at": order.driver.assigned_at.isoformat(),
                    "attempts": [
                        {
                            "attempt_number": a.attempt_number,
                            "timestamp": a.timestamp.isoformat(),
                            "outcome": a.outcome.value,
                            "note": a.note,
                        }
                        for a in order.driver.attempts
                    ],
                }
                if order.driver
                else None
            ),
            "cancellation": (
                {
                    "reason": order.cancellation.reason.value,
                    "cancelled_at": order.cancellation.cancelled_at.isoformat(),
                    "cancelled_by": order.cancellation.cancelled_by,
                    "note": order.cancellation.note,
                }
                if order.cancellation
                else None
            ),
            "has_fragile_items": order.has_fragile_items,
            "has_frozen_items": order.has_frozen_items,
            "version": order.version,
        }

    @staticmethod
    def _to_domain(raw: dict) -> Order:
        items = [
            OrderItem(
                product_id=i["product_id"],
                product_name=i["product_name"],
                unit_price=_money(i["unit_price"]),
                quantity=Quantity(i["quantity"]),
                flavor=i.get("flavor", ""),
                special_instructions=i.get("special_instructions", ""),
            )
            for i in raw["items"]
        ]
        summary = raw["summary"]
        delivery = raw["delivery"]
        payment = raw["payment"]
        processing = raw["processing"]
        driver = raw.get("driver")
        cancellation = raw.get("cancellation")
        preferred = delivery.get("preferred_date")

        return Order(
            order_number=raw["order_number"],
            customer_id=raw["customer_id"],
            items=items,
            summary=OrderSummary(
                subtotal=_money(summary["subtotal"]),
                delivery_fee=_money(summary["delivery_fee"]),
                cod_surcharge=_money(summary["cod_surcharge"]),
                total_items=summary["total_items"],
            ),
            delivery=DeliveryInfo(
                mode=DeliveryMode(delivery["mode"]),
                address=delivery.get("address"),
                preferred_date=date.fromisoformat(preferred) if preferred else None,
                time_slot=delivery.get("time_slot", "any"),
            ),
            payment=PaymentInfo(
                method=PaymentMethod(payment["method"]),
                status=PaymentStatus(payment["status"]),
                reference_number=payment.get("reference_number"),
                amount_collected=(
                    _money(payment["amount_collected"]) if payment.get("amount_collected") else None
                ),
                collected_by=payment.get("collected_by"),
                paid_at=_parse_ts(payment.get("paid_at")),
            ),
            created_at=datetime.fromisoformat(raw["created_at"]),
            status=OrderStatus(raw["status"]),
            status_history=[
                StatusHistoryEntry(
                    status=OrderStatus(e["status"]),
                    timestamp=datetime.fromisoformat(e["timestamp"]),
                    actor=e.get("actor"),
                    note=e.get("note"),
                )
                for e in raw.get("status_history", [])
            ],
            processing=ProcessingInfo(
                requires_manual_approval=processing["requires_manual_approval"],
                approval_reasons=frozenset(
                    ApprovalReason(r) for r in processing.get("approval_reasons", [])
                ),
                auto_confirm_at=_parse_ts(processing.get("auto_confirm_at")),
                approved_by=processing.get("approved_by"),
                approved_at=_parse_ts(processing.get("approved_at")),
                is_auto_processed=processing.get("is_auto_processed", False),
            ),
            stock_state=StockState(raw.get("stock_state", StockState.NONE.value)),
            driver=(
                DriverAssignment(
                    driver_id=driver["driver_id"],
                    assigned_at=datetime.fromisoformat(driver["assigned_at"]),
                    attempts=[
                        DeliveryAttempt(
                            attempt_number=a["attempt_number"],
                            timestamp=datetime.fromisoformat(a["timestamp"]),
                            outcome=AttemptOutcome(a["outcome"]),
                            note=a.get("note"),
                        )
                        for a in driver.get("attempts", [])
                    ],
                )
                if driver
                else None
            ),
            cancellation=(
                CancellationRecord(
                    reason=CancellationReason(cancellation["reason"]),
                    cancelled_at=datetime.fromisoformat(cancellation["cancelled_at"]),
                    cancelled_by=cancellation.get("cancelled_by"),
                    note=cancellation.get("note"),
                )
                if cancellation
                else None
            ),
            has_fragile_items=raw.get("has_fragile_items", False),
            has_frozen_items=raw.get("has_frozen_items", False),
            version=raw.get("version", 0),
        )


def _money(raw: str) -> Money:
    return Money(Decimal(raw))


def _iso(value: date | datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _parse_ts(raw: str | None) -> datetime | None:
    return datetime.fromisoformat(raw) if raw else None


def _next_number(rows: list[dict], on: date) -> str:
    prefix = f"{ORDER_NUMBER_PREFIX}{on:%Y%m%d}"
    taken = [
        int(raw["order_number"][len(prefix):])
        for raw in rows
        if raw["order_number"].startswith(prefix)
    ]
    return f"{prefix}{max(taken, default=0) + 1:04d}"


def _count_deliveries(rows: list[dict], day: date) -> int:
    return sum(
        1
        for raw in rows
        if raw["delivery"]["mode"] == DeliveryMode.DELIVERY.value
        and datetime.fromisoformat(raw["created_at"]).date() == day
    )
