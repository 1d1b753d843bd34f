"""Domain service: Order State Machine.

The single entry point for every order status change. It owns:

- the transition table (which edges exist),
- the side effects coupled to specific transitions (stock commit /
  release / restock, customer counters, payment settlement),
- persistence of the order and customer touched by the transition,
- the best-effort customer notification afterwards.

A transition is all-or-nothing. Side effects register an undo step as they
are applied; if anything later fails, the undo steps run in reverse, the
order is restored to its prior state and the original error propagates.

A transition only acts on the latest stored copy of an order. Transitions
of the same order are serialized within the process, a stale copy is
refused with OrderConflictError before any side effect, and the
repository's versioned save refuses it again if a write from elsewhere
lands in between.
"""

from __future__ import annotations

import copy
import threading
from typing import Any, Callable

from intake.domain.clock import Clock
from intake.domain.exceptions import (
    CustomerNotFoundError,
    InvalidTransitionError,
    OrderConflictError,
    ValidationError,
)
from intake.domain.model.customer import Customer
from intake.domain.model.order import (
    AttemptOutcome,
    CancellationReason,
    CancellationRecord,
    Order,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    StockState,
)
from intake.domain.repository.customer_repository import CustomerRepository
from intake.domain.repository.order_repository import OrderRepository
from intake.domain.service.notifier import Notifier
from intake.domain.service.stock_ledger import StockLedger
from intake.logging_config import get_logger

logger = get_logger(__name__)

S = OrderStatus

TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    S.PENDING: frozenset({S.CONFIRMED, S.CANCELLED}),
    S.CONFIRMED: frozenset({S.PREPARING, S.CANCELLED}),
    S.PREPARING: frozenset({S.READY_FOR_PICKUP, S.OUT_FOR_DELIVERY, S.CANCELLED}),
    S.READY_FOR_PICKUP: frozenset({S.COMPLETED, S.CANCELLED}),
    S.OUT_FOR_DELIVERY: frozenset({S.DELIVERED, S.FAILED, S.CANCELLED}),
    S.DELIVERED: frozenset({S.COMPLETED}),
    S.FAILED: frozenset({S.OUT_FOR_DELIVERY, S.RETURNED}),
    S.RETURNED: frozenset({S.COMPLETED}),
}

INITIAL_STATUSES = frozenset({S.PENDING, S.CONFIRMED})

_LOCK_STRIPES = 64


def allowed_targets(status: OrderStatus) -> frozenset[OrderStatus]:
    return TRANSITIONS.get(status, frozenset())


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    return target in allowed_targets(current)


class _Compensations:
    """Undo steps for side effects already applied in this transition."""

    def __init__(self) -> None:
        self._steps: list[tuple[str, Callable[[], object]]] = []

    def add(self, description: str, step: Callable[[], object]) -> None:
        self._steps.append((description, step))

    def run(self) -> None:
        for description, step in reversed(self._steps):
            try:
                step()
            except Exception:
                # Keep undoing the rest; the original error still propagates.
                logger.exception("Compensation step failed", extra={"step": description})
        self._steps.clear()


class OrderStateMachine:

    def __init__(
        self,
        order_repo: OrderRepository,
        customer_repo: CustomerRepository,
        ledger: StockLedger,
        notifier: Notifier,
        clock: Clock,
        min_gcash_orders_for_cod: int = 5,
        max_delivery_attempts: int = 2,
    ) -> None:
        self._order_repo = order_repo
        self._customer_repo = customer_repo
        self._ledger = ledger
        self._notifier = notifier
        self._clock = clock
        self._min_gcash_orders_for_cod = min_gcash_orders_for_cod
        self._max_delivery_attempts = max_delivery_attempts
        self._order_locks = [threading.Lock() for _ in range(_LOCK_STRIPES)]

    # --- Entry points ---------------------------------------------------------

    def initialize(
        self,
        order: Order,
        status: OrderStatus = OrderStatus.PENDING,
        actor: str | None = None,
        note: str | None = None,
    ) -> Order:
        """Record the first status of a freshly admitted order and save it.

        Only ``pending`` and ``confirmed`` are valid starting points; starting
        as ``confirmed`` commits the reserved stock straight away.
        """
        if order.status_history:
            raise ValidationError(f"Order {order.order_number} already has a status")
        if status not in INITIAL_STATUSES:
            raise InvalidTransitionError(order.order_number, "new", status.value)

        self._run(order, status, actor, note, previous="new")
        return order

    def transition(
        self,
        order: Order,
        target: OrderStatus,
        actor: str | None = None,
        note: str | None = None,
        cancellation_reason: CancellationReason | None = None,
        attempt_outcome: AttemptOutcome = AttemptOutcome.FAILED_NOT_HOME,
    ) -> Order:
        """Move *order* to *target*, applying every coupled side effect.

        Raises InvalidTransitionError (order untouched) for any edge not in
        the transition table.
        """
        if not can_transition(order.status, target):
            raise InvalidTransitionError(order.order_number, order.status.value, target.value)

        self._run(
            order,
            target,
            actor,
            note,
            previous=order.status.value,
            cancellation_reason=cancellation_reason,
            attempt_outcome=attempt_outcome,
        )
        return order

    # --- Orchestration --------------------------------------------------------

    def _run(
        self,
        order: Order,
        target: OrderStatus,
        actor: str | None,
        note: str | None,
        previous: str,
        cancellation_reason: CancellationReason | None = None,
        attempt_outcome: AttemptOutcome = AttemptOutcome.FAILED_NOT_HOME,
    ) -> None:
        first_new_entry = len(order.status_history)
        with self._lock_for(order):
            self._ensure_current(order)
            backup = copy.deepcopy(order)
            undo = _Compensations()
            try:
                recorded = self._apply_side_effects(
                    order, target, undo, actor, note, cancellation_reason, attempt_outcome
                )
                if not recorded:
                    order.record_status(target, self._clock.now(), actor, note)
                self._order_repo.save(order)
            except Exception:
                undo.run()
                order.__dict__.update(backup.__dict__)
                raise

        logger.info(
            "Order status changed",
            extra={
                "order_number": order.order_number,
                "from_status": previous,
                "to_status": order.status.value,
                "actor": actor or "system",
            },
        )
        for entry in order.status_history[first_new_entry:]:
            self._notify(order, entry.status)

    def _lock_for(self, order: Order) -> threading.Lock:
        # New orders have no number yet and nobody else can hold them
        key = order.order_number or str(id(order))
        return self._order_locks[hash(key) % _LOCK_STRIPES]

    def _ensure_current(self, order: Order) -> None:
        """Refuse to act on a copy that is older than the stored order."""
        if order.order_number is None:
            return
        stored = self._order_repo.get_by_number(order.order_number)
        if stored is not None and stored.version != order.version:
            raise OrderConflictError(order.order_number, order.version, stored.version)

    def _notify(self, order: Order, status: OrderStatus) -> None:
        try:
            self._notifier.notify(order, status)
        except Exception:
            logger.exception(
                "Notification failed; transition kept",
                extra={"order_number": order.order_number, "status": status.value},
            )

    # --- Side effects ---------------------------------------------------------

    def _apply_side_effects(
        self,
        order: Order,
        target: OrderStatus,
        undo: _Compensations,
        actor: str | None = None,
        note: str | None = None,
        cancellation_reason: CancellationReason | None = None,
        attempt_outcome: AttemptOutcome = AttemptOutcome.FAILED_NOT_HOME,
    ) -> bool:
        """Apply what *target* implies. Returns True if it recorded the status itself."""
        now = self._clock.now()

        if target is S.CONFIRMED:
            self._commit_stock(order, undo)
            if order.payment.method is PaymentMethod.GCASH:
                self._update_customer(
                    order,
                    undo,
                    lambda c: c.record_successful_gcash_order(self._min_gcash_orders_for_cod),
                    lambda c, granted: c.undo_successful_gcash_order(granted),
                )
            if actor is not None:
                order.processing.approved_by = actor
                order.processing.approved_at = now

        elif target is S.CANCELLED:
            order.cancellation = CancellationRecord(
                reason=cancellation_reason or CancellationReason.OTHER,
                cancelled_at=now,
                cancelled_by=actor,
                note=note,
            )
            self._release_stock(order, undo)

        elif target is S.DELIVERED:
            order.record_delivery_attempt(AttemptOutcome.SUCCESSFUL, now, note)
            if order.payment.method is PaymentMethod.COD:
                order.payment.status = PaymentStatus.PAID
                order.payment.amount_collected = order.total
                order.payment.collected_by = actor
                order.payment.paid_at = now
            self._update_customer(
                order,
                undo,
                lambda c: c.record_delivery(order.total, now),
                lambda c, previous: c.undo_delivery(order.total, now, previous),
            )

        elif target is S.FAILED:
            if attempt_outcome is AttemptOutcome.SUCCESSFUL:
                raise ValidationError("A failed delivery cannot have a successful outcome")
            order.record_delivery_attempt(attempt_outcome, now, note)
            if order.failed_attempt_count >= self._max_delivery_attempts:
                order.record_status(S.FAILED, now, actor, note)
                self._restock(order, undo)
                order.record_status(
                    S.RETURNED,
                    now,
                    actor,
                    f"Returned after {order.failed_attempt_count} failed delivery attempts",
                )
                return True

        elif target is S.RETURNED:
            self._restock(order, undo)

        return False

    def _commit_stock(self, order: Order, undo: _Compensations) -> None:
        if order.stock_state is StockState.COMMITTED:
            return
        for item in order.items:
            result = self._ledger.commit(item.product_id, item.quantity.value)
            undo.add(
                f"uncommit {item.product_id}",
                lambda r=result, pid=item.product_id: self._ledger.uncommit(
                    pid, r.quantity, reserved=r.reserved_consumed
                ),
            )
        order.stock_state = StockState.COMMITTED

    def _release_stock(self, order: Order, undo: _Compensations) -> None:
        if order.stock_state is not StockState.RESERVED:
            return
        for item in order.items:
            qty = item.quantity.value
            self._ledger.release(item.product_id, qty)
            undo.add(
                f"re-reserve {item.product_id}",
                lambda pid=item.product_id, q=qty: self._ledger.reserve(pid, q),
            )
        order.stock_state = StockState.RELEASED

    def _restock(self, order: Order, undo: _Compensations) -> None:
        if order.stock_state is not StockState.COMMITTED:
            return
        for item in order.items:
            qty = item.quantity.value
            self._ledger.uncommit(item.product_id, qty)
            undo.add(
                f"re-commit {item.product_id}",
                lambda pid=item.product_id, q=qty: self._ledger.commit(pid, q),
            )
        order.stock_state = StockState.RETURNED

    def _update_customer(
        self,
        order: Order,
        undo: _Compensations,
        change: Callable[[Customer], Any],
        revert: Callable[[Customer, Any], None],
    ) -> None:
        """Apply *change* and register *revert* against a fresh load.

        *revert* receives whatever *change* returned.
        """
        customer = self._load_customer(order.customer_id)
        token = change(customer)
        self._customer_repo.save(customer)
        undo.add(
            f"revert customer {customer.id}",
            lambda: self._revert_customer(customer.id, lambda c: revert(c, token)),
        )

    def _revert_customer(self, customer_id: str, revert: Callable[[Customer], None]) -> None:
        customer = self._load_customer(customer_id)
        revert(customer)
        self._customer_repo.save(customer)

    def _load_customer(self, customer_id: str) -> Customer:
        customer = self._customer_repo.get_by_id(customer_id)
        if customer is None:
            raise CustomerNotFoundError(customer_id)
        return customer
