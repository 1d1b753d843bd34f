"""Domain service: Stock Ledger.

The ledger is the only mutator of a product's quantity / reserved fields.
Each operation is a single optimistic read-modify-write against one
``StockRecord``:

  1. read the current record
  2. compute the replacement (re-checking availability on fresh state)
  3. ``compare_and_swap`` it in; on a lost race go back to 1

After ``max_retries`` lost races the caller gets ``StockBusyError`` instead
of waiting. No operation ever touches more than one product record, so
two checkouts can never deadlock on each other.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from intake.domain.clock import Clock
from intake.domain.exceptions import (
    InsufficientStockError,
    ProductNotFoundError,
    StockBusyError,
    ValidationError,
)
from intake.domain.model.stock import StockRecord
from intake.domain.repository.stock_repository import StockRepository
from intake.domain.service.availability import (
    Availability,
    available_quantity,
    check_availability,
)
from intake.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_MAX_RETRIES = 8


@dataclass(frozen=True)
class CommitResult:
    """Outcome of a commit, with what is needed to reverse it exactly."""

    record: StockRecord
    quantity: int
    reserved_consumed: int


class StockLedger:

    def __init__(
        self,
        stock_repo: StockRepository,
        clock: Clock,
        max_retries: int = DEFAULT_MAX_RETRIES,
    ) -> None:
        self._stock_repo = stock_repo
        self._clock = clock
        self._max_retries = max_retries

    # --- Queries --------------------------------------------------------------

    def snapshot(self, product_id: str) -> StockRecord:
        record = self._stock_repo.get(product_id)
        if record is None:
            raise ProductNotFoundError(product_id)
        return record

    def availability(self, product_id: str) -> Availability:
        return check_availability(self.snapshot(product_id))

    # --- Commands -------------------------------------------------------------

    def reserve(self, product_id: str, qty: int) -> StockRecord:
        """Hold *qty* units against an in-flight order.

        Raises InsufficientStockError if fewer than *qty* units are
        available on the state the write is based on.
        """
        _require_positive(qty, "Reservation")

        def compute(record: StockRecord) -> StockRecord:
            available = available_quantity(record)
            if available < qty:
                raise InsufficientStockError(product_id, requested=qty, available=available)
            return record.evolve(reserved=record.reserved + qty)

        _, new = self._update(product_id, compute)
        return new

    def release(self, product_id: str, qty: int) -> StockRecord:
        """Give back a reservation, saturating at zero.

        Releasing more than is reserved is not an error: compensation
        paths may release the same units twice.
        """
        _require_positive(qty, "Release")

        def compute(record: StockRecord) -> StockRecord | None:
            if record.reserved == 0:
                return None
            if qty > record.reserved:
                logger.warning(
                    "Release exceeds reservation; saturating at zero",
                    extra={"product_id": product_id, "requested": qty, "reserved": record.reserved},
                )
            return record.evolve(reserved=max(0, record.reserved - qty))

        _, new = self._update(product_id, compute)
        return new

    def commit(self, product_id: str, qty: int) -> CommitResult:
        """Permanently deduct *qty* units, consuming the matching reservation."""
        _require_positive(qty, "Commit")
        now = self._clock.now()

        def compute(record: StockRecord) -> StockRecord:
            if record.quantity < qty:
                raise InsufficientStockError(
                    product_id, requested=qty, available=record.quantity
                )
            return record.evolve(
                quantity=record.quantity - qty,
                reserved=max(0, record.reserved - qty),
                purchases=record.purchases + 1,
                last_purchased_at=now,
            )

        old, new = self._update(product_id, compute)
        return CommitResult(
            record=new,
            quantity=qty,
            reserved_consumed=old.reserved - new.reserved,
        )

    def uncommit(self, product_id: str, qty: int, reserved: int = 0) -> StockRecord:
        """Put committed units back on the shelf.

        With ``reserved=0`` this is a plain restock (returned goods). A
        compensating rollback passes the ``reserved_consumed`` of the
        commit it undoes so the reservation comes back too.
        """
        _require_positive(qty, "Restock")
        if reserved < 0 or reserved > qty:
            raise ValidationError(f"Cannot re-reserve {reserved} of {qty} restocked units")

        def compute(record: StockRecord) -> StockRecord:
            return record.evolve(
                quantity=record.quantity + qty,
                reserved=record.reserved + reserved,
            )

        _, new = self._update(product_id, compute)
        return new

    def adjust_quantity(self, product_id: str, operation: str, amount: int) -> StockRecord:
        """Staff stock correction: ``set``, ``add`` or ``subtract``."""
        if amount < 0:
            raise ValidationError("Stock adjustment amount cannot be negative")

        def compute(record: StockRecord) -> StockRecord:
            if operation == "set":
                quantity = amount
            elif operation == "add":
                quantity = record.quantity + amount
            elif operation == "subtract":
                quantity = record.quantity - amount
            else:
                raise ValidationError(f"Unknown stock operation '{operation}'")
            if quantity < 0:
                raise ValidationError("Stock quantity cannot be negative")
            if quantity < record.reserved:
                raise ValidationError(
                    f"Cannot set stock of '{product_id}' to {quantity}: "
                    f"{record.reserved} units are reserved by open orders"
                )
            return record.evolve(quantity=quantity)

        _, new = self._update(product_id, compute)
        logger.info(
            "Stock adjusted",
            extra={"product_id": product_id, "operation": operation, "quantity": new.quantity},
        )
        return new

    # --- Internal helpers -----------------------------------------------------

    def _update(
        self,
        product_id: str,
        compute: Callable[[StockRecord], StockRecord | None],
    ) -> tuple[StockRecord, StockRecord]:
        """Optimistic retry loop. *compute* returning None means no change."""
        for attempt in range(1, self._max_retries + 1):
            current = self.snapshot(product_id)
            replacement = compute(current)
            if replacement is None:
                return current, current
            if self._stock_repo.compare_and_swap(current, replacement):
                return current, replacement
            logger.debug(
                "Stock write lost a race, retrying",
                extra={"product_id": product_id, "attempt": attempt},
            )
        logger.warning(
            "Stock contention retry budget exhausted",
            extra={"product_id": product_id, "attempts": self._max_retries},
        )
        raise StockBusyError(product_id, self._max_retries)


def _require_positive(qty: int, action: str) -> None:
    if not isinstance(qty, int) or isinstance(qty, bool) or qty <= 0:
        raise ValidationError(f"{action} quantity must be positive")
