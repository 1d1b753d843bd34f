"""StockRecord: the ledger fields of one product.

Records are immutable snapshots. Every change produces a new record with
``version + 1``; the repository only accepts it if the stored version is
still the one the change was computed from. That is what makes a
read-modify-write on a single product atomic without locking anything
wider than that product.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime

from intake.domain.exceptions import ValidationError


@dataclass(frozen=True)
class StockRecord:
    """Stock position of a single product.

    Invariants:
    - ``0 <= reserved <= quantity``
    - ``safety_buffer >= 0``
    """

    product_id: str
    quantity: int
    reserved: int = 0
    safety_buffer: int = 0
    low_stock_threshold: int = 3
    version: int = 0
    purchases: int = 0
    last_purchased_at: datetime | None = None

    def __post_init__(self) -> None:
        if self.quantity < 0:
            raise ValidationError("Stock cannot be negative")
        if self.reserved < 0:
            raise ValidationError("Reserved stock cannot be negative")
        if self.reserved > self.quantity:
            raise ValidationError(
                f"Reserved stock ({self.reserved}) cannot exceed "
                f"quantity ({self.quantity}) for product '{self.product_id}'"
            )
        if self.safety_buffer < 0:
            raise ValidationError("Safety buffer cannot be negative")

    def evolve(self, **changes) -> StockRecord:
        """Return the next version of this record with *changes* applied."""
        return replace(self, version=self.version + 1, **changes)
