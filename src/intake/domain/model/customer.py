"""Customer aggregate (referenced, not owned, by the order engine).

Only the purchasing counters live here. Identity, contact details and
authentication belong to the user directory outside this package.

Every ``record_*`` method has an ``undo_*`` counterpart that reverses just
that one change, so a rolled-back order never overwrites counters another
order moved in the meantime.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from intake.domain.model.value_objects import Money


@dataclass
class Customer:

    id: str
    name: str = ""
    cod_eligible: bool = False
    successful_gcash_orders: int = 0
    lifetime_order_count: int = 0
    total_spent: Money = Money.zero()
    last_order_at: datetime | None = None

    def record_order_placed(self) -> None:
        self.lifetime_order_count += 1

    def undo_order_placed(self) -> None:
        self.lifetime_order_count = max(0, self.lifetime_order_count - 1)

    def record_successful_gcash_order(self, min_orders_for_cod: int) -> bool:
        """Count a confirmed prepaid order. Returns True if it made the customer COD-eligible."""
        self.successful_gcash_orders += 1
        if not self.cod_eligible and self.successful_gcash_orders >= min_orders_for_cod:
            self.cod_eligible = True
            return True
        return False

    def undo_successful_gcash_order(self, granted_eligibility: bool) -> None:
        self.successful_gcash_orders = max(0, self.successful_gcash_orders - 1)
        if granted_eligibility:
            self.cod_eligible = False

    def record_delivery(self, amount: Money, at: datetime) -> datetime | None:
        """Add a delivered order's total. Returns the previous ``last_order_at``."""
        previous = self.last_order_at
        self.total_spent = self.total_spent + amount
        self.last_order_at = at
        return previous

    def undo_delivery(self, amount: Money, at: datetime, previous: datetime | None) -> None:
        self.total_spent = self.total_spent - amount if amount <= self.total_spent else Money.zero()
        if self.last_order_at == at:
            self.last_order_at = previous
