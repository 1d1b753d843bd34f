"""Product aggregate.

Products live independently of orders. They have their own lifecycle:
prices change, products are added, disabled and flagged for special
handling. Stock levels are NOT held here; see ``StockRecord``.
"""

from __future__ import annotations

from dataclasses import dataclass

from intake.domain.exceptions import ValidationError
from intake.domain.model.value_objects import Money


@dataclass
class Product:
    """A product in the catalog.

    Kept as a mutable dataclass because price updates and the active
    flag are legitimate mutations on the aggregate.
    """

    id: str
    name: str
    price: Money
    is_active: bool = True
    is_sensitive: bool = False  # explicit staff flag
    is_fragile: bool = False
    requires_refrigeration: bool = False

    def update_price(self, new_price: Money) -> None:
        """Change the product price.

        This does NOT affect any existing orders because orders
        capture a price snapshot at creation time.
        """
        if new_price.amount <= 0:
            raise ValidationError("Product price must be greater than zero")
        self.price = new_price

    def sensitivity_reasons(self, price_threshold: Money) -> frozenset[str]:
        """Every reason this product needs careful handling."""
        reasons: set[str] = set()
        if self.price >= price_threshold:
            reasons.add("high_value")
        if self.is_sensitive:
            reasons.add("flagged")
        if self.is_fragile:
            reasons.add("fragile")
        if self.requires_refrigeration:
            reasons.add("frozen")
        return frozenset(reasons)

    def is_sensitive_product(self, price_threshold: Money) -> bool:
        return bool(self.sensitivity_reasons(price_threshold))
