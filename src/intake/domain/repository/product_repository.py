"""Abstract catalog repository.

Only catalog data goes through here: name, price and handling flags.
Stock levels live in ``StockRepository`` and are never written by a
product save, so a price change cannot race a reservation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from intake.domain.model.product import Product


class ProductRepository(ABC):

    @abstractmethod
    def get_by_id(self, product_id: str) -> Product | None:
        """Return a product by its ID, or None if not found."""

    @abstractmethod
    def get_by_name(self, name: str) -> Product | None:
        """Return the product whose name matches *name* ignoring case, or None."""

    @abstractmethod
    def list_all(self) -> list[Product]:
        """Return every product in the catalog, active or not."""

    @abstractmethod
    def save(self, product: Product) -> None:
        """Persist a new or updated product (catalog fields only)."""
