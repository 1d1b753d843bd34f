"""Abstract repository for StockRecord ledger entries."""

from __future__ import annotations

from abc import ABC, abstractmethod

from intake.domain.model.stock import StockRecord


class StockRepository(ABC):
    """Per-product stock storage with an atomic compare-and-swap.

    Implementations must make ``compare_and_swap`` atomic for a single
    product record. Nothing here ever locks more than one record.
    """

    @abstractmethod
    def get(self, product_id: str) -> StockRecord | None:
        """Return the current stock record for a product, or None."""

    @abstractmethod
    def list_all(self) -> list[StockRecord]:
        """Return every stock record."""

    @abstractmethod
    def add(self, record: StockRecord) -> None:
        """Store the first record for a product.

        Raises ValidationError if the product already has one.
        """

    @abstractmethod
    def compare_and_swap(self, expected: StockRecord, replacement: StockRecord) -> bool:
        """Replace *expected* with *replacement* if nobody wrote in between.

        Returns False (and changes nothing) when the stored record's
        version is no longer ``expected.version``.
        """
