"""Application service: Set Inventory use case.

Staff corrections go through the stock ledger like every other write, so
they can never push quantity below what open orders have reserved.
"""

from __future__ import annotations

from intake.domain.exceptions import ProductNotFoundError
from intake.domain.model.stock import StockRecord
from intake.domain.repository.product_repository import ProductRepository
from intake.domain.service.stock_ledger import StockLedger


class SetInventoryHandler:

    def __init__(self, ledger: StockLedger, product_repo: ProductRepository) -> None:
        self._ledger = ledger
        self._product_repo = product_repo

    def handle(self, product_name: str, amount: int, operation: str = "set") -> StockRecord:
        """Apply a ``set`` / ``add`` / ``subtract`` correction to a product's stock."""
        product = self._product_repo.get_by_name(product_name)
        if product is None:
            raise ProductNotFoundError(product_name)

        return self._ledger.adjust_quantity(product.id, operation, amount)
