"""Application service: Show Inventory use case (query)."""

from __future__ import annotations

from dataclasses import dataclass

from intake.domain.repository.product_repository import ProductRepository
from intake.domain.repository.stock_repository import StockRepository
from intake.domain.service.availability import check_availability


@dataclass(frozen=True)
class InventoryLineDTO:
    product_id: str
    product_name: str
    quantity: int
    reserved: int
    available: int
    status: str


class ShowInventoryHandler:

    def __init__(self, stock_repo: StockRepository, product_repo: ProductRepository) -> None:
        self._stock_repo = stock_repo
        self._product_repo = product_repo

    def handle(self) -> list[InventoryLineDTO]:
        lines = []
        for record in self._stock_repo.list_all():
            product = self._product_repo.get_by_id(record.product_id)
            availability = check_availability(record)
            lines.append(
                InventoryLineDTO(
                    product_id=record.product_id,
                    product_name=product.name if product else "?",
                    quantity=record.quantity,
                    reserved=record.reserved,
                    available=availability.available,
                    status=availability.status.value,
                )
            )
        return lines
