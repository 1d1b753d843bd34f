"""Application service: Get Availability use case (query)."""

from __future__ import annotations

from intake.application.dto import AvailabilityDTO
from intake.domain.service.stock_ledger import StockLedger


class GetAvailabilityHandler:

    def __init__(self, ledger: StockLedger) -> None:
        self._ledger = ledger

    def handle(self, product_id: str) -> AvailabilityDTO:
        availability = self._ledger.availability(product_id)
        return AvailabilityDTO(
            product_id=availability.product_id,
            available=availability.available,
            status=availability.status.value,
        )
