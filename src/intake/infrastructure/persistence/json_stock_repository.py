"""JSON-file-backed implementation of StockRepository."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from intake.domain.exceptions import ValidationError
from intake.domain.model.stock import StockRecord
from intake.domain.repository.stock_repository import StockRepository
from intake.infrastructure.persistence.json_file import JsonFile


class JsonStockRepository(StockRepository):
    """Stock records in one JSON file.

    ``compare_and_swap`` holds the file lock across read, version check
    and write, which makes it atomic for every caller in this process.
    """

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path)

    # --- StockRepository interface --------------------------------------------

    def get(self, product_id: str) -> StockRecord | None:
        for raw in self._file.load():
            if raw["product_id"] == product_id:
                return self._to_domain(raw)
        return None

    def list_all(self) -> list[StockRecord]:
        return [self._to_domain(raw) for raw in self._file.load()]

    def add(self, record: StockRecord) -> None:
        with self._file.locked():
            rows = self._file.load()
            if any(raw["product_id"] == record.product_id for raw in rows):
                raise ValidationError(
                    f"Stock record for product '{record.product_id}' already exists"
                )
            rows.append(self._to_raw(record))
            self._file.persist(rows)

    def compare_and_swap(self, expected: StockRecord, replacement: StockRecord) -> bool:
        with self._file.locked():
            rows = self._file.load()
            for i, raw in enumerate(rows):
                if raw["product_id"] != expected.product_id:
                    continue
                if raw.get("version", 0) != expected.version:
                    return False
                rows[i] = self._to_raw(replacement)
                self._file.persist(rows)
                return True
            return False

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(record: StockRecord) -> dict:
        return {
            "product_id": record.product_id,
            "quantity": record.quantity,
            "reserved": record.reserved,
            "safety_buffer": record.safety_buffer,
            "low_stock_threshold": record.low_stock_threshold,
            "version": record.version,
            "purchases": record.purchases,
            "last_purchased_at": (
                record.last_purchased_at.isoformat() if record.last_purchased_at else None
            ),
        }

    @staticmethod
    def _to_domain(raw: dict) -> StockRecord:
        last = raw.get("last_purchased_at")
        return StockRecord(
            product_id=raw["product_id"],
            quantity=raw["quantity"],
            reserved=raw.get("reserved", 0),
            safety_buffer=raw.get("safety_buffer", 0),
            low_stock_threshold=raw.get("low_stock_threshold", 3),
            version=raw.get("version", 0),
            purchases=raw.get("purchases", 0),
            last_purchased_at=datetime.fromisoformat(last) if last else None,
        )
