"""JSON-file-backed implementation of CustomerRepository."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from pathlib import Path

from intake.domain.model.customer import Customer
from intake.domain.model.value_objects import Money
from intake.domain.repository.customer_repository import CustomerRepository
from intake.infrastructure.persistence.json_file import JsonFile


class JsonCustomerRepository(CustomerRepository):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path)

    def get_by_id(self, customer_id: str) -> Customer | None:
        for raw in self._file.load():
            if raw["id"] == customer_id:
                return self._to_domain(raw)
        return None

    def save(self, customer: Customer) -> None:
        with self._file.locked():
            rows = self._file.load()
            for i, raw in enumerate(rows):
                if raw["id"] == customer.id:
                    rows[i] = self._to_raw(customer)
                    break
            else:
                rows.append(self._to_raw(customer))
            self._file.persist(rows)

    @staticmethod
    def _to_raw(customer: Customer) -> dict:
        return {
            "id": customer.id,
            "name": customer.name,
            "cod_eligible": customer.cod_eligible,
            "successful_gcash_orders": customer.successful_gcash_orders,
            "lifetime_order_count": customer.lifetime_order_count,
            "total_spent": str(customer.total_spent.amount),
            "last_order_at": customer.last_order_at.isoformat() if customer.last_order_at else None,
        }

    @staticmethod
    def _to_domain(raw: dict) -> Customer:
        last = raw.get("last_order_at")
        return Customer(
            id=raw["id"],
            name=raw.get("name", ""),
            cod_eligible=raw.get("cod_eligible", False),
            successful_gcash_orders=raw.get("successful_gcash_orders", 0),
            lifetime_order_count=raw.get("lifetime_order_count", 0),
            total_spent=Money(Decimal(raw.get("total_spent", "0"))),
            last_order_at=datetime.fromisoformat(last) if last else None,
        )
