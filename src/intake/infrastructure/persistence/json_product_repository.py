"""JSON-file-backed implementation of ProductRepository."""

from __future__ import annotations

from decimal import Decimal
from pathlib import Path

from intake.domain.model.product import Product
from intake.domain.model.value_objects import Money
from intake.domain.repository.product_repository import ProductRepository
from intake.infrastructure.persistence.json_file import JsonFile


class JsonProductRepository(ProductRepository):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path)

    # --- ProductRepository interface ------------------------------------------

    def get_by_id(self, product_id: str) -> Product | None:
        products = self._load()
        return products.get(product_id)

    def get_by_name(self, name: str) -> Product | None:
        for product in self._load().values():
            if product.name.lower() == name.lower():
                return product
        return None

    def list_all(self) -> list[Product]:
        return list(self._load().values())

    def save(self, product: Product) -> None:
        with self._file.locked():
            products = self._load()
            products[product.id] = product
            self._persist(products)

    # --- Serialization helpers ------------------------------------------------

    def _load(self) -> dict[str, Product]:
        return {
            item["id"]: Product(
                id=item["id"],
                name=item["name"],
                price=Money(Decimal(item["price"]), item.get("currency", "PHP")),
                is_active=item.get("is_active", True),
                is_sensitive=item.get("is_sensitive", False),
                is_fragile=item.get("is_fragile", False),
                requires_refrigeration=item.get("requires_refrigeration", False),
            )
            for item in self._file.load()
        }

    def _persist(self, products: dict[str, Product]) -> None:
        raw = [
            {
                "id": p.id,
                "name": p.name,
                "price": str(p.price.amount),
                "currency": p.price.currency,
                "is_active": p.is_active,
                "is_sensitive": p.is_sensitive,
                "is_fragile": p.is_fragile,
                "requires_refrigeration": p.requires_refrigeration,
            }
            for p in products.values()
        ]
        self._file.persist(raw)
