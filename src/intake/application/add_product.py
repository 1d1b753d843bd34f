"""Application service: Add Product use case."""

from __future__ import annotations

from intake.config import Settings
from intake.domain.exceptions import ValidationError
from intake.domain.model.product import Product
from intake.domain.model.stock import StockRecord
from intake.domain.model.value_objects import Money
from intake.domain.repository.product_repository import ProductRepository
from intake.domain.repository.stock_repository import StockRepository


class AddProductHandler:

    def __init__(
        self,
        product_repo: ProductRepository,
        stock_repo: StockRepository,
        settings: Settings,
    ) -> None:
        self._product_repo = product_repo
        self._stock_repo = stock_repo
        self._settings = settings

    def handle(
        self,
        name: str,
        price: str,
        quantity: int = 0,
        is_sensitive: bool = False,
        is_fragile: bool = False,
        requires_refrigeration: bool = False,
    ) -> Product:
        """Add a new product to the catalog together with its stock record.

        The stock record starts with the store-wide safety buffer and
        low-stock threshold.
        """
        if not name or not name.strip():
            raise ValidationError("Product name is required")
        if quantity < 0:
            raise ValidationError("Initial stock cannot be negative")

        existing = self._product_repo.get_by_name(name.strip())
        if existing is not None:
            raise ValidationError(f"Product '{name}' already exists")

        # Auto-assign ID based on existing products
        all_products = self._product_repo.list_all()
        if all_products:
            next_id = str(max(int(p.id) for p in all_products) + 1)
        else:
            next_id = "1"

        price_money = Money.of(price)
        if price_money.amount <= 0:
            raise ValidationError("Product price must be greater than zero")

        product = Product(
            id=next_id,
            name=name.strip(),
            price=price_money,
            is_sensitive=is_sensitive,
            is_fragile=is_fragile,
            requires_refrigeration=requires_refrigeration,
        )
        self._stock_repo.add(
            StockRecord(
                product_id=product.id,
                quantity=quantity,
                safety_buffer=self._settings.safety_buffer,
                low_stock_threshold=self._settings.low_stock_threshold,
            )
        )
        self._product_repo.save(product)
        return product
