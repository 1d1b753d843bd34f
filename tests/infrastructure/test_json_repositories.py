"""Tests for the JSON-file repositories (real files under tmp_path)."""

from datetime import date, datetime

import pytest

from intake.domain.exceptions import DailyCapReachedError, OrderConflictError
from intake.domain.model.customer import Customer
from intake.domain.model.order import (
    ApprovalReason,
    AttemptOutcome,
    CancellationReason,
    CancellationRecord,
    DeliveryInfo,
    DeliveryMode,
    Order,
    OrderItem,
    OrderStatus,
    PaymentMethod,
)
from intake.domain.model.stock import StockRecord
from intake.domain.model.value_objects import Money, Quantity
from intake.infrastructure.persistence.json_customer_repository import JsonCustomerRepository
from intake.infrastructure.persistence.json_order_repository import JsonOrderRepository
from intake.infrastructure.persistence.json_stock_repository import JsonStockRepository

NOW = datetime(2025, 3, 3, 10, 0)


def _order(mode: DeliveryMode = DeliveryMode.DELIVERY) -> Order:
    order = Order.create(
        customer_id="cust-1",
        items=[
            OrderItem(
                product_id="1",
                product_name="Leche Flan",
                unit_price=Money.of("150"),
                quantity=Quantity(2),
                flavor="ube",
            )
        ],
        delivery=DeliveryInfo(
            mode=mode,
            address="12 Mabini St" if mode is DeliveryMode.DELIVERY else None,
            preferred_date=date(2025, 3, 4),
            time_slot="morning",
        ),
        payment_method=PaymentMethod.COD,
        delivery_fee=Money.of("50"),
        cod_surcharge=Money.of("30"),
        created_at=NOW,
    )
    order.record_status(OrderStatus.PENDING, NOW)
    return order


class TestJsonStockRepository:

    def test_compare_and_swap(self, tmp_path):
        repo = JsonStockRepository(tmp_path / "stock.json")
        original = StockRecord(product_id="1", quantity=10)
        repo.add(original)

        assert repo.compare_and_swap(original, original.evolve(reserved=2))
        # Stale version loses
        assert not repo.compare_and_swap(original, original.evolve(reserved=5))
        assert repo.get("1").reserved == 2
        assert repo.get("1").version == 1

    def test_survives_reopen(self, tmp_path):
        path = tmp_path / "stock.json"
        JsonStockRepository(path).add(StockRecord(product_id="1", quantity=4, safety_buffer=1))
        record = JsonStockRepository(path).get("1")
        assert (record.quantity, record.safety_buffer) == (4, 1)

    def test_no_temp_files_left_behind(self, tmp_path):
        repo = JsonStockRepository(tmp_path / "stock.json")
        repo.add(StockRecord(product_id="1", quantity=4))
        assert [p.name for p in tmp_path.iterdir()] == ["stock.json"]


class TestJsonOrderRepository:

    def test_numbers_are_per_day_sequences(self, tmp_path):
        repo = JsonOrderRepository(tmp_path / "orders.json")
        first, second = _order(), _order()
        repo.save(first)
        repo.save(second)
        assert first.order_number == "CV202503030001"
        assert second.order_number == "CV202503030002"

    def test_full_order_survives_reload(self, tmp_path):
        repo = JsonOrderRepository(tmp_path / "orders.json")
        order = _order()
        order.processing.approval_reasons = frozenset({ApprovalReason.FIRST_TIME_COD})
        order.processing.requires_manual_approval = True
        order.assign_driver("drv-1", NOW)
        order.record_delivery_attempt(AttemptOutcome.FAILED_NOT_HOME, NOW, "No answer")
        order.cancellation = CancellationRecord(
            reason=CancellationReason.DELIVERY_FAILED, cancelled_at=NOW, cancelled_by="staff-1"
        )
        repo.save(order)

        loaded = JsonOrderRepository(tmp_path / "orders.json").get_by_number(order.order_number)

        assert loaded == order
        assert loaded.total == Money.of("380")

    def test_count_and_list(self, tmp_path):
        repo = JsonOrderRepository(tmp_path / "orders.json")
        repo.save(_order())
        repo.save(_order(DeliveryMode.PICKUP))
        assert repo.count_delivery_orders_on(NOW.date()) == 1
        assert len(repo.list_by_status(OrderStatus.PENDING)) == 2
        assert repo.list_by_status(OrderStatus.CONFIRMED) == []

    def test_stale_copy_cannot_overwrite_newer_save(self, tmp_path):
        repo = JsonOrderRepository(tmp_path / "orders.json")
        repo.save(_order())
        first = repo.get_by_number("CV202503030001")
        second = repo.get_by_number("CV202503030001")

        first.record_status(OrderStatus.CONFIRMED, NOW)
        repo.save(first)
        second.record_status(OrderStatus.CANCELLED, NOW)
        with pytest.raises(OrderConflictError) as exc_info:
            repo.save(second)

        assert exc_info.value.expected == 1
        assert exc_info.value.actual == 2
        stored = repo.get_by_number("CV202503030001")
        assert stored.status is OrderStatus.CONFIRMED
        assert stored.version == 2

    def test_delivery_cap_enforced_on_insert(self, tmp_path):
        repo = JsonOrderRepository(tmp_path / "orders.json", daily_delivery_cap=1)
        repo.save(_order())
        repo.save(_order(DeliveryMode.PICKUP))

        rejected = _order()
        with pytest.raises(DailyCapReachedError):
            repo.save(rejected)

        assert rejected.order_number is None
        assert rejected.version == 0
        assert repo.count_delivery_orders_on(NOW.date()) == 1

    def test_cap_does_not_block_updates(self, tmp_path):
        repo = JsonOrderRepository(tmp_path / "orders.json", daily_delivery_cap=1)
        order = _order()
        repo.save(order)
        order.record_status(OrderStatus.CONFIRMED, NOW)
        repo.save(order)
        assert repo.get_by_number(order.order_number).status is OrderStatus.CONFIRMED


class TestJsonCustomerRepository:

    def test_upsert(self, tmp_path):
        repo = JsonCustomerRepository(tmp_path / "customers.json")
        customer = Customer(id="cust-1", name="Ana")
        repo.save(customer)
        customer.record_delivery(Money.of("380"), NOW)
        repo.save(customer)

        loaded = repo.get_by_id("cust-1")
        assert loaded.total_spent == Money.of("380")
        assert loaded.last_order_at == NOW
