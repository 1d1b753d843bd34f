"""Two requests acting on the same order, over the JSON files."""

import pytest

from intake.application.dto import CheckoutRequest, OrderItemSpec
from intake.config import Settings
from intake.domain.clock import FixedClock
from intake.domain.exceptions import OrderConflictError
from intake.domain.model.order import OrderStatus
from intake.infrastructure.bootstrap import Container
from tests.fakes import MONDAY_10AM


@pytest.fixture
def container(tmp_path):
    c = Container(Settings(data_dir=tmp_path), FixedClock(MONDAY_10AM))
    c.add_product().handle("Leche Flan", "150", quantity=10)
    c.register_customer().handle("cust-1", "Ana")
    return c


def _pending_order(container: Container) -> str:
    dto = container.admit_order().handle(
        CheckoutRequest(
            customer_id="cust-1",
            items=[OrderItemSpec("1", 3)],
            delivery_mode="delivery",
            payment_method="gcash",
            address="12 Mabini St",
        )
    )
    assert dto.status == "pending"
    # Another customer's reservation that must survive
    container.ledger.reserve("1", 2)
    return dto.order_number


def _stock(container: Container) -> tuple[int, int]:
    record = container.stock.get("1")
    return record.quantity, record.reserved


class TestSameOrderTwice:

    def test_second_confirm_from_stale_copy_is_refused(self, container):
        number = _pending_order(container)
        first = container.orders.get_by_number(number)
        second = container.orders.get_by_number(number)

        container.state_machine.transition(first, OrderStatus.CONFIRMED, actor="staff-1")
        with pytest.raises(OrderConflictError):
            container.state_machine.transition(second, OrderStatus.CONFIRMED, actor="sweeper")

        assert _stock(container) == (7, 2)
        stored = container.orders.get_by_number(number)
        assert [e.status for e in stored.status_history] == [
            OrderStatus.PENDING,
            OrderStatus.CONFIRMED,
        ]
        assert container.customers.get_by_id("cust-1").successful_gcash_orders == 1

    def test_cancel_from_stale_copy_cannot_hide_a_commit(self, container):
        number = _pending_order(container)
        first = container.orders.get_by_number(number)
        second = container.orders.get_by_number(number)

        container.state_machine.transition(first, OrderStatus.CONFIRMED)
        with pytest.raises(OrderConflictError):
            container.state_machine.transition(second, OrderStatus.CANCELLED)

        assert second.status is OrderStatus.PENDING
        assert container.orders.get_by_number(number).status is OrderStatus.CONFIRMED
        assert _stock(container) == (7, 2)

    def test_reloaded_copy_may_proceed(self, container):
        number = _pending_order(container)
        container.state_machine.transition(
            container.orders.get_by_number(number), OrderStatus.CONFIRMED
        )

        fresh = container.orders.get_by_number(number)
        container.state_machine.transition(fresh, OrderStatus.CANCELLED)

        assert container.orders.get_by_number(number).status is OrderStatus.CANCELLED
