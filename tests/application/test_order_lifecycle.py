"""Integration tests for the post-checkout order use cases.

Covers staff transitions, customer cancellation, manual holds, driver
assignment and the auto-confirm sweep.
"""

from datetime import datetime

import pytest

from intake.application.admit_order import AdmitOrderHandler
from intake.application.assign_driver import AssignDriverHandler
from intake.application.cancel_order import CancelOrderHandler
from intake.application.confirm_due_orders import ConfirmDueOrdersHandler
from intake.application.dto import CheckoutRequest, OrderItemSpec
from intake.application.hold_order import HoldOrderHandler
from intake.application.show_order import ShowOrderHandler
from intake.application.transition_order import TransitionOrderHandler
from intake.domain.exceptions import (
    InvalidTransitionError,
    OrderNotFoundError,
    ValidationError,
)
from intake.domain.model.product import Product
from intake.domain.model.stock import StockRecord
from intake.domain.model.value_objects import Money
from tests.fakes import Store


def _setup(**store_kwargs) -> Store:
    return Store(
        products=[
            Product(id="1", name="Leche Flan", price=Money.of("150")),
            Product(id="2", name="Cheesecake", price=Money.of("450")),
        ],
        stock=[
            StockRecord(product_id="1", quantity=20),
            StockRecord(product_id="2", quantity=20),
        ],
        **store_kwargs,
    )


def _place(store: Store, product_id: str = "1", qty: int = 2, mode: str = "delivery") -> str:
    handler = AdmitOrderHandler(
        order_repo=store.orders,
        product_repo=store.products,
        customer_repo=store.customers,
        ledger=store.ledger,
        state_machine=store.state_machine,
        gate=store.gate,
        clock=store.clock,
        settings=store.settings,
    )
    dto = handler.handle(
        CheckoutRequest(
            customer_id="cust-1",
            items=[OrderItemSpec(product_id, qty)],
            delivery_mode=mode,
            payment_method="gcash",
            address="12 Mabini St" if mode == "delivery" else None,
        )
    )
    return dto.order_number


def _stock(store: Store, product_id: str = "1") -> tuple[int, int]:
    record = store.stock.get(product_id)
    return record.quantity, record.reserved


class TestTransitionOrder:

    def test_staff_confirms_pending_order(self):
        store = _setup()
        number = _place(store)
        handler = TransitionOrderHandler(store.orders, store.state_machine)

        dto = handler.handle(number, "confirmed", actor="staff-1", note="Looks good")

        assert dto.status == "confirmed"
        assert dto.history[-1].actor == "staff-1"
        assert not dto.history[-1].automatic_update
        assert _stock(store) == (18, 0)

    def test_full_delivery_flow(self):
        store = _setup()
        number = _place(store)
        handler = TransitionOrderHandler(store.orders, store.state_machine)

        for status in ("confirmed", "preparing", "out_for_delivery", "delivered", "completed"):
            dto = handler.handle(number, status)

        assert dto.status == "completed"
        assert [h.status for h in dto.history] == [
            "pending",
            "confirmed",
            "preparing",
            "out_for_delivery",
            "delivered",
            "completed",
        ]

    def test_unknown_status_rejected(self):
        store = _setup()
        number = _place(store)
        handler = TransitionOrderHandler(store.orders, store.state_machine)
        with pytest.raises(ValidationError, match="Unknown status 'shipped'"):
            handler.handle(number, "shipped")

    def test_invalid_edge_rejected(self):
        store = _setup()
        number = _place(store)
        handler = TransitionOrderHandler(store.orders, store.state_machine)
        with pytest.raises(InvalidTransitionError):
            handler.handle(number, "completed")

    def test_unknown_order(self):
        store = _setup()
        handler = TransitionOrderHandler(store.orders, store.state_machine)
        with pytest.raises(OrderNotFoundError):
            handler.handle("CV202503039999", "confirmed")

    def test_cancellation_reason_parsed(self):
        store = _setup()
        number = _place(store)
        handler = TransitionOrderHandler(store.orders, store.state_machine)
        dto = handler.handle(number, "cancelled", cancellation_reason="duplicate_order")
        assert dto.cancellation_reason == "duplicate_order"


class TestCancelOrder:

    def test_customer_cancels_pending_order(self):
        store = _setup()
        number = _place(store)
        handler = CancelOrderHandler(store.orders, store.state_machine)

        dto = handler.handle(number, "cust-1", reason="Changed my mind")

        assert dto.status == "cancelled"
        assert dto.cancellation_reason == "customer_request"
        assert _stock(store) == (20, 0)

    def test_other_customer_cannot_cancel(self):
        store = _setup()
        number = _place(store)
        handler = CancelOrderHandler(store.orders, store.state_machine)
        with pytest.raises(ValidationError, match="does not belong"):
            handler.handle(number, "cust-2")

    def test_too_late_once_preparing(self):
        store = _setup()
        number = _place(store)
        transition = TransitionOrderHandler(store.orders, store.state_machine)
        transition.handle(number, "confirmed")
        transition.handle(number, "preparing")

        handler = CancelOrderHandler(store.orders, store.state_machine)
        with pytest.raises(ValidationError, match="cannot be cancelled at this stage"):
            handler.handle(number, "cust-1")


class TestHoldOrder:

    def test_held_order_is_skipped_by_auto_confirm(self):
        store = _setup()
        number = _place(store)
        HoldOrderHandler(store.orders).handle(number, actor="staff-1", note="Call customer")

        store.clock.advance(hours=7)
        result = ConfirmDueOrdersHandler(store.orders, store.state_machine, store.clock).handle()

        assert result.confirmed == []
        dto = ShowOrderHandler(store.orders).handle(number)
        assert dto.status == "pending"
        assert dto.approval_reasons == ["manual_review"]

    def test_cannot_hold_confirmed_order(self):
        store = _setup()
        number = _place(store, mode="pickup")
        with pytest.raises(ValidationError, match="Only pending orders"):
            HoldOrderHandler(store.orders).handle(number, actor="staff-1")


class TestConfirmDueOrders:

    def test_confirms_only_due_orders(self):
        store = _setup()
        early = _place(store)
        store.clock.advance(hours=2)
        late = _place(store)
        held = _place(store, product_id="2")  # sensitive product, never auto-confirmed

        store.clock.set_time(datetime(2025, 3, 3, 16, 30))
        result = ConfirmDueOrdersHandler(store.orders, store.state_machine, store.clock).handle()

        assert result.confirmed == [early]
        assert store.orders.get_by_number(late).status.value == "pending"
        assert store.orders.get_by_number(held).status.value == "pending"
        assert store.orders.get_by_number(early).status_history[-1].note == "Auto-confirmed"

    def test_one_failure_does_not_stop_the_sweep(self):
        store = _setup()
        first = _place(store, qty=3)
        second = _place(store, qty=2)
        # Product 1 was written down behind the ledger's back
        store.stock._store["1"] = StockRecord(product_id="1", quantity=2, reserved=2, version=50)

        store.clock.advance(hours=6)
        result = ConfirmDueOrdersHandler(store.orders, store.state_machine, store.clock).handle()

        assert result.confirmed == [second]
        assert first in result.failed
        assert "Insufficient stock" in result.failed[first]


class TestAssignDriver:

    def test_assigns_driver(self):
        store = _setup()
        number = _place(store)
        dto = AssignDriverHandler(store.orders, store.clock).handle(number, "drv-7")
        assert dto.driver_id == "drv-7"

    def test_blank_driver_rejected(self):
        store = _setup()
        number = _place(store)
        with pytest.raises(ValidationError, match="Driver ID is required"):
            AssignDriverHandler(store.orders, store.clock).handle(number, " ")
