"""Composition root — wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from intake.application.add_product import AddProductHandler
from intake.application.admit_order import AdmitOrderHandler
from intake.application.assign_driver import AssignDriverHandler
from intake.application.cancel_order import CancelOrderHandler
from intake.application.confirm_due_orders import ConfirmDueOrdersHandler
from intake.application.get_availability import GetAvailabilityHandler
from intake.application.hold_order import HoldOrderHandler
from intake.application.register_customer import RegisterCustomerHandler, ShowCustomerHandler
from intake.application.set_inventory import SetInventoryHandler
from intake.application.show_inventory import ShowInventoryHandler
from intake.application.show_order import ShowOrderHandler
from intake.application.transition_order import TransitionOrderHandler
from intake.application.update_product import UpdateProductHandler
from intake.config import Settings
from intake.domain.clock import Clock, SystemClock
from intake.domain.service.business_hours import StoreHoursGate
from intake.domain.service.notifier import LoggingNotifier
from intake.domain.service.order_state_machine import OrderStateMachine
from intake.domain.service.stock_ledger import StockLedger
from intake.infrastructure.persistence.json_customer_repository import (
    JsonCustomerRepository,
)
from intake.infrastructure.persistence.json_order_repository import (
    JsonOrderRepository,
)
from intake.infrastructure.persistence.json_product_repository import (
    JsonProductRepository,
)
from intake.infrastructure.persistence.json_stock_repository import (
    JsonStockRepository,
)


def settings() -> Settings:
    return Settings.from_env()


def clock() -> Clock:
    return SystemClock()


# --- Repositories -------------------------------------------------------------


def product_repository(cfg: Settings | None = None) -> JsonProductRepository:
    return JsonProductRepository((cfg or settings()).data_dir / "products.json")


def stock_repository(cfg: Settings | None = None) -> JsonStockRepository:
    return JsonStockRepository((cfg or settings()).data_dir / "stock.json")


def order_repository(cfg: Settings | None = None) -> JsonOrderRepository:
    cfg = cfg or settings()
    return JsonOrderRepository(cfg.data_dir / "orders.json", daily_delivery_cap=cfg.max_daily_orders)


def customer_repository(cfg: Settings | None = None) -> JsonCustomerRepository:
    return JsonCustomerRepository((cfg or settings()).data_dir / "customers.json")


# --- Domain services ----------------------------------------------------------


class Container:
    """Everything one CLI invocation needs, built from one Settings."""

    def __init__(self, cfg: Settings | None = None, time_source: Clock | None = None) -> None:
        self.settings = cfg or settings()
        self.clock = time_source or clock()
        self.products = product_repository(self.settings)
        self.stock = stock_repository(self.settings)
        self.orders = order_repository(self.settings)
        self.customers = customer_repository(self.settings)
        self.ledger = StockLedger(
            self.stock, self.clock, max_retries=self.settings.stock_retry_limit
        )
        self.state_machine = OrderStateMachine(
            order_repo=self.orders,
            customer_repo=self.customers,
            ledger=self.ledger,
            notifier=LoggingNotifier(),
            clock=self.clock,
            min_gcash_orders_for_cod=self.settings.min_gcash_orders_for_cod,
            max_delivery_attempts=self.settings.max_delivery_attempts,
        )

    # --- Handlers -------------------------------------------------------------

    def admit_order(self) -> AdmitOrderHandler:
        return AdmitOrderHandler(
            order_repo=self.orders,
            product_repo=self.products,
            customer_repo=self.customers,
            ledger=self.ledger,
            state_machine=self.state_machine,
            gate=StoreHoursGate(self.settings.business_hours),
            clock=self.clock,
            settings=self.settings,
        )

    def transition_order(self) -> TransitionOrderHandler:
        return TransitionOrderHandler(self.orders, self.state_machine)

    def cancel_order(self) -> CancelOrderHandler:
        return CancelOrderHandler(self.orders, self.state_machine)

    def show_order(self) -> ShowOrderHandler:
        return ShowOrderHandler(self.orders)

    def hold_order(self) -> HoldOrderHandler:
        return HoldOrderHandler(self.orders)

    def confirm_due_orders(self) -> ConfirmDueOrdersHandler:
        return ConfirmDueOrdersHandler(self.orders, self.state_machine, self.clock)

    def assign_driver(self) -> AssignDriverHandler:
        return AssignDriverHandler(self.orders, self.clock)

    def get_availability(self) -> GetAvailabilityHandler:
        return GetAvailabilityHandler(self.ledger)

    def add_product(self) -> AddProductHandler:
        return AddProductHandler(self.products, self.stock, self.settings)

    def update_product(self) -> UpdateProductHandler:
        return UpdateProductHandler(self.products)

    def set_inventory(self) -> SetInventoryHandler:
        return SetInventoryHandler(self.ledger, self.products)

    def show_inventory(self) -> ShowInventoryHandler:
        return ShowInventoryHandler(self.stock, self.products)

    def register_customer(self) -> RegisterCustomerHandler:
        return RegisterCustomerHandler(self.customers)

    def show_customer(self) -> ShowCustomerHandler:
        return ShowCustomerHandler(self.customers)
