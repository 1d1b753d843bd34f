"""Abstract repository for Order aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date

from intake.domain.model.order import Order, OrderStatus


class OrderRepository(ABC):

    @abstractmethod
    def next_order_number(self, on: date) -> str:
        """Generate the next unique order number for orders placed *on*."""

    @abstractmethod
    def get_by_number(self, order_number: str) -> Order | None:
        """Return an order by its number, or None if not found."""

    @abstractmethod
    def list_by_status(self, status: OrderStatus) -> list[Order]:
        """Return every order currently in *status*, oldest first."""

    @abstractmethod
    def count_delivery_orders_on(self, day: date) -> int:
        """Count delivery-mode orders created on *day* (any status)."""

    @abstractmethod
    def save(self, order: Order) -> None:
        """Persist a new or updated order, compare-and-swap on ``order.version``.

        New orders (``order_number is None``) get a number assigned. The
        write only lands if the stored version still equals ``order.version``
        (0 for a new order); otherwise OrderConflictError is raised and
        nothing is written. A new delivery order is refused with
        DailyCapReachedError once the day already holds the repository's
        delivery cap. On success ``order.version`` is incremented.
        """
