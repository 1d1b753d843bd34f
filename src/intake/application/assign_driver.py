"""Application service: record which driver carries a delivery.

Choosing the driver happens in the driver directory; the order only
keeps the reference.
"""

from __future__ import annotations

from intake.application.dto import OrderDTO, order_to_dto
from intake.domain.clock import Clock
from intake.domain.exceptions import OrderNotFoundError, ValidationError
from intake.domain.repository.order_repository import OrderRepository


class AssignDriverHandler:

    def __init__(self, order_repo: OrderRepository, clock: Clock) -> None:
        self._order_repo = order_repo
        self._clock = clock

    def handle(self, order_number: str, driver_id: str) -> OrderDTO:
        if not driver_id or not driver_id.strip():
            raise ValidationError("Driver ID is required")
        order = self._order_repo.get_by_number(order_number)
        if order is None:
            raise OrderNotFoundError(order_number)

        order.assign_driver(driver_id.strip(), self._clock.now())
        self._order_repo.save(order)
        return order_to_dto(order)
