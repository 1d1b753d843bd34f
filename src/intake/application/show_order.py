"""Application service: Show Order use case (query)."""

from __future__ import annotations

from intake.application.dto import OrderDTO, order_to_dto
from intake.domain.exceptions import OrderNotFoundError
from intake.domain.repository.order_repository import OrderRepository


class ShowOrderHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(self, order_number: str) -> OrderDTO:
        order = self._order_repo.get_by_number(order_number)
        if order is None:
            raise OrderNotFoundError(order_number)
        return order_to_dto(order)
