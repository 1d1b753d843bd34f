"""Application service: customer-initiated cancellation.

Customers may only cancel their own orders, and only before the kitchen
starts preparing them. Staff cancellations go through
``TransitionOrderHandler`` instead. Releasing reserved stock is the state
machine's job.
"""

from __future__ import annotations

from intake.application.dto import OrderDTO, order_to_dto
from intake.domain.exceptions import OrderNotFoundError, ValidationError
from intake.domain.model.order import CancellationReason, OrderStatus
from intake.domain.repository.order_repository import OrderRepository
from intake.domain.service.order_state_machine import OrderStateMachine

CUSTOMER_CANCELLABLE = frozenset({OrderStatus.PENDING, OrderStatus.CONFIRMED})


class CancelOrderHandler:

    def __init__(self, order_repo: OrderRepository, state_machine: OrderStateMachine) -> None:
        self._order_repo = order_repo
        self._state_machine = state_machine

    def handle(self, order_number: str, customer_id: str, reason: str | None = None) -> OrderDTO:
        order = self._order_repo.get_by_number(order_number)
        if order is None:
            raise OrderNotFoundError(order_number)
        if order.customer_id != customer_id:
            raise ValidationError(f"Order {order_number} does not belong to this customer")
        if order.status not in CUSTOMER_CANCELLABLE:
            raise ValidationError(
                f"Order {order_number} cannot be cancelled at this stage "
                f"(status is {order.status.value})"
            )

        self._state_machine.transition(
            order,
            OrderStatus.CANCELLED,
            actor=customer_id,
            note=reason or "Cancelled by customer",
            cancellation_reason=CancellationReason.CUSTOMER_REQUEST,
        )
        return order_to_dto(order)
