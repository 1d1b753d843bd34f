"""Application service: Transition Order use case.

Used by staff, drivers and the auto-confirm scheduler alike. All of the
rules live in ``OrderStateMachine``; this handler only resolves the order
and parses the request.
"""

from __future__ import annotations

from intake.application.dto import OrderDTO, order_to_dto
from intake.domain.exceptions import OrderNotFoundError, ValidationError
from intake.domain.model.order import AttemptOutcome, CancellationReason, OrderStatus
from intake.domain.repository.order_repository import OrderRepository
from intake.domain.service.order_state_machine import OrderStateMachine


class TransitionOrderHandler:

    def __init__(self, order_repo: OrderRepository, state_machine: OrderStateMachine) -> None:
        self._order_repo = order_repo
        self._state_machine = state_machine

    def handle(
        self,
        order_number: str,
        target_status: str,
        actor: str | None = None,
        note: str | None = None,
        cancellation_reason: str | None = None,
        attempt_outcome: str | None = None,
    ) -> OrderDTO:
        target = _parse(OrderStatus, target_status, "status")
        reason = _parse(CancellationReason, cancellation_reason, "cancellation reason")
        outcome = _parse(AttemptOutcome, attempt_outcome, "delivery outcome")

        order = self._order_repo.get_by_number(order_number)
        if order is None:
            raise OrderNotFoundError(order_number)

        self._state_machine.transition(
            order,
            target,
            actor=actor,
            note=note,
            cancellation_reason=reason,
            attempt_outcome=outcome or AttemptOutcome.FAILED_NOT_HOME,
        )
        return order_to_dto(order)


def _parse(enum_type, raw: str | None, label: str):
    if raw is None:
        return None
    try:
        return enum_type(raw)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_type)
        raise ValidationError(f"Unknown {label} '{raw}' (expected one of: {allowed})") from None
