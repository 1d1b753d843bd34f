"""Application service: confirm orders whose auto-confirm time has come.

Meant to be invoked periodically by an external scheduler (cron, a worker
loop). One order failing to confirm, e.g. because stock was corrected
downwards meanwhile, never stops the others.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from intake.domain.clock import Clock
from intake.domain.exceptions import DomainException
from intake.domain.model.order import OrderStatus
from intake.domain.repository.order_repository import OrderRepository
from intake.domain.service.order_state_machine import OrderStateMachine
from intake.logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class ConfirmDueResult:

    confirmed: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)


class ConfirmDueOrdersHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        state_machine: OrderStateMachine,
        clock: Clock,
    ) -> None:
        self._order_repo = order_repo
        self._state_machine = state_machine
        self._clock = clock

    def handle(self) -> ConfirmDueResult:
        now = self._clock.now()
        result = ConfirmDueResult()

        for order in self._order_repo.list_by_status(OrderStatus.PENDING):
            processing = order.processing
            if processing.requires_manual_approval or processing.auto_confirm_at is None:
                continue
            if processing.auto_confirm_at > now:
                continue
            try:
                self._state_machine.transition(
                    order, OrderStatus.CONFIRMED, note="Auto-confirmed"
                )
            except DomainException as exc:
                logger.warning(
                    "Auto-confirm failed",
                    extra={"order_number": order.order_number, "error": str(exc)},
                )
                result.failed[order.order_number] = str(exc)  # type: ignore[index]
                continue
            result.confirmed.append(order.order_number)  # type: ignore[arg-type]

        return result
