"""Application service: put a pending order on manual review."""

from __future__ import annotations

from intake.application.dto import OrderDTO, order_to_dto
from intake.domain.exceptions import OrderNotFoundError
from intake.domain.model.order import ApprovalReason
from intake.domain.repository.order_repository import OrderRepository
from intake.logging_config import get_logger

logger = get_logger(__name__)


class HoldOrderHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(self, order_number: str, actor: str, note: str | None = None) -> OrderDTO:
        """Stop the scheduler from auto-confirming *order_number*."""
        order = self._order_repo.get_by_number(order_number)
        if order is None:
            raise OrderNotFoundError(order_number)

        order.hold_for_review(frozenset({ApprovalReason.MANUAL_REVIEW}))
        self._order_repo.save(order)
        logger.info(
            "Order held for manual review",
            extra={"order_number": order_number, "actor": actor, "note": note or ""},
        )
        return order_to_dto(order)
