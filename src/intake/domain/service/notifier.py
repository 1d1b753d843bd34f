"""Customer notification port.

Delivery of e-mails / SMS is handled outside this package. Notification is
best-effort: the state machine logs and swallows anything a notifier
raises, so a notifier must never be relied on for correctness.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from intake.domain.model.order import Order, OrderStatus
from intake.logging_config import get_logger

logger = get_logger(__name__)


class Notifier(ABC):

    @abstractmethod
    def notify(self, order: Order, new_status: OrderStatus) -> None:
        """Tell the customer that *order* reached *new_status*."""


class LoggingNotifier(Notifier):
    """Default notifier: records what would have been sent."""

    def notify(self, order: Order, new_status: OrderStatus) -> None:
        logger.info(
            "Customer notification queued",
            extra={
                "order_number": order.order_number,
                "customer_id": order.customer_id,
                "status": new_status.value,
            },
        )
