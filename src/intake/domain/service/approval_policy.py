"""Approval policy: may this checkout proceed without a human?

Each business rule is an independent pure predicate returning the reason
it raises (or None). The decision is the union of every reason raised, in
a fixed evaluation order, so operators see all concerns at once.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Sequence

from intake.domain.model.customer import Customer
from intake.domain.model.order import ApprovalReason, PaymentMethod
from intake.domain.model.product import Product
from intake.domain.model.stock import StockRecord
from intake.domain.model.value_objects import Money
from intake.domain.service.availability import StockStatus, stock_status


@dataclass(frozen=True)
class CheckoutLine:
    """A resolved line item as the policy sees it.

    ``stock`` is the snapshot read before this checkout reserved anything.
    """

    product: Product
    stock: StockRecord
    quantity: int


@dataclass(frozen=True)
class CheckoutContext:

    lines: Sequence[CheckoutLine]
    customer: Customer
    payment_method: PaymentMethod
    total: Money


@dataclass(frozen=True)
class ApprovalDecision:

    reasons: frozenset[ApprovalReason]

    @property
    def requires_manual_approval(self) -> bool:
        return bool(self.reasons)


Rule = Callable[[CheckoutContext], "ApprovalReason | None"]


class ApprovalPolicy:

    def __init__(self, sensitive_price_threshold: Money, high_value_threshold: Money) -> None:
        self._sensitive_price_threshold = sensitive_price_threshold
        self._high_value_threshold = high_value_threshold
        self._rules: tuple[Rule, ...] = (
            self._low_stock,
            self._sensitive_product,
            self._first_time_cod,
            self._high_value,
        )

    def evaluate(self, context: CheckoutContext) -> ApprovalDecision:
        reasons = frozenset(
            reason for reason in (rule(context) for rule in self._rules) if reason is not None
        )
        return ApprovalDecision(reasons=reasons)

    # --- Rules ----------------------------------------------------------------

    @staticmethod
    def _low_stock(context: CheckoutContext) -> ApprovalReason | None:
        if any(stock_status(line.stock) is StockStatus.LOW_STOCK for line in context.lines):
            return ApprovalReason.LOW_STOCK
        return None

    def _sensitive_product(self, context: CheckoutContext) -> ApprovalReason | None:
        threshold = self._sensitive_price_threshold
        if any(line.product.is_sensitive_product(threshold) for line in context.lines):
            return ApprovalReason.SENSITIVE_PRODUCT
        return None

    @staticmethod
    def _first_time_cod(context: CheckoutContext) -> ApprovalReason | None:
        if context.payment_method is PaymentMethod.COD and not context.customer.cod_eligible:
            return ApprovalReason.FIRST_TIME_COD
        return None

    def _high_value(self, context: CheckoutContext) -> ApprovalReason | None:
        if context.total >= self._high_value_threshold:
            return ApprovalReason.HIGH_VALUE
        return None
