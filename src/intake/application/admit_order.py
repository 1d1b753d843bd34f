"""Application service: Admit Order (checkout) use case.

Orchestrates everything that happens between "customer pressed Place
Order" and "order exists":

1. business-hours gate and daily delivery cap (hard rejects, no effects)
2. per-item resolution and stock reservation, in checkout order
3. totals, fees and the approval policy
4. auto-confirm scheduling; pickup orders with no concerns start confirmed
5. persistence and the customer's lifetime order counter

Steps 2-5 are all-or-nothing with respect to stock: any failure releases
every reservation this call acquired before the error reaches the caller.

The cap read in step 1 only rejects early. The order repository counts
again under its lock when the order is first saved, so concurrent
checkouts cannot overshoot it.
"""

from __future__ import annotations

from intake.application.dto import CheckoutRequest, OrderDTO, order_to_dto
from intake.config import Settings
from intake.domain.clock import Clock
from intake.domain.exceptions import (
    CustomerNotFoundError,
    DailyCapReachedError,
    InsufficientStockError,
    OutsideBusinessHoursError,
    ProductInactiveError,
    ProductNotFoundError,
    ValidationError,
)
from intake.domain.model.customer import Customer
from intake.domain.model.order import (
    MAX_LINE_ITEMS,
    DeliveryInfo,
    DeliveryMode,
    Order,
    OrderItem,
    OrderStatus,
    PaymentMethod,
    StockState,
)
from intake.domain.model.value_objects import Quantity
from intake.domain.repository.customer_repository import CustomerRepository
from intake.domain.repository.order_repository import OrderRepository
from intake.domain.repository.product_repository import ProductRepository
from intake.domain.service.approval_policy import (
    ApprovalPolicy,
    CheckoutContext,
    CheckoutLine,
)
from intake.domain.service.auto_confirm import compute_auto_confirm_at
from intake.domain.service.availability import available_quantity
from intake.domain.service.business_hours import BusinessHoursGate
from intake.domain.service.order_state_machine import OrderStateMachine
from intake.domain.service.stock_ledger import StockLedger
from intake.logging_config import get_logger

logger = get_logger(__name__)

_TIME_SLOTS = ("morning", "afternoon", "any")


class AdmitOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        product_repo: ProductRepository,
        customer_repo: CustomerRepository,
        ledger: StockLedger,
        state_machine: OrderStateMachine,
        gate: BusinessHoursGate,
        clock: Clock,
        settings: Settings,
    ) -> None:
        self._order_repo = order_repo
        self._product_repo = product_repo
        self._customer_repo = customer_repo
        self._ledger = ledger
        self._state_machine = state_machine
        self._gate = gate
        self._clock = clock
        self._settings = settings
        self._policy = ApprovalPolicy(
            sensitive_price_threshold=settings.sensitive_price_threshold,
            high_value_threshold=settings.high_value_threshold,
        )

    def handle(self, request: CheckoutRequest) -> OrderDTO:
        now = self._clock.now()

        if not self._gate.is_accepting_orders(now):
            raise OutsideBusinessHoursError(
                self._settings.store_open_hour, self._settings.store_close_hour
            )

        delivery, payment_method, quantities = self._validate(request)
        customer = self._customer_repo.get_by_id(request.customer_id)
        if customer is None:
            raise CustomerNotFoundError(request.customer_id)

        if delivery.mode is DeliveryMode.DELIVERY:
            count = self._order_repo.count_delivery_orders_on(now.date())
            if count >= self._settings.max_daily_orders:
                raise DailyCapReachedError(self._settings.max_daily_orders, count)

        reserved: list[tuple[str, int]] = []
        try:
            lines = self._reserve_items(request, quantities, reserved)
            order = self._build_order(request, lines, delivery, payment_method, customer, now)
            self._persist(order, customer)
        except Exception as exc:
            self._release(reserved, exc)
            raise

        logger.info(
            "Order admitted",
            extra={
                "order_number": order.order_number,
                "customer_id": order.customer_id,
                "status": order.status.value,
                "total": str(order.total),
                "reasons": ",".join(sorted(r.value for r in order.processing.approval_reasons)) or "none",
            },
        )
        return order_to_dto(order)

    # --- Steps ----------------------------------------------------------------

    @staticmethod
    def _validate(request: CheckoutRequest) -> tuple[DeliveryInfo, PaymentMethod, list[Quantity]]:
        """Reject malformed requests before anything is touched."""
        if not request.items:
            raise ValidationError("Order must contain at least one item")
        if len(request.items) > MAX_LINE_ITEMS:
            raise ValidationError(f"Maximum {MAX_LINE_ITEMS} items per order")
        try:
            mode = DeliveryMode(request.delivery_mode)
        except ValueError:
            raise ValidationError(f"Unknown delivery type '{request.delivery_mode}'") from None
        try:
            payment_method = PaymentMethod(request.payment_method)
        except ValueError:
            raise ValidationError(f"Unknown payment method '{request.payment_method}'") from None
        if request.time_slot not in _TIME_SLOTS:
            raise ValidationError(f"Unknown time slot '{request.time_slot}'")
        if mode is DeliveryMode.DELIVERY and not (request.address or "").strip():
            raise ValidationError("Delivery address is required for delivery orders")

        quantities = [Quantity(spec.quantity) for spec in request.items]
        delivery = DeliveryInfo(
            mode=mode,
            address=request.address.strip() if mode is DeliveryMode.DELIVERY and request.address else None,
            preferred_date=request.preferred_date,
            time_slot=request.time_slot,
        )
        return delivery, payment_method, quantities

    def _reserve_items(
        self,
        request: CheckoutRequest,
        quantities: list[Quantity],
        reserved: list[tuple[str, int]],
    ) -> list[CheckoutLine]:
        """Reserve each line in order, recording every success in *reserved*."""
        lines: list[CheckoutLine] = []
        for spec, qty in zip(request.items, quantities):
            product = self._product_repo.get_by_id(spec.product_id)
            if product is None:
                raise ProductNotFoundError(spec.product_id)
            if not product.is_active:
                raise ProductInactiveError(product.id, product.name)

            stock = self._ledger.snapshot(product.id)
            available = available_quantity(stock)
            if available < qty.value:
                raise InsufficientStockError(product.id, qty.value, available, product.name)
            try:
                self._ledger.reserve(product.id, qty.value)
            except InsufficientStockError as exc:
                # Lost the race to another checkout since the snapshot
                raise InsufficientStockError(
                    product.id, qty.value, exc.available, product.name
                ) from exc
            reserved.append((product.id, qty.value))
            lines.append(CheckoutLine(product=product, stock=stock, quantity=qty.value))
        return lines

    def _build_order(
        self,
        request: CheckoutRequest,
        lines: list[CheckoutLine],
        delivery: DeliveryInfo,
        payment_method: PaymentMethod,
        customer: Customer,
        now,
    ) -> Order:
        items = [
            OrderItem(
                product_id=line.product.id,
                product_name=line.product.name,
                unit_price=line.product.price,  # <-- price snapshot
                quantity=Quantity(line.quantity),
                flavor=spec.flavor,
                special_instructions=spec.special_instructions,
            )
            for line, spec in zip(lines, request.items)
        ]
        order = Order.create(
            customer_id=customer.id,
            items=items,
            delivery=delivery,
            payment_method=payment_method,
            delivery_fee=self._settings.delivery_fee,
            cod_surcharge=self._settings.cod_surcharge,
            created_at=now,
            reference_number=request.reference_number,
        )
        order.stock_state = StockState.RESERVED
        order.has_fragile_items = any(line.product.is_fragile for line in lines)
        order.has_frozen_items = any(line.product.requires_refrigeration for line in lines)

        decision = self._policy.evaluate(
            CheckoutContext(
                lines=lines,
                customer=customer,
                payment_method=payment_method,
                total=order.total,
            )
        )
        order.processing.requires_manual_approval = decision.requires_manual_approval
        order.processing.approval_reasons = decision.reasons

        if not decision.requires_manual_approval:
            order.processing.auto_confirm_at = compute_auto_confirm_at(
                now,
                self._settings.business_hours,
                delay_hours=self._settings.auto_confirm_delay_hours,
                offset_hours=self._settings.auto_confirm_offset_hours,
            )
            if delivery.mode is DeliveryMode.PICKUP:
                order.processing.is_auto_processed = True
        return order

    def _persist(self, order: Order, customer: Customer) -> None:
        initial = OrderStatus.CONFIRMED if order.processing.is_auto_processed else OrderStatus.PENDING

        customer.record_order_placed()
        self._customer_repo.save(customer)
        try:
            self._state_machine.initialize(order, initial)
        except Exception:
            current = self._customer_repo.get_by_id(customer.id)
            if current is not None:
                current.undo_order_placed()
                self._customer_repo.save(current)
            raise

    def _release(self, reserved: list[tuple[str, int]], cause: Exception) -> None:
        if not reserved:
            return
        logger.warning(
            "Checkout failed; releasing reservations",
            extra={"items": len(reserved), "error": type(cause).__name__},
        )
        for product_id, qty in reversed(reserved):
            try:
                self._ledger.release(product_id, qty)
            except Exception:
                # Keep releasing the rest; the checkout error still propagates.
                logger.exception(
                    "Could not release reservation",
                    extra={"product_id": product_id, "quantity": qty},
                )
