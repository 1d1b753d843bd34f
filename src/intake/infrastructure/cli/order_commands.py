"""CLI commands for the Order aggregate."""

from __future__ import annotations

from datetime import datetime

import click

from intake.application.dto import CheckoutRequest, OrderDTO, OrderItemSpec
from intake.domain.exceptions import DomainException
from intake.domain.model.order import AttemptOutcome, CancellationReason, OrderStatus
from intake.infrastructure.bootstrap import Container


def _parse_items(raw: str) -> list[OrderItemSpec]:
    """Parse '3:2,7:1' (product ID : quantity) into an OrderItemSpec list."""
    specs: list[OrderItemSpec] = []
    for pair in raw.split(","):
        pair = pair.strip()
        if ":" not in pair:
            raise click.BadParameter(
                f"Invalid item format '{pair}'. Expected 'ProductID:Quantity'."
            )
        product_id, qty_str = pair.rsplit(":", 1)
        try:
            qty = int(qty_str)
        except ValueError:
            raise click.BadParameter(
                f"Invalid quantity '{qty_str}' for product '{product_id}'."
            )
        specs.append(OrderItemSpec(product_id=product_id.strip(), quantity=qty))
    return specs


def _display_order(dto: OrderDTO) -> None:
    """Shared formatting for displaying an order."""
    click.echo(f"Order {dto.order_number}  (status={dto.status})")
    click.echo(f"Customer: {dto.customer_id}")
    click.echo(f"Created:  {dto.created_at}")
    click.echo(f"Mode:     {dto.delivery_mode}, paid by {dto.payment_method} ({dto.payment_status})")
    if dto.requires_manual_approval:
        click.echo(f"Held for review: {', '.join(dto.approval_reasons)}")
    elif dto.auto_confirm_at and dto.status == "pending":
        click.echo(f"Auto-confirms at {dto.auto_confirm_at}")
    if dto.driver_id:
        click.echo(f"Driver:   {dto.driver_id} ({dto.delivery_attempts} attempt(s))")
    if dto.cancellation_reason:
        click.echo(f"Cancelled: {dto.cancellation_reason}")
    click.echo()

    click.echo(f"  {'Product':<20} {'Qty':>5} {'Price':>12} {'Total':>12}")
    click.echo(f"  {'-'*51}")
    for item in dto.items:
        click.echo(
            f"  {item.product_name:<20} {item.quantity:>5} {item.unit_price:>12} {item.line_total:>12}"
        )
    click.echo(f"  {'-'*51}")
    click.echo(f"  {'Subtotal':<27} {dto.subtotal:>24}")
    if dto.delivery_mode == "delivery":
        click.echo(f"  {'Delivery fee':<27} {dto.delivery_fee:>24}")
    if dto.payment_method == "cod":
        click.echo(f"  {'COD surcharge':<27} {dto.cod_surcharge:>24}")
    click.echo(f"  {'Order Total':<27} {dto.total:>24}")

    if dto.history:
        click.echo()
        for entry in dto.history:
            who = entry.actor or "system"
            note = f"  {entry.note}" if entry.note else ""
            click.echo(f"  {entry.timestamp}  {entry.status:<18} {who}{note}")


@click.command("create")
@click.option("--customer", required=True, help="Customer ID.")
@click.option("--items", required=True, help="Items as 'ProductID:Qty,ProductID:Qty'.")
@click.option(
    "--delivery",
    "delivery_mode",
    type=click.Choice(["pickup", "delivery"]),
    default="pickup",
    show_default=True,
)
@click.option(
    "--payment",
    "payment_method",
    type=click.Choice(["gcash", "cod"]),
    default="gcash",
    show_default=True,
)
@click.option("--address", default=None, help="Delivery address (delivery orders).")
@click.option("--date", "preferred_date", type=click.DateTime(["%Y-%m-%d"]), default=None)
@click.option(
    "--slot",
    "time_slot",
    type=click.Choice(["morning", "afternoon", "any"]),
    default="any",
    show_default=True,
)
@click.option("--reference", default=None, help="GCash reference number.")
@click.pass_obj
def order_create(
    container: Container,
    customer: str,
    items: str,
    delivery_mode: str,
    payment_method: str,
    address: str | None,
    preferred_date: datetime | None,
    time_slot: str,
    reference: str | None,
) -> None:
    """Place a new order (reserves stock)."""
    request = CheckoutRequest(
        customer_id=customer,
        items=_parse_items(items),
        delivery_mode=delivery_mode,
        payment_method=payment_method,
        address=address,
        preferred_date=preferred_date.date() if preferred_date else None,
        time_slot=time_slot,
        reference_number=reference,
    )

    try:
        dto = container.admit_order().handle(request)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_order(dto)


@click.command("show")
@click.option("--number", "order_number", required=True, help="Order number to display.")
@click.pass_obj
def order_show(container: Container, order_number: str) -> None:
    """Show details of an existing order."""
    try:
        dto = container.show_order().handle(order_number)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_order(dto)


@click.command("transition")
@click.option("--number", "order_number", required=True, help="Order number.")
@click.option(
    "--to",
    "target",
    required=True,
    type=click.Choice([s.value for s in OrderStatus]),
    help="Target status.",
)
@click.option("--actor", default=None, help="Staff or driver ID making the change.")
@click.option("--note", default=None)
@click.option(
    "--reason",
    type=click.Choice([r.value for r in CancellationReason]),
    default=None,
    help="Cancellation reason (with --to cancelled).",
)
@click.option(
    "--outcome",
    type=click.Choice([o.value for o in AttemptOutcome if o is not AttemptOutcome.SUCCESSFUL]),
    default=None,
    help="Why the delivery failed (with --to failed).",
)
@click.pass_obj
def order_transition(
    container: Container,
    order_number: str,
    target: str,
    actor: str | None,
    note: str | None,
    reason: str | None,
    outcome: str | None,
) -> None:
    """Move an order to another status."""
    try:
        dto = container.transition_order().handle(
            order_number,
            target,
            actor=actor,
            note=note,
            cancellation_reason=reason,
            attempt_outcome=outcome,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {dto.order_number} is now {dto.status}.")


@click.command("cancel")
@click.option("--number", "order_number", required=True, help="Order number to cancel.")
@click.option("--customer", required=True, help="ID of the customer who placed the order.")
@click.option("--reason", default=None, help="Free-text reason.")
@click.pass_obj
def order_cancel(container: Container, order_number: str, customer: str, reason: str | None) -> None:
    """Cancel an order on the customer's behalf (releases reserved stock)."""
    try:
        container.cancel_order().handle(order_number, customer, reason)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {order_number} cancelled.")


@click.command("hold")
@click.option("--number", "order_number", required=True, help="Order number to hold.")
@click.option("--actor", required=True, help="Staff ID.")
@click.option("--note", default=None)
@click.pass_obj
def order_hold(container: Container, order_number: str, actor: str, note: str | None) -> None:
    """Hold a pending order for manual review."""
    try:
        container.hold_order().handle(order_number, actor, note)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {order_number} held for manual review.")


@click.command("assign-driver")
@click.option("--number", "order_number", required=True, help="Order number.")
@click.option("--driver", required=True, help="Driver ID.")
@click.pass_obj
def order_assign_driver(container: Container, order_number: str, driver: str) -> None:
    """Record the driver carrying a delivery order."""
    try:
        container.assign_driver().handle(order_number, driver)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Driver {driver} assigned to order {order_number}.")


@click.command("confirm-due")
@click.pass_obj
def order_confirm_due(container: Container) -> None:
    """Confirm every pending order whose auto-confirm time has passed."""
    result = container.confirm_due_orders().handle()

    for number in result.confirmed:
        click.echo(f"Confirmed {number}")
    for number, error in result.failed.items():
        click.echo(f"Could not confirm {number}: {error}", err=True)
    click.echo(f"{len(result.confirmed)} confirmed, {len(result.failed)} failed.")
