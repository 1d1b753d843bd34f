"""CLI commands for inventory management."""

from __future__ import annotations

import click

from intake.domain.exceptions import DomainException
from intake.infrastructure.bootstrap import Container


@click.command("set")
@click.option("--product", required=True, help="Product name.")
@click.option("--quantity", required=True, type=int, help="Amount to set, add or subtract.")
@click.option(
    "--operation",
    type=click.Choice(["set", "add", "subtract"]),
    default="set",
    show_default=True,
    help="How to apply the quantity.",
)
@click.pass_obj
def inventory_set(container: Container, product: str, quantity: int, operation: str) -> None:
    """Correct the stock level of a product."""
    handler = container.set_inventory()

    try:
        record = handler.handle(product_name=product, amount=quantity, operation=operation)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Stock for '{product}' is now {record.quantity} ({record.reserved} reserved)")


@click.command("show")
@click.pass_obj
def inventory_show(container: Container) -> None:
    """Show current inventory levels."""
    lines = container.show_inventory().handle()

    if not lines:
        click.echo("No inventory records found.")
        return

    click.echo(
        f"{'Product':<20} {'Total':>8} {'Reserved':>10} {'Available':>10}  {'Status':<12}"
    )
    click.echo("-" * 64)
    for line in lines:
        click.echo(
            f"{line.product_name:<20} {line.quantity:>8} {line.reserved:>10} "
            f"{line.available:>10}  {line.status:<12}"
        )


@click.command("availability")
@click.option("--id", "product_id", required=True, help="Product ID.")
@click.pass_obj
def inventory_availability(container: Container, product_id: str) -> None:
    """Show how many units of a product can still be sold."""
    try:
        dto = container.get_availability().handle(product_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product #{dto.product_id}: {dto.available} available ({dto.status})")
