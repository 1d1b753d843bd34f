"""CLI commands for customer purchasing records."""

from __future__ import annotations

import click

from intake.domain.exceptions import DomainException
from intake.infrastructure.bootstrap import Container


@click.command("add")
@click.option("--id", "customer_id", required=True, help="Customer ID from the user directory.")
@click.option("--name", default="", help="Display name.")
@click.option("--cod-eligible", is_flag=True, default=False, help="Skip the first-time COD review.")
@click.pass_obj
def customer_add(container: Container, customer_id: str, name: str, cod_eligible: bool) -> None:
    """Register a customer with the order engine."""
    try:
        customer = container.register_customer().handle(customer_id, name, cod_eligible)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Customer '{customer.id}' registered")


@click.command("show")
@click.option("--id", "customer_id", required=True, help="Customer ID.")
@click.pass_obj
def customer_show(container: Container, customer_id: str) -> None:
    """Show a customer's purchasing counters."""
    try:
        customer = container.show_customer().handle(customer_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Customer:       {customer.id} {customer.name}".rstrip())
    click.echo(f"COD eligible:   {'yes' if customer.cod_eligible else 'no'}")
    click.echo(f"GCash orders:   {customer.successful_gcash_orders}")
    click.echo(f"Orders placed:  {customer.lifetime_order_count}")
    click.echo(f"Total spent:    {customer.total_spent}")
