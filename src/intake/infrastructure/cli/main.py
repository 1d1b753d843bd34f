import logging

import click

from intake.domain.exceptions import DomainException
from intake.infrastructure.bootstrap import Container
from intake.infrastructure.cli.customer_commands import customer_add, customer_show
from intake.infrastructure.cli.inventory_commands import (
    inventory_availability,
    inventory_set,
    inventory_show,
)
from intake.infrastructure.cli.order_commands import (
    order_assign_driver,
    order_cancel,
    order_confirm_due,
    order_create,
    order_hold,
    order_show,
    order_transition,
)
from intake.infrastructure.cli.product_commands import product_add, product_list, product_update
from intake.logging_config import configure_logging


@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log at DEBUG level.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """intake — order intake & stock reservation"""
    configure_logging(level=logging.DEBUG if verbose else logging.WARNING)
    if ctx.obj is None:
        try:
            ctx.obj = Container()
        except DomainException as exc:
            raise click.ClickException(str(exc))


@cli.group()
def order() -> None:
    """Manage orders."""


@cli.group()
def product() -> None:
    """Manage products."""


@cli.group()
def inventory() -> None:
    """Manage inventory."""


@cli.group()
def customer() -> None:
    """Manage customers."""


# Register subcommands
order.add_command(order_assign_driver)
order.add_command(order_cancel)
order.add_command(order_confirm_due)
order.add_command(order_create)
order.add_command(order_hold)
order.add_command(order_show)
order.add_command(order_transition)
product.add_command(product_add)
product.add_command(product_list)
product.add_command(product_update)
inventory.add_command(inventory_availability)
inventory.add_command(inventory_set)
inventory.add_command(inventory_show)
customer.add_command(customer_add)
customer.add_command(customer_show)
