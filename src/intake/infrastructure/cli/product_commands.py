"""CLI commands for the Product aggregate."""

from __future__ import annotations

import click

from intake.domain.exceptions import DomainException
from intake.infrastructure.bootstrap import Container


@click.command("add")
@click.option("--name", required=True, help="Product name.")
@click.option("--price", required=True, help="Price in pesos (e.g. 150.00).")
@click.option("--quantity", default=0, type=int, show_default=True, help="Initial stock.")
@click.option("--sensitive", is_flag=True, default=False, help="Always hold for manual review.")
@click.option("--fragile", is_flag=True, default=False, help="Needs careful handling.")
@click.option("--frozen", is_flag=True, default=False, help="Requires refrigeration.")
@click.pass_obj
def product_add(
    container: Container,
    name: str,
    price: str,
    quantity: int,
    sensitive: bool,
    fragile: bool,
    frozen: bool,
) -> None:
    """Add a new product to the catalog."""
    handler = container.add_product()

    try:
        product = handler.handle(
            name=name,
            price=price,
            quantity=quantity,
            is_sensitive=sensitive,
            is_fragile=fragile,
            requires_refrigeration=frozen,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product #{product.id} '{product.name}' added at {product.price} (stock {quantity})")


@click.command("list")
@click.pass_obj
def product_list(container: Container) -> None:
    """List all products in the catalog."""
    products = container.products.list_all()

    if not products:
        click.echo("No products found.")
        return

    threshold = container.settings.sensitive_price_threshold
    click.echo(f"{'ID':<6} {'Name':<24} {'Price':>12} {'Active':>7}  Flags")
    click.echo("-" * 64)
    for p in products:
        flags = ",".join(sorted(p.sensitivity_reasons(threshold))) or "-"
        active = "yes" if p.is_active else "no"
        click.echo(f"{p.id:<6} {p.name:<24} {str(p.price):>12} {active:>7}  {flags}")


@click.command("update")
@click.option("--id", "product_id", required=True, help="Product ID.")
@click.option("--price", default=None, help="New price (e.g. 175.00).")
@click.option("--active/--inactive", "is_active", default=None, help="Enable or disable sales.")
@click.pass_obj
def product_update(
    container: Container, product_id: str, price: str | None, is_active: bool | None
) -> None:
    """Update a product's price or active flag."""
    if price is None and is_active is None:
        raise click.UsageError("Nothing to update: pass --price and/or --active/--inactive")

    handler = container.update_product()

    try:
        product = handler.handle(product_id=product_id, new_price=price, is_active=is_active)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    state = "active" if product.is_active else "inactive"
    click.echo(f"Product #{product.id} now {product.price} ({state})")
