#!/usr/bin/env python3
"""Command-line interface for the product catalog.

Manages the database schema, runs the web server and offers quick access to
the product store from a terminal.
"""

import typer
from rich.console import Console
from rich.table import Table

from src.catalog.core.errors import ProductNotFoundError
from src.catalog.core.services import DbSessionService, ProductService
from src.catalog.runtime.context import get_config
from src.catalog.runtime.init_db import init_db

console = Console()

app = typer.Typer(
    name="catalog",
    help="Product catalog CLI - manage the database, server and products",
    rich_markup_mode="rich",
)
products_app = typer.Typer(help="Product store commands")
app.add_typer(products_app, name="products")


@app.command("init-db")
def init_db_command() -> None:
    """Create the product tables."""
    init_db()
    console.print("[green]Database tables created.[/green]")


@app.command()
def serve(
    host: str = typer.Option(None, help="Bind address (defaults to app.host)"),
    port: int = typer.Option(None, help="Port (defaults to app.port)"),
    reload: bool = typer.Option(False, help="Reload on code changes"),
) -> None:
    """Run the web application with uvicorn."""
    import uvicorn

    config = get_config()
    uvicorn.run(
        "src.catalog.api.http.app:app",
        host=host or config.app.host,
        port=port or config.app.port,
        reload=reload,
        access_log=False,
    )


@products_app.command("list")
def list_products() -> None:
    """Show every stored product."""
    with DbSessionService().session_scope() as db:
        products = ProductService(db).list_products()

    if not products:
        console.print("[yellow]No products yet.[/yellow]")
        return

    table = Table(title="Products")
    table.add_column("ID", style="cyan", justify="right")
    table.add_column("Name", style="green")
    table.add_column("Price", justify="right")
    table.add_column("Description")
    for product in products:
        table.add_row(
            str(product.id),
            product.name,
            f"{product.price:.2f}",
            product.description or "",
        )
    console.print(table)


@products_app.command("add")
def add_product(
    name: str = typer.Option(..., help="Product name"),
    price: str = typer.Option(..., help="Product price"),
    description: str = typer.Option(None, help="Optional description"),
) -> None:
    """Create a product through the same validation as the web form."""
    fields = {"name": name, "price": price}
    if description is not None:
        fields["description"] = description

    with DbSessionService().session_scope() as db:
        result = ProductService(db).create(fields)

    if not result.ok:
        for field, rule in result.errors.items():
            console.print(f"[red]{field}: {rule}[/red]")
        raise typer.Exit(code=1)
    console.print(f"[green]{result.flash}[/green] (id {result.product.id})")


@products_app.command("delete")
def delete_product(product_id: int = typer.Argument(..., help="Product id")) -> None:
    """Delete a product immediately."""
    try:
        with DbSessionService().session_scope() as db:
            result = ProductService(db).delete(product_id)
    except ProductNotFoundError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1) from e
    console.print(f"[green]{result.flash}[/green]")


if __name__ == "__main__":
    app()
