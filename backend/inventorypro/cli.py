# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/inventorypro/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# Store bootstrap/inspection:
# - python -m flask store init
#   Create the remote tables, or write an empty JSON store if none exists.
# - python -m flask store info
#   Show the active backend and record counts.
#
# Inventory:
# - python -m flask inventory list
# - python -m flask inventory add --name "Green Tea" --category Tea --price 4.5 --cost-price 2 --stock 40 --threshold 5
#
# Sales:
# - python -m flask sales clear --yes
#   Delete all sales. Inventory and receipt numbering are kept.
#
# Reports:
# - python -m flask reports summary

import click
from flask.cli import AppGroup

from .extensions import get_store
from .services import inventory_service, reporting_service, sales_service
from .storage import JsonFileStore, SqlStore, StorageError
from .validation import ValidationError


store_group = AppGroup('store', help='Storage backend bootstrap and inspection.')
inventory_group = AppGroup('inventory', help='Inventory catalog commands.')
sales_group = AppGroup('sales', help='Sales history commands.')
reports_group = AppGroup('reports', help='Sales analytics.')


@store_group.command('init')
def init_store():
    """Idempotent bootstrap of the active backend."""
    store = get_store()
    try:
        if isinstance(store, SqlStore):
            store.create_schema()
            click.echo("OK  Remote tables ready")
        elif isinstance(store, JsonFileStore):
            store.snapshot()
            click.echo(f"OK  JSON store ready at {store.path}")
    except StorageError as e:
        raise click.ClickException(str(e))


@store_group.command('info')
def store_info():
    """Show the active backend and record counts."""
    store = get_store()
    try:
        items = store.list_inventory()
        sales = store.list_sales()
    except StorageError as e:
        raise click.ClickException(str(e))

    click.echo(f"Backend:         {store.kind}")
    if isinstance(store, JsonFileStore):
        click.echo(f"File:            {store.path}")
        click.echo(f"Next receipt #:  {store.snapshot().next_sale_number}")
    click.echo(f"Inventory items: {len(items)}")
    click.echo(f"Sales:           {len(sales)}")


@inventory_group.command('list')
def list_inventory():
    """List catalog items."""
    items = inventory_service.list_items(get_store())
    if not items:
        click.echo("No inventory items.")
        return
    for item in items:
        flag = " LOW" if item.is_low_stock else ""
        click.echo(
            f"{item.id}  {item.name:<30} {item.category:<15} "
            f"price={item.price} cost={item.cost_price} stock={item.stock_level}{flag}"
        )


@inventory_group.command('add')
@click.option('--name', required=True)
@click.option('--category', required=True)
@click.option('--price', required=True, type=float)
@click.option('--cost-price', required=True, type=float)
@click.option('--stock', 'stock_level', required=True, type=int)
@click.option('--threshold', 'low_stock_threshold', default=0, show_default=True, type=int)
def add_inventory(name, category, price, cost_price, stock_level, low_stock_threshold):
    """Add a catalog item."""
    payload = {
        "name": name,
        "category": category,
        "price": price,
        "costPrice": cost_price,
        "stockLevel": stock_level,
        "lowStockThreshold": low_stock_threshold,
    }
    try:
        item = inventory_service.add_item(get_store(), payload)
    except (ValidationError, StorageError) as e:
        raise click.ClickException(str(e))
    click.echo(f"OK  Added {item.name} ({item.id})")


@sales_group.command('clear')
@click.option('--yes', is_flag=True, help='Skip confirmation prompt.')
def clear_sales(yes):
    """Delete all sales. Inventory and receipt numbering are kept."""
    if not yes:
        click.confirm("WARN This will DELETE all sales. Are you sure?", abort=True)
    try:
        sales_service.clear_sales(get_store())
    except StorageError as e:
        raise click.ClickException(str(e))
    click.echo("OK  Sales cleared")


@reports_group.command('summary')
def report_summary():
    """Print the sales report headline figures."""
    report = reporting_service.sales_report(get_store())
    click.echo(f"Sales:          {report['totalSales']}")
    click.echo(f"Items sold:     {report['itemsSold']}")
    click.echo(f"Revenue:        {report['totalRevenue']}")
    click.echo(f"Profit:         {report['totalProfit']} ({report['profitMarginPct']}%)")
    click.echo(f"Avg sale value: {report['averageSaleValue']}")
    for product in report["topProducts"]:
        click.echo(f"  {product['name']:<30} qty={product['quantity']} revenue={product['revenue']}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(store_group)
    app.cli.add_command(inventory_group)
    app.cli.add_command(sales_group)
    app.cli.add_command(reports_group)
