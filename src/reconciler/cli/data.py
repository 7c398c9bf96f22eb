#!/usr/bin/env python3
"""
Data CLI - Record Store Commands

Imports CSV uploads into the record store and inspects or resets it.
"""

from pathlib import Path

import click

from ..core.errors import ReconciliationError
from ..core.json_utils import format_json
from ..matching.datastore import RecordStore
from ..matching.loader import load_orders_csv, load_transactions_csv
from ..matching.sample import seed_records
from .match import render_result


def _store(ctx: click.Context) -> RecordStore:
    return RecordStore(ctx.obj["config"].storage.records_file)


@click.group()
def data() -> None:
    """Record store management commands."""
    pass


@data.command("import-orders")
@click.argument("csv_file", type=click.Path(dir_okay=False, path_type=Path))
@click.pass_context
def import_orders(ctx: click.Context, csv_file: Path) -> None:
    """Import orders from a CSV file, skipping known order ids."""
    try:
        result = _store(ctx).add_orders(load_orders_csv(csv_file))
    except (ReconciliationError, FileNotFoundError) as e:
        raise click.ClickException(str(e)) from e

    click.echo(f"✅ Imported {result.inserted_count} orders ({result.skipped} duplicates skipped)")


@data.command("import-transactions")
@click.argument("csv_file", type=click.Path(dir_okay=False, path_type=Path))
@click.pass_context
def import_transactions(ctx: click.Context, csv_file: Path) -> None:
    """Import transactions from a CSV file, skipping duplicates."""
    try:
        result = _store(ctx).add_transactions(load_transactions_csv(csv_file))
    except (ReconciliationError, FileNotFoundError) as e:
        raise click.ClickException(str(e)) from e

    click.echo(f"✅ Imported {result.inserted_count} transactions ({result.skipped} duplicates skipped)")


@data.command("list-orders")
@click.option("--page", type=int, default=1, show_default=True)
@click.option("--limit", type=int, default=10, show_default=True)
@click.option("--json", "as_json", is_flag=True, help="Print the page as JSON")
@click.pass_context
def list_orders(ctx: click.Context, page: int, limit: int, as_json: bool) -> None:
    """List stored orders one page at a time."""
    try:
        order_page = _store(ctx).list_orders(page=page, limit=limit)
    except (ReconciliationError, ValueError) as e:
        raise click.ClickException(str(e)) from e

    if as_json:
        click.echo(format_json(order_page.to_dict()))
        return

    click.echo(f"Orders page {order_page.page} of {order_page.total_pages} ({order_page.total_count} total):")
    for order in order_page.orders:
        date = order.date.to_iso_string() if order.date else "-"
        click.echo(f"  #{order.id:<4} {date}  {order.label()}")

@data.command("list-transactions")
@click.option("--json", "as_json", is_flag=True, help="Print the transactions as JSON")
@click.pass_context
def list_transactions(ctx: click.Context, as_json: bool) -> None:
    """List stored transactions with the order each one is matched to."""
    try:
        transactions = _store(ctx).all_transactions()
    except ReconciliationError as e:
        raise click.ClickException(str(e)) from e

    if as_json:
        click.echo(format_json([transaction.to_dict() for transaction in transactions]))
        return

    click.echo(f"Transactions ({len(transactions)}):")
    for transaction in transactions:
        date = transaction.date.to_iso_string() if transaction.date else "-"
        matched = "unmatched"
        if transaction.matched_order_id is not None:
            matched = f"order #{transaction.matched_order_id}"
        marker = " (refund)" if transaction.is_refund else ""
        click.echo(f"  #{transaction.id:<4} {date}  {transaction.label()}{marker} -> {matched}")


@data.command()
@click.option("--json", "as_json", is_flag=True, help="Print the stored matches as JSON")
@click.pass_context
def results(ctx: click.Context, as_json: bool) -> None:
    """Show the matches recorded in the store."""
    try:
        result = _store(ctx).stored_result()
    except ReconciliationError as e:
        raise click.ClickException(str(e)) from e

    if as_json:
        click.echo(format_json(result.to_dict()))
    else:
        render_result(result)



@data.command("reset-matches")
@click.pass_context
def reset_matches(ctx: click.Context) -> None:
    """Clear every stored transaction's matched order."""
    try:
        cleared = _store(ctx).reset_matches()
    except ReconciliationError as e:
        raise click.ClickException(str(e)) from e

    click.echo(f"Cleared {cleared} matches")


@data.command()
@click.pass_context
def seed(ctx: click.Context) -> None:
    """Insert the sample orders and transactions (idempotent)."""
    orders, transactions = seed_records()
    store = _store(ctx)
    try:
        order_result = store.add_orders(orders)
        transaction_result = store.add_transactions(transactions)
    except ReconciliationError as e:
        raise click.ClickException(str(e)) from e

    click.echo(
        f"Seeded {order_result.inserted_count} orders and {transaction_result.inserted_count} transactions"
    )


@data.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show record store status."""
    store = _store(ctx)
    try:
        info = store.status()
    except ReconciliationError as e:
        raise click.ClickException(str(e)) from e

    click.echo(f"Record store: {store.records_file}")
    click.echo(f"  {info['summary']}")
    if info["exists"]:
        click.echo(f"  Last modified: {info['last_modified']} ({info['age_days']} days ago)")
        click.echo(f"  Size: {info['size_bytes']} bytes")
