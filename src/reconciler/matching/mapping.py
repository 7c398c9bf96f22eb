#!/usr/bin/env python3
"""
Row Translation

Converts loosely-typed rows (record store rows, CSV rows, JSON payloads)
into strict Order and Transaction records before they reach the matching
engine, and back into storage rows for persistence.

Column names are matched case-insensitively and several spellings are
accepted, e.g. ``order_id``, ``orderId`` and ``externalId`` all name the
external identifier. Amount columns come in two flavours:

- ``*_cents`` columns hold integer cents
- plain ``price`` / ``amount`` / ``txn_amount`` columns hold dollars
"""

import logging
from collections.abc import Mapping
from typing import Any

import pandas as pd

from ..core.currency import parse_cents, parse_dollars_to_cents
from ..core.dates import FinancialDate
from ..core.errors import InputError
from ..core.money import Money
from .models import Order, Transaction

logger = logging.getLogger(__name__)

# Normalized column name -> canonical field
COLUMN_ALIASES: dict[str, str] = {
    "id": "id",
    "customer": "customer",
    "customername": "customer",
    "externalid": "external_id",
    "orderid": "external_id",
    "date": "date",
    "orderdate": "date",
    "transactiondate": "date",
    "item": "item",
    "pricecents": "price_cents",
    "price": "price_dollars",
    "kind": "kind",
    "txntype": "kind",
    "transactiontype": "kind",
    "amountcents": "amount_cents",
    "txnamountcents": "amount_cents",
    "amount": "amount_dollars",
    "txnamount": "amount_dollars",
    "transactionamount": "amount_dollars",
    "matchedorderid": "matched_order_id",
}


def normalize_column(name: str) -> str:
    """Lowercase and drop separators: "Order ID" / "order_id" / "orderId" -> "orderid"."""
    return "".join(ch for ch in str(name).lower() if ch.isalnum())


def canonicalize_row(row: Mapping[str, Any]) -> dict[str, Any]:
    """
    Map a row's keys onto canonical field names.

    Unknown columns and null values are dropped. When two columns map to the
    same field the first non-blank value wins.
    """
    result: dict[str, Any] = {}
    for key, value in row.items():
        field = COLUMN_ALIASES.get(normalize_column(key))
        if field is None or _is_missing(value):
            continue
        if field not in result or _is_blank(result[field]):
            result[field] = value
    return result


def _is_missing(value: Any) -> bool:
    # None, NaN and NaT cells all count as missing
    return pd.api.types.is_scalar(value) and bool(pd.isna(value))


def _is_blank(value: Any) -> bool:
    return isinstance(value, str) and not value.strip()


def _text(fields: dict[str, Any], name: str, kind: str) -> str:
    if name not in fields:
        raise InputError(f"{kind} row is missing required field '{name}'")
    return str(fields[name]).strip()


def _money(fields: dict[str, Any], base: str, kind: str) -> Money:
    """Read ``<base>_cents`` or, failing that, ``<base>_dollars``."""
    cents = fields.get(f"{base}_cents")
    dollars = fields.get(f"{base}_dollars")
    try:
        if cents is not None and not _is_blank(cents):
            return Money.from_cents(parse_cents(cents))
        if dollars is not None and not _is_blank(dollars):
            return Money.from_cents(parse_dollars_to_cents(dollars))
    except (ValueError, TypeError) as e:
        raise InputError(f"{kind} row has an invalid {base}: {e}") from e
    raise InputError(f"{kind} row is missing required field '{base}'")


def _optional_int(fields: dict[str, Any], name: str, kind: str) -> int | None:
    if name not in fields or _is_blank(fields[name]):
        return None
    try:
        return parse_cents(fields[name])
    except (ValueError, TypeError) as e:
        raise InputError(f"{kind} row has an invalid {name}: {fields[name]!r}") from e


def _date(fields: dict[str, Any], kind: str) -> FinancialDate | None:
    if "date" not in fields or _is_blank(fields["date"]):
        return None
    try:
        return FinancialDate.parse(fields["date"])
    except ValueError:
        # Malformed dates only cost the date bonus; they do not reject the row
        logger.warning("Ignoring malformed %s date %r", kind, fields["date"])
        return None


def order_from_row(row: Mapping[str, Any]) -> Order:
    """
    Build an Order from a storage row, CSV row, or wire dict.

    Raises:
        InputError: Missing customer/external id/item/price or unparseable values
    """
    fields = canonicalize_row(row)
    customer = _text(fields, "customer", "Order")
    if not customer:
        raise InputError("Order row has an empty customer name")

    return Order(
        id=_optional_int(fields, "id", "Order"),
        customer=customer,
        external_id=_text(fields, "external_id", "Order"),
        date=_date(fields, "order"),
        item=_text(fields, "item", "Order"),
        price=_money(fields, "price", "Order"),
    )


def transaction_from_row(row: Mapping[str, Any]) -> Transaction:
    """
    Build a Transaction from a storage row, CSV row, or wire dict.

    Raises:
        InputError: Missing required fields or unparseable values
    """
    fields = canonicalize_row(row)
    customer = _text(fields, "customer", "Transaction")
    if not customer:
        raise InputError("Transaction row has an empty customer name")

    return Transaction(
        id=_optional_int(fields, "id", "Transaction"),
        customer=customer,
        external_id=_text(fields, "external_id", "Transaction"),
        date=_date(fields, "transaction"),
        item=_text(fields, "item", "Transaction"),
        price=_money(fields, "price", "Transaction"),
        kind=_text(fields, "kind", "Transaction"),
        amount=_money(fields, "amount", "Transaction"),
        matched_order_id=_optional_int(fields, "matched_order_id", "Transaction"),
    )


def order_to_row(order: Order) -> dict[str, Any]:
    """Convert an Order to a record store row."""
    return {
        "id": order.id,
        "customer": order.customer,
        "order_id": order.external_id,
        "order_date": order.date.to_iso_string() if order.date else None,
        "item": order.item,
        "price_cents": order.price.to_cents(),
    }


def transaction_to_row(transaction: Transaction) -> dict[str, Any]:
    """Convert a Transaction to a record store row."""
    return {
        "id": transaction.id,
        "customer": transaction.customer,
        "order_id": transaction.external_id,
        "transaction_date": transaction.date.to_iso_string() if transaction.date else None,
        "item": transaction.item,
        "price_cents": transaction.price.to_cents(),
        "txn_type": transaction.kind,
        "txn_amount_cents": transaction.amount.to_cents(),
        "matched_order_id": transaction.matched_order_id,
    }
