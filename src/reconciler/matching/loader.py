#!/usr/bin/env python3
"""
CSV Upload Loader

Loads order and transaction CSV uploads into domain models.

Functions:
- load_orders_csv: Load an orders CSV as Order records
- load_transactions_csv: Load a transactions CSV as Transaction records

Headers are matched case-insensitively; see mapping.COLUMN_ALIASES for the
accepted spellings. Rows that cannot be converted are skipped with a warning
instead of aborting the whole upload.
"""

import logging
from collections.abc import Callable
from pathlib import Path
from typing import TypeVar

import pandas as pd

from ..core.errors import InputError
from .mapping import COLUMN_ALIASES, normalize_column, order_from_row, transaction_from_row
from .models import Order, Transaction

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Canonical fields each kind of upload must provide a column for
# (either spelling of an amount column is enough)
ORDER_REQUIRED = ("customer", "external_id", "item", ("price_cents", "price_dollars"))
TRANSACTION_REQUIRED = ORDER_REQUIRED + ("kind", ("amount_cents", "amount_dollars"))


def _read_frame(csv_path: str | Path) -> pd.DataFrame:
    csv_path = Path(csv_path)
    if not csv_path.exists():
        raise FileNotFoundError(f"CSV file not found: {csv_path}")

    try:
        # Everything as text; mapping does the typed parsing
        return pd.read_csv(csv_path, dtype=str, keep_default_na=False, skipinitialspace=True)
    except pd.errors.EmptyDataError:
        logger.warning("CSV file is empty: %s", csv_path)
        return pd.DataFrame()
    except pd.errors.ParserError as e:
        raise InputError(f"Could not parse CSV file {csv_path}: {e}") from e


def _check_columns(df: pd.DataFrame, required: tuple, csv_path: str | Path) -> None:
    present = {COLUMN_ALIASES.get(normalize_column(column)) for column in df.columns}
    missing = []
    for requirement in required:
        options = requirement if isinstance(requirement, tuple) else (requirement,)
        if not present.intersection(options):
            missing.append("/".join(options))
    if missing:
        raise InputError(f"{csv_path} is missing required column(s): {', '.join(missing)}")


def _load_rows(
    csv_path: str | Path,
    required: tuple,
    convert: Callable[[dict], T],
    kind: str,
) -> list[T]:
    df = _read_frame(csv_path)
    if df.columns.empty:
        return []
    _check_columns(df, required, csv_path)

    records: list[T] = []
    skipped = 0
    for position, row in enumerate(df.to_dict(orient="records"), start=2):
        try:
            records.append(convert(row))
        except InputError as e:
            # Line numbers count the header as line 1
            logger.warning("Skipping %s on line %d of %s: %s", kind, position, csv_path, e)
            skipped += 1

    logger.info("Loaded %d %ss from %s (%d skipped)", len(records), kind, csv_path, skipped)
    return records


def load_orders_csv(csv_path: str | Path) -> list[Order]:
    """
    Load an orders CSV.

    Args:
        csv_path: Path to a CSV with customer, order id, date, item and price
                  columns

    Returns:
        Orders in file order

    Raises:
        FileNotFoundError: If the file doesn't exist
        InputError: If the file can't be parsed or lacks a required column
    """
    return _load_rows(csv_path, ORDER_REQUIRED, order_from_row, "order")


def load_transactions_csv(csv_path: str | Path) -> list[Transaction]:
    """
    Load a transactions CSV.

    Same columns as the orders CSV plus the transaction type and amount.

    Raises:
        FileNotFoundError: If the file doesn't exist
        InputError: If the file can't be parsed or lacks a required column
    """
    return _load_rows(csv_path, TRANSACTION_REQUIRED, transaction_from_row, "transaction")
