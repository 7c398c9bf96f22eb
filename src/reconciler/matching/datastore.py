#!/usr/bin/env python3
"""
Record Store

JSON-file persistence for orders and transactions. The store keeps raw
storage rows (see mapping.order_to_row) and hands strict records to callers.

The matching engine never touches the store: a run reads records from here,
matches them, and ``apply_matches`` writes the ``matched_order_id``
back-references afterwards.
"""

import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass, fields, replace
from datetime import datetime
from json import JSONDecodeError
from pathlib import Path
from typing import Any

from ..core.datastore_mixin import DataStoreMixin
from ..core.errors import CollaboratorUnavailable, InputError
from ..core.json_utils import read_json, write_json
from .mapping import order_from_row, order_to_row, transaction_from_row, transaction_to_row
from .models import MatchedGroup, MatchingResult, Order, Transaction, validate_order, validate_transaction

logger = logging.getLogger(__name__)

# Order fields update_order accepts
_UPDATABLE_ORDER_FIELDS = frozenset(f.name for f in fields(Order)) - {"id"}


@dataclass(frozen=True)
class BulkInsertResult:
    """Outcome of a bulk insert: stored records (with ids) and duplicates skipped."""

    inserted: tuple
    skipped: int = 0

    @property
    def inserted_count(self) -> int:
        return len(self.inserted)


@dataclass(frozen=True)
class OrderPage:
    """One page of orders plus pagination totals."""

    orders: tuple[Order, ...]
    page: int
    limit: int
    total_count: int
    total_pages: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "orders": [order.to_dict() for order in self.orders],
            "page": self.page,
            "limit": self.limit,
            "totalCount": self.total_count,
            "totalPages": self.total_pages,
        }


def _transaction_key(transaction: Transaction) -> tuple[str, str, str, int]:
    return (transaction.external_id, transaction.customer, transaction.kind, transaction.amount.to_cents())


class RecordStore(DataStoreMixin):
    """
    DataStore for orders and transactions kept in a single JSON document.

    Document layout::

        {"orders": [...], "transactions": [...],
         "next_order_id": 1, "next_transaction_id": 1}
    """

    def __init__(self, records_file: Path):
        """
        Initialize the record store.

        Args:
            records_file: JSON document path (created on first write)
        """
        super().__init__()
        self.records_file = Path(records_file)

    # Raw document access

    def _empty_document(self) -> dict[str, Any]:
        return {"orders": [], "transactions": [], "next_order_id": 1, "next_transaction_id": 1}

    def _load_document(self) -> dict[str, Any]:
        if not self.records_file.exists():
            return self._empty_document()

        try:
            document = read_json(self.records_file)
        except (OSError, JSONDecodeError) as e:
            raise CollaboratorUnavailable(f"Could not read record store {self.records_file}: {e}") from e

        if not isinstance(document, dict):
            raise CollaboratorUnavailable(f"Record store {self.records_file} is not a JSON object")

        base = self._empty_document()
        base.update(document)
        if not isinstance(base["orders"], list) or not isinstance(base["transactions"], list):
            raise CollaboratorUnavailable(f"Record store {self.records_file} has a malformed layout")
        return base

    def _save_document(self, document: dict[str, Any]) -> None:
        try:
            write_json(self.records_file, document)
        except OSError as e:
            raise CollaboratorUnavailable(f"Could not write record store {self.records_file}: {e}") from e

    def _decode_orders(self, rows: list[dict[str, Any]]) -> list[Order]:
        try:
            return [order_from_row(row) for row in rows]
        except InputError as e:
            raise CollaboratorUnavailable(f"Corrupt order row in {self.records_file}: {e}") from e

    def _decode_transactions(self, rows: list[dict[str, Any]]) -> list[Transaction]:
        try:
            return [transaction_from_row(row) for row in rows]
        except InputError as e:
            raise CollaboratorUnavailable(f"Corrupt transaction row in {self.records_file}: {e}") from e

    # Bulk inserts

    def add_orders(self, orders: Iterable[Order]) -> BulkInsertResult:
        """
        Insert orders, assigning ids.

        Orders whose external id is already stored (or repeated within the
        batch) are skipped.

        Raises:
            InputError: A record is malformed
            CollaboratorUnavailable: The store can't be read or written
        """
        document = self._load_document()
        seen = {row.get("order_id") for row in document["orders"]}
        next_id = int(document["next_order_id"])

        inserted: list[Order] = []
        skipped = 0
        for i, order in enumerate(orders):
            validate_order(order, where=f"orders[{i}]")
            if order.external_id in seen:
                skipped += 1
                continue
            seen.add(order.external_id)

            stored = replace(order, id=next_id)
            next_id += 1
            document["orders"].append(order_to_row(stored))
            inserted.append(stored)

        document["next_order_id"] = next_id
        if inserted:
            self._save_document(document)

        logger.info("Inserted %d orders (%d duplicates skipped)", len(inserted), skipped)
        return BulkInsertResult(inserted=tuple(inserted), skipped=skipped)

    def add_transactions(self, transactions: Iterable[Transaction]) -> BulkInsertResult:
        """
        Insert transactions, assigning ids.

        A transaction is a duplicate when external id, customer, kind and
        amount all equal a stored one.

        Raises:
            InputError: A record is malformed
            CollaboratorUnavailable: The store can't be read or written
        """
        document = self._load_document()
        seen = {_transaction_key(t) for t in self._decode_transactions(document["transactions"])}
        next_id = int(document["next_transaction_id"])

        inserted: list[Transaction] = []
        skipped = 0
        for i, transaction in enumerate(transactions):
            validate_transaction(transaction, where=f"transactions[{i}]")
            key = _transaction_key(transaction)
            if key in seen:
                skipped += 1
                continue
            seen.add(key)

            stored = replace(transaction, id=next_id)
            next_id += 1
            document["transactions"].append(transaction_to_row(stored))
            inserted.append(stored)

        document["next_transaction_id"] = next_id
        if inserted:
            self._save_document(document)

        logger.info("Inserted %d transactions (%d duplicates skipped)", len(inserted), skipped)
        return BulkInsertResult(inserted=tuple(inserted), skipped=skipped)

    # Queries

    def all_orders(self) -> list[Order]:
        return self._decode_orders(self._load_document()["orders"])

    def all_transactions(self) -> list[Transaction]:
        return self._decode_transactions(self._load_document()["transactions"])

    def list_orders(self, page: int = 1, limit: int = 10) -> OrderPage:
        """
        Get one page of orders in id order.

        Raises:
            ValueError: If page or limit is below 1
        """
        if page < 1:
            raise ValueError(f"page must be >= 1, got {page}")
        if limit < 1:
            raise ValueError(f"limit must be >= 1, got {limit}")

        orders = self.all_orders()
        start = (page - 1) * limit
        return OrderPage(
            orders=tuple(orders[start : start + limit]),
            page=page,
            limit=limit,
            total_count=len(orders),
            total_pages=math.ceil(len(orders) / limit),
        )

    def unmatched_orders(self) -> list[Order]:
        """Orders that no stored transaction points at."""
        document = self._load_document()
        referenced = {row.get("matched_order_id") for row in document["transactions"]}
        return [order for order in self._decode_orders(document["orders"]) if order.id not in referenced]

    def unmatched_transactions(self) -> list[Transaction]:
        return [t for t in self.all_transactions() if t.matched_order_id is None]

    # Write-back

    def apply_matches(self, result: MatchingResult, replace_existing: bool = False) -> int:
        """
        Persist ``matched_order_id`` for every committed transaction.

        The group score is stored alongside so stored_result can report it.

        Args:
            result: A run over records read from this store
            replace_existing: Clear every stored match first, in the same write

        Returns:
            Number of transactions updated

        Raises:
            InputError: A committed record has no id or is not in the store
            CollaboratorUnavailable: The store can't be read or written
        """
        document = self._load_document()
        order_ids = {row.get("id") for row in document["orders"]}
        rows_by_id = {row.get("id"): row for row in document["transactions"]}

        updates: dict[int, tuple[int, float]] = {}
        for group in result.matched:
            order = group.order
            if order.id is None or order.id not in order_ids:
                raise InputError(f"Cannot write back match: order {order.label()} is not stored")
            for transaction in group.transactions:
                if transaction.id is None or transaction.id not in rows_by_id:
                    raise InputError(f"Cannot write back match: transaction {transaction.label()} is not stored")
                updates[transaction.id] = (order.id, group.score)

        cleared = self._clear_matches(document) if replace_existing else 0
        for transaction_id, (order_id, group_score) in updates.items():
            rows_by_id[transaction_id]["matched_order_id"] = order_id
            rows_by_id[transaction_id]["match_score"] = group_score

        if updates or cleared:
            self._save_document(document)
        logger.info("Wrote back %d matches (%d cleared first)", len(updates), cleared)
        return len(updates)

    @staticmethod
    def _clear_matches(document: dict[str, Any]) -> int:
        cleared = 0
        for row in document["transactions"]:
            if row.get("matched_order_id") is not None:
                cleared += 1
            row["matched_order_id"] = None
            row.pop("match_score", None)
        return cleared

    def reset_matches(self) -> int:
        """
        Clear every transaction's back-reference.

        Returns:
            Number of transactions that had a match
        """
        document = self._load_document()
        cleared = self._clear_matches(document)

        if cleared:
            self._save_document(document)
        logger.info("Reset %d matches", cleared)
        return cleared

    def stored_result(self) -> MatchingResult:
        """
        Rebuild a MatchingResult from the stored back-references.

        Groups follow order id, their transactions follow transaction id. A
        group's score is the score saved by apply_matches, 0.0 when none was
        saved. Transactions pointing at a missing order count as unmatched.
        """
        document = self._load_document()
        orders = self._decode_orders(document["orders"])
        scores = {row.get("id"): row.get("match_score") for row in document["transactions"]}

        by_order: dict[int, list[Transaction]] = {order.id: [] for order in orders}
        unmatched: list[Transaction] = []
        for transaction in self._decode_transactions(document["transactions"]):
            if transaction.matched_order_id in by_order:
                by_order[transaction.matched_order_id].append(transaction)
            else:
                if transaction.matched_order_id is not None:
                    logger.warning(
                        "Transaction %s points at missing order %s", transaction.id, transaction.matched_order_id
                    )
                unmatched.append(transaction)

        matched = []
        for order in orders:
            transactions = by_order[order.id]
            if transactions:
                group_score = max(float(scores.get(t.id) or 0.0) for t in transactions)
                matched.append(
                    MatchedGroup(order=order, transactions=tuple(transactions), score=min(1.0, max(0.0, group_score)))
                )

        return MatchingResult(
            matched=tuple(matched),
            unmatched_orders=tuple(order for order in orders if not by_order[order.id]),
            unmatched_transactions=tuple(unmatched),
        )

    # Single-order maintenance

    def update_order(self, order_id: int, **changes: Any) -> Order:
        """
        Change fields of a stored order.

        Args:
            order_id: Store id of the order
            **changes: New values for customer, external_id, date, item, price

        Returns:
            The updated Order

        Raises:
            KeyError: No order with this id
            ValueError: No changes, or an unknown field
            InputError: The updated order would be malformed
        """
        if not changes:
            raise ValueError("update_order requires at least one field to change")
        unknown = set(changes) - _UPDATABLE_ORDER_FIELDS
        if unknown:
            raise ValueError(f"Unknown order field(s): {', '.join(sorted(unknown))}")

        document = self._load_document()
        for position, row in enumerate(document["orders"]):
            if row.get("id") == order_id:
                updated = replace(self._decode_orders([row])[0], **changes)
                validate_order(updated, where=f"order {order_id}")
                document["orders"][position] = order_to_row(updated)
                self._save_document(document)
                return updated

        raise KeyError(order_id)

    def delete_order(self, order_id: int) -> None:
        """
        Delete a stored order, releasing transactions matched to it.

        Raises:
            KeyError: No order with this id
        """
        document = self._load_document()
        remaining = [row for row in document["orders"] if row.get("id") != order_id]
        if len(remaining) == len(document["orders"]):
            raise KeyError(order_id)

        document["orders"] = remaining
        for row in document["transactions"]:
            if row.get("matched_order_id") == order_id:
                row["matched_order_id"] = None
                row.pop("match_score", None)
        self._save_document(document)

    # DataStore metadata

    def exists(self) -> bool:
        return self.records_file.exists()

    def last_modified(self) -> datetime | None:
        return self._file_mtime(self.records_file)

    def item_count(self) -> int | None:
        """Orders plus transactions stored."""
        if not self.exists():
            return None
        document = self._load_document()
        return len(document["orders"]) + len(document["transactions"])

    def size_bytes(self) -> int | None:
        return self._file_size(self.records_file)

    def summary_text(self) -> str:
        if not self.exists():
            return "No stored records"
        document = self._load_document()
        matched = sum(1 for row in document["transactions"] if row.get("matched_order_id") is not None)
        return (
            f"{len(document['orders'])} orders, {len(document['transactions'])} transactions "
            f"({matched} matched)"
        )
