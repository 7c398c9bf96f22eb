#!/usr/bin/env python3
"""
Matching Domain Models

Type-safe records for the two sides of a reconciliation run and the result
shapes the assignment engine returns.

- Order: an expected event (from the order book)
- Transaction: an observed event (payment, refund, ...)
- MatchedGroup: one order plus every transaction committed to it
- MatchingResult: the full partition of a run

All four are immutable and created fresh per run. ``to_dict`` emits the
camelCase wire format used by the JSON output.
"""

from dataclasses import dataclass, field, replace
from typing import Any

from ..core.currency import is_valid_cents
from ..core.dates import FinancialDate
from ..core.errors import InputError
from ..core.money import Money


@dataclass(frozen=True)
class Order:
    """
    One expected event awaiting reconciliation.

    ``id`` is assigned by the record store and is None for orders that have
    not been persisted yet.
    """

    customer: str
    external_id: str
    date: FinancialDate | None
    item: str
    price: Money
    id: int | None = None

    @property
    def price_cents(self) -> int:
        return self.price.to_cents()

    def to_dict(self) -> dict[str, Any]:
        """Convert to wire-format dict for JSON serialization."""
        return {
            "id": self.id,
            "customer": self.customer,
            "externalId": self.external_id,
            "date": self.date.to_iso_string() if self.date else None,
            "item": self.item,
            "priceCents": self.price.to_cents(),
        }

    def label(self) -> str:
        """Short human-readable description used in logs and CLI output."""
        return f"{self.customer} ({self.external_id}) - {self.item} - {self.price}"


@dataclass(frozen=True)
class Transaction:
    """
    One observed event to reconcile against an order.

    ``amount`` is negative for refunds. ``matched_order_id`` is written by the
    caller after a run commits this transaction; the engine never reads it.
    """

    customer: str
    external_id: str
    date: FinancialDate | None
    item: str
    price: Money
    kind: str
    amount: Money
    id: int | None = None
    matched_order_id: int | None = None

    @property
    def price_cents(self) -> int:
        return self.price.to_cents()

    @property
    def amount_cents(self) -> int:
        return self.amount.to_cents()

    @property
    def is_refund(self) -> bool:
        return self.amount.is_negative

    def with_match(self, order_id: int | None) -> "Transaction":
        """Return a copy with the back-reference to a matched order set."""
        return replace(self, matched_order_id=order_id)

    def to_dict(self) -> dict[str, Any]:
        """Convert to wire-format dict for JSON serialization."""
        return {
            "id": self.id,
            "customer": self.customer,
            "externalId": self.external_id,
            "date": self.date.to_iso_string() if self.date else None,
            "item": self.item,
            "priceCents": self.price.to_cents(),
            "kind": self.kind,
            "amountCents": self.amount.to_cents(),
            "matchedOrderId": self.matched_order_id,
        }

    def label(self) -> str:
        return f"{self.customer} ({self.external_id}) - {self.kind}: {self.amount}"


@dataclass(frozen=True)
class MatchedGroup:
    """
    An order with the transactions committed to it.

    ``score`` is the score of the first (highest-scored) commitment.
    """

    order: Order
    transactions: tuple[Transaction, ...]
    score: float

    def __post_init__(self) -> None:
        """Validate group data."""
        if not self.transactions:
            raise ValueError("MatchedGroup must have at least one transaction")
        if not 0.0 <= self.score <= 1.0:
            raise ValueError(f"Score must be between 0.0 and 1.0, got {self.score}")

    @property
    def transaction_count(self) -> int:
        return len(self.transactions)

    @property
    def net_amount(self) -> Money:
        """Sum of all committed transaction amounts (payments minus refunds)."""
        total = Money.zero()
        for transaction in self.transactions:
            total = total + transaction.amount
        return total

    def to_dict(self) -> dict[str, Any]:
        return {
            "order": self.order.to_dict(),
            "transactions": [t.to_dict() for t in self.transactions],
            "score": self.score,
        }


@dataclass(frozen=True)
class MatchingResult:
    """
    Partition produced by one matching run.

    Every input order appears exactly once, either as a group's order or in
    ``unmatched_orders``; every input transaction appears exactly once, inside
    one group or in ``unmatched_transactions``.
    """

    matched: tuple[MatchedGroup, ...] = ()
    unmatched_orders: tuple[Order, ...] = ()
    unmatched_transactions: tuple[Transaction, ...] = ()
    metadata: dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def matched_transaction_count(self) -> int:
        return sum(group.transaction_count for group in self.matched)

    @property
    def total_orders(self) -> int:
        return len(self.matched) + len(self.unmatched_orders)

    @property
    def total_transactions(self) -> int:
        return self.matched_transaction_count + len(self.unmatched_transactions)

    @property
    def match_rate(self) -> float:
        """Fraction of transactions that were committed to some order."""
        if self.total_transactions == 0:
            return 0.0
        return self.matched_transaction_count / self.total_transactions

    def committed_pairs(self) -> list[tuple[Order, Transaction]]:
        """Flatten groups into (order, transaction) pairs for write-back."""
        return [(group.order, transaction) for group in self.matched for transaction in group.transactions]

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON wire format."""
        return {
            "matched": [group.to_dict() for group in self.matched],
            "unmatchedOrders": [order.to_dict() for order in self.unmatched_orders],
            "unmatchedTransactions": [t.to_dict() for t in self.unmatched_transactions],
        }

    def summary(self) -> dict[str, Any]:
        return {
            "matched_orders": len(self.matched),
            "matched_transactions": self.matched_transaction_count,
            "unmatched_orders": len(self.unmatched_orders),
            "unmatched_transactions": len(self.unmatched_transactions),
            "match_rate": self.match_rate,
        }


def _order_key(order: Order) -> Any:
    return order.id if order.id is not None else id(order)


def merge_results(earlier: MatchingResult, later: MatchingResult) -> MatchingResult:
    """
    Combine a result with a later run over its unmatched transactions.

    Both runs cover the same orders. Used to show stored matches together
    with a fresh run over the transactions that were still unmatched.
    Transactions committed later are appended to the order's earlier group,
    whose score is kept. An order is unmatched only if neither run matched it.
    """
    later_groups = {_order_key(group.order): group for group in later.matched}

    matched: list[MatchedGroup] = []
    for group in earlier.matched:
        extra = later_groups.pop(_order_key(group.order), None)
        if extra is not None:
            group = replace(group, transactions=group.transactions + extra.transactions)
        matched.append(group)
    matched.extend(group for group in later.matched if _order_key(group.order) in later_groups)

    matched_keys = {_order_key(group.order) for group in matched}
    return MatchingResult(
        matched=tuple(matched),
        unmatched_orders=tuple(o for o in earlier.unmatched_orders if _order_key(o) not in matched_keys),
        unmatched_transactions=later.unmatched_transactions,
        metadata=dict(later.metadata),
    )


def _check_text(value: Any, field_name: str, where: str, required: bool) -> None:
    if not isinstance(value, str):
        raise InputError(f"{where}: {field_name} must be a string, got {type(value).__name__}")
    if required and not value.strip():
        raise InputError(f"{where}: {field_name} is required")


def _check_money(value: Any, field_name: str, where: str) -> None:
    if not isinstance(value, Money):
        raise InputError(f"{where}: {field_name} must be Money, got {type(value).__name__}")
    if not is_valid_cents(value.cents):
        raise InputError(f"{where}: {field_name} must be a finite integer cent amount, got {value.cents!r}")


def validate_order(order: Any, where: str = "order") -> None:
    """
    Check that a record is a usable Order.

    Raises:
        InputError: Wrong type, blank customer name, or malformed price
    """
    if not isinstance(order, Order):
        raise InputError(f"{where}: expected Order, got {type(order).__name__}")
    _check_text(order.customer, "customer", where, required=True)
    _check_text(order.external_id, "external_id", where, required=False)
    _check_text(order.item, "item", where, required=False)
    _check_money(order.price, "price", where)
    if order.date is not None and not isinstance(order.date, FinancialDate):
        raise InputError(f"{where}: date must be FinancialDate or None")


def validate_transaction(transaction: Any, where: str = "transaction") -> None:
    """
    Check that a record is a usable Transaction.

    Raises:
        InputError: Wrong type, blank customer name, or malformed price/amount
    """
    if not isinstance(transaction, Transaction):
        raise InputError(f"{where}: expected Transaction, got {type(transaction).__name__}")
    _check_text(transaction.customer, "customer", where, required=True)
    _check_text(transaction.external_id, "external_id", where, required=False)
    _check_text(transaction.item, "item", where, required=False)
    _check_text(transaction.kind, "kind", where, required=False)
    _check_money(transaction.price, "price", where)
    _check_money(transaction.amount, "amount", where)
    if transaction.date is not None and not isinstance(transaction.date, FinancialDate):
        raise InputError(f"{where}: date must be FinancialDate or None")
