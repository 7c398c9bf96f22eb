#!/usr/bin/env python3
"""
Sample Data

Small hand-made record sets for demos, seeding an empty store, and tests.

- seed_records: the classic noisy set (misspelled names, mangled order ids,
  a refund and a split payment)
- storefront_records: a cleaner set with one unknown customer and one
  repeat customer
"""

from ..core.dates import FinancialDate
from ..core.money import Money
from .models import Order, Transaction


def _order(customer: str, external_id: str, date: str, item: str, price_cents: int) -> Order:
    return Order(
        customer=customer,
        external_id=external_id,
        date=FinancialDate.from_string(date),
        item=item,
        price=Money.from_cents(price_cents),
    )


def _transaction(
    customer: str,
    external_id: str,
    date: str,
    item: str,
    price_cents: int,
    kind: str,
    amount_cents: int,
) -> Transaction:
    return Transaction(
        customer=customer,
        external_id=external_id,
        date=FinancialDate.from_string(date),
        item=item,
        price=Money.from_cents(price_cents),
        kind=kind,
        amount=Money.from_cents(amount_cents),
    )


def seed_records() -> tuple[list[Order], list[Transaction]]:
    """
    Two orders and four noisy transactions.

    Under the strict profile the first order collects a payment and its
    refund, the second collects both halves of a split payment.
    """
    orders = [
        _order("Alex Abel", "18G", "2023-07-11", "Tool A", 123),
        _order("Brian Bell", "20S", "2023-08-08", "Toy B", 321),
    ]
    transactions = [
        _transaction("Alexis Abe", "1B6", "2023-07-12", "Tool A", 123, "payment", 123),
        _transaction("Alex Able", "I8G", "2023-07-13", "Tool A", 123, "refund", -123),
        _transaction("Brian Ball", "ZOS", "2023-08-11", "Toy B", 321, "payment-1", 121),
        _transaction("Bryan", "705", "2023-08-13", "Toy B", 321, "payment-2", 200),
    ]
    return orders, transactions


def storefront_records() -> tuple[list[Order], list[Transaction]]:
    """Four orders and four purchases, including an unknown customer and a repeat customer."""
    orders = [
        _order("John Smith", "ORD001", "2024-01-15", "Laptop", 120000),
        _order("Jane Doe", "ORD002", "2024-01-16", "Mouse", 2500),
        _order("Bob Johnson", "ORD003", "2024-01-17", "Keyboard", 8500),
        _order("Johnny Smith", "ORD004", "2024-01-18", "Tablet", 50000),
    ]
    transactions = [
        _transaction("John Smith", "ORD001", "2024-01-15", "Laptop", 120000, "Purchase", 120000),
        _transaction("Jane Doe", "ORD002", "2024-01-16", "Mouse", 2500, "Purchase", 2500),
        _transaction("Alice Brown", "ORD005", "2024-01-18", "Monitor", 30000, "Purchase", 30000),
        _transaction("John Smith", "ORD006", "2024-01-19", "Phone", 80000, "Purchase", 80000),
    ]
    return orders, transactions


SAMPLE_SETS = {
    "seed": seed_records,
    "storefront": storefront_records,
}
