#!/usr/bin/env python3
"""
Record Builders and Synthetic Data

Helpers that build Order/Transaction records for tests, plus a seeded
generator of noisy order books for property-style checks.

All names, ids and amounts are synthetic.

Note: Uses standard random module for test data generation (not cryptographic use).
"""

import random
from datetime import date, timedelta

from reconciler.core.dates import FinancialDate
from reconciler.core.money import Money
from reconciler.matching.models import Order, Transaction

SYNTHETIC_CUSTOMERS = [
    "Alex Abel",
    "Brian Bell",
    "Carla Chen",
    "Dmitri Dorn",
    "Erin Eastwood",
    "Farah Flores",
    "Gus Grant",
    "Hana Hill",
]

SYNTHETIC_ITEMS = ["Tool A", "Toy B", "Lamp C", "Desk D", "Chair E"]


def make_order(
    customer: str = "John Smith",
    external_id: str = "ORD001",
    date: str | None = "2024-01-15",
    item: str = "Laptop",
    price_cents: int = 120000,
    id: int | None = None,
) -> Order:
    """Build an Order with sensible defaults."""
    return Order(
        customer=customer,
        external_id=external_id,
        date=FinancialDate.from_string(date) if date else None,
        item=item,
        price=Money.from_cents(price_cents),
        id=id,
    )


def make_transaction(
    customer: str = "John Smith",
    external_id: str = "ORD001",
    date: str | None = "2024-01-15",
    item: str = "Laptop",
    price_cents: int = 120000,
    kind: str = "payment",
    amount_cents: int | None = None,
    id: int | None = None,
) -> Transaction:
    """Build a Transaction with sensible defaults; the amount defaults to the price."""
    return Transaction(
        customer=customer,
        external_id=external_id,
        date=FinancialDate.from_string(date) if date else None,
        item=item,
        price=Money.from_cents(price_cents),
        kind=kind,
        amount=Money.from_cents(price_cents if amount_cents is None else amount_cents),
        id=id,
    )


def _mangle(text: str, rng: random.Random) -> str:
    """Introduce one typo: drop, duplicate or swap a character."""
    if len(text) < 2:
        return text
    i = rng.randrange(len(text) - 1)
    choice = rng.randrange(3)
    if choice == 0:
        return text[:i] + text[i + 1 :]
    if choice == 1:
        return text[:i] + text[i] + text[i:]
    return text[:i] + text[i + 1] + text[i] + text[i + 2 :]


def generate_noisy_records(
    order_count: int = 12, seed: int = 42
) -> tuple[list[Order], list[Transaction]]:
    """
    Generate orders plus noisy transactions for them.

    Each order gets one or two transactions (sometimes a payment and a
    refund) with misspelled names and ids; a few unrelated transactions are
    mixed in.
    """
    rng = random.Random(seed)
    start = date(2024, 1, 1)

    orders: list[Order] = []
    transactions: list[Transaction] = []
    for n in range(order_count):
        customer = rng.choice(SYNTHETIC_CUSTOMERS)
        order_date = start + timedelta(days=rng.randrange(90))
        price = rng.randrange(500, 50000)
        order = make_order(
            customer=customer,
            external_id=f"ORD{n:03d}",
            date=order_date.isoformat(),
            item=rng.choice(SYNTHETIC_ITEMS),
            price_cents=price,
        )
        orders.append(order)

        for k in range(rng.choice([1, 1, 2])):
            transactions.append(
                make_transaction(
                    customer=_mangle(customer, rng),
                    external_id=_mangle(order.external_id, rng),
                    date=(order_date + timedelta(days=rng.randrange(10))).isoformat(),
                    item=order.item,
                    price_cents=price,
                    kind="refund" if k else "payment",
                    amount_cents=-price if k else price,
                )
            )

    for n in range(3):
        transactions.append(
            make_transaction(
                customer=f"Stranger {n}",
                external_id=f"X{n}",
                date=(start + timedelta(days=rng.randrange(90))).isoformat(),
                item="Mystery",
                price_cents=rng.randrange(500, 50000),
            )
        )

    rng.shuffle(transactions)
    return orders, transactions
