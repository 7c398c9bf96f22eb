"""
Order Reconciler - Fuzzy Order/Transaction Matching

Reconciles an order book against independently recorded transactions whose
identifying fields are noisy: misspelled names, mangled order ids, shifted
dates and partial amounts.

Domain Packages:
- core: Money, dates, configuration, error hierarchy
- matching: similarity primitives, scoring, assignment engine, storage
- cli: Command-line interface

Example Usage:
    from reconciler.matching import GreedyMatcher, load_orders_csv

    matcher = GreedyMatcher("strict", threshold=0.5)
    result = matcher.match(orders, transactions)
"""

__version__ = "0.1.0"
__author__ = "Order Reconciler Developers"

from .core.config import Environment, get_config
from .core.errors import (
    CollaboratorUnavailable,
    ConfigurationError,
    ConservationError,
    InputError,
    ReconciliationError,
)
from .matching.matcher import GreedyMatcher, match_records
from .matching.models import MatchedGroup, MatchingResult, Order, Transaction

__all__ = [
    # Engine
    "GreedyMatcher",
    "match_records",
    # Models
    "MatchedGroup",
    "MatchingResult",
    "Order",
    "Transaction",
    # Errors
    "CollaboratorUnavailable",
    "ConfigurationError",
    "ConservationError",
    "InputError",
    "ReconciliationError",
    # Configuration
    "Environment",
    "get_config",
]
