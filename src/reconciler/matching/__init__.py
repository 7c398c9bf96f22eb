"""
Order/Transaction Matching Package

Greedy, explainable matching of noisy transactions (payments, refunds,
split payments) to the orders they settle.

This package provides:
- Levenshtein, numeric and date-window similarity primitives
- Weighted pair scoring with strict and name-only profiles
- Greedy globally-sorted assignment with conservation checks
- Trigram candidate pre-filtering for large order books
- CSV loading, row translation and a JSON record store

Key Components:
- scorer: Match confidence calculation
- matcher: Assignment engine
- datastore: Persistence and match write-back
"""

from .candidates import (
    CandidateSource,
    TrigramCandidateIndex,
)
from .datastore import (
    BulkInsertResult,
    OrderPage,
    RecordStore,
)
from .loader import (
    load_orders_csv,
    load_transactions_csv,
)
from .mapping import (
    order_from_row,
    order_to_row,
    transaction_from_row,
    transaction_to_row,
)
from .matcher import (
    GreedyMatcher,
    match_records,
)
from .models import (
    MatchedGroup,
    MatchingResult,
    Order,
    Transaction,
    merge_results,
)
from .scorer import (
    NAME_ONLY_PROFILE,
    STRICT_PROFILE,
    MatchScorer,
    WeightProfile,
    resolve_profile,
    score,
)
from .similarity import (
    date_window_bonus,
    levenshtein_distance,
    numeric_proximity,
    string_similarity,
    trigram_similarity,
)

__all__ = [
    # Domain models
    "MatchedGroup",
    "MatchingResult",
    "Order",
    "Transaction",
    "merge_results",
    # Similarity primitives
    "date_window_bonus",
    "levenshtein_distance",
    "numeric_proximity",
    "string_similarity",
    "trigram_similarity",
    # Match scoring
    "NAME_ONLY_PROFILE",
    "STRICT_PROFILE",
    "MatchScorer",
    "WeightProfile",
    "resolve_profile",
    "score",
    # Assignment engine
    "GreedyMatcher",
    "match_records",
    # Candidate retrieval
    "CandidateSource",
    "TrigramCandidateIndex",
    # Loading and persistence
    "BulkInsertResult",
    "OrderPage",
    "RecordStore",
    "load_orders_csv",
    "load_transactions_csv",
    "order_from_row",
    "order_to_row",
    "transaction_from_row",
    "transaction_to_row",
]
