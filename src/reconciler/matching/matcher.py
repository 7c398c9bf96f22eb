#!/usr/bin/env python3
"""
Order/Transaction Assignment Engine

Turns pairwise match scores into a final partition using greedy
globally-sorted assignment:

1. Score every transaction against every order (or against the orders a
   candidate source returns for it).
2. Keep pairs scoring strictly above the threshold.
3. Sort by score descending; ties go to the earlier transaction, then to the
   earlier order.
4. Walk the sorted pairs once, committing a pair only if its transaction has
   not been consumed yet. Orders are never consumed, so one order can
   collect a payment and a later refund.
5. Orders without commitments and unconsumed transactions are returned as
   the unmatched remainders.

The engine is a pure function of its inputs: it performs no I/O and keeps no
state between runs. Persisting ``matched_order_id`` is the caller's job.
"""

import logging
import math
from collections.abc import Iterable, Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any

from ..core.errors import CollaboratorUnavailable, ConfigurationError, ConservationError
from .candidates import CandidateSource
from .models import MatchedGroup, MatchingResult, Order, Transaction, validate_order, validate_transaction
from .scorer import DEFAULT_DATE_WINDOW_DAYS, MatchScorer, WeightProfile

logger = logging.getLogger(__name__)

DEFAULT_CANDIDATE_MIN_SIMILARITY = 0.3


@dataclass(frozen=True)
class ScoredPair:
    """One (order, transaction) pair that cleared the threshold, by input position."""

    score: float
    transaction_index: int
    order_index: int

    def sort_key(self) -> tuple[float, int, int]:
        return (-self.score, self.transaction_index, self.order_index)


@dataclass
class _GroupBuilder:
    order_index: int
    score: float
    transaction_indices: list[int]


def _validate_threshold(threshold: Any) -> float:
    if isinstance(threshold, bool) or not isinstance(threshold, (int, float)):
        raise ConfigurationError(f"Match threshold must be a number, got {threshold!r}")
    if not math.isfinite(threshold) or not 0.0 <= threshold <= 1.0:
        raise ConfigurationError(f"Match threshold must be within [0, 1], got {threshold!r}")
    return float(threshold)


class GreedyMatcher:
    """
    Configurable greedy matcher.

    One instance can run any number of independent matches, including
    concurrently: it holds only immutable configuration.
    """

    def __init__(
        self,
        weights: "str | WeightProfile | Mapping[str, Any]",
        threshold: float,
        *,
        date_window_days: int = DEFAULT_DATE_WINDOW_DAYS,
        max_workers: int = 1,
        candidate_source: CandidateSource | None = None,
        candidate_min_similarity: float = DEFAULT_CANDIDATE_MIN_SIMILARITY,
    ):
        """
        Initialize the matcher.

        Args:
            weights: "strict", "name-only", a WeightProfile, or custom weights
            threshold: Pairs must score strictly above this to be committed
            date_window_days: Grace period after the order date
            max_workers: Threads used for scoring; 1 scores inline
            candidate_source: Optional coarse pre-filter for orders
            candidate_min_similarity: Cut-off passed to the candidate source

        Raises:
            ConfigurationError: Any invalid option
        """
        self.threshold = _validate_threshold(threshold)
        self.scorer = MatchScorer(weights, date_window_days=date_window_days)

        if isinstance(max_workers, bool) or not isinstance(max_workers, int) or max_workers < 1:
            raise ConfigurationError(f"max_workers must be a positive integer, got {max_workers!r}")
        self.max_workers = max_workers

        if candidate_source is not None and not isinstance(candidate_source, CandidateSource):
            raise ConfigurationError("candidate_source must provide find_candidates(name, min_similarity)")
        self.candidate_source = candidate_source

        if (
            isinstance(candidate_min_similarity, bool)
            or not isinstance(candidate_min_similarity, (int, float))
            or not 0.0 <= candidate_min_similarity <= 1.0
        ):
            raise ConfigurationError(
                f"candidate_min_similarity must be within [0, 1], got {candidate_min_similarity!r}"
            )
        self.candidate_min_similarity = float(candidate_min_similarity)

    @property
    def profile(self) -> WeightProfile:
        return self.scorer.profile

    def match(self, orders: Iterable[Order], transactions: Iterable[Transaction]) -> MatchingResult:
        """
        Partition orders and transactions into matched groups and remainders.

        Args:
            orders: Orders in a stable, caller-defined order
            transactions: Transactions in a stable, caller-defined order

        Returns:
            MatchingResult covering every input record exactly once

        Raises:
            InputError: A record is malformed
            CollaboratorUnavailable: The candidate source failed
            ConservationError: The result would lose or duplicate a record
        """
        order_list = list(orders)
        transaction_list = list(transactions)

        for i, order in enumerate(order_list):
            validate_order(order, where=f"orders[{i}]")
        for i, transaction in enumerate(transaction_list):
            validate_transaction(transaction, where=f"transactions[{i}]")

        logger.info(
            "Matching %d orders against %d transactions (profile=%s, threshold=%.3f)",
            len(order_list),
            len(transaction_list),
            self.profile.name,
            self.threshold,
        )

        candidate_indices = self._candidate_indices(order_list, transaction_list)
        pairs = self._score_pairs(order_list, transaction_list, candidate_indices)
        pairs.sort(key=ScoredPair.sort_key)

        groups, consumed = self._commit(pairs, len(transaction_list))
        self._check_conservation(groups, consumed, len(order_list), len(transaction_list))

        matched_orders = {group.order_index for group in groups}
        result = MatchingResult(
            matched=tuple(
                MatchedGroup(
                    order=order_list[group.order_index],
                    transactions=tuple(transaction_list[t] for t in group.transaction_indices),
                    score=group.score,
                )
                for group in groups
            ),
            unmatched_orders=tuple(order for i, order in enumerate(order_list) if i not in matched_orders),
            unmatched_transactions=tuple(t for i, t in enumerate(transaction_list) if not consumed[i]),
            metadata={
                "profile": self.profile.to_dict(),
                "threshold": self.threshold,
                "candidate_pairs": len(pairs),
            },
        )

        logger.info(
            "Matched %d transactions into %d groups; %d orders and %d transactions unmatched",
            result.matched_transaction_count,
            len(result.matched),
            len(result.unmatched_orders),
            len(result.unmatched_transactions),
        )
        return result

    def _candidate_indices(
        self, orders: list[Order], transactions: list[Transaction]
    ) -> list[Sequence[int]]:
        """Order positions to score for each transaction."""
        all_positions = range(len(orders))
        if self.candidate_source is None:
            return [all_positions] * len(transactions)

        by_identity = {id(order): i for i, order in enumerate(orders)}
        by_value: dict[Order, list[int]] = {}
        for i, order in enumerate(orders):
            by_value.setdefault(order, []).append(i)

        result: list[Sequence[int]] = []
        for transaction in transactions:
            try:
                found = self.candidate_source.find_candidates(transaction.customer, self.candidate_min_similarity)
            except CollaboratorUnavailable:
                raise
            except Exception as e:
                raise CollaboratorUnavailable(f"Candidate retrieval failed for {transaction.customer!r}: {e}") from e

            positions: set[int] = set()
            for candidate in found:
                if not isinstance(candidate, Order):
                    raise CollaboratorUnavailable(
                        f"Candidate source returned {type(candidate).__name__} for {transaction.customer!r}, "
                        "expected Order"
                    )
                if id(candidate) in by_identity:
                    positions.add(by_identity[id(candidate)])
                elif candidate in by_value:
                    positions.update(by_value[candidate])
                else:
                    logger.debug("Ignoring candidate outside the input set: %s", candidate.label())
            result.append(sorted(positions))

        return result

    def _score_transaction(
        self,
        transaction_index: int,
        transaction: Transaction,
        orders: list[Order],
        order_indices: Sequence[int],
    ) -> list[ScoredPair]:
        pairs = []
        for order_index in order_indices:
            pair_score = self.scorer.score(orders[order_index], transaction)
            if pair_score > self.threshold:
                pairs.append(ScoredPair(pair_score, transaction_index, order_index))
        return pairs

    def _score_pairs(
        self,
        orders: list[Order],
        transactions: list[Transaction],
        candidate_indices: list[Sequence[int]],
    ) -> list[ScoredPair]:
        """Score all relevant pairs, collecting results in transaction order."""
        if self.max_workers == 1 or len(transactions) < 2:
            pairs: list[ScoredPair] = []
            for i, transaction in enumerate(transactions):
                pairs.extend(self._score_transaction(i, transaction, orders, candidate_indices[i]))
            return pairs

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = [
                executor.submit(self._score_transaction, i, transaction, orders, candidate_indices[i])
                for i, transaction in enumerate(transactions)
            ]
            pairs = []
            for future in futures:
                pairs.extend(future.result())
        return pairs

    def _commit(self, pairs: list[ScoredPair], transaction_count: int) -> tuple[list[_GroupBuilder], list[bool]]:
        """Single-threaded greedy walk over the sorted pairs."""
        consumed = [False] * transaction_count
        groups: dict[int, _GroupBuilder] = {}

        for pair in pairs:
            if consumed[pair.transaction_index]:
                continue
            consumed[pair.transaction_index] = True

            group = groups.get(pair.order_index)
            if group is None:
                groups[pair.order_index] = _GroupBuilder(
                    order_index=pair.order_index,
                    score=pair.score,
                    transaction_indices=[pair.transaction_index],
                )
            else:
                group.transaction_indices.append(pair.transaction_index)

            logger.debug(
                "Committed transaction #%d to order #%d (score %.3f)",
                pair.transaction_index,
                pair.order_index,
                pair.score,
            )

        return list(groups.values()), consumed

    @staticmethod
    def _check_conservation(
        groups: list[_GroupBuilder], consumed: list[bool], order_count: int, transaction_count: int
    ) -> None:
        order_hits = [0] * order_count
        for group in groups:
            order_hits[group.order_index] += 1
        if any(hits > 1 for hits in order_hits):
            raise ConservationError("An order was placed in more than one matched group")

        transaction_hits = [0] * transaction_count
        for group in groups:
            for t in group.transaction_indices:
                transaction_hits[t] += 1
        for i, hits in enumerate(transaction_hits):
            if hits > 1 or bool(hits) != consumed[i]:
                raise ConservationError(f"Transaction #{i} was assigned {hits} times")


def match_records(
    orders: Iterable[Order],
    transactions: Iterable[Transaction],
    weights: "str | WeightProfile | Mapping[str, Any]",
    threshold: float,
    **options: Any,
) -> MatchingResult:
    """
    Run one greedy matching pass.

    Args:
        orders: Orders to reconcile
        transactions: Transactions to reconcile
        weights: "strict", "name-only", a WeightProfile, or custom weights
        threshold: Minimum (exclusive) score for a commitment
        **options: Forwarded to GreedyMatcher (date_window_days, max_workers,
                   candidate_source, candidate_min_similarity)

    Returns:
        MatchingResult
    """
    return GreedyMatcher(weights, threshold, **options).match(orders, transactions)
