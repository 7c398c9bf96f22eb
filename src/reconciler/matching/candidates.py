#!/usr/bin/env python3
"""
Candidate Retrieval

Coarse pre-filtering that narrows the order set per transaction before fine
scoring. The assignment engine only depends on the CandidateSource protocol;
TrigramCandidateIndex is the in-memory implementation, mirroring a database
trigram index lookup.

Candidate selection may include false positives, but a source should not
drop an order whose customer name is a plausible match.
"""

import logging
from collections.abc import Iterable
from typing import Protocol, runtime_checkable

from .models import Order
from .similarity import trigram_similarity, trigrams

logger = logging.getLogger(__name__)


@runtime_checkable
class CandidateSource(Protocol):
    """Anything that can narrow orders by customer name."""

    def find_candidates(self, name: str, min_similarity: float) -> list[Order]:
        """Return orders whose customer name is at least ``min_similarity`` similar to ``name``."""
        ...


class TrigramCandidateIndex:
    """
    In-memory trigram index over order customer names.

    An inverted index from trigram to order positions keeps lookups from
    touching orders that share no trigram with the query.
    """

    def __init__(self, orders: Iterable[Order]):
        self.orders: list[Order] = list(orders)
        self._postings: dict[str, set[int]] = {}

        for position, order in enumerate(self.orders):
            for gram in trigrams(order.customer):
                self._postings.setdefault(gram, set()).add(position)

        logger.debug("Indexed %d orders over %d trigrams", len(self.orders), len(self._postings))

    def __len__(self) -> int:
        return len(self.orders)

    def find_candidates(self, name: str, min_similarity: float) -> list[Order]:
        """
        Find orders whose customer name trigram similarity meets the cut-off.

        Returns orders in their original (insertion) order. With
        ``min_similarity`` of 0 every order is returned.
        """
        if min_similarity <= 0:
            return list(self.orders)

        positions: set[int] = set()
        for gram in trigrams(name):
            positions |= self._postings.get(gram, set())

        return [
            self.orders[position]
            for position in sorted(positions)
            if trigram_similarity(name, self.orders[position].customer) >= min_similarity
        ]
