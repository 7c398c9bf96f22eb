#!/usr/bin/env python3
"""Tests for trigram candidate retrieval."""

import pytest

from reconciler.matching.candidates import CandidateSource, TrigramCandidateIndex
from tests.fixtures.records import make_order


@pytest.fixture
def orders():
    return [
        make_order(customer="Alex Abel", external_id="18G"),
        make_order(customer="Brian Bell", external_id="20S"),
        make_order(customer="Carla Chen", external_id="31C"),
        make_order(customer="Brian Belle", external_id="22S"),
    ]


@pytest.mark.matching
class TestTrigramCandidateIndex:
    """Test the in-memory trigram index."""

    def test_implements_protocol(self, orders):
        assert isinstance(TrigramCandidateIndex(orders), CandidateSource)

    def test_len(self, orders):
        assert len(TrigramCandidateIndex(orders)) == 4

    def test_finds_similar_names_in_input_order(self, orders):
        index = TrigramCandidateIndex(orders)

        found = index.find_candidates("Brian Ball", 0.3)

        assert [order.external_id for order in found] == ["20S", "22S"]

    def test_exact_name_found_at_full_similarity(self, orders):
        index = TrigramCandidateIndex(orders)

        found = index.find_candidates("carla chen", 1.0)

        assert found == [orders[2]]

    def test_zero_cutoff_returns_everything(self, orders):
        index = TrigramCandidateIndex(orders)

        assert index.find_candidates("Nobody", 0.0) == orders

    def test_no_shared_trigrams(self, orders):
        index = TrigramCandidateIndex(orders)

        assert index.find_candidates("Zed Quinn", 0.1) == []

    def test_empty_index(self):
        assert TrigramCandidateIndex([]).find_candidates("Alex", 0.3) == []
