#!/usr/bin/env python3
"""Tests for matching domain models."""

from dataclasses import FrozenInstanceError, replace

import pytest

from reconciler.core.errors import InputError
from reconciler.core.money import Money
from reconciler.matching.models import (
    MatchedGroup,
    MatchingResult,
    merge_results,
    validate_order,
    validate_transaction,
)
from tests.fixtures.records import make_order, make_transaction


class TestRecords:
    """Test Order and Transaction records."""

    def test_order_wire_format(self):
        order = make_order(id=7)

        assert order.to_dict() == {
            "id": 7,
            "customer": "John Smith",
            "externalId": "ORD001",
            "date": "2024-01-15",
            "item": "Laptop",
            "priceCents": 120000,
        }

    def test_transaction_wire_format(self):
        transaction = make_transaction(kind="refund", amount_cents=-120000, date=None)

        data = transaction.to_dict()

        assert data["kind"] == "refund"
        assert data["amountCents"] == -120000
        assert data["date"] is None
        assert data["matchedOrderId"] is None

    def test_records_are_immutable(self):
        order = make_order()
        with pytest.raises(FrozenInstanceError):
            order.customer = "Someone Else"

    def test_with_match_returns_copy(self):
        transaction = make_transaction(id=3)

        matched = transaction.with_match(9)

        assert matched.matched_order_id == 9
        assert transaction.matched_order_id is None
        assert matched.id == 3

    def test_refund_detection(self):
        assert make_transaction(amount_cents=-123).is_refund
        assert not make_transaction(amount_cents=123).is_refund

    def test_labels(self):
        assert make_order().label() == "John Smith (ORD001) - Laptop - $1200.00"
        assert make_transaction(kind="refund", amount_cents=-500).label() == "John Smith (ORD001) - refund: $-5.00"


class TestMatchedGroup:
    """Test MatchedGroup validation and helpers."""

    def test_requires_transactions(self):
        with pytest.raises(ValueError, match="at least one transaction"):
            MatchedGroup(order=make_order(), transactions=(), score=0.9)

    @pytest.mark.parametrize("score", [-0.01, 1.01])
    def test_score_must_be_probability(self, score):
        with pytest.raises(ValueError, match="Score"):
            MatchedGroup(order=make_order(), transactions=(make_transaction(),), score=score)

    def test_net_amount(self):
        group = MatchedGroup(
            order=make_order(),
            transactions=(make_transaction(amount_cents=121), make_transaction(amount_cents=200)),
            score=0.8,
        )
        assert group.net_amount == Money.from_cents(321)
        assert group.transaction_count == 2

    def test_wire_format(self):
        group = MatchedGroup(order=make_order(), transactions=(make_transaction(),), score=0.93)

        data = group.to_dict()

        assert data["score"] == 0.93
        assert data["order"]["externalId"] == "ORD001"
        assert len(data["transactions"]) == 1


class TestMatchingResult:
    """Test result counters and serialization."""

    @pytest.fixture
    def result(self):
        order = make_order()
        payment = make_transaction()
        refund = make_transaction(kind="refund", amount_cents=-120000)
        return MatchingResult(
            matched=(MatchedGroup(order=order, transactions=(payment, refund), score=1.0),),
            unmatched_orders=(make_order(customer="Jane Doe", external_id="ORD002"),),
            unmatched_transactions=(make_transaction(customer="Alice Brown", external_id="ORD005"),),
        )

    def test_counters(self, result):
        assert result.matched_transaction_count == 2
        assert result.total_orders == 2
        assert result.total_transactions == 3
        assert result.match_rate == pytest.approx(2 / 3)

    def test_committed_pairs(self, result):
        pairs = result.committed_pairs()

        assert len(pairs) == 2
        assert all(order is result.matched[0].order for order, _ in pairs)

    def test_wire_format_keys(self, result):
        data = result.to_dict()

        assert set(data) == {"matched", "unmatchedOrders", "unmatchedTransactions"}
        assert data["unmatchedOrders"][0]["customer"] == "Jane Doe"
        assert data["unmatchedTransactions"][0]["customer"] == "Alice Brown"

    def test_summary(self, result):
        summary = result.summary()

        assert summary["matched_orders"] == 1
        assert summary["matched_transactions"] == 2
        assert summary["unmatched_orders"] == 1
        assert summary["unmatched_transactions"] == 1

    def test_metadata_ignored_in_equality(self):
        assert MatchingResult(metadata={"threshold": 0.5}) == MatchingResult(metadata={"threshold": 0.6})


class TestMergeResults:
    """Test combining stored matches with a later run."""

    def setup_method(self):
        self.first = make_order(id=1)
        self.second = make_order(customer="Jane Doe", external_id="ORD002", id=2)
        self.stored = make_transaction(id=1).with_match(1)
        self.refund = make_transaction(id=2, kind="refund", amount_cents=-120000)
        self.stray = make_transaction(customer="Nobody", id=3)

    def test_later_commitments_join_earlier_group(self):
        earlier = MatchingResult(
            matched=(MatchedGroup(self.first, (self.stored,), 0.9),),
            unmatched_orders=(self.second,),
            unmatched_transactions=(self.refund, self.stray),
        )
        later = MatchingResult(
            matched=(MatchedGroup(self.first, (self.refund,), 0.7),),
            unmatched_orders=(self.second,),
            unmatched_transactions=(self.stray,),
            metadata={"threshold": 0.5},
        )

        merged = merge_results(earlier, later)

        assert len(merged.matched) == 1
        assert merged.matched[0].transactions == (self.stored, self.refund)
        assert merged.matched[0].score == 0.9
        assert merged.unmatched_orders == (self.second,)
        assert merged.unmatched_transactions == (self.stray,)
        assert merged.metadata == {"threshold": 0.5}

    def test_order_matched_only_later_leaves_unmatched_orders(self):
        earlier = MatchingResult(
            matched=(MatchedGroup(self.first, (self.stored,), 0.9),),
            unmatched_orders=(self.second,),
            unmatched_transactions=(self.stray,),
        )
        later = MatchingResult(
            matched=(MatchedGroup(self.second, (self.stray,), 0.6),),
            unmatched_orders=(self.first,),
        )

        merged = merge_results(earlier, later)

        assert [group.order.id for group in merged.matched] == [1, 2]
        assert merged.unmatched_orders == ()
        assert merged.unmatched_transactions == ()
        assert merged.total_transactions == 2


class TestValidation:
    """Test record validation used by the engine."""

    def test_valid_records_pass(self):
        validate_order(make_order())
        validate_transaction(make_transaction(date=None))

    def test_empty_external_id_and_item_allowed(self):
        validate_order(make_order(external_id="", item=""))

    def test_blank_customer(self):
        with pytest.raises(InputError, match="customer is required"):
            validate_order(make_order(customer=" "), where="orders[3]")

    def test_non_string_customer(self):
        with pytest.raises(InputError, match="must be a string"):
            validate_transaction(replace(make_transaction(), customer=None))

    def test_non_money_amount(self):
        with pytest.raises(InputError, match="amount must be Money"):
            validate_transaction(replace(make_transaction(), amount=123))

    def test_bad_date_type(self):
        with pytest.raises(InputError, match="date"):
            validate_order(replace(make_order(), date="2024-01-15"))

    def test_location_in_message(self):
        with pytest.raises(InputError, match=r"transactions\[2\]"):
            validate_transaction("not a transaction", where="transactions[2]")
