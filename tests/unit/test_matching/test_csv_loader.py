#!/usr/bin/env python3
"""
Unit tests for the CSV upload loader.

Tests header aliases, unit handling and skipping of bad rows.
"""

import logging

import pytest

from reconciler.core.errors import InputError
from reconciler.matching.loader import load_orders_csv, load_transactions_csv


class TestLoadOrdersCsv:
    """Test order CSV loading."""

    def test_loads_dollar_prices(self, orders_csv):
        orders = load_orders_csv(orders_csv)

        assert [order.customer for order in orders] == ["Alex Abel", "Brian Bell"]
        assert orders[0].external_id == "18G"
        assert orders[0].price.to_cents() == 123
        assert orders[1].date.to_iso_string() == "2023-08-08"

    def test_cent_prices_and_mixed_case_headers(self, tmp_path):
        path = tmp_path / "orders.csv"
        path.write_text("CUSTOMER,Order_ID,DATE,ITEM,PriceCents\nAnn,A1,01/15/2024,Pen,250\n", encoding="utf-8")

        orders = load_orders_csv(path)

        assert orders[0].price.to_cents() == 250
        assert orders[0].date.to_iso_string() == "2024-01-15"

    def test_rows_missing_fields_are_skipped(self, tmp_path, caplog):
        path = tmp_path / "orders.csv"
        path.write_text(
            "customer,order_id,date,item,price\n"
            "Ann,A1,2024-01-15,Pen,2.50\n"
            ",A2,2024-01-15,Pen,2.50\n"
            "Bob,A3,2024-01-15,Pen,\n"
            "Cy,A4,2024-01-15,Pen,lots\n",
            encoding="utf-8",
        )

        with caplog.at_level(logging.WARNING):
            orders = load_orders_csv(path)

        assert [order.external_id for order in orders] == ["A1"]
        assert "line 3" in caplog.text
        assert "line 5" in caplog.text

    def test_missing_date_is_allowed(self, tmp_path):
        path = tmp_path / "orders.csv"
        path.write_text("customer,order_id,item,price\nAnn,A1,Pen,2.50\n", encoding="utf-8")

        assert load_orders_csv(path)[0].date is None

    def test_missing_required_column(self, tmp_path):
        path = tmp_path / "orders.csv"
        path.write_text("customer,item,price\nAnn,Pen,2.50\n", encoding="utf-8")

        with pytest.raises(InputError, match="external_id"):
            load_orders_csv(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_orders_csv(tmp_path / "nope.csv")

    def test_empty_file(self, tmp_path):
        path = tmp_path / "orders.csv"
        path.write_text("", encoding="utf-8")

        assert load_orders_csv(path) == []

    def test_header_only(self, tmp_path):
        path = tmp_path / "orders.csv"
        path.write_text("customer,order_id,date,item,price\n", encoding="utf-8")

        assert load_orders_csv(path) == []

    def test_header_only_with_wrong_columns(self, tmp_path):
        path = tmp_path / "orders.csv"
        path.write_text("name,sku,cost\n", encoding="utf-8")

        with pytest.raises(InputError, match="missing required column"):
            load_orders_csv(path)


class TestLoadTransactionsCsv:
    """Test transaction CSV loading."""

    def test_loads_cent_amounts(self, transactions_csv):
        transactions = load_transactions_csv(transactions_csv)

        assert len(transactions) == 4
        assert transactions[1].kind == "refund"
        assert transactions[1].amount.to_cents() == -123
        assert transactions[3].external_id == "705"

    def test_dollar_amount_aliases(self, tmp_path):
        path = tmp_path / "transactions.csv"
        path.write_text(
            "Customer,OrderId,Date,Item,Price,Transaction_Type,Transaction_Amount\n"
            "Ann,A1,2024-01-15,Pen,2.50,refund,-2.50\n",
            encoding="utf-8",
        )

        transaction = load_transactions_csv(path)[0]

        assert transaction.kind == "refund"
        assert transaction.amount.to_cents() == -250
        assert transaction.price.to_cents() == 250

    def test_leading_zero_ids_kept_as_text(self, tmp_path):
        path = tmp_path / "transactions.csv"
        path.write_text(
            "customer,order_id,date,item,price_cents,txn_type,txn_amount_cents\n"
            "Ann,0042,2024-01-15,Pen,250,payment,250\n",
            encoding="utf-8",
        )

        assert load_transactions_csv(path)[0].external_id == "0042"

    def test_missing_amount_column(self, tmp_path):
        path = tmp_path / "transactions.csv"
        path.write_text("customer,order_id,item,price,txn_type\nAnn,A1,Pen,2.50,payment\n", encoding="utf-8")

        with pytest.raises(InputError, match="amount"):
            load_transactions_csv(path)
