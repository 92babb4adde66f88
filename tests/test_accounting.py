"""Unit tests for accounting export formats"""

import csv
import json
from io import StringIO

import pytest

from mercadopago_mcp.accounting import AccountingFormat, format_for_accounting, to_csv

from conftest import make_payment


@pytest.fixture
def payments():
    return [
        make_payment("101", amount=250.0, created="2025-03-05T13:45:00Z", method="pix"),
        make_payment("102", amount=80.0, status="refunded", email=None, created="2025-03-06T09:00:00Z"),
        make_payment("103", amount=40.0, status="pending", created="2025-03-07T09:00:00Z"),
    ]


def test_quickbooks_rows(payments):
    result = format_for_accounting(payments, AccountingFormat.QUICKBOOKS)

    assert result["format"] == "QuickBooks Online"
    sale, refund, _ = result["transactions"]
    assert sale == {
        "Date": "03/05/2025",
        "Type": "Sales Receipt",
        "Num": "101",
        "Name": "buyer@example.com",
        "Memo": "Order 101",
        "Amount": 250.0,
        "PaymentMethod": "pix",
    }
    assert refund["Type"] == "Credit Memo"
    assert refund["Name"] == "Guest"


def test_xero_rows(payments):
    result = format_for_accounting(payments, "xero")

    assert result["format"] == "Xero"
    sale, refund, pending = result["invoices"]
    assert sale["Status"] == "PAID"
    assert sale["Type"] == "ACCREC"
    assert sale["Date"] == sale["DueDate"] == "2025-03-05T13:45:00+00:00"
    assert refund["Type"] == "ACCRECCREDIT"
    assert pending["Status"] == "DRAFT"


def test_sage_rows(payments):
    result = format_for_accounting(payments, "sage")

    assert result["format"] == "Sage"
    sale, refund, _ = result["entries"]
    assert sale["TransactionType"] == "SI"
    assert sale["TaxAmount"] == 0
    assert sale["NetAmount"] == sale["GrossAmount"] == 250.0
    assert refund["TransactionType"] == "SC"


@pytest.mark.parametrize("export_format", list(AccountingFormat))
def test_excluding_refunds_applies_to_every_format(payments, export_format):
    result = format_for_accounting(payments, export_format, include_refunds=False)

    assert "102" not in json.dumps(result)


def test_json_format_passes_records_through(payments):
    result = format_for_accounting(payments, "json")

    assert result == {"format": "JSON", "payments": payments}


def test_csv_format_wraps_content(payments):
    result = format_for_accounting(payments, "csv")

    rows = list(csv.DictReader(StringIO(result["content"])))
    assert result["format"] == "CSV"
    assert [row["id"] for row in rows] == ["101", "102", "103"]
    assert json.loads(rows[0]["payer"]) == {"email": "buyer@example.com", "id": "payer-1"}


def test_csv_header_comes_from_first_record():
    content = to_csv([{"a": 1, "b": 2}, {"a": 3, "c": 4}])

    assert content == "a,b\n1,2\n3,\n"


def test_csv_of_nothing_is_empty():
    assert to_csv([]) == ""
