"""
Accounting Export
=================
Reshapes Mercado Pago payment records for accounting software.

One formatter is selected by ``AccountingFormat``; every format shares the
refund-inclusion filter.
"""

import csv
import json
from enum import Enum
from io import StringIO
from typing import Any, Callable, Optional

from mercadopago_mcp.timeutils import parse_timestamp


REFUNDED = "refunded"
APPROVED = "approved"
GUEST = "Guest"


class AccountingFormat(str, Enum):
    QUICKBOOKS = "quickbooks"
    XERO = "xero"
    SAGE = "sage"
    CSV = "csv"
    JSON = "json"


# ============================================================================
# Shared helpers
# ============================================================================

def _is_refunded(payment: dict) -> bool:
    return payment.get("status") == REFUNDED


def _payer_email(payment: dict) -> str:
    return (payment.get("payer") or {}).get("email") or GUEST


def _local_date(value: Optional[str]) -> str:
    if not value:
        return ""
    return parse_timestamp(value).strftime("%m/%d/%Y")


def _iso_date(value: Optional[str]) -> str:
    if not value:
        return ""
    return parse_timestamp(value).isoformat()


def filter_refunds(payments: list[dict], include_refunds: bool) -> list[dict]:
    if include_refunds:
        return list(payments)
    return [p for p in payments if not _is_refunded(p)]


def to_csv(records: list[dict]) -> str:
    """
    Serialize records to CSV using the first record's keys as the header.

    Nested values (payer, metadata, ...) are JSON-encoded into one cell.
    """
    if not records:
        return ""

    headers = list(records[0].keys())
    output = StringIO()
    writer = csv.DictWriter(
        output,
        fieldnames=headers,
        extrasaction="ignore",
        lineterminator="\n",
    )
    writer.writeheader()
    for record in records:
        writer.writerow({
            key: json.dumps(value) if isinstance(value, (dict, list)) else value
            for key, value in record.items()
        })
    return output.getvalue()


# ============================================================================
# Per-format record mappers
# ============================================================================

def _quickbooks_row(payment: dict) -> dict:
    return {
        "Date": _local_date(payment.get("date_created")),
        "Type": "Credit Memo" if _is_refunded(payment) else "Sales Receipt",
        "Num": payment.get("id"),
        "Name": _payer_email(payment),
        "Memo": payment.get("description"),
        "Amount": payment.get("transaction_amount"),
        "PaymentMethod": payment.get("payment_method_id"),
    }


def _xero_row(payment: dict) -> dict:
    created = _iso_date(payment.get("date_created"))
    return {
        "InvoiceNumber": payment.get("id"),
        "Contact": _payer_email(payment),
        "Date": created,
        "DueDate": created,
        "Total": payment.get("transaction_amount"),
        "Status": "PAID" if payment.get("status") == APPROVED else "DRAFT",
        "Type": "ACCRECCREDIT" if _is_refunded(payment) else "ACCREC",
    }


def _sage_row(payment: dict) -> dict:
    amount = payment.get("transaction_amount")
    return {
        "TransactionDate": _local_date(payment.get("date_created")),
        "Reference": payment.get("id"),
        "CustomerName": _payer_email(payment),
        "NetAmount": amount,
        "TaxAmount": 0,
        "GrossAmount": amount,
        "TransactionType": "SC" if _is_refunded(payment) else "SI",
    }


# format -> (display name, collection key, row mapper)
_LEDGER_LAYOUTS: dict[AccountingFormat, tuple[str, str, Callable[[dict], dict]]] = {
    AccountingFormat.QUICKBOOKS: ("QuickBooks Online", "transactions", _quickbooks_row),
    AccountingFormat.XERO: ("Xero", "invoices", _xero_row),
    AccountingFormat.SAGE: ("Sage", "entries", _sage_row),
}


def format_for_accounting(
    payments: list[dict],
    export_format: AccountingFormat,
    include_refunds: bool = True,
) -> dict[str, Any]:
    """Build the export payload for one target format."""
    export_format = AccountingFormat(export_format)
    records = filter_refunds(payments, include_refunds)

    if export_format in _LEDGER_LAYOUTS:
        name, key, mapper = _LEDGER_LAYOUTS[export_format]
        return {"format": name, key: [mapper(p) for p in records]}

    if export_format is AccountingFormat.CSV:
        return {"format": "CSV", "content": to_csv(records)}

    return {"format": "JSON", "payments": records}
