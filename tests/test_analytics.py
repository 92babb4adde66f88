"""Unit tests for payment analytics"""

from datetime import datetime, timezone

import pytest

from mercadopago_mcp.analytics import (
    Period,
    Trend,
    best_day,
    build_snapshot,
    chronological,
    peak_hour,
    period_start,
    trend,
)

from conftest import make_payment


NOW = datetime(2025, 3, 31, 15, 30, tzinfo=timezone.utc)


def _approved(amount, created):
    return make_payment(created, amount=amount, created=created)


@pytest.mark.parametrize("period,expected", [
    (Period.TODAY, datetime(2025, 3, 31, 0, 0, tzinfo=timezone.utc)),
    (Period.WEEK, datetime(2025, 3, 24, 15, 30, tzinfo=timezone.utc)),
    (Period.MONTH, datetime(2025, 2, 28, 15, 30, tzinfo=timezone.utc)),
    (Period.QUARTER, datetime(2024, 12, 31, 15, 30, tzinfo=timezone.utc)),
    (Period.YEAR, datetime(2024, 3, 31, 15, 30, tzinfo=timezone.utc)),
])
def test_period_start(period, expected):
    assert period_start(period, NOW) == expected


def test_trend_needs_two_payments():
    assert trend([]) is Trend.INSUFFICIENT_DATA
    assert trend([_approved(100, "2025-03-01T10:00:00Z")]) is Trend.INSUFFICIENT_DATA


@pytest.mark.parametrize("second_half,expected", [
    (111, Trend.GROWING),
    (110, Trend.STABLE),
    (90, Trend.STABLE),
    (89, Trend.DECLINING),
])
def test_trend_thresholds(second_half, expected):
    payments = [
        _approved(100, "2025-03-01T10:00:00Z"),
        _approved(second_half, "2025-03-02T10:00:00Z"),
    ]

    assert trend(payments) is expected


def test_trend_odd_count_puts_middle_in_second_half():
    payments = [
        _approved(100, "2025-03-01T10:00:00Z"),
        _approved(60, "2025-03-02T10:00:00Z"),
        _approved(60, "2025-03-03T10:00:00Z"),
    ]

    assert trend(payments) is Trend.GROWING


def test_chronological_sorts_and_keeps_undated_last():
    undated = make_payment("x", created="")
    payments = [
        _approved(1, "2025-03-05T10:00:00Z"),
        undated,
        _approved(2, "2025-03-01T10:00:00-03:00"),
    ]

    ordered = chronological(payments)

    assert [p["transaction_amount"] for p in ordered] == [2, 1, 100]


def test_unreadable_timestamps_count_as_undated():
    garbled = _approved(500, "yesterday-ish")
    payments = [garbled, _approved(1, "2025-03-05T10:00:00Z")]

    assert chronological(payments) == [payments[1], garbled]
    assert best_day(payments) == "2025-03-05"
    assert peak_hour(payments) == 10


def test_best_day_and_peak_hour():
    payments = [
        _approved(50, "2025-03-01T09:00:00Z"),
        _approved(70, "2025-03-01T14:00:00Z"),
        _approved(100, "2025-03-02T14:00:00Z"),
    ]

    assert best_day(payments) == "2025-03-01"
    assert peak_hour(payments) == 14
    assert best_day([]) == "N/A"
    assert peak_hour([]) == 0


def test_snapshot_metrics():
    payments = [
        make_payment("1", amount=100, method="pix", email="a@example.com", created="2025-03-01T10:00:00Z"),
        make_payment("2", amount=300, method="visa", email="b@example.com", created="2025-03-02T10:00:00Z"),
        make_payment("3", amount=200, method="pix", email="a@example.com", created="2025-03-03T10:00:00Z"),
        make_payment("4", amount=999, status="rejected", created="2025-03-04T10:00:00Z"),
    ]

    snapshot = build_snapshot(payments, Period.MONTH, NOW, NOW).to_dict()
    metrics = snapshot["metrics"]

    assert metrics["revenue"] == 600
    assert metrics["totalTransactions"] == 4
    assert metrics["approvedTransactions"] == 3
    assert metrics["rejectedTransactions"] == 1
    assert metrics["conversionRate"] == 75
    assert metrics["averageTicket"] == 200
    assert metrics["paymentMethods"][0] == {"method": "pix", "count": 2, "percentage": 2 / 3 * 100}
    assert metrics["topCustomers"] == [
        {"email": "a@example.com", "totalSpent": 300},
        {"email": "b@example.com", "totalSpent": 300},
    ]
    assert snapshot["period"] == {
        "type": "month",
        "from": "2025-03-31T15:30:00.000Z",
        "to": "2025-03-31T15:30:00.000Z",
    }


def test_empty_snapshot_has_zero_rates():
    snapshot = build_snapshot([], Period.TODAY, NOW, NOW)

    assert snapshot.metrics["conversionRate"] == 0
    assert snapshot.metrics["averageTicket"] == 0
    assert snapshot.metrics["paymentMethods"] == []
    assert snapshot.insights == {"bestDay": "N/A", "peakHour": 0, "trend": "insufficient_data"}


def test_selected_metrics_limit_the_metrics_block():
    payments = [make_payment("1", amount=100)]

    snapshot = build_snapshot(payments, Period.MONTH, NOW, NOW, selected_metrics=["revenue", "transactions"])

    assert set(snapshot.metrics) == {
        "revenue", "totalTransactions", "approvedTransactions", "rejectedTransactions",
    }
    assert set(snapshot.insights) == {"bestDay", "peakHour", "trend"}


def test_top_lists_are_capped_at_five():
    payments = [
        make_payment(str(i), amount=10 + i, email=f"c{i}@example.com", method=f"m{i}")
        for i in range(8)
    ]

    metrics = build_snapshot(payments, Period.YEAR, NOW, NOW).metrics

    assert len(metrics["topCustomers"]) == 5
    assert len(metrics["paymentMethods"]) == 5
    assert metrics["topCustomers"][0]["email"] == "c7@example.com"
