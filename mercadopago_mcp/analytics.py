"""
Payment Analytics
=================
Reduces one batch of payment records into revenue, conversion and trend
metrics for the dashboard tool.

Everything here is a pure function over data already fetched for the
current call.
"""

from collections import Counter, defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from mercadopago_mcp.timeutils import months_ago, parse_timestamp, to_iso


TOP_N = 5
GROWTH_THRESHOLD = 1.10
DECLINE_THRESHOLD = 0.90


class Period(str, Enum):
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"
    QUARTER = "quarter"
    YEAR = "year"


class Trend(str, Enum):
    GROWING = "growing"
    DECLINING = "declining"
    STABLE = "stable"
    INSUFFICIENT_DATA = "insufficient_data"


# metric selector -> keys of the metrics block it controls
METRIC_GROUPS: dict[str, tuple[str, ...]] = {
    "revenue": ("revenue",),
    "transactions": ("totalTransactions", "approvedTransactions", "rejectedTransactions"),
    "conversion_rate": ("conversionRate",),
    "average_ticket": ("averageTicket",),
    "top_customers": ("topCustomers",),
    "payment_methods": ("paymentMethods",),
}


def period_start(period: Period, now: datetime) -> datetime:
    """Resolve a period keyword to its start relative to ``now``."""
    period = Period(period)
    if period is Period.TODAY:
        return now.replace(hour=0, minute=0, second=0, microsecond=0)
    if period is Period.WEEK:
        return now - timedelta(days=7)
    if period is Period.MONTH:
        return months_ago(now, 1)
    if period is Period.QUARTER:
        return months_ago(now, 3)
    return months_ago(now, 12)


def _amount(payment: dict) -> float:
    return payment.get("transaction_amount") or 0


def _created(payment: dict) -> Optional[datetime]:
    value = payment.get("date_created")
    if not value:
        return None
    try:
        return parse_timestamp(value)
    except ValueError:
        return None


def chronological(payments: list[dict]) -> list[dict]:
    """Sort by creation time; records without a readable timestamp keep their order at the end."""
    stamped = [(p, _created(p)) for p in payments]
    dated = [(p, created) for p, created in stamped if created is not None]
    undated = [p for p, created in stamped if created is None]
    return [p for p, _ in sorted(dated, key=lambda pair: pair[1])] + undated


def best_day(approved: list[dict]) -> str:
    totals: dict[str, float] = defaultdict(float)
    for payment in approved:
        created = _created(payment)
        if created is not None:
            totals[created.date().isoformat()] += _amount(payment)
    if not totals:
        return "N/A"
    return max(totals.items(), key=lambda item: item[1])[0]


def peak_hour(approved: list[dict]) -> int:
    hours = Counter(
        created.hour
        for created in (_created(p) for p in approved)
        if created is not None
    )
    if not hours:
        return 0
    return hours.most_common(1)[0][0]


def trend(approved: list[dict]) -> Trend:
    """
    Compare the summed amount of the second half against the first half.

    ``approved`` must already be in chronological order.
    """
    if len(approved) < 2:
        return Trend.INSUFFICIENT_DATA

    middle = len(approved) // 2
    first_sum = sum(_amount(p) for p in approved[:middle])
    second_sum = sum(_amount(p) for p in approved[middle:])

    if second_sum > first_sum * GROWTH_THRESHOLD:
        return Trend.GROWING
    if second_sum < first_sum * DECLINE_THRESHOLD:
        return Trend.DECLINING
    return Trend.STABLE


@dataclass
class AnalyticsSnapshot:
    period: Period
    date_from: datetime
    date_to: datetime
    metrics: dict = field(default_factory=dict)
    insights: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "period": {
                "type": self.period.value,
                "from": to_iso(self.date_from),
                "to": to_iso(self.date_to),
            },
            "metrics": self.metrics,
            "insights": self.insights,
        }


def build_snapshot(
    payments: list[dict],
    period: Period,
    date_from: datetime,
    date_to: datetime,
    selected_metrics: Optional[list[str]] = None,
) -> AnalyticsSnapshot:
    """Aggregate a batch of payments into an ``AnalyticsSnapshot``."""
    ordered = chronological(payments)
    approved = [p for p in ordered if p.get("status") == "approved"]
    rejected = [p for p in ordered if p.get("status") == "rejected"]

    revenue = sum(_amount(p) for p in approved)

    method_counts: Counter = Counter()
    customer_totals: dict[str, float] = defaultdict(float)
    for payment in approved:
        method_counts[payment.get("payment_method_id")] += 1
        email = (payment.get("payer") or {}).get("email")
        if email:
            customer_totals[email] += _amount(payment)

    top_methods = sorted(method_counts.items(), key=lambda item: item[1], reverse=True)[:TOP_N]
    top_customers = sorted(customer_totals.items(), key=lambda item: item[1], reverse=True)[:TOP_N]

    metrics = {
        "revenue": revenue,
        "totalTransactions": len(ordered),
        "approvedTransactions": len(approved),
        "rejectedTransactions": len(rejected),
        "conversionRate": (len(approved) / len(ordered)) * 100 if ordered else 0,
        "averageTicket": revenue / len(approved) if approved else 0,
        "paymentMethods": [
            {"method": method, "count": count, "percentage": (count / len(approved)) * 100}
            for method, count in top_methods
        ],
        "topCustomers": [
            {"email": email, "totalSpent": total}
            for email, total in top_customers
        ],
    }

    if selected_metrics:
        keep = {key for name in selected_metrics for key in METRIC_GROUPS.get(name, ())}
        metrics = {key: value for key, value in metrics.items() if key in keep}

    insights = {
        "bestDay": best_day(approved),
        "peakHour": peak_hour(approved),
        "trend": trend(approved).value,
    }

    return AnalyticsSnapshot(
        period=Period(period),
        date_from=date_from,
        date_to=date_to,
        metrics=metrics,
        insights=insights,
    )
