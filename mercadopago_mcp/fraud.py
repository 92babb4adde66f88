"""
Fraud Risk Heuristic
====================
Rule-based risk scoring for a single Mercado Pago payment.

Five independent checks add weighted points; the total maps to a
qualitative level. The velocity check uses the recent payments of the same
payer, fetched by the caller.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


HIGH_AMOUNT_THRESHOLD = 5000
RAPID_TRANSACTION_THRESHOLD = 3
HOME_CURRENCY = "BRL"
DIGITAL_WALLET_METHODS = frozenset({"account_money"})


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# factor name -> points
RISK_WEIGHTS: dict[str, int] = {
    "high_amount": 20,
    "new_customer": 15,
    "international": 10,
    "digital_wallet": 5,
    "rapid_transactions": 25,
}

RECOMMENDATIONS: dict[RiskLevel, list[str]] = {
    RiskLevel.HIGH: ["manual_review", "request_documentation", "delay_fulfillment"],
    RiskLevel.MEDIUM: ["monitor_closely", "verify_contact"],
    RiskLevel.LOW: ["proceed_normally"],
}


@dataclass
class RiskAssessment:
    score: int
    level: RiskLevel
    factors: list[str]
    recommendations: list[str] = field(default_factory=list)


def risk_level(score: int) -> RiskLevel:
    if score >= 50:
        return RiskLevel.HIGH
    if score >= 30:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def triggered_factors(payment: dict, recent_payments: Optional[list[dict]]) -> list[str]:
    """Return the names of the rules this payment trips, in rule order."""
    payer = payment.get("payer") or {}
    factors = []

    if (payment.get("transaction_amount") or 0) > HIGH_AMOUNT_THRESHOLD:
        factors.append("high_amount")

    if not payer.get("id"):
        factors.append("new_customer")

    if payment.get("currency_id") != HOME_CURRENCY:
        factors.append("international")

    if payment.get("payment_method_id") in DIGITAL_WALLET_METHODS:
        factors.append("digital_wallet")

    if recent_payments and len(recent_payments) > RAPID_TRANSACTION_THRESHOLD:
        factors.append("rapid_transactions")

    return factors


def assess_payment_risk(
    payment: dict,
    recent_payments: Optional[list[dict]] = None,
    include_recommendations: bool = True,
) -> RiskAssessment:
    """Score one payment against the weighted rule set."""
    factors = triggered_factors(payment, recent_payments)
    score = sum(RISK_WEIGHTS[name] for name in factors)
    level = risk_level(score)

    return RiskAssessment(
        score=score,
        level=level,
        factors=factors,
        recommendations=list(RECOMMENDATIONS[level]) if include_recommendations else [],
    )
