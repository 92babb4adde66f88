"""Unit tests for fraud risk scoring"""

import pytest

from mercadopago_mcp.fraud import RiskLevel, assess_payment_risk, risk_level, triggered_factors

from conftest import make_payment


def test_every_rule_fires():
    payment = make_payment("1", amount=5000.01, currency="ARS", method="account_money", payer_id=None)
    recent = [make_payment(str(i)) for i in range(4)]

    assessment = assess_payment_risk(payment, recent)

    assert assessment.factors == [
        "high_amount", "new_customer", "international", "digital_wallet", "rapid_transactions",
    ]
    assert assessment.score == 75
    assert assessment.level is RiskLevel.HIGH


def test_score_seventy_is_high():
    payment = make_payment("1", amount=6000, currency="USD", payer_id=None)
    recent = [make_payment(str(i)) for i in range(5)]

    assessment = assess_payment_risk(payment, recent)

    assert assessment.score == 70
    assert assessment.level is RiskLevel.HIGH
    assert assessment.recommendations == ["manual_review", "request_documentation", "delay_fulfillment"]


def test_clean_payment_is_low():
    assessment = assess_payment_risk(make_payment("1"), [make_payment("1")])

    assert assessment.score == 0
    assert assessment.factors == []
    assert assessment.level is RiskLevel.LOW
    assert assessment.recommendations == ["proceed_normally"]


def test_boundaries_are_not_triggers():
    payment = make_payment("1", amount=5000)
    recent = [make_payment(str(i)) for i in range(3)]

    assert triggered_factors(payment, recent) == []


def test_no_lookup_means_no_rapid_rule():
    assert "rapid_transactions" not in triggered_factors(make_payment("1"), None)


@pytest.mark.parametrize("score,level", [
    (0, RiskLevel.LOW),
    (29, RiskLevel.LOW),
    (30, RiskLevel.MEDIUM),
    (49, RiskLevel.MEDIUM),
    (50, RiskLevel.HIGH),
])
def test_level_thresholds(score, level):
    assert risk_level(score) is level


def test_recommendations_can_be_omitted():
    payment = make_payment("1", currency="USD", payer_id=None, method="account_money")

    assessment = assess_payment_risk(payment, include_recommendations=False)

    assert assessment.level is RiskLevel.MEDIUM
    assert assessment.recommendations == []
