"""Unit tests for tool input models"""

import pytest
from pydantic import ValidationError

from mercadopago_mcp import schemas


def test_defaults_are_resolved_at_the_boundary():
    pix = schemas.CreatePixPaymentInput.model_validate({
        "amount": 10,
        "description": "x",
        "payerEmail": "a@example.com",
    })

    assert pix.payer_first_name == "First"
    assert pix.payer_document == "12345678909"
    assert pix.expiration_minutes == 30


def test_unknown_keys_are_ignored():
    args = schemas.PaymentIdInput.model_validate({"paymentId": "1", "verbose": True})

    assert args.payment_id == "1"


def test_snake_case_names_are_accepted_too():
    args = schemas.RetryPaymentInput(payment_id="1", max_retries=5)

    assert args.max_retries == 5
    assert args.retry_strategy is schemas.RetryStrategy.EXPONENTIAL_BACKOFF


@pytest.mark.parametrize("arguments", [
    {"amount": 0, "description": "x", "payerEmail": "a@example.com", "paymentMethodId": "pix"},
    {"amount": 10, "description": "x", "payerEmail": "not-an-email", "paymentMethodId": "pix"},
    {"amount": 10, "description": "x", "payerEmail": "a@example.com"},
])
def test_invalid_payment_arguments(arguments):
    with pytest.raises(ValidationError):
        schemas.CreatePaymentInput.model_validate(arguments)


def test_due_date_must_be_iso():
    with pytest.raises(ValidationError, match="dueDate"):
        schemas.ReminderInput.model_validate({"customerId": "c", "amount": 1, "dueDate": "next friday"})


def test_negative_reminder_offsets_are_rejected():
    with pytest.raises(ValidationError):
        schemas.ReminderInput.model_validate({
            "customerId": "c",
            "amount": 1,
            "dueDate": "2025-04-10",
            "reminderSchedule": [3, -1],
        })


def test_card_number_is_normalized():
    card = schemas.SaveCardInput.model_validate({
        "customerId": "c",
        "cardNumber": "4509-9535-6623-3704",
        "cardholderName": "ANA",
        "expirationMonth": 11,
        "expirationYear": 2030,
        "securityCode": "123",
    })

    assert card.card_number == "4509953566233704"
    assert card.expiration_month == "11"
    assert card.expiration_year == "2030"


def test_split_payment_needs_at_least_one_split():
    with pytest.raises(ValidationError):
        schemas.CreateSplitPaymentInput.model_validate({
            "amount": 10,
            "description": "x",
            "payerEmail": "a@example.com",
            "paymentMethodId": "visa",
            "splits": [],
        })


def test_unknown_metric_is_rejected():
    with pytest.raises(ValidationError):
        schemas.AnalyticsInput.model_validate({"metrics": ["revenue", "vibes"]})


def test_validation_error_description_names_fields():
    with pytest.raises(ValidationError) as exc_info:
        schemas.TaxInput.model_validate({"region": "SP", "productType": "luxury"})

    message = schemas.describe_validation_error(exc_info.value)
    assert "amount" in message
    assert "productType" in message
