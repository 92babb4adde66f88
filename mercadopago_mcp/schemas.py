"""
Tool Input Models
=================
Structured argument types for every tool. Arguments arrive camelCased from
the MCP caller; defaults are resolved here so handlers never see a raw
argument bag.
"""

from enum import Enum
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from mercadopago_mcp.accounting import AccountingFormat
from mercadopago_mcp.analytics import Period
from mercadopago_mcp.taxes import ProductType
from mercadopago_mcp.timeutils import parse_timestamp


EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+$"


class WebhookType(str, Enum):
    PAYMENT_CREATED = "payment.created"
    PAYMENT_UPDATED = "payment.updated"
    PAYMENT_APPROVED = "payment.approved"
    PAYMENT_REJECTED = "payment.rejected"


class FrequencyType(str, Enum):
    DAYS = "days"
    MONTHS = "months"


class SubscriptionStatus(str, Enum):
    PAUSED = "paused"
    CANCELLED = "cancelled"
    AUTHORIZED = "authorized"


class RetryStrategy(str, Enum):
    IMMEDIATE = "immediate"
    EXPONENTIAL_BACKOFF = "exponential_backoff"
    FIXED_DELAY = "fixed_delay"


class ReportType(str, Enum):
    PAYMENTS = "payments"
    REFUNDS = "refunds"
    CHARGEBACKS = "chargebacks"
    SETTLEMENTS = "settlements"


MetricName = Literal[
    "revenue",
    "transactions",
    "conversion_rate",
    "average_ticket",
    "top_customers",
    "payment_methods",
]


def describe_validation_error(error: ValidationError) -> str:
    """Flatten a pydantic error into ``field: message; ...``."""
    parts = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"]) or "arguments"
        parts.append(f"{location}: {item['msg']}")
    return "; ".join(parts)


class ToolInput(BaseModel):
    """Base for all tool arguments."""
    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
        coerce_numbers_to_str=True,
    )


# ============================================================================
# Payments
# ============================================================================

class PaymentIdInput(ToolInput):
    payment_id: str = Field(alias="paymentId", min_length=1, description="Payment ID")


class CreatePaymentInput(ToolInput):
    amount: float = Field(gt=0, description="Payment amount")
    description: str = Field(min_length=1, description="Payment description")
    payer_email: str = Field(alias="payerEmail", pattern=EMAIL_PATTERN)
    payment_method_id: str = Field(alias="paymentMethodId", min_length=1)
    installments: int = Field(default=1, ge=1)


class SearchPaymentsInput(ToolInput):
    status: Optional[str] = None
    date_from: Optional[str] = Field(default=None, alias="dateFrom")
    date_to: Optional[str] = Field(default=None, alias="dateTo")
    payer_email: Optional[str] = Field(default=None, alias="payerEmail")
    limit: int = Field(default=10, ge=1, le=1000)


class CreateRefundInput(PaymentIdInput):
    amount: Optional[float] = Field(default=None, gt=0)


class SimulateWebhookInput(PaymentIdInput):
    event_type: WebhookType = Field(alias="type")


class CreatePixPaymentInput(ToolInput):
    amount: float = Field(gt=0)
    description: str = Field(min_length=1)
    payer_email: str = Field(alias="payerEmail", pattern=EMAIL_PATTERN)
    payer_first_name: str = Field(default="First", alias="payerFirstName")
    payer_last_name: str = Field(default="Last", alias="payerLastName")
    payer_document: str = Field(default="12345678909", alias="payerDocument")
    expiration_minutes: int = Field(default=30, alias="expirationMinutes", ge=1)


class SplitInput(ToolInput):
    collector_id: str = Field(alias="collectorId", min_length=1)
    amount: float = Field(gt=0)
    fee: float = Field(default=0, ge=0)


class CreateSplitPaymentInput(ToolInput):
    amount: float = Field(gt=0)
    description: str = Field(min_length=1)
    payer_email: str = Field(alias="payerEmail", pattern=EMAIL_PATTERN)
    payment_method_id: str = Field(alias="paymentMethodId", min_length=1)
    splits: list[SplitInput] = Field(min_length=1)


class BatchPaymentItem(ToolInput):
    amount: float = Field(gt=0)
    description: str = Field(min_length=1)
    payer_email: str = Field(alias="payerEmail", pattern=EMAIL_PATTERN)
    payment_method_id: str = Field(alias="paymentMethodId", min_length=1)


class BatchCreatePaymentsInput(ToolInput):
    # items are validated one by one so a bad entry only fails itself
    payments: list[Any]


class MonitorPaymentInput(PaymentIdInput):
    webhook_url: Optional[str] = Field(default=None, alias="webhookUrl")
    check_interval: int = Field(default=30, alias="checkInterval", ge=1)


class RetryPaymentInput(PaymentIdInput):
    max_retries: int = Field(default=3, alias="maxRetries", ge=1)
    retry_strategy: RetryStrategy = Field(
        default=RetryStrategy.EXPONENTIAL_BACKOFF,
        alias="retryStrategy",
    )


class FraudRiskInput(PaymentIdInput):
    include_recommendations: bool = Field(default=True, alias="includeRecommendations")


# ============================================================================
# Customers & cards
# ============================================================================

class CustomerIdInput(ToolInput):
    customer_id: str = Field(alias="customerId", min_length=1)


class CreateCustomerInput(ToolInput):
    email: str = Field(pattern=EMAIL_PATTERN)
    first_name: Optional[str] = Field(default=None, alias="firstName")
    last_name: Optional[str] = Field(default=None, alias="lastName")
    phone: Optional[str] = None
    identification_type: Optional[str] = Field(default=None, alias="identificationType")
    identification_number: Optional[str] = Field(default=None, alias="identificationNumber")


class SearchCustomersInput(ToolInput):
    email: Optional[str] = None
    limit: int = Field(default=10, ge=1, le=100)


class SaveCardInput(CustomerIdInput):
    card_number: str = Field(alias="cardNumber")
    cardholder_name: str = Field(alias="cardholderName", min_length=1)
    expiration_month: str = Field(alias="expirationMonth", pattern=r"^\d{1,2}$")
    expiration_year: str = Field(alias="expirationYear", pattern=r"^\d{4}$")
    security_code: str = Field(alias="securityCode", pattern=r"^\d{3,4}$")

    @field_validator("card_number")
    @classmethod
    def _digits_only(cls, value: str) -> str:
        digits = value.replace(" ", "").replace("-", "")
        if not digits.isdigit() or not 12 <= len(digits) <= 19:
            raise ValueError("card number must contain 12 to 19 digits")
        return digits


class ReminderInput(CustomerIdInput):
    amount: float = Field(gt=0)
    due_date: str = Field(alias="dueDate")
    reminder_schedule: list[int] = Field(default_factory=lambda: [7, 3, 1], alias="reminderSchedule")

    @field_validator("due_date")
    @classmethod
    def _iso_due_date(cls, value: str) -> str:
        parse_timestamp(value)
        return value

    @field_validator("reminder_schedule")
    @classmethod
    def _non_negative_offsets(cls, value: list[int]) -> list[int]:
        if any(days < 0 for days in value):
            raise ValueError("reminder offsets must be zero or positive")
        return value


# ============================================================================
# Checkout & subscriptions
# ============================================================================

class CreatePaymentLinkInput(ToolInput):
    title: str = Field(min_length=1)
    amount: float = Field(gt=0)
    quantity: int = Field(default=1, ge=1)
    expiration_date: Optional[str] = Field(default=None, alias="expirationDate")
    success_url: Optional[str] = Field(default=None, alias="successUrl")
    failure_url: Optional[str] = Field(default=None, alias="failureUrl")
    pending_url: Optional[str] = Field(default=None, alias="pendingUrl")


class CreateSubscriptionInput(ToolInput):
    title: str = Field(min_length=1)
    amount: float = Field(gt=0)
    frequency: int = Field(gt=0)
    frequency_type: FrequencyType = Field(default=FrequencyType.MONTHS, alias="frequencyType")
    payer_email: str = Field(alias="payerEmail", pattern=EMAIL_PATTERN)
    start_date: Optional[str] = Field(default=None, alias="startDate")
    end_date: Optional[str] = Field(default=None, alias="endDate")


class SubscriptionIdInput(ToolInput):
    subscription_id: str = Field(alias="subscriptionId", min_length=1)


class UpdateSubscriptionInput(SubscriptionIdInput):
    status: Optional[SubscriptionStatus] = None
    amount: Optional[float] = Field(default=None, gt=0)


# ============================================================================
# Reporting & calculators
# ============================================================================

class EmptyInput(ToolInput):
    pass


class AnalyticsInput(ToolInput):
    period: Period = Period.MONTH
    metrics: Optional[list[MetricName]] = None


class ExportInput(ToolInput):
    export_format: AccountingFormat = Field(alias="format")
    date_from: str = Field(alias="dateFrom")
    date_to: str = Field(alias="dateTo")
    include_refunds: bool = Field(default=True, alias="includeRefunds")


class TaxInput(ToolInput):
    amount: float = Field(ge=0)
    region: str = Field(min_length=1)
    product_type: ProductType = Field(default=ProductType.PHYSICAL, alias="productType")


class ReportInput(ToolInput):
    report_type: ReportType = Field(alias="reportType")
    date_from: str = Field(alias="dateFrom")
    date_to: str = Field(alias="dateTo")
    output_format: Literal["json", "csv"] = Field(default="json", alias="format")
