"""
Tool Catalog
============
Static MCP tool definitions returned verbatim on list-tools.
"""

from mcp.types import Tool


def _iso_date(description: str) -> dict:
    return {"type": "string", "description": f"{description} (ISO format)"}


TOOL_CATALOG: tuple[Tool, ...] = (
    # ------------------------------------------------------------------
    # Payments
    # ------------------------------------------------------------------
    Tool(
        name="create_payment",
        description="Create a new payment in Mercado Pago",
        inputSchema={
            "type": "object",
            "properties": {
                "amount": {"type": "number", "description": "Payment amount"},
                "description": {"type": "string", "description": "Payment description"},
                "payerEmail": {"type": "string", "description": "Payer's email address"},
                "paymentMethodId": {
                    "type": "string",
                    "description": "Payment method ID (e.g., 'pix', 'credit_card')"
                },
                "installments": {
                    "type": "number",
                    "description": "Number of installments (for credit card)",
                    "default": 1
                },
            },
            "required": ["amount", "description", "payerEmail", "paymentMethodId"]
        }
    ),
    Tool(
        name="get_payment",
        description="Get payment details by ID",
        inputSchema={
            "type": "object",
            "properties": {
                "paymentId": {"type": "string", "description": "Payment ID"},
            },
            "required": ["paymentId"]
        }
    ),
    Tool(
        name="search_payments",
        description="Search for payments with filters",
        inputSchema={
            "type": "object",
            "properties": {
                "status": {
                    "type": "string",
                    "description": "Payment status (approved, pending, rejected)"
                },
                "dateFrom": _iso_date("Start date"),
                "dateTo": _iso_date("End date"),
                "payerEmail": {"type": "string", "description": "Filter by payer email"},
                "limit": {"type": "number", "description": "Max results", "default": 10},
            },
        }
    ),
    Tool(
        name="cancel_payment",
        description="Cancel a pending payment",
        inputSchema={
            "type": "object",
            "properties": {
                "paymentId": {"type": "string", "description": "Payment ID to cancel"},
            },
            "required": ["paymentId"]
        }
    ),
    Tool(
        name="create_refund",
        description="Create a refund for a payment",
        inputSchema={
            "type": "object",
            "properties": {
                "paymentId": {"type": "string", "description": "Payment ID to refund"},
                "amount": {
                    "type": "number",
                    "description": "Amount to refund (partial refund if less than total)"
                },
            },
            "required": ["paymentId"]
        }
    ),

    # ------------------------------------------------------------------
    # Customers
    # ------------------------------------------------------------------
    Tool(
        name="create_customer",
        description="Create a new customer",
        inputSchema={
            "type": "object",
            "properties": {
                "email": {"type": "string", "description": "Customer email"},
                "firstName": {"type": "string", "description": "First name"},
                "lastName": {"type": "string", "description": "Last name"},
                "phone": {"type": "string", "description": "Phone number"},
                "identificationType": {"type": "string", "description": "ID type (CPF, CNPJ, etc.)"},
                "identificationNumber": {"type": "string", "description": "ID number"},
            },
            "required": ["email"]
        }
    ),
    Tool(
        name="get_customer",
        description="Get customer details",
        inputSchema={
            "type": "object",
            "properties": {
                "customerId": {"type": "string", "description": "Customer ID"},
            },
            "required": ["customerId"]
        }
    ),
    Tool(
        name="search_customers",
        description="Search for customers",
        inputSchema={
            "type": "object",
            "properties": {
                "email": {"type": "string", "description": "Filter by email"},
                "limit": {"type": "number", "description": "Max results", "default": 10},
            },
        }
    ),

    # ------------------------------------------------------------------
    # Checkout, PIX & webhooks
    # ------------------------------------------------------------------
    Tool(
        name="create_payment_link",
        description="Create a payment link (checkout preference)",
        inputSchema={
            "type": "object",
            "properties": {
                "title": {"type": "string", "description": "Product/service title"},
                "amount": {"type": "number", "description": "Price"},
                "quantity": {"type": "number", "description": "Quantity", "default": 1},
                "expirationDate": _iso_date("Expiration date"),
                "successUrl": {"type": "string", "description": "Redirect URL after success"},
                "failureUrl": {"type": "string", "description": "Redirect URL after failure"},
                "pendingUrl": {"type": "string", "description": "Redirect URL for pending"},
            },
            "required": ["title", "amount"]
        }
    ),
    Tool(
        name="simulate_webhook",
        description="Simulate a webhook notification for testing",
        inputSchema={
            "type": "object",
            "properties": {
                "type": {
                    "type": "string",
                    "description": "Webhook type",
                    "enum": [
                        "payment.created",
                        "payment.updated",
                        "payment.approved",
                        "payment.rejected",
                    ]
                },
                "paymentId": {"type": "string", "description": "Payment ID for the webhook"},
            },
            "required": ["type", "paymentId"]
        }
    ),
    Tool(
        name="create_pix_payment",
        description="Create a PIX payment with QR code",
        inputSchema={
            "type": "object",
            "properties": {
                "amount": {"type": "number", "description": "Payment amount"},
                "description": {"type": "string", "description": "Payment description"},
                "payerEmail": {"type": "string", "description": "Payer's email"},
                "payerFirstName": {"type": "string", "description": "Payer's first name"},
                "payerLastName": {"type": "string", "description": "Payer's last name"},
                "payerDocument": {"type": "string", "description": "Payer's CPF/CNPJ"},
                "expirationMinutes": {
                    "type": "number",
                    "description": "QR code expiration in minutes",
                    "default": 30
                },
            },
            "required": ["amount", "description", "payerEmail"]
        }
    ),

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------
    Tool(
        name="create_subscription",
        description="Create a recurring subscription",
        inputSchema={
            "type": "object",
            "properties": {
                "title": {"type": "string", "description": "Subscription title"},
                "amount": {"type": "number", "description": "Recurring amount"},
                "frequency": {
                    "type": "number",
                    "description": "Billing frequency, counted in frequencyType units"
                },
                "frequencyType": {
                    "type": "string",
                    "description": "Frequency type",
                    "enum": ["days", "months"],
                    "default": "months"
                },
                "payerEmail": {"type": "string", "description": "Subscriber's email"},
                "startDate": _iso_date("Start date"),
                "endDate": _iso_date("End date"),
            },
            "required": ["title", "amount", "frequency", "payerEmail"]
        }
    ),
    Tool(
        name="get_subscription",
        description="Get subscription details",
        inputSchema={
            "type": "object",
            "properties": {
                "subscriptionId": {"type": "string", "description": "Subscription ID"},
            },
            "required": ["subscriptionId"]
        }
    ),
    Tool(
        name="update_subscription",
        description="Update subscription (pause, resume, modify)",
        inputSchema={
            "type": "object",
            "properties": {
                "subscriptionId": {"type": "string", "description": "Subscription ID"},
                "status": {
                    "type": "string",
                    "description": "New status",
                    "enum": ["paused", "cancelled", "authorized"]
                },
                "amount": {"type": "number", "description": "New amount (optional)"},
            },
            "required": ["subscriptionId"]
        }
    ),

    # ------------------------------------------------------------------
    # Marketplace & cards
    # ------------------------------------------------------------------
    Tool(
        name="create_split_payment",
        description="Create a marketplace split payment",
        inputSchema={
            "type": "object",
            "properties": {
                "amount": {"type": "number", "description": "Total payment amount"},
                "description": {"type": "string", "description": "Payment description"},
                "payerEmail": {"type": "string", "description": "Payer's email"},
                "paymentMethodId": {"type": "string", "description": "Payment method"},
                "splits": {
                    "type": "array",
                    "description": "Payment splits configuration",
                    "items": {
                        "type": "object",
                        "properties": {
                            "collectorId": {
                                "type": "string",
                                "description": "Collector's Mercado Pago ID"
                            },
                            "amount": {"type": "number", "description": "Amount for this collector"},
                            "fee": {"type": "number", "description": "Platform fee", "default": 0},
                        },
                        "required": ["collectorId", "amount"]
                    }
                },
            },
            "required": ["amount", "description", "payerEmail", "paymentMethodId", "splits"]
        }
    ),
    Tool(
        name="save_card",
        description="Save a card for future payments",
        inputSchema={
            "type": "object",
            "properties": {
                "customerId": {"type": "string", "description": "Customer ID"},
                "cardNumber": {"type": "string", "description": "Card number"},
                "cardholderName": {"type": "string", "description": "Cardholder name"},
                "expirationMonth": {"type": "string", "description": "Expiration month (MM)"},
                "expirationYear": {"type": "string", "description": "Expiration year (YYYY)"},
                "securityCode": {"type": "string", "description": "CVV/CVC"},
            },
            "required": [
                "customerId",
                "cardNumber",
                "cardholderName",
                "expirationMonth",
                "expirationYear",
                "securityCode",
            ]
        }
    ),
    Tool(
        name="list_saved_cards",
        description="List customer's saved cards",
        inputSchema={
            "type": "object",
            "properties": {
                "customerId": {"type": "string", "description": "Customer ID"},
            },
            "required": ["customerId"]
        }
    ),
    Tool(
        name="get_payment_methods",
        description="Get available payment methods for your country",
        inputSchema={
            "type": "object",
            "properties": {},
        }
    ),

    # ------------------------------------------------------------------
    # Automation
    # ------------------------------------------------------------------
    Tool(
        name="batch_create_payments",
        description="Create multiple payments in batch",
        inputSchema={
            "type": "object",
            "properties": {
                "payments": {
                    "type": "array",
                    "description": "Array of payments to create",
                    "items": {
                        "type": "object",
                        "properties": {
                            "amount": {"type": "number"},
                            "description": {"type": "string"},
                            "payerEmail": {"type": "string"},
                            "paymentMethodId": {"type": "string"},
                        },
                        "required": ["amount", "description", "payerEmail", "paymentMethodId"]
                    }
                },
            },
            "required": ["payments"]
        }
    ),
    Tool(
        name="monitor_payment_status",
        description="Check a payment's current status once and report the change",
        inputSchema={
            "type": "object",
            "properties": {
                "paymentId": {"type": "string", "description": "Payment ID to monitor"},
                "webhookUrl": {"type": "string", "description": "URL to send status updates"},
                "checkInterval": {
                    "type": "number",
                    "description": "Check interval in seconds",
                    "default": 30
                },
            },
            "required": ["paymentId"]
        }
    ),
    Tool(
        name="retry_failed_payment",
        description="Plan retries for a failed payment",
        inputSchema={
            "type": "object",
            "properties": {
                "paymentId": {"type": "string", "description": "Failed payment ID"},
                "maxRetries": {"type": "number", "description": "Maximum retry attempts", "default": 3},
                "retryStrategy": {
                    "type": "string",
                    "description": "Retry strategy",
                    "enum": ["immediate", "exponential_backoff", "fixed_delay"],
                    "default": "exponential_backoff"
                },
            },
            "required": ["paymentId"]
        }
    ),

    # ------------------------------------------------------------------
    # Analytics, risk & reporting
    # ------------------------------------------------------------------
    Tool(
        name="get_analytics_dashboard",
        description="Get comprehensive payment analytics and metrics",
        inputSchema={
            "type": "object",
            "properties": {
                "period": {
                    "type": "string",
                    "description": "Analysis period",
                    "enum": ["today", "week", "month", "quarter", "year"],
                    "default": "month"
                },
                "metrics": {
                    "type": "array",
                    "description": "Metrics to include",
                    "items": {
                        "type": "string",
                        "enum": [
                            "revenue",
                            "transactions",
                            "conversion_rate",
                            "average_ticket",
                            "top_customers",
                            "payment_methods",
                        ]
                    }
                },
            },
        }
    ),
    Tool(
        name="detect_fraud_risk",
        description="Analyze payment for fraud risk indicators",
        inputSchema={
            "type": "object",
            "properties": {
                "paymentId": {"type": "string", "description": "Payment ID to analyze"},
                "includeRecommendations": {
                    "type": "boolean",
                    "description": "Include action recommendations",
                    "default": True
                },
            },
            "required": ["paymentId"]
        }
    ),
    Tool(
        name="schedule_payment_reminder",
        description="Plan payment reminders ahead of a due date",
        inputSchema={
            "type": "object",
            "properties": {
                "customerId": {"type": "string", "description": "Customer ID"},
                "amount": {"type": "number", "description": "Amount due"},
                "dueDate": _iso_date("Payment due date"),
                "reminderSchedule": {
                    "type": "array",
                    "description": "Days before due date to send reminders",
                    "items": {"type": "number"},
                    "default": [7, 3, 1]
                },
            },
            "required": ["customerId", "amount", "dueDate"]
        }
    ),
    Tool(
        name="export_to_accounting",
        description="Export payment data to accounting software format",
        inputSchema={
            "type": "object",
            "properties": {
                "format": {
                    "type": "string",
                    "description": "Export format",
                    "enum": ["quickbooks", "xero", "sage", "csv", "json"],
                    "default": "csv"
                },
                "dateFrom": _iso_date("Start date"),
                "dateTo": _iso_date("End date"),
                "includeRefunds": {"type": "boolean", "description": "Include refunds", "default": True},
            },
            "required": ["format", "dateFrom", "dateTo"]
        }
    ),
    Tool(
        name="calculate_taxes",
        description="Calculate taxes for a payment based on region",
        inputSchema={
            "type": "object",
            "properties": {
                "amount": {"type": "number", "description": "Base amount"},
                "region": {"type": "string", "description": "Region/state code"},
                "productType": {
                    "type": "string",
                    "description": "Product type for tax calculation",
                    "enum": ["physical", "digital", "service"],
                    "default": "physical"
                },
            },
            "required": ["amount", "region"]
        }
    ),
    Tool(
        name="generate_reports",
        description="Generate payment reports",
        inputSchema={
            "type": "object",
            "properties": {
                "reportType": {
                    "type": "string",
                    "description": "Type of report",
                    "enum": ["payments", "refunds", "chargebacks", "settlements"]
                },
                "dateFrom": _iso_date("Start date"),
                "dateTo": _iso_date("End date"),
                "format": {
                    "type": "string",
                    "description": "Output format",
                    "enum": ["json", "csv"],
                    "default": "json"
                },
            },
            "required": ["reportType", "dateFrom", "dateTo"]
        }
    ),
)
