"""
Payment Tool Handlers
=====================
One coroutine per MCP tool. Each receives its validated input model, calls
the gateway and the pure calculators, and returns a JSON-serializable dict.

Handlers never retry and never catch gateway failures; the dispatcher is the
single place errors are normalized.
"""

from datetime import timedelta
from typing import Optional

import structlog
from pydantic import ValidationError

from mercadopago_mcp import schemas
from mercadopago_mcp.accounting import format_for_accounting, to_csv
from mercadopago_mcp.analytics import build_snapshot, period_start
from mercadopago_mcp.fraud import assess_payment_risk
from mercadopago_mcp.gateway import GatewayError, MercadoPagoGateway
from mercadopago_mcp.taxes import calculate_taxes, format_brl
from mercadopago_mcp.timeutils import Clock, parse_timestamp, to_iso, utc_now


logger = structlog.get_logger(__name__)

CANCELLABLE_STATUSES = frozenset({"pending", "in_process"})
FINAL_STATUSES = frozenset({"approved", "rejected", "cancelled", "refunded"})
HOME_CURRENCY = "BRL"
DEFAULT_DOCUMENT_TYPE = "CPF"
DEFAULT_DOCUMENT_NUMBER = "12345678909"

CUSTOMER_SCAN_LIMIT = 100
ANALYTICS_FETCH_LIMIT = 100
EXPORT_FETCH_LIMIT = 1000
FRAUD_LOOKBACK_LIMIT = 10

# report type -> payment status filter (None: no gateway data source)
# "" searches unfiltered; None skips the payments query
REPORT_STATUS_FILTERS = {
    schemas.ReportType.PAYMENTS: "",
    schemas.ReportType.REFUNDS: "refunded",
    schemas.ReportType.CHARGEBACKS: "charged_back",
    schemas.ReportType.SETTLEMENTS: None,
}


def retry_delays(strategy: schemas.RetryStrategy, attempts: int) -> list[int]:
    """Delay in milliseconds before each retry attempt."""
    if strategy is schemas.RetryStrategy.IMMEDIATE:
        return [0] * attempts
    if strategy is schemas.RetryStrategy.FIXED_DELAY:
        return [5000] * attempts
    return [1000 * 2 ** attempt for attempt in range(attempts)]


def _date_range(date_from: Optional[str], date_to: Optional[str]) -> dict:
    if not (date_from or date_to):
        return {}
    params = {"range": "date_created"}
    if date_from:
        params["begin_date"] = date_from
    if date_to:
        params["end_date"] = date_to
    return params


def _results(search_response: dict) -> list[dict]:
    return search_response.get("results") or []


def _payer_email(payment: dict) -> Optional[str]:
    return (payment.get("payer") or {}).get("email")


class PaymentTools:
    """
    The tool surface over one gateway.

    Args:
        gateway: Connected Mercado Pago client
        clock: Source of "now"; injectable for tests
    """

    def __init__(self, gateway: MercadoPagoGateway, clock: Clock = utc_now):
        self.gateway = gateway
        self.clock = clock

    # ========================================================================
    # Payments
    # ========================================================================

    async def create_payment(self, args: schemas.CreatePaymentInput) -> dict:
        payment = await self.gateway.payments.create({
            "transaction_amount": args.amount,
            "description": args.description,
            "payment_method_id": args.payment_method_id,
            "installments": args.installments,
            "payer": {"email": args.payer_email},
        })
        return {
            "id": payment.get("id"),
            "status": payment.get("status"),
            "amount": payment.get("transaction_amount"),
            "description": payment.get("description"),
            "dateCreated": payment.get("date_created"),
            "dateApproved": payment.get("date_approved"),
            "paymentMethod": payment.get("payment_method_id"),
            "statusDetail": payment.get("status_detail"),
        }

    async def get_payment(self, args: schemas.PaymentIdInput) -> dict:
        return await self.gateway.payments.get(args.payment_id)

    async def search_payments(self, args: schemas.SearchPaymentsInput) -> dict:
        filters = {"limit": args.limit}
        if args.status:
            filters["status"] = args.status
        if args.payer_email:
            filters["payer.email"] = args.payer_email
        filters.update(_date_range(args.date_from, args.date_to))

        response = await self.gateway.payments.search(filters)
        return {
            "total": (response.get("paging") or {}).get("total"),
            "results": [
                {
                    "id": p.get("id"),
                    "status": p.get("status"),
                    "amount": p.get("transaction_amount"),
                    "description": p.get("description"),
                    "dateCreated": p.get("date_created"),
                    "payerEmail": _payer_email(p),
                }
                for p in _results(response)
            ],
        }

    async def cancel_payment(self, args: schemas.PaymentIdInput) -> dict:
        """Check that a payment is still cancellable. Nothing is cancelled."""
        payment = await self.gateway.payments.get(args.payment_id)
        status = payment.get("status")
        if status not in CANCELLABLE_STATUSES:
            raise ValueError(f"Cannot cancel payment with status: {status}")

        return {
            "paymentId": args.payment_id,
            "status": status,
            "message": (
                "Payment can be cancelled. Cancellation must be completed through "
                "the Mercado Pago dashboard or the payments API."
            ),
        }

    async def create_refund(self, args: schemas.CreateRefundInput) -> dict:
        """Prepare a refund plan for an approved payment."""
        payment = await self.gateway.payments.get(args.payment_id)
        status = payment.get("status")
        if status != "approved":
            raise ValueError(
                f"Cannot refund payment with status: {status}. "
                "Only approved payments can be refunded."
            )

        original = payment.get("transaction_amount") or 0
        if args.amount is not None and args.amount > original:
            raise ValueError(
                f"Refund amount {args.amount} exceeds original amount {original}"
            )

        return {
            "message": "Refund request prepared",
            "paymentId": args.payment_id,
            "originalAmount": original,
            "refundAmount": original if args.amount is None else args.amount,
            "type": "full" if args.amount is None else "partial",
            "note": "Execute the refund through the /v1/payments/{id}/refunds endpoint",
        }

    async def simulate_webhook(self, args: schemas.SimulateWebhookInput) -> dict:
        payment = await self.gateway.payments.get(args.payment_id)
        now = self.clock()
        event_type = args.event_type.value

        webhook = {
            "id": f"webhook_{int(now.timestamp() * 1000)}",
            "live_mode": False,
            "type": event_type,
            "date_created": to_iso(now),
            "user_id": payment.get("collector_id"),
            "api_version": "v1",
            "action": event_type,
            "data": {"id": args.payment_id},
        }
        return {
            "webhook": webhook,
            "payment": {
                "id": payment.get("id"),
                "status": payment.get("status"),
                "amount": payment.get("transaction_amount"),
                "payerEmail": _payer_email(payment),
            },
            "note": "Simulated payload only; no notification was delivered",
        }

    async def create_pix_payment(self, args: schemas.CreatePixPaymentInput) -> dict:
        expires_at = self.clock() + timedelta(minutes=args.expiration_minutes)
        payment = await self.gateway.payments.create({
            "transaction_amount": args.amount,
            "description": args.description,
            "payment_method_id": "pix",
            "payer": {
                "email": args.payer_email,
                "first_name": args.payer_first_name,
                "last_name": args.payer_last_name,
                "identification": {
                    "type": DEFAULT_DOCUMENT_TYPE,
                    "number": args.payer_document,
                },
            },
            "date_of_expiration": to_iso(expires_at),
        })

        transaction_data = (payment.get("point_of_interaction") or {}).get("transaction_data") or {}
        return {
            "id": payment.get("id"),
            "status": payment.get("status"),
            "amount": payment.get("transaction_amount"),
            "pixQrCode": transaction_data.get("qr_code"),
            "pixQrCodeBase64": transaction_data.get("qr_code_base64"),
            "pixCopyPaste": transaction_data.get("ticket_url"),
            "expirationDate": payment.get("date_of_expiration"),
        }

    async def create_split_payment(self, args: schemas.CreateSplitPaymentInput) -> dict:
        application_fee = sum(split.fee for split in args.splits)
        payment = await self.gateway.payments.create({
            "transaction_amount": args.amount,
            "description": args.description,
            "payment_method_id": args.payment_method_id,
            "payer": {"email": args.payer_email},
            "application_fee": application_fee,
            "disbursements": [
                {
                    "amount": split.amount,
                    "collector_id": split.collector_id,
                    "application_fee": split.fee,
                }
                for split in args.splits
            ],
        })
        return {
            "id": payment.get("id"),
            "status": payment.get("status"),
            "totalAmount": payment.get("transaction_amount"),
            "applicationFee": application_fee,
            "splits": [split.model_dump(by_alias=True) for split in args.splits],
        }

    async def batch_create_payments(self, args: schemas.BatchCreatePaymentsInput) -> dict:
        """
        Create payments one after another.

        A failing item (invalid or rejected by the gateway) is recorded in
        ``errors`` and the batch continues.
        """
        results = []
        errors = []

        for index, raw in enumerate(args.payments):
            if not isinstance(raw, dict):
                errors.append({"index": index, "email": None, "error": "item must be an object"})
                continue
            try:
                item = schemas.BatchPaymentItem.model_validate(raw)
                payment = await self.gateway.payments.create({
                    "transaction_amount": item.amount,
                    "description": item.description,
                    "payment_method_id": item.payment_method_id,
                    "payer": {"email": item.payer_email},
                })
            except ValidationError as e:
                errors.append({
                    "index": index,
                    "email": raw.get("payerEmail"),
                    "error": schemas.describe_validation_error(e),
                })
                continue
            except GatewayError as e:
                errors.append({"index": index, "email": raw.get("payerEmail"), "error": e.message})
                continue

            results.append({
                "id": payment.get("id"),
                "status": payment.get("status"),
                "amount": payment.get("transaction_amount"),
            })

        logger.info("batch_completed", successful=len(results), failed=len(errors))
        return {
            "successful": len(results),
            "failed": len(errors),
            "results": results,
            "errors": errors,
        }

    async def monitor_payment_status(self, args: schemas.MonitorPaymentInput) -> dict:
        """Run a single status check. No background job is started."""
        payment = await self.gateway.payments.get(args.payment_id)
        status = payment.get("status")

        changes = [{
            "timestamp": to_iso(self.clock()),
            "oldStatus": None,
            "newStatus": status,
            "amount": payment.get("transaction_amount"),
        }]
        return {
            "paymentId": args.payment_id,
            "monitoring": {
                "currentStatus": status,
                "isFinal": status in FINAL_STATUSES,
                "changes": changes,
                "checksPerformed": 1,
            },
            "webhookUrl": args.webhook_url or "Not configured",
            "checkInterval": args.check_interval,
            "note": "Single check performed; schedule repeated checks externally",
        }

    async def retry_failed_payment(self, args: schemas.RetryPaymentInput) -> dict:
        payment = await self.gateway.payments.get(args.payment_id)
        status = payment.get("status")
        if status == "approved":
            return {
                "error": "Payment already approved",
                "paymentId": args.payment_id,
                "status": status,
            }

        now = self.clock()
        delays = retry_delays(args.retry_strategy, args.max_retries)
        return {
            "originalPayment": {
                "id": payment.get("id"),
                "status": status,
                "amount": payment.get("transaction_amount"),
            },
            "retryPlan": {
                "strategy": args.retry_strategy.value,
                "maxRetries": args.max_retries,
                "delays": delays,
                "willRetryAt": [to_iso(now + timedelta(milliseconds=delay)) for delay in delays],
            },
            "note": "Retry plan only; no attempts were queued",
        }

    async def detect_fraud_risk(self, args: schemas.FraudRiskInput) -> dict:
        payment = await self.gateway.payments.get(args.payment_id)
        email = _payer_email(payment)

        recent = None
        if email:
            response = await self.gateway.payments.search({
                "payer.email": email,
                "limit": FRAUD_LOOKBACK_LIMIT,
            })
            recent = _results(response)

        assessment = assess_payment_risk(
            payment,
            recent_payments=recent,
            include_recommendations=args.include_recommendations,
        )
        return {
            "paymentId": args.payment_id,
            "riskAssessment": {
                "score": assessment.score,
                "level": assessment.level.value,
                "factors": assessment.factors,
            },
            "paymentDetails": {
                "amount": payment.get("transaction_amount"),
                "method": payment.get("payment_method_id"),
                "payer": email,
                "status": payment.get("status"),
            },
            "recommendations": assessment.recommendations,
        }

    # ========================================================================
    # Customers & cards
    # ========================================================================

    async def create_customer(self, args: schemas.CreateCustomerInput) -> dict:
        body: dict = {"email": args.email}
        if args.first_name:
            body["first_name"] = args.first_name
        if args.last_name:
            body["last_name"] = args.last_name
        if args.phone:
            body["phone"] = {"area_code": args.phone[:2], "number": args.phone[2:]}
        if args.identification_type and args.identification_number:
            body["identification"] = {
                "type": args.identification_type,
                "number": args.identification_number,
            }
        return await self.gateway.customers.create(body)

    async def _find_customer(self, customer_id: str) -> Optional[dict]:
        # the customers API has no direct lookup by id for this account type
        response = await self.gateway.customers.search({"limit": CUSTOMER_SCAN_LIMIT})
        for customer in _results(response):
            if str(customer.get("id")) == customer_id:
                return customer
        return None

    async def get_customer(self, args: schemas.CustomerIdInput) -> dict:
        customer = await self._find_customer(args.customer_id)
        if customer is None:
            raise ValueError(f"Customer not found with ID: {args.customer_id}")
        return customer

    async def search_customers(self, args: schemas.SearchCustomersInput) -> dict:
        filters = {"limit": args.limit}
        if args.email:
            filters["email"] = args.email
        return await self.gateway.customers.search(filters)

    async def save_card(self, args: schemas.SaveCardInput) -> dict:
        token = await self.gateway.card_tokens.create({
            "card_number": args.card_number,
            "cardholder": {
                "name": args.cardholder_name,
                "identification": {
                    "type": DEFAULT_DOCUMENT_TYPE,
                    "number": DEFAULT_DOCUMENT_NUMBER,
                },
            },
            "expiration_month": args.expiration_month,
            "expiration_year": args.expiration_year,
            "security_code": args.security_code,
        })

        last_four = token.get("last_four_digits") or args.card_number[-4:]
        return {
            "message": "Card tokenized successfully",
            "tokenId": token.get("id"),
            "lastFourDigits": last_four,
            "maskedNumber": f"**** **** **** {last_four}",
            "customerId": args.customer_id,
            "note": "Use this token to create payments with the saved card",
        }

    async def list_saved_cards(self, args: schemas.CustomerIdInput) -> dict:
        customer = await self._find_customer(args.customer_id)
        return {
            "customerId": args.customer_id,
            "cards": (customer or {}).get("cards") or [],
            "note": "Saved cards from the customer profile",
        }

    async def get_payment_methods(self, args: schemas.EmptyInput) -> dict:
        methods = await self.gateway.payment_methods.list_all()
        return {
            "availableMethods": [
                {
                    "id": m.get("id"),
                    "name": m.get("name"),
                    "type": m.get("payment_type_id"),
                    "status": m.get("status"),
                    "thumbnail": m.get("thumbnail"),
                }
                for m in methods
            ],
        }

    async def schedule_payment_reminder(self, args: schemas.ReminderInput) -> dict:
        """Compute reminder dates before the due date. Nothing is sent."""
        due = parse_timestamp(args.due_date)
        message = f"Payment reminder: {format_brl(args.amount)} due on {due.date().isoformat()}"

        reminders = [
            {
                "sendDate": to_iso(due - timedelta(days=days_before)),
                "daysBefore": days_before,
                "message": message,
                "status": "scheduled",
            }
            for days_before in args.reminder_schedule
        ]
        return {
            "customerId": args.customer_id,
            "amount": args.amount,
            "dueDate": args.due_date,
            "reminders": reminders,
            "note": "Reminder plan only; connect an email or SMS service to deliver it",
        }

    # ========================================================================
    # Checkout & subscriptions
    # ========================================================================

    async def create_payment_link(self, args: schemas.CreatePaymentLinkInput) -> dict:
        body: dict = {
            "items": [{
                "title": args.title,
                "unit_price": args.amount,
                "quantity": args.quantity,
            }],
        }
        if args.success_url or args.failure_url or args.pending_url:
            body["back_urls"] = {
                "success": args.success_url or "",
                "failure": args.failure_url or "",
                "pending": args.pending_url or "",
            }
            body["auto_return"] = "approved"
        if args.expiration_date:
            body["expires"] = True
            body["expiration_date_to"] = args.expiration_date

        preference = await self.gateway.preferences.create(body)
        return {
            "id": preference.get("id"),
            "checkoutUrl": preference.get("init_point"),
            "sandboxUrl": preference.get("sandbox_init_point"),
            "items": preference.get("items"),
            "expirationDate": preference.get("expiration_date_to"),
        }

    async def create_subscription(self, args: schemas.CreateSubscriptionInput) -> dict:
        body: dict = {
            "reason": args.title,
            "auto_recurring": {
                "frequency": args.frequency,
                "frequency_type": args.frequency_type.value,
                "transaction_amount": args.amount,
                "currency_id": HOME_CURRENCY,
            },
            "payer_email": args.payer_email,
            "status": "pending",
        }
        if args.start_date:
            body["start_date"] = args.start_date
        if args.end_date:
            body["end_date"] = args.end_date

        subscription = await self.gateway.subscriptions.create(body)
        recurring = subscription.get("auto_recurring") or {}
        return {
            "id": subscription.get("id"),
            "status": subscription.get("status"),
            "reason": subscription.get("reason"),
            "amount": recurring.get("transaction_amount"),
            "frequency": recurring.get("frequency"),
            "init_point": subscription.get("init_point"),
        }

    async def get_subscription(self, args: schemas.SubscriptionIdInput) -> dict:
        return await self.gateway.subscriptions.get(args.subscription_id)

    async def update_subscription(self, args: schemas.UpdateSubscriptionInput) -> dict:
        body: dict = {}
        if args.status is not None:
            body["status"] = args.status.value
        if args.amount is not None:
            body["auto_recurring"] = {"transaction_amount": args.amount}

        subscription = await self.gateway.subscriptions.update(args.subscription_id, body)
        return {
            "id": subscription.get("id"),
            "status": subscription.get("status"),
            "updated": True,
        }

    # ========================================================================
    # Reporting & calculators
    # ========================================================================

    async def get_analytics_dashboard(self, args: schemas.AnalyticsInput) -> dict:
        now = self.clock()
        date_from = period_start(args.period, now)

        response = await self.gateway.payments.search({
            "range": "date_created",
            "begin_date": to_iso(date_from),
            "end_date": to_iso(now),
            "sort": "date_created",
            "criteria": "asc",
            "limit": ANALYTICS_FETCH_LIMIT,
        })
        snapshot = build_snapshot(
            _results(response),
            period=args.period,
            date_from=date_from,
            date_to=now,
            selected_metrics=args.metrics,
        )
        return snapshot.to_dict()

    async def export_to_accounting(self, args: schemas.ExportInput) -> dict:
        filters = _date_range(args.date_from, args.date_to)
        filters["limit"] = EXPORT_FETCH_LIMIT
        response = await self.gateway.payments.search(filters)
        return format_for_accounting(
            _results(response),
            args.export_format,
            include_refunds=args.include_refunds,
        )

    async def calculate_taxes(self, args: schemas.TaxInput) -> dict:
        return calculate_taxes(args.amount, args.region, args.product_type).to_dict()

    async def generate_reports(self, args: schemas.ReportInput) -> dict:
        status = REPORT_STATUS_FILTERS[args.report_type]

        data: list[dict] = []
        if status is not None:
            filters = _date_range(args.date_from, args.date_to)
            filters["limit"] = EXPORT_FETCH_LIMIT
            if status:
                filters["status"] = status
            data = _results(await self.gateway.payments.search(filters))

        return {
            "type": args.report_type.value,
            "period": {"from": args.date_from, "to": args.date_to},
            "summary": {
                "total_records": len(data),
                "total_amount": sum(p.get("transaction_amount") or 0 for p in data),
            },
            "data": to_csv(data) if args.output_format == "csv" else data,
        }
