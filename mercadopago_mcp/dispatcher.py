"""
Tool Registry & Dispatcher
==========================
Maps tool names to (input model, handler) pairs and turns every outcome into
either one JSON text block or a protocol error.

Error mapping:
- unknown tool       -> METHOD_NOT_FOUND, no handler runs
- invalid arguments  -> INVALID_PARAMS
- McpError           -> passed through unchanged
- anything else      -> INTERNAL_ERROR ("Mercado Pago API error: ...")
"""

import json
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Mapping, Optional

import structlog
from mcp.shared.exceptions import McpError
from mcp.types import INTERNAL_ERROR, INVALID_PARAMS, METHOD_NOT_FOUND, ErrorData, TextContent, Tool
from pydantic import BaseModel, ValidationError

from mercadopago_mcp import schemas
from mercadopago_mcp.catalog import TOOL_CATALOG
from mercadopago_mcp.handlers import PaymentTools
from mercadopago_mcp.telemetry import ToolTelemetry


logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ToolHandler:
    input_model: type[BaseModel]
    handle: Callable[[Any], Awaitable[dict]]


def build_handlers(tools: PaymentTools) -> Mapping[str, ToolHandler]:
    """Build the read-only name -> handler map for one ``PaymentTools``."""
    return MappingProxyType({
        # Payments
        "create_payment": ToolHandler(schemas.CreatePaymentInput, tools.create_payment),
        "get_payment": ToolHandler(schemas.PaymentIdInput, tools.get_payment),
        "search_payments": ToolHandler(schemas.SearchPaymentsInput, tools.search_payments),
        "cancel_payment": ToolHandler(schemas.PaymentIdInput, tools.cancel_payment),
        "create_refund": ToolHandler(schemas.CreateRefundInput, tools.create_refund),

        # Customers
        "create_customer": ToolHandler(schemas.CreateCustomerInput, tools.create_customer),
        "get_customer": ToolHandler(schemas.CustomerIdInput, tools.get_customer),
        "search_customers": ToolHandler(schemas.SearchCustomersInput, tools.search_customers),

        # Checkout, PIX & webhooks
        "create_payment_link": ToolHandler(schemas.CreatePaymentLinkInput, tools.create_payment_link),
        "simulate_webhook": ToolHandler(schemas.SimulateWebhookInput, tools.simulate_webhook),
        "create_pix_payment": ToolHandler(schemas.CreatePixPaymentInput, tools.create_pix_payment),

        # Subscriptions
        "create_subscription": ToolHandler(schemas.CreateSubscriptionInput, tools.create_subscription),
        "get_subscription": ToolHandler(schemas.SubscriptionIdInput, tools.get_subscription),
        "update_subscription": ToolHandler(schemas.UpdateSubscriptionInput, tools.update_subscription),

        # Marketplace & cards
        "create_split_payment": ToolHandler(schemas.CreateSplitPaymentInput, tools.create_split_payment),
        "save_card": ToolHandler(schemas.SaveCardInput, tools.save_card),
        "list_saved_cards": ToolHandler(schemas.CustomerIdInput, tools.list_saved_cards),
        "get_payment_methods": ToolHandler(schemas.EmptyInput, tools.get_payment_methods),

        # Automation
        "batch_create_payments": ToolHandler(schemas.BatchCreatePaymentsInput, tools.batch_create_payments),
        "monitor_payment_status": ToolHandler(schemas.MonitorPaymentInput, tools.monitor_payment_status),
        "retry_failed_payment": ToolHandler(schemas.RetryPaymentInput, tools.retry_failed_payment),

        # Analytics, risk & reporting
        "get_analytics_dashboard": ToolHandler(schemas.AnalyticsInput, tools.get_analytics_dashboard),
        "detect_fraud_risk": ToolHandler(schemas.FraudRiskInput, tools.detect_fraud_risk),
        "schedule_payment_reminder": ToolHandler(schemas.ReminderInput, tools.schedule_payment_reminder),
        "export_to_accounting": ToolHandler(schemas.ExportInput, tools.export_to_accounting),
        "calculate_taxes": ToolHandler(schemas.TaxInput, tools.calculate_taxes),
        "generate_reports": ToolHandler(schemas.ReportInput, tools.generate_reports),
    })


def _protocol_error(code: int, message: str) -> McpError:
    return McpError(ErrorData(code=code, message=message))


class ToolDispatcher:
    """
    Routes MCP tool calls to ``PaymentTools``.

    Usage:
        dispatcher = ToolDispatcher(PaymentTools(gateway))
        content = await dispatcher.call("get_payment", {"paymentId": "123"})
    """

    def __init__(
        self,
        tools: PaymentTools,
        telemetry: Optional[ToolTelemetry] = None,
        catalog: tuple[Tool, ...] = TOOL_CATALOG,
    ):
        self.handlers = build_handlers(tools)
        self.catalog = catalog
        self.telemetry = telemetry or ToolTelemetry()

        catalog_names = {tool.name for tool in catalog}
        if catalog_names != set(self.handlers):
            mismatch = sorted(catalog_names ^ set(self.handlers))
            raise RuntimeError(f"Tool catalog and handlers disagree: {mismatch}")

    def list_tools(self) -> list[Tool]:
        return list(self.catalog)

    async def dispatch(self, name: str, arguments: Optional[dict] = None) -> dict:
        """Validate arguments and run one tool, returning its raw result."""
        handler = self.handlers.get(name)
        if handler is None:
            logger.warning("unknown_tool", tool_name=name)
            raise _protocol_error(METHOD_NOT_FOUND, f"Unknown tool: {name}")

        with self.telemetry.trace_tool_call(name):
            try:
                args = handler.input_model.model_validate(arguments or {})
            except ValidationError as e:
                raise _protocol_error(
                    INVALID_PARAMS,
                    f"Invalid arguments for {name}: {schemas.describe_validation_error(e)}",
                ) from e

            try:
                return await handler.handle(args)
            except McpError:
                raise
            except Exception as e:
                logger.warning("tool_failed", tool_name=name, error=str(e))
                raise _protocol_error(INTERNAL_ERROR, f"Mercado Pago API error: {e}") from e

    async def call(self, name: str, arguments: Optional[dict] = None) -> list[TextContent]:
        result = await self.dispatch(name, arguments)
        return [TextContent(type="text", text=json.dumps(result, indent=2, ensure_ascii=False))]
