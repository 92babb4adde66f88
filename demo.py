#!/usr/bin/env python3
"""
Mercado Pago MCP Demo
=====================
Runs the tool dispatcher end to end against a canned, in-process copy of
the payments API:
1. Tool catalog
2. Tax calculation
3. Fraud risk scoring
4. Analytics dashboard
5. Accounting export
6. Protocol errors

No credentials or network access are needed.
"""

import asyncio
import json
from datetime import datetime, timedelta, timezone

import httpx
from mcp.shared.exceptions import McpError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from mercadopago_mcp.dispatcher import ToolDispatcher
from mercadopago_mcp.gateway import MercadoPagoGateway
from mercadopago_mcp.handlers import PaymentTools
from mercadopago_mcp.telemetry import ToolTelemetry, configure_logging
from mercadopago_mcp.timeutils import to_iso


console = Console()

NOW = datetime(2025, 3, 14, 15, 0, tzinfo=timezone.utc)


def _payment(payment_id, amount, status, email, method, days_ago, hour=14, currency="BRL", payer_id="p1"):
    created = (NOW - timedelta(days=days_ago)).replace(hour=hour)
    return {
        "id": payment_id,
        "transaction_amount": amount,
        "status": status,
        "description": f"Order {payment_id}",
        "payment_method_id": method,
        "currency_id": currency,
        "date_created": to_iso(created),
        "payer": {"id": payer_id, "email": email},
        "collector_id": 424242,
    }


SAMPLE_PAYMENTS = [
    _payment(1001, 120.00, "approved", "ana@example.com", "pix", 20),
    _payment(1002, 89.90, "approved", "bruno@example.com", "visa", 15, hour=10),
    _payment(1003, 450.00, "rejected", "carla@example.com", "master", 12),
    _payment(1004, 300.00, "refunded", "ana@example.com", "pix", 9),
    _payment(1005, 610.50, "approved", "diego@example.com", "visa", 4),
    _payment(1006, 7200.00, "approved", None, "account_money", 1, currency="USD", payer_id=None),
]


def sandbox_api(request: httpx.Request) -> httpx.Response:
    """Answer the handful of routes the demo touches."""
    path = request.url.path

    if path == "/v1/payments/search":
        return httpx.Response(200, json={
            "paging": {"total": len(SAMPLE_PAYMENTS)},
            "results": SAMPLE_PAYMENTS,
        })

    if path.startswith("/v1/payments/"):
        payment_id = path.rsplit("/", 1)[-1]
        for payment in SAMPLE_PAYMENTS:
            if str(payment["id"]) == payment_id:
                return httpx.Response(200, json=payment)
        return httpx.Response(404, json={"message": "Payment not found"})

    return httpx.Response(404, json={"message": f"No demo route for {path}"})


def print_header(title: str):
    """Print a section header."""
    console.print()
    console.print(Panel(title, style="bold blue"))


def print_step(step: str, description: str):
    """Print a step in the demo."""
    console.print(f"\n[bold cyan]→ {step}[/bold cyan]: {description}")


def demo_catalog(dispatcher: ToolDispatcher):
    print_header("🧰 Tool Catalog")

    table = Table(title=f"{len(dispatcher.list_tools())} MCP tools")
    table.add_column("Tool", style="cyan")
    table.add_column("Required", style="green")
    table.add_column("Description")

    for tool in dispatcher.list_tools():
        required = ", ".join(tool.inputSchema.get("required", [])) or "-"
        table.add_row(tool.name, required, tool.description)

    console.print(table)


async def demo_taxes(dispatcher: ToolDispatcher):
    print_header("🧾 Tax Calculator")

    for region, product_type in [("SP", "physical"), ("rj", "digital"), ("AM", "service")]:
        print_step("calculate_taxes", f"R$ 100.00 {product_type} sale in {region}")
        result = await dispatcher.dispatch("calculate_taxes", {
            "amount": 100,
            "region": region,
            "productType": product_type,
        })
        calc = result["calculation"]
        console.print(
            f"   Region {calc['region']} @ {calc['taxRate']:.0%}: "
            f"tax [yellow]{result['formatted']['tax']}[/yellow], "
            f"total [green]{result['formatted']['total']}[/green]"
        )


async def demo_fraud(dispatcher: ToolDispatcher):
    print_header("🛡️ Fraud Risk")

    for payment_id in ("1002", "1006"):
        print_step("detect_fraud_risk", f"payment {payment_id}")
        result = await dispatcher.dispatch("detect_fraud_risk", {"paymentId": payment_id})
        risk = result["riskAssessment"]
        color = {"high": "red", "medium": "yellow"}.get(risk["level"], "green")
        console.print(f"   Score: [{color}]{risk['score']} ({risk['level']})[/]")
        console.print(f"   Factors: {', '.join(risk['factors']) or 'none'}")
        console.print(f"   Recommendations: {', '.join(result['recommendations'])}")


async def demo_analytics(dispatcher: ToolDispatcher):
    print_header("📊 Analytics Dashboard")

    result = await dispatcher.dispatch("get_analytics_dashboard", {"period": "month"})
    metrics = result["metrics"]

    table = Table(title=f"Period: {result['period']['type']}")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Revenue", f"R$ {metrics['revenue']:,.2f}")
    table.add_row("Transactions", str(metrics["totalTransactions"]))
    table.add_row("Conversion", f"{metrics['conversionRate']:.1f}%")
    table.add_row("Average ticket", f"R$ {metrics['averageTicket']:,.2f}")
    for key, value in result["insights"].items():
        table.add_row(key, str(value))

    console.print(table)


async def demo_accounting(dispatcher: ToolDispatcher):
    print_header("📒 Accounting Export")

    print_step("export_to_accounting", "QuickBooks, refunds included")
    result = await dispatcher.dispatch("export_to_accounting", {
        "format": "quickbooks",
        "dateFrom": "2025-02-01",
        "dateTo": "2025-03-14",
    })
    for row in result["transactions"]:
        console.print(f"   {row['Date']}  {row['Type']:<14} #{row['Num']}  {row['Amount']:>9.2f}  {row['Name']}")

    print_step("export_to_accounting", "CSV, refunds excluded")
    result = await dispatcher.dispatch("export_to_accounting", {
        "format": "csv",
        "dateFrom": "2025-02-01",
        "dateTo": "2025-03-14",
        "includeRefunds": False,
    })
    header = result["content"].splitlines()[0]
    console.print(f"   {len(result['content'].splitlines()) - 1} rows, header: [dim]{header[:70]}...[/dim]")


async def demo_errors(dispatcher: ToolDispatcher):
    print_header("⚠️ Protocol Errors")

    calls = [
        ("refund_everything", {}),
        ("calculate_taxes", {"region": "SP"}),
        ("cancel_payment", {"paymentId": "1001"}),
        ("get_payment", {"paymentId": "9999"}),
    ]
    for name, arguments in calls:
        print_step(name, json.dumps(arguments))
        try:
            await dispatcher.call(name, arguments)
        except McpError as e:
            console.print(f"   [red]{e.error.code}[/red] {e.error.message}")


async def run_demo():
    transport = httpx.MockTransport(sandbox_api)
    async with MercadoPagoGateway("TEST-demo-token", transport=transport) as gateway:
        dispatcher = ToolDispatcher(
            PaymentTools(gateway, clock=lambda: NOW),
            telemetry=ToolTelemetry(environment="sandbox"),
        )

        demo_catalog(dispatcher)
        await demo_taxes(dispatcher)
        await demo_fraud(dispatcher)
        await demo_analytics(dispatcher)
        await demo_accounting(dispatcher)
        await demo_errors(dispatcher)


def main():
    """Run the demo."""
    configure_logging("WARNING")

    console.print(Panel.fit(
        "[bold]Mercado Pago MCP[/bold]\nOffline tour of the payment tools",
        style="bold green"
    ))

    asyncio.run(run_demo())

    console.print("\n[green]Demo complete.[/green] Start the real server with [bold]mercadopago-mcp[/bold].")


if __name__ == "__main__":
    main()
