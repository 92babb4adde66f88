"""Pytest fixtures: an in-memory gateway and a dispatcher wired to it."""

from datetime import datetime, timezone
from typing import Callable, Optional

import pytest

from mercadopago_mcp.dispatcher import ToolDispatcher
from mercadopago_mcp.gateway import GatewayError
from mercadopago_mcp.handlers import PaymentTools
from mercadopago_mcp.telemetry import ToolTelemetry


NOW = datetime(2025, 3, 14, 15, 30, tzinfo=timezone.utc)


# ============================================================================
# Fake gateway
# ============================================================================
class FakeResource:
    """Stands in for one REST collection; records every call."""

    def __init__(self, first_id: int = 1000):
        self.records: dict[str, dict] = {}
        self.search_results: list[dict] = []
        self.calls: list[tuple] = []
        self.create_error: Optional[Callable[[dict], Optional[str]]] = None
        self._next_id = first_id

    def add(self, record: dict) -> dict:
        self.records[str(record["id"])] = record
        return record

    async def create(self, body: dict) -> dict:
        self.calls.append(("create", body))
        if self.create_error is not None:
            message = self.create_error(body)
            if message:
                raise GatewayError(message, status_code=400)

        self._next_id += 1
        record = dict(body)
        record.setdefault("id", self._next_id)
        record.setdefault("status", "approved")
        return self.add(record)

    async def get(self, resource_id: str) -> dict:
        self.calls.append(("get", resource_id))
        if resource_id not in self.records:
            raise GatewayError("Resource not found", status_code=404)
        return self.records[resource_id]

    async def search(self, filters: Optional[dict] = None) -> dict:
        self.calls.append(("search", filters or {}))
        return {
            "paging": {"total": len(self.search_results)},
            "results": list(self.search_results),
        }

    async def update(self, resource_id: str, body: dict) -> dict:
        self.calls.append(("update", resource_id, body))
        record = await self.get(resource_id)
        record.update(body)
        return record


class FakePaymentMethods:
    def __init__(self):
        self.methods: list[dict] = []
        self.calls = 0

    async def list_all(self) -> list[dict]:
        self.calls += 1
        return self.methods


class FakeGateway:
    def __init__(self):
        self.payments = FakeResource()
        self.customers = FakeResource()
        self.preferences = FakeResource()
        self.subscriptions = FakeResource()
        self.card_tokens = FakeResource()
        self.payment_methods = FakePaymentMethods()

    @property
    def call_count(self) -> int:
        resources = [self.payments, self.customers, self.preferences, self.subscriptions, self.card_tokens]
        return sum(len(r.calls) for r in resources) + self.payment_methods.calls


def make_payment(
    payment_id,
    amount: float = 100.0,
    status: str = "approved",
    email: Optional[str] = "buyer@example.com",
    created: str = "2025-03-01T10:00:00.000Z",
    method: str = "visa",
    currency: str = "BRL",
    payer_id: Optional[str] = "payer-1",
) -> dict:
    payer = {}
    if email is not None:
        payer["email"] = email
    if payer_id is not None:
        payer["id"] = payer_id
    return {
        "id": payment_id,
        "transaction_amount": amount,
        "status": status,
        "description": f"Order {payment_id}",
        "payment_method_id": method,
        "currency_id": currency,
        "date_created": created,
        "payer": payer,
        "collector_id": 555,
    }


# ============================================================================
# Fixtures
# ============================================================================
@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def tools(gateway: FakeGateway) -> PaymentTools:
    return PaymentTools(gateway, clock=lambda: NOW)


@pytest.fixture
def dispatcher(tools: PaymentTools) -> ToolDispatcher:
    return ToolDispatcher(tools, telemetry=ToolTelemetry())
