"""
Mercado Pago Gateway Client
===========================
Thin async facade over the Mercado Pago REST API.

One resource object per API collection (payments, customers, preferences,
subscriptions, payment methods, card tokens), all sharing a single
``httpx.AsyncClient``. Retries, rate limiting and idempotency beyond the
per-request key are left to the API.
"""

import uuid
from typing import Any, Optional

import httpx
import structlog


logger = structlog.get_logger(__name__)

BASE_URL = "https://api.mercadopago.com"
DEFAULT_TIMEOUT = 5.0


class GatewayError(Exception):
    """Raised when the Mercado Pago API rejects a request or cannot be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(body, dict):
        return body.get("message") or body.get("error") or f"HTTP {response.status_code}"
    return f"HTTP {response.status_code}"


class _Resource:
    """One REST collection. Subclasses set ``path``."""

    path: str = ""

    def __init__(self, gateway: "MercadoPagoGateway"):
        self._gateway = gateway

    async def create(self, body: dict) -> dict:
        return await self._gateway.request("POST", self.path, json=body)

    async def get(self, resource_id: str) -> dict:
        return await self._gateway.request("GET", f"{self.path}/{resource_id}")

    async def search(self, filters: Optional[dict] = None) -> dict:
        return await self._gateway.request("GET", f"{self.path}/search", params=filters or {})

    async def update(self, resource_id: str, body: dict) -> dict:
        return await self._gateway.request("PUT", f"{self.path}/{resource_id}", json=body)


class PaymentsResource(_Resource):
    path = "/v1/payments"


class CustomersResource(_Resource):
    path = "/v1/customers"


class PreferencesResource(_Resource):
    path = "/checkout/preferences"


class SubscriptionsResource(_Resource):
    path = "/preapproval"


class CardTokensResource(_Resource):
    path = "/v1/card_tokens"


class PaymentMethodsResource(_Resource):
    path = "/v1/payment_methods"

    async def list_all(self) -> list[dict]:
        return await self._gateway.request("GET", self.path)


class MercadoPagoGateway:
    """
    Async Mercado Pago client.

    Usage:
        async with MercadoPagoGateway(access_token) as gateway:
            payment = await gateway.payments.get("123")
    """

    def __init__(
        self,
        access_token: str,
        timeout: float = DEFAULT_TIMEOUT,
        base_url: str = BASE_URL,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            headers={
                "Authorization": f"Bearer {access_token}",
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
        )

        self.payments = PaymentsResource(self)
        self.customers = CustomersResource(self)
        self.preferences = PreferencesResource(self)
        self.subscriptions = SubscriptionsResource(self)
        self.payment_methods = PaymentMethodsResource(self)
        self.card_tokens = CardTokensResource(self)

    async def __aenter__(self) -> "MercadoPagoGateway":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.client.aclose()

    async def request(
        self,
        method: str,
        path: str,
        json: Optional[dict] = None,
        params: Optional[dict] = None,
    ) -> Any:
        """
        Send one API request and return the decoded JSON body.

        Raises:
            GatewayError: On transport failure or a non-2xx response
        """
        headers = {}
        if method == "POST":
            headers["X-Idempotency-Key"] = str(uuid.uuid4())

        try:
            response = await self.client.request(
                method,
                path,
                json=json,
                params=params,
                headers=headers,
            )
        except httpx.HTTPError as e:
            logger.error("gateway_unreachable", method=method, path=path, error=str(e))
            raise GatewayError(f"Request to Mercado Pago failed: {e}") from e

        if not response.is_success:
            message = _error_message(response)
            logger.warning(
                "gateway_request_failed",
                method=method,
                path=path,
                status_code=response.status_code,
                error=message,
            )
            raise GatewayError(message, status_code=response.status_code)

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            logger.warning("gateway_invalid_json", method=method, path=path, status_code=response.status_code)
            raise GatewayError(f"Invalid JSON from Mercado Pago: {e}", status_code=response.status_code) from e
