"""Domain services backed by the hosting application's document API.

The API stores one JSON document per record under
``/api/v1/{clients,transactions,invoices,quotations}`` and scopes every
request to the tenant given in the ``X-User-Id`` header.
"""

from __future__ import annotations

import asyncio
from dataclasses import replace
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any

import httpx
import structlog

from finance_agent.config import get_settings
from finance_agent.models import (
    Client,
    ClientStatus,
    Invoice,
    Quotation,
    Transaction,
    normalize_name,
    transaction_from_document,
)
from finance_agent.services.base import DomainServices, ServiceError

logger = structlog.get_logger(__name__)

# Repeating these cannot create a second record
IDEMPOTENT_METHODS = frozenset({"GET", "PUT", "PATCH", "DELETE"})


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _wire_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def to_wire_fields(fields: dict[str, Any]) -> dict[str, Any]:
    """Translate a partial update from attribute names to document fields."""
    return {_camel(key): _wire_value(value) for key, value in fields.items()}


class FinanceAPIClient:
    """Async HTTP client for the finance document API."""

    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        settings = get_settings()
        self.base_url = (base_url or settings.finance_api_url).rstrip("/")
        if token is None and settings.finance_api_token is not None:
            token = settings.finance_api_token.get_secret_value()
        self._token = token
        self._timeout = timeout or settings.finance_api_timeout
        self._max_retries = (
            max_retries if max_retries is not None else settings.finance_api_max_retries
        )
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._client_loop: asyncio.AbstractEventLoop | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client for the running event loop.

        Pooled connections belong to the loop that opened them, so a client
        created under an earlier (now closed) loop is replaced.
        """
        loop = asyncio.get_running_loop()
        if self._client is not None and self._client_loop is not loop:
            logger.debug("finance_api_client_rebound")
            self._client = None
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self._timeout),
                transport=self._transport,
            )
            self._client_loop = loop
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
            self._client_loop = None

    @staticmethod
    def _is_retryable(method: str, error: httpx.RequestError) -> bool:
        # A POST may already be committed once the request was sent; only
        # retry it when the connection was never established.
        if method.upper() in IDEMPOTENT_METHODS:
            return True
        return isinstance(error, (httpx.ConnectError, httpx.ConnectTimeout))

    async def __aenter__(self) -> FinanceAPIClient:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    def _get_headers(self, user_id: str) -> dict[str, str]:
        headers = {"Content-Type": "application/json", "X-User-Id": user_id}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    async def request(
        self,
        method: str,
        path: str,
        user_id: str,
        json: dict[str, Any] | None = None,
        retry_count: int = 0,
    ) -> Any:
        """Make a tenant-scoped request, retrying safe transport failures with backoff."""
        client = await self._get_client()

        try:
            response = await client.request(
                method=method,
                url=path,
                json=json,
                headers=self._get_headers(user_id),
            )
        except httpx.RequestError as e:
            if retry_count < self._max_retries and self._is_retryable(method, e):
                await asyncio.sleep(2**retry_count)  # Exponential backoff
                return await self.request(method, path, user_id, json, retry_count + 1)
            raise ServiceError(f"Request failed: {e}") from e

        if response.status_code >= 400:
            try:
                error_detail = response.json() if response.content else {}
            except ValueError:
                error_detail = {"raw": response.text[:500] if response.text else "empty response"}
            logger.warning(
                "finance_api_error",
                method=method,
                path=path,
                status=response.status_code,
            )
            raise ServiceError(
                f"API error: {response.status_code}",
                status_code=response.status_code,
                details=error_detail,
            )

        return response.json() if response.content else {}

    @staticmethod
    def extract_items(result: Any) -> list[dict[str, Any]]:
        """Return list of items from a list or paged response."""
        if isinstance(result, list):
            return result
        if isinstance(result, dict):
            items = result.get("items")
            if isinstance(items, list):
                return items
        return []

    @staticmethod
    def with_id(record: Any, result: Any) -> Any:
        """Attach the id the API assigned to a newly created record."""
        if not isinstance(result, dict) or not result.get("id"):
            raise ServiceError("Create response did not include an id", details=result)
        return replace(record, id=result["id"])


class RestClientRegistry:
    def __init__(self, api: FinanceAPIClient):
        self._api = api

    async def list(self, user_id: str) -> list[Client]:
        result = await self._api.request("GET", "/api/v1/clients", user_id)
        return [Client.from_document(doc) for doc in self._api.extract_items(result)]

    async def find_by_name(self, user_id: str, name: str) -> Client | None:
        # The store has no normalized-name index, so match client-side
        wanted = normalize_name(name)
        for client in await self.list(user_id):
            if normalize_name(client.name) == wanted:
                return client
        return None

    async def create(self, user_id: str, client: Client) -> Client:
        client = replace(client, status=ClientStatus.LEAD)
        result = await self._api.request(
            "POST", "/api/v1/clients", user_id, json=client.to_document()
        )
        return self._api.with_id(client, result)


class RestTransactionLedger:
    def __init__(self, api: FinanceAPIClient):
        self._api = api

    async def list(self, user_id: str) -> list[Transaction]:
        result = await self._api.request("GET", "/api/v1/transactions", user_id)
        return [transaction_from_document(doc) for doc in self._api.extract_items(result)]

    async def create(self, user_id: str, transaction: Transaction) -> Transaction:
        result = await self._api.request(
            "POST", "/api/v1/transactions", user_id, json=transaction.to_document()
        )
        return self._api.with_id(transaction, result)


class _RestSalesDocumentLedger:
    path: str
    record_type: type[Invoice] | type[Quotation]

    def __init__(self, api: FinanceAPIClient):
        self._api = api

    async def _list_documents(self, user_id: str) -> list[Any]:
        result = await self._api.request("GET", self.path, user_id)
        records = [self.record_type.from_document(doc) for doc in self._api.extract_items(result)]
        return sorted(records, key=lambda record: record.date, reverse=True)

    async def count(self, user_id: str) -> int:
        result = await self._api.request("GET", f"{self.path}/count", user_id)
        if not isinstance(result, dict) or "count" not in result:
            raise ServiceError("Invalid count response format", details=result)
        return int(result["count"])

    async def _create_document(self, user_id: str, record: Any) -> Any:
        result = await self._api.request("POST", self.path, user_id, json=record.to_document())
        return self._api.with_id(record, result)

    async def update(self, user_id: str, record_id: str, fields: dict[str, Any]) -> None:
        await self._api.request(
            "PATCH", f"{self.path}/{record_id}", user_id, json=to_wire_fields(fields)
        )


class RestInvoiceLedger(_RestSalesDocumentLedger):
    path = "/api/v1/invoices"
    record_type = Invoice

    async def list(self, user_id: str) -> list[Invoice]:
        return await self._list_documents(user_id)

    async def create(self, user_id: str, invoice: Invoice) -> Invoice:
        return await self._create_document(user_id, invoice)


class RestQuotationLedger(_RestSalesDocumentLedger):
    path = "/api/v1/quotations"
    record_type = Quotation

    async def list(self, user_id: str) -> list[Quotation]:
        return await self._list_documents(user_id)

    async def create(self, user_id: str, quotation: Quotation) -> Quotation:
        return await self._create_document(user_id, quotation)


def create_rest_services(api: FinanceAPIClient | None = None) -> DomainServices:
    """Build domain services that share one API client."""
    api = api or FinanceAPIClient()
    return DomainServices(
        clients=RestClientRegistry(api),
        transactions=RestTransactionLedger(api),
        invoices=RestInvoiceLedger(api),
        quotations=RestQuotationLedger(api),
    )
