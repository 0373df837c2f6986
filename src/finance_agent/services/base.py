"""Contracts for the domain services the tools depend on.

Every operation is scoped to the tenant ``user_id``. Implementations are
injected into the tool executor; nothing in the agent holds a global store.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

from finance_agent.models import Client, Invoice, Quotation, Transaction


class ServiceError(Exception):
    """A domain service call failed."""

    def __init__(self, message: str, status_code: int | None = None, details: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.details = details


class ClientRegistry(Protocol):
    async def list(self, user_id: str) -> list[Client]: ...

    async def find_by_name(self, user_id: str, name: str) -> Client | None: ...

    async def create(self, user_id: str, client: Client) -> Client:
        """Persist ``client`` with status forced to ``lead``; returns it with its id."""
        ...


class TransactionLedger(Protocol):
    async def list(self, user_id: str) -> list[Transaction]: ...

    async def create(self, user_id: str, transaction: Transaction) -> Transaction: ...


class InvoiceLedger(Protocol):
    async def list(self, user_id: str) -> list[Invoice]: ...

    async def count(self, user_id: str) -> int: ...

    async def create(self, user_id: str, invoice: Invoice) -> Invoice: ...

    async def update(self, user_id: str, invoice_id: str, fields: dict[str, Any]) -> None: ...


class QuotationLedger(Protocol):
    async def list(self, user_id: str) -> list[Quotation]: ...

    async def count(self, user_id: str) -> int: ...

    async def create(self, user_id: str, quotation: Quotation) -> Quotation: ...

    async def update(self, user_id: str, quotation_id: str, fields: dict[str, Any]) -> None: ...


@dataclass
class DomainServices:
    """The four collaborators a tool executor works against."""

    clients: ClientRegistry
    transactions: TransactionLedger
    invoices: InvoiceLedger
    quotations: QuotationLedger
