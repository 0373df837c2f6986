"""In-process domain services keyed by tenant.

Used by the test suite and for running the agent locally without a
document API. Each record is stored per ``user_id``; reads return deep copies so
callers cannot mutate stored state.
"""

from __future__ import annotations

import copy
from collections import defaultdict
from dataclasses import fields as dataclass_fields
from dataclasses import replace
from typing import Any, Generic, TypeVar
from uuid import uuid4

import structlog

from finance_agent.models import (
    Client,
    ClientStatus,
    Invoice,
    Quotation,
    Transaction,
    normalize_name,
)
from finance_agent.services.base import DomainServices, ServiceError

logger = structlog.get_logger(__name__)

RecordT = TypeVar("RecordT")

# Fields a partial update may never change
IMMUTABLE_FIELDS = frozenset({"id", "invoice_number", "quotation_number", "created_at"})


class _MemoryStore(Generic[RecordT]):
    def __init__(self, kind: str):
        self._kind = kind
        self._records: dict[str, list[RecordT]] = defaultdict(list)

    def all(self, user_id: str) -> list[RecordT]:
        return [copy.deepcopy(record) for record in self._records[user_id]]

    def add(self, user_id: str, record: RecordT) -> RecordT:
        stored = replace(copy.deepcopy(record), id=uuid4().hex)
        self._records[user_id].append(stored)
        logger.debug("record_created", kind=self._kind, record_id=stored.id)
        return copy.deepcopy(stored)

    def patch(self, user_id: str, record_id: str, changes: dict[str, Any]) -> None:
        forbidden = IMMUTABLE_FIELDS.intersection(changes)
        if forbidden:
            raise ServiceError(f"Cannot update {', '.join(sorted(forbidden))} on {self._kind}")

        records = self._records[user_id]
        for index, record in enumerate(records):
            if record.id == record_id:
                known = {f.name for f in dataclass_fields(record)}
                unknown = set(changes) - known
                if unknown:
                    raise ServiceError(
                        f"Unknown {self._kind} field(s): {', '.join(sorted(unknown))}"
                    )
                records[index] = replace(record, **changes)
                logger.debug("record_updated", kind=self._kind, record_id=record_id)
                return
        raise ServiceError(f"No {self._kind} with id '{record_id}'", status_code=404)


class InMemoryClientRegistry:
    def __init__(self) -> None:
        self._store: _MemoryStore[Client] = _MemoryStore("client")

    async def list(self, user_id: str) -> list[Client]:
        return self._store.all(user_id)

    async def find_by_name(self, user_id: str, name: str) -> Client | None:
        wanted = normalize_name(name)
        for client in self._store.all(user_id):
            if normalize_name(client.name) == wanted:
                return client
        return None

    async def create(self, user_id: str, client: Client) -> Client:
        return self._store.add(user_id, replace(client, status=ClientStatus.LEAD))


class InMemoryTransactionLedger:
    def __init__(self) -> None:
        self._store: _MemoryStore[Transaction] = _MemoryStore("transaction")

    async def list(self, user_id: str) -> list[Transaction]:
        return self._store.all(user_id)

    async def create(self, user_id: str, transaction: Transaction) -> Transaction:
        return self._store.add(user_id, transaction)


class InMemoryInvoiceLedger:
    def __init__(self) -> None:
        self._store: _MemoryStore[Invoice] = _MemoryStore("invoice")

    async def list(self, user_id: str) -> list[Invoice]:
        # Newest first
        return sorted(self._store.all(user_id), key=lambda inv: inv.date, reverse=True)

    async def count(self, user_id: str) -> int:
        return len(self._store.all(user_id))

    async def create(self, user_id: str, invoice: Invoice) -> Invoice:
        return self._store.add(user_id, invoice)

    async def update(self, user_id: str, invoice_id: str, fields: dict[str, Any]) -> None:
        self._store.patch(user_id, invoice_id, fields)


class InMemoryQuotationLedger:
    def __init__(self) -> None:
        self._store: _MemoryStore[Quotation] = _MemoryStore("quotation")

    async def list(self, user_id: str) -> list[Quotation]:
        return sorted(self._store.all(user_id), key=lambda quo: quo.date, reverse=True)

    async def count(self, user_id: str) -> int:
        return len(self._store.all(user_id))

    async def create(self, user_id: str, quotation: Quotation) -> Quotation:
        return self._store.add(user_id, quotation)

    async def update(self, user_id: str, quotation_id: str, fields: dict[str, Any]) -> None:
        self._store.patch(user_id, quotation_id, fields)


def create_in_memory_services() -> DomainServices:
    """Build a fresh, empty set of in-memory domain services."""
    return DomainServices(
        clients=InMemoryClientRegistry(),
        transactions=InMemoryTransactionLedger(),
        invoices=InMemoryInvoiceLedger(),
        quotations=InMemoryQuotationLedger(),
    )
