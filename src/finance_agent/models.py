"""Domain records owned by the client registry and the ledgers.

Python attributes are snake_case. Stored documents use the camelCase field
names of the hosting application (``clientRef``, ``invoiceNumber`` ...);
``to_document``/``from_document`` translate between the two.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Literal

from finance_agent.numeric import item_total, to_decimal


class ClientStatus(str, Enum):
    LEAD = "lead"
    OPPORTUNITY = "opportunity"
    CUSTOMER = "customer"


class InvoiceStatus(str, Enum):
    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"
    OVERDUE = "overdue"


class QuotationStatus(str, Enum):
    DRAFT = "draft"
    SENT = "sent"
    WON = "won"
    LOST = "lost"


class Currency(str, Enum):
    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"
    INR = "INR"
    AED = "AED"
    CAD = "CAD"


def utcnow() -> datetime:
    return datetime.now(UTC)


def parse_datetime(value: datetime | str) -> datetime:
    """Parse an ISO date or datetime string, assuming UTC when naive."""
    parsed = value if isinstance(value, datetime) else datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _optional_decimal(value: Any) -> Decimal | None:
    return None if value is None else to_decimal(value)


def _optional_str(value: Decimal | None) -> str | None:
    return None if value is None else str(value)


def normalize_name(name: str) -> str:
    """Key used for "a client named X" lookups: trimmed, casefolded, single-spaced."""
    return " ".join(name.split()).casefold()


# === Clients ===


@dataclass(kw_only=True)
class Client:
    name: str
    contact_person: str
    email: str
    phone: str | None = None
    tax_id: str | None = None
    status: ClientStatus = ClientStatus.LEAD
    opportunity_worth: Decimal | None = None
    id: str | None = None

    def to_document(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "contactPerson": self.contact_person,
            "email": self.email,
            "phone": self.phone,
            "taxId": self.tax_id,
            "status": self.status.value,
            "opportunityWorth": _optional_str(self.opportunity_worth),
        }

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> Client:
        return cls(
            id=doc.get("id"),
            name=doc["name"],
            contact_person=doc.get("contactPerson", ""),
            email=doc.get("email", ""),
            phone=doc.get("phone"),
            tax_id=doc.get("taxId"),
            status=ClientStatus(doc.get("status", ClientStatus.LEAD.value)),
            opportunity_worth=_optional_decimal(doc.get("opportunityWorth")),
        )


# === Invoices & Quotations ===


@dataclass(frozen=True)
class LineItem:
    description: str
    quantity: Decimal
    unit_price: Decimal

    @property
    def total(self) -> Decimal:
        return item_total(self)

    def to_document(self) -> dict[str, Any]:
        # The derived total is always stored alongside the item
        return {
            "description": self.description,
            "quantity": str(self.quantity),
            "unitPrice": str(self.unit_price),
            "total": str(self.total),
        }

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> LineItem:
        return cls(
            description=doc["description"],
            quantity=to_decimal(doc["quantity"]),
            unit_price=to_decimal(doc["unitPrice"]),
        )


@dataclass(kw_only=True)
class SalesDocument:
    """Fields shared by invoices and quotations."""

    client_ref: str
    items: list[LineItem]
    total_amount: Decimal
    date: datetime
    due_date: datetime
    currency: Currency = Currency.USD
    created_at: datetime = field(default_factory=utcnow)
    # Set by the UI only; the agent never applies tax or discount
    tax: Decimal | None = None
    discount: Decimal | None = None
    id: str | None = None

    def _base_document(self) -> dict[str, Any]:
        return {
            "clientRef": self.client_ref,
            "items": [item.to_document() for item in self.items],
            "totalAmount": str(self.total_amount),
            "date": self.date.isoformat(),
            "dueDate": self.due_date.isoformat(),
            "currency": self.currency.value,
            "createdAt": self.created_at.isoformat(),
            "tax": _optional_str(self.tax),
            "discount": _optional_str(self.discount),
        }

    @staticmethod
    def _base_fields(doc: dict[str, Any]) -> dict[str, Any]:
        return {
            "id": doc.get("id"),
            "client_ref": doc["clientRef"],
            "items": [LineItem.from_document(item) for item in doc.get("items", [])],
            "total_amount": to_decimal(doc["totalAmount"]),
            "date": parse_datetime(doc["date"]),
            "due_date": parse_datetime(doc["dueDate"]),
            "currency": Currency(doc.get("currency") or Currency.USD.value),
            "created_at": parse_datetime(doc.get("createdAt") or doc["date"]),
            "tax": _optional_decimal(doc.get("tax")),
            "discount": _optional_decimal(doc.get("discount")),
        }


@dataclass(kw_only=True)
class Invoice(SalesDocument):
    invoice_number: str
    status: InvoiceStatus = InvoiceStatus.DRAFT
    quotation_ref: str | None = None

    def to_document(self) -> dict[str, Any]:
        doc = self._base_document()
        doc.update({
            "invoiceNumber": self.invoice_number,
            "status": self.status.value,
            "quotationRef": self.quotation_ref,
        })
        return doc

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> Invoice:
        return cls(
            invoice_number=doc["invoiceNumber"],
            status=InvoiceStatus(doc.get("status", InvoiceStatus.DRAFT.value)),
            quotation_ref=doc.get("quotationRef"),
            **cls._base_fields(doc),
        )


@dataclass(kw_only=True)
class Quotation(SalesDocument):
    quotation_number: str
    status: QuotationStatus = QuotationStatus.DRAFT

    def to_document(self) -> dict[str, Any]:
        doc = self._base_document()
        doc.update({
            "quotationNumber": self.quotation_number,
            "status": self.status.value,
        })
        return doc

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> Quotation:
        return cls(
            quotation_number=doc["quotationNumber"],
            status=QuotationStatus(doc.get("status", QuotationStatus.DRAFT.value)),
            **cls._base_fields(doc),
        )


# === Transactions ===


@dataclass(kw_only=True)
class IncomeTransaction:
    amount: Decimal
    date: datetime
    description: str
    source: str
    currency: Currency = Currency.USD
    id: str | None = None
    type: Literal["income"] = field(default="income", init=False)

    def to_document(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "amount": str(self.amount),
            "date": self.date.isoformat(),
            "description": self.description,
            "source": self.source,
            "currency": self.currency.value,
        }


@dataclass(kw_only=True)
class ExpenseTransaction:
    amount: Decimal
    date: datetime
    description: str
    category: str = "other"
    vendor: str | None = None
    currency: Currency = Currency.USD
    id: str | None = None
    type: Literal["expense"] = field(default="expense", init=False)

    def to_document(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "amount": str(self.amount),
            "date": self.date.isoformat(),
            "description": self.description,
            "category": self.category,
            "vendor": self.vendor,
            "currency": self.currency.value,
        }


Transaction = IncomeTransaction | ExpenseTransaction


def transaction_from_document(doc: dict[str, Any]) -> Transaction:
    """Build the right transaction variant from its ``type`` tag."""
    common = {
        "id": doc.get("id"),
        "amount": to_decimal(doc["amount"]),
        "date": parse_datetime(doc["date"]),
        "description": doc.get("description") or "",
        "currency": Currency(doc.get("currency") or Currency.USD.value),
    }
    if doc.get("type") == "income":
        return IncomeTransaction(source=doc["source"], **common)
    if doc.get("type") == "expense":
        return ExpenseTransaction(
            category=doc.get("category") or "other",
            vendor=doc.get("vendor"),
            **common,
        )
    raise ValueError(f"Unknown transaction type: {doc.get('type')!r}")
