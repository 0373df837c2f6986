"""Pydantic models that decode and validate tool arguments.

Field aliases match the camelCase argument names advertised to the model in
``definitions.py``. Unknown arguments are ignored.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from finance_agent.models import Currency, InvoiceStatus, QuotationStatus, parse_datetime


class ToolInput(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", str_strip_whitespace=True)


class NoInput(ToolInput):
    pass


class AddTransactionInput(ToolInput):
    type: Literal["income", "expense"]
    amount: Decimal = Field(gt=0)
    date: datetime | None = None
    description: str | None = None
    category: str | None = None
    vendor: str | None = None
    source: str | None = None
    currency: Currency = Currency.USD

    @field_validator("date", mode="before")
    @classmethod
    def _parse_date(cls, value: Any) -> Any:
        if isinstance(value, str):
            return parse_datetime(value) if value else None
        return value

    @field_validator("description", "category", "vendor", "source")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        return value or None


class AddClientInput(ToolInput):
    name: str = Field(min_length=1)
    contact_person: str = Field(alias="contactPerson", min_length=1)
    email: EmailStr
    phone: str | None = None
    tax_id: str | None = Field(default=None, alias="taxId")


class LineItemInput(ToolInput):
    description: str = Field(min_length=1)
    quantity: Decimal = Field(gt=0)
    unit_price: Decimal = Field(alias="unitPrice", ge=0)


class CreateSalesDocumentInput(ToolInput):
    client_name: str = Field(alias="clientName", min_length=1)
    items: list[LineItemInput] = Field(min_length=1)
    due_date: datetime = Field(alias="dueDate")
    currency: Currency = Currency.USD

    @field_validator("due_date", mode="before")
    @classmethod
    def _parse_due_date(cls, value: Any) -> Any:
        if isinstance(value, str):
            return parse_datetime(value)
        return value


class ListInvoicesInput(ToolInput):
    status: InvoiceStatus | None = None


class ListQuotationsInput(ToolInput):
    status: QuotationStatus | None = None


def _normalize_number(value: str) -> str:
    return value.strip().upper()


class UpdateInvoiceStatusInput(ToolInput):
    invoice_number: str = Field(alias="invoiceNumber", min_length=1)
    status: InvoiceStatus

    normalize_number = field_validator("invoice_number")(_normalize_number)


class UpdateQuotationStatusInput(ToolInput):
    quotation_number: str = Field(alias="quotationNumber", min_length=1)
    status: QuotationStatus

    normalize_number = field_validator("quotation_number")(_normalize_number)
