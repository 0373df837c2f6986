"""Monetary arithmetic shared by the tools and any document preview.

Amounts are ``Decimal`` at full precision. Nothing here rounds; rounding to
the currency's minor unit happens only in :func:`format_money`.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Protocol

ZERO = Decimal("0")
HUNDRED = Decimal("100")

# Minor units per currency; every supported currency uses cents
MINOR_UNIT_EXPONENT: dict[str, int] = {
    "USD": 2,
    "EUR": 2,
    "GBP": 2,
    "INR": 2,
    "AED": 2,
    "CAD": 2,
}


class PricedItem(Protocol):
    quantity: Decimal
    unit_price: Decimal


@dataclass(frozen=True)
class DocumentTotals:
    """Breakdown of an invoice or quotation total."""

    subtotal: Decimal
    discount_amount: Decimal
    tax_amount: Decimal
    total_amount: Decimal


def to_decimal(value: Decimal | float | int | str | None) -> Decimal:
    """Convert a number to Decimal without picking up binary float noise."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def item_total(item: PricedItem) -> Decimal:
    return item.quantity * item.unit_price


def subtotal(items: Iterable[PricedItem]) -> Decimal:
    return sum((item_total(item) for item in items), ZERO)


def discount_amount(amount: Decimal, discount_percent: Decimal | None = None) -> Decimal:
    return amount * to_decimal(discount_percent) / HUNDRED


def tax_amount(taxable: Decimal, tax_percent: Decimal | None = None) -> Decimal:
    return taxable * to_decimal(tax_percent) / HUNDRED


def calculate_totals(
    items: Iterable[PricedItem],
    tax_percent: Decimal | None = None,
    discount_percent: Decimal | None = None,
) -> DocumentTotals:
    """Compute subtotal, discount, tax and grand total for a set of items.

    Tax applies to the discounted subtotal. Missing percentages count as 0.
    """
    base = subtotal(items)
    discount = discount_amount(base, discount_percent)
    tax = tax_amount(base - discount, tax_percent)
    return DocumentTotals(
        subtotal=base,
        discount_amount=discount,
        tax_amount=tax,
        total_amount=base - discount + tax,
    )


def quantize_money(amount: Decimal, currency: str = "USD") -> Decimal:
    exponent = MINOR_UNIT_EXPONENT.get(currency, 2)
    return amount.quantize(Decimal(1).scaleb(-exponent), rounding=ROUND_HALF_UP)


def format_money(amount: Decimal, currency: str = "USD") -> str:
    """Format an amount for display, e.g. ``45.00 USD``."""
    return f"{quantize_money(amount, currency)} {currency}"
