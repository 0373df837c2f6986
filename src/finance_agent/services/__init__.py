"""Domain service contracts and implementations."""

from finance_agent.services.base import (
    ClientRegistry,
    DomainServices,
    InvoiceLedger,
    QuotationLedger,
    ServiceError,
    TransactionLedger,
)
from finance_agent.services.memory import create_in_memory_services
from finance_agent.services.rest import FinanceAPIClient, create_rest_services

__all__ = [
    "ClientRegistry",
    "TransactionLedger",
    "InvoiceLedger",
    "QuotationLedger",
    "DomainServices",
    "ServiceError",
    "create_in_memory_services",
    "FinanceAPIClient",
    "create_rest_services",
]
