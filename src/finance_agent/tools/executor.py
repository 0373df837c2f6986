"""Tool executor that bridges LLM tool calls to the domain services."""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

import structlog
from pydantic import ValidationError

from finance_agent.config import get_settings
from finance_agent.models import (
    Client,
    ExpenseTransaction,
    IncomeTransaction,
    Invoice,
    InvoiceStatus,
    LineItem,
    Quotation,
    QuotationStatus,
    Transaction,
    utcnow,
)
from finance_agent.numeric import calculate_totals, format_money
from finance_agent.services.base import DomainServices, ServiceError
from finance_agent.tools import schemas
from finance_agent.tools.definitions import FINANCE_TOOLS, READ_ONLY_TOOL_NAMES
from finance_agent.tools.results import (
    ToolFailure,
    ToolOutput,
    ToolResult,
    ToolSuccess,
    render,
)

logger = structlog.get_logger(__name__)

Handler = Callable[[str, Any], Awaitable[ToolResult]]


class ToolExecutionError(Exception):
    """The tool registry is misconfigured."""

    def __init__(self, tool_name: str, message: str):
        super().__init__(f"Tool '{tool_name}' failed: {message}")
        self.tool_name = tool_name


@dataclass(frozen=True)
class ToolSpec:
    """Registry entry: how to decode a tool's arguments and what runs it."""

    input_model: type[schemas.ToolInput]
    handler: Handler


def document_number(prefix: str, existing_count: int) -> str:
    """Next sequential number, e.g. ``INV-004`` when three invoices exist."""
    return f"{prefix}-{existing_count + 1:03d}"


def _format_validation_error(error: ValidationError) -> str:
    problems = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"]) or "arguments"
        problems.append(f"{location}: {item['msg']}")
    return "; ".join(problems)


class ToolExecutor:
    """Executes LLM tool calls against the domain services.

    Every call returns either a plain-text outcome (mutating tools) or a
    structured projection (read-only tools). Failures of any kind come back
    as ``"Error: ..."`` strings; ``execute`` never raises.
    """

    def __init__(self, services: DomainServices, tool_timeout: float | None = None):
        self.services = services
        self._tool_timeout = tool_timeout or get_settings().agent_tool_timeout
        self._tools: dict[str, ToolSpec] = {
            # Transactions
            "addTransaction": ToolSpec(schemas.AddTransactionInput, self._add_transaction),
            # Clients
            "addClient": ToolSpec(schemas.AddClientInput, self._add_client),
            "listClients": ToolSpec(schemas.NoInput, self._list_clients),
            # Invoices
            "createInvoice": ToolSpec(schemas.CreateSalesDocumentInput, self._create_invoice),
            "listInvoices": ToolSpec(schemas.ListInvoicesInput, self._list_invoices),
            "updateInvoiceStatus": ToolSpec(
                schemas.UpdateInvoiceStatusInput, self._update_invoice_status
            ),
            # Quotations
            "createQuotation": ToolSpec(
                schemas.CreateSalesDocumentInput, self._create_quotation
            ),
            "listQuotations": ToolSpec(schemas.ListQuotationsInput, self._list_quotations),
            "updateQuotationStatus": ToolSpec(
                schemas.UpdateQuotationStatusInput, self._update_quotation_status
            ),
            # Reports
            "getFinancialSummary": ToolSpec(schemas.NoInput, self._get_financial_summary),
        }

        advertised = {tool["name"] for tool in FINANCE_TOOLS}
        missing = advertised.symmetric_difference(self._tools)
        if missing:
            name = sorted(missing)[0]
            raise ToolExecutionError(name, "catalog and registry disagree")

    @property
    def tool_names(self) -> list[str]:
        return list(self._tools)

    async def execute(
        self, tool_name: str, arguments: dict[str, Any], user_id: str
    ) -> ToolOutput:
        """Execute a tool call and return its user-presentable output."""
        return render(await self.execute_result(tool_name, arguments, user_id))

    async def execute_result(
        self, tool_name: str, arguments: dict[str, Any], user_id: str
    ) -> ToolResult:
        """Execute a tool call and return the tagged result."""
        entry = self._tools.get(tool_name)
        if entry is None:
            logger.warning("unknown_tool", tool=tool_name)
            return ToolFailure(f"Unknown tool: {tool_name}")

        logger.info(
            "executing_tool",
            tool=tool_name,
            read_only=tool_name in READ_ONLY_TOOL_NAMES,
            arg_names=sorted(arguments or {}),
        )
        # Values carry contact details and tax ids
        logger.debug("tool_arguments", tool=tool_name, args=arguments)

        try:
            params = entry.input_model.model_validate(arguments or {})
        except ValidationError as e:
            logger.info("tool_arguments_invalid", tool=tool_name, errors=e.error_count())
            return ToolFailure(
                f"Invalid arguments for {tool_name}: {_format_validation_error(e)}"
            )

        try:
            result = await asyncio.wait_for(
                entry.handler(user_id, params), timeout=self._tool_timeout
            )
        except TimeoutError:
            logger.warning("tool_timeout", tool=tool_name, timeout=self._tool_timeout)
            return ToolFailure(f"Tool '{tool_name}' timed out after {self._tool_timeout:g}s.")
        except ServiceError as e:
            logger.warning(
                "tool_service_error",
                tool=tool_name,
                status=e.status_code,
                details=e.details,
            )
            return ToolFailure(str(e))
        except Exception as e:
            logger.exception("tool_execution_error", tool=tool_name)
            return ToolFailure(str(e) or f"{tool_name} failed unexpectedly.")

        logger.info("tool_executed", tool=tool_name, success=isinstance(result, ToolSuccess))
        return result

    # === Transaction Handlers ===

    async def _add_transaction(
        self, user_id: str, params: schemas.AddTransactionInput
    ) -> ToolResult:
        when = params.date or utcnow()
        transaction: Transaction
        if params.type == "income":
            if not params.source:
                return ToolFailure("Source is required for income transactions.")
            transaction = IncomeTransaction(
                amount=params.amount,
                date=when,
                description=params.description or params.source,
                source=params.source,
                currency=params.currency,
            )
        else:
            transaction = ExpenseTransaction(
                amount=params.amount,
                date=when,
                description=params.description or "Unspecified Expense",
                category=params.category or "other",
                vendor=params.vendor or "Unspecified Vendor",
                currency=params.currency,
            )

        await self.services.transactions.create(user_id, transaction)
        amount = format_money(params.amount, params.currency.value)
        return ToolSuccess(
            f'Successfully added {params.type} of {amount} for "{transaction.description}".'
        )

    # === Client Handlers ===

    async def _add_client(self, user_id: str, params: schemas.AddClientInput) -> ToolResult:
        client = Client(
            name=params.name,
            contact_person=params.contact_person,
            email=str(params.email),
            phone=params.phone,
            tax_id=params.tax_id,
        )
        created = await self.services.clients.create(user_id, client)
        return ToolSuccess(f"Client '{created.name}' created successfully.")

    async def _list_clients(self, user_id: str, params: schemas.NoInput) -> ToolResult:
        projection: list[dict[str, Any]] = []
        for client in await self.services.clients.list(user_id):
            row: dict[str, Any] = {"name": client.name, "status": client.status.value}
            if client.opportunity_worth is not None:
                row["opportunityWorth"] = client.opportunity_worth
            projection.append(row)
        return ToolSuccess(projection)

    # === Invoice & Quotation Handlers ===

    async def _resolve_client(self, user_id: str, name: str) -> Client | ToolFailure:
        client = await self.services.clients.find_by_name(user_id, name)
        if client is None or client.id is None:
            return ToolFailure(
                f"Client with name '{name}' not found. Please create the client first."
            )
        return client

    @staticmethod
    def _priced_items(params: schemas.CreateSalesDocumentInput) -> list[LineItem]:
        return [
            LineItem(
                description=item.description,
                quantity=item.quantity,
                unit_price=item.unit_price,
            )
            for item in params.items
        ]

    async def _create_invoice(
        self, user_id: str, params: schemas.CreateSalesDocumentInput
    ) -> ToolResult:
        client = await self._resolve_client(user_id, params.client_name)
        if isinstance(client, ToolFailure):
            return client

        items = self._priced_items(params)
        totals = calculate_totals(items)
        number = document_number("INV", await self.services.invoices.count(user_id))
        now = utcnow()

        await self.services.invoices.create(
            user_id,
            Invoice(
                invoice_number=number,
                client_ref=client.id,
                items=items,
                total_amount=totals.total_amount,
                date=now,
                due_date=params.due_date,
                status=InvoiceStatus.DRAFT,
                currency=params.currency,
                created_at=now,
            ),
        )
        return ToolSuccess(f"Invoice {number} created successfully for {client.name}.")

    async def _create_quotation(
        self, user_id: str, params: schemas.CreateSalesDocumentInput
    ) -> ToolResult:
        client = await self._resolve_client(user_id, params.client_name)
        if isinstance(client, ToolFailure):
            return client

        items = self._priced_items(params)
        totals = calculate_totals(items)
        number = document_number("QUO", await self.services.quotations.count(user_id))
        now = utcnow()

        await self.services.quotations.create(
            user_id,
            Quotation(
                quotation_number=number,
                client_ref=client.id,
                items=items,
                total_amount=totals.total_amount,
                date=now,
                due_date=params.due_date,
                status=QuotationStatus.DRAFT,
                currency=params.currency,
                created_at=now,
            ),
        )
        return ToolSuccess(f"Quotation {number} created successfully for {client.name}.")

    async def _list_invoices(
        self, user_id: str, params: schemas.ListInvoicesInput
    ) -> ToolResult:
        invoices = await self.services.invoices.list(user_id)
        return ToolSuccess([
            {
                "invoiceNumber": inv.invoice_number,
                "clientRef": inv.client_ref,
                "totalAmount": inv.total_amount,
                "status": inv.status.value,
                "dueDate": inv.due_date.isoformat(),
            }
            for inv in invoices
            if params.status is None or inv.status == params.status
        ])

    async def _list_quotations(
        self, user_id: str, params: schemas.ListQuotationsInput
    ) -> ToolResult:
        quotations = await self.services.quotations.list(user_id)
        return ToolSuccess([
            {
                "quotationNumber": quo.quotation_number,
                "clientRef": quo.client_ref,
                "totalAmount": quo.total_amount,
                "status": quo.status.value,
                "dueDate": quo.due_date.isoformat(),
            }
            for quo in quotations
            if params.status is None or quo.status == params.status
        ])

    async def _update_invoice_status(
        self, user_id: str, params: schemas.UpdateInvoiceStatusInput
    ) -> ToolResult:
        invoices = await self.services.invoices.list(user_id)
        invoice = next(
            (inv for inv in invoices if inv.invoice_number == params.invoice_number), None
        )
        if invoice is None or invoice.id is None:
            return ToolFailure(f"Invoice with number '{params.invoice_number}' not found.")

        await self.services.invoices.update(user_id, invoice.id, {"status": params.status})
        return ToolSuccess(
            f"Status of invoice {params.invoice_number} updated to {params.status.value}."
        )

    async def _update_quotation_status(
        self, user_id: str, params: schemas.UpdateQuotationStatusInput
    ) -> ToolResult:
        quotations = await self.services.quotations.list(user_id)
        quotation = next(
            (quo for quo in quotations if quo.quotation_number == params.quotation_number),
            None,
        )
        if quotation is None or quotation.id is None:
            return ToolFailure(f"Quotation with number '{params.quotation_number}' not found.")

        await self.services.quotations.update(
            user_id, quotation.id, {"status": params.status}
        )
        return ToolSuccess(
            f"Status of quotation {params.quotation_number} updated to {params.status.value}."
        )

    # === Report Handlers ===

    async def _get_financial_summary(
        self, user_id: str, params: schemas.NoInput
    ) -> ToolResult:
        invoices, transactions = await asyncio.gather(
            self.services.invoices.list(user_id),
            self.services.transactions.list(user_id),
        )

        paid = [inv for inv in invoices if inv.status == InvoiceStatus.PAID]
        total_revenue = sum((inv.total_amount for inv in paid), Decimal(0))
        total_expenses = sum(
            (t.amount for t in transactions if isinstance(t, ExpenseTransaction)), Decimal(0)
        )

        return ToolSuccess({
            "totalRevenue": total_revenue,
            "totalExpenses": total_expenses,
            "netProfit": total_revenue - total_expenses,
            "totalInvoices": len(invoices),
            "paidInvoices": len(paid),
            "unpaidInvoices": len(invoices) - len(paid),
            "totalTransactions": len(transactions),
        })
