"""Tool definitions for LLM function calling.

These schemas are the only view of the tool layer the model gets: a name, a
description and a JSON Schema for the arguments. The tenant's user id is
never an argument; the executor binds it for each request.
"""

from typing import Any

CURRENCIES = ["USD", "EUR", "GBP", "INR", "AED", "CAD"]
INVOICE_STATUSES = ["draft", "sent", "paid", "overdue"]
QUOTATION_STATUSES = ["draft", "sent", "won", "lost"]

_CURRENCY_PROPERTY: dict[str, Any] = {
    "type": "string",
    "enum": CURRENCIES,
    "default": "USD",
    "description": "Currency of the amounts. Defaults to USD.",
}

_LINE_ITEMS_PROPERTY: dict[str, Any] = {
    "type": "array",
    "minItems": 1,
    "description": "Line items. Totals are computed from quantity and unit price.",
    "items": {
        "type": "object",
        "properties": {
            "description": {"type": "string", "description": "What is being billed"},
            "quantity": {"type": "number", "exclusiveMinimum": 0},
            "unitPrice": {"type": "number", "minimum": 0},
        },
        "required": ["description", "quantity", "unitPrice"],
    },
}

# === Transaction Tools ===

ADD_TRANSACTION_TOOL: dict[str, Any] = {
    "name": "addTransaction",
    "description": (
        "Add a new transaction, either an income or an expense. For income, source is "
        'required. For expenses, infer a category if possible; otherwise it defaults to "other".'
    ),
    "input_schema": {
        "type": "object",
        "properties": {
            "type": {"type": "string", "enum": ["income", "expense"]},
            "amount": {"type": "number", "exclusiveMinimum": 0},
            "date": {
                "type": "string",
                "format": "date",
                "description": "Transaction date (YYYY-MM-DD). Defaults to today.",
            },
            "description": {
                "type": "string",
                "description": 'What the transaction was for, e.g. "Software subscription".',
            },
            "category": {
                "type": "string",
                "description": 'Expense category, e.g. "software", "marketing", "travel", "office".',
            },
            "vendor": {
                "type": "string",
                "description": 'Who was paid for an expense, e.g. "Google", "Figma".',
            },
            "source": {
                "type": "string",
                "description": 'Where income came from, e.g. "Invoice Payment", "Sale".',
            },
            "currency": _CURRENCY_PROPERTY,
        },
        "required": ["type", "amount"],
    },
}

# === Client Tools ===

ADD_CLIENT_TOOL: dict[str, Any] = {
    "name": "addClient",
    "description": "Create a new client. New clients always start as leads.",
    "input_schema": {
        "type": "object",
        "properties": {
            "name": {"type": "string", "description": "The client's company name"},
            "contactPerson": {"type": "string", "description": "The main contact person"},
            "email": {"type": "string", "format": "email"},
            "phone": {"type": "string"},
            "taxId": {"type": "string", "description": "The client's tax ID"},
        },
        "required": ["name", "contactPerson", "email"],
    },
}

LIST_CLIENTS_TOOL: dict[str, Any] = {
    "name": "listClients",
    "description": (
        "List all clients with their name, status and opportunity worth. Use this to "
        "answer how many clients there are or to list them."
    ),
    "input_schema": {"type": "object", "properties": {}, "required": []},
}

# === Invoice Tools ===

CREATE_INVOICE_TOOL: dict[str, Any] = {
    "name": "createInvoice",
    "description": (
        "Create a draft invoice for an existing client, looked up by name. "
        "The client must exist; create it with addClient first if needed."
    ),
    "input_schema": {
        "type": "object",
        "properties": {
            "clientName": {"type": "string", "description": "Name of the client to invoice"},
            "items": _LINE_ITEMS_PROPERTY,
            "dueDate": {
                "type": "string",
                "format": "date",
                "description": "Due date (YYYY-MM-DD)",
            },
            "currency": _CURRENCY_PROPERTY,
        },
        "required": ["clientName", "items", "dueDate"],
    },
}

LIST_INVOICES_TOOL: dict[str, Any] = {
    "name": "listInvoices",
    "description": "List invoices, optionally filtered by status.",
    "input_schema": {
        "type": "object",
        "properties": {
            "status": {
                "type": "string",
                "enum": INVOICE_STATUSES,
                "description": "Only return invoices with this status",
            },
        },
        "required": [],
    },
}

UPDATE_INVOICE_STATUS_TOOL: dict[str, Any] = {
    "name": "updateInvoiceStatus",
    "description": "Change the status of an invoice identified by its number, e.g. INV-001.",
    "input_schema": {
        "type": "object",
        "properties": {
            "invoiceNumber": {"type": "string", "description": "Invoice number, e.g. INV-001"},
            "status": {"type": "string", "enum": INVOICE_STATUSES},
        },
        "required": ["invoiceNumber", "status"],
    },
}

# === Quotation Tools ===

CREATE_QUOTATION_TOOL: dict[str, Any] = {
    "name": "createQuotation",
    "description": (
        "Create a draft quotation (proposal) for an existing client, looked up by name."
    ),
    "input_schema": {
        "type": "object",
        "properties": {
            "clientName": {"type": "string", "description": "Name of the client"},
            "items": _LINE_ITEMS_PROPERTY,
            "dueDate": {
                "type": "string",
                "format": "date",
                "description": "Expiry date of the quotation (YYYY-MM-DD)",
            },
            "currency": _CURRENCY_PROPERTY,
        },
        "required": ["clientName", "items", "dueDate"],
    },
}

LIST_QUOTATIONS_TOOL: dict[str, Any] = {
    "name": "listQuotations",
    "description": "List quotations, optionally filtered by status.",
    "input_schema": {
        "type": "object",
        "properties": {
            "status": {
                "type": "string",
                "enum": QUOTATION_STATUSES,
                "description": "Only return quotations with this status",
            },
        },
        "required": [],
    },
}

UPDATE_QUOTATION_STATUS_TOOL: dict[str, Any] = {
    "name": "updateQuotationStatus",
    "description": "Change the status of a quotation identified by its number, e.g. QUO-001.",
    "input_schema": {
        "type": "object",
        "properties": {
            "quotationNumber": {
                "type": "string",
                "description": "Quotation number, e.g. QUO-001",
            },
            "status": {"type": "string", "enum": QUOTATION_STATUSES},
        },
        "required": ["quotationNumber", "status"],
    },
}

# === Reports ===

GET_FINANCIAL_SUMMARY_TOOL: dict[str, Any] = {
    "name": "getFinancialSummary",
    "description": (
        "Summarize revenue (paid invoices), expenses, net profit and invoice and "
        "transaction counts. Use this for questions about revenue, expenses or profit."
    ),
    "input_schema": {"type": "object", "properties": {}, "required": []},
}

# === Tool Collections ===

FINANCE_TOOLS: list[dict[str, Any]] = [
    ADD_TRANSACTION_TOOL,
    ADD_CLIENT_TOOL,
    CREATE_INVOICE_TOOL,
    LIST_CLIENTS_TOOL,
    GET_FINANCIAL_SUMMARY_TOOL,
    CREATE_QUOTATION_TOOL,
    LIST_INVOICES_TOOL,
    LIST_QUOTATIONS_TOOL,
    UPDATE_INVOICE_STATUS_TOOL,
    UPDATE_QUOTATION_STATUS_TOOL,
]

# Tools that only read data
READ_ONLY_TOOL_NAMES = frozenset(
    {"listClients", "listInvoices", "listQuotations", "getFinancialSummary"}
)
