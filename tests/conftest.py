"""Pytest configuration and fixtures."""

import copy
import os
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any

import pytest

# Set test environment variables before importing settings
os.environ.setdefault("ANTHROPIC_API_KEY", "sk-ant-test")
os.environ.setdefault("OPENAI_API_KEY", "sk-test")
os.environ.setdefault("LLM_PROVIDER", "claude")

from finance_agent.clients.base import LLMResponse  # noqa: E402
from finance_agent.models import Client, Invoice, InvoiceStatus, LineItem  # noqa: E402
from finance_agent.services import create_in_memory_services  # noqa: E402
from finance_agent.tools import ToolExecutor  # noqa: E402


class ScriptedLLMClient:
    """Fake LLM client that replays canned responses and records each request."""

    def __init__(self, responses: list[LLMResponse | Exception]):
        self._responses = list(responses)
        self.calls: list[dict[str, Any]] = []

    async def generate(
        self,
        system_prompt: str,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]] | None = None,
    ) -> LLMResponse:
        self.calls.append({
            "system_prompt": system_prompt,
            "messages": copy.deepcopy(messages),
            "tools": tools,
        })
        if not self._responses:
            raise AssertionError("generate called more times than scripted")
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def tool_call(name: str, arguments: dict[str, Any], call_id: str = "call_1") -> dict[str, Any]:
    return {"id": call_id, "name": name, "arguments": arguments}


def tool_use_response(*calls: dict[str, Any], content: str = "") -> LLMResponse:
    return LLMResponse(content=content, tool_calls=list(calls), stop_reason="tool_use")


def text_response(content: str) -> LLMResponse:
    return LLMResponse(content=content, stop_reason="end_turn")


def make_invoice(
    number: str,
    total: str,
    status: InvoiceStatus = InvoiceStatus.DRAFT,
    client_ref: str = "client-1",
) -> Invoice:
    amount = Decimal(total)
    return Invoice(
        invoice_number=number,
        client_ref=client_ref,
        items=[LineItem(description="Services", quantity=Decimal("1"), unit_price=amount)],
        total_amount=amount,
        date=datetime(2024, 1, 15, tzinfo=UTC),
        due_date=datetime(2024, 2, 15, tzinfo=UTC),
        status=status,
    )


def make_client(name: str = "Acme Corp") -> Client:
    return Client(name=name, contact_person="Jane Doe", email="jane@acme.com")


@pytest.fixture
def user_id() -> str:
    return "user-123"


@pytest.fixture
def services():
    """Fresh in-memory domain services."""
    return create_in_memory_services()


@pytest.fixture
def executor(services):
    """Tool executor over the in-memory services."""
    return ToolExecutor(services, tool_timeout=5.0)
