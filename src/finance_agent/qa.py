"""Tool-free question answering over a supplied snapshot of financial data."""

import asyncio
import json
from typing import Any

import structlog

from finance_agent.clients.base import LLMClient
from finance_agent.clients.factory import create_llm_client
from finance_agent.config import get_settings
from finance_agent.entrypoint import FALLBACK_MESSAGE

logger = structlog.get_logger(__name__)

FINANCE_QA_PROMPT = """You are a financial expert. Use only the financial data provided
by the user to answer their question. If the answer is not in the data,
say that you cannot answer the question from the available data."""


async def answer_finance_question(
    query: str,
    financial_data: dict[str, Any] | str | None = None,
    llm_client: LLMClient | None = None,
) -> str:
    """Answer ``query`` from ``financial_data`` alone. Never raises."""
    if isinstance(financial_data, str):
        data_text = financial_data
    elif financial_data is None:
        data_text = "No financial data provided."
    else:
        data_text = json.dumps(financial_data, indent=2, default=str)

    message = f"Question: {query}\n\nFinancial Data:\n{data_text}"

    try:
        client = llm_client or create_llm_client()
        response = await asyncio.wait_for(
            client.generate(
                system_prompt=FINANCE_QA_PROMPT,
                messages=[{"role": "user", "content": message}],
            ),
            timeout=get_settings().agent_generation_timeout,
        )
    except Exception:
        logger.exception("finance_qa_failed")
        return FALLBACK_MESSAGE

    return response.content.strip() or FALLBACK_MESSAGE
