"""The single function the hosting application calls to ask the agent something."""

import asyncio
import atexit
import threading
from functools import lru_cache
from typing import Any

import structlog

from finance_agent.agents.finance import FinanceAgent
from finance_agent.clients.factory import create_llm_client
from finance_agent.services.rest import create_rest_services
from finance_agent.tools.executor import ToolExecutor

logger = structlog.get_logger(__name__)

AUTH_ERROR_MESSAGE = "Authentication error: you must be signed in to use the assistant."
EMPTY_QUESTION_MESSAGE = "Please type a question or an instruction for the assistant."
FALLBACK_MESSAGE = "I had trouble processing that request. Please try again."


@lru_cache
def get_default_agent() -> FinanceAgent:
    """Agent wired from settings: configured LLM provider and the document API."""
    return FinanceAgent(
        llm_client=create_llm_client(),
        tool_executor=ToolExecutor(create_rest_services()),
    )


async def ask(
    question: str,
    user_id: str,
    agent: FinanceAgent | None = None,
    history: list[dict[str, Any]] | None = None,
) -> str:
    """Answer ``question`` on behalf of ``user_id``. Never raises.

    Args:
        question: Free-text question or command.
        user_id: Authenticated tenant id; blank means not signed in.
        agent: Agent to use; defaults to one built from settings.
        history: Optional earlier ``{"role", "content"}`` turns.

    Returns:
        The reply, an authentication error, or a generic fallback message.
    """
    if not user_id or not user_id.strip():
        logger.warning("ask_rejected", reason="missing_user_id")
        return AUTH_ERROR_MESSAGE
    if not question or not question.strip():
        return EMPTY_QUESTION_MESSAGE

    with structlog.contextvars.bound_contextvars(user_id=user_id):
        try:
            agent = agent or get_default_agent()
            reply = await agent.run(question.strip(), user_id, history=history)
        except Exception:
            logger.exception("ask_failed")
            return FALLBACK_MESSAGE

    return reply.text


# One loop for every synchronous call: the cached agent's HTTP clients are
# bound to the loop they were first used on.
_sync_runner: asyncio.Runner | None = None
_sync_lock = threading.Lock()


def _get_sync_runner() -> asyncio.Runner:
    global _sync_runner
    if _sync_runner is None:
        _sync_runner = asyncio.Runner()
        atexit.register(_sync_runner.close)
    return _sync_runner


def ask_sync(question: str, user_id: str, agent: FinanceAgent | None = None) -> str:
    """Blocking wrapper around :func:`ask` for synchronous hosts.

    Calls are serialized onto one long-lived event loop, so an agent (and
    its HTTP clients) can be reused across calls.
    """
    with _sync_lock:
        return _get_sync_runner().run(ask(question, user_id, agent=agent))
