"""Finance Agent - natural-language assistant for clients, transactions, invoices and quotations."""

__version__ = "0.1.0"

from finance_agent.agents import AgentReply, FinanceAgent
from finance_agent.clients import (
    ClaudeClient,
    LLMProvider,
    LLMResponse,
    OllamaClient,
    OpenAIClient,
    create_llm_client,
)
from finance_agent.config import configure_logging, get_settings
from finance_agent.entrypoint import ask, ask_sync
from finance_agent.qa import answer_finance_question
from finance_agent.services import (
    DomainServices,
    ServiceError,
    create_in_memory_services,
    create_rest_services,
)
from finance_agent.tools import FINANCE_TOOLS, ToolExecutor

__all__ = [
    # Version
    "__version__",
    # Entry points
    "ask",
    "ask_sync",
    "answer_finance_question",
    # Agent
    "FinanceAgent",
    "AgentReply",
    # LLM Clients
    "ClaudeClient",
    "OpenAIClient",
    "OllamaClient",
    "LLMProvider",
    "LLMResponse",
    "create_llm_client",
    # Tools
    "FINANCE_TOOLS",
    "ToolExecutor",
    # Services
    "DomainServices",
    "ServiceError",
    "create_in_memory_services",
    "create_rest_services",
    # Config
    "get_settings",
    "configure_logging",
]
