"""LLM client implementations for the finance agent."""

from finance_agent.clients.base import (
    LLMClient,
    LLMConfigurationError,
    LLMProvider,
    LLMResponse,
)
from finance_agent.clients.claude import ClaudeClient
from finance_agent.clients.factory import create_llm_client
from finance_agent.clients.ollama import OllamaClient
from finance_agent.clients.openai_client import OpenAIClient

__all__ = [
    "LLMClient",
    "LLMConfigurationError",
    "LLMProvider",
    "LLMResponse",
    "ClaudeClient",
    "OpenAIClient",
    "OllamaClient",
    "create_llm_client",
]
