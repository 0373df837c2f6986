"""Select an LLM client from configuration."""

import structlog

from finance_agent.clients.base import LLMClient, LLMConfigurationError, LLMProvider
from finance_agent.clients.claude import ClaudeClient
from finance_agent.clients.ollama import OllamaClient
from finance_agent.clients.openai_client import OpenAIClient
from finance_agent.config import get_settings

logger = structlog.get_logger(__name__)


def create_llm_client(provider: LLMProvider | str | None = None) -> LLMClient:
    """Create the LLM client for ``provider``, or for ``LLM_PROVIDER`` if omitted."""
    settings = get_settings()
    selected = LLMProvider(provider or settings.llm_provider)
    logger.debug("creating_llm_client", provider=selected.value)

    if selected == LLMProvider.OPENAI:
        return OpenAIClient()
    if selected == LLMProvider.OLLAMA:
        return OllamaClient()
    if selected == LLMProvider.LM_STUDIO:
        # LM Studio has no default model to fall back to
        if not settings.lm_studio_model:
            raise LLMConfigurationError("LM_STUDIO_MODEL is not set")
        return OpenAIClient(
            api_key="lm-studio",
            base_url=settings.lm_studio_base_url,
            model=settings.lm_studio_model,
        )
    return ClaudeClient()
