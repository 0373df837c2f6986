"""Provider-neutral types shared by the LLM clients.

Conversation messages passed to ``generate`` are plain dicts with a ``role``
of ``"user"``, ``"assistant"`` or ``"tool_result"``. Assistant messages may
carry ``tool_calls`` (``{"id", "name", "arguments"}``) and tool results carry
the ``tool_call_id`` and ``tool_name`` they answer. Each client converts this
shape to its provider's wire format.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol


class LLMProvider(str, Enum):
    """LLM provider selection."""

    CLAUDE = "claude"
    OPENAI = "openai"
    OLLAMA = "ollama"
    LM_STUDIO = "lm_studio"


class LLMConfigurationError(Exception):
    """The selected provider is missing required configuration."""


@dataclass
class LLMResponse:
    """A single model turn, normalized across providers."""

    content: str
    tool_calls: list[dict[str, Any]] = field(default_factory=list)
    stop_reason: str = "end_turn"  # "end_turn", "tool_use", "max_tokens", "content_filter"
    usage: dict[str, int] = field(
        default_factory=lambda: {"input_tokens": 0, "output_tokens": 0}
    )


class LLMClient(Protocol):
    """Anything that can produce a model turn from a conversation."""

    async def generate(
        self,
        system_prompt: str,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]] | None = None,
    ) -> LLMResponse: ...


def to_function_tools(tools: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Convert catalog entries to the OpenAI-compatible function format.

    Used by both the OpenAI and Ollama clients:
    {"type": "function", "function": {"name", "description", "parameters"}}
    """
    return [
        {
            "type": "function",
            "function": {
                "name": tool["name"],
                "description": tool["description"],
                "parameters": tool["input_schema"],
            },
        }
        for tool in tools
    ]
