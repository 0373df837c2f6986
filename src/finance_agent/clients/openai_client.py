"""OpenAI chat completions client with function calling support."""

import json
from typing import Any

import openai
import structlog

from finance_agent.clients.base import LLMConfigurationError, LLMResponse, to_function_tools
from finance_agent.config import get_settings

logger = structlog.get_logger(__name__)

_STOP_REASON_MAP = {
    "stop": "end_turn",
    "tool_calls": "tool_use",
    "length": "max_tokens",
    "content_filter": "content_filter",
}


class OpenAIClient:
    """Async client for OpenAI's chat completions API with tool use.

    Also supports OpenAI-compatible servers like LM Studio via ``base_url``.
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ):
        settings = get_settings()
        if api_key is None and settings.openai_api_key is not None:
            api_key = settings.openai_api_key.get_secret_value()
        if not api_key:
            raise LLMConfigurationError("OPENAI_API_KEY is not set")

        self._api_key = api_key
        self._base_url = base_url  # None means OpenAI's default endpoint
        self._model = model or settings.gpt_model
        self._max_tokens = max_tokens or settings.llm_max_tokens
        self._temperature = temperature if temperature is not None else settings.llm_temperature

        client_kwargs: dict[str, Any] = {"api_key": self._api_key}
        if self._base_url:
            client_kwargs["base_url"] = self._base_url

        self._client = openai.AsyncOpenAI(**client_kwargs)
        client_name = "lm_studio" if self._base_url else "openai"
        self._logger = logger.bind(client=client_name, model=self._model)

    def _convert_messages_to_openai_format(
        self, system_prompt: str, messages: list[dict[str, Any]]
    ) -> list[dict[str, Any]]:
        """Convert conversation history to OpenAI's message format."""
        openai_messages: list[dict[str, Any]] = [{"role": "system", "content": system_prompt}]

        for msg in messages:
            if msg["role"] == "user":
                openai_messages.append({"role": "user", "content": msg["content"]})
            elif msg["role"] == "assistant":
                assistant_msg: dict[str, Any] = {
                    "role": "assistant",
                    "content": msg.get("content") or None,
                }
                if msg.get("tool_calls"):
                    assistant_msg["tool_calls"] = [
                        {
                            "id": tc["id"],
                            "type": "function",
                            "function": {
                                "name": tc["name"],
                                "arguments": json.dumps(tc["arguments"]),
                            },
                        }
                        for tc in msg["tool_calls"]
                    ]
                openai_messages.append(assistant_msg)
            elif msg["role"] == "tool_result":
                openai_messages.append({
                    "role": "tool",
                    "tool_call_id": msg["tool_call_id"],
                    "content": msg["content"],
                })

        return openai_messages

    def _parse_arguments(self, raw: str | None) -> dict[str, Any]:
        if not raw:
            return {}
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            self._logger.warning("invalid_tool_arguments", raw=raw[:200])
            return {}
        return parsed if isinstance(parsed, dict) else {}

    def _parse_response(self, response: Any) -> LLMResponse:
        """Parse a chat completion into an LLMResponse."""
        choice = response.choices[0]
        message = choice.message
        tool_calls = [
            {
                "id": tc.id,
                "name": tc.function.name,
                "arguments": self._parse_arguments(tc.function.arguments),
            }
            for tc in message.tool_calls or []
        ]

        return LLMResponse(
            content=message.content or "",
            tool_calls=tool_calls,
            stop_reason=_STOP_REASON_MAP.get(choice.finish_reason or "stop", "end_turn"),
            usage={
                "input_tokens": response.usage.prompt_tokens if response.usage else 0,
                "output_tokens": response.usage.completion_tokens if response.usage else 0,
            },
        )

    async def generate(
        self,
        system_prompt: str,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]] | None = None,
    ) -> LLMResponse:
        """Generate a response from an OpenAI-compatible model."""
        self._logger.debug(
            "generating_response",
            message_count=len(messages),
            tool_count=len(tools) if tools else 0,
        )

        kwargs: dict[str, Any] = {
            "model": self._model,
            "messages": self._convert_messages_to_openai_format(system_prompt, messages),
            "max_tokens": self._max_tokens,
            "temperature": self._temperature,
        }
        if tools:
            kwargs["tools"] = to_function_tools(tools)
            kwargs["tool_choice"] = "auto"

        try:
            response = await self._client.chat.completions.create(**kwargs)
        except openai.APIError as e:
            self._logger.error("api_error", error=str(e))
            raise

        parsed = self._parse_response(response)
        self._logger.info(
            "response_generated",
            stop_reason=parsed.stop_reason,
            tool_calls=len(parsed.tool_calls),
            input_tokens=parsed.usage["input_tokens"],
            output_tokens=parsed.usage["output_tokens"],
        )
        return parsed
