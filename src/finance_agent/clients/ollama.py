"""Ollama client for running the agent against a local model."""

import json
from typing import Any

import httpx
import structlog

from finance_agent.clients.base import LLMResponse, to_function_tools
from finance_agent.config import get_settings

logger = structlog.get_logger(__name__)


class OllamaClient:
    """Client for Ollama's ``/api/chat`` endpoint with tool calling."""

    def __init__(
        self,
        base_url: str | None = None,
        model: str | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        settings = get_settings()
        self._base_url = (base_url or settings.ollama_base_url).rstrip("/")
        self._model = model or settings.ollama_model
        self._max_tokens = max_tokens or settings.llm_max_tokens
        self._temperature = temperature if temperature is not None else settings.llm_temperature

        # Local models can be slow; the agent applies its own generation timeout on top
        self._client = http_client or httpx.AsyncClient(timeout=120.0)
        self._logger = logger.bind(client="ollama", model=self._model)

    def _convert_messages_to_ollama_format(
        self, system_prompt: str, messages: list[dict[str, Any]]
    ) -> list[dict[str, Any]]:
        """Convert conversation history to Ollama's message format."""
        ollama_messages: list[dict[str, Any]] = [{"role": "system", "content": system_prompt}]

        for msg in messages:
            if msg["role"] == "user":
                ollama_messages.append({"role": "user", "content": msg["content"]})
            elif msg["role"] == "assistant":
                assistant_msg: dict[str, Any] = {
                    "role": "assistant",
                    # Ollama requires content to always be present
                    "content": msg.get("content") or "",
                }
                if msg.get("tool_calls"):
                    # Ollama expects arguments as a dict, not a JSON string
                    assistant_msg["tool_calls"] = [
                        {"function": {"name": tc["name"], "arguments": tc["arguments"]}}
                        for tc in msg["tool_calls"]
                    ]
                ollama_messages.append(assistant_msg)
            elif msg["role"] == "tool_result":
                ollama_messages.append({
                    "role": "tool",
                    "tool_name": msg.get("tool_name", ""),
                    "content": msg["content"],
                })

        return ollama_messages

    def _parse_response(self, response_data: dict[str, Any]) -> LLMResponse:
        """Parse an Ollama chat response into an LLMResponse."""
        message = response_data.get("message", {})
        tool_calls: list[dict[str, Any]] = []

        for tc in message.get("tool_calls") or []:
            func = tc.get("function", {})
            arguments = func.get("arguments", {})
            if isinstance(arguments, str):
                try:
                    arguments = json.loads(arguments)
                except json.JSONDecodeError:
                    arguments = {}
            tool_calls.append({
                # Ollama does not assign ids, so mint one per position
                "id": tc.get("id") or f"call_{len(tool_calls)}",
                "name": func.get("name", ""),
                "arguments": arguments,
            })

        done_reason = response_data.get("done_reason", "")
        if tool_calls:
            stop_reason = "tool_use"
        elif done_reason == "length":
            stop_reason = "max_tokens"
        else:
            stop_reason = "end_turn"

        return LLMResponse(
            content=message.get("content", ""),
            tool_calls=tool_calls,
            stop_reason=stop_reason,
            usage={
                "input_tokens": response_data.get("prompt_eval_count", 0),
                "output_tokens": response_data.get("eval_count", 0),
            },
        )

    async def generate(
        self,
        system_prompt: str,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]] | None = None,
    ) -> LLMResponse:
        """Generate a response from the local Ollama model."""
        self._logger.debug(
            "generating_response",
            message_count=len(messages),
            tool_count=len(tools) if tools else 0,
        )

        payload: dict[str, Any] = {
            "model": self._model,
            "messages": self._convert_messages_to_ollama_format(system_prompt, messages),
            "stream": False,
            "options": {
                "num_predict": self._max_tokens,
                "temperature": self._temperature,
            },
        }
        if tools:
            payload["tools"] = to_function_tools(tools)

        try:
            response = await self._client.post(f"{self._base_url}/api/chat", json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            self._logger.error("api_error", status=e.response.status_code, error=str(e))
            raise
        except httpx.RequestError as e:
            self._logger.error("connection_error", error=str(e))
            raise

        parsed = self._parse_response(response.json())
        self._logger.info(
            "response_generated",
            stop_reason=parsed.stop_reason,
            tool_calls=len(parsed.tool_calls),
            input_tokens=parsed.usage["input_tokens"],
            output_tokens=parsed.usage["output_tokens"],
        )
        return parsed

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()
