"""Tests for Ollama LLM client."""

import json

import httpx
import pytest

from finance_agent.clients.ollama import OllamaClient


def _mock_transport(payload: dict, status_code: int = 200, seen: list | None = None):
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return httpx.Response(status_code, json=payload)

    return httpx.MockTransport(handler)


class TestOllamaClient:
    """Tests for OllamaClient."""

    def test_client_initialization_with_defaults(self):
        """Test client initializes with settings defaults."""
        client = OllamaClient()

        assert client._base_url == "http://localhost:11434"
        assert client._model == "qwen3:30b"

    def test_base_url_trailing_slash_stripped(self):
        client = OllamaClient(base_url="http://localhost:11434/")

        assert client._base_url == "http://localhost:11434"

    def test_tool_results_carry_tool_name(self):
        client = OllamaClient()
        messages = [
            {
                "role": "assistant",
                "content": None,
                "tool_calls": [{"id": "call_0", "name": "listClients", "arguments": {}}],
            },
            {
                "role": "tool_result",
                "content": "[]",
                "tool_call_id": "call_0",
                "tool_name": "listClients",
            },
        ]

        converted = client._convert_messages_to_ollama_format("Policy", messages)

        assert converted[1]["content"] == ""
        assert converted[1]["tool_calls"][0]["function"] == {
            "name": "listClients",
            "arguments": {},
        }
        assert converted[2] == {"role": "tool", "tool_name": "listClients", "content": "[]"}

    def test_parse_response_mints_tool_call_ids(self):
        """Ollama does not assign ids, so positions are used."""
        client = OllamaClient()

        parsed = client._parse_response({
            "message": {
                "content": "",
                "tool_calls": [
                    {"function": {"name": "listClients", "arguments": {}}},
                    {"function": {"name": "listInvoices", "arguments": '{"status": "paid"}'}},
                ],
            },
            "prompt_eval_count": 40,
            "eval_count": 8,
        })

        assert [tc["id"] for tc in parsed.tool_calls] == ["call_0", "call_1"]
        assert parsed.tool_calls[1]["arguments"] == {"status": "paid"}
        assert parsed.stop_reason == "tool_use"
        assert parsed.usage == {"input_tokens": 40, "output_tokens": 8}

    def test_parse_truncated_response(self):
        client = OllamaClient()

        parsed = client._parse_response({"message": {"content": "Partial"}, "done_reason": "length"})

        assert parsed.stop_reason == "max_tokens"

    @pytest.mark.asyncio
    async def test_generate_posts_chat_request(self):
        seen: list[httpx.Request] = []
        http_client = httpx.AsyncClient(
            transport=_mock_transport({"message": {"content": "Hello"}}, seen=seen)
        )
        client = OllamaClient(model="llama3.1:8b", http_client=http_client)

        result = await client.generate(
            "Policy",
            [{"role": "user", "content": "Hi"}],
            tools=[{"name": "listClients", "description": "List", "input_schema": {}}],
        )
        await client.close()

        assert result.content == "Hello"
        assert result.stop_reason == "end_turn"
        [request] = seen
        assert request.url.path == "/api/chat"
        body = json.loads(request.content)
        assert body["model"] == "llama3.1:8b"
        assert body["stream"] is False
        assert body["tools"][0]["function"]["name"] == "listClients"

    @pytest.mark.asyncio
    async def test_generate_raises_on_http_error(self):
        http_client = httpx.AsyncClient(
            transport=_mock_transport({"error": "model not found"}, status_code=404)
        )
        client = OllamaClient(http_client=http_client)

        with pytest.raises(httpx.HTTPStatusError):
            await client.generate("Policy", [{"role": "user", "content": "Hi"}])

        await client.close()
