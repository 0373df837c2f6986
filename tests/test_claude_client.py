"""Tests for Claude LLM client."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from finance_agent.clients.base import LLMConfigurationError
from finance_agent.clients.claude import ClaudeClient
from finance_agent.tools import FINANCE_TOOLS


class TestClaudeClient:
    """Tests for ClaudeClient."""

    def test_client_initialization_with_defaults(self):
        """Test client initializes with settings defaults."""
        client = ClaudeClient()

        assert client._api_key == "sk-ant-test"
        assert client._model == "claude-haiku-4-5"
        assert client._max_tokens > 0

    def test_missing_api_key(self):
        with pytest.raises(LLMConfigurationError, match="ANTHROPIC_API_KEY"):
            ClaudeClient(api_key="")

    def test_catalog_passes_through(self):
        """The tool catalog is already in Anthropic's shape."""
        client = ClaudeClient()

        converted = client._convert_tools_to_anthropic_format(FINANCE_TOOLS)

        assert [tool["name"] for tool in converted] == [tool["name"] for tool in FINANCE_TOOLS]
        assert converted[0]["input_schema"] == FINANCE_TOOLS[0]["input_schema"]

    def test_assistant_tool_calls_become_tool_use_blocks(self):
        client = ClaudeClient()
        messages = [
            {
                "role": "assistant",
                "content": "",
                "tool_calls": [{"id": "toolu_1", "name": "listClients", "arguments": {}}],
            }
        ]

        [converted] = client._convert_messages_to_anthropic_format(messages)

        assert converted["role"] == "assistant"
        assert converted["content"] == [
            {"type": "tool_use", "id": "toolu_1", "name": "listClients", "input": {}}
        ]

    def test_consecutive_tool_results_share_one_user_turn(self):
        """Every tool_use of a turn is answered in the next user message."""
        client = ClaudeClient()
        messages = [
            {"role": "user", "content": "Add Acme and invoice them"},
            {
                "role": "assistant",
                "content": "",
                "tool_calls": [
                    {"id": "toolu_1", "name": "addClient", "arguments": {}},
                    {"id": "toolu_2", "name": "createInvoice", "arguments": {}},
                ],
            },
            {"role": "tool_result", "content": "ok", "tool_call_id": "toolu_1"},
            {"role": "tool_result", "content": "Error: nope", "tool_call_id": "toolu_2"},
            {"role": "user", "content": "Thanks"},
        ]

        converted = client._convert_messages_to_anthropic_format(messages)

        assert [m["role"] for m in converted] == ["user", "assistant", "user", "user"]
        assert [block["tool_use_id"] for block in converted[2]["content"]] == [
            "toolu_1",
            "toolu_2",
        ]
        assert converted[3]["content"] == "Thanks"

    def test_parse_tool_use_response(self):
        client = ClaudeClient()
        text_block = MagicMock(type="text", text="Recording that now.")
        tool_block = MagicMock(type="tool_use", id="toolu_9", input={"type": "expense"})
        tool_block.name = "addTransaction"

        mock_response = MagicMock()
        mock_response.content = [text_block, tool_block]
        mock_response.stop_reason = "tool_use"
        mock_response.usage = MagicMock(input_tokens=120, output_tokens=30)

        parsed = client._parse_response(mock_response)

        assert parsed.content == "Recording that now."
        assert parsed.tool_calls == [
            {"id": "toolu_9", "name": "addTransaction", "arguments": {"type": "expense"}}
        ]
        assert parsed.stop_reason == "tool_use"
        assert parsed.usage == {"input_tokens": 120, "output_tokens": 30}

    @pytest.mark.asyncio
    async def test_generate_sends_system_prompt_and_tools(self):
        client = ClaudeClient(temperature=0.0)
        mock_response = MagicMock()
        mock_response.content = [MagicMock(type="text", text="Hi")]
        mock_response.stop_reason = "end_turn"
        mock_response.usage = MagicMock(input_tokens=1, output_tokens=1)

        with patch.object(
            client._client.messages, "create", AsyncMock(return_value=mock_response)
        ) as mock_create:
            result = await client.generate(
                system_prompt="Be brief.",
                messages=[{"role": "user", "content": "Hello"}],
                tools=FINANCE_TOOLS,
            )

        assert result.content == "Hi"
        kwargs = mock_create.call_args.kwargs
        assert kwargs["system"] == "Be brief."
        assert kwargs["temperature"] == 0.0
        assert len(kwargs["tools"]) == len(FINANCE_TOOLS)

    @pytest.mark.asyncio
    async def test_generate_without_tools_omits_them(self):
        client = ClaudeClient()
        mock_response = MagicMock()
        mock_response.content = []
        mock_response.stop_reason = None
        mock_response.usage = MagicMock(input_tokens=1, output_tokens=0)

        with patch.object(
            client._client.messages, "create", AsyncMock(return_value=mock_response)
        ) as mock_create:
            result = await client.generate("Be brief.", [{"role": "user", "content": "Hi"}])

        assert "tools" not in mock_create.call_args.kwargs
        assert result.content == ""
        assert result.stop_reason == "end_turn"
