"""Conversation bookkeeping shared by agents."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

import structlog

logger = structlog.get_logger(__name__)


@dataclass
class AgentMessage:
    """A message in a conversation transcript."""

    role: str  # "user", "assistant", or "tool_result"
    content: str
    tool_calls: list[dict[str, Any]] = field(default_factory=list)
    tool_call_id: str | None = None
    tool_name: str | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def to_llm_message(self) -> dict[str, Any]:
        return {
            "role": self.role,
            "content": self.content,
            "tool_calls": self.tool_calls,
            "tool_call_id": self.tool_call_id,
            "tool_name": self.tool_name,
        }


@dataclass
class ToolCallRecord:
    """One tool call made during a run and what it returned."""

    tool_name: str
    arguments: dict[str, Any]
    output: Any
    is_error: bool = False


class Conversation:
    """Transcript for a single agent run.

    A new conversation is built for every question; prior turns come only
    from the caller-supplied history.
    """

    def __init__(self, history: list[dict[str, Any]] | None = None):
        self._messages: list[AgentMessage] = []
        for turn in history or []:
            if turn.get("role") in ("user", "assistant") and turn.get("content"):
                self._messages.append(AgentMessage(role=turn["role"], content=turn["content"]))

    @property
    def messages(self) -> list[AgentMessage]:
        return self._messages.copy()

    def add_user_message(self, content: str) -> None:
        self._messages.append(AgentMessage(role="user", content=content))
        logger.debug("user_message_added", content_length=len(content))

    def add_assistant_message(
        self, content: str, tool_calls: list[dict[str, Any]] | None = None
    ) -> None:
        self._messages.append(
            AgentMessage(role="assistant", content=content, tool_calls=tool_calls or [])
        )
        logger.debug(
            "assistant_message_added",
            content_length=len(content),
            tool_calls=len(tool_calls or []),
        )

    def add_tool_result(self, tool_call_id: str, tool_name: str, result: str) -> None:
        self._messages.append(
            AgentMessage(
                role="tool_result",
                content=result,
                tool_call_id=tool_call_id,
                tool_name=tool_name,
            )
        )
        logger.debug("tool_result_added", tool_call_id=tool_call_id, tool=tool_name)

    def to_llm_messages(self) -> list[dict[str, Any]]:
        return [msg.to_llm_message() for msg in self._messages]


@dataclass
class AgentReply:
    """Final answer of a run plus the tool evidence behind it."""

    text: str
    tool_calls: list[ToolCallRecord] = field(default_factory=list)
    iterations: int = 0
