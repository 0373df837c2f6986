"""Agent implementations."""

from finance_agent.agents.base import AgentMessage, AgentReply, Conversation, ToolCallRecord
from finance_agent.agents.finance import FINANCE_SYSTEM_PROMPT, FinanceAgent

__all__ = [
    "AgentMessage",
    "AgentReply",
    "Conversation",
    "ToolCallRecord",
    "FinanceAgent",
    "FINANCE_SYSTEM_PROMPT",
]
