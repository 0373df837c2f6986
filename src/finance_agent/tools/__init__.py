"""Tools module: catalog, argument models and executor."""

from finance_agent.tools.definitions import FINANCE_TOOLS, READ_ONLY_TOOL_NAMES
from finance_agent.tools.executor import ToolExecutionError, ToolExecutor, document_number
from finance_agent.tools.results import (
    ERROR_PREFIX,
    ToolFailure,
    ToolResult,
    ToolSuccess,
    is_error,
    render,
    to_message_content,
)

__all__ = [
    # Tool Definitions
    "FINANCE_TOOLS",
    "READ_ONLY_TOOL_NAMES",
    # Tool Executor
    "ToolExecutor",
    "ToolExecutionError",
    "document_number",
    # Results
    "ERROR_PREFIX",
    "ToolResult",
    "ToolSuccess",
    "ToolFailure",
    "render",
    "is_error",
    "to_message_content",
]
