"""Tagged results for tool handlers.

Handlers return ``ToolSuccess`` or ``ToolFailure``. The executor turns a
failure into the ``"Error: ..."`` string the orchestrator and callers match on.
"""

import json
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any

ERROR_PREFIX = "Error: "

ToolOutput = str | list[dict[str, Any]] | dict[str, Any]


@dataclass(frozen=True)
class ToolSuccess:
    value: ToolOutput


@dataclass(frozen=True)
class ToolFailure:
    message: str


ToolResult = ToolSuccess | ToolFailure


def render(result: ToolResult) -> ToolOutput:
    """Stringify failures; pass successful values through unchanged."""
    if isinstance(result, ToolFailure):
        return f"{ERROR_PREFIX}{result.message}"
    return result.value


def is_error(output: ToolOutput) -> bool:
    return isinstance(output, str) and output.startswith(ERROR_PREFIX)


def _json_default(value: Any) -> Any:
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def to_message_content(output: ToolOutput) -> str:
    """Text form of a tool output for the conversation transcript."""
    if isinstance(output, str):
        return output
    return json.dumps(output, default=_json_default)
