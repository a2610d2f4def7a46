"""Response envelope builders — field assembly for the HTTP layer."""
from datetime import datetime, timezone
from typing import Any, Optional

from .protocol import ChatResponse, ChatResult, ToolInvokeResponse


def utc_timestamp(now: Optional[datetime] = None) -> str:
    """ISO-8601 UTC with millisecond precision, e.g. 2024-08-01T12:00:00.000Z"""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_chat_response(result: ChatResult, timestamp: Optional[str] = None) -> ChatResponse:
    return ChatResponse(
        type=result.type,
        content=result.content,
        tool_used=result.tool_used,
        decision_reason=result.decision_reason,
        timestamp=timestamp or utc_timestamp(),
    )


def build_invoke_response(tool_name: str, result: Any, timestamp: Optional[str] = None) -> ToolInvokeResponse:
    return ToolInvokeResponse(tool=tool_name, result=result, timestamp=timestamp or utc_timestamp())
