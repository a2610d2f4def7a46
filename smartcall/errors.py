"""Error taxonomy for the tool-dispatch loop."""
from typing import Any, Optional


class SmartCallError(Exception):
    """Base class for all service errors."""


class DecisionParseFailure(SmartCallError):
    """Model reply is not a well-formed decision. Recovered inside the planner."""


class ToolNotFound(SmartCallError):
    def __init__(self, tool_name: Optional[str]):
        self.tool_name = tool_name
        super().__init__(f"工具 {tool_name} 不存在")


class ToolExecutionFault(SmartCallError):
    """A tool raised instead of returning a result."""

    def __init__(self, tool_name: str, cause: BaseException):
        self.tool_name = tool_name
        self.cause = cause
        super().__init__(f"工具 {tool_name} 执行失败: {cause}")


class ApiFailure(SmartCallError):
    """Transport error or non-success reply from the text-generation service."""

    def __init__(self, message: str, detail: Any = None, status_code: Optional[int] = None):
        self.detail = detail
        self.status_code = status_code
        text = f"API调用失败: {message}"
        if detail:
            text = f"{text} ({detail})"
        super().__init__(text)


class ValidationFailure(SmartCallError):
    """Malformed request body at the HTTP boundary."""


class DuplicateToolError(SmartCallError):
    def __init__(self, tool_name: str):
        self.tool_name = tool_name
        super().__init__(f"Tool already registered: {tool_name}")


class RegistryFrozenError(SmartCallError):
    """Registration attempted after startup."""
