from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, model_validator

ResultType = Literal["direct_response", "tool_response", "error"]


class ToolUsage(BaseModel):
    name: str
    parameters: Dict[str, Any]
    result: Any = None


class ChatResult(BaseModel):
    type: ResultType
    content: str
    tool_used: Optional[ToolUsage] = None
    decision_reason: str = ""

    @model_validator(mode="after")
    def _tool_used_matches_type(self):
        if (self.type == "tool_response") != (self.tool_used is not None):
            raise ValueError("tool_used must be set exactly when type is tool_response")
        return self


class ChatResponse(BaseModel):
    success: bool = True
    type: ResultType
    content: str
    tool_used: Optional[ToolUsage] = None
    decision_reason: str
    timestamp: str


class ToolInvokeResponse(BaseModel):
    success: bool = True
    tool: str
    result: Any = None
    timestamp: str


class ToolInfo(BaseModel):
    name: str
    description: str
    inputSchema: Dict[str, Any]
