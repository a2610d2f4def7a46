"""Tool registry — decorator-based tool registration, lookup and LLM descriptions."""
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional

from ..errors import DuplicateToolError, RegistryFrozenError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolParam:
    name: str
    type: str = "string"
    description: str = ""
    required: bool = True


@dataclass(frozen=True)
class ToolDef:
    name: str
    description: str
    handler: Callable[..., Awaitable[Any]]
    params: List[ToolParam] = field(default_factory=list)

    @property
    def input_schema(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                p.name: {"type": p.type, "description": p.description} for p in self.params
            },
            "required": [p.name for p in self.params if p.required],
        }

    async def execute(self, parameters: Dict[str, Any]) -> Any:
        """Run the handler. Soft failures come back as {"error": ...}; faults raise."""
        return await self.handler(**parameters)


class ToolRegistry:
    """Ordered, name-keyed tool collection. Read-only once frozen."""

    def __init__(self):
        self._tools: Dict[str, ToolDef] = {}
        self._frozen = False

    def register(self, tool: ToolDef) -> ToolDef:
        if self._frozen:
            raise RegistryFrozenError(f"Registry is frozen, cannot register {tool.name}")
        if tool.name in self._tools:
            raise DuplicateToolError(tool.name)
        self._tools[tool.name] = tool
        logger.info(f"Registered tool: {tool.name}")
        return tool

    def freeze(self):
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def find(self, name: Optional[str]) -> Optional[ToolDef]:
        if not isinstance(name, str):
            return None
        return self._tools.get(name)

    def list(self) -> List[ToolDef]:
        return list(self._tools.values())

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name) -> bool:
        return name in self._tools

    def describe(self) -> List[Dict[str, Any]]:
        """Project every tool into the shape the decision prompt embeds."""
        described = []
        for tool in self._tools.values():
            schema = tool.input_schema
            described.append({
                "name": tool.name,
                "description": tool.description,
                "parameters": schema["properties"],
                "required": schema["required"],
            })
        return described


default_registry = ToolRegistry()


def register_tool(
    name: str,
    description: str = "",
    params: Optional[List[ToolParam]] = None,
    registry: Optional[ToolRegistry] = None,
):
    """Decorator to register a tool function."""
    def decorator(func):
        tool = ToolDef(
            name=name,
            description=description or (func.__doc__ or "").strip(),
            handler=func,
            params=list(params or []),
        )
        (registry or default_registry).register(tool)
        return func
    return decorator


def tool_descriptions_for_llm(registry: ToolRegistry) -> str:
    """Serialize the capability description for the decision prompt."""
    return json.dumps(registry.describe(), ensure_ascii=False, indent=2)
