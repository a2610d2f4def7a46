"""Tool system — registry, describer, executor."""
from .registry import (
    ToolDef,
    ToolParam,
    ToolRegistry,
    default_registry,
    register_tool,
    tool_descriptions_for_llm,
)
from .executor import BatchItemResult, execute_batch, execute_tool, invoke_tool

# Auto-import builtin tools to trigger @register_tool decorators
from .builtin import *  # noqa
