"""Tool executor — runs registered tools by name, one at a time or as a batch."""
import logging
import time
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from ..errors import ToolExecutionFault, ToolNotFound
from .registry import ToolDef, ToolRegistry

logger = logging.getLogger(__name__)


class BatchItemResult(BaseModel):
    toolName: Any = None
    success: bool
    result: Any = None
    error: Optional[str] = None


async def execute_tool(tool: ToolDef, parameters: Optional[Dict[str, Any]]) -> Any:
    """Execute a resolved tool. Raised exceptions are wrapped in ToolExecutionFault."""
    if parameters is None:
        parameters = {}
    if not isinstance(parameters, dict):
        raise ToolExecutionFault(tool.name, TypeError("parameters must be an object"))

    arg_str = ", ".join(f"{k}={v!r}" for k, v in parameters.items())
    logger.info(f"Executing tool: {tool.name}({arg_str})")
    t0 = time.monotonic()
    try:
        result = await tool.execute(parameters)
    except Exception as e:
        logger.error(f"Tool {tool.name} failed: {e}", exc_info=True)
        raise ToolExecutionFault(tool.name, e) from e

    elapsed = time.monotonic() - t0
    soft_error = isinstance(result, dict) and "error" in result
    logger.info(f"Tool {tool.name}: {elapsed:.1f}s -> {'error result' if soft_error else 'ok'}")
    return result


async def invoke_tool(registry: ToolRegistry, tool_name: str, parameters: Optional[Dict[str, Any]]) -> Any:
    """Direct invocation by name, bypassing the decision engine."""
    tool = registry.find(tool_name)
    if not tool:
        logger.warning(f"Unknown tool: {tool_name}")
        raise ToolNotFound(tool_name)
    return await execute_tool(tool, parameters)


async def execute_batch(registry: ToolRegistry, operations: List[Any]) -> List[BatchItemResult]:
    """Run operations in order. A failing item never stops the remaining ones."""
    results: List[BatchItemResult] = []
    for op in operations:
        if isinstance(op, dict):
            tool_name = op.get("toolName")
            parameters = op.get("parameters")
        else:
            tool_name, parameters = None, None

        tool = registry.find(tool_name)
        if not tool:
            results.append(BatchItemResult(toolName=tool_name, success=False, error="工具不存在"))
            continue

        try:
            result = await execute_tool(tool, parameters)
        except ToolExecutionFault as e:
            results.append(BatchItemResult(toolName=tool_name, success=False, error=str(e.cause)))
            continue
        results.append(BatchItemResult(toolName=tool_name, success=True, result=result))

    failed = sum(1 for r in results if not r.success)
    logger.info(f"Batch: {len(results)} operations, {failed} failed")
    return results
