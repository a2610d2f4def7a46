"""MCP REST routes: tool listing, direct invoke, batch, smart chat."""
import logging
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from .dispatcher import Dispatcher
from .envelope import build_chat_response, build_invoke_response
from .errors import ToolExecutionFault, ToolNotFound, ValidationFailure
from .protocol import ToolInfo
from .tools.executor import execute_batch, invoke_tool

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/mcp")

SERVER_METADATA = {
    "version": "2024-08-01",
    "capabilities": {
        "tools": True,
        "reasoning": True,
        "smart_calling": True,
    },
    "vendor": {
        "name": "SmartCall MCP Server",
        "version": "1.0.0",
    },
}


def _dispatcher(request: Request) -> Dispatcher:
    return request.app.state.dispatcher


async def _json_object(request: Request) -> dict:
    """Read the body as a JSON object; an empty body counts as {}."""
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        payload: Any = await request.json()
    except ValueError as e:
        raise ValidationFailure("请求体必须为JSON对象") from e
    if not isinstance(payload, dict):
        raise ValidationFailure("请求体必须为JSON对象")
    return payload


def _bad_request(e: ValidationFailure) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": str(e)})


@router.get("/server")
async def server_metadata():
    return SERVER_METADATA


@router.get("/tools")
async def list_tools(request: Request):
    registry = _dispatcher(request).registry
    tools = [
        ToolInfo(name=t.name, description=t.description, inputSchema=t.input_schema).model_dump()
        for t in registry.list()
    ]
    return {"tools": tools, "count": len(tools)}


@router.post("/tools/batch")
async def batch_tools(request: Request):
    try:
        payload = await _json_object(request)
        operations = payload.get("operations")
        if not isinstance(operations, list):
            raise ValidationFailure("operations 必须为数组")
    except ValidationFailure as e:
        return _bad_request(e)

    results = await execute_batch(_dispatcher(request).registry, operations)
    return {"results": [r.model_dump(exclude_none=True) for r in results]}


@router.post("/tools/{tool_name}/invoke")
async def invoke(tool_name: str, request: Request):
    try:
        parameters = await _json_object(request)
    except ValidationFailure as e:
        return _bad_request(e)

    logger.info(f"Direct invoke: {tool_name} {parameters}")
    try:
        result = await invoke_tool(_dispatcher(request).registry, tool_name, parameters)
    except ToolNotFound:
        return JSONResponse(status_code=404, content={"error": "工具不存在"})
    except ToolExecutionFault as e:
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": str(e.cause), "tool": tool_name},
        )
    return build_invoke_response(tool_name, result).model_dump()


@router.post("/chat")
async def chat(request: Request):
    try:
        payload = await _json_object(request)
        message = payload.get("message")
        if not message or not isinstance(message, str):
            raise ValidationFailure("消息内容不能为空")
    except ValidationFailure as e:
        return _bad_request(e)

    result = await _dispatcher(request).handle(message)
    return build_chat_response(result).model_dump()
