import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api import router as mcp_router
from .config import Settings, settings
from .dispatcher import Dispatcher
from .envelope import utc_timestamp
from .llm import create_model_client
from .tools import ToolRegistry, default_registry

logger = logging.getLogger(__name__)

ENDPOINTS = {
    "metadata": "/mcp/server",
    "tools_list": "/mcp/tools",
    "tool_invoke": "/mcp/tools/:name/invoke",
    "smart_chat": "/mcp/chat",
    "batch_tools": "/mcp/tools/batch",
}


def create_app(
    config: Settings = settings,
    registry: Optional[ToolRegistry] = None,
    client=None,
) -> FastAPI:
    """Wire config, model client, registry and dispatcher into a FastAPI app."""
    registry = registry if registry is not None else default_registry
    registry.freeze()
    client = client or create_model_client(config)

    app = FastAPI(title="SmartCall MCP Server", version="1.0.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.config = config
    app.state.dispatcher = Dispatcher(client, registry, temperature=config.temperature)
    app.include_router(mcp_router)

    @app.get("/health")
    async def health():
        return {
            "status": "ok",
            "timestamp": utc_timestamp(),
            "tools_available": len(registry),
            "model": config.model,
            "endpoints": ENDPOINTS,
        }

    @app.get("/")
    async def root():
        return {
            "service": "SmartCall MCP Server",
            "version": "1.0.0",
            "description": "纯净版 MCP 服务器，提供智能工具调用 API",
            "endpoints": {
                "health_check": "/health",
                "server_metadata": "/mcp/server",
                "tools_list": "/mcp/tools",
                "tool_execution": "POST /mcp/tools/{toolName}/invoke",
                "smart_chat": "POST /mcp/chat",
                "batch_operations": "POST /mcp/tools/batch",
            },
            "documentation": "此服务为纯 API 服务，请通过上述端点进行调用",
        }

    logger.info(f"App ready: {len(registry)} tools, model={config.model}, provider={config.llm_provider}")
    return app


app = create_app()
