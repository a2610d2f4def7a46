"""Dispatcher — decide → (execute tool → synthesize) | answer directly.

Every request runs decision, tool execution and the final model call strictly
in sequence. ``handle`` never raises: any failure becomes an error result.
"""
import json
import logging
import time
from typing import Optional

from .errors import ToolNotFound
from .planner import Decision, IntentPlanner
from .protocol import ChatResult, ToolUsage
from .tools.executor import execute_tool
from .tools.registry import ToolRegistry

logger = logging.getLogger(__name__)

SYNTHESIS_SYSTEM_PROMPT = "你是一个有帮助的AI助手，能够根据工具返回的数据生成友好的回答。"
DIRECT_SYSTEM_PROMPT = "你是一个有帮助的AI助手，请直接回答用户的问题。"
ERROR_REASON = "处理过程中发生错误"

SYNTHESIS_PROMPT = """用户原始问题: "{user_message}"

工具调用结果: {tool_result}

请根据工具返回的数据，生成友好、自然的回答给用户。"""


def build_synthesis_prompt(user_message: str, tool_result) -> str:
    return SYNTHESIS_PROMPT.format(
        user_message=user_message,
        tool_result=json.dumps(tool_result, ensure_ascii=False, indent=2, default=str),
    )


def error_result(error: Exception) -> ChatResult:
    return ChatResult(
        type="error",
        content=f"抱歉，处理您的请求时出现了问题：{error}",
        tool_used=None,
        decision_reason=ERROR_REASON,
    )


class Dispatcher:
    def __init__(self, client, registry: ToolRegistry, planner: Optional[IntentPlanner] = None,
                 temperature: float = 0.7):
        self.client = client
        self.registry = registry
        self.planner = planner or IntentPlanner(client, registry, temperature=temperature)
        self._temperature = temperature

    async def handle(self, user_message: str) -> ChatResult:
        logger.info(f"User message: {user_message[:200]}")
        t0 = time.monotonic()
        try:
            decision = await self.planner.decide(user_message)
            if decision.need_tool and decision.tool_name:
                result = await self._run_tool(user_message, decision)
            else:
                result = await self._answer_directly(user_message, decision)
        except Exception as e:
            logger.error(f"Dispatch failed: {e}", exc_info=True)
            return error_result(e)

        logger.info(f"Dispatch: {result.type} ({time.monotonic()-t0:.2f}s)")
        return result

    async def _run_tool(self, user_message: str, decision: Decision) -> ChatResult:
        tool = self.registry.find(decision.tool_name)
        if not tool:
            logger.warning(f"Decision named unknown tool: {decision.tool_name}")
            raise ToolNotFound(decision.tool_name)

        tool_result = await execute_tool(tool, decision.parameters)

        reply = await self.client.complete(
            [
                {"role": "system", "content": SYNTHESIS_SYSTEM_PROMPT},
                {"role": "user", "content": build_synthesis_prompt(user_message, tool_result)},
            ],
            temperature=self._temperature,
        )
        return ChatResult(
            type="tool_response",
            content=reply,
            tool_used=ToolUsage(name=tool.name, parameters=decision.parameters, result=tool_result),
            decision_reason=decision.reason,
        )

    async def _answer_directly(self, user_message: str, decision: Decision) -> ChatResult:
        reply = await self.client.complete(
            [
                {"role": "system", "content": DIRECT_SYSTEM_PROMPT},
                {"role": "user", "content": user_message},
            ],
            temperature=self._temperature,
        )
        return ChatResult(
            type="direct_response",
            content=reply,
            tool_used=None,
            decision_reason=decision.reason,
        )
