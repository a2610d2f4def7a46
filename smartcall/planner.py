"""Intent planner — asks the model whether a tool is needed and which one.

The model's reply is untrusted text. It is parsed strictly into a Decision;
anything else degrades to a "no tool" decision so the request never fails here.
"""
import logging
import time
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, ValidationError

from .errors import ApiFailure, DecisionParseFailure
from .tools.registry import ToolRegistry, tool_descriptions_for_llm

logger = logging.getLogger(__name__)

FALLBACK_REASON = "决策解析失败，使用大模型直接回答"

DECISION_PROMPT = """你是一个智能助手，需要根据用户问题决定是否调用工具。

可用工具列表：
{tool_list}

用户问题："{user_message}"

请分析用户意图，严格按照以下JSON格式响应：
{{
  "need_tool": true/false,
  "tool_name": "工具名称或null",
  "reason": "决策理由",
  "parameters": {{"参数名": "参数值"}} 或 {{}}
}}

决策规则：
1. 如果用户询问天气相关，使用get_weather工具，参数city从问题中提取
2. 如果用户询问百科知识、搜索信息，使用search_wikipedia工具，参数query从问题中提取
3. 如果用户需要数学计算，使用calculate_math工具，参数expression从问题中提取
4. 如果问题与以上工具无关，need_tool设为false

示例：
- "北京天气怎么样？" → {{"need_tool": true, "tool_name": "get_weather", "reason": "用户询问天气", "parameters": {{"city": "北京"}}}}
- "(5+3)*2等于多少" → {{"need_tool": true, "tool_name": "calculate_math", "reason": "用户需要数学计算", "parameters": {{"expression": "(5+3)*2"}}}}
- "你好，请介绍一下自己" → {{"need_tool": false, "tool_name": null, "reason": "日常问候，无需工具", "parameters": {{}}}}

请严格按照JSON格式响应，不要添加其他内容。"""


class Decision(BaseModel):
    model_config = ConfigDict(strict=True, extra="ignore")

    need_tool: bool
    tool_name: Optional[str]
    reason: str
    parameters: Dict[str, Any]

    @classmethod
    def fallback(cls, reason: str = FALLBACK_REASON) -> "Decision":
        return cls(need_tool=False, tool_name=None, reason=reason, parameters={})


def build_decision_prompt(registry: ToolRegistry, user_message: str) -> str:
    return DECISION_PROMPT.format(
        tool_list=tool_descriptions_for_llm(registry),
        user_message=user_message,
    )


def parse_decision(raw: str) -> Decision:
    """Parse a model reply into a Decision, or raise DecisionParseFailure."""
    try:
        return Decision.model_validate_json(raw.strip())
    except ValidationError as e:
        raise DecisionParseFailure(f"invalid decision: {e.error_count()} error(s)") from e


class IntentPlanner:
    def __init__(self, client, registry: ToolRegistry, temperature: float = 0.7):
        self._client = client
        self._registry = registry
        self._temperature = temperature

    async def decide(self, user_message: str) -> Decision:
        prompt = build_decision_prompt(self._registry, user_message)
        t0 = time.monotonic()
        try:
            raw = await self._client.complete(
                [{"role": "user", "content": prompt}],
                temperature=self._temperature,
            )
        except ApiFailure as e:
            logger.warning(f"Decision call failed, answering directly: {e}")
            return Decision.fallback()

        logger.info(f"Decision raw: {raw[:200]}")
        try:
            decision = parse_decision(raw)
        except DecisionParseFailure as e:
            logger.warning(f"Decision parse failed, treating as direct answer: {e}")
            return Decision.fallback()

        logger.info(
            f"Decision: need_tool={decision.need_tool} tool={decision.tool_name} "
            f"({time.monotonic()-t0:.2f}s)"
        )
        return decision
