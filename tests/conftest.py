"""Shared fixtures: a scripted model client and a small tool registry."""
import json
from typing import List

import pytest

from smartcall.tools.registry import ToolDef, ToolParam, ToolRegistry


class FakeModelClient:
    """Returns scripted replies in order and records every call."""

    def __init__(self, replies: List):
        self.replies = list(replies)
        self.calls = []

    async def complete(self, messages, temperature=0.7):
        self.calls.append(messages)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


def decision_json(need_tool, tool_name=None, reason="测试", parameters=None) -> str:
    return json.dumps({
        "need_tool": need_tool,
        "tool_name": tool_name,
        "reason": reason,
        "parameters": parameters or {},
    }, ensure_ascii=False)


@pytest.fixture
def calls():
    return []


@pytest.fixture
def registry(calls):
    reg = ToolRegistry()

    async def fake_weather(city: str = "", **kwargs):
        calls.append(("get_weather", {"city": city, **kwargs}))
        return {"location": city, "temperature": "20°C"}

    async def soft_error(**kwargs):
        calls.append(("soft_error", kwargs))
        return {"error": "服务不可用"}

    async def explode(**kwargs):
        calls.append(("explode", kwargs))
        raise RuntimeError("boom")

    reg.register(ToolDef("get_weather", "获取天气", fake_weather, [ToolParam("city", description="城市")]))
    reg.register(ToolDef("soft_error", "返回软错误", soft_error))
    reg.register(ToolDef("explode", "总是抛出异常", explode))
    reg.freeze()
    return reg
