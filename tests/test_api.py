"""Tests for the FastAPI app — chat, invoke, batch, metadata endpoints."""
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from smartcall.config import Settings
from smartcall.main import create_app
from conftest import FakeModelClient, decision_json


@pytest.fixture
def model():
    return FakeModelClient([])


@pytest_asyncio.fixture
async def client(registry, model):
    app = create_app(Settings(qwen_api_key="sk-test", model="qwen-max"), registry=registry, client=model)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


# ---------------------------------------------------------------------------
# Metadata
# ---------------------------------------------------------------------------


class TestMetadata:
    @pytest.mark.asyncio
    async def test_health(self, client):
        resp = await client.get("/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "ok"
        assert data["tools_available"] == 3
        assert data["model"] == "qwen-max"
        assert data["timestamp"].endswith("Z")
        assert data["endpoints"]["smart_chat"] == "/mcp/chat"

    @pytest.mark.asyncio
    async def test_root(self, client):
        resp = await client.get("/")
        assert resp.status_code == 200
        assert resp.json()["endpoints"]["smart_chat"] == "POST /mcp/chat"

    @pytest.mark.asyncio
    async def test_server_metadata(self, client):
        resp = await client.get("/mcp/server")
        data = resp.json()
        assert data["version"] == "2024-08-01"
        assert data["capabilities"] == {"tools": True, "reasoning": True, "smart_calling": True}

    @pytest.mark.asyncio
    async def test_tools_list(self, client):
        resp = await client.get("/mcp/tools")
        data = resp.json()
        assert data["count"] == 3
        assert [t["name"] for t in data["tools"]] == ["get_weather", "soft_error", "explode"]
        assert data["tools"][0]["inputSchema"] == {
            "type": "object",
            "properties": {"city": {"type": "string", "description": "城市"}},
            "required": ["city"],
        }

    @pytest.mark.asyncio
    async def test_cors_header(self, client):
        resp = await client.get("/health", headers={"Origin": "http://example.com"})
        assert resp.headers.get("access-control-allow-origin") == "*"


# ---------------------------------------------------------------------------
# Chat
# ---------------------------------------------------------------------------


class TestChat:
    @pytest.mark.asyncio
    async def test_tool_response(self, client, model):
        model.replies = [
            decision_json(True, "get_weather", "用户询问天气", {"city": "北京"}),
            "北京现在20°C。",
        ]
        resp = await client.post("/mcp/chat", json={"message": "北京天气怎么样？"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["success"] is True
        assert data["type"] == "tool_response"
        assert data["content"] == "北京现在20°C。"
        assert data["tool_used"] == {
            "name": "get_weather",
            "parameters": {"city": "北京"},
            "result": {"location": "北京", "temperature": "20°C"},
        }
        assert data["decision_reason"] == "用户询问天气"
        assert data["timestamp"].endswith("Z")

    @pytest.mark.asyncio
    async def test_direct_response(self, client, model):
        model.replies = [decision_json(False, None, "日常问候"), "你好！"]
        resp = await client.post("/mcp/chat", json={"message": "你好，请介绍一下自己"})
        data = resp.json()
        assert data["type"] == "direct_response"
        assert data["tool_used"] is None

    @pytest.mark.asyncio
    async def test_error_envelope_still_200(self, client, model):
        model.replies = [decision_json(True, "nope")]
        resp = await client.post("/mcp/chat", json={"message": "用一个不存在的工具"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["success"] is True
        assert data["type"] == "error"
        assert data["tool_used"] is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [{}, {"message": ""}, {"message": 42}, {"message": None}])
    async def test_invalid_message(self, client, model, body):
        resp = await client.post("/mcp/chat", json=body)
        assert resp.status_code == 400
        assert resp.json() == {"error": "消息内容不能为空"}
        assert model.calls == []

    @pytest.mark.asyncio
    async def test_non_object_body(self, client):
        resp = await client.post("/mcp/chat", json=["你好"])
        assert resp.status_code == 400
        assert "error" in resp.json()

    @pytest.mark.asyncio
    async def test_invalid_json(self, client):
        resp = await client.post("/mcp/chat", content=b"{not json",
                                 headers={"Content-Type": "application/json"})
        assert resp.status_code == 400


# ---------------------------------------------------------------------------
# Direct invoke
# ---------------------------------------------------------------------------


class TestInvoke:
    @pytest.mark.asyncio
    async def test_invoke(self, client, calls):
        resp = await client.post("/mcp/tools/get_weather/invoke", json={"city": "上海"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["success"] is True
        assert data["tool"] == "get_weather"
        assert data["result"] == {"location": "上海", "temperature": "20°C"}
        assert "timestamp" in data
        assert calls == [("get_weather", {"city": "上海"})]

    @pytest.mark.asyncio
    async def test_unknown_tool_no_model_calls(self, client, model):
        resp = await client.post("/mcp/tools/nope/invoke", json={})
        assert resp.status_code == 404
        assert resp.json() == {"error": "工具不存在"}
        assert model.calls == []

    @pytest.mark.asyncio
    async def test_tool_fault(self, client):
        resp = await client.post("/mcp/tools/explode/invoke", json={})
        assert resp.status_code == 500
        assert resp.json() == {"success": False, "error": "boom", "tool": "explode"}

    @pytest.mark.asyncio
    async def test_empty_body(self, client, calls):
        resp = await client.post("/mcp/tools/soft_error/invoke")
        assert resp.status_code == 200
        assert resp.json()["result"] == {"error": "服务不可用"}


# ---------------------------------------------------------------------------
# Batch
# ---------------------------------------------------------------------------


class TestBatch:
    @pytest.mark.asyncio
    async def test_batch(self, client):
        resp = await client.post("/mcp/tools/batch", json={"operations": [
            {"toolName": "get_weather", "parameters": {"city": "北京"}},
            {"toolName": "missing", "parameters": {}},
            {"toolName": "explode", "parameters": {}},
        ]})
        assert resp.status_code == 200
        results = resp.json()["results"]
        assert len(results) == 3
        assert results[0] == {
            "toolName": "get_weather",
            "success": True,
            "result": {"location": "北京", "temperature": "20°C"},
        }
        assert results[1] == {"toolName": "missing", "success": False, "error": "工具不存在"}
        assert results[2] == {"toolName": "explode", "success": False, "error": "boom"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [{}, {"operations": "get_weather"}, {"operations": {"a": 1}}])
    async def test_operations_must_be_list(self, client, body):
        resp = await client.post("/mcp/tools/batch", json=body)
        assert resp.status_code == 400
        assert resp.json() == {"error": "operations 必须为数组"}
