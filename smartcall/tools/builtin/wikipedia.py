"""Wikipedia tool — page summary from the REST API."""
import logging
from urllib.parse import quote

import httpx

from ..registry import register_tool, ToolParam

logger = logging.getLogger(__name__)

_SUMMARY_URL = "https://en.wikipedia.org/api/rest_v1/page/summary/{title}"
_PAGE_URL = "https://en.wikipedia.org/wiki/{title}"
_TIMEOUT = 10


@register_tool(
    "search_wikipedia",
    description="搜索维基百科上某个主题的简要介绍",
    params=[
        ToolParam("query", description="要搜索的主题，例如 Albert Einstein, Python programming"),
    ],
)
async def search_wikipedia(query: str = "", **kwargs) -> dict:
    if query is None or query == "":
        return {"error": "未找到相关词条，请尝试更准确的关键词。"}
    query = str(query)

    try:
        async with httpx.AsyncClient(timeout=_TIMEOUT, follow_redirects=True) as client:
            resp = await client.get(_SUMMARY_URL.format(title=quote(query, safe="")))
            resp.raise_for_status()
            data = resp.json()
    except Exception as e:
        logger.error(f"Wikipedia API error ({query}): {e}")
        return {"error": "未找到相关词条，请尝试更准确的关键词。"}

    if not isinstance(data, dict):
        logger.error(f"Wikipedia API returned unexpected payload for {query}: {str(data)[:200]}")
        return {"error": "未找到相关词条，请尝试更准确的关键词。"}

    content_urls = data.get("content_urls")
    desktop = content_urls.get("desktop") if isinstance(content_urls, dict) else None
    page_url = desktop.get("page") if isinstance(desktop, dict) else None
    page_url = page_url or _PAGE_URL.format(title=quote(query.replace(" ", "_")))
    return {
        "title": data.get("title") or query,
        "extract": data.get("extract") or "",
        "url": page_url,
    }
