"""Weather tool — current conditions from wttr.in (no API key needed)."""
import logging
from urllib.parse import quote

import httpx

from ..registry import register_tool, ToolParam

logger = logging.getLogger(__name__)

_WTTR_URL = "https://wttr.in/{city}"
_TIMEOUT = 10


@register_tool(
    "get_weather",
    description="获取指定城市的当前天气信息（温度、湿度、描述）",
    params=[
        ToolParam("city", description="城市名称，例如 Beijing, Shanghai"),
    ],
)
async def get_weather(city: str = "", **kwargs) -> dict:
    if not city:
        return {"error": "无法获取天气数据，请检查城市名称是否正确。"}

    try:
        async with httpx.AsyncClient(timeout=_TIMEOUT) as client:
            resp = await client.get(_WTTR_URL.format(city=quote(city)), params={"format": "j1"})
            resp.raise_for_status()
            data = resp.json()
        current = data["current_condition"][0]
        return {
            "location": city,
            "temperature": f"{current['temp_C']}°C",
            "feelslike": f"{current['FeelsLikeC']}°C",
            "humidity": f"{current['humidity']}%",
            "weather_desc": current["weatherDesc"][0]["value"],
            "visibility": f"{current['visibility']} km",
        }
    except Exception as e:
        logger.error(f"Weather API error ({city}): {e}")
        return {"error": "无法获取天气数据，请检查城市名称是否正确。"}
