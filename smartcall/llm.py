"""Model clients — send chat messages to Qwen and return the raw reply text.

Two transports share one calling contract, ``complete(messages, temperature)``:
the native DashScope generation endpoint (httpx) and DashScope's
OpenAI-compatible mode (openai SDK). Both raise ApiFailure on any upstream
problem; neither retries.
"""
import logging
import time
from typing import Any, Dict, List, Optional

import httpx
from openai import APIError, APIStatusError, AsyncOpenAI

from .config import Settings
from .errors import ApiFailure

logger = logging.getLogger(__name__)

Message = Dict[str, str]


def _error_detail(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


class QwenClient:
    """DashScope native text-generation API."""

    def __init__(self, config: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._config = config
        self._transport = transport

    def _payload(self, messages: List[Message], temperature: float) -> dict:
        return {
            "model": self._config.model,
            "input": {"messages": messages},
            "parameters": {
                "temperature": temperature,
                "top_p": self._config.top_p,
                "max_tokens": self._config.max_tokens,
            },
        }

    async def complete(self, messages: List[Message], temperature: float = 0.7) -> str:
        headers = {
            "Authorization": f"Bearer {self._config.qwen_api_key}",
            "Content-Type": "application/json",
        }
        t0 = time.monotonic()
        try:
            async with httpx.AsyncClient(timeout=self._config.llm_timeout, transport=self._transport) as client:
                resp = await client.post(
                    self._config.qwen_api_url,
                    json=self._payload(messages, temperature),
                    headers=headers,
                )
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPStatusError as e:
            detail = _error_detail(e.response)
            logger.error(f"Qwen API failed: HTTP {e.response.status_code} {detail}")
            raise ApiFailure(f"HTTP {e.response.status_code}", detail=detail,
                             status_code=e.response.status_code) from e
        except httpx.HTTPError as e:
            logger.error(f"Qwen API failed: {type(e).__name__}: {e}")
            raise ApiFailure(f"{type(e).__name__}: {e}") from e
        except ValueError as e:
            logger.error(f"Qwen API returned non-JSON body: {e}")
            raise ApiFailure("invalid JSON response") from e

        output = data.get("output") if isinstance(data, dict) else None
        text = output.get("text") if isinstance(output, dict) else None
        if not isinstance(text, str):
            logger.error(f"Qwen API response missing output.text: {str(data)[:200]}")
            raise ApiFailure("response missing output.text", detail=data)

        logger.info(f"Qwen reply: {len(text)} chars ({time.monotonic()-t0:.2f}s)")
        return text


class OpenAICompatClient:
    """DashScope OpenAI-compatible chat completions."""

    def __init__(self, config: Settings, client: Optional[AsyncOpenAI] = None):
        self._config = config
        self._client = client or AsyncOpenAI(
            api_key=config.qwen_api_key,
            base_url=config.qwen_base_url,
            timeout=config.llm_timeout,
            max_retries=0,
        )

    async def complete(self, messages: List[Message], temperature: float = 0.7) -> str:
        t0 = time.monotonic()
        try:
            response = await self._client.chat.completions.create(
                model=self._config.model,
                messages=messages,
                temperature=temperature,
                top_p=self._config.top_p,
                max_tokens=self._config.max_tokens,
            )
        except APIStatusError as e:
            logger.error(f"Qwen API failed: HTTP {e.status_code} {e.body}")
            raise ApiFailure(f"HTTP {e.status_code}", detail=e.body, status_code=e.status_code) from e
        except APIError as e:
            logger.error(f"Qwen API failed: {type(e).__name__}: {e}")
            raise ApiFailure(f"{type(e).__name__}: {e}") from e

        text = response.choices[0].message.content if response.choices else None
        if text is None:
            raise ApiFailure("response has no message content")

        logger.info(f"Qwen reply: {len(text)} chars ({time.monotonic()-t0:.2f}s)")
        return text


def create_model_client(config: Settings):
    if config.llm_provider == "dashscope":
        return QwenClient(config)
    if config.llm_provider == "openai":
        return OpenAICompatClient(config)
    raise ValueError(f"Unknown LLM provider: {config.llm_provider}")
