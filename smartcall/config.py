from pydantic import BaseModel
import os
import logging
from pathlib import Path
from typing import List

logger = logging.getLogger(__name__)

# Load .env file if it exists (before reading os.getenv)
_env_path = Path(__file__).resolve().parent.parent / ".env"
if _env_path.exists():
    with open(_env_path, encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith("#") and "=" in line:
                key, _, value = line.partition("=")
                key = key.strip()
                value = value.strip()
                # Only set if not already in environment (env vars take precedence)
                if key not in os.environ:
                    os.environ[key] = value


def _sanitize_ascii(val: str) -> str:
    """Strip non-ASCII characters from config values (prevents encoding errors)"""
    return val.encode('ascii', errors='ignore').decode('ascii').strip()


def _split_csv(val: str) -> List[str]:
    return [item.strip() for item in val.split(",") if item.strip()]


class Settings(BaseModel):
    model_config = {"frozen": True}

    # Network
    host: str = os.getenv("SMARTCALL_HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "8006"))
    cors_origins: List[str] = _split_csv(os.getenv("CORS_ORIGINS", "*"))

    # Model provider: "dashscope" (native generation API) or "openai" (compatible mode)
    llm_provider: str = _sanitize_ascii(os.getenv("LLM_PROVIDER", "dashscope"))

    # Qwen / DashScope
    qwen_api_key: str = _sanitize_ascii(os.getenv("QWEN_API_KEY", ""))
    qwen_api_url: str = _sanitize_ascii(os.getenv(
        "QWEN_API_URL",
        "https://dashscope.aliyuncs.com/api/v1/services/aigc/text-generation/generation",
    ))
    qwen_base_url: str = _sanitize_ascii(os.getenv(
        "QWEN_BASE_URL", "https://dashscope.aliyuncs.com/compatible-mode/v1"
    ))
    model: str = _sanitize_ascii(os.getenv("QWEN_MODEL", "qwen-max"))

    # Sampling
    temperature: float = float(os.getenv("LLM_TEMPERATURE", "0.7"))
    top_p: float = float(os.getenv("LLM_TOP_P", "0.8"))
    max_tokens: int = int(os.getenv("LLM_MAX_TOKENS", "2000"))
    llm_timeout: float = float(os.getenv("LLM_TIMEOUT", "30"))

    def masked_api_key(self) -> str:
        return '***' + self.qwen_api_key[-4:] if len(self.qwen_api_key) > 4 else 'EMPTY'


settings = Settings()

if not settings.qwen_api_key:
    logger.warning("QWEN_API_KEY is not set; model calls will be rejected upstream")

# Log config for debugging
logger.info(f"Config: LLM → {settings.llm_provider}, model={settings.model} (key={settings.masked_api_key()})")
