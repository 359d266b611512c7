from dataclasses import dataclass
from typing import Any, Dict, Optional
import os
from openai import OpenAI
from dotenv import load_dotenv

ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
ENV_PATH = os.path.join(ROOT_DIR, ".env")

load_dotenv(ENV_PATH)



@dataclass
class LLMConfig:
    model: str = "gpt-4o-mini"
    max_completion_tokens: int = 32
    temperature: float | None = None  # Only used when model allows it
    seed: int | None = None
    timeout_s: float = 10.0


def llm_available() -> bool:
    return bool(os.getenv("OPENAI_API_KEY"))


def call_llm(
    system_prompt: str,
    user_prompt: str,
    cfg: LLMConfig,
    client: Optional[OpenAI] = None,
) -> str:

    if client is None:
        client = OpenAI(api_key=os.getenv("OPENAI_API_KEY"), timeout=cfg.timeout_s, max_retries=0)

    # Build request payload
    request: Dict[str, Any] = {
        "model": cfg.model,
        "messages": [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt}
        ],
        "max_completion_tokens": cfg.max_completion_tokens,
    }

    # Temperature allowed only for certain models
    if cfg.temperature is not None:
        request["temperature"] = cfg.temperature

    if cfg.seed is not None:
        request["seed"] = cfg.seed

    # Send request, no retry: callers treat failure as "no result"
    response = client.chat.completions.create(**request)

    if not response.choices:
        return ""

    return response.choices[0].message.content or ""
