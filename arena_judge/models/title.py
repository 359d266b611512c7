import logging
import re
from typing import Optional

from openai import OpenAI, OpenAIError

from arena_judge.models.llm_client import LLMConfig, call_llm, llm_available

logger = logging.getLogger(__name__)


# Prompt for the title model
TITLE_PROMPT = """Write a short title (at most 8 words) for a conversation that starts with the user message below.

Return ONLY the title, no quotes, no punctuation at the end.
"""

MAX_INPUT_CHARS = 1000
MAX_TITLE_CHARS = 80


def _tidy_title(raw: str) -> str:
    title = raw.strip().split("\n")[0]
    title = re.sub(r"^(title\s*:\s*)", "", title, flags=re.IGNORECASE)
    title = title.strip(" \"'`*#").rstrip(".")
    return title[:MAX_TITLE_CHARS].strip()


# Optional title for the judge prompt; None whenever anything goes wrong
def generate_title(
    prompt_text: str,
    cfg: Optional[LLMConfig] = None,
    client: Optional[OpenAI] = None,
) -> Optional[str]:

    if not (prompt_text or "").strip():
        return None

    if client is None and not llm_available():
        logger.debug("No OPENAI_API_KEY set, skipping title")
        return None

    cfg = cfg or LLMConfig()
    user_prompt = f"{TITLE_PROMPT}\n[User Message]\n{prompt_text[:MAX_INPUT_CHARS]}"

    try:
        raw = call_llm(
            system_prompt="You write concise conversation titles.",
            user_prompt=user_prompt,
            cfg=cfg,
            client=client,
        )
    except (OpenAIError, LookupError, AttributeError) as e:
        # service errors and malformed replies both mean "no title"
        logger.debug("Title generation failed: %s", e)
        return None

    title = _tidy_title(raw)
    return title or None
