import re
from typing import List

from arena_judge.utils.identity import is_model_name
from arena_judge.utils.node import Node
from arena_judge.utils.rules import DEFAULT_CONFIG, ExtractionConfig, safe_select

# Vote / regenerate controls share the prompt bubble styling
CONTROL_TEXT_RE = re.compile(r"^(Winner:|1\.\s*Winner|Vote|Regenerate)", re.IGNORECASE)

MIN_PROMPT_CHARS = 3


def is_prompt_text(text: str, config: ExtractionConfig = DEFAULT_CONFIG) -> bool:
    if len(text) < MIN_PROMPT_CHARS:
        return False
    if CONTROL_TEXT_RE.match(text):
        return False
    # a bubble holding only a model name is a label, not a prompt
    if len(text.split()) <= 2 and is_model_name(text, config.model_prefixes):
        return False
    return True


# User prompts, oldest first
def extract_prompts(root: Node, config: ExtractionConfig = DEFAULT_CONFIG) -> List[str]:
    seen = set()
    prompts = []

    for bubble in safe_select(root, config.rules.user_bubble):
        text = bubble.text.strip()
        # exact duplicates collapse, even when a user repeats a prompt on purpose
        if text in seen or not is_prompt_text(text, config):
            continue
        seen.add(text)
        prompts.append(text)

    prompts.reverse()
    return prompts
