import re
from functools import lru_cache
from typing import List, Optional, Sequence

from arena_judge.utils.node import Node
from arena_judge.utils.rules import DEFAULT_MODEL_PREFIXES

UNKNOWN_NAME = "Unknown"

# How many leading non-blank lines may carry the column header
HEADER_LINES = 5

THOUGHT_RE = re.compile(r"^thought for\b", re.IGNORECASE)

# "Assistant A", "Model B:", "Response A" ...
ROLE_LABEL_RE = re.compile(r"^(?:assistant|model|response|bot)\s+([ab])\s*:?$", re.IGNORECASE)

# Letter first, then word chars / hyphens / dots, 3-59 chars, no whitespace
IDENTIFIER_RE = re.compile(r"^[A-Za-z][\w.\-]{2,58}$")


@lru_cache(maxsize=32)
def model_name_regex(prefixes: Sequence[str]) -> "re.Pattern[str]":
    alternatives = "|".join(re.escape(p) for p in prefixes)
    return re.compile(rf"^((?:{alternatives})[\w\-.]*(?:-thinking)?(?:-\d+k)?)", re.IGNORECASE)


def is_thought_prefix(text: Optional[str]) -> bool:
    return bool(THOUGHT_RE.match((text or "").strip()))


def role_label(line: str) -> Optional[str]:
    m = ROLE_LABEL_RE.match(line.strip())
    if not m:
        return None
    return f"Model {m.group(1).upper()}"


def is_model_name(text: Optional[str], prefixes: Sequence[str] = DEFAULT_MODEL_PREFIXES) -> bool:
    # First word must start with a known prefix and the first line must look like a model id
    stripped = (text or "").strip()
    if not stripped:
        return False
    first_word = stripped.split()[0].lower()
    first_line = stripped.split("\n")[0]
    if not any(first_word.startswith(p) for p in prefixes):
        return False
    return bool(model_name_regex(tuple(prefixes)).match(first_line))


def is_name_label(text: Optional[str], prefixes: Sequence[str] = DEFAULT_MODEL_PREFIXES) -> bool:
    stripped = (text or "").strip()
    return is_model_name(stripped, prefixes) or role_label(stripped.split("\n")[0]) is not None


def looks_like_response_head(text: Optional[str], prefixes: Sequence[str] = DEFAULT_MODEL_PREFIXES) -> bool:
    return is_name_label(text, prefixes) or is_thought_prefix(text)


def header_lines(text: str, limit: int = HEADER_LINES) -> List[str]:
    lines = [l.strip() for l in text.split("\n") if l.strip()]
    return [l for l in lines[:limit] if not is_thought_prefix(l)]


def resolve_name_from_text(text: Optional[str], prefixes: Sequence[str] = DEFAULT_MODEL_PREFIXES) -> str:
    """
    Pick the responder's display name out of the leading lines of a column.

    Order of preference across the scanned lines:
      1. an anonymous role label ("Assistant A") -> "Model A"
      2. a known model id ("claude-3-opus-thinking")
      3. any bare identifier-looking line
    Falls back to "Unknown".
    """
    lines = header_lines(text or "")

    for line in lines:
        label = role_label(line)
        if label:
            return label

    regex = model_name_regex(tuple(prefixes))
    for line in lines:
        m = regex.match(line)
        if m and is_model_name(line, prefixes):
            return m.group(1)

    for line in lines:
        if IDENTIFIER_RE.match(line):
            return line

    return UNKNOWN_NAME


def resolve_name(column: Optional[Node], prefixes: Sequence[str] = DEFAULT_MODEL_PREFIXES) -> str:
    if column is None:
        return UNKNOWN_NAME
    return resolve_name_from_text(column.text, prefixes)
