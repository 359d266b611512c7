import re
from typing import Callable, Dict, List, Optional, Tuple

from bs4 import Tag

from arena_judge.utils.identity import HEADER_LINES, is_name_label, is_thought_prefix
from arena_judge.utils.node import Node
from arena_judge.utils.rules import DEFAULT_CONFIG, ExtractionConfig, safe_select, select_all


# Link text that is only a citation marker: "3", "[3]", "[3", "3]"
CITATION_MARKER_RE = re.compile(r"^\[?\d+\]?$")
ABSOLUTE_URL_RE = re.compile(r"^https?://", re.IGNORECASE)

# A "Sources" heading on its own line and everything after it
SOURCES_RE = re.compile(r"(?:^|\n)[ \t]*Sources[ \t]*:?[ \t]*\n[\s\S]*$", re.IGNORECASE)
# "12 https://example.com/page" lines
NUMBERED_URL_RE = re.compile(r"(?:^|\n)[ \t]*\d+[ \t]+https?://\S+[ \t]*(?=\n|$)")
BLANK_RUN_RE = re.compile(r"\n{3,}")


# Citation cleanup
def strip_citations(text: Optional[str]) -> str:
    if not text:
        return ""
    text = SOURCES_RE.sub("", text)
    text = NUMBERED_URL_RE.sub("", text)
    text = BLANK_RUN_RE.sub("\n\n", text)
    return text.strip()


# Keep only maximal fragments; drop short ones and ones contained in another
def deduplicate_texts(texts: List[str], min_chars: int = 10) -> List[str]:
    result: List[str] = []
    for text in texts:
        if len(text) < min_chars:
            continue
        if any(text in kept for kept in result):
            continue
        result = [kept for kept in result if kept not in text]
        result.append(text)
    return result


def rewrite_links(root: Node) -> None:
    # Flattening loses hrefs, so fold the URL into the visible text
    for link in safe_select(root, "a[href]"):
        href = (link.get("href") or "").strip()
        if not ABSOLUTE_URL_RE.match(href):
            continue
        text = link.text.strip()
        if CITATION_MARKER_RE.match(text):
            link.set_text(f"({href})")
        elif href not in text:
            link.append_text(f" ({href})")


def _strip_header(text: str, config: ExtractionConfig) -> str:
    lines = text.split("\n")
    start = 0
    for i in range(min(HEADER_LINES, len(lines))):
        line = lines[i].strip()
        if not line or is_name_label(line, config.model_prefixes) or is_thought_prefix(line):
            start = i + 1
        else:
            break
    return "\n".join(lines[start:]).strip()


def clean(column: Optional[Node], config: ExtractionConfig = DEFAULT_CONFIG) -> str:
    """
    Readable response text of one column.

    Works on a detached copy: strips reasoning blocks, echoed prompt bubbles
    and hidden nodes, inlines link targets, then prefers the deduplicated
    text of the prose blocks and falls back to the whole column minus its
    header lines. Citation leftovers are removed from whichever was used.
    """
    if column is None:
        return ""

    work = column.clone()

    remove_rules = (*config.strip_rules, config.rules.user_bubble, config.rules.hidden)
    for node in select_all(work, remove_rules):
        node.remove()

    rewrite_links(work)

    prose = safe_select(work, config.rules.prose)
    texts = [t for t in (p.text.strip() for p in prose) if t]
    fragments = deduplicate_texts(texts, config.min_fragment_chars)
    if fragments:
        return strip_citations("\n\n".join(fragments))

    return strip_citations(_strip_header(work.text, config))


class TextCache:
    """
    Cleaned text per column, keyed by node identity.

    An entry stays valid while its node is part of the current tree. The page
    swaps nodes out when their content changes, so `evict_unreachable` at the
    start of every scan is enough to avoid serving stale text.
    """

    def __init__(self):
        self._entries: Dict[int, Tuple[Tag, str]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, node: Node) -> bool:
        entry = self._entries.get(node.node_id)
        return entry is not None and entry[0] is node.tag

    def get(self, column: Optional[Node], compute: Callable[[Node], str]) -> str:
        if column is None:
            return ""
        entry = self._entries.get(column.node_id)
        if entry is not None and entry[0] is column.tag:
            return entry[1]
        value = compute(column)
        self._entries[column.node_id] = (column.tag, value)
        return value

    def evict_unreachable(self, root: Node) -> int:
        live = {id(root.tag)}
        live.update(n.node_id for n in root.descendants())
        stale = [k for k in self._entries if k not in live]
        for k in stale:
            del self._entries[k]
        return len(stale)

    def clear(self) -> None:
        self._entries.clear()
