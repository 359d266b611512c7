import copy
import re
from typing import Iterator, List, Optional, Union

import soupsieve
from bs4 import BeautifulSoup, Tag
from bs4.element import NavigableString, PreformattedString


# Tags whose content never shows up as visible text
SKIP_TAGS = {"script", "style", "template", "noscript", "head", "title", "meta", "link"}

# Tags that start and end on their own line
BLOCK_TAGS = {
    "address", "article", "aside", "blockquote", "body", "caption", "dd",
    "details", "dialog", "div", "dl", "dt", "fieldset", "figcaption",
    "figure", "footer", "form", "h1", "h2", "h3", "h4", "h5", "h6",
    "header", "hr", "html", "li", "main", "nav", "ol", "pre", "section",
    "summary", "table", "tbody", "thead", "tfoot", "tr", "ul",
}

# Tags separated from their siblings by a blank line
PARAGRAPH_TAGS = {"p"}

HIDDEN_STYLE_RE = re.compile(r"display\s*:\s*none|visibility\s*:\s*hidden", re.IGNORECASE)
_WS_RE = re.compile(r"[ \t\n\r\f]+")


def is_visible(tag: Tag) -> bool:
    # Inline style and the hidden attribute are the only signals a static tree has
    if tag.has_attr("hidden"):
        return False
    return not HIDDEN_STYLE_RE.search(tag.get("style", "") or "")


def _collect(tag: Tag, items: list, pre: bool = False) -> None:
    for child in tag.children:
        if isinstance(child, Tag):
            name = child.name
            if name in SKIP_TAGS or not is_visible(child):
                continue
            if name == "br":
                items.append(("\n", True))
                continue
            breaks = 2 if name in PARAGRAPH_TAGS else 1 if name in BLOCK_TAGS else 0
            if breaks:
                items.append(breaks)
            _collect(child, items, pre or name == "pre")
            if breaks:
                items.append(breaks)
        elif isinstance(child, NavigableString) and not isinstance(child, PreformattedString):
            text = str(child) if pre else _WS_RE.sub(" ", str(child))
            if text:
                items.append((text, pre))


def _render(items: list) -> str:
    parts: List[str] = []
    pending = 0

    for item in items:
        if isinstance(item, int):
            # leading breaks are dropped, runs of breaks collapse to the largest
            if parts:
                pending = max(pending, item)
            continue

        text, pre = item
        at_line_start = bool(pending) or not parts or parts[-1].endswith(("\n", " "))
        if not pre and at_line_start:
            text = text.lstrip(" ")
        # whitespace alone never flushes a pending break
        if not text:
            continue

        if pending:
            parts[-1] = parts[-1].rstrip(" ")
            parts.append("\n" * pending)
            pending = 0
        elif text == "\n" and parts:
            parts[-1] = parts[-1].rstrip(" ")
        parts.append(text)

    return "".join(parts).rstrip(" ")


def flatten_text(tag: Tag) -> str:
    """
    Approximate the browser's rendered text for a subtree:
    block elements break lines, <p> leaves a blank line, <br> is a newline,
    whitespace collapses outside <pre>, hidden and script-like nodes are skipped.
    """
    items: list = []
    _collect(tag, items)
    return _render(items)


class Node:
    """
    Read-only view over one element of a parsed page.

    Nodes selected from a detached copy (see `clone`) may be edited in place;
    nodes of the live tree refuse any mutation.
    """

    __slots__ = ("tag", "detached")

    def __init__(self, tag: Tag, detached: bool = False):
        self.tag = tag
        self.detached = detached

    def __eq__(self, other) -> bool:
        return isinstance(other, Node) and self.tag is other.tag

    def __hash__(self) -> int:
        return id(self.tag)

    def __repr__(self) -> str:
        return f"Node(<{self.name}> {self.attrs_string!r})"

    @property
    def node_id(self) -> int:
        return id(self.tag)

    @property
    def name(self) -> str:
        return self.tag.name

    @property
    def children(self) -> List["Node"]:
        return [Node(c, self.detached) for c in self.tag.children if isinstance(c, Tag)]

    @property
    def text(self) -> str:
        return flatten_text(self.tag)

    @property
    def attrs_string(self) -> str:
        # class first, then the rest; values are joined the way they appear in markup
        parts = []
        for key, value in self.tag.attrs.items():
            if isinstance(value, (list, tuple)):
                value = " ".join(value)
            parts.append(f'{key}="{value}"')
        parts.sort(key=lambda p: not p.startswith("class="))
        return " ".join(parts)

    @property
    def visible(self) -> bool:
        return is_visible(self.tag)

    def get(self, attr: str, default: Optional[str] = None) -> Optional[str]:
        value = self.tag.get(attr, default)
        if isinstance(value, (list, tuple)):
            return " ".join(value)
        return value

    def descendants(self) -> Iterator["Node"]:
        for d in self.tag.descendants:
            if isinstance(d, Tag):
                yield Node(d, self.detached)

    # Structural matching. Both raise soupsieve.SelectorSyntaxError on a bad selector.
    def select(self, selector: str) -> List["Node"]:
        return [Node(t, self.detached) for t in soupsieve.select(selector, self.tag)]

    def matches(self, selector: str) -> bool:
        return soupsieve.match(selector, self.tag)

    def clone(self) -> "Node":
        # copy.copy on a bs4 Tag is a deep, parentless copy
        return Node(copy.copy(self.tag), detached=True)

    # Mutation, detached copies only
    def _check_detached(self) -> None:
        if not self.detached:
            raise RuntimeError("refusing to modify a node of the live tree; clone() it first")

    def remove(self) -> None:
        self._check_detached()
        self.tag.extract()

    def set_text(self, text: str) -> None:
        self._check_detached()
        self.tag.string = text

    def append_text(self, text: str) -> None:
        self._check_detached()
        self.tag.append(NavigableString(text))


def parse_html(markup: Union[str, bytes], parser: str = "html.parser") -> Node:
    soup = BeautifulSoup(markup, parser)
    return Node(soup)
