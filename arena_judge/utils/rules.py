import logging
from dataclasses import asdict, dataclass, field, replace
from typing import Any, Callable, Dict, Generic, Iterable, Iterator, List, Optional, Tuple, TypeVar

from soupsieve import SelectorSyntaxError

from arena_judge.utils.node import Node

logger = logging.getLogger(__name__)

T = TypeVar("T")


# Model name prefixes used to recognise a column header
DEFAULT_MODEL_PREFIXES: Tuple[str, ...] = (
    "claude", "grok", "gpt", "gemini", "llama", "mistral", "qwen",
    "deepseek", "o1", "o3", "o4-mini", "chatgpt", "command", "dbrx",
    "phi", "yi", "solar", "palm", "codestral", "pixtral", "nemotron",
)

# Elements removed from a response before its text is read
DEFAULT_STRIP_RULES: Tuple[str, ...] = (
    "details",
    '[class*="thinking"]',
    '[class*="reasoning"]',
    '[class*="thought"]',
    '[aria-hidden="true"]',
    "[hidden]",
)


@dataclass(frozen=True)
class StructuralRules:
    # CSS selectors matched against the page; class substrings survive most rebuilds
    response_container: str = '[class*="flex"][class*="-ml-4"]'
    fallback_container: str = '[class*="flex"]'
    user_bubble: str = '[class*="bg-surface-secondary"][class*="max-w-prose"]'
    prose: str = '[class*="prose"]'
    spinner: str = '[class*="spinner"], [class*="loading"], [class*="generating"]'
    hidden: str = (
        '[style*="display: none"], [style*="display:none"], '
        '[style*="visibility: hidden"], [style*="visibility:hidden"]'
    )

    def as_dict(self) -> Dict[str, str]:
        return asdict(self)


@dataclass(frozen=True)
class ExtractionConfig:
    rules: StructuralRules = field(default_factory=StructuralRules)
    strip_rules: Tuple[str, ...] = DEFAULT_STRIP_RULES
    model_prefixes: Tuple[str, ...] = DEFAULT_MODEL_PREFIXES

    debounce_ms: int = 500

    # Classifier thresholds (characters of rendered text)
    min_child_chars: int = 5
    long_response_chars: int = 500
    fallback_min_chars: int = 200
    heuristic_window: int = 150

    # Cleaner / assembler limits
    min_fragment_chars: int = 10
    pending_preview_chars: int = 150

    def with_overrides(self, **changes: Any) -> "ExtractionConfig":
        return replace(self, **changes)

    def with_rules(self, **changes: str) -> "ExtractionConfig":
        return replace(self, rules=replace(self.rules, **changes))


DEFAULT_CONFIG = ExtractionConfig()


# Selector helpers that skip a malformed rule instead of failing the scan
def safe_select(node: Node, selector: str) -> List[Node]:
    try:
        return node.select(selector)
    except (SelectorSyntaxError, NotImplementedError, ValueError) as e:
        logger.debug("Skipping invalid selector %r: %s", selector, e)
        return []


def safe_matches(node: Node, selector: str) -> bool:
    try:
        return node.matches(selector)
    except (SelectorSyntaxError, NotImplementedError, ValueError) as e:
        logger.debug("Skipping invalid selector %r: %s", selector, e)
        return False


def select_all(node: Node, selectors: Iterable[str]) -> List[Node]:
    out: List[Node] = []
    for selector in selectors:
        out.extend(safe_select(node, selector))
    return out


@dataclass(frozen=True)
class Rule(Generic[T]):
    name: str
    predicate: Callable[[Any], bool]
    result: Optional[T]


class RuleChain(Generic[T]):
    """
    Ordered list of (predicate -> result) rules. The first rule whose predicate
    holds decides; a rule may decide `None` to reject the subject outright.
    """

    def __init__(self, rules: Iterable[Rule[T]]):
        self.rules: Tuple[Rule[T], ...] = tuple(rules)

    def __iter__(self) -> Iterator[Rule[T]]:
        return iter(self.rules)

    def __len__(self) -> int:
        return len(self.rules)

    def first_match(self, subject: Any) -> Optional[Rule[T]]:
        for rule in self.rules:
            if rule.predicate(subject):
                return rule
        return None

    def evaluate(self, subject: Any, default: Optional[T] = None) -> Optional[T]:
        rule = self.first_match(subject)
        return rule.result if rule is not None else default
