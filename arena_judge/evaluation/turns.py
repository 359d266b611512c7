import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from arena_judge.utils.identity import looks_like_response_head
from arena_judge.utils.node import Node
from arena_judge.utils.rules import (
    DEFAULT_CONFIG,
    ExtractionConfig,
    Rule,
    RuleChain,
    safe_matches,
    safe_select,
)

logger = logging.getLogger(__name__)


class TurnType(str, Enum):
    COMPLETE = "complete"      # both responses visible
    VOTED = "voted"            # one response hidden after a vote
    INCOMPLETE = "incomplete"  # still generating


@dataclass
class Turn:
    dom_index: int
    type: TurnType
    column_a: Node
    column_b: Optional[Node] = None
    chron_index: int = -1


@dataclass
class Candidate:
    # Everything the classification rules look at, computed once per container
    index: int
    container: Node
    children: List[Node]
    lengths: List[int] = field(default_factory=list)
    named: List[bool] = field(default_factory=list)
    has_prompt_bubble: bool = False
    in_progress: bool = False

    @classmethod
    def build(cls, index: int, container: Node, config: ExtractionConfig) -> "Candidate":
        children = container.children
        texts = [c.text for c in children]
        return cls(
            index=index,
            container=container,
            children=children,
            lengths=[len(t) for t in texts],
            named=[
                looks_like_response_head(t[: config.heuristic_window], config.model_prefixes)
                for t in texts
            ],
            has_prompt_bubble=any(safe_matches(c, config.rules.user_bubble) for c in children),
            in_progress=bool(safe_select(container, config.rules.spinner)),
        )


def default_turn_rules(config: ExtractionConfig = DEFAULT_CONFIG) -> RuleChain[TurnType]:
    # Order matters: the noise and prompt-echo rules reject before anything is accepted
    return RuleChain([
        Rule("noise", lambda c: not any(n > config.min_child_chars for n in c.lengths), None),
        Rule("prompt-echo", lambda c: c.has_prompt_bubble, None),
        Rule("pair-named", lambda c: len(c.children) == 2 and any(c.named), TurnType.COMPLETE),
        Rule(
            "pair-long",
            lambda c: len(c.children) == 2
            and all(n > config.long_response_chars for n in c.lengths),
            TurnType.COMPLETE,
        ),
        Rule("single-voted", lambda c: len(c.children) == 1 and c.named[0] and not c.in_progress, TurnType.VOTED),
        Rule("single-in-progress", lambda c: len(c.children) == 1 and c.in_progress, TurnType.INCOMPLETE),
    ])


# Candidate discovery
def find_containers(root: Node, config: ExtractionConfig = DEFAULT_CONFIG) -> List[Node]:
    containers = safe_select(root, config.rules.response_container)
    if containers:
        return containers

    logger.info("Primary container selector found nothing, trying fallback")
    out = []
    for node in safe_select(root, config.rules.fallback_container):
        children = node.children
        if not 1 <= len(children) <= 2:
            continue
        if len(node.text) <= config.fallback_min_chars:
            continue
        if any(
            looks_like_response_head(c.text[: config.heuristic_window], config.model_prefixes)
            for c in children
        ):
            out.append(node)
    return out


def classify_container(
    index: int,
    container: Node,
    config: ExtractionConfig = DEFAULT_CONFIG,
    rules: Optional[RuleChain[TurnType]] = None,
) -> Optional[Turn]:
    if rules is None:
        rules = default_turn_rules(config)

    candidate = Candidate.build(index, container, config)
    if not candidate.children:
        return None

    turn_type = rules.evaluate(candidate)
    if turn_type is None:
        return None

    if turn_type == TurnType.COMPLETE:
        return Turn(index, turn_type, candidate.children[0], candidate.children[1])
    return Turn(index, turn_type, candidate.children[0])


def assign_chronology(turns: List[Turn]) -> List[Turn]:
    # The page lists newest first; reversing dom order gives oldest first
    ordered = sorted(turns, key=lambda t: t.dom_index)
    ordered.reverse()
    for i, turn in enumerate(ordered):
        turn.chron_index = i
    return ordered


def classify(
    root: Node,
    config: ExtractionConfig = DEFAULT_CONFIG,
    rules: Optional[RuleChain[TurnType]] = None,
) -> List[Turn]:
    """Find every response container under `root` and return its turns, oldest first."""
    if rules is None:
        rules = default_turn_rules(config)

    turns = []
    for i, container in enumerate(find_containers(root, config)):
        turn = classify_container(i, container, config, rules)
        if turn is not None:
            turns.append(turn)

    return assign_chronology(turns)


def complete_turns(turns: List[Turn]) -> List[Turn]:
    return [t for t in turns if t.type == TurnType.COMPLETE]


def last_complete_turn(turns: List[Turn]) -> Optional[Turn]:
    complete = complete_turns(turns)
    return complete[-1] if complete else None


def count_by_type(turns: List[Turn]) -> Dict[str, int]:
    counts = {t.value: 0 for t in TurnType}
    for turn in turns:
        counts[turn.type.value] += 1
    return counts
