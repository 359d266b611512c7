import logging
from typing import Any, Dict, List, Optional

from arena_judge.evaluation.diagnostics import build_report
from arena_judge.evaluation.prompts import extract_prompts
from arena_judge.evaluation.turns import Turn, classify, complete_turns, last_complete_turn
from arena_judge.models.judge_prompt import HIDDEN_NAME, HIDDEN_RESPONSE, ExtractedTurn, assemble
from arena_judge.models.llm_client import LLMConfig
from arena_judge.models.title import generate_title
from arena_judge.utils.identity import resolve_name
from arena_judge.utils.node import Node
from arena_judge.utils.rules import DEFAULT_CONFIG, ExtractionConfig
from arena_judge.utils.text_cleaner import TextCache, clean

logger = logging.getLogger(__name__)


class PageExtractor:
    """
    One extractor per page view. Holds the config and the text cache;
    every call re-scans the tree it is given.
    """

    def __init__(self, config: ExtractionConfig = DEFAULT_CONFIG, cache: Optional[TextCache] = None):
        self.config = config
        self.cache = cache if cache is not None else TextCache()

    # Scan
    def scan(self, root: Node) -> List[Turn]:
        evicted = self.cache.evict_unreachable(root)
        if evicted:
            logger.debug("Evicted %d cached columns no longer on the page", evicted)
        return classify(root, self.config)

    def response_text(self, column: Optional[Node]) -> str:
        return self.cache.get(column, lambda c: clean(c, self.config))

    def model_name(self, column: Optional[Node]) -> str:
        return resolve_name(column, self.config.model_prefixes)

    def extract_turn(self, turn: Turn) -> ExtractedTurn:
        if turn.column_b is None:
            return ExtractedTurn(
                model_a=self.model_name(turn.column_a),
                model_b=HIDDEN_NAME,
                response_a=self.response_text(turn.column_a),
                response_b=HIDDEN_RESPONSE,
            )
        return ExtractedTurn(
            model_a=self.model_name(turn.column_a),
            model_b=self.model_name(turn.column_b),
            response_a=self.response_text(turn.column_a),
            response_b=self.response_text(turn.column_b),
        )

    def extract_turns(self, turns: List[Turn]) -> List[ExtractedTurn]:
        return [self.extract_turn(t) for t in turns]

    # Judge prompt for the newest complete turn; None when nothing is complete yet
    def build_judge_prompt(
        self,
        root: Node,
        with_title: bool = False,
        title_cfg: Optional[LLMConfig] = None,
    ) -> Optional[str]:

        turns = self.scan(root)
        target = last_complete_turn(turns)
        if target is None:
            logger.info("No battle responses found; both models must have responded")
            return None

        prompts = extract_prompts(root, self.config)
        extracted = self.extract_turns(turns)

        title = None
        if with_title:
            current = prompts[target.chron_index] if target.chron_index < len(prompts) else ""
            title = generate_title(current, title_cfg)

        return assemble(
            prompts=prompts,
            all_turns=extracted,
            target_index=target.chron_index,
            complete_turn_count=len(complete_turns(turns)),
            title=title,
        )

    def build_debug_report(self, root: Node, url: Optional[str] = None) -> Dict[str, Any]:
        return build_report(self, root, url=url)


def extract_turns(root: Node, config: ExtractionConfig = DEFAULT_CONFIG) -> List[ExtractedTurn]:
    extractor = PageExtractor(config)
    return extractor.extract_turns(extractor.scan(root))


def build_judge_prompt(
    root: Node,
    config: ExtractionConfig = DEFAULT_CONFIG,
    with_title: bool = False,
) -> Optional[str]:
    return PageExtractor(config).build_judge_prompt(root, with_title=with_title)

