import json
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from arena_judge import __version__
from arena_judge.evaluation.prompts import extract_prompts
from arena_judge.evaluation.turns import count_by_type, last_complete_turn
from arena_judge.models.judge_prompt import HIDDEN_NAME
from arena_judge.utils.node import Node
from arena_judge.utils.rules import safe_select

if TYPE_CHECKING:
    from arena_judge.evaluation.pipeline import PageExtractor


# Sample sizes for the report
MAX_CONTAINERS = 10
PROMPT_PREVIEW_CHARS = 200
TURN_PREVIEW_CHARS = 100
CHILD_PREVIEW_CHARS = 80


def _preview(text: str, limit: int) -> str:
    return text[:limit] + ("..." if len(text) > limit else "")


# Raw container sample for tuning selectors by hand
def sample_containers(root: Node, selector: str, limit: int = MAX_CONTAINERS) -> List[Dict[str, Any]]:
    out = []
    for i, container in enumerate(safe_select(root, selector)[:limit]):
        texts = [c.text for c in container.children]
        out.append({
            "index": i,
            "childCount": len(texts),
            "childLengths": [len(t) for t in texts],
            "firstChars": [t[:CHILD_PREVIEW_CHARS].replace("\n", " ") for t in texts],
        })
    return out


def build_report(extractor: "PageExtractor", root: Node, url: Optional[str] = None) -> Dict[str, Any]:
    """
    Everything the extractor sees on a page, for troubleshooting selectors.
    Same scan as the judge prompt; no new logic.
    """
    config = extractor.config
    turns = extractor.scan(root)
    prompts = extract_prompts(root, config)
    counts = count_by_type(turns)
    current = last_complete_turn(turns)

    current_eval = None
    if current is not None:
        current_eval = {
            "turnIndex": current.chron_index,
            "modelA": extractor.model_name(current.column_a),
            "modelB": extractor.model_name(current.column_b),
            "responseALength": len(extractor.response_text(current.column_a)),
            "responseBLength": len(extractor.response_text(current.column_b)),
        }

    turn_rows = []
    for t in turns:
        text_a = extractor.response_text(t.column_a)
        turn_rows.append({
            "chronIndex": t.chron_index,
            "domIndex": t.dom_index,
            "type": t.type.value,
            "modelA": extractor.model_name(t.column_a),
            "modelB": extractor.model_name(t.column_b) if t.column_b is not None else HIDDEN_NAME,
            "responseALength": len(text_a),
            "responseBLength": len(extractor.response_text(t.column_b)) if t.column_b is not None else 0,
            "preview": text_a[:TURN_PREVIEW_CHARS],
        })

    return {
        "meta": {
            "version": __version__,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "url": url,
        },
        "summary": {
            "completeTurns": counts["complete"],
            "votedTurns": counts["voted"],
            "incompleteTurns": counts["incomplete"],
            "promptsFound": len(prompts),
            "aligned": len(prompts) == counts["complete"],
        },
        "currentEval": current_eval,
        "prompts": [_preview(p, PROMPT_PREVIEW_CHARS) for p in prompts],
        "turns": turn_rows,
        "containers": sample_containers(root, config.rules.response_container),
        "config": {
            "selectors": config.rules.as_dict(),
            "stripSelectors": list(config.strip_rules),
        },
    }


def report_to_json(report: Dict[str, Any]) -> str:
    return json.dumps(report, indent=2, default=str)
