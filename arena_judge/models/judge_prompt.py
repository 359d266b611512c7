from dataclasses import dataclass
from typing import List, Optional, Sequence

from arena_judge import __version__
from arena_judge.utils.identity import UNKNOWN_NAME


# Placeholders used when something could not be captured
HIDDEN_NAME = "[HIDDEN]"
HIDDEN_RESPONSE = "[HIDDEN - vote already cast]"
NO_RESPONSE = "[NO RESPONSE]"
NO_PROMPT = "[NO PROMPT DETECTED]"
PROMPT_NOT_CAPTURED = "[PROMPT NOT CAPTURED]"
UNKNOWN_PROMPT = "[unknown]"

PREVIEW_CHARS = 150


#prompts
PREAMBLE = (
    "You are an extremely critical, world-class evaluator of LLM outputs. "
    "Be precise and unsparing."
)

HIDDEN_NOTE = "[NOTE: This turn was already voted on. Model B's response is hidden.]"

MODELS_CHANGED_NOTE = (
    "[NOTE: The models changed between turns. Earlier turns are shown for context only.]"
)

EVALUATION_TASK = """## Your Evaluation Task

**Winner**: State "A" ({model_a}) or "B" ({model_b}) or "Tie". Only call a Tie when both responses agree on the facts and neither is clearly better.

**Critical Analysis**: Justify the verdict briefly and precisely, identifying:
- Factual errors or hallucinations in either response
- Logical flaws or gaps in reasoning
- Missing information the prompt requested
- Unnecessary verbosity or filler
- Tone/style/formatting issues

**Deeper Comparison**:
- Which showed deeper reasoning vs. surface-level response?
- Which had more original insight vs. generic answers?
- Which was better structured and clearer?

**Prompt Improvement** (optional): Rewrite the original prompt to be 5-10x more effective at getting the superior behavior you observed. Explain your changes."""

FOOTER = "_Generated by arena-judge v{version} from a side-by-side battle view._"


@dataclass
class ExtractedTurn:
    model_a: str
    model_b: str
    response_a: str
    response_b: str

    @property
    def is_hidden(self) -> bool:
        return not self.response_b or self.response_b.startswith("[HIDDEN")


def _quoted(text: str) -> str:
    return f'"""\n{text}\n"""'


def _known(name: str) -> bool:
    return bool(name) and name not in (UNKNOWN_NAME, HIDDEN_NAME)


def models_changed(turns: Sequence[Optional[ExtractedTurn]]) -> bool:
    # Only names that were actually resolved count as evidence of a swap
    for prev, cur in zip(turns, turns[1:]):
        if prev is None or cur is None:
            continue
        for a, b in ((prev.model_a, cur.model_a), (prev.model_b, cur.model_b)):
            if _known(a) and _known(b) and a != b:
                return True
    return False


def _turn_at(turns: Sequence[ExtractedTurn], i: int) -> Optional[ExtractedTurn]:
    return turns[i] if 0 <= i < len(turns) else None


# History block for every turn before the target
def build_history(prompts: Sequence[str], turns: Sequence[ExtractedTurn], target_index: int) -> str:
    parts = []
    for i in range(target_index):
        prompt = prompts[i] if i < len(prompts) and prompts[i] else PROMPT_NOT_CAPTURED
        turn = _turn_at(turns, i)

        section = f"### Turn {i + 1} - User Prompt\n{prompt}"
        if turn is not None:
            if turn.is_hidden:
                section += f"\n\n{HIDDEN_NOTE}"
            section += (
                f"\n\n### Turn {i + 1} - Model A ({turn.model_a}) Response\n"
                f"{turn.response_a or NO_RESPONSE}"
            )
            section += (
                f"\n\n### Turn {i + 1} - Model B ({turn.model_b}) Response\n"
                f"{turn.response_b or NO_RESPONSE}"
            )
        parts.append(section)

    if not parts:
        return ""

    history = "## Full Conversation History\n" + _quoted("\n\n---\n\n".join(parts))

    window = [_turn_at(turns, i) for i in range(target_index + 1)]
    if models_changed(window):
        history += f"\n\n{MODELS_CHANGED_NOTE}"
    return history


def build_pending_note(prompts: Sequence[str], complete_turn_count: int) -> str:
    if len(prompts) <= complete_turn_count:
        return ""
    pending = len(prompts) - complete_turn_count
    next_prompt = prompts[complete_turn_count] if complete_turn_count >= 0 else None
    if not next_prompt:
        preview = UNKNOWN_PROMPT
    elif len(next_prompt) > PREVIEW_CHARS:
        preview = next_prompt[:PREVIEW_CHARS] + "..."
    else:
        preview = next_prompt
    return (
        f"_Note: Battle still in progress - {pending} additional prompt(s) "
        f'awaiting responses. Next prompt: "{preview}"_'
    )


def assemble(
    prompts: Sequence[str],
    all_turns: Sequence[ExtractedTurn],
    target_index: int,
    complete_turn_count: int,
    title: Optional[str] = None,
) -> str:
    """
    Render the judge prompt for the turn at `target_index` (chronological).

    `all_turns` is indexed like `prompts`; anything missing degrades to a
    placeholder string rather than an error.
    """
    target_index = max(0, target_index)
    target = _turn_at(all_turns, target_index)

    model_a = target.model_a if target else UNKNOWN_NAME
    model_b = target.model_b if target else UNKNOWN_NAME
    response_a = (target.response_a if target else "") or NO_RESPONSE
    response_b = (target.response_b if target else "") or NO_RESPONSE

    current_prompt = prompts[target_index] if target_index < len(prompts) else ""
    current_prompt = current_prompt or NO_PROMPT

    if target_index > 0:
        label = f"Current Turn Being Evaluated (Turn {target_index + 1})"
    else:
        label = "User Prompt"

    blocks: List[str] = []
    if title:
        blocks.append(f"# {title.strip()}")
    blocks.append(PREAMBLE)

    history = build_history(prompts, all_turns, target_index) if target_index > 0 else ""
    if history:
        blocks.append(history)

    blocks.append(f"## {label}\n{_quoted(current_prompt)}")
    blocks.append(f"## Model A ({model_a}) Response\n{_quoted(response_a)}")
    blocks.append(f"## Model B ({model_b}) Response\n{_quoted(response_b)}")

    pending = build_pending_note(prompts, complete_turn_count)
    if pending:
        blocks.append(pending)

    blocks.append(EVALUATION_TASK.format(model_a=model_a, model_b=model_b))
    blocks.append(FOOTER.format(version=__version__))

    return "\n\n".join(blocks)
