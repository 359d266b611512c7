import json

from conftest import bubble, column, container, page

from arena_judge.evaluation import pipeline
from arena_judge.evaluation.diagnostics import report_to_json
from arena_judge.evaluation.pipeline import PageExtractor, build_judge_prompt, extract_turns
from arena_judge.models.judge_prompt import HIDDEN_NAME, HIDDEN_NOTE, HIDDEN_RESPONSE


def test_two_turn_page_builds_multi_turn_prompt(two_turn_page) -> None:
    out = build_judge_prompt(two_turn_page)
    assert out is not None
    assert "## Current Turn Being Evaluated (Turn 2)" in out
    assert "### Turn 1 - Model A (gpt-4o) Response\nFirst answer from the first model about X." in out
    assert "## Model B (claude-3-opus) Response\n\"\"\"\nSecond answer from the second model, also deeper." in out
    target = out.split("## Current Turn Being Evaluated (Turn 2)")[1]
    assert "Explain X more" in target


def test_extract_turns_orders_oldest_first(two_turn_page) -> None:
    turns = extract_turns(two_turn_page)
    assert [t.response_a for t in turns] == [
        "First answer from the first model about X.",
        "Second answer from the first model, with more depth.",
    ]
    assert {t.model_b for t in turns} == {"claude-3-opus"}


def test_voted_turn_is_hidden_in_history() -> None:
    root = page(
        bubble("Follow-up question"),
        container(column("gpt-4o", "Follow-up answer A."), column("claude-3", "Follow-up answer B.")),
        bubble("Opening question"),
        container(column("gpt-4o", "Opening answer that survived the vote.")),
    )
    extractor = PageExtractor()
    turns = extractor.extract_turns(extractor.scan(root))
    assert turns[0].model_b == HIDDEN_NAME
    assert turns[0].response_b == HIDDEN_RESPONSE

    out = extractor.build_judge_prompt(root)
    assert HIDDEN_NOTE in out.split("## Current Turn")[0]


def test_no_complete_turn_returns_none() -> None:
    root = page(bubble("Waiting question"), container(column("gpt-4o", "Only one side here.")))
    assert build_judge_prompt(root) is None


def test_pending_prompt_is_reported() -> None:
    root = page(
        bubble("A newer question still being answered"),
        bubble("First question"),
        container(column("gpt-4o", "Answer A to the first."), column("claude-3", "Answer B to the first.")),
    )
    out = build_judge_prompt(root)
    assert "## User Prompt\n\"\"\"\nFirst question" in out
    assert "1 additional prompt(s) awaiting responses" in out
    assert 'Next prompt: "A newer question still being answered"' in out


def test_text_cache_reused_across_scans(two_turn_page, monkeypatch) -> None:
    extractor = PageExtractor()
    calls = []
    real_clean = pipeline.clean

    def counting_clean(column, config):
        calls.append(column)
        return real_clean(column, config)

    monkeypatch.setattr(pipeline, "clean", counting_clean)
    first = extractor.build_judge_prompt(two_turn_page)
    second = extractor.build_judge_prompt(two_turn_page)
    assert first == second
    assert len(calls) == 4


def test_title_is_added_when_requested(two_turn_page, monkeypatch) -> None:
    seen = {}

    def fake_title(prompt_text, cfg=None):
        seen["prompt"] = prompt_text
        return "Explaining X"

    monkeypatch.setattr(pipeline, "generate_title", fake_title)
    out = PageExtractor().build_judge_prompt(two_turn_page, with_title=True)
    assert out.startswith("# Explaining X\n")
    assert seen["prompt"] == "Explain X more"


def test_title_failure_leaves_prompt_untitled(two_turn_page, monkeypatch) -> None:
    monkeypatch.setattr(pipeline, "generate_title", lambda prompt_text, cfg=None: None)
    out = PageExtractor().build_judge_prompt(two_turn_page, with_title=True)
    assert not out.startswith("#")


def test_debug_report_shape(two_turn_page) -> None:
    report = PageExtractor().build_debug_report(two_turn_page, url="https://arena.example/c/1")
    assert report["meta"]["url"] == "https://arena.example/c/1"
    assert report["summary"] == {
        "completeTurns": 2,
        "votedTurns": 0,
        "incompleteTurns": 0,
        "promptsFound": 2,
        "aligned": True,
    }
    assert report["currentEval"]["turnIndex"] == 1
    assert report["currentEval"]["modelA"] == "gpt-4o"
    assert [t["chronIndex"] for t in report["turns"]] == [0, 1]
    assert [t["domIndex"] for t in report["turns"]] == [1, 0]
    assert report["containers"][0]["childCount"] == 2
    assert report["config"]["selectors"]["prose"] == '[class*="prose"]'
    assert "details" in report["config"]["stripSelectors"]

    decoded = json.loads(report_to_json(report))
    assert decoded["summary"]["completeTurns"] == 2


def test_debug_report_without_turns() -> None:
    report = PageExtractor().build_debug_report(page("<div>empty page</div>"))
    assert report["currentEval"] is None
    assert report["turns"] == []
    assert report["summary"]["aligned"] is True
