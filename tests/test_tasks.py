"""Tests for the task entry points."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from conftest import FakeGateway
from research_writer.agents import tasks
from research_writer.agents.tasks import TASKS, build_goal, run_task, truncate_source

FINISH = "Thought: done\nFinal Answer: finished"


def _tool_names(name: str) -> list[str]:
    return [t.name for t in TASKS[name].create_tools(FakeGateway([FINISH]))]


# ---------------------------------------------------------------------------
# Goal construction
# ---------------------------------------------------------------------------

def test_truncate_source_under_limit_is_unchanged():
    assert truncate_source("short", 100) == "short"


def test_truncate_source_appends_marker():
    result = truncate_source("x" * 50, 10)
    assert result == "x" * 10 + "\n\n[... truncated: input exceeded 10 characters]"


def test_polish_goal_folds_in_venue_and_language():
    goal = build_goal(TASKS["polish"], "Our method is good.", {"venue": "NeurIPS 2026", "lang": "English"})
    assert "to publication standard for NeurIPS 2026." in goal
    assert "Write the result in English." in goal
    assert goal.endswith("Text:\nOur method is good.")


def test_polish_goal_without_venue():
    goal = build_goal(TASKS["polish"], "t", {})
    assert "to publication standard." in goal


def test_goal_is_truncated_to_limit():
    goal = build_goal(TASKS["de_ai"], "word " * 1000, {}, max_input_chars=20)
    assert "[... truncated: input exceeded 20 characters]" in goal
    assert "word " * 10 not in goal


def test_translate_requires_language_pair():
    with pytest.raises(ValueError, match="source_lang, target_lang"):
        build_goal(TASKS["translate"], "text", {})


def test_translate_goal():
    goal = build_goal(
        TASKS["translate"],
        "text",
        {"source_lang": "zh", "target_lang": "en", "domain": "computer vision"},
    )
    assert "from zh to en in the domain of computer vision." in goal


def test_review_requires_venue():
    with pytest.raises(ValueError, match="venue"):
        build_goal(TASKS["review"], "paper", {})


def test_unknown_parameter_rejected():
    with pytest.raises(ValueError, match="Unknown parameter"):
        build_goal(TASKS["compress"], "text", {"venue": "ICML"})


def test_caption_goal_uses_kind():
    goal = build_goal(TASKS["caption"], "accuracy vs epochs", {"kind": "table"})
    assert "publication-quality table caption" in goal
    assert '"latex": "\\caption{...}"' in goal


@pytest.mark.parametrize("name", sorted(TASKS))
def test_every_template_renders(name):
    required = {
        "translate": {"source_lang": "zh", "target_lang": "en"},
        "review": {"venue": "ICLR"},
    }
    goal = build_goal(TASKS[name], "SOURCE TEXT", required.get(name, {}))
    assert goal.rstrip().endswith("SOURCE TEXT")


# ---------------------------------------------------------------------------
# Tool subsets
# ---------------------------------------------------------------------------

def test_tool_subsets():
    assert _tool_names("polish") == ["analyze_issues", "apply_fixes", "validate_result", "word_count"]
    assert _tool_names("translate") == [
        "analyze_terms",
        "translate_text",
        "verify_translation",
        "word_count",
    ]
    assert _tool_names("compress") == ["word_count", "compress_text", "verify_preservation"]
    assert _tool_names("expand") == ["word_count", "expand_text", "verify_preservation"]
    assert _tool_names("de_ai") == ["scan_patterns", "detect_signatures", "rewrite_clean"]
    assert _tool_names("check_logic") == ["scan_contradictions", "deep_logic_check"]
    assert _tool_names("caption") == ["draft_caption", "refine_caption"]
    assert _tool_names("review") == [
        "assess_novelty",
        "check_methodology",
        "evaluate_experiments",
        "draft_review",
    ]
    assert _tool_names("analyze") == [
        "scan_patterns",
        "analyze_issues",
        "detect_ai_patterns",
        "score_paper",
    ]


# ---------------------------------------------------------------------------
# run_task / facades
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_facade_returns_agent_result_unchanged():
    llm = FakeGateway(
        ["Thought: count\nAction: word_count\nAction Input: a b c", FINISH]
    )
    result = await tasks.polish("a b c", llm, venue="ACL")

    assert result.final_answer == "finished"
    assert result.steps[0].observation == "Word count: 3"
    goal_message = llm.complete_calls[0][1][0].content
    assert goal_message.startswith("Goal: Polish the following academic text")
    assert "for ACL" in goal_message


@pytest.mark.asyncio
async def test_caption_uses_smaller_step_ceiling(tmp_path):
    llm = FakeGateway(["rambling"])
    with patch.dict("os.environ", {"MODELS_CONFIG_PATH": str(tmp_path / "missing.yaml")}):
        await tasks.caption("accuracy vs epochs", llm, kind="figure")
    assert len(llm.complete_calls) == tasks.CAPTION_MAX_STEPS + 1


@pytest.mark.asyncio
async def test_default_step_ceiling_comes_from_settings(tmp_path):
    llm = FakeGateway(["rambling"])
    with (
        patch.dict("os.environ", {"MODELS_CONFIG_PATH": str(tmp_path / "missing.yaml")}),
        patch.object(tasks.settings, "agent_max_steps", 2),
    ):
        await tasks.de_ai("text", llm)
    assert len(llm.complete_calls) == 3


@pytest.mark.asyncio
async def test_explicit_max_steps_wins():
    llm = FakeGateway(["rambling"])
    await tasks.review("paper", llm, venue="ICML", max_steps=1)
    assert len(llm.complete_calls) == 2


@pytest.mark.asyncio
async def test_llm_tools_call_the_gateway():
    llm = FakeGateway(
        ["Thought: judge\nAction: assess_novelty\nAction Input: the paper", FINISH],
        tool_reply='{"noveltyScore": 6}',
    )
    result = await tasks.review("the paper", llm, venue="ICML")

    assert result.steps[0].observation == '{"noveltyScore": 6}'
    instruction, user_text = llm.generate_calls[0]
    assert instruction.startswith("Evaluate novelty.")
    assert user_text == "the paper"


@pytest.mark.asyncio
async def test_unknown_task():
    with pytest.raises(ValueError, match="Unknown task"):
        await run_task("summarize", "text", FakeGateway([FINISH]))


@pytest.mark.asyncio
@pytest.mark.parametrize("max_steps", [0, -1])
async def test_non_positive_max_steps_rejected_before_any_model_call(max_steps):
    llm = FakeGateway(["rambling"])
    with pytest.raises(ValueError, match="max_steps"):
        await run_task("polish", "text", llm, max_steps=max_steps)
    assert llm.complete_calls == []


def test_zero_input_limit_is_honoured():
    goal = build_goal(TASKS["de_ai"], "some text", {}, max_input_chars=0)
    assert "[... truncated: input exceeded 0 characters]" in goal
    assert "some text" not in goal


def test_negative_input_limit_rejected():
    with pytest.raises(ValueError, match="max_input_chars"):
        build_goal(TASKS["de_ai"], "text", {}, max_input_chars=-5)
