"""Tests for the Thought/Action/Final Answer reply parser."""

from __future__ import annotations

from research_writer.agents.parser import (
    FinalAnswer,
    ToolAction,
    Unparsed,
    parse_agent_response,
)


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------

def test_simple_action():
    parsed = parse_agent_response(
        "Thought: count it\nAction: word_count\nAction Input: Hello world."
    )
    assert parsed == ToolAction(thought="count it", tool="word_count", tool_input="Hello world.")


def test_action_input_is_not_mistaken_for_action():
    parsed = parse_agent_response("Action Input: some text\nAction: word_count")
    assert isinstance(parsed, ToolAction)
    assert parsed.tool == "word_count"
    assert parsed.tool_input == "some text"


def test_action_name_is_trimmed():
    parsed = parse_agent_response("Thought: x\n   Action:    apply_fixes   \nAction Input: y")
    assert isinstance(parsed, ToolAction)
    assert parsed.tool == "apply_fixes"


def test_multiline_action_input_stops_at_observation():
    text = (
        "Thought: fix the paragraph\n"
        "Action: apply_fixes\n"
        "Action Input:   First line.\n"
        "Second line.\n"
        "\n"
        "Third line after a blank.   \n"
        "Observation: hallucinated output\n"
        "more hallucination"
    )
    parsed = parse_agent_response(text)
    assert isinstance(parsed, ToolAction)
    assert parsed.tool_input == "First line.\nSecond line.\n\nThird line after a blank."


def test_action_input_stops_at_next_thought():
    parsed = parse_agent_response(
        "Action: word_count\nAction Input: alpha\nbeta\nThought: later thinking"
    )
    assert isinstance(parsed, ToolAction)
    assert parsed.tool_input == "alpha\nbeta"


def test_action_without_input_has_empty_input():
    parsed = parse_agent_response("Thought: just run it\nAction: word_count")
    assert isinstance(parsed, ToolAction)
    assert parsed.tool_input == ""


def test_first_action_wins():
    parsed = parse_agent_response(
        "Action: analyze_issues\nAction Input: a\nAction: apply_fixes\nAction Input: b"
    )
    assert isinstance(parsed, ToolAction)
    assert parsed.tool == "analyze_issues"
    assert parsed.tool_input == "a"


def test_multiline_thought():
    parsed = parse_agent_response(
        "Thought: I should first\ncount the words.\nAction: word_count\nAction Input: x"
    )
    assert isinstance(parsed, ToolAction)
    assert parsed.thought == "I should first\ncount the words."


# ---------------------------------------------------------------------------
# Final answers
# ---------------------------------------------------------------------------

def test_final_answer():
    parsed = parse_agent_response("Thought: done\nFinal Answer: Hello world. (2 words)")
    assert parsed == FinalAnswer(thought="done", answer="Hello world. (2 words)")


def test_final_answer_is_unbounded_and_keeps_markers_inside():
    text = (
        "Thought: done\n"
        "Final Answer: Part 1 [Polished Text]: The text.\n"
        "\n"
        "Part 2 [Modification Log]:\n"
        "1. Action: replaced a word"
    )
    parsed = parse_agent_response(text)
    assert isinstance(parsed, FinalAnswer)
    assert parsed.answer == (
        "Part 1 [Polished Text]: The text.\n\nPart 2 [Modification Log]:\n1. Action: replaced a word"
    )


def test_final_answer_beats_earlier_action():
    text = (
        "Thought: maybe a tool\n"
        "Action: word_count\n"
        "Action Input: abc\n"
        "Final Answer: the answer"
    )
    parsed = parse_agent_response(text)
    assert isinstance(parsed, FinalAnswer)
    assert parsed.answer == "the answer"
    assert parsed.thought == "maybe a tool"


def test_final_answer_marker_mid_line():
    parsed = parse_agent_response("Thought: all set. Final Answer: 42")
    assert isinstance(parsed, FinalAnswer)
    assert parsed.answer == "42"
    assert parsed.thought == "all set."


def test_empty_final_answer_counts_as_absent():
    parsed = parse_agent_response("Thought: hmm\nAction: word_count\nAction Input: hi\nFinal Answer:   ")
    assert isinstance(parsed, ToolAction)
    assert parsed.tool_input == "hi"


# ---------------------------------------------------------------------------
# Non-actionable replies
# ---------------------------------------------------------------------------

def test_thought_only_is_unparsed():
    assert parse_agent_response("Thought: still thinking") == Unparsed(thought="still thinking")


def test_free_text_is_unparsed_with_empty_thought():
    assert parse_agent_response("I am not following the format at all.") == Unparsed(thought="")


def test_empty_reply():
    assert parse_agent_response("") == Unparsed(thought="")


def test_blank_action_name_is_unparsed():
    parsed = parse_agent_response("Thought: t\nAction:   \nAction Input: x")
    assert isinstance(parsed, Unparsed)
    assert parsed.thought == "t"
