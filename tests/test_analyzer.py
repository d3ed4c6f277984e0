"""Tests for the offline pattern analyzer."""

from __future__ import annotations

import pytest

from research_writer.analyzer import (
    analyze_paper,
    count_syllables,
    format_text,
    readability_grade,
)
from research_writer.models.schemas import Severity


def _messages(result, fragment: str) -> list[str]:
    return [i.message for i in result.issues if fragment in i.message]


def test_result_structure():
    result = analyze_paper("This is a test.")
    assert isinstance(result.overall_score, int)
    assert result.total_issues == len(result.issues)
    assert isinstance(result.sections, list)
    assert result.summary.startswith("Score: ")


def test_detects_passive_voice():
    result = analyze_paper("The experiment was conducted by the team.", checks=["grammar"])
    assert _messages(result, "Passive voice") == ['Passive voice: "was conducted"']


def test_detects_contractions_with_position():
    result = analyze_paper("We can't use this method because it doesn't work.", checks=["tone"])
    contractions = [i for i in result.issues if "Contraction" in i.message]
    assert len(contractions) == 2
    assert contractions[0].line == 1
    assert contractions[0].column == 4
    assert contractions[0].severity is Severity.ERROR


def test_detects_hedging():
    result = analyze_paper("Perhaps this approach is somewhat better.", checks=["tone"])
    assert len(_messages(result, "Hedging")) == 2


def test_detects_informal_language():
    result = analyze_paper("There are a lot of things that basically work.", checks=["tone"])
    assert len(_messages(result, "Informal")) >= 1


def test_detects_mixed_citation_styles():
    text = "As shown by Smith (2023) and confirmed in [1], the results (Johnson & Lee, 2022) are clear."
    result = analyze_paper(text, checks=["citations"])
    mixed = _messages(result, "Mixed citation")
    assert mixed == ["Mixed citation styles detected: APA(1), IEEE(1), inline(1)"]


def test_single_citation_style_is_clean():
    result = analyze_paper("Prior work [1, 2] and [3] agrees.", checks=["citations"])
    assert result.issues == []


def test_missing_citations_is_info():
    result = analyze_paper("No references at all.", checks=["citations"])
    assert len(result.issues) == 1
    assert result.issues[0].severity is Severity.INFO


def test_detects_sections_and_assigns_issues():
    text = "# Introduction\nWe can't stop.\n\n# Methods\nMore text here.\n\n# Results\nFinal text."
    result = analyze_paper(text, checks=["structure", "tone"])

    assert [s.name for s in result.sections] == ["Introduction", "Methods", "Results"]
    intro = result.sections[0]
    assert intro.line_start == 1
    assert intro.line_end == 3
    assert intro.word_count == 3
    assert len(intro.issues) == 1
    assert result.sections[2].line_end == 8


def test_clean_text_scores_high():
    text = (
        "The model achieves state-of-the-art performance on three benchmarks. "
        "We evaluate using standard metrics."
    )
    assert analyze_paper(text).overall_score >= 80


def test_messy_text_scores_lower():
    text = (
        "We can't really do this stuff because it's basically a lot of things that don't work. "
        "Perhaps it's somewhat okay."
    )
    assert analyze_paper(text).overall_score < 80


def test_check_filters():
    text = "We can't do this. The experiment was conducted."
    tone_only = analyze_paper(text, checks=["tone"])
    grammar_only = analyze_paper(text, checks=["grammar"])
    assert {i.check for i in tone_only.issues} == {"tone"}
    assert {i.check for i in grammar_only.issues} == {"grammar"}


def test_summary_and_score():
    result = analyze_paper("We can't stop.", checks=["tone"])
    assert result.overall_score == 95
    assert result.summary == "Score: 95/100 | 1 issues (1 errors, 0 warnings, 0 info) | No sections detected"


def test_score_is_floored_at_zero():
    result = analyze_paper("can't " * 30, checks=["tone"])
    assert result.overall_score == 0


def test_unknown_check_rejected():
    with pytest.raises(ValueError, match="spelling"):
        analyze_paper("text", checks=["spelling"])


def test_syllables_and_readability():
    assert count_syllables("a") == 1
    assert count_syllables("table") == 1
    assert count_syllables("analysis") == 4
    assert readability_grade("") == 0.0
    assert readability_grade("The cat sat. The dog ran.") >= 0.0


def test_format_text_lists_sections_and_issues():
    text = "# Introduction\nWe can't stop."
    report = format_text(analyze_paper(text))
    assert "Research Paper Analysis" in report
    assert "- Introduction (3 words" in report
    assert '[x] L2:4 (tone) Contraction in academic text: "can\'t"' in report
    assert "Suggestion: Expand the contraction" in report


def test_format_text_caps_issue_list():
    report = format_text(analyze_paper("can't " * 40, checks=["tone"]))
    assert "... and 10 more issues" in report
