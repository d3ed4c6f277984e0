"""Offline pattern analyzer for academic prose.

Scores text for grammar, tone, citation and structure issues with regexes
and a Flesch-Kincaid readability estimate. No model calls.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field

from research_writer.models.schemas import AnalysisResult, Issue, SectionAnalysis, Severity

ALL_CHECKS = ("grammar", "tone", "citations", "structure")

PASSIVE_VOICE = re.compile(r"\b(is|are|was|were|been|being|be)\s+(being\s+)?\w+ed\b", re.IGNORECASE)
WEAK_VERBS = re.compile(r"\b(make|do|get|have|go|take|give|put|use)\b", re.IGNORECASE)
HEDGING = re.compile(
    r"\b(perhaps|maybe|somewhat|slightly|relatively|fairly|rather|quite|possibly|arguably)\b",
    re.IGNORECASE,
)
INFORMAL = re.compile(
    r"\b(a lot|lots of|kind of|sort of|stuff|things|really|very|pretty much|gonna|wanna|gotta"
    r"|basically|actually|obviously)\b",
    re.IGNORECASE,
)
CONTRACTIONS = re.compile(
    r"\b(can't|won't|don't|isn't|aren't|wasn't|weren't|hasn't|haven't|hadn't|doesn't|didn't"
    r"|wouldn't|couldn't|shouldn't|it's|that's|there's|here's|what's|who's|let's|I'm|I've|I'll"
    r"|I'd|we're|we've|we'll|we'd|they're|they've|they'll|they'd|you're|you've|you'll|you'd"
    r"|he's|she's)\b",
    re.IGNORECASE,
)

CITATION_APA = re.compile(r"\([A-Z][a-z]+(?:\s+(?:&|and)\s+[A-Z][a-z]+)*,\s*\d{4}\)")
CITATION_IEEE = re.compile(r"\[\d+(?:,\s*\d+)*\]")
CITATION_INLINE = re.compile(r"[A-Z][a-z]+\s+(?:et\s+al\.\s+)?\(\d{4}\)")

SECTION_HEADER = re.compile(r"^#{1,3}\s+(.+)$|^([A-Z][A-Za-z\s]+)$")

_SENTENCE_SPLIT = re.compile(r"[.!?]+")
_NON_ALPHA = re.compile(r"[^a-z]")


def count_words(text: str) -> int:
    return len(text.split())


def count_syllables(word: str) -> int:
    w = _NON_ALPHA.sub("", word.lower())
    if len(w) <= 2:
        return 1
    count = 0
    prev_vowel = False
    for ch in w:
        is_vowel = ch in "aeiouy"
        if is_vowel and not prev_vowel:
            count += 1
        prev_vowel = is_vowel
    if w.endswith("e") and count > 1:
        count -= 1
    return max(1, count)


def readability_grade(text: str) -> float:
    """Flesch-Kincaid grade level, floored at 0."""
    sentences = [s for s in _SENTENCE_SPLIT.split(text) if s.strip()]
    words = text.split()
    if not sentences or not words:
        return 0.0
    syllables = sum(count_syllables(w) for w in words)
    avg_sentence_len = len(words) / len(sentences)
    avg_syllables = syllables / len(words)
    return max(0.0, 0.39 * avg_sentence_len + 11.8 * avg_syllables - 15.59)


def _pattern_issues(
    lines: list[str],
    pattern: re.Pattern[str],
    check: str,
    severity: Severity,
    message: str,
    suggestion: str | None = None,
) -> list[Issue]:
    issues = []
    for i, line in enumerate(lines):
        for match in pattern.finditer(line):
            issues.append(
                Issue(
                    line=i + 1,
                    column=match.start() + 1,
                    check=check,
                    severity=severity,
                    message=f'{message}: "{match.group(0)}"',
                    suggestion=suggestion,
                )
            )
    return issues


def _citation_issues(lines: list[str]) -> list[Issue]:
    text = "\n".join(lines)
    styles = [
        (name, len(pattern.findall(text)))
        for name, pattern in (
            ("APA", CITATION_APA),
            ("IEEE", CITATION_IEEE),
            ("inline", CITATION_INLINE),
        )
    ]
    used = [(name, n) for name, n in styles if n > 0]

    if len(used) > 1:
        detail = ", ".join(f"{name}({n})" for name, n in used)
        return [
            Issue(
                line=1,
                column=1,
                check="citations",
                severity=Severity.WARNING,
                message=f"Mixed citation styles detected: {detail}",
                suggestion="Use a single citation style throughout the paper",
            )
        ]
    if not used:
        return [
            Issue(
                line=1,
                column=1,
                check="citations",
                severity=Severity.INFO,
                message="No standard citation patterns detected",
                suggestion="Ensure citations follow APA, IEEE, or similar standard format",
            )
        ]
    return []


@dataclass
class _OpenSection:
    name: str
    line_start: int
    lines: list[str] = field(default_factory=list)

    def close(self, line_end: int) -> SectionAnalysis:
        body = " ".join(self.lines)
        return SectionAnalysis(
            name=self.name,
            line_start=self.line_start,
            line_end=line_end,
            word_count=count_words(body),
            readability_grade=readability_grade(body),
        )


def detect_sections(lines: list[str]) -> list[SectionAnalysis]:
    sections: list[SectionAnalysis] = []
    current: _OpenSection | None = None

    for i, line in enumerate(lines):
        match = SECTION_HEADER.match(line)
        if match and 2 < len(line.strip()) < 80:
            if current is not None:
                sections.append(current.close(line_end=i))
            current = _OpenSection(name=(match.group(1) or match.group(2)).strip(), line_start=i + 1)
        elif current is not None:
            current.lines.append(line)

    if current is not None:
        sections.append(current.close(line_end=len(lines)))
    return sections


def analyze_paper(text: str, checks: list[str] | None = None) -> AnalysisResult:
    """Run the selected checks (default: all) and score the text out of 100."""
    selected = list(checks) if checks else list(ALL_CHECKS)
    unknown = [c for c in selected if c not in ALL_CHECKS]
    if unknown:
        raise ValueError(f"Unknown check(s): {', '.join(unknown)}. Valid: {', '.join(ALL_CHECKS)}")

    lines = text.split("\n")
    issues: list[Issue] = []

    if "grammar" in selected:
        issues += _pattern_issues(
            lines, PASSIVE_VOICE, "grammar", Severity.INFO, "Passive voice", "Consider active voice"
        )
        issues += _pattern_issues(
            lines, WEAK_VERBS, "grammar", Severity.INFO, "Weak verb", "Use a more specific verb"
        )

    if "tone" in selected:
        issues += _pattern_issues(
            lines, HEDGING, "tone", Severity.WARNING, "Hedging language", "Be more assertive"
        )
        issues += _pattern_issues(
            lines, INFORMAL, "tone", Severity.WARNING, "Informal language", "Use formal academic tone"
        )
        issues += _pattern_issues(
            lines,
            CONTRACTIONS,
            "tone",
            Severity.ERROR,
            "Contraction in academic text",
            "Expand the contraction",
        )

    if "citations" in selected:
        issues += _citation_issues(lines)

    sections = detect_sections(lines) if "structure" in selected else []

    for issue in issues:
        for section in sections:
            if section.line_start <= issue.line <= section.line_end:
                section.issues.append(issue)
                break

    errors = sum(1 for i in issues if i.severity is Severity.ERROR)
    warnings = sum(1 for i in issues if i.severity is Severity.WARNING)
    infos = sum(1 for i in issues if i.severity is Severity.INFO)
    # Half-up rounding, so 87.5 scores 88.
    score = max(0, math.floor(100 - errors * 5 - warnings * 2 - infos * 0.5 + 0.5))

    summary = " | ".join(
        [
            f"Score: {score}/100",
            f"{len(issues)} issues ({errors} errors, {warnings} warnings, {infos} info)",
            f"{len(sections)} sections detected" if sections else "No sections detected",
        ]
    )
    return AnalysisResult(
        overall_score=score,
        total_issues=len(issues),
        sections=sections,
        issues=issues,
        summary=summary,
    )


MAX_REPORTED_ISSUES = 30

_SEVERITY_ICONS = {Severity.ERROR: "x", Severity.WARNING: "!", Severity.INFO: "-"}


def format_text(result: AnalysisResult) -> str:
    lines = ["", "  Research Paper Analysis", f"  {'=' * 50}", f"  {result.summary}", ""]

    if result.sections:
        lines.append("  Sections:")
        for s in result.sections:
            lines.append(
                f"    - {s.name} ({s.word_count} words, grade {s.readability_grade:.1f}, "
                f"{len(s.issues)} issues)"
            )
        lines.append("")

    if result.issues:
        lines.append("  Issues:")
        for issue in result.issues[:MAX_REPORTED_ISSUES]:
            icon = _SEVERITY_ICONS[issue.severity]
            lines.append(f"    [{icon}] L{issue.line}:{issue.column} ({issue.check}) {issue.message}")
            if issue.suggestion:
                lines.append(f"        Suggestion: {issue.suggestion}")
        if len(result.issues) > MAX_REPORTED_ISSUES:
            lines.append(f"    ... and {len(result.issues) - MAX_REPORTED_ISSUES} more issues")

    return "\n".join(lines)
