"""Editing tools for the writing agents, backed by an LLMGateway."""

from __future__ import annotations

from research_writer.analyzer import analyze_paper, count_words
from research_writer.services.llm_service import LLMGateway
from research_writer.tools import Tool


def _llm_tool(llm: LLMGateway, name: str, description: str, instruction: str) -> Tool:
    """A tool that sends its input to the model under a fixed instruction."""

    async def execute(text: str) -> str:
        response = await llm.generate(instruction, text)
        return response.text

    return Tool(name=name, description=description, execute=execute)


async def _word_count(text: str) -> str:
    return f"Word count: {count_words(text)}"


async def _scan_patterns(text: str) -> str:
    result = analyze_paper(text)
    return result.model_dump_json(include={"overall_score", "total_issues", "issues", "summary"})


def create_word_count_tool() -> Tool:
    return Tool(
        name="word_count",
        description="Count words in the text. No LLM call needed.",
        execute=_word_count,
    )


def create_scan_patterns_tool() -> Tool:
    return Tool(
        name="scan_patterns",
        description=(
            "Run the offline pattern scanner (passive voice, hedging, informal words, "
            "contractions, citation styles). Returns JSON with a 0-100 score and issues. "
            "No LLM call needed."
        ),
        execute=_scan_patterns,
    )


def _analyze_issues(llm: LLMGateway) -> Tool:
    return _llm_tool(
        llm,
        "analyze_issues",
        "Analyze text for grammar, tone, AI signatures, and style issues. Returns JSON issues list.",
        "Analyze this academic text for issues. Return JSON array: "
        "[{category, description, severity, location}]. "
        "Categories: grammar, tone, ai-signature, style.",
    )


def _verify_preservation(llm: LLMGateway) -> Tool:
    return _llm_tool(
        llm,
        "verify_preservation",
        (
            "Compare an original and a rewritten text (give both, labelled ORIGINAL: and REWRITTEN:) "
            "and report lost or added claims, citations and numbers."
        ),
        "Compare the ORIGINAL and REWRITTEN texts. Return JSON: "
        '{"preserved": boolean, "lostClaims": [], "addedClaims": [], "citationChanges": []}',
    )


def create_polish_tools(llm: LLMGateway) -> list[Tool]:
    return [
        _analyze_issues(llm),
        _llm_tool(
            llm,
            "apply_fixes",
            "Apply fixes to text based on identified issues. Returns corrected text.",
            "You are an expert academic editor. Apply the requested fixes. "
            "Return ONLY the corrected text.",
        ),
        _llm_tool(
            llm,
            "validate_result",
            "Validate polished text against publication standards. Returns pass/fail with details.",
            "Validate this text against publication standards. Return JSON: "
            '{"pass": boolean, "remainingIssues": number, "details": []}',
        ),
        create_word_count_tool(),
    ]


def create_translate_tools(llm: LLMGateway) -> list[Tool]:
    return [
        _llm_tool(
            llm,
            "analyze_terms",
            "Identify technical terms, idioms, and LaTeX commands that need careful translation.",
            "Identify: technical terms, idioms, LaTeX commands to preserve. "
            "Return JSON: {technicalTerms: [], latexCommands: []}",
        ),
        _llm_tool(
            llm,
            "translate_text",
            "Translate academic text preserving LaTeX and citations. Returns translated text.",
            "Translate this academic text. Preserve all LaTeX, citations, math. "
            "Return ONLY the translated text.",
        ),
        _llm_tool(
            llm,
            "verify_translation",
            "Verify translation accuracy by back-translating key sentences.",
            "Verify translation accuracy. Return JSON: "
            '{accuracyScore: 1-10, issues: [], verdict: "accurate"|"needs-revision"}',
        ),
        create_word_count_tool(),
    ]


def create_compress_tools(llm: LLMGateway) -> list[Tool]:
    return [
        create_word_count_tool(),
        _llm_tool(
            llm,
            "compress_text",
            "Shorten text by a target number of words (state the target first) keeping every claim.",
            "You are an expert academic editor. Compress the text by the requested number of words. "
            "Preserve every factual claim, result, citation and all LaTeX. "
            "Return ONLY the compressed text.",
        ),
        _verify_preservation(llm),
    ]


def create_expand_tools(llm: LLMGateway) -> list[Tool]:
    return [
        create_word_count_tool(),
        _llm_tool(
            llm,
            "expand_text",
            "Lengthen text by a target number of words (state the target first) with real content.",
            "You are a senior academic writer. Expand the text by the requested number of words "
            "with transitions, clarified assumptions and motivation. No filler, no new citations. "
            "Return ONLY the expanded text.",
        ),
        _verify_preservation(llm),
    ]


def create_de_ai_tools(llm: LLMGateway) -> list[Tool]:
    return [
        create_scan_patterns_tool(),
        _llm_tool(
            llm,
            "detect_signatures",
            "Scan text for AI-generated writing signatures (leverage, delve, tapestry, etc.).",
            "Scan for AI writing signatures: overused AI words, mechanical connectors, "
            "uniform sentence length. Return JSON: "
            "{signatures: [{word, count, type}], totalFound, severityScore: 1-10}",
        ),
        _llm_tool(
            llm,
            "rewrite_clean",
            "Rewrite text removing all AI signatures while preserving academic content.",
            "Rewrite to remove AI signatures. Replace AI vocabulary with natural alternatives. "
            "Vary sentence length. Return ONLY the rewritten text.",
        ),
    ]


def create_logic_tools(llm: LLMGateway) -> list[Tool]:
    return [
        _llm_tool(
            llm,
            "scan_contradictions",
            "Scan for contradictions, terminology inconsistency, and logical gaps.",
            "Scan for contradictions, terminology inconsistency, logical gaps, number "
            "inconsistencies. Return JSON: "
            "{issues: [{type, severity, location, description, suggestion}], summary}",
        ),
        _llm_tool(
            llm,
            "deep_logic_check",
            "Deep analysis of arguments: evidence support, logical fallacies, missing qualifications.",
            "Deep logic analysis. For each claim: identify evidence, check support, find fallacies. "
            "Return JSON: {claims: [{claim, evidence, supported, issues}], overallCoherence: 1-10}",
        ),
    ]


def create_caption_tools(llm: LLMGateway) -> list[Tool]:
    return [
        _llm_tool(
            llm,
            "draft_caption",
            "Draft a figure or table caption from a description.",
            "Write a publication-quality caption from this description. Start with a one-sentence "
            "summary, give specifics (axes, units, datasets), state the key takeaway, use present "
            "tense. Return ONLY the caption.",
        ),
        _llm_tool(
            llm,
            "refine_caption",
            "Tighten a draft caption and produce short, long and LaTeX variants as JSON.",
            "Refine this caption so it is self-contained and precise. Return JSON: "
            '{"shortCaption": "...", "longCaption": "...", "latex": "\\caption{...}", "style": "..."}',
        ),
    ]


def create_review_tools(llm: LLMGateway) -> list[Tool]:
    return [
        _llm_tool(
            llm,
            "assess_novelty",
            "Evaluate the novelty of the paper's contribution. Returns novelty score and justification.",
            "Evaluate novelty. Return JSON: "
            "{noveltyScore: 1-10, justification, verdict: novel|incremental|derivative}",
        ),
        _llm_tool(
            llm,
            "check_methodology",
            "Check if methodology is sound and reproducible.",
            "Check methodology. Return JSON: "
            "{soundnessScore: 1-10, reproducibilityScore: 1-10, issues: [], strengths: []}",
        ),
        _llm_tool(
            llm,
            "evaluate_experiments",
            "Evaluate experimental design, baselines, and ablations.",
            "Evaluate experiments. Return JSON: {experimentScore: 1-10, missingBaselines: [], "
            "missingAblations: [], strengths: [], weaknesses: []}",
        ),
        _llm_tool(
            llm,
            "draft_review",
            "Draft a structured peer review from accumulated findings.",
            "Draft a structured peer review. Format: Summary, Strengths, Weaknesses "
            "(Critical/Minor), Questions, Rating X/10, Strategic Advice.",
        ),
    ]


def create_analyze_tools(llm: LLMGateway) -> list[Tool]:
    return [
        create_scan_patterns_tool(),
        _analyze_issues(llm),
        _llm_tool(
            llm,
            "detect_ai_patterns",
            "Detect AI writing patterns in the text.",
            "Detect AI writing patterns. Return JSON: "
            "{patterns: [{word, index, type: signature_word|mechanical_connector}], count}",
        ),
        _llm_tool(
            llm,
            "score_paper",
            "Score the paper overall (0-100) with breakdown by category.",
            "Score this paper 0-100. Return JSON: {overallScore, breakdown: "
            "{grammar, tone, structure, citations, aiSignatures}, summary}",
        ),
    ]
