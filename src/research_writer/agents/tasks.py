"""Task entry points: one goal template plus a tool subset per editing task."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

from research_writer.agents.react_agent import ReActAgent, StepCallback
from research_writer.config import get_task_max_steps, settings
from research_writer.models.agent_schemas import AgentResult
from research_writer.prompts.prompt_layer import render_prompt
from research_writer.services.llm_service import LLMGateway
from research_writer.tools import Tool, ToolRegistry
from research_writer.tools.writing_tools import (
    create_analyze_tools,
    create_caption_tools,
    create_compress_tools,
    create_de_ai_tools,
    create_expand_tools,
    create_logic_tools,
    create_polish_tools,
    create_review_tools,
    create_translate_tools,
)

logger = logging.getLogger(__name__)

CAPTION_MAX_STEPS = 3


def _clause(prefix: str, value: Any) -> str:
    return f"{prefix}{value}" if value else ""


@dataclass(frozen=True)
class TaskDefinition:
    name: str
    description: str
    create_tools: Callable[[LLMGateway], list[Tool]]
    fields: Callable[[dict[str, Any]], dict[str, str]]
    parameters: tuple[str, ...] = ()
    required: tuple[str, ...] = ()
    # None means Settings.agent_max_steps
    max_steps: int | None = None

    @property
    def template(self) -> str:
        return f"goal_{self.name}"


TASKS: dict[str, TaskDefinition] = {
    t.name: t
    for t in [
        TaskDefinition(
            name="polish",
            description="Deep-polish academic text to publication standard for a target venue.",
            create_tools=create_polish_tools,
            fields=lambda p: {
                "venue_clause": _clause(" for ", p.get("venue")),
                "lang": p.get("lang") or "English",
            },
            parameters=("venue", "lang"),
        ),
        TaskDefinition(
            name="translate",
            description="Translate academic text while preserving terminology and LaTeX.",
            create_tools=create_translate_tools,
            fields=lambda p: {
                "source_lang": p["source_lang"],
                "target_lang": p["target_lang"],
                "domain_clause": _clause(" in the domain of ", p.get("domain")),
            },
            parameters=("source_lang", "target_lang", "domain"),
            required=("source_lang", "target_lang"),
        ),
        TaskDefinition(
            name="compress",
            description="Reduce word count while preserving all critical information.",
            create_tools=create_compress_tools,
            fields=lambda p: {"words": str(p.get("words") or 50)},
            parameters=("words",),
        ),
        TaskDefinition(
            name="expand",
            description="Expand text with depth and logical connections, without padding.",
            create_tools=create_expand_tools,
            fields=lambda p: {"words": str(p.get("words") or 50)},
            parameters=("words",),
        ),
        TaskDefinition(
            name="de_ai",
            description="Remove AI-generated writing signatures.",
            create_tools=create_de_ai_tools,
            fields=lambda p: {},
        ),
        TaskDefinition(
            name="check_logic",
            description="Red-line review for contradictions, terminology drift and logical gaps.",
            create_tools=create_logic_tools,
            fields=lambda p: {"focus_clause": _clause(", focusing on ", p.get("focus"))},
            parameters=("focus",),
        ),
        TaskDefinition(
            name="caption",
            description="Generate publication-quality figure or table captions.",
            create_tools=create_caption_tools,
            fields=lambda p: {"kind": p.get("kind") or "figure"},
            parameters=("kind",),
            max_steps=CAPTION_MAX_STEPS,
        ),
        TaskDefinition(
            name="review",
            description="Simulate a rigorous peer review for a target venue.",
            create_tools=create_review_tools,
            fields=lambda p: {
                "venue": p["venue"],
                "strictness": p.get("strictness") or "rigorous but fair",
            },
            parameters=("venue", "strictness"),
            required=("venue",),
        ),
        TaskDefinition(
            name="analyze",
            description="Comprehensive quality analysis combining the pattern scan with model judgement.",
            create_tools=create_analyze_tools,
            fields=lambda p: {},
        ),
    ]
}


def truncate_source(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + f"\n\n[... truncated: input exceeded {limit} characters]"


def build_goal(
    task: TaskDefinition,
    text: str,
    params: dict[str, Any],
    max_input_chars: int | None = None,
) -> str:
    unknown = sorted(k for k, v in params.items() if k not in task.parameters and v is not None)
    if unknown:
        raise ValueError(f"Unknown parameter(s) for {task.name}: {', '.join(unknown)}")
    missing = [k for k in task.required if not params.get(k)]
    if missing:
        raise ValueError(f"Task {task.name} requires: {', '.join(missing)}")

    limit = max_input_chars if max_input_chars is not None else settings.max_input_chars
    if limit < 0:
        raise ValueError(f"max_input_chars must be >= 0, got {limit}")
    return render_prompt(task.template, text=truncate_source(text, limit), **task.fields(params))


async def run_task(
    name: str,
    text: str,
    llm: LLMGateway,
    *,
    max_steps: int | None = None,
    callback: StepCallback | None = None,
    timeout: float | None = None,
    max_input_chars: int | None = None,
    **params: Any,
) -> AgentResult:
    if name not in TASKS:
        raise ValueError(f"Unknown task '{name}'. Available: {', '.join(TASKS)}")
    task = TASKS[name]

    goal = build_goal(task, text, params, max_input_chars=max_input_chars)
    steps = (
        max_steps
        if max_steps is not None
        else get_task_max_steps(name, task.max_steps or settings.agent_max_steps)
    )
    registry = ToolRegistry(task.create_tools(llm))

    logger.info("Running task %s (%d chars, %d max steps)", name, len(text), steps)
    agent = ReActAgent(llm=llm, registry=registry, max_steps=steps, callback=callback)
    return await agent.run(goal, timeout=timeout if timeout is not None else settings.agent_timeout)


async def polish(
    text: str, llm: LLMGateway, *, venue: str | None = None, lang: str | None = None, **kwargs: Any
) -> AgentResult:
    return await run_task("polish", text, llm, venue=venue, lang=lang, **kwargs)


async def translate(
    text: str,
    llm: LLMGateway,
    *,
    source_lang: str,
    target_lang: str,
    domain: str | None = None,
    **kwargs: Any,
) -> AgentResult:
    return await run_task(
        "translate",
        text,
        llm,
        source_lang=source_lang,
        target_lang=target_lang,
        domain=domain,
        **kwargs,
    )


async def compress(text: str, llm: LLMGateway, *, words: int = 50, **kwargs: Any) -> AgentResult:
    return await run_task("compress", text, llm, words=words, **kwargs)


async def expand(text: str, llm: LLMGateway, *, words: int = 50, **kwargs: Any) -> AgentResult:
    return await run_task("expand", text, llm, words=words, **kwargs)


async def de_ai(text: str, llm: LLMGateway, **kwargs: Any) -> AgentResult:
    return await run_task("de_ai", text, llm, **kwargs)


async def check_logic(
    text: str, llm: LLMGateway, *, focus: str | None = None, **kwargs: Any
) -> AgentResult:
    return await run_task("check_logic", text, llm, focus=focus, **kwargs)


async def caption(
    description: str, llm: LLMGateway, *, kind: str = "figure", **kwargs: Any
) -> AgentResult:
    return await run_task("caption", description, llm, kind=kind, **kwargs)


async def review(
    text: str, llm: LLMGateway, *, venue: str, strictness: str | None = None, **kwargs: Any
) -> AgentResult:
    return await run_task("review", text, llm, venue=venue, strictness=strictness, **kwargs)


async def analyze(text: str, llm: LLMGateway, **kwargs: Any) -> AgentResult:
    return await run_task("analyze", text, llm, **kwargs)
