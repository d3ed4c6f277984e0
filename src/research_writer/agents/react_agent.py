"""ReAct-style agentic loop over a Thought/Action/Observation text protocol."""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable, Protocol

from research_writer.agents.parser import FinalAnswer, ToolAction, parse_agent_response
from research_writer.models.agent_schemas import (
    AgentResult,
    AgentStep,
    AgentTimeoutError,
    ChatMessage,
    LLMResponse,
)
from research_writer.prompts.prompt_layer import render_prompt
from research_writer.services.llm_service import LLMGateway
from research_writer.tools import Tool, ToolRegistry

logger = logging.getLogger(__name__)

DEFAULT_MAX_STEPS = 5

CORRECTION_PROMPT = "Please use a tool (Action + Action Input) or provide your Final Answer."
FORCE_ANSWER_PROMPT = "Maximum steps reached. Provide your Final Answer now."


class StepCallback(Protocol):
    def on_step_start(self, step: int, max_steps: int) -> None: ...
    def on_thinking(self, text: str) -> None: ...
    def on_tool_call(self, name: str, tool_input: str) -> None: ...
    def on_tool_result(self, name: str, result: str) -> None: ...
    def on_finish(self, text: str, steps: int, model_calls: int) -> None: ...


class NullCallback:
    def on_step_start(self, step: int, max_steps: int) -> None: ...
    def on_thinking(self, text: str) -> None: ...
    def on_tool_call(self, name: str, tool_input: str) -> None: ...
    def on_tool_result(self, name: str, result: str) -> None: ...
    def on_finish(self, text: str, steps: int, model_calls: int) -> None: ...


def build_system_prompt(registry: ToolRegistry) -> str:
    return render_prompt("agent_system", tool_descriptions=registry.describe())


class ReActAgent:
    """Drives the model through at most ``max_steps`` reason/act/observe turns.

    Each turn makes one model call. A turn ends the run (Final Answer),
    runs one tool and records an AgentStep, or sends a corrective nudge
    when the reply carries neither. If the budget runs out the model gets
    one last forced-answer turn, and its raw text is the answer of last
    resort. Tool failures and unknown tools come back as observations;
    only gateway errors and timeouts escape ``run``.
    """

    def __init__(
        self,
        llm: LLMGateway,
        registry: ToolRegistry,
        max_steps: int = DEFAULT_MAX_STEPS,
        callback: StepCallback | None = None,
    ) -> None:
        if max_steps < 1:
            raise ValueError(f"max_steps must be >= 1, got {max_steps}")
        self.llm = llm
        self.registry = registry
        self.max_steps = max_steps
        self.cb: StepCallback = callback or NullCallback()

    async def run(self, goal: str, timeout: float | None = None) -> AgentResult:
        if timeout is None:
            return await self._run(goal)
        try:
            return await asyncio.wait_for(self._run(goal), timeout)
        except asyncio.TimeoutError as e:
            logger.warning("Agent run exceeded %.1fs, cancelled", timeout)
            raise AgentTimeoutError(f"Agent run exceeded {timeout}s") from e

    async def _run(self, goal: str) -> AgentResult:
        system_prompt = build_system_prompt(self.registry)
        messages: list[ChatMessage] = [
            ChatMessage(role="user", content=f"Goal: {goal}\n\nBegin."),
        ]
        steps: list[AgentStep] = []
        model_calls = 0

        for turn in range(self.max_steps):
            self.cb.on_step_start(turn + 1, self.max_steps)

            response = await self.llm.complete(system_prompt, messages)
            model_calls += 1
            messages.append(ChatMessage(role="assistant", content=response.text))

            parsed = parse_agent_response(response.text)
            if parsed.thought:
                self.cb.on_thinking(parsed.thought)

            if isinstance(parsed, FinalAnswer):
                logger.info("Final answer after %d steps (%d model calls)", len(steps), model_calls)
                return self._finish(steps, parsed.answer, response, model_calls)

            if isinstance(parsed, ToolAction):
                self.cb.on_tool_call(parsed.tool, parsed.tool_input)
                observation = await self.registry.execute(parsed.tool, parsed.tool_input)
                self.cb.on_tool_result(parsed.tool, observation)
                steps.append(
                    AgentStep(
                        thought=parsed.thought,
                        action=parsed.tool,
                        action_input=parsed.tool_input,
                        observation=observation,
                    )
                )
                messages.append(
                    ChatMessage(role="user", content=f"Observation: {observation}\n\nContinue.")
                )
            else:
                logger.debug("Turn %d: reply had neither an action nor a final answer", turn + 1)
                messages.append(ChatMessage(role="user", content=CORRECTION_PROMPT))

        logger.warning("Agent hit max steps (%d), forcing a final answer", self.max_steps)
        messages.append(ChatMessage(role="user", content=FORCE_ANSWER_PROMPT))
        response = await self.llm.complete(system_prompt, messages)
        model_calls += 1

        parsed = parse_agent_response(response.text)
        if parsed.thought:
            self.cb.on_thinking(parsed.thought)
        answer = parsed.answer if isinstance(parsed, FinalAnswer) else response.text
        return self._finish(steps, answer, response, model_calls)

    def _finish(
        self,
        steps: list[AgentStep],
        answer: str,
        response: LLMResponse,
        model_calls: int,
    ) -> AgentResult:
        self.cb.on_finish(answer, len(steps), model_calls)
        return AgentResult(
            steps=tuple(steps),
            final_answer=answer,
            total_steps=len(steps),
            provider=response.provider,
            model=response.model,
        )


async def run_agent(
    goal: str,
    tools: Iterable[Tool],
    llm: LLMGateway,
    max_steps: int = DEFAULT_MAX_STEPS,
    callback: StepCallback | None = None,
    timeout: float | None = None,
) -> AgentResult:
    """Build a registry from ``tools`` and run one agent loop on ``goal``."""
    agent = ReActAgent(llm=llm, registry=ToolRegistry(tools), max_steps=max_steps, callback=callback)
    return await agent.run(goal, timeout=timeout)
