"""Models for the agentic loop."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, model_validator


class ChatMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: Literal["user", "assistant"]
    content: str


class LLMResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    provider: str
    model: str


class AgentStep(BaseModel):
    """One completed tool dispatch: what the model thought, called and saw."""

    model_config = ConfigDict(frozen=True)

    thought: str = ""
    action: str
    action_input: str = ""
    observation: str


class AgentResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    steps: tuple[AgentStep, ...] = ()
    final_answer: str
    total_steps: int
    provider: str
    model: str

    @model_validator(mode="after")
    def _check_step_count(self) -> AgentResult:
        if self.total_steps != len(self.steps):
            raise ValueError(
                f"total_steps={self.total_steps} does not match {len(self.steps)} recorded steps"
            )
        return self


class ResearchWriterError(Exception):
    """Base class for errors raised by research-writer."""


class LLMGatewayError(ResearchWriterError):
    """Raised when no configured backend produced a response."""


class NoBackendConfiguredError(LLMGatewayError):
    """Raised when none of the backends has a credential."""


class EmptyResponseError(LLMGatewayError):
    """Raised when a backend answers with no content."""


class AgentTimeoutError(ResearchWriterError):
    """Raised when an agent run exceeds its deadline."""
