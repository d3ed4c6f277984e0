from __future__ import annotations

import logging
from typing import Sequence

import openai
from openai import AsyncOpenAI
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from research_writer.config import BACKEND_KEY_VARS, BackendConfig, get_backends
from research_writer.models.agent_schemas import (
    ChatMessage,
    EmptyResponseError,
    LLMGatewayError,
    LLMResponse,
    NoBackendConfiguredError,
)

logger = logging.getLogger(__name__)

# Worth another attempt against the same backend before falling through.
_TRANSIENT_ERRORS = (
    openai.APIConnectionError,
    openai.RateLimitError,
    openai.InternalServerError,
)


def _create_openai_client(backend: BackendConfig) -> AsyncOpenAI:
    return AsyncOpenAI(api_key=backend.api_key, base_url=backend.base_url)


def _no_backend_message(backends: Sequence[BackendConfig]) -> str:
    lines = ["No LLM provider available. Set one of these environment variables:"]
    for b in backends:
        env_vars = " / ".join(BACKEND_KEY_VARS.get(b.name, (f"<key for {b.name}>",)))
        lines.append(f"  {env_vars}  (uses {b.model})")
    return "\n".join(lines)


class LLMGateway:
    """Sends a system prompt plus conversation to the first working backend.

    Backends are tried in the order given. Those without an API key are
    skipped; a backend that errors hands over to the next one.
    """

    def __init__(self, backends: Sequence[BackendConfig] | None = None) -> None:
        if backends is None:
            backends = get_backends()
        self._backends = list(backends)
        self._clients: dict[str, AsyncOpenAI] = {}

    @property
    def configured(self) -> list[BackendConfig]:
        return [b for b in self._backends if b.api_key]

    def _client(self, backend: BackendConfig) -> AsyncOpenAI:
        if backend.name not in self._clients:
            self._clients[backend.name] = _create_openai_client(backend)
        return self._clients[backend.name]

    async def generate(self, system_prompt: str, user_text: str) -> LLMResponse:
        return await self.complete(system_prompt, [ChatMessage(role="user", content=user_text)])

    async def complete(
        self, system_prompt: str, messages: Sequence[ChatMessage]
    ) -> LLMResponse:
        configured = self.configured
        if not configured:
            raise NoBackendConfiguredError(_no_backend_message(self._backends))

        failures: list[str] = []
        last_error: Exception | None = None
        for backend in configured:
            try:
                text = await self._call(backend, system_prompt, messages)
            except (openai.OpenAIError, EmptyResponseError) as e:
                logger.warning("Backend '%s' failed: %s", backend.name, e)
                failures.append(f"{backend.name}: {e}")
                last_error = e
                continue
            logger.debug("Backend '%s' answered (%d chars)", backend.name, len(text))
            return LLMResponse(text=text, provider=backend.name, model=backend.model)

        raise LLMGatewayError(
            "All LLM backends failed:\n" + "\n".join(f"  {f}" for f in failures)
        ) from last_error

    @retry(
        retry=retry_if_exception_type(_TRANSIENT_ERRORS),
        stop=stop_after_attempt(3),
        wait=wait_exponential(min=2, max=30),
        reraise=True,
    )
    async def _call(
        self,
        backend: BackendConfig,
        system_prompt: str,
        messages: Sequence[ChatMessage],
    ) -> str:
        api_messages = [{"role": "system", "content": system_prompt}]
        api_messages.extend({"role": m.role, "content": m.content} for m in messages)

        kwargs: dict = {
            "model": backend.model,
            "messages": api_messages,
        }
        if backend.temperature is not None:
            kwargs["temperature"] = backend.temperature
        if backend.max_tokens is not None:
            kwargs["max_tokens"] = backend.max_tokens

        response = await self._client(backend).chat.completions.create(**kwargs)
        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise EmptyResponseError(f"{backend.name} returned no content")
        return content
