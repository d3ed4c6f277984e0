from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    gemini_api_key: str = ""
    google_ai_api_key: str = ""
    openai_api_key: str = ""
    anthropic_api_key: str = ""

    llm_temperature: float = 0.3
    llm_max_tokens: int = 4096

    # Agent settings
    agent_max_steps: int = 5
    agent_timeout: float | None = None
    max_input_chars: int = 15000


settings = Settings()


@dataclass
class BackendConfig:
    name: str
    model: str
    base_url: str
    api_key: str = ""
    temperature: float | None = None
    max_tokens: int | None = None


# Priority order when models.yaml does not reorder them.
DEFAULT_BACKENDS: dict[str, dict[str, str]] = {
    "gemini": {
        "model": "gemini-2.0-flash",
        "base_url": "https://generativelanguage.googleapis.com/v1beta/openai/",
    },
    "openai": {
        "model": "gpt-4o",
        "base_url": "https://api.openai.com/v1",
    },
    "anthropic": {
        "model": "claude-sonnet-4-5-20250929",
        "base_url": "https://api.anthropic.com/v1/",
    },
}

# Environment variables that hold each backend's key, in lookup order.
BACKEND_KEY_VARS: dict[str, tuple[str, ...]] = {
    "gemini": ("GEMINI_API_KEY", "GOOGLE_AI_API_KEY"),
    "openai": ("OPENAI_API_KEY",),
    "anthropic": ("ANTHROPIC_API_KEY",),
}


def _api_key_for(name: str, s: Settings) -> str:
    if name == "gemini":
        return s.gemini_api_key or s.google_ai_api_key
    if name == "openai":
        return s.openai_api_key
    if name == "anthropic":
        return s.anthropic_api_key
    return ""


_models_config_cache: dict | None = None


def _load_models_yaml() -> dict:
    global _models_config_cache
    if _models_config_cache is not None:
        return _models_config_cache

    config_path = os.environ.get("MODELS_CONFIG_PATH", "models.yaml")
    path = Path(config_path)
    if not path.is_file():
        _models_config_cache = {}
        return _models_config_cache

    import yaml

    with open(path) as f:
        _models_config_cache = yaml.safe_load(f) or {}
    return _models_config_cache


def get_backends(s: Settings | None = None) -> list[BackendConfig]:
    """Build the ordered backend list handed to the LLM gateway.

    Keys come from Settings. models.yaml may reorder backends with an
    ``order`` list and override ``model``, ``base_url``, ``temperature``
    and ``max_tokens`` per backend under ``backends:``. A backend listed
    in ``backends:`` but unknown to DEFAULT_BACKENDS must give its own
    ``model``, ``base_url`` and ``api_key_env``.
    """
    s = s or settings
    data = _load_models_yaml()
    overrides = data.get("backends", {}) or {}
    order = data.get("order") or list(DEFAULT_BACKENDS)

    backends: list[BackendConfig] = []
    for name in order:
        base = dict(DEFAULT_BACKENDS.get(name, {}))
        base.update({k: v for k, v in (overrides.get(name) or {}).items() if v is not None})
        if "model" not in base or "base_url" not in base:
            raise ValueError(f"Backend '{name}' needs both 'model' and 'base_url'")

        api_key = _api_key_for(name, s)
        if not api_key and base.get("api_key_env"):
            api_key = os.environ.get(base["api_key_env"], "")

        backends.append(
            BackendConfig(
                name=name,
                model=base["model"],
                base_url=base["base_url"],
                api_key=api_key,
                temperature=base.get("temperature", s.llm_temperature),
                max_tokens=base.get("max_tokens", s.llm_max_tokens),
            )
        )
    return backends


def get_task_max_steps(task: str, default: int) -> int:
    """Step ceiling for a task: models.yaml ``tasks.<task>.max_steps`` or ``default``."""
    data = _load_models_yaml()
    task_cfg = (data.get("tasks") or {}).get(task) or {}
    return int(task_cfg.get("max_steps", default))
