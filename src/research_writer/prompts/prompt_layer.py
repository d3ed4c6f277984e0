"""Goal and system prompt templates, stored as .txt files in templates/."""

from __future__ import annotations

from pathlib import Path

TEMPLATES_DIR = Path(__file__).parent / "templates"

_cache: dict[str, str] = {}


def list_prompts() -> list[str]:
    return sorted(p.stem for p in TEMPLATES_DIR.glob("*.txt"))


def load_prompt(name: str) -> str:
    """Return the raw template ``name`` (no extension), read once and cached.

    Placeholders use ``str.format`` syntax; literal braces are doubled.
    """
    if name not in _cache:
        path = TEMPLATES_DIR / f"{name}.txt"
        if not path.is_file():
            raise FileNotFoundError(
                f"No prompt template '{name}'. Available: {', '.join(list_prompts())}"
            )
        _cache[name] = path.read_text(encoding="utf-8").strip()
    return _cache[name]


def render_prompt(name: str, **kwargs: str) -> str:
    try:
        return load_prompt(name).format(**kwargs)
    except KeyError as e:
        raise ValueError(f"Template '{name}' needs a value for {e}") from None
