"""Step callbacks that render an agent run to the terminal or to markdown."""

from __future__ import annotations

import json
from typing import Any, Sequence

from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table
from rich.text import Text

from research_writer.tools import ToolRegistry

# Observations are mostly prose, so the cap is on characters rather than lines.
MAX_OBSERVATION_CHARS = 2000

TOOL_ICONS = {
    "word_count": "🔢",
    "scan_patterns": "🔍",
    "analyze_issues": "🩺",
    "apply_fixes": "✏️ ",
    "validate_result": "✅",
    "analyze_terms": "📖",
    "translate_text": "🌐",
    "verify_translation": "🔁",
    "compress_text": "➖",
    "expand_text": "➕",
    "verify_preservation": "⚖️ ",
    "detect_signatures": "🤖",
    "detect_ai_patterns": "🤖",
    "rewrite_clean": "🧹",
    "scan_contradictions": "⚠️ ",
    "deep_logic_check": "🧠",
    "draft_caption": "🖼 ",
    "refine_caption": "🖼 ",
    "assess_novelty": "💡",
    "check_methodology": "🧪",
    "evaluate_experiments": "📊",
    "draft_review": "📝",
    "score_paper": "💯",
}


def _icon(name: str) -> str:
    return TOOL_ICONS.get(name, "🔧")


def _clip(text: str, limit: int = MAX_OBSERVATION_CHARS) -> str:
    if len(text) <= limit:
        return text
    return f"{text[:limit]}\n... ({len(text) - limit} more characters)"


def _one_line(value: str, limit: int = 120) -> str:
    flat = " ".join(value.split())
    return flat if len(flat) <= limit else flat[:limit] + "..."


def _as_json(text: str) -> str | None:
    """Pretty-printed JSON if ``text`` is a JSON object or array, else None."""
    stripped = text.strip()
    if not stripped.startswith(("{", "[")):
        return None
    try:
        return json.dumps(json.loads(stripped), indent=2, ensure_ascii=False)
    except ValueError:
        return None


class ConsoleCallback:
    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def print_tools(self, registry: ToolRegistry) -> None:
        table = Table(title="Tools for this task", border_style="dim")
        table.add_column("Tool", style="bold cyan", no_wrap=True)
        table.add_column("What it does", style="dim")
        for tool in registry.list_all():
            table.add_row(f"{_icon(tool.name)} {tool.name}", tool.description)
        self.console.print(table)
        self.console.print()

    def on_step_start(self, step: int, max_steps: int) -> None:
        self.console.rule(f"[bold blue]Step {step}/{max_steps}", style="blue")

    def on_thinking(self, text: str) -> None:
        self.console.print(Panel(_clip(text), title="[bold yellow]Thought", border_style="yellow"))

    def on_tool_call(self, name: str, tool_input: str) -> None:
        words = len(tool_input.split())
        self.console.print(f"  {_icon(name)} [bold cyan]{name}[/] [dim]({words} words in)[/]")
        if tool_input:
            self.console.print(f"      [dim]{_one_line(tool_input)}[/]")

    def on_tool_result(self, name: str, result: str) -> None:
        pretty = _as_json(result)
        body: Any
        if pretty is not None:
            body = Syntax(_clip(pretty), "json", theme="ansi_dark", word_wrap=True)
        else:
            body = Text(_clip(result), style="dim")
        self.console.print(Panel(body, title=f"[dim]observation from {name}", border_style="dim"))

    def on_finish(self, text: str, steps: int, model_calls: int) -> None:
        self.console.print()
        self.console.rule("[bold green]Done", style="green")
        self.console.print(f"[dim]{steps} tool steps, {model_calls} model calls[/dim]")


class MarkdownCallback:
    """Records a run as a markdown transcript for ``--transcript``."""

    def __init__(self) -> None:
        self._step = 0
        self._sections: list[str] = []
        self._calls: list[tuple[int, str, int]] = []
        self._answer = ""
        self._summary = ""

    def on_step_start(self, step: int, max_steps: int) -> None:
        self._step = step

    def on_thinking(self, text: str) -> None:
        quoted = "\n> ".join(text.splitlines())
        self._sections.append(f"### Step {self._step}\n\n> {quoted}")

    def on_tool_call(self, name: str, tool_input: str) -> None:
        self._calls.append((self._step, name, len(tool_input.split())))
        self._sections.append(f"**Action:** `{name}`\n\n```text\n{_clip(tool_input)}\n```")

    def on_tool_result(self, name: str, result: str) -> None:
        pretty = _as_json(result)
        fence = "json" if pretty is not None else "text"
        body = _clip(pretty if pretty is not None else result).replace("```", "'''")
        self._sections.append(f"**Observation:**\n\n```{fence}\n{body}\n```")

    def on_finish(self, text: str, steps: int, model_calls: int) -> None:
        self._answer = text
        self._summary = f"{steps} tool steps, {model_calls} model calls"

    def build_transcript(self, title: str) -> str:
        lines = [f"# {title}", "", f"_{self._summary or 'run did not finish'}_", ""]
        if self._calls:
            lines += ["| step | tool | input words |", "|---|---|---|"]
            lines += [f"| {step} | `{name}` | {words} |" for step, name, words in self._calls]
            lines.append("")
        lines += [*(f"{section}\n" for section in self._sections)]
        lines += ["## Final Answer", "", self._answer or "_No final answer._", ""]
        return "\n".join(lines)


class CompositeCallback:
    """Fans every event out to each callback in order."""

    def __init__(self, callbacks: Sequence[Any]) -> None:
        self._callbacks = list(callbacks)

    def _emit(self, event: str, *args: Any) -> None:
        for cb in self._callbacks:
            getattr(cb, event)(*args)

    def on_step_start(self, step: int, max_steps: int) -> None:
        self._emit("on_step_start", step, max_steps)

    def on_thinking(self, text: str) -> None:
        self._emit("on_thinking", text)

    def on_tool_call(self, name: str, tool_input: str) -> None:
        self._emit("on_tool_call", name, tool_input)

    def on_tool_result(self, name: str, result: str) -> None:
        self._emit("on_tool_result", name, result)

    def on_finish(self, text: str, steps: int, model_calls: int) -> None:
        self._emit("on_finish", text, steps, model_calls)
