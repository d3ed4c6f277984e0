import asyncio
import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel

app = typer.Typer(name="research-writer", help="Analyze and rewrite academic papers.")
console = Console()

FORMATS = ("text", "json")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(name)s | %(levelname)s | %(message)s")


def _read_input(file: Path) -> str:
    if not file.is_file():
        console.print(f"[red]File not found: {file}[/red]")
        raise typer.Exit(1)
    return file.read_text(encoding="utf-8")


def _check_format(output_format: str) -> None:
    if output_format not in FORMATS:
        console.print(f"[red]Unknown format '{output_format}'. Use one of: {', '.join(FORMATS)}[/red]")
        raise typer.Exit(1)


def _run_task(
    task: str,
    text: str,
    params: dict,
    max_steps: int,
    output_format: str,
    transcript: Path | None,
    verbose: bool,
) -> None:
    """Run one agent task and print its result."""
    from research_writer.agents.console_callback import (
        CompositeCallback,
        ConsoleCallback,
        MarkdownCallback,
    )
    from research_writer.agents.tasks import TASKS, run_task
    from research_writer.models.agent_schemas import AgentTimeoutError, LLMGatewayError
    from research_writer.services.llm_service import LLMGateway
    from research_writer.tools import ToolRegistry

    _setup_logging(verbose)
    _check_format(output_format)

    md_cb = MarkdownCallback() if transcript else None
    try:
        llm = LLMGateway()
        callbacks: list = []
        if output_format == "text":
            console_cb = ConsoleCallback(console)
            console_cb.print_tools(ToolRegistry(TASKS[task].create_tools(llm)))
            callbacks.append(console_cb)
        if md_cb is not None:
            callbacks.append(md_cb)

        result = asyncio.run(
            run_task(
                task,
                text,
                llm,
                max_steps=max_steps or None,
                callback=CompositeCallback(callbacks),
                **params,
            )
        )
    except LLMGatewayError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(2)
    except AgentTimeoutError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(2)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    if md_cb is not None:
        transcript.write_text(md_cb.build_transcript(f"research-writer {task}"), encoding="utf-8")
        if output_format == "text":
            console.print(f"[dim]Transcript written to {transcript}[/dim]")

    if output_format == "json":
        typer.echo(result.model_dump_json(indent=2))
        return

    console.print(
        Panel(
            result.final_answer,
            title=(
                f"[bold green]Result ({result.total_steps} steps, "
                f"{result.provider}/{result.model})"
            ),
            border_style="green",
            padding=(0, 1),
        )
    )


MAX_STEPS_OPTION = typer.Option(0, "--max-steps", help="Max agent steps (0 = use config)")
FORMAT_OPTION = typer.Option("text", "--format", help="Output format: text or json")
TRANSCRIPT_OPTION = typer.Option(None, "--transcript", help="Write a markdown log of the agent run")
VERBOSE_OPTION = typer.Option(False, "--verbose", "-v", help="Enable detailed logging")


@app.command()
def analyze(
    file: Path = typer.Argument(..., help="Paper to analyze"),
    checks: str = typer.Option(
        "", "--checks", help="Comma-separated: grammar,tone,citations,structure (default: all)"
    ),
    output_format: str = FORMAT_OPTION,
    agent: bool = typer.Option(False, "--agent", help="Run the model-driven comprehensive analysis"),
    max_steps: int = MAX_STEPS_OPTION,
    transcript: Path | None = TRANSCRIPT_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Score a paper for grammar, tone, citation and structure issues.

    Exits with 0 when the offline score is at least 70, 1 otherwise.
    """
    text = _read_input(file)
    if agent:
        _run_task("analyze", text, {}, max_steps, output_format, transcript, verbose)
        return

    from research_writer.analyzer import analyze_paper, format_text

    _setup_logging(verbose)
    _check_format(output_format)
    selected = [c.strip() for c in checks.split(",") if c.strip()] or None
    try:
        result = analyze_paper(text, checks=selected)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    if output_format == "json":
        typer.echo(result.model_dump_json(indent=2))
    else:
        typer.echo(format_text(result))
    raise typer.Exit(0 if result.overall_score >= 70 else 1)


@app.command()
def polish(
    file: Path = typer.Argument(..., help="Text to polish"),
    venue: str = typer.Option("", "--venue", help='Target venue, e.g. "NeurIPS 2026"'),
    lang: str = typer.Option("English", "--lang", help="Output language"),
    max_steps: int = MAX_STEPS_OPTION,
    output_format: str = FORMAT_OPTION,
    transcript: Path | None = TRANSCRIPT_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Deep-polish academic text to publication standard."""
    params = {"venue": venue or None, "lang": lang}
    _run_task("polish", _read_input(file), params, max_steps, output_format, transcript, verbose)


@app.command()
def translate(
    file: Path = typer.Argument(..., help="Text to translate"),
    source_lang: str = typer.Option(..., "--from", help="Source language, e.g. zh"),
    target_lang: str = typer.Option(..., "--to", help="Target language, e.g. en"),
    domain: str = typer.Option("", "--domain", help='Research domain, e.g. "computer vision"'),
    max_steps: int = MAX_STEPS_OPTION,
    output_format: str = FORMAT_OPTION,
    transcript: Path | None = TRANSCRIPT_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Translate academic text, keeping LaTeX and citations intact."""
    params = {"source_lang": source_lang, "target_lang": target_lang, "domain": domain or None}
    _run_task("translate", _read_input(file), params, max_steps, output_format, transcript, verbose)


@app.command()
def compress(
    file: Path = typer.Argument(..., help="Text to compress"),
    words: int = typer.Option(50, "--words", help="Approximate number of words to remove"),
    max_steps: int = MAX_STEPS_OPTION,
    output_format: str = FORMAT_OPTION,
    transcript: Path | None = TRANSCRIPT_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Cut word count while keeping every claim and citation."""
    _run_task(
        "compress", _read_input(file), {"words": words}, max_steps, output_format, transcript, verbose
    )


@app.command()
def expand(
    file: Path = typer.Argument(..., help="Text to expand"),
    words: int = typer.Option(50, "--words", help="Approximate number of words to add"),
    max_steps: int = MAX_STEPS_OPTION,
    output_format: str = FORMAT_OPTION,
    transcript: Path | None = TRANSCRIPT_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Expand text with substance rather than padding."""
    _run_task(
        "expand", _read_input(file), {"words": words}, max_steps, output_format, transcript, verbose
    )


@app.command("de-ai")
def de_ai(
    file: Path = typer.Argument(..., help="Text to clean"),
    max_steps: int = MAX_STEPS_OPTION,
    output_format: str = FORMAT_OPTION,
    transcript: Path | None = TRANSCRIPT_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Remove AI writing signatures."""
    _run_task("de_ai", _read_input(file), {}, max_steps, output_format, transcript, verbose)


@app.command("check-logic")
def check_logic(
    file: Path = typer.Argument(..., help="Manuscript to check"),
    focus: str = typer.Option("", "--type", help="Focus area, e.g. contradictions"),
    max_steps: int = MAX_STEPS_OPTION,
    output_format: str = FORMAT_OPTION,
    transcript: Path | None = TRANSCRIPT_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Red-line review for contradictions and logical gaps."""
    _run_task(
        "check_logic",
        _read_input(file),
        {"focus": focus or None},
        max_steps,
        output_format,
        transcript,
        verbose,
    )


@app.command()
def caption(
    desc: str = typer.Option(..., "--desc", help="What the figure or table shows"),
    kind: str = typer.Option("figure", "--type", help="figure or table"),
    max_steps: int = MAX_STEPS_OPTION,
    output_format: str = FORMAT_OPTION,
    transcript: Path | None = TRANSCRIPT_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Generate a figure or table caption from a description."""
    if kind not in ("figure", "table"):
        console.print("[red]--type must be 'figure' or 'table'.[/red]")
        raise typer.Exit(1)
    _run_task("caption", desc, {"kind": kind}, max_steps, output_format, transcript, verbose)


@app.command()
def review(
    file: Path = typer.Argument(..., help="Paper to review"),
    venue: str = typer.Option(..., "--venue", help='Target venue, e.g. "ICML 2026"'),
    strictness: str = typer.Option("", "--strictness", help="e.g. lenient, balanced, harsh"),
    max_steps: int = MAX_STEPS_OPTION,
    output_format: str = FORMAT_OPTION,
    transcript: Path | None = TRANSCRIPT_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Simulate a peer review for a target venue."""
    params = {"venue": venue, "strictness": strictness or None}
    _run_task("review", _read_input(file), params, max_steps, output_format, transcript, verbose)


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", help="Host to bind"),
    port: int = typer.Option(8000, help="Port to listen on"),
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Start the HTTP API."""
    import uvicorn

    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(name)s | %(levelname)s | %(message)s")

    from research_writer.server import app as fastapi_app

    uvicorn.run(fastapi_app, host=host, port=port)
