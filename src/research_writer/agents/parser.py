"""Decoding of Thought / Action / Action Input / Final Answer replies.

The parser is the only place that looks at raw model text. Everything
downstream branches on the variant it returns:

    ToolAction   -- the model wants a tool run
    FinalAnswer  -- the model is done
    Unparsed     -- neither; the loop asks the model to commit

Parsing never raises. Malformed replies degrade to ``Unparsed``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Union

logger = logging.getLogger(__name__)

THOUGHT = "Thought:"
ACTION = "Action:"
ACTION_INPUT = "Action Input:"
FINAL_ANSWER = "Final Answer:"
OBSERVATION = "Observation:"

# ACTION_INPUT is checked before ACTION so the longer marker wins.
_LINE_MARKERS = (THOUGHT, ACTION_INPUT, ACTION, FINAL_ANSWER, OBSERVATION)


@dataclass(frozen=True)
class ToolAction:
    thought: str
    tool: str
    tool_input: str


@dataclass(frozen=True)
class FinalAnswer:
    thought: str
    answer: str


@dataclass(frozen=True)
class Unparsed:
    thought: str


ParsedResponse = Union[ToolAction, FinalAnswer, Unparsed]


def _line_marker(line: str) -> str | None:
    stripped = line.strip()
    for marker in _LINE_MARKERS:
        if stripped.startswith(marker):
            return marker
    return None


def _capture(lines: list[str], start: int, marker: str) -> str:
    """Text after ``marker`` on line ``start`` plus following unmarked lines."""
    first = lines[start].strip()[len(marker):]
    captured = [first]
    for line in lines[start + 1:]:
        if _line_marker(line) is not None:
            break
        captured.append(line)
    return "\n".join(captured).strip()


def _scan(text: str) -> tuple[str, str, str]:
    """Return (thought, action, action_input) from the first of each marker."""
    thought = action = action_input = ""
    seen_thought = seen_action = seen_input = False

    lines = text.split("\n")
    for i, line in enumerate(lines):
        marker = _line_marker(line)
        if marker == THOUGHT and not seen_thought:
            thought = _capture(lines, i, THOUGHT)
            seen_thought = True
        elif marker == ACTION and not seen_action:
            action = line.strip()[len(ACTION):].strip()
            seen_action = True
        elif marker == ACTION_INPUT and not seen_input:
            action_input = _capture(lines, i, ACTION_INPUT)
            seen_input = True
    return thought, action, action_input


def parse_agent_response(text: str) -> ParsedResponse:
    idx = text.find(FINAL_ANSWER)
    if idx != -1:
        answer = text[idx + len(FINAL_ANSWER):].strip()
        if answer:
            thought, action, _ = _scan(text[:idx])
            if action:
                logger.warning(
                    "Reply has both Action '%s' and a Final Answer; dropping the action", action
                )
            return FinalAnswer(thought=thought, answer=answer)

    thought, action, action_input = _scan(text)
    if action:
        return ToolAction(thought=thought, tool=action, tool_input=action_input)
    return Unparsed(thought=thought)
