"""Tool plugin system for the agentic loop."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Awaitable, Callable, Iterable

logger = logging.getLogger(__name__)

TOOL_ERROR_PREFIX = "Tool error: "
UNKNOWN_TOOL_PREFIX = "Unknown tool: "


@dataclass(frozen=True)
class Tool:
    name: str
    description: str
    execute: Callable[[str], Awaitable[str]]


class ToolRegistry:
    """Fixed, ordered set of tools for one agent run."""

    def __init__(self, tools: Iterable[Tool] = ()) -> None:
        table: dict[str, Tool] = {}
        for tool in tools:
            if tool.name in table:
                raise ValueError(f"Duplicate tool name '{tool.name}'")
            table[tool.name] = tool
        self._tools = MappingProxyType(table)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def get(self, name: str) -> Tool:
        return self._tools[name]

    def names(self) -> list[str]:
        return list(self._tools)

    def list_all(self) -> list[Tool]:
        return list(self._tools.values())

    def describe(self) -> str:
        """Tool listing for the system prompt, one ``  name: description`` per line."""
        return "\n".join(f"  {t.name}: {t.description}" for t in self._tools.values())

    async def execute(self, name: str, tool_input: str) -> str:
        tool = self._tools.get(name)
        if tool is None:
            return f"{UNKNOWN_TOOL_PREFIX}{name}. Available: {', '.join(self._tools)}"
        try:
            return await tool.execute(tool_input or "")
        except Exception as e:
            logger.error("Tool '%s' failed: %s", name, e, exc_info=True)
            return f"{TOOL_ERROR_PREFIX}{str(e) or e.__class__.__name__}"
