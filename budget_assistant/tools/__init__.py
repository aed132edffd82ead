"""Tool registry, channels and the direct query gateway."""

from budget_assistant.tools.registry import (
    TextContent,
    ToolDefinition,
    ToolRegistry,
    ToolResult,
    ToolShape,
    build_budget_tools,
)
from budget_assistant.tools.channel import LocalToolChannel, ToolChannel
from budget_assistant.tools.gateway import BudgetSummaryGateway

__all__ = [
    "BudgetSummaryGateway",
    "LocalToolChannel",
    "TextContent",
    "ToolChannel",
    "ToolDefinition",
    "ToolRegistry",
    "ToolResult",
    "ToolShape",
    "build_budget_tools",
]
