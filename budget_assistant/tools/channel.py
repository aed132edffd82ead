"""
Tool Channels

A channel is anything that can invoke a named tool and hand back a
ToolResult. The direct query gateway only talks to channels, so a
remote tool server can replace the in-process registry without
touching the gateway.
"""

from abc import ABC, abstractmethod
from typing import Any

from budget_assistant.tools.registry import ToolRegistry, ToolResult


class ToolChannel(ABC):
    """Abstract tool invocation channel."""

    @abstractmethod
    def call_tool(self, name: str, arguments: dict[str, Any]) -> ToolResult:
        """
        Invoke one tool.

        Raises:
            Exception: Whatever the transport raises; callers classify it
        """


class LocalToolChannel(ToolChannel):
    """Channel that dispatches straight into an in-process registry."""

    def __init__(self, registry: ToolRegistry):
        self._registry = registry

    def call_tool(self, name: str, arguments: dict[str, Any]) -> ToolResult:
        return self._registry.dispatch(name, arguments)
