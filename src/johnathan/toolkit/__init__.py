"""Agent toolkit: tool definitions, the executor protocol and the registry."""

from johnathan.toolkit.builtin import GetTimeTool, default_registry
from johnathan.toolkit.models import Tool, ToolResult
from johnathan.toolkit.registry import FunctionTool, ToolExecutor, ToolRegistry

__all__ = [
    "Tool",
    "ToolResult",
    "ToolExecutor",
    "ToolRegistry",
    "FunctionTool",
    "GetTimeTool",
    "default_registry",
]
