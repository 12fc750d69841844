"""Johnathan: a streaming, tool-using chat agent for the terminal.

The agent streams answers from a remote completion service, decodes the
model's tool requests, runs them against locally registered tools and
loops until the model produces a final answer.
"""

from johnathan._version import __version__

# Configuration
from johnathan.models.config import AgentConfig

# Conversation model
from johnathan.models.content import (
    BlocksContent,
    Message,
    Role,
    TextBlock,
    TextContent,
    ToolResultBlock,
    ToolUseBlock,
)

# Protocols and output types
from johnathan.protocols import ChatResponse, ToolCall, Transport

# Streaming
from johnathan.llm import AnthropicClient, StreamAggregator, aggregate_stream, decode_events

# Tools
from johnathan.toolkit import (
    FunctionTool,
    GetTimeTool,
    Tool,
    ToolExecutor,
    ToolRegistry,
    ToolResult,
    default_registry,
)

# Orchestration
from johnathan.orchestrator import Orchestrator, StepResult

# Exceptions
from johnathan.exceptions import (
    AgentError,
    ContentValidationError,
    LLMClientError,
    LLMConfigError,
    LLMResponseError,
    OrchestratorError,
    ProtocolDecodeError,
    ToolError,
    ToolLoopExceededError,
    TransportError,
    UnknownToolError,
)

__all__ = [
    "__version__",
    "AgentConfig",
    "BlocksContent",
    "Message",
    "Role",
    "TextBlock",
    "TextContent",
    "ToolResultBlock",
    "ToolUseBlock",
    "ChatResponse",
    "ToolCall",
    "Transport",
    "AnthropicClient",
    "StreamAggregator",
    "aggregate_stream",
    "decode_events",
    "FunctionTool",
    "GetTimeTool",
    "Tool",
    "ToolExecutor",
    "ToolRegistry",
    "ToolResult",
    "default_registry",
    "Orchestrator",
    "StepResult",
    "AgentError",
    "ContentValidationError",
    "LLMClientError",
    "LLMConfigError",
    "LLMResponseError",
    "OrchestratorError",
    "ProtocolDecodeError",
    "ToolError",
    "ToolLoopExceededError",
    "TransportError",
    "UnknownToolError",
]
