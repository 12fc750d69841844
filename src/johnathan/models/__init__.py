"""Domain models: conversation messages and agent configuration."""

from johnathan.models.config import AgentConfig
from johnathan.models.content import (
    BlocksContent,
    ContentBlock,
    Message,
    Role,
    TextBlock,
    TextContent,
    ToolResultBlock,
    ToolUseBlock,
)

__all__ = [
    "AgentConfig",
    "BlocksContent",
    "ContentBlock",
    "Message",
    "Role",
    "TextBlock",
    "TextContent",
    "ToolResultBlock",
    "ToolUseBlock",
]
