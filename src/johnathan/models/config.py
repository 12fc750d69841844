"""Configuration models for Johnathan.

AgentConfig carries the process-wide constants (endpoint, protocol
version, model) together with per-conversation limits. It is injected
into the client and the orchestrator at construction time.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from johnathan.prompts.system import DEFAULT_SYSTEM_PROMPT

DEFAULT_API_URL = "https://api.anthropic.com/v1/messages"
DEFAULT_API_VERSION = "2023-06-01"
DEFAULT_MODEL = "claude-sonnet-4-20250514"


class AgentConfig(BaseModel):
    """Agent configuration.

    Attributes:
        api_url: Messages endpoint of the completion service.
        api_version: Value sent in the ``anthropic-version`` header.
        model: Model identifier sent with every request.
        max_tokens: Maximum tokens the model may generate per round.
        max_rounds: Maximum request rounds per conversation turn. A turn
            that still requests tools after this many rounds fails.
        system_prompt: System prompt sent with every request. Empty
            string omits it.
        timeout: HTTP timeout in seconds.
        stream: Use the streaming endpoint (True) or buffered responses.
    """

    model_config = ConfigDict(frozen=True)

    api_url: str = DEFAULT_API_URL
    api_version: str = DEFAULT_API_VERSION
    model: str = DEFAULT_MODEL
    max_tokens: int = Field(default=1024, ge=1)
    max_rounds: int = Field(default=10, ge=1)
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    timeout: float = Field(default=120.0, gt=0.0)
    stream: bool = True
