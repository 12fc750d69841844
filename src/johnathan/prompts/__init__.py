"""Prompt templates used by the agent."""

from johnathan.prompts.system import DEFAULT_SYSTEM_PROMPT

__all__ = ["DEFAULT_SYSTEM_PROMPT"]
