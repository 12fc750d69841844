"""Orchestrator package -- the tool-augmented conversation loop.

Provides the Orchestrator class and its per-step result record.
"""

from johnathan.orchestrator.loop import Orchestrator
from johnathan.orchestrator.models import StepResult

__all__ = ["Orchestrator", "StepResult"]
