"""Static API documentation generator for Python and Java sources."""

from __future__ import annotations

from .errors import AccessError, ApiDocError, ConfigError, GenerationCancelled
from .orchestrator import GenerationResult, Orchestrator, PipelineState, generate

__version__ = "0.1.0"

__all__ = [
    "AccessError",
    "ApiDocError",
    "ConfigError",
    "GenerationCancelled",
    "GenerationResult",
    "Orchestrator",
    "PipelineState",
    "generate",
]
