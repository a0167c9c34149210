"""Exception types raised by the apidoc pipeline."""

from __future__ import annotations


class ApiDocError(RuntimeError):
    """Base class for fatal apidoc failures."""


class ConfigError(ApiDocError):
    """Raised when the configuration is invalid or cannot be parsed."""


class AccessError(ApiDocError):
    """Raised when the input root cannot be read."""

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class GenerationCancelled(ApiDocError):
    """Raised when a run is cancelled between file units."""


__all__ = ["AccessError", "ApiDocError", "ConfigError", "GenerationCancelled"]
