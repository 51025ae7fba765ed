"""
Exception types shared across services.

Decode errors are absorbed close to the codec, render failures surface as
HTTP 500s, and configuration errors stop the process at startup.
"""
from typing import Optional


class LetterDecodeError(ValueError):
    """A share token could not be turned back into a letter."""

    def __init__(self, reason: str, token: Optional[str] = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.token = token


class RenderFailure(RuntimeError):
    """Rasterizing a card failed; no image must be returned."""


class ConfigurationError(ValueError):
    """A card variant or setting holds an unusable value."""
