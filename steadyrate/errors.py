from __future__ import annotations


class InvalidConfigurationError(ValueError):
    """Raised when a rate limiter is built (or re-rated) with unusable settings."""
