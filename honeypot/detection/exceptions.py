"""
Custom exceptions for the detection pipeline.

This module defines specific exception types for rule compilation,
result construction and attempt-counter storage to provide better
error handling and debugging capabilities.
"""

import logging

logger = logging.getLogger(__name__)


class DetectionError(Exception):
    """Base exception for detection errors."""

    def __init__(self, message: str, pattern: str = None, content_snippet: str = None):
        self.pattern = pattern
        self.content_snippet = content_snippet[:100] if content_snippet else None
        super().__init__(message)
        logger.error(f"Detection error: {message}")


class RegexComplexityError(DetectionError):
    """Raised when a rule pattern exceeds complexity limits."""

    def __init__(self, pattern: str, limit: int):
        message = f"Regex pattern exceeds complexity limit ({limit} chars/groups): {pattern[:50]}..."
        super().__init__(message, pattern=pattern)


class PatternCompilationError(DetectionError):
    """Raised when a rule pattern fails to compile."""

    def __init__(self, pattern: str, error: str):
        message = f"Failed to compile regex pattern: {error}"
        super().__init__(message, pattern=pattern)


class InvalidResultError(DetectionError):
    """Raised when a detection result is built from invalid fields."""

    def __init__(self, message: str):
        super().__init__(message)


class CounterStoreError(DetectionError):
    """Raised when the attempt counter backend cannot be reached."""

    def __init__(self, key: str, error: str):
        message = f"Attempt counter failure for {key}: {error}"
        super().__init__(message, content_snippet=key)
