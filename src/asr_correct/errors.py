"""Error types for asr-correct.

Provides:
- Exception hierarchy with handling categories
- Display formatting for the command line
"""

from __future__ import annotations

from enum import Enum


class ErrorCategory(str, Enum):
    """Categories of errors for handling decisions."""

    VALIDATION = "validation"  # Bad call arguments
    CONFIGURATION = "configuration"  # Bad config - fail at setup
    RESOURCE = "resource"  # Missing corpus or dictionary file
    STORAGE = "storage"  # Failed write
    INTERNAL = "internal"  # Bug in code


class CorrectorError(Exception):
    """Base exception for asr-correct errors.

    Attributes:
        message: Human-readable error message
        category: Error category for handling
        context: Additional context information
        recoverable: Whether the caller can fall back and continue
    """

    category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        context: dict | None = None,
        recoverable: bool = False,
    ):
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self.recoverable = recoverable

    def __str__(self) -> str:
        if self.context:
            return f"{self.message} (context: {self.context})"
        return self.message


class ValidationError(CorrectorError):
    """Invalid argument passed to an operation.

    Examples: sub-sequence range outside the token sequence.
    """

    category = ErrorCategory.VALIDATION

    def __init__(self, message: str, context: dict | None = None):
        super().__init__(message, context, recoverable=True)


class ConfigurationError(CorrectorError):
    """Invalid configuration, raised when the configuration is built.

    Examples: empty word separator, negative rejection threshold.
    """

    category = ErrorCategory.CONFIGURATION

    def __init__(self, message: str, context: dict | None = None):
        super().__init__(message, context, recoverable=False)


class ResourceError(CorrectorError):
    """Corpus or dictionary resource not found or unreadable."""

    category = ErrorCategory.RESOURCE

    def __init__(self, message: str, context: dict | None = None):
        super().__init__(message, context, recoverable=False)


class StorageError(CorrectorError):
    """Writing a corpus or configuration file failed."""

    category = ErrorCategory.STORAGE

    def __init__(self, message: str, context: dict | None = None):
        super().__init__(message, context, recoverable=False)


def format_error_for_display(error: Exception) -> str:
    """Format an error message for user display.

    Args:
        error: Error to format

    Returns:
        Human-readable error message
    """
    if isinstance(error, CorrectorError):
        category = error.category.value

        if error.context:
            context_str = ", ".join(f"{k}={v}" for k, v in error.context.items())
            return f"[{category}] {error.message} ({context_str})"

        return f"[{category}] {error.message}"

    return f"[error] {type(error).__name__}: {error}"
