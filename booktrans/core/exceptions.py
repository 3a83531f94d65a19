"""
Exception hierarchy for booktrans.

Errors are split by how far they are allowed to travel: part-level errors
(ParseError) stay inside a single task, translation errors are absorbed by
the retrying translator, and job-level errors (DeadlineExceeded,
ContainerError) abort the run before anything is written.
"""

from __future__ import annotations
from typing import Optional, Dict, Any, List


class BookTransError(Exception):
    """Base exception for all booktrans errors."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        recoverable: bool = False,
        suggestion: Optional[str] = None
    ):
        """
        Initialize error.

        Args:
            message: Human-readable error message
            details: Additional error details
            recoverable: Whether the job can continue after this error
            suggestion: Suggested fix or workaround
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable
        self.suggestion = suggestion

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for JSON serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
            "recoverable": self.recoverable,
            "suggestion": self.suggestion
        }

    def __str__(self) -> str:
        result = self.message
        if self.suggestion:
            result += f"\nSuggestion: {self.suggestion}"
        return result


class ParseError(BookTransError):
    """Raised when a part's content cannot be decoded or parsed."""

    def __init__(self, part_id: str, message: str, original_error: Optional[Exception] = None):
        details = {
            "part_id": part_id,
            "original_error": str(original_error) if original_error else None
        }
        super().__init__(
            f"Part '{part_id}' could not be parsed: {message}",
            details,
            recoverable=True,
            suggestion="The part is left untranslated; check its declared encoding."
        )
        self.part_id = part_id
        self.original_error = original_error


class TranslationFailure(BookTransError):
    """Raised by a backend when a single translate call fails."""

    def __init__(
        self,
        backend: str,
        message: str,
        original_error: Optional[Exception] = None,
        status_code: Optional[int] = None
    ):
        details = {
            "backend": backend,
            "status_code": status_code,
            "original_error": str(original_error) if original_error else None
        }
        super().__init__(f"Backend '{backend}' failed: {message}", details, recoverable=True)
        self.backend = backend
        self.original_error = original_error
        self.status_code = status_code


class RateLimitError(TranslationFailure):
    """Raised when the translation service answers with HTTP 429."""

    def __init__(self, backend: str, message: str = "rate limit exceeded (HTTP 429)"):
        super().__init__(backend, message, status_code=429)
        self.suggestion = "Lower the number of workers or wait before retrying."


class ReassemblyMismatch(BookTransError):
    """Raised when a translated batch does not split into one part per unit."""

    def __init__(self, expected: int, actual: int):
        super().__init__(
            f"Translated batch split into {actual} parts, expected {expected}",
            {"expected": expected, "actual": actual},
            recoverable=True
        )
        self.expected = expected
        self.actual = actual


class DeadlineExceeded(BookTransError):
    """Raised when not every part task finished before the job deadline."""

    def __init__(self, deadline: float, pending: List[str]):
        """
        Initialize deadline error.

        Args:
            deadline: Deadline in seconds that expired
            pending: Part IDs whose tasks had not finished
        """
        message = (
            f"Timed out after {deadline:.0f}s with {len(pending)} part(s) unfinished; "
            "nothing was written"
        )
        super().__init__(
            message,
            {"deadline": deadline, "pending": pending},
            recoverable=False,
            suggestion="Increase --deadline or reduce the size of the book."
        )
        self.deadline = deadline
        self.pending = pending


class ContainerError(BookTransError):
    """Raised when the document container cannot be read or written."""

    def __init__(self, path: str, message: str, original_error: Optional[Exception] = None):
        details = {
            "path": path,
            "original_error": str(original_error) if original_error else None
        }
        super().__init__(f"{message}: {path}", details, recoverable=False)
        self.path = path
        self.original_error = original_error


class ConfigurationError(BookTransError):
    """Raised when configuration is invalid."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        invalid_value: Optional[Any] = None,
        valid_values: Optional[List[Any]] = None
    ):
        """
        Initialize configuration error.

        Args:
            message: Error message
            config_key: Configuration key that's invalid
            invalid_value: Invalid value provided
            valid_values: List of valid values
        """
        details = {
            "config_key": config_key,
            "invalid_value": invalid_value,
            "valid_values": valid_values
        }

        suggestion = None
        if config_key and valid_values:
            suggestion = f"Valid values for {config_key}: {', '.join(map(str, valid_values))}"
        elif config_key:
            suggestion = f"Check configuration for '{config_key}'"

        super().__init__(message, details, recoverable=False, suggestion=suggestion)
        self.config_key = config_key
        self.invalid_value = invalid_value
        self.valid_values = valid_values
