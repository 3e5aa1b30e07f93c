"""Custom exceptions for trialign."""

from __future__ import annotations

from typing import Optional


class TrialignError(Exception):
    """Base exception for all trialign errors."""
    pass


class MalformedInputError(TrialignError, ValueError):
    """Exception raised for input that cannot describe a valid alignment graph.

    Covers the wrong number of sequences, symbols outside the scoring
    alphabet, and interchange text that breaks the line format.
    """

    def __init__(
        self,
        message: str,
        line_number: Optional[int] = None,
        line_content: Optional[str] = None,
    ):
        self.line_number = line_number
        self.line_content = line_content

        if line_number is not None:
            message = f"Line {line_number}: {message}"
        if line_content is not None:
            message = f"{message} (content: {line_content[:50]!r})"

        super().__init__(message)


class ResourceExhaustedError(TrialignError):
    """Exception raised when a product graph would exceed a configured ceiling."""

    def __init__(self, resource: str, requested: int, limit: int):
        self.resource = resource
        self.requested = requested
        self.limit = limit
        super().__init__(
            f"{resource} count {requested:,} exceeds the configured ceiling of {limit:,}"
        )
