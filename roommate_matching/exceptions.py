"""
Error taxonomy for the roommate matching engine.

Only two error kinds originate in the core:
- MalformedAnswerSet: a survey answer set that must not be scored
- InvalidWeightConfiguration: a field weight table that must not be loaded

FetchError belongs to the candidate pool boundary (data_loading), not
the core, but shares the base class so callers can catch everything
from this package in one place.
"""

from typing import Any, Optional


class RoommateMatchingError(Exception):
    """Base class for all errors raised by this package."""


class MalformedAnswerSet(RoommateMatchingError, ValueError):
    """
    A survey answer set is missing a field or has a value outside [1, 5].

    Attributes:
        field: Name of the offending field, if a single field is at fault
        value: The offending value, if any
    """

    def __init__(self, message: str, field: Optional[str] = None, value: Any = None):
        super().__init__(message)
        self.field = field
        self.value = value


class InvalidWeightConfiguration(RoommateMatchingError, ValueError):
    """The field weight table is incomplete, out of range, or does not sum to 1."""


class FetchError(RoommateMatchingError):
    """A candidate pool source could not produce its candidates."""
