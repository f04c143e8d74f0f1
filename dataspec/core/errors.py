"""Exceptions raised by specifications and example sequences."""

from typing import Any, List, Optional, Tuple

from dataspec.core.report import ErrorTree, format_errors, list_errors


class ValidationFailed(Exception):
    """Raised when a value does not satisfy a specification.

    This is the only exception raised for ordinary validation. It is raised by
    ``Specification.validate()`` and when examples or generator output supplied
    at declaration time turn out to be invalid.

    Attributes:
        errors: The ErrorTree returned by ``Specification.errors()``
        entries: Flattened list of (path, message) pairs in traversal order
        message: Combined human-readable message, one line per entry
    """

    def __init__(self, errors: ErrorTree) -> None:
        """Initialize ValidationFailed exception.

        Args:
            errors: Non-empty ErrorTree describing the failures
        """
        self.errors = errors
        self.entries: List[Tuple[List[str], str]] = list_errors(errors)
        self.message = "Specification not satisfied:\n" + format_errors(errors)
        super().__init__(self.message)


class ExhaustionError(Exception):
    """Base class for fatal exhaustion of a bounded example search.

    Exhaustion signals structurally incompatible predicates or examples
    (e.g. the conjunction of two disjoint predicates). It is never retried
    and is deliberately not a ValidationFailed.

    Attributes:
        message: Description of the failure
        details: Additional debugging information (optional)
    """

    def __init__(self, message: str, details: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class SkipLimitExceeded(ExhaustionError):
    """Raised by a filtered sequence after too many consecutive rejections."""

    def __init__(self, max_skip: int, details: Optional[str] = None) -> None:
        super().__init__("max skip reached", details)
        self.max_skip = max_skip


class ExampleExhaustedError(ExhaustionError):
    """Raised when a conjunction cannot find an example satisfying both sides."""


class NoExamplesError(Exception):
    """Raised when generate() is called on a specification without examples.

    Attributes:
        spec_name: Name of the specification that was asked for an example
    """

    def __init__(self, spec_name: str) -> None:
        super().__init__(f"no example provided for {spec_name}")
        self.spec_name = spec_name


class InfiniteSequenceError(ValueError):
    """Raised when an infinite sequence would have to be materialized."""

    def __init__(self, sequence: Any) -> None:
        super().__init__(
            f"cannot turn infinite sequence {type(sequence).__name__} into a list"
        )
        self.sequence = sequence
