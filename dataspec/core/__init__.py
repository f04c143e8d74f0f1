"""
Core components of dataspec.

This package contains the specification algebra, the lazy sequences that
generate examples, error reporting and configuration.
"""

from dataspec.core.errors import (
    ExampleExhaustedError,
    ExhaustionError,
    InfiniteSequenceError,
    NoExamplesError,
    SkipLimitExceeded,
    ValidationFailed,
)
from dataspec.core.spec import And, Or, Specification, WithExamples, as_spec
from dataspec.core.structural import ArraySpec, ObjectSpec

__all__ = [
    "And",
    "ArraySpec",
    "ExampleExhaustedError",
    "ExhaustionError",
    "InfiniteSequenceError",
    "NoExamplesError",
    "ObjectSpec",
    "Or",
    "SkipLimitExceeded",
    "Specification",
    "ValidationFailed",
    "WithExamples",
    "as_spec",
]
