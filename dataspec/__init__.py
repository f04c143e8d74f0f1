"""
dataspec: composable data specifications

Declare predicates over data, compose them with and/or and structural
combinators, validate values against the result, and generate example values
that satisfy it for property-based testing.
"""

from typing import Mapping, Optional

from dataspec.core.errors import (
    ExampleExhaustedError,
    ExhaustionError,
    NoExamplesError,
    SkipLimitExceeded,
    ValidationFailed,
)
from dataspec.core.spec import PredicateOrSpec, Specification, as_spec
from dataspec.core.structural import ArraySpec, ObjectSpec

__version__ = "1.0.0"


def spec(predicate: PredicateOrSpec, name: Optional[str] = None) -> Specification:
    """Specification from a predicate. A Specification is returned unchanged."""
    return as_spec(predicate, name)


def object_of(fields: Mapping[str, PredicateOrSpec], name: Optional[str] = None) -> ObjectSpec:
    """Specification of a mapping with one specification per field."""
    return ObjectSpec(fields, name)


def array_of(element: PredicateOrSpec) -> ArraySpec:
    """Specification of a list whose every element satisfies ``element``."""
    return ArraySpec(element)


__all__ = [
    "__version__",
    "spec",
    "object_of",
    "array_of",
    "Specification",
    "ValidationFailed",
    "ExhaustionError",
    "ExampleExhaustedError",
    "SkipLimitExceeded",
    "NoExamplesError",
]
