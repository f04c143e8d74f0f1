"""Specifications: named, composable predicates that can generate examples.

This module contains the specification algebra:
- Specification: a predicate with a name and an optional example source
- And / Or: conjunction and disjunction of two specifications
- WithExamples: a specification with literal examples or a generator attached
- as_spec(): normalize a raw predicate or a Specification

Example sources are LazySequences assembled when a specification is built.
generate() pulls from a cursor created on first use, owned by the instance.
"""

import inspect
import logging
import re
from typing import Any, Callable, Iterator, List, Optional, Union

from dataspec.core.config import get_spec_config
from dataspec.core.errors import (
    ExampleExhaustedError,
    NoExamplesError,
    SkipLimitExceeded,
    ValidationFailed,
)
from dataspec.core.report import ErrorEntry, ErrorTree, is_ok, list_errors, print_value
from dataspec.core.sequences import FiniteSequence, FunctionSource, LazySequence

logger = logging.getLogger(__name__)

Predicate = Callable[[Any], Any]
"""Function deciding validity from the truthiness of its result. May raise."""

PredicateOrSpec = Union[Predicate, "Specification"]

_LAMBDA_PATTERN = re.compile(r"\blambda\b\s*[\w\s,*=]*:")


def _lambda_source(predicate: Predicate) -> Optional[str]:
    """Extract ``lambda ...: ...`` from the source line(s) defining predicate."""
    try:
        source = inspect.getsource(predicate)
    except (OSError, TypeError):
        return None

    match = _LAMBDA_PATTERN.search(source)
    if match is None:
        return None
    start = match.start()

    depth = 0
    quote = None
    end = len(source)
    for i in range(start, len(source)):
        char = source[i]
        if quote:
            if char == quote and source[i - 1] != "\\":
                quote = None
        elif char in "'\"":
            quote = char
        elif char in "([{":
            depth += 1
        elif char in ")]}":
            if depth == 0:
                end = i
                break
            depth -= 1
        elif char in ",#" and depth == 0:
            end = i
            break
        elif char == "\n" and depth == 0:
            end = i
            break

    return " ".join(source[start:end].split())


def describe_predicate(predicate: Predicate) -> str:
    """Default name of a predicate.

    Named functions use their ``__name__``, lambdas their source text
    (``lambda n: n > 0``). Anything else falls back to repr().
    """
    name = getattr(predicate, "__name__", None)
    if name == "<lambda>":
        return _lambda_source(predicate) or repr(predicate)
    if name:
        return name
    return repr(predicate)


def as_spec(predicate_or_spec: PredicateOrSpec, name: Optional[str] = None) -> "Specification":
    """Wrap a raw predicate in a Specification, or return a Specification as-is."""
    if isinstance(predicate_or_spec, Specification):
        return predicate_or_spec
    if not callable(predicate_or_spec):
        raise TypeError(
            f"expected a predicate or Specification, got {type(predicate_or_spec).__name__}"
        )
    return Specification(predicate_or_spec, name)


class Specification:
    """Named predicate with optional example generation.

    Specifications are immutable: and_(), or_(), examples() and generator()
    return new instances. The only mutable state is the generation cursor,
    created by the first generate() call and advanced by every later one. It
    is not synchronized; callers that generate concurrently should use
    new_cursor() instead.

    Attributes:
        predicate: Function deciding validity (truthy result means valid)
        name: Name used in error messages and composed names
        example_source: LazySequence of examples (empty if none attached)

    Example:
        >>> positive = Specification(lambda n: n > 0)
        >>> positive.errors(-1)
        ['-1 does not satisfy specification lambda n: n > 0']
        >>> positive.examples(1, 2, 3).generate() in (1, 2, 3)
        True
    """

    def __init__(
        self,
        predicate: Predicate,
        name: Optional[str] = None,
        example_source: Optional[LazySequence] = None,
    ):
        self.predicate = predicate
        self.name = name or describe_predicate(predicate)
        self.example_source = example_source if example_source is not None else FiniteSequence([])
        self._cursor: Optional[Iterator[Any]] = None

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name})"

    def errors(self, value: Any) -> ErrorTree:
        """Describe why value does not satisfy this specification.

        Never raises: a predicate that raises counts as a failure.

        Returns:
            Empty list if value is valid, otherwise an ErrorTree
        """
        try:
            valid = self.predicate(value)
        except Exception as e:
            logger.debug(f"Predicate of {self.name} raised {type(e).__name__}: {e}")
            return [f"{print_value(value)} throws error on specification {self.name}"]
        if valid:
            return []
        return [f"{print_value(value)} does not satisfy specification {self.name}"]

    def is_valid(self, value: Any) -> bool:
        """Return True if value satisfies this specification."""
        return is_ok(self.errors(value))

    def validate(self, value: Any) -> bool:
        """Return True if value is valid.

        Raises:
            ValidationFailed: With the ErrorTree of value
        """
        errors = self.errors(value)
        if is_ok(errors):
            return True
        raise ValidationFailed(errors)

    def explain_errors(self, value: Any) -> Optional[List[ErrorEntry]]:
        """Flattened (path, message) list for value, or None if it is valid."""
        errors = self.errors(value)
        if is_ok(errors):
            return None
        return list_errors(errors)

    def and_(self, other: PredicateOrSpec) -> "And":
        """Conjunction with another specification or raw predicate.

        Raises:
            ExampleExhaustedError: If both sides have examples but none
                satisfies both
        """
        return And(self, as_spec(other))

    def or_(self, other: PredicateOrSpec) -> "Or":
        """Disjunction with another specification or raw predicate."""
        return Or(self, as_spec(other))

    def __and__(self, other: PredicateOrSpec) -> "And":
        return self.and_(other)

    def __rand__(self, other: PredicateOrSpec) -> "And":
        return as_spec(other).and_(self)

    def __or__(self, other: PredicateOrSpec) -> "Or":
        return self.or_(other)

    def __ror__(self, other: PredicateOrSpec) -> "Or":
        return as_spec(other).or_(self)

    def has_examples(self) -> bool:
        """Return True if an example source that can produce values is attached."""
        return self.example_source is not None and not self.example_source.is_empty()

    def must_have_examples(self) -> None:
        """Raise NoExamplesError unless an example source is attached."""
        if not self.has_examples():
            raise NoExamplesError(self.name)

    def examples(self, *values: Any) -> "WithExamples":
        """Attach literal examples, drawn uniformly at random with replacement.

        Raises:
            ValidationFailed: If any example does not satisfy this specification
        """
        for value in values:
            self.validate(value)
        logger.debug(f"Attached {len(values)} examples to {self.name}")
        return WithExamples(self, FiniteSequence(values).random())

    def generator(self, fn: Callable[[], Any]) -> "WithExamples":
        """Attach a function called afresh for every generated example.

        A sample of its output is validated right away.

        Raises:
            ValidationFailed: If a sampled value does not satisfy this specification
        """
        samples = get_spec_config().generator_samples
        for _ in range(samples):
            self.validate(fn())
        logger.debug(f"Attached generator {describe_predicate(fn)} to {self.name} ({samples} samples checked)")
        return WithExamples(self, FunctionSource(fn))

    def new_cursor(self) -> Iterator[Any]:
        """Independent cursor over this specification's examples.

        Raises:
            NoExamplesError: If no example source is attached
        """
        self.must_have_examples()
        return iter(self.example_source)

    def generate(self) -> Any:
        """Next example from this instance's generation cursor.

        Raises:
            NoExamplesError: If no example source is attached
            ExampleExhaustedError: If filtering examples was given up
        """
        self.must_have_examples()
        if self._cursor is None:
            logger.debug(f"Creating generation cursor for {self.name}")
            self._cursor = self.new_cursor()
        try:
            return next(self._cursor)
        except StopIteration:
            self._cursor = None
            raise NoExamplesError(self.name) from None
        except SkipLimitExceeded as e:
            self._cursor = None
            raise self._exhausted(e) from e
        except Exception:
            # A generator that raised is closed; start over on the next call
            self._cursor = None
            raise

    def _exhausted(self, error: SkipLimitExceeded) -> ExampleExhaustedError:
        logger.error(f"No suitable example found for {self.name}")
        return ExampleExhaustedError(
            f"no suitable example found for {self.name} after {error.max_skip} "
            "attempts, provide explicit examples",
            details=error.details,
        )


class And(Specification):
    """Conjunction: valid iff both sides are valid.

    Errors are the concatenation of both sides' errors. Examples are drawn
    from both sides at random and kept only if they satisfy both. The source
    is checked once on construction, so incompatible sides fail right away with
    ExampleExhaustedError instead of on the first generate().
    """

    def __init__(self, left: Specification, right: Specification):
        """Initialize the conjunction and check its examples once.

        Args:
            left: First specification
            right: Second specification

        Raises:
            ExampleExhaustedError: If no example satisfies both sides
        """
        self.left = left
        self.right = right
        source = right.example_source.random_zip(left.example_source)
        super().__init__(
            self._satisfies_both,
            name=f"{left.name} and {right.name}",
            example_source=source.filter(self._satisfies_both),
        )
        if self.has_examples():
            self._check_examples()

    def _satisfies_both(self, value: Any) -> bool:
        return self.left.is_valid(value) and self.right.is_valid(value)

    def _check_examples(self) -> None:
        try:
            next(iter(self.example_source), None)
        except SkipLimitExceeded as e:
            raise self._exhausted(e) from e

    def errors(self, value: Any) -> ErrorTree:
        return self.left.errors(value) + self.right.errors(value)


class Or(Specification):
    """Disjunction: valid iff either side is valid.

    When both sides fail a single combined message is reported; the sides'
    own errors are not included. Examples exist only if both sides have them,
    and are drawn from either side at random.
    """

    def __init__(self, left: Specification, right: Specification):
        """Initialize the disjunction.

        Args:
            left: First specification
            right: Second specification
        """
        self.left = left
        self.right = right
        source = None
        if left.has_examples() and right.has_examples():
            source = left.example_source.random_zip(right.example_source)
        super().__init__(
            self._satisfies_either,
            name=f"{left.name} or {right.name}",
            example_source=source,
        )

    def _satisfies_either(self, value: Any) -> bool:
        return self.left.is_valid(value) or self.right.is_valid(value)

    def errors(self, value: Any) -> ErrorTree:
        if is_ok(self.left.errors(value)):
            return []
        if is_ok(self.right.errors(value)):
            return []
        return [f"{print_value(value)} does not satisfy specification {self.name}"]

    def generate(self) -> Any:
        self.left.must_have_examples()
        self.right.must_have_examples()
        return super().generate()


class WithExamples(Specification):
    """A specification with an attached example source.

    Validation is delegated to the wrapped specification unchanged.
    """

    def __init__(self, spec: Specification, example_source: LazySequence):
        """Initialize the wrapper.

        Args:
            spec: Specification used for validation and naming
            example_source: LazySequence the examples are drawn from
        """
        self.spec = spec
        super().__init__(spec.predicate, name=spec.name, example_source=example_source)

    def errors(self, value: Any) -> ErrorTree:
        return self.spec.errors(value)
