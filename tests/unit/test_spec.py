"""Unit tests for the specification algebra.

Tests cover:
- Validity, error messages and validate()
- Default naming of predicates
- Conjunction and disjunction (errors, names, examples)
- Attaching examples and generators
- Generation cursor behaviour and misuse errors
"""

import random

import pytest

from dataspec import spec
from dataspec.core.errors import (
    ExampleExhaustedError,
    ExhaustionError,
    NoExamplesError,
    SkipLimitExceeded,
    ValidationFailed,
)
from dataspec.core.spec import And, Or, Specification, as_spec, describe_predicate


def is_integer(x):
    return isinstance(x, int) and not isinstance(x, bool)


def explode(x):
    raise RuntimeError("boom")


integer = spec(is_integer)
positive = spec(lambda n: n > 0)


class TestSpecification:
    """Tests for leaf specifications."""

    def test_is_valid(self):
        """Test is_valid on matching and non-matching values."""
        assert integer.is_valid(42) is True
        assert integer.is_valid(1.23) is False

    def test_errors_empty_when_satisfied(self):
        """Test that a valid value has no errors."""
        assert integer.errors(42) == []

    def test_errors_include_function_name(self):
        """Test that messages name the predicate function."""
        errors = integer.errors("abc")
        assert errors == ['"abc" does not satisfy specification is_integer']

    def test_errors_include_lambda_source(self):
        """Test that messages quote the lambda source."""
        errors = positive.errors(-1)
        assert len(errors) == 1
        assert "-1" in errors[0]
        assert "lambda n: n > 0" in errors[0]

    def test_raising_predicate_is_a_failure(self):
        """Test that a raising predicate is reported, not propagated."""
        boom = spec(explode)
        assert boom.is_valid(1) is False
        assert boom.errors(1) == ["1 throws error on specification explode"]

    def test_predicate_error_not_propagated_from_comparison(self):
        """Test a comparison that raises on the wrong type."""
        assert positive.is_valid("abc") is False
        assert "throws error" in positive.errors("abc")[0]

    def test_explicit_name(self):
        """Test that an explicit name replaces the default."""
        even = spec(lambda n: n % 2 == 0, "even")
        assert even.errors(3) == ["3 does not satisfy specification even"]

    def test_validate_returns_true(self):
        """Test that validate returns True for a valid value."""
        assert integer.validate(42) is True

    def test_validate_raises(self):
        """Test that validate raises ValidationFailed with entries."""
        with pytest.raises(ValidationFailed) as exc_info:
            integer.validate(1.23)
        assert exc_info.value.entries == [
            ([], "1.23 does not satisfy specification is_integer")
        ]
        assert "Specification not satisfied:" in str(exc_info.value)

    def test_explain_errors(self):
        """Test explain_errors for valid and invalid values."""
        assert integer.explain_errors(1) is None
        assert integer.explain_errors("x") == [
            ([], '"x" does not satisfy specification is_integer')
        ]

    def test_spec_returns_existing_specification(self):
        """Test that spec() returns a Specification unchanged."""
        assert spec(integer) is integer

    def test_as_spec_rejects_non_callables(self):
        """Test that as_spec rejects values that are not callable."""
        with pytest.raises(TypeError):
            as_spec(42)


class TestDescribePredicate:
    """Tests for default predicate names."""

    def test_named_function(self):
        """Test the name of a plain function."""
        assert describe_predicate(is_integer) == "is_integer"

    def test_builtin(self):
        """Test the name of a builtin."""
        assert describe_predicate(callable) == "callable"

    def test_lambda_in_call(self):
        """Test a parenthesized lambda."""
        fn = (lambda s: len(s) > 5)
        assert describe_predicate(fn) == "lambda s: len(s) > 5"

    def test_lambda_with_nested_call(self):
        """Test a lambda passed inside a call with nested brackets."""
        fn = spec(lambda x: isinstance(x, (int, float)), None).predicate
        assert describe_predicate(fn) == "lambda x: isinstance(x, (int, float))"

    def test_lambda_assigned_to_name_containing_lambda(self):
        """Test that an identifier ending in lambda is not taken for the keyword."""
        is_pos_lambda = (lambda n: n > 0)
        assert describe_predicate(is_pos_lambda) == "lambda n: n > 0"

    def test_lambda_without_arguments(self):
        """Test a lambda taking no arguments."""
        always_lambda = (lambda: True)
        assert describe_predicate(always_lambda) == "lambda: True"

    def test_callable_object_falls_back_to_repr(self):
        """Test that other callables are named by repr()."""
        class Check:
            def __call__(self, value):
                return True

            def __repr__(self):
                return "Check()"

        assert describe_predicate(Check()) == "Check()"


class TestAnd:
    """Tests for conjunction."""

    positive_integer = integer.and_(positive)

    def test_returns_specification(self):
        """Test that the result is a Specification."""
        assert isinstance(self.positive_integer, Specification)
        assert isinstance(self.positive_integer, And)

    def test_valid_when_both_valid(self):
        """Test a value satisfying both sides."""
        assert self.positive_integer.errors(42) == []

    def test_invalid_when_either_invalid(self):
        """Test values failing one side."""
        assert self.positive_integer.errors(-42) != []
        assert self.positive_integer.errors(1.23) != []

    def test_includes_all_errors(self):
        """Test that errors of both sides are concatenated."""
        errors = self.positive_integer.errors(-1.23)
        assert errors == integer.errors(-1.23) + positive.errors(-1.23)
        assert len(errors) == 2

    def test_name(self):
        """Test the composed name."""
        assert self.positive_integer.name == "is_integer and lambda n: n > 0"

    def test_accepts_raw_predicate(self):
        """Test combining with a raw predicate."""
        small = integer.and_(lambda n: n < 10)
        assert small.is_valid(3)
        assert not small.is_valid(30)

    def test_operator(self):
        """Test the & operator, including a predicate on the left."""
        combined = integer & positive
        assert isinstance(combined, And)
        assert combined.is_valid(3)
        reversed_combined = is_integer & positive
        assert reversed_combined.name == "is_integer and lambda n: n > 0"

    def test_composes_examples(self):
        """Test that generated values come from the sides' examples."""
        combined = integer.examples(1, -2, 3).and_(positive.examples(3.5, 42))
        for _ in range(20):
            assert combined.generate() in [1, 3, 42]

    def test_examples_from_one_side(self):
        """Test generation when only one side has examples."""
        combined = integer.examples(-1, 2, 4).and_(lambda n: n > 0)
        assert combined.has_examples()
        for _ in range(10):
            assert combined.generate() in [2, 4]

    def test_no_examples_on_either_side(self):
        """Test that generation without examples raises NoExamplesError."""
        combined = integer.and_(positive)
        assert not combined.has_examples()
        with pytest.raises(NoExamplesError):
            combined.generate()

    def test_incompatible_examples_fail_on_construction(self):
        """Test that sides without a common example fail when combined."""
        negative = spec(lambda n: n < 0).examples(-1, -2)
        with pytest.raises(ExampleExhaustedError) as exc_info:
            negative.and_(positive.examples(1, 2))
        assert "no suitable example found" in str(exc_info.value)
        assert "after 200 attempts" in str(exc_info.value)

    def test_exhaustion_is_not_a_validation_failure(self):
        """Test that exhaustion is reported as an ExhaustionError."""
        negative = spec(lambda n: n < 0).examples(-1)
        with pytest.raises(ExhaustionError) as exc_info:
            negative.and_(positive)
        assert not isinstance(exc_info.value, ValidationFailed)

    def test_exhaustion_during_generation(self):
        """Test that a source drifting out of range ends in ExampleExhaustedError."""
        counter = iter(range(1, 10000))
        counting = spec(lambda n: True, "any").generator(lambda: next(counter))
        small = counting.and_(spec(lambda n: n < 30, "small"))

        generated = []
        with pytest.raises(ExampleExhaustedError) as exc_info:
            for _ in range(100):
                generated.append(small.generate())

        # 1-10 sampled by generator(), 11 drawn by the construction check
        assert generated == list(range(12, 30))
        assert not isinstance(exc_info.value, SkipLimitExceeded)
        assert "no suitable example found for any and small" in str(exc_info.value)
        assert exc_info.value.details == "last rejected element: 230"

    def test_generation_recovers_after_exhaustion(self):
        """Test that generate keeps raising ExampleExhaustedError once exhausted."""
        counter = iter(range(1, 10000))
        counting = spec(lambda n: True, "any").generator(lambda: next(counter))
        small = counting.and_(spec(lambda n: n < 30, "small"))

        with pytest.raises(ExampleExhaustedError):
            for _ in range(100):
                small.generate()
        with pytest.raises(ExampleExhaustedError):
            small.generate()
        assert small.has_examples()

    def test_operands_are_not_mutated(self):
        """Test that combining leaves the operands unchanged."""
        left = integer.examples(1, 2)
        before = left.example_source
        left.and_(positive)
        assert left.example_source is before
        assert left.name == "is_integer"


class TestOr:
    """Tests for disjunction."""

    integer_or_positive = integer.or_(positive)

    def test_returns_specification(self):
        """Test that the result is a Specification."""
        assert isinstance(self.integer_or_positive, Or)

    def test_valid_when_either_valid(self):
        """Test values satisfying one side."""
        assert self.integer_or_positive.errors(-42) == []
        assert self.integer_or_positive.errors(1.23) == []

    def test_invalid_when_both_invalid(self):
        """Test a value failing both sides."""
        assert self.integer_or_positive.errors(-1.42) != []

    def test_single_combined_message(self):
        """Test that a failure is one message naming the disjunction."""
        errors = self.integer_or_positive.errors(-1.23)
        assert errors == [
            "-1.23 does not satisfy specification is_integer or lambda n: n > 0"
        ]

    def test_operator(self):
        """Test the | operator."""
        combined = integer | positive
        assert isinstance(combined, Or)
        assert combined.is_valid(-3)

    def test_composes_examples(self):
        """Test that generated values come from the sides' examples."""
        combined = integer.examples(1, -2, 3).or_(positive.examples(3.5, 42))
        for _ in range(20):
            assert combined.generate() in [1, -2, 3, 3.5, 42]

    def test_draws_from_both_sides(self):
        """Test that both sides are drawn from."""
        combined = integer.examples(1).or_(positive.examples(2.5))
        values = {combined.generate() for _ in range(100)}
        assert values == {1, 2.5}

    def test_needs_examples_on_both_sides(self):
        """Test that generation needs examples on both sides."""
        combined = integer.examples(1, 2).or_(positive)
        assert not combined.has_examples()
        with pytest.raises(NoExamplesError) as exc_info:
            combined.generate()
        assert exc_info.value.spec_name == "lambda n: n > 0"


class TestExamples:
    """Tests for examples() and generator()."""

    def test_returns_specification(self):
        """Test that the result is a Specification."""
        assert isinstance(integer.examples(1, 2, 3), Specification)

    def test_generates_given_examples(self):
        """Test that a given example is generated."""
        assert integer.examples(1, 2, 3).generate() in [1, 2, 3]

    def test_validates_examples_eagerly(self):
        """Test that an invalid example is rejected right away."""
        with pytest.raises(ValidationFailed):
            integer.examples(1, 2.5, 3)

    def test_keeps_name_and_validation(self):
        """Test that attaching examples keeps name and errors."""
        with_examples = integer.examples(1)
        assert with_examples.name == "is_integer"
        assert with_examples.errors("a") == integer.errors("a")

    def test_original_spec_unchanged(self):
        """Test that attaching examples returns a new specification."""
        integer.examples(1, 2)
        assert not integer.has_examples()

    def test_generator(self):
        """Test generating from a generator function."""
        value = positive.generator(lambda: random.random() + 0.1).generate()
        assert isinstance(value, float)

    def test_generator_validated_eagerly(self):
        """Test that a generator producing invalid values is rejected."""
        with pytest.raises(ValidationFailed):
            integer.generator(random.random)

    def test_generator_sampled_ten_times(self):
        """Test that attaching a generator samples it ten times."""
        calls = []

        def counting():
            calls.append(1)
            return len(calls)

        positive.generator(counting)
        assert len(calls) == 10

    def test_generator_called_on_every_draw(self):
        """Test that each draw calls the generator again."""
        counter = iter(range(1, 1000))
        counting = positive.generator(lambda: next(counter))
        assert [counting.generate() for _ in range(3)] == [11, 12, 13]


class TestGenerate:
    """Tests for the generation cursor."""

    def test_without_examples(self):
        """Test the NoExamplesError message."""
        with pytest.raises(NoExamplesError) as exc_info:
            integer.generate()
        assert str(exc_info.value) == "no example provided for is_integer"

    def test_cursor_is_cumulative(self):
        """Test that generate advances one shared cursor."""
        counter = iter(range(1, 1000))
        counting = positive.generator(lambda: next(counter))
        first = counting.generate()
        second = counting.generate()
        assert second == first + 1

    def test_new_cursor_is_independent(self):
        """Test that new_cursor does not touch the generation cursor."""
        counting = spec(is_integer).examples(7)
        cursor = counting.new_cursor()
        assert next(cursor) == 7
        assert counting.generate() == 7

    def test_errors_unaffected_by_generation(self):
        """Test that generating does not change validation."""
        with_examples = integer.examples(1, 2, 3)
        before = with_examples.errors("x")
        for _ in range(5):
            with_examples.generate()
        assert with_examples.errors("x") == before
