"""Lazy, possibly infinite sequences used to generate examples.

Every sequence answers two questions without iterating:
- is_empty(): no element will ever be produced
- is_finite(): iteration is guaranteed to terminate

Iterating a sequence (``iter(seq)``) returns a fresh cursor. Infinite
sequences never raise StopIteration, so callers bound them with take() or
rely on the consecutive-skip guard of filter().

Example:
    >>> FiniteSequence([1, 2, 3]).loop().take(5).to_list()
    [1, 2, 3, 1, 2]
"""

import logging
from random import Random
from typing import Any, Callable, Iterator, List, Optional, Sequence

from dataspec.core.config import get_spec_config
from dataspec.core.errors import InfiniteSequenceError, SkipLimitExceeded

logger = logging.getLogger(__name__)

_shared_rng: Optional[Random] = None


def get_rng() -> Random:
    """Return the random generator shared by all sequences.

    Created on first use and seeded from the ``seed`` config value.
    """
    global _shared_rng
    if _shared_rng is None:
        _shared_rng = Random(get_spec_config().seed)
    return _shared_rng


def reset_rng(seed: Optional[int] = None) -> None:
    """Replace the shared random generator with a freshly seeded one."""
    global _shared_rng
    _shared_rng = Random(seed)


class LazySequence:
    """Base class of all lazy sequences.

    Subclasses implement __iter__, is_finite and is_empty. The combinator
    methods below return the sequence itself when it is empty, so no
    combinator is ever built on top of a source that cannot produce anything.
    """

    def __iter__(self) -> Iterator[Any]:
        raise NotImplementedError(f"{type(self).__name__} does not implement __iter__")

    def is_finite(self) -> bool:
        raise NotImplementedError(f"{type(self).__name__} does not implement is_finite")

    def is_empty(self) -> bool:
        raise NotImplementedError(f"{type(self).__name__} does not implement is_empty")

    def cursor(self) -> Iterator[Any]:
        """Return a new cursor positioned at the start of the sequence."""
        return iter(self)

    def take(self, n: int) -> "LazySequence":
        """At most the first n elements."""
        if self.is_empty():
            return self
        return BoundedTake(n, self)

    def loop(self) -> "LazySequence":
        """Repeat the sequence forever."""
        if self.is_empty():
            return self
        return UnboundedLoop(self)

    def random(self, rng: Optional[Random] = None) -> "LazySequence":
        """Endless uniform sampling (with replacement) of a finite sequence."""
        return UniformRandomSample(self, rng)

    def random_zip(
        self, other: "LazySequence", rng: Optional[Random] = None
    ) -> "LazySequence":
        """Randomly interleave this sequence with another one.

        If either side is empty the other side is returned as-is.
        """
        if self.is_empty():
            return other
        if other.is_empty():
            return self
        return ProbabilisticInterleave(self, other, rng)

    def filter(
        self, predicate: Callable[[Any], Any], max_skip: Optional[int] = None
    ) -> "LazySequence":
        """Only the elements satisfying predicate, with a consecutive-skip guard."""
        if self.is_empty():
            return self
        return BoundedSkipFilter(self, predicate, max_skip)

    def first(self) -> Any:
        """First element, or None if the sequence is empty."""
        if self.is_empty():
            return None
        return next(iter(self), None)

    def to_list(self) -> List[Any]:
        """Materialize a finite sequence.

        Raises:
            InfiniteSequenceError: If the sequence is infinite
        """
        if not self.is_finite():
            raise InfiniteSequenceError(self)
        return list(self)


class FiniteSequence(LazySequence):
    """Stored items in their original order."""

    def __init__(self, items: Sequence[Any]):
        """Initialize the sequence.

        Args:
            items: Elements, copied into a list
        """
        self.items = list(items)

    def __iter__(self) -> Iterator[Any]:
        return iter(self.items)

    def is_finite(self) -> bool:
        return True

    def is_empty(self) -> bool:
        return len(self.items) == 0

    def __repr__(self) -> str:
        return f"FiniteSequence({self.items!r})"


class BoundedTake(LazySequence):
    """At most ``limit`` elements of a source, fewer if the source runs out."""

    def __init__(self, limit: int, source: LazySequence):
        """Initialize the bounded view.

        Args:
            limit: Maximum number of elements; zero or less yields nothing
            source: Sequence the elements are taken from
        """
        self.limit = limit
        self.source = source

    def __iter__(self) -> Iterator[Any]:
        if self.limit <= 0:
            return
        count = 0
        for item in self.source:
            yield item
            count += 1
            if count >= self.limit:
                return

    def is_finite(self) -> bool:
        return True

    def is_empty(self) -> bool:
        return self.limit <= 0 or self.source.is_empty()


class UnboundedLoop(LazySequence):
    """Repeats the full cycle of a source forever."""

    def __init__(self, source: LazySequence):
        """Initialize the loop.

        Args:
            source: Sequence repeated from its start each cycle
        """
        self.source = source

    def __iter__(self) -> Iterator[Any]:
        if self.source.is_empty():
            return
        while True:
            yield from self.source

    def is_finite(self) -> bool:
        return False

    def is_empty(self) -> bool:
        return self.source.is_empty()


class UniformRandomSample(LazySequence):
    """Independent uniform draws, with replacement, from a finite source.

    The source is materialized once per cursor, on the first draw.
    """

    def __init__(self, source: LazySequence, rng: Optional[Random] = None):
        """Initialize the sampler.

        Args:
            source: Finite sequence to draw from
            rng: Random generator, defaults to the shared one from get_rng()

        Raises:
            InfiniteSequenceError: If source is infinite
        """
        if not source.is_finite():
            raise InfiniteSequenceError(source)
        self.source = source
        self.rng = rng

    def __iter__(self) -> Iterator[Any]:
        if self.source.is_empty():
            return
        items = self.source.to_list()
        rng = self.rng or get_rng()
        while True:
            yield items[rng.randrange(len(items))]

    def is_finite(self) -> bool:
        return False

    def is_empty(self) -> bool:
        return self.source.is_empty()


class ProbabilisticInterleave(LazySequence):
    """Each draw comes from ``left`` or ``right`` with probability 0.5.

    Both operands are looped, so each side keeps its own position and never
    runs out. An empty operand is never drawn from; LazySequence.random_zip()
    skips building the interleave altogether in that case.
    """

    def __init__(
        self,
        left: LazySequence,
        right: LazySequence,
        rng: Optional[Random] = None,
    ):
        """Initialize the interleave.

        Args:
            left: First sequence, looped
            right: Second sequence, looped
            rng: Random generator, defaults to the shared one from get_rng()
        """
        self.left = left.loop()
        self.right = right.loop()
        self.rng = rng

    def __iter__(self) -> Iterator[Any]:
        if self.left.is_empty():
            yield from self.right
            return
        if self.right.is_empty():
            yield from self.left
            return
        left = iter(self.left)
        right = iter(self.right)
        rng = self.rng or get_rng()
        while True:
            if rng.random() < 0.5:
                yield next(left)
            else:
                yield next(right)

    def is_finite(self) -> bool:
        return False

    def is_empty(self) -> bool:
        return self.left.is_empty() and self.right.is_empty()


class BoundedSkipFilter(LazySequence):
    """Elements of a source that satisfy a predicate.

    Raises SkipLimitExceeded once more than ``max_skip`` consecutive elements
    have been rejected, instead of searching forever.
    """

    def __init__(
        self,
        source: LazySequence,
        predicate: Callable[[Any], Any],
        max_skip: Optional[int] = None,
    ):
        """Initialize the filter.

        Args:
            source: Sequence to filter
            predicate: Function deciding from the truthiness of its result
            max_skip: Consecutive rejections allowed, defaults to the
                ``max_skip`` config value
        """
        self.source = source
        self.predicate = predicate
        self.max_skip = max_skip if max_skip is not None else get_spec_config().max_skip

    def __iter__(self) -> Iterator[Any]:
        if self.source.is_empty():
            return
        skipped = 0
        for item in self.source:
            if self.predicate(item):
                skipped = 0
                yield item
                continue
            skipped += 1
            if skipped > self.max_skip:
                logger.error(f"Filter rejected {skipped} consecutive elements")
                raise SkipLimitExceeded(
                    self.max_skip,
                    details=f"last rejected element: {item!r}",
                )

    def is_finite(self) -> bool:
        return self.source.is_finite()

    def is_empty(self) -> bool:
        return self.source.is_empty()


class FunctionSource(LazySequence):
    """Calls a function afresh for every element.

    The function is external and may have side effects, so iterating twice
    does not replay the same elements.
    """

    def __init__(self, fn: Callable[[], Any]):
        """Initialize the source.

        Args:
            fn: Zero-argument function producing one element per call
        """
        self.fn = fn

    def __iter__(self) -> Iterator[Any]:
        while True:
            yield self.fn()

    def is_finite(self) -> bool:
        return False

    def is_empty(self) -> bool:
        return False
