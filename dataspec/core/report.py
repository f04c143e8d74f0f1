"""Error trees and value printing for validation messages.

Key concepts:
- ErrorTree: nested failure structure mirroring the validated data
- is_ok(): whether an ErrorTree contains no message at any level
- list_errors(): flatten an ErrorTree to ordered (path, message) pairs
- print_value(): short, readable rendering of a value for messages
"""

from collections.abc import Mapping
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from dataspec.core.config import get_spec_config

# Type aliases for error reporting
ErrorTree = List[Any]
"""Failures of one value: message strings and/or nested ErrorNode mappings.

Example::

    ['-2 does not satisfy specification is_positive']
    [{"bar": ['-2 does not satisfy specification is_positive'],
      "baz": [{"qux": ['None does not satisfy specification is_positive']}]}]
"""

ErrorNode = Dict[Union[str, int], ErrorTree]
"""Mapping from field name or array index to the ErrorTree of that child."""

ErrorEntry = Tuple[List[str], str]
"""One flattened failure: path of keys (as strings) and its message."""


def is_ok(errors: Any) -> bool:
    """Check that an ErrorTree holds no message at any level.

    Args:
        errors: ErrorTree, ErrorNode or message

    Returns:
        True if there is nothing to report
    """
    if errors is None:
        return True
    if isinstance(errors, str):
        return False
    if isinstance(errors, Mapping):
        return all(is_ok(child) for child in errors.values())
    return all(is_ok(child) for child in errors)


def list_errors(errors: Any, prefix: Sequence[str] = ()) -> List[ErrorEntry]:
    """Flatten an ErrorTree depth-first into (path, message) pairs.

    Strings contribute one entry at the current path, lists contribute each
    element at the same path, and mappings extend the path with each key in
    insertion order.

    Args:
        errors: ErrorTree to flatten
        prefix: Path of the tree's root

    Returns:
        Ordered list of (path, message) tuples

    Example:
        >>> list_errors([{"a": ['"x" does not satisfy specification is_integer']}])
        [(['a'], '"x" does not satisfy specification is_integer')]
    """
    if errors is None:
        return []
    if isinstance(errors, str):
        return [(list(prefix), errors)]
    entries: List[ErrorEntry] = []
    if isinstance(errors, Mapping):
        for key, child in errors.items():
            entries.extend(list_errors(child, [*prefix, str(key)]))
    else:
        for child in errors:
            entries.extend(list_errors(child, prefix))
    return entries


def format_errors(errors: Any) -> str:
    """Render an ErrorTree as ``path.to.field: message`` lines."""
    return "\n".join(
        ".".join(path) + ": " + message for path, message in list_errors(errors)
    )


def print_value(value: Any, max_items: Optional[int] = None) -> str:
    """Render a value for use in an error message.

    Strings are double-quoted, lists, tuples and mappings show at most
    ``max_items`` entries followed by ``, ...``. Anything else uses ``str()``.

    Args:
        value: Value to render
        max_items: Number of container entries to show (config default: 3)

    Returns:
        Printed value

    Example:
        >>> print_value([1, "a", [2, 3], 4])
        '[1, "a", [2, 3], ...]'
    """
    if max_items is None:
        max_items = get_spec_config().print_max_items

    if isinstance(value, str):
        return '"' + value + '"'
    if isinstance(value, (list, tuple)):
        shown = [print_value(item, max_items) for item in value[:max_items]]
        ellipsis = ", ..." if len(value) > max_items else ""
        return "[" + ", ".join(shown) + ellipsis + "]"
    if isinstance(value, Mapping):
        keys = list(value.keys())
        shown = [
            print_value(key, max_items) + ": " + print_value(value[key], max_items)
            for key in keys[:max_items]
        ]
        ellipsis = ", ..." if len(keys) > max_items else ""
        return "{" + ", ".join(shown) + ellipsis + "}"
    return str(value)
