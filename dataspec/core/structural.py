"""Field-wise and element-wise specifications built from child specifications."""

import logging
from collections.abc import Mapping
from typing import Any, Dict, Optional

from dataspec.core.config import get_spec_config
from dataspec.core.report import ErrorNode, ErrorTree, is_ok, print_value
from dataspec.core.sequences import FunctionSource, LazySequence, get_rng
from dataspec.core.spec import PredicateOrSpec, Specification, as_spec

logger = logging.getLogger(__name__)


class ObjectSpec(Specification):
    """Specification of a mapping, one child specification per field.

    Errors of each field are reported under the field's name. A missing field
    is validated as None, so optional fields must accept None explicitly.

    Examples exist only if every field has examples. Each generated object is
    built by calling generate() on every field independently, so nothing
    relates the values of different fields.

    Example:
        >>> point = ObjectSpec({"x": is_integer, "y": is_integer})
        >>> point.errors({"x": 1, "y": "2"})
        [{'y': ['"2" does not satisfy specification is_integer']}]
    """

    def __init__(self, fields: Mapping, name: Optional[str] = None):
        """Initialize the object specification.

        Args:
            fields: Field name to specification or raw predicate
            name: Name override, defaults to ``object_of({ a, b })``
        """
        self.fields: Dict[str, Specification] = {
            key: as_spec(field_spec) for key, field_spec in fields.items()
        }
        source = None
        if all(field_spec.has_examples() for field_spec in self.fields.values()):
            source = FunctionSource(self._generate_fields)
        super().__init__(
            self._is_valid_object,
            name=name or "object_of({ " + ", ".join(map(str, self.fields)) + " })",
            example_source=source,
        )

    def _is_valid_object(self, value: Any) -> bool:
        return is_ok(self.errors(value))

    def _generate_fields(self) -> Dict[str, Any]:
        return {key: field_spec.generate() for key, field_spec in self.fields.items()}

    def errors(self, value: Any) -> ErrorTree:
        if not isinstance(value, Mapping):
            return [f"{print_value(value)} is not an object"]
        node: ErrorNode = {}
        for key, field_spec in self.fields.items():
            field_errors = field_spec.errors(value.get(key))
            if not is_ok(field_errors):
                node[key] = field_errors
        if not node:
            return []
        return [node]


class ArraySpec(Specification):
    """Specification of a list (or tuple) whose elements all satisfy one spec.

    Errors are reported under the index of each failing element. Generated
    arrays have a random length below ``max_array_length``; elements come from
    a uniform random sample of a finite element source, or straight from an
    infinite one.
    """

    def __init__(self, element: PredicateOrSpec):
        """Initialize the array specification.

        Args:
            element: Specification or raw predicate every element must satisfy
        """
        self.element = as_spec(element)
        self._element_source: Optional[LazySequence] = None
        source = None
        if self.element.has_examples():
            element_source = self.element.example_source
            if element_source.is_finite():
                element_source = element_source.random()
            self._element_source = element_source
            source = FunctionSource(self._generate_elements)
        super().__init__(
            self._is_valid_array,
            name=f"array_of({self.element.name})",
            example_source=source,
        )

    def _is_valid_array(self, value: Any) -> bool:
        return is_ok(self.errors(value))

    def _generate_elements(self) -> list:
        length = get_rng().randrange(get_spec_config().max_array_length)
        return self._element_source.take(length).to_list()

    def errors(self, value: Any) -> ErrorTree:
        if not isinstance(value, (list, tuple)):
            return [f"{print_value(value)} is not an array"]
        node: ErrorNode = {}
        for index, element in enumerate(value):
            element_errors = self.element.errors(element)
            if not is_ok(element_errors):
                node[index] = element_errors
        if not node:
            return []
        return [node]
