# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Build a :class:`SourceType` from a Python class.

Supports dataclasses, Pydantic models, and plain annotated classes::

    @dataclass
    class Order:
        total: Decimal

    @dataclass
    class Customer:
        first_name: str
        nickname: str | None
        orders: list[Order]

    customer = source_type_from_class(Customer)
    customer.fields["orders"].collection      # True
    customer.fields["orders"].nested.name     # "Order"
"""

from __future__ import annotations

import collections.abc
import dataclasses
import types
import typing
from typing import Any, ClassVar, get_args, get_origin, get_type_hints

from pyfly_projection.model.source import SourceField, SourceType

_COLLECTION_ORIGINS: tuple[Any, ...] = (
    list,
    set,
    frozenset,
    tuple,
    collections.abc.Collection,
    collections.abc.Iterable,
    collections.abc.MutableSequence,
    collections.abc.MutableSet,
    collections.abc.Sequence,
    collections.abc.Set,
)


def source_type_from_class(cls: type) -> SourceType:
    """Describe ``cls`` and every structured type reachable from it."""
    return _SourceIntrospector().describe(cls)


def is_structured(tp: Any) -> bool:
    """Whether ``tp`` has named fields of its own (dataclass or Pydantic model)."""
    if not isinstance(tp, type):
        return False
    return dataclasses.is_dataclass(tp) or hasattr(tp, "model_fields")


def unwrap_optional(hint: Any) -> tuple[Any, bool]:
    """Strip ``None`` from ``X | None`` / ``Optional[X]``; report nullability."""
    origin = get_origin(hint)
    if origin is typing.Union or origin is types.UnionType:
        args = [a for a in get_args(hint) if a is not type(None)]
        if len(args) < len(get_args(hint)):
            if len(args) == 1:
                return args[0], True
            return typing.Union[tuple(args)], True  # noqa: UP007
    return hint, False


def unwrap_collection(hint: Any) -> tuple[Any, bool]:
    """Return the element type of a collection hint, or the hint unchanged."""
    if hint in _COLLECTION_ORIGINS:
        return Any, True
    origin = get_origin(hint)
    if origin not in _COLLECTION_ORIGINS:
        return hint, False
    args = get_args(hint)
    if origin is tuple:
        # Only homogeneous tuples (tuple[X, ...]) are collections.
        if len(args) == 2 and args[1] is Ellipsis:
            return args[0], True
        return hint, False
    return (args[0] if args else Any), True


class _SourceIntrospector:
    """Memoizes described classes so shared and self-referencing types resolve once."""

    def __init__(self) -> None:
        self._described: dict[type, SourceType] = {}

    def describe(self, cls: type) -> SourceType:
        existing = self._described.get(cls)
        if existing is not None:
            return existing

        source_type = SourceType(cls.__name__, python_type=cls)
        self._described[cls] = source_type

        fields = {name: self._describe_field(name, hint) for name, hint in self._field_hints(cls)}
        # Registered before its fields are described so self references share this instance.
        object.__setattr__(source_type, "fields", types.MappingProxyType(fields))
        return source_type

    def _describe_field(self, name: str, hint: Any) -> SourceField:
        hint, nullable = unwrap_optional(hint)
        element, collection = unwrap_collection(hint)
        if collection:
            element, _ = unwrap_optional(element)
        nested = self.describe(element) if is_structured(element) else None
        return SourceField(
            name=name,
            type=element,
            nullable=nullable,
            collection=collection,
            nested=nested,
        )

    @staticmethod
    def _field_hints(cls: type) -> list[tuple[str, Any]]:
        """Public field names with their resolved hints, in declaration order."""
        if hasattr(cls, "model_fields"):
            # Pydantic has already resolved annotations; BaseModel's own hints are not resolvable.
            return [
                (name, info.annotation)
                for name, info in cls.model_fields.items()
                if not name.startswith("_")
            ]
        hints = get_type_hints(cls)
        if dataclasses.is_dataclass(cls):
            names = [f.name for f in dataclasses.fields(cls)]
        else:
            names = list(hints)
        return [
            (name, hints[name])
            for name in names
            if name in hints and not name.startswith("_") and get_origin(hints[name]) is not ClassVar
        ]
