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
"""Directive model — normalized mapping directives of a target type's fields.

Directives are already parsed: the engine never sees surface syntax. Each
target field carries exactly one directive:

* :class:`Implicit`: copy the source field of the same name.
* :class:`Explicit`: copy the value at a dot-path into the source type.
* :class:`Computed`: derive the value from source paths through a provider
  method, optionally reducing collection paths and transforming the result.

Example::

    directives = [
        Implicit("email", str),
        Explicit("city", str, path="address.city"),
        Computed("fullName", str, depends_on=["firstName", "lastName"]),
        Computed("orderTotal", Decimal, depends_on=["orders.total"], reducers=["SUM"]),
    ]
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from pyfly_projection.model.types import type_name


class Reducer(StrEnum):
    """Aggregation collapsing the flattened leaf values of a collection path."""

    SUM = "SUM"
    AVG = "AVG"
    MIN = "MIN"
    MAX = "MAX"
    COUNT = "COUNT"
    COUNT_DISTINCT = "COUNT_DISTINCT"

    @classmethod
    def parse(cls, value: Reducer | str) -> Reducer:
        """Accept a member or its name in any case."""
        if isinstance(value, Reducer):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise ValueError(
                f"Unknown reducer '{value}'; expected one of {[r.value for r in cls]}"
            ) from None

    def result_type(self, leaf_type: Any) -> Any:
        """Type produced by applying this reducer to values of ``leaf_type``."""
        if self in (Reducer.COUNT, Reducer.COUNT_DISTINCT):
            return int
        return leaf_type


@dataclass(frozen=True)
class MethodRef:
    """Reference to a provider method; both parts are optional.

    ``provider`` restricts the search to one provider, by id or by class.
    ``name`` overrides the conventional method name.
    """

    provider: str | type | None = None
    name: str | None = None

    @property
    def is_empty(self) -> bool:
        return self.provider is None and not self.name

    def describe(self) -> str:
        provider = type_name(self.provider) if self.provider is not None else "*"
        return f"{provider}.{self.name or '<convention>'}"


@dataclass(frozen=True)
class Directive:
    """Base of all directives: the target field's name and declared type."""

    name: str
    type: Any


@dataclass(frozen=True)
class Implicit(Directive):
    """Target field copied from the source field with the same name."""


@dataclass(frozen=True)
class Explicit(Directive):
    """Target field copied from a dot-path into the source type."""

    path: str


@dataclass(frozen=True)
class Computed(Directive):
    """Target field computed from source paths.

    ``reducers`` pair, left to right, with the collection-traversing entries
    of ``depends_on``; scalar entries never consume a reducer. An empty ``computed_by`` or
    ``then`` reference is treated as absent.
    """

    depends_on: Sequence[str] = ()
    computed_by: MethodRef | None = None
    then: MethodRef | None = None
    reducers: Sequence[Reducer | str] = field(default=())

    def __post_init__(self) -> None:
        if isinstance(self.depends_on, str):
            raise TypeError(f"depends_on of '{self.name}' must be a sequence of paths, not a string")
        object.__setattr__(self, "depends_on", tuple(self.depends_on))
        object.__setattr__(self, "reducers", tuple(Reducer.parse(r) for r in self.reducers))
        if self.computed_by is not None and self.computed_by.is_empty:
            object.__setattr__(self, "computed_by", None)
        if self.then is not None and self.then.is_empty:
            object.__setattr__(self, "then", None)
