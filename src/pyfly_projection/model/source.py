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
"""Source type model — read-only description of the type being projected from."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any


@dataclass(frozen=True)
class SourceField:
    """A field of a :class:`SourceType`.

    For collections, ``type`` is the element type. ``nested`` is the
    structured description of ``type`` when it has fields of its own; it is
    filled in automatically when ``type`` is itself a :class:`SourceType`.
    """

    name: str
    type: Any
    nullable: bool = False
    collection: bool = False
    nested: SourceType | None = None

    def __post_init__(self) -> None:
        if self.nested is None and isinstance(self.type, SourceType):
            object.__setattr__(self, "nested", self.type)


@dataclass(frozen=True, eq=False)
class SourceType:
    """Named, ordered set of source fields.

    Compared by identity: nested types may reference each other (or
    themselves), so structural equality is not well defined.
    """

    name: str
    fields: Mapping[str, SourceField] = field(default_factory=dict, repr=False)
    python_type: type | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))

    @classmethod
    def of(cls, name: str, *fields: SourceField, python_type: type | None = None) -> SourceType:
        """Build a source type from fields, preserving their order."""
        return cls(name, {f.name: f for f in fields}, python_type=python_type)

    def get(self, name: str) -> SourceField | None:
        return self.fields.get(name)

    @property
    def field_names(self) -> list[str]:
        return list(self.fields)

    def __contains__(self, name: object) -> bool:
        return name in self.fields
