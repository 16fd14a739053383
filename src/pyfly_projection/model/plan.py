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
"""Projection plan data classes.

Frozen dataclasses representing a resolved, validated projection. A plan is
produced once per (source type, target declaration) pair and consumed by a
downstream generator or interpreter, which executes each mapping as a direct
copy (:class:`ImplicitMapping`, :class:`ExplicitMapping`) or as
compute, then optionally transform, with collection dependencies reduced
first (:class:`ComputedMapping`).
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from pyfly_projection.model.directive import Reducer
from pyfly_projection.model.provider import InvocationMode, ProviderRegistry, Stateless
from pyfly_projection.model.source import SourceType
from pyfly_projection.model.types import format_signature


@dataclass(frozen=True)
class FieldRef:
    """One resolved segment of a path."""

    name: str
    owner: str
    type: Any
    collection: bool = False
    nullable: bool = False


@dataclass(frozen=True)
class ResolvedPath:
    """A dot-path resolved against a source type.

    When ``traverses_collection`` is true the leaf values of every crossed
    collection are flattened into one sequence; the last segment is never a
    collection itself.
    """

    path: str
    segments: tuple[FieldRef, ...]
    terminal_type: Any
    traverses_collection: bool = False
    collection_hop_count: int = 0

    @property
    def root(self) -> str:
        return self.segments[0].name

    @property
    def nullable(self) -> bool:
        """Whether any segment along the path may be ``None``."""
        return any(s.nullable for s in self.segments)

    def __str__(self) -> str:
        return self.path


@dataclass(frozen=True)
class ResolvedMethod:
    """A provider method selected for a computed field.

    ``invocation`` records how the downstream consumer calls it; the engine
    never obtains provider instances itself.
    """

    provider_id: str | None
    name: str
    param_types: tuple[Any, ...]
    return_type: Any
    invocation: InvocationMode = Stateless()

    @classmethod
    def identity(cls, value_type: Any) -> ResolvedMethod:
        """Pass-through of a single (reduced) value."""
        return cls(provider_id=None, name="identity", param_types=(value_type,), return_type=value_type)

    @property
    def is_identity(self) -> bool:
        return self.provider_id is None

    @property
    def requires_instance(self) -> bool:
        return not isinstance(self.invocation, Stateless)

    def describe(self) -> str:
        owner = self.provider_id or "<identity>"
        return f"{owner}.{format_signature(self.name, self.param_types, self.return_type)}"


@dataclass(frozen=True)
class ReducerBinding:
    """A collection-traversing dependency paired with its reducer."""

    path: ResolvedPath
    reducer: Reducer

    @property
    def result_type(self) -> Any:
        return self.reducer.result_type(self.path.terminal_type)


@dataclass(frozen=True)
class FieldMapping:
    """Base of resolved mappings: target field name and declared type."""

    name: str
    type: Any


@dataclass(frozen=True)
class ImplicitMapping(FieldMapping):
    """Direct copy of the same-named source field."""

    source_field: FieldRef


@dataclass(frozen=True)
class ExplicitMapping(FieldMapping):
    """Direct copy of the value at a resolved path."""

    resolved_path: ResolvedPath


@dataclass(frozen=True)
class ComputedMapping(FieldMapping):
    """Computed value: reduce collection dependencies, compute, then transform."""

    dependencies: tuple[ResolvedPath, ...]
    compute_method: ResolvedMethod
    transform_method: ResolvedMethod | None = None
    reducer_plan: tuple[ReducerBinding, ...] = ()

    def reducer_for(self, path: ResolvedPath) -> Reducer | None:
        """Reducer applied to ``path``, or ``None`` for scalar dependencies."""
        for binding in self.reducer_plan:
            if binding.path is path:
                return binding.reducer
        return None


@dataclass(frozen=True)
class ProjectionPlan:
    """Compiled, validated projection plan.

    ``fields`` preserves target field declaration order and is read-only.
    """

    target_name: str
    source_type: SourceType
    providers: ProviderRegistry
    fields: Mapping[str, FieldMapping] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.fields, MappingProxyType):
            object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))

    def __getitem__(self, name: str) -> FieldMapping:
        return self.fields[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    def computed(self) -> Sequence[ComputedMapping]:
        """Computed mappings in declaration order."""
        return [m for m in self.fields.values() if isinstance(m, ComputedMapping)]
