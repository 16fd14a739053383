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
"""Provider model — computation providers and the ordered registry searching them."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
from typing import Any

from pyfly_projection.kernel.exceptions import DuplicateProviderError
from pyfly_projection.model.types import format_signature, type_name

# =============================================================================
# Invocation modes
# =============================================================================


@dataclass(frozen=True)
class Stateless:
    """Invoked directly, without a provider instance."""


@dataclass(frozen=True)
class InstanceByType:
    """Instance obtained from the external component registry by type.

    On a provider descriptor ``key`` is usually left unset; on a resolved
    method it holds the lookup key (the provider class, or its id when the
    class is unknown).
    """

    key: Any = None


@dataclass(frozen=True)
class InstanceByName:
    """Instance obtained from the external component registry by name."""

    name: str


InvocationMode = Stateless | InstanceByType | InstanceByName


# =============================================================================
# Descriptors
# =============================================================================


@dataclass(frozen=True)
class MethodSignature:
    """A candidate method exposed by a provider."""

    name: str
    param_types: Sequence[Any] = ()
    return_type: Any = Any
    stateless: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "param_types", tuple(self.param_types))

    def describe(self) -> str:
        return format_signature(self.name, self.param_types, self.return_type)


@dataclass(frozen=True)
class ProviderDescriptor:
    """A provider declared by a projection.

    ``methods`` are kept in declaration order. ``provider_type`` is the
    provider class when one exists; method references may name the provider
    either by ``id`` or by that class.
    """

    id: str
    invocation_mode: InvocationMode = Stateless()
    methods: Sequence[MethodSignature] = ()
    provider_type: type | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "methods", tuple(self.methods))

    def matches(self, ref: str | type) -> bool:
        """Whether a method reference's provider part designates this provider."""
        if isinstance(ref, str):
            return ref == self.id
        return self.provider_type is not None and ref is self.provider_type

    def methods_named(self, name: str) -> list[MethodSignature]:
        return [m for m in self.methods if m.name == name]


class ProviderRegistry:
    """Ordered, immutable catalog of provider descriptors.

    Iteration follows declaration order, which is the search order of
    first-match-wins method resolution.

    Raises:
        DuplicateProviderError: If two descriptors share an id.
    """

    def __init__(self, providers: Iterable[ProviderDescriptor] = ()) -> None:
        self._providers: tuple[ProviderDescriptor, ...] = tuple(providers)
        seen: set[str] = set()
        for provider in self._providers:
            if provider.id in seen:
                raise DuplicateProviderError(provider.id)
            seen.add(provider.id)

    def get(self, ref: str | type) -> ProviderDescriptor | None:
        """Look up a provider by id or by provider class."""
        for provider in self._providers:
            if provider.matches(ref):
                return provider
        return None

    @property
    def ids(self) -> list[str]:
        """Provider ids in declaration order."""
        return [p.id for p in self._providers]

    def __iter__(self) -> Iterator[ProviderDescriptor]:
        return iter(self._providers)

    def __len__(self) -> int:
        return len(self._providers)

    def __repr__(self) -> str:
        return f"ProviderRegistry({self.ids!r})"


def provider_label(ref: str | type) -> str:
    """Display name for the provider part of a method reference."""
    return ref if isinstance(ref, str) else type_name(ref)
