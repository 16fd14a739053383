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
"""Method resolver — first-match-wins search of the provider registry.

Resolution order:

1. ``override.provider`` set: search that provider only, else every provider
   in declaration order.
2. Method name: ``override.name`` if set, else the caller's convention name.
3. A method matches when its parameter types equal the required types, in
   order, and its return type is assignable to the required return type.
4. The first match wins, scanning providers in registry order and methods in
   descriptor order.
5. Stateless methods are invoked directly. Instance methods record how the
   external component registry supplies the instance: by bean name when the
   provider declares one, by type otherwise.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import structlog

from pyfly_projection.kernel.exceptions import MethodNotFoundError, ProviderNotRegisteredError
from pyfly_projection.model.directive import MethodRef
from pyfly_projection.model.plan import ResolvedMethod
from pyfly_projection.model.provider import (
    InstanceByName,
    InstanceByType,
    InvocationMode,
    MethodSignature,
    ProviderDescriptor,
    ProviderRegistry,
    Stateless,
    provider_label,
)
from pyfly_projection.model.types import format_signature, is_assignable

logger = structlog.get_logger("pyfly_projection.resolution.methods")


def convention_name(field_name: str, prefix: str = "get", style: str = "camel") -> str:
    """Conventional computation method name for a target field.

    ``camel``: ``fullName`` -> ``getFullName``.
    ``snake``: ``full_name`` -> ``get_full_name``.
    """
    if style == "snake":
        return f"{prefix}_{field_name}" if prefix else field_name
    if not prefix:
        return field_name
    return prefix + field_name[:1].upper() + field_name[1:]


def resolve_method(
    providers: ProviderRegistry,
    param_types: Sequence[Any],
    return_type: Any = Any,
    override: MethodRef | None = None,
    convention: str | None = None,
) -> ResolvedMethod:
    """Find the first provider method matching the required signature.

    Args:
        providers: Registry searched in declaration order.
        param_types: Required parameter types, order-exact.
        return_type: The matched method's return type must be assignable to
            it; ``Any`` leaves the return unconstrained.
        override: Optional explicit provider and/or method name.
        convention: Method name used when ``override`` names none.

    Raises:
        ProviderNotRegisteredError: ``override.provider`` is not registered.
        MethodNotFoundError: No provider yields a match, or no method name
            is available at all.
    """
    override = override or MethodRef()
    required = tuple(param_types)

    if override.provider is not None:
        provider = providers.get(override.provider)
        if provider is None:
            raise ProviderNotRegisteredError(provider_label(override.provider), available=providers.ids)
        candidates: list[ProviderDescriptor] = [provider]
    else:
        candidates = list(providers)

    name = override.name or convention
    searched = [p.id for p in candidates]
    if not name:
        raise MethodNotFoundError(
            None,
            expected_signature=format_signature("<unnamed>", required, return_type),
            searched=searched,
        )

    near_misses: list[str] = []
    for provider in candidates:
        for method in provider.methods_named(name):
            if method.param_types == required and is_assignable(method.return_type, return_type):
                resolved = ResolvedMethod(
                    provider_id=provider.id,
                    name=method.name,
                    param_types=method.param_types,
                    return_type=method.return_type,
                    invocation=_invocation(provider, method),
                )
                logger.debug("method_resolved", method=resolved.describe(), searched=searched)
                return resolved
            near_misses.append(f"{provider.id}.{method.describe()}")

    raise MethodNotFoundError(
        name,
        expected_signature=format_signature(name, required, return_type),
        searched=searched,
        candidates=near_misses,
    )


def _invocation(provider: ProviderDescriptor, method: MethodSignature) -> InvocationMode:
    if method.stateless:
        return Stateless()
    mode = provider.invocation_mode
    if isinstance(mode, InstanceByName):
        return mode
    if isinstance(mode, InstanceByType) and mode.key is not None:
        return mode
    # Providers without a bean name are looked up by type.
    return InstanceByType(key=provider.provider_type or provider.id)
