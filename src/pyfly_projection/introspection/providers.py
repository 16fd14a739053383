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
"""Build a :class:`ProviderDescriptor` from a provider class.

``staticmethod`` and ``classmethod`` members are stateless; plain functions
need a provider instance, obtained by bean name when one is given and by type
otherwise::

    class UserComputations:
        @staticmethod
        def getFullName(first: str, last: str) -> str: ...

    class Pricing:
        def getTotal(self, amount: Decimal) -> Decimal: ...

    registry = ProviderRegistry([
        provider_from_class(UserComputations),
        provider_from_class(Pricing, bean="pricingService"),
    ])
"""

from __future__ import annotations

import inspect
import typing
from typing import Any

from pyfly_projection.model.provider import (
    InstanceByName,
    InstanceByType,
    InvocationMode,
    MethodSignature,
    ProviderDescriptor,
    Stateless,
)

_POSITIONAL = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)


def provider_from_class(
    cls: type,
    *,
    bean: str | None = None,
    provider_id: str | None = None,
) -> ProviderDescriptor:
    """Describe the public methods of ``cls``, inherited ones included.

    Methods keep the order in which the class hierarchy first declares them,
    base classes first; an override takes the signature of the subclass.
    """
    methods: list[MethodSignature] = []
    for name, member in _public_members(cls).items():
        if isinstance(member, staticmethod):
            methods.append(_signature(name, member.__func__, stateless=True, bound=False))
        elif isinstance(member, classmethod):
            methods.append(_signature(name, member.__func__, stateless=True, bound=True))
        elif inspect.isfunction(member):
            methods.append(_signature(name, member, stateless=False, bound=True))

    return ProviderDescriptor(
        id=provider_id or cls.__name__,
        invocation_mode=_invocation_mode(methods, bean),
        methods=tuple(methods),
        provider_type=cls,
    )


def _public_members(cls: type) -> dict[str, Any]:
    members: dict[str, Any] = {}
    for klass in reversed(cls.__mro__):
        if klass is object:
            continue
        for name, member in vars(klass).items():
            if not name.startswith("_"):
                members[name] = member
    return members


def _invocation_mode(methods: list[MethodSignature], bean: str | None) -> InvocationMode:
    if bean:
        return InstanceByName(bean)
    if any(not m.stateless for m in methods):
        return InstanceByType()
    return Stateless()


def _signature(name: str, func: Any, *, stateless: bool, bound: bool) -> MethodSignature:
    """Positional parameter types and return type; unannotated types become ``Any``."""
    hints = typing.get_type_hints(func)
    params = [p for p in inspect.signature(func).parameters.values() if p.kind in _POSITIONAL]
    if bound:
        params = params[1:]
    return MethodSignature(
        name=name,
        param_types=tuple(hints.get(p.name, Any) for p in params),
        return_type=hints.get("return", Any),
        stateless=stateless,
    )
