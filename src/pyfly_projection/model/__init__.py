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
"""Projection model — source types, directives, providers, and plans."""

from __future__ import annotations

from pyfly_projection.model.directive import (
    Computed,
    Directive,
    Explicit,
    Implicit,
    MethodRef,
    Reducer,
)
from pyfly_projection.model.plan import (
    ComputedMapping,
    ExplicitMapping,
    FieldMapping,
    FieldRef,
    ImplicitMapping,
    ProjectionPlan,
    ReducerBinding,
    ResolvedMethod,
    ResolvedPath,
)
from pyfly_projection.model.provider import (
    InstanceByName,
    InstanceByType,
    InvocationMode,
    MethodSignature,
    ProviderDescriptor,
    ProviderRegistry,
    Stateless,
)
from pyfly_projection.model.source import SourceField, SourceType
from pyfly_projection.model.types import format_signature, is_assignable, type_name

__all__ = [
    # Source
    "SourceField",
    "SourceType",
    # Directives
    "Directive",
    "Implicit",
    "Explicit",
    "Computed",
    "MethodRef",
    "Reducer",
    # Providers
    "InvocationMode",
    "Stateless",
    "InstanceByType",
    "InstanceByName",
    "MethodSignature",
    "ProviderDescriptor",
    "ProviderRegistry",
    # Plan
    "FieldRef",
    "ResolvedPath",
    "ResolvedMethod",
    "ReducerBinding",
    "FieldMapping",
    "ImplicitMapping",
    "ExplicitMapping",
    "ComputedMapping",
    "ProjectionPlan",
    # Types
    "format_signature",
    "is_assignable",
    "type_name",
]
