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
"""pyfly-projection — resolution engine turning field directives into validated projection plans."""

from __future__ import annotations

from pyfly_projection.config.properties import LoggingProperties, ResolverProperties
from pyfly_projection.core.config import Config, config_properties
from pyfly_projection.introspection import provider_from_class, source_type_from_class
from pyfly_projection.kernel.exceptions import (
    CircularDependencyError,
    DefinitionError,
    DuplicateFieldError,
    DuplicateProviderError,
    InvalidCollectionPathError,
    MethodNotFoundError,
    PathNotFoundError,
    ProjectionException,
    ProjectionResolutionError,
    ProviderNotRegisteredError,
    ReducerCountMismatchError,
    ResolutionError,
    TransformationMustBeStatelessError,
)
from pyfly_projection.kernel.types import Diagnostic
from pyfly_projection.model import (
    Computed,
    ComputedMapping,
    Explicit,
    ExplicitMapping,
    Implicit,
    ImplicitMapping,
    InstanceByName,
    InstanceByType,
    MethodRef,
    MethodSignature,
    ProjectionPlan,
    ProviderDescriptor,
    ProviderRegistry,
    Reducer,
    ResolvedMethod,
    ResolvedPath,
    SourceField,
    SourceType,
    Stateless,
)
from pyfly_projection.resolution import (
    BatchResult,
    BuildRequest,
    PlanBuilder,
    build_all,
    resolve_method,
    resolve_path,
)

__version__ = "0.1.0"

__all__ = [
    # Source model
    "SourceField",
    "SourceType",
    # Directives
    "Implicit",
    "Explicit",
    "Computed",
    "MethodRef",
    "Reducer",
    # Providers
    "Stateless",
    "InstanceByType",
    "InstanceByName",
    "MethodSignature",
    "ProviderDescriptor",
    "ProviderRegistry",
    # Plan
    "ResolvedPath",
    "ResolvedMethod",
    "ImplicitMapping",
    "ExplicitMapping",
    "ComputedMapping",
    "ProjectionPlan",
    # Engine
    "PlanBuilder",
    "resolve_path",
    "resolve_method",
    "build_all",
    "BuildRequest",
    "BatchResult",
    # Introspection
    "source_type_from_class",
    "provider_from_class",
    # Configuration
    "Config",
    "config_properties",
    "ResolverProperties",
    "LoggingProperties",
    # Diagnostics
    "Diagnostic",
    # Exceptions
    "ProjectionException",
    "DefinitionError",
    "DuplicateProviderError",
    "ResolutionError",
    "DuplicateFieldError",
    "PathNotFoundError",
    "InvalidCollectionPathError",
    "ReducerCountMismatchError",
    "MethodNotFoundError",
    "TransformationMustBeStatelessError",
    "CircularDependencyError",
    "ProviderNotRegisteredError",
    "ProjectionResolutionError",
]
