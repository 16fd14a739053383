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
"""Projection Kernel — exceptions and diagnostics with zero external dependencies."""

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

__all__ = [
    # Base
    "ProjectionException",
    "DefinitionError",
    "DuplicateProviderError",
    "ResolutionError",
    # Field diagnostics
    "CircularDependencyError",
    "DuplicateFieldError",
    "InvalidCollectionPathError",
    "MethodNotFoundError",
    "PathNotFoundError",
    "ProviderNotRegisteredError",
    "ReducerCountMismatchError",
    "TransformationMustBeStatelessError",
    # Aggregate
    "ProjectionResolutionError",
    # Types
    "Diagnostic",
]
