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
"""Resolution engine — path resolution, method resolution, and plan building."""

from __future__ import annotations

from pyfly_projection.resolution.batch import BatchResult, BuildRequest, build_all
from pyfly_projection.resolution.builder import PlanBuilder
from pyfly_projection.resolution.methods import convention_name, resolve_method
from pyfly_projection.resolution.paths import lookup_field, resolve_path
from pyfly_projection.resolution.reducers import effective_parameter_types, pair_reducers

__all__ = [
    "PlanBuilder",
    "resolve_path",
    "lookup_field",
    "resolve_method",
    "convention_name",
    "pair_reducers",
    "effective_parameter_types",
    "build_all",
    "BuildRequest",
    "BatchResult",
]
