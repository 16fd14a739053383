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
"""Reducer pairing and effective parameter types of computed fields."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from pyfly_projection.kernel.exceptions import ReducerCountMismatchError
from pyfly_projection.model.directive import Reducer
from pyfly_projection.model.plan import ReducerBinding, ResolvedPath


def pair_reducers(
    field: str,
    paths: Sequence[ResolvedPath],
    reducers: Sequence[Reducer],
) -> tuple[ReducerBinding, ...]:
    """Zip collection-traversing paths with reducers, left to right.

    Scalar paths are skipped and never consume a reducer.

    Raises:
        ReducerCountMismatchError: The reducer count differs from the number
            of collection-traversing paths.
    """
    collection_paths = [p for p in paths if p.traverses_collection]
    if len(reducers) != len(collection_paths):
        raise ReducerCountMismatchError(
            field,
            expected=len(collection_paths),
            actual=len(reducers),
            collection_paths=[p.path for p in collection_paths],
        )
    return tuple(ReducerBinding(path, reducer) for path, reducer in zip(collection_paths, reducers, strict=True))


def effective_parameter_types(
    paths: Sequence[ResolvedPath],
    bindings: Sequence[ReducerBinding],
) -> tuple[Any, ...]:
    """Types the computation method receives, in ``depends_on`` order.

    A scalar path contributes its terminal type; a collection path the type
    its reducer produces from the leaf type.
    """
    reduced = {id(b.path): b.result_type for b in bindings}
    return tuple(reduced.get(id(p), p.terminal_type) for p in paths)
