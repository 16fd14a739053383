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
"""Path resolver — dot-paths into a source type.

Segments are walked left to right. A collection segment is crossed by
continuing against its element type and counts one hop; all hops flatten into
a single leaf-value sequence, so only the count is kept. A path may never end
on a collection.
"""

from __future__ import annotations

import structlog

from pyfly_projection.kernel.exceptions import InvalidCollectionPathError, PathNotFoundError
from pyfly_projection.model.plan import FieldRef, ResolvedPath
from pyfly_projection.model.source import SourceType
from pyfly_projection.model.types import type_name

logger = structlog.get_logger("pyfly_projection.resolution.paths")


def resolve_path(source_type: SourceType, path: str) -> ResolvedPath:
    """Resolve ``path`` against ``source_type``.

    Raises:
        PathNotFoundError: A segment has no matching field in the current type
            (including empty segments and segments below a plain scalar).
        InvalidCollectionPathError: The last segment is a collection.
    """
    segments = path.split(".")
    current: SourceType | None = source_type
    refs: list[FieldRef] = []
    hops = 0

    for index, segment in enumerate(segments):
        resolved = ".".join(segments[:index])
        if current is None:
            # The previous segment is a plain scalar with no fields to descend into.
            raise PathNotFoundError(path, segment, resolved=resolved, owner=type_name(refs[-1].type))

        source_field = current.get(segment) if segment else None
        if source_field is None:
            raise PathNotFoundError(path, segment, resolved=resolved, owner=current.name)

        if source_field.collection:
            if index == len(segments) - 1:
                raise InvalidCollectionPathError(path, segment, owner=current.name)
            hops += 1

        refs.append(
            FieldRef(
                name=segment,
                owner=current.name,
                type=source_field.type,
                collection=source_field.collection,
                nullable=source_field.nullable,
            )
        )
        current = source_field.nested

    resolved_path = ResolvedPath(
        path=path,
        segments=tuple(refs),
        terminal_type=refs[-1].type,
        traverses_collection=hops > 0,
        collection_hop_count=hops,
    )
    logger.debug("path_resolved", path=path, terminal=type_name(resolved_path.terminal_type), hops=hops)
    return resolved_path


def lookup_field(source_type: SourceType, name: str) -> FieldRef:
    """Look up a top-level source field by exact name.

    Unlike :func:`resolve_path` the name is never split and a collection
    field is acceptable, since the value is copied as a whole.
    """
    source_field = source_type.get(name)
    if source_field is None:
        raise PathNotFoundError(name, name, owner=source_type.name)
    return FieldRef(
        name=name,
        owner=source_type.name,
        type=source_field.type,
        collection=source_field.collection,
        nullable=source_field.nullable,
    )
