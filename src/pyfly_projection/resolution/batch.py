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
"""Batch plan building on a thread pool.

Builds share no mutable state, so one worker per declared projection is safe.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

import structlog

from pyfly_projection.kernel.exceptions import ProjectionResolutionError, ResolutionError
from pyfly_projection.model.directive import Directive
from pyfly_projection.model.plan import ProjectionPlan
from pyfly_projection.model.provider import ProviderDescriptor, ProviderRegistry
from pyfly_projection.model.source import SourceType
from pyfly_projection.resolution.builder import PlanBuilder

logger = structlog.get_logger("pyfly_projection.resolution.batch")


@dataclass(frozen=True)
class BuildRequest:
    """Inputs of one projection build."""

    target_name: str
    source_type: SourceType
    directives: Sequence[Directive]
    providers: ProviderRegistry | Sequence[ProviderDescriptor] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "directives", tuple(self.directives))


@dataclass(frozen=True)
class BatchResult:
    """Outcome of one request: a plan, or the complete error list."""

    request: BuildRequest
    plan: ProjectionPlan | None = None
    errors: tuple[ResolutionError, ...] = field(default=())

    @property
    def ok(self) -> bool:
        return self.plan is not None


def build_all(
    requests: Iterable[BuildRequest],
    builder: PlanBuilder | None = None,
    max_workers: int | None = None,
) -> list[BatchResult]:
    """Build every request concurrently; results follow input order.

    ``max_workers`` defaults to the builder's ``max_workers`` setting.
    """
    builder = builder or PlanBuilder()
    requests = list(requests)
    workers = max_workers or builder.properties.max_workers

    def _build(request: BuildRequest) -> BatchResult:
        try:
            plan = builder.build(
                request.source_type,
                request.directives,
                request.providers,
                target_name=request.target_name,
            )
        except ProjectionResolutionError as exc:
            return BatchResult(request, errors=tuple(exc.errors))
        return BatchResult(request, plan=plan)

    with ThreadPoolExecutor(max_workers=workers) as executor:
        results = list(executor.map(_build, requests))

    failed = sum(1 for r in results if not r.ok)
    logger.info("batch_built", projections=len(results), failed=failed)
    return results
