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
"""Plan builder — classifies every target field and assembles the projection plan.

The builder is the only component with cross-field knowledge. Field errors
are collected rather than raised, so a single build reports every defect in a
target declaration; the plan is returned only when no field failed.

Usage::

    builder = PlanBuilder()
    plan = builder.build(
        source_type_from_class(Customer),
        [
            Implicit("email", str),
            Computed("fullName", str, depends_on=["firstName", "lastName"]),
        ],
        ProviderRegistry([provider_from_class(CustomerComputations)]),
        target_name="CustomerDTO",
    )
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

import structlog

from pyfly_projection.config.properties.resolver import ResolverProperties
from pyfly_projection.kernel.exceptions import (
    CircularDependencyError,
    DuplicateFieldError,
    MethodNotFoundError,
    ProjectionResolutionError,
    ResolutionError,
    TransformationMustBeStatelessError,
)
from pyfly_projection.logging.structlog_adapter import bind_target
from pyfly_projection.model.directive import Computed, Directive, Explicit, Implicit
from pyfly_projection.model.plan import (
    ComputedMapping,
    ExplicitMapping,
    FieldMapping,
    ImplicitMapping,
    ProjectionPlan,
    ReducerBinding,
    ResolvedMethod,
    ResolvedPath,
)
from pyfly_projection.model.provider import ProviderDescriptor, ProviderRegistry
from pyfly_projection.model.source import SourceType
from pyfly_projection.model.types import is_assignable
from pyfly_projection.resolution.methods import convention_name, resolve_method
from pyfly_projection.resolution.paths import lookup_field, resolve_path
from pyfly_projection.resolution.reducers import effective_parameter_types, pair_reducers

logger = structlog.get_logger("pyfly_projection.resolution.builder")


class PlanBuilder:
    """Builds projection plans. Holds only configuration; every build is independent.

    Args:
        properties: Resolver settings; defaults apply when omitted.
    """

    def __init__(self, properties: ResolverProperties | None = None) -> None:
        self._properties = properties or ResolverProperties()

    @property
    def properties(self) -> ResolverProperties:
        return self._properties

    def build(
        self,
        source_type: SourceType,
        directives: Iterable[Directive],
        providers: ProviderRegistry | Iterable[ProviderDescriptor] = (),
        *,
        target_name: str | None = None,
    ) -> ProjectionPlan:
        """Resolve every directive into a plan.

        Raises:
            ProjectionResolutionError: One or more fields failed; ``errors``
                lists all of them in declaration order.
        """
        registry = _as_registry(providers)
        target = target_name or f"{source_type.name}Projection"
        with bind_target(target):
            fields, errors = self._resolve_all(source_type, list(directives), registry)

            if errors:
                logger.warning("plan_rejected", errors=len(errors))
                raise ProjectionResolutionError(target, errors)

            logger.info("plan_built", source=source_type.name, fields=len(fields))
        return ProjectionPlan(
            target_name=target,
            source_type=source_type,
            providers=registry,
            fields=fields,
        )

    def validate(
        self,
        source_type: SourceType,
        directives: Iterable[Directive],
        providers: ProviderRegistry | Iterable[ProviderDescriptor] = (),
    ) -> list[ResolutionError]:
        """Every field error a build would report, without raising."""
        _, errors = self._resolve_all(source_type, list(directives), _as_registry(providers))
        return errors

    # ------------------------------------------------------------------
    # Field dispatch
    # ------------------------------------------------------------------

    def _resolve_all(
        self,
        source_type: SourceType,
        directives: list[Directive],
        providers: ProviderRegistry,
    ) -> tuple[dict[str, FieldMapping], list[ResolutionError]]:
        computed_names = {d.name for d in directives if isinstance(d, Computed)}
        fields: dict[str, FieldMapping] = {}
        errors: list[ResolutionError] = []
        seen: set[str] = set()

        for directive in directives:
            if directive.name in seen:
                errors.append(DuplicateFieldError(directive.name))
                continue
            seen.add(directive.name)

            if isinstance(directive, Computed):
                field_errors: list[ResolutionError] = []
                mapping = self._resolve_computed(directive, source_type, providers, computed_names, field_errors)
                errors.extend(field_errors)
            else:
                mapping = None
                try:
                    mapping = self._resolve_copy(directive, source_type)
                except ResolutionError as exc:
                    errors.append(exc.for_field(directive.name))

            if mapping is not None:
                fields[directive.name] = mapping

        return fields, errors

    @staticmethod
    def _resolve_copy(directive: Directive, source_type: SourceType) -> FieldMapping:
        if isinstance(directive, Implicit):
            return ImplicitMapping(directive.name, directive.type, source_field=lookup_field(source_type, directive.name))
        if isinstance(directive, Explicit):
            return ExplicitMapping(directive.name, directive.type, resolved_path=resolve_path(source_type, directive.path))
        raise TypeError(f"Unsupported directive for field '{directive.name}': {type(directive).__name__}")

    # ------------------------------------------------------------------
    # Computed fields
    # ------------------------------------------------------------------

    def _resolve_computed(
        self,
        directive: Computed,
        source_type: SourceType,
        providers: ProviderRegistry,
        computed_names: set[str],
        errors: list[ResolutionError],
    ) -> ComputedMapping | None:
        name = directive.name
        paths = self._resolve_dependencies(directive, source_type, computed_names, errors)
        if errors:
            return None

        try:
            bindings = pair_reducers(name, paths, directive.reducers)
            param_types = effective_parameter_types(paths, bindings)
            compute = self._resolve_compute(directive, providers, param_types, bindings)
            transform = self._resolve_transform(directive, providers, compute)
        except ResolutionError as exc:
            errors.append(exc.for_field(name))
            return None

        return ComputedMapping(
            name,
            directive.type,
            dependencies=tuple(paths),
            compute_method=compute,
            transform_method=transform,
            reducer_plan=bindings,
        )

    @staticmethod
    def _resolve_dependencies(
        directive: Computed,
        source_type: SourceType,
        computed_names: set[str],
        errors: list[ResolutionError],
    ) -> list[ResolvedPath]:
        """Resolve ``depends_on`` in order, recording every failing entry."""
        paths: list[ResolvedPath] = []
        for dependency in directive.depends_on:
            root = dependency.split(".", 1)[0]
            if root != directive.name and root in computed_names:
                errors.append(CircularDependencyError(directive.name, dependency=dependency, sibling=root))
                continue
            try:
                paths.append(resolve_path(source_type, dependency))
            except ResolutionError as exc:
                errors.append(exc.for_field(directive.name))
        return paths

    def _resolve_compute(
        self,
        directive: Computed,
        providers: ProviderRegistry,
        param_types: tuple[Any, ...],
        bindings: Sequence[ReducerBinding],
    ) -> ResolvedMethod:
        # With a transformation, stage two checks the field type instead.
        expected = Any if directive.then is not None else directive.type
        convention = convention_name(
            directive.name,
            self._properties.convention_prefix,
            self._properties.convention_style,
        )
        try:
            return resolve_method(providers, param_types, expected, directive.computed_by, convention)
        except MethodNotFoundError:
            if not self._accepts_identity(directive, param_types, bindings, expected):
                raise
        logger.debug("identity_reduction", field=directive.name, reducer=str(bindings[0].reducer))
        return ResolvedMethod.identity(param_types[0])

    def _accepts_identity(
        self,
        directive: Computed,
        param_types: tuple[Any, ...],
        bindings: Sequence[ReducerBinding],
        expected: Any,
    ) -> bool:
        """A single reduced dependency with no computation method passes through unchanged."""
        return (
            self._properties.identity_reduction
            and directive.computed_by is None
            and len(param_types) == 1
            and len(bindings) == 1
            and is_assignable(param_types[0], expected)
        )

    @staticmethod
    def _resolve_transform(
        directive: Computed,
        providers: ProviderRegistry,
        compute: ResolvedMethod,
    ) -> ResolvedMethod | None:
        if directive.then is None:
            return None
        transform = resolve_method(providers, (compute.return_type,), directive.type, directive.then)
        if transform.requires_instance:
            raise TransformationMustBeStatelessError(transform.provider_id or "", transform.name)
        return transform


def _as_registry(providers: ProviderRegistry | Iterable[ProviderDescriptor]) -> ProviderRegistry:
    if isinstance(providers, ProviderRegistry):
        return providers
    return ProviderRegistry(providers)
