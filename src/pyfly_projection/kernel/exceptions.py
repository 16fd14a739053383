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
"""Exception hierarchy for projection resolution.

Every error raised while resolving a projection is a build-time diagnostic:
nothing here is ever raised while values are being mapped. Each error carries
a machine-readable ``code`` and a ``context`` dict so that calling tools can
render it verbatim (see :meth:`ResolutionError.to_diagnostic`).
"""

from __future__ import annotations

from collections.abc import Sequence

from pyfly_projection.kernel.types import Diagnostic

# =============================================================================
# Base Exception
# =============================================================================


class ProjectionException(Exception):
    """Base exception for all projection errors.

    Args:
        message: Human-readable error description.
        code: Machine-readable error code (e.g. "PROJECTION_PATH_NOT_FOUND").
        context: Arbitrary key-value pairs describing what was attempted.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.context: dict = context if context is not None else {}


# =============================================================================
# Definition Errors (malformed engine inputs)
# =============================================================================


class DefinitionError(ProjectionException):
    """The inputs handed to the engine are malformed."""


class DuplicateProviderError(DefinitionError):
    """Two provider descriptors share the same id."""

    def __init__(self, provider_id: str) -> None:
        self.provider_id = provider_id
        super().__init__(
            f"Provider '{provider_id}' is declared more than once",
            code="PROJECTION_DUPLICATE_PROVIDER",
            context={"provider": provider_id},
        )


# =============================================================================
# Resolution Errors (per-field diagnostics)
# =============================================================================


class ResolutionError(ProjectionException):
    """A single target field could not be resolved.

    ``field`` is the target field being resolved. Resolvers that know nothing
    about target fields leave it unset; the plan builder attaches it through
    :meth:`for_field` before collecting the error.
    """

    def __init__(
        self,
        message: str,
        *,
        code: str,
        field: str | None = None,
        context: dict | None = None,
    ) -> None:
        super().__init__(message, code=code, context=context)
        self.field = field
        if field is not None:
            self.context.setdefault("field", field)

    def for_field(self, field: str) -> ResolutionError:
        """Attach the target field name unless one is already set."""
        if self.field is None:
            self.field = field
            self.context.setdefault("field", field)
        return self

    def to_diagnostic(self) -> Diagnostic:
        """Serializable form of this error for calling tools."""
        return Diagnostic(
            code=self.code or "PROJECTION_ERROR",
            message=str(self),
            field=self.field,
            context=dict(self.context),
        )


class DuplicateFieldError(ResolutionError):
    """The directive set declares the same target field twice."""

    def __init__(self, field: str) -> None:
        super().__init__(
            f"Target field '{field}' is declared more than once",
            code="PROJECTION_DUPLICATE_FIELD",
            field=field,
        )


class PathNotFoundError(ResolutionError):
    """A path segment has no matching field in the current type."""

    def __init__(
        self,
        path: str,
        segment: str,
        *,
        resolved: str = "",
        owner: str = "",
        field: str | None = None,
    ) -> None:
        self.path = path
        self.segment = segment
        self.resolved = resolved
        self.owner = owner
        message = f"No field '{segment}' in {owner} while resolving path '{path}'"
        if resolved:
            message += f" (resolved so far: '{resolved}')"
        super().__init__(
            message,
            code="PROJECTION_PATH_NOT_FOUND",
            field=field,
            context={"path": path, "segment": segment, "resolved": resolved, "owner": owner},
        )


class InvalidCollectionPathError(ResolutionError):
    """A path terminates on a collection instead of a scalar field."""

    def __init__(self, path: str, segment: str, *, owner: str = "", field: str | None = None) -> None:
        self.path = path
        self.segment = segment
        self.owner = owner
        super().__init__(
            f"Path '{path}' ends on collection '{segment}' of {owner}; "
            f"select a field of its elements instead (e.g. '{path}.<field>')",
            code="PROJECTION_INVALID_COLLECTION_PATH",
            field=field,
            context={"path": path, "segment": segment, "owner": owner},
        )


class ReducerCountMismatchError(ResolutionError):
    """Reducer count differs from the number of collection-traversing dependencies."""

    def __init__(self, field: str, *, expected: int, actual: int, collection_paths: Sequence[str]) -> None:
        self.expected = expected
        self.actual = actual
        self.collection_paths = list(collection_paths)
        noun = "dependency" if expected == 1 else "dependencies"
        super().__init__(
            f"Computed field '{field}' declares {actual} reducer(s) but has "
            f"{expected} collection-traversing {noun}: {self.collection_paths}",
            code="PROJECTION_REDUCER_COUNT_MISMATCH",
            field=field,
            context={
                "expected": expected,
                "actual": actual,
                "collection_paths": self.collection_paths,
            },
        )


class MethodNotFoundError(ResolutionError):
    """No provider exposes a method matching the required signature."""

    def __init__(
        self,
        method_name: str | None,
        *,
        expected_signature: str,
        searched: Sequence[str],
        candidates: Sequence[str] = (),
        field: str | None = None,
    ) -> None:
        self.method_name = method_name
        self.expected_signature = expected_signature
        self.searched = list(searched)
        self.candidates = list(candidates)

        if method_name is None:
            headline = "No method name given; a transformation reference must name its method."
        else:
            headline = f"Method '{method_name}' not found in any provider."

        lines = [headline]
        lines.append(f"  Searched in: {', '.join(self.searched) or '(no providers)'}")
        lines.append(f"  Expected signature: {expected_signature}")
        for candidate in self.candidates:
            lines.append(f"  Found: {candidate}")

        super().__init__(
            "\n".join(lines),
            code="PROJECTION_METHOD_NOT_FOUND",
            field=field,
            context={
                "method": method_name,
                "expected_signature": expected_signature,
                "searched": self.searched,
                "candidates": self.candidates,
            },
        )


class TransformationMustBeStatelessError(ResolutionError):
    """A ``then`` method was matched but requires a provider instance."""

    def __init__(self, provider: str, method: str, *, field: str | None = None) -> None:
        self.provider = provider
        self.method = method
        super().__init__(
            f"Transformation '{provider}.{method}' requires a provider instance; "
            "transformation methods must be stateless",
            code="PROJECTION_TRANSFORMATION_NOT_STATELESS",
            field=field,
            context={"provider": provider, "method": method},
        )


class CircularDependencyError(ResolutionError):
    """A computed field depends on another computed target field."""

    def __init__(self, field: str, *, dependency: str, sibling: str) -> None:
        self.dependency = dependency
        self.sibling = sibling
        super().__init__(
            f"Computed field '{field}' depends on '{dependency}', which is rooted on "
            f"computed field '{sibling}'; computed fields may only depend on source paths",
            code="PROJECTION_CIRCULAR_DEPENDENCY",
            field=field,
            context={"dependency": dependency, "sibling": sibling},
        )


class ProviderNotRegisteredError(ResolutionError):
    """A method override names a provider absent from the registry."""

    def __init__(self, provider: str, *, available: Sequence[str], field: str | None = None) -> None:
        self.provider = provider
        self.available = list(available)
        lines = [f"Provider '{provider}' not found."]
        lines.append(f"  Available providers: {', '.join(self.available) or '(none)'}")
        super().__init__(
            "\n".join(lines),
            code="PROJECTION_PROVIDER_NOT_REGISTERED",
            field=field,
            context={"provider": provider, "available": self.available},
        )


# =============================================================================
# Aggregate
# =============================================================================


class ProjectionResolutionError(ProjectionException):
    """Raised by the plan builder when one or more fields failed to resolve.

    ``errors`` holds every field-level error, in field declaration order.
    """

    def __init__(self, target: str, errors: Sequence[ResolutionError]) -> None:
        self.target = target
        self.errors = list(errors)
        lines = [f"Projection '{target}' has {len(self.errors)} error(s):"]
        for error in self.errors:
            first_line = str(error).splitlines()[0]
            prefix = f"[{error.field}] " if error.field else ""
            lines.append(f"  - {prefix}{first_line}")
        super().__init__(
            "\n".join(lines),
            code="PROJECTION_RESOLUTION_FAILED",
            context={"target": target, "error_count": len(self.errors)},
        )

    def diagnostics(self) -> list[Diagnostic]:
        """One diagnostic per collected error."""
        return [error.to_diagnostic() for error in self.errors]
