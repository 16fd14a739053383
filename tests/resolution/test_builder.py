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
"""Tests for PlanBuilder."""

from __future__ import annotations

import dataclasses
from decimal import Decimal

import pytest
import structlog

from pyfly_projection.config.properties.resolver import ResolverProperties
from pyfly_projection.kernel.exceptions import (
    CircularDependencyError,
    DuplicateFieldError,
    InvalidCollectionPathError,
    MethodNotFoundError,
    PathNotFoundError,
    ProjectionResolutionError,
    ProviderNotRegisteredError,
    ReducerCountMismatchError,
    TransformationMustBeStatelessError,
)
from pyfly_projection.model.directive import Computed, Explicit, Implicit, MethodRef, Reducer
from pyfly_projection.model.plan import ComputedMapping, ExplicitMapping, ImplicitMapping
from pyfly_projection.model.provider import (
    InstanceByName,
    InstanceByType,
    MethodSignature,
    ProviderDescriptor,
    ProviderRegistry,
    Stateless,
)
from pyfly_projection.model.source import SourceField, SourceType
from pyfly_projection.resolution import builder as builder_module
from pyfly_projection.resolution.builder import PlanBuilder

# ---------------------------------------------------------------------------
# Source model and providers
# ---------------------------------------------------------------------------

ITEM = SourceType.of("Item", SourceField("sku", str), SourceField("quantity", int))
ORDER = SourceType.of(
    "Order",
    SourceField("total", Decimal),
    SourceField("items", ITEM, collection=True),
)
ADDRESS = SourceType.of("Address", SourceField("city", str), SourceField("street", str))
CUSTOMER = SourceType.of(
    "Customer",
    SourceField("firstName", str),
    SourceField("lastName", str),
    SourceField("email", str),
    SourceField("address", ADDRESS, nullable=True),
    SourceField("orders", ORDER, collection=True),
)

USER_COMPUTATIONS = ProviderDescriptor(
    "UserComputations",
    methods=[
        MethodSignature("getFullName", (str, str), str),
        MethodSignature("toFullName", (str, str), str),
        MethodSignature("getGreeting", (str,), str),
        MethodSignature("getOrderCount", (int,), int),
        MethodSignature("getSummary", (str, Decimal), str),
        MethodSignature("getStats", (Decimal, int), str),
    ],
)
FORMATTERS = ProviderDescriptor(
    "Formatters",
    methods=[
        MethodSignature("formatAmount", (Decimal,), str),
        MethodSignature("upper", (str,), str),
    ],
)
PRICING = ProviderDescriptor(
    "Pricing",
    InstanceByName("pricingService"),
    methods=[MethodSignature("getDiscount", (Decimal,), Decimal, stateless=False)],
)
FMT = ProviderDescriptor(
    "Fmt",
    InstanceByType(),
    methods=[MethodSignature("format", (Decimal,), str, stateless=False)],
)

PROVIDERS = ProviderRegistry([USER_COMPUTATIONS, FORMATTERS, PRICING])


@pytest.fixture
def builder() -> PlanBuilder:
    return PlanBuilder()


def _errors(builder: PlanBuilder, *directives, providers=PROVIDERS):
    with pytest.raises(ProjectionResolutionError) as exc_info:
        builder.build(CUSTOMER, list(directives), providers)
    return exc_info.value.errors


# ---------------------------------------------------------------------------
# Copy fields
# ---------------------------------------------------------------------------


class TestCopyFields:
    def test_implicit_field(self, builder: PlanBuilder) -> None:
        plan = builder.build(CUSTOMER, [Implicit("email", str)])

        mapping = plan["email"]
        assert isinstance(mapping, ImplicitMapping)
        assert mapping.source_field.name == "email"
        assert mapping.source_field.owner == "Customer"

    def test_implicit_collection_is_copied_whole(self, builder: PlanBuilder) -> None:
        plan = builder.build(CUSTOMER, [Implicit("orders", list)])
        assert plan["orders"].source_field.collection is True

    def test_implicit_field_missing_from_source(self, builder: PlanBuilder) -> None:
        (error,) = _errors(builder, Implicit("phone", str))

        assert isinstance(error, PathNotFoundError)
        assert error.field == "phone"

    def test_explicit_field(self, builder: PlanBuilder) -> None:
        plan = builder.build(CUSTOMER, [Explicit("city", str, path="address.city")])

        mapping = plan["city"]
        assert isinstance(mapping, ExplicitMapping)
        assert mapping.resolved_path.terminal_type is str
        assert mapping.resolved_path.nullable is True

    def test_explicit_path_errors_propagate_unchanged(self, builder: PlanBuilder) -> None:
        (error,) = _errors(builder, Explicit("orders", list, path="orders"))

        assert isinstance(error, InvalidCollectionPathError)
        assert error.path == "orders"
        assert error.field == "orders"

    def test_explicit_path_through_collection(self, builder: PlanBuilder) -> None:
        plan = builder.build(CUSTOMER, [Explicit("totals", list, path="orders.total")])
        assert plan["totals"].resolved_path.traverses_collection is True


# ---------------------------------------------------------------------------
# Computed fields
# ---------------------------------------------------------------------------


class TestComputedFields:
    def test_convention_name(self, builder: PlanBuilder) -> None:
        plan = builder.build(
            CUSTOMER,
            [Computed("fullName", str, depends_on=["firstName", "lastName"])],
            PROVIDERS,
        )

        mapping = plan["fullName"]
        assert isinstance(mapping, ComputedMapping)
        assert mapping.compute_method.provider_id == "UserComputations"
        assert mapping.compute_method.name == "getFullName"
        assert [d.path for d in mapping.dependencies] == ["firstName", "lastName"]
        assert mapping.reducer_plan == ()
        assert mapping.transform_method is None

    def test_computed_by_name_override(self, builder: PlanBuilder) -> None:
        plan = builder.build(
            CUSTOMER,
            [Computed("name", str, depends_on=["firstName", "lastName"], computed_by=MethodRef(name="toFullName"))],
            PROVIDERS,
        )
        assert plan["name"].compute_method.name == "toFullName"

    def test_empty_computed_by_falls_back_to_convention(self, builder: PlanBuilder) -> None:
        plan = builder.build(
            CUSTOMER,
            [Computed("fullName", str, depends_on=["firstName", "lastName"], computed_by=MethodRef())],
            PROVIDERS,
        )
        assert plan["fullName"].compute_method.name == "getFullName"

    def test_computed_by_provider_restricts_search(self, builder: PlanBuilder) -> None:
        errors = _errors(
            builder,
            Computed("greeting", str, depends_on=["firstName"], computed_by=MethodRef(provider="Formatters")),
        )
        assert isinstance(errors[0], MethodNotFoundError)
        assert errors[0].searched == ["Formatters"]

    def test_unregistered_provider(self, builder: PlanBuilder) -> None:
        (error,) = _errors(
            builder,
            Computed("greeting", str, depends_on=["firstName"], computed_by=MethodRef(provider="Missing")),
        )
        assert isinstance(error, ProviderNotRegisteredError)
        assert error.field == "greeting"

    def test_return_type_must_match_field(self, builder: PlanBuilder) -> None:
        (error,) = _errors(builder, Computed("fullName", int, depends_on=["firstName", "lastName"]))
        assert isinstance(error, MethodNotFoundError)
        assert "getFullName(str, str) -> int" in error.expected_signature

    def test_instance_method_records_invocation(self, builder: PlanBuilder) -> None:
        plan = builder.build(
            CUSTOMER,
            [Computed("discount", Decimal, depends_on=["orders.total"], reducers=["sum"])],
            PROVIDERS,
        )
        method = plan["discount"].compute_method
        assert method.provider_id == "Pricing"
        assert method.invocation == InstanceByName("pricingService")

    def test_plan_records_providers_and_source(self, builder: PlanBuilder) -> None:
        plan = builder.build(CUSTOMER, [Implicit("email", str)], PROVIDERS, target_name="CustomerDTO")

        assert plan.target_name == "CustomerDTO"
        assert plan.source_type is CUSTOMER
        assert plan.providers is PROVIDERS

    def test_default_target_name(self, builder: PlanBuilder) -> None:
        plan = builder.build(CUSTOMER, [Implicit("email", str)])
        assert plan.target_name == "CustomerProjection"

    def test_accepts_plain_provider_list(self, builder: PlanBuilder) -> None:
        plan = builder.build(
            CUSTOMER,
            [Computed("greeting", str, depends_on=["firstName"])],
            [USER_COMPUTATIONS],
        )
        assert plan["greeting"].compute_method.provider_id == "UserComputations"


class TestReducers:
    def test_reduced_dependency_is_paired(self, builder: PlanBuilder) -> None:
        plan = builder.build(
            CUSTOMER,
            [Computed("orderCount", int, depends_on=["orders.total"], reducers=[Reducer.COUNT])],
            PROVIDERS,
        )

        mapping = plan["orderCount"]
        (binding,) = mapping.reducer_plan
        assert binding.path is mapping.dependencies[0]
        assert binding.reducer is Reducer.COUNT
        assert mapping.reducer_for(mapping.dependencies[0]) is Reducer.COUNT
        assert mapping.compute_method.param_types == (int,)

    def test_mixed_scalar_and_collection_dependencies(self, builder: PlanBuilder) -> None:
        plan = builder.build(
            CUSTOMER,
            [Computed("summary", str, depends_on=["firstName", "orders.total"], reducers=[Reducer.AVG])],
            PROVIDERS,
        )

        mapping = plan["summary"]
        assert mapping.compute_method.param_types == (str, Decimal)
        assert mapping.reducer_for(mapping.dependencies[0]) is None
        assert mapping.reducer_for(mapping.dependencies[1]) is Reducer.AVG

    def test_two_collection_dependencies(self, builder: PlanBuilder) -> None:
        plan = builder.build(
            CUSTOMER,
            [
                Computed(
                    "stats",
                    str,
                    depends_on=["orders.total", "orders.items.sku"],
                    reducers=[Reducer.MAX, Reducer.COUNT_DISTINCT],
                )
            ],
            PROVIDERS,
        )

        mapping = plan["stats"]
        assert [b.reducer for b in mapping.reducer_plan] == [Reducer.MAX, Reducer.COUNT_DISTINCT]
        assert mapping.dependencies[1].collection_hop_count == 2

    @pytest.mark.parametrize(
        ("depends_on", "reducers"),
        [
            (["firstName"], [Reducer.SUM]),
            (["orders.total"], []),
            (["orders.total"], [Reducer.SUM, Reducer.SUM, Reducer.SUM]),
            (["orders.total", "orders.items.sku"], [Reducer.SUM]),
        ],
    )
    def test_reducer_count_mismatch(self, builder: PlanBuilder, depends_on, reducers) -> None:
        (error,) = _errors(builder, Computed("value", str, depends_on=depends_on, reducers=reducers))

        assert isinstance(error, ReducerCountMismatchError)
        assert error.field == "value"
        assert error.actual == len(reducers)


class TestIdentityReduction:
    """A lone reduced dependency with no computation method passes straight through.

    Identity pass-through is an inferred default for purely reducible fields.
    """

    def test_sum_without_method(self, builder: PlanBuilder) -> None:
        plan = builder.build(
            CUSTOMER,
            [Computed("totalOrders", Decimal, depends_on=["orders.total"], reducers=[Reducer.SUM])],
            PROVIDERS,
        )

        method = plan["totalOrders"].compute_method
        assert method.is_identity is True
        assert method.param_types == (Decimal,)
        assert method.return_type is Decimal
        assert method.invocation == Stateless()

    def test_count_feeds_numeric_field(self, builder: PlanBuilder) -> None:
        plan = builder.build(
            CUSTOMER,
            [Computed("itemCount", float, depends_on=["orders.items.sku"], reducers=[Reducer.COUNT])],
        )
        assert plan["itemCount"].compute_method.return_type is int

    def test_provider_method_takes_precedence(self, builder: PlanBuilder) -> None:
        plan = builder.build(
            CUSTOMER,
            [Computed("orderCount", int, depends_on=["orders.total"], reducers=[Reducer.COUNT])],
            PROVIDERS,
        )
        assert plan["orderCount"].compute_method.name == "getOrderCount"

    def test_explicit_method_name_disables_identity(self, builder: PlanBuilder) -> None:
        (error,) = _errors(
            builder,
            Computed(
                "total",
                Decimal,
                depends_on=["orders.total"],
                reducers=[Reducer.SUM],
                computed_by=MethodRef(name="sumUp"),
            ),
        )
        assert isinstance(error, MethodNotFoundError)

    def test_reduced_type_must_fit_field(self, builder: PlanBuilder) -> None:
        (error,) = _errors(
            builder, Computed("label", str, depends_on=["orders.total"], reducers=[Reducer.SUM])
        )
        assert isinstance(error, MethodNotFoundError)

    def test_scalar_dependency_is_not_passed_through(self, builder: PlanBuilder) -> None:
        (error,) = _errors(builder, Computed("nickname", str, depends_on=["firstName"]))
        assert isinstance(error, MethodNotFoundError)

    def test_can_be_disabled(self) -> None:
        builder = PlanBuilder(ResolverProperties(identity_reduction=False))
        (error,) = _errors(
            builder, Computed("total", Decimal, depends_on=["orders.total"], reducers=[Reducer.SUM])
        )
        assert isinstance(error, MethodNotFoundError)


class TestTransformation:
    def test_transform_receives_compute_result(self, builder: PlanBuilder) -> None:
        plan = builder.build(
            CUSTOMER,
            [
                Computed(
                    "totalLabel",
                    str,
                    depends_on=["orders.total"],
                    reducers=[Reducer.SUM],
                    then=MethodRef(name="formatAmount"),
                )
            ],
            PROVIDERS,
        )

        mapping = plan["totalLabel"]
        assert mapping.compute_method.is_identity is True
        assert mapping.transform_method is not None
        assert mapping.transform_method.provider_id == "Formatters"
        assert mapping.transform_method.param_types == (Decimal,)
        assert mapping.transform_method.return_type is str

    def test_compute_return_unconstrained_when_transformed(self, builder: PlanBuilder) -> None:
        plan = builder.build(
            CUSTOMER,
            [
                Computed(
                    "discountLabel",
                    str,
                    depends_on=["orders.total"],
                    reducers=[Reducer.SUM],
                    computed_by=MethodRef(provider="Pricing", name="getDiscount"),
                    then=MethodRef(provider="Formatters", name="formatAmount"),
                )
            ],
            PROVIDERS,
        )

        mapping = plan["discountLabel"]
        assert mapping.compute_method.return_type is Decimal
        assert mapping.compute_method.requires_instance is True
        assert mapping.transform_method.name == "formatAmount"

    def test_empty_then_means_no_transformation(self, builder: PlanBuilder) -> None:
        plan = builder.build(
            CUSTOMER,
            [Computed("fullName", str, depends_on=["firstName", "lastName"], then=MethodRef())],
            PROVIDERS,
        )

        mapping = plan["fullName"]
        assert mapping.transform_method is None
        assert mapping.compute_method.name == "getFullName"

    def test_empty_then_keeps_compute_return_checked(self, builder: PlanBuilder) -> None:
        (error,) = _errors(
            builder,
            Computed("fullName", int, depends_on=["firstName", "lastName"], then=MethodRef()),
        )
        assert isinstance(error, MethodNotFoundError)
        assert error.field == "fullName"

    def test_instance_transformation_is_rejected(self, builder: PlanBuilder) -> None:
        (error,) = _errors(
            builder,
            Computed(
                "totalLabel",
                str,
                depends_on=["orders.total"],
                reducers=[Reducer.SUM],
                then=MethodRef(provider="Fmt", name="format"),
            ),
            providers=ProviderRegistry([USER_COMPUTATIONS, FMT]),
        )

        assert isinstance(error, TransformationMustBeStatelessError)
        assert error.provider == "Fmt"
        assert error.method == "format"
        assert error.field == "totalLabel"

    def test_transformation_needs_a_name(self, builder: PlanBuilder) -> None:
        (error,) = _errors(
            builder,
            Computed(
                "totalLabel",
                str,
                depends_on=["orders.total"],
                reducers=[Reducer.SUM],
                then=MethodRef(provider="Formatters"),
            ),
        )
        assert isinstance(error, MethodNotFoundError)
        assert error.method_name is None

    def test_transform_return_must_match_field(self, builder: PlanBuilder) -> None:
        (error,) = _errors(
            builder,
            Computed(
                "totalLabel",
                int,
                depends_on=["orders.total"],
                reducers=[Reducer.SUM],
                then=MethodRef(name="formatAmount"),
            ),
        )
        assert isinstance(error, MethodNotFoundError)
        assert error.expected_signature == "formatAmount(Decimal) -> int"


class TestCircularDependencies:
    def test_dependency_on_computed_sibling(self, builder: PlanBuilder) -> None:
        errors = _errors(
            builder,
            Computed("fullName", str, depends_on=["firstName", "lastName"]),
            Computed("greeting", str, depends_on=["fullName"]),
        )

        (error,) = errors
        assert isinstance(error, CircularDependencyError)
        assert error.field == "greeting"
        assert error.sibling == "fullName"

    def test_nested_path_rooted_on_computed_sibling(self, builder: PlanBuilder) -> None:
        errors = _errors(
            builder,
            Computed("greeting", str, depends_on=["fullName.first"]),
            Computed("fullName", str, depends_on=["firstName", "lastName"]),
        )
        assert isinstance(errors[0], CircularDependencyError)
        assert errors[0].dependency == "fullName.first"

    def test_shadowing_source_field_is_still_circular(self, builder: PlanBuilder) -> None:
        errors = _errors(
            builder,
            Computed("firstName", str, depends_on=["firstName"], computed_by=MethodRef(name="upper")),
            Computed("greeting", str, depends_on=["firstName"]),
        )
        (error,) = errors
        assert isinstance(error, CircularDependencyError)
        assert error.field == "greeting"

    def test_dependency_on_implicit_sibling_is_allowed(self, builder: PlanBuilder) -> None:
        plan = builder.build(
            CUSTOMER,
            [Implicit("firstName", str), Computed("greeting", str, depends_on=["firstName"])],
            PROVIDERS,
        )
        assert plan["greeting"].dependencies[0].path == "firstName"

    def test_self_named_dependency_reads_the_source(self, builder: PlanBuilder) -> None:
        plan = builder.build(
            CUSTOMER,
            [Computed("email", str, depends_on=["email"], computed_by=MethodRef(name="upper"))],
            PROVIDERS,
        )
        assert plan["email"].compute_method.name == "upper"


# ---------------------------------------------------------------------------
# Error aggregation and plan properties
# ---------------------------------------------------------------------------


class TestErrorAggregation:
    def test_all_field_errors_are_reported(self, builder: PlanBuilder) -> None:
        errors = _errors(
            builder,
            Implicit("email", str),
            Implicit("phone", str),
            Explicit("city", str, path="address.town"),
            Computed("fullName", str, depends_on=["firstName", "lastName"]),
            Computed("nickname", str, depends_on=["firstName"]),
        )

        assert [e.field for e in errors] == ["phone", "city", "nickname"]
        assert [type(e) for e in errors] == [PathNotFoundError, PathNotFoundError, MethodNotFoundError]

    def test_every_failing_dependency_of_a_field_is_reported(self, builder: PlanBuilder) -> None:
        errors = _errors(
            builder,
            Computed("value", str, depends_on=["middleName", "orders", "address.zip"]),
        )

        assert [type(e) for e in errors] == [PathNotFoundError, InvalidCollectionPathError, PathNotFoundError]
        assert {e.field for e in errors} == {"value"}

    def test_duplicate_target_field(self, builder: PlanBuilder) -> None:
        (error,) = _errors(builder, Implicit("email", str), Implicit("email", str))

        assert isinstance(error, DuplicateFieldError)
        assert error.field == "email"

    def test_aggregate_message_and_diagnostics(self, builder: PlanBuilder) -> None:
        with pytest.raises(ProjectionResolutionError) as exc_info:
            builder.build(CUSTOMER, [Implicit("phone", str)], target_name="CustomerDTO")

        error = exc_info.value
        assert str(error).startswith("Projection 'CustomerDTO' has 1 error(s):")
        assert "[phone]" in str(error)
        (diagnostic,) = error.diagnostics()
        assert diagnostic.code == "PROJECTION_PATH_NOT_FOUND"
        assert diagnostic.field == "phone"

    def test_validate_returns_errors_without_raising(self, builder: PlanBuilder) -> None:
        errors = builder.validate(CUSTOMER, [Implicit("phone", str), Implicit("email", str)])
        assert [e.field for e in errors] == ["phone"]

    def test_validate_clean_declaration(self, builder: PlanBuilder) -> None:
        assert builder.validate(CUSTOMER, [Implicit("email", str)]) == []


class TestPlanProperties:
    def test_field_order_follows_declaration(self, builder: PlanBuilder) -> None:
        plan = builder.build(
            CUSTOMER,
            [
                Computed("fullName", str, depends_on=["firstName", "lastName"]),
                Implicit("email", str),
                Explicit("city", str, path="address.city"),
            ],
            PROVIDERS,
        )
        assert list(plan) == ["fullName", "email", "city"]
        assert len(plan) == 3
        assert [m.name for m in plan.computed()] == ["fullName"]

    def test_plan_is_immutable(self, builder: PlanBuilder) -> None:
        plan = builder.build(CUSTOMER, [Implicit("email", str)])

        with pytest.raises(TypeError):
            plan.fields["other"] = plan["email"]  # type: ignore[index]
        with pytest.raises(dataclasses.FrozenInstanceError):
            plan.target_name = "Other"  # type: ignore[misc]

    def test_builds_are_deterministic(self, builder: PlanBuilder) -> None:
        directives = [
            Computed("fullName", str, depends_on=["firstName", "lastName"]),
            Computed("summary", str, depends_on=["firstName", "orders.total"], reducers=["avg"]),
        ]
        first = builder.build(CUSTOMER, directives, PROVIDERS)
        second = builder.build(CUSTOMER, directives, PROVIDERS)

        assert first.fields == second.fields

    def test_snake_case_convention(self) -> None:
        builder = PlanBuilder(ResolverProperties(convention_style="snake"))
        provider = ProviderDescriptor("Snake", methods=[MethodSignature("get_full_name", (str, str), str)])

        plan = builder.build(
            CUSTOMER, [Computed("full_name", str, depends_on=["firstName", "lastName"])], [provider]
        )
        assert plan["full_name"].compute_method.name == "get_full_name"


class _RecordingLogger:
    """Records each event with the context variables bound when it was logged."""

    def __init__(self) -> None:
        self.events: list[tuple[str, dict]] = []

    def _record(self, event: str, **kw) -> None:
        self.events.append((event, {**structlog.contextvars.get_contextvars(), **kw}))

    debug = info = warning = _record


class TestBuildLogging:
    @pytest.fixture
    def recorder(self, monkeypatch: pytest.MonkeyPatch) -> _RecordingLogger:
        recorder = _RecordingLogger()
        monkeypatch.setattr(builder_module, "logger", recorder)
        return recorder

    def test_built_plan_is_logged_under_its_target(self, builder: PlanBuilder, recorder: _RecordingLogger) -> None:
        builder.build(CUSTOMER, [Implicit("email", str)], target_name="CustomerDTO")

        ((event, context),) = recorder.events
        assert event == "plan_built"
        assert context["target"] == "CustomerDTO"
        assert context["fields"] == 1

    def test_rejected_plan_is_logged_under_its_target(self, builder: PlanBuilder, recorder: _RecordingLogger) -> None:
        with pytest.raises(ProjectionResolutionError):
            builder.build(CUSTOMER, [Implicit("phone", str)])

        ((event, context),) = recorder.events
        assert event == "plan_rejected"
        assert context["target"] == "CustomerProjection"

    def test_target_is_unbound_after_build(self, builder: PlanBuilder, recorder: _RecordingLogger) -> None:
        builder.build(CUSTOMER, [Implicit("email", str)], target_name="CustomerDTO")
        with pytest.raises(ProjectionResolutionError):
            builder.build(CUSTOMER, [Implicit("phone", str)], target_name="CustomerDTO")

        assert "target" not in structlog.contextvars.get_contextvars()
