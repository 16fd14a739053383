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
"""Resolver configuration properties."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from pyfly_projection.core.config import config_properties


@config_properties(prefix="projection.resolver")
class ResolverProperties(BaseModel):
    """Configuration for the resolution engine (projection.resolver.*).

    Attributes:
        convention_prefix: Prefix of the conventional computation method name.
        convention_style: ``camel`` turns ``fullName`` into ``getFullName``;
            ``snake`` turns ``full_name`` into ``get_full_name``.
        identity_reduction: Accept a purely reduced computed field without a
            computation method, passing the reduced value through unchanged.
        max_workers: Thread pool size for batch builds (``None`` lets the
            executor decide).
    """

    model_config = ConfigDict(frozen=True)

    convention_prefix: str = Field(default="get", pattern=r"^[A-Za-z_][A-Za-z0-9_]*$")
    convention_style: Literal["camel", "snake"] = "camel"
    identity_reduction: bool = True
    max_workers: int | None = Field(default=None, ge=1)
