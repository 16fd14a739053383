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
"""Type tokens: naming, assignability, and signature formatting.

A type token is any hashable value standing for a type: usually a Python
class (``str``, ``Decimal``, a dataclass), a :class:`SourceType`, or
``typing.Any``. Parameter lists are matched by token equality; return types
by :func:`is_assignable`.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

# PEP 484 numeric tower shortcuts: an int is acceptable where a float is expected.
_NUMERIC_PROMOTIONS: dict[type, tuple[type, ...]] = {
    int: (float, complex),
    float: (complex,),
}


def type_name(tp: Any) -> str:
    """Short human-readable name of a type token."""
    if tp is Any:
        return "Any"
    if tp is type(None):
        return "None"
    name = getattr(tp, "name", None)
    if isinstance(name, str) and not isinstance(tp, type):
        return name
    if isinstance(tp, type):
        return tp.__qualname__
    return str(tp)


def is_assignable(actual: Any, expected: Any) -> bool:
    """Whether a value of type ``actual`` can be used where ``expected`` is required."""
    if expected is Any or expected is object:
        return True
    if actual == expected:
        return True
    if isinstance(actual, type) and isinstance(expected, type):
        if expected in _NUMERIC_PROMOTIONS.get(actual, ()):
            return True
        try:
            return issubclass(actual, expected)
        except TypeError:
            return False
    return False


def format_signature(name: str, param_types: Iterable[Any], return_type: Any) -> str:
    """Render ``name(P1, P2) -> R``."""
    params = ", ".join(type_name(p) for p in param_types)
    return f"{name}({params}) -> {type_name(return_type)}"
