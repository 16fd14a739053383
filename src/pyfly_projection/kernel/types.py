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
"""Structured diagnostic model.

A :class:`Diagnostic` is the tool-facing shape of a resolution error: calling
tools (annotation processors, code generators, linters) report one diagnostic
per collected error. All types use only the Python standard library.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Diagnostic:
    """A single build-time diagnostic."""

    code: str
    message: str
    field: str | None = None
    context: dict[str, Any] = dataclasses.field(default_factory=dict)

    @property
    def headline(self) -> str:
        """First line of the message."""
        return self.message.splitlines()[0] if self.message else ""

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-friendly dict.

        ``field`` and ``context`` are excluded when ``None`` or empty.
        """
        result: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.field is not None:
            result["field"] = self.field
        if self.context:
            result["context"] = dict(self.context)
        return result
