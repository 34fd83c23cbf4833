"""Parsing of the JSON payload Things writes to ``thaings receive``."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from thaings.errors import InvalidInput

TO_DO_TYPE = "To-Do"
OPTIONAL_TEXT_FIELDS = ("Notes", "Tags", "Checklist Items")


@dataclass(frozen=True, slots=True)
class ThingsInput:
    """Validated view over one inbound payload."""

    data: dict[str, Any]

    @classmethod
    def parse(cls, raw: str) -> ThingsInput:
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as error:
            raise InvalidInput(f"Invalid JSON: {error}") from error
        if not isinstance(data, dict):
            raise InvalidInput("Expected a JSON object")
        return cls(data=data)

    @property
    def is_to_do(self) -> bool:
        return self.data.get("Type") == TO_DO_TYPE

    @property
    def id(self) -> str:
        value = self.data.get("ID")
        if not isinstance(value, str) or not value:
            raise InvalidInput("Missing ID field")
        return value

    @property
    def title(self) -> str:
        value = self.data.get("Title")
        return value if isinstance(value, str) and value else "(no title)"

    def validate_has_content(self) -> None:
        value = self.data.get("Title")
        if not isinstance(value, str) or not value.strip():
            raise InvalidInput("To-do is missing a title")
        for field in OPTIONAL_TEXT_FIELDS:
            value = self.data.get(field)
            if value is not None and not isinstance(value, str):
                raise InvalidInput(f"{field} must be a string")
