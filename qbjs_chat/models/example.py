# Role: Few-shot corpus record. One (description, code) pair shown to the model as a demonstration.
# Missing / null fields are coerced to "" here so ranking and prompt assembly never branch on optional fields.

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Tuple

from pydantic import BaseModel, ConfigDict, field_validator


class Example(BaseModel):
    model_config = ConfigDict(frozen=True)

    description: str = ""
    code: str = ""

    @field_validator("description", "code", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> str:
        if value is None:
            return ""
        return value if isinstance(value, str) else str(value)

    @property
    def identity(self) -> Tuple[str, str]:
        # Key line: two records with the same text in both fields are the same example.
        return (self.description, self.code)

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Example":
        # Accept both the current keys and the legacy input/output naming.
        description = record.get("description")
        if description is None:
            description = record.get("input")
        code = record.get("code")
        if code is None:
            code = record.get("output")
        return cls(description=description, code=code)


@dataclass(frozen=True)
class ScoredExample:
    example: Example
    score: float
