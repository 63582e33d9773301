from __future__ import annotations

from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Records are stored and served with camelCase keys (``serialNumber``)
    while Python code uses snake_case attributes."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    def to_record(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class InputModel(CamelModel):
    """Request payloads: unknown keys are rejected instead of silently dropped."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        str_strip_whitespace=True,
    )


class PartialUpdate(InputModel):
    """Every field optional; only the keys the client actually sent are merged.

    Sending ``null`` is only allowed for fields listed in ``NULLABLE``.
    """

    NULLABLE: ClassVar[frozenset[str]] = frozenset()

    @model_validator(mode="after")
    def reject_cleared_required_fields(self) -> "PartialUpdate":
        cleared = sorted(
            name for name in self.model_fields_set if getattr(self, name) is None and name not in self.NULLABLE
        )
        if cleared:
            raise ValueError(f"{', '.join(cleared)} cannot be null")
        return self

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)
