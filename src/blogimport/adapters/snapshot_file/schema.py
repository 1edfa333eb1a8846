"""Pydantic models describing the export file envelope.

Only the envelope is modelled. Records stay plain mappings so columns this
version does not know survive untouched.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator


class SnapshotFileModel(BaseModel):
    model_config = ConfigDict(extra="allow")


class SnapshotMetaPayload(SnapshotFileModel):
    version: str
    exported_on: int | str | None = None

    @field_validator("version", mode="before")
    @classmethod
    def _version_to_text(cls, value: object) -> object:
        if isinstance(value, int | float) and not isinstance(value, bool):
            return str(value)
        if isinstance(value, str) and not value.strip():
            raise ValueError("version cannot be blank")
        return value


class SnapshotEnvelope(SnapshotFileModel):
    meta: SnapshotMetaPayload
    data: dict[str, list[dict[str, object]]]
