"""In-memory representation of an export payload."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, cast

from blogimport.domain.diagnostics import ValidationError
from blogimport.domain.errors import SnapshotFormatError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from blogimport.domain.model.enums import TableName

type RawRecord = Mapping[str, object]
type RawTable = tuple[RawRecord, ...]

SNAPSHOT_TABLE = "snapshot"


def _freeze_record(record: Mapping[str, object]) -> RawRecord:
    return MappingProxyType(dict(record))


@dataclass(frozen=True, slots=True)
class SnapshotMeta:
    version: str
    exported_on: object = None


@dataclass(frozen=True, slots=True)
class Snapshot:
    """Read-only snapshot: ``data`` maps table name to an ordered tuple of records.

    Records are wrapped in ``MappingProxyType``; stages that need to change a
    record build a new snapshot through :meth:`with_tables`.
    """

    meta: SnapshotMeta
    data: Mapping[str, RawTable] = field(default_factory=dict[str, "RawTable"])

    def __post_init__(self) -> None:
        frozen = {
            str(name): tuple(_freeze_record(record) for record in records)
            for name, records in self.data.items()
        }
        object.__setattr__(self, "data", MappingProxyType(frozen))

    def table(self, name: TableName | str) -> RawTable:
        return self.data.get(str(name), ())

    def with_tables(self, tables: Mapping[str, Iterable[RawRecord]]) -> Snapshot:
        """Return a copy with ``tables`` replaced, leaving this snapshot untouched."""

        merged: dict[str, RawTable] = dict(self.data)
        for name, records in tables.items():
            merged[str(name)] = tuple(records)
        return Snapshot(meta=self.meta, data=merged)

    def to_payload(self) -> dict[str, object]:
        return {
            "meta": {"version": self.meta.version, "exported_on": self.meta.exported_on},
            "data": {name: [dict(record) for record in records] for name, records in self.data.items()},
        }

    @classmethod
    def from_payload(cls, payload: object) -> Snapshot:
        """Build a snapshot from a decoded export, raising on structural problems.

        Every structural violation is collected before raising so callers see the
        complete list in one pass.
        """

        errors: list[ValidationError] = []
        if not isinstance(payload, Mapping):
            raise SnapshotFormatError([_structure_error("Snapshot must be an object.")])
        document = cast("Mapping[str, object]", payload)

        meta = document.get("meta")
        version: object = None
        exported_on: object = None
        if not isinstance(meta, Mapping):
            errors.append(_structure_error("Snapshot is missing [meta].", column="meta"))
        else:
            meta_map = cast("Mapping[str, object]", meta)
            version = meta_map.get("version")
            exported_on = meta_map.get("exported_on")
            if version is None or not str(version).strip():
                errors.append(
                    _structure_error("Snapshot is missing [meta.version].", column="version")
                )

        data = document.get("data")
        tables: dict[str, list[RawRecord]] = {}
        if not isinstance(data, Mapping):
            errors.append(_structure_error("Snapshot is missing [data].", column="data"))
        else:
            for name, records in cast("Mapping[str, object]", data).items():
                if not isinstance(records, list):
                    errors.append(
                        _structure_error(f"Table [{name}] must be a list of records.", column=name)
                    )
                    continue
                rows: list[RawRecord] = []
                for index, record in enumerate(cast("list[object]", records)):
                    if not isinstance(record, Mapping):
                        errors.append(
                            _structure_error(
                                f"Record {index} in [{name}] must be an object.", column=name
                            )
                        )
                        continue
                    rows.append(cast("RawRecord", record))
                tables[str(name)] = rows

        if errors:
            raise SnapshotFormatError(errors)
        return cls(
            meta=SnapshotMeta(version=str(version), exported_on=exported_on),
            data={name: tuple(rows) for name, rows in tables.items()},
        )


def _structure_error(message: str, *, column: str | None = None) -> ValidationError:
    return ValidationError(message=message, table=SNAPSHOT_TABLE, column=column)
