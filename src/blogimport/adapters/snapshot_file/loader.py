"""Read export files from disk into :class:`Snapshot` objects."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import TYPE_CHECKING, cast

from pydantic import ValidationError as PydanticValidationError

from blogimport.adapters.snapshot_file.schema import SnapshotEnvelope
from blogimport.domain.diagnostics import ValidationError
from blogimport.domain.errors import SnapshotFormatError
from blogimport.domain.model import Snapshot
from blogimport.domain.model.snapshot import SNAPSHOT_TABLE

if TYPE_CHECKING:
    from pydantic_core import ErrorDetails

log = logging.getLogger(__name__)


def load_snapshot(path: Path | str) -> Snapshot:
    """Load and structurally check the export at ``path``.

    Raises :class:`SnapshotFormatError` when the file is not JSON or the
    envelope is malformed. ``OSError`` from reading the file propagates.
    """

    file_path = Path(path)
    log.info("Loading snapshot from %s", file_path)
    text = file_path.read_text(encoding="utf-8")
    try:
        payload: object = json.loads(text)
    except json.JSONDecodeError as exc:
        raise SnapshotFormatError(
            [
                ValidationError(
                    message=f"Snapshot file is not valid JSON: {exc.msg} (line {exc.lineno}).",
                    table=SNAPSHOT_TABLE,
                )
            ]
        ) from exc
    return snapshot_from_payload(payload)


def snapshot_from_payload(payload: object) -> Snapshot:
    document = unwrap_export(payload)
    if not isinstance(document, Mapping):
        return Snapshot.from_payload(document)
    try:
        SnapshotEnvelope.model_validate(document)
    except PydanticValidationError as exc:
        raise SnapshotFormatError([_envelope_error(detail) for detail in exc.errors()]) from exc
    return Snapshot.from_payload(document)


def unwrap_export(payload: object) -> object:
    """Accept both a bare ``{meta, data}`` object and the ``{"db": [...]}`` wrapper."""

    if not isinstance(payload, Mapping):
        return payload
    document = cast("Mapping[str, object]", payload)
    wrapped = document.get("db")
    if "meta" not in document and isinstance(wrapped, Sequence) and not isinstance(wrapped, str):
        entries = cast("Sequence[object]", wrapped)
        if entries:
            return entries[0]
    return document


def _envelope_error(detail: ErrorDetails) -> ValidationError:
    location = ".".join(str(part) for part in detail["loc"])
    column = str(detail["loc"][-1]) if detail["loc"] else None
    return ValidationError(
        message=f"Snapshot is invalid at [{location}]: {detail['msg']}.",
        table=SNAPSHOT_TABLE,
        column=column,
    )
