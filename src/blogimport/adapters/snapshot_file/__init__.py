"""Snapshot file adapter."""

from __future__ import annotations

from .loader import load_snapshot, snapshot_from_payload
from .schema import SnapshotEnvelope

__all__ = ["SnapshotEnvelope", "load_snapshot", "snapshot_from_payload"]
