"""In-memory snapshot store for the API: no database required."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class SnapshotSession:
    id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    tsconfig_path: str = ""
    nodes: list[dict] = field(default_factory=list)
    summary: dict = field(default_factory=dict)
    warnings: list[dict] = field(default_factory=list)
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())


class AppState:
    """Snapshots shared by all API routes, keyed by id."""

    def __init__(self):
        self.snapshots: dict[str, SnapshotSession] = {}

    def add_snapshot(self, session: SnapshotSession) -> None:
        self.snapshots[session.id] = session

    def get_snapshot(self, snapshot_id: str) -> SnapshotSession | None:
        return self.snapshots.get(snapshot_id)

    def delete_snapshot(self, snapshot_id: str) -> bool:
        return self.snapshots.pop(snapshot_id, None) is not None


# Module-level singleton, shared by all routes
state = AppState()
