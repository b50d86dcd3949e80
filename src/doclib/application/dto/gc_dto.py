"""Garbage collection DTOs."""

from dataclasses import dataclass, field
from datetime import datetime

from doclib.domain.value_objects import TouchedEvent


@dataclass
class GcInput:
    trash_older_than_days: float = 7
    purge_live_orphans: bool = False
    dry_run: bool = False


@dataclass
class GcPlan:
    """Ids a real run would delete; both lists are sorted."""

    trash_ids: list[str] = field(default_factory=list)
    live_orphan_ids: list[str] = field(default_factory=list)

    @property
    def all_ids(self) -> list[str]:
        return sorted(set(self.trash_ids) | set(self.live_orphan_ids))


@dataclass
class GcOutput:
    plan: GcPlan
    dry_run: bool
    deleted_ids: list[str] = field(default_factory=list)
    touched: list[TouchedEvent] = field(default_factory=list)


@dataclass
class TrashItem:
    document_id: str
    name: str | None
    size_bytes: int | None
    trashed_at: datetime | None
    age_days: float
    tracked: bool = True


@dataclass
class OrphansReport:
    """With a graph scope, live orphans are documents that graph does not reference."""

    live_orphan_ids: list[str]
    trash_items: list[TrashItem]
    referenced_count: int = 0
    graph_id: str | None = None
