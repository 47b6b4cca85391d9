"""Supabase repository for store snapshots."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from nutrilink.domain.snapshot import StoreSnapshot
from nutrilink.services.store import SnapshotRepository


@dataclass
class SupabaseSnapshotRepository(SnapshotRepository):
    """Keeps the whole graph in one ``store_snapshots`` row.

    A single-row upsert is atomic, which gives each commit all-or-nothing
    semantics.
    """

    client: Client
    name: str = "default"

    def load(self) -> StoreSnapshot | None:
        """Return the stored snapshot row, if present."""
        response = (
            self.client.table("store_snapshots")
            .select("name, payload")
            .eq("name", self.name)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return StoreSnapshot.model_validate(response.data[0]["payload"])

    def save(self, snapshot: StoreSnapshot) -> None:
        """Upsert the snapshot row."""
        response = (
            self.client.table("store_snapshots")
            .upsert(
                {
                    "name": self.name,
                    "payload": snapshot.model_dump(mode="json"),
                    "updated_at": datetime.now(tz=UTC).isoformat(),
                },
                on_conflict="name",
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to save store snapshot")
