"""Local JSON file repository for store snapshots."""

import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path

from nutrilink.domain.snapshot import StoreSnapshot
from nutrilink.services.store import SnapshotRepository

_logger = logging.getLogger(__name__)


@dataclass
class JsonSnapshotRepository(SnapshotRepository):
    """Stores the snapshot as one JSON file replaced atomically on save."""

    path: Path

    def load(self) -> StoreSnapshot | None:
        """Return the stored snapshot, or None if the file does not exist."""
        if not self.path.exists():
            return None
        return StoreSnapshot.model_validate_json(self.path.read_text(encoding="utf-8"))

    def save(self, snapshot: StoreSnapshot) -> None:
        """Write to a temporary file next to the target, then rename over it."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(snapshot.model_dump_json(indent=2))
                handle.flush()
                os.fsync(handle.fileno())
            tmp_path.replace(self.path)
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise
        _logger.debug("Saved snapshot to %s", self.path)
