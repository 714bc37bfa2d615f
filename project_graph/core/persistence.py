"""JSON document persistence with atomic writes and rotating backups."""

import json
import logging
import os
import shutil
import time
from pathlib import Path

from .constants import MAX_RECENT_BACKUPS, BACKUP_INTERVAL_SECONDS
from .exceptions import StorageError
from .types import KnowledgeGraph

logger = logging.getLogger(__name__)


class JsonDocument:
    """A whole-document JSON file: read fully, overwrite fully."""

    def __init__(self, path: Path, backup_count: int = MAX_RECENT_BACKUPS,
                 backup_interval: int = BACKUP_INTERVAL_SECONDS):
        self.path = Path(path)
        self.backup_count = backup_count
        self.backup_interval = backup_interval
        self.backup_marker = self.path.with_suffix(".last_backup")

    def read(self):
        """
        Parse the document.
        Returns None if the file is missing or unparsable.
        """
        if not self.path.exists():
            return None

        try:
            with open(self.path, encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to read {self.path}: {e}")
            return None

    def write(self, data) -> None:
        """
        Atomically replace the document.
        Raises StorageError on failure; the previous file is left intact.
        """
        temp_path = self.path.with_suffix(".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)

            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
                f.flush()
                os.fsync(f.fileno())

            # POSIX rename is atomic
            temp_path.replace(self.path)
        except OSError as e:
            logger.error(f"Failed to save {self.path}: {e}")
            if temp_path.exists():
                temp_path.unlink()
            raise StorageError(self.path, str(e)) from e

        logger.debug(f"Saved {self.path}")
        self.maybe_backup()

    def maybe_backup(self) -> bool:
        """
        Copy the document to <name>.bak.1, shifting older copies up,
        if backup_interval has passed since the last backup.
        Returns True if a backup was created.
        """
        if self.backup_count <= 0 or not self.path.exists():
            return False

        if self.backup_marker.exists():
            last_backup_time = self.backup_marker.stat().st_mtime
            if time.time() - last_backup_time < self.backup_interval:
                return False

        try:
            for i in range(self.backup_count - 1, 0, -1):
                older = self.backup_path(i)
                if older.exists():
                    shutil.copy2(older, self.backup_path(i + 1))
            shutil.copy2(self.path, self.backup_path(1))
            self.backup_marker.touch()
        except OSError as e:
            # The primary write already succeeded
            logger.warning(f"Backup of {self.path} failed: {e}")
            return False

        logger.debug(f"Created backup: {self.backup_path(1)}")
        return True

    def backup_path(self, index: int) -> Path:
        return self.path.with_name(f"{self.path.name}.bak.{index}")


def _items(data: dict, key: str) -> list:
    items = data.get(key)
    return items if isinstance(items, list) else []


def _has_text(item, *keys: str) -> bool:
    return isinstance(item, dict) and all(isinstance(item.get(k), str) for k in keys)


class GraphPersistence(JsonDocument):
    """Persists the {entities, relations} graph document."""

    def load(self) -> KnowledgeGraph:
        """Load the graph. Missing or corrupt files yield an empty graph."""
        data = self.read()
        if not isinstance(data, dict):
            if data is not None:
                logger.warning(f"Ignoring malformed graph document {self.path}")
            return {"entities": [], "relations": []}

        entities = [e for e in _items(data, "entities") if _has_text(e, "name", "entityType")]
        for entity in entities:
            entity["observations"] = [o for o in _items(entity, "observations") if isinstance(o, str)]
        relations = [r for r in _items(data, "relations") if _has_text(r, "from", "to", "relationType")]
        for relation in relations:
            if "observations" in relation:
                relation["observations"] = [o for o in _items(relation, "observations") if isinstance(o, str)]

        logger.info(f"Loaded graph from {self.path}: {len(entities)} entities, {len(relations)} relations")
        return {"entities": entities, "relations": relations}

    def save(self, graph: KnowledgeGraph) -> None:
        self.write({"entities": graph["entities"], "relations": graph["relations"]})


class SessionPersistence(JsonDocument):
    """Persists the {session_id: [records]} mapping."""

    def load(self) -> dict[str, list[dict]]:
        data = self.read()
        if not isinstance(data, dict):
            return {}
        return {k: v for k, v in data.items() if isinstance(v, list)}

    def save(self, sessions: dict[str, list[dict]]) -> None:
        self.write(sessions)
