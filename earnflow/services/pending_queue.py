"""
Offline-tolerant parent-node creation.

A parent node is first written to a local pending list, then to Firestore.
Entries leave the list only after the remote write succeeds; anything left
behind is retried by `PendingParentSync.sync`, which runs on startup and
whenever a client reports that it is back online.

Retries reuse the id generated at creation time and write with `set()`,
so a write that succeeded but was reported as failed is overwritten rather
than duplicated.
"""
import json
import logging
import os
import threading
from typing import Dict, Any, List, Optional

from earnflow.middleware.error_middleware import StoreError
from earnflow.models.mlm_user_model import MlmUserModel
from earnflow.utils.validators import Helpers

logger = logging.getLogger(__name__)

STATUS_CONFIRMED = "confirmed"
STATUS_PENDING = "pending"


class PendingParentQueue:
    """JSON-file backed list of `{id, name, email, createdAt}` entries."""

    def __init__(self, path: str):
        self.path = path
        self._lock = threading.Lock()

    def _load(self) -> List[Dict[str, Any]]:
        if not os.path.exists(self.path):
            return []
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError:
            logger.warning("Pending queue %s is corrupt, starting empty", self.path)
            return []
        except OSError as e:
            raise StoreError(f"Failed to read pending queue: {e}") from e
        return data if isinstance(data, list) else []

    def _save(self, entries: List[Dict[str, Any]]):
        directory = os.path.dirname(os.path.abspath(self.path))
        try:
            os.makedirs(directory, exist_ok=True)
            with open(self.path, 'w', encoding='utf-8') as f:
                json.dump(entries, f, indent=2)
        except OSError as e:
            raise StoreError(f"Failed to write pending queue: {e}") from e

    def entries(self) -> List[Dict[str, Any]]:
        with self._lock:
            return self._load()

    def append(self, entry: Dict[str, Any]):
        with self._lock:
            entries = self._load()
            if any(e.get("id") == entry["id"] for e in entries):
                return
            entries.append(entry)
            self._save(entries)

    def remove(self, entry_id: str) -> bool:
        with self._lock:
            entries = self._load()
            kept = [e for e in entries if e.get("id") != entry_id]
            if len(kept) == len(entries):
                return False
            self._save(kept)
            return True

    def __len__(self):
        return len(self.entries())


class PendingParentSync:
    """Owns the queue and the Firestore writes that drain it."""

    def __init__(self, queue: PendingParentQueue, model: MlmUserModel):
        self.queue = queue
        self.model = model
        self._sync_lock = threading.Lock()
        self._in_flight = set()
        self._in_flight_lock = threading.Lock()

    def _claim(self, entry_id: str) -> bool:
        with self._in_flight_lock:
            if entry_id in self._in_flight:
                return False
            self._in_flight.add(entry_id)
            return True

    def _release(self, entry_id: str):
        with self._in_flight_lock:
            self._in_flight.discard(entry_id)

    def _write(self, entry: Dict[str, Any]) -> bool:
        """Push one queue entry to Firestore; True when it is confirmed and dequeued."""
        if not self._claim(entry["id"]):
            logger.info("Write for parent %s already in flight, skipping", entry["id"])
            return False
        try:
            self.model.write_parent(entry["id"], entry["name"], entry.get("email"), entry["createdAt"])
        except Exception as e:
            if Helpers.is_offline_error(e):
                logger.warning("Parent %s saved locally, will sync when online: %s", entry["id"], e)
            else:
                logger.error("Parent write failed for %s, will retry on next sync: %s", entry["id"], e)
            return False
        finally:
            self._release(entry["id"])

        self.queue.remove(entry["id"])
        return True

    def create_parent(self, name: str, email: Optional[str] = None) -> Dict[str, Any]:
        entry = {
            "id": self.model.new_document_id(),
            "name": name,
            "email": email or None,
            "createdAt": Helpers.now_millis(),
        }
        self.queue.append(entry)

        status = STATUS_CONFIRMED if self._write(entry) else STATUS_PENDING
        if status == STATUS_CONFIRMED:
            logger.info("Created parent %s (id: %s)", name, entry["id"])
        return {**entry, "status": status}

    def pending(self) -> List[Dict[str, Any]]:
        return self.queue.entries()

    def sync(self) -> Dict[str, Any]:
        """Retry every pending write; concurrent calls return without doing anything."""
        if not self._sync_lock.acquire(blocking=False):
            logger.info("Pending parent sync already running")
            return {"synced": [], "remaining": len(self.queue), "skipped": True}

        try:
            synced = [entry["id"] for entry in self.queue.entries() if self._write(entry)]
        finally:
            self._sync_lock.release()

        for entry_id in synced:
            logger.info("Synced parent %s", entry_id)
        return {"synced": synced, "remaining": len(self.queue), "skipped": False}
