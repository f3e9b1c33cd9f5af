"""Contact entry storage: a flat JSON file or the Firebase Realtime Database."""
import json
import logging
import os
import threading
from typing import Dict, Any, Iterator, List, Callable, Optional

from firebase_admin import exceptions as firebase_exceptions

from earnflow.middleware.error_middleware import StoreError
from earnflow.utils.validators import Helpers

logger = logging.getLogger(__name__)

FORM_DATA_PATH = "formData"
ENTRY_FIELDS = ("userId", "name", "email")


def _is_form_entry(value) -> bool:
    return isinstance(value, dict) and all(isinstance(value.get(f), str) for f in ENTRY_FIELDS)


class FormEntryStore:
    """Interface shared by both backends."""

    backend = "abstract"

    def save(self, name: str, email: str, user_id: str) -> Dict[str, Any]:
        raise NotImplementedError

    def iter_by_user(self, user_id: str) -> Iterator[Dict[str, Any]]:
        raise NotImplementedError

    def get(self, entry_id: str) -> Optional[Dict[str, Any]]:
        raise NotImplementedError

    def delete(self, entry_id: str) -> bool:
        """Remove an entry; returns False when no entry has that id."""
        raise NotImplementedError

    def list_by_user(self, user_id: str) -> List[Dict[str, Any]]:
        if not user_id:
            raise ValueError("userId is required")
        entries = list(self.iter_by_user(user_id))
        logger.info("Fetching data for user %s, found %d entries", user_id, len(entries))
        return entries


class JsonFileFormEntryStore(FormEntryStore):
    """All entries in one JSON array, rewritten in full on every write."""

    backend = "file"

    def __init__(self, path: str):
        self.path = path
        self._lock = threading.Lock()
        self._ensure_file()

    def _ensure_file(self):
        if os.path.exists(self.path):
            return
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        self._write([])

    def _read(self) -> List[Dict[str, Any]]:
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StoreError(f"Failed to read {self.path}: {e}") from e

    def _write(self, data: List[Dict[str, Any]]):
        try:
            with open(self.path, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2)
        except OSError as e:
            raise StoreError(f"Failed to write {self.path}: {e}") from e

    def _next_id(self, data: List[Dict[str, Any]]) -> int:
        # Millisecond ids collide when two entries land in the same millisecond
        entry_id = Helpers.now_millis()
        taken = {entry.get("id") for entry in data}
        while entry_id in taken:
            entry_id += 1
        return entry_id

    def save(self, name: str, email: str, user_id: str) -> Dict[str, Any]:
        with self._lock:
            data = self._read()
            entry = {
                "id": self._next_id(data),
                "userId": user_id,
                "name": name,
                "email": email,
                "createdAt": Helpers.now_iso(),
            }
            data.append(entry)
            self._write(data)
        return entry

    def iter_by_user(self, user_id: str) -> Iterator[Dict[str, Any]]:
        with self._lock:
            data = self._read()
        return (entry for entry in data if entry.get("userId") == user_id)

    def get(self, entry_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            data = self._read()
        return next((entry for entry in data if str(entry.get("id")) == str(entry_id)), None)

    def delete(self, entry_id: str) -> bool:
        with self._lock:
            data = self._read()
            kept = [entry for entry in data if str(entry.get("id")) != str(entry_id)]
            if len(kept) == len(data):
                return False
            self._write(kept)
        return True


class RealtimeFormEntryStore(FormEntryStore):
    """Entries pushed under `formData` in the Firebase Realtime Database."""

    backend = "firebase"

    def __init__(self, reference_factory: Optional[Callable] = None):
        # firebase_admin.db.reference needs an initialised app, so resolve lazily
        self._reference_factory = reference_factory

    def _reference(self, path: str):
        if self._reference_factory is None:
            from firebase_admin import db
            self._reference_factory = db.reference
        return self._reference_factory(path)

    def save(self, name: str, email: str, user_id: str) -> Dict[str, Any]:
        entry = {
            "userId": user_id,
            "name": name,
            "email": email,
            "createdAt": Helpers.now_iso(),
        }
        try:
            new_ref = self._reference(FORM_DATA_PATH).push(entry)
        except firebase_exceptions.FirebaseError as e:
            raise StoreError(f"Failed to save form data: {e}") from e
        logger.info("Form data saved successfully to Firebase (%s)", new_ref.key)
        return {"id": new_ref.key, **entry}

    def iter_by_user(self, user_id: str) -> Iterator[Dict[str, Any]]:
        query = self._reference(FORM_DATA_PATH).order_by_child("userId").equal_to(user_id)
        try:
            snapshot = query.get()
        except firebase_exceptions.FirebaseError as e:
            raise StoreError(f"Failed to read form data: {e}") from e

        if not snapshot:
            logger.info("No data found for user %s", user_id)
            return iter(())
        return ({"id": key, **value} for key, value in snapshot.items())

    def get(self, entry_id: str) -> Optional[Dict[str, Any]]:
        try:
            value = self._reference(f"{FORM_DATA_PATH}/{entry_id}").get()
        except firebase_exceptions.FirebaseError as e:
            raise StoreError(f"Failed to read entry {entry_id}: {e}") from e
        if not _is_form_entry(value):
            return None
        return {"id": entry_id, **value}

    def delete(self, entry_id: str) -> bool:
        entry_ref = self._reference(f"{FORM_DATA_PATH}/{entry_id}")
        try:
            # formData/{userId} holds that user's member tree, not an entry
            if not _is_form_entry(entry_ref.get()):
                return False
            entry_ref.delete()
        except firebase_exceptions.FirebaseError as e:
            raise StoreError(f"Failed to delete entry {entry_id}: {e}") from e
        logger.info("Entry %s deleted successfully", entry_id)
        return True


def build_form_store(backend: str, data_file: str = None) -> FormEntryStore:
    if backend == "file":
        return JsonFileFormEntryStore(data_file)
    if backend == "firebase":
        return RealtimeFormEntryStore()
    raise ValueError(f"Unknown form store backend: {backend}")
