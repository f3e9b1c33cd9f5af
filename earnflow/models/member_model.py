"""The fixed nine-slot member tree shown on the dashboard."""
import logging
from typing import Dict, Any, List, Callable, Optional

from firebase_admin import exceptions as firebase_exceptions

from earnflow.middleware.error_middleware import StoreError
from earnflow.models.form_entry_model import FORM_DATA_PATH
from earnflow.utils.validators import Validators, Helpers

logger = logging.getLogger(__name__)

ROOT_MEMBER_ID = 1

# id -> (level, parent id, top, left); positions are percentages of the canvas
TREE_LAYOUT = {
    1: (0, None, "10%", "50%"),
    2: (1, 1, "23%", "25%"),
    3: (1, 1, "23%", "75%"),
    4: (2, 2, "50%", "12.5%"),
    5: (2, 2, "50%", "25%"),
    6: (2, 2, "50%", "37.5%"),
    7: (2, 3, "50%", "62.5%"),
    8: (2, 3, "50%", "75%"),
    9: (2, 3, "50%", "87.5%"),
}


def blank_tree() -> List[Dict[str, Any]]:
    return [
        {
            "id": member_id,
            "level": level,
            "parentId": parent_id,
            "position": {"top": top, "left": left},
            "email": "",
            "assignable": member_id != ROOT_MEMBER_ID,
        }
        for member_id, (level, parent_id, top, left) in TREE_LAYOUT.items()
    ]


class MemberTreeModel:
    """Reads and writes member records under formData/{userId}/member_{id}."""

    def __init__(self, reference_factory: Optional[Callable] = None):
        self._reference_factory = reference_factory

    def _reference(self, path: str):
        if self._reference_factory is None:
            from firebase_admin import db
            self._reference_factory = db.reference
        return self._reference_factory(path)

    def member_emails(self, user_id: str) -> Dict[int, str]:
        snapshot = self._reference(f"{FORM_DATA_PATH}/{user_id}").get()
        if not isinstance(snapshot, dict):
            return {}

        emails = {}
        for entry in snapshot.values():
            if not isinstance(entry, dict) or not entry.get("memberId"):
                continue
            try:
                emails[int(entry["memberId"])] = entry.get("email") or ""
            except (TypeError, ValueError):
                logger.warning("Ignoring member record with bad memberId %r", entry.get("memberId"))
        return emails

    def get_tree(self, user_id: str) -> List[Dict[str, Any]]:
        """All nine nodes; a failed read degrades to the empty tree."""
        tree = blank_tree()
        try:
            emails = self.member_emails(user_id)
        except (firebase_exceptions.FirebaseError, ValueError) as e:
            # ValueError: no Firebase app, e.g. DEV_MODE
            logger.error("Error fetching members data for %s: %s", user_id, e)
            return tree

        for node in tree:
            node["email"] = emails.get(node["id"], "")
        return tree

    def assign_member(self, user_id: str, member_id: int, name: str, email: str) -> Dict[str, Any]:
        if not Validators.validate_member_id(member_id):
            raise ValueError(f"Member {member_id} cannot be assigned")

        record = {
            "memberId": int(member_id),
            "userId": user_id,
            "name": name,
            "email": email,
            "createdAt": Helpers.now_iso(),
        }
        try:
            self._reference(f"{FORM_DATA_PATH}/{user_id}/member_{int(member_id)}").set(record)
        except firebase_exceptions.FirebaseError as e:
            raise StoreError(f"Failed to save member {member_id}: {e}") from e
        return record
