from typing import Dict, Any, Optional
import logging

from firebase_admin import firestore
from google.api_core import exceptions as gcp_exceptions
from google.cloud.firestore_v1.base_query import FieldFilter

from earnflow.utils.validators import Helpers

logger = logging.getLogger(__name__)

MLM_USERS_COLLECTION = "mlmUsers"


class ParentNotFoundError(LookupError):
    pass


class MlmUserModel:
    """Referral hierarchy nodes in the `mlmUsers` Firestore collection"""

    def __init__(self, client=None):
        self._client = client

    @property
    def db(self):
        if self._client is None:
            self._client = firestore.client()
        return self._client

    @property
    def collection(self):
        return self.db.collection(MLM_USERS_COLLECTION)

    def new_document_id(self) -> str:
        """Generate a document id locally, without a round trip."""
        return self.collection.document().id

    def _with_offline_retry(self, operation):
        """Run a read; an offline failure gets exactly one more attempt."""
        try:
            return operation()
        except Exception as e:
            if not Helpers.is_offline_error(e):
                raise
            logger.warning("Firestore reported offline (%s), retrying once", e)
            return operation()

    def resolve_parent(self, parent_key: str):
        """Return the parent's DocumentReference from a document id or an email."""
        if "@" in parent_key:
            query = self.collection.where(filter=FieldFilter("email", "==", parent_key)).limit(1)
            docs = self._with_offline_retry(lambda: list(query.stream()))
            if not docs:
                raise ParentNotFoundError("Parent node not found by email")
            return docs[0].reference

        parent_ref = self.collection.document(parent_key)
        snapshot = self._with_offline_retry(parent_ref.get)
        if not snapshot or not snapshot.exists:
            raise ParentNotFoundError("Parent node not found")
        return parent_ref

    def write_parent(self, parent_id: str, name: str, email: Optional[str], created_at_ms: int):
        """Create a root node; safe to repeat with the same arguments.

        A document that already exists was written by an earlier attempt and may
        have gained children since, so it is left untouched.
        """
        try:
            self.collection.document(parent_id).create({
                "name": name,
                "email": email or None,
                "parentId": None,
                "children": [],
                "createdAt": Helpers.millis_to_datetime(created_at_ms),
            })
        except gcp_exceptions.AlreadyExists:
            logger.info("Parent %s already stored, keeping existing document", parent_id)

    def create_child(self, parent_ref, name: str, email: str) -> str:
        _, child_ref = self.collection.add({
            "name": name,
            "email": email,
            "parentId": parent_ref.id,
            "children": [],
            "createdAt": firestore.SERVER_TIMESTAMP,
        })
        parent_ref.update({"children": firestore.ArrayUnion([child_ref.id])})
        logger.info("Created user %s under parent %s", child_ref.id, parent_ref.id)
        return child_ref.id

    def get_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        snapshot = self.collection.document(user_id).get()
        if not snapshot.exists:
            return None
        data = snapshot.to_dict() or {}
        created_at = data.get("createdAt")
        if hasattr(created_at, "isoformat"):
            data["createdAt"] = created_at.isoformat()
        return {"id": snapshot.id, **data}
