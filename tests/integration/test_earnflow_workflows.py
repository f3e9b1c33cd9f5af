"""Integration tests for the API against the Firebase emulators."""
import uuid

from google.cloud.firestore_v1.base_query import FieldFilter

from earnflow.services.pending_queue import STATUS_CONFIRMED


class TestFormEntryWorkflow:
    """Contact entries stored in the Realtime Database."""

    def test_save_list_delete(self, client, user_id):
        saved = client.post("/api/save-form-data", json={"name": "Jane", "email": "jane@x.com", "userId": user_id})
        assert saved.status_code == 200
        entry_id = saved.get_json()["entry"]["id"]

        listed = client.get(f"/api/form-data?userId={user_id}").get_json()
        assert [e["id"] for e in listed] == [entry_id]
        assert listed[0]["email"] == "jane@x.com"

        assert client.delete(f"/api/form-data/{entry_id}").status_code == 200
        assert client.get(f"/api/form-data?userId={user_id}").get_json() == []
        assert client.delete(f"/api/form-data/{entry_id}").status_code == 404

    def test_entries_are_scoped_to_owner(self, client, user_id):
        other = f"{user_id}_other"
        client.post("/api/save-form-data", json={"name": "Jane", "email": "jane@x.com", "userId": user_id})
        client.post("/api/save-form-data", json={"name": "Joe", "email": "joe@x.com", "userId": other})

        listed = client.get(f"/api/form-data?userId={user_id}").get_json()

        assert [e["name"] for e in listed] == ["Jane"]


class TestMemberTreeWorkflow:

    def test_assign_then_read_tree(self, client, user_id):
        resp = client.put("/api/members/5", json={"name": "Jane", "email": "jane@x.com", "userId": user_id})
        assert resp.status_code == 200

        members = client.get(f"/api/members/tree?userId={user_id}").get_json()["members"]
        emails = {m["id"]: m["email"] for m in members}

        assert emails[5] == "jane@x.com"
        assert emails[2] == ""


class TestHierarchyWorkflow:
    """Parent and child nodes in the mlmUsers Firestore collection."""

    def _create_parent(self, client, created_mlm_ids, email=None):
        resp = client.post("/api/mlm/parents", json={"name": "Boss", "email": email})
        assert resp.status_code == 201
        parent = resp.get_json()
        created_mlm_ids.append(parent["id"])
        return parent

    def test_parent_then_child_by_id(self, client, db, created_mlm_ids):
        parent = self._create_parent(client, created_mlm_ids)
        assert parent["status"] == STATUS_CONFIRMED

        resp = client.post("/api/mlm/users", json={"parentId": parent["id"], "name": "Kid", "email": "kid@x.com"})
        assert resp.status_code == 201
        child_id = resp.get_json()["id"]
        created_mlm_ids.append(child_id)

        stored_parent = db.collection("mlmUsers").document(parent["id"]).get().to_dict()
        stored_child = db.collection("mlmUsers").document(child_id).get().to_dict()
        assert stored_parent["children"] == [child_id]
        assert stored_parent["parentId"] is None
        assert stored_child["parentId"] == parent["id"]

    def test_child_by_parent_email(self, client, created_mlm_ids):
        email = f"boss_{uuid.uuid4().hex[:8]}@x.com"
        parent = self._create_parent(client, created_mlm_ids, email=email)

        resp = client.post("/api/mlm/users", json={"parentId": email, "name": "Kid", "email": "kid@x.com"})
        assert resp.status_code == 201
        created_mlm_ids.append(resp.get_json()["id"])

        assert resp.get_json()["parentId"] == parent["id"]
        fetched = client.get(f"/api/mlm/users/{parent['id']}").get_json()
        assert fetched["children"] == [resp.get_json()["id"]]

    def test_unknown_parent(self, client):
        resp = client.post("/api/mlm/users", json={"parentId": "missing-parent", "name": "Kid", "email": "kid@x.com"})

        assert resp.status_code == 404

    def test_queued_parent_syncs_once(self, app, client, db, created_mlm_ids):
        sync = app.extensions["earnflow"]["pending_sync"]
        parent_id = sync.model.new_document_id()
        created_mlm_ids.append(parent_id)
        sync.queue.append({"id": parent_id, "name": "Queued", "email": None, "createdAt": 1700000000000})

        first = client.post("/api/mlm/sync").get_json()
        second = client.post("/api/mlm/sync").get_json()

        assert first["synced"] == [parent_id]
        assert second["synced"] == []
        query = db.collection("mlmUsers").where(filter=FieldFilter("name", "==", "Queued"))
        assert [d.id for d in query.stream()].count(parent_id) == 1
        assert sync.pending() == []


class TestAuthWorkflow:

    def test_signup_then_unverified_login_refused(self, client):
        email = f"it_{uuid.uuid4().hex[:10]}@example.com"

        signup = client.post("/api/auth/signup", json={"email": email, "password": "secret1", "confirmPassword": "secret1"})
        assert signup.status_code == 201

        login = client.post("/api/auth/login", json={"email": email, "password": "secret1"})
        assert login.status_code == 403
        assert login.get_json()["code"] == "EMAIL_NOT_VERIFIED"

    def test_duplicate_signup(self, client):
        email = f"it_{uuid.uuid4().hex[:10]}@example.com"
        payload = {"email": email, "password": "secret1"}
        client.post("/api/auth/signup", json=payload)

        resp = client.post("/api/auth/signup", json=payload)

        assert resp.status_code == 409
