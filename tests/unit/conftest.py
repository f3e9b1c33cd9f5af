"""Shared pytest configuration for unit tests."""
import sys
import os
from unittest.mock import Mock
import pytest

# Ensure repo root is on sys.path
REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from earnflow.app import create_app
from earnflow.models.form_entry_model import JsonFileFormEntryStore
from earnflow.models.mlm_user_model import MlmUserModel
from earnflow.services.pending_queue import PendingParentQueue, PendingParentSync


@pytest.fixture(autouse=True)
def no_emulators(monkeypatch):
    """Unit tests never talk to Firebase, even if emulator variables are exported."""
    for var in ("FIRESTORE_EMULATOR_HOST", "FIREBASE_DATABASE_EMULATOR_HOST", "FIREBASE_AUTH_EMULATOR_HOST"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def mock_db():
    """Create a fresh mock Firestore client for each test.

    Tests override behaviour by setting return values directly, e.g.
        mock_db.collection.return_value.document.return_value.get.return_value.exists = True
    """
    mock_db = Mock()

    mock_collection = Mock()
    mock_doc_ref = Mock()
    mock_doc_ref.id = "mock_doc_id"
    mock_doc_ref.set = Mock()
    mock_doc_ref.update = Mock()
    mock_doc_ref.delete = Mock()

    mock_snapshot = Mock()
    mock_snapshot.exists = False
    mock_snapshot.id = "mock_doc_id"
    mock_snapshot.to_dict = Mock(return_value={})
    mock_doc_ref.get = Mock(return_value=mock_snapshot)

    mock_collection.document = Mock(return_value=mock_doc_ref)
    mock_collection.add = Mock(return_value=(None, mock_doc_ref))
    mock_collection.stream = Mock(return_value=[])

    # Query chaining returns the collection itself
    mock_collection.where = Mock(return_value=mock_collection)
    mock_collection.limit = Mock(return_value=mock_collection)

    mock_db.collection = Mock(return_value=mock_collection)
    return mock_db


@pytest.fixture
def mock_rtdb():
    """Mock firebase_admin.db.reference; every path returns the same reference mock."""
    reference = Mock()
    reference.get = Mock(return_value=None)
    reference.push = Mock(return_value=Mock(key="-Nabc123"))
    reference.order_by_child.return_value.equal_to.return_value.get = Mock(return_value={})
    factory = Mock(return_value=reference)
    factory.ref = reference
    return factory


@pytest.fixture
def form_file(tmp_path):
    return str(tmp_path / "form-data.json")


@pytest.fixture
def queue_file(tmp_path):
    return str(tmp_path / "pending.json")


@pytest.fixture
def form_store(form_file):
    return JsonFileFormEntryStore(form_file)


@pytest.fixture
def mlm_model(mock_db):
    return MlmUserModel(client=mock_db)


@pytest.fixture
def pending_sync(queue_file, mlm_model):
    return PendingParentSync(PendingParentQueue(queue_file), mlm_model)


@pytest.fixture
def member_tree():
    return Mock()


@pytest.fixture
def identity():
    return Mock()


@pytest.fixture
def test_config(form_file, queue_file):
    return {
        "TESTING": True,
        "DEV_MODE": True,
        "AUTH_REQUIRED": False,
        "FORM_STORE_BACKEND": "file",
        "FORM_DATA_FILE": form_file,
        "PENDING_QUEUE_FILE": queue_file,
        "FIREBASE_WEB_API_KEY": "test-api-key",
        "FIREBASE_PROJECT_ID": "demo-earnflow",
        "SECRET_KEY": None,
    }


@pytest.fixture
def app(test_config, form_store, member_tree, mlm_model, pending_sync, identity):
    """Flask app with every service replaced by a local or mocked one."""
    return create_app(test_config, services={
        "form_store": form_store,
        "member_tree": member_tree,
        "mlm_users": mlm_model,
        "pending_sync": pending_sync,
        "identity": identity,
    })


@pytest.fixture
def client(app):
    return app.test_client()
