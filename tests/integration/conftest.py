"""Shared pytest configuration for integration tests.

These run the app against the Firebase emulators (`python start_emulators.py`)
and are skipped automatically when the emulators are not reachable.
"""
import sys
import os
import uuid
import pytest
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Ensure repo root is on sys.path
REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from start_emulators import check_port

PROJECT_ID = "demo-earnflow"

EMULATOR_DEFAULTS = {
    "FIRESTORE_EMULATOR_HOST": "localhost:8080",
    "FIREBASE_AUTH_EMULATOR_HOST": "localhost:9099",
    "FIREBASE_DATABASE_EMULATOR_HOST": "localhost:9000",
}


def configure_emulators():
    """Point every Firebase client at the local emulators."""
    for var, host in EMULATOR_DEFAULTS.items():
        os.environ.setdefault(var, host)

    # Emulators accept any demo-* project id and never need real credentials
    os.environ["GCLOUD_PROJECT"] = PROJECT_ID
    os.environ.pop("FIREBASE_CREDENTIALS_JSON", None)


# Configure emulators at module load time
configure_emulators()


def _emulator_status():
    status = {}
    for var in EMULATOR_DEFAULTS:
        host, port = os.environ[var].rsplit(":", 1)
        status[var] = check_port(host, int(port))
    return status


def pytest_collection_modifyitems(config, items):
    """Automatically skip integration tests if Firebase emulators are not running."""
    status = _emulator_status()
    if all(status.values()):
        return

    lines = [f"  {var} ({os.environ[var]}): {'running' if up else 'not running'}" for var, up in status.items()]
    skip_marker = pytest.mark.skip(
        reason="Firebase emulators not running. Start with: python start_emulators.py\n" + "\n".join(lines)
    )
    for item in items:
        if "integration" in str(item.fspath):
            item.add_marker(skip_marker)


def ensure_firebase_initialized():
    """Initialize the default app with anonymous credentials for emulator use."""
    import firebase_admin
    from firebase_admin import credentials
    from google.auth.credentials import AnonymousCredentials

    if firebase_admin._apps:
        return

    class EmulatorCredential(credentials.Base):
        def get_credential(self):
            return AnonymousCredentials()

    firebase_admin.initialize_app(EmulatorCredential(), {
        "projectId": PROJECT_ID,
        "databaseURL": database_url(),
    })


def database_url():
    return f"http://{os.environ['FIREBASE_DATABASE_EMULATOR_HOST']}?ns={PROJECT_ID}"


@pytest.fixture
def app(tmp_path):
    """Flask app wired to the emulators with the Realtime Database form store."""
    ensure_firebase_initialized()

    from earnflow.app import create_app

    return create_app({
        "TESTING": True,
        "DEV_MODE": False,
        "AUTH_REQUIRED": False,
        "FORM_STORE_BACKEND": "firebase",
        "FIREBASE_DATABASE_URL": database_url(),
        "FIREBASE_PROJECT_ID": PROJECT_ID,
        "FIREBASE_WEB_API_KEY": "fake-api-key",
        "PENDING_QUEUE_FILE": str(tmp_path / "pending.json"),
        "SECRET_KEY": None,
    })


@pytest.fixture
def client(app):
    """Create Flask test client."""
    return app.test_client()


@pytest.fixture
def db():
    """Firestore client for the emulator."""
    ensure_firebase_initialized()
    from firebase_admin import firestore
    return firestore.client()


@pytest.fixture
def user_id():
    """A fresh owner id so tests never see each other's records."""
    return f"it_{uuid.uuid4().hex[:12]}"


@pytest.fixture
def created_mlm_ids(db):
    """Collects mlmUsers document ids and deletes them after the test."""
    ids = []
    yield ids
    for doc_id in ids:
        db.collection("mlmUsers").document(doc_id).delete()
