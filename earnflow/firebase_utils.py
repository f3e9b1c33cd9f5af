"""Firebase credential and initialisation helpers."""
import os
import json
import logging
from typing import Dict, Any, Optional

import firebase_admin
from firebase_admin import credentials, exceptions as firebase_exceptions

logger = logging.getLogger(__name__)

EMULATOR_HOST_VARS = (
    "FIRESTORE_EMULATOR_HOST",
    "FIREBASE_DATABASE_EMULATOR_HOST",
    "FIREBASE_AUTH_EMULATOR_HOST",
)


def _load_json_file(path: Optional[str]) -> Optional[Dict[str, Any]]:
    if path and os.path.exists(path):
        with open(path, 'r') as f:
            return json.load(f)
    return None


def get_firebase_credentials() -> Dict[str, Any]:
    """
    Load the Firebase service account from the environment.

    Checked in order:
    1. FIREBASE_CREDENTIALS_JSON - JSON string or path to a JSON file
    2. FIREBASE_CREDENTIALS_PATH - path to a service account file
    3. GOOGLE_APPLICATION_CREDENTIALS - path to a service account file
    4. Individual variables (FIREBASE_PROJECT_ID, FIREBASE_PRIVATE_KEY, ...)

    Raises:
        ValueError: If no valid credentials are found
    """
    creds_json = os.getenv('FIREBASE_CREDENTIALS_JSON')
    if creds_json:
        try:
            return json.loads(creds_json)
        except json.JSONDecodeError:
            loaded = _load_json_file(creds_json)
            if loaded is not None:
                return loaded

    for var in ('FIREBASE_CREDENTIALS_PATH', 'GOOGLE_APPLICATION_CREDENTIALS'):
        loaded = _load_json_file(os.getenv(var))
        if loaded is not None:
            return loaded

    if os.getenv('FIREBASE_PROJECT_ID') and os.getenv('FIREBASE_PRIVATE_KEY'):
        return {
            "type": "service_account",
            "project_id": os.getenv('FIREBASE_PROJECT_ID'),
            "private_key_id": os.getenv('FIREBASE_PRIVATE_KEY_ID'),
            "private_key": os.getenv('FIREBASE_PRIVATE_KEY', '').replace('\\n', '\n'),
            "client_email": os.getenv('FIREBASE_CLIENT_EMAIL'),
            "client_id": os.getenv('FIREBASE_CLIENT_ID'),
            "auth_uri": "https://accounts.google.com/o/oauth2/auth",
            "token_uri": "https://oauth2.googleapis.com/token",
            "auth_provider_x509_cert_url": "https://www.googleapis.com/oauth2/v1/certs",
            "client_x509_cert_url": os.getenv('FIREBASE_CLIENT_CERT_URL'),
            "universe_domain": "googleapis.com"
        }

    raise ValueError(
        "Firebase credentials not found. Please set one of:\n"
        "1. FIREBASE_CREDENTIALS_JSON (JSON string or path to JSON file)\n"
        "2. FIREBASE_CREDENTIALS_PATH (path to service account JSON file)\n"
        "3. GOOGLE_APPLICATION_CREDENTIALS (path to service account JSON file)\n"
        "4. Individual env vars (FIREBASE_PROJECT_ID, FIREBASE_PRIVATE_KEY, etc.)"
    )


def emulator_hosts() -> Dict[str, str]:
    """Emulator host variables that are currently set."""
    return {var: os.environ[var] for var in EMULATOR_HOST_VARS if os.getenv(var)}


def init_firebase(database_url: Optional[str] = None, dev_mode: bool = False) -> bool:
    """Initialize the default Firebase app; returns False when the app runs without Firebase."""
    if dev_mode:
        logger.info("Running in DEV_MODE - Firebase disabled")
        return False

    if firebase_admin._apps:
        return True

    options = {}
    if database_url:
        options['databaseURL'] = database_url

    hosts = emulator_hosts()
    if hosts:
        for var, host in hosts.items():
            logger.info("Firebase emulator detected: %s=%s", var, host)
        # Emulators accept any project id but the SDK insists on having one
        project_id = os.getenv("GCLOUD_PROJECT") or os.getenv("FIREBASE_PROJECT_ID") or "demo-earnflow"
        os.environ.setdefault("GCLOUD_PROJECT", project_id)
        options['projectId'] = project_id
        try:
            firebase_admin.initialize_app(options=options)
            logger.info("Firebase initialized for EMULATOR use (project %s)", project_id)
            return True
        except (ValueError, firebase_exceptions.FirebaseError) as e:
            logger.error("Emulator initialization failed: %s", e)
            return False

    try:
        cred = credentials.Certificate(get_firebase_credentials())
        firebase_admin.initialize_app(cred, options or None)
        logger.info("Firebase initialized successfully (CLOUD MODE)")
        return True
    except ValueError as e:
        logger.warning("%s", e)
        logger.warning("To use emulators instead, set FIRESTORE_EMULATOR_HOST=localhost:8080 "
                       "or run with DEV_MODE=true")
        return False
