"""
============================================================================
FILE: config.py
LOCATION: gateway/config.py
============================================================================

PURPOSE:
    Centralized configuration for the gateway and its Firebase, Pinata and
    Mailjet collaborators.

ROLE IN PROJECT:
    Loads environment variables (and .env) and lazily builds the shared
    user store, auth client and plan policy, supporting mock and real
    Firebase usage.

KEY COMPONENTS:
    - get_user_store: Returns MockUserStore or FirestoreUserStore
    - get_auth: Returns MockAuth or the firebase_admin.auth module
    - get_plan_policy: Returns the PlanPolicy built at first use
    - init_firebase: Initializes Firebase Admin SDK
    - init_async_firestore: Builds the async Firestore client

DEPENDENCIES:
    - External: firebase_admin, google-cloud-firestore, python-dotenv
    - Internal: mock_firestore, user_store, plans

USAGE:
    from gateway.config import get_user_store, get_auth
============================================================================
"""

import os
from pathlib import Path

import dotenv
import firebase_admin
from firebase_admin import auth as firebase_auth
from firebase_admin import credentials

from gateway.logging_config import get_logger
from gateway.plans import PlanPolicy


logger = get_logger("config")

# Load environment variables from .env
PROJECT_ROOT = Path(__file__).resolve().parent.parent
DOTENV_PATH = PROJECT_ROOT / ".env"
if DOTENV_PATH.exists():
    dotenv.load_dotenv(DOTENV_PATH, override=False)

PORT = int(os.getenv("PORT", "3000"))

# Shared API key checked on every gated route when set
GATEWAY_API_KEY = os.getenv("GATEWAY_API_KEY", "")

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv(
        "CORS_ORIGINS",
        "https://endlessforge.com,"
        "https://endless-forge-web.web.app,"
        "https://endless-forge-web.firebaseapp.com",
    ).split(",")
    if origin.strip()
]

# Per-IP throttling (slowapi), independent of the per-user daily quota
RATE_LIMIT_ENABLED = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
RATE_LIMIT_DEFAULT = os.getenv("RATE_LIMIT_DEFAULT", "100/minute")

# Pinata Configuration
PINATA_API_KEY = os.getenv("PINATA_API_KEY", "")
PINATA_SECRET_KEY = os.getenv("PINATA_SECRET_KEY", "")
PINATA_URL = os.getenv("PINATA_URL", "https://api.pinata.cloud/pinning/pinFileToIPFS")
PINATA_GATEWAY = os.getenv("PINATA_GATEWAY", "https://gateway.pinata.cloud/ipfs")

# Mailjet Configuration
MJ_APIKEY_PUBLIC = os.getenv("MJ_APIKEY_PUBLIC", "")
MJ_APIKEY_PRIVATE = os.getenv("MJ_APIKEY_PRIVATE", "")
MJ_SENDER_EMAIL = os.getenv("MJ_SENDER_EMAIL", "")
MJ_SENDER_NAME = os.getenv("MJ_SENDER_NAME", "Endless Forge")
MJ_SEND_URL = os.getenv("MJ_SEND_URL", "https://api.mailjet.com/v3.1/send")
CONTACT_RECEIVER = os.getenv("CONTACT_RECEIVER", "")

PROVIDER_TIMEOUT = float(os.getenv("PROVIDER_TIMEOUT", "15"))

# Mock Database Configuration
USE_REAL_FIREBASE = os.getenv("USE_REAL_FIREBASE", "false").lower() == "true"
USE_MOCK_DB = not USE_REAL_FIREBASE
MOCK_DB_FILE = os.getenv("MOCK_DB_FILE", str(PROJECT_ROOT / "mock_db.json"))
USERS_COLLECTION = os.getenv("USERS_COLLECTION", "users")

_store_instance = None
_auth_instance = None
_policy_instance = None


def _resolve_credentials_path():
    """Resolve the Firebase credentials file path.

    Returns:
        Path: Absolute path to the service account JSON file.
    """
    env_path = os.getenv("FIREBASE_CREDENTIALS")
    if env_path:
        path = Path(env_path)
        if not path.is_absolute():
            path = PROJECT_ROOT / env_path
        return path
    return PROJECT_ROOT / "serviceAccountKey.json"


def init_firebase():
    """Initialize Firebase Admin SDK.

    Raises:
        FileNotFoundError: If real Firebase credentials are missing.
    """
    if not firebase_admin._apps:
        key_path = _resolve_credentials_path()
        if not key_path.exists():
            raise FileNotFoundError(
                f"Firebase credentials not found: {key_path}",
            )
        cred = credentials.Certificate(str(key_path))
        firebase_admin.initialize_app(cred)
        logger.info("Firebase initialized with service account")


def init_async_firestore():
    """Return an async Firestore client bound to the service account.

    Raises:
        FileNotFoundError: If real Firebase credentials are missing.
    """
    init_firebase()

    from google.cloud.firestore_v1.async_client import AsyncClient
    from google.oauth2 import service_account

    creds = service_account.Credentials.from_service_account_file(
        str(_resolve_credentials_path()),
    )
    return AsyncClient(project=creds.project_id, credentials=creds)


def get_user_store():
    """Get the user store (mock or Firestore).

    Returns:
        UserStore: MockUserStore or FirestoreUserStore instance.
    """
    global _store_instance
    if _store_instance is None:
        if USE_MOCK_DB:
            from gateway.mock_firestore import MockUserStore

            _store_instance = MockUserStore(db_file=MOCK_DB_FILE or None)
            logger.info("Using in-memory user store")
        else:
            from gateway.user_store import FirestoreUserStore

            _store_instance = FirestoreUserStore(
                init_async_firestore(),
                collection=USERS_COLLECTION,
            )
    return _store_instance


def get_auth():
    """Get Firebase auth module or mock auth.

    Returns:
        object: MockAuth instance or firebase_admin.auth module.
    """
    global _auth_instance
    if _auth_instance is None:
        if USE_MOCK_DB:
            from gateway.mock_firestore import MockAuth

            _auth_instance = MockAuth(store=get_user_store())
        else:
            init_firebase()
            _auth_instance = firebase_auth
    return _auth_instance


def get_plan_policy() -> PlanPolicy:
    global _policy_instance
    if _policy_instance is None:
        _policy_instance = PlanPolicy.from_env()
    return _policy_instance
