"""
============================================================================
FILE: mock_firestore.py
LOCATION: gateway/mock_firestore.py
============================================================================

PURPOSE:
    In-memory stand-ins for the Firestore `users` collection and Firebase
    Authentication, used for local development and tests without
    connecting to real Firebase.

ROLE IN PROJECT:
    - Selected by config.get_user_store() / get_auth() when
      USE_REAL_FIREBASE is false
    - Optional JSON file persistence (MOCK_DB_FILE) between restarts
    - Optional simulated round-trip latency so concurrency tests see the
      same interleavings as a networked store

KEY COMPONENTS:
    - MockUserStore: UserStore with per-document asyncio locks for transact()
    - MockAuth: Mock Firebase Authentication service
    - MockUserRecord: User data container for auth mocking

DEPENDENCIES:
    - External: None (pure Python implementation)
    - Internal: user_store.py

USAGE:
    from gateway.mock_firestore import MockUserStore

    store = MockUserStore()
    store.seed("user-1", {"selectedPlan": "free"})
    await store.get("user-1")
============================================================================
"""
import asyncio
import copy
import json
import os
import time
from typing import Any, Dict, Optional

from gateway.user_store import DocumentNotFound, Mutation, T, UserStore


def apply_field_updates(data: Dict[str, Any], fields: Dict[str, Any]) -> None:
    """Apply Firestore-style updates where `a.b` addresses a nested map."""
    for path, value in fields.items():
        parts = path.split(".")
        target = data
        for part in parts[:-1]:
            child = target.get(part)
            if not isinstance(child, dict):
                child = {}
                target[part] = child
            target = child
        target[parts[-1]] = copy.deepcopy(value)


class MockUserStore(UserStore):
    def __init__(self, db_file: Optional[str] = None, latency: float = 0.0):
        self.db_file = db_file
        self.latency = latency
        self.writes = 0
        self._docs: Dict[str, Dict[str, Any]] = {}
        self._locks: Dict[str, asyncio.Lock] = {}
        self._lock_users: Dict[str, int] = {}
        self.reload()

    def reload(self):
        self._docs = {}
        if self.db_file and os.path.exists(self.db_file):
            with open(self.db_file, "r") as f:
                self._docs = json.load(f)

    def _save_db(self):
        if self.db_file:
            with open(self.db_file, "w") as f:
                json.dump(self._docs, f, indent=2, default=str)

    async def _round_trip(self):
        # Always yield so concurrent tasks interleave at every store call
        await asyncio.sleep(self.latency)

    def seed(self, uid: str, data: Dict[str, Any]) -> None:
        """Create or replace a document synchronously (setup helper)."""
        self._docs[uid] = copy.deepcopy(data)
        self._save_db()

    def snapshot(self, uid: str) -> Optional[Dict[str, Any]]:
        """Return a copy of the stored document without a round trip."""
        data = self._docs.get(uid)
        return copy.deepcopy(data) if data is not None else None

    def _write(self, uid: str, fields: Dict[str, Any]) -> None:
        if uid not in self._docs:
            raise DocumentNotFound(uid)
        apply_field_updates(self._docs[uid], fields)
        self.writes += 1
        self._save_db()

    async def get(self, uid: str) -> Optional[Dict[str, Any]]:
        await self._round_trip()
        return self.snapshot(uid)

    async def update(self, uid: str, fields: Dict[str, Any]) -> None:
        await self._round_trip()
        self._write(uid, fields)

    async def transact(self, uid: str, fn: Mutation) -> T:
        # A uid's lock lives only while some call holds or awaits it
        lock = self._locks.setdefault(uid, asyncio.Lock())
        self._lock_users[uid] = self._lock_users.get(uid, 0) + 1
        try:
            async with lock:
                data = await self.get(uid)
                if data is None:
                    raise DocumentNotFound(uid)
                result, fields = fn(data)
                if fields is not None:
                    await self.update(uid, fields)
                return result
        finally:
            self._lock_users[uid] -= 1
            if not self._lock_users[uid]:
                del self._lock_users[uid]
                del self._locks[uid]


class MockUserRecord:
    def __init__(self, uid, email=None, display_name=None, disabled=False):
        self.uid = uid
        self.email = email
        self.display_name = display_name
        self.disabled = disabled


class MockAuthError(Exception):
    pass


class MockUserNotFoundError(MockAuthError):
    pass


class MockAuth:
    """Mock Firebase Authentication.

    When given a MockUserStore, any uid with a user document also counts as
    an auth user, the way every real account has both records.
    """

    # Mirrors firebase_admin.auth so callers can catch auth.UserNotFoundError
    UserNotFoundError = MockUserNotFoundError

    def __init__(self, store: Optional[MockUserStore] = None):
        self._users = {}  # uid -> MockUserRecord
        self._store = store

    def create_user(self, uid=None, email=None, display_name=None, disabled=False, **kwargs):
        uid = uid or f"mock-user-{int(time.time() * 1000)}"
        user = MockUserRecord(uid, email, display_name, disabled)
        self._users[uid] = user
        return user

    def get_user(self, uid):
        if uid not in self._users:
            data = self._store.snapshot(uid) if self._store else None
            if data is None:
                raise self.UserNotFoundError("User not found")
            self.create_user(uid=uid, email=data.get("email"), display_name=data.get("displayName"))
        return self._users[uid]

    def update_user(self, uid, **kwargs):
        user = self.get_user(uid)
        if "display_name" in kwargs:
            user.display_name = kwargs["display_name"]
        if "disabled" in kwargs:
            user.disabled = kwargs["disabled"]
        if "email" in kwargs:
            user.email = kwargs["email"]
        return user

    def verify_id_token(self, token, check_revoked=False, clock_skew_seconds=0):
        if token.startswith("mock-token-"):
            uid = token[len("mock-token-"):]
            if uid:
                return {"uid": uid}
        raise MockAuthError("Invalid mock token")
