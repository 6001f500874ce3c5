"""
============================================================================
FILE: user_store.py
LOCATION: gateway/user_store.py
============================================================================

PURPOSE:
    Async access to the `users` collection: plain reads, field updates and
    an atomic read-modify-write primitive for the quota counters.

ROLE IN PROJECT:
    The only path by which the gateway touches user documents. The quota
    enforcer runs its whole check-and-increment inside `transact()` so two
    concurrent requests for the same user cannot overwrite each other's
    counter.

KEY COMPONENTS:
    - UserStore: Interface shared by the real and the mock store
    - FirestoreUserStore: google-cloud-firestore AsyncClient implementation
    - DocumentNotFound: Raised when the user document does not exist
    - StoreError: Raised when a read, write or transaction fails

DEPENDENCIES:
    - External: google-cloud-firestore, google-api-core, google-auth
    - Internal: logging_config.py

USAGE:
    store = FirestoreUserStore(async_client)
    result = await store.transact(uid, lambda record: (record, None))
============================================================================
"""

from typing import Any, Callable, Dict, Optional, Tuple, TypeVar

from google.api_core import exceptions as google_exceptions
from google.auth import exceptions as google_auth_exceptions
from google.cloud import firestore

from gateway.logging_config import get_logger


logger = get_logger("user_store")

T = TypeVar("T")

# fn(record) -> (result, fields to write or None)
Mutation = Callable[[Dict[str, Any]], Tuple[T, Optional[Dict[str, Any]]]]


class DocumentNotFound(Exception):
    """The requested user document does not exist."""

    def __init__(self, uid: str):
        super().__init__(f"User document '{uid}' not found")
        self.uid = uid


class StoreError(Exception):
    """A read, write or transaction against the user store failed."""


class UserStore:
    """Async interface over user documents keyed by uid."""

    async def get(self, uid: str) -> Optional[Dict[str, Any]]:
        """Return the document data, or None if it does not exist."""
        raise NotImplementedError

    async def update(self, uid: str, fields: Dict[str, Any]) -> None:
        """Merge `fields` (dotted paths allowed) into an existing document.

        Raises:
            DocumentNotFound: If the document does not exist.
        """
        raise NotImplementedError

    async def transact(self, uid: str, fn: Mutation) -> T:
        """Atomically read the document, apply `fn` and write its fields.

        `fn` receives the current document data and returns
        `(result, fields)`. When `fields` is not None it is written in the
        same atomic unit as the read. `fn` may be called more than once if
        the backend retries on contention, so it must not have side effects.

        Raises:
            DocumentNotFound: If the document does not exist.
            StoreError: If the read, the write or the commit fails.
        """
        raise NotImplementedError


class FirestoreUserStore(UserStore):
    """UserStore backed by a google-cloud-firestore AsyncClient."""

    def __init__(
        self,
        client: Any,
        collection: str = "users",
        max_attempts: int = 5,
    ):
        self._client = client
        self._collection = collection
        self._max_attempts = max_attempts

    def _ref(self, uid: str):
        return self._client.collection(self._collection).document(uid)

    async def get(self, uid: str) -> Optional[Dict[str, Any]]:
        try:
            snapshot = await self._ref(uid).get()
        except (google_exceptions.GoogleAPIError, google_auth_exceptions.GoogleAuthError) as exc:
            raise StoreError(f"Failed to read user '{uid}': {exc}") from exc
        if not snapshot.exists:
            return None
        return snapshot.to_dict() or {}

    async def update(self, uid: str, fields: Dict[str, Any]) -> None:
        try:
            await self._ref(uid).update(fields)
        except google_exceptions.NotFound as exc:
            raise DocumentNotFound(uid) from exc
        except (google_exceptions.GoogleAPIError, google_auth_exceptions.GoogleAuthError) as exc:
            raise StoreError(f"Failed to update user '{uid}': {exc}") from exc

    async def transact(self, uid: str, fn: Mutation) -> T:
        ref = self._ref(uid)

        @firestore.async_transactional
        async def _run(transaction):
            snapshot = await ref.get(transaction=transaction)
            if not snapshot.exists:
                raise DocumentNotFound(uid)
            result, fields = fn(snapshot.to_dict() or {})
            if fields is not None:
                transaction.update(ref, fields)
            return result

        transaction = self._client.transaction(max_attempts=self._max_attempts)
        try:
            return await _run(transaction)
        except DocumentNotFound:
            raise
        except (google_exceptions.GoogleAPIError, google_auth_exceptions.GoogleAuthError) as exc:
            raise StoreError(f"Transaction on user '{uid}' failed: {exc}") from exc
        except ValueError as exc:
            # async_transactional raises ValueError once max_attempts is spent
            logger.warning(f"Transaction on user '{uid}' gave up: {exc}")
            raise StoreError(f"Transaction on user '{uid}' failed: {exc}") from exc
