"""Document store access for users and contact messages."""
from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Protocol

from bson import ObjectId
from pymongo import ASCENDING, MongoClient
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError, PyMongoError

from .config import Settings
from .errors import DuplicateAccountError, StorageError
from .models import Contact, User

logger = logging.getLogger("insurance_portal.database")

USERS_COLLECTION = "users"
CONTACTS_COLLECTION = "contacts"


def _current_timestamp() -> datetime:
    return datetime.now(timezone.utc)


def _document_to_user(document: Mapping[str, Any]) -> User:
    return User(
        first_name=document["firstName"],
        last_name=document["lastName"],
        email=document["email"],
        password_hash=document["password"],
    )


def _user_to_document(user: User) -> Dict[str, Any]:
    return {
        "firstName": user.first_name,
        "lastName": user.last_name,
        "email": user.email,
        "password": user.password_hash,
    }


def _document_to_contact(document: Mapping[str, Any]) -> Contact:
    return Contact(
        id=str(document["_id"]),
        name=document["name"],
        email=document["email"],
        message=document["message"],
        created_at=document["createdAt"],
        updated_at=document["updatedAt"],
    )


class DocumentStore(Protocol):
    """Interface shared by the MongoDB and in-memory stores."""

    @property
    def connected(self) -> bool:
        ...

    def connect(self) -> bool:
        ...

    def ping(self) -> bool:
        ...

    def close(self) -> None:
        ...

    def ensure_indexes(self) -> None:
        ...

    def find_user_by_email(self, email: str) -> Optional[User]:
        ...

    def insert_user(self, user: User) -> None:
        ...

    def insert_contact(self, name: str, email: str, message: str) -> Contact:
        ...

    def list_contacts(self) -> List[Contact]:
        ...


class MongoDocumentStore:
    """MongoDB-backed store reached through a connection string."""

    def __init__(
        self,
        uri: str,
        *,
        database_name: str,
        timeout_ms: int = 5000,
        client: MongoClient | None = None,
    ) -> None:
        if not uri:
            raise ValueError("MongoDB connection string must not be empty")
        self._database_name = database_name
        self._connected = False
        self._client: MongoClient | None = client
        if self._client is None:
            # SRV records are resolved on first use, never during construction.
            try:
                self._client = MongoClient(
                    uri,
                    serverSelectionTimeoutMS=timeout_ms,
                    connectTimeoutMS=timeout_ms,
                    tz_aware=True,
                    connect=False,
                )
            except PyMongoError:
                logger.exception("Invalid MongoDB connection string")

    @property
    def _db(self) -> Database:
        if self._client is None:
            raise StorageError("MongoDB client is not available")
        return self._client[self._database_name]

    @property
    def connected(self) -> bool:
        return self._connected

    def connect(self) -> bool:
        """Verify the server is reachable and create indexes.

        Failures are logged and leave the store in degraded mode; every later
        operation raises :class:`StorageError` until the server is reachable.
        """

        try:
            if self._client is None:
                raise StorageError("MongoDB client is not available")
            self._client.admin.command("ping")
            self.ensure_indexes()
        except (PyMongoError, StorageError):
            logger.exception("MongoDB connection error; serving in degraded mode")
            self._connected = False
            return False

        logger.info("MongoDB connected")
        self._connected = True
        return True

    def ping(self) -> bool:
        """Check the server is reachable and refresh :attr:`connected`."""

        if self._client is None:
            self._connected = False
            return False
        try:
            self._client.admin.command("ping")
        except PyMongoError:
            if self._connected:
                logger.warning("MongoDB is no longer reachable")
            self._connected = False
            return False
        if not self._connected:
            # Indexes are missing after a degraded start.
            try:
                self.ensure_indexes()
            except StorageError:
                logger.exception("MongoDB reachable but index creation failed")
                return False
            logger.info("MongoDB connection restored")
        self._connected = True
        return True

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
        self._connected = False

    def ensure_indexes(self) -> None:
        try:
            self._db[USERS_COLLECTION].create_index(
                [("email", ASCENDING)], unique=True, name="email_unique"
            )
        except PyMongoError as exc:
            raise StorageError("Failed to create indexes") from exc

    def find_user_by_email(self, email: str) -> Optional[User]:
        try:
            document = self._db[USERS_COLLECTION].find_one({"email": email})
        except PyMongoError as exc:
            raise StorageError("Failed to look up user") from exc
        if document is None:
            return None
        return _document_to_user(document)

    def insert_user(self, user: User) -> None:
        try:
            self._db[USERS_COLLECTION].insert_one(_user_to_document(user))
        except DuplicateKeyError as exc:
            raise DuplicateAccountError("User already exists") from exc
        except PyMongoError as exc:
            raise StorageError("Failed to save user") from exc

    def insert_contact(self, name: str, email: str, message: str) -> Contact:
        now = _current_timestamp()
        document = {
            "name": name,
            "email": email,
            "message": message,
            "createdAt": now,
            "updatedAt": now,
        }
        try:
            result = self._db[CONTACTS_COLLECTION].insert_one(document)
        except PyMongoError as exc:
            raise StorageError("Failed to save contact message") from exc
        document["_id"] = result.inserted_id
        return _document_to_contact(document)

    def list_contacts(self) -> List[Contact]:
        try:
            documents = list(self._db[CONTACTS_COLLECTION].find())
        except PyMongoError as exc:
            raise StorageError("Failed to fetch contact messages") from exc
        return [_document_to_contact(document) for document in documents]


class InMemoryDocumentStore:
    """Process-local store with the same contract, for development and tests."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._users: Dict[str, Dict[str, Any]] = {}
        self._contacts: List[Dict[str, Any]] = []

    @property
    def connected(self) -> bool:
        return True

    def connect(self) -> bool:
        logger.warning("MONGODB_URI is not set; using the in-memory document store")
        return True

    def ping(self) -> bool:
        return True

    def close(self) -> None:
        pass

    def ensure_indexes(self) -> None:
        pass

    def reset(self) -> None:
        with self._lock:
            self._users.clear()
            self._contacts.clear()

    def find_user_by_email(self, email: str) -> Optional[User]:
        with self._lock:
            document = self._users.get(email)
        if document is None:
            return None
        return _document_to_user(document)

    def insert_user(self, user: User) -> None:
        with self._lock:
            if user.email in self._users:
                raise DuplicateAccountError("User already exists")
            document = _user_to_document(user)
            document["_id"] = ObjectId()
            self._users[user.email] = document

    def insert_contact(self, name: str, email: str, message: str) -> Contact:
        now = _current_timestamp()
        document = {
            "_id": ObjectId(),
            "name": name,
            "email": email,
            "message": message,
            "createdAt": now,
            "updatedAt": now,
        }
        with self._lock:
            self._contacts.append(document)
        return _document_to_contact(document)

    def list_contacts(self) -> List[Contact]:
        with self._lock:
            documents = list(self._contacts)
        return [_document_to_contact(document) for document in documents]


def create_store(settings: Settings) -> DocumentStore:
    """Return the store selected by *settings*; no connection string means in-memory."""

    if not settings.mongodb_uri:
        return InMemoryDocumentStore()
    return MongoDocumentStore(
        settings.mongodb_uri,
        database_name=settings.database_name,
        timeout_ms=settings.database_timeout_ms,
    )


__all__ = [
    "CONTACTS_COLLECTION",
    "USERS_COLLECTION",
    "DocumentStore",
    "InMemoryDocumentStore",
    "MongoDocumentStore",
    "create_store",
]
