"""Account registration and login."""
from __future__ import annotations

import logging

from .database import DocumentStore
from .errors import DuplicateAccountError, InvalidCredentialsError
from .models import User
from .security import PasswordHasher

logger = logging.getLogger("insurance_portal.accounts")


class AccountService:
    """Register users and check their credentials against the document store."""

    def __init__(self, store: DocumentStore, hasher: PasswordHasher) -> None:
        self._store = store
        self._hasher = hasher

    def register(self, first_name: str, last_name: str, email: str, password: str) -> User:
        """Create a new account.

        Raises :class:`DuplicateAccountError` when the email is already
        registered, whether detected by the lookup or by the store's unique
        index at insert time.
        """

        if self._store.find_user_by_email(email) is not None:
            logger.info("Rejected registration for existing account %s", email)
            raise DuplicateAccountError("User already exists")

        user = User(
            first_name=first_name,
            last_name=last_name,
            email=email,
            password_hash=self._hasher.hash(password),
        )
        try:
            self._store.insert_user(user)
        except DuplicateAccountError:
            logger.info("Concurrent registration for %s rejected by the store", email)
            raise

        logger.info("Registered account %s", email)
        return user

    def authenticate(self, email: str, password: str) -> User:
        """Return the matching user or raise :class:`InvalidCredentialsError`."""

        user = self._store.find_user_by_email(email)
        if user is None:
            logger.info("Login failed for %s: no such account", email)
            raise InvalidCredentialsError("Invalid email or password")

        if not self._hasher.verify(password, user.password_hash):
            logger.info("Login failed for %s: password mismatch", email)
            raise InvalidCredentialsError("Invalid email or password")

        return user


__all__ = ["AccountService"]
