"""Contact-form message storage."""
from __future__ import annotations

import logging
from typing import List

from .database import DocumentStore
from .models import Contact

logger = logging.getLogger("insurance_portal.contacts")


class ContactService:
    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    def submit(self, name: str, email: str, message: str) -> Contact:
        contact = self._store.insert_contact(name, email, message)
        logger.info("Stored contact message %s from %s", contact.id, email)
        return contact

    def list_all(self) -> List[Contact]:
        return self._store.list_contacts()


__all__ = ["ContactService"]
