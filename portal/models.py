"""Domain records persisted by the insurance portal."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class User:
    """Represents a registered account. ``password_hash`` never holds plaintext."""

    first_name: str
    last_name: str
    email: str
    password_hash: str


@dataclass(frozen=True)
class Contact:
    """A contact-form message stored by the portal."""

    id: str
    name: str
    email: str
    message: str
    created_at: datetime
    updated_at: datetime


__all__ = ["User", "Contact"]
