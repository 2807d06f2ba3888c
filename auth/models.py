"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, minimal logic). Dataclasses own
domain shape; the store and AuthService do the work.

User is frozen: username and password_hash never change in place. A password
change or soft delete produces a new instance via dataclasses.replace() and
is written back through UserStore.update().

Layer rule: no imports from api/ or cache/.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field

from core.config import now_iso


@dataclass(frozen=True)
class User:
    """A registered identity.

    Soft delete is expressed by is_deleted / deleted_at. Deleted records stay
    in the table for audit but every store lookup filters them out.
    """

    username: str
    password_hash: str
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: str = field(default_factory=now_iso)
    updated_at: str | None = None
    deleted_at: str | None = None
    is_deleted: bool = False

    def __post_init__(self) -> None:
        if not self.username or not self.username.strip():
            raise ValueError("Username cannot be empty.")
        if not self.password_hash or not self.password_hash.strip():
            raise ValueError("Password hash cannot be empty.")


@dataclass(frozen=True)
class Credentials:
    """Raw (username, password) pair from a register/login request. Never persisted."""

    username: str
    password: str

    def __repr__(self) -> str:
        return f"Credentials(username={self.username!r}, password='***')"


@dataclass(frozen=True)
class AuthResult:
    """Payload of a successful register or login."""

    user_id: str
    username: str
    token: str
