"""
auth/store.py -- SQLAlchemy Core persistence layer for users.

Pattern: Repository + Data Mapper. UserStore is the repository; _row_to_user
is the mapper. AuthService and route code never touch SQL directly.

Lookups:
  Usernames are matched case-insensitively through normalized_username
  and every query filters is_deleted = 0. A soft-deleted row stays in the
  table but is invisible to exists/get, so its username can be registered
  again. That is also why username carries no UNIQUE constraint: uniqueness
  among live users is enforced by AuthService.register().

Security:
  All queries use bound parameters. No f-strings in SQL.

DB path: weatherapi_auth.db at the repository root unless AUTH_DB_URL is set.
"""

from __future__ import annotations

import dataclasses

from sqlalchemy import Boolean, Column, MetaData, String, Table, Text, create_engine, event, false, select
from sqlalchemy.engine import Engine

from auth.models import User
from core.config import now_iso

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_users = Table(
    "users",
    _metadata,
    Column("id", String(36), primary_key=True),
    Column("username", String(255), nullable=False),
    # casefold() of username; SQLite lower() only folds ASCII.
    Column("normalized_username", String(255), nullable=False, index=True),
    Column("password_hash", Text, nullable=False),
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32)),
    Column("deleted_at", String(32)),
    Column("is_deleted", Boolean, nullable=False, server_default="0"),
)


# ---------------------------------------------------------------------------
# WAL mode
# ---------------------------------------------------------------------------


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode for concurrent read safety.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


def normalize_username(username: str) -> str:
    return username.strip().casefold()


class UserStore:
    """Repository for User entities.

    Usage:
        store = UserStore("sqlite:///:memory:")
        store.create(User(username="alice", password_hash=hash_password("secret")))
        user = store.get_by_username("ALICE")
        store.close()
    """

    def __init__(self, db_url: str) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        _metadata.create_all(self.engine)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def _live_username(self, username: str):
        return (_users.c.normalized_username == normalize_username(username)) & (_users.c.is_deleted == false())

    def exists_by_username(self, username: str) -> bool:
        """True if a non-deleted user with this username exists (case-insensitive)."""
        with self.engine.connect() as conn:
            row = conn.execute(select(_users.c.id).where(self._live_username(username)).limit(1)).fetchone()
        return row is not None

    def get_by_username(self, username: str) -> User | None:
        """Look up a non-deleted user by username (case-insensitive). Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(self._live_username(username)).limit(1)).fetchone()
        return _row_to_user(row) if row is not None else None

    def get_by_id(self, user_id: str) -> User | None:
        """Look up a non-deleted user by primary key. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(
                _users.select().where((_users.c.id == user_id) & (_users.c.is_deleted == false()))
            ).fetchone()
        return _row_to_user(row) if row is not None else None

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create(self, user: User) -> User:
        """Insert a new user and return it."""
        with self.engine.connect() as conn:
            conn.execute(
                _users.insert().values(
                    id=user.id,
                    username=user.username,
                    normalized_username=normalize_username(user.username),
                    password_hash=user.password_hash,
                    created_at=user.created_at,
                    updated_at=user.updated_at,
                    deleted_at=user.deleted_at,
                    is_deleted=user.is_deleted,
                )
            )
            conn.commit()
        return user

    def update(self, user: User) -> User:
        """Write every mutable column of user and return the stored record.

        updated_at is stamped here. Raises LookupError if the id is unknown.
        """
        stamped = dataclasses.replace(user, updated_at=now_iso())
        with self.engine.connect() as conn:
            result = conn.execute(
                _users.update()
                .where(_users.c.id == stamped.id)
                .values(
                    password_hash=stamped.password_hash,
                    updated_at=stamped.updated_at,
                    deleted_at=stamped.deleted_at,
                    is_deleted=stamped.is_deleted,
                )
            )
            conn.commit()
        if result.rowcount == 0:
            raise LookupError(f"User {user.id} does not exist")
        return stamped

    def soft_delete(self, user_id: str) -> bool:
        """Mark a user deleted. Returns True if a live user was deleted, False otherwise."""
        user = self.get_by_id(user_id)
        if user is None:
            return False
        self.update(dataclasses.replace(user, is_deleted=True, deleted_at=now_iso()))
        return True

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        username=row.username,
        password_hash=row.password_hash,
        created_at=row.created_at,
        updated_at=row.updated_at,
        deleted_at=row.deleted_at,
        is_deleted=bool(row.is_deleted),
    )
