"""
auth/tokens.py -- Password hashing and JWT issuance.

Security design decisions:
  Passwords: bcrypt directly (no passlib wrapper). Each hash gets a fresh
       salt, so hashing the same password twice gives two different strings
       that both verify. The _DUMMY_HASH constant enables timing equalization
       in AuthService.login() so response time does not reveal whether a
       username exists [C1].

  JWT: python-jose with HS256. TokenIssuer signs sub (user id), name
       (username), jti (random UUID, distinguishes tokens issued in the same
       second), iss, aud, iat and exp. decode() verifies signature, issuer,
       audience and expiry and returns None on any failure -- the route layer
       turns that into a 401.

  SECRET_KEY: never read here directly. TokenIssuer.from_settings() takes it
       from core.config.Settings, whose validator refuses to start without a
       key outside DEBUG [M7]. An issuer with an empty key cannot be built.

Layer rule: no imports from api/ or cache/. Import from core/ is allowed.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

import bcrypt
from jose import JWTError, jwt

if TYPE_CHECKING:
    from auth.models import User
    from core.config import Settings

logger = logging.getLogger("weatherapi.auth")

_ALGORITHM = "HS256"

# ---------------------------------------------------------------------------
# Password hashing (bcrypt -- direct usage)
# ---------------------------------------------------------------------------


def hash_password(plain: str) -> str:
    """Return a salted bcrypt hash of the given plaintext password.

    Callers validate first: bcrypt rejects input over 72 bytes, and
    auth/validation.py turns that into ValidationFailed before hashing.
    """
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash."""
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Malformed or non-bcrypt hash in storage.
        logger.warning("Stored password hash is not a valid bcrypt hash")
        return False


# Timing equalization dummy hash [C1].
# Computed once at module load so the first login attempt is not measurably
# slower than subsequent ones.
_DUMMY_HASH: str = hash_password("weatherapi_timing_dummy")


class PasswordHasher:
    """Injectable wrapper over hash_password / verify_password."""

    dummy_hash = _DUMMY_HASH

    def hash(self, plain: str) -> str:
        return hash_password(plain)

    def verify(self, plain: str, hashed: str) -> bool:
        return verify_password(plain, hashed)


# ---------------------------------------------------------------------------
# JWT issue / decode
# ---------------------------------------------------------------------------


class TokenIssuer:
    """Build signed bearer tokens for verified identities."""

    def __init__(self, secret_key: str, issuer: str, audience: str, expire_minutes: int = 1440) -> None:
        if not secret_key:
            raise ValueError("JWT secret key is not configured.")
        self._secret_key = secret_key
        self.issuer = issuer
        self.audience = audience
        self.expire_minutes = expire_minutes

    @classmethod
    def from_settings(cls, settings: Settings) -> TokenIssuer:
        return cls(
            secret_key=settings.secret_key,
            issuer=settings.jwt_issuer,
            audience=settings.jwt_audience,
            expire_minutes=settings.token_expire_minutes,
        )

    def issue(self, user: User) -> str:
        """Encode a signed JWT for user with the configured lifetime."""
        now = datetime.now(timezone.utc)
        payload = {
            "sub": user.id,
            "name": user.username,
            "jti": str(uuid.uuid4()),
            "iss": self.issuer,
            "aud": self.audience,
            "iat": now,
            "exp": now + timedelta(minutes=self.expire_minutes),
        }
        return jwt.encode(payload, self._secret_key, algorithm=_ALGORITHM)

    def decode(self, token: str) -> dict | None:
        """Decode and verify a JWT. Returns the payload dict or None on any failure."""
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[_ALGORITHM],
                audience=self.audience,
                issuer=self.issuer,
            )
        except JWTError:
            return None
        if not payload.get("sub") or "name" not in payload:
            return None
        return payload
