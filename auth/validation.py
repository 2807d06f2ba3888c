"""
auth/validation.py -- Structural checks on register/login input.

The mandatory floor is: username non-empty after trimming, password
non-empty and at most 72 UTF-8 bytes. bcrypt only reads 72 bytes, and
recent bcrypt releases raise instead of truncating, so the byte cap is an
input rule here rather than a 500 from the hasher. A minimum password
length can be layered on through Settings.password_min_length; 0 disables
it.

The service only needs to know whether the list is empty -- any violation
short-circuits with ValidationFailed -- but the field-level keys are kept
for logging and for callers that want to show them.
"""

from __future__ import annotations

from dataclasses import dataclass

from auth.models import Credentials
from core.messages import MessageKey

# bcrypt input limit, in bytes.
MAX_PASSWORD_BYTES = 72


@dataclass(frozen=True)
class FieldViolation:
    field: str
    message: MessageKey


def validate_credentials(credentials: Credentials, *, min_password_length: int = 0) -> list[FieldViolation]:
    violations: list[FieldViolation] = []
    username = credentials.username
    if not username or not username.strip():
        violations.append(FieldViolation("username", MessageKey.USERNAME_REQUIRED))
    violations.extend(validate_password(credentials.password, min_password_length=min_password_length))
    return violations


def validate_password(password: str | None, *, min_password_length: int = 0) -> list[FieldViolation]:
    if not password:
        return [FieldViolation("password", MessageKey.PASSWORD_REQUIRED)]
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        return [FieldViolation("password", MessageKey.PASSWORD_TOO_LONG)]
    if min_password_length > 0 and len(password) < min_password_length:
        return [FieldViolation("password", MessageKey.PASSWORD_TOO_SHORT)]
    return []
