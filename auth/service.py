"""
auth/service.py -- Register / login orchestration.

AuthService coordinates the validator, the UserStore, the password hasher and
the token issuer, and reports every expected outcome as a Result:

  register:  ValidationFailed (400) -> UsernameAlreadyExists (409)
             -> UserRegisteredSuccessfully (200)
  login:     ValidationFailed (400) -> InvalidCredentials (401)
             -> LoginSuccessful (200)

Each call is terminal: nothing is retried here. Store errors (I/O, driver)
propagate to the caller untouched.

Login never tells "no such user" apart from "wrong password": both return
InvalidCredentials, and an unknown username still pays for one bcrypt
verification against the dummy hash so response time does not leak it [C1].
"""

from __future__ import annotations

import dataclasses
import logging

from auth.models import AuthResult, Credentials, User
from auth.store import UserStore
from auth.tokens import PasswordHasher, TokenIssuer
from auth.validation import FieldViolation, validate_credentials, validate_password
from core.messages import MessageKey
from core.results import Result, StatusCode

logger = logging.getLogger("weatherapi.auth")


class AuthService:
    def __init__(
        self,
        store: UserStore,
        issuer: TokenIssuer,
        hasher: PasswordHasher | None = None,
        min_password_length: int = 0,
    ) -> None:
        self._store = store
        self._issuer = issuer
        self._hasher = hasher or PasswordHasher()
        self._min_password_length = min_password_length

    def _validate(self, username: str, password: str) -> list[FieldViolation]:
        return validate_credentials(Credentials(username, password), min_password_length=self._min_password_length)

    def register(self, username: str, password: str) -> Result[AuthResult]:
        violations = self._validate(username, password)
        if violations:
            logger.info("Registration rejected: %s", ", ".join(v.message.value for v in violations))
            return Result.fail(StatusCode.BAD_REQUEST, MessageKey.VALIDATION_FAILED)

        username = username.strip()
        if self._store.exists_by_username(username):
            logger.info("Registration rejected: username %r already exists", username)
            return Result.fail(StatusCode.CONFLICT, MessageKey.USERNAME_EXISTS)

        user = self._store.create(User(username=username, password_hash=self._hasher.hash(password)))
        token = self._issuer.issue(user)
        logger.info("Registered user %r (%s)", user.username, user.id)
        return Result.ok(AuthResult(user.id, user.username, token), MessageKey.USER_REGISTERED)

    def login(self, username: str, password: str) -> Result[AuthResult]:
        if self._validate(username, password):
            return Result.fail(StatusCode.BAD_REQUEST, MessageKey.VALIDATION_FAILED)

        user = self._store.get_by_username(username.strip())
        if user is None:
            # Equalize timing -- do NOT return before running bcrypt [C1]
            self._hasher.verify(password, self._hasher.dummy_hash)
            logger.info("Login failed for %r", username)
            return Result.fail(StatusCode.UNAUTHORIZED, MessageKey.INVALID_CREDENTIALS)
        if not self._hasher.verify(password, user.password_hash):
            logger.info("Login failed for %r", username)
            return Result.fail(StatusCode.UNAUTHORIZED, MessageKey.INVALID_CREDENTIALS)

        token = self._issuer.issue(user)
        logger.info("Login succeeded for %r", user.username)
        return Result.ok(AuthResult(user.id, user.username, token), MessageKey.LOGIN_SUCCESSFUL)

    def change_password(self, user_id: str, current_password: str, new_password: str) -> Result[None]:
        """Replace a user's password hash after re-checking the current password."""
        if validate_password(new_password, min_password_length=self._min_password_length):
            return Result.fail(StatusCode.BAD_REQUEST, MessageKey.VALIDATION_FAILED)

        user = self._store.get_by_id(user_id)
        if user is None:
            return Result.fail(StatusCode.NOT_FOUND, MessageKey.USER_NOT_FOUND)
        if not current_password or not self._hasher.verify(current_password, user.password_hash):
            return Result.fail(StatusCode.UNAUTHORIZED, MessageKey.INVALID_CREDENTIALS)

        self._store.update(dataclasses.replace(user, password_hash=self._hasher.hash(new_password)))
        logger.info("Password changed for %r", user.username)
        return Result.ok(None, MessageKey.PASSWORD_CHANGED)
