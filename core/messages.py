"""
core/messages.py -- Stable message keys and the display-string lookup.

The core never embeds display text. Services put a MessageKey on every
Result; only the transport layer (api/) turns keys into strings via
Localizer.resolve(). Adding a language means adding a table, not touching
any service.
"""

from enum import Enum


class MessageKey(str, Enum):
    # Auth outcomes
    USER_REGISTERED = "UserRegisteredSuccessfully"
    USERNAME_EXISTS = "UsernameAlreadyExists"
    VALIDATION_FAILED = "ValidationFailed"
    LOGIN_SUCCESSFUL = "LoginSuccessful"
    INVALID_CREDENTIALS = "InvalidCredentials"
    PASSWORD_CHANGED = "PasswordChanged"
    USER_NOT_FOUND = "UserNotFound"
    UNAUTHORIZED = "Unauthorized"
    IDENTITY_RETRIEVED = "IdentityRetrieved"

    # Field requirements
    USERNAME_REQUIRED = "UsernameRequired"
    PASSWORD_REQUIRED = "PasswordRequired"
    PASSWORD_TOO_SHORT = "PasswordTooShort"
    PASSWORD_TOO_LONG = "PasswordTooLong"

    # Weather lookup
    CITY_REQUIRED = "CityRequired"
    WEATHER_NOT_FOUND = "WeatherDataNotFound"
    WEATHER_RETRIEVED = "WeatherDataRetrieved"

    # Rate guard
    REQUEST_ACCEPTED = "RequestAccepted"
    TOO_MANY_REQUESTS = "TooManyRequests"

    UNEXPECTED_ERROR = "UnexpectedError"


_EN: dict[str, str] = {
    MessageKey.USER_REGISTERED: "User registered successfully.",
    MessageKey.USERNAME_EXISTS: "Username already exists.",
    MessageKey.VALIDATION_FAILED: "Validation failed.",
    MessageKey.LOGIN_SUCCESSFUL: "Login successful.",
    MessageKey.INVALID_CREDENTIALS: "Invalid username or password.",
    MessageKey.PASSWORD_CHANGED: "Password changed.",
    MessageKey.USER_NOT_FOUND: "User not found.",
    MessageKey.UNAUTHORIZED: "Authentication required.",
    MessageKey.IDENTITY_RETRIEVED: "Identity retrieved.",
    MessageKey.USERNAME_REQUIRED: "Username is required.",
    MessageKey.PASSWORD_REQUIRED: "Password is required.",
    MessageKey.PASSWORD_TOO_SHORT: "Password is too short.",
    MessageKey.PASSWORD_TOO_LONG: "Password is too long.",
    MessageKey.CITY_REQUIRED: "City name is required.",
    MessageKey.WEATHER_NOT_FOUND: "Weather data not found for the specified city.",
    MessageKey.WEATHER_RETRIEVED: "Weather data retrieved successfully.",
    MessageKey.REQUEST_ACCEPTED: "Request accepted.",
    MessageKey.TOO_MANY_REQUESTS: "Too many requests.",
    MessageKey.UNEXPECTED_ERROR: "An unexpected error occurred.",
}


class Localizer:
    """Resolve message keys to display strings.

    Unknown keys resolve to themselves so a missing translation degrades to
    the stable key instead of failing the response.
    """

    def __init__(self, table: dict[str, str] | None = None) -> None:
        self._table = dict(_EN if table is None else table)

    def resolve(self, key: MessageKey | str) -> str:
        name = key.value if isinstance(key, MessageKey) else key
        return self._table.get(name, name)
