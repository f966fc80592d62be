"""Typed faults for the Bot API and the classifier for failure envelopes."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, NoReturn

BAD_AUTHORIZATION = 401
NOT_FOUND = 404


class TelegramError(Exception):
    pass


class ApiError(TelegramError):
    """The API answered with ``ok: false``."""

    def __init__(
        self, error_code: int, message: str, description: str | None = None
    ) -> None:
        super().__init__(message)
        self.error_code = error_code
        self.description = description


class BadAuthorization(ApiError):
    def __init__(self, description: str | None = None) -> None:
        super().__init__(
            BAD_AUTHORIZATION,
            "Access token was rejected by the Telegram server.",
            description,
        )


class BotNotFound(ApiError):
    def __init__(self, description: str | None = None) -> None:
        super().__init__(
            NOT_FOUND,
            "Bot not found; the token is probably wrong.",
            description,
        )


class UnknownError(ApiError):
    def __init__(self, error_code: int, description: str | None = None) -> None:
        super().__init__(
            error_code,
            f"Unknown API error. Error code: {error_code}",
            description,
        )


class DeadWall(TelegramError):
    """The transport could not reach the API before its timeout."""


class TransportError(TelegramError):
    pass


class MalformedResponse(TelegramError):
    pass


def is_failure_envelope(payload: Any) -> bool:
    return isinstance(payload, Mapping) and payload.get("ok") is False


def classify(payload: Mapping[str, Any]) -> TelegramError:
    error_code = payload.get("error_code")
    description = payload.get("description")
    if not isinstance(description, str):
        description = None
    if isinstance(error_code, bool) or not isinstance(error_code, int):
        return MalformedResponse(
            f"failure envelope without an integer error_code: {dict(payload)!r}"
        )
    if error_code == BAD_AUTHORIZATION:
        return BadAuthorization(description)
    if error_code == NOT_FOUND:
        return BotNotFound(description)
    return UnknownError(error_code, description)


def raise_for_failure(payload: Mapping[str, Any]) -> NoReturn:
    raise classify(payload)


def raise_for_envelope(payload: Any) -> None:
    if is_failure_envelope(payload):
        raise_for_failure(payload)
