"""Failure classification tests."""

from __future__ import annotations

from modules.services.errors import (
    AuthRequired,
    ErrorKind,
    GeolocationDenied,
    SessionExpired,
    TransportError,
    IMAGE_STAGE,
    classify_failure,
    offers_key_selector,
    requires_recovery,
)


class FakeApiError(Exception):
    def __init__(self, code: int, message: str) -> None:
        super().__init__(f"{code} {message}")
        self.message = message


def test_invalid_key_becomes_session_expired():
    error = classify_failure(FakeApiError(400, "API key not valid. Please pass a valid API key."))
    assert isinstance(error, SessionExpired)
    assert requires_recovery(error)


def test_entity_not_found_becomes_session_expired():
    error = classify_failure(RuntimeError("Requested entity was not found."))
    assert error.kind is ErrorKind.SESSION_EXPIRED


def test_other_errors_keep_original_message():
    error = classify_failure(RuntimeError("503 model overloaded"))
    assert isinstance(error, TransportError)
    assert error.message == "503 model overloaded"
    assert not requires_recovery(error)


def test_empty_message_uses_fallback():
    error = classify_failure(RuntimeError(""))
    assert isinstance(error, TransportError)
    assert error.message == TransportError.default_message


def test_domain_errors_pass_through():
    original = AuthRequired()
    assert classify_failure(original) is original
    assert requires_recovery(original)
    assert not requires_recovery(GeolocationDenied())


def test_key_selector_only_for_image_stage_auth_failures():
    maps_failure = AuthRequired()
    assert requires_recovery(maps_failure)
    assert not offers_key_selector(maps_failure)

    image_failure = SessionExpired()
    image_failure.stage = IMAGE_STAGE
    assert offers_key_selector(image_failure)

    transport = TransportError("503")
    transport.stage = IMAGE_STAGE
    assert not offers_key_selector(transport)
