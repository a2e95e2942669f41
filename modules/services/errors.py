"""Error taxonomy shared by the generation pipeline."""

from __future__ import annotations

from enum import Enum
from typing import Optional


IMAGE_STAGE = "image"


class ErrorKind(str, Enum):
    """Tag attached to every pipeline failure."""

    VALIDATION = "validation"
    AUTH_REQUIRED = "auth_required"
    SESSION_EXPIRED = "session_expired"
    GEOLOCATION_UNAVAILABLE = "geolocation_unavailable"
    GEOLOCATION_DENIED = "geolocation_denied"
    EMPTY_RESPONSE = "empty_response"
    MISSING_IMAGE_DATA = "missing_image_data"
    TRANSPORT = "transport"


class GenerationError(RuntimeError):
    """Base class for failures surfaced to the user as a single message.

    ``stage`` names the pipeline step that raised; it is set to
    ``IMAGE_STAGE`` only for failures of the image call itself.
    """

    kind: ErrorKind = ErrorKind.TRANSPORT
    stage: Optional[str] = None
    default_message = "Design failed. Please try again later."

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(GenerationError):
    kind = ErrorKind.VALIDATION
    default_message = "Please enter a description or attach an image to start."


class AuthRequired(GenerationError):
    kind = ErrorKind.AUTH_REQUIRED
    default_message = "An API key must be activated first. Click 'Activate service' at the top."


class SessionExpired(GenerationError):
    kind = ErrorKind.SESSION_EXPIRED
    default_message = "The session has expired. Please select your key again and retry."


class GeolocationUnavailable(GenerationError):
    kind = ErrorKind.GEOLOCATION_UNAVAILABLE
    default_message = "Your browser does not support location detection."


class GeolocationDenied(GenerationError):
    kind = ErrorKind.GEOLOCATION_DENIED
    default_message = "Could not access your location. Please allow location permissions."


class EmptyResponse(GenerationError):
    kind = ErrorKind.EMPTY_RESPONSE
    default_message = "No response was received from the model."


class MissingImageData(GenerationError):
    kind = ErrorKind.MISSING_IMAGE_DATA
    default_message = "The response does not contain valid image data."


class TransportError(GenerationError):
    kind = ErrorKind.TRANSPORT


_CREDENTIAL_MARKERS = (
    "Requested entity was not found",
    "API key not valid",
    "API_KEY_INVALID",
    "API key expired",
)


def is_credential_failure(message: str) -> bool:
    """Return True when an upstream message says the key was rejected."""
    return any(marker in message for marker in _CREDENTIAL_MARKERS)


def classify_failure(exc: BaseException) -> GenerationError:
    """Map an arbitrary image-call failure onto the pipeline taxonomy."""
    if isinstance(exc, GenerationError):
        return exc
    raw = str(exc).strip()
    message = str(getattr(exc, "message", None) or raw).strip()
    if is_credential_failure(message) or is_credential_failure(raw):
        return SessionExpired()
    return TransportError(message or None)


def requires_recovery(error: GenerationError) -> bool:
    """Return True when the failure means the key is missing or rejected."""
    return error.kind in (ErrorKind.AUTH_REQUIRED, ErrorKind.SESSION_EXPIRED)


def offers_key_selector(error: GenerationError) -> bool:
    """Return True when the host key-selection flow should be opened.

    Only the image call recovers; a missing key during the maps step
    surfaces as a plain message.
    """
    return requires_recovery(error) and error.stage == IMAGE_STAGE
