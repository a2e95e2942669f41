"""Caller geolocation lookup."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Protocol

from modules.services.errors import GeolocationDenied, GeolocationUnavailable


@dataclass(frozen=True, slots=True)
class Coordinates:
    latitude: float
    longitude: float


class LocationProvider(Protocol):
    async def get_current_position(self) -> Coordinates: ...


class BrowserLocationProvider:
    """Wrap the payload written by the page's ``navigator.geolocation`` hook.

    The page reports ``{"status": "ok", "latitude": .., "longitude": ..}``,
    ``{"status": "unsupported"}`` or ``{"status": "denied", "message": ..}``.
    """

    def __init__(self, payload: Optional[Mapping[str, Any]]) -> None:
        self.payload = dict(payload or {})

    async def get_current_position(self) -> Coordinates:
        status = self.payload.get("status")
        if status == "unsupported" or not self.payload:
            raise GeolocationUnavailable()
        if status != "ok":
            raise GeolocationDenied()
        try:
            return Coordinates(
                latitude=float(self.payload["latitude"]),
                longitude=float(self.payload["longitude"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise GeolocationDenied() from exc


class StaticLocationProvider:
    """Fixed coordinates, used by scripts and headless runs."""

    def __init__(self, latitude: float, longitude: float) -> None:
        self.coordinates = Coordinates(latitude=latitude, longitude=longitude)

    async def get_current_position(self) -> Coordinates:
        return self.coordinates


class LocationResolver:
    """Single-shot location lookup; no retry and no caching."""

    def __init__(self, provider: Optional[LocationProvider] = None) -> None:
        self.provider = provider

    async def resolve_location(self) -> Coordinates:
        if self.provider is None:
            raise GeolocationUnavailable()
        try:
            return await self.provider.get_current_position()
        except (GeolocationUnavailable, GeolocationDenied):
            raise
        except Exception as exc:  # noqa: BLE001
            raise GeolocationDenied() from exc
