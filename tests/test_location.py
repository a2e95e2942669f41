"""LocationResolver unit tests."""

from __future__ import annotations

import asyncio

import pytest

from modules.services.errors import GeolocationDenied, GeolocationUnavailable
from modules.services.location import (
    BrowserLocationProvider,
    Coordinates,
    LocationResolver,
    StaticLocationProvider,
)


class FailingProvider:
    async def get_current_position(self) -> Coordinates:
        raise OSError("position unavailable")


def resolve(provider) -> Coordinates:
    return asyncio.run(LocationResolver(provider).resolve_location())


def test_browser_payload_resolves():
    coords = resolve(BrowserLocationProvider({"status": "ok", "latitude": "30.05", "longitude": 31.24}))
    assert coords == Coordinates(latitude=30.05, longitude=31.24)


def test_static_provider():
    assert resolve(StaticLocationProvider(29.97, 31.13)) == Coordinates(29.97, 31.13)


@pytest.mark.parametrize("payload", [None, {}, {"status": "unsupported"}])
def test_unsupported_platform(payload):
    with pytest.raises(GeolocationUnavailable):
        resolve(BrowserLocationProvider(payload))


def test_no_provider_is_unavailable():
    with pytest.raises(GeolocationUnavailable):
        resolve(None)


@pytest.mark.parametrize(
    "payload",
    [
        {"status": "denied", "message": "User denied Geolocation"},
        {"status": "ok", "latitude": None, "longitude": 1},
    ],
)
def test_denied_or_broken_payload(payload):
    with pytest.raises(GeolocationDenied):
        resolve(BrowserLocationProvider(payload))


def test_platform_failure_maps_to_denied():
    with pytest.raises(GeolocationDenied):
        resolve(FailingProvider())
