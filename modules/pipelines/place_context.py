"""Maps-grounded place context lookup."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from google.genai import types

from config.settings import AppConfig
from modules.pipelines.gemini_client import ClientFactory, create_client
from modules.services.credentials import CredentialGate
from modules.services.errors import AuthRequired, TransportError
from modules.services.location import Coordinates

logger = logging.getLogger(__name__)

DEFAULT_LINK_TITLE = "Location on the map"


@dataclass(frozen=True, slots=True)
class GroundingLink:
    title: str
    uri: str


@dataclass(frozen=True, slots=True)
class PlaceContextResponse:
    text: str
    links: tuple[GroundingLink, ...] = field(default_factory=tuple)


def extract_grounding_links(response: Any) -> tuple[GroundingLink, ...]:
    """Collect maps citations from the first candidate."""
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return ()
    metadata = getattr(candidates[0], "grounding_metadata", None)
    chunks = getattr(metadata, "grounding_chunks", None) or []

    links: list[GroundingLink] = []
    for chunk in chunks:
        maps = getattr(chunk, "maps", None)
        if maps is None:
            continue
        uri = getattr(maps, "uri", None)
        if not uri:
            continue
        links.append(GroundingLink(title=getattr(maps, "title", None) or DEFAULT_LINK_TITLE, uri=uri))
    return tuple(links)


class PlaceContextRetriever:
    """Ask the model about nearby places with the maps tool enabled."""

    def __init__(
        self,
        config: AppConfig,
        gate: CredentialGate,
        client_factory: ClientFactory = create_client,
    ) -> None:
        self.config = config
        self.gate = gate
        self._client_factory = client_factory

    def build_config(self, coordinates: Coordinates) -> types.GenerateContentConfig:
        return types.GenerateContentConfig(
            tools=[types.Tool(google_maps=types.GoogleMaps())],
            tool_config=types.ToolConfig(
                retrieval_config=types.RetrievalConfig(
                    lat_lng=types.LatLng(
                        latitude=coordinates.latitude,
                        longitude=coordinates.longitude,
                    )
                )
            ),
        )

    async def get_place_context(self, prompt_text: str, coordinates: Coordinates) -> PlaceContextResponse:
        key = self.gate.current_key()
        if not key:
            raise AuthRequired()

        try:
            client = self._client_factory(key)
            response = await client.aio.models.generate_content(
                model=self.config.maps_model,
                contents=prompt_text,
                config=self.build_config(coordinates),
            )
            text = (getattr(response, "text", None) or "").strip()
            links = extract_grounding_links(response)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Place context lookup failed: %s", exc)
            raise TransportError(f"Could not analyse your location. ({exc})") from exc

        logger.info("Place context resolved with %d map link(s)", len(links))
        return PlaceContextResponse(text=text, links=links)
