"""Image generation service backed by the Gemini image models."""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from google.genai import types

from config.settings import AppConfig
from modules.optimization.style_presets import DesignStyle
from modules.pipelines.gemini_client import ClientFactory, create_client
from modules.services.credentials import CredentialGate
from modules.services.errors import (
    AuthRequired,
    EmptyResponse,
    GenerationError,
    MissingImageData,
    classify_failure,
)

logger = logging.getLogger(__name__)


class AspectRatio(str, Enum):
    SQUARE = "1:1"
    LANDSCAPE = "16:9"
    PORTRAIT = "9:16"
    WIDE = "4:3"
    TALL = "3:4"


@dataclass(frozen=True, slots=True)
class ImagePart:
    """Uploaded reference image, base64 encoded."""

    data: str
    mime_type: str

    def to_part(self) -> types.Part:
        return types.Part(
            inline_data=types.Blob(data=base64.b64decode(self.data), mime_type=self.mime_type)
        )


@dataclass(frozen=True, slots=True)
class ImageRequest:
    """Request data for a single image variation."""

    prompt: str
    style: DesignStyle
    ratio: AspectRatio
    high_quality: bool = False
    reference_image: Optional[ImagePart] = None
    seed: Optional[int] = None


def to_png_data_uri(data: Any) -> str:
    """Encode inline image bytes as a PNG data URI."""
    if isinstance(data, (bytes, bytearray)):
        encoded = base64.b64encode(bytes(data)).decode("ascii")
    else:
        encoded = str(data)
    return f"data:image/png;base64,{encoded}"


class ImageGenerator:
    """Facade around the Gemini image generation endpoint."""

    def __init__(
        self,
        config: AppConfig,
        gate: CredentialGate,
        client_factory: ClientFactory = create_client,
    ) -> None:
        self.config = config
        self.gate = gate
        self._client_factory = client_factory

    def model_for(self, high_quality: bool) -> str:
        return self.config.hq_image_model if high_quality else self.config.image_model

    def build_parts(self, request: ImageRequest) -> list[types.Part]:
        """Reference image first, then the text prompt."""
        parts = [types.Part(text=request.prompt)]
        if request.reference_image is not None:
            parts.insert(0, request.reference_image.to_part())
        return parts

    def build_config(self, request: ImageRequest) -> types.GenerateContentConfig:
        image_config: dict[str, Any] = {"aspect_ratio": request.ratio.value}
        if request.high_quality:
            image_config["image_size"] = self.config.hq_image_size
        return types.GenerateContentConfig(
            seed=request.seed,
            image_config=types.ImageConfig(**image_config),
        )

    async def generate(self, request: ImageRequest) -> str:
        """Generate one image and return it as a data URI."""
        key = self.gate.current_key()
        if not key:
            raise AuthRequired()

        model = self.model_for(request.high_quality)
        logger.debug(
            "Generating image: model=%s style=%s ratio=%s seed=%s reference=%s",
            model,
            request.style.value,
            request.ratio.value,
            request.seed,
            request.reference_image is not None,
        )
        try:
            client = self._client_factory(key)
            response = await client.aio.models.generate_content(
                model=model,
                contents=self.build_parts(request),
                config=self.build_config(request),
            )
        except GenerationError:
            raise
        except Exception as exc:  # noqa: BLE001
            raise classify_failure(exc) from exc

        return self._extract_image(response)

    def _extract_image(self, response: Any) -> str:
        candidates = getattr(response, "candidates", None) or []
        if not candidates:
            raise EmptyResponse()

        content = getattr(candidates[0], "content", None)
        for part in getattr(content, "parts", None) or []:
            inline_data = getattr(part, "inline_data", None)
            data = getattr(inline_data, "data", None) if inline_data is not None else None
            if data:
                return to_png_data_uri(data)

        raise MissingImageData()
