"""Generation orchestration: input text to a finished batch of images."""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass, field
from typing import Any, List, Optional, Protocol

from config.settings import AppConfig
from modules.optimization.prompt_enhancer import PromptEnhancer
from modules.optimization.style_presets import DesignStyle
from modules.pipelines.image_generator import AspectRatio, ImageGenerator, ImagePart, ImageRequest
from modules.pipelines.place_context import PlaceContextResponse, PlaceContextRetriever
from modules.services.credentials import CredentialGate
from modules.services.errors import IMAGE_STAGE, GenerationError, ValidationError, requires_recovery
from modules.services.history_service import GeneratedImage, GenerationHistory, build_records
from modules.services.location import LocationResolver

logger = logging.getLogger(__name__)

SEED_RANGE = 1_000_000
ENHANCE_PLACEHOLDER = "Visual masterpiece"
PLACES_PLACEHOLDER = "Places around me"
DISPLAY_PLACEHOLDER = "Visual design"


class SeedSource(Protocol):
    def sample(self, population: Any, k: int) -> List[int]: ...


@dataclass(frozen=True, slots=True)
class GenerationConfig:
    """Snapshot of the sidebar options for one run."""

    prompt: str = ""
    style: DesignStyle = DesignStyle.THREE_D
    ratio: AspectRatio = AspectRatio.SQUARE
    high_quality: bool = False
    variations: int = 1
    use_maps: bool = False

    def __post_init__(self) -> None:
        if not 1 <= self.variations <= 4:
            raise ValueError(f"variations must be between 1 and 4, got {self.variations}")

    @classmethod
    def from_values(
        cls,
        prompt: Optional[str],
        style: Any,
        ratio: Any,
        high_quality: Any,
        variations: Any,
        use_maps: Any,
    ) -> "GenerationConfig":
        """Build a snapshot from raw widget values."""
        try:
            count = int(variations)
        except (TypeError, ValueError):
            count = 1
        return cls(
            prompt=prompt or "",
            style=DesignStyle(style or DesignStyle.THREE_D),
            ratio=AspectRatio(ratio or AspectRatio.SQUARE),
            high_quality=bool(high_quality),
            variations=max(1, min(count, 4)),
            use_maps=bool(use_maps),
        )


@dataclass(slots=True)
class GenerationOutcome:
    images: List[GeneratedImage]
    enhanced_prompt: str
    place_context: Optional[PlaceContextResponse] = None
    seeds: List[int] = field(default_factory=list)


def compose_input_text(
    prompt: Optional[str],
    document_text: Optional[str],
    reference_image: Optional[ImagePart] = None,
) -> str:
    """Join prompt and document text; fail when there is nothing to work with."""
    sources = [text.strip() for text in (prompt, document_text) if text and text.strip()]
    combined = "\n\n".join(sources)
    if not combined and reference_image is None:
        raise ValidationError()
    return combined


def draw_seeds(count: int, rng: Optional[SeedSource] = None) -> List[int]:
    """Draw distinct seeds for one batch."""
    source = rng or random
    return list(source.sample(range(SEED_RANGE), count))


class GenerationOrchestrator:
    """Run one generation attempt against the collaborators of a session."""

    def __init__(
        self,
        config: AppConfig,
        gate: CredentialGate,
        history: GenerationHistory,
        enhancer: PromptEnhancer,
        generator: ImageGenerator,
        place_retriever: Optional[PlaceContextRetriever] = None,
        location_resolver: Optional[LocationResolver] = None,
        rng: Optional[SeedSource] = None,
    ) -> None:
        self.config = config
        self.gate = gate
        self.history = history
        self.enhancer = enhancer
        self.generator = generator
        self.place_retriever = place_retriever
        self.location_resolver = location_resolver or LocationResolver()
        self.rng = rng

    async def run(
        self,
        config: GenerationConfig,
        uploaded_image: Optional[ImagePart] = None,
        extracted_doc_text: Optional[str] = None,
    ) -> GenerationOutcome:
        combined = compose_input_text(config.prompt, extracted_doc_text, uploaded_image)

        place_context: Optional[PlaceContextResponse] = None
        if config.use_maps:
            place_context = await self._fetch_place_context(combined)

        enhanced = await self.enhancer.enhance(
            combined or ENHANCE_PLACEHOLDER,
            config.style,
            uploaded_image is not None,
            place_context.text if place_context else None,
        )

        seeds = draw_seeds(config.variations, self.rng)
        logger.info(
            "Generating %d variation(s): style=%s ratio=%s high_quality=%s",
            config.variations,
            config.style.value,
            config.ratio.value,
            config.high_quality,
        )
        requests = [
            ImageRequest(
                prompt=enhanced,
                style=config.style,
                ratio=config.ratio,
                high_quality=config.high_quality,
                reference_image=uploaded_image,
                seed=seed,
            )
            for seed in seeds
        ]
        try:
            urls = await asyncio.gather(*(self.generator.generate(request) for request in requests))
        except GenerationError as exc:
            exc.stage = IMAGE_STAGE
            if requires_recovery(exc):
                self.gate.mark_unsatisfied()
            raise

        batch = build_records(
            urls,
            combined or DISPLAY_PLACEHOLDER,
            config.style,
            config.ratio,
            place_context.links if place_context else (),
            self.config.display_prompt_limit,
        )
        self.history.prepend(batch)
        logger.info("Batch complete: %d image(s), history size %d", len(batch), len(self.history))
        return GenerationOutcome(
            images=batch,
            enhanced_prompt=enhanced,
            place_context=place_context,
            seeds=seeds,
        )

    async def _fetch_place_context(self, combined: str) -> PlaceContextResponse:
        if self.place_retriever is None:
            raise RuntimeError("Place context retriever is not configured")
        coordinates = await self.location_resolver.resolve_location()
        return await self.place_retriever.get_place_context(combined or PLACES_PLACEHOLDER, coordinates)
