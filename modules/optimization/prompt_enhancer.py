"""Prompt enhancement via the Gemini text model."""

from __future__ import annotations

import logging
from typing import Optional

from google.genai import types

from config.settings import AppConfig
from modules.optimization.style_presets import DesignStyle, StylePresetRegistry
from modules.pipelines.gemini_client import ClientFactory, create_client
from modules.services.credentials import CredentialGate

logger = logging.getLogger(__name__)


class PromptEnhancer:
    """Rewrite raw user input into a richer English generation prompt.

    Enhancement is best effort: a missing key, an API failure or an empty
    reply all return the raw prompt unchanged.
    """

    def __init__(
        self,
        config: AppConfig,
        gate: CredentialGate,
        registry: Optional[StylePresetRegistry] = None,
        client_factory: ClientFactory = create_client,
    ) -> None:
        self.config = config
        self.gate = gate
        self.registry = registry or StylePresetRegistry()
        self._client_factory = client_factory

    def build_instruction(
        self,
        style: DesignStyle,
        has_reference_image: bool,
        extra_context: Optional[str] = None,
    ) -> str:
        lines = [f"You are a professional visual prompt engineer. Style: {style.value}."]
        try:
            descriptor = self.registry.get(style).descriptor
        except KeyError:
            descriptor = ""
        if descriptor:
            lines.append(f"Style cues: {descriptor}.")
        lines.append("Enhance based on reference." if has_reference_image else "Create from scratch.")
        if extra_context:
            lines.append(f"Incorporate this geographic context into the scene: {extra_context.strip()}")
        lines.append(
            "Translate any non-English input into English. "
            "Focus on composition, lighting, and high-quality artistic terms."
        )
        return "\n".join(lines)

    async def enhance(
        self,
        raw_prompt: str,
        style: DesignStyle,
        has_reference_image: bool,
        extra_context: Optional[str] = None,
    ) -> str:
        key = self.gate.current_key()
        if not key:
            return raw_prompt

        try:
            client = self._client_factory(key)
            response = await client.aio.models.generate_content(
                model=self.config.text_model,
                contents=f'User Input: "{raw_prompt}"',
                config=types.GenerateContentConfig(
                    system_instruction=self.build_instruction(style, has_reference_image, extra_context),
                ),
            )
            enhanced = (getattr(response, "text", None) or "").strip()
        except Exception as exc:  # noqa: BLE001
            logger.warning("Prompt enhancement failed, using original: %s", exc)
            return raw_prompt

        return enhanced or raw_prompt
