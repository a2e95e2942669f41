"""Style preset management."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, List

logger = logging.getLogger(__name__)


class DesignStyle(str, Enum):
    """Visual styles offered in the sidebar."""

    THREE_D = "3D"
    INFOGRAPHIC = "infographic"
    ILLUSTRATION = "illustration"
    REALISTIC = "realistic"
    MODERN_FLAT = "modern-flat"


@dataclass(slots=True)
class StylePreset:
    """Style attributes folded into the enhancer instruction."""

    style: DesignStyle
    label: str
    descriptor: str = ""


DEFAULT_PRESETS = (
    StylePreset(DesignStyle.THREE_D, "3D", "volumetric 3D render, soft global illumination, clean materials"),
    StylePreset(DesignStyle.INFOGRAPHIC, "Infographic", "clear visual hierarchy, icons, flat color blocks, legible layout"),
    StylePreset(DesignStyle.ILLUSTRATION, "Illustration", "hand-drawn illustration, expressive line work, painterly texture"),
    StylePreset(DesignStyle.REALISTIC, "Realistic", "photorealistic, natural lighting, true-to-life detail, shallow depth of field"),
    StylePreset(DesignStyle.MODERN_FLAT, "Modern flat", "modern flat design, geometric shapes, limited palette, no gradients"),
)


class StylePresetRegistry:
    """In-memory registry of style presets."""

    def __init__(self) -> None:
        self._presets: Dict[DesignStyle, StylePreset] = {}
        for preset in DEFAULT_PRESETS:
            self.add(StylePreset(preset.style, preset.label, preset.descriptor))

    def load_from_file(self, path: Path) -> None:
        """Override presets from a JSON file."""
        if not path.exists():
            return
        with path.open("r", encoding="utf-8") as fp:
            data = json.load(fp)
        for entry in data:
            try:
                style = DesignStyle(entry["style"])
            except (KeyError, ValueError):
                logger.warning("Skipping unknown style preset entry: %r", entry)
                continue
            current = self._presets[style]
            self.add(
                StylePreset(
                    style=style,
                    label=entry.get("label", current.label),
                    descriptor=entry.get("descriptor", current.descriptor),
                )
            )

    def add(self, preset: StylePreset) -> None:
        """Register or replace a style preset."""
        self._presets[preset.style] = preset

    def list_presets(self) -> List[StylePreset]:
        """Return all registered presets."""
        return list(self._presets.values())

    def get(self, style: DesignStyle | str) -> StylePreset:
        """Retrieve a preset by style."""
        try:
            return self._presets[DesignStyle(style)]
        except (KeyError, ValueError) as exc:
            raise KeyError(f"Style preset '{style}' not found") from exc
