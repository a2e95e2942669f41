"""Generation history tracking."""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional, Sequence

from modules.optimization.style_presets import DesignStyle
from modules.pipelines.image_generator import AspectRatio
from modules.pipelines.place_context import GroundingLink


@dataclass(frozen=True, slots=True)
class GeneratedImage:
    """One rendered image shown in the session gallery."""

    url: str
    prompt: str
    style: DesignStyle
    ratio: AspectRatio
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    timestamp: float = field(default_factory=time.time)
    grounding_links: Optional[tuple[GroundingLink, ...]] = None


def truncate_prompt(text: str, limit: int = 100) -> str:
    return text[:limit]


def build_records(
    urls: Sequence[str],
    prompt: str,
    style: DesignStyle,
    ratio: AspectRatio,
    links: Sequence[GroundingLink] = (),
    prompt_limit: int = 100,
) -> List[GeneratedImage]:
    """Create one record per url; links are shared by the whole batch."""
    shared_links = tuple(links) if links else None
    display_prompt = truncate_prompt(prompt, prompt_limit)
    return [
        GeneratedImage(
            url=url,
            prompt=display_prompt,
            style=style,
            ratio=ratio,
            grounding_links=shared_links,
        )
        for url in urls
    ]


class GenerationHistory:
    """In-memory, newest-first history for one session.

    ``limit`` of 0 keeps every entry; otherwise the oldest entries are evicted.
    """

    def __init__(self, limit: int = 0) -> None:
        self.limit = max(0, limit)
        self._items: List[GeneratedImage] = []

    def prepend(self, batch: Iterable[GeneratedImage]) -> None:
        self._items[:0] = list(batch)
        if self.limit and len(self._items) > self.limit:
            del self._items[self.limit :]

    def get(self, image_id: str) -> GeneratedImage:
        for item in self._items:
            if item.id == image_id:
                return item
        raise KeyError(f"History entry '{image_id}' not found")

    def list(self, limit: Optional[int] = None) -> List[GeneratedImage]:
        """Return the most recent records."""
        if limit is None:
            return list(self._items)
        return self._items[:limit]

    def clear(self) -> None:
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[GeneratedImage]:
        return iter(list(self._items))
