"""GenerationHistory unit tests."""

from __future__ import annotations

import pytest

from modules.optimization.style_presets import DesignStyle
from modules.pipelines.image_generator import AspectRatio
from modules.pipelines.place_context import GroundingLink
from modules.services.history_service import GenerationHistory, build_records


def batch(*urls: str, links=()):
    return build_records(list(urls), "prompt", DesignStyle.THREE_D, AspectRatio.SQUARE, links)


def test_prepend_keeps_batch_order_and_newest_first():
    history = GenerationHistory()
    history.prepend(batch("a1", "a2"))
    history.prepend(batch("b1", "b2", "b3"))

    assert [item.url for item in history.list()] == ["b1", "b2", "b3", "a1", "a2"]
    assert [item.url for item in history.list(limit=2)] == ["b1", "b2"]


def test_limit_evicts_oldest():
    history = GenerationHistory(limit=3)
    history.prepend(batch("a1", "a2"))
    history.prepend(batch("b1", "b2"))

    assert [item.url for item in history] == ["b1", "b2", "a1"]


def test_records_share_links_or_none():
    links = (GroundingLink("Citadel", "https://maps.example/1"),)
    with_links = batch("x", "y", links=links)
    without = batch("z")

    assert all(item.grounding_links == links for item in with_links)
    assert without[0].grounding_links is None
    assert with_links[0].id != with_links[1].id


def test_display_prompt_truncated():
    records = build_records(["u"], "w" * 250, DesignStyle.REALISTIC, AspectRatio.TALL)
    assert records[0].prompt == "w" * 100


def test_get_and_clear():
    history = GenerationHistory()
    history.prepend(batch("a"))
    item = history.list()[0]

    assert history.get(item.id) is item
    history.clear()
    assert len(history) == 0
    with pytest.raises(KeyError):
        history.get(item.id)
