"""Gemini client construction."""

from __future__ import annotations

from typing import Any, Callable

from google import genai

ClientFactory = Callable[[str], Any]


def create_client(api_key: str) -> genai.Client:
    """Build a fresh client so a newly selected key is always picked up."""
    return genai.Client(api_key=api_key)
