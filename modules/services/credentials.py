"""API credential gate."""

from __future__ import annotations

import logging
import os
from typing import Optional, Protocol

from config.settings import AppConfig

logger = logging.getLogger(__name__)


class KeyProvider(Protocol):
    """Host-side key selection mechanism."""

    def has_selected_key(self) -> bool: ...

    def selected_key(self) -> str: ...

    async def open_key_selector(self) -> None: ...


def normalize_api_key(value: Optional[str]) -> str:
    """Return the usable key, or an empty string when there is none."""
    if value is None:
        return ""
    stripped = value.strip()
    if not stripped or stripped == "undefined":
        return ""
    return stripped


def read_env_key(config: AppConfig) -> str:
    """Read the environment-injected key; checked on every call."""
    for name in config.api_key_env_vars:
        key = normalize_api_key(os.getenv(name))
        if key:
            return key
    return ""


class SessionKeyProvider:
    """Key entered by the user in the page's activation panel."""

    def __init__(self) -> None:
        self._key = ""
        self.selector_open = False

    def has_selected_key(self) -> bool:
        return bool(self._key)

    def selected_key(self) -> str:
        return self._key

    def select_key(self, value: Optional[str]) -> bool:
        self._key = normalize_api_key(value)
        self.selector_open = not self._key
        return bool(self._key)

    def clear(self) -> None:
        self._key = ""

    async def open_key_selector(self) -> None:
        self.selector_open = True


class CredentialGate:
    """Decide whether API calls are currently authorized."""

    def __init__(self, config: AppConfig, provider: Optional[KeyProvider] = None) -> None:
        self.config = config
        self.provider = provider
        self.satisfied = False

    def current_key(self) -> str:
        """Return the key to use for the next API call."""
        if self.provider is not None:
            selected = normalize_api_key(self.provider.selected_key())
            if selected:
                return selected
        return read_env_key(self.config)

    def check_availability(self) -> bool:
        selected = self.provider is not None and self.provider.has_selected_key()
        self.satisfied = bool(selected or read_env_key(self.config))
        return self.satisfied

    async def request_credential(self) -> None:
        """Run the host selection flow and assume it succeeded."""
        await self.trigger_recovery()
        self.satisfied = True

    async def trigger_recovery(self) -> None:
        if self.provider is None:
            return
        logger.info("Opening the key selector")
        await self.provider.open_key_selector()

    def mark_unsatisfied(self) -> None:
        if self.satisfied:
            logger.info("Credential rejected; gate downgraded")
        self.satisfied = False
