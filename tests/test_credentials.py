"""CredentialGate unit tests."""

from __future__ import annotations

import asyncio

import pytest

from config.settings import AppConfig
from modules.services.credentials import CredentialGate, SessionKeyProvider, normalize_api_key


@pytest.fixture(autouse=True)
def clear_env_keys(monkeypatch):
    for name in AppConfig().api_key_env_vars:
        monkeypatch.delenv(name, raising=False)
    yield


class DummyProvider:
    def __init__(self, selected: str = "") -> None:
        self.selected = selected
        self.opened = 0

    def has_selected_key(self) -> bool:
        return bool(self.selected)

    def selected_key(self) -> str:
        return self.selected

    async def open_key_selector(self) -> None:
        self.opened += 1


@pytest.mark.parametrize("value", ["", "undefined", "  ", None])
def test_missing_key_values_normalize_to_empty(value):
    assert normalize_api_key(value) == ""


def test_real_key_is_kept():
    assert normalize_api_key(" AIza-key ") == "AIza-key"


@pytest.mark.parametrize("value", ["", "undefined", "  "])
def test_env_placeholders_do_not_count_as_credentials(monkeypatch, value):
    monkeypatch.setenv("GEMINI_API_KEY", value)
    gate = CredentialGate(AppConfig())

    assert gate.check_availability() is False
    assert gate.current_key() == ""


def test_env_key_is_read_on_every_call(monkeypatch):
    gate = CredentialGate(AppConfig())
    assert gate.current_key() == ""

    monkeypatch.setenv("API_KEY", "env-key")

    assert gate.current_key() == "env-key"
    assert gate.check_availability() is True


def test_selected_key_wins_over_env(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "env-key")
    gate = CredentialGate(AppConfig(), DummyProvider(selected="host-key"))

    assert gate.check_availability() is True
    assert gate.current_key() == "host-key"


def test_request_credential_is_optimistic():
    provider = DummyProvider()
    gate = CredentialGate(AppConfig(), provider)
    assert gate.check_availability() is False

    asyncio.run(gate.request_credential())

    assert provider.opened == 1
    assert gate.satisfied is True


def test_trigger_recovery_keeps_state():
    provider = DummyProvider()
    gate = CredentialGate(AppConfig(), provider)
    gate.satisfied = True
    gate.mark_unsatisfied()

    asyncio.run(gate.trigger_recovery())

    assert provider.opened == 1
    assert gate.satisfied is False


def test_recovery_without_provider_is_noop():
    gate = CredentialGate(AppConfig())
    asyncio.run(gate.request_credential())
    assert gate.satisfied is True


def test_session_provider_select_and_open():
    provider = SessionKeyProvider()
    asyncio.run(provider.open_key_selector())
    assert provider.selector_open is True

    assert provider.select_key("undefined") is False
    assert provider.selector_open is True

    assert provider.select_key("user-key") is True
    assert provider.selector_open is False
    assert CredentialGate(AppConfig(), provider).current_key() == "user-key"
