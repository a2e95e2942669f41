"""Callback implementations for the Gradio interface."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional
from uuid import uuid4

import gradio as gr

from config.settings import AppConfig
from modules.optimization.prompt_enhancer import PromptEnhancer
from modules.optimization.style_presets import StylePresetRegistry
from modules.pipelines.gemini_client import ClientFactory, create_client
from modules.pipelines.image_generator import ImageGenerator, ImagePart
from modules.pipelines.orchestrator import GenerationConfig, GenerationOrchestrator, SeedSource
from modules.pipelines.place_context import PlaceContextResponse, PlaceContextRetriever
from modules.services.credentials import CredentialGate, SessionKeyProvider
from modules.services.errors import GenerationError, offers_key_selector
from modules.services.history_service import GenerationHistory
from modules.services.location import (
    BrowserLocationProvider,
    LocationProvider,
    LocationResolver,
    StaticLocationProvider,
)
from modules.services.storage_service import StorageService
from modules.utils.document_utils import classify_upload, extract_text
from modules.utils.image_utils import load_image_part, open_data_uri, reference_preview

logger = logging.getLogger(__name__)

KEY_ACTIVE = "**Engine active**"
KEY_MISSING = "**API key required.** Click *Activate service* to connect your Gemini key."


@dataclass
class SessionState:
    """Per-browser-session state kept in a ``gr.State``."""

    provider: SessionKeyProvider
    gate: CredentialGate
    history: GenerationHistory
    uploaded_image: Optional[ImagePart] = None
    document_name: Optional[str] = None
    document_text: Optional[str] = None
    place_context: Optional[PlaceContextResponse] = None
    selected_id: Optional[str] = None
    session_id: str = field(default_factory=lambda: uuid4().hex)


def format_place_context(context: Optional[PlaceContextResponse]) -> str:
    if context is None:
        return ""
    lines = ["**Location analysed successfully**"]
    if context.text:
        lines.extend(["", f"> {context.text}"])
    if context.links:
        lines.append("")
        lines.extend(f"- [{link.title}]({link.uri})" for link in context.links)
    return "\n".join(lines)


def build_callbacks(
    config: AppConfig,
    style_registry: Optional[StylePresetRegistry] = None,
    storage: Optional[StorageService] = None,
    client_factory: ClientFactory = create_client,
    rng: Optional[SeedSource] = None,
) -> dict[str, Any]:
    """Return a dictionary of Gradio callback functions."""

    registry = style_registry or StylePresetRegistry()
    storage_service = storage or StorageService(config.export_dir, max_items=config.export_keep)

    def new_session() -> SessionState:
        provider = SessionKeyProvider()
        return SessionState(
            provider=provider,
            gate=CredentialGate(config, provider),
            history=GenerationHistory(limit=config.history_limit),
        )

    def _ensure_session(session: Optional[SessionState]) -> SessionState:
        if session is None:
            session = new_session()
            session.gate.check_availability()
        return session

    def _badge(session: SessionState) -> str:
        return KEY_ACTIVE if session.gate.satisfied else KEY_MISSING

    def _key_panel(session: SessionState) -> Any:
        return gr.update(visible=session.provider.selector_open)

    def _gallery(session: SessionState) -> list[tuple[Any, str]]:
        return [
            (open_data_uri(item.url), f"{item.style.value} | {item.prompt}")
            for item in session.history.list()
        ]

    def _location_provider(geo_payload: Any) -> Optional[LocationProvider]:
        if geo_payload:
            return BrowserLocationProvider(geo_payload)
        if config.default_location is not None:
            return StaticLocationProvider(*config.default_location)
        return None

    def _build_orchestrator(session: SessionState, geo_payload: Any) -> GenerationOrchestrator:
        return GenerationOrchestrator(
            config,
            gate=session.gate,
            history=session.history,
            enhancer=PromptEnhancer(config, session.gate, registry, client_factory),
            generator=ImageGenerator(config, session.gate, client_factory),
            place_retriever=PlaceContextRetriever(config, session.gate, client_factory),
            location_resolver=LocationResolver(_location_provider(geo_payload)),
            rng=rng,
        )

    def on_check_key(session: Optional[SessionState]) -> tuple[SessionState, str, Any]:
        session = _ensure_session(session)
        session.gate.check_availability()
        return session, _badge(session), _key_panel(session)

    async def on_request_key(session: Optional[SessionState]) -> tuple[SessionState, str, Any]:
        session = _ensure_session(session)
        await session.gate.request_credential()
        return session, _badge(session), _key_panel(session)

    def on_submit_key(session: Optional[SessionState], key_text: str) -> tuple[SessionState, str, Any, str, str]:
        session = _ensure_session(session)
        if not session.provider.select_key(key_text):
            session.gate.check_availability()
            return session, _badge(session), _key_panel(session), "", "Please enter a valid API key."
        session.gate.check_availability()
        return session, _badge(session), _key_panel(session), "", "API key activated."

    def on_upload(session: Optional[SessionState], file_path: Optional[str]) -> tuple[SessionState, Any, str, str, str]:
        session = _ensure_session(session)
        if not file_path:
            return session, gr.update(), gr.update(), gr.update(), ""

        kind = classify_upload(str(file_path))
        try:
            if kind == "image":
                session.uploaded_image = load_image_part(file_path)
                preview = reference_preview(session.uploaded_image)
                return session, preview, gr.update(), gr.update(), "Reference image attached."
            if kind in ("docx", "text"):
                session.document_text = extract_text(file_path)
                session.document_name = str(file_path).replace("\\", "/").rsplit("/", 1)[-1]
                return (
                    session,
                    gr.update(),
                    f"Attached document: `{session.document_name}`",
                    session.document_text,
                    "Document text extracted.",
                )
        except Exception:  # noqa: BLE001
            logger.exception("Failed to read attachment %s", file_path)
            return session, gr.update(), gr.update(), gr.update(), "An error occurred while reading the attached file."

        return session, gr.update(), gr.update(), gr.update(), "Unsupported file type. Use an image, .docx or .txt file."

    def on_remove_image(session: Optional[SessionState]) -> tuple[SessionState, None, str]:
        session = _ensure_session(session)
        session.uploaded_image = None
        return session, None, "Reference image removed."

    def on_remove_document(session: Optional[SessionState]) -> tuple[SessionState, str, str, str]:
        session = _ensure_session(session)
        session.document_name = None
        session.document_text = None
        return session, "", "", "Document removed."

    async def on_generate(
        session: Optional[SessionState],
        prompt: str,
        style: str,
        ratio: str,
        high_quality: bool,
        variations: int,
        use_maps: bool,
        geo_payload: Any = None,
    ) -> tuple[SessionState, list[tuple[Any, str]], str, str, str, Any]:
        session = _ensure_session(session)
        snapshot = GenerationConfig.from_values(prompt, style, ratio, high_quality, variations, use_maps)
        session.place_context = None
        orchestrator = _build_orchestrator(session, geo_payload)

        try:
            outcome = await orchestrator.run(
                snapshot,
                uploaded_image=session.uploaded_image,
                extracted_doc_text=session.document_text,
            )
        except GenerationError as exc:
            logger.exception("Generation failed (%s): %s", exc.kind.value, exc.message)
            if offers_key_selector(exc):
                await session.gate.trigger_recovery()
            message = f"System alert: {exc.message}"
        except Exception as exc:  # noqa: BLE001
            logger.exception("Unexpected generation failure")
            message = f"System alert: {exc}"
        else:
            session.place_context = outcome.place_context
            count = len(outcome.images)
            message = f"Generated {count} design{'s' if count != 1 else ''}."

        return (
            session,
            _gallery(session),
            message,
            format_place_context(session.place_context),
            _badge(session),
            _key_panel(session),
        )

    def on_select_image(session: Optional[SessionState], evt: gr.SelectData) -> tuple[SessionState, str]:
        session = _ensure_session(session)
        items = session.history.list()
        index = evt.index if isinstance(evt.index, int) else None
        if index is None or not 0 <= index < len(items):
            session.selected_id = None
            return session, ""
        selected = items[index]
        session.selected_id = selected.id
        links = ", ".join(f"[{link.title}]({link.uri})" for link in selected.grounding_links or ())
        details = f"**{selected.style.value}** | {selected.ratio.value}\n\n{selected.prompt}"
        if links:
            details += f"\n\nSources: {links}"
        return session, details

    def on_export(session: Optional[SessionState], fmt: str) -> tuple[Optional[str], str]:
        session = _ensure_session(session)
        if not session.selected_id:
            return None, "Select a design in the gallery first."
        try:
            image = session.history.get(session.selected_id)
            path = storage_service.save_image(image, fmt or "png", namespace=session.session_id)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Export failed")
            return None, f"Export failed: {exc}"
        return str(path), f"Design ready as {path.suffix.lstrip('.').upper()}."

    def on_clear_history(session: Optional[SessionState]) -> tuple[SessionState, list, str, str]:
        session = _ensure_session(session)
        session.history.clear()
        session.selected_id = None
        return session, [], "", "History cleared."

    return {
        "new_session": new_session,
        "on_check_key": on_check_key,
        "on_request_key": on_request_key,
        "on_submit_key": on_submit_key,
        "on_upload": on_upload,
        "on_remove_image": on_remove_image,
        "on_remove_document": on_remove_document,
        "on_generate": on_generate,
        "on_select_image": on_select_image,
        "on_export": on_export,
        "on_clear_history": on_clear_history,
    }
