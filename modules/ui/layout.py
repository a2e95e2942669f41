"""Gradio layout composition for the design studio page."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Sequence

import gradio as gr

from config.settings import AppConfig
from modules.optimization.style_presets import StylePresetRegistry
from modules.pipelines.image_generator import AspectRatio
from modules.services.storage_service import StorageService
from modules.ui.callbacks import build_callbacks

# Runs in the browser before generation; the payload is read by BrowserLocationProvider.
GEOLOCATION_JS = """
async (useMaps) => {
  if (!useMaps) { return null; }
  if (!navigator.geolocation) { return {status: "unsupported"}; }
  return await new Promise((resolve) => {
    navigator.geolocation.getCurrentPosition(
      (position) => resolve({
        status: "ok",
        latitude: position.coords.latitude,
        longitude: position.coords.longitude,
      }),
      (error) => resolve({status: "denied", message: error.message}),
    );
  });
}
"""


def _load_style_registry(config: AppConfig) -> StylePresetRegistry:
    registry = StylePresetRegistry()
    registry.load_from_file(Path(config.assets_dir) / "styles.json")
    return registry


def _style_choices(registry: StylePresetRegistry) -> Sequence[tuple[str, str]]:
    return [(preset.label, preset.style.value) for preset in registry.list_presets()]


def _ratio_choices() -> Sequence[str]:
    return [ratio.value for ratio in AspectRatio]


def build_app(config: AppConfig) -> Any:
    """Compose and return the Gradio application."""
    style_registry = _load_style_registry(config)
    callbacks_map = build_callbacks(
        config,
        style_registry=style_registry,
        storage=StorageService(config.export_dir, max_items=config.export_keep),
    )
    style_choices = _style_choices(style_registry)

    with gr.Blocks(title="Cairo Vision AI") as demo:
        session = gr.State(None)
        geo_payload = gr.JSON(visible=False)

        with gr.Row():
            gr.Markdown("## CAIRO VISION AI")
            key_badge = gr.Markdown()
            activate_btn = gr.Button("Activate service", size="sm")

        with gr.Group(visible=False) as key_panel:
            key_input = gr.Textbox(label="Gemini API key", type="password")
            key_submit = gr.Button("Connect key", variant="primary")

        with gr.Row():
            # Sidebar
            with gr.Column(scale=1):
                style_select = gr.Radio(
                    label="Design style",
                    choices=style_choices,
                    value=style_choices[0][1],
                )
                ratio_select = gr.Radio(
                    label="Aspect ratio",
                    choices=_ratio_choices(),
                    value=AspectRatio.SQUARE.value,
                )
                high_quality = gr.Checkbox(label="High quality (Pro model)", value=False)
                variations = gr.Slider(
                    label="Variations",
                    minimum=1,
                    maximum=config.max_variations,
                    step=1,
                    value=1,
                )
                use_maps = gr.Checkbox(label="Ground with my location (Maps)", value=False)

            with gr.Column(scale=3):
                prompt = gr.Textbox(
                    label="Describe your idea",
                    lines=5,
                    placeholder="Imagine something creative... and describe it here in simple words",
                )
                with gr.Row():
                    attachment = gr.File(
                        label="Attach media",
                        file_types=["image", ".docx", ".txt"],
                        type="filepath",
                    )
                    reference_preview = gr.Image(label="Reference image", type="pil", interactive=False)
                with gr.Row():
                    remove_image_btn = gr.Button("Remove image", size="sm")
                    remove_doc_btn = gr.Button("Remove document", size="sm")
                document_info = gr.Markdown()
                with gr.Accordion("Attached document content", open=False):
                    document_text = gr.Textbox(show_label=False, lines=8, interactive=False)

                generate_btn = gr.Button("Start creating", variant="primary")
                status = gr.Markdown()
                place_context = gr.Markdown()

        gr.Markdown("### Generated designs")
        gallery = gr.Gallery(label="History", columns=3, object_fit="cover", height="auto")
        selected_info = gr.Markdown()
        with gr.Row():
            export_format = gr.Radio(label="Format", choices=["png", "jpeg", "webp"], value="png")
            export_btn = gr.Button("Download design")
            clear_btn = gr.Button("Clear history", variant="stop")
        export_file = gr.File(label="Download", interactive=False)

        demo.load(
            fn=callbacks_map["on_check_key"],
            inputs=[session],
            outputs=[session, key_badge, key_panel],
        )
        activate_btn.click(
            fn=callbacks_map["on_request_key"],
            inputs=[session],
            outputs=[session, key_badge, key_panel],
        )
        key_submit.click(
            fn=callbacks_map["on_submit_key"],
            inputs=[session, key_input],
            outputs=[session, key_badge, key_panel, key_input, status],
        )
        attachment.upload(
            fn=callbacks_map["on_upload"],
            inputs=[session, attachment],
            outputs=[session, reference_preview, document_info, document_text, status],
        )
        remove_image_btn.click(
            fn=callbacks_map["on_remove_image"],
            inputs=[session],
            outputs=[session, reference_preview, status],
        )
        remove_doc_btn.click(
            fn=callbacks_map["on_remove_document"],
            inputs=[session],
            outputs=[session, document_info, document_text, status],
        )

        # The trigger stays disabled while a batch is running.
        generate_btn.click(
            fn=lambda: gr.update(interactive=False, value="Analysing and designing..."),
            outputs=[generate_btn],
        ).then(
            fn=None,
            inputs=[use_maps],
            outputs=[geo_payload],
            js=GEOLOCATION_JS,
        ).then(
            fn=callbacks_map["on_generate"],
            inputs=[
                session,
                prompt,
                style_select,
                ratio_select,
                high_quality,
                variations,
                use_maps,
                geo_payload,
            ],
            outputs=[session, gallery, status, place_context, key_badge, key_panel],
        ).then(
            fn=lambda: gr.update(interactive=True, value="Start creating"),
            outputs=[generate_btn],
        )

        gallery.select(
            fn=callbacks_map["on_select_image"],
            inputs=[session],
            outputs=[session, selected_info],
        )
        export_btn.click(
            fn=callbacks_map["on_export"],
            inputs=[session, export_format],
            outputs=[export_file, status],
        )
        clear_btn.click(
            fn=callbacks_map["on_clear_history"],
            inputs=[session],
            outputs=[session, gallery, selected_info, status],
        )

    return demo
