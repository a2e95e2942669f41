"""One-off script for debugging a full generation batch against the live API."""

import asyncio
from pathlib import Path

from config.settings import load_config
from modules.optimization.style_presets import DesignStyle
from modules.pipelines.image_generator import AspectRatio
from modules.pipelines.orchestrator import GenerationConfig
from modules.ui.callbacks import build_callbacks
from modules.utils.image_utils import decode_data_uri, export_suffix
from modules.utils.logging import setup_logging


async def run() -> None:
    # 1. Real configuration and callbacks
    config = load_config()
    setup_logging(config)
    callbacks = build_callbacks(config)
    session = callbacks["new_session"]()
    if not session.gate.check_availability():
        raise SystemExit("GEMINI_API_KEY is not configured.")

    # 2. Inputs (adjust as needed); use_maps needs DEFAULT_LATITUDE/DEFAULT_LONGITUDE
    snapshot = GenerationConfig(
        prompt="A rooftop cafe overlooking the Nile at sunset",
        style=DesignStyle.REALISTIC,
        ratio=AspectRatio.LANDSCAPE,
        high_quality=False,
        variations=2,
        use_maps=config.default_location is not None,
    )

    # 3. Run the callback the UI uses
    session, _, status, place, _, _ = await callbacks["on_generate"](
        session,
        snapshot.prompt,
        snapshot.style.value,
        snapshot.ratio.value,
        snapshot.high_quality,
        snapshot.variations,
        snapshot.use_maps,
        None,
    )
    print("Status:", status)
    if place:
        print(place)

    out_dir = Path("debug_output")
    out_dir.mkdir(exist_ok=True)
    for item in session.history:
        mime_type, raw = decode_data_uri(item.url)
        out_path = out_dir / f"{item.id}.{export_suffix(mime_type.split('/')[-1])}"
        out_path.write_bytes(raw)
        print("Saved:", out_path.resolve())


if __name__ == "__main__":
    asyncio.run(run())
