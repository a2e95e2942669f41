"""Configuration helpers for the Cairo Vision AI project."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional


@dataclass(slots=True)
class AppConfig:
    """Centralized application configuration."""

    assets_dir: Path = Path("assets")
    log_dir: Path = Path("logs")
    export_dir: Path = Path("exports")
    log_level: str = "INFO"
    api_key_env_vars: tuple[str, ...] = ("GEMINI_API_KEY", "GOOGLE_API_KEY", "API_KEY")
    text_model: str = "gemini-3-flash-preview"
    maps_model: str = "gemini-2.5-flash"
    image_model: str = "gemini-2.5-flash-image"
    hq_image_model: str = "gemini-3-pro-image-preview"
    hq_image_size: str = "1K"
    max_variations: int = 4
    history_limit: int = 60
    export_keep: int = 50
    display_prompt_limit: int = 100
    default_location: Optional[tuple[float, float]] = None
    metadata: dict[str, Any] = field(default_factory=dict)


def _load_env_file(path: Path) -> None:
    """Populate environment variables from a simple KEY=VALUE .env file."""
    if not path.exists():
        return

    for line in path.read_text(encoding="utf-8").splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or "=" not in stripped:
            continue
        key, value = stripped.split("=", 1)
        os.environ[key.strip()] = value.strip().strip('"').strip("'")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_location() -> Optional[tuple[float, float]]:
    latitude = os.getenv("DEFAULT_LATITUDE")
    longitude = os.getenv("DEFAULT_LONGITUDE")
    if not latitude or not longitude:
        return None
    try:
        return float(latitude), float(longitude)
    except ValueError:
        return None


def load_config(config_path: Optional[str] = None) -> AppConfig:
    """Return an AppConfig instance with environment-aware settings."""
    env_path = Path(config_path) if config_path else Path(".env")
    _load_env_file(env_path)

    defaults = AppConfig()
    metadata: dict[str, Any] = {}
    if os.getenv("GRADIO_SERVER_NAME"):
        metadata["server_name"] = os.getenv("GRADIO_SERVER_NAME")
    server_port = _env_int("GRADIO_SERVER_PORT", 0)
    if server_port:
        metadata["server_port"] = server_port

    return AppConfig(
        assets_dir=Path(os.getenv("ASSETS_DIR", str(defaults.assets_dir))).expanduser(),
        log_dir=Path(os.getenv("LOG_DIR", str(defaults.log_dir))).expanduser(),
        export_dir=Path(os.getenv("EXPORT_DIR", str(defaults.export_dir))).expanduser(),
        log_level=os.getenv("LOG_LEVEL", defaults.log_level).upper(),
        text_model=os.getenv("GEMINI_TEXT_MODEL") or defaults.text_model,
        maps_model=os.getenv("GEMINI_MAPS_MODEL") or defaults.maps_model,
        image_model=os.getenv("GEMINI_IMAGE_MODEL") or defaults.image_model,
        hq_image_model=os.getenv("GEMINI_HQ_IMAGE_MODEL") or defaults.hq_image_model,
        hq_image_size=os.getenv("GEMINI_HQ_IMAGE_SIZE") or defaults.hq_image_size,
        history_limit=max(0, _env_int("HISTORY_LIMIT", defaults.history_limit)),
        export_keep=max(1, _env_int("EXPORT_KEEP", defaults.export_keep)),
        default_location=_env_location(),
        metadata=metadata,
    )
