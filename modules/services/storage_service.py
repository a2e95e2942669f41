"""File storage helpers for exported images."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from modules.services.history_service import GeneratedImage
from modules.utils.image_utils import convert_image, export_suffix

logger = logging.getLogger(__name__)


class StorageService:
    """Write re-encoded history images so the browser can download them.

    Exports for a browser session go to ``output_dir/<namespace>`` and
    pruning only touches that directory.
    """

    def __init__(self, output_dir: Path, max_items: int = 50) -> None:
        self.output_dir = Path(output_dir)
        self.max_items = max_items

    def directory_for(self, namespace: Optional[str] = None) -> Path:
        return self.output_dir / namespace if namespace else self.output_dir

    def save_image(self, image: GeneratedImage, fmt: str = "png", namespace: Optional[str] = None) -> Path:
        """Persist an image in the requested format and return the file path."""
        payload = convert_image(image.url, fmt)
        directory = self.directory_for(namespace)
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / f"cairo-vision-{image.id}.{export_suffix(fmt)}"
        path.write_bytes(payload)
        logger.info("Exported %s as %s", image.id, path)
        self.cleanup(self.max_items, namespace)
        return path

    def cleanup(self, max_items: int = 50, namespace: Optional[str] = None) -> None:
        """Limit the number of exported files kept in one directory."""
        directory = self.directory_for(namespace)
        if not directory.exists():
            return
        files = sorted(
            (path for path in directory.iterdir() if path.is_file()),
            key=lambda path: path.stat().st_mtime,
            reverse=True,
        )
        for stale in files[max_items:]:
            stale.unlink(missing_ok=True)
