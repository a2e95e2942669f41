"""Utility helpers for reference uploads and image export."""

from __future__ import annotations

import base64
import io
import mimetypes
from pathlib import Path
from typing import Tuple

from PIL import Image

from modules.pipelines.image_generator import ImagePart

EXPORT_FORMATS = {"png": "PNG", "jpeg": "JPEG", "webp": "WEBP"}


def load_image_part(path: Path | str) -> ImagePart:
    """Read an uploaded image file into an inline image part."""
    file_path = Path(path)
    raw = file_path.read_bytes()
    mime_type = mimetypes.guess_type(file_path.name)[0]
    if not mime_type or not mime_type.startswith("image/"):
        with Image.open(io.BytesIO(raw)) as image:
            mime_type = Image.MIME.get(image.format or "", "image/png")
    return ImagePart(data=base64.b64encode(raw).decode("ascii"), mime_type=mime_type)


def decode_data_uri(url: str) -> Tuple[str, bytes]:
    """Split a base64 data URI into its mime type and raw bytes."""
    if not url.startswith("data:") or "," not in url:
        raise ValueError("Not a base64 data URI")
    header, payload = url.split(",", 1)
    mime_type = header[5:].split(";", 1)[0] or "application/octet-stream"
    return mime_type, base64.b64decode(payload)


def open_data_uri(url: str) -> Image.Image:
    """Decode a data URI into a loaded PIL image."""
    _, raw = decode_data_uri(url)
    image = Image.open(io.BytesIO(raw))
    image.load()
    return image


def reference_preview(part: ImagePart) -> Image.Image:
    return open_data_uri(f"data:{part.mime_type};base64,{part.data}")


def convert_image(url: str, fmt: str) -> bytes:
    """Re-encode a data URI image; JPEG output is flattened onto white."""
    target = EXPORT_FORMATS.get(fmt.lower())
    if target is None:
        raise ValueError(f"Unsupported export format: {fmt}")

    image = open_data_uri(url)
    if target == "JPEG":
        background = Image.new("RGB", image.size, "white")
        rgba = image.convert("RGBA")
        background.paste(rgba, mask=rgba.getchannel("A"))
        image = background

    buffer = io.BytesIO()
    image.save(buffer, format=target)
    return buffer.getvalue()


def export_suffix(fmt: str) -> str:
    return "jpg" if fmt.lower() == "jpeg" else fmt.lower()
