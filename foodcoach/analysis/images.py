from __future__ import annotations

import base64
import io
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from PIL import Image, UnidentifiedImageError


_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "image/gif": "gif",
    "image/bmp": "bmp",
    "image/tiff": "tiff",
}


class ImageRejected(ValueError):
    """Raised when the selected file is not a readable image."""


@dataclass(frozen=True)
class ImagePayload:
    data: bytes
    mime_type: str
    filename: str
    width: int = 0
    height: int = 0

    def base64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")

    def data_uri(self) -> str:
        return f"data:{self.mime_type};base64,{self.base64()}"

    @property
    def extension(self) -> str:
        suffix = Path(self.filename).suffix.lstrip(".").lower()
        return suffix or _EXTENSIONS.get(self.mime_type, "bin")

    def storage_name(self, user_id: str, timestamp_ms: int) -> str:
        return f"{user_id}/{int(timestamp_ms)}.{self.extension}"


def _sniff(data: bytes) -> tuple[str, int, int]:
    try:
        with Image.open(io.BytesIO(data)) as img:
            fmt = img.format
            width, height = img.size
            img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError) as exc:
        raise ImageRejected(f"Not a readable image: {exc}") from exc
    mime = Image.MIME.get(fmt or "")
    if not mime or not mime.startswith("image/"):
        raise ImageRejected(f"Unsupported image format: {fmt}")
    return mime, width, height


def load_image(source: Union[str, Path, bytes], filename: Optional[str] = None) -> ImagePayload:
    if isinstance(source, (bytes, bytearray)):
        data = bytes(source)
        name = filename or "upload"
    else:
        path = Path(source)
        if not path.is_file():
            raise FileNotFoundError(f"Image not found: {path}")
        data = path.read_bytes()
        name = filename or path.name
    if not data:
        raise ImageRejected("Image file is empty.")
    mime, width, height = _sniff(data)
    return ImagePayload(data=data, mime_type=mime, filename=name, width=width, height=height)
