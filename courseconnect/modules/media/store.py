"""Profile picture compression and storage.

Pictures are compressed to JPEG, then written under the media directory and
served from the ``/media`` static mount. A store that keeps failing after the
configured attempts falls back to an inline ``data:`` URL so the profile can
still be updated.
"""

from __future__ import annotations

import asyncio
import base64
import io
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

from PIL import Image, UnidentifiedImageError

from courseconnect.core.config import settings
from courseconnect.core.logging import get_logger

logger = get_logger(__name__)

MEDIA_URL_PREFIX = "/media"


class InvalidImage(ValueError):
    pass


@dataclass
class StoredImage:
    url: str
    # "store" when written to disk, "data_url" after falling back
    source: str
    size: int
    attempts: int


def compress_image(
    data: bytes, *, max_width: Optional[int] = None, quality: Optional[int] = None
) -> bytes:
    """Downscale to ``max_width`` keeping aspect ratio and re-encode as JPEG."""
    max_width = max_width or settings.storage.max_image_dimension
    quality = quality or settings.storage.jpeg_quality
    try:
        with Image.open(io.BytesIO(data)) as img:
            img = img.convert("RGB")
            if img.width > max_width:
                height = round(img.height * max_width / img.width)
                img = img.resize((max_width, max(1, height)), Image.Resampling.LANCZOS)
            out = io.BytesIO()
            img.save(out, format="JPEG", quality=quality, optimize=True)
    except (UnidentifiedImageError, OSError) as e:
        raise InvalidImage(f"Not a readable image: {e}") from e
    return out.getvalue()


def to_data_url(data: bytes, content_type: str = "image/jpeg") -> str:
    return f"data:{content_type};base64,{base64.b64encode(data).decode('ascii')}"


class MediaStore:
    """Writes files below ``base_dir`` and maps them to public URLs."""

    def __init__(self, base_dir: Optional[str] = None):
        self.base_dir = Path(base_dir or settings.storage.media_dir)

    def _ensure_directories(self, path: Path) -> None:
        path.mkdir(parents=True, exist_ok=True)

    def _sanitize_filename(self, filename: str) -> str:
        unsafe_chars = '<>:"/\\|?*'
        for char in unsafe_chars:
            filename = filename.replace(char, "_")

        filename = filename.strip(" .")[:50].replace(" ", "_")

        while "__" in filename:
            filename = filename.replace("__", "_")

        return filename or "untitled"

    def profile_picture_path(self, user_id: int) -> Path:
        user_dir = self.base_dir / "profile-pictures" / f"user_{user_id}"
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
        return user_dir / f"{timestamp}_{self._sanitize_filename('avatar')}.jpg"

    def save(self, path: Path, data: bytes) -> str:
        self._ensure_directories(path.parent)
        path.write_bytes(data)
        return self.get_serving_url(path)

    def get_serving_url(self, path: Path, base_url: str = "") -> str:
        relative_path = path.relative_to(self.base_dir).as_posix()
        return f"{base_url.rstrip('/')}{MEDIA_URL_PREFIX}/{relative_path}"

    async def upload_with_retry(
        self,
        user_id: int,
        data: bytes,
        *,
        attempts: Optional[int] = None,
        delay: Optional[float] = None,
    ) -> StoredImage:
        attempts = attempts or settings.storage.upload_attempts
        delay = settings.storage.upload_retry_delay_seconds if delay is None else delay
        path = self.profile_picture_path(user_id)
        last_error: Optional[Exception] = None
        for attempt in range(1, attempts + 1):
            try:
                url = await asyncio.to_thread(self.save, path, data)
                logger.info(
                    "Stored profile picture for user %s on attempt %d", user_id, attempt
                )
                return StoredImage(url=url, source="store", size=len(data), attempts=attempt)
            except OSError as e:
                last_error = e
                logger.warning(
                    "Profile picture upload attempt %d/%d failed: %s",
                    attempt,
                    attempts,
                    e,
                )
                if attempt < attempts:
                    await asyncio.sleep(delay)
        logger.error(
            "Upload failed after %d attempts (%s); using data URL", attempts, last_error
        )
        return StoredImage(
            url=to_data_url(data), source="data_url", size=len(data), attempts=attempts
        )


media_store = MediaStore()
