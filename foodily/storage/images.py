from __future__ import annotations

import logging
import os
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

from ..exceptions import ServiceValidationError

logger = logging.getLogger(__name__)

_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
    "image/gif": ".gif",
}


@dataclass(frozen=True)
class MediaConfig:
    root: Path = Path(os.getenv("FOODILY_MEDIA_DIR", str(Path(__file__).resolve().parent.parent / "media")))
    url_prefix: str = "/media"
    max_bytes: int = 5 * 1024 * 1024


DEFAULT_MEDIA_CONFIG = MediaConfig()


@dataclass(frozen=True)
class StoredImage:
    url: str
    path: Path
    content_type: str
    size: int


def read_upload(stream: BinaryIO, config: MediaConfig = DEFAULT_MEDIA_CONFIG) -> bytes:
    """Read at most one byte past the size limit so oversized uploads are rejected without buffering them."""
    return stream.read(config.max_bytes + 1)


def save_image(
    owner_id: str,
    content_type: str | None,
    data: bytes,
    config: MediaConfig = DEFAULT_MEDIA_CONFIG,
) -> StoredImage:
    """Persist an uploaded image under ``<root>/<owner_id>/`` and return its URL."""
    ext = _EXTENSIONS.get((content_type or "").lower())
    if ext is None:
        raise ServiceValidationError(
            "Unsupported image type",
            details={"content_type": content_type, "allowed": sorted(_EXTENSIONS)},
        )
    if not data:
        raise ServiceValidationError("Empty upload")
    if len(data) > config.max_bytes:
        raise ServiceValidationError(
            "Image too large",
            details={"size": len(data), "max_bytes": config.max_bytes},
        )

    safe_owner = "".join(ch for ch in owner_id if ch.isalnum() or ch in "-_") or "anonymous"
    name = f"{uuid.uuid4().hex}{ext}"
    folder = config.root / safe_owner
    folder.mkdir(parents=True, exist_ok=True)
    path = folder / name
    path.write_bytes(data)

    logger.info("Stored image %s (%d bytes)", path, len(data))
    return StoredImage(
        url=f"{config.url_prefix}/{safe_owner}/{name}",
        path=path,
        content_type=content_type.lower(),
        size=len(data),
    )
