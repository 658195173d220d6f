"""Product media uploads: allow-list filtering, size ceiling and disk storage.

Files are accepted only when both the filename extension and the declared
MIME type are on the allow-list.  Neither check looks at the file contents,
so a client can mislabel a file; callers that serve uploads must not trust
the stored extension.
"""

import asyncio
import logging
import os
import random
import time
from dataclasses import dataclass
from pathlib import Path

from fastapi import UploadFile, status

from storefront.config import settings

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = frozenset({"jpeg", "jpg", "png", "gif", "webp"})
VIDEO_EXTENSIONS = frozenset({"mp4", "avi", "mov", "wmv"})
ALLOWED_EXTENSIONS = IMAGE_EXTENSIONS | VIDEO_EXTENSIONS

ALLOWED_MIME_TYPES = frozenset(
    {
        "image/jpeg",
        "image/jpg",
        "image/png",
        "image/gif",
        "image/webp",
        "video/mp4",
        "video/avi",
        "video/x-msvideo",
        "video/mov",
        "video/quicktime",
        "video/wmv",
        "video/x-ms-wmv",
    }
)

_CHUNK_SIZE = 64 * 1024


class UploadRejectedError(Exception):
    """Raised when an upload fails the type or size checks."""

    def __init__(self, message: str, status_code: int = status.HTTP_400_BAD_REQUEST) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


@dataclass(frozen=True)
class StoredMedia:
    url: str
    path: Path
    kind: str  # "image" | "video"
    size: int


def _extension(filename: str) -> str:
    return os.path.splitext(filename)[1].lstrip(".").lower()


def check_media(upload: UploadFile, max_bytes: int | None = None) -> str:
    """Validate *upload* against the allow-list and size ceiling.

    Returns the media kind (``"image"`` or ``"video"``).  Raises
    :class:`UploadRejectedError` without touching the filesystem.
    """
    limit = max_bytes if max_bytes is not None else settings.max_upload_bytes
    ext = _extension(upload.filename or "")
    mime = (upload.content_type or "").split(";")[0].strip().lower()

    if ext not in ALLOWED_EXTENSIONS or mime not in ALLOWED_MIME_TYPES:
        logger.warning("Rejected upload %r with content type %r", upload.filename, mime)
        raise UploadRejectedError("Only image and video files are allowed!")

    if upload.size is not None and upload.size > limit:
        raise UploadRejectedError(
            f"File too large: limit is {limit // (1024 * 1024)} MB",
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
        )

    return "image" if ext in IMAGE_EXTENSIONS else "video"


def unique_filename(field: str, original: str) -> str:
    """Return ``<field>-<epoch ms>-<random>.<ext>`` for *original*."""
    suffix = f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}"
    ext = _extension(original)
    return f"{field}-{suffix}.{ext}" if ext else f"{field}-{suffix}"


async def store_media(
    upload: UploadFile,
    field: str,
    directory: str | Path | None = None,
    max_bytes: int | None = None,
) -> StoredMedia:
    """Validate and write *upload* into *directory*, creating it on demand."""
    limit = max_bytes if max_bytes is not None else settings.max_upload_bytes
    kind = check_media(upload, limit)

    target_dir = Path(directory if directory is not None else settings.upload_dir)
    target_dir.mkdir(parents=True, exist_ok=True)

    filename = unique_filename(field, upload.filename or "")
    path = target_dir / filename
    written = 0

    # The ceiling applies to the bytes actually read, not the declared size.
    try:
        with path.open("wb") as out:
            while chunk := await upload.read(_CHUNK_SIZE):
                written += len(chunk)
                if written > limit:
                    raise UploadRejectedError(
                        f"File too large: limit is {limit // (1024 * 1024)} MB",
                        status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                    )
                await asyncio.to_thread(out.write, chunk)
    except BaseException:
        # Rejections, disk errors and client disconnects all leave a partial file.
        path.unlink(missing_ok=True)
        raise

    logger.info("Stored %s upload %s (%d bytes)", kind, filename, written)
    return StoredMedia(
        url=f"{settings.upload_url_prefix.rstrip('/')}/{filename}",
        path=path,
        kind=kind,
        size=written,
    )


def delete_media(url: str, directory: str | Path | None = None) -> bool:
    """Remove the stored file behind *url*.  Returns True if a file was deleted.

    Only the final path component of *url* is used, so a crafted URL cannot
    reach outside the upload directory.
    """
    if not url.startswith(settings.upload_url_prefix):
        return False
    path = Path(directory if directory is not None else settings.upload_dir) / Path(url).name
    try:
        path.unlink()
    except FileNotFoundError:
        return False
    return True
