"""Image upload validation and local file storage."""

import os
import re
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from uuid import uuid4

from storefront import config
from storefront.shared.errors import DomainError, NotFound
from storefront.utils.logging import logger

IMAGE_TYPES = {
    "image/jpeg": (".jpg", ".jpeg"),
    "image/png": (".png",),
    "image/gif": (".gif",),
    "image/webp": (".webp",),
}

_FOLDER_PATTERN = re.compile(r"^[a-z0-9][a-z0-9_-]{0,49}$")


@dataclass
class StoredFile:
    file_name: str
    original_name: str
    folder: str
    file_path: str
    file_url: str
    file_size: int
    content_type: str
    uploaded_at: datetime


def validate_folder(folder: str | None) -> str:
    folder = (folder or "images").strip().lower()
    if not _FOLDER_PATTERN.match(folder):
        raise DomainError("Folder must be 1-50 lowercase letters, digits, '-' or '_'", field="folder")
    return folder


def validate_image(filename: str | None, content_type: str | None, size: int, max_bytes: int | None = None) -> str:
    """Check type and size; returns the extension to store the file under."""
    max_bytes = config.UPLOAD_MAX_BYTES if max_bytes is None else max_bytes
    if size == 0:
        raise DomainError("Uploaded file is empty", field="file")
    if size > max_bytes:
        raise DomainError(f"File exceeds the maximum size of {max_bytes} bytes", field="file")

    extensions = IMAGE_TYPES.get((content_type or "").lower())
    if extensions is None:
        allowed = ", ".join(sorted(IMAGE_TYPES))
        raise DomainError(f"Unsupported content type {content_type}. Allowed: {allowed}", field="file")

    extension = os.path.splitext(filename or "")[1].lower()
    if extension and extension not in extensions:
        raise DomainError(f"File extension {extension} does not match {content_type}", field="file")
    return extensions[0]


def store_image(
    data: bytes,
    filename: str | None,
    content_type: str | None,
    folder: str | None = None,
    upload_dir: str | None = None,
    base_url: str | None = None,
) -> StoredFile:
    folder = validate_folder(folder)
    extension = validate_image(filename, content_type, len(data))

    root = Path(upload_dir or config.UPLOAD_DIR)
    target_dir = root / folder
    target_dir.mkdir(parents=True, exist_ok=True)

    file_name = f"{datetime.now(UTC):%Y%m%d%H%M%S}-{uuid4().hex[:12]}{extension}"
    path = target_dir / file_name
    path.write_bytes(data)

    url = f"{(base_url or config.UPLOAD_BASE_URL).rstrip('/')}/{folder}/{file_name}"
    logger.info("File uploaded", path=str(path), size=len(data))
    return StoredFile(
        file_name=file_name,
        original_name=filename or file_name,
        folder=folder,
        file_path=str(path),
        file_url=url,
        file_size=len(data),
        content_type=content_type,
        uploaded_at=datetime.now(UTC),
    )


def delete_image(folder: str, file_name: str, upload_dir: str | None = None) -> None:
    folder = validate_folder(folder)
    if Path(file_name).name != file_name or file_name.startswith("."):
        raise DomainError("Invalid file name", field="file_name")

    path = Path(upload_dir or config.UPLOAD_DIR) / folder / file_name
    if not path.is_file():
        raise NotFound(f"File {folder}/{file_name} not found", field="file_name")
    path.unlink()
    logger.info("File deleted", path=str(path))
