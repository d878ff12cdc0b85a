"""Local filesystem storage for uploaded attachment files."""

from __future__ import annotations

import hashlib
import re
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import BinaryIO
from uuid import uuid4

from attachment_hub.core.config import get_settings

CHUNK_SIZE = 1024 * 1024

_SIZE_UNITS = ("KB", "MB", "GB", "TB")
_UNSAFE_SEGMENT = re.compile(r"[^A-Za-z0-9_-]+")


class UploadTooLargeError(Exception):
    """Raised when an upload stream exceeds the configured maximum size."""

    def __init__(self, max_size: int):
        super().__init__(f"File too large. Maximum size is {max_size // (1024 * 1024)}MB")
        self.max_size = max_size


@dataclass(frozen=True)
class StoredFile:
    """Descriptor of a file already written under the upload root."""

    file_name: str
    save_name: str
    ext: str
    md5: str
    path: str
    size: int
    size_text: str


def format_size(size: int) -> str:
    """Render a byte count for humans, e.g. ``100 B`` or ``1.50 MB``."""
    if size < 1024:
        return f"{size} B"

    value = float(size)
    for unit in _SIZE_UNITS:
        value /= 1024
        if value < 1024:
            break
    return f"{value:.2f} {unit}"


def get_extension(file_name: str) -> str:
    """Lower-cased extension without the dot; empty when there is none."""
    return Path(file_name).suffix.lstrip(".").lower()


def _safe_segment(value: str) -> str:
    cleaned = _UNSAFE_SEGMENT.sub("_", value).strip("_")
    return cleaned or "default"


class LocalFileStorage:
    """Writes uploads below a root directory and probes for their presence.

    Files are laid out as ``{module}/{group}/{yyyy}/{mm}/{dd}/{uuid}.{ext}``
    relative to the root; that relative directory is what gets recorded as an
    attachment's ``path``.
    """

    def __init__(self, upload_path: str | Path, max_upload_size: int) -> None:
        self.root = Path(upload_path)
        self.max_upload_size = max_upload_size

    def _generate_directory(self, module: str, group: str) -> str:
        now = datetime.now(UTC)
        return "/".join(
            (
                _safe_segment(module),
                _safe_segment(group),
                f"{now.year}",
                f"{now.month:02d}",
                f"{now.day:02d}",
            )
        )

    def resolve(self, relative_path: str) -> Path:
        """Absolute location of a path recorded relative to the upload root."""
        return self.root / relative_path

    def save(
        self,
        file: BinaryIO,
        file_name: str,
        module: str,
        group: str,
    ) -> StoredFile:
        """Copy an upload stream to disk.

        Args:
            file: Readable binary stream
            file_name: Original client-side file name
            module: Owning module name
            group: Logical group inside the module

        Returns:
            StoredFile describing the written file

        Raises:
            UploadTooLargeError: If the stream exceeds ``max_upload_size``
        """
        ext = get_extension(file_name)
        save_name = f"{uuid4().hex}.{ext}" if ext else uuid4().hex
        directory = self._generate_directory(module, group)

        target_dir = self.resolve(directory)
        target_dir.mkdir(parents=True, exist_ok=True)
        target = target_dir / save_name

        hasher = hashlib.md5()
        size = 0
        with target.open("wb") as out:
            while True:
                chunk = file.read(CHUNK_SIZE)
                if not chunk:
                    break
                size += len(chunk)
                if size > self.max_upload_size:
                    out.close()
                    target.unlink(missing_ok=True)
                    raise UploadTooLargeError(self.max_upload_size)
                hasher.update(chunk)
                out.write(chunk)

        return StoredFile(
            file_name=file_name,
            save_name=save_name,
            ext=ext,
            md5=hasher.hexdigest(),
            path=directory,
            size=size,
            size_text=format_size(size),
        )

    def file_exists(self, path: str | Path) -> bool:
        """Check whether a regular file is present at ``path``."""
        return Path(path).is_file()

    def delete(self, relative_path: str) -> bool:
        """Remove a stored file; returns False when it was already gone."""
        target = self.resolve(relative_path)
        if not target.is_file():
            return False
        target.unlink()
        return True


# Singleton instance
_storage_client: LocalFileStorage | None = None


def get_storage_client() -> LocalFileStorage:
    """Get storage singleton configured from settings."""
    global _storage_client
    if _storage_client is None:
        settings = get_settings()
        _storage_client = LocalFileStorage(settings.upload_path, settings.max_upload_size)
    return _storage_client
