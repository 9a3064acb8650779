"""
LinguaHub Backend — File Storage Service (Blob Store)
=======================================================

What:  Handles upload validation, storage, URL mapping and cleanup.
Why:   Centralizes all file system operations with security checks.
How:   Validates extension and size, writes into a named subfolder with a
       timestamped filename, returns the URL path clients use to fetch it.
Who:   Called by UserService (profile photos) and PackageService (question
       images and audio).

Directory Structure:
    storage/
    ├── uploads/                     → profile photos, served at /uploads/...
    │   └── 1718000000000-me.jpg
    └── resources/                   → question media, served at /resources/...
        ├── reading/
        │   └── 1718000000001-diagram.png
        └── listening/
            └── 1718000000002-track.mp3

    The URL path of a stored file is its path relative to the storage root,
    so reference strings stored in documents map 1:1 onto the disk layout.

Filename scheme:
    <upload-timestamp-ms>-<sanitized original basename>
    Two uploads with the same original name in the same millisecond collide;
    the later write wins.
"""

import logging
import os
import re
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

import aiofiles
from starlette.datastructures import UploadFile

from app.exceptions import FileStorageError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

# ── Allowed File Types ────────────────────────────────────────────────────
IMAGE = "image"
AUDIO = "audio"

ALLOWED_EXTENSIONS = {
    IMAGE: {".png", ".jpg", ".jpeg", ".gif", ".webp"},
    AUDIO: {".mp3", ".wav", ".ogg", ".m4a", ".webm"},
}

# Subfolders (and URL prefixes) under the storage root
PHOTO_FOLDER = "uploads"
RESOURCE_FOLDER = "resources"

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")


@dataclass(frozen=True)
class StoredFile:
    """Result of a successful write: where it is and how clients reach it."""
    absolute_path: str
    url: str


class FileService:
    """
    Manages file upload, validation, and storage lifecycle.

    Lifecycle of an uploaded file:
        1. Route hands over an UploadFile → FileService.save_upload()
        2. Extension check against the allowed set for its media kind
        3. Content is read into memory and size-checked
        4. File is written to <storage_root>/<subfolder>/<timestamp>-<name>
        5. URL path is returned (stored in the document)
        6. If the document write then fails: cleanup_file() removes it

    One instance is built at startup and shared by all requests; it holds
    no per-request state.
    """

    def __init__(self, storage_root: str, max_file_size: int = 10_485_760):
        self.storage_root = Path(storage_root).resolve()
        self.max_file_size = max_file_size
        self.storage_root.mkdir(parents=True, exist_ok=True)
        logger.info("FileService initialized with storage_root=%s", self.storage_root)

    def validate_extension(self, filename: str, kind: str = IMAGE) -> str:
        """
        Returns the normalized (lowercase) extension.
        Raises ValidationError if it is not allowed for `kind`.
        """
        allowed = ALLOWED_EXTENSIONS[kind]
        ext = Path(filename).suffix.lower()
        if ext not in allowed:
            raise ValidationError(
                message=(
                    f"File type '{ext or filename}' is not supported for {kind} uploads. "
                    f"Allowed types: {', '.join(sorted(allowed))}"
                ),
                field="file",
                context={"extension": ext, "allowed": sorted(allowed)},
            )
        return ext

    def validate_size(self, actual_size: int) -> None:
        max_mb = self.max_file_size / (1024 * 1024)
        if actual_size == 0:
            raise ValidationError(message="Uploaded file is empty.", field="file")
        if actual_size > self.max_file_size:
            raise ValidationError(
                message=(
                    f"File size ({actual_size / (1024 * 1024):.1f}MB) exceeds "
                    f"maximum of {max_mb:.0f}MB."
                ),
                field="file",
                context={"max_size_mb": max_mb, "actual_size": actual_size},
            )

    @staticmethod
    def generate_filename(original_name: str) -> str:
        """
        Build `<timestamp-ms>-<basename>` with the basename reduced to safe
        characters (no directory components survive).
        """
        basename = Path(original_name.replace("\\", "/")).name
        safe = _UNSAFE_CHARS.sub("-", basename).strip(".-") or "upload"
        return f"{int(time.time() * 1000)}-{safe}"

    def _generate_storage_path(self, subfolder: str, filename: str) -> Tuple[Path, str]:
        """Returns (absolute_path, url_path)."""
        relative_path = f"{subfolder.strip('/')}/{filename}"
        return self.storage_root / relative_path, f"/{relative_path}"

    async def store_file(self, content: bytes, subfolder: str, original_name: str) -> StoredFile:
        """
        Write file content to disk under `subfolder`.

        Raises:
            FileStorageError if directory creation or file write fails.
        """
        absolute_path, url = self._generate_storage_path(
            subfolder, self.generate_filename(original_name)
        )

        try:
            absolute_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(absolute_path, "wb") as f:
                await f.write(content)

            logger.info("File stored: %s (%d bytes)", url, len(content))
            return StoredFile(absolute_path=str(absolute_path), url=url)

        except OSError as e:
            logger.error("Failed to store file at %s: %s", absolute_path, str(e))
            raise FileStorageError(
                message="Failed to save uploaded file. Please try again.",
                context={"path": str(absolute_path), "os_error": str(e)},
            )

    async def save_upload(
        self,
        upload: Optional[UploadFile],
        subfolder: str,
        kind: str = IMAGE,
    ) -> Optional[StoredFile]:
        """
        Validate and store one uploaded file.

        Returns None when no file was attached (missing part, or the empty
        part browsers send for an untouched file input).
        """
        if upload is None or not upload.filename:
            return None

        try:
            self.validate_extension(upload.filename, kind)
            content = await upload.read()
            self.validate_size(len(content))
            return await self.store_file(content, subfolder, upload.filename)
        finally:
            await upload.close()

    async def cleanup_file(self, file_path: str) -> None:
        """
        Remove a file from storage (used after a failed document write).

        Best-effort: missing files are ignored and other failures are only
        logged.
        """
        try:
            path = Path(file_path)
            if path.exists():
                os.remove(path)
                logger.info("Cleaned up file: %s", path.name)
            else:
                logger.debug("Cleanup: file already gone: %s", path.name)
        except OSError as e:
            logger.warning("Failed to clean up file %s: %s", file_path, str(e))

    def path_for_url(self, url: Optional[str], subfolder: str) -> Optional[Path]:
        """
        Disk location behind a stored reference such as /uploads/<name>.

        None for empty values and for anything outside `subfolder`
        (external URLs, traversal attempts).
        """
        prefix = f"/{subfolder.strip('/')}/"
        if not url or not url.startswith(prefix):
            return None
        base = (self.storage_root / subfolder).resolve()
        candidate = (self.storage_root / url.lstrip("/")).resolve()
        if base not in candidate.parents:
            return None
        return candidate

    def resolve(self, subfolder: str, file_path: str) -> Path:
        """
        Map a served URL path back to a file on disk.

        Raises:
            ValidationError: path escapes the subfolder (e.g. ../../etc/passwd)
            NotFoundError:   nothing stored at that path
        """
        base = (self.storage_root / subfolder).resolve()
        full_path = (base / file_path).resolve()

        if full_path != base and base not in full_path.parents:
            raise ValidationError(message="Invalid file path", field="path")

        if not full_path.is_file():
            raise NotFoundError(resource="file", resource_id=f"{subfolder}/{file_path}")

        return full_path
