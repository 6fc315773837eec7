"""Filesystem storage for uploaded profile photos."""

import logging
from dataclasses import dataclass
from pathlib import Path

from student_portal.domain.errors import InvalidFileError, StorageError
from student_portal.services.profile import PhotoStorage

logger = logging.getLogger(__name__)


@dataclass
class LocalPhotoStorage(PhotoStorage):
    """Keeps photo assets as flat files inside one directory."""

    directory: Path

    def save(self, photo_ref: str, content: bytes) -> None:
        """Write a new asset; existing files are never overwritten."""
        path = self._resolve(photo_ref)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            with path.open("xb") as handle:
                handle.write(content)
        except OSError as exc:
            logger.exception("Failed to store photo", extra={"photo_ref": photo_ref})
            raise StorageError() from exc

    def delete(self, photo_ref: str) -> None:
        """Remove an asset if it exists."""
        try:
            self._resolve(photo_ref).unlink(missing_ok=True)
        except OSError as exc:
            raise StorageError() from exc

    def _resolve(self, photo_ref: str) -> Path:
        path = self.directory / photo_ref
        if not photo_ref or path.resolve().parent != self.directory.resolve():
            raise InvalidFileError()
        return path
