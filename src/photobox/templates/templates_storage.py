"""File storage for template artwork."""

from __future__ import annotations

import secrets
import time
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath

import structlog

from ..config import UPLOADS_PREFIX, MediaPaths


@dataclass(slots=True)
class TemplateImageStore:
    """Keep template images under ``MEDIA_ROOT/templates``.

    Stored files are addressed by ``image_path`` values of the form
    ``uploads/<name>.png``; that prefix is where the directory is served.
    """

    paths: MediaPaths
    log: structlog.stdlib.BoundLogger = field(
        default_factory=lambda: structlog.get_logger(__name__)
    )

    def _unique_name(self, suffix: str) -> str:
        return f"{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{suffix}"

    def save(self, data: bytes, *, suffix: str = ".png") -> str:
        self.paths.templates.mkdir(parents=True, exist_ok=True)
        name = self._unique_name(suffix)
        target = self.paths.templates / name
        target.write_bytes(data)
        image_path = f"{UPLOADS_PREFIX}/{name}"
        self.log.info("templates.image_saved", image_path=image_path, size_bytes=len(data))
        return image_path

    def resolve(self, image_path: str) -> Path:
        """Map an ``image_path`` to the file on disk, refusing paths that escape the store."""
        relative = PurePosixPath(image_path)
        if relative.parts[:1] == (UPLOADS_PREFIX,):
            relative = PurePosixPath(*relative.parts[1:])
        if not relative.parts or relative.is_absolute() or ".." in relative.parts:
            raise ValueError(f"invalid template image path: {image_path!r}")
        return self.paths.templates / Path(*relative.parts)

    def read(self, image_path: str) -> bytes:
        return self.resolve(image_path).read_bytes()

    def delete(self, image_path: str) -> bool:
        try:
            target = self.resolve(image_path)
        except ValueError:
            self.log.warning("templates.image_path_invalid", image_path=image_path)
            return False
        if not target.exists():
            return False
        target.unlink()
        self.log.info("templates.image_deleted", image_path=image_path)
        return True
