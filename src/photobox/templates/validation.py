"""Upload validation utilities."""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from hashlib import sha256
from typing import Sequence

from fastapi import UploadFile
from PIL import Image, UnidentifiedImageError

from ..config import UploadLimits
from .upload_errors import PayloadTooLargeError, UnsupportedMediaError, UploadReadError

logger = logging.getLogger(__name__)

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


@dataclass(slots=True)
class ValidatedUpload:
    """Fully read upload that passed validation."""

    content_type: str
    size_bytes: int
    sha256: str
    filename: str
    image_size: tuple[int, int]
    data: bytes


@dataclass(slots=True)
class ImageUploadValidator:
    """Validate uploaded images against content type, size and decodability."""

    allowed_content_types: Sequence[str]
    max_bytes: int
    chunk_size_bytes: int
    require_png: bool = False

    @classmethod
    def for_templates(cls, limits: UploadLimits) -> "ImageUploadValidator":
        return cls(
            allowed_content_types=limits.template_content_types,
            max_bytes=limits.template_max_bytes,
            chunk_size_bytes=limits.chunk_size_bytes,
            require_png=True,
        )

    @classmethod
    def for_frames(cls, limits: UploadLimits) -> "ImageUploadValidator":
        return cls(
            allowed_content_types=limits.frame_content_types,
            max_bytes=limits.frame_max_bytes,
            chunk_size_bytes=limits.chunk_size_bytes,
        )

    async def validate(self, upload: UploadFile) -> ValidatedUpload:
        if upload.content_type not in set(self.allowed_content_types):
            logger.warning(
                "upload.unsupported_media",
                extra={"content_type": upload.content_type, "filename": upload.filename},
            )
            raise UnsupportedMediaError(upload.content_type)

        digest = sha256()
        buffer = bytearray()
        try:
            while True:
                chunk = await upload.read(self.chunk_size_bytes)
                if not chunk:
                    break
                buffer.extend(chunk)
                if len(buffer) > self.max_bytes:
                    logger.warning(
                        "upload.payload_too_large",
                        extra={"size_bytes": len(buffer), "limit_bytes": self.max_bytes},
                    )
                    raise PayloadTooLargeError(len(buffer))
                digest.update(chunk)
        except PayloadTooLargeError:
            raise
        except Exception as exc:  # pragma: no cover - defensive branch
            logger.error("upload.read_failed", exc_info=exc)
            raise UploadReadError(str(exc)) from exc
        finally:
            await upload.seek(0)

        data = bytes(buffer)
        if self.require_png and not data.startswith(PNG_SIGNATURE):
            logger.warning(
                "upload.signature_mismatch",
                extra={"content_type": upload.content_type, "filename": upload.filename},
            )
            raise UnsupportedMediaError(upload.content_type)

        image_size = self._probe(data)
        result = ValidatedUpload(
            content_type=upload.content_type or "application/octet-stream",
            size_bytes=len(data),
            sha256=digest.hexdigest(),
            filename=upload.filename or "upload",
            image_size=image_size,
            data=data,
        )
        logger.info(
            "upload.validated",
            extra={
                "filename": result.filename,
                "size_bytes": result.size_bytes,
                "content_type": result.content_type,
            },
        )
        return result

    @staticmethod
    def _probe(data: bytes) -> tuple[int, int]:
        try:
            with Image.open(io.BytesIO(data)) as image:
                image.verify()
                return image.size
        except (UnidentifiedImageError, OSError, SyntaxError) as exc:
            logger.warning("upload.undecodable", extra={"error": str(exc)})
            raise UnsupportedMediaError("image could not be decoded") from exc
