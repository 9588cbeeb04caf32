"""Application configuration builder."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from .db.db_init import init_db

# Templates are published under this URL prefix; ``image_path`` values carry it.
UPLOADS_PREFIX = "uploads"


@dataclass(slots=True)
class UploadLimits:
    template_content_types: Sequence[str]
    frame_content_types: Sequence[str]
    template_max_bytes: int
    frame_max_bytes: int
    chunk_size_bytes: int


@dataclass(slots=True)
class MediaPaths:
    root: Path
    templates: Path
    downloads: Path


@dataclass(slots=True)
class AppConfig:
    media_paths: MediaPaths
    upload_limits: UploadLimits
    database_url: str
    engine: Engine
    session_factory: sessionmaker[Session]
    camera_index: int
    registry_url: str


def _ensure_media_paths(paths: MediaPaths) -> None:
    paths.root.mkdir(parents=True, exist_ok=True)
    paths.templates.mkdir(parents=True, exist_ok=True)
    paths.downloads.mkdir(parents=True, exist_ok=True)


def build_engine(database_url: str) -> Engine:
    connect_args = {}
    if database_url.startswith("sqlite"):
        # FastAPI runs sync endpoints in a threadpool
        connect_args["check_same_thread"] = False
    return create_engine(database_url, future=True, connect_args=connect_args)


def load_config() -> AppConfig:
    """Load configuration from environment (SQLite by default)."""
    root = Path(os.getenv("MEDIA_ROOT", "media"))
    media_paths = MediaPaths(
        root=root,
        templates=root / "templates",
        downloads=Path(os.getenv("DOWNLOAD_DIR", str(root / "downloads"))),
    )
    _ensure_media_paths(media_paths)

    upload_limits = UploadLimits(
        template_content_types=("image/png",),
        frame_content_types=("image/jpeg", "image/png", "image/webp"),
        template_max_bytes=int(os.getenv("TEMPLATE_MAX_UPLOAD_MB", 20)) * 1024 * 1024,
        frame_max_bytes=int(os.getenv("FRAME_MAX_UPLOAD_MB", 15)) * 1024 * 1024,
        chunk_size_bytes=int(os.getenv("UPLOAD_CHUNK_SIZE_BYTES", 1 * 1024 * 1024)),
    )

    database_url = os.getenv("DATABASE_URL", "sqlite:///photobox.db")
    engine = build_engine(database_url)
    session_factory: sessionmaker[Session] = sessionmaker(bind=engine, expire_on_commit=False)

    init_db(engine)

    return AppConfig(
        media_paths=media_paths,
        upload_limits=upload_limits,
        database_url=database_url,
        engine=engine,
        session_factory=session_factory,
        camera_index=int(os.getenv("CAMERA_INDEX", 0)),
        registry_url=os.getenv("REGISTRY_URL", "http://localhost:8000"),
    )
