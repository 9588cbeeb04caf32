from __future__ import annotations

import io
import os
import tempfile
from pathlib import Path
from typing import Callable

import pytest
from fastapi.testclient import TestClient
from PIL import Image
from sqlalchemy.orm import sessionmaker

_RUNTIME_DIR = Path(tempfile.mkdtemp(prefix="photobox-tests-"))

# ``src.photobox.main`` builds a module level app on import
os.environ.setdefault("MEDIA_ROOT", str(_RUNTIME_DIR / "media"))
os.environ.setdefault("DATABASE_URL", f"sqlite:///{_RUNTIME_DIR / 'photobox.db'}")

from src.photobox.config import AppConfig, MediaPaths, UploadLimits, build_engine  # noqa: E402
from src.photobox.db.db_init import init_db  # noqa: E402

TEMPLATE_SIZE = (800, 600)
SLOT_JSON = '{"slots": [{"x": 100, "y": 50, "width": 200, "height": 300}]}'


def encode_image(image: Image.Image, fmt: str = "PNG") -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format=fmt)
    return buffer.getvalue()


def build_frame_template(
    size: tuple[int, int] = TEMPLATE_SIZE,
    hole: tuple[int, int, int, int] | None = (100, 50, 300, 350),
) -> Image.Image:
    """Opaque red frame with a transparent window at ``hole`` (left, top, right, bottom)."""
    image = Image.new("RGBA", size, (200, 0, 0, 255))
    if hole is not None:
        image.paste((0, 0, 0, 0), hole)
    return image


def build_split_frame(size: tuple[int, int] = (1280, 720)) -> Image.Image:
    """Camera still: blue left half, green right half."""
    width, height = size
    image = Image.new("RGB", size, (0, 0, 255))
    image.paste((0, 255, 0), (width // 2, 0, width, height))
    return image


@pytest.fixture
def make_png() -> Callable[..., bytes]:
    def _make(size: tuple[int, int] = (64, 48), color=(255, 255, 255, 0), mode: str = "RGBA") -> bytes:
        return encode_image(Image.new(mode, size, color))

    return _make


@pytest.fixture
def template_png() -> bytes:
    return encode_image(build_frame_template())


@pytest.fixture
def frame_png() -> bytes:
    return encode_image(build_split_frame())


@pytest.fixture
def jpeg_bytes() -> bytes:
    return encode_image(Image.new("RGB", (32, 32), (10, 20, 30)), "JPEG")


@pytest.fixture
def app_config(tmp_path: Path) -> AppConfig:
    media_paths = MediaPaths(
        root=tmp_path / "media",
        templates=tmp_path / "media" / "templates",
        downloads=tmp_path / "downloads",
    )
    for path in (media_paths.root, media_paths.templates, media_paths.downloads):
        path.mkdir(parents=True, exist_ok=True)

    database_url = f"sqlite:///{tmp_path / 'photobox.db'}"
    engine = build_engine(database_url)
    init_db(engine)
    config = AppConfig(
        media_paths=media_paths,
        upload_limits=UploadLimits(
            template_content_types=("image/png",),
            frame_content_types=("image/jpeg", "image/png", "image/webp"),
            template_max_bytes=2 * 1024 * 1024,
            frame_max_bytes=2 * 1024 * 1024,
            chunk_size_bytes=64 * 1024,
        ),
        database_url=database_url,
        engine=engine,
        session_factory=sessionmaker(bind=engine, expire_on_commit=False),
        camera_index=0,
        registry_url="http://testserver",
    )
    yield config
    engine.dispose()


@pytest.fixture
def app(app_config: AppConfig):
    from src.photobox.main import create_app

    return create_app(app_config)


@pytest.fixture
def client(app) -> TestClient:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def create_template(client: TestClient, template_png: bytes) -> Callable[..., dict]:
    """Register a template through the admin API and return the created payload."""

    def _create(name: str = "Birthday", config_json: str = SLOT_JSON, image: bytes | None = None) -> dict:
        response = client.post(
            "/api/admin/templates",
            data={"name": name, "config_json": config_json, "layout_type": "single"},
            files={"file": ("frame.png", image or template_png, "image/png")},
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _create
