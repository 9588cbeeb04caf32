"""Dependency wiring helpers."""

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from .booth.booth_api import router as booth_router
from .config import UPLOADS_PREFIX, AppConfig
from .templates.templates_api import admin_router as templates_admin_router
from .templates.templates_api import router as templates_router
from .templates.templates_repository import TemplateRepository
from .templates.templates_storage import TemplateImageStore
from .templates.validation import ImageUploadValidator


def include_routers(app: FastAPI, config: AppConfig) -> None:
    """Mount module routers and attach services."""
    app.state.config = config
    app.state.template_repo = TemplateRepository(config.session_factory)
    app.state.image_store = TemplateImageStore(config.media_paths)
    app.state.template_validator = ImageUploadValidator.for_templates(config.upload_limits)
    app.state.frame_validator = ImageUploadValidator.for_frames(config.upload_limits)

    app.include_router(templates_router)
    app.include_router(templates_admin_router)
    app.include_router(booth_router)

    app.mount(
        f"/{UPLOADS_PREFIX}",
        StaticFiles(directory=config.media_paths.templates),
        name="uploads",
    )
