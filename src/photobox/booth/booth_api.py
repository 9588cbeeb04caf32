"""Booth routes: server-side composite of a captured frame and preview placement."""

from __future__ import annotations

import time

import structlog
from fastapi import APIRouter, Depends, File, HTTPException, Request, Response, UploadFile, status
from PIL import Image

from ..compositor import composite_when_ready, load_image_async
from ..exceptions import CompositeError, NotFoundError, RepositoryError
from ..preview import compute_preview_box
from ..templates.templates_api import (
    error_detail,
    get_image_store,
    get_template_repo,
    validate_image_upload,
)
from ..templates.templates_models import FailureReason, Template
from ..templates.templates_repository import TemplateRepository
from ..templates.templates_storage import TemplateImageStore
from ..templates.validation import ImageUploadValidator

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/templates", tags=["booth"])


def get_frame_validator(request: Request) -> ImageUploadValidator:
    try:
        return request.app.state.frame_validator  # type: ignore[attr-defined]
    except AttributeError as exc:  # pragma: no cover - defensive path
        raise RuntimeError("Frame upload validator is not configured") from exc


def _load_template(repo: TemplateRepository, template_id: int) -> Template:
    try:
        return repo.get_template(template_id)
    except NotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=error_detail(FailureReason.TEMPLATE_NOT_FOUND),
        ) from None
    except RepositoryError as exc:
        logger.error("booth.template_fetch_failed", template_id=template_id, error=str(exc))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=error_detail(FailureReason.INTERNAL_ERROR),
        ) from exc


def _read_template_image(store: TemplateImageStore, template: Template) -> bytes:
    try:
        return store.read(template.image_path)
    except (OSError, ValueError) as exc:
        logger.error("booth.template_image_missing", template_id=template.id, image_path=template.image_path)
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=error_detail(FailureReason.TEMPLATE_IMAGE_NOT_FOUND),
        ) from exc


@router.post("/{template_id}/composite")
async def composite_capture(
    template_id: int,
    frame: UploadFile = File(...),
    repo: TemplateRepository = Depends(get_template_repo),
    store: TemplateImageStore = Depends(get_image_store),
    validator: ImageUploadValidator = Depends(get_frame_validator),
) -> Response:
    """Composite an uploaded camera still into the template slot and return a PNG."""
    template = _load_template(repo, template_id)
    slot = template.config.primary
    if slot is None:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=error_detail(FailureReason.SLOT_MISSING),
        )

    upload = await validate_image_upload(validator, frame)
    template_bytes = _read_template_image(store, template)

    try:
        png = await composite_when_ready(
            load_image_async(template_bytes),
            load_image_async(upload.data),
            slot,
        )
    except CompositeError as exc:
        logger.warning("booth.composite_failed", template_id=template_id, error=str(exc))
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=error_detail(FailureReason.COMPOSITE_FAILED, str(exc)),
        ) from exc

    filename = f"photobox-{int(time.time() * 1000)}.png"
    logger.info("booth.composited", template_id=template_id, bytes=len(png))
    return Response(
        content=png,
        media_type="image/png",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/{template_id}/preview-box")
def preview_box(
    template_id: int,
    repo: TemplateRepository = Depends(get_template_repo),
    store: TemplateImageStore = Depends(get_image_store),
) -> dict:
    template = _load_template(repo, template_id)
    try:
        with Image.open(store.resolve(template.image_path)) as image:
            natural_size = image.size
    except (OSError, ValueError) as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=error_detail(FailureReason.TEMPLATE_IMAGE_NOT_FOUND),
        ) from exc

    box = compute_preview_box(template.config.primary, natural_size)
    return {
        "template_id": template.id,
        "natural_width": natural_size[0],
        "natural_height": natural_size[1],
        "left": box.left,
        "top": box.top,
        "width": box.width,
        "height": box.height,
        "css": box.as_css(),
    }
