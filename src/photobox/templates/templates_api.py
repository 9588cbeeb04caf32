"""Template registry routes (public listing and admin CRUD)."""

from __future__ import annotations

import structlog
from fastapi import (
    APIRouter,
    Depends,
    File,
    Form,
    HTTPException,
    Request,
    UploadFile,
    status,
)

from ..exceptions import InvalidSlotConfigError, NotFoundError, RepositoryError
from ..geometry import LayoutType, SlotConfig, parse_slot_config
from .templates_models import FailureReason
from .templates_repository import TemplateRepository
from .templates_schemas import MessageResponse, TemplateCreatedResponse, TemplateResponse
from .templates_storage import TemplateImageStore
from .upload_errors import PayloadTooLargeError, UnsupportedMediaError, UploadReadError
from .validation import ImageUploadValidator, ValidatedUpload

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api", tags=["templates"])
admin_router = APIRouter(prefix="/api/admin", tags=["admin-templates"])


def get_template_repo(request: Request) -> TemplateRepository:
    try:
        return request.app.state.template_repo  # type: ignore[attr-defined]
    except AttributeError as exc:  # pragma: no cover - defensive path
        raise RuntimeError("TemplateRepository is not configured") from exc


def get_image_store(request: Request) -> TemplateImageStore:
    try:
        return request.app.state.image_store  # type: ignore[attr-defined]
    except AttributeError as exc:  # pragma: no cover - defensive path
        raise RuntimeError("TemplateImageStore is not configured") from exc


def get_template_validator(request: Request) -> ImageUploadValidator:
    try:
        return request.app.state.template_validator  # type: ignore[attr-defined]
    except AttributeError as exc:  # pragma: no cover - defensive path
        raise RuntimeError("Template upload validator is not configured") from exc


def error_detail(reason: FailureReason, details: str | None = None) -> dict[str, str]:
    detail = {"status": "error", "failure_reason": reason.value}
    if details:
        detail["details"] = details
    return detail


def _not_found(template_id: int) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=error_detail(FailureReason.TEMPLATE_NOT_FOUND, f"template {template_id} not found"),
    )


def _bad_request(reason: FailureReason, details: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error_detail(reason, details))


def _internal_error() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=error_detail(FailureReason.INTERNAL_ERROR),
    )


def _parse_config(raw: str) -> SlotConfig:
    try:
        return parse_slot_config(raw)
    except InvalidSlotConfigError as exc:
        raise _bad_request(FailureReason.INVALID_CONFIG, str(exc)) from exc


def _parse_layout(raw: str) -> LayoutType:
    try:
        return LayoutType(raw)
    except ValueError:
        allowed = ", ".join(layout.value for layout in LayoutType)
        raise _bad_request(
            FailureReason.INVALID_REQUEST, f"layout_type must be one of: {allowed}"
        ) from None


async def validate_image_upload(
    validator: ImageUploadValidator, upload: UploadFile
) -> ValidatedUpload:
    """Run ``validator`` and translate upload errors into HTTP errors."""
    try:
        return await validator.validate(upload)
    except UnsupportedMediaError as exc:
        raise HTTPException(
            status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            detail=error_detail(FailureReason.UNSUPPORTED_MEDIA_TYPE),
        ) from exc
    except PayloadTooLargeError as exc:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=error_detail(FailureReason.PAYLOAD_TOO_LARGE),
        ) from exc
    except UploadReadError as exc:
        raise _bad_request(FailureReason.INVALID_REQUEST, "upload could not be read") from exc


@router.get("/templates")
def list_templates(
    repo: TemplateRepository = Depends(get_template_repo),
) -> list[TemplateResponse]:
    try:
        templates = repo.list_templates()
    except RepositoryError as exc:
        logger.error("templates.list_failed", error=str(exc))
        raise _internal_error() from exc
    return [TemplateResponse.from_domain(template) for template in templates]


@router.get("/templates/{template_id}")
def fetch_template(
    template_id: int,
    repo: TemplateRepository = Depends(get_template_repo),
) -> TemplateResponse:
    try:
        template = repo.get_template(template_id)
    except NotFoundError:
        raise _not_found(template_id) from None
    except RepositoryError as exc:
        logger.error("templates.fetch_failed", template_id=template_id, error=str(exc))
        raise _internal_error() from exc
    return TemplateResponse.from_domain(template)


@admin_router.post("/templates", status_code=status.HTTP_201_CREATED)
async def create_template(
    name: str | None = Form(None),
    config_json: str | None = Form(None),
    layout_type: str | None = Form(None),
    file: UploadFile | None = File(None),
    repo: TemplateRepository = Depends(get_template_repo),
    store: TemplateImageStore = Depends(get_image_store),
    validator: ImageUploadValidator = Depends(get_template_validator),
) -> TemplateCreatedResponse:
    """Validate everything first; the image hits the disk only once the request is sound."""
    if file is None or not file.filename:
        raise _bad_request(FailureReason.FILE_REQUIRED, "No file uploaded")
    if not name or not name.strip():
        raise _bad_request(FailureReason.INVALID_REQUEST, "name is required")
    config = _parse_config(config_json or "")
    layout = _parse_layout(layout_type or LayoutType.SINGLE.value)
    upload = await validate_image_upload(validator, file)

    image_path = store.save(upload.data)
    try:
        template = repo.create_template(
            name=name,
            image_path=image_path,
            layout_type=layout,
            config=config,
        )
    except RepositoryError as exc:
        store.delete(image_path)
        logger.error("templates.create_failed", error=str(exc))
        raise _internal_error() from exc

    return TemplateCreatedResponse(
        message="Template created", id=template.id, image_path=template.image_path
    )


@admin_router.put("/templates/{template_id}")
async def update_template(
    template_id: int,
    name: str | None = Form(None),
    config_json: str | None = Form(None),
    layout_type: str | None = Form(None),
    file: UploadFile | None = File(None),
    repo: TemplateRepository = Depends(get_template_repo),
    store: TemplateImageStore = Depends(get_image_store),
    validator: ImageUploadValidator = Depends(get_template_validator),
) -> MessageResponse:
    config = _parse_config(config_json) if config_json else None
    layout = _parse_layout(layout_type) if layout_type else None

    try:
        current = repo.get_template(template_id)
    except NotFoundError:
        raise _not_found(template_id) from None
    except RepositoryError as exc:
        logger.error("templates.fetch_failed", template_id=template_id, error=str(exc))
        raise _internal_error() from exc

    new_image_path: str | None = None
    if file is not None and file.filename:
        upload = await validate_image_upload(validator, file)
        new_image_path = store.save(upload.data)

    try:
        repo.update_template(
            template_id,
            name=name if name and name.strip() else None,
            image_path=new_image_path,
            layout_type=layout,
            config=config,
        )
    except NotFoundError:
        if new_image_path:
            store.delete(new_image_path)
        raise _not_found(template_id) from None
    except RepositoryError as exc:
        if new_image_path:
            store.delete(new_image_path)
        logger.error("templates.update_failed", template_id=template_id, error=str(exc))
        raise _internal_error() from exc

    if new_image_path:
        store.delete(current.image_path)
    return MessageResponse(message="Template updated")


@admin_router.delete("/templates/{template_id}")
def delete_template(
    template_id: int,
    repo: TemplateRepository = Depends(get_template_repo),
    store: TemplateImageStore = Depends(get_image_store),
) -> MessageResponse:
    try:
        deleted = repo.delete_template(template_id)
    except NotFoundError:
        raise _not_found(template_id) from None
    except RepositoryError as exc:
        logger.error("templates.delete_failed", template_id=template_id, error=str(exc))
        raise _internal_error() from exc

    store.delete(deleted.image_path)
    return MessageResponse(message="Template deleted")
