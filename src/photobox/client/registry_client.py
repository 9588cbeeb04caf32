"""Typed HTTP client for the Photobox template registry.

Template payloads coming off the wire go through :meth:`RegistryClient._to_template`,
which is the only place ``config_json`` is parsed on the client side; callers
always receive :class:`Template` objects with a typed :class:`SlotConfig`.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

import httpx
import structlog
from PIL import Image

from ..compositor import load_image_async
from ..exceptions import (
    InvalidSlotConfigError,
    NotFoundError,
    RegistryRejectedError,
    RegistryUnavailableError,
)
from ..geometry import LayoutType, SlotConfig, dump_slot_config, parse_slot_config
from ..templates.templates_models import Template

logger = structlog.get_logger(__name__)

_REJECTION_STATUSES = {400, 413, 415, 422}


@dataclass(slots=True)
class TemplateSubmission:
    """Form fields sent to the registry on create or update."""

    name: str
    config: SlotConfig
    layout_type: LayoutType = LayoutType.SINGLE
    image: bytes | None = None
    filename: str = "template.png"

    def form_fields(self) -> dict[str, str]:
        return {
            "name": self.name,
            "config_json": dump_slot_config(self.config),
            "layout_type": self.layout_type.value,
        }

    def files(self) -> dict[str, tuple[str, bytes, str]] | None:
        if self.image is None:
            return None
        return {"file": (self.filename, self.image, "image/png")}


@dataclass(slots=True)
class RegistryClient:
    """Convenience wrapper around :class:`httpx.AsyncClient` with typed responses."""

    http: httpx.AsyncClient

    async def list_templates(self) -> list[Template]:
        response = await self._request("GET", "/api/templates")
        return [self._to_template(item) for item in response.json()]

    async def get_template(self, template_id: int) -> Template:
        response = await self._request("GET", f"/api/templates/{template_id}")
        return self._to_template(response.json())

    async def create_template(self, submission: TemplateSubmission) -> int:
        """Upload a new template and return its id."""
        if submission.image is None:
            raise ValueError("a template image is required to create a template")
        response = await self._request(
            "POST",
            "/api/admin/templates",
            data=submission.form_fields(),
            files=submission.files(),
        )
        template_id = int(response.json()["id"])
        logger.info("registry.template_created", template_id=template_id)
        return template_id

    async def update_template(self, template_id: int, submission: TemplateSubmission) -> None:
        await self._request(
            "PUT",
            f"/api/admin/templates/{template_id}",
            data=submission.form_fields(),
            files=submission.files(),
        )
        logger.info("registry.template_updated", template_id=template_id)

    async def delete_template(self, template_id: int) -> None:
        await self._request("DELETE", f"/api/admin/templates/{template_id}")
        logger.info("registry.template_deleted", template_id=template_id)

    async def fetch_image_bytes(self, template: Template) -> bytes:
        response = await self._request("GET", f"/{template.image_path.lstrip('/')}")
        return response.content

    async def fetch_image(self, template: Template) -> Image.Image:
        """Download and fully decode the template artwork."""
        return await load_image_async(await self.fetch_image_bytes(template))

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self.http.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("registry.transport_failed", method=method, url=url, error=str(exc))
            raise RegistryUnavailableError(f"{method} {url} failed: {exc}") from exc

        if response.status_code == 404:
            raise NotFoundError(f"{method} {url}: {self._failure_reason(response) or 'not found'}")
        if response.status_code in _REJECTION_STATUSES:
            raise RegistryRejectedError(response.status_code, self._failure_reason(response))
        if response.is_error:
            raise RegistryUnavailableError(f"{method} {url} returned {response.status_code}")
        return response

    @staticmethod
    def _failure_reason(response: httpx.Response) -> str | None:
        try:
            detail = response.json().get("detail")
        except ValueError:
            return None
        if isinstance(detail, dict):
            return detail.get("failure_reason")
        if isinstance(detail, str):
            return detail
        return None

    @staticmethod
    def _to_template(payload: dict[str, Any]) -> Template:
        try:
            config = parse_slot_config(payload.get("config_json") or {})
        except InvalidSlotConfigError as exc:
            raise RegistryUnavailableError(
                f"template {payload.get('id')} has an unreadable config_json"
            ) from exc
        created_at = payload.get("created_at")
        updated_at = payload.get("updated_at")
        return Template(
            id=int(payload["id"]),
            name=payload["name"],
            image_path=payload["image_path"],
            layout_type=LayoutType(payload.get("layout_type") or LayoutType.SINGLE.value),
            config=config,
            created_at=datetime.fromisoformat(created_at) if created_at else None,
            updated_at=datetime.fromisoformat(updated_at) if updated_at else None,
        )
