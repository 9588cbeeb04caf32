"""Template repository backed by SQLAlchemy."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import datetime, timezone

import structlog
from sqlalchemy.orm import Session

from ..db.db_models import TemplateModel
from ..exceptions import ensure_found, handle_sqlalchemy_errors
from ..geometry import LayoutType, SlotConfig, dump_slot_config, parse_slot_config
from .templates_models import Template

logger = structlog.get_logger(__name__)


class TemplateRepository:
    """Provide access to templates stored in the database."""

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def list_templates(self) -> Sequence[Template]:
        """Return every template, newest first."""
        with self._session_factory() as session, handle_sqlalchemy_errors(entity="template"):
            rows = (
                session.query(TemplateModel)
                .order_by(TemplateModel.created_at.desc(), TemplateModel.id.desc())
                .all()
            )
            return [self._to_domain(row) for row in rows]

    def get_template(self, template_id: int) -> Template:
        with self._session_factory() as session, handle_sqlalchemy_errors(entity="template"):
            row = self._fetch(session, template_id)
            return self._to_domain(row)

    def create_template(
        self,
        *,
        name: str,
        image_path: str,
        layout_type: LayoutType,
        config: SlotConfig,
    ) -> Template:
        now = datetime.now(timezone.utc)
        with self._session_factory() as session, handle_sqlalchemy_errors(entity="template"):
            row = TemplateModel(
                name=name,
                image_path=image_path,
                layout_type=layout_type.value,
                config_json=dump_slot_config(config),
                created_at=now,
                updated_at=now,
            )
            session.add(row)
            session.commit()
            session.refresh(row)
            logger.info("templates.created", template_id=row.id, image_path=image_path)
            return self._to_domain(row)

    def update_template(
        self,
        template_id: int,
        *,
        name: str | None = None,
        image_path: str | None = None,
        layout_type: LayoutType | None = None,
        config: SlotConfig | None = None,
    ) -> Template:
        """Update the given fields; ``None`` keeps the stored value."""
        with self._session_factory() as session, handle_sqlalchemy_errors(entity="template"):
            row = self._fetch(session, template_id)
            if name is not None:
                row.name = name
            if image_path is not None:
                row.image_path = image_path
            if layout_type is not None:
                row.layout_type = layout_type.value
            if config is not None:
                row.config_json = dump_slot_config(config)
            row.updated_at = datetime.now(timezone.utc)
            session.commit()
            session.refresh(row)
            logger.info("templates.updated", template_id=template_id)
            return self._to_domain(row)

    def delete_template(self, template_id: int) -> Template:
        """Delete the record and return it so the caller can drop its image file."""
        with self._session_factory() as session, handle_sqlalchemy_errors(entity="template"):
            row = self._fetch(session, template_id)
            deleted = self._to_domain(row)
            session.delete(row)
            session.commit()
            logger.info("templates.deleted", template_id=template_id)
            return deleted

    @staticmethod
    def _fetch(session: Session, template_id: int) -> TemplateModel:
        row = session.get(TemplateModel, template_id)
        return ensure_found(row, entity="template", identifier=template_id)  # type: ignore[return-value]

    @staticmethod
    def _to_domain(model: TemplateModel) -> Template:
        return Template(
            id=model.id,
            name=model.name,
            image_path=model.image_path,
            layout_type=LayoutType(model.layout_type),
            config=parse_slot_config(model.config_json),
            created_at=model.created_at,
            updated_at=model.updated_at,
        )
