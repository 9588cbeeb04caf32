"""Database models and schema helpers."""

from .db_models import Base, TemplateModel

__all__ = ["Base", "TemplateModel"]
