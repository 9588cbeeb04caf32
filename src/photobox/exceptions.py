"""Domain level exceptions and helpers for repository layers."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator

from sqlalchemy import exc as sa_exc

__all__ = [
    "AppError",
    "RepositoryError",
    "NotFoundError",
    "IntegrityConstraintViolation",
    "DatabaseOperationError",
    "InvalidSlotConfigError",
    "EditorValidationError",
    "EditorDisposedError",
    "CompositeError",
    "CameraUnavailableError",
    "InvalidTransitionError",
    "RegistryError",
    "RegistryRejectedError",
    "RegistryUnavailableError",
    "ensure_found",
    "handle_sqlalchemy_errors",
]


class AppError(Exception):
    """Base class for application specific errors."""


class RepositoryError(AppError):
    """Base class for persistence layer failures."""


class NotFoundError(RepositoryError):
    """Raised when a record could not be located."""


class IntegrityConstraintViolation(RepositoryError):
    """Raised when a database constraint is violated."""


class DatabaseOperationError(RepositoryError):
    """Raised for unexpected database errors."""


class InvalidSlotConfigError(AppError, ValueError):
    """Raised when ``config_json`` cannot be turned into a slot configuration."""


class EditorValidationError(AppError):
    """Raised when the slot editor refuses to save."""


class EditorDisposedError(AppError):
    """Raised when a disposed editor surface is used."""


class CompositeError(AppError):
    """Raised when a composite cannot be produced from the given inputs."""


class CameraUnavailableError(AppError):
    """Raised when the camera cannot be acquired (denied or absent)."""


class InvalidTransitionError(AppError):
    """Raised when the capture flow is asked for a move its state forbids."""


class RegistryError(AppError):
    """Base class for failures talking to the template registry."""


class RegistryRejectedError(RegistryError):
    """Raised when the registry rejects a request as invalid."""

    def __init__(self, status_code: int, failure_reason: str | None) -> None:
        super().__init__(f"registry rejected request ({status_code}): {failure_reason}")
        self.status_code = status_code
        self.failure_reason = failure_reason


class RegistryUnavailableError(RegistryError):
    """Raised on transport failures or unexpected registry responses."""


@dataclass(slots=True)
class _EntityContext:
    """Internal helper describing the entity for error messages."""

    entity: str | None = None

    def format(self, message: str) -> str:
        if self.entity:
            return f"{self.entity}: {message}"
        return message


def ensure_found(record: object | None, *, entity: str, identifier: object) -> object:
    """Ensure a record exists, otherwise raise :class:`NotFoundError`."""

    if record is None:
        raise NotFoundError(f"{entity} '{identifier}' not found")
    return record


def _translate_sqlalchemy_error(exc: Exception, *, context: _EntityContext) -> RepositoryError:
    if isinstance(exc, sa_exc.IntegrityError):
        return IntegrityConstraintViolation(context.format("integrity constraint violated"))
    if isinstance(exc, sa_exc.DBAPIError):
        return DatabaseOperationError(context.format("database operation failed"))
    return RepositoryError(context.format(str(exc)))


@contextmanager
def handle_sqlalchemy_errors(*, entity: str | None = None) -> Iterator[None]:
    """Translate SQLAlchemy errors into domain specific ones."""

    context = _EntityContext(entity)
    try:
        yield
    except (sa_exc.IntegrityError, sa_exc.DBAPIError) as exc:
        raise _translate_sqlalchemy_error(exc, context=context) from exc
