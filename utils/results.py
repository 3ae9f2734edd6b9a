"""
Uniform accessor results.

Every content accessor returns a Result instead of raising, so callers
branch on ``result.success`` the same way for posts, categories and images.
"""

import functools
import logging
import math
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable

from django.db import DatabaseError, IntegrityError
from ninja.errors import HttpError
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from utils.errors import ConflictError, ContentError, NotFoundError, StoreError, ValidationError

logger = logging.getLogger(__name__)


@dataclass
class Page:
    """One window of a listed collection."""

    items: list[Any]
    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit > 0 else 1

    def pagination(self) -> dict[str, int]:
        return {
            "page": self.page,
            "limit": self.limit,
            "total": self.total,
            "totalPages": self.total_pages,
        }


@dataclass
class Result:
    success: bool
    data: Any = None
    error: str | None = None
    error_type: str | None = None
    status_code: int = 200
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, data: Any = None) -> "Result":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, exc: ContentError) -> "Result":
        extra = {"field": exc.field} if exc.field else {}
        return cls(
            success=False,
            error=exc.message,
            error_type=exc.error_type,
            status_code=exc.status_code,
            extra=extra,
        )


def validate_payload(schema: type[BaseModel], payload: Any) -> BaseModel:
    """Validate a payload against a schema, raising our ValidationError."""
    if isinstance(payload, BaseModel):
        payload = payload.model_dump(exclude_unset=True)
    try:
        return schema.model_validate(payload or {})
    except PydanticValidationError as exc:
        errors = exc.errors()
        messages = []
        for err in errors:
            loc = ".".join(str(part) for part in err["loc"])
            messages.append(f"{loc}: {err['msg']}" if loc else err["msg"])
        first_field = str(errors[0]["loc"][0]) if errors and errors[0]["loc"] else None
        raise ValidationError("; ".join(messages), field=first_field) from exc


def parse_id(value: Any, label: str) -> uuid.UUID:
    """Coerce a row id; anything that is not a UUID cannot name a stored row."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        raise NotFoundError(f"{label} not found")


def accessor(action: str) -> Callable:
    """Convert content and store failures raised by ``func`` into failed Results."""

    def decorator(func: Callable[..., Result]) -> Callable[..., Result]:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Result:
            try:
                return func(*args, **kwargs)
            except ContentError as e:
                logger.warning(f"[{action}] {e.error_type}: {e.message}")
                return Result.fail(e)
            except IntegrityError as e:
                logger.warning(f"[{action}] integrity error: {e}")
                return Result.fail(ConflictError(f"Failed to {action}: duplicate value"))
            except DatabaseError as e:
                logger.error(f"[{action}] store error: {e}", exc_info=True)
                return Result.fail(StoreError(f"Failed to {action}"))

        return wrapper

    return decorator


class ResultHttpError(HttpError):
    """HttpError that keeps the error type and field of a failed Result."""

    def __init__(self, result: Result):
        super().__init__(result.status_code, result.error or "Request failed")
        self.error_type = result.error_type
        self.field = result.extra.get("field")


def unwrap(result: Result) -> Any:
    """Return the data of a successful result or raise a ResultHttpError."""
    if not result.success:
        raise ResultHttpError(result)
    return result.data
