"""
Gallery schemas for API.
"""

from datetime import datetime
from uuid import UUID

from ninja import Schema
from pydantic import ConfigDict, Field, field_validator

from apps.blog.schemas import PaginationOut, blank_to_none, reject_null
from utils.text import URL_PATTERN, normalize_tags


class ImageOut(Schema):
    """Gallery image output - camelCase for frontend."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: UUID
    url: str
    filename: str
    title: str | None = None
    description: str | None = None
    size: int
    width: int | None = None
    height: int | None = None
    tags: list[str] = []
    uploadedAt: datetime = Field(validation_alias="uploaded_at")
    createdAt: datetime = Field(validation_alias="created_at")
    updatedAt: datetime = Field(validation_alias="updated_at")


class ImagesListOut(Schema):
    images: list[ImageOut]
    pagination: PaginationOut


class ImageCreateIn(Schema):
    """Metadata of an asset already stored by the upload service."""

    model_config = ConfigDict(str_strip_whitespace=True)

    url: str = Field(max_length=1000, pattern=URL_PATTERN)
    filename: str = Field(min_length=1, max_length=255)
    title: str | None = Field(default=None, max_length=255)
    description: str | None = None
    size: int = Field(ge=0)
    width: int | None = Field(default=None, gt=0)
    height: int | None = Field(default=None, gt=0)
    tags: list[str] = []
    uploadedAt: datetime | None = None

    @field_validator("title", "description", mode="before")
    @classmethod
    def blank_optional(cls, value):
        return blank_to_none(value)

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, value):
        return normalize_tags(value)


class ImageUpdateIn(Schema):
    model_config = ConfigDict(str_strip_whitespace=True)

    url: str | None = Field(default=None, max_length=1000, pattern=URL_PATTERN)
    filename: str | None = Field(default=None, min_length=1, max_length=255)
    title: str | None = Field(default=None, max_length=255)
    description: str | None = None
    size: int | None = Field(default=None, ge=0)
    width: int | None = Field(default=None, gt=0)
    height: int | None = Field(default=None, gt=0)
    tags: list[str] | None = None

    @field_validator("title", "description", mode="before")
    @classmethod
    def blank_optional(cls, value):
        return blank_to_none(value)

    @field_validator("url", "filename", "size", "tags")
    @classmethod
    def not_null(cls, value):
        return reject_null(value)

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, value):
        return normalize_tags(value)


class ImageQueryIn(Schema):
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1, le=100)
    search: str | None = Field(default=None, max_length=200)
    tag: str | None = None
    sortBy: str | None = None
    sortOrder: str | None = None
