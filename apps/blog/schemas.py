"""
Blog schemas for API and accessor payload validation.
"""

import re
from datetime import datetime
from typing import Literal
from uuid import UUID

from ninja import Schema
from pydantic import ConfigDict, Field, field_validator

from utils.text import COLOR_PATTERN, SLUG_PATTERN, URL_PATTERN, normalize_tags

CreateStatus = Literal["draft", "published"]
PostStatusValue = Literal["draft", "published", "archived"]


def blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


def reject_null(value):
    if value is None:
        raise ValueError("Field may not be null")
    return value


def _check_urls(urls: list[str]) -> list[str]:
    for url in urls:
        if not re.match(URL_PATTERN, url):
            raise ValueError(f"Invalid image URL: {url}")
    return urls


# ==================== POSTS ====================


class PostOut(Schema):
    """Post list output - camelCase for frontend."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: UUID
    title: str
    slug: str
    excerpt: str
    featuredImage: str | None = Field(validation_alias="featured_image", default=None)
    images: list[str] = []
    authorName: str = Field(validation_alias="author_name")
    authorAvatar: str | None = Field(validation_alias="author_avatar", default=None)
    category: str
    tags: list[str] = []
    status: str
    readingTime: int = Field(validation_alias="reading_time", default=1)
    views: int = 0
    likes: int = 0
    publishedAt: datetime | None = Field(validation_alias="published_at", default=None)
    createdAt: datetime = Field(validation_alias="created_at")
    updatedAt: datetime = Field(validation_alias="updated_at")


class PostDetailOut(PostOut):
    """Post detail output with body content."""

    content: str


class PaginationOut(Schema):
    """Pagination info."""

    page: int
    limit: int
    total: int
    totalPages: int


class PostsListOut(Schema):
    """Paginated posts list response."""

    posts: list[PostOut]
    pagination: PaginationOut


class PostCreateIn(Schema):
    """Post create input."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(min_length=1, max_length=255)
    slug: str | None = Field(default=None, max_length=255, pattern=SLUG_PATTERN)
    excerpt: str = Field(min_length=1, max_length=500)
    content: str = Field(min_length=1)
    featuredImage: str | None = Field(default=None, max_length=500, pattern=URL_PATTERN)
    images: list[str] = []
    authorName: str | None = Field(default=None, min_length=1, max_length=100)
    authorAvatar: str | None = Field(default=None, max_length=500, pattern=URL_PATTERN)
    category: str = Field(min_length=1, max_length=100)
    tags: list[str] = []
    status: CreateStatus = "draft"

    @field_validator("slug", "featuredImage", "authorName", "authorAvatar", mode="before")
    @classmethod
    def blank_optional(cls, value):
        return blank_to_none(value)

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, value):
        return normalize_tags(value)

    @field_validator("images")
    @classmethod
    def check_images(cls, value):
        return _check_urls(value)


class PostUpdateIn(Schema):
    """Post update input. Omitted fields keep their stored value."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str | None = Field(default=None, min_length=1, max_length=255)
    slug: str | None = Field(default=None, max_length=255, pattern=SLUG_PATTERN)
    excerpt: str | None = Field(default=None, min_length=1, max_length=500)
    content: str | None = Field(default=None, min_length=1)
    featuredImage: str | None = Field(default=None, max_length=500, pattern=URL_PATTERN)
    images: list[str] | None = None
    authorName: str | None = Field(default=None, min_length=1, max_length=100)
    authorAvatar: str | None = Field(default=None, max_length=500, pattern=URL_PATTERN)
    category: str | None = Field(default=None, min_length=1, max_length=100)
    tags: list[str] | None = None
    status: PostStatusValue | None = None

    @field_validator("featuredImage", "authorAvatar", mode="before")
    @classmethod
    def blank_optional(cls, value):
        return blank_to_none(value)

    @field_validator("title", "slug", "excerpt", "content", "images", "authorName", "category", "tags", "status")
    @classmethod
    def not_null(cls, value):
        return reject_null(value)

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, value):
        return normalize_tags(value)

    @field_validator("images")
    @classmethod
    def check_images(cls, value):
        return _check_urls(value)


class PostQueryIn(Schema):
    """Post listing filters, sort and paging."""

    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1, le=100)
    category: str | None = None
    tag: str | None = None
    status: Literal["all", "draft", "published", "archived"] | None = None
    search: str | None = Field(default=None, max_length=200)
    sortBy: str | None = None
    sortOrder: str | None = None


class RestoreIn(Schema):
    status: CreateStatus


# ==================== CATEGORIES ====================


class CategoryOut(Schema):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: UUID
    name: str
    slug: str
    description: str | None = None
    color: str
    postCount: int = Field(validation_alias="post_count", default=0)
    createdAt: datetime = Field(validation_alias="created_at")
    updatedAt: datetime = Field(validation_alias="updated_at")


class CategoriesListOut(Schema):
    categories: list[CategoryOut]
    pagination: PaginationOut


class CategoryCreateIn(Schema):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=100)
    slug: str | None = Field(default=None, max_length=120, pattern=SLUG_PATTERN)
    description: str | None = Field(default=None, max_length=500)
    color: str | None = Field(default=None, pattern=COLOR_PATTERN)

    @field_validator("slug", "description", "color", mode="before")
    @classmethod
    def blank_optional(cls, value):
        return blank_to_none(value)


class CategoryUpdateIn(Schema):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str | None = Field(default=None, min_length=1, max_length=100)
    slug: str | None = Field(default=None, max_length=120, pattern=SLUG_PATTERN)
    description: str | None = Field(default=None, max_length=500)
    color: str | None = Field(default=None, pattern=COLOR_PATTERN)

    @field_validator("description", mode="before")
    @classmethod
    def blank_optional(cls, value):
        return blank_to_none(value)

    @field_validator("name", "slug", "color")
    @classmethod
    def not_null(cls, value):
        return reject_null(value)


class CategoryQueryIn(Schema):
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=100, ge=1, le=100)
    search: str | None = Field(default=None, max_length=200)
    sortBy: str | None = None
    sortOrder: str | None = None
