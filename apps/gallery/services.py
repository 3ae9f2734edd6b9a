"""
Gallery image accessors.
"""

import logging
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from django.db import transaction

from utils.errors import NotFoundError
from utils.query import DESC, QuerySpec, apply_plan, build_plan
from utils.results import Page, Result, accessor, parse_id, validate_payload

from .models import GalleryImage
from .schemas import ImageCreateIn, ImageQueryIn, ImageUpdateIn

logger = logging.getLogger(__name__)

IMAGE_QUERY = QuerySpec(
    search_fields=("filename", "title", "description"),
    tag_field="tags",
    sort_fields={
        "createdAt": "created_at",
        "uploadedAt": "uploaded_at",
        "name": "filename",
        "filename": "filename",
        "title": "title",
        "size": "size",
    },
    default_sort="createdAt",
    default_order=DESC,
)


@accessor("fetch gallery images")
def list_images(query: Mapping[str, Any] | None = None) -> Result:
    params = validate_payload(ImageQueryIn, query)
    plan = build_plan(
        IMAGE_QUERY,
        params.model_dump(),
        sort_by=params.sortBy,
        sort_order=params.sortOrder,
        page=params.page,
        limit=params.limit,
    )
    rows, total = apply_plan(GalleryImage.objects.all(), plan)
    return Result.ok(Page(items=rows, page=plan.page, limit=plan.limit, total=total))


@accessor("fetch gallery image")
def get_image(image_id: Any) -> Result:
    try:
        return Result.ok(GalleryImage.objects.get(pk=parse_id(image_id, "Image")))
    except GalleryImage.DoesNotExist:
        raise NotFoundError("Image not found")


@accessor("save image to gallery")
def create_image(payload: Mapping[str, Any]) -> Result:
    data = validate_payload(ImageCreateIn, payload)

    with transaction.atomic():
        image = GalleryImage.objects.create(
            url=data.url,
            filename=data.filename,
            title=data.title or None,
            description=data.description or None,
            size=data.size,
            width=data.width,
            height=data.height,
            tags=data.tags,
            uploaded_at=data.uploadedAt or datetime.now(timezone.utc),
        )

    logger.info(f"Added gallery image '{image.filename}' ({image.size} bytes)")
    return Result.ok(image)


@accessor("update image")
def update_image(image_id: Any, payload: Mapping[str, Any]) -> Result:
    data = validate_payload(ImageUpdateIn, payload)
    changes = data.model_dump(exclude_unset=True)

    with transaction.atomic():
        try:
            image = GalleryImage.objects.select_for_update().get(pk=parse_id(image_id, "Image"))
        except GalleryImage.DoesNotExist:
            raise NotFoundError("Image not found")

        for key, value in changes.items():
            setattr(image, key, value)
        image.save()

    logger.info(f"Updated gallery image '{image.filename}' fields={sorted(changes)}")
    return Result.ok(image)


@accessor("delete image")
def delete_image(image_id: Any) -> Result:
    deleted, _ = GalleryImage.objects.filter(pk=parse_id(image_id, "Image")).delete()
    if not deleted:
        raise NotFoundError("Image not found")

    logger.info(f"Deleted gallery image {image_id}")
    return Result.ok()
