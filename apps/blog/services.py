"""
Blog content accessors.

Each accessor validates its input, runs against the store and returns a
``Result``; content and store failures never escape as exceptions.
"""

import logging
import uuid
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from django.conf import settings
from django.db import transaction
from django.db.models import Count, F

from utils.errors import ConflictError, NotFoundError, ReferentialError, ValidationError
from utils.query import ASC, DESC, MAX_LIMIT, QuerySpec, apply_plan, build_plan, evaluate_rows
from utils.results import Page, Result, accessor, parse_id, validate_payload
from utils.text import calculate_reading_time, random_category_color, slugify

from .models import Category, Post, PostStatus
from .schemas import (
    CategoryCreateIn,
    CategoryQueryIn,
    CategoryUpdateIn,
    PostCreateIn,
    PostQueryIn,
    PostUpdateIn,
    RestoreIn,
)

logger = logging.getLogger(__name__)

POST_QUERY = QuerySpec(
    equals={"category": "category", "status": "status"},
    search_fields=("title", "excerpt", "content"),
    tag_field="tags",
    sort_fields={
        "createdAt": "created_at",
        "updatedAt": "updated_at",
        "publishedAt": "published_at",
        "title": "title",
        "views": "views",
        "likes": "likes",
    },
    default_sort="createdAt",
    default_order=DESC,
)

CATEGORY_QUERY = QuerySpec(
    search_fields=("name", "description"),
    sort_fields={
        "name": "name",
        "createdAt": "created_at",
        "created": "created_at",
        "updatedAt": "updated_at",
    },
    default_sort="name",
    default_order=ASC,
    sort_defaults={"created": DESC},
)

# Payload keys (camelCase, as sent by the dashboard) -> model fields
POST_FIELDS = {
    "title": "title",
    "slug": "slug",
    "excerpt": "excerpt",
    "content": "content",
    "featuredImage": "featured_image",
    "images": "images",
    "authorName": "author_name",
    "authorAvatar": "author_avatar",
    "category": "category",
    "tags": "tags",
}

FEATURED_LIMIT = 5


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _derive_slug(source: str, field: str) -> str:
    slug = slugify(source)
    if not slug:
        raise ValidationError(f"Cannot derive a slug from {field} '{source}'", field=field)
    return slug


# ==================== POSTS ====================


def _lock_post(post_id: Any) -> Post:
    try:
        return Post.objects.select_for_update().get(pk=parse_id(post_id, "Blog post"))
    except Post.DoesNotExist:
        raise NotFoundError("Blog post not found")


def _ensure_post_slug_free(slug: str, exclude: uuid.UUID | None = None) -> None:
    queryset = Post.objects.filter(slug=slug)
    if exclude is not None:
        queryset = queryset.exclude(pk=exclude)
    if queryset.exists():
        raise ConflictError(f"A post with slug '{slug}' already exists", field="slug")


@accessor("fetch blog posts")
def list_posts(query: Mapping[str, Any] | None = None) -> Result:
    """List posts matching filters; data is a Page of Post rows."""
    params = validate_payload(PostQueryIn, query)
    plan = build_plan(
        POST_QUERY,
        params.model_dump(),
        sort_by=params.sortBy,
        sort_order=params.sortOrder,
        page=params.page,
        limit=params.limit,
    )
    rows, total = apply_plan(Post.objects.all(), plan)
    return Result.ok(Page(items=rows, page=plan.page, limit=plan.limit, total=total))


@accessor("fetch blog post")
def get_post(post_id: Any) -> Result:
    try:
        return Result.ok(Post.objects.get(pk=parse_id(post_id, "Blog post")))
    except Post.DoesNotExist:
        raise NotFoundError("Blog post not found")


@accessor("fetch blog post")
def get_post_by_slug(slug: str, published_only: bool = False) -> Result:
    if not isinstance(slug, str) or not slug.strip():
        raise ValidationError("Slug is required", field="slug")

    queryset = Post.objects.filter(slug=slug.strip())
    if published_only:
        queryset = queryset.filter(status=PostStatus.PUBLISHED)

    post = queryset.first()
    if post is None:
        raise NotFoundError("Blog post not found")
    return Result.ok(post)


@accessor("fetch featured posts")
def get_featured_posts(limit: int = FEATURED_LIMIT) -> Result:
    """Newest published posts that have a featured image."""
    if not isinstance(limit, int) or not 1 <= limit <= MAX_LIMIT:
        raise ValidationError(f"limit must be between 1 and {MAX_LIMIT}", field="limit")

    posts = (
        Post.objects.filter(status=PostStatus.PUBLISHED, featured_image__isnull=False)
        .exclude(featured_image="")
        .order_by("-published_at", "-created_at")[:limit]
    )
    return Result.ok(list(posts))


@accessor("create blog post")
def create_post(payload: Mapping[str, Any]) -> Result:
    data = validate_payload(PostCreateIn, payload)
    slug = data.slug or _derive_slug(data.title, "title")
    _ensure_post_slug_free(slug)

    with transaction.atomic():
        post = Post.objects.create(
            title=data.title,
            slug=slug,
            excerpt=data.excerpt,
            content=data.content,
            featured_image=data.featuredImage,
            images=data.images,
            author_name=data.authorName or settings.SITE_OWNER_NAME,
            author_avatar=data.authorAvatar,
            category=data.category,
            tags=data.tags,
            status=data.status,
            reading_time=calculate_reading_time(data.content),
            published_at=_now() if data.status == PostStatus.PUBLISHED else None,
        )

    logger.info(f"Created post '{post.slug}' ({post.status})")
    return Result.ok(post)


def _change_status(post: Post, status: str) -> None:
    if post.status == PostStatus.ARCHIVED and status != PostStatus.ARCHIVED:
        raise ValidationError(
            "Archived posts must be restored before their status can change", field="status"
        )
    # publishedAt is set once, on the first publish
    if status == PostStatus.PUBLISHED and post.published_at is None:
        post.published_at = _now()
    post.status = status


@accessor("update blog post")
def update_post(post_id: Any, payload: Mapping[str, Any]) -> Result:
    """Apply the fields present in ``payload``; omitted fields are left as stored."""
    data = validate_payload(PostUpdateIn, payload)
    changes = data.model_dump(exclude_unset=True)

    with transaction.atomic():
        post = _lock_post(post_id)

        if "slug" in changes and changes["slug"] != post.slug:
            _ensure_post_slug_free(changes["slug"], exclude=post.pk)
        if "status" in changes:
            _change_status(post, changes.pop("status"))

        for key, value in changes.items():
            setattr(post, POST_FIELDS[key], value)
        if "content" in changes:
            post.reading_time = calculate_reading_time(post.content)

        post.save()

    logger.info(f"Updated post '{post.slug}' fields={sorted(changes)}")
    return Result.ok(post)


@accessor("archive blog post")
def archive_post(post_id: Any) -> Result:
    with transaction.atomic():
        post = _lock_post(post_id)
        post.status = PostStatus.ARCHIVED
        post.save(update_fields=["status", "updated_at"])

    logger.info(f"Archived post '{post.slug}'")
    return Result.ok(post)


@accessor("restore blog post")
def restore_post(post_id: Any, target_status: str) -> Result:
    """Bring an archived post back as draft (clears publishedAt) or published (re-stamps it)."""
    target = validate_payload(RestoreIn, {"status": target_status}).status

    with transaction.atomic():
        post = _lock_post(post_id)
        if post.status != PostStatus.ARCHIVED:
            raise ValidationError("Only archived posts can be restored", field="status")

        post.status = target
        post.published_at = _now() if target == PostStatus.PUBLISHED else None
        post.save(update_fields=["status", "published_at", "updated_at"])

    logger.info(f"Restored post '{post.slug}' as {target}")
    return Result.ok(post)


@accessor("delete blog post")
def delete_post(post_id: Any) -> Result:
    deleted, _ = Post.objects.filter(pk=parse_id(post_id, "Blog post")).delete()
    if not deleted:
        raise NotFoundError("Blog post not found")

    logger.info(f"Deleted post {post_id}")
    return Result.ok()


def _increment(post_id: Any, counter: str, published_only: bool = False) -> dict[str, int]:
    pk = parse_id(post_id, "Blog post")
    queryset = Post.objects.filter(pk=pk)
    if published_only:
        queryset = queryset.filter(status=PostStatus.PUBLISHED)
    # Single UPDATE ... SET counter = counter + 1; leaves updated_at alone
    if not queryset.update(**{counter: F(counter) + 1}):
        raise NotFoundError("Blog post not found")
    return {counter: Post.objects.values_list(counter, flat=True).get(pk=pk)}


@accessor("increment views")
def increment_views(post_id: Any, published_only: bool = False) -> Result:
    return Result.ok(_increment(post_id, "views", published_only))


@accessor("increment likes")
def increment_likes(post_id: Any, published_only: bool = False) -> Result:
    return Result.ok(_increment(post_id, "likes", published_only))


@accessor("load analytics")
def get_post_analytics(top: int = 5) -> Result:
    """Dashboard totals, per-status counts, top published posts and recent archive."""
    posts = list(Post.objects.all())

    def by_status(status: str, sort_by: str, limit: int = MAX_LIMIT) -> tuple[list[Post], int]:
        plan = build_plan(POST_QUERY, {"status": status}, sort_by, DESC, 1, limit)
        return evaluate_rows(posts, plan, paginate=False)

    _, published = by_status(PostStatus.PUBLISHED, "views")
    _, drafts = by_status(PostStatus.DRAFT, "createdAt")
    archived, archived_count = by_status(PostStatus.ARCHIVED, "updatedAt")

    top_plan = build_plan(POST_QUERY, {"status": PostStatus.PUBLISHED}, "views", DESC, 1, top)
    top_posts, _ = evaluate_rows(posts, top_plan)

    archived_views = sum(p.views for p in archived)
    return Result.ok(
        {
            "totalPosts": len(posts),
            "publishedPosts": published,
            "draftPosts": drafts,
            "archivedPosts": archived_count,
            "totalViews": sum(p.views for p in posts),
            "totalLikes": sum(p.likes for p in posts),
            "archivedViews": archived_views,
            "archivedLikes": sum(p.likes for p in archived),
            "avgViewsPerArchivedPost": round(archived_views / archived_count) if archived_count else 0,
            "topPosts": top_posts,
            "recentlyArchived": archived[:top],
        }
    )


# ==================== CATEGORIES ====================


def _with_post_counts(categories: list[Category]) -> list[Category]:
    counts = dict(
        Post.objects.filter(category__in=[c.name for c in categories])
        .order_by()
        .values_list("category")
        .annotate(total=Count("id"))
    )
    for category in categories:
        category.post_count = counts.get(category.name, 0)
    return categories


def _lock_category(category_id: Any) -> Category:
    try:
        return Category.objects.select_for_update().get(pk=parse_id(category_id, "Blog category"))
    except Category.DoesNotExist:
        raise NotFoundError("Blog category not found")


def _ensure_category_free(name: str | None, slug: str | None, exclude: uuid.UUID | None = None) -> None:
    queryset = Category.objects.all()
    if exclude is not None:
        queryset = queryset.exclude(pk=exclude)
    if name is not None and queryset.filter(name=name).exists():
        raise ConflictError(f"A category named '{name}' already exists", field="name")
    if slug is not None and queryset.filter(slug=slug).exists():
        raise ConflictError(f"A category with slug '{slug}' already exists", field="slug")


@accessor("fetch blog categories")
def list_categories(query: Mapping[str, Any] | None = None) -> Result:
    params = validate_payload(CategoryQueryIn, query)
    plan = build_plan(
        CATEGORY_QUERY,
        params.model_dump(),
        sort_by=params.sortBy,
        sort_order=params.sortOrder,
        page=params.page,
        limit=params.limit,
    )
    rows, total = apply_plan(Category.objects.all(), plan)
    return Result.ok(Page(items=_with_post_counts(rows), page=plan.page, limit=plan.limit, total=total))


@accessor("fetch blog category")
def get_category(category_id: Any) -> Result:
    try:
        category = Category.objects.get(pk=parse_id(category_id, "Blog category"))
    except Category.DoesNotExist:
        raise NotFoundError("Blog category not found")
    return Result.ok(_with_post_counts([category])[0])


@accessor("create blog category")
def create_category(payload: Mapping[str, Any]) -> Result:
    data = validate_payload(CategoryCreateIn, payload)
    slug = data.slug or _derive_slug(data.name, "name")
    _ensure_category_free(data.name, slug)

    with transaction.atomic():
        category = Category.objects.create(
            name=data.name,
            slug=slug,
            description=data.description,
            color=data.color or random_category_color(),
        )

    category.post_count = 0
    logger.info(f"Created category '{category.name}'")
    return Result.ok(category)


@accessor("update blog category")
def update_category(category_id: Any, payload: Mapping[str, Any]) -> Result:
    """Update a category; a rename is carried over to the posts filed under it."""
    data = validate_payload(CategoryUpdateIn, payload)
    changes = data.model_dump(exclude_unset=True)

    with transaction.atomic():
        category = _lock_category(category_id)
        old_name = category.name

        new_name = changes.get("name")
        new_slug = changes.get("slug")
        _ensure_category_free(
            new_name if new_name != category.name else None,
            new_slug if new_slug != category.slug else None,
            exclude=category.pk,
        )

        for key, value in changes.items():
            setattr(category, key, value)
        category.save()

        if category.name != old_name:
            moved = Post.objects.filter(category=old_name).update(
                category=category.name, updated_at=_now()
            )
            logger.info(f"Renamed category '{old_name}' -> '{category.name}' on {moved} post(s)")

    logger.info(f"Updated category '{category.name}'")
    return Result.ok(_with_post_counts([category])[0])


@accessor("delete blog category")
def delete_category(category_id: Any) -> Result:
    """Delete a category unless posts still reference it by name."""
    with transaction.atomic():
        category = _lock_category(category_id)
        referencing = Post.objects.filter(category=category.name).count()
        if referencing:
            raise ReferentialError(
                f"Cannot delete category '{category.name}': {referencing} post(s) still use it",
                field="category",
            )
        category.delete()

    logger.info(f"Deleted category '{category.name}'")
    return Result.ok()
