"""
Public blog API endpoints. Only published posts are visible here.
"""

from uuid import UUID

from django.http import HttpRequest
from ninja import Query, Router

from utils.results import unwrap
from . import services
from .models import PostStatus
from .schemas import (
    CategoriesListOut,
    CategoryOut,
    CategoryQueryIn,
    PostDetailOut,
    PostOut,
    PostQueryIn,
    PostsListOut,
)

router = Router()


@router.get("/posts", response=PostsListOut)
def list_posts(request: HttpRequest, query: PostQueryIn = Query(...)):
    """List published posts."""
    params = query.model_dump(exclude_none=True)
    params["status"] = PostStatus.PUBLISHED.value

    page = unwrap(services.list_posts(params))
    return PostsListOut(
        posts=[PostOut.from_orm(p) for p in page.items],
        pagination=page.pagination(),
    )


# /posts/featured MUST be before /posts/{slug}
@router.get("/posts/featured", response=list[PostOut])
def featured_posts(request: HttpRequest, limit: int = 5):
    """Published posts with a featured image."""
    posts = unwrap(services.get_featured_posts(limit))
    return [PostOut.from_orm(p) for p in posts]


@router.get("/posts/{slug}", response=PostDetailOut)
def get_post(request: HttpRequest, slug: str):
    """Get a published post by slug."""
    post = unwrap(services.get_post_by_slug(slug, published_only=True))

    # Increment view count
    post.views = unwrap(services.increment_views(post.id, published_only=True))["views"]
    return PostDetailOut.from_orm(post)


@router.post("/posts/{post_id}/like")
def like_post(request: HttpRequest, post_id: UUID):
    """Like a published post."""
    counters = unwrap(services.increment_likes(post_id, published_only=True))
    return {"id": post_id, "likes": counters["likes"]}


@router.get("/categories", response=CategoriesListOut)
def list_categories(request: HttpRequest, query: CategoryQueryIn = Query(...)):
    page = unwrap(services.list_categories(query.model_dump(exclude_none=True)))
    return CategoriesListOut(
        categories=[CategoryOut.from_orm(c) for c in page.items],
        pagination=page.pagination(),
    )
