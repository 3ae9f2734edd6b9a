"""
Authoring dashboard API endpoints - posts, categories, gallery and analytics.
"""

import logging
from uuid import UUID

from django.conf import settings
from django.http import HttpRequest
from ninja import Query, Router
from ninja.errors import HttpError

from apps.blog import services as blog
from apps.blog.schemas import (
    CategoriesListOut,
    CategoryCreateIn,
    CategoryOut,
    CategoryQueryIn,
    CategoryUpdateIn,
    PostCreateIn,
    PostDetailOut,
    PostOut,
    PostQueryIn,
    PostsListOut,
    PostUpdateIn,
    RestoreIn,
)
from apps.gallery import services as gallery
from apps.gallery.schemas import ImageCreateIn, ImageOut, ImageQueryIn, ImagesListOut, ImageUpdateIn
from utils.auth import AuthBearer, check_password, create_token, get_current_user
from utils.results import unwrap
from .schemas import AnalyticsOut, TokenIn, TokenOut

logger = logging.getLogger(__name__)

router = Router(auth=AuthBearer())


@router.post("/token", response=TokenOut, auth=None)
def issue_token(request: HttpRequest, data: TokenIn):
    """Exchange the dashboard password for a bearer token."""
    if not check_password(data.password):
        logger.warning("[Dashboard] Rejected token request")
        raise HttpError(401, "Invalid credentials")
    return TokenOut(token=create_token(settings.SITE_OWNER_NAME))


# ==================== POSTS ====================


@router.get("/posts", response=PostsListOut)
def list_posts(request: HttpRequest, query: PostQueryIn = Query(...)):
    """List posts of every status."""
    page = unwrap(blog.list_posts(query.model_dump(exclude_none=True)))
    return PostsListOut(
        posts=[PostOut.from_orm(p) for p in page.items],
        pagination=page.pagination(),
    )


@router.post("/posts", response=PostDetailOut)
def create_post(request: HttpRequest, data: PostCreateIn):
    post = unwrap(blog.create_post(data.model_dump(exclude_unset=True)))
    return PostDetailOut.from_orm(post)


@router.get("/posts/{post_id}", response=PostDetailOut)
def get_post(request: HttpRequest, post_id: UUID):
    return PostDetailOut.from_orm(unwrap(blog.get_post(post_id)))


@router.put("/posts/{post_id}", response=PostDetailOut)
def update_post(request: HttpRequest, post_id: UUID, data: PostUpdateIn):
    post = unwrap(blog.update_post(post_id, data.model_dump(exclude_unset=True)))
    return PostDetailOut.from_orm(post)


@router.post("/posts/{post_id}/archive", response=PostDetailOut)
def archive_post(request: HttpRequest, post_id: UUID):
    return PostDetailOut.from_orm(unwrap(blog.archive_post(post_id)))


@router.post("/posts/{post_id}/restore", response=PostDetailOut)
def restore_post(request: HttpRequest, post_id: UUID, data: RestoreIn):
    return PostDetailOut.from_orm(unwrap(blog.restore_post(post_id, data.status)))


@router.delete("/posts/{post_id}")
def delete_post(request: HttpRequest, post_id: UUID):
    unwrap(blog.delete_post(post_id))
    logger.info(f"[Dashboard] Post {post_id} deleted by {get_current_user(request)}")
    return {"message": "Post deleted"}


@router.get("/analytics", response=AnalyticsOut)
def analytics(request: HttpRequest):
    stats = unwrap(blog.get_post_analytics())
    stats["topPosts"] = [PostOut.from_orm(p) for p in stats["topPosts"]]
    stats["recentlyArchived"] = [PostOut.from_orm(p) for p in stats["recentlyArchived"]]
    return AnalyticsOut(**stats)


# ==================== CATEGORIES ====================


@router.get("/categories", response=CategoriesListOut)
def list_categories(request: HttpRequest, query: CategoryQueryIn = Query(...)):
    page = unwrap(blog.list_categories(query.model_dump(exclude_none=True)))
    return CategoriesListOut(
        categories=[CategoryOut.from_orm(c) for c in page.items],
        pagination=page.pagination(),
    )


@router.post("/categories", response=CategoryOut)
def create_category(request: HttpRequest, data: CategoryCreateIn):
    return CategoryOut.from_orm(unwrap(blog.create_category(data.model_dump(exclude_unset=True))))


@router.get("/categories/{category_id}", response=CategoryOut)
def get_category(request: HttpRequest, category_id: UUID):
    return CategoryOut.from_orm(unwrap(blog.get_category(category_id)))


@router.put("/categories/{category_id}", response=CategoryOut)
def update_category(request: HttpRequest, category_id: UUID, data: CategoryUpdateIn):
    category = unwrap(blog.update_category(category_id, data.model_dump(exclude_unset=True)))
    return CategoryOut.from_orm(category)


@router.delete("/categories/{category_id}")
def delete_category(request: HttpRequest, category_id: UUID):
    unwrap(blog.delete_category(category_id))
    logger.info(f"[Dashboard] Category {category_id} deleted by {get_current_user(request)}")
    return {"message": "Category deleted"}


# ==================== GALLERY ====================


@router.get("/gallery", response=ImagesListOut)
def list_images(request: HttpRequest, query: ImageQueryIn = Query(...)):
    page = unwrap(gallery.list_images(query.model_dump(exclude_none=True)))
    return ImagesListOut(
        images=[ImageOut.from_orm(i) for i in page.items],
        pagination=page.pagination(),
    )


@router.post("/gallery", response=ImageOut)
def create_image(request: HttpRequest, data: ImageCreateIn):
    return ImageOut.from_orm(unwrap(gallery.create_image(data.model_dump(exclude_unset=True))))


@router.get("/gallery/{image_id}", response=ImageOut)
def get_image(request: HttpRequest, image_id: UUID):
    return ImageOut.from_orm(unwrap(gallery.get_image(image_id)))


@router.put("/gallery/{image_id}", response=ImageOut)
def update_image(request: HttpRequest, image_id: UUID, data: ImageUpdateIn):
    image = unwrap(gallery.update_image(image_id, data.model_dump(exclude_unset=True)))
    return ImageOut.from_orm(image)


@router.delete("/gallery/{image_id}")
def delete_image(request: HttpRequest, image_id: UUID):
    unwrap(gallery.delete_image(image_id))
    return {"message": "Image deleted"}
