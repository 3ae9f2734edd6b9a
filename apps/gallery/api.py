"""
Public gallery API endpoints.
"""

from django.http import HttpRequest
from ninja import Query, Router

from utils.results import unwrap
from . import services
from .schemas import ImageOut, ImageQueryIn, ImagesListOut

router = Router()


@router.get("/images", response=ImagesListOut)
def list_images(request: HttpRequest, query: ImageQueryIn = Query(...)):
    """List gallery images, newest upload first by default."""
    params = query.model_dump(exclude_none=True)
    params.setdefault("sortBy", "uploadedAt")

    page = unwrap(services.list_images(params))
    return ImagesListOut(
        images=[ImageOut.from_orm(i) for i in page.items],
        pagination=page.pagination(),
    )
