"""
Django Ninja API configuration.
"""

import logging
from typing import Any
from ninja import NinjaAPI
from ninja.renderers import JSONRenderer
from ninja.errors import ValidationError, HttpError
from django.http import HttpRequest, HttpResponse
from pydantic import ValidationError as PydanticValidationError

from utils.results import ResultHttpError

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


class SuccessWrapperRenderer(JSONRenderer):
    """Wrap all responses in {success: true, data: ...} format for the site frontend."""

    def render(self, request: HttpRequest, data: Any, *, response_status: int) -> Any:
        # Error handlers below already build the envelope
        if isinstance(data, dict) and "success" in data:
            return super().render(request, data, response_status=response_status)

        if 200 <= response_status < 300:
            wrapped = {"success": True, "data": data}
        else:
            wrapped = {"success": False, "error": data}

        return super().render(request, wrapped, response_status=response_status)


def field_errors(errors: list[dict]) -> list[dict]:
    """Keep the JSON-safe parts of pydantic error entries."""
    return [{"loc": list(e.get("loc", ())), "msg": e.get("msg"), "type": e.get("type")} for e in errors]


def error_body(message: Any, error_type: str, field: str | None = None) -> dict:
    body = {"success": False, "error": message, "errorType": error_type}
    if field:
        body["field"] = field
    return body


api = NinjaAPI(
    title="Author Site API",
    version=API_VERSION,
    description="Blog posts, categories and image gallery for an author website",
    renderer=SuccessWrapperRenderer(),
)


@api.exception_handler(ValidationError)
def validation_errors(request: HttpRequest, exc: ValidationError) -> HttpResponse:
    return api.create_response(
        request,
        error_body(field_errors(exc.errors), "validation"),
        status=422,
    )


@api.exception_handler(PydanticValidationError)
def pydantic_validation_errors(request: HttpRequest, exc: PydanticValidationError) -> HttpResponse:
    return api.create_response(
        request,
        error_body(field_errors(exc.errors()), "validation"),
        status=422,
    )


@api.exception_handler(ResultHttpError)
def result_errors(request: HttpRequest, exc: ResultHttpError) -> HttpResponse:
    return api.create_response(
        request,
        error_body(str(exc), exc.error_type or "error", exc.field),
        status=exc.status_code,
    )


@api.exception_handler(HttpError)
def http_error_handler(request: HttpRequest, exc: HttpError) -> HttpResponse:
    return api.create_response(
        request,
        error_body(str(exc), "http"),
        status=exc.status_code,
    )


@api.exception_handler(Exception)
def generic_error_handler(request: HttpRequest, exc: Exception) -> HttpResponse:
    logger.error(f"Unhandled error on {request.method} {request.path}: {exc}", exc_info=True)
    return api.create_response(
        request,
        error_body("Internal server error", "internal"),
        status=500,
    )


@api.get("/health")
def health_check(request: HttpRequest) -> dict:
    return {"status": "ok", "version": API_VERSION}


# Routers import models, so register them after the api object exists
from apps.blog.api import router as blog_router
from apps.gallery.api import router as gallery_router
from apps.dashboard.api import router as dashboard_router

api.add_router("/blog", blog_router, tags=["Blog"])
api.add_router("/gallery", gallery_router, tags=["Gallery"])
api.add_router("/dashboard", dashboard_router, tags=["Dashboard"])
