"""
Pytest configuration and fixtures.
"""

import itertools
import json
import pytest
from django.test import Client

from apps.blog.models import Category, Post, PostStatus
from apps.gallery.models import GalleryImage


class APIClient:
    """Wrapper around Django test client for API testing."""

    def __init__(self):
        self.client = Client()

    def _make_request(self, method, path, data=None, headers=None):
        """Make HTTP request."""
        kwargs = {"content_type": "application/json"}

        if headers:
            kwargs.update(headers)

        if data is not None:
            kwargs["data"] = json.dumps(data)

        # Prepend /api if not present
        if not path.startswith("/api"):
            path = f"/api{path}"

        response = getattr(self.client, method.lower())(path, **kwargs)
        return APIResponse(response)

    def get(self, path, headers=None, **kwargs):
        return self._make_request("GET", path, headers=headers)

    def post(self, path, json=None, headers=None, **kwargs):
        return self._make_request("POST", path, data=json, headers=headers)

    def put(self, path, json=None, headers=None, **kwargs):
        return self._make_request("PUT", path, data=json, headers=headers)

    def delete(self, path, headers=None, **kwargs):
        return self._make_request("DELETE", path, headers=headers)


class APIResponse:
    """Wrapper around Django response for easier testing."""

    def __init__(self, response):
        self._response = response
        self.status_code = response.status_code

    def json(self):
        return json.loads(self._response.content)


@pytest.fixture
def api_client():
    """API test client."""
    return APIClient()


@pytest.fixture
def auth_headers():
    """Bearer headers for the site owner."""
    from utils.auth import create_token

    return {"HTTP_AUTHORIZATION": f"Bearer {create_token('Site Owner')}"}


@pytest.fixture
def post_payload():
    """Valid create payload, camelCase like the dashboard sends it."""
    return {
        "title": "Hello World",
        "excerpt": "A first post",
        "content": "<p>Some words for the body.</p>",
        "category": "Writing",
        "tags": ["intro", "news"],
        "status": "draft",
    }


@pytest.fixture
def make_post(db):
    """Create posts straight through the ORM."""
    counter = itertools.count(1)

    def _make(**overrides):
        n = next(counter)
        fields = {
            "title": f"Post {n}",
            "slug": f"post-{n}",
            "excerpt": f"Excerpt {n}",
            "content": f"Content {n}",
            "category": "Writing",
            "status": PostStatus.PUBLISHED,
        }
        fields.update(overrides)
        return Post.objects.create(**fields)

    return _make


@pytest.fixture
def make_category(db):
    def _make(name="Writing", **overrides):
        fields = {"name": name, "slug": name.lower().replace(" ", "-"), "color": "#3B82F6"}
        fields.update(overrides)
        return Category.objects.create(**fields)

    return _make


@pytest.fixture
def make_image(db):
    counter = itertools.count(1)

    def _make(**overrides):
        n = next(counter)
        fields = {
            "url": f"https://cdn.example.com/img-{n}.jpg",
            "filename": f"img-{n}.jpg",
            "size": 1000 * n,
        }
        fields.update(overrides)
        return GalleryImage.objects.create(**fields)

    return _make
