"""
Tests for the authoring dashboard API.
"""

import jwt
import pytest
from django.conf import settings

from apps.blog.models import Category, Post, PostStatus


@pytest.mark.django_db
class TestDashboardAuth:
    def test_token_with_correct_password(self, api_client):
        response = api_client.post("/dashboard/token", json={"password": "test-password"})
        assert response.status_code == 200
        token = response.json()["data"]["token"]

        posts = api_client.get("/dashboard/posts", headers={"HTTP_AUTHORIZATION": f"Bearer {token}"})
        assert posts.status_code == 200

    def test_token_with_wrong_password(self, api_client):
        response = api_client.post("/dashboard/token", json={"password": "guess"})
        assert response.status_code == 401
        assert response.json()["success"] is False

    def test_requires_token(self, api_client):
        assert api_client.get("/dashboard/posts").status_code == 401

    def test_rejects_token_without_owner_role(self, api_client):
        token = jwt.encode({"sub": "someone"}, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
        response = api_client.get("/dashboard/posts", headers={"HTTP_AUTHORIZATION": f"Bearer {token}"})
        assert response.status_code == 401

    def test_rejects_garbage_token(self, api_client):
        response = api_client.get("/dashboard/posts", headers={"HTTP_AUTHORIZATION": "Bearer nope"})
        assert response.status_code == 401


@pytest.mark.django_db
class TestDashboardPosts:
    def test_create(self, api_client, auth_headers, post_payload):
        response = api_client.post("/dashboard/posts", json=post_payload, headers=auth_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["slug"] == "hello-world"
        assert data["status"] == "draft"
        assert data["publishedAt"] is None
        assert data["readingTime"] == 1

    def test_create_duplicate(self, api_client, auth_headers, post_payload):
        api_client.post("/dashboard/posts", json=post_payload, headers=auth_headers)
        response = api_client.post("/dashboard/posts", json=post_payload, headers=auth_headers)

        assert response.status_code == 409
        body = response.json()
        assert body["errorType"] == "conflict"
        assert body["field"] == "slug"
        assert Post.objects.count() == 1

    def test_create_invalid(self, api_client, auth_headers, post_payload):
        post_payload["status"] = "archived"
        response = api_client.post("/dashboard/posts", json=post_payload, headers=auth_headers)
        assert response.status_code == 422
        assert response.json()["errorType"] == "validation"

    def test_list_includes_drafts(self, api_client, auth_headers, make_post):
        make_post(status=PostStatus.DRAFT)
        make_post()

        response = api_client.get("/dashboard/posts?status=draft", headers=auth_headers)
        assert response.json()["data"]["pagination"]["total"] == 1

        response = api_client.get("/dashboard/posts", headers=auth_headers)
        assert response.json()["data"]["pagination"]["total"] == 2

    def test_update(self, api_client, auth_headers, make_post):
        post = make_post(status=PostStatus.DRAFT, slug="keep-me")

        response = api_client.put(
            f"/dashboard/posts/{post.id}",
            json={"title": "New title", "status": "published"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["title"] == "New title"
        assert data["slug"] == "keep-me"
        assert data["publishedAt"] is not None

    def test_get_missing(self, api_client, auth_headers):
        response = api_client.get(
            "/dashboard/posts/00000000-0000-0000-0000-000000000000", headers=auth_headers
        )
        assert response.status_code == 404

    def test_archive_and_restore(self, api_client, auth_headers, make_post):
        post = make_post()

        archived = api_client.post(f"/dashboard/posts/{post.id}/archive", headers=auth_headers)
        assert archived.json()["data"]["status"] == "archived"

        restored = api_client.post(
            f"/dashboard/posts/{post.id}/restore", json={"status": "draft"}, headers=auth_headers
        )
        assert restored.status_code == 200
        assert restored.json()["data"]["status"] == "draft"
        assert restored.json()["data"]["publishedAt"] is None

        again = api_client.post(
            f"/dashboard/posts/{post.id}/restore", json={"status": "draft"}, headers=auth_headers
        )
        assert again.status_code == 422

    def test_delete(self, api_client, auth_headers, make_post):
        post = make_post()

        response = api_client.delete(f"/dashboard/posts/{post.id}", headers=auth_headers)
        assert response.status_code == 200
        assert not Post.objects.exists()

        response = api_client.delete(f"/dashboard/posts/{post.id}", headers=auth_headers)
        assert response.status_code == 404

    def test_analytics(self, api_client, auth_headers, make_post):
        make_post(title="Read a lot", views=20)
        make_post(title="Archived", status=PostStatus.ARCHIVED, views=4)

        response = api_client.get("/dashboard/analytics", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["totalPosts"] == 2
        assert data["totalViews"] == 24
        assert data["avgViewsPerArchivedPost"] == 4
        assert data["topPosts"][0]["title"] == "Read a lot"
        assert data["recentlyArchived"][0]["title"] == "Archived"


@pytest.mark.django_db
class TestDashboardCategories:
    def test_create_and_list(self, api_client, auth_headers):
        response = api_client.post(
            "/dashboard/categories", json={"name": "Short Stories"}, headers=auth_headers
        )
        assert response.status_code == 200
        assert response.json()["data"]["slug"] == "short-stories"

        listed = api_client.get("/dashboard/categories", headers=auth_headers)
        assert [c["name"] for c in listed.json()["data"]["categories"]] == ["Short Stories"]

    def test_bad_color(self, api_client, auth_headers):
        response = api_client.post(
            "/dashboard/categories", json={"name": "Art", "color": "#GGGGGG"}, headers=auth_headers
        )
        assert response.status_code == 422

    def test_delete_referenced(self, api_client, auth_headers, make_category, make_post):
        category = make_category("Writing")
        make_post(category="Writing")

        response = api_client.delete(f"/dashboard/categories/{category.id}", headers=auth_headers)

        assert response.status_code == 409
        assert response.json()["errorType"] == "referential"
        assert Category.objects.filter(pk=category.pk).exists()

    def test_rename(self, api_client, auth_headers, make_category, make_post):
        category = make_category("Writing")
        post = make_post(category="Writing")

        response = api_client.put(
            f"/dashboard/categories/{category.id}", json={"name": "Essays"}, headers=auth_headers
        )

        assert response.status_code == 200
        assert response.json()["data"]["postCount"] == 1
        post.refresh_from_db()
        assert post.category == "Essays"


@pytest.mark.django_db
class TestDashboardGallery:
    def test_crud(self, api_client, auth_headers):
        created = api_client.post(
            "/dashboard/gallery",
            json={"url": "https://cdn.example.com/a.png", "filename": "a.png", "size": 512},
            headers=auth_headers,
        )
        assert created.status_code == 200
        image_id = created.json()["data"]["id"]

        updated = api_client.put(
            f"/dashboard/gallery/{image_id}", json={"title": "Alpha"}, headers=auth_headers
        )
        assert updated.json()["data"]["title"] == "Alpha"
        assert updated.json()["data"]["size"] == 512

        listed = api_client.get("/dashboard/gallery", headers=auth_headers)
        assert listed.json()["data"]["pagination"]["total"] == 1

        deleted = api_client.delete(f"/dashboard/gallery/{image_id}", headers=auth_headers)
        assert deleted.status_code == 200
        assert api_client.get(f"/dashboard/gallery/{image_id}", headers=auth_headers).status_code == 404
