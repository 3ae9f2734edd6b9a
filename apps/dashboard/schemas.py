"""
Dashboard schemas for API.
"""

from ninja import Schema

from apps.blog.schemas import PostOut


class TokenIn(Schema):
    password: str


class TokenOut(Schema):
    token: str


class AnalyticsOut(Schema):
    """Dashboard analytics - camelCase for frontend."""

    totalPosts: int
    publishedPosts: int
    draftPosts: int
    archivedPosts: int
    totalViews: int
    totalLikes: int
    archivedViews: int
    archivedLikes: int
    avgViewsPerArchivedPost: int
    topPosts: list[PostOut]
    recentlyArchived: list[PostOut]
