"""
Settings for the test suite: in-memory SQLite and fixed secrets.
"""

from .settings import *  # noqa: F401,F403

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

JWT_SECRET = "test-jwt-secret-key-for-the-test-suite"
DASHBOARD_PASSWORD = "test-password"
SITE_OWNER_NAME = "Site Owner"
