"""
Test settings.

In-memory SQLite and dummy collaborator credentials; every external call is
mocked in the test suite.
"""

from .base import *  # noqa: F403

DEBUG = False
ALLOWED_HOSTS = ["testserver", "localhost"]

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

STYTCH_PROJECT_ID = "project-test-00000000-0000-0000-0000-000000000000"
STYTCH_SECRET = "secret-test-xxxxxxxxxxxxxxxx"
RESEND_API_KEY = "re_test_key"

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]
