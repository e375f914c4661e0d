"""
Custom type definitions for the application.

These types help mypy understand custom attributes added by middleware.
"""

from typing import TYPE_CHECKING

from django.http import HttpRequest

if TYPE_CHECKING:
    from apps.core.auth import SessionRoleStore


class AuthenticatedHttpRequest(HttpRequest):
    """
    HttpRequest with the session store added by StytchAuthMiddleware.

    Use this type for endpoints that require authentication.
    """

    auth_store: "SessionRoleStore"
