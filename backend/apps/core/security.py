"""
Core security - authentication classes for API.
"""

from ninja.security import HttpBearer

from apps.core.auth import SessionRoleStore


class BearerAuth(HttpBearer):
    """
    Bearer token authentication for API endpoints.

    JWT validation and role resolution are performed by StytchAuthMiddleware.
    This class rejects requests whose store holds no resolved principal and
    provides the OpenAPI security scheme documentation.
    """

    def authenticate(self, request, token: str) -> SessionRoleStore | None:
        """
        Returns the request's SessionRoleStore when authenticated, None otherwise
        (triggers 401).
        """
        store = getattr(request, "auth_store", None)
        if not token or store is None or not store.is_authenticated:
            return None
        return store
