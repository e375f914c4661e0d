"""
Core middleware.
"""

from collections.abc import Callable

from django.http import HttpRequest, HttpResponse

from apps.core.auth import Principal, SessionRoleStore
from apps.core.exceptions import DownstreamFailure
from apps.core.logging import bind_contextvars, clear_contextvars, get_logger

logger = get_logger(__name__)

# Paths that never carry a session
PUBLIC_PATHS = (
    "/admin/",
    "/api/v1/health",
    "/api/v1/docs",
    "/api/v1/openapi.json",
)


class StytchAuthMiddleware:
    """
    Builds one SessionRoleStore per request.

    Reads `Authorization: Bearer <session_jwt>`, resolves the principal through
    Stytch, fetches its role grants, and attaches the store as
    request.auth_store. The store is torn down once the response is produced.
    """

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        from apps.accounts.services import fetch_role_grants

        store = SessionRoleStore(fetch_role_grants)
        request.auth_store = store  # type: ignore[attr-defined]

        principal = None
        if not request.path.startswith(PUBLIC_PATHS):
            auth_header = request.headers.get("Authorization", "")
            if auth_header.startswith("Bearer "):
                session_jwt = auth_header[len("Bearer ") :].strip()
                if session_jwt:
                    principal = self._authenticate_jwt(request, session_jwt)

        store.init(principal)
        if principal is not None:
            bind_contextvars(**{"usr.id": principal.user_id})

        try:
            return self.get_response(request)
        finally:
            store.teardown()
            clear_contextvars()

    def _authenticate_jwt(self, request: HttpRequest, session_jwt: str) -> Principal | None:
        """Resolve the session JWT, marking the store as failed when Stytch rejects it."""
        from apps.accounts.identity import authenticate_session

        try:
            return authenticate_session(session_jwt)
        except DownstreamFailure as e:
            logger.info("session_jwt_rejected", error=e.message)
            request.auth_store.failed = True  # type: ignore[attr-defined]
            return None
