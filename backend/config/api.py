"""
Django Ninja API configuration.
"""

from django.http import HttpRequest, HttpResponse
from ninja import NinjaAPI
from ninja.errors import AuthenticationError, HttpError
from ninja.errors import ValidationError as RequestValidationError

from apps.accounts.api import auth_router
from apps.accounts.api import router as accounts_router
from apps.core.exceptions import ProvisioningError
from apps.core.logging import get_logger
from apps.members.api import router as members_router
from apps.organizations.api import router as organizations_router

logger = get_logger(__name__)

SESSION_REJECTED_MESSAGE = "Invalid or expired session"

api = NinjaAPI(
    title="ShulGenius API",
    version="1.0.0",
    description="Multi-tenant shul membership API with Stytch authentication.",
    openapi_extra={
        "info": {
            "contact": {"name": "API Support"},
        },
        "tags": [
            {
                "name": "accounts",
                "description": "Owner signup and first platform owner bootstrap",
            },
            {
                "name": "auth",
                "description": "Current session and logout",
            },
            {
                "name": "members",
                "description": "Member portal invitations",
            },
            {
                "name": "organizations",
                "description": "Tenant-scoped organization access",
            },
            {
                "name": "health",
                "description": "Service health and readiness checks",
            },
        ],
        "components": {
            "securitySchemes": {
                "bearerAuth": {
                    "type": "http",
                    "scheme": "bearer",
                    "bearerFormat": "JWT",
                    "description": "Stytch session JWT. Include as: Authorization: Bearer <session_jwt>",
                }
            }
        },
    },
)

# Register routers
api.add_router("/accounts", accounts_router)
api.add_router("/auth", auth_router)
api.add_router("/members", members_router)
api.add_router("/organizations", organizations_router)


def _error(request: HttpRequest, message: str, status: int) -> HttpResponse:
    return api.create_response(request, {"error": message}, status=status)


@api.exception_handler(ProvisioningError)
def provisioning_error(request: HttpRequest, exc: ProvisioningError) -> HttpResponse:
    if exc.status_code >= 500:
        logger.error("request_failed", error=exc.message, **{"http.status_code": exc.status_code})
    return _error(request, exc.message, exc.status_code)


@api.exception_handler(AuthenticationError)
def authentication_error(request: HttpRequest, exc: AuthenticationError) -> HttpResponse:
    store = getattr(request, "auth_store", None)
    if store is not None and store.failed:
        return _error(request, SESSION_REJECTED_MESSAGE, 401)
    return _error(request, "Unauthorized", 401)


@api.exception_handler(HttpError)
def http_error(request: HttpRequest, exc: HttpError) -> HttpResponse:
    return _error(request, str(exc), exc.status_code)


@api.exception_handler(RequestValidationError)
def request_validation_error(request: HttpRequest, exc: RequestValidationError) -> HttpResponse:
    first = exc.errors[0] if exc.errors else {}
    location = ".".join(
        str(part) for part in first.get("loc", ()) if part not in ("body", "payload")
    )
    message = first.get("msg", "Invalid request")
    return _error(request, f"{location}: {message}" if location else message, 400)


@api.get("/health", tags=["health"], operation_id="healthCheck", summary="Health check")
def health_check(request: HttpRequest) -> dict:
    """Health check endpoint for load balancer."""
    return {"status": "ok"}
