"""
Accounts API endpoints.

- Owner signup (public)
- First platform owner bootstrap (public, one-time)
- Current session info and logout
"""

from django.http import HttpRequest
from ninja import Router

from apps.accounts.identity import revoke_session
from apps.accounts.schemas import (
    MeResponse,
    PrincipalInfo,
    RoleGrantInfo,
    ScopeInfo,
    SetupOwnerRequest,
    SetupOwnerResponse,
    SignupOrganization,
    SignupRequest,
    SignupResponse,
    SignupUser,
)
from apps.accounts.services import bootstrap_platform_owner
from apps.core.logging import get_logger
from apps.core.schemas import ErrorResponse, MessageResponse
from apps.core.security import BearerAuth
from apps.core.types import AuthenticatedHttpRequest
from apps.organizations.services import signup_owner

logger = get_logger(__name__)

router = Router(tags=["accounts"])
auth_router = Router(tags=["auth"])
bearer_auth = BearerAuth()


@router.post(
    "/signup",
    response={200: SignupResponse, 400: ErrorResponse, 500: ErrorResponse},
    by_alias=True,
    operation_id="signupOwner",
    summary="Create an owner account and its shul",
)
def signup(request: HttpRequest, payload: SignupRequest) -> SignupResponse:
    """
    Create a pre-verified identity, its organization, and its admin grant.

    Member record, default settings and the welcome email are best-effort.
    """
    result = signup_owner(payload.email, payload.password, payload.organization_name)
    return SignupResponse(
        user=SignupUser(id=result.user.stytch_user_id, email=result.user.email),
        organization=SignupOrganization(
            id=result.organization.id,
            name=result.organization.name,
            slug=result.organization.slug,
        ),
    )


@router.post(
    "/setup-owner",
    response={200: SetupOwnerResponse, 400: ErrorResponse, 500: ErrorResponse},
    by_alias=True,
    operation_id="setupOwner",
    summary="Bootstrap the first platform owner",
)
def setup_owner(request: HttpRequest, payload: SetupOwnerRequest) -> SetupOwnerResponse:
    """Refused once any platform owner exists."""
    result = bootstrap_platform_owner(
        payload.email,
        payload.password,
        first_name=payload.first_name,
        last_name=payload.last_name,
    )
    return SetupOwnerResponse(user_id=result.user.stytch_user_id)


@auth_router.get(
    "/me",
    response={200: MeResponse, 401: ErrorResponse},
    auth=bearer_auth,
    by_alias=True,
    operation_id="getCurrentUser",
    summary="Get current principal, grants and scope",
)
def get_current_user(request: AuthenticatedHttpRequest) -> MeResponse:
    store = request.auth_store
    principal = store.require_principal()
    user = principal.user
    scope = store.scope

    return MeResponse(
        principal=PrincipalInfo(
            user_id=principal.user_id,
            email=principal.email,
            first_name=user.first_name if user else "",
            last_name=user.last_name if user else "",
            session_expires_at=principal.session_expires_at,
        ),
        grants=[
            RoleGrantInfo(role=grant.role, organization_id=grant.organization_id)
            for grant in store.grants
        ],
        scope=ScopeInfo(
            is_platform_owner=scope.is_platform_owner,
            organization_ids=sorted(scope.organization_ids),
        ),
    )


@auth_router.post(
    "/logout",
    response={200: MessageResponse, 401: ErrorResponse},
    auth=bearer_auth,
    operation_id="logout",
    summary="Revoke current session",
)
def logout(request: AuthenticatedHttpRequest) -> MessageResponse:
    """
    Revoke the current session.

    Grants are dropped from the request's store before the revoke call.
    """
    store = request.auth_store
    session_jwt = request.headers.get("Authorization", "").removeprefix("Bearer ").strip()
    store.sign_out()
    revoke_session(session_jwt)
    return MessageResponse(message="Logged out successfully")
