"""
Members API endpoints - portal invitations and invite claims.
"""

from django.http import HttpRequest
from ninja import Router

from apps.core.schemas import ErrorResponse
from apps.core.security import BearerAuth
from apps.core.types import AuthenticatedHttpRequest
from apps.members.schemas import (
    AcceptInviteRequest,
    AcceptInviteResponse,
    CompleteInviteRequest,
    CompleteInviteResponse,
    InviteMemberRequest,
    InviteMemberResponse,
    SessionInfo,
)
from apps.members.services import accept_member_invite, complete_invite_signup, invite_member

router = Router(tags=["members"])
bearer_auth = BearerAuth()


@router.post(
    "/invite",
    response={
        200: InviteMemberResponse,
        400: ErrorResponse,
        401: ErrorResponse,
        404: ErrorResponse,
        500: ErrorResponse,
    },
    auth=bearer_auth,
    by_alias=True,
    operation_id="inviteMember",
    summary="Email a member a portal invitation",
)
def invite(request: AuthenticatedHttpRequest, payload: InviteMemberRequest) -> InviteMemberResponse:
    """
    Send a setup link (new identity) or accept-invite link (existing identity).

    The invite token is reused across calls.
    """
    result = invite_member(request.auth_store, payload.member_id, payload.origin)
    return InviteMemberResponse(type=result.type, email_result=result.email_result)


@router.post(
    "/complete-invite",
    response={200: CompleteInviteResponse, 400: ErrorResponse, 500: ErrorResponse},
    by_alias=True,
    operation_id="completeInvite",
    summary="Claim an invitation with a new password",
)
def complete_invite(request: HttpRequest, payload: CompleteInviteRequest) -> CompleteInviteResponse:
    result = complete_invite_signup(payload.token, payload.password)
    if result.session is None:
        return CompleteInviteResponse(
            message="Account created but auto-login failed. Please log in manually."
        )
    return CompleteInviteResponse(
        session=SessionInfo(
            session_token=result.session.session_token,
            session_jwt=result.session.session_jwt,
        )
    )


@router.post(
    "/accept-invite",
    response={200: AcceptInviteResponse, 400: ErrorResponse, 401: ErrorResponse, 500: ErrorResponse},
    auth=bearer_auth,
    by_alias=True,
    operation_id="acceptInvite",
    summary="Claim an invitation for the signed-in account",
)
def accept_invite(
    request: AuthenticatedHttpRequest, payload: AcceptInviteRequest
) -> AcceptInviteResponse:
    """Link the invited member record to the caller's existing identity."""
    result = accept_member_invite(request.auth_store, payload.token)
    return AcceptInviteResponse(shul_name=result.shul_name)
