"""
Member services - portal invitations and invite claims.
"""

import secrets
from dataclasses import dataclass
from typing import Any

from django.conf import settings
from django.utils import timezone

from apps.accounts import identity
from apps.accounts.constants import Roles
from apps.accounts.models import RoleGrant, User
from apps.core.auth import SessionRoleStore
from apps.core.exceptions import NotFoundError, ValidationError
from apps.core.logging import get_logger
from apps.core.saga import Saga, SagaStep, StepResults
from apps.members.models import Member
from apps.notifications.client import send_email
from apps.notifications.templates import EmailType

logger = get_logger(__name__)

INVITE_TOKEN_BYTES = 32
DEFAULT_SHUL_NAME = "Your Shul"


def generate_invite_token() -> str:
    return secrets.token_urlsafe(INVITE_TOKEN_BYTES)


def ensure_invite_token(member: Member) -> str:
    """
    Return the member's invite token, issuing one if absent.

    Issued with a conditional update so that a concurrent invite cannot
    overwrite a token already handed out; the loser reads the stored value.
    """
    if member.invite_token:
        return member.invite_token

    token = generate_invite_token()
    updated = Member.objects.filter(id=member.id, invite_token__isnull=True).update(
        invite_token=token
    )
    if updated:
        member.invite_token = token
        logger.info(
            "invite_token_issued",
            member_id=member.id,
            organization_id=member.organization_id,
        )
    else:
        member.refresh_from_db(fields=["invite_token"])
    return member.invite_token


@dataclass
class InviteResult:
    type: str
    email_result: dict[str, Any]
    invite_token: str


def invite_member(
    store: SessionRoleStore,
    member_id: Any,
    origin: str | None = None,
) -> InviteResult:
    """
    Email a member a link to claim portal access.

    Brand-new emails get the setup link; emails that already have an identity
    get the accept-invite link. The token is reused across invites and stays
    persisted even when the email fails.

    Raises:
        AuthorizationError: No resolved session (checked before any read)
        ValidationError: Missing member id, or member without email
        NotFoundError: Unknown member, or one outside the caller's tenants
        DownstreamFailure: Identity lookup or email send failed
    """
    store.require_principal()

    if member_id in (None, ""):
        raise ValidationError("Missing memberId")

    members = store.scope.apply(Member.objects.select_related("organization"))
    try:
        member = members.get(id=member_id)
    except (Member.DoesNotExist, ValueError, TypeError) as e:
        raise NotFoundError("Member not found") from e

    if not member.email:
        raise ValidationError("Member has no email address")

    token = ensure_invite_token(member)

    base_url = (origin or settings.PUBLIC_URL).rstrip("/")
    if identity.find_identity_by_email(member.email):
        email_type = EmailType.EXISTING_MEMBER_INVITE
        action_url = f"{base_url}/portal/accept-invite?token={token}"
    else:
        email_type = EmailType.MEMBER_INVITE
        action_url = f"{base_url}/portal/setup?token={token}"

    organization = member.organization
    email_result = send_email(
        email_type,
        to=member.email,
        shul_name=organization.name or DEFAULT_SHUL_NAME,
        member_name=member.full_name,
        setup_url=action_url,
        portal_url=f"{base_url}/portal",
        admin_email=organization.email,
    )

    logger.info(
        "member_invite_sent",
        member_id=member.id,
        organization_id=organization.id,
        email_type=email_type,
    )
    return InviteResult(type=email_type, email_result=email_result, invite_token=token)


@dataclass
class InviteClaimResult:
    user: User
    member: Member
    session: identity.SessionTokens | None = None


def complete_invite_signup(token: str, password: str) -> InviteClaimResult:
    """
    Claim an invite: create the member's identity and link it.

    A failed link deletes the new identity. The member role and the
    auto-login are best-effort; a missing session means the caller logs in
    manually.

    Raises:
        ValidationError: Missing input, unknown token, or already claimed
        IdentityRejected: Stytch refused the identity (e.g. email registered)
        DownstreamFailure: The member link failed (undone)
    """
    if not token or not password:
        raise ValidationError("Missing token or password")

    try:
        member = Member.objects.select_related("organization").get(invite_token=token)
    except Member.DoesNotExist as e:
        raise ValidationError("Invalid or expired invitation token") from e
    if member.user_id is not None:
        raise ValidationError("This invitation has already been claimed.")

    def create_user(results: StepResults) -> User:
        return identity.create_identity(
            member.email,
            password,
            first_name=member.first_name,
            last_name=member.last_name,
        )

    def delete_user(results: StepResults) -> None:
        identity.delete_identity(results["identity"])

    def link_member(results: StepResults) -> Member:
        claimed = Member.objects.filter(
            id=member.id,
            invite_token=token,
            user__isnull=True,
        ).update(
            user=results["identity"],
            invite_token=None,
            password_set_at=timezone.now(),
        )
        if not claimed:
            raise ValidationError("This invitation has already been claimed.")
        member.refresh_from_db()
        return member

    def grant_member_role(results: StepResults) -> RoleGrant:
        return RoleGrant.objects.create(
            user=results["identity"],
            role=Roles.MEMBER,
            organization_id=member.organization_id,
        )

    def start_session(results: StepResults) -> identity.SessionTokens:
        return identity.start_session(member.email, password)

    saga = Saga(
        "invite_claim",
        [
            SagaStep("identity", create_user, compensation=delete_user),
            SagaStep("member", link_member),
            SagaStep("role", grant_member_role, best_effort=True),
            SagaStep("session", start_session, best_effort=True),
        ],
    )
    result = saga.run()

    user = result.results["identity"]
    logger.info(
        "member_invite_claimed",
        member_id=member.id,
        organization_id=member.organization_id,
        **{"usr.id": user.stytch_user_id},
    )
    return InviteClaimResult(
        user=user,
        member=result.results["member"],
        session=result.results.get("session"),
    )


@dataclass
class InviteAcceptResult:
    member: Member
    shul_name: str


def accept_member_invite(store: SessionRoleStore, token: str) -> InviteAcceptResult:
    """
    Claim an invite for the signed-in identity.

    Used by members who already had an identity when invited (the
    accept-invite link). The member row is linked to the caller and the token
    cleared; the member role is best-effort.

    Raises:
        AuthorizationError: No resolved session
        ValidationError: Missing or unknown token, already claimed, or a
            session without a local profile
        DownstreamFailure: The member link failed
    """
    principal = store.require_principal()
    if not token:
        raise ValidationError("Missing token")

    user = principal.user
    if user is None:
        raise ValidationError("No account profile for this session")

    try:
        member = Member.objects.select_related("organization").get(invite_token=token)
    except Member.DoesNotExist as e:
        raise ValidationError("Invalid or expired invitation token") from e
    if member.user_id is not None:
        raise ValidationError("This invitation has already been claimed.")

    def link_member(results: StepResults) -> Member:
        claimed = Member.objects.filter(
            id=member.id,
            invite_token=token,
            user__isnull=True,
        ).update(user=user, invite_token=None)
        if not claimed:
            raise ValidationError("This invitation has already been claimed.")
        member.refresh_from_db()
        return member

    def grant_member_role(results: StepResults) -> RoleGrant:
        grant, _ = RoleGrant.objects.get_or_create(
            user=user,
            role=Roles.MEMBER,
            organization_id=member.organization_id,
        )
        return grant

    saga = Saga(
        "invite_accept",
        [
            SagaStep("member", link_member),
            SagaStep("role", grant_member_role, best_effort=True),
        ],
    )
    result = saga.run()

    logger.info(
        "member_invite_accepted",
        member_id=member.id,
        organization_id=member.organization_id,
        **{"usr.id": principal.user_id},
    )
    return InviteAcceptResult(
        member=result.results["member"],
        shul_name=member.organization.name,
    )
