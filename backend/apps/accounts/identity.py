"""
Identity collaborator - Stytch users, passwords, and sessions.

Stytch owns credentials and sessions. Each identity also has a local User row
holding profile fields; both are created and deleted together here.
All Stytch calls are isolated here so workflows and tests can patch one seam.
"""

from dataclasses import dataclass

from django.conf import settings
from django.db import IntegrityError, transaction
from stytch.core.response_base import StytchError

from apps.accounts.models import User
from apps.accounts.stytch_client import get_stytch_client
from apps.core.auth import Principal
from apps.core.exceptions import DownstreamFailure, IdentityRejected
from apps.core.logging import get_logger

logger = get_logger(__name__)


@dataclass
class SessionTokens:
    """Credentials returned when a session is started for a fresh identity."""

    session_token: str
    session_jwt: str


def _error_message(error: StytchError) -> str:
    details = getattr(error, "details", None)
    return getattr(details, "error_message", None) or str(error)


def create_identity(email: str, password: str, first_name: str = "", last_name: str = "") -> User:
    """
    Create a password identity, pre-verified, and its local profile.

    No confirmation email round trip: the caller has already proven intent
    (signup form, bootstrap, or invite token).

    Raises:
        IdentityRejected: If Stytch refuses the identity (duplicate email,
            weak password) or the email is already used locally.
    """
    client = get_stytch_client()

    try:
        response = client.passwords.create(email=email, password=password)
    except StytchError as e:
        logger.warning("identity_create_rejected", email=email, error=_error_message(e))
        raise IdentityRejected(_error_message(e)) from e

    try:
        with transaction.atomic():
            user = User.objects.create_user(
                email=email,
                stytch_user_id=response.user_id,
                first_name=first_name,
                last_name=last_name,
            )
    except IntegrityError as e:
        # Stytch accepted it but the local profile exists; undo the Stytch side.
        _delete_stytch_user(response.user_id)
        raise IdentityRejected("A user with this email address has already been registered") from e

    logger.info("identity_created", **{"usr.id": response.user_id, "usr.email": email})
    return user


def delete_identity(user: User) -> None:
    """
    Delete an identity and its local profile.

    The local row goes first so a failing Stytch call still leaves no profile
    behind; the Stytch failure is then raised for the caller to log.

    Raises:
        DownstreamFailure: If Stytch refuses the delete
    """
    stytch_user_id = user.stytch_user_id
    user.delete()
    if stytch_user_id:
        _delete_stytch_user(stytch_user_id, raise_on_error=True)
    logger.info("identity_deleted", **{"usr.id": stytch_user_id})


def _delete_stytch_user(stytch_user_id: str, raise_on_error: bool = False) -> None:
    try:
        get_stytch_client().users.delete(user_id=stytch_user_id)
    except StytchError as e:
        logger.error(
            "identity_delete_failed",
            **{"usr.id": stytch_user_id},
            error=_error_message(e),
        )
        if raise_on_error:
            raise DownstreamFailure(_error_message(e)) from e


def find_identity_by_email(email: str) -> str | None:
    """
    Look up an identity by email.

    Uses Stytch user search filtered on the address instead of listing every
    user.

    Returns:
        The Stytch user_id, or None when no identity uses the email.

    Raises:
        DownstreamFailure: If the search call fails
    """
    client = get_stytch_client()
    try:
        response = client.users.search(
            limit=1,
            query={
                "operator": "AND",
                "operands": [
                    {"filter_name": "email_address", "filter_value": [email.lower()]},
                ],
            },
        )
    except StytchError as e:
        raise DownstreamFailure(f"Failed to look up identity: {_error_message(e)}") from e

    if not response.results:
        return None
    return response.results[0].user_id


def update_profile(user: User, first_name: str | None, last_name: str | None) -> User:
    """Update profile names on the local mirror."""
    user.first_name = first_name or ""
    user.last_name = last_name or ""
    user.save(update_fields=["first_name", "last_name", "updated_at"])
    return user


def authenticate_session(session_jwt: str) -> Principal:
    """
    Resolve a session JWT to its principal.

    Raises:
        DownstreamFailure: If the JWT is invalid, expired, or revoked
    """
    client = get_stytch_client()
    try:
        response = client.sessions.authenticate_jwt(session_jwt=session_jwt)
    except StytchError as e:
        raise DownstreamFailure(_error_message(e)) from e

    session = response.session
    user = User.objects.filter(stytch_user_id=session.user_id).first()
    return Principal(
        user_id=session.user_id,
        email=user.email if user else "",
        session_expires_at=getattr(session, "expires_at", None),
        user=user,
    )


def revoke_session(session_jwt: str) -> None:
    """Revoke a session. An already invalid session is not an error."""
    try:
        get_stytch_client().sessions.revoke(session_jwt=session_jwt)
    except StytchError as e:
        logger.info("session_revoke_skipped", error=_error_message(e))


def start_session(email: str, password: str) -> SessionTokens:
    """
    Log a freshly created identity in with its password.

    Raises:
        DownstreamFailure: If Stytch refuses the credentials
    """
    client = get_stytch_client()
    try:
        response = client.passwords.authenticate(
            email=email,
            password=password,
            session_duration_minutes=settings.STYTCH_SESSION_DURATION_MINUTES,
        )
    except StytchError as e:
        raise DownstreamFailure(_error_message(e)) from e

    return SessionTokens(session_token=response.session_token, session_jwt=response.session_jwt)
