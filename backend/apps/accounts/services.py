"""
Accounts services - role grants and the first-owner bootstrap.
"""

from dataclasses import dataclass

from django.db import IntegrityError, transaction

from apps.accounts import identity
from apps.accounts.constants import Roles
from apps.accounts.models import PlatformBootstrap, RoleGrant, User
from apps.core.auth import Principal
from apps.core.exceptions import GuardViolation, ProvisioningError
from apps.core.logging import get_logger
from apps.core.saga import Saga, SagaStep, StepResults

logger = get_logger(__name__)

OWNER_EXISTS_MESSAGE = "A Shulowner already exists"


def fetch_role_grants(principal: Principal) -> list[RoleGrant]:
    """Load every role grant held by the principal's local profile."""
    if principal.user is not None:
        user_filter = {"user": principal.user}
    else:
        user_filter = {"user__stytch_user_id": principal.user_id}
    return list(RoleGrant.objects.filter(**user_filter).order_by("created_at", "id"))


@dataclass
class BootstrapResult:
    user: User


def bootstrap_platform_owner(
    email: str,
    password: str,
    first_name: str | None = None,
    last_name: str | None = None,
) -> BootstrapResult:
    """
    Create the deployment's first platform owner.

    Runs once per deployment: refused as soon as any owner grant exists. The
    PlatformBootstrap row is claimed before the identity is created, so two
    concurrent calls cannot both pass the guard.

    Raises:
        ProvisioningError: If email or password is missing (500, like every
            bootstrap failure other than the owner guard)
        GuardViolation: If an owner exists or a bootstrap already claimed the slot
        DownstreamFailure: If Stytch refuses the identity or the owner grant
            cannot be written
    """
    if not email or not password:
        raise ProvisioningError("Email and password are required")

    def check_no_owner(results: StepResults) -> None:
        if RoleGrant.objects.filter(role=Roles.OWNER).exists():
            raise GuardViolation(OWNER_EXISTS_MESSAGE)

    def claim(results: StepResults) -> PlatformBootstrap:
        try:
            with transaction.atomic():
                return PlatformBootstrap.objects.create(id=PlatformBootstrap.SINGLETON_ID)
        except IntegrityError as e:
            raise GuardViolation(OWNER_EXISTS_MESSAGE) from e

    def release_claim(results: StepResults) -> None:
        PlatformBootstrap.objects.filter(id=results["claim"].id).delete()

    def create_user(results: StepResults) -> User:
        return identity.create_identity(email, password)

    def delete_user(results: StepResults) -> None:
        identity.delete_identity(results["identity"])

    def set_profile(results: StepResults) -> User:
        if not first_name and not last_name:
            return results["identity"]
        return identity.update_profile(results["identity"], first_name, last_name)

    def grant_owner(results: StepResults) -> RoleGrant:
        user = results["identity"]
        grant = RoleGrant.objects.create(user=user, role=Roles.OWNER, organization=None)
        PlatformBootstrap.objects.filter(id=results["claim"].id).update(user=user)
        return grant

    saga = Saga(
        "platform_owner_bootstrap",
        [
            SagaStep("guard", check_no_owner),
            SagaStep("claim", claim, compensation=release_claim),
            SagaStep(
                "identity",
                create_user,
                compensation=delete_user,
                error_message="Failed to create user",
            ),
            SagaStep("profile", set_profile, best_effort=True),
            SagaStep("owner_grant", grant_owner, error_message="Failed to assign role"),
        ],
    )
    result = saga.run()

    user = result.results["identity"]
    logger.info("platform_owner_bootstrapped", **{"usr.id": user.stytch_user_id})
    return BootstrapResult(user=user)
