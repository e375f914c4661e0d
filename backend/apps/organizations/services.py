"""
Organization services - owner signup, organization provisioning and
administrative updates.

Each provisioning run is a Saga: the identity lives in Stytch and the rows
live in the database, so there is no single transaction to roll back. Every
required step registers an undo; best-effort steps only log.
"""

import re
import threading
import time
from dataclasses import dataclass, field
from decimal import Decimal

from django.conf import settings
from django.db import transaction

from apps.accounts import identity
from apps.accounts.constants import Roles
from apps.accounts.models import RoleGrant, User
from apps.billing.models import PaymentProcessor
from apps.core.auth import SessionRoleStore
from apps.core.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from apps.core.logging import get_logger
from apps.core.saga import Saga, SagaStep, StepResults
from apps.core.tenancy import resolve_current_organization_id
from apps.members.models import Member
from apps.notifications.client import send_email
from apps.notifications.templates import EmailType
from apps.organizations.models import Organization, OrganizationSettings

logger = get_logger(__name__)

SLUG_BASE_MAX_LENGTH = 30
MIN_PASSWORD_LENGTH = 6
MIN_ORGANIZATION_NAME_LENGTH = 2

_BASE36_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"
_suffix_lock = threading.Lock()
_last_suffix_ms = 0


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36_DIGITS[remainder])
    return "".join(reversed(digits))


def _next_suffix_ms() -> int:
    """Current time in ms, bumped so that no two calls in this process repeat."""
    global _last_suffix_ms
    with _suffix_lock:
        now_ms = time.time_ns() // 1_000_000
        _last_suffix_ms = max(now_ms, _last_suffix_ms + 1)
        return _last_suffix_ms


def slugify_organization_name(name: str) -> str:
    """
    Build a unique slug: "Beth Israel" -> "beth-israel-lz3k9q1a".

    The readable part keeps [a-z0-9-] only and is capped at 30 characters; the
    suffix is the base-36 creation time in milliseconds.
    """
    base = name.strip().lower()
    base = re.sub(r"[^a-z0-9\s-]", "", base)
    base = re.sub(r"\s+", "-", base)
    base = re.sub(r"-+", "-", base)
    base = base[:SLUG_BASE_MAX_LENGTH].strip("-")

    suffix = _to_base36(_next_suffix_ms())
    return f"{base}-{suffix}" if base else suffix


def _create_organization_row(name: str, **contact: str) -> Organization:
    with transaction.atomic():
        return Organization.objects.create(
            name=name.strip(),
            slug=slugify_organization_name(name),
            **contact,
        )


def _create_default_settings(organization: Organization) -> OrganizationSettings:
    return OrganizationSettings.objects.create(
        organization=organization,
        active_processor=settings.DEFAULT_ACTIVE_PROCESSOR,
    )


def _delete_organization(organization: Organization) -> None:
    Organization.objects.filter(id=organization.id).delete()


def _split_display_name(name: str) -> tuple[str, str]:
    """Derive member first/last names from a display name ("Beth Israel" -> Beth, Israel)."""
    first, _, rest = (name.strip() or "Admin").partition(" ")
    return first, rest.strip() or "Admin"


# --- Owner signup ---


@dataclass
class SignupResult:
    user: User
    organization: Organization
    skipped_steps: list[str] = field(default_factory=list)


def validate_signup(email: str, password: str, organization_name: str) -> None:
    """
    Raises:
        ValidationError: On the first failing rule
    """
    if not email or not password or not organization_name:
        raise ValidationError("Email, password, and organization name are required")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    if len(organization_name.strip()) < MIN_ORGANIZATION_NAME_LENGTH:
        raise ValidationError(
            f"Organization name must be at least {MIN_ORGANIZATION_NAME_LENGTH} characters"
        )


def signup_owner(email: str, password: str, organization_name: str) -> SignupResult:
    """
    Self-service signup: a new identity plus the organization it administers.

    Steps, in order:
        identity          Stytch password user (pre-verified) + local profile
        organization      undo: identity deleted
        role              admin grant on the new organization;
                          undo: organization, then identity, deleted
        member            best-effort owner member record
        settings          best-effort default OrganizationSettings
        welcome_email     best-effort

    Not idempotent: each call creates a new organization.

    Raises:
        ValidationError: Before any write, on bad input
        IdentityRejected: Stytch refused the identity (nothing to undo)
        DownstreamFailure: Organization or role write failed (undone)
    """
    validate_signup(email, password, organization_name)

    def create_user(results: StepResults) -> User:
        return identity.create_identity(email, password)

    def delete_user(results: StepResults) -> None:
        identity.delete_identity(results["identity"])

    def create_org(results: StepResults) -> Organization:
        return _create_organization_row(organization_name)

    def delete_org(results: StepResults) -> None:
        _delete_organization(results["organization"])

    def grant_admin(results: StepResults) -> RoleGrant:
        return RoleGrant.objects.create(
            user=results["identity"],
            role=Roles.ADMIN,
            organization=results["organization"],
        )

    def create_member(results: StepResults) -> Member:
        first_name, last_name = _split_display_name(results["organization"].name)
        return Member.objects.create(
            organization=results["organization"],
            user=results["identity"],
            email=email,
            first_name=first_name,
            last_name=last_name,
            is_active=True,
            balance=Decimal("0"),
        )

    def create_settings(results: StepResults) -> OrganizationSettings:
        return _create_default_settings(results["organization"])

    def send_welcome(results: StepResults) -> dict:
        org = results["organization"]
        base_url = settings.PUBLIC_URL.rstrip("/")
        return send_email(
            EmailType.WELCOME_SHUL,
            to=email,
            shul_name=org.name,
            portal_url=f"{base_url}/login",
            public_page_url=f"{base_url}/s/{org.slug}",
        )

    saga = Saga(
        "owner_signup",
        [
            SagaStep("identity", create_user, compensation=delete_user),
            SagaStep(
                "organization",
                create_org,
                compensation=delete_org,
                error_message="Failed to create organization",
            ),
            SagaStep("role", grant_admin, error_message="Failed to assign role"),
            SagaStep("member", create_member, best_effort=True),
            SagaStep("settings", create_settings, best_effort=True),
            SagaStep("welcome_email", send_welcome, best_effort=True),
        ],
    )
    result = saga.run()

    user = result.results["identity"]
    organization = result.results["organization"]
    logger.info(
        "owner_signup_completed",
        organization_id=organization.id,
        skipped_steps=result.skipped,
        **{"usr.id": user.stytch_user_id},
    )
    return SignupResult(user=user, organization=organization, skipped_steps=result.skipped)


# --- Platform-owner provisioning ---


def create_organization(
    store: SessionRoleStore,
    name: str,
    email: str = "",
    phone: str = "",
    address: str = "",
) -> Organization:
    """
    Create an organization with its default settings, as a platform owner.

    Settings are required here: a settings failure deletes the organization.

    Raises:
        AuthorizationError: No session
        PermissionDeniedError: Caller is not a platform owner
        ValidationError: Name too short
        DownstreamFailure: A write failed (undone)
    """
    store.require_platform_owner()
    if len((name or "").strip()) < MIN_ORGANIZATION_NAME_LENGTH:
        raise ValidationError(
            f"Organization name must be at least {MIN_ORGANIZATION_NAME_LENGTH} characters"
        )

    saga = Saga(
        "organization_create",
        [
            SagaStep(
                "organization",
                lambda results: _create_organization_row(
                    name, email=email or "", phone=phone or "", address=address or ""
                ),
                compensation=lambda results: _delete_organization(results["organization"]),
                error_message="Failed to create organization",
            ),
            SagaStep(
                "settings",
                lambda results: _create_default_settings(results["organization"]),
                error_message="Failed to create organization settings",
            ),
        ],
    )
    organization = saga.run().results["organization"]
    logger.info("organization_created", organization_id=organization.id, slug=organization.slug)
    return organization


def list_organizations(store: SessionRoleStore) -> list[Organization]:
    """Organizations visible to the session, by name."""
    store.require_principal()
    return list(store.scope.apply(Organization.objects.all(), field_name="id"))


def get_current_organization(store: SessionRoleStore) -> Organization | None:
    """The organization the session acts within by default, if any."""
    store.require_principal()
    organization_id = resolve_current_organization_id(store.grants, Organization.objects.all())
    if organization_id is None:
        return None
    organizations = store.scope.apply(Organization.objects.all(), field_name="id")
    return organizations.filter(id=organization_id).first()


# --- Administrative updates ---

ORGANIZATION_UPDATE_FIELDS = frozenset({"name", "email", "phone", "address", "logo_url"})
SETTINGS_UPDATE_FIELDS = frozenset(
    {
        "active_processor",
        "stripe_account_id",
        "stripe_publishable_key",
        "cardknox_ifields_key",
        "cardknox_transaction_key",
    }
)


def _get_administered_organization(store: SessionRoleStore, organization_id: int) -> Organization:
    """
    Fetch an organization the caller may administer.

    Organizations outside the caller's scope are reported as missing; members
    without an admin grant on an organization they can see get a 403.
    """
    store.require_principal()
    organization = (
        store.scope.apply(Organization.objects.all(), field_name="id")
        .filter(id=organization_id)
        .first()
    )
    if organization is None:
        raise NotFoundError("Organization not found")
    if not store.is_org_admin(organization.id):
        raise PermissionDeniedError("Organization admin access required")
    return organization


def _check_update_fields(fields: dict, allowed: frozenset) -> None:
    unknown = sorted(set(fields) - allowed)
    if unknown:
        raise ValidationError(f"Unknown fields: {', '.join(unknown)}")


def update_organization(
    store: SessionRoleStore, organization_id: int, **fields: str
) -> Organization:
    """
    Update an organization's name or contact fields. The slug never changes.

    Raises:
        AuthorizationError: No session
        NotFoundError: Unknown organization, or one outside the caller's scope
        PermissionDeniedError: Caller is not an admin of the organization
        ValidationError: Unknown field or name too short
    """
    organization = _get_administered_organization(store, organization_id)
    _check_update_fields(fields, ORGANIZATION_UPDATE_FIELDS)

    if "name" in fields:
        fields["name"] = (fields["name"] or "").strip()
        if len(fields["name"]) < MIN_ORGANIZATION_NAME_LENGTH:
            raise ValidationError(
                f"Organization name must be at least {MIN_ORGANIZATION_NAME_LENGTH} characters"
            )
    if not fields:
        return organization

    for name, value in fields.items():
        setattr(organization, name, value or "")
    organization.save(update_fields=[*fields, "updated_at"])

    logger.info("organization_updated", organization_id=organization.id, fields=sorted(fields))
    return organization


def update_organization_settings(
    store: SessionRoleStore, organization_id: int, **fields: str
) -> OrganizationSettings:
    """
    Update the processor selector and per-processor credentials.

    Creates the settings row when signup skipped it.

    Raises:
        AuthorizationError: No session
        NotFoundError: Unknown organization, or one outside the caller's scope
        PermissionDeniedError: Caller is not an admin of the organization
        ValidationError: Unknown field or processor kind
    """
    organization = _get_administered_organization(store, organization_id)
    _check_update_fields(fields, SETTINGS_UPDATE_FIELDS)

    active_processor = fields.get("active_processor")
    if active_processor and active_processor not in PaymentProcessor.ProcessorType.values:
        raise ValidationError(f"Unknown payment processor: {active_processor}")

    org_settings, _ = OrganizationSettings.objects.get_or_create(
        organization=organization,
        defaults={"active_processor": settings.DEFAULT_ACTIVE_PROCESSOR},
    )
    if not fields:
        return org_settings

    for name, value in fields.items():
        setattr(org_settings, name, value or "")
    org_settings.save(update_fields=[*fields, "updated_at"])

    # Field names only; the values are credentials.
    logger.info(
        "organization_settings_updated",
        organization_id=organization.id,
        fields=sorted(fields),
    )
    return org_settings
