"""
Organizations API endpoints.

Reads are restricted to the caller's tenant scope; creation is reserved for
platform owners and updates for organization admins.
"""

from ninja import Router

from apps.core.schemas import ErrorResponse
from apps.core.security import BearerAuth
from apps.core.types import AuthenticatedHttpRequest
from apps.organizations.models import Organization
from apps.organizations.schemas import (
    CreateOrganizationRequest,
    CurrentOrganizationResponse,
    OrganizationListResponse,
    OrganizationResponse,
    OrganizationSettingsResponse,
    UpdateOrganizationRequest,
    UpdateSettingsRequest,
)
from apps.organizations.services import (
    create_organization,
    get_current_organization,
    list_organizations,
    update_organization,
    update_organization_settings,
)

router = Router(tags=["organizations"])
bearer_auth = BearerAuth()


def _to_response(organization: Organization) -> OrganizationResponse:
    return OrganizationResponse(
        id=organization.id,
        name=organization.name,
        slug=organization.slug,
        email=organization.email,
        phone=organization.phone,
        address=organization.address,
        logo_url=organization.logo_url,
        created_at=organization.created_at,
    )


@router.get(
    "",
    response={200: OrganizationListResponse, 401: ErrorResponse},
    auth=bearer_auth,
    by_alias=True,
    operation_id="listOrganizations",
    summary="List organizations visible to the session",
)
def list_visible(request: AuthenticatedHttpRequest) -> OrganizationListResponse:
    organizations = list_organizations(request.auth_store)
    return OrganizationListResponse(organizations=[_to_response(org) for org in organizations])


@router.get(
    "/current",
    response={200: CurrentOrganizationResponse, 401: ErrorResponse},
    auth=bearer_auth,
    by_alias=True,
    operation_id="getCurrentOrganization",
    summary="Get the organization the session acts within",
)
def get_current(request: AuthenticatedHttpRequest) -> CurrentOrganizationResponse:
    organization = get_current_organization(request.auth_store)
    return CurrentOrganizationResponse(
        organization=_to_response(organization) if organization else None
    )


@router.post(
    "",
    response={
        200: OrganizationResponse,
        400: ErrorResponse,
        401: ErrorResponse,
        403: ErrorResponse,
        500: ErrorResponse,
    },
    auth=bearer_auth,
    by_alias=True,
    operation_id="createOrganization",
    summary="Create an organization (platform owners only)",
)
def create(
    request: AuthenticatedHttpRequest, payload: CreateOrganizationRequest
) -> OrganizationResponse:
    organization = create_organization(
        request.auth_store,
        payload.name,
        email=payload.email,
        phone=payload.phone,
        address=payload.address,
    )
    return _to_response(organization)


@router.patch(
    "/{organization_id}",
    response={
        200: OrganizationResponse,
        400: ErrorResponse,
        401: ErrorResponse,
        403: ErrorResponse,
        404: ErrorResponse,
    },
    auth=bearer_auth,
    by_alias=True,
    operation_id="updateOrganization",
    summary="Update organization details (organization admins)",
)
def update(
    request: AuthenticatedHttpRequest, organization_id: int, payload: UpdateOrganizationRequest
) -> OrganizationResponse:
    organization = update_organization(
        request.auth_store, organization_id, **payload.model_dump(exclude_unset=True)
    )
    return _to_response(organization)


@router.patch(
    "/{organization_id}/settings",
    response={
        200: OrganizationSettingsResponse,
        400: ErrorResponse,
        401: ErrorResponse,
        403: ErrorResponse,
        404: ErrorResponse,
    },
    auth=bearer_auth,
    by_alias=True,
    operation_id="updateOrganizationSettings",
    summary="Update payment processor settings (organization admins)",
)
def update_settings(
    request: AuthenticatedHttpRequest, organization_id: int, payload: UpdateSettingsRequest
) -> OrganizationSettingsResponse:
    """Credentials are write-only; the transaction key is reported as present or not."""
    org_settings = update_organization_settings(
        request.auth_store, organization_id, **payload.model_dump(exclude_unset=True)
    )
    return OrganizationSettingsResponse(
        organization_id=org_settings.organization_id,
        active_processor=org_settings.active_processor,
        stripe_account_id=org_settings.stripe_account_id,
        stripe_publishable_key=org_settings.stripe_publishable_key,
        cardknox_ifields_key=org_settings.cardknox_ifields_key,
        has_cardknox_transaction_key=bool(org_settings.cardknox_transaction_key),
    )
