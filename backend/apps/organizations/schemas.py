"""
Organizations API schemas.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CreateOrganizationRequest(CamelModel):
    name: str = Field(..., examples=["Congregation Beth Israel"])
    email: str = ""
    phone: str = ""
    address: str = ""


class OrganizationResponse(CamelModel):
    id: int
    name: str
    slug: str
    email: str = ""
    phone: str = ""
    address: str = ""
    logo_url: str = ""
    created_at: datetime


class OrganizationListResponse(CamelModel):
    organizations: list[OrganizationResponse]


class CurrentOrganizationResponse(CamelModel):
    organization: OrganizationResponse | None = None


class UpdateOrganizationRequest(CamelModel):
    """Only fields present in the body are changed."""

    name: str | None = None
    email: EmailStr | None = Field(None, examples=["office@bethisrael.org"])
    phone: str | None = None
    address: str | None = None
    logo_url: str | None = None


class UpdateSettingsRequest(CamelModel):
    """Only fields present in the body are changed."""

    active_processor: str | None = Field(None, examples=["stripe", "cardknox"])
    stripe_account_id: str | None = None
    stripe_publishable_key: str | None = None
    cardknox_ifields_key: str | None = None
    cardknox_transaction_key: str | None = None


class OrganizationSettingsResponse(CamelModel):
    organization_id: int
    active_processor: str
    stripe_account_id: str
    stripe_publishable_key: str
    cardknox_ifields_key: str
    has_cardknox_transaction_key: bool = Field(
        ..., description="The transaction key itself is never returned"
    )
