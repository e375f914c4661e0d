"""
Accounts API schemas - Pydantic models for request/response.

Field names are camelCase on the wire; Python code uses snake_case.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Request Schemas ---


class SignupRequest(CamelModel):
    """Self-service owner signup."""

    email: str = Field(
        "",
        description="Owner email address, used as the login",
        examples=["rabbi@bethisrael.org"],
    )
    password: str = Field("", description="At least 6 characters")
    organization_name: str = Field(
        "",
        description="Display name of the new shul",
        examples=["Congregation Beth Israel"],
    )


class SetupOwnerRequest(CamelModel):
    """First platform owner bootstrap."""

    email: str = Field("", examples=["owner@shulgenius.com"])
    password: str = Field("")
    first_name: str | None = Field(None, max_length=150)
    last_name: str | None = Field(None, max_length=150)


# --- Response Schemas ---


class SignupUser(CamelModel):
    id: str = Field(..., description="Stytch user ID")
    email: str


class SignupOrganization(CamelModel):
    id: int
    name: str
    slug: str


class SignupResponse(CamelModel):
    success: bool = True
    user: SignupUser
    organization: SignupOrganization


class SetupOwnerResponse(CamelModel):
    success: bool = True
    message: str = "Shulowner account created successfully"
    user_id: str = Field(..., description="Stytch user ID of the new owner")


class PrincipalInfo(CamelModel):
    user_id: str
    email: str
    first_name: str = ""
    last_name: str = ""
    session_expires_at: datetime | None = None


class RoleGrantInfo(CamelModel):
    role: str
    organization_id: int | None = Field(None, description="Null for platform-wide grants")


class ScopeInfo(CamelModel):
    is_platform_owner: bool
    organization_ids: list[int]


class MeResponse(CamelModel):
    """Current principal with its grants and derived tenant scope."""

    principal: PrincipalInfo
    grants: list[RoleGrantInfo]
    scope: ScopeInfo
