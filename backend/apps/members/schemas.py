"""
Members API schemas.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class InviteMemberRequest(CamelModel):
    member_id: int | None = Field(None, description="Member to invite")
    origin: str | None = Field(
        None,
        description="Base URL for links in the email; defaults to PUBLIC_URL",
        examples=["https://shulgenius.com"],
    )


class InviteMemberResponse(CamelModel):
    success: bool = True
    type: str = Field(..., examples=["member_invite", "existing_member_invite"])
    email_result: dict[str, Any] = Field(default_factory=dict)


class CompleteInviteRequest(CamelModel):
    token: str = ""
    password: str = ""


class SessionInfo(CamelModel):
    session_token: str
    session_jwt: str


class CompleteInviteResponse(CamelModel):
    success: bool = True
    message: str | None = None
    session: SessionInfo | None = None


class AcceptInviteRequest(CamelModel):
    token: str = ""


class AcceptInviteResponse(CamelModel):
    success: bool = True
    shul_name: str
