"""
Role and auth event constants.

Role values are stored on RoleGrant rows and must stay stable.
"""


class Roles:
    """
    Application role identifiers.

    A grant's scope comes from its organization reference, not from the role
    name alone: only OWNER with no organization is platform-wide.
    """

    OWNER = "owner"
    """Platform owner when unscoped. Created once by the bootstrap workflow."""

    ADMIN = "admin"
    """Organization administrator. Granted to the signer of a new organization."""

    MEMBER = "member"
    """Congregant with portal access. Granted when an invite is claimed."""

    CHOICES = [
        (OWNER, "Owner"),
        (ADMIN, "Admin"),
        (MEMBER, "Member"),
    ]


class AuthEvents:
    """Credential change events raised by the identity provider."""

    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"
    USER_UPDATED = "USER_UPDATED"
