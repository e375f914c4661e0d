"""
Exceptions shared by the provisioning workflows.

Every workflow failure maps to one HTTP status and one human-readable message.
The API layer renders them as ``{"error": message}``.
"""


class ProvisioningError(Exception):
    """Base exception for workflow failures surfaced to API callers."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(ProvisioningError):
    """Malformed or missing input. Raised before any write."""

    status_code = 400


class AuthorizationError(ProvisioningError):
    """Missing or invalid bearer credential. Raised before any read."""

    status_code = 401


class PermissionDeniedError(ProvisioningError):
    """Authenticated, but the caller's grants do not allow the action."""

    status_code = 403


class NotFoundError(ProvisioningError):
    """Referenced entity is absent (or outside the caller's tenant scope)."""

    status_code = 404


class GuardViolation(ProvisioningError):
    """A one-time workflow has already run."""

    status_code = 400


class DownstreamFailure(ProvisioningError):
    """The store or an external collaborator rejected a call."""

    status_code = 500


class IdentityRejected(DownstreamFailure):
    """The identity provider refused to create the identity (e.g. duplicate email)."""

    status_code = 400


class NotificationError(DownstreamFailure):
    """The notification collaborator returned a non-success response."""

    pass
