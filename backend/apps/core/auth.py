"""
Session/role store for the request lifecycle.

StytchAuthMiddleware builds one SessionRoleStore per request and attaches it as
request.auth_store. Endpoints and services read the principal, its role grants,
and the derived tenant scope from it instead of from global state.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any

from apps.accounts.constants import AuthEvents, Roles
from apps.core.exceptions import AuthorizationError, PermissionDeniedError
from apps.core.logging import get_logger
from apps.core.tenancy import TenantScope, resolve_tenant_scope

if TYPE_CHECKING:
    from apps.accounts.models import RoleGrant, User

logger = get_logger(__name__)


@dataclass(frozen=True)
class Principal:
    """
    The authenticated actor behind a session.

    Attributes:
        user_id: Stytch user_id, the stable identity reference
        email: Primary email of the identity
        session_expires_at: End of the session validity window, if known
        user: Local profile mirror, if one exists
    """

    user_id: str
    email: str = ""
    session_expires_at: datetime | None = None
    user: "User | None" = None


GrantFetcher = Callable[[Principal], Sequence["RoleGrant"]]


class SessionRoleStore:
    """
    Holds the current principal and its resolved role grants.

    loading stays True until grants have been fetched for a non-anonymous
    principal, so callers never act on a half-resolved session. A failing
    grant fetch resolves to zero grants rather than leaving loading set.
    failed marks a bearer credential that was presented but rejected, so a
    401 can say why.
    """

    def __init__(self, fetch_grants: GrantFetcher) -> None:
        self._fetch_grants = fetch_grants
        self.principal: Principal | None = None
        self.grants: list[Any] = []
        self.loading = True
        self.failed = False

    # --- Lifecycle ---

    def init(self, principal: Principal | None) -> None:
        """Start the session lifecycle for a principal (or anonymous)."""
        self._resolve(principal)

    def handle_auth_change(self, event: str, principal: Principal | None) -> None:
        """React to a credential change reported by the identity provider."""
        if event == AuthEvents.SIGNED_OUT or principal is None:
            self.sign_out()
            return
        self.loading = True
        self._resolve(principal)

    def sign_out(self) -> None:
        """Drop grants first, then the principal."""
        self.grants = []
        self.principal = None
        self.loading = False

    def teardown(self) -> None:
        """End the lifecycle. Nothing is revoked upstream."""
        self.sign_out()

    def _resolve(self, principal: Principal | None) -> None:
        self.principal = principal
        if principal is None:
            self.grants = []
            self.loading = False
            return

        try:
            self.grants = list(self._fetch_grants(principal))
        except Exception:
            logger.exception("role_grant_fetch_failed", **{"usr.id": principal.user_id})
            self.grants = []
        finally:
            self.loading = False

    # --- Queries ---

    @property
    def is_authenticated(self) -> bool:
        return self.principal is not None and not self.loading

    @property
    def scope(self) -> TenantScope:
        """Tenant scope of the current grants. Empty while loading or anonymous."""
        if self.loading or self.principal is None:
            return TenantScope()
        return resolve_tenant_scope(self.grants)

    @property
    def is_platform_owner(self) -> bool:
        return self.scope.is_platform_owner

    def is_org_admin(self, organization_id: Any) -> bool:
        """Check for an admin grant on the organization (platform owners qualify)."""
        if self.is_platform_owner:
            return True
        return any(
            grant.role == Roles.ADMIN and grant.organization_id == organization_id
            for grant in self.grants
        )

    def require_principal(self) -> Principal:
        """
        Get the principal or raise 401.

        Raises:
            AuthorizationError: If the session is anonymous or unresolved
        """
        if not self.is_authenticated or self.principal is None:
            raise AuthorizationError("Unauthorized")
        return self.principal

    def require_platform_owner(self) -> Principal:
        """
        Get the principal and verify platform-wide authority.

        Raises:
            AuthorizationError: If not authenticated
            PermissionDeniedError: If not a platform owner
        """
        principal = self.require_principal()
        if not self.is_platform_owner:
            raise PermissionDeniedError("Platform owner access required")
        return principal
