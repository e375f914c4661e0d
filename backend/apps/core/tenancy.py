"""
Tenant scoping derived from role grants.

Every query that reads organization-owned rows goes through TenantScope.apply:
platform owners see everything, everyone else sees only the organizations their
grants reference, and a principal with no organization-scoped grant sees
nothing (the query is never executed).
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, Protocol, TypeVar

from django.db.models import Model, QuerySet

from apps.accounts.constants import Roles

M = TypeVar("M", bound=Model)


class GrantLike(Protocol):
    role: str
    organization_id: Any


@dataclass(frozen=True)
class TenantScope:
    """Which organizations a principal may act on."""

    is_platform_owner: bool = False
    organization_ids: frozenset = field(default_factory=frozenset)

    @property
    def is_empty(self) -> bool:
        """True when queries must not run at all."""
        return not self.is_platform_owner and not self.organization_ids

    def can_access(self, organization_id: Any) -> bool:
        if self.is_platform_owner:
            return True
        return organization_id in self.organization_ids

    def apply(self, queryset: QuerySet[M], field_name: str = "organization_id") -> QuerySet[M]:
        """
        Restrict a queryset to this scope.

        Args:
            queryset: Unfiltered queryset of tenant-owned rows.
            field_name: Lookup path to the owning organization's id,
                e.g. "organization_id" or "campaign__organization_id".

        Returns:
            The queryset unchanged for platform owners, an empty queryset when
            the scope is empty, otherwise a queryset filtered to the scope.
        """
        if self.is_platform_owner:
            return queryset
        if not self.organization_ids:
            return queryset.none()
        return queryset.filter(**{f"{field_name}__in": self.organization_ids})


def resolve_tenant_scope(grants: Iterable[GrantLike]) -> TenantScope:
    """Derive a TenantScope from a principal's role grants."""
    is_platform_owner = False
    organization_ids = set()
    for grant in grants:
        if grant.organization_id is None:
            if grant.role == Roles.OWNER:
                is_platform_owner = True
            continue
        organization_ids.add(grant.organization_id)
    return TenantScope(
        is_platform_owner=is_platform_owner,
        organization_ids=frozenset(organization_ids),
    )


def resolve_current_organization_id(
    grants: Iterable[GrantLike],
    organizations: QuerySet,
) -> Any | None:
    """
    Pick the organization a session acts within by default.

    Org-scoped grants win. A platform owner without one falls back to the first
    organization by name; returns None when none exist yet.
    """
    grants = list(grants)
    for grant in grants:
        if grant.organization_id is not None:
            return grant.organization_id

    if resolve_tenant_scope(grants).is_platform_owner:
        return organizations.order_by("name").values_list("id", flat=True).first()
    return None
