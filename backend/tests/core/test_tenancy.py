"""
Tests for tenant scope resolution and query scoping.
"""

from dataclasses import dataclass
from typing import Any

import pytest

from apps.accounts.constants import Roles
from apps.core.tenancy import TenantScope, resolve_current_organization_id, resolve_tenant_scope
from apps.members.models import Member
from apps.organizations.models import Organization
from tests.accounts.factories import OrganizationFactory
from tests.members.factories import MemberFactory


@dataclass
class Grant:
    role: str
    organization_id: Any = None


class TestResolveTenantScope:
    """Tests for resolve_tenant_scope."""

    @pytest.mark.parametrize(
        "others",
        [
            [],
            [Grant(Roles.ADMIN, 1)],
            [Grant(Roles.MEMBER, 2), Grant(Roles.ADMIN, 3)],
            [Grant(Roles.ADMIN, None), Grant(Roles.OWNER, 4)],
        ],
    )
    def test_unscoped_owner_is_platform_wide(self, others):
        """An owner grant with no organization wins regardless of other grants."""
        scope = resolve_tenant_scope([*others, Grant(Roles.OWNER, None)])

        assert scope.is_platform_owner is True
        assert scope.is_empty is False

    def test_org_scoped_owner_is_not_platform_wide(self):
        """An owner grant on one organization only scopes that organization."""
        scope = resolve_tenant_scope([Grant(Roles.OWNER, 7)])

        assert scope.is_platform_owner is False
        assert scope.organization_ids == frozenset({7})

    def test_collects_distinct_organization_ids(self):
        """Organization ids are de-duplicated across grants."""
        scope = resolve_tenant_scope(
            [Grant(Roles.ADMIN, 1), Grant(Roles.MEMBER, 1), Grant(Roles.MEMBER, 2)]
        )

        assert scope.organization_ids == frozenset({1, 2})

    def test_unscoped_non_owner_grants_grant_nothing(self):
        """Admin or member grants without an organization do not widen scope."""
        scope = resolve_tenant_scope([Grant(Roles.ADMIN, None), Grant(Roles.MEMBER, None)])

        assert scope.is_empty is True

    def test_no_grants_is_empty(self):
        """No grants at all means fail closed."""
        assert resolve_tenant_scope([]).is_empty is True

    def test_can_access(self):
        """can_access honours platform owners and scoped ids."""
        assert TenantScope(is_platform_owner=True).can_access(99) is True
        assert TenantScope(organization_ids=frozenset({1})).can_access(1) is True
        assert TenantScope(organization_ids=frozenset({1})).can_access(2) is False
        assert TenantScope().can_access(1) is False


@pytest.mark.django_db
class TestTenantScopeApply:
    """Tests for TenantScope.apply on real querysets."""

    def test_platform_owner_query_is_unfiltered(self):
        """Platform owners see every tenant's rows."""
        MemberFactory.create_batch(2)
        MemberFactory.create()

        qs = TenantScope(is_platform_owner=True).apply(Member.objects.all())

        assert qs.count() == 3

    def test_scoped_query_filters_to_organizations(self):
        """Only rows of scoped organizations come back."""
        mine = MemberFactory.create()
        MemberFactory.create()

        scope = TenantScope(organization_ids=frozenset({mine.organization_id}))
        qs = scope.apply(Member.objects.all())

        assert list(qs) == [mine]

    def test_empty_scope_never_executes_query(self, django_assert_num_queries):
        """An empty scope yields an empty queryset without touching the database."""
        MemberFactory.create()

        qs = TenantScope().apply(Member.objects.all())

        with django_assert_num_queries(0):
            assert list(qs) == []

    def test_custom_field_name(self):
        """Organizations themselves are scoped by their primary key."""
        org = OrganizationFactory.create()
        OrganizationFactory.create()

        qs = TenantScope(organization_ids=frozenset({org.id})).apply(
            Organization.objects.all(), field_name="id"
        )

        assert list(qs) == [org]


@pytest.mark.django_db
class TestResolveCurrentOrganization:
    """Tests for resolve_current_organization_id."""

    def test_first_org_scoped_grant_wins(self):
        """The first organization referenced by a grant is current."""
        org_id = resolve_current_organization_id(
            [Grant(Roles.OWNER, None), Grant(Roles.ADMIN, 5), Grant(Roles.MEMBER, 6)],
            Organization.objects.all(),
        )

        assert org_id == 5

    def test_platform_owner_falls_back_to_first_by_name(self):
        """Owners without org grants act within the alphabetically first org."""
        OrganizationFactory.create(name="Young Israel")
        first = OrganizationFactory.create(name="Anshei Chesed")

        org_id = resolve_current_organization_id(
            [Grant(Roles.OWNER, None)], Organization.objects.all()
        )

        assert org_id == first.id

    def test_platform_owner_without_organizations(self):
        """No organizations yet means no current organization."""
        org_id = resolve_current_organization_id(
            [Grant(Roles.OWNER, None)], Organization.objects.all()
        )

        assert org_id is None

    def test_no_grants(self):
        """Sessions without grants have no current organization."""
        OrganizationFactory.create()

        assert resolve_current_organization_id([], Organization.objects.all()) is None
