"""
Shared pytest fixtures for all tests.

This module provides common fixtures used across multiple test modules.
Individual test modules can override these fixtures if needed.

Factories
---------
Import factories directly from their modules:

    from tests.accounts.factories import UserFactory, OrganizationFactory, RoleGrantFactory
    from tests.members.factories import MemberFactory
    from tests.billing.factories import PaymentProcessorFactory, CampaignFactory

Example usage:

    @pytest.mark.django_db
    def test_something():
        grant = RoleGrantFactory.create(role="admin")
        store = make_store(grant.user)
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, cast
from unittest.mock import MagicMock

import pytest
from django.http import HttpRequest
from django.test import Client, RequestFactory

from apps.accounts.services import fetch_role_grants
from apps.core.auth import Principal, SessionRoleStore
from apps.core.types import AuthenticatedHttpRequest


class MockRequest(HttpRequest):
    """
    HttpRequest subclass for tests that allows setting auth_store.

    Example:
        request = MockRequest()
        request.auth_store = make_store(user)
    """

    auth_store: SessionRoleStore


def make_principal(user: Any) -> Principal:
    """Principal for a local User, as StytchAuthMiddleware would build it."""
    return Principal(user_id=user.stytch_user_id, email=user.email, user=user)


def make_store(user: Any = None) -> SessionRoleStore:
    """
    Build a resolved SessionRoleStore for a user (anonymous when None).

    Grants are read from the database, exactly as in a request.
    """
    store = SessionRoleStore(fetch_role_grants)
    store.init(make_principal(user) if user is not None else None)
    return store


def make_request_with_store(request: HttpRequest, store: SessionRoleStore) -> AuthenticatedHttpRequest:
    """Set auth_store on a request and return it typed as AuthenticatedHttpRequest."""
    request.auth_store = store  # type: ignore[attr-defined]
    return cast(AuthenticatedHttpRequest, request)


@dataclass
class MockStytchSession:
    user_id: str
    expires_at: Any = None


@dataclass
class MockJWTAuthResponse:
    session: MockStytchSession


@dataclass
class MockPasswordCreateResponse:
    user_id: str


@dataclass
class MockSearchResult:
    user_id: str


@dataclass
class MockSearchResponse:
    results: list = field(default_factory=list)


@pytest.fixture
def request_factory() -> RequestFactory:
    """
    Django request factory for unit testing views.

    Use this when you need to test view functions directly without going through
    the full HTTP stack.
    """
    return RequestFactory()


@pytest.fixture
def api_client() -> Client:
    """
    Django test client for full HTTP request/response cycle tests.

    Use this when you need to test the complete HTTP flow including middleware,
    routing, and response handling.

    Example:
        def test_api_returns_200(api_client):
            response = api_client.get("/api/v1/health")
            assert response.status_code == 200
    """
    return Client()


@pytest.fixture
def mock_stytch(monkeypatch: pytest.MonkeyPatch) -> MagicMock:
    """
    Replace the Stytch client everywhere it is fetched.

    passwords.create returns sequential user ids; users.search finds nobody;
    sessions.authenticate_jwt resolves to "user-test-jwt".
    """
    client = MagicMock()
    counter = {"n": 0}

    def _create(email: str, password: str, **kwargs: Any) -> MockPasswordCreateResponse:
        counter["n"] += 1
        return MockPasswordCreateResponse(user_id=f"user-test-created-{counter['n']}")

    client.passwords.create.side_effect = _create
    client.users.search.return_value = MockSearchResponse(results=[])
    client.sessions.authenticate_jwt.return_value = MockJWTAuthResponse(
        session=MockStytchSession(user_id="user-test-jwt")
    )
    client.passwords.authenticate.return_value = MagicMock(
        session_token="session-token-xyz", session_jwt="session-jwt-xyz"
    )

    monkeypatch.setattr("apps.accounts.identity.get_stytch_client", lambda: client)
    return client


@pytest.fixture
def mock_send_email(monkeypatch: pytest.MonkeyPatch) -> Callable[..., MagicMock]:
    """
    Factory fixture patching send_email where a workflow module imported it.

    Example:
        send = mock_send_email("apps.members.services")
        send.assert_called_once()
    """

    def _patch(module: str, return_value: Any = None) -> MagicMock:
        mock = MagicMock(return_value=return_value or {"id": "email-test-1"})
        monkeypatch.setattr(f"{module}.send_email", mock)
        return mock

    return _patch


@pytest.fixture
def platform_owner(db):
    """
    Create a user holding the platform-wide owner grant.

    Example:
        def test_owner_only_action(platform_owner):
            store = make_store(platform_owner)
            assert store.is_platform_owner
    """
    from tests.accounts.factories import PlatformOwnerGrantFactory

    return PlatformOwnerGrantFactory.create().user


@pytest.fixture
def org_admin(db):
    """
    Create a user holding an admin grant on one organization.

    Example:
        def test_admin_action(org_admin):
            org = org_admin.role_grants.get().organization
    """
    from tests.accounts.factories import RoleGrantFactory

    return RoleGrantFactory.create().user
