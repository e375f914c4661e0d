"""
Tests for the Stytch identity collaborator.
"""

from unittest.mock import MagicMock

import pytest
from stytch.core.response_base import StytchError, StytchErrorDetails

from apps.accounts.identity import (
    authenticate_session,
    create_identity,
    delete_identity,
    find_identity_by_email,
    revoke_session,
    start_session,
)
from apps.accounts.models import User
from apps.core.exceptions import DownstreamFailure, IdentityRejected
from tests.accounts.factories import UserFactory
from tests.conftest import MockSearchResponse, MockSearchResult


def stytch_error(error_type: str, message: str, status_code: int = 400) -> StytchError:
    return StytchError(
        StytchErrorDetails(
            status_code=status_code,
            request_id="test-request-id",
            error_type=error_type,
            error_message=message,
        )
    )


@pytest.mark.django_db
class TestCreateIdentity:
    """Tests for create_identity."""

    def test_creates_stytch_user_and_profile(self, mock_stytch: MagicMock) -> None:
        """The local profile mirrors the new Stytch user."""
        user = create_identity("new@example.com", "s3cret!", "Sarah", "Levi")

        assert user.stytch_user_id == "user-test-created-1"
        assert user.first_name == "Sarah"
        assert not user.has_usable_password()

    def test_stytch_rejection(self, mock_stytch: MagicMock) -> None:
        """Duplicate emails in Stytch surface Stytch's message as a 400."""
        mock_stytch.passwords.create.side_effect = stytch_error(
            "duplicate_email", "A user with this email already exists."
        )

        with pytest.raises(IdentityRejected) as exc_info:
            create_identity("taken@example.com", "s3cret!")

        assert exc_info.value.message == "A user with this email already exists."
        assert not User.objects.filter(email="taken@example.com").exists()

    def test_local_duplicate_undoes_stytch_user(self, mock_stytch: MagicMock) -> None:
        """A clashing local profile deletes the Stytch user just created."""
        UserFactory.create(email="taken@example.com")

        with pytest.raises(IdentityRejected):
            create_identity("taken@example.com", "s3cret!")

        mock_stytch.users.delete.assert_called_once_with(user_id="user-test-created-1")


@pytest.mark.django_db
class TestDeleteIdentity:
    """Tests for delete_identity."""

    def test_deletes_profile_and_stytch_user(self, mock_stytch: MagicMock) -> None:
        user = UserFactory.create(stytch_user_id="user-test-9")

        delete_identity(user)

        assert not User.objects.filter(stytch_user_id="user-test-9").exists()
        mock_stytch.users.delete.assert_called_once_with(user_id="user-test-9")

    def test_stytch_failure_raises_after_local_delete(self, mock_stytch: MagicMock) -> None:
        """The local row is gone even when Stytch refuses the delete."""
        user = UserFactory.create(stytch_user_id="user-test-9")
        mock_stytch.users.delete.side_effect = stytch_error("internal", "try again", 500)

        with pytest.raises(DownstreamFailure):
            delete_identity(user)

        assert not User.objects.filter(stytch_user_id="user-test-9").exists()


class TestFindIdentityByEmail:
    """Tests for find_identity_by_email."""

    def test_searches_by_email(self, mock_stytch: MagicMock) -> None:
        """A direct, filtered search is issued, not a listing."""
        mock_stytch.users.search.return_value = MockSearchResponse(
            results=[MockSearchResult(user_id="user-test-5")]
        )

        assert find_identity_by_email("Member@Example.com") == "user-test-5"

        query = mock_stytch.users.search.call_args.kwargs["query"]
        assert query["operands"][0]["filter_value"] == ["member@example.com"]
        assert mock_stytch.users.search.call_args.kwargs["limit"] == 1

    def test_no_match(self, mock_stytch: MagicMock) -> None:
        assert find_identity_by_email("nobody@example.com") is None

    def test_search_failure(self, mock_stytch: MagicMock) -> None:
        mock_stytch.users.search.side_effect = stytch_error("internal", "unavailable", 503)

        with pytest.raises(DownstreamFailure):
            find_identity_by_email("member@example.com")


@pytest.mark.django_db
class TestSessions:
    """Tests for session helpers."""

    def test_authenticate_session_links_profile(self, mock_stytch: MagicMock) -> None:
        """The principal carries the local profile when one exists."""
        user = UserFactory.create(stytch_user_id="user-test-jwt")

        principal = authenticate_session("jwt")

        assert principal.user_id == "user-test-jwt"
        assert principal.user == user
        assert principal.email == user.email

    def test_authenticate_session_rejected(self, mock_stytch: MagicMock) -> None:
        mock_stytch.sessions.authenticate_jwt.side_effect = stytch_error(
            "invalid_jwt", "JWT is invalid", 401
        )

        with pytest.raises(DownstreamFailure):
            authenticate_session("bad")

    def test_revoke_session_ignores_invalid_sessions(self, mock_stytch: MagicMock) -> None:
        """Revoking an already dead session is not an error."""
        mock_stytch.sessions.revoke.side_effect = stytch_error("session_not_found", "gone", 404)

        revoke_session("jwt")

    def test_start_session(self, mock_stytch: MagicMock) -> None:
        tokens = start_session("member@example.com", "s3cret!")

        assert tokens.session_jwt == "session-jwt-xyz"
