"""
Tests for the Resend notification client and email templates.
"""

from unittest.mock import patch

import httpx
import pytest

from apps.core.exceptions import NotificationError
from apps.notifications.client import send_email
from apps.notifications.templates import EmailType, render_email

REQUEST = httpx.Request("POST", "https://api.resend.com/emails")


class TestSendEmail:
    """Tests for send_email."""

    def test_posts_rendered_email(self) -> None:
        """Payload carries sender, recipient, subject and HTML."""
        with patch.object(httpx.Client, "post") as mock_post:
            mock_post.return_value = httpx.Response(200, json={"id": "email-1"}, request=REQUEST)

            result = send_email(
                EmailType.MEMBER_INVITE,
                to="yossi@example.com",
                shul_name="Beth El",
                setup_url="https://shul.example.com/portal/setup?token=abc",
            )

        assert result == {"id": "email-1"}
        payload = mock_post.call_args.kwargs["json"]
        assert payload["to"] == ["yossi@example.com"]
        assert payload["subject"] == "You've been invited to Beth El"
        assert "https://shul.example.com/portal/setup?token=abc" in payload["html"]
        assert mock_post.call_args.kwargs["headers"]["Authorization"] == "Bearer re_test_key"

    def test_success_without_json_body(self) -> None:
        """A 2xx reply with a non-JSON body still counts as sent."""
        with patch.object(httpx.Client, "post") as mock_post:
            mock_post.return_value = httpx.Response(202, text="Accepted", request=REQUEST)

            result = send_email(EmailType.WELCOME_SHUL, to="a@example.com", shul_name="Beth El")

        assert result == {}

    def test_non_success_status_raises(self) -> None:
        with patch.object(httpx.Client, "post") as mock_post:
            mock_post.return_value = httpx.Response(422, text="invalid `to` field", request=REQUEST)

            with pytest.raises(NotificationError) as exc_info:
                send_email(EmailType.WELCOME_SHUL, to="bad", shul_name="Beth El")

        assert "invalid `to` field" in exc_info.value.message
        assert exc_info.value.status_code == 500

    def test_transport_error_raises(self) -> None:
        with patch.object(httpx.Client, "post") as mock_post:
            mock_post.side_effect = httpx.ConnectError("Connection refused")

            with pytest.raises(NotificationError):
                send_email(EmailType.WELCOME_SHUL, to="a@example.com", shul_name="Beth El")

    def test_missing_api_key(self, settings) -> None:
        settings.RESEND_API_KEY = ""

        with patch.object(httpx.Client, "post") as mock_post:
            with pytest.raises(NotificationError):
                send_email(EmailType.WELCOME_SHUL, to="a@example.com", shul_name="Beth El")

        mock_post.assert_not_called()


class TestTemplates:
    """Tests for render_email."""

    def test_values_are_escaped(self) -> None:
        """Organization names cannot inject markup."""
        rendered = render_email(EmailType.WELCOME_SHUL, shul_name="<script>x</script>")

        assert "<script>" not in rendered.html
        assert "&lt;script&gt;" in rendered.html

    def test_existing_member_template(self) -> None:
        rendered = render_email(
            EmailType.EXISTING_MEMBER_INVITE,
            shul_name="Beth El",
            setup_url="https://shul.example.com/portal/accept-invite?token=abc",
            admin_email="office@bethel.org",
        )

        assert "accept-invite" in rendered.html
        assert "office@bethel.org" in rendered.html

    def test_unknown_type(self) -> None:
        with pytest.raises(KeyError):
            render_email("newsletter", shul_name="Beth El")
