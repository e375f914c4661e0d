"""
Tests for API-wide behaviour: health, CORS preflight, error shape.
"""

import pytest
from django.test import Client


@pytest.mark.django_db
class TestApi:
    """Cross-cutting API behaviour."""

    def test_health(self, api_client: Client) -> None:
        response = api_client.get("/api/v1/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    @pytest.mark.parametrize(
        "path",
        ["/api/v1/accounts/signup", "/api/v1/members/invite", "/api/v1/accounts/setup-owner"],
    )
    def test_cors_preflight(self, api_client: Client, path: str) -> None:
        """Preflight gets an empty body and permissive headers."""
        response = api_client.options(
            path,
            HTTP_ORIGIN="https://shul.example.com",
            HTTP_ACCESS_CONTROL_REQUEST_METHOD="POST",
            HTTP_ACCESS_CONTROL_REQUEST_HEADERS="authorization, content-type",
        )

        assert response.status_code == 200
        assert response.content == b""
        assert response["Access-Control-Allow-Origin"] == "*"
        allowed = response["Access-Control-Allow-Headers"]
        for header in ("authorization", "x-client-info", "apikey", "content-type"):
            assert header in allowed

    def test_cors_on_error_responses(self, api_client: Client) -> None:
        response = api_client.get("/api/v1/auth/me", HTTP_ORIGIN="https://shul.example.com")

        assert response.status_code == 401
        assert response["Access-Control-Allow-Origin"] == "*"
