"""
Tests for structured logging configuration.
"""

import structlog
from structlog.contextvars import get_contextvars

from apps.core.logging import (
    REDACTED,
    _redact_secrets,
    _rename_tenant_fields,
    bind_contextvars,
    clear_contextvars,
    configure_logging,
    get_logger,
)


class TestConfigureLogging:
    """Tests for configure_logging function."""

    def test_configure_logging_installs_tenant_processor(self):
        """The organization field renamer runs in every configuration."""
        configure_logging(json_format=True, log_level="INFO")

        processors = structlog.get_config()["processors"]
        assert _rename_tenant_fields in processors

    def test_configure_logging_console_format(self):
        """Console output is accepted for local development."""
        configure_logging(json_format=False, log_level="DEBUG")

        assert structlog.get_config()["wrapper_class"] is structlog.stdlib.BoundLogger

    def test_get_logger_returns_logger(self):
        """get_logger works with and without a name."""
        assert get_logger("apps.members.services") is not None
        assert get_logger(None) is not None


class TestProcessors:
    """Tests for the log field processors."""

    def test_organization_id_renamed(self):
        """organization_id becomes the dotted organization.id string."""
        event = _rename_tenant_fields(None, "info", {"event": "x", "organization_id": 42})

        assert event == {"event": "x", "organization.id": "42"}

    def test_events_without_organization_untouched(self):
        """Events without organization_id pass through unchanged."""
        event = _rename_tenant_fields(None, "info", {"event": "x", "member_id": 3})

        assert event == {"event": "x", "member_id": 3}

    def test_credentials_are_masked(self):
        """Password and token fields never reach the sink."""
        event = _redact_secrets(
            None,
            "info",
            {"event": "x", "password": "hunter22", "invite_token": "abc", "member_id": 3},
        )

        assert event == {"event": "x", "password": REDACTED, "invite_token": REDACTED, "member_id": 3}

    def test_empty_credentials_left_alone(self):
        """Blank values stay blank so missing input is still visible."""
        event = _redact_secrets(None, "info", {"token": ""})

        assert event == {"token": ""}

    def test_configure_logging_installs_redaction(self):
        """Redaction runs before the tenant renamer."""
        configure_logging(json_format=True, log_level="INFO")

        processors = structlog.get_config()["processors"]
        assert processors.index(_redact_secrets) < processors.index(_rename_tenant_fields)


class TestContextVars:
    """Tests for context variable binding."""

    def setup_method(self):
        clear_contextvars()

    def teardown_method(self):
        clear_contextvars()

    def test_bind_dotted_user_key(self):
        """The middleware binds usr.id with dict unpacking."""
        bind_contextvars(**{"usr.id": "user-test-1"})

        assert get_contextvars()["usr.id"] == "user-test-1"

    def test_clear_removes_context(self):
        """clear_contextvars leaves nothing behind for the next request."""
        bind_contextvars(**{"usr.id": "user-test-1"})
        clear_contextvars()

        assert get_contextvars() == {}
