"""
Notification collaborator - outbound email through the Resend API.

All HTTP calls are isolated here for testability. Callers get the provider's
JSON response back, or a NotificationError.
"""

from typing import Any

import httpx
from django.conf import settings

from apps.core.exceptions import NotificationError
from apps.core.logging import get_logger
from apps.notifications.templates import render_email

logger = get_logger(__name__)

# Request timeout in seconds
SEND_TIMEOUT = 10


def send_email(email_type: str, to: str, **context: str) -> dict[str, Any]:
    """
    Render and send one email.

    Args:
        email_type: One of EmailType
        to: Recipient address
        **context: Template variables (shul_name, setup_url, ...)

    Returns:
        The provider response body, e.g. {"id": "..."}; empty when a 2xx
        reply carries no JSON

    Raises:
        NotificationError: If the provider is unconfigured, unreachable, or
            answers with a non-2xx status
    """
    if not settings.RESEND_API_KEY:
        raise NotificationError("RESEND_API_KEY is not configured")

    rendered = render_email(email_type, **context)
    payload = {
        "from": settings.EMAIL_FROM,
        "to": [to],
        "subject": rendered.subject,
        "html": rendered.html,
    }

    try:
        with httpx.Client(timeout=SEND_TIMEOUT) as client:
            response = client.post(
                settings.RESEND_API_URL,
                json=payload,
                headers={"Authorization": f"Bearer {settings.RESEND_API_KEY}"},
            )
    except httpx.HTTPError as e:
        logger.warning("email_send_transport_error", email_type=email_type, error=str(e))
        raise NotificationError(f"Failed to send email: {e}") from e

    if not response.is_success:
        logger.warning(
            "email_send_rejected",
            email_type=email_type,
            **{"http.status_code": response.status_code},
        )
        raise NotificationError(f"Failed to send email: {response.text[:500]}")

    logger.info("email_sent", email_type=email_type)
    try:
        return response.json()
    except ValueError:
        # Accepted but unparseable; the send itself succeeded.
        logger.warning("email_send_response_unparsed", email_type=email_type)
        return {}
