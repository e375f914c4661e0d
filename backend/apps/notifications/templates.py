"""
Email templates for provisioning notifications.

Each template renders a subject and an HTML body from keyword context.
Values are escaped with format_html.
"""

from dataclasses import dataclass

from django.utils import timezone
from django.utils.html import format_html


class EmailType:
    """Template identifiers, also returned to API callers as the invite type."""

    WELCOME_SHUL = "welcome_shul"
    MEMBER_INVITE = "member_invite"
    EXISTING_MEMBER_INVITE = "existing_member_invite"


@dataclass
class RenderedEmail:
    subject: str
    html: str


def _welcome_shul(
    shul_name: str, portal_url: str = "", public_page_url: str = "", **_: str
) -> RenderedEmail:
    html = format_html(
        "<h1>Welcome to ShulGenius!</h1>"
        "<p>Mazal Tov! Your shul <strong>{}</strong> has been successfully created.</p>"
        '<p><a href="{}">Go to Your Dashboard</a></p>'
        '<p>Your public page: <a href="{}">{}</a></p>'
        "<p>B'hatzlacha,<br>The ShulGenius Team</p>"
        "<p>&copy; {} ShulGenius.</p>",
        shul_name,
        portal_url,
        public_page_url,
        public_page_url,
        timezone.now().year,
    )
    return RenderedEmail(subject=f"Welcome to ShulGenius - {shul_name} is Ready!", html=html)


def _member_invite(
    shul_name: str,
    setup_url: str,
    member_name: str = "",
    admin_email: str = "",
    **_: str,
) -> RenderedEmail:
    html = format_html(
        "<h1>{}</h1>"
        "<p>Shalom {},</p>"
        "<p>You've been invited to join <strong>{}</strong> as a member!</p>"
        '<p><a href="{}">Set Up Your Account</a></p>'
        "<p>If you have any questions, please contact {}.</p>"
        "<p>B'vracha,<br>{}</p>",
        shul_name,
        member_name,
        shul_name,
        setup_url,
        admin_email or "the shul administration",
        shul_name,
    )
    return RenderedEmail(subject=f"You've been invited to {shul_name}", html=html)


def _existing_member_invite(
    shul_name: str,
    setup_url: str,
    member_name: str = "",
    admin_email: str = "",
    **_: str,
) -> RenderedEmail:
    html = format_html(
        "<h1>{}</h1>"
        "<p>Shalom {},</p>"
        "<p><strong>{}</strong> has added you to its member portal. "
        "Sign in with your existing account to accept.</p>"
        '<p><a href="{}">Accept Invitation</a></p>'
        "<p>If you have any questions, please contact {}.</p>"
        "<p>B'vracha,<br>{}</p>",
        shul_name,
        member_name,
        shul_name,
        setup_url,
        admin_email or "the shul administration",
        shul_name,
    )
    return RenderedEmail(subject=f"{shul_name} added you to its member portal", html=html)


TEMPLATES = {
    EmailType.WELCOME_SHUL: _welcome_shul,
    EmailType.MEMBER_INVITE: _member_invite,
    EmailType.EXISTING_MEMBER_INVITE: _existing_member_invite,
}


def render_email(email_type: str, **context: str) -> RenderedEmail:
    """
    Render a template by type.

    Raises:
        KeyError: If the type is unknown
    """
    return TEMPLATES[email_type](**context)
