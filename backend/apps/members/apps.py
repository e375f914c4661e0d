"""Members app configuration."""

from django.apps import AppConfig


class MembersConfig(AppConfig):
    """Configuration for members app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.members"
