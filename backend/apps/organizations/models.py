"""
Organizations models - multi-tenancy foundation.
"""

from django.db import models

from apps.core.models import TimestampedModel


class Organization(TimestampedModel):
    """
    A shul account. Every tenant-owned row points at one of these.

    Created once per provisioning run; removed by the provisioning flows only
    when undoing a failed creation.
    """

    name = models.CharField(max_length=255)
    slug = models.SlugField(
        max_length=64,
        unique=True,
        help_text="URL-safe identifier, e.g. 'beth-israel-lz3k9q1a'",
    )

    # Contact
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=50, blank=True)
    address = models.TextField(blank=True)
    logo_url = models.URLField(blank=True)

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class OrganizationSettings(TimestampedModel):
    """
    Per-organization payment configuration.

    Created right after the organization in the same provisioning run.
    """

    organization = models.OneToOneField(
        Organization,
        on_delete=models.CASCADE,
        related_name="settings",
    )
    active_processor = models.CharField(
        max_length=50,
        blank=True,
        help_text="Processor kind used when no processor row applies, e.g. 'stripe'",
    )

    # Stripe
    stripe_account_id = models.CharField(max_length=255, blank=True)
    stripe_publishable_key = models.CharField(max_length=255, blank=True)

    # Cardknox
    cardknox_ifields_key = models.CharField(max_length=255, blank=True)
    cardknox_transaction_key = models.CharField(max_length=255, blank=True)

    class Meta:
        verbose_name_plural = "organization settings"

    def __str__(self) -> str:
        return f"Settings for {self.organization.name}"
