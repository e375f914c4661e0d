"""
Billing models - payment processors and campaign routing.
"""

from django.db import models

from apps.core.models import TenantScopedModel, TimestampedModel


class PaymentProcessor(TenantScopedModel):
    """
    A payment backend configured for an organization.

    Credentials are opaque to this app; the charging flow interprets them
    according to processor_type.
    """

    class ProcessorType(models.TextChoices):
        STRIPE = "stripe", "Stripe"
        CARDKNOX = "cardknox", "Cardknox"

    name = models.CharField(max_length=255)
    processor_type = models.CharField(max_length=50, choices=ProcessorType.choices)
    credentials = models.JSONField(default=dict, blank=True)
    is_default = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True, db_index=True)

    class Meta:
        ordering = ["created_at", "id"]
        constraints = [
            models.UniqueConstraint(
                fields=["organization"],
                condition=models.Q(is_default=True),
                name="one_default_processor_per_org",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.processor_type})"


class Campaign(TenantScopedModel):
    """Fundraising campaign. May route donations to dedicated processors."""

    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    goal_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    is_active = models.BooleanField(default=True)

    processors = models.ManyToManyField(
        PaymentProcessor,
        through="CampaignProcessorLink",
        related_name="campaigns",
    )

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return self.name


class CampaignProcessorLink(TimestampedModel):
    """Links a campaign to a processor. At most one link per campaign is primary."""

    campaign = models.ForeignKey(
        Campaign,
        on_delete=models.CASCADE,
        related_name="processor_links",
    )
    processor = models.ForeignKey(
        PaymentProcessor,
        on_delete=models.CASCADE,
        related_name="campaign_links",
    )
    is_primary = models.BooleanField(default=False)

    class Meta:
        ordering = ["created_at", "id"]
        constraints = [
            models.UniqueConstraint(
                fields=["campaign", "processor"],
                name="unique_campaign_processor",
            ),
            models.UniqueConstraint(
                fields=["campaign"],
                condition=models.Q(is_primary=True),
                name="one_primary_processor_per_campaign",
            ),
        ]

    def __str__(self) -> str:
        marker = " (primary)" if self.is_primary else ""
        return f"{self.campaign_id} -> {self.processor_id}{marker}"
