"""
Billing services - payment processor routing.

Resolves which configured processor handles a payment for an organization,
optionally within a campaign. Read-only: nothing here writes.
"""

from dataclasses import dataclass, field
from typing import Any

from apps.billing.models import CampaignProcessorLink, PaymentProcessor
from apps.core.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ProcessorInfo:
    """The processor a payment should be routed to."""

    id: int
    name: str
    processor_type: str
    credentials: dict[str, Any] = field(default_factory=dict, hash=False, compare=False)
    is_default: bool = False

    @classmethod
    def from_model(cls, processor: PaymentProcessor) -> "ProcessorInfo":
        return cls(
            id=processor.id,
            name=processor.name,
            processor_type=processor.processor_type,
            credentials=dict(processor.credentials or {}),
            is_default=processor.is_default,
        )


def resolve_processor(campaign_id: int | None, organization_id: int) -> ProcessorInfo | None:
    """
    Pick the processor for a payment. First match wins:

    1. the campaign's primary processor link
    2. any processor link of the campaign, oldest first
    3. the organization's active default processor
    4. any active processor of the organization, oldest first

    Campaign links only count when the linked processor belongs to the
    organization. Campaign tiers do not filter on is_active; a campaign link is
    an explicit override.

    Returns:
        ProcessorInfo, or None when the organization has nothing usable.
    """
    if campaign_id is not None:
        links = (
            CampaignProcessorLink.objects.filter(
                campaign_id=campaign_id,
                processor__organization_id=organization_id,
            )
            .select_related("processor")
            .order_by("created_at", "id")
        )

        primary = links.filter(is_primary=True).first()
        if primary is not None:
            logger.debug("processor_resolved", tier="campaign_primary", campaign_id=campaign_id)
            return ProcessorInfo.from_model(primary.processor)

        any_link = links.first()
        if any_link is not None:
            logger.debug("processor_resolved", tier="campaign_any", campaign_id=campaign_id)
            return ProcessorInfo.from_model(any_link.processor)

    active = PaymentProcessor.objects.filter(
        organization_id=organization_id,
        is_active=True,
    ).order_by("created_at", "id")

    default = active.filter(is_default=True).first()
    if default is not None:
        logger.debug("processor_resolved", tier="org_default", organization_id=organization_id)
        return ProcessorInfo.from_model(default)

    fallback = active.first()
    if fallback is not None:
        logger.debug("processor_resolved", tier="org_active", organization_id=organization_id)
        return ProcessorInfo.from_model(fallback)

    logger.info(
        "processor_unresolved",
        campaign_id=campaign_id,
        organization_id=organization_id,
    )
    return None


def list_processor_ids_for_campaign(campaign_id: int) -> list[int]:
    """All processor ids linked to a campaign. Empty for unknown campaigns."""
    return list(
        CampaignProcessorLink.objects.filter(campaign_id=campaign_id).values_list(
            "processor_id", flat=True
        )
    )
