"""
Factories for billing app models.

Used in tests to create test data.
"""

import factory
from factory.django import DjangoModelFactory

from apps.billing.models import Campaign, CampaignProcessorLink, PaymentProcessor
from tests.accounts.factories import OrganizationFactory


class PaymentProcessorFactory(DjangoModelFactory):
    """Factory for PaymentProcessor model. Active, not default."""

    class Meta:
        model = PaymentProcessor

    organization = factory.SubFactory(OrganizationFactory)
    name = factory.Sequence(lambda n: f"Processor {n}")
    processor_type = PaymentProcessor.ProcessorType.STRIPE
    credentials = factory.LazyFunction(lambda: {"secret_key": "sk_test_xxx"})
    is_default = False
    is_active = True


class CampaignFactory(DjangoModelFactory):
    """Factory for Campaign model."""

    class Meta:
        model = Campaign

    organization = factory.SubFactory(OrganizationFactory)
    name = factory.Sequence(lambda n: f"Building Fund {n}")


class CampaignProcessorLinkFactory(DjangoModelFactory):
    """Factory for CampaignProcessorLink model."""

    class Meta:
        model = CampaignProcessorLink

    campaign = factory.SubFactory(CampaignFactory)
    processor = factory.SubFactory(
        PaymentProcessorFactory,
        organization=factory.SelfAttribute("..campaign.organization"),
    )
    is_primary = False
