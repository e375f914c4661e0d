"""
Factories for members app models.
"""

from decimal import Decimal

import factory
from factory.django import DjangoModelFactory

from apps.members.models import Member
from tests.accounts.factories import OrganizationFactory


class MemberFactory(DjangoModelFactory):
    """Factory for Member model. No linked user and no invite token by default."""

    class Meta:
        model = Member

    organization = factory.SubFactory(OrganizationFactory)
    email = factory.Sequence(lambda n: f"member{n}@example.com")
    first_name = factory.Faker("first_name")
    last_name = factory.Faker("last_name")
    is_active = True
    balance = Decimal("0")
