"""
Members models - congregant records and portal invitations.
"""

from decimal import Decimal

from django.conf import settings
from django.db import models

from apps.core.models import TenantScopedModel


class Member(TenantScopedModel):
    """
    A congregant of one organization.

    Exists independently of any login. Claiming an invite links the record to
    a User and clears its invite token.
    """

    email = models.EmailField(blank=True)
    first_name = models.CharField(max_length=150)
    last_name = models.CharField(max_length=150, blank=True)
    phone = models.CharField(max_length=50, blank=True)
    is_active = models.BooleanField(default=True)
    balance = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0"))

    # Portal access
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="member_records",
    )
    invite_token = models.CharField(
        max_length=128,
        unique=True,
        null=True,
        blank=True,
        help_text="Single-use portal invite credential; issued once, cleared on claim",
    )
    password_set_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["last_name", "first_name"]

    def __str__(self) -> str:
        return f"{self.full_name} @ {self.organization_id}"

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
